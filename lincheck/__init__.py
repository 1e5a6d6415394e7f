"""A linearizability checker for concurrent data structures.

Sequential and concurrent specifications live in ``lincheck.spec``, traces in
``lincheck.execution``, recording in ``lincheck.recorder``, checking in
``lincheck.checker``, scenarios in ``lincheck.scenario``, randomised testing
in ``lincheck.runner`` and trace rendering in ``lincheck.formatting``.
"""

__version__ = "0.2.1"