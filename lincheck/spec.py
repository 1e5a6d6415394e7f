"""Sequential and concurrent specifications of a data structure."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class SequentialSpec(ABC):
    """The sequential implementation of a data structure.

    Subclasses must be constructible with no arguments: the checker builds
    fresh instances whenever it replays a history.
    """

    @abstractmethod
    def exec(self, op: Any) -> Any:
        """Execute an operation and return its result."""


class ConcurrentSpec(ABC):
    """The concurrent implementation of a data structure.

    Subclasses name the sequential specification they must behave like in the
    ``sequential`` class attribute and must be constructible with no arguments.
    An instance is shared between threads, so ``exec`` must be thread-safe.
    """

    sequential: ClassVar[type[SequentialSpec]]

    @abstractmethod
    def exec(self, op: Any) -> Any:
        """Execute an operation and return its result."""