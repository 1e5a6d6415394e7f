import pytest

from lincheck.spec import ConcurrentSpec, SequentialSpec


def test_sequential_spec_is_abstract():
    with pytest.raises(TypeError):
        SequentialSpec()


def test_concurrent_spec_is_abstract():
    with pytest.raises(TypeError):
        ConcurrentSpec()