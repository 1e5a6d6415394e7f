import pytest

from lincheck.checker import LinearizabilityChecker, is_linearizable
from lincheck.execution import Execution, History, Invocation, ParallelHistory
from lincheck.recorder import InternalRecorder, record_init_part
from lincheck.spec import SequentialSpec

POP = ("pop",)
PUSHED = ("push",)


def push(value):
    return ("push", value)


def popped(value):
    return ("pop", value)


class SequentialStack(SequentialSpec):
    def __init__(self):
        self.stack = []

    def exec(self, op):
        if op[0] == "push":
            self.stack.append(op[1])
            return PUSHED
        return popped(self.stack.pop() if self.stack else None)


def _init_part(*values):
    recorder = record_init_part()
    for value in values:
        recorder.record(push(value), lambda: PUSHED)
    return recorder.finish().init_part


def test_init_and_post_parts_are_sequential():
    recorder = record_init_part()
    recorder.record(push(1), lambda: PUSHED)
    recorder.record(push(2), lambda: PUSHED)

    recorder = recorder.record_post_part()
    recorder.record(POP, lambda: popped(2))
    recorder.record(POP, lambda: popped(1))

    execution = recorder.finish()

    assert LinearizabilityChecker(SequentialStack, execution).check() is True


def test_parallel_part_overlapping():
    recorder_a = InternalRecorder(0)
    recorder_b = InternalRecorder(1)
    recorder_a.add_call(POP, 4)
    recorder_b.add_call(POP, 5)
    recorder_a.add_return(popped(2), 6)
    recorder_b.add_return(popped(1), 7)

    execution = Execution(
        init_part=_init_part(1, 2),
        parallel_part=ParallelHistory(recorder_a.history() + recorder_b.history()),
        post_part=History(),
    )

    assert LinearizabilityChecker(SequentialStack, execution).check() is True


def test_parallel_part_overlapping_in_reverse_order():
    recorder_a = InternalRecorder(0)
    recorder_b = InternalRecorder(1)
    recorder_a.add_call(POP, 4)
    recorder_b.add_call(POP, 5)
    recorder_a.add_return(popped(1), 6)
    recorder_b.add_return(popped(2), 7)

    execution = Execution(
        init_part=_init_part(1, 2),
        parallel_part=ParallelHistory(recorder_a.history() + recorder_b.history()),
    )

    assert is_linearizable(SequentialStack, execution) is True


def test_parallel_part_does_not_violate_happens_before():
    recorder_a = InternalRecorder(0)
    recorder_b = InternalRecorder(1)
    recorder_a.add_call(POP, 4)
    recorder_b.add_call(POP, 5)
    recorder_a.add_return(popped(1), 6)

    recorder_a.add_call(push(1), 7)
    recorder_b.add_return(popped(None), 8)
    recorder_a.add_return(PUSHED, 9)

    execution = Execution(
        init_part=History(),
        parallel_part=ParallelHistory(recorder_a.history() + recorder_b.history()),
        post_part=History(),
    )

    assert LinearizabilityChecker(SequentialStack, execution).check() is False


def test_sequential_parallel_invocations_must_respect_order():
    recorder_a = InternalRecorder(0)
    recorder_b = InternalRecorder(1)
    recorder_a.add_call(POP, 0)
    recorder_a.add_return(popped(1), 1)
    recorder_b.add_call(POP, 2)
    recorder_b.add_return(popped(2), 3)

    execution = Execution(
        init_part=_init_part(1, 2),
        parallel_part=ParallelHistory(recorder_a.history() + recorder_b.history()),
    )

    assert is_linearizable(SequentialStack, execution) is False


def test_empty_execution_is_linearizable():
    assert is_linearizable(SequentialStack, Execution()) is True


def test_wrong_init_part_is_rejected():
    execution = Execution(init_part=History([Invocation(POP, popped(5))]))
    assert is_linearizable(SequentialStack, execution) is False


def test_wrong_post_part_is_rejected():
    execution = Execution(
        init_part=_init_part(3),
        post_part=History([Invocation(POP, popped(4))]),
    )
    assert is_linearizable(SequentialStack, execution) is False


def test_post_part_sees_parallel_effects():
    recorder_a = InternalRecorder(0)
    recorder_a.add_call(push(7), 0)
    recorder_a.add_return(PUSHED, 1)
    execution = Execution(
        parallel_part=recorder_a.history(),
        post_part=History([Invocation(POP, popped(7))]),
    )
    assert is_linearizable(SequentialStack, execution) is True


def test_check_can_be_repeated():
    recorder_a = InternalRecorder(0)
    recorder_b = InternalRecorder(1)
    recorder_a.add_call(POP, 0)
    recorder_b.add_call(push(9), 1)
    recorder_a.add_return(popped(9), 2)
    recorder_b.add_return(PUSHED, 3)
    execution = Execution(
        parallel_part=ParallelHistory(recorder_a.history() + recorder_b.history())
    )
    checker = LinearizabilityChecker(SequentialStack, execution)
    assert checker.check() is True
    assert checker.check() is True


@pytest.mark.parametrize("ret, expected", [(popped(9), True), (popped(8), False)])
def test_backtracking_finds_the_only_valid_order(ret, expected):
    recorder_a = InternalRecorder(0)
    recorder_b = InternalRecorder(1)
    recorder_c = InternalRecorder(2)
    recorder_a.add_call(POP, 0)
    recorder_b.add_call(push(8), 1)
    recorder_c.add_call(push(9), 2)
    recorder_a.add_return(ret, 3)
    recorder_b.add_return(PUSHED, 4)
    recorder_c.add_return(PUSHED, 5)
    execution = Execution(
        init_part=History(),
        parallel_part=ParallelHistory(
            recorder_a.history() + recorder_b.history() + recorder_c.history()
        ),
        post_part=History([Invocation(POP, popped(8))]),
    )
    assert is_linearizable(SequentialStack, execution) is expected