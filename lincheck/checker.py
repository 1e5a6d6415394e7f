"""Linearizability checking of recorded executions."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from .execution import Execution
from .spec import SequentialSpec

OpT = TypeVar("OpT")
RetT = TypeVar("RetT")


class LinearizabilityChecker(Generic[OpT, RetT]):
    """Decides whether an execution is linearizable against a sequential spec.

    Every linearization of the parallel part is a topological ordering of its
    happens-before graph, so the checker builds that graph and searches all
    orderings with backtracking. The sequential specification is replayed
    from scratch only when the search has to backtrack.
    """

    def __init__(
        self,
        spec: Callable[[], SequentialSpec],
        execution: Execution[OpT, RetT],
    ) -> None:
        self.spec = spec
        self.execution = execution
        self._successors: list[list[int]] = []
        self._in_degree: list[int] = []
        self._minimal: set[int] = set()
        self._linearized: list[int] = []
        self._state: SequentialSpec = spec()

    def check(self) -> bool:
        """Return whether the execution is linearizable."""
        parallel = self.execution.parallel_part
        self._successors = [
            [
                later_id
                for later_id, later in enumerate(parallel)
                if earlier.return_timestamp < later.call_timestamp
            ]
            for earlier in parallel
        ]
        self._in_degree = [0] * len(parallel)
        for successors in self._successors:
            for inv_id in successors:
                self._in_degree[inv_id] += 1
        self._minimal = {
            inv_id for inv_id, degree in enumerate(self._in_degree) if degree == 0
        }
        self._linearized = []
        self._state = self.spec()
        return self._check_init_part()

    def _check_init_part(self) -> bool:
        return (
            all(self._state.exec(inv.op) == inv.ret for inv in self.execution.init_part)
            and self._check_parallel_part()
        )

    def _check_parallel_part(self) -> bool:
        if not self._minimal:
            return self._check_post_part()

        parallel = self.execution.parallel_part
        for inv_id in sorted(self._minimal):
            self._call(inv_id)
            inv = parallel[inv_id]
            if self._state.exec(inv.op) == inv.ret and self._check_parallel_part():
                return True
            self._undo(inv_id)
            self._rebuild_state()
        return False

    def _check_post_part(self) -> bool:
        return all(
            self._state.exec(inv.op) == inv.ret for inv in self.execution.post_part
        )

    def _call(self, inv_id: int) -> None:
        self._linearized.append(inv_id)
        self._minimal.discard(inv_id)
        for next_id in self._successors[inv_id]:
            self._in_degree[next_id] -= 1
            if self._in_degree[next_id] == 0:
                self._minimal.add(next_id)

    def _undo(self, inv_id: int) -> None:
        for next_id in self._successors[inv_id]:
            if self._in_degree[next_id] == 0:
                self._minimal.discard(next_id)
            self._in_degree[next_id] += 1
        self._minimal.add(inv_id)
        self._linearized.pop()

    def _rebuild_state(self) -> None:
        self._state = self.spec()
        for inv in self.execution.init_part:
            self._state.exec(inv.op)
        parallel = self.execution.parallel_part
        for inv_id in self._linearized:
            self._state.exec(parallel[inv_id].op)


def is_linearizable(
    spec: Callable[[], SequentialSpec], execution: Execution[OpT, RetT]
) -> bool:
    """Check ``execution`` for linearizability against the sequential ``spec``."""
    return LinearizabilityChecker(spec, execution).check()