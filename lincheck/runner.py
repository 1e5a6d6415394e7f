"""Randomised linearizability testing of concurrent implementations."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Union

from .execution import Execution
from .scenario import DEFAULT_ATTEMPTS, Scenario, check_scenario
from .spec import ConcurrentSpec

OpSource = Union[Callable[[random.Random], Any], Iterable[Any]]

DEFAULT_CASES = 256


class NonLinearizableError(AssertionError):
    """Raised when a concurrent implementation produced a non-linearizable execution."""

    def __init__(self, execution: Execution) -> None:
        super().__init__(f"Non-linearizable execution: \n\n {execution}")
        self.execution = execution


class InternalPanicError(RuntimeError):
    """Raised when an operation or a specification failed with an exception."""


def _op_drawer(ops: OpSource) -> Callable[[random.Random], Any]:
    if callable(ops) and not isinstance(ops, type):
        return ops
    choices = list(ops)
    if not choices:
        raise ValueError("no operations to choose from")
    return lambda rng: rng.choice(choices)


def _without(items: list, index: int) -> list:
    return items[:index] + items[index + 1 :]


def _shrink_candidates(scenario: Scenario) -> Iterator[Scenario]:
    parallel = scenario.parallel_part
    if len(parallel) > 1:
        for thread_index, _ in enumerate(parallel):
            yield Scenario(
                list(scenario.init_part),
                _without(parallel, thread_index),
                list(scenario.post_part),
            )
    for index, _ in enumerate(scenario.init_part):
        yield Scenario(
            _without(scenario.init_part, index),
            [list(ops) for ops in parallel],
            list(scenario.post_part),
        )
    for thread_index, ops in enumerate(parallel):
        for index, _ in enumerate(ops):
            threads = [list(other) for other in parallel]
            threads[thread_index] = _without(ops, index)
            yield Scenario(list(scenario.init_part), threads, list(scenario.post_part))
    for index, _ in enumerate(scenario.post_part):
        yield Scenario(
            list(scenario.init_part),
            [list(ops) for ops in parallel],
            _without(scenario.post_part, index),
        )


@dataclass
class Lincheck:
    """Configuration of a linearizability test run.

    ``num_threads`` bounds the threads of the parallel part, ``num_ops`` the
    operations of each part and thread. ``cases`` scenarios are generated and
    each is run ``attempts`` times to explore different interleavings.
    """

    num_threads: int = 2
    num_ops: int = 5
    cases: int = DEFAULT_CASES
    attempts: int = DEFAULT_ATTEMPTS
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.num_threads < 1:
            raise ValueError("num_threads must be at least 1")
        if self.num_ops < 0:
            raise ValueError("num_ops must not be negative")
        if self.cases < 1:
            raise ValueError("cases must be at least 1")
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")

    def generate_scenario(
        self, ops: OpSource, rng: random.Random | None = None
    ) -> Scenario:
        """Generate a random scenario within the configured bounds.

        ``ops`` is either a collection of operations to pick from or a callable
        that draws one operation from the given random generator.
        """
        rng = rng if rng is not None else random.Random()
        draw = _op_drawer(ops)

        def part() -> list:
            return [draw(rng) for _ in range(rng.randint(0, self.num_ops))]

        init_part = part()
        parallel_part = [part() for _ in range(rng.randint(1, self.num_threads))]
        post_part = part()
        return Scenario(init_part, parallel_part, post_part)

    def _failing_execution(
        self, conc: type[ConcurrentSpec], scenario: Scenario
    ) -> Execution | None:
        try:
            return check_scenario(conc, scenario, self.attempts)
        except Exception as error:
            raise InternalPanicError("Internal panic") from error

    def _shrink(
        self, conc: type[ConcurrentSpec], scenario: Scenario, execution: Execution
    ) -> Execution:
        improved = True
        while improved:
            improved = False
            for candidate in _shrink_candidates(scenario):
                try:
                    failing = check_scenario(conc, candidate, self.attempts)
                except Exception:
                    continue
                if failing is not None:
                    scenario, execution = candidate, failing
                    improved = True
                    break
        return execution

    def verify(self, conc: type[ConcurrentSpec], ops: OpSource) -> Execution | None:
        """Test ``conc`` against its sequential specification on random scenarios.

        Returns a minimised non-linearizable execution, or ``None`` if every
        scenario behaved linearizably. Raises :class:`InternalPanicError` if an
        operation raised an exception.
        """
        rng = random.Random(self.seed)
        draw = _op_drawer(ops)
        for _ in range(self.cases):
            scenario = self.generate_scenario(draw, rng)
            execution = self._failing_execution(conc, scenario)
            if execution is not None:
                return self._shrink(conc, scenario, execution)
        return None

    def verify_or_raise(self, conc: type[ConcurrentSpec], ops: OpSource) -> None:
        """Like :meth:`verify`, but raise :class:`NonLinearizableError` on failure."""
        execution = self.verify(conc, ops)
        if execution is not None:
            raise NonLinearizableError(execution)