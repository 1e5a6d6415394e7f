"""Scenarios and how to execute and check them."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from functools import partial
from typing import Generic, TypeVar

from .checker import is_linearizable
from .execution import Execution
from .recorder import PerThreadRecorder, record_init_part
from .spec import ConcurrentSpec

OpT = TypeVar("OpT")

DEFAULT_ATTEMPTS = 100


@dataclass
class Scenario(Generic[OpT]):
    """Which operations to run, and in which order.

    ``init_part`` runs sequentially first, each list in ``parallel_part`` runs
    in its own thread, and ``post_part`` runs sequentially after all threads
    have finished.
    """

    init_part: list[OpT] = field(default_factory=list)
    parallel_part: list[list[OpT]] = field(default_factory=list)
    post_part: list[OpT] = field(default_factory=list)


def execute_scenario(conc: type[ConcurrentSpec], scenario: Scenario) -> Execution:
    """Run ``scenario`` on a fresh instance of ``conc`` and return the recorded execution.

    An exception raised by an operation in any thread is raised again here
    once all threads have finished.
    """
    instance = conc()

    recorder = record_init_part()
    for op in scenario.init_part:
        recorder.record(op, partial(instance.exec, op))

    parallel = recorder.record_parallel_part()
    thread_recorders = [parallel.record_thread() for _ in scenario.parallel_part]
    start = threading.Barrier(max(len(thread_recorders), 1))
    errors: list[BaseException] = []

    def run(thread_recorder: PerThreadRecorder, ops: list) -> None:
        try:
            with thread_recorder:
                start.wait()
                for op in ops:
                    thread_recorder.record(op, partial(instance.exec, op))
        except BaseException as error:  # re-raised in the calling thread
            errors.append(error)

    threads = [
        threading.Thread(target=run, args=(thread_recorder, ops))
        for thread_recorder, ops in zip(thread_recorders, scenario.parallel_part)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    if errors:
        raise errors[0]

    post = parallel.record_post_part()
    for op in scenario.post_part:
        post.record(op, partial(instance.exec, op))
    return post.finish()


def check_scenario(
    conc: type[ConcurrentSpec],
    scenario: Scenario,
    attempts: int = DEFAULT_ATTEMPTS,
) -> Execution | None:
    """Run ``scenario`` up to ``attempts`` times and check each execution.

    Returns the first execution that is not linearizable with respect to
    ``conc.sequential``, or ``None`` if every run was linearizable.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    for _ in range(attempts):
        execution = execute_scenario(conc, scenario)
        if not is_linearizable(conc.sequential, execution):
            return execution
    return None