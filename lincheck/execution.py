"""Execution traces of concurrent programs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

from .formatting import format_execution, format_history, format_parallel_history

OpT = TypeVar("OpT")
RetT = TypeVar("RetT")


@dataclass(frozen=True)
class Invocation(Generic[OpT, RetT]):
    """A completed operation in a sequential part of an execution."""

    op: OpT
    ret: RetT

    def __str__(self) -> str:
        return f"{self.op!r} : {self.ret!r}"


@dataclass(frozen=True)
class ParallelInvocation(Generic[OpT, RetT]):
    """A completed operation in the parallel part, with its thread and timestamps."""

    thread_id: int
    call_timestamp: int
    return_timestamp: int
    op: OpT
    ret: RetT

    def __str__(self) -> str:
        return f"{self.op!r} : {self.ret!r}"


class History(List[Invocation[OpT, RetT]]):
    """An ordered list of sequential invocations."""

    def __repr__(self) -> str:
        return f"History({list.__repr__(self)})"

    def __str__(self) -> str:
        return format_history(self)


class ParallelHistory(List[ParallelInvocation[OpT, RetT]]):
    """A list of invocations recorded by several threads."""

    def thread_parts(self) -> list[list[ParallelInvocation[OpT, RetT]]]:
        """Group invocations by thread id, keeping their order within each thread.

        The result is indexed by thread id; threads with no invocations get an
        empty list.
        """
        parts: list[list[ParallelInvocation[OpT, RetT]]] = []
        for inv in self:
            missing = inv.thread_id + 1 - len(parts)
            if missing > 0:
                parts.extend([] for _ in range(missing))
            parts[inv.thread_id].append(inv)
        return parts

    def __repr__(self) -> str:
        return f"ParallelHistory({list.__repr__(self)})"

    def __str__(self) -> str:
        return format_parallel_history(self)


@dataclass
class Execution(Generic[OpT, RetT]):
    """An execution trace split into an initial, a parallel and a post part.

    The initial part happens before every parallel invocation and the post part
    happens after all of them.
    """

    init_part: History[OpT, RetT] = field(default_factory=History)
    parallel_part: ParallelHistory[OpT, RetT] = field(default_factory=ParallelHistory)
    post_part: History[OpT, RetT] = field(default_factory=History)

    def __post_init__(self) -> None:
        if not isinstance(self.init_part, History):
            self.init_part = History(self.init_part)
        if not isinstance(self.parallel_part, ParallelHistory):
            self.parallel_part = ParallelHistory(self.parallel_part)
        if not isinstance(self.post_part, History):
            self.post_part = History(self.post_part)

    def __str__(self) -> str:
        return format_execution(self)