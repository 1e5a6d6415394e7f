"""Recorders that capture the execution of a concurrent program.

Recording moves through three stages, each with its own recorder:

- :class:`InitPartRecorder` records the initial, sequential part;
- :class:`ParallelPartRecorder` records the parallel part, handing out one
  :class:`PerThreadRecorder` per thread;
- :class:`PostPartRecorder` records the final, sequential part.

Each stage's ``finish`` method returns the recorded :class:`Execution`.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

from .execution import Execution, History, Invocation, ParallelHistory, ParallelInvocation

OpT = TypeVar("OpT")
RetT = TypeVar("RetT")

_NO_OP = object()


class InternalRecorder(Generic[OpT, RetT]):
    """Collects the invocations of a single thread from call and return events."""

    def __init__(self, thread_id: int) -> None:
        self.thread_id = thread_id
        self.invocations: ParallelHistory[OpT, RetT] = ParallelHistory()
        self._current_op: object = _NO_OP
        self._call_timestamp = 0

    def add_call(self, op: OpT, timestamp: int) -> None:
        """Note that ``op`` was called at ``timestamp``."""
        if self._current_op is not _NO_OP:
            raise RuntimeError("an operation is already in progress on this thread")
        self._call_timestamp = timestamp
        self._current_op = op

    def add_return(self, ret: RetT, timestamp: int) -> None:
        """Note that the pending operation returned ``ret`` at ``timestamp``."""
        if self._current_op is _NO_OP:
            raise RuntimeError("no operation is in progress on this thread")
        op = self._current_op
        self._current_op = _NO_OP
        self.invocations.append(
            ParallelInvocation(
                thread_id=self.thread_id,
                call_timestamp=self._call_timestamp,
                return_timestamp=timestamp,
                op=op,
                ret=ret,
            )
        )

    def history(self) -> ParallelHistory[OpT, RetT]:
        """The invocations recorded so far."""
        return self.invocations


class _Timer:
    """A thread-safe counter handing out consecutive timestamps."""

    def __init__(self) -> None:
        self._next = 0
        self._lock = threading.Lock()

    def tick(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value


class InitPartRecorder(Generic[OpT, RetT]):
    """Records the initial, sequential part of an execution."""

    def __init__(self, init_part: History[OpT, RetT] | None = None) -> None:
        self.init_part: History[OpT, RetT] = (
            init_part if init_part is not None else History()
        )

    def record(self, op: OpT, f: Callable[[], RetT]) -> RetT:
        """Run ``f`` as the execution of ``op`` and record the result."""
        ret = f()
        self.init_part.append(Invocation(op, ret))
        return ret

    def record_parallel_part(self) -> ParallelPartRecorder[OpT, RetT]:
        """Move on to recording the parallel part."""
        return ParallelPartRecorder(self.init_part)

    def record_post_part(self) -> PostPartRecorder[OpT, RetT]:
        """Skip the parallel part and move on to recording the post part."""
        return PostPartRecorder(self.init_part, ParallelHistory())

    def finish(self) -> Execution[OpT, RetT]:
        """Stop recording and return the execution."""
        return Execution(init_part=self.init_part)


class ParallelPartRecorder(Generic[OpT, RetT]):
    """Records the parallel part of an execution, one sub-recorder per thread."""

    def __init__(self, init_part: History[OpT, RetT] | None = None) -> None:
        self._init_part: History[OpT, RetT] = (
            init_part if init_part is not None else History()
        )
        self._parallel_part: ParallelHistory[OpT, RetT] = ParallelHistory()
        self._lock = threading.Lock()
        self._next_thread_id = 0
        self.timer = _Timer()

    def record_thread(self) -> PerThreadRecorder[OpT, RetT]:
        """Create a recorder for one more thread; thread ids are given out in order."""
        with self._lock:
            thread_id = self._next_thread_id
            self._next_thread_id += 1
        return PerThreadRecorder(self, thread_id)

    def _merge(self, invocations: ParallelHistory[OpT, RetT]) -> None:
        with self._lock:
            self._parallel_part.extend(invocations)

    def _take_parts(self) -> tuple[History[OpT, RetT], ParallelHistory[OpT, RetT]]:
        with self._lock:
            init_part, self._init_part = self._init_part, History()
            parallel_part, self._parallel_part = self._parallel_part, ParallelHistory()
        return init_part, parallel_part

    def record_post_part(self) -> PostPartRecorder[OpT, RetT]:
        """Move on to recording the post part, taking over what was recorded."""
        init_part, parallel_part = self._take_parts()
        return PostPartRecorder(init_part, parallel_part)

    def finish(self) -> Execution[OpT, RetT]:
        """Stop recording and return the execution."""
        init_part, parallel_part = self._take_parts()
        return Execution(init_part=init_part, parallel_part=parallel_part)


class PerThreadRecorder(Generic[OpT, RetT]):
    """Records the operations of a single thread of the parallel part.

    The invocations are handed over to the parent recorder by :meth:`close`,
    which is also called on leaving a ``with`` block.
    """

    def __init__(self, parent: ParallelPartRecorder[OpT, RetT], thread_id: int) -> None:
        self._parent = parent
        self._internal: InternalRecorder[OpT, RetT] = InternalRecorder(thread_id)
        self._closed = False

    @property
    def thread_id(self) -> int:
        return self._internal.thread_id

    def record(self, op: OpT, f: Callable[[], RetT]) -> RetT:
        """Run ``f`` as the execution of ``op``, timestamping its call and return."""
        if self._closed:
            raise RuntimeError("the thread recorder is closed")
        self._internal.add_call(op, self._parent.timer.tick())
        ret = f()
        self._internal.add_return(ret, self._parent.timer.tick())
        return ret

    def close(self) -> None:
        """Hand the recorded invocations over to the parent recorder."""
        if self._closed:
            return
        self._closed = True
        invocations = self._internal.invocations
        self._internal.invocations = ParallelHistory()
        self._parent._merge(invocations)

    def __enter__(self) -> PerThreadRecorder[OpT, RetT]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class PostPartRecorder(Generic[OpT, RetT]):
    """Records the final, sequential part of an execution."""

    def __init__(
        self,
        init_part: History[OpT, RetT] | None = None,
        parallel_part: ParallelHistory[OpT, RetT] | None = None,
    ) -> None:
        self.init_part: History[OpT, RetT] = (
            init_part if init_part is not None else History()
        )
        self.parallel_part: ParallelHistory[OpT, RetT] = (
            parallel_part if parallel_part is not None else ParallelHistory()
        )
        self.post_part: History[OpT, RetT] = History()

    def record(self, op: OpT, f: Callable[[], RetT]) -> RetT:
        """Run ``f`` as the execution of ``op`` and record the result."""
        ret = f()
        self.post_part.append(Invocation(op, ret))
        return ret

    def finish(self) -> Execution[OpT, RetT]:
        """Stop recording and return the execution."""
        return Execution(
            init_part=self.init_part,
            parallel_part=self.parallel_part,
            post_part=self.post_part,
        )


def record_init_part() -> InitPartRecorder:
    """Start recording with the initial part."""
    return InitPartRecorder()


def record_parallel_part() -> ParallelPartRecorder:
    """Start recording with the parallel part."""
    return ParallelPartRecorder()


def record_post_part() -> PostPartRecorder:
    """Start recording with the post part."""
    return PostPartRecorder()