# lincheck

A linearizability checker for concurrent data structures.

`lincheck` answers one question: does a concurrent data structure behave like
a simpler sequential one? It runs operations against the concurrent
implementation from several threads and records when each call started and
returned. It then searches for an ordering of those calls that respects
real-time order and that the sequential implementation would reproduce
exactly. If no such ordering exists, the execution is not linearizable.

## Installation

```
pip install lincheck
```

The package has no runtime dependencies. To run its test suite, install the
`test` extra:

```
pip install "lincheck[test]"
```

## Concepts

- **Sequential specification**: a subclass of `lincheck.spec.SequentialSpec`.
  It is constructed with no arguments and implements `exec(op)`, which applies
  one operation and returns its result. This is the reference behaviour.
- **Concurrent specification**: a subclass of `lincheck.spec.ConcurrentSpec`,
  the implementation under test. It is constructed with no arguments and names
  its sequential specification in the `sequential` class attribute. Its
  `exec(op)` may be called from many threads at once. It must return results
  that compare equal (`==`) with those of the sequential specification.
- **Execution**: a recorded trace (`lincheck.execution.Execution`) split into
  three parts:
  - `init_part`, a `History` of `Invocation(op, ret)`;
  - `parallel_part`, a `ParallelHistory` of `ParallelInvocation` records, each
    carrying a thread id and call and return timestamps;
  - `post_part`, another `History`.

  `ParallelHistory.thread_parts()` groups the parallel invocations by thread.
- **Scenario**: `lincheck.scenario.Scenario` lists which operations to run.
  `init_part` is a list of operations, `parallel_part` holds one list per
  thread, and `post_part` is a list of operations.

## Checking a recorded execution

Record executions by hand with the recorders in `lincheck.recorder`. Check
them with `lincheck.checker.is_linearizable`, which takes the sequential
specification class and the execution:

```python
from lincheck.checker import is_linearizable
from lincheck.recorder import record_init_part
from lincheck.spec import SequentialSpec


class Stack(SequentialSpec):
    def __init__(self):
        self.items = []

    def exec(self, op):
        match op:
            case ("push", value):
                self.items.append(value)
                return "pushed"
            case "pop":
                return self.items.pop() if self.items else None


recorder = record_init_part()
recorder.record(("push", 1), lambda: "pushed")
recorder.record(("push", 2), lambda: "pushed")

recorder = recorder.record_post_part()
recorder.record("pop", lambda: 2)
recorder.record("pop", lambda: 1)

execution = recorder.finish()
assert is_linearizable(Stack, execution)
```

`record(op, f)` calls `f()`, records its result as the return value of `op`,
and returns that result.

To record a parallel part, call `record_parallel_part()` on an initial
recorder. It returns a `ParallelPartRecorder`. Each worker thread takes its own
`PerThreadRecorder` from `record_thread()`; thread ids are handed out in
order, starting at 0. The worker records its calls and then calls `close()`.
A `PerThreadRecorder` also works as a context manager that closes itself on
exit. Every call and return gets a timestamp from a clock that all threads
share. The checker uses these timestamps to build the happens-before order.
Finish with `record_post_part()` or `finish()` on the parallel recorder.

`record_parallel_part()` and `record_post_part()` also exist as module-level
functions, for starting directly at a later stage.

The checker itself is `LinearizabilityChecker(spec, execution).check()`.

## Running scenarios

`lincheck.scenario.execute_scenario(conc, scenario)` runs a scenario and
returns the recorded execution:

1. It creates a fresh `conc()` instance.
2. It runs the initial part.
3. It starts one thread per list in the parallel part. The threads wait on a
   shared barrier before their first operation.
4. After all threads have been joined, it runs the post part.

If an operation raises in a thread, the exception is raised again in the
caller.

`check_scenario(conc, scenario, attempts=100)` runs the scenario up to
`attempts` times. It returns the first execution that is not linearizable
with respect to `conc.sequential`, or `None` if every run was linearizable.

## Randomised testing

`lincheck.runner.Lincheck` drives the whole process. Its fields are:

| Field         | Default | Meaning                                                        |
|---------------|---------|----------------------------------------------------------------|
| `num_threads` | 2       | maximum number of threads in the parallel part                 |
| `num_ops`     | 5       | maximum number of operations in each part and in each thread   |
| `cases`       | 256     | number of random scenarios to generate                         |
| `attempts`    | 100     | number of times each scenario is run                           |
| `seed`        | `None`  | seed for the random generator                                  |

Its methods are:

- `generate_scenario(ops, rng=None)` builds one random scenario. `ops` is
  either a collection of operations to pick from or a callable that draws an
  operation from a `random.Random`.
- `verify(conc, ops)` runs the generated scenarios. When a scenario fails, it
  shrinks it by dropping threads and operations while it keeps failing, and
  returns the resulting non-linearizable execution. It returns `None` if no
  failure was found. It raises `InternalPanicError` if an operation raised an
  exception.
- `verify_or_raise(conc, ops)` raises `NonLinearizableError` instead of
  returning a failure. The error is an `AssertionError`; its message holds the
  rendered trace and its `execution` attribute holds the failing execution.

```python
import threading

from lincheck.runner import Lincheck
from lincheck.spec import ConcurrentSpec, SequentialSpec


class Counter(SequentialSpec):
    def __init__(self):
        self.value = 0

    def exec(self, op):
        old = self.value
        self.value += 1
        return old


class LockedCounter(ConcurrentSpec):
    sequential = Counter

    def __init__(self):
        self.value = 0
        self.lock = threading.Lock()

    def exec(self, op):
        with self.lock:
            old = self.value
            self.value += 1
            return old


Lincheck(num_threads=2, num_ops=3, cases=20, attempts=5, seed=1).verify_or_raise(
    LockedCounter, ["increment"]
)
```

## Rendering traces

`str()` of an `Execution`, a `History` or a `ParallelHistory` renders it as a
table. The same rendering is available from `lincheck.formatting` through
`format_execution`, `format_history` and `format_parallel_history`. Each call
is drawn as a box showing `repr(op) : repr(ret)`. In the parallel part there
is one column per thread, and each box spans the time between the call and
its return. With operations and results whose `repr` is `ReadY`, `WriteY`,
`Read(false)` and `Write`, a parallel part looks like this:

```
PARALLEL PART:
|=====================|================|
|      THREAD 0       |    THREAD 1    |
|=====================|================|
|                     |                |
|                     |----------------|
|                     |                |
| ReadY : Read(false) | WriteY : Write |
|                     |                |
|                     |----------------|
|                     |                |
|---------------------|                |
|                     |                |
| ReadY : Read(false) |                |
|                     |                |
|---------------------|----------------|
```

The lower-level `Table`, `Column` and `CellsSpan` classes in the same module
build such tables directly.

## Limitations

- There is no command-line tool; the package is used as a library, usually
  from a test suite.
- Thread interleavings come from the operating system scheduler, not from a
  model checker. A single run explores only some of the possible
  interleavings; more `attempts` raise the chance of hitting a bad one, but
  nothing guarantees it.
- Random scenario generation samples the space of scenarios and may miss rare
  failures.
- The checker enumerates the topological orderings of the parallel part, so
  its cost grows quickly with the number of concurrent calls. Keep scenarios
  small.