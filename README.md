# lifehook

`lifehook` coordinates the start and stop of an application's parts. Each
component registers a `Hook` with a `Lifecycle`. A hook holds a start callback,
a stop callback, or both.

- Start hooks run in the order they were added. Startup halts at the first
  start hook that raises, and that exception propagates.
- Stop hooks run in reverse order, and only for hooks whose start succeeded.
- A failing stop hook does not halt the sequence. If one stop hook fails, its
  exception is raised once all stop hooks have run. If several fail, they are
  raised together in an `ExceptionGroup`.

## Installing

```
pip install lifehook
```

To install the test dependencies too:

```
pip install "lifehook[test]"
```

## Lifecycles

```python
from lifehook.clock import SystemClock, background
from lifehook.lifecycle import Lifecycle, start_hook, start_stop_hook
from lifehook.spy import Spy

events = Spy()
lc = Lifecycle(events, SystemClock())

def open_pool():
    print("pool open")

def close_pool():
    print("pool closed")

lc.append(start_stop_hook(open_pool, close_pool))
lc.append(start_hook(lambda ctx: print("deadline:", ctx.deadline())))

ctx = background()
lc.start(ctx)
lc.stop(ctx)

print(events.event_types())
# ['OnStartExecuting', 'OnStartExecuted', 'OnStartExecuting',
#  'OnStartExecuted', 'OnStopExecuting', 'OnStopExecuted']
```

A hook callback takes either no arguments or a single context argument, and
reports failure by raising. `wrap`, `start_hook`, `stop_hook` and
`start_stop_hook` convert either form into a callback that takes a context, and
record the original function's name. You can also build a `Hook` directly from
`on_start` and `on_stop` callbacks that take a context.

For every hook it runs, the lifecycle sends an event to its logger before and
after the run. The logger is any object with a `log_event` method. The events
are `OnStartExecuting`, `OnStartExecuted`, `OnStopExecuting` and
`OnStopExecuted`. Each one names the hook's function and the function that
appended the hook. The `...Executed` events also carry the runtime and any
error.

`start` and `stop` raise `LifecycleError` in these cases:

- The context is `None`.
- `start` is called while the lifecycle is not stopped. The message names the
  current `AppState`.

If the context ends before a hook runs, the context's own error is raised. That
error is `ContextCanceled` or `DeadlineExceeded`. Calling `stop` on a lifecycle
that was never started does nothing. `running_hook_caller()` returns the
function that appended the hook that ran most recently.

`HookRecord` and `HookRecords` describe how long a hook ran and where it was
appended from. `sorted_by_runtime()` orders the records from longest to
shortest. `str()` gives a compact form and `format_verbose()` (or
`format(records, "+")`) gives one multi-line entry per record.

## Contexts and clocks

`lifehook.clock` provides cancellable contexts:

- `background()` returns a root context.
- `with_cancel(parent)` returns a child that can be cancelled on its own.
- `with_timeout(parent, seconds)` returns a child with a deadline.

A context also ends when its parent ends. Used in a `with` block, a context is
cancelled on exit. `SystemClock` measures hook runtimes with the monotonic
clock. `Lifecycle` accepts any object that has `now()` and `since(start)`, so
tests can control time.

## Call sites

`lifehook.callsite` supplies the names and frames used in events and records:

- `caller_stack(skip, depth)` returns a `Stack` of `Frame`s, innermost first.
- `Stack.caller_name()` returns the first function outside this package.
- `func_name` gives a readable name for any callable.
- `sanitize` unescapes a name and shortens vendored paths.

## Event spies and writers

`lifehook.spy.Spy` captures events for assertions. It provides `events()`,
`event_types()` and `reset()`. `Events.select_by_type_name` filters the
captured events by class name. `LogBuffer` holds events until a logger is
connected with `connect()`, then forwards everything to that logger.

`lifehook.writer.WriteSyncer` is a writable stream that passes each write to a
test object's `logf`. `PrinterWriter` passes each write to a printer's
`printf`.

## Testing helpers

`lifehook.harness.LifecycleHarness` wraps a lifecycle for unit tests. Give it a
test object with `logf`, `errorf` and `fail_now` (the `TB` protocol).
`require_start()` and `require_stop()` then report any failure through that
object.

Without a test object, the harness writes events and messages to standard
error, and a failure raises `TestFailure` through `PanicT`.

```python
from lifehook.harness import LifecycleHarness
from lifehook.lifecycle import Hook

started = []
harness = LifecycleHarness()
harness.append(Hook(on_start=lambda ctx: started.append(True)))
harness.require_start().require_stop()
```

`make_printer(tb)` returns a `TestPrinter` whose `printf` logs through the test
object.

## What it does not do

`lifehook` only runs hooks. It has no dependency-injection container, no way of
declaring or wiring constructors, and no application runner that waits for
signals and then shuts down. It provides no command-line tool. Your own code
decides when to call `start` and `stop`.