"""Ordered start and stop hooks with state tracking and timing records."""

from __future__ import annotations

import enum
import inspect
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Protocol

from .callsite import Frame, caller_stack, func_name, should_ignore_frame
from .clock import SYSTEM, Context

HookCallable = Callable[[Context], Any]


class _EventLogger(Protocol):
    def log_event(self, event: Any) -> None: ...


class _Clock(Protocol):
    def now(self) -> float: ...

    def since(self, start: float) -> float: ...


@dataclass
class OnStartExecuting:
    """Emitted before an OnStart hook runs."""

    caller_name: str
    function_name: str


@dataclass
class OnStartExecuted:
    """Emitted after an OnStart hook has run."""

    caller_name: str
    function_name: str
    runtime: float
    err: BaseException | None = None


@dataclass
class OnStopExecuting:
    """Emitted before an OnStop hook runs."""

    caller_name: str
    function_name: str


@dataclass
class OnStopExecuted:
    """Emitted after an OnStop hook has run."""

    caller_name: str
    function_name: str
    runtime: float
    err: BaseException | None = None


class LifecycleError(Exception):
    """Raised when a lifecycle is used in a way its state does not allow."""


class AppState(enum.Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    INCOMPLETE_START = "incompleteStart"
    STARTED = "started"
    STOPPING = "stopping"

    def __str__(self) -> str:
        return self.value


@dataclass
class Hook:
    """A pair of start and stop callbacks taking a context; either may be None."""

    on_start: HookCallable | None = None
    on_stop: HookCallable | None = None
    on_start_name: str = ""
    on_stop_name: str = ""
    caller_frame: Frame = field(default_factory=Frame)


def _accepts_context(fn: Callable[..., Any]) -> bool:
    target: Any = fn
    if not (inspect.isfunction(fn) or inspect.ismethod(fn)):
        target = getattr(fn, "__call__", None)
        if not inspect.ismethod(target):
            return True
    bound = inspect.ismethod(target)
    code = getattr(getattr(target, "__func__", target), "__code__", None)
    if code is None:
        return True
    if code.co_flags & inspect.CO_VARARGS:
        return True
    return code.co_argcount - (1 if bound else 0) > 0


def wrap(fn: Callable[..., Any] | None) -> tuple[HookCallable | None, str]:
    """Turn a callable taking no argument or a context into a hook callback.

    Returns the callback and the name of the original function.
    """
    if fn is None:
        return None, ""
    if _accepts_context(fn):
        return fn, func_name(fn)

    def call(ctx: Context) -> None:
        fn()

    return call, func_name(fn)


def start_hook(start: Callable[..., Any]) -> Hook:
    """Return a Hook whose OnStart is ``start``."""
    on_start, name = wrap(start)
    return Hook(on_start=on_start, on_start_name=name)


def stop_hook(stop: Callable[..., Any]) -> Hook:
    """Return a Hook whose OnStop is ``stop``."""
    on_stop, name = wrap(stop)
    return Hook(on_stop=on_stop, on_stop_name=name)


def start_stop_hook(start: Callable[..., Any], stop: Callable[..., Any]) -> Hook:
    """Return a Hook with both callbacks, each wrapped independently."""
    on_start, start_name = wrap(start)
    on_stop, stop_name = wrap(stop)
    return Hook(
        on_start=on_start,
        on_stop=on_stop,
        on_start_name=start_name,
        on_stop_name=stop_name,
    )


def _format_duration(seconds: float) -> str:
    if seconds == 0:
        return "0s"
    magnitude = abs(seconds)
    if magnitude < 1e-6:
        value, unit = seconds * 1e9, "ns"
    elif magnitude < 1e-3:
        value, unit = seconds * 1e6, "µs"
    elif magnitude < 1:
        value, unit = seconds * 1e3, "ms"
    else:
        value, unit = seconds, "s"
    return f"{round(value, 6):g}{unit}"


@dataclass
class HookRecord:
    """How long a hook ran, what ran, and where it was appended from."""

    caller_frame: Frame
    func: HookCallable
    runtime: float


class HookRecords(list):
    """A list of hook records; ``format(records, "+")`` gives the verbose form."""

    def sorted_by_runtime(self) -> HookRecords:
        """Return the records ordered from the longest runtime to the shortest."""
        return HookRecords(sorted(self, key=lambda r: r.runtime, reverse=True))

    def __str__(self) -> str:
        return "".join(
            f"{func_name(r.func)} took {_format_duration(r.runtime)} from {r.caller_frame}"
            for r in self
        )

    def format_verbose(self) -> str:
        """Return one multi-line entry per record."""
        body = "".join(
            f"\n{func_name(r.func)} took {_format_duration(r.runtime)} from:\n\t{r.caller_frame}"
            for r in self
        )
        return body + "\n"

    def __format__(self, spec: str) -> str:
        if spec == "+":
            return self.format_verbose()
        return format(str(self), spec)


class Lifecycle:
    """Coordinates start and stop hooks of an application."""

    def __init__(self, logger: _EventLogger, clock: _Clock = SYSTEM) -> None:
        self._logger = logger
        self._clock = clock
        self._state = AppState.STOPPED
        self._hooks: list[Hook] = []
        self._num_started = 0
        self._start_records = HookRecords()
        self._stop_records = HookRecords()
        self._running_hook = Hook()
        self._lock = threading.Lock()

    def append(self, hook: Hook) -> None:
        """Add a hook, remembering the frame of the code that added it."""
        stack = caller_stack(1)
        frame = next(
            (f for f in stack if not should_ignore_frame(f)),
            stack[0] if stack else Frame(),
        )
        self._hooks.append(replace(hook, caller_frame=frame))

    def start(self, ctx: Context | None) -> None:
        """Run every OnStart hook in order, stopping at the first that fails."""
        if ctx is None:
            raise LifecycleError("called OnStart with nil context")

        with self._lock:
            if self._state is not AppState.STOPPED:
                raise LifecycleError(
                    f"attempted to start lifecycle when in state: {self._state}"
                )
            self._num_started = 0
            self._state = AppState.STARTING
            self._start_records = HookRecords()

        return_state = AppState.INCOMPLETE_START
        try:
            for hook in self._hooks:
                error = ctx.err()
                if error is not None:
                    raise error

                if hook.on_start is not None:
                    with self._lock:
                        self._running_hook = hook
                    runtime, error = self._run_start_hook(ctx, hook)
                    if error is not None:
                        raise error
                    with self._lock:
                        self._start_records.append(
                            HookRecord(hook.caller_frame, hook.on_start, runtime)
                        )
                self._num_started += 1
            return_state = AppState.STARTED
        finally:
            with self._lock:
                self._state = return_state

    def _run_start_hook(self, ctx: Context, hook: Hook) -> tuple[float, Exception | None]:
        name = hook.on_start_name or func_name(hook.on_start)
        caller_name = hook.caller_frame.function
        self._logger.log_event(OnStartExecuting(caller_name, name))
        runtime, error = self._timed(hook.on_start, ctx)
        self._logger.log_event(OnStartExecuted(caller_name, name, runtime, error))
        return runtime, error

    def _run_stop_hook(self, ctx: Context, hook: Hook) -> tuple[float, Exception | None]:
        name = hook.on_stop_name or func_name(hook.on_stop)
        caller_name = hook.caller_frame.function
        self._logger.log_event(OnStopExecuting(caller_name, name))
        runtime, error = self._timed(hook.on_stop, ctx)
        self._logger.log_event(OnStopExecuted(caller_name, name, runtime, error))
        return runtime, error

    def _timed(self, fn: HookCallable, ctx: Context) -> tuple[float, Exception | None]:
        begin = self._clock.now()
        try:
            fn(ctx)
        except Exception as exc:
            return self._clock.since(begin), exc
        return self._clock.since(begin), None

    def stop(self, ctx: Context | None) -> None:
        """Run, in reverse order, the OnStop hooks whose OnStart succeeded.

        Every hook is attempted; failures are raised together at the end.
        """
        if ctx is None:
            raise LifecycleError("called OnStop with nil context")

        with self._lock:
            if self._state not in (
                AppState.STARTED,
                AppState.INCOMPLETE_START,
                AppState.STARTING,
            ):
                return
            self._state = AppState.STOPPING

        try:
            with self._lock:
                self._stop_records = HookRecords()
                started = list(self._hooks[: self._num_started])

            errors: list[Exception] = []
            for hook in reversed(started):
                error = ctx.err()
                if error is not None:
                    raise error
                if hook.on_stop is None:
                    continue

                with self._lock:
                    self._running_hook = hook
                runtime, error = self._run_stop_hook(ctx, hook)
                if error is not None:
                    errors.append(error)
                with self._lock:
                    self._stop_records.append(
                        HookRecord(hook.caller_frame, hook.on_stop, runtime)
                    )
        finally:
            with self._lock:
                self._state = AppState.STOPPED

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise ExceptionGroup("lifecycle stop failed", errors)

    def running_hook_caller(self) -> str:
        """Return the caller of the hook that ran most recently."""
        with self._lock:
            return self._running_hook.caller_frame.function