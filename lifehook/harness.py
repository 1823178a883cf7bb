"""Test helpers: a lifecycle spy that reports failures to a test object."""

from __future__ import annotations

import sys
from typing import Any, Protocol, TextIO, runtime_checkable

from .clock import SYSTEM, Context, background, with_cancel
from .lifecycle import Hook, Lifecycle
from .writer import WriteSyncer


@runtime_checkable
class TB(Protocol):
    """The part of a test object that the helpers need."""

    def logf(self, fmt: str, *args: Any) -> None: ...

    def errorf(self, fmt: str, *args: Any) -> None: ...

    def fail_now(self) -> None: ...


class TestFailure(Exception):
    """Raised by PanicT.fail_now when no real test object is available."""

    __test__ = False


def _render(fmt: str, args: tuple[Any, ...]) -> str:
    return fmt % args if args else fmt


class PanicT:
    """A TB that writes to a stream and raises TestFailure on fail_now."""

    def __init__(self, w: TextIO | None = None) -> None:
        self.w = w if w is not None else sys.stderr
        self.last_err = ""

    def logf(self, fmt: str, *args: Any) -> None:
        self.w.write(_render(fmt, args) + "\n")

    def errorf(self, fmt: str, *args: Any) -> None:
        self.last_err = _render(fmt, args)
        self.w.write(self.last_err + "\n")

    def fail_now(self) -> None:
        raise TestFailure(self.last_err or "test lifecycle failed")


class _StreamLogger:
    """Writes one line per event to a writable stream."""

    def __init__(self, stream: Any) -> None:
        self._stream = stream

    def log_event(self, event: Any) -> None:
        self._stream.write(f"{event!r}\n")


class LifecycleHarness:
    """A lifecycle for unit tests whose require_* helpers report to a TB."""

    def __init__(self, t: TB | None = None) -> None:
        if t is not None:
            stream: Any = WriteSyncer(t)
        else:
            stream = sys.stderr
            t = PanicT(sys.stderr)
        self.t = t
        self._lc = Lifecycle(_StreamLogger(stream), SYSTEM)

    def append(self, hook: Hook) -> None:
        """Register a hook."""
        self._lc.append(hook)

    def start(self, ctx: Context | None) -> None:
        """Run all OnStart hooks in order, stopping at the first failure."""
        self._lc.start(ctx)

    def stop(self, ctx: Context | None) -> None:
        """Run the OnStop hooks of started hooks in reverse order."""
        self._lc.stop(ctx)

    def require_start(self) -> LifecycleHarness:
        """Start, failing the test if any hook fails."""
        with with_cancel(background()) as ctx:
            try:
                self.start(ctx)
            except Exception as exc:
                self.t.errorf("lifecycle didn't start cleanly: %s", exc)
                self.t.fail_now()
        return self

    def require_stop(self) -> None:
        """Stop, failing the test if any hook fails."""
        with with_cancel(background()) as ctx:
            try:
                self.stop(ctx)
            except Exception as exc:
                self.t.errorf("lifecycle didn't stop cleanly: %s", exc)
                self.t.fail_now()


class TestPrinter:
    """A printer that logs through a TB."""

    __test__ = False

    def __init__(self, tb: TB) -> None:
        self.tb = tb

    def printf(self, fmt: str, *args: Any) -> None:
        self.tb.logf(fmt, *args)


def make_printer(tb: TB) -> TestPrinter:
    """Return a printer that logs to ``tb``."""
    return TestPrinter(tb)