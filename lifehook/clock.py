"""Access to time and cancellable contexts with optional deadlines."""

from __future__ import annotations

import threading
import time


class ContextCanceled(Exception):
    """Reported when a context was cancelled explicitly."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(TimeoutError):
    """Reported when a context's deadline has passed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class Context:
    """A cancellation signal with an optional deadline, inherited by children.

    Deadlines are expressed on the ``time.monotonic()`` scale. A context ends
    when it is cancelled, when its deadline passes, or when its parent ends.
    Used as a context manager, it is cancelled on exit.
    """

    def __init__(self, parent: Context | None = None, deadline: float | None = None) -> None:
        self._parent = parent
        self._deadline = deadline
        self._error: BaseException | None = None
        self._lock = threading.Lock()

    def cancel(self) -> None:
        """End this context and all of its children."""
        with self._lock:
            if self._error is None:
                self._error = ContextCanceled()

    def _settle(self, error: BaseException) -> BaseException:
        with self._lock:
            if self._error is None:
                self._error = error
            return self._error

    def err(self) -> BaseException | None:
        """Return why the context ended, or None while it is still live."""
        with self._lock:
            if self._error is not None:
                return self._error
        if self._parent is not None:
            parent_error = self._parent.err()
            if parent_error is not None:
                return self._settle(parent_error)
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return self._settle(DeadlineExceeded())
        return None

    def deadline(self) -> float | None:
        """Return the earliest deadline among this context and its ancestors."""
        parent_deadline = self._parent.deadline() if self._parent is not None else None
        candidates = [d for d in (self._deadline, parent_deadline) if d is not None]
        return min(candidates, default=None)

    def __enter__(self) -> Context:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


def background() -> Context:
    """Return a fresh root context with no deadline."""
    return Context()


def with_cancel(parent: Context) -> Context:
    """Return a child of ``parent`` that can be cancelled on its own."""
    return Context(parent)


def with_timeout(parent: Context, timeout: float) -> Context:
    """Return a child of ``parent`` that ends after ``timeout`` seconds."""
    return Context(parent, time.monotonic() + timeout)


class SystemClock:
    """Clock backed by the real monotonic time of the process."""

    def now(self) -> float:
        return time.monotonic()

    def since(self, start: float) -> float:
        return time.monotonic() - start

    def sleep(self, duration: float) -> None:
        time.sleep(duration)

    def with_timeout(self, ctx: Context, timeout: float) -> Context:
        return with_timeout(ctx, timeout)


SYSTEM = SystemClock()