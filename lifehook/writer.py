"""Writers that route written text to test loggers and printers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class _Logf(Protocol):
    def logf(self, fmt: str, *args: Any) -> None: ...


class _Printer(Protocol):
    def printf(self, fmt: str, *args: Any) -> None: ...


def _as_text(data: bytes | str) -> str:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return data


def _flush_target(target: object) -> None:
    flush = getattr(target, "flush", None)
    if callable(flush):
        flush()


@dataclass
class WriteSyncer:
    """A writable stream that logs each write through a test logger."""

    t: _Logf

    def write(self, data: bytes | str) -> int:
        self.t.logf("%s", _as_text(data))
        return len(data)

    def sync(self) -> None:
        """Flush the underlying logger if it buffers anything."""
        _flush_target(self.t)

    flush = sync


@dataclass
class PrinterWriter:
    """A writable stream that hands each write to a printer."""

    p: _Printer

    def write(self, data: bytes | str) -> int:
        self.p.printf(_as_text(data))
        return len(data)

    def flush(self) -> None:
        """Flush the underlying printer if it buffers anything."""
        _flush_target(self.p)