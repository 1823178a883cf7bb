"""Call-site inspection: function names, frames and stacks."""

from __future__ import annotations

import inspect
import os
import re
from dataclasses import dataclass
from urllib.parse import unquote_plus

_DEFAULT_DEPTH = 8
_PACKAGE = __name__.partition(".")[0]
_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

# Match from the beginning until the first "/vendor/" (non-greedy).
_VENDOR_RE = re.compile(r"^.*?/vendor/")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def sanitize(function: str) -> str:
    """Make a function name fit for display: unescape it and shorten vendored paths."""
    if not _BAD_ESCAPE_RE.search(function):
        function = unquote_plus(function)
    return _VENDOR_RE.sub("vendor/", function, count=1)


def func_name(fn: object) -> str:
    """Return a readable name for a function, or ``str(fn)`` for anything else."""
    if not inspect.isroutine(fn):
        return str(fn)
    module = getattr(fn, "__module__", None) or ""
    qualname = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", repr(fn))
    name = f"{module}.{qualname}" if module else qualname
    return f"{sanitize(name)}()"


@dataclass(frozen=True)
class Frame:
    """A single call frame: qualified function name, file and line."""

    function: str = ""
    file: str = ""
    line: int = 0

    def __str__(self) -> str:
        text = self.function
        if self.file:
            location = self.file + (f":{self.line}" if self.line > 0 else "")
            text = f"{text} ({location})" if text else f"({location})"
        return text or "unknown"


class Stack(list):
    """A list of frames, innermost first.

    ``str()`` gives a single line separated by semicolons; ``format(stack, "+")``
    gives the multi-line form.
    """

    def __str__(self) -> str:
        return "; ".join(self.strings())

    def __format__(self, spec: str) -> str:
        if spec == "+":
            return self.format_multiline()
        return format(str(self), spec)

    def strings(self) -> list[str]:
        """Return one string per frame."""
        return [str(frame) for frame in self]

    def format_multiline(self) -> str:
        """Return each frame's function followed by an indented file:line."""
        return "".join(f"{frame.function}\n\t{frame.file}:{frame.line}\n" for frame in self)

    def caller_name(self) -> str:
        """Return the first function in the stack that is not part of this package."""
        for frame in self:
            if not should_ignore_frame(frame):
                return frame.function
        return "n/a"


def should_ignore_frame(frame: Frame) -> bool:
    """Tell whether a frame belongs to this package's own code."""
    base = os.path.basename(frame.file)
    if base.startswith("test_") or base.endswith("_test.py"):
        return False
    return frame.function.startswith(_PACKAGE + ".")


def _module_name(filename: str) -> str:
    """Derive a dotted module name from a source file path."""
    path = os.path.abspath(filename)
    if path.startswith(_PACKAGE_DIR + os.sep):
        relative = os.path.splitext(os.path.relpath(path, _PACKAGE_DIR))[0]
        parts = [_PACKAGE, *relative.split(os.sep)]
        if parts[-1] == "__init__":
            parts.pop()
        return ".".join(parts)
    return inspect.getmodulename(filename) or ""


def caller_stack(skip: int = 0, depth: int = 0) -> Stack:
    """Return the stack of the calling function, skipping ``skip`` more frames.

    At most ``depth`` frames are collected; zero or less means eight.
    """
    if depth <= 0:
        depth = _DEFAULT_DEPTH
    current = inspect.currentframe()
    frame = current.f_back if current is not None else None
    del current
    for _ in range(skip):
        if frame is None:
            break
        frame = frame.f_back

    result = Stack()
    while frame is not None and len(result) < depth:
        code = frame.f_code
        module = _module_name(code.co_filename)
        name = f"{module}.{code.co_qualname}" if module else code.co_qualname
        result.append(Frame(function=sanitize(name), file=code.co_filename, line=frame.f_lineno))
        frame = frame.f_back
    return result


def caller() -> str:
    """Return the name of the function that called the caller, outside this package."""
    return caller_stack(1, 0).caller_name()