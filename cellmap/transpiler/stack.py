"""Translate stack traces of transpiled cells back to cell coordinates."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Optional

from ..constants import (
    ANONYMOUS_SOURCE,
    TOP_LEVEL_LABEL,
    TRANSPILED_SOURCE_PATTERN,
    WRAPPER_NAME_PATTERN,
)
from .mapped import MappedString, Position
from .pipeline import HISTORY, TranspilationHistory

_WRAPPER_RE = re.compile(WRAPPER_NAME_PATTERN)
_TRANSPILED_SOURCE_RE = re.compile(TRANSPILED_SOURCE_PATTERN)


class ScriptError(Exception):
    """Error raised by generated code, as reported by the host engine."""

    def __init__(self, message: str, stack: Optional[str] = None, name: str = "Error"):
        super().__init__(message)
        self.message = message
        self.name = name
        self.stack = stack if stack is not None else f"{name}: {message}"


def _stack_text(error) -> str:
    if isinstance(error, str):
        return error
    if isinstance(error, Mapping):
        return str(error.get("stack") or error.get("message") or "")
    stack = getattr(error, "stack", None)
    if stack:
        return str(stack)
    message = getattr(error, "message", None)
    return str(message if message is not None else error)


def truncate_stack(stack: str) -> str:
    """Drop every frame below the outermost cell wrapper.

    The wrapper frame itself is kept, relabelled as the top level. The first
    line is the error message and is never taken for a frame.
    """

    lines = stack.split("\n")
    for index, line in enumerate(lines[1:], start=1):
        match = _WRAPPER_RE.search(line)
        if match:
            lines[index] = line[:match.start()] + TOP_LEVEL_LABEL + line[match.end():]
            return "\n".join(lines[: index + 1])
    return stack


def locate(source: MappedString, line: int, column: int = 1) -> Optional[Position]:
    """Origin of the generated character at 1-based ``line``/``column``.

    Synthetic characters have no origin; the first origin-tagged character
    after them on the same generated line stands in. Returns None when the
    line holds none.
    """

    current_line = 1
    current_column = 1
    found = False
    for char in source:
        if not found:
            if current_line == line and current_column == column:
                found = True
            elif current_line > line:
                return None
        if found:
            if char.origin is not None:
                return char.origin
            if char.char == "\n":
                return None
        if char.char == "\n":
            current_line += 1
            current_column = 1
        else:
            current_column += 1
    return None


def format_position(origin: Position, with_column: bool = True) -> str:
    name = origin.file.name or ANONYMOUS_SOURCE
    if with_column:
        return f"{name}:{origin.line + 1}:{origin.column + 1}"
    return f"{name}:{origin.line + 1}"


def format_error_stack(error, *, history: Optional[TranspilationHistory] = None) -> str:
    """Rewrite a stack trace raised by transpiled code.

    Frames below the cell wrapper are dropped and references to transpiled
    sources are replaced by the cell location they came from. References that
    cannot be resolved are left as they are.
    """

    if history is None:
        history = HISTORY

    def resolve(match):
        record = history.get(int(match.group(1)))
        if record is None:
            return match.group(0)
        if match.group(2) is None:
            return record.name or match.group(0)
        line = int(match.group(2))
        column = int(match.group(3)) if match.group(3) else 1
        origin = locate(record.source, line, column)
        if origin is None:
            return match.group(0)
        return format_position(origin, with_column=match.group(3) is not None)

    stack = truncate_stack(_stack_text(error))
    return _TRANSPILED_SOURCE_RE.sub(resolve, stack)


__all__ = [
    "ScriptError",
    "format_error_stack",
    "format_position",
    "locate",
    "truncate_stack",
]
