"""JavaScript parsing on top of tree-sitter.

tree-sitter speaks UTF-8 byte offsets; everything above this module speaks
character offsets into a :class:`MappedString`. :class:`SyntaxNode` does the
translation so rewrite passes can hand node ranges straight to an
:class:`~cellmap.transpiler.edit.EditBuffer`.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

import tree_sitter_javascript
from tree_sitter import Language, Parser

from ..constants import ANONYMOUS_SOURCE
from .mapped import MappedString

# Extras that can appear anywhere in the tree and never carry semantics.
_EXTRA_NODE_TYPES = {"comment", "html_comment"}


class CellSyntaxError(SyntaxError):
    """Cell text (or the wrapper around it) failed to parse."""


@lru_cache(maxsize=None)
def javascript_language() -> Language:
    return Language(tree_sitter_javascript.language())


def _char_offsets(text: str) -> list[int]:
    """Map every UTF-8 byte offset of ``text`` to its character offset."""

    offsets = []
    for index, char in enumerate(text):
        offsets.extend([index] * len(char.encode("utf-8", "surrogatepass")))
    offsets.append(len(text))
    return offsets


class SyntaxNode:
    """Character-offset view of a tree-sitter node."""

    __slots__ = ("raw", "_offsets", "_text")

    def __init__(self, raw, offsets: list[int], text: str):
        self.raw = raw
        self._offsets = offsets
        self._text = text

    def _wrap(self, raw) -> Optional["SyntaxNode"]:
        if raw is None:
            return None
        return SyntaxNode(raw, self._offsets, self._text)

    @property
    def type(self) -> str:
        return self.raw.type

    @property
    def start(self) -> int:
        return self._offsets[self.raw.start_byte]

    @property
    def end(self) -> int:
        return self._offsets[self.raw.end_byte]

    @property
    def text(self) -> str:
        return self._text[self.start:self.end]

    @property
    def children(self) -> list["SyntaxNode"]:
        return [
            SyntaxNode(child, self._offsets, self._text)
            for child in self.raw.named_children
            if child.type not in _EXTRA_NODE_TYPES
        ]

    def field(self, name: str) -> Optional["SyntaxNode"]:
        return self._wrap(self.raw.child_by_field_name(name))

    def first_token(self) -> Optional["SyntaxNode"]:
        return self._wrap(self.raw.children[0]) if self.raw.children else None

    def _key(self):
        return (self.raw.start_byte, self.raw.end_byte, self.raw.type)

    # Wrappers are created on demand, so compare the underlying node.
    def __eq__(self, other) -> bool:
        if not isinstance(other, SyntaxNode):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"<{self.type} [{self.start}, {self.end})>"


def _find_error(raw):
    """Depth-first search for the first ERROR or missing node."""

    if raw.type == "ERROR" or raw.is_missing:
        return raw
    if not raw.has_error:
        return None
    for child in raw.children:
        found = _find_error(child)
        if found is not None:
            return found
    return raw


def _syntax_error(message: str, offset: int, source: MappedString) -> CellSyntaxError:
    """Build a :class:`CellSyntaxError` located in the cell's own coordinates."""

    origin = None
    for char in source[offset:]:
        if char.origin is not None:
            origin = char.origin
            break
        if char.char == "\n":
            break
    if origin is None:
        return CellSyntaxError(message)
    filename = origin.file.name or ANONYMOUS_SOURCE
    line_text = origin.file.text.split("\n")[origin.line]
    return CellSyntaxError(
        message, (filename, origin.line + 1, origin.column + 1, line_text)
    )


def parse_javascript(source: MappedString) -> SyntaxNode:
    """Parse ``source`` and return the ``program`` node.

    Raises :class:`CellSyntaxError` when the tree contains an error or a
    missing token.
    """

    text = str(source)
    offsets = _char_offsets(text)
    parser = Parser(javascript_language())
    tree = parser.parse(text.encode("utf-8", "surrogatepass"))
    root = tree.root_node

    if root.has_error:
        bad = _find_error(root)
        offset = offsets[bad.start_byte]
        if bad.is_missing:
            message = f"Missing {bad.type!r}"
        else:
            snippet = text[offset:offsets[bad.end_byte]].split("\n")[0]
            message = f"Unexpected {snippet!r}" if snippet else "Unexpected end of input"
        raise _syntax_error(message, offset, source)

    return SyntaxNode(root, offsets, text)


def parse_async_wrapped(source: MappedString) -> tuple[SyntaxNode, SyntaxNode]:
    """Parse a cell wrapped in an async function expression.

    Returns ``(root, body)`` where ``body`` is the function's statement block.
    """

    root = parse_javascript(source)
    statements = root.children
    if len(statements) != 1 or statements[0].type != "expression_statement":
        offset = statements[1].start if len(statements) > 1 else 0
        raise _syntax_error("Cell closes the wrapper function", offset, source)

    expr = statements[0].children[0]
    while expr.type == "parenthesized_expression":
        expr = expr.children[0]
    if expr.type not in ("function_expression", "function"):
        raise _syntax_error(
            f"Wrapper parsed as {expr.type}, expected a function expression",
            expr.start,
            source,
        )

    body = expr.field("body")
    if body is None or body.type != "statement_block":
        raise CellSyntaxError("Wrapper function has no body")
    return root, body


__all__ = [
    "CellSyntaxError",
    "SyntaxNode",
    "javascript_language",
    "parse_async_wrapped",
    "parse_javascript",
]
