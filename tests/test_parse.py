import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from cellmap import (
    CellSyntaxError,
    MappedString,
    SourceFile,
    parse_async_wrapped,
    parse_javascript,
    wrap_cell,
)


def test_node_ranges_are_character_offsets():
    root = parse_javascript(MappedString('"é✓"; x'))
    first, second = root.children

    assert first.type == "expression_statement"
    assert (first.start, first.end) == (0, 5)
    assert second.text == "x"
    assert (second.start, second.end) == (6, 7)


def test_comments_are_not_children():
    root = parse_javascript(MappedString("// note\nx /* inline */;"))
    statements = root.children
    assert [s.type for s in statements] == ["expression_statement"]
    assert [c.type for c in statements[0].children] == ["identifier"]


def test_fields_and_equality():
    root = parse_javascript(MappedString("let a = 1;"))
    decl = root.children[0]
    declarator = decl.children[0]

    assert decl.field("kind").text == "let"
    assert declarator.field("name").text == "a"
    assert declarator.field("value").text == "1"
    assert declarator.field("missing") is None
    assert decl.children[0] == declarator
    assert decl != declarator


def test_parse_errors_raise_cell_syntax_error():
    with pytest.raises(CellSyntaxError) as excinfo:
        parse_javascript(SourceFile("p.js", "let = ;"))
    assert isinstance(excinfo.value, SyntaxError)


def test_parse_async_wrapped_returns_function_body():
    source = wrap_cell(SourceFile("c.js", "1;\n2;"), 4)
    root, body = parse_async_wrapped(source)

    assert root.type == "program"
    assert body.type == "statement_block"
    assert len(body.children) == 2


def test_parse_async_wrapped_rejects_non_function():
    with pytest.raises(CellSyntaxError):
        parse_async_wrapped(MappedString("(1 + 2)"))
