import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from cellmap import EditBuffer, MappedString, SourceFile


def _node(start, end):
    return SimpleNamespace(start=start, end=end)


def test_flush_without_edits_reproduces_source():
    source = SourceFile("a.js", "let x = 1;")
    edit = EditBuffer(source)
    result = edit.flush()
    assert str(result) == "let x = 1;"
    assert list(result) == list(source)


def test_slot_count_never_changes():
    source = SourceFile("a.js", "abcdefgh")
    edit = EditBuffer(source)
    assert len(edit) == 8

    edit.replace(1, 4, "XYZW")
    edit.insert_before(_node(5, 6), "<")
    edit.insert_after(_node(5, 6), ">")
    edit.replace(6, 6, "!")
    edit.prepend("[")
    edit.append("]")

    assert len(edit) == 8
    assert str(edit.flush()) == "[aXYZWe<f>!gh]"


def test_replace_inherits_origin_of_first_replaced_character():
    source = SourceFile("a.js", "import x")
    edit = EditBuffer(source)
    edit.replace(0, 7, "var ")
    result = edit.flush()
    assert str(result) == "var x"
    assert all(c.origin is source[0].origin for c in result[:4])
    assert result[4] is source[7]


def test_replace_keeps_mapped_replacement_as_is():
    source = SourceFile("a.js", "abc")
    other = SourceFile("b.js", "Z")
    edit = EditBuffer(source)
    edit.replace(1, 2, other)
    result = edit.flush()
    assert str(result) == "aZc"
    assert result[1].file is other


def test_empty_range_replace_inserts_before_offset():
    edit = EditBuffer(SourceFile("a.js", "ab"))
    edit.replace(1, 1, "-")
    edit.replace(2, 2, "!")
    assert str(edit.flush()) == "a-b!"


def test_insertions_are_untagged_and_keep_neighbours():
    source = SourceFile("a.js", "x")
    edit = EditBuffer(source)
    edit.insert_before(_node(0, 1), "(")
    edit.insert_after(_node(0, 1), ")")
    result = edit.flush()
    assert str(result) == "(x)"
    assert result[0].origin is None
    assert result[1] is source[0]
    assert result[2].origin is None


def test_insertions_on_the_same_slot_nest():
    edit = EditBuffer(MappedString("ab"))
    edit.insert_before(_node(0, 2), "1")
    edit.insert_before(_node(0, 2), "2")
    edit.insert_after(_node(0, 2), "3")
    edit.insert_after(_node(0, 2), "4")
    assert str(edit.flush()) == "21ab34"


def test_prepend_and_append_work_on_empty_source():
    edit = EditBuffer("")
    edit.prepend("b")
    edit.prepend("a")
    edit.append("c")
    assert len(edit) == 0
    assert str(edit.flush()) == "abc"


@pytest.mark.parametrize("start, end", [(-1, 2), (2, 1), (0, 6), (6, 6)])
def test_replace_outside_buffer_raises(start, end):
    edit = EditBuffer("abcde")
    with pytest.raises(IndexError):
        edit.replace(start, end, "x")


def test_insert_outside_buffer_raises():
    edit = EditBuffer("abc")
    with pytest.raises(IndexError):
        edit.insert_before(_node(3, 4), "x")
    with pytest.raises(IndexError):
        edit.insert_after(_node(0, 9), "x")
