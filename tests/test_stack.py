import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from cellmap import (
    ScriptError,
    TranspilationHistory,
    format_error_stack,
    locate,
    transpile_cell,
    truncate_stack,
)


@pytest.fixture
def history():
    return TranspilationHistory()


@pytest.fixture
def record(history):
    # Generated line 2 is the declaration, line 3 the throw.
    return transpile_cell("let a = 1;\nthrow new Error('x');", "cell.js", history=history)


def test_truncates_frames_below_the_wrapper():
    stack = "\n".join(
        [
            "Error: boom",
            "    at inner (__transpiled_source_7:4:3)",
            "    at __cell_7__ (__transpiled_source_7:9:1)",
            "    at evaluate (host.js:10:5)",
            "    at run (host.js:20:1)",
        ]
    )

    assert truncate_stack(stack) == "\n".join(
        [
            "Error: boom",
            "    at inner (__transpiled_source_7:4:3)",
            "    at <top level> (__transpiled_source_7:9:1)",
        ]
    )


def test_wrapper_name_in_the_message_is_not_a_frame():
    stack = "\n".join(
        [
            "Error: __cell_3__ failed",
            "    at inner (__transpiled_source_3:4:3)",
            "    at __cell_3__ (__transpiled_source_3:6:1)",
            "    at evaluate (host.js:10:5)",
        ]
    )

    assert truncate_stack(stack) == "\n".join(
        [
            "Error: __cell_3__ failed",
            "    at inner (__transpiled_source_3:4:3)",
            "    at <top level> (__transpiled_source_3:6:1)",
        ]
    )


def test_stack_without_wrapper_frame_is_kept_whole():
    stack = "Error: boom\n    at run (host.js:20:1)"
    assert truncate_stack(stack) == stack


def test_maps_transpiled_locations_back_to_the_cell(history, record):
    stack = (
        "Error: x\n"
        "    at __cell_1__ (__transpiled_source_1:3:7)\n"
        "    at async evaluate (host.js:10:5)"
    )
    error = ScriptError("x", stack)

    assert format_error_stack(error, history=history) == (
        "Error: x\n    at <top level> (cell.js:2:7)"
    )


def test_line_only_reference_maps_to_line(history, record):
    formatted = format_error_stack("at f (__transpiled_source_1:2)", history=history)
    assert formatted == "at f (cell.js:1)"


def test_reference_without_position_shows_cell_name(history, record):
    assert format_error_stack("in __transpiled_source_1", history=history) == "in cell.js"


def test_synthetic_position_is_skipped_to_next_cell_character(history, record):
    # Line 2 reads `void ((__global.a = 1));`. Column 7 is the inserted `(`;
    # the first cell character after it is `a`.
    assert format_error_stack("(__transpiled_source_1:2:7)", history=history) == "(cell.js:1:5)"


def test_replaced_keyword_maps_to_the_keyword_it_replaced(history, record):
    # `void (` replaced `let `, so it carries the origin of `l`.
    assert format_error_stack("(__transpiled_source_1:2:1)", history=history) == "(cell.js:1:1)"


def test_unknown_reference_is_left_unchanged(history, record):
    stack = "Error\n    at g (__transpiled_source_99:1:1)"
    assert format_error_stack(stack, history=history) == stack


def test_wrapper_only_line_is_left_unchanged(history, record):
    stack = "    at h (__transpiled_source_1:1:5)"
    assert format_error_stack(stack, history=history) == stack


def test_position_past_the_end_is_left_unchanged(history, record):
    stack = "    at h (__transpiled_source_1:40:1)"
    assert format_error_stack(stack, history=history) == stack


def test_accepts_mappings_and_plain_objects(history, record):
    assert format_error_stack({"stack": "__transpiled_source_1:3:1"}, history=history) == "cell.js:2:1"

    class Thrown:
        message = "no stack"
        stack = None

    assert format_error_stack(Thrown(), history=history) == "no stack"


def test_script_error_defaults_stack_to_message():
    err = ScriptError("bad", name="TypeError")
    assert err.stack == "TypeError: bad"
    assert str(err) == "bad"


def test_locate_reads_origins(record):
    origin = locate(record.source, 3, 1)
    assert origin.file.name == "cell.js"
    assert (origin.line, origin.column) == (1, 0)
    assert locate(record.source, 1, 1) is None
