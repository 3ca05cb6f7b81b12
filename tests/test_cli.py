"""Tests for ``cellmap.transpiler.cli``."""

from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from cellmap.transpiler import cli as transpiler_cli


def test_parse_args_defaults_and_flags():
    params = transpiler_cli.parse_args(
        ["cell.js", "--name", "demo", "--positions", "--source-map", "out.map"]
    )
    assert params.file == "cell.js"
    assert params.name == "demo"
    assert params.positions is True
    assert params.source_map == "out.map"
    assert params.repl is False

    assert transpiler_cli.parse_args([]).file == "-"


def test_history_limit_requires_repl(capsys):
    with pytest.raises(SystemExit):
        transpiler_cli.parse_args(["cell.js", "--history-limit", "3"])
    assert "--repl" in capsys.readouterr().err

    params = transpiler_cli.parse_args(["--repl", "--history-limit", "3"])
    assert params.history_limit == 3


def test_history_limit_must_be_positive(capsys):
    with pytest.raises(SystemExit):
        transpiler_cli.parse_args(["--repl", "--history-limit", "0"])
    assert "positive" in capsys.readouterr().err


def test_main_prints_transpiled_file(tmp_path, capsys):
    cell = tmp_path / "cell.js"
    cell.write_text("let a = 1;\na", encoding="utf-8")

    assert transpiler_cli.main([str(cell)]) == 0

    out = capsys.readouterr().out
    assert "void ((__global.a = 1));" in out
    assert "return (a)" in out
    assert "})//# sourceUrl=" + str(cell) in out
    assert "//# sourceURL=__transpiled_source_" in out


def test_main_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("var z;"))

    assert transpiler_cli.main(["-"]) == 0
    assert "void ((__global.z = undefined));" in capsys.readouterr().out


def test_main_positions_and_source_map(tmp_path, capsys):
    cell = tmp_path / "cell.js"
    cell.write_text("1 + 2", encoding="utf-8")
    target = tmp_path / "cell.map"

    assert transpiler_cli.main([str(cell), "--name", "demo.js", "--positions", "--source-map", str(target)]) == 0

    out = capsys.readouterr().out
    assert "demo.js:1:1" in out
    assert "(synthetic)" in out
    doc = json.loads(target.read_text(encoding="utf-8"))
    assert doc["sources"] == ["demo.js"]


def test_main_reports_syntax_errors(tmp_path, capsys):
    cell = tmp_path / "bad.js"
    cell.write_text("let = ;", encoding="utf-8")

    assert transpiler_cli.main([str(cell)]) == 1
    assert "✗" in capsys.readouterr().err
