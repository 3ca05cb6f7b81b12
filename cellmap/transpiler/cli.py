"""Command-line interface for the cellmap transpiler."""
from __future__ import annotations

import argparse
import logging
import sys

from ..constants import REPL_PROMPT
from .parse import CellSyntaxError
from .pipeline import HISTORY, TranspilationHistory, transpile_cell
from .sourcemap import build_source_map, write_source_map
from .stack import format_error_stack, format_position, locate


def _describe_syntax_error(exc):
    if exc.lineno is None:
        return exc.msg
    return f"{exc.filename}:{exc.lineno}:{exc.offset}: {exc.msg}"


def _print_positions(record):
    """Print the cell origin of each generated line."""

    for number, line in enumerate(record.code.split("\n"), start=1):
        origin = locate(record.source, number) if line else None
        where = format_position(origin) if origin else "(synthetic)"
        print(f"{number:>4} {where:<24} | {line}")


def run_repl(history=None):  # pragma: no cover
    """Interactive cell shell: each line is transpiled as one cell."""

    if history is None:
        history = HISTORY
    print("cellmap REPL — enter a cell per line (:help for help)")

    def resolve_entry(token=None):
        if not len(history):
            print("No transpiled cells yet.")
            return None
        if token is None:
            return history.latest()
        try:
            target = int(token)
        except ValueError:
            print("Cell index must be an integer.")
            return None
        record = history.get(target)
        if record is None:
            print(f"No cached cell #{target}.")
        return record

    while True:
        try:
            line = input(REPL_PROMPT)
        except EOFError:
            print()
            break

        stripped = line.strip()
        if not stripped:
            continue

        if stripped.startswith(":"):
            parts = stripped.split()
            cmd = parts[0]

            if cmd in (":quit", ":exit"):
                break
            if cmd == ":help":
                print("Commands: :help, :quit, :history, :show [n], :map [n], :stack")
                limit = history.limit if history.limit is not None else "all"
                print(f"History: {limit} cells retained.")
                continue
            if cmd == ":history":
                for record in history:
                    print(f"[#{record.id}] {record.name or ''}")
                continue
            if cmd == ":show":
                record = resolve_entry(parts[1] if len(parts) > 1 else None)
                if record:
                    print(record.code)
                continue
            if cmd == ":map":
                record = resolve_entry(parts[1] if len(parts) > 1 else None)
                if record:
                    print(build_source_map(record)["mappings"])
                continue
            if cmd == ":stack":
                print("Paste a stack trace, end with an empty line:")
                stack_lines = []
                while True:
                    try:
                        stack_line = input()
                    except EOFError:
                        break
                    if not stack_line.strip():
                        break
                    stack_lines.append(stack_line)
                print(format_error_stack("\n".join(stack_lines), history=history))
                continue

            print(f"Unknown command: {cmd}")
            continue

        try:
            record = transpile_cell(line, "<repl>", history=history)
        except CellSyntaxError as exc:
            print(f"  ✗ {_describe_syntax_error(exc)}")
            continue
        print(f"[#{record.id}]")
        print(record.code)


def parse_args(args):
    argp = argparse.ArgumentParser(description="Transpile notebook cells into async functions")

    argp.add_argument(
        "file",
        nargs="?",
        default="-",
        help="Cell source file ('-' or omitted reads stdin)",
    )
    argp.add_argument("--name", help="Logical name used in mapped locations")
    argp.add_argument(
        "--positions",
        action="store_true",
        help="Print the cell origin of every generated line",
    )
    argp.add_argument(
        "--source-map",
        metavar="OUTPUT",
        help="Write a source map for the transpiled cell",
    )
    argp.add_argument(
        "--history-limit",
        type=int,
        metavar="N",
        help="Retain only the last N cells in the REPL history",
    )
    argp.add_argument("--repl", action="store_true", help="Start an interactive REPL")
    argp.add_argument("--verbose", action="store_true", help="Log pipeline details")

    params = argp.parse_args(args)
    if params.history_limit is not None:
        if not params.repl:
            argp.error("--history-limit only applies together with --repl")
        if params.history_limit < 1:
            argp.error("--history-limit must be a positive integer")
    return params


def main(args):
    params = parse_args(args)

    if params.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if params.repl:  # pragma: no cover
        run_repl(TranspilationHistory(limit=params.history_limit))
        return 0

    if params.file == "-":
        code = sys.stdin.read()
        name = params.name or "<stdin>"
    else:
        with open(params.file, "r", encoding="utf-8") as f:
            code = f.read()
        name = params.name or params.file

    try:
        record = transpile_cell(code, name)
    except CellSyntaxError as exc:
        print(f"✗ {_describe_syntax_error(exc)}", file=sys.stderr)
        return 1

    if params.positions:
        _print_positions(record)
    else:
        print(record.code)

    if params.source_map:
        write_source_map(record, params.source_map)
    return 0


def run():  # pragma: no cover
    sys.exit(main(sys.argv[1:]))


__all__ = [
    "main",
    "parse_args",
    "run",
    "run_repl",
]


if __name__ == "__main__":  # pragma: no cover
    run()
