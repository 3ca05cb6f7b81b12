"""Source Map (revision 3) export for transpiled cells."""

from __future__ import annotations

import json
from typing import Any, Optional

from ..constants import ANONYMOUS_SOURCE, SOURCE_MAP_VERSION, VLQ_BASE64
from .mapped import Position


def encode_vlq(value: int) -> str:
    """Base64 VLQ encoding of a signed integer."""

    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & 31
        vlq >>= 5
        if vlq:
            digit |= 32
        out.append(VLQ_BASE64[digit])
        if not vlq:
            return "".join(out)


def _continues(previous: Optional[Position], origin: Position) -> bool:
    return (
        previous is not None
        and previous.file is origin.file
        and previous.line == origin.line
        and previous.column + 1 == origin.column
    )


def build_source_map(record) -> dict[str, Any]:
    """Build a source map document for a :class:`TranspilationRecord`.

    A segment starts wherever the origin of a generated character is not the
    direct successor of the previous one; synthetic runs get an unmapped
    segment.
    """

    files = []
    file_index = {}
    lines = []
    segments = []

    generated_column = 0
    previous_column = 0
    previous_source = 0
    previous_line = 0
    previous_source_column = 0
    previous_origin = None
    in_synthetic = False

    for char in record.source:
        if char.char == "\n":
            lines.append(",".join(segments))
            segments = []
            generated_column = 0
            previous_column = 0
            previous_origin = None
            in_synthetic = False
            continue

        origin = char.origin
        if origin is None:
            if not in_synthetic and previous_origin is not None:
                segments.append(encode_vlq(generated_column - previous_column))
                previous_column = generated_column
            in_synthetic = True
            previous_origin = None
        elif not _continues(previous_origin, origin):
            key = id(origin.file)
            if key not in file_index:
                file_index[key] = len(files)
                files.append(origin.file)
            source = file_index[key]
            segments.append(
                encode_vlq(generated_column - previous_column)
                + encode_vlq(source - previous_source)
                + encode_vlq(origin.line - previous_line)
                + encode_vlq(origin.column - previous_source_column)
            )
            previous_column = generated_column
            previous_source = source
            previous_line = origin.line
            previous_source_column = origin.column
            previous_origin = origin
            in_synthetic = False
        else:
            previous_origin = origin
        generated_column += 1

    lines.append(",".join(segments))

    return {
        "version": SOURCE_MAP_VERSION,
        "file": record.url,
        "sources": [f.name or ANONYMOUS_SOURCE for f in files],
        "sourcesContent": [f.text for f in files],
        "names": [],
        "mappings": ";".join(lines),
    }


def write_source_map(record, filename) -> dict[str, Any]:
    """Persist the source map of ``record`` to ``filename``."""

    doc = build_source_map(record)
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(doc, f, indent=2)
    print(f"  ✓ Source map exported → {filename}")
    return doc


__all__ = ["build_source_map", "encode_vlq", "write_source_map"]
