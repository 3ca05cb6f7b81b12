"""Cell transpilation pipeline and the history of transpiled cells."""

from __future__ import annotations

import itertools
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterator, Optional

from ..constants import (
    ANONYMOUS_SOURCE,
    HISTORY_LIMIT,
    SOURCE_NAME_MARKER,
    SOURCE_URL_MARKER,
    TRANSPILED_SOURCE_TEMPLATE,
    WRAPPER_NAME_TEMPLATE,
    WRAPPER_PARAMS,
)
from .mapped import MappedString, SourceFile
from .rewrite import rewrite_imports, rewrite_scope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranspilationRecord:
    """A transpiled cell, kept so runtime errors can be mapped back to it."""

    id: int
    name: Optional[str]
    source: MappedString
    code: str

    @property
    def url(self) -> str:
        return TRANSPILED_SOURCE_TEMPLATE.format(id=self.id)

    @property
    def wrapper_name(self) -> str:
        return WRAPPER_NAME_TEMPLATE.format(id=self.id)


class TranspilationHistory:
    """Id-keyed store of transpilation records.

    Ids are strictly increasing. With ``limit`` set, only the most recent
    ``limit`` records are retained.
    """

    def __init__(self, limit: Optional[int] = HISTORY_LIMIT):
        if limit is not None and limit < 1:
            raise ValueError(f"History limit must be positive, got {limit}")
        self.limit = limit
        self._records: "OrderedDict[int, TranspilationRecord]" = OrderedDict()
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._ids)

    def add(self, record: TranspilationRecord) -> TranspilationRecord:
        with self._lock:
            self._records[record.id] = record
            while self.limit is not None and len(self._records) > self.limit:
                evicted, _ = self._records.popitem(last=False)
                logger.debug("evicted transpilation record #%d", evicted)
        return record

    def get(self, record_id: int) -> Optional[TranspilationRecord]:
        return self._records.get(record_id)

    def latest(self) -> Optional[TranspilationRecord]:
        if not self._records:
            return None
        return next(reversed(self._records.values()))

    def __getitem__(self, record_id: int) -> TranspilationRecord:
        return self._records[record_id]

    def __contains__(self, record_id) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TranspilationRecord]:
        return iter(list(self._records.values()))


HISTORY = TranspilationHistory()


def wrap_cell(
    source: MappedString, record_id: int, name: Optional[str] = None
) -> MappedString:
    """Embed a cell in an async function expression named after ``record_id``.

    The closing line also carries a comment naming the cell.
    """

    wrapper = WRAPPER_NAME_TEMPLATE.format(id=record_id)
    params = ", ".join(WRAPPER_PARAMS)
    # A line break in the name would end the comment early.
    label = " ".join((name or ANONYMOUS_SOURCE).splitlines())
    header = MappedString(f"(async function {wrapper}({params}) {{\n")
    footer = MappedString("\n})" + SOURCE_NAME_MARKER.format(name=label))
    return header.concat(source, footer)


def transpile_cell(
    code: str,
    name: Optional[str] = None,
    *,
    history: Optional[TranspilationHistory] = None,
) -> TranspilationRecord:
    """Transpile a cell into an async function expression.

    The generated code has the form::

        (async function __cell_<id>__(__global, __import, console) {
          ... cell statements, top-level bindings on __global ...
          return (last_expression);
        })//# sourceUrl=<name>
        //# sourceURL=__transpiled_source_<id>

    Raises :class:`~cellmap.transpiler.parse.CellSyntaxError` when the cell
    does not parse.
    """

    if history is None:
        history = HISTORY
    record_id = history.next_id()
    logger.debug("transpiling cell #%d (%s, %d chars)", record_id, name, len(code))

    source: MappedString = SourceFile(name, code)
    source = wrap_cell(source, record_id, name)
    source = rewrite_imports(source)
    source = rewrite_scope(source)

    url = TRANSPILED_SOURCE_TEMPLATE.format(id=record_id)
    source = source.concat(SOURCE_URL_MARKER.format(url=url))
    record = TranspilationRecord(record_id, name, source, str(source))
    return history.add(record)


def transpile(
    code: str,
    name: Optional[str] = None,
    *,
    history: Optional[TranspilationHistory] = None,
) -> str:
    """Return the transpiled code for ``code``; see :func:`transpile_cell`."""

    return transpile_cell(code, name, history=history).code


__all__ = [
    "HISTORY",
    "TranspilationHistory",
    "TranspilationRecord",
    "transpile",
    "transpile_cell",
    "wrap_cell",
]
