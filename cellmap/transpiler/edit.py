"""Offset-addressed editing over a mapped string."""

from __future__ import annotations

from .mapped import MappedString, MappedStringLike


class EditBuffer:
    """Mutable overlay over a :class:`MappedString`.

    The buffer holds one slot per character of the source it was built from.
    Edits change slot contents but never the number of slots, so offsets
    taken from a syntax tree of the original text stay valid until
    :meth:`flush`. Ranges edited within one pass must not overlap.
    """

    def __init__(self, source: MappedStringLike):
        self._slots = MappedString.convert(source).split("")
        self._head = MappedString.EMPTY
        self._tail = MappedString.EMPTY

    def __len__(self) -> int:
        return len(self._slots)

    def _check_range(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(self._slots):
            raise IndexError(
                f"Edit range [{start}, {end}) outside buffer of {len(self._slots)} slots"
            )

    def _check_slot(self, index: int) -> None:
        if not 0 <= index < len(self._slots):
            raise IndexError(
                f"Slot {index} outside buffer of {len(self._slots)} slots"
            )

    def replace(self, start: int, end: int, text: MappedStringLike) -> None:
        """Replace original offsets ``[start, end)`` with ``text``.

        Plain text inherits the origin of the first replaced slot. An empty
        range inserts ``text`` before ``start``.
        """

        self._check_range(start, end)
        if start == end:
            self._insert_at(start, text)
            return
        self._slots[start] = MappedString.convert(
            text, self._slots[start].first_origin()
        )
        for index in range(start + 1, end):
            self._slots[index] = MappedString.EMPTY

    def _insert_at(self, index: int, text: MappedStringLike) -> None:
        if index == len(self._slots):
            self.append(text)
            return
        self._slots[index] = MappedString.convert(text).concat(self._slots[index])

    def insert_before(self, node, text: MappedStringLike) -> None:
        """Insert ``text`` right before the first character of ``node``."""

        self._check_slot(node.start)
        self._insert_at(node.start, text)

    def insert_after(self, node, text: MappedStringLike) -> None:
        """Insert ``text`` right after the last character of ``node``."""

        self._check_slot(node.end - 1)
        self._slots[node.end - 1] = self._slots[node.end - 1].concat(text)

    def prepend(self, text: MappedStringLike) -> None:
        self._head = MappedString.convert(text).concat(self._head)

    def append(self, text: MappedStringLike) -> None:
        self._tail = self._tail.concat(text)

    def flush(self) -> MappedString:
        """Concatenate every slot, in order, into a new mapped string."""

        return self._head.concat(*self._slots, self._tail)


__all__ = ["EditBuffer"]
