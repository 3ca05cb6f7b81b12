"""Character sequences that remember where every character came from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union


@dataclass(frozen=True)
class Position:
    """Origin of a character: the source file it was read from and its place."""

    file: "SourceFile"
    line: int
    column: int

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"Position({self.file.name}:{self.line}:{self.column})"


@dataclass(frozen=True)
class MappedChar:
    char: str
    origin: Optional[Position] = None

    @property
    def file(self) -> Optional["SourceFile"]:
        return self.origin.file if self.origin else None

    @property
    def line(self) -> Optional[int]:
        return self.origin.line if self.origin else None

    @property
    def column(self) -> Optional[int]:
        return self.origin.column if self.origin else None


class MappedString:
    """Immutable sequence of :class:`MappedChar`.

    Every operation returns a new instance that shares the underlying
    ``MappedChar`` records, so origins are never copied or re-tagged.
    Equality is identity: two strings with the same text may still carry
    different origins.
    """

    __slots__ = ("_chars",)

    EMPTY: "MappedString"

    def __init__(
        self,
        chars: Union[str, Iterable[MappedChar]] = (),
        origin: Optional[Position] = None,
    ):
        if isinstance(chars, str):
            self._chars = tuple(MappedChar(c, origin) for c in chars)
        else:
            self._chars = tuple(chars)

    @classmethod
    def convert(
        cls, value: "MappedStringLike", origin: Optional[Position] = None
    ) -> "MappedString":
        """Coerce ``value`` to a mapped string.

        Mapped strings are returned unchanged; plain text is tagged with
        ``origin``; any other iterable is taken to hold ``MappedChar`` items.
        """

        if isinstance(value, MappedString):
            return value
        if isinstance(value, str):
            return MappedString(value, origin)
        return MappedString(value)

    def concat(self, *parts: "MappedStringLike") -> "MappedString":
        chars = list(self._chars)
        for part in parts:
            chars.extend(MappedString.convert(part)._chars)
        return MappedString(chars)

    def slice(self, start: int = 0, end: Optional[int] = None) -> "MappedString":
        return MappedString(self._chars[start:end])

    def split(self, separator: str = "") -> list["MappedString"]:
        """Split into pieces.

        An empty separator yields one single-character string per character.
        Otherwise ``separator`` is matched literally, like :meth:`str.split`.
        """

        if separator == "":
            return [MappedString((c,)) for c in self._chars]

        text = str(self)
        pieces = []
        start = 0
        while True:
            found = text.find(separator, start)
            if found < 0:
                break
            pieces.append(self.slice(start, found))
            start = found + len(separator)
        pieces.append(self.slice(start))
        return pieces

    def first_origin(self) -> Optional[Position]:
        """Origin of the first character, if the string is non-empty."""

        return self._chars[0].origin if self._chars else None

    def __len__(self) -> int:
        return len(self._chars)

    def __iter__(self) -> Iterator[MappedChar]:
        return iter(self._chars)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return MappedString(self._chars[index])
        return self._chars[index]

    def __str__(self) -> str:
        return "".join(c.char for c in self._chars)

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"{type(self).__name__}({str(self)!r})"


MappedString.EMPTY = MappedString()


class SourceFile(MappedString):
    """Mapped string read from a named source.

    Each character's origin points back at this very instance, which is how
    a character is later recognised as user text no matter how many edit
    passes moved it around.
    """

    __slots__ = ("name", "text")

    def __init__(self, name: Optional[str], text: str):
        self.name = name
        self.text = text
        chars = []
        line = 0
        column = 0
        for char in text:
            chars.append(MappedChar(char, Position(self, line, column)))
            if char == "\n":
                line += 1
                column = 0
            else:
                column += 1
        super().__init__(chars)

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"SourceFile({self.name!r}, {len(self)} chars)"


MappedStringLike = Union[str, MappedString, Iterable[MappedChar]]


__all__ = [
    "MappedChar",
    "MappedString",
    "MappedStringLike",
    "Position",
    "SourceFile",
]
