"""Game strings tagged with a character encoding, checked before use."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class DlCharacterSet(IntEnum):
    """Encoding tags carried by game strings."""

    UTF8 = 0
    UTF16 = 1
    ISO_8859 = 2
    SHIFT_JIS = 3
    EUC_JP = 4
    UTF32 = 5

    @property
    def codec(self) -> str:
        """Name of the Python codec for this encoding."""
        return _CODECS[self]


_CODECS = {
    DlCharacterSet.UTF8: "utf-8",
    DlCharacterSet.UTF16: "utf-16-le",
    DlCharacterSet.ISO_8859: "latin-1",
    DlCharacterSet.SHIFT_JIS: "shift_jis",
    DlCharacterSet.EUC_JP: "euc_jp",
    DlCharacterSet.UTF32: "utf-32-le",
}


def _describe(tag: int) -> str:
    try:
        return DlCharacterSet(tag).name
    except ValueError:
        return f"unknown encoding {tag}"


class EncodingError(Exception):
    """A string's encoding tag differs from the one expected."""

    def __init__(self, expected: DlCharacterSet, actual: int) -> None:
        super().__init__(
            f"DlString encoding error; expected {expected.name} but got {_describe(actual)}"
        )
        self.expected = expected
        self.actual = actual


@dataclass
class DlString:
    """Raw string bytes, the encoding tag they carry, and the encoding expected of them."""

    data: bytes
    encoding: int
    expected: DlCharacterSet

    def __post_init__(self) -> None:
        self.expected = DlCharacterSet(self.expected)
        if not 0 <= self.encoding <= 0xFF:
            raise ValueError(f"encoding tag {self.encoding} does not fit in a byte")

    def character_set(self) -> DlCharacterSet:
        """The encoding the tag names; ``ValueError`` if the tag is unknown."""
        try:
            return DlCharacterSet(self.encoding)
        except ValueError:
            raise ValueError(f"unknown encoding tag {self.encoding}") from None

    def get(self) -> bytes:
        """The raw bytes, once the tag is checked against the expected encoding."""
        if self.encoding != self.expected:
            raise EncodingError(self.expected, self.encoding)
        return self.data

    def text(self) -> str:
        """Decode the checked bytes, replacing undecodable sequences."""
        return self.get().decode(self.expected.codec, errors="replace")