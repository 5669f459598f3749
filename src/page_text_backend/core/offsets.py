"""
Byte Offset Utilities

Helpers shared by the template parser, the field extractor and the patch
applier. All positions exchanged between those components are UTF-8 byte
offsets, never character indexes: a field found in ``"café 🎉"`` must point
at the same bytes whichever side computes it.

Key Components:
- ByteOffsetIndex: character index to byte offset translation for one source
- byte_length / decode_slice: byte arithmetic on encoded sources
- find_open_tag_end: locate the end of an opening tag in raw bytes
- splice_bytes: replace a byte range inside a buffer
"""

from itertools import accumulate
from typing import List, Optional

DEFAULT_OPEN_TAG_WINDOW = 2000
DEFAULT_SEARCH_WINDOW = 200

_QUOTES = (ord('"'), ord("'"))
_OPEN_BRACE = ord("{")
_CLOSE_BRACE = ord("}")
_TAG_CLOSE = ord(">")


def _utf8_width(ch: str) -> int:
    code = ord(ch)
    if code < 0x80:
        return 1
    if code < 0x800:
        return 2
    if code < 0x10000:
        return 3
    return 4


class ByteOffsetIndex:
    """
    Translate character indexes of a decoded source into UTF-8 byte offsets.

    Built once per source in O(n). Pure ASCII sources skip the table since
    character and byte offsets coincide.

    Example:
        >>> index = ByteOffsetIndex("café!")
        >>> index.byte_offset(4)
        5
    """

    def __init__(self, text: str) -> None:
        self._length = len(text)
        self._offsets: Optional[List[int]] = None
        if not text.isascii():
            self._offsets = list(accumulate((_utf8_width(ch) for ch in text), initial=0))

    def byte_offset(self, char_index: int) -> int:
        """Return the byte offset of the character at ``char_index``."""
        if char_index < 0 or char_index > self._length:
            raise IndexError(f"Character index {char_index} outside source of length {self._length}")
        if self._offsets is None:
            return char_index
        return self._offsets[char_index]

    @property
    def byte_size(self) -> int:
        """Total encoded size of the source in bytes."""
        return self.byte_offset(self._length)


def byte_length(text: str) -> int:
    """Length of ``text`` once encoded as UTF-8."""
    return len(text.encode("utf-8"))


def decode_slice(source_bytes: bytes, offset: int, length: int) -> str:
    """
    Decode ``source_bytes[offset:offset + length]``.

    A range that cuts through a multi-byte character decodes with
    replacement characters, so it can never compare equal to real text.
    """
    return source_bytes[offset:offset + length].decode("utf-8", errors="replace")


def bytes_match(source_bytes: bytes, offset: int, text: str) -> bool:
    """True if the bytes at ``offset`` decode to exactly ``text``."""
    if offset < 0:
        return False
    return decode_slice(source_bytes, offset, byte_length(text)) == text


def find_open_tag_end(
    source_bytes: bytes,
    start_offset: int,
    window: int = DEFAULT_OPEN_TAG_WINDOW
) -> Optional[int]:
    """
    Find the byte offset right after an opening tag's closing ``>``.

    Scans at most ``window`` bytes from ``start_offset``, skipping ``>``
    characters inside quoted strings and inside ``{...}`` expression regions.
    Quotes, braces and ``>`` are ASCII and UTF-8 continuation bytes never
    fall in the ASCII range, so scanning the raw bytes visits exactly the
    same structural characters as scanning the decoded text.

    Args:
        source_bytes: UTF-8 encoded source
        start_offset: Byte offset of the tag's ``<``
        window: Maximum number of bytes to inspect

    Returns:
        Byte offset just past ``>``, or None if no closing ``>`` was found
        inside the window
    """
    end = min(start_offset + window, len(source_bytes))
    in_quote: Optional[int] = None
    brace_depth = 0

    for i in range(start_offset, end):
        byte = source_bytes[i]
        if in_quote is not None:
            if byte == in_quote:
                in_quote = None
            continue
        if byte in _QUOTES:
            in_quote = byte
        elif byte == _OPEN_BRACE:
            brace_depth += 1
        elif byte == _CLOSE_BRACE:
            brace_depth = max(0, brace_depth - 1)
        elif byte == _TAG_CLOSE and brace_depth == 0:
            return i + 1

    return None


def splice_bytes(buffer: bytearray, offset: int, length: int, replacement: str) -> None:
    """Replace ``buffer[offset:offset + length]`` with the UTF-8 bytes of ``replacement``."""
    buffer[offset:offset + length] = replacement.encode("utf-8")


def line_number_at(source: str, char_index: int) -> int:
    """1-based line number of a character index."""
    return source.count("\n", 0, char_index) + 1
