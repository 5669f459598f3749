"""
Tests for the byte offset helpers shared by parser, extractor and patcher.
"""

import pytest

from page_text_backend.core.offsets import (
    ByteOffsetIndex,
    byte_length,
    bytes_match,
    decode_slice,
    find_open_tag_end,
    line_number_at,
    splice_bytes,
)


class TestByteOffsetIndex:
    """Tests for character index to byte offset translation."""

    def test_ascii_offsets_equal_character_indexes(self):
        index = ByteOffsetIndex("hello")
        assert index.byte_offset(0) == 0
        assert index.byte_offset(3) == 3
        assert index.byte_size == 5

    def test_multibyte_characters_shift_offsets(self):
        index = ByteOffsetIndex("café 🎉!")
        # é is two bytes, the emoji four
        assert index.byte_offset(4) == 5
        assert index.byte_offset(6) == 10
        assert index.byte_size == 11

    def test_index_out_of_range(self):
        index = ByteOffsetIndex("abc")
        with pytest.raises(IndexError):
            index.byte_offset(4)
        with pytest.raises(IndexError):
            index.byte_offset(-1)


class TestByteHelpers:
    """Tests for byte length, decoding and splicing."""

    def test_byte_length(self):
        assert byte_length("abc") == 3
        assert byte_length("é") == 2
        assert byte_length("🎉") == 4

    def test_bytes_match_at_offset(self):
        source_bytes = "<p>café</p>".encode("utf-8")
        assert bytes_match(source_bytes, 3, "café")
        assert not bytes_match(source_bytes, 2, "café")
        assert not bytes_match(source_bytes, -1, "café")

    def test_slice_through_multibyte_character_never_matches(self):
        source_bytes = "é".encode("utf-8")
        assert decode_slice(source_bytes, 0, 1) != "é"
        assert not bytes_match(source_bytes, 1, "©")

    def test_splice_bytes_changes_length(self):
        buffer = bytearray(b"<h1>Hi</h1>")
        splice_bytes(buffer, 4, 2, "Héllo")
        assert buffer.decode("utf-8") == "<h1>Héllo</h1>"

    def test_line_number_at(self):
        source = "a\nb\nc"
        assert line_number_at(source, 0) == 1
        assert line_number_at(source, 2) == 2
        assert line_number_at(source, 4) == 3


class TestFindOpenTagEnd:
    """Tests for locating the end of an opening tag."""

    def test_plain_tag(self):
        assert find_open_tag_end(b"<h2></h2>", 0) == 4

    def test_ignores_gt_in_quotes_and_expressions(self):
        tag = '<a title="x>y" data={a > b}>'
        source_bytes = (tag + "text</a>").encode("utf-8")
        assert find_open_tag_end(source_bytes, 0) == len(tag)

    def test_multibyte_attribute_value(self):
        tag = '<p title="café 🎉">'
        source_bytes = (tag + "</p>").encode("utf-8")
        assert find_open_tag_end(source_bytes, 0) == len(tag.encode("utf-8"))

    def test_starts_at_offset(self):
        source_bytes = b"<div><p>Hi</p></div>"
        assert find_open_tag_end(source_bytes, 5) == 8

    def test_window_exhausted(self):
        assert find_open_tag_end(b'<div class="long">', 0, window=5) is None

    def test_unterminated_tag(self):
        assert find_open_tag_end(b"<div class", 0) is None
