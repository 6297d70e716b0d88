"""Tests for buffer serialization."""

from __future__ import annotations

import pytest

from cnk.components.buffer import BufferHeader, MethodTag
from cnk.core.errors import CorruptStream
from cnk.core.serialization import (
    decode_varint,
    encode_varint,
    pack_words,
    read_header,
    unpack_words,
    varint_len,
    write_header,
)


def varint(value: int) -> bytes:
    buf = bytearray()
    encode_varint(value, buf)
    return bytes(buf)


class TestVarint:
    """Test LEB128 varints."""

    @pytest.mark.parametrize(
        "value,encoded",
        [
            (0, b"\x00"),
            (1, b"\x01"),
            (127, b"\x7f"),
            (128, b"\x80\x01"),
            (300, b"\xac\x02"),
            (16384, b"\x80\x80\x01"),
        ],
    )
    def test_known_encodings(self, value: int, encoded: bytes):
        assert varint(value) == encoded
        assert varint_len(value) == len(encoded)
        assert decode_varint(encoded) == (value, len(encoded))

    def test_large_value(self):
        """Test a 64-bit value fits in ten bytes."""
        value = (1 << 64) - 1
        encoded = varint(value)
        assert len(encoded) == 10
        assert decode_varint(encoded) == (value, 10)

    def test_decode_at_offset(self):
        """Test decoding from the middle of a buffer."""
        data = b"\xff" + varint(300) + b"\x05"
        assert decode_varint(data, 1) == (300, 3)
        assert decode_varint(data, 3) == (5, 4)

    def test_negative(self):
        with pytest.raises(ValueError, match="non-negative"):
            varint(-1)

    def test_truncated(self):
        """Test a continuation bit at the end of data raises."""
        with pytest.raises(CorruptStream, match="Unexpected end"):
            decode_varint(b"\x80\x80")

    def test_too_long(self):
        """Test runaway continuation bits raise."""
        with pytest.raises(CorruptStream, match="Varint longer"):
            decode_varint(b"\x80" * 11)


class TestHeader:
    """Test header encoding and parsing."""

    def test_roc_header(self):
        """Test ROC headers carry n and N."""
        header = BufferHeader(method=MethodTag.ROC, num_ids=5, universe_size=1000)
        buf = write_header(header)
        assert bytes(buf) == b"\x02\x05\xe8\x07"
        assert read_header(bytes(buf) + b"payload") == (header, 4)

    def test_delta_header(self):
        """Test delta headers carry only n."""
        header = BufferHeader(method=MethodTag.DELTA, num_ids=3)
        buf = write_header(header)
        assert bytes(buf) == b"\x01\x03"
        parsed, offset = read_header(bytes(buf))
        assert parsed.universe_size is None
        assert offset == 2

    def test_roc_header_requires_universe(self):
        with pytest.raises(ValueError, match="universe_size"):
            write_header(BufferHeader(method=MethodTag.ROC, num_ids=1))

    @pytest.mark.parametrize(
        "data,match",
        [
            (b"", "empty"),
            (b"\x07\x00", "Unknown method tag"),
            (b"\x02", "Unexpected end"),
            (b"\x02\x01", "Unexpected end"),
            (b"\x02\x00\x00", "universe size is zero"),
            (b"\x02\x0b\x0a", "11 IDs in a universe of 10"),
        ],
    )
    def test_invalid_headers(self, data: bytes, match: str):
        with pytest.raises(CorruptStream, match=match):
            read_header(data)


class TestWords:
    """Test little-endian word packing."""

    def test_pack_little_endian(self):
        assert pack_words([0x01020304], 32) == b"\x04\x03\x02\x01"
        assert pack_words([0x0102, 0xFFFF], 16) == b"\x02\x01\xff\xff"
        assert pack_words([7, 255], 8) == b"\x07\xff"

    @pytest.mark.parametrize("word_bits", [8, 16, 32])
    def test_unpack_reverses_pack(self, word_bits: int):
        words = [0, 1, (1 << word_bits) - 1, 1 << (word_bits - 1)]
        assert unpack_words(pack_words(words, word_bits), word_bits) == words

    def test_unpack_returns_python_ints(self):
        words = unpack_words(b"\x01\x00\x00\x00", 32)
        assert words == [1]
        assert type(words[0]) is int

    def test_partial_word(self):
        with pytest.raises(CorruptStream, match="not a multiple"):
            unpack_words(b"\x01\x02\x03", 32)

    def test_empty(self):
        assert pack_words([], 32) == b""
        assert unpack_words(b"", 32) == []
