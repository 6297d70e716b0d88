"""Buffer serialization helpers.

Buffer layout (ROC):
  [method tag : 1 byte]
  [n          : varint]
  [N          : varint]
  [payload    : engine words, see cnk.systems.ans]

Buffer layout (delta):
  [method tag : 1 byte]
  [n          : varint]
  [gaps       : n varints]

Varints are LEB128: 7 bits per byte, least significant group first, high
bit set on every byte but the last.
"""

from __future__ import annotations

import numpy as np

from cnk.components.buffer import BufferHeader, MethodTag
from cnk.core.errors import CorruptStream

# A 64-bit value never needs more than 10 varint bytes
MAX_VARINT_BYTES = 10

# Little-endian word dtypes by word width
WORD_DTYPES = {8: np.dtype("<u1"), 16: np.dtype("<u2"), 32: np.dtype("<u4")}


def encode_varint(value: int, buf: bytearray) -> None:
    """Append ``value`` to ``buf`` as a varint.

    Raises:
        ValueError: If value is negative
    """
    if value < 0:
        raise ValueError(f"varint value must be non-negative, got {value}")
    while value >= 0x80:
        buf.append((value & 0x7F) | 0x80)
        value >>= 7
    buf.append(value)


def varint_len(value: int) -> int:
    """Number of bytes ``encode_varint`` writes for ``value``."""
    return max(1, (value.bit_length() + 6) // 7)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint starting at ``offset``.

    Returns:
        Tuple of (value, offset just past the varint)

    Raises:
        CorruptStream: If the data ends mid-varint or the varint is too long
    """
    value = 0
    shift = 0
    for _ in range(MAX_VARINT_BYTES):
        if offset >= len(data):
            raise CorruptStream("Unexpected end of compressed data")
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, offset
        shift += 7
    raise CorruptStream(f"Varint longer than {MAX_VARINT_BYTES} bytes")


def write_header(header: BufferHeader) -> bytearray:
    """Serialize a header; the payload is appended by the caller."""
    buf = bytearray([int(header.method)])
    encode_varint(header.num_ids, buf)
    if header.method == MethodTag.ROC:
        if header.universe_size is None:
            raise ValueError("ROC header requires universe_size")
        encode_varint(header.universe_size, buf)
    return buf


def read_header(data: bytes) -> tuple[BufferHeader, int]:
    """Parse the header at the start of ``data``.

    Returns:
        Tuple of (header, offset of the payload)

    Raises:
        CorruptStream: If the header is missing, truncated or inconsistent
    """
    if len(data) == 0:
        raise CorruptStream("Compressed data is empty")
    try:
        method = MethodTag(data[0])
    except ValueError as e:
        raise CorruptStream(f"Unknown method tag {data[0]}") from e

    num_ids, offset = decode_varint(data, 1)
    universe_size = None
    if method == MethodTag.ROC:
        universe_size, offset = decode_varint(data, offset)
        if universe_size == 0:
            raise CorruptStream("Header universe size is zero")
        if num_ids > universe_size:
            raise CorruptStream(
                f"Header claims {num_ids} IDs in a universe of {universe_size}"
            )

    header = BufferHeader(method=method, num_ids=num_ids, universe_size=universe_size)
    return header, offset


def pack_words(words: list[int], word_bits: int) -> bytes:
    """Pack unsigned words into little-endian bytes."""
    return np.asarray(words, dtype=WORD_DTYPES[word_bits]).tobytes()


def unpack_words(data: bytes, word_bits: int) -> list[int]:
    """Unpack little-endian bytes into words.

    Raises:
        CorruptStream: If ``data`` is not a whole number of words
    """
    dtype = WORD_DTYPES[word_bits]
    if len(data) % dtype.itemsize:
        raise CorruptStream(
            f"Word stream of {len(data)} bytes is not a multiple of "
            f"{dtype.itemsize}-byte words"
        )
    return np.frombuffer(data, dtype=dtype).tolist()
