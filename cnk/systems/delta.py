"""Delta (gap) encoding baseline for sorted ID sets.

Each ID is stored as a varint of its gap to the previous one, minus one
since IDs are strictly increasing. No entropy modeling: cheap and simple,
but it spends roughly a byte per ID even on dense sets.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from cnk.components.buffer import BufferHeader, MethodTag
from cnk.core.compressor import IdSetCompressor, validate_ids, validate_universe
from cnk.core.errors import CorruptStream, InvalidInput
from cnk.core.serialization import (
    decode_varint,
    encode_varint,
    read_header,
    varint_len,
    write_header,
)

logger = logging.getLogger(__name__)


class DeltaCompressor(IdSetCompressor):
    """Varint gap encoder.

    Buffer: ``[tag][n][gap_0][gap_1]...`` with ``gap_0 = ids[0]`` and
    ``gap_i = ids[i] - ids[i-1] - 1``. The universe size is not stored; it
    is only used to validate the decoded IDs.
    """

    method = MethodTag.DELTA

    def compress_set(self, ids: Sequence[int] | np.ndarray, universe_size: int) -> bytes:
        id_list = validate_ids(ids, universe_size)
        buf = write_header(BufferHeader(method=self.method, num_ids=len(id_list)))
        prev = -1
        for value in id_list:
            encode_varint(value - prev - 1, buf)
            prev = value
        logger.debug("Delta compressed %d IDs to %d bytes", len(id_list), len(buf))
        return bytes(buf)

    def decompress_set(self, data: bytes, universe_size: int) -> list[int]:
        universe_size = validate_universe(universe_size)
        data = bytes(data)
        header, offset = read_header(data)
        if header.method != self.method:
            raise CorruptStream(f"Expected a {self.method.name} buffer, got {header.method.name}")
        if header.num_ids > universe_size:
            raise CorruptStream(
                f"Buffer holds {header.num_ids} IDs, more than universe size {universe_size}"
            )

        ids: list[int] = []
        prev = -1
        for _ in range(header.num_ids):
            gap, offset = decode_varint(data, offset)
            prev += gap + 1
            if prev >= universe_size:
                raise CorruptStream(f"ID {prev} exceeds universe size {universe_size}")
            ids.append(prev)

        if offset < len(data):
            raise CorruptStream(
                f"Extra data after decompression: {len(data) - offset} bytes"
            )
        return ids

    def estimate_size(self, num_ids: int, universe_size: int) -> int:
        """Predict the buffer length assuming evenly spread IDs."""
        if num_ids < 0 or num_ids > universe_size:
            raise InvalidInput(
                f"Cannot place {num_ids} IDs in a universe of {universe_size}"
            )
        header_bytes = 1 + varint_len(num_ids)
        if num_ids == 0:
            return header_bytes
        mean_gap = (universe_size - num_ids) // num_ids
        return header_bytes + num_ids * varint_len(mean_gap)
