"""High-level API for ID set compression.

Provides compress_set() and decompress_set() functions that select a
compressor by name and dispatch decompression on the buffer's method tag.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Literal

import numpy as np

from cnk.components.buffer import MethodTag
from cnk.core.compressor import IdSetCompressor
from cnk.core.config import EngineConfig
from cnk.core.errors import CorruptStream
from cnk.core.serialization import read_header
from cnk.systems.delta import DeltaCompressor
from cnk.systems.roc import RocCompressor

logger = logging.getLogger(__name__)

Method = Literal["roc", "delta"]

# Bytes per ID in an uncompressed u32 array
RAW_ID_BYTES = 4


def get_compressor(
    method: Method | MethodTag = "roc",
    config: EngineConfig | None = None,
) -> IdSetCompressor:
    """Create the compressor for a method name or tag.

    Args:
        method: 'roc', 'delta', or a MethodTag
        config: Engine constants for ROC (process-wide cnk.toml constants if None)

    Raises:
        ValueError: If the method is unknown
    """
    if isinstance(method, str):
        try:
            method = MethodTag[method.upper()]
        except KeyError as e:
            raise ValueError(f"Unknown compression method {method!r}") from e
    if method == MethodTag.ROC:
        return RocCompressor(config=config)
    return DeltaCompressor()


def compress_set(
    ids: Sequence[int] | np.ndarray,
    universe_size: int,
    method: Method = "roc",
    config: EngineConfig | None = None,
) -> bytes:
    """Compress a sorted, duplicate-free ID set to bytes.

    Args:
        ids: Strictly increasing IDs, each below universe_size
        universe_size: Universe size N (>= 1)
        method: 'roc' (near-optimal) or 'delta' (varint gaps)
        config: Engine constants for ROC (process-wide cnk.toml constants if None)

    Returns:
        Compressed buffer

    Raises:
        InvalidInput: If ids or universe_size violate the preconditions

    Example:
        >>> from cnk import compress_set, decompress_set
        >>> data = compress_set([1, 5, 10, 20, 50], 1000)
        >>> decompress_set(data, 1000)
        [1, 5, 10, 20, 50]
    """
    return get_compressor(method, config).compress_set(ids, universe_size)


def decompress_set(
    data: bytes,
    universe_size: int,
    config: EngineConfig | None = None,
) -> list[int]:
    """Decompress a buffer from any supported method.

    Args:
        data: Compressed buffer
        universe_size: Universe size N used at compression
        config: Engine constants for ROC; must match those used to compress

    Returns:
        Ascending list of IDs

    Raises:
        InvalidInput: If universe_size does not match the buffer
        CorruptStream: If the buffer is truncated, damaged or of unknown type
    """
    if len(data) == 0:
        raise CorruptStream("Compressed data is empty")
    try:
        method = MethodTag(data[0])
    except ValueError as e:
        raise CorruptStream(f"Unknown method tag {data[0]}") from e
    logger.debug("Dispatching %d-byte buffer to %s", len(data), method.name)
    return get_compressor(method, config).decompress_set(data, universe_size)


def get_compression_info(data: bytes) -> dict[str, Any]:
    """Get header fields of a compressed buffer without decoding it.

    Returns:
        Dictionary with keys: method, num_ids, universe_size, payload_bytes

    Raises:
        CorruptStream: If the header is invalid
    """
    header, offset = read_header(bytes(data))
    return {
        "method": header.method.name.lower(),
        "num_ids": header.num_ids,
        "universe_size": header.universe_size,
        "payload_bytes": len(data) - offset,
    }


def get_compression_ratio(
    ids: Sequence[int] | np.ndarray,
    compressed_data: bytes,
) -> float:
    """Calculate compression ratio against a raw u32 array.

    Returns:
        Compression ratio (original_size / compressed_size)
    """
    original_bytes = len(ids) * RAW_ID_BYTES
    compressed_bytes = len(compressed_data)
    return original_bytes / compressed_bytes if compressed_bytes > 0 else float("inf")
