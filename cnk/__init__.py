"""ID set compression.

Compresses sorted, unique ID sets drawn from a known universe ``[0, N)``
where order carries no information: IVF posting lists, HNSW neighbor
lists, inverted index postings.

Compression methods:
- Delta encoding: Simple baseline, varint-encodes gaps between IDs
- ROC (Random Order Coding): rANS over slot occupancy, reaching
  log2(C(N, n)) bits instead of n * log2(N)

Quick Start:
    >>> from cnk import compress_set, decompress_set
    >>>
    >>> ids = [1, 5, 10, 20, 50]
    >>> data = compress_set(ids, universe_size=1000)
    >>> decompress_set(data, universe_size=1000)
    [1, 5, 10, 20, 50]

For more control, use a compressor directly:
    >>> from cnk import RocCompressor
    >>>
    >>> compressor = RocCompressor.with_precision(1 << 16)
    >>> data = compressor.compress_set(ids, 1000)
    >>> compressor.bits_per_id(len(ids), 1000)  # doctest: +ELLIPSIS
    8.5...

References:
- Severo et al. (2022). "Compressing multisets with large alphabets"
- Severo et al. (2025). "Lossless Compression of Vector IDs for ANN Search"
"""

__version__ = "0.1.0"

from cnk.api import (
    compress_set,
    decompress_set,
    get_compression_info,
    get_compression_ratio,
    get_compressor,
)
from cnk.components.buffer import MethodTag
from cnk.core.compressor import IdSetCompressor
from cnk.core.config import EngineConfig, get_process_config, load_engine_config
from cnk.core.errors import CompressionError, CorruptStream, InvalidInput
from cnk.systems.delta import DeltaCompressor
from cnk.systems.roc import RocCompressor

__all__ = [
    "__version__",
    "compress_set",
    "decompress_set",
    "get_compression_info",
    "get_compression_ratio",
    "get_compressor",
    "MethodTag",
    "IdSetCompressor",
    "EngineConfig",
    "load_engine_config",
    "get_process_config",
    "CompressionError",
    "CorruptStream",
    "InvalidInput",
    "DeltaCompressor",
    "RocCompressor",
]
