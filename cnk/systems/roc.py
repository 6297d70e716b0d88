"""Random Order Coding (ROC) compressor for sets of IDs.

A set of ``n`` IDs from ``[0, N)`` is one of ``C(N, n)`` possibilities, so
it needs ``log2(C(N, n))`` bits, about ``log2(n!)`` fewer than a sequence
code that pays for an order the set does not have. ROC reaches that bound
by coding the occupancy of every universe slot under its exact
hypergeometric probability with rANS (see ``cnk.systems.rank``). Forced
slots cost nothing and no ordering choice is ever coded, so no bits need
to be reclaimed after the fact.

Based on "Compressing multisets with large alphabets" (Severo et al., 2022).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import numpy as np

from cnk.components.buffer import BufferHeader, MethodTag
from cnk.core.arith import log2_binomial
from cnk.core.compressor import IdSetCompressor, validate_ids, validate_universe
from cnk.core.config import EngineConfig, get_process_config, load_engine_config
from cnk.core.errors import CorruptStream, InvalidInput
from cnk.core.serialization import read_header, varint_len, write_header
from cnk.systems.ans import AnsDecoder, AnsEncoder
from cnk.systems.rank import RankModel

logger = logging.getLogger(__name__)


class RocCompressor(IdSetCompressor):
    """Near-optimal set compressor using rANS over slot occupancy.

    Encoder and decoder must use the same ``EngineConfig``; it is not stored
    in the buffer.

    Attributes:
        config: Engine precision constants
        model: Occupancy model driving the ANS coder

    Example:
        >>> compressor = RocCompressor()
        >>> data = compressor.compress_set([1, 5, 10, 20, 50], 1000)
        >>> compressor.decompress_set(data, 1000)
        [1, 5, 10, 20, 50]
    """

    method = MethodTag.ROC

    def __init__(
        self,
        config: EngineConfig | None = None,
        config_path: str | None = None,
    ) -> None:
        """Initialize ROC compressor.

        Args:
            config: Engine constants; loaded from config_path if None
            config_path: Path to cnk.toml; if both are None the constants
                auto-detected at first use are shared for the whole process
        """
        if config is not None:
            self.config = config
        elif config_path is not None:
            self.config = load_engine_config(config_path)
        else:
            self.config = get_process_config()
        self.model = RankModel(self.config)

    @classmethod
    def with_precision(cls, precision: int) -> RocCompressor:
        """Create a compressor with a custom probability precision.

        Args:
            precision: Quantization denominator, a power of two

        Raises:
            ValueError: If precision is not a power of two the engine supports
        """
        if precision < 2 or precision & (precision - 1):
            raise ValueError(f"precision must be a power of two >= 2, got {precision}")
        return cls(config=EngineConfig(precision_bits=precision.bit_length() - 1))

    def compress_set(self, ids: Sequence[int] | np.ndarray, universe_size: int) -> bytes:
        """Compress a sorted, duplicate-free ID set.

        Args:
            ids: Strictly increasing IDs, each below universe_size
            universe_size: Universe size N (>= 1)

        Returns:
            Header, final coder state and word stream

        Raises:
            InvalidInput: If ids or universe_size violate the preconditions
        """
        id_list = validate_ids(ids, universe_size)
        universe_size = int(universe_size)
        if universe_size > self.config.total:
            # Occupied frequency is floored at 1, so every empty slot overpays
            logger.warning(
                "Universe size %d exceeds probability total 2**%d; "
                "size will exceed log2(C(N, n)) by more than a constant",
                universe_size, self.config.precision_bits,
            )

        encoder = AnsEncoder(self.config)
        self.model.encode(encoder, id_list, universe_size)

        header = BufferHeader(
            method=self.method, num_ids=len(id_list), universe_size=universe_size
        )
        buf = write_header(header)
        buf += encoder.to_bytes()

        logger.debug(
            "ROC compressed %d IDs (N=%d) to %d bytes, %d words",
            len(id_list), universe_size, len(buf), len(encoder.words),
        )
        return bytes(buf)

    def decompress_set(self, data: bytes, universe_size: int) -> list[int]:
        """Decompress a ROC buffer.

        Args:
            data: Buffer from ``compress_set``
            universe_size: Universe size N used at compression

        Returns:
            Ascending list of IDs

        Raises:
            InvalidInput: If universe_size does not match the header
            CorruptStream: If the buffer is truncated, damaged, or was not
                produced by ROC with the same engine config
        """
        universe_size = validate_universe(universe_size)
        header, offset = read_header(bytes(data))
        if header.method != self.method:
            raise CorruptStream(f"Expected a {self.method.name} buffer, got {header.method.name}")
        if header.universe_size != universe_size:
            raise InvalidInput(
                f"Universe size {universe_size} does not match the buffer's "
                f"{header.universe_size}"
            )

        decoder = AnsDecoder.from_bytes(bytes(data[offset:]), self.config)
        ids = self.model.decode(decoder, header.num_ids, universe_size)
        decoder.check_drained()

        logger.debug("ROC decompressed %d IDs (N=%d)", len(ids), universe_size)
        return ids

    def estimate_size(self, num_ids: int, universe_size: int) -> int:
        """Predict the buffer length from the information-theoretic bound.

        Adds the header, the flushed state and the word rounding to
        ``log2(C(N, n))`` bits.
        """
        if num_ids < 0 or num_ids > universe_size:
            raise InvalidInput(
                f"Cannot place {num_ids} IDs in a universe of {universe_size}"
            )
        header_bytes = 1 + varint_len(num_ids) + varint_len(universe_size)
        state_bytes = self.config.state_bits // 8
        bits = log2_binomial(universe_size, num_ids)
        word_bytes = self.config.word_bytes * math.ceil(bits / self.config.word_bits)
        return header_bytes + state_bytes + word_bytes

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(precision_bits={self.config.precision_bits})"
