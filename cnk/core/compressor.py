"""Base class for ID set compressors.

Every compressor turns a sorted, duplicate-free ID set drawn from a
universe ``[0, N)`` into bytes and back. Concrete compressors declare:
- method: The tag written as the first byte of their buffers
- compress_set() / decompress_set(): The codec itself
- estimate_size(): Predicted buffer length for a set of a given size

Example:
    >>> class MyCompressor(IdSetCompressor):
    ...     method = MethodTag.DELTA
    ...     def compress_set(self, ids, universe_size):
    ...         ids = validate_ids(ids, universe_size)
    ...         ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import ClassVar

import numpy as np

from cnk.components.buffer import MethodTag
from cnk.core.arith import log2_binomial
from cnk.core.errors import InvalidInput


def validate_universe(universe_size: int) -> int:
    """Check that ``universe_size`` is a positive integer.

    Raises:
        InvalidInput: If it is not
    """
    if isinstance(universe_size, (bool, np.bool_)) or not isinstance(
        universe_size, (int, np.integer)
    ):
        raise InvalidInput(f"universe_size must be an integer, got {type(universe_size)}")
    if universe_size < 1:
        raise InvalidInput(f"universe_size must be >= 1, got {universe_size}")
    return int(universe_size)


def validate_ids(ids: Sequence[int] | np.ndarray, universe_size: int) -> list[int]:
    """Check an ID set in one vectorized pass.

    Args:
        ids: Candidate IDs, any integer sequence or 1-D integer array
        universe_size: Universe size N

    Returns:
        The IDs as a list of Python ints

    Raises:
        InvalidInput: If the IDs are not integers, not strictly increasing,
            negative, or not below universe_size
    """
    universe_size = validate_universe(universe_size)
    arr = np.asarray(ids)
    if arr.size == 0:
        return []
    if arr.ndim != 1:
        raise InvalidInput(f"Expected a 1-D sequence of IDs, got shape {arr.shape}")
    if arr.dtype.kind not in "iu":
        raise InvalidInput(f"Expected integer IDs, got dtype {arr.dtype}")

    # Differences in int64 could overflow for uint64 input; compare instead
    unsorted = np.flatnonzero(arr[1:] <= arr[:-1])
    if unsorted.size:
        i = int(unsorted[0]) + 1
        raise InvalidInput(
            f"IDs must be sorted and unique, found {arr[i]} <= {arr[i - 1]}"
        )
    if arr[0] < 0:
        raise InvalidInput(f"IDs must be non-negative, found {arr[0]}")
    if arr[-1] >= universe_size:
        raise InvalidInput(f"ID {arr[-1]} exceeds universe size {universe_size}")
    return [int(v) for v in arr.tolist()]


class IdSetCompressor(ABC):
    """Base class for all ID set compressors.

    Attributes:
        method: Tag identifying buffers produced by this compressor
    """

    method: ClassVar[MethodTag]

    @abstractmethod
    def compress_set(self, ids: Sequence[int] | np.ndarray, universe_size: int) -> bytes:
        """Compress a sorted, duplicate-free ID set.

        Args:
            ids: Strictly increasing IDs, each below universe_size
            universe_size: Universe size N (>= 1)

        Returns:
            Compressed buffer

        Raises:
            InvalidInput: If ids or universe_size violate the preconditions
        """
        pass

    @abstractmethod
    def decompress_set(self, data: bytes, universe_size: int) -> list[int]:
        """Decompress a buffer produced by ``compress_set``.

        Args:
            data: Compressed buffer
            universe_size: Universe size N used at compression

        Returns:
            Ascending list of IDs

        Raises:
            InvalidInput: If universe_size does not match the buffer
            CorruptStream: If the buffer is truncated or damaged
        """
        pass

    @abstractmethod
    def estimate_size(self, num_ids: int, universe_size: int) -> int:
        """Predict the buffer length in bytes for ``num_ids`` IDs."""
        pass

    def bits_per_id(self, num_ids: int, universe_size: int) -> float:
        """Information-theoretic bits per ID, log2(C(N, n)) / n.

        Returns 0.0 for the empty set.
        """
        if num_ids == 0:
            return 0.0
        if num_ids > universe_size:
            raise InvalidInput(
                f"Cannot place {num_ids} IDs in a universe of {universe_size}"
            )
        return log2_binomial(universe_size, num_ids) / num_ids

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(method={self.method.name})"

