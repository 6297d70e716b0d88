"""Exact arithmetic for the occupancy model.

Binomial coefficients are used for size prediction only. The step
probability is kept as an exact rational until ``quantize_probability``,
the single integer function that both the encoder and the decoder call to
turn it into an ANS frequency.
"""

from __future__ import annotations

import math
from typing import NamedTuple

# Above this many factors log2_binomial switches to log-gamma
_EXACT_LOG2_LIMIT = 4096


class StepProbability(NamedTuple):
    """Probability ``numerator / denominator`` that the current slot is occupied."""

    numerator: int
    denominator: int

    @property
    def is_impossible(self) -> bool:
        return self.numerator == 0

    @property
    def is_certain(self) -> bool:
        return self.numerator == self.denominator

    @property
    def is_forced(self) -> bool:
        """True when the outcome is known and encoding it costs nothing."""
        return self.numerator == 0 or self.numerator == self.denominator


def binomial(n: int, k: int) -> int:
    """Exact binomial coefficient C(n, k).

    Multiplies and divides alternately over the smaller of ``k`` and
    ``n - k`` so every intermediate value is itself a binomial coefficient.
    """
    if k < 0 or k > n:
        return 0
    k = min(k, n - k)
    result = 1
    for i in range(1, k + 1):
        result = result * (n - k + i) // i
    return result


def _log2_int(value: int) -> float:
    """log2 of an arbitrarily large positive integer."""
    bits = value.bit_length()
    if bits <= 53:
        return math.log2(value)
    shift = bits - 53
    return math.log2(value >> shift) + shift


def log2_binomial(n: int, k: int) -> float:
    """log2(C(n, k)), the information content of a k-subset of [0, n).

    Returns 0.0 for the trivial sets (k == 0 or k == n).

    Raises:
        ValueError: If k is outside [0, n]
    """
    if k < 0 or k > n:
        raise ValueError(f"k must be in [0, {n}], got {k}")
    k = min(k, n - k)
    if k == 0:
        return 0.0
    if k <= _EXACT_LOG2_LIMIT:
        return _log2_int(binomial(n, k))
    ln_c = math.lgamma(n + 1) - math.lgamma(k + 1) - math.lgamma(n - k + 1)
    return ln_c / math.log(2)


def step_probability(slots_remaining: int, members_remaining: int) -> StepProbability:
    """Hypergeometric probability that the next slot holds a set member.

    Args:
        slots_remaining: Universe slots not yet scanned, including this one
        members_remaining: Set members not yet placed

    Returns:
        StepProbability(members_remaining, slots_remaining)

    Raises:
        ValueError: If the counts violate 0 <= members <= slots, slots > 0
    """
    if slots_remaining <= 0:
        raise ValueError(f"slots_remaining must be positive, got {slots_remaining}")
    if not 0 <= members_remaining <= slots_remaining:
        raise ValueError(
            f"members_remaining must be in [0, {slots_remaining}], "
            f"got {members_remaining}"
        )
    return StepProbability(members_remaining, slots_remaining)


def quantize_probability(prob: StepProbability, precision_bits: int) -> int:
    """Frequency of the "occupied" symbol out of ``2**precision_bits``.

    Forced outcomes map to 0 and to the full total. Any other probability is
    floored (which keeps it below the total) and raised to at least 1 so
    both symbols stay encodable.
    """
    if prob.numerator == 0:
        return 0
    if prob.numerator == prob.denominator:
        return 1 << precision_bits
    freq = (prob.numerator << precision_bits) // prob.denominator
    return max(freq, 1)
