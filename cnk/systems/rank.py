"""Occupancy model for sets drawn from a known universe.

A set of ``n`` IDs from ``[0, N)`` is coded as ``N`` occupancy bits. When
the decoder reaches slot ``i`` it has ``slots = N - i`` slots left and
``members`` IDs still to place, so the slot is occupied with probability
``members / slots``. Coding each bit under that probability spends
``log2(C(N, n))`` bits in total and nothing on the order of the members.

The decoder scans slots ascending, so the LIFO encoder scans them
descending. At slot ``i`` the encoder knows ``members`` as the number of
IDs ``>= i``, which is exactly what the ascending decoder will have left.

Forced slots (no members left, or as many members as slots) carry no
information. They all sit at the start of the descending walk, above the
largest ID or inside a fully occupied suffix, so the walk can jump over
them without changing the coded bytes.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from cnk.core.arith import StepProbability, quantize_probability, step_probability
from cnk.core.config import DEFAULT_CONFIG, EngineConfig
from cnk.core.errors import CorruptStream
from cnk.systems.ans import AnsDecoder, AnsEncoder


def occupancy_steps(
    ids: Sequence[int],
    universe_size: int,
    skip_forced: bool = False,
) -> Iterator[tuple[int, bool, StepProbability]]:
    """Yield ``(slot, occupied, probability)`` from slot N-1 down to 0.

    Args:
        ids: Strictly increasing IDs below universe_size
        universe_size: Universe size N
        skip_forced: Omit the zero-cost steps at the top of the universe

    Example:
        >>> [(s, o, tuple(p)) for s, o, p in occupancy_steps([1], 3)]
        [(2, False, (0, 1)), (1, True, (1, 2)), (0, False, (1, 3))]
    """
    k = len(ids) - 1
    members = 0
    top = universe_size - 1
    if skip_forced:
        # Fully occupied suffix
        while k >= 0 and ids[k] == top:
            k -= 1
            members += 1
            top -= 1
        # Empty slots above the largest ID
        if members == 0:
            top = ids[k] if k >= 0 else -1

    for slot in range(top, -1, -1):
        occupied = k >= 0 and ids[k] == slot
        if occupied:
            k -= 1
            members += 1
        yield slot, occupied, step_probability(universe_size - slot, members)


class RankModel:
    """Maps occupancy decisions to ANS symbol intervals.

    The "occupied" symbol owns ``[0, f)`` and "empty" owns ``[f, total)``,
    where ``f`` is the quantized step probability.

    Attributes:
        config: Engine precision constants shared with the ANS coder
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def symbol_interval(self, occupied: bool, freq_occupied: int) -> tuple[int, int]:
        """Return ``(start, freq)`` of the symbol for one slot."""
        if occupied:
            return 0, freq_occupied
        return freq_occupied, self.config.total - freq_occupied

    def encode(self, encoder: AnsEncoder, ids: Sequence[int], universe_size: int) -> None:
        """Encode the occupancy bits of ``ids`` in descending slot order.

        Args:
            encoder: Fresh encoder built with the same config
            ids: Validated, strictly increasing IDs
            universe_size: Universe size N
        """
        precision = self.config.precision_bits
        for _, occupied, prob in occupancy_steps(
            ids, universe_size, skip_forced=self.config.skip_forced_slots
        ):
            freq_occupied = quantize_probability(prob, precision)
            start, freq = self.symbol_interval(occupied, freq_occupied)
            encoder.encode(start, freq)

    def decode(self, decoder: AnsDecoder, num_ids: int, universe_size: int) -> list[int]:
        """Decode occupancy bits in ascending slot order.

        Args:
            decoder: Decoder seeded from the encoder's final state
            num_ids: Number of IDs in the set (n)
            universe_size: Universe size N

        Returns:
            Ascending list of decoded IDs

        Raises:
            CorruptStream: If the bits do not place exactly ``num_ids`` IDs
        """
        precision = self.config.precision_bits
        skip_forced = self.config.skip_forced_slots
        ids: list[int] = []
        members = num_ids
        for slot in range(universe_size):
            slots = universe_size - slot
            if skip_forced:
                if members == 0:
                    break
                if members == slots:
                    ids.extend(range(slot, universe_size))
                    members = 0
                    break
            freq_occupied = quantize_probability(step_probability(slots, members), precision)
            occupied = decoder.peek() < freq_occupied
            start, freq = self.symbol_interval(occupied, freq_occupied)
            decoder.advance(start, freq)
            if occupied:
                ids.append(slot)
                members -= 1

        if members != 0:
            raise CorruptStream(
                f"Scan ended with {members} of {num_ids} IDs unplaced"
            )
        return ids
