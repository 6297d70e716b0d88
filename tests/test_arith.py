"""Tests for the exact arithmetic helpers."""

from __future__ import annotations

import math

import pytest

from cnk.core.arith import (
    StepProbability,
    binomial,
    log2_binomial,
    quantize_probability,
    step_probability,
)


class TestBinomial:
    """Test binomial coefficients."""

    @pytest.mark.parametrize("n,k", [(0, 0), (1, 0), (1, 1), (10, 3), (52, 5), (1000, 500)])
    def test_matches_math_comb(self, n: int, k: int):
        """Test against the standard library."""
        assert binomial(n, k) == math.comb(n, k)

    def test_symmetry(self):
        """Test C(n, k) == C(n, n - k)."""
        for k in range(21):
            assert binomial(20, k) == binomial(20, 20 - k)

    @pytest.mark.parametrize("n,k", [(5, 6), (5, -1), (0, 1)])
    def test_out_of_range_is_zero(self, n: int, k: int):
        assert binomial(n, k) == 0


class TestLog2Binomial:
    """Test the information content helper."""

    def test_trivial_sets(self):
        """Test empty and full sets carry no information."""
        assert log2_binomial(1000, 0) == 0.0
        assert log2_binomial(1000, 1000) == 0.0

    @pytest.mark.parametrize("n,k", [(2, 1), (1000, 5), (1000, 500), (10**6, 100)])
    def test_exact_path(self, n: int, k: int):
        """Test against log2 of the exact coefficient."""
        assert log2_binomial(n, k) == pytest.approx(math.log2(math.comb(n, k)))

    def test_large_coefficient(self):
        """Test values too big for a float are handled."""
        # C(4000, 2000) is far beyond the float range
        expected = math.log2(math.comb(4000, 2000))
        assert log2_binomial(4000, 2000) == pytest.approx(expected)

    def test_lgamma_path(self):
        """Test the log-gamma approximation for very large k."""
        n, k = 20_000, 10_000
        exact = math.log2(math.comb(n, k))
        assert log2_binomial(n, k) == pytest.approx(exact, rel=1e-9)

    @pytest.mark.parametrize("n,k", [(10, 11), (10, -1)])
    def test_invalid_k(self, n: int, k: int):
        with pytest.raises(ValueError, match="k must be in"):
            log2_binomial(n, k)


class TestStepProbability:
    """Test the hypergeometric step probability."""

    def test_value(self):
        prob = step_probability(10, 3)
        assert prob == StepProbability(3, 10)
        assert not prob.is_forced

    def test_forced_outcomes(self):
        """Test empty and full remainders are forced."""
        empty = step_probability(7, 0)
        full = step_probability(7, 7)
        assert empty.is_impossible and empty.is_forced
        assert full.is_certain and full.is_forced

    @pytest.mark.parametrize("slots,members", [(0, 0), (-1, 0), (5, 6), (5, -1)])
    def test_invalid_counts(self, slots: int, members: int):
        with pytest.raises(ValueError):
            step_probability(slots, members)


class TestQuantizeProbability:
    """Test conversion to ANS frequencies."""

    def test_forced(self):
        """Test forced outcomes map to 0 and the full total."""
        assert quantize_probability(StepProbability(0, 9), 24) == 0
        assert quantize_probability(StepProbability(9, 9), 24) == 1 << 24

    def test_floor(self):
        """Test ordinary probabilities are floored."""
        assert quantize_probability(StepProbability(1, 3), 8) == 85
        assert quantize_probability(StepProbability(1, 2), 8) == 128
        assert quantize_probability(StepProbability(2, 3), 8) == 170

    def test_minimum_one(self):
        """Test tiny probabilities stay encodable."""
        assert quantize_probability(StepProbability(1, 10**9), 8) == 1

    def test_maximum_below_total(self):
        """Test probabilities near one leave room for the empty symbol."""
        freq = quantize_probability(StepProbability(10**9 - 1, 10**9), 8)
        assert 1 <= freq < 1 << 8

    def test_deterministic(self):
        """Test the same inputs always give the same frequency."""
        prob = StepProbability(12345, 67890)
        assert len({quantize_probability(prob, 24) for _ in range(10)}) == 1
