"""Tests for buffer header components."""

import pytest
from pydantic import ValidationError

from cnk.components.buffer import BufferHeader, MethodTag


class TestMethodTag:
    """Test method tag values."""

    def test_values(self):
        """Test tags are the first byte of each buffer type."""
        assert MethodTag.DELTA == 1
        assert MethodTag.ROC == 2

    def test_from_byte(self):
        assert MethodTag(2) is MethodTag.ROC
        with pytest.raises(ValueError):
            MethodTag(0)


class TestBufferHeader:
    """Test BufferHeader validation."""

    def test_roc_header(self):
        header = BufferHeader(method=MethodTag.ROC, num_ids=5, universe_size=1000)
        assert header.method is MethodTag.ROC
        assert header.num_ids == 5
        assert header.universe_size == 1000

    def test_delta_header_has_no_universe(self):
        header = BufferHeader(method=MethodTag.DELTA, num_ids=0)
        assert header.universe_size is None

    def test_method_from_int(self):
        """Test integer tags are coerced to MethodTag."""
        header = BufferHeader(method=1, num_ids=3)
        assert header.method is MethodTag.DELTA

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"method": MethodTag.ROC, "num_ids": -1, "universe_size": 10},
            {"method": MethodTag.ROC, "num_ids": 1, "universe_size": 0},
            {"method": 9, "num_ids": 1},
        ],
    )
    def test_invalid(self, kwargs: dict):
        with pytest.raises(ValidationError):
            BufferHeader(**kwargs)

    def test_frozen(self):
        header = BufferHeader(method=MethodTag.DELTA, num_ids=1)
        with pytest.raises(ValidationError):
            header.num_ids = 2  # type: ignore[misc]
