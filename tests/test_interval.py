"""Tests for single-axis interval halving."""

import pytest

from geohash_sweep.codec.interval import IntervalRange, bisect, choose, decode_bits, encode_scalar


def test_bisect_returns_selected_half() -> None:
    """bisect should keep the lower or upper half and recompute the midpoint."""
    start = IntervalRange.spanning(-90.0, 90.0)
    assert bisect(start, True) == IntervalRange(0.0, 45.0, 90.0)
    assert bisect(start, False) == IntervalRange(-90.0, -45.0, 0.0)


def test_choose_sends_ties_to_upper_half() -> None:
    """A value equal to the midpoint should produce a 1 bit."""
    start = IntervalRange.spanning(-180.0, 180.0)
    assert choose(start, 0.0) is True
    assert choose(start, -1e-12) is False


def test_encode_scalar_known_bits() -> None:
    """Encoding 45 degrees in latitude should walk 1, 1, 0."""
    code, final = encode_scalar(45.0, IntervalRange.spanning(-90.0, 90.0), 3)
    assert code == 0b110
    assert final == IntervalRange(45.0, 56.25, 67.5)


def test_decode_bits_replays_encoding() -> None:
    """Decoding the produced bits from scratch should reproduce the same range."""
    start = IntervalRange.spanning(-180.0, 180.0)
    for value in (-179.9, -12.345, 0.0, 10.40744, 179.99):
        code, final = encode_scalar(value, start, 24)
        assert decode_bits(code, 24, start) == final
        assert final.low <= value <= final.high


def test_negative_bit_counts_are_rejected() -> None:
    """Negative bit counts should raise ValueError."""
    start = IntervalRange.spanning(-1.0, 1.0)
    with pytest.raises(ValueError, match="non-negative"):
        encode_scalar(0.5, start, -1)
    with pytest.raises(ValueError, match="non-negative"):
        decode_bits(0, -1, start)
