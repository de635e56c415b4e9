"""Tests for base-32 / base-64 symbol encodings."""

import pytest

from geohash_sweep.codec.text import BASE32, BASE64, decode_groups, encode_groups
from geohash_sweep.errors import DecodeError


def test_alphabets_have_expected_shape() -> None:
    """Both alphabets should hold 2 ** bits unique symbols and skip ambiguous letters."""
    assert len(BASE32.symbols) == 32
    assert len(BASE64.symbols) == 64
    assert "l" not in BASE64.symbols
    assert "O" not in BASE64.symbols
    assert BASE64.symbols.endswith("_=~+")
    for letter in "ailo":
        assert letter not in BASE32.symbols


def test_partial_group_carries_leftover_bits_high() -> None:
    """Seven bits should become one full symbol plus a two-bit suffix."""
    key = 0b1011011 << 57
    assert encode_groups(key, 7, 64, BASE32) == "q.2s"
    assert decode_groups("q.2s", BASE32) == (0b1011011, 7)


def test_whole_symbols_have_no_suffix() -> None:
    """Precisions that are a multiple of the symbol width encode without a dot."""
    key = 0b10110_00001 << 54
    assert encode_groups(key, 10, 64, BASE32) == "q1"
    assert decode_groups("q1", BASE32) == (0b1011000001, 10)
    assert encode_groups(0, 0, 64, BASE32) == ""


def test_round_trip_for_every_leftover_count() -> None:
    """Every partial-group size should survive an encode/decode round trip."""
    value = 0b101101110001011
    for precision in range(1, 15):
        bits = value >> (15 - precision)
        text = encode_groups(bits << (128 - precision), precision, 128, BASE64)
        assert decode_groups(text, BASE64) == (bits, precision)


def test_unknown_symbols_are_rejected() -> None:
    """Characters outside the alphabet should raise DecodeError."""
    with pytest.raises(DecodeError):
        decode_groups("u4pa", BASE32)
    with pytest.raises(DecodeError):
        decode_groups("O", BASE64)


def test_malformed_suffixes_are_rejected() -> None:
    """Suffixes must be a bit count below the symbol width and a clean symbol."""
    with pytest.raises(DecodeError, match="malformed"):
        decode_groups("q.2", BASE32)
    with pytest.raises(DecodeError, match="carry"):
        decode_groups("q.9s", BASE32)
    with pytest.raises(DecodeError, match="beyond"):
        decode_groups("q.2t", BASE32)
