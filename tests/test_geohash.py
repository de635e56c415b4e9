"""Tests for two-axis geohash cells."""

import pytest

from geohash_sweep.contracts import Point
from geohash_sweep.errors import AddressingError, ConstructionError, DecodeError
from geohash_sweep.hashing.geohash import GeoHash, axis_precisions

LAT = 57.64911
LON = 10.40744


def test_known_base32_value() -> None:
    """The classic Jutland sample point should encode to u4pruydqqvj."""
    cell = GeoHash.with_character_precision(LAT, LON, 11)
    assert cell.to_base32() == "u4pruydqqvj"
    assert cell.significant_bits == 55
    assert cell.character_precision == 11


def test_decoded_cell_contains_source_point() -> None:
    """Decoding base-32 text should give a box around the original point."""
    cell = GeoHash.from_base32("u4pruydqqvj")
    assert cell.bounding_box.contains(Point(LAT, LON))
    assert cell.contains(Point(LAT, LON))


def test_known_center() -> None:
    """ezs42 should decode near (42.605, -5.603)."""
    center = GeoHash.from_base32("ezs42").center
    assert center.latitude == pytest.approx(42.605, abs=1e-3)
    assert center.longitude == pytest.approx(-5.603, abs=1e-3)


def test_prefix_hierarchy() -> None:
    """A coarser cell should be the bit-prefix of every finer cell of the same point."""
    finest = GeoHash.with_bit_precision(LAT, LON, 64)
    for precision in range(0, 65):
        cell = GeoHash.with_bit_precision(LAT, LON, precision)
        assert finest.is_within(cell)
        assert finest.to_binary_string().startswith(cell.to_binary_string())
    assert not GeoHash.with_bit_precision(LAT, LON, 10).is_within(finest)


def test_text_and_binary_round_trips() -> None:
    """Base-32 (including partial groups) and binary forms should round trip."""
    for precision in (0, 1, 4, 5, 12, 35, 60, 63, 64):
        cell = GeoHash.with_bit_precision(-33.8688, 151.2093, precision)
        assert GeoHash.from_base32(cell.to_base32()) == cell
        assert GeoHash.from_binary_string(cell.to_binary_string()) == cell
        assert len(cell.to_binary_string()) == precision


def test_from_base32_truncates_to_requested_bits() -> None:
    """Passing bits should keep only that many leading bits."""
    assert GeoHash.from_base32("u4pruydqqvj", 20) == GeoHash.with_bit_precision(LAT, LON, 20)
    with pytest.raises(DecodeError):
        GeoHash.from_base32("u4pru", 30)


def test_from_long_value_drops_trailing_bits() -> None:
    """A full-precision key reduced to fewer bits should equal direct encoding."""
    finest = GeoHash.with_bit_precision(LAT, LON, 64)
    assert GeoHash.from_long_value(finest.key, 20) == GeoHash.with_bit_precision(LAT, LON, 20)


def test_ordering_helpers() -> None:
    """next, prev, ord and steps_between should agree with each other."""
    cell = GeoHash.with_bit_precision(LAT, LON, 35)
    assert cell.next().prev() == cell
    assert cell.next(5).ord() == cell.ord() + 5
    assert GeoHash.steps_between(cell, cell.next(5)) == 5
    assert GeoHash.steps_between(cell.next(5), cell) == -5
    with pytest.raises(ConstructionError, match="precision"):
        GeoHash.steps_between(cell, GeoHash.with_bit_precision(LAT, LON, 30))


def test_stepping_off_the_key_space_fails() -> None:
    """Ordinals outside the precision's range should raise AddressingError."""
    with pytest.raises(AddressingError):
        GeoHash.from_ord(0, 5).prev()
    with pytest.raises(AddressingError):
        GeoHash.from_ord(31, 5).next()


def test_axis_bits_round_trip() -> None:
    """from_axis_bits should rebuild a cell from its per-axis addresses."""
    cell = GeoHash.with_bit_precision(35.0, 60.0, 35)
    lat_bits, lon_bits = cell.axis_bits()
    assert axis_precisions(35) == (17, 18)
    assert GeoHash.from_axis_bits(lat_bits, lon_bits, 17, 18) == cell


def test_invalid_inputs() -> None:
    """Out-of-range coordinates, precisions and malformed text should be rejected."""
    with pytest.raises(ConstructionError):
        GeoHash.with_bit_precision(91.0, 0.0, 10)
    with pytest.raises(ConstructionError):
        GeoHash.with_bit_precision(0.0, 180.5, 10)
    with pytest.raises(AddressingError):
        GeoHash.with_bit_precision(0.0, 0.0, 65)
    with pytest.raises(ConstructionError):
        GeoHash.with_character_precision(0.0, 0.0, 13)
    with pytest.raises(DecodeError):
        GeoHash.from_binary_string("0102")
    with pytest.raises(ConstructionError, match="zero"):
        GeoHash(1, 10)
