"""Tests for radial sweeps."""

import pytest

from geohash_sweep.contracts import Point
from geohash_sweep.errors import ConstructionError
from geohash_sweep.geo.geodesy import distance_m
from geohash_sweep.hashing.geohash import GeoHash
from geohash_sweep.iterate.radial import RadialIterator


def test_known_radius_count() -> None:
    """500 m around (35, 60) at 35 bits should cover 21 cells, each within the radius."""
    center = Point(35.0, 60.0)
    iterator = RadialIterator(35.0, 60.0, 500.0, 35)
    seen: list[GeoHash] = []
    for cell in iterator:
        expected = distance_m(center, cell.center)
        assert expected <= 500.0
        assert iterator.distance_m == pytest.approx(expected)
        seen.append(cell)
    assert len(seen) == 21
    assert len(set(seen)) == 21


def test_centre_cell_is_included() -> None:
    """The cell holding the query point should be swept for any radius covering its centre."""
    cell = GeoHash.with_bit_precision(35.0, 60.0, 35)
    center = cell.center
    assert cell in set(RadialIterator(center.latitude, center.longitude, 1.0, 35))


def test_zero_radius_off_centre_is_empty() -> None:
    """A zero radius away from any cell centre should yield nothing."""
    cell = GeoHash.with_bit_precision(35.0, 60.0, 35)
    box = cell.bounding_box
    iterator = RadialIterator(box.min_latitude + 1e-6, box.min_longitude + 1e-6, 0.0, 35)
    assert not iterator.has_next()


def test_negative_radius_is_rejected() -> None:
    """Radii must be non-negative."""
    with pytest.raises(ConstructionError, match="non-negative"):
        RadialIterator(35.0, 60.0, -1.0, 35)


def test_candidate_window_is_exposed() -> None:
    """The candidate window should be sized before sweeping and hold every emitted cell."""
    iterator = RadialIterator(35.0, 60.0, 500.0, 35)
    window = iterator.window
    assert window.cell_count >= 21
    for cell in iterator:
        lat_bits, lon_bits = cell.axis_bits()
        assert window.lat_bits_ll <= lat_bits <= window.lat_bits_ur
        assert window.lon_bits_ll <= lon_bits <= window.lon_bits_ur
    assert RadialIterator(35.0, 60.0, 500.0, 64).window.cell_count > 10**9
