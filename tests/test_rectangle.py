"""Tests for rectangle sweeps."""

from geohash_sweep.contracts import Point
from geohash_sweep.geo.geodesy import move_in_direction
from geohash_sweep.hashing.geohash import GeoHash
from geohash_sweep.iterate.rectangle import RectangleIterator

PRECISION = 35


def test_cells_of_a_parent_cell_box() -> None:
    """Sweeping a 30-bit cell's own box at 35 bits should give its 32 children."""
    parent = GeoHash.from_base32("9q8ys0")
    box = parent.bounding_box
    cells = list(
        RectangleIterator.over_box(box.min_latitude, box.min_longitude, box.max_latitude, box.max_longitude, PRECISION)
    )
    assert len(cells) == 32
    assert len(set(cells)) == 32
    assert all(box.contains(cell.center) for cell in cells)
    assert all(cell.is_within(parent) for cell in cells)


def test_known_box_count_and_corners() -> None:
    """A box 707 m diagonally around a point should cover 72 cells."""
    center = Point(35.0, 60.0)
    lower_left = move_in_direction(center, 225.0, 707.0)
    upper_right = move_in_direction(center, 45.0, 707.0)
    iterator = RectangleIterator.over_box(
        lower_left.latitude,
        lower_left.longitude,
        upper_right.latitude,
        upper_right.longitude,
        PRECISION,
    )
    cells = list(iterator)
    assert len(cells) == 72
    assert cells[0] == GeoHash.with_bit_precision(lower_left.latitude, lower_left.longitude, PRECISION)
    assert cells[-1] == GeoHash.with_bit_precision(upper_right.latitude, upper_right.longitude, PRECISION)


def test_row_major_order() -> None:
    """Longitude should advance fastest, latitude once per row."""
    low = GeoHash.with_bit_precision(35.0, 60.0, PRECISION)
    lat_bits, lon_bits = low.axis_bits()
    high = GeoHash.from_axis_bits(lat_bits + 1, lon_bits + 2, 17, 18)
    addresses = [cell.axis_bits() for cell in RectangleIterator.between_cells(low, high)]
    assert addresses == [
        (lat_bits, lon_bits),
        (lat_bits, lon_bits + 1),
        (lat_bits, lon_bits + 2),
        (lat_bits + 1, lon_bits),
        (lat_bits + 1, lon_bits + 1),
        (lat_bits + 1, lon_bits + 2),
    ]


def test_sweep_is_complete() -> None:
    """A box sweep should emit exactly span_lat x span_lon distinct cells."""
    iterator = RectangleIterator.over_box(35.0, 60.0, 35.01, 60.02, PRECISION)
    cells = list(iterator)
    assert len(cells) == iterator.grid.span_lat * iterator.grid.span_lon
    assert len(cells) == iterator.grid.cell_count
    assert len(set(cells)) == len(cells)


def test_swapped_corners_give_the_same_cells() -> None:
    """Giving the corners in either order should sweep the same cells."""
    forward = list(RectangleIterator.over_box(35.0, 60.0, 35.01, 60.02, PRECISION))
    swapped = list(RectangleIterator.over_box(35.01, 60.02, 35.0, 60.0, PRECISION))
    assert len(forward) == len(swapped)
    assert set(forward) == set(swapped)
