"""Tests for buffered track sweeps."""

import math

import pytest

from geohash_sweep.contracts import BoundingBox, Point
from geohash_sweep.errors import ConstructionError
from geohash_sweep.geo.geodesy import DegreeMeterConverter
from geohash_sweep.hashing.geohash import GeoHash
from geohash_sweep.iterate.line_buffer import LineBufferIterator
from geohash_sweep.iterate.track import TrackIterator

RADIUS_M = 500.0
PRECISION = 35


def _cells(points: list[Point], clip: BoundingBox | None = None) -> list[GeoHash]:
    return list(TrackIterator(points, clip, RADIUS_M, PRECISION))


@pytest.mark.parametrize(
    ("points", "expected"),
    [
        ([Point(35.0, 60.0)], 48),
        ([Point(35.0, 60.0), Point(35.0, 60.01)], 98),
        ([Point(35.01, 60.0), Point(35.0, 60.0)], 105),
    ],
)
def test_known_track_counts(points: list[Point], expected: int) -> None:
    """Tracks should cover the reference cell counts, reversed or not."""
    assert len(_cells(points)) == expected
    assert len(_cells(list(reversed(points)))) == expected


def test_repeated_points_are_ignored() -> None:
    """Consecutive duplicate points should not change the sweep."""
    plain = _cells([Point(35.0, 60.0), Point(35.0, 60.01)])
    repeated = _cells([Point(35.0, 60.0), Point(35.0, 60.0), Point(35.0, 60.01), Point(35.0, 60.01)])
    assert plain == repeated


def test_overlapping_segments_merge_with_nearest_distance() -> None:
    """A V-shaped track should emit each cell once with its smallest segment distance."""
    points = [Point(35.0, 60.0), Point(35.01, 60.005), Point(35.0, 60.01)]
    converter = DegreeMeterConverter()
    iterator = TrackIterator(points, None, RADIUS_M, PRECISION, converter)
    distances: dict[GeoHash, float] = {}
    for cell in iterator:
        assert cell not in distances
        distances[cell] = iterator.distance_m

    buffers = [
        LineBufferIterator(points[0], points[1], RADIUS_M, PRECISION, converter),
        LineBufferIterator(points[1], points[2], RADIUS_M, PRECISION, converter),
    ]
    covered = [set(buffer) for buffer in buffers]
    assert set(distances) == covered[0] | covered[1]

    for cell, distance in distances.items():
        expected = min(
            buffer.distance_from_point_m(cell.center)
            for buffer, cells in zip(buffers, covered)
            if cell in cells
        )
        assert distance == pytest.approx(expected)


def test_rows_ascend_and_cells_sorted_within_row() -> None:
    """Cells should come out row by row, ordered by key inside each row."""
    cells = _cells([Point(35.0, 60.0), Point(35.01, 60.005), Point(35.0, 60.01)])
    rows = [cell.axis_bits()[0] for cell in cells]
    assert rows == sorted(rows)
    for row in set(rows):
        in_row = [cell for cell in cells if cell.axis_bits()[0] == row]
        assert in_row == sorted(in_row)


def test_clip_box_excluding_every_segment_gives_nothing() -> None:
    """Segments outside the clip box should contribute no cells."""
    clip = BoundingBox(10.0, 11.0, 10.0, 11.0)
    iterator = TrackIterator([Point(35.0, 60.0), Point(35.0, 60.01)], clip, RADIUS_M, PRECISION)
    assert not iterator.has_next()
    assert math.isnan(iterator.distance_m)


def test_empty_track_is_rejected() -> None:
    """A track needs at least one point."""
    with pytest.raises(ConstructionError, match="at least one point"):
        TrackIterator([], None, RADIUS_M, PRECISION)


def test_track_at_the_antimeridian_stops_at_the_edge() -> None:
    """A buffer reaching past 180 degrees should stop at the edge instead of failing."""
    cells = _cells([Point(10.0, 179.999), Point(10.0, 179.9995)])
    assert cells
    assert len(set(cells)) == len(cells)
    assert all(cell.bounding_box.max_longitude <= 180.0 for cell in cells)
