"""Enumeration of the cells inside a radius-buffered polyline."""

from __future__ import annotations

import logging
import math
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from itertools import pairwise

from geohash_sweep.contracts import BoundingBox, Point
from geohash_sweep.errors import ConstructionError
from geohash_sweep.geo.geodesy import DegreeMeterConverter
from geohash_sweep.hashing.geohash import GeoHash
from geohash_sweep.iterate.base import BaseHashIterator, HashGrid, bounding_cells
from geohash_sweep.iterate.line_buffer import LineBufferIterator

logger = logging.getLogger(__name__)

SINGLE_POINT_NUDGE_M = 0.1


@dataclass(frozen=True, slots=True)
class Segment:
    """One leg of a track."""

    start: Point
    end: Point

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox.around(self.start, self.end)

    def intersects(self, clip: BoundingBox | None) -> bool:
        """Return True when no clip is given or the leg's bounds touch it."""
        return clip is None or self.bounds.intersects(clip)


def _drop_repeats(points: Iterable[Point]) -> list[Point]:
    kept: list[Point] = []
    for point in points:
        if not kept or kept[-1] != point:
            kept.append(point)
    return kept


def _row_of(cell: GeoHash) -> int:
    return cell.axis_bits()[0]


class TrackIterator(BaseHashIterator):
    """Merge per-segment line buffers row by row, emitting each cell once.

    Each emitted cell carries the smallest distance reported for it by any
    segment, available as `distance_m` after the cell is returned.
    """

    def __init__(
        self,
        points: Iterable[Point],
        clip: BoundingBox | None,
        radius_m: float,
        precision: int,
        converter: DegreeMeterConverter | None = None,
    ) -> None:
        """Build one line-buffer iterator per segment that passes the clip box."""
        super().__init__()
        self.converter = converter if converter is not None else DegreeMeterConverter()
        track = _drop_repeats(points)
        if not track:
            raise ConstructionError("a track needs at least one point")
        if len(track) == 1:
            nudge = self.converter.meters_to_degrees(SINGLE_POINT_NUDGE_M)
            track.append(Point(track[0].latitude + nudge, track[0].longitude + nudge))
        self.points = tuple(track)
        self.radius_m = radius_m
        self.distance_m = math.nan
        self.current_distance_m = math.nan

        self.segments = [Segment(a, b) for a, b in pairwise(self.points)]
        self._rows: dict[int, list[LineBufferIterator]] = {}
        for segment in self.segments:
            if not segment.intersects(clip):
                continue
            buffer = LineBufferIterator(segment.start, segment.end, radius_m, precision, self.converter)
            if buffer.has_next():
                self._file(buffer)
        self.grid = HashGrid.from_corners(bounding_cells(self.points, precision, radius_m))
        self._pending: deque[tuple[GeoHash, float]] = deque()
        logger.debug(
            "track of %d points: %d of %d segments active",
            len(self.points),
            sum(len(buffers) for buffers in self._rows.values()),
            len(self.segments),
        )

    def _file(self, buffer: LineBufferIterator) -> None:
        row = _row_of(buffer.current)
        self._rows.setdefault(row, []).append(buffer)

    def _drain_row(self, row: int) -> None:
        nearest: dict[GeoHash, float] = {}
        for buffer in self._rows.pop(row):
            while buffer.has_next() and _row_of(buffer.current) == row:
                cell = buffer.next()
                distance = buffer.distance_from_point_m(cell.center)
                nearest[cell] = min(distance, nearest.get(cell, math.inf))
            if buffer.has_next():
                self._file(buffer)
        self._pending = deque(sorted(nearest.items()))

    def _step(self) -> GeoHash | None:
        while not self._pending:
            if not self._rows:
                self.current_distance_m = math.nan
                return None
            row = min(self._rows)
            if row > self.grid.lat_bits_ur:
                self._rows.clear()
                continue
            self._drain_row(row)
        cell, self.current_distance_m = self._pending.popleft()
        return cell

    def _emitted(self, cell: GeoHash) -> None:
        self.distance_m = self.current_distance_m
