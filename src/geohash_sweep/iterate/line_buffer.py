"""Enumeration of the cells inside a radius-buffered line segment.

The buffer is handled in planar degree space: the segment is offset by the
radius along its perpendicular to give two rays, and capped by circles around
both end-points. Each latitude row is swept between the extreme longitudes
those shapes reach on it.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple

from geohash_sweep.contracts import Point
from geohash_sweep.errors import ConstructionError
from geohash_sweep.geo.geodesy import DegreeMeterConverter, distance_m, segment_length_deg
from geohash_sweep.hashing.geohash import GeoHash
from geohash_sweep.iterate.base import BaseHashIterator, HashGrid, bounding_cells

logger = logging.getLogger(__name__)

NEARLY_ZERO = 1e-4


class Vector(NamedTuple):
    """Planar direction in degree space."""

    lat: float
    lon: float


def unit_vector(a: Point, b: Point) -> Vector:
    """Return the unit vector pointing from `a` to `b`."""
    length = segment_length_deg(a, b)
    if length == 0.0:
        raise ConstructionError("segment end-points must differ")
    return Vector((b.latitude - a.latitude) / length, (b.longitude - a.longitude) / length)


def perpendicular(u: Vector) -> Vector:
    """Return a unit vector perpendicular to `u`."""
    if abs(u.lat) < abs(u.lon):
        return Vector(-u.lon, u.lat)
    return Vector(u.lon, -u.lat)


def _signum(value: float) -> float:
    return math.copysign(1.0, value) if value else 0.0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def within_segment_rows(latitude: float, a_lat: float, b_lat: float) -> bool:
    """Return True when `latitude` lies within the latitude span of segment a-b, seen from a."""
    if _signum(a_lat - b_lat) != _signum(a_lat - latitude):
        return False
    return min(a_lat, b_lat) <= latitude <= max(a_lat, b_lat)


def _widen(x: float, extent: list[float]) -> None:
    if math.isnan(extent[0]) or x < extent[0]:
        extent[0] = x
    if math.isnan(extent[1]) or x > extent[1]:
        extent[1] = x


class LineBufferIterator(BaseHashIterator):
    """Sweep the cells within `radius_m` of the segment from `start` to `end`."""

    def __init__(
        self,
        start: Point,
        end: Point,
        radius_m: float,
        precision: int,
        converter: DegreeMeterConverter | None = None,
    ) -> None:
        """Compute the buffered grid, segment directions and the first row."""
        super().__init__()
        self.start = start
        self.end = end
        self.radius_m = radius_m
        self.converter = converter if converter is not None else DegreeMeterConverter()
        self.u = unit_vector(start, end)
        self.v = perpendicular(self.u)

        corners = bounding_cells([start, end], precision, radius_m)
        self.grid = HashGrid.from_corners(corners)
        self._anchor_lon = corners.lower_left_point.longitude
        self.radius_deg = self.converter.meters_to_degrees(radius_m)

        self._max_latitude = self.grid.cell_at(self.grid.lat_bits_ur, self.grid.lon_bits_ur).center.latitude
        self._latitude = 0.0
        self._longitude = 0.0
        self._min_lon = math.inf
        self._max_lon = -math.inf
        self._set_latitude(self.grid.cell_at(self.grid.lat_bits_ll, self.grid.lon_bits_ll).center.latitude)
        logger.debug(
            "line buffer %s -> %s, %.1f m (%.6f deg), %d rows",
            start,
            end,
            radius_m,
            self.radius_deg,
            self.grid.span_lat,
        )

    @property
    def current_row(self) -> int | None:
        """Latitude address of the current cell."""
        cell = self.current
        return None if cell is None else cell.axis_bits()[0]

    def _set_latitude(self, latitude: float) -> None:
        self._latitude = latitude
        extent = self.horizontal_extent(latitude)
        self._min_lon, self._max_lon = extent if extent is not None else (math.inf, -math.inf)
        self._longitude = self._min_lon - self.grid.inc_lon_deg

    def _step(self) -> GeoHash | None:
        self._longitude += self.grid.inc_lon_deg
        while self._longitude > self._max_lon:
            self._set_latitude(self._latitude + self.grid.inc_lat_deg)
            self._longitude = self._min_lon
            if self._latitude > self._max_latitude:
                return None
        return GeoHash.with_bit_precision(self._latitude, self._longitude, self.grid.precision)

    def _on_offset_ray(self, latitude: float, direction: int) -> bool:
        offset = direction * self.radius_deg * self.v.lat
        return within_segment_rows(latitude, self.start.latitude + offset, self.end.latitude + offset)

    def _consider(self, latitude: float, x: float, cap: Point, direction: int, extent: list[float]) -> None:
        on_ray = -90.0 <= latitude <= 90.0 and -180.0 <= x <= 180.0 and self._on_offset_ray(latitude, direction)
        if on_ray:
            _widen(x, extent)
            return
        under_radical = self.radius_deg * self.radius_deg - (cap.latitude - latitude) ** 2
        if under_radical >= 0.0:
            root = math.sqrt(under_radical)
            _widen(cap.longitude - root, extent)
            _widen(cap.longitude + root, extent)

    def horizontal_extent(self, latitude: float) -> tuple[float, float] | None:
        """Return the grid-snapped longitude range of the buffer on a latitude row.

        Returns:
            `(min_lon, max_lon)`, or None when the row misses the buffer.
        """
        a, u, v, r = self.start, self.u, self.v, self.radius_deg
        if abs(u.lat) > NEARLY_ZERO:
            pos_lift = u.lon * (latitude - a.latitude + r * v.lat) / u.lat
            neg_lift = u.lon * (latitude - a.latitude - r * v.lat) / u.lat
        else:
            pos_lift = neg_lift = math.nan
        x_neg = a.longitude - r * v.lon + pos_lift
        x_pos = a.longitude + r * v.lon + neg_lift

        extent = [math.nan, math.nan]
        self._consider(latitude, x_neg, self.start, -1, extent)
        self._consider(latitude, x_pos, self.start, 1, extent)
        self._consider(latitude, x_neg, self.end, -1, extent)
        self._consider(latitude, x_pos, self.end, 1, extent)

        low, high = extent
        if math.isnan(low) and math.isnan(high):
            return None
        if math.isnan(low):
            low = high
        if math.isnan(high):
            high = low
        inc = self.grid.inc_lon_deg
        anchor = self._anchor_lon
        first = max(_round_half_up((low - anchor) / inc), math.ceil((-180.0 - anchor) / inc))
        last = min(_round_half_up((high - anchor) / inc), math.floor((180.0 - anchor) / inc))
        if first > last:
            return None
        return max(-180.0, anchor + first * inc), min(180.0, anchor + last * inc)

    def distance_from_point_m(self, point: Point) -> float:
        """Approximate distance from `point` to the segment in meters."""
        a, u, v = self.start, self.u, self.v
        d_lon = point.longitude - a.longitude
        d_lat = a.latitude - point.latitude
        distance_deg = abs((u.lat * d_lon + u.lon * d_lat) / (v.lat * u.lon - v.lon * u.lat))
        k = (v.lat * d_lon + v.lon * d_lat) / (u.lon * v.lat - u.lat * v.lon)
        if k < 0.0:
            return distance_m(point, self.start)
        if k > segment_length_deg(self.start, self.end):
            return distance_m(point, self.end)
        return self.converter.degrees_to_meters(distance_deg)
