"""Enumeration of the cells whose centres lie within a radius of a point."""

from __future__ import annotations

import logging
import math

from geohash_sweep.contracts import Point
from geohash_sweep.errors import ConstructionError
from geohash_sweep.geo.geodesy import distance_m
from geohash_sweep.hashing.geohash import GeoHash, axis_precisions
from geohash_sweep.iterate.base import BaseHashIterator, HashGrid
from geohash_sweep.iterate.rectangle import RectangleIterator

logger = logging.getLogger(__name__)

MERIDIAN_LENGTH_M = 40008000.0
EQUATOR_LENGTH_M = 40075160.0


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class RadialIterator(BaseHashIterator):
    """Filter a square window of candidate cells down to a circle.

    A candidate must pass a cheap estimate of its offset from the centre cell
    (measured to the near edge, half a cell closer) and then the geodesic
    distance from the query point to the candidate's centre.
    """

    def __init__(self, latitude: float, longitude: float, radius_m: float, precision: int) -> None:
        """Prepare the candidate window around the query point's cell."""
        super().__init__()
        if radius_m < 0.0:
            raise ConstructionError("radius_m must be non-negative")
        self.center_point = Point(latitude, longitude)
        self.radius_m = radius_m
        self.distance_m = math.nan
        self.current_distance_m = math.nan

        center = GeoHash.with_bit_precision(latitude, longitude, precision)
        lat_precision, lon_precision = axis_precisions(precision)
        self.cell_m_lat = MERIDIAN_LENGTH_M / 2.0**lat_precision
        self.cell_m_lon = EQUATOR_LENGTH_M / 2.0 ** (lon_precision - 1)
        delta_lat = max(0, math.ceil((2.0 * radius_m / self.cell_m_lat - 1.0) / 2.0))
        delta_lon = max(0, math.ceil((2.0 * radius_m / self.cell_m_lon - 1.0) / 2.0))

        self._center_lat_bits, self._center_lon_bits = center.axis_bits()
        lat_limit = (1 << lat_precision) - 1
        lon_limit = (1 << lon_precision) - 1
        self.window = HashGrid.from_cells(
            GeoHash.from_axis_bits(
                max(0, self._center_lat_bits - delta_lat),
                max(0, self._center_lon_bits - delta_lon),
                lat_precision,
                lon_precision,
            ),
            GeoHash.from_axis_bits(
                min(lat_limit, self._center_lat_bits + delta_lat),
                min(lon_limit, self._center_lon_bits + delta_lon),
                lat_precision,
                lon_precision,
            ),
        )
        self._candidates = RectangleIterator(self.window)
        logger.debug(
            "radial sweep of %.1f m around %s checks %d candidate cells",
            radius_m,
            self.center_point,
            self.window.cell_count,
        )

    def estimated_offset_m(self, cell: GeoHash) -> float:
        """Estimate the distance from the centre cell to the near edge of `cell`."""
        lat_bits, lon_bits = cell.axis_bits()
        d_lat = lat_bits - self._center_lat_bits
        d_lon = lon_bits - self._center_lon_bits
        return math.hypot(
            (d_lat - 0.5 * _sign(d_lat)) * self.cell_m_lat,
            (d_lon - 0.5 * _sign(d_lon)) * self.cell_m_lon,
        )

    def _step(self) -> GeoHash | None:
        while self._candidates.has_next():
            cell = self._candidates.next()
            if self.estimated_offset_m(cell) > self.radius_m:
                continue
            distance = distance_m(self.center_point, cell.center)
            if distance <= self.radius_m:
                self.current_distance_m = distance
                return cell
        self.current_distance_m = math.nan
        return None

    def _emitted(self, cell: GeoHash) -> None:
        self.distance_m = self.current_distance_m
