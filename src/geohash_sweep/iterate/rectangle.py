"""Row-major enumeration of every cell in a latitude/longitude rectangle."""

from __future__ import annotations

import logging

from geohash_sweep.contracts import Point
from geohash_sweep.hashing.geohash import GeoHash
from geohash_sweep.iterate.base import BaseHashIterator, HashGrid, bounding_cells

logger = logging.getLogger(__name__)

# corners are pulled inside the box so that edges on a cell boundary do not add a row or column
CORNER_OFFSET_DEG = 1e-6


class RectangleIterator(BaseHashIterator):
    """Enumerate the cells of a grid, south to north, west to east within a row."""

    def __init__(self, grid: HashGrid) -> None:
        """Start at the grid's lower-left cell."""
        super().__init__()
        self.grid = grid
        self._lat_bits = grid.lat_bits_ll
        self._lon_bits = grid.lon_bits_ll
        logger.debug("rectangle sweep over %d x %d cells at %d bits", grid.span_lat, grid.span_lon, grid.precision)

    @classmethod
    def over_box(
        cls,
        lat_ll: float,
        lon_ll: float,
        lat_ur: float,
        lon_ur: float,
        precision: int,
    ) -> RectangleIterator:
        """Sweep the cells intersecting the box between two corner coordinates."""
        corners = bounding_cells(
            [
                Point(lat_ll + CORNER_OFFSET_DEG, lon_ll + CORNER_OFFSET_DEG),
                Point(lat_ur - CORNER_OFFSET_DEG, lon_ur - CORNER_OFFSET_DEG),
            ],
            precision,
        )
        return cls(HashGrid.from_corners(corners))

    @classmethod
    def between_cells(cls, lower_left: GeoHash, upper_right: GeoHash) -> RectangleIterator:
        """Sweep every cell between two corner cells, inclusive."""
        return cls(HashGrid.from_cells(lower_left, upper_right))

    def _step(self) -> GeoHash | None:
        if self._lat_bits > self.grid.lat_bits_ur:
            return None
        cell = self.grid.cell_at(self._lat_bits, self._lon_bits)
        self._lon_bits += 1
        if self._lon_bits > self.grid.lon_bits_ur:
            self._lon_bits = self.grid.lon_bits_ll
            self._lat_bits += 1
        return cell
