"""Shared state machine and grid bookkeeping for bounded cell iterators."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from geohash_sweep.contracts import Point
from geohash_sweep.errors import ConstructionError
from geohash_sweep.geo.geodesy import move_in_direction
from geohash_sweep.hashing.geohash import GeoHash, axis_precisions

MERIDIAN_HALF_LENGTH_M = 20004000.0
EQUATOR_LENGTH_M = 40075160.0


class IterationState(StrEnum):
    """Lifecycle of a bounded iterator."""

    INITIALIZING = "initializing"
    HAS_NEXT = "has_next"
    EXHAUSTED = "exhausted"


class HashIterator(Protocol):
    """Protocol for iterators that enumerate cells covering a query shape."""

    @property
    def state(self) -> IterationState:
        """Return the current lifecycle state."""

    @property
    def current(self) -> GeoHash | None:
        """Return the cell the iterator is positioned on, or None once exhausted."""

    def advance(self) -> bool:
        """Move to the next cell; return False once exhausted."""

    def has_next(self) -> bool:
        """Return True when `next()` would return a cell."""

    def next(self) -> GeoHash:
        """Return the current cell and advance past it."""

    def __iter__(self) -> Iterator[GeoHash]:
        """Iterate the remaining cells."""


class BaseHashIterator(ABC):
    """Lazily primed iterator; subclasses only supply `_step()`."""

    def __init__(self) -> None:
        """Start in the initializing state with no current cell."""
        self._state = IterationState.INITIALIZING
        self._current: GeoHash | None = None

    @property
    def state(self) -> IterationState:
        return self._state

    @property
    def current(self) -> GeoHash | None:
        self._prime()
        return self._current

    @abstractmethod
    def _step(self) -> GeoHash | None:
        """Produce the next cell, or None when the shape is fully enumerated."""

    def advance(self) -> bool:
        """Move to the next cell; return False once exhausted."""
        if self._state is IterationState.EXHAUSTED:
            return False
        cell = self._step()
        if cell is None:
            self._current = None
            self._state = IterationState.EXHAUSTED
            return False
        self._current = cell
        self._state = IterationState.HAS_NEXT
        return True

    def _prime(self) -> None:
        if self._state is IterationState.INITIALIZING:
            self.advance()

    def has_next(self) -> bool:
        self._prime()
        return self._state is IterationState.HAS_NEXT

    def next(self) -> GeoHash:
        """Return the current cell and advance past it."""
        if not self.has_next() or self._current is None:
            raise StopIteration
        cell = self._current
        self._emitted(cell)
        self.advance()
        return cell

    def _emitted(self, cell: GeoHash) -> None:
        """Hook run after `cell` is handed out and before the iterator moves on."""

    def __iter__(self) -> Iterator[GeoHash]:
        return self

    def __next__(self) -> GeoHash:
        return self.next()


@dataclass(frozen=True, slots=True)
class CornerCells:
    """Lower-left/upper-right cells of a sweep and the points they were encoded from."""

    lower_left: GeoHash
    upper_right: GeoHash
    lower_left_point: Point
    upper_right_point: Point


def _grow_corner(corner: Point, first_deg: float, second_deg: float, radius_m: float, sign: float) -> Point:
    """Move a corner outwards, stopping at the poles and the antimeridian instead of wrapping."""
    moved = move_in_direction(move_in_direction(corner, first_deg, radius_m), second_deg, radius_m)
    if sign * (moved.latitude - corner.latitude) < 0.0:
        # crossed a pole
        return Point(sign * 90.0, sign * 180.0)
    longitude = moved.longitude if sign * (moved.longitude - corner.longitude) >= 0.0 else sign * 180.0
    return Point(moved.latitude, longitude)


def bounding_cells(points: Sequence[Point], precision: int, radius_m: float = 0.0) -> CornerCells:
    """Return corner cells covering every point's cell, grown outwards by `radius_m`.

    The lower-left corner moves west then south by `radius_m`; the upper-right
    corner moves north then east.
    """
    if not points:
        raise ConstructionError("at least one point is required")
    if radius_m < 0.0:
        raise ConstructionError("radius_m must be non-negative")
    addresses = [GeoHash.with_bit_precision(p.latitude, p.longitude, precision).axis_bits() for p in points]
    lat_precision, lon_precision = axis_precisions(precision)
    lower_left = GeoHash.from_axis_bits(
        min(lat for lat, _ in addresses),
        min(lon for _, lon in addresses),
        lat_precision,
        lon_precision,
    ).center
    upper_right = GeoHash.from_axis_bits(
        max(lat for lat, _ in addresses),
        max(lon for _, lon in addresses),
        lat_precision,
        lon_precision,
    ).center
    if radius_m > 0.0:
        lower_left = _grow_corner(lower_left, 270.0, 180.0, radius_m, -1.0)
        upper_right = _grow_corner(upper_right, 0.0, 90.0, radius_m, 1.0)
    return CornerCells(
        lower_left=GeoHash.with_bit_precision(lower_left.latitude, lower_left.longitude, precision),
        upper_right=GeoHash.with_bit_precision(upper_right.latitude, upper_right.longitude, precision),
        lower_left_point=lower_left,
        upper_right_point=upper_right,
    )


def dimension_precision_m(near_latitude: float, is_latitude: bool, bits: int) -> float:
    """Estimate the meters covered by one cell along an axis refined by `bits` bits."""
    if is_latitude:
        return MERIDIAN_HALF_LENGTH_M / float(1 << bits)
    return EQUATOR_LENGTH_M * math.cos(math.radians(near_latitude)) * 2.0 * math.pi / float(1 << bits)


@dataclass(frozen=True, slots=True)
class HashGrid:
    """Per-axis addresses and increments of the cell grid between two corner cells."""

    precision: int
    lat_precision: int
    lon_precision: int
    lat_bits_ll: int
    lon_bits_ll: int
    lat_bits_ur: int
    lon_bits_ur: int
    mid_latitude: float

    @classmethod
    def from_cells(cls, lower_left: GeoHash, upper_right: GeoHash, mid_latitude: float | None = None) -> HashGrid:
        """Build the grid spanned by two corner cells of equal precision."""
        if lower_left.precision != upper_right.precision:
            raise ConstructionError("corner cells must share a precision")
        lat_ll, lon_ll = lower_left.axis_bits()
        lat_ur, lon_ur = upper_right.axis_bits()
        if lat_ll > lat_ur or lon_ll > lon_ur:
            raise ConstructionError("lower-left cell must not lie above or right of the upper-right cell")
        if mid_latitude is None:
            mid_latitude = 0.5 * (lower_left.center.latitude + upper_right.center.latitude)
        lat_precision, lon_precision = axis_precisions(lower_left.precision)
        return cls(
            precision=lower_left.precision,
            lat_precision=lat_precision,
            lon_precision=lon_precision,
            lat_bits_ll=lat_ll,
            lon_bits_ll=lon_ll,
            lat_bits_ur=lat_ur,
            lon_bits_ur=lon_ur,
            mid_latitude=mid_latitude,
        )

    @classmethod
    def from_corners(cls, corners: CornerCells) -> HashGrid:
        """Build the grid for `bounding_cells` output, centred between its corner points."""
        mid_latitude = 0.5 * (corners.lower_left_point.latitude + corners.upper_right_point.latitude)
        return cls.from_cells(corners.lower_left, corners.upper_right, mid_latitude)

    @property
    def inc_lat_deg(self) -> float:
        return 180.0 / float(1 << self.lat_precision)

    @property
    def inc_lon_deg(self) -> float:
        return 360.0 / float(1 << self.lon_precision)

    @property
    def span_lat(self) -> int:
        return self.lat_bits_ur - self.lat_bits_ll + 1

    @property
    def span_lon(self) -> int:
        return self.lon_bits_ur - self.lon_bits_ll + 1

    @property
    def cell_count(self) -> int:
        return self.span_lat * self.span_lon

    @property
    def precision_m_lat(self) -> float:
        return dimension_precision_m(self.mid_latitude, True, self.lat_precision)

    @property
    def precision_m_lon(self) -> float:
        return dimension_precision_m(self.mid_latitude, False, self.lon_precision)

    def cell_at(self, lat_bits: int, lon_bits: int) -> GeoHash:
        """Return the cell at the given per-axis addresses."""
        return GeoHash.from_axis_bits(lat_bits, lon_bits, self.lat_precision, self.lon_precision)
