"""Core value types shared by the hashing and sweep modules."""

from __future__ import annotations

from dataclasses import dataclass

from geohash_sweep.errors import ConstructionError


@dataclass(frozen=True, slots=True)
class Point:
    """A WGS84 latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ConstructionError(f"latitude must be within [-90, 90], got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ConstructionError(f"longitude must be within [-180, 180], got {self.longitude}")

    def __str__(self) -> str:
        return f"({self.latitude:.7f},{self.longitude:.7f})"


@dataclass(slots=True)
class BoundingBox:
    """Axis-aligned latitude/longitude box, inclusive on all edges."""

    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    def __post_init__(self) -> None:
        """Validate that minima do not exceed maxima."""
        if self.min_latitude > self.max_latitude:
            raise ConstructionError("min_latitude must be <= max_latitude")
        if self.min_longitude > self.max_longitude:
            raise ConstructionError("min_longitude must be <= max_longitude")

    @classmethod
    def around(cls, first: Point, second: Point) -> BoundingBox:
        """Return the smallest box holding both points."""
        return cls(
            min_latitude=min(first.latitude, second.latitude),
            max_latitude=max(first.latitude, second.latitude),
            min_longitude=min(first.longitude, second.longitude),
            max_longitude=max(first.longitude, second.longitude),
        )

    @property
    def center(self) -> Point:
        return Point(
            (self.min_latitude + self.max_latitude) / 2.0,
            (self.min_longitude + self.max_longitude) / 2.0,
        )

    @property
    def lat_size(self) -> float:
        return self.max_latitude - self.min_latitude

    @property
    def lon_size(self) -> float:
        return self.max_longitude - self.min_longitude

    def contains(self, point: Point) -> bool:
        """Return True when the point lies inside or on the edge of the box."""
        return (
            self.min_latitude <= point.latitude <= self.max_latitude
            and self.min_longitude <= point.longitude <= self.max_longitude
        )

    def intersects(self, other: BoundingBox) -> bool:
        """Return True when the two boxes share at least one point."""
        return not (
            other.min_longitude > self.max_longitude
            or other.max_longitude < self.min_longitude
            or other.min_latitude > self.max_latitude
            or other.max_latitude < self.min_latitude
        )

    def expand_to_include(self, other: BoundingBox) -> None:
        """Grow this box in place until it also covers `other`."""
        self.min_latitude = min(self.min_latitude, other.min_latitude)
        self.max_latitude = max(self.max_latitude, other.max_latitude)
        self.min_longitude = min(self.min_longitude, other.min_longitude)
        self.max_longitude = max(self.max_longitude, other.max_longitude)

    def copy(self) -> BoundingBox:
        return BoundingBox(self.min_latitude, self.max_latitude, self.min_longitude, self.max_longitude)
