"""Ellipsoidal distance/projection helpers and a memoized degree<->meter converter."""

from __future__ import annotations

import logging
import math
from threading import Lock

from geopy.distance import geodesic

from geohash_sweep.contracts import Point

logger = logging.getLogger(__name__)

PROBE_POINT = Point(35.0, 67.5)
PROBE_AZIMUTH_DEG = 45.0
MIN_SEARCH_METERS = 0.01
MAX_SEARCH_METERS = 1e7
METER_TOLERANCE = 0.01
DEGREE_ROUNDING = 1e5


def distance_m(a: Point, b: Point) -> float:
    """Return the WGS84 geodesic distance between two points in meters."""
    return float(geodesic((a.latitude, a.longitude), (b.latitude, b.longitude)).meters)


def move_in_direction(point: Point, bearing_deg: float, meters: float) -> Point:
    """Return the point reached by travelling `meters` from `point` along `bearing_deg`."""
    destination = geodesic(meters=meters).destination((point.latitude, point.longitude), bearing_deg)
    return Point(destination.latitude, destination.longitude)


def segment_length_deg(a: Point, b: Point) -> float:
    """Return the planar length of the segment a-b measured in degrees."""
    return math.hypot(a.longitude - b.longitude, a.latitude - b.latitude)


class DegreeMeterConverter:
    """Convert between meters and planar degree lengths around a fixed probe point.

    Degree-to-meter results are cached forever, keyed by the degree value
    rounded to 1e-5. Lookups are lock-free; inserts take the lock.
    """

    def __init__(self, probe: Point = PROBE_POINT, azimuth_deg: float = PROBE_AZIMUTH_DEG) -> None:
        """Initialize the converter around `probe` moving along `azimuth_deg`."""
        self.probe = probe
        self.azimuth_deg = azimuth_deg
        self._meters_by_degrees: dict[float, float] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._meters_by_degrees)

    def meters_to_degrees(self, meters: float) -> float:
        """Return the degree length of a `meters` move away from the probe."""
        moved = move_in_direction(self.probe, self.azimuth_deg, meters)
        return segment_length_deg(self.probe, moved)

    def degrees_to_meters(self, degrees: float) -> float:
        """Return the meters whose probe move spans `degrees`, found by interval halving."""
        rounded = math.floor(degrees * DEGREE_ROUNDING + 0.5) / DEGREE_ROUNDING
        cached = self._meters_by_degrees.get(rounded)
        if cached is not None:
            return cached
        meters = self._search_meters(rounded)
        with self._lock:
            return self._meters_by_degrees.setdefault(rounded, meters)

    def _search_meters(self, degrees: float) -> float:
        low = MIN_SEARCH_METERS
        high = MAX_SEARCH_METERS
        mid = 0.5 * (low + high)
        while abs(mid - low) > METER_TOLERANCE:
            mid_degrees = self.meters_to_degrees(mid)
            if mid_degrees == degrees:
                return mid
            if mid_degrees < degrees:
                low = mid
            else:
                high = mid
            mid = 0.5 * (low + high)
        logger.debug("%.5f deg resolved to %.2f m", degrees, mid)
        return mid
