"""Three-axis latitude/longitude/time hash cells with 128-bit keys.

Time is hashed through a sigmoid "date signal" in (-1, 1), so recent and
near-future instants get finer cells than the distant past or future.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime

from geohash_sweep.codec.interleave import AxisLayout, decode, encode
from geohash_sweep.codec.interval import IntervalRange
from geohash_sweep.codec.text import BASE64, decode_groups, encode_groups
from geohash_sweep.contracts import Point
from geohash_sweep.errors import ConstructionError
from geohash_sweep.geo.geodesy import distance_m
from geohash_sweep.time.epoch import MAX_MILLIS, MIN_MILLIS, from_epoch_millis, to_epoch_millis

logger = logging.getLogger(__name__)

GEOTIME_LAYOUT = AxisLayout(
    axes=("time", "longitude", "latitude"),
    ranges=(
        IntervalRange.spanning(-1.0, 1.0),
        IntervalRange.spanning(-180.0, 180.0),
        IntervalRange.spanning(-90.0, 90.0),
    ),
    pattern=(0, 1, 2),
    words=2,
)
MAX_BIT_PRECISION = GEOTIME_LAYOUT.capacity
_TIME = 0
_LON = 1
_LAT = 2

REFERENCE_INSTANT = datetime(3000, 2, 1, tzinfo=UTC)
REFERENCE_SIGNAL = 0.8
REFERENCE_MILLIS = float(to_epoch_millis(REFERENCE_INSTANT))
SIGMOID_K = -1.0 / REFERENCE_MILLIS * math.log(2.0 / (REFERENCE_SIGNAL + 1.0) - 1.0)

# nudge factors used when walking to the neighbouring cell inside a box
_STEP_FACTOR = 1.49
_EDGE_FACTOR = 0.5


def signal_from_date(date: datetime) -> float:
    """Map an instant to its date signal in (-1, 1); naive values are read as UTC."""
    return 2.0 / (1.0 + math.exp(-SIGMOID_K * to_epoch_millis(date))) - 1.0


def date_from_signal(signal: float) -> datetime:
    """Invert `signal_from_date`, clamping to the representable datetime range."""
    if signal <= -1.0:
        return from_epoch_millis(MIN_MILLIS)
    if signal >= 1.0:
        return from_epoch_millis(MAX_MILLIS)
    ratio = 2.0 / (signal + 1.0) - 1.0
    if ratio <= 0.0:
        return from_epoch_millis(MAX_MILLIS)
    millis = -1.0 / SIGMOID_K * math.log(ratio)
    if not math.isfinite(millis):
        return from_epoch_millis(MAX_MILLIS if millis > 0 else MIN_MILLIS)
    return from_epoch_millis(math.floor(millis + 0.5))


def _format_size(value: float) -> str:
    return f"{value:,.4f}"


@dataclass(frozen=True, slots=True, order=True)
class GeoTimeHash:
    """Immutable geo-time cell: MSB-aligned 128-bit key plus significant bit count."""

    key: int
    precision: int

    def __post_init__(self) -> None:
        """Validate precision, key width and zeroed low-order bits."""
        GEOTIME_LAYOUT.check_precision(self.precision)
        if not 0 <= self.key < (1 << MAX_BIT_PRECISION):
            raise ConstructionError(f"key must be an unsigned {MAX_BIT_PRECISION}-bit value")
        if self.key & ((1 << (MAX_BIT_PRECISION - self.precision)) - 1):
            raise ConstructionError("bits beyond the precision must be zero")

    @classmethod
    def with_bit_precision(
        cls,
        latitude: float,
        longitude: float,
        date: datetime | None,
        bits: int,
    ) -> GeoTimeHash:
        """Encode a point and instant into a cell of `bits` significant bits."""
        if date is None:
            raise ConstructionError("a geo-time cell needs a date")
        return cls.with_signal(latitude, longitude, signal_from_date(date), bits)

    @classmethod
    def with_signal(cls, latitude: float, longitude: float, signal: float, bits: int) -> GeoTimeHash:
        """Encode a point and a raw date signal."""
        point = Point(latitude, longitude)
        key, _ = encode((signal, point.longitude, point.latitude), bits, GEOTIME_LAYOUT)
        return cls(key, bits)

    @classmethod
    def from_base64(cls, text: str) -> GeoTimeHash:
        """Parse the base-64 form written by `to_base64`."""
        value, precision = decode_groups(text, BASE64)
        GEOTIME_LAYOUT.check_precision(precision)
        return cls(value << (MAX_BIT_PRECISION - precision), precision)

    @classmethod
    def first_in_box(cls, lower_left: GeoTimeHash | None, upper_right: GeoTimeHash | None, precision: int) -> GeoTimeHash:
        """Return the cell holding the minimum corner of the box spanned by two cells."""
        if lower_left is None or upper_right is None:
            raise ConstructionError("both corners of a geo-time box are required")
        if lower_left.min_latitude >= upper_right.min_latitude:
            raise ConstructionError("lower-left latitude must be below upper-right latitude")
        if lower_left.min_longitude >= upper_right.min_longitude:
            raise ConstructionError("lower-left longitude must be below upper-right longitude")
        if lower_left.min_date_signal >= upper_right.min_date_signal:
            raise ConstructionError("lower-left date must precede upper-right date")
        return cls.with_bit_precision(
            lower_left.min_latitude,
            lower_left.min_longitude,
            lower_left.min_date,
            precision,
        )

    def next_in_box(self, lower_left: GeoTimeHash, upper_right: GeoTimeHash) -> GeoTimeHash | None:
        """Step to the neighbouring cell inside the box: longitude, then latitude, then time.

        Returns:
            The next cell, or None once the time axis runs past the box.
        """
        signal_range, lon_range, lat_range = self._ranges()
        latitude = lat_range.mid
        longitude = lon_range.mid + _STEP_FACTOR * lon_range.half_width
        signal = signal_range.mid
        if longitude + _EDGE_FACTOR * lon_range.half_width > upper_right.max_longitude:
            longitude = lower_left.min_longitude
            latitude += _STEP_FACTOR * lat_range.half_width
            if latitude + _EDGE_FACTOR * lat_range.half_width > upper_right.max_latitude:
                latitude = lower_left.min_latitude
                signal += _STEP_FACTOR * signal_range.half_width
                if signal + _EDGE_FACTOR * signal_range.half_width > upper_right.max_date_signal:
                    return None
        following = GeoTimeHash.with_signal(latitude, longitude, signal, self.precision)
        if following == self:
            logger.warning("next_in_box did not move away from %s", self.to_base64())
        return following

    def _ranges(self) -> tuple[IntervalRange, ...]:
        return decode(self.key, self.precision, GEOTIME_LAYOUT)

    @property
    def latitude(self) -> float:
        return self._ranges()[_LAT].mid

    @property
    def longitude(self) -> float:
        return self._ranges()[_LON].mid

    @property
    def date_signal(self) -> float:
        return self._ranges()[_TIME].mid

    @property
    def date(self) -> datetime:
        return date_from_signal(self.date_signal)

    @property
    def min_latitude(self) -> float:
        lat = self._ranges()[_LAT]
        return max(-90.0, lat.mid - lat.half_width)

    @property
    def max_latitude(self) -> float:
        lat = self._ranges()[_LAT]
        return min(90.0, lat.mid + lat.half_width)

    @property
    def min_longitude(self) -> float:
        lon = self._ranges()[_LON]
        return max(-180.0, lon.mid - lon.half_width)

    @property
    def max_longitude(self) -> float:
        lon = self._ranges()[_LON]
        return min(180.0, lon.mid + lon.half_width)

    @property
    def min_date_signal(self) -> float:
        signal = self._ranges()[_TIME]
        return max(-1.0, signal.mid - signal.half_width)

    @property
    def max_date_signal(self) -> float:
        signal = self._ranges()[_TIME]
        return min(1.0, signal.mid + signal.half_width)

    @property
    def min_date(self) -> datetime:
        return date_from_signal(self.min_date_signal)

    @property
    def max_date(self) -> datetime:
        return date_from_signal(self.max_date_signal)

    def to_base64(self) -> str:
        return encode_groups(self.key, self.precision, MAX_BIT_PRECISION, BASE64)

    def to_binary_string(self) -> str:
        if self.precision == 0:
            return ""
        return format(self.key >> (MAX_BIT_PRECISION - self.precision), f"0{self.precision}b")

    def latitude_cell_size(self) -> str:
        """Describe the cell height in degrees and meters."""
        _, lon, lat = self._ranges()
        meters = distance_m(Point(lat.low, lon.mid), Point(lat.high, lon.mid))
        return f"dLat({_format_size(lat.width)} deg, {_format_size(meters)} m)"

    def longitude_cell_size(self) -> str:
        """Describe the cell width in degrees and meters at its mid latitude."""
        _, lon, lat = self._ranges()
        meters = distance_m(Point(lat.mid, lon.low), Point(lat.mid, lon.high))
        return f"dLon({_format_size(lon.width)} deg, {_format_size(meters)} m)"

    def date_cell_size(self) -> str:
        """Describe the cell duration in the largest unit that is at least one."""
        signal = self._ranges()[_TIME]
        seconds = (date_from_signal(signal.high) - date_from_signal(signal.low)).total_seconds()
        days = seconds / 86400.0
        for label, amount in (
            ("years", days / 365.24),
            ("months", days / 7.0 / (52.0 / 12.0)),
            ("weeks", days / 7.0),
            ("days", days),
            ("hours", seconds / 3600.0),
            ("minutes", seconds / 60.0),
        ):
            if amount >= 1.0:
                return f"dDate({amount:,.2f} {label})"
        return f"dDate({seconds:,.2f} seconds)"

    def describe(self) -> str:
        """Return a human-readable summary of the cell's position and extent."""
        signal, lon, lat = self._ranges()
        stamp = date_from_signal(signal.mid).strftime("%Y-%m-%d %H:%M:%S")
        return (
            f"GeoTimeHash {self.precision} bits -> ({lat.mid:,.4f}, {lon.mid:,.4f}, {stamp}) => "
            f"cellSize({self.latitude_cell_size()}; {self.longitude_cell_size()}; {self.date_cell_size()}) "
            f"2[{self.to_binary_string()}] 64[{self.to_base64()}] "
            f"LAT[{lat.low:,.4f},{lat.high:,.4f}] LON[{lon.low:,.4f},{lon.high:,.4f}]"
        )

    def __str__(self) -> str:
        return self.describe()
