"""Two-axis latitude/longitude geohash cells with 64-bit keys."""

from __future__ import annotations

from dataclasses import dataclass

from geohash_sweep.codec.interleave import AxisLayout, compose_bits, decode, decompose_bits, encode
from geohash_sweep.codec.interval import IntervalRange
from geohash_sweep.codec.text import BASE32, decode_groups, encode_groups
from geohash_sweep.contracts import BoundingBox, Point
from geohash_sweep.errors import AddressingError, ConstructionError, DecodeError

MAX_BIT_PRECISION = 64
MAX_CHARACTER_PRECISION = 12

GEOHASH_LAYOUT = AxisLayout(
    axes=("longitude", "latitude"),
    ranges=(IntervalRange.spanning(-180.0, 180.0), IntervalRange.spanning(-90.0, 90.0)),
    pattern=(0, 1),
)
_LON = 0
_LAT = 1


def axis_precisions(precision: int) -> tuple[int, int]:
    """Return `(lat_bits, lon_bits)` for a total precision; longitude takes the odd bit."""
    lon_bits, lat_bits = GEOHASH_LAYOUT.axis_precisions(precision)
    return lat_bits, lon_bits


@dataclass(frozen=True, slots=True, order=True)
class GeoHash:
    """Immutable geohash cell: MSB-aligned 64-bit key plus significant bit count."""

    key: int
    precision: int

    def __post_init__(self) -> None:
        """Validate precision, key width and zeroed low-order bits."""
        GEOHASH_LAYOUT.check_precision(self.precision)
        if not 0 <= self.key < (1 << MAX_BIT_PRECISION):
            raise ConstructionError("key must be an unsigned 64-bit value")
        if self.key & ((1 << (MAX_BIT_PRECISION - self.precision)) - 1):
            raise ConstructionError("bits beyond the precision must be zero")

    @classmethod
    def with_bit_precision(cls, latitude: float, longitude: float, bits: int) -> GeoHash:
        """Encode a point into a cell of `bits` significant bits."""
        point = Point(latitude, longitude)
        key, _ = encode((point.longitude, point.latitude), bits, GEOHASH_LAYOUT)
        return cls(key, bits)

    @classmethod
    def with_character_precision(cls, latitude: float, longitude: float, characters: int) -> GeoHash:
        """Encode a point into a cell spelled by `characters` base-32 symbols."""
        if not 0 <= characters <= MAX_CHARACTER_PRECISION:
            raise ConstructionError(
                f"character precision must be within [0, {MAX_CHARACTER_PRECISION}], got {characters}"
            )
        return cls.with_bit_precision(latitude, longitude, 5 * characters)

    @classmethod
    def from_base32(cls, text: str, bits: int | None = None) -> GeoHash:
        """Parse base-32 text, optionally keeping only its first `bits` bits."""
        value, precision = decode_groups(text, BASE32)
        if precision > MAX_BIT_PRECISION:
            raise AddressingError(f"{text!r} encodes {precision} bits, more than {MAX_BIT_PRECISION}")
        if bits is not None:
            if not 0 <= bits <= precision:
                raise DecodeError(f"{text!r} holds {precision} bits, cannot keep {bits}")
            value >>= precision - bits
            precision = bits
        return cls.from_ord(value, precision)

    @classmethod
    def from_binary_string(cls, text: str) -> GeoHash:
        """Parse a string of '0'/'1' characters, one per significant bit."""
        if any(char not in "01" for char in text):
            raise DecodeError(f"{text!r} is not a binary string")
        return cls.from_ord(int(text, 2) if text else 0, len(text))

    @classmethod
    def from_long_value(cls, key: int, bits: int) -> GeoHash:
        """Build a cell from an MSB-aligned key, dropping bits beyond `bits`."""
        GEOHASH_LAYOUT.check_precision(bits)
        if not 0 <= key < (1 << MAX_BIT_PRECISION):
            raise ConstructionError("key must be an unsigned 64-bit value")
        return cls.from_ord(key >> (MAX_BIT_PRECISION - bits), bits)

    @classmethod
    def from_ord(cls, ordinal: int, bits: int) -> GeoHash:
        """Build the cell whose significant bits read as `ordinal`."""
        GEOHASH_LAYOUT.check_precision(bits)
        if not 0 <= ordinal < (1 << bits):
            raise AddressingError(f"ordinal {ordinal} does not fit in {bits} bits")
        return cls(ordinal << (MAX_BIT_PRECISION - bits), bits)

    @classmethod
    def from_axis_bits(cls, lat_bits: int, lon_bits: int, lat_precision: int, lon_precision: int) -> GeoHash:
        """Interleave per-axis addresses into a cell."""
        key, precision = compose_bits((lon_bits, lat_bits), (lon_precision, lat_precision), GEOHASH_LAYOUT)
        return cls(key, precision)

    @property
    def significant_bits(self) -> int:
        return self.precision

    @property
    def character_precision(self) -> int:
        """Number of full base-32 symbols."""
        return self.precision // BASE32.bits_per_symbol

    def _ranges(self) -> tuple[IntervalRange, ...]:
        return decode(self.key, self.precision, GEOHASH_LAYOUT)

    @property
    def center(self) -> Point:
        ranges = self._ranges()
        return Point(ranges[_LAT].mid, ranges[_LON].mid)

    @property
    def bounding_box(self) -> BoundingBox:
        ranges = self._ranges()
        return BoundingBox(ranges[_LAT].low, ranges[_LAT].high, ranges[_LON].low, ranges[_LON].high)

    def axis_bits(self) -> tuple[int, int]:
        """Return the `(lat_bits, lon_bits)` addresses of this cell."""
        lon_bits, lat_bits = decompose_bits(self.key, self.precision, GEOHASH_LAYOUT)
        return lat_bits, lon_bits

    def ord(self) -> int:
        """Significant bits read as an integer: the cell's position in key order."""
        return self.key >> (MAX_BIT_PRECISION - self.precision)

    def next(self, step: int = 1) -> GeoHash:
        """Return the cell `step` positions later in key order at the same precision."""
        return GeoHash.from_ord(self.ord() + step, self.precision)

    def prev(self) -> GeoHash:
        return self.next(-1)

    @staticmethod
    def steps_between(one: GeoHash, two: GeoHash) -> int:
        """Return `two.ord() - one.ord()`; both cells must share a precision."""
        if one.precision != two.precision:
            raise ConstructionError("cannot count steps between cells of different precision")
        return two.ord() - one.ord()

    def is_within(self, other: GeoHash) -> bool:
        """Return True when `other` is a bit-prefix of this cell."""
        if other.precision > self.precision:
            return False
        return self.key >> (MAX_BIT_PRECISION - other.precision) == other.ord()

    def contains(self, point: Point) -> bool:
        return self.bounding_box.contains(point)

    def to_base32(self) -> str:
        return encode_groups(self.key, self.precision, MAX_BIT_PRECISION, BASE32)

    def to_binary_string(self) -> str:
        if self.precision == 0:
            return ""
        return format(self.ord(), f"0{self.precision}b")

    def __str__(self) -> str:
        box = self.bounding_box
        return (
            f"{self.to_binary_string()} -> "
            f"[{box.min_latitude:.7f},{box.min_longitude:.7f}] -> "
            f"[{box.max_latitude:.7f},{box.max_longitude:.7f}]"
        )
