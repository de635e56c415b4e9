"""Bit-interleaving engine shared by the 2-axis and 3-axis hashes.

Keys are MSB-aligned integers `64 * words` bits wide: bit position 0 is the
most significant bit and unused low-order bits are zero. Which axis a bit
position refines is data, described by an `AxisLayout`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from geohash_sweep.codec.interval import IntervalRange, bisect, choose
from geohash_sweep.errors import AddressingError, ConstructionError

WORD_BITS = 64


@dataclass(frozen=True, slots=True)
class AxisLayout:
    """Axis names, start ranges and the repeating bit-to-axis pattern of a hash."""

    axes: tuple[str, ...]
    ranges: tuple[IntervalRange, ...]
    pattern: tuple[int, ...]
    words: int = 1

    def __post_init__(self) -> None:
        """Validate that the pattern only references declared axes."""
        if len(self.axes) != len(self.ranges):
            raise ValueError("every axis needs exactly one start range")
        if not self.pattern or any(not 0 <= axis < len(self.axes) for axis in self.pattern):
            raise ValueError("pattern must reference declared axes")
        if self.words < 1:
            raise ValueError("words must be positive")

    @property
    def capacity(self) -> int:
        """Total number of addressable bit positions."""
        return WORD_BITS * self.words

    def axis_of(self, position: int) -> int:
        """Return the axis index refined by bit `position`."""
        if not 0 <= position < self.capacity:
            raise AddressingError(f"bit position {position} is outside the {self.capacity}-bit key")
        return self.pattern[position % len(self.pattern)]

    def axis_precisions(self, precision: int) -> tuple[int, ...]:
        """Return how many of the first `precision` bits belong to each axis."""
        self.check_precision(precision)
        counts = [0] * len(self.axes)
        full, rest = divmod(precision, len(self.pattern))
        for axis in self.pattern:
            counts[axis] += full
        for axis in self.pattern[:rest]:
            counts[axis] += 1
        return tuple(counts)

    def check_precision(self, precision: int) -> None:
        """Raise when `precision` cannot be stored in this layout's key."""
        if precision < 0:
            raise ConstructionError(f"precision must be non-negative, got {precision}")
        if precision > self.capacity:
            raise AddressingError(
                f"bit position {precision - 1} is outside the {self.capacity}-bit key"
            )


def bit_at(key: int, position: int, layout: AxisLayout) -> int:
    """Return the bit stored at `position` (0 is the most significant)."""
    if not 0 <= position < layout.capacity:
        raise AddressingError(f"bit position {position} is outside the {layout.capacity}-bit key")
    return (key >> (layout.capacity - 1 - position)) & 1


def encode(
    scalars: Sequence[float],
    precision: int,
    layout: AxisLayout,
) -> tuple[int, tuple[IntervalRange, ...]]:
    """Encode one scalar per axis into an interleaved key.

    Args:
        scalars: Axis values in layout axis order.
        precision: Number of significant bits.
        layout: Axis assignment to follow.

    Returns:
        The MSB-aligned key and the final per-axis ranges.
    """
    layout.check_precision(precision)
    if len(scalars) != len(layout.axes):
        raise ConstructionError(f"expected {len(layout.axes)} axis values, got {len(scalars)}")
    ranges = list(layout.ranges)
    key = 0
    for position in range(precision):
        axis = layout.axis_of(position)
        bit = choose(ranges[axis], scalars[axis])
        ranges[axis] = bisect(ranges[axis], bit)
        key = (key << 1) | int(bit)
    return key << (layout.capacity - precision), tuple(ranges)


def decode(key: int, precision: int, layout: AxisLayout) -> tuple[IntervalRange, ...]:
    """Replay the significant bits of `key` and return the per-axis ranges."""
    layout.check_precision(precision)
    ranges = list(layout.ranges)
    for position in range(precision):
        axis = layout.axis_of(position)
        ranges[axis] = bisect(ranges[axis], bool(bit_at(key, position, layout)))
    return tuple(ranges)


def decompose_bits(key: int, precision: int, layout: AxisLayout) -> tuple[int, ...]:
    """Split `key` into one MSB-first bit integer per axis."""
    layout.check_precision(precision)
    axis_bits = [0] * len(layout.axes)
    for position in range(precision):
        axis = layout.axis_of(position)
        axis_bits[axis] = (axis_bits[axis] << 1) | bit_at(key, position, layout)
    return tuple(axis_bits)


def compose_bits(
    axis_bits: Sequence[int],
    axis_precisions: Sequence[int],
    layout: AxisLayout,
) -> tuple[int, int]:
    """Interleave per-axis bit integers back into a key; inverse of `decompose_bits`."""
    precision = sum(axis_precisions)
    if tuple(axis_precisions) != layout.axis_precisions(precision):
        raise ConstructionError(
            f"axis precisions {tuple(axis_precisions)} do not fit the interleave pattern"
        )
    for name, bits, count in zip(layout.axes, axis_bits, axis_precisions):
        if not 0 <= bits < (1 << count):
            raise AddressingError(f"{name} address {bits} is outside a {count}-bit axis")
    remaining = list(axis_precisions)
    key = 0
    for position in range(precision):
        axis = layout.axis_of(position)
        remaining[axis] -= 1
        key = (key << 1) | ((axis_bits[axis] >> remaining[axis]) & 1)
    return key << (layout.capacity - precision), precision
