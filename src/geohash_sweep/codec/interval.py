"""Interval-halving encode/decode of a single bounded scalar axis."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class IntervalRange:
    """Live `(low, mid, high)` state of one axis during interval halving."""

    low: float
    mid: float
    high: float

    @classmethod
    def spanning(cls, low: float, high: float) -> IntervalRange:
        """Return the starting range for an axis bounded by `[low, high]`."""
        return cls(low, (low + high) / 2.0, high)

    @property
    def half_width(self) -> float:
        return self.high - self.mid

    @property
    def width(self) -> float:
        return self.high - self.low


def bisect(current: IntervalRange, go_right: bool) -> IntervalRange:
    """Return the half of `current` selected by one direction bit."""
    if go_right:
        low, high = current.mid, current.high
    else:
        low, high = current.low, current.mid
    return IntervalRange(low, (low + high) / 2.0, high)


def choose(current: IntervalRange, value: float) -> bool:
    """Return the direction bit for `value`; ties go to the upper half."""
    return value >= current.mid


def encode_scalar(value: float, start: IntervalRange, bits: int) -> tuple[int, IntervalRange]:
    """Encode `value` into `bits` direction bits, MSB first.

    Returns:
        The integer holding the bits and the final range containing `value`.
    """
    if bits < 0:
        raise ValueError("bits must be non-negative")
    code = 0
    current = start
    for _ in range(bits):
        bit = choose(current, value)
        current = bisect(current, bit)
        code = (code << 1) | int(bit)
    return code, current


def decode_bits(code: int, count: int, start: IntervalRange) -> IntervalRange:
    """Replay `count` MSB-first direction bits of `code` from `start`."""
    if count < 0:
        raise ValueError("count must be non-negative")
    current = start
    for shift in range(count - 1, -1, -1):
        current = bisect(current, bool((code >> shift) & 1))
    return current
