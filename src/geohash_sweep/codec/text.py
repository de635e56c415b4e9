"""Fixed-width symbol encodings of hash keys.

A key of `precision` bits becomes `precision // bits_per_symbol` full symbols.
Leftover bits are written as a `.<count><symbol>` suffix whose symbol carries
them in its high bits.
"""

from __future__ import annotations

from dataclasses import dataclass

from geohash_sweep.errors import DecodeError

BASE32_SYMBOLS = "0123456789bcdefghjkmnpqrstuvwxyz"
BASE64_SYMBOLS = "0123456789abcdefghijkmnopqrstuvwxyzABCDEFGHIJKLMNPQRSTUVWXYZ_=~+"


@dataclass(frozen=True, slots=True)
class Alphabet:
    """Ordered symbol set where the symbol index is the encoded value."""

    symbols: str
    bits_per_symbol: int

    def __post_init__(self) -> None:
        """Validate alphabet size against the bit width."""
        if len(self.symbols) != 1 << self.bits_per_symbol:
            raise ValueError("alphabet size must equal 2 ** bits_per_symbol")
        if len(set(self.symbols)) != len(self.symbols):
            raise ValueError("alphabet symbols must be unique")

    def value_of(self, symbol: str) -> int:
        index = self.symbols.find(symbol)
        if len(symbol) != 1 or index < 0:
            raise DecodeError(f"{symbol!r} is not a valid symbol")
        return index


BASE32 = Alphabet(BASE32_SYMBOLS, 5)
BASE64 = Alphabet(BASE64_SYMBOLS, 6)


def encode_groups(key: int, precision: int, width: int, alphabet: Alphabet) -> str:
    """Encode the `precision` significant bits of an MSB-aligned `width`-bit key."""
    if not 0 <= precision <= width:
        raise ValueError(f"precision must be within [0, {width}]")
    bits = alphabet.bits_per_symbol
    mask = (1 << bits) - 1
    value = key >> (width - precision)
    full, leftover = divmod(precision, bits)
    out = [
        alphabet.symbols[(value >> (precision - (index + 1) * bits)) & mask]
        for index in range(full)
    ]
    if leftover:
        partial = (value & ((1 << leftover) - 1)) << (bits - leftover)
        out.append(f".{leftover}{alphabet.symbols[partial]}")
    return "".join(out)


def decode_groups(text: str, alphabet: Alphabet) -> tuple[int, int]:
    """Decode text into `(value, precision)` with the significant bits right-aligned."""
    bits = alphabet.bits_per_symbol
    head, dot, tail = text.partition(".")
    value = 0
    precision = 0
    for symbol in head:
        value = (value << bits) | alphabet.value_of(symbol)
        precision += bits
    if dot:
        if len(tail) != 2 or not tail[0].isdigit():
            raise DecodeError(f"malformed partial group {tail!r} in {text!r}")
        leftover = int(tail[0])
        if not 0 < leftover < bits:
            raise DecodeError(f"partial group must carry 1..{bits - 1} bits, got {leftover}")
        partial = alphabet.value_of(tail[1])
        if partial & ((1 << (bits - leftover)) - 1):
            raise DecodeError(f"partial symbol {tail[1]!r} sets bits beyond its {leftover}-bit count")
        value = (value << leftover) | (partial >> (bits - leftover))
        precision += leftover
    return value, precision
