"""Bounding boxes described by a bottom-left and a top-right cell."""

from __future__ import annotations

from dataclasses import dataclass

from geohash_sweep.contracts import BoundingBox
from geohash_sweep.errors import ConstructionError
from geohash_sweep.hashing.geohash import GeoHash


@dataclass(frozen=True, slots=True)
class TwoCellBoundingBox:
    """Pair of equal-precision corner cells covering a bounding box."""

    bottom_left: GeoHash
    top_right: GeoHash

    def __post_init__(self) -> None:
        """Reject missing corners and mismatched precisions."""
        if self.bottom_left is None or self.top_right is None:
            raise ConstructionError("both corner cells are required")
        if self.bottom_left.precision != self.top_right.precision:
            raise ConstructionError("corner cells of a bounding pair must share a precision")

    @classmethod
    def with_bit_precision(cls, bbox: BoundingBox, bits: int) -> TwoCellBoundingBox:
        """Encode the box's corners at `bits` bits."""
        return cls(
            GeoHash.with_bit_precision(bbox.min_latitude, bbox.min_longitude, bits),
            GeoHash.with_bit_precision(bbox.max_latitude, bbox.max_longitude, bits),
        )

    @classmethod
    def with_character_precision(cls, bbox: BoundingBox, characters: int) -> TwoCellBoundingBox:
        """Encode the box's corners at `characters` base-32 symbols."""
        return cls(
            GeoHash.with_character_precision(bbox.min_latitude, bbox.min_longitude, characters),
            GeoHash.with_character_precision(bbox.max_latitude, bbox.max_longitude, characters),
        )

    @classmethod
    def from_base32(cls, text: str | None, bits: int | None = None) -> TwoCellBoundingBox:
        """Parse the concatenated base-32 corners written by `to_base32`.

        Args:
            text: Bottom-left text immediately followed by top-right text of equal length.
            bits: Optional bit count both halves are truncated to.
        """
        if text is None:
            raise ConstructionError("bounding pair text is required")
        if len(text) % 2:
            raise ConstructionError(f"bounding pair text must have even length, got {len(text)}")
        half = len(text) // 2
        return cls(
            GeoHash.from_base32(text[:half], bits),
            GeoHash.from_base32(text[half:], bits),
        )

    @property
    def precision(self) -> int:
        return self.bottom_left.precision

    @property
    def bounding_box(self) -> BoundingBox:
        """Union of both corner cells' boxes."""
        box = self.bottom_left.bounding_box
        box.expand_to_include(self.top_right.bounding_box)
        return box

    def to_base32(self) -> str:
        return self.bottom_left.to_base32() + self.top_right.to_base32()
