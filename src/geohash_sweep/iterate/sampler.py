"""Uniform random sampling of cells from a bounding pair."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import numpy as np

from geohash_sweep.contracts import BoundingBox
from geohash_sweep.errors import ConstructionError
from geohash_sweep.hashing.geohash import GeoHash
from geohash_sweep.iterate.bbox import TwoCellBoundingBox

logger = logging.getLogger(__name__)

MAX_SAMPLE_SPACE = 2**31 - 1


class BoundingBoxSampler:
    """Draw cells lying between two corner cells in key order.

    Offsets are drawn uniformly from the key range between the corners; a
    drawn cell is kept only when its centre falls inside the pair's box.
    """

    def __init__(self, bbox: TwoCellBoundingBox, seed: int | None = None, with_replacement: bool = False) -> None:
        """Size the sample space and seed the generator."""
        steps = GeoHash.steps_between(bbox.bottom_left, bbox.top_right)
        if steps < 0:
            raise ConstructionError("top-right cell must not precede bottom-left cell in key order")
        if steps + 1 > MAX_SAMPLE_SPACE:
            raise ConstructionError(f"sample space of {steps + 1} cells exceeds {MAX_SAMPLE_SPACE}")
        self.bbox = bbox
        self.with_replacement = with_replacement
        self.sample_space = steps + 1
        self._box: BoundingBox = bbox.bounding_box
        self._used: set[int] = set()
        self._rng = np.random.default_rng(seed)
        logger.debug("sampler over %d offsets, replacement=%s", self.sample_space, with_replacement)

    @property
    def exhausted(self) -> bool:
        return not self.with_replacement and len(self._used) >= self.sample_space

    def _draw_offset(self) -> int:
        offset = int(self._rng.integers(0, self.sample_space))
        if not self.with_replacement:
            while offset in self._used:
                offset = int(self._rng.integers(0, self.sample_space))
            self._used.add(offset)
        return offset

    def next(self) -> GeoHash | None:
        """Return a random cell inside the box, or None once every offset has been drawn."""
        while not self.exhausted:
            cell = self.bbox.bottom_left.next(self._draw_offset())
            if self._box.contains(cell.center):
                return cell
        return None

    def __iter__(self) -> Iterator[GeoHash]:
        if self.with_replacement:
            raise TypeError("iterating a sampler with replacement never ends; call next() instead")
        return self._drain()

    def _drain(self) -> Iterator[GeoHash]:
        while (cell := self.next()) is not None:
            yield cell
