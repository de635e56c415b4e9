"""Tests for random cell sampling within a bounding pair."""

import pytest

from geohash_sweep.contracts import BoundingBox
from geohash_sweep.errors import ConstructionError
from geohash_sweep.iterate.bbox import TwoCellBoundingBox
from geohash_sweep.iterate.sampler import BoundingBoxSampler


def _pair() -> TwoCellBoundingBox:
    return TwoCellBoundingBox.from_base32("tq4xjq0tq4xjq5")


def test_sampling_without_replacement_exhausts() -> None:
    """Every sampled cell should be unique and inside the box, then None."""
    pair = _pair()
    box = pair.bounding_box
    sampler = BoundingBoxSampler(pair, seed=1)
    cells = list(sampler)
    assert cells
    assert len(cells) == len(set(cells))
    assert all(box.contains(cell.center) for cell in cells)
    assert all(cell.precision == 35 for cell in cells)
    assert sampler.exhausted
    assert sampler.next() is None


def test_same_seed_same_sequence() -> None:
    """Seeded samplers should be reproducible."""
    a = BoundingBoxSampler(_pair(), seed=42)
    b = BoundingBoxSampler(_pair(), seed=42)
    drawn = [a.next() for _ in range(4)]
    assert drawn == [b.next() for _ in range(4)]
    assert drawn[0] is not None


def test_sampling_with_replacement_keeps_going() -> None:
    """With replacement, draws continue past the sample space size."""
    pair = _pair()
    sampler = BoundingBoxSampler(pair, seed=3, with_replacement=True)
    draws = [sampler.next() for _ in range(3 * sampler.sample_space)]
    assert all(cell is not None for cell in draws)
    assert not sampler.exhausted
    with pytest.raises(TypeError):
        iter(sampler)


def test_oversized_sample_space_is_rejected() -> None:
    """Bounding pairs spanning too many keys should be refused."""
    pair = TwoCellBoundingBox.with_bit_precision(BoundingBox(10.0, 40.0, 10.0, 40.0), 64)
    with pytest.raises(ConstructionError, match="exceeds"):
        BoundingBoxSampler(pair)
