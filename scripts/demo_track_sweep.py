"""Demo: sweep a buffered track, then sample random cells from its bounding pair."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from geohash_sweep.contracts import Point  # noqa: E402
from geohash_sweep.iterate.bbox import TwoCellBoundingBox  # noqa: E402
from geohash_sweep.iterate.sampler import BoundingBoxSampler  # noqa: E402
from geohash_sweep.iterate.track import TrackIterator  # noqa: E402


def main() -> int:
    """Run a track sweep and print the nearest cells plus a few samples."""
    track = [Point(35.0, 60.0), Point(35.005, 60.004), Point(35.01, 60.01)]
    sweep = TrackIterator(track, None, radius_m=250.0, precision=35)

    nearest: list[tuple[float, str]] = []
    for cell in sweep:
        nearest.append((sweep.distance_m, cell.to_base32()))
    nearest.sort()

    print("=== Geohash Sweep Track Demo ===")
    print(f"cells covering the track: {len(nearest)}")
    for distance, text in nearest[:5]:
        print(f"{text}  {distance:8.2f} m")

    pair = TwoCellBoundingBox.from_base32("tq4xjq0tq4xjq5")
    sampler = BoundingBoxSampler(pair, seed=7)
    samples = [sampler.next() for _ in range(3)]
    print("random cells in", pair.to_base32(), ":", ", ".join(s.to_base32() for s in samples if s is not None))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
