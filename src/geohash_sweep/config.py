"""Environment-driven defaults for the CLI and HTTP surfaces."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True, slots=True)
class SweepSettings:
    """Resolved runtime defaults."""

    default_bits: int = 35
    default_radius_m: float = 500.0
    max_cells: int = 100_000
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        """Validate setting ranges."""
        if not 1 <= self.default_bits <= 64:
            raise ValueError("GEOHASH_SWEEP_DEFAULT_BITS must be within [1, 64]")
        if self.default_radius_m <= 0.0:
            raise ValueError("GEOHASH_SWEEP_DEFAULT_RADIUS_M must be positive")
        if self.max_cells < 1:
            raise ValueError("GEOHASH_SWEEP_MAX_CELLS must be >= 1")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"GEOHASH_SWEEP_LOG_LEVEL must be one of: {', '.join(sorted(_LOG_LEVELS))}")


def _read(env: Mapping[str, str], name: str, default: str) -> str:
    return env.get(name, default).strip()


def _read_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _read(env, name, str(default))
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _read(env, name, str(default))
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_settings(env: Mapping[str, str] | None = None) -> SweepSettings:
    """Build settings from `GEOHASH_SWEEP_*` environment variables."""
    source = os.environ if env is None else env
    return SweepSettings(
        default_bits=_read_int(source, "GEOHASH_SWEEP_DEFAULT_BITS", 35),
        default_radius_m=_read_float(source, "GEOHASH_SWEEP_DEFAULT_RADIUS_M", 500.0),
        max_cells=_read_int(source, "GEOHASH_SWEEP_MAX_CELLS", 100_000),
        log_level=_read(source, "GEOHASH_SWEEP_LOG_LEVEL", "WARNING").upper(),
    )
