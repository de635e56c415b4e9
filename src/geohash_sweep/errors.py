"""Exception types raised by the hashing and sweep engine."""

from __future__ import annotations


class GeoHashError(ValueError):
    """Base class for invalid input to the hashing engine."""


class ConstructionError(GeoHashError):
    """Raised when a cell, pair, iterator or sampler cannot be built from its inputs."""


class AddressingError(GeoHashError):
    """Raised when a bit position falls outside the key storage."""


class DecodeError(GeoHashError):
    """Raised when a textual or binary hash representation cannot be parsed."""
