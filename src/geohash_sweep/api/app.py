"""FastAPI app exposing cell encoding and coverage sweeps."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, model_validator

from geohash_sweep.config import SweepSettings, load_settings
from geohash_sweep.contracts import BoundingBox, Point
from geohash_sweep.errors import GeoHashError
from geohash_sweep.hashing.geohash import GeoHash
from geohash_sweep.hashing.geotime import GeoTimeHash
from geohash_sweep.iterate.base import HashGrid, HashIterator
from geohash_sweep.iterate.radial import RadialIterator
from geohash_sweep.iterate.rectangle import RectangleIterator
from geohash_sweep.iterate.track import TrackIterator
from geohash_sweep.time.epoch import to_utc


class EncodeRequest(BaseModel):
    """Request schema for encoding one point."""

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)
    bits: int | None = Field(default=None, ge=0, le=64)


class PointModel(BaseModel):
    """Latitude/longitude pair."""

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)

    def to_contract(self) -> Point:
        return Point(self.lat, self.lon)


class BoxModel(BaseModel):
    """Axis-aligned box."""

    lat_min: float = Field(ge=-90.0, le=90.0)
    lon_min: float = Field(ge=-180.0, le=180.0)
    lat_max: float = Field(ge=-90.0, le=90.0)
    lon_max: float = Field(ge=-180.0, le=180.0)

    @model_validator(mode="after")
    def validate_bounds(self) -> "BoxModel":
        """Validate coordinate ordering."""
        if self.lat_min > self.lat_max:
            raise ValueError("lat_min must be <= lat_max")
        if self.lon_min > self.lon_max:
            raise ValueError("lon_min must be <= lon_max")
        return self

    def to_contract(self) -> BoundingBox:
        return BoundingBox(self.lat_min, self.lat_max, self.lon_min, self.lon_max)


class RectangleRequest(BoxModel):
    """Request schema for a rectangle sweep."""

    bits: int | None = Field(default=None, ge=1, le=64)


class RadialRequest(BaseModel):
    """Request schema for a radial sweep."""

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)
    radius_m: float | None = Field(default=None, gt=0.0)
    bits: int | None = Field(default=None, ge=1, le=64)


class TrackRequest(BaseModel):
    """Request schema for a buffered track sweep."""

    points: list[PointModel] = Field(min_length=1)
    radius_m: float | None = Field(default=None, gt=0.0)
    bits: int | None = Field(default=None, ge=1, le=64)
    clip: BoxModel | None = None


class GeoTimeRequest(BaseModel):
    """Request schema for encoding a point and instant."""

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)
    time_utc: datetime
    bits: int = Field(default=60, ge=0, le=128)


class CellResponse(BaseModel):
    """One geohash cell."""

    geohash: str
    binary: str
    bits: int
    center_lat: float
    center_lon: float
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float
    distance_m: float | None = None


class SweepResponse(BaseModel):
    """Cells covering a query shape, in sweep order."""

    count: int
    cells: list[CellResponse]


class GeoTimeResponse(BaseModel):
    """One geo-time cell."""

    geotime: str
    binary: str
    bits: int
    lat: float
    lon: float
    time_utc: datetime


def _cell_response(cell: GeoHash, distance_m: float | None = None) -> CellResponse:
    center = cell.center
    box = cell.bounding_box
    return CellResponse(
        geohash=cell.to_base32(),
        binary=cell.to_binary_string(),
        bits=cell.precision,
        center_lat=center.latitude,
        center_lon=center.longitude,
        lat_min=box.min_latitude,
        lat_max=box.max_latitude,
        lon_min=box.min_longitude,
        lon_max=box.max_longitude,
        distance_m=distance_m,
    )


def _invalid(exc: GeoHashError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


def _check_grid(grid: HashGrid, max_cells: int) -> None:
    """Refuse sweeps whose candidate grid is larger than `max_cells`."""
    if grid.cell_count > max_cells:
        raise HTTPException(status_code=422, detail=f"sweep of {grid.cell_count} cells exceeds {max_cells}")


def _collect(
    iterator: HashIterator,
    max_cells: int,
    distance: Callable[[], float] | None = None,
) -> SweepResponse:
    """Drain an iterator into a response, refusing sweeps above `max_cells`."""
    cells: list[CellResponse] = []
    stream: Iterator[GeoHash] = iter(iterator)
    for cell in stream:
        if len(cells) >= max_cells:
            raise HTTPException(status_code=422, detail=f"sweep exceeds {max_cells} cells")
        cells.append(_cell_response(cell, distance() if distance is not None else None))
    return SweepResponse(count=len(cells), cells=cells)


def create_app(settings: SweepSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI app."""
    app = FastAPI(title="Geohash Sweep API", version="0.1.0")
    resolved = settings if settings is not None else load_settings()
    app.state.settings = resolved

    @app.post("/encode", response_model=CellResponse)
    def post_encode(payload: EncodeRequest) -> CellResponse:
        """Encode one point into a cell."""
        bits = payload.bits if payload.bits is not None else resolved.default_bits
        try:
            cell = GeoHash.with_bit_precision(payload.lat, payload.lon, bits)
        except GeoHashError as exc:
            raise _invalid(exc) from exc
        return _cell_response(cell)

    @app.get("/decode/{geohash}", response_model=CellResponse)
    def get_decode(geohash: str) -> CellResponse:
        """Decode base-32 text into its cell."""
        try:
            cell = GeoHash.from_base32(geohash)
        except GeoHashError as exc:
            raise _invalid(exc) from exc
        return _cell_response(cell)

    @app.post("/rectangle", response_model=SweepResponse)
    def post_rectangle(payload: RectangleRequest) -> SweepResponse:
        """Enumerate the cells intersecting a box."""
        bits = payload.bits if payload.bits is not None else resolved.default_bits
        try:
            iterator = RectangleIterator.over_box(payload.lat_min, payload.lon_min, payload.lat_max, payload.lon_max, bits)
        except GeoHashError as exc:
            raise _invalid(exc) from exc
        _check_grid(iterator.grid, resolved.max_cells)
        return _collect(iterator, resolved.max_cells)

    @app.post("/radial", response_model=SweepResponse)
    def post_radial(payload: RadialRequest) -> SweepResponse:
        """Enumerate the cells whose centres lie within a radius."""
        bits = payload.bits if payload.bits is not None else resolved.default_bits
        radius_m = payload.radius_m if payload.radius_m is not None else resolved.default_radius_m
        try:
            iterator = RadialIterator(payload.lat, payload.lon, radius_m, bits)
        except GeoHashError as exc:
            raise _invalid(exc) from exc
        _check_grid(iterator.window, resolved.max_cells)
        return _collect(iterator, resolved.max_cells, lambda: iterator.distance_m)

    @app.post("/track", response_model=SweepResponse)
    def post_track(payload: TrackRequest) -> SweepResponse:
        """Enumerate the cells within a radius of a polyline."""
        bits = payload.bits if payload.bits is not None else resolved.default_bits
        radius_m = payload.radius_m if payload.radius_m is not None else resolved.default_radius_m
        clip = payload.clip.to_contract() if payload.clip is not None else None
        try:
            iterator = TrackIterator([point.to_contract() for point in payload.points], clip, radius_m, bits)
            _check_grid(iterator.grid, resolved.max_cells)
            return _collect(iterator, resolved.max_cells, lambda: iterator.distance_m)
        except GeoHashError as exc:
            raise _invalid(exc) from exc

    @app.post("/geotime/encode", response_model=GeoTimeResponse)
    def post_geotime_encode(payload: GeoTimeRequest) -> GeoTimeResponse:
        """Encode a point and instant into a geo-time cell."""
        try:
            cell = GeoTimeHash.with_bit_precision(payload.lat, payload.lon, to_utc(payload.time_utc), payload.bits)
        except GeoHashError as exc:
            raise _invalid(exc) from exc
        return GeoTimeResponse(
            geotime=cell.to_base64(),
            binary=cell.to_binary_string(),
            bits=cell.precision,
            lat=cell.latitude,
            lon=cell.longitude,
            time_utc=cell.date,
        )

    return app


app = create_app()
