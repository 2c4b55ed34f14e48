"""
Pydantic models for geocell inputs and outputs.

These validate untrusted degree-based input before it is turned into the
radian-based geometry types, and describe coverings in serialisable form.
"""

from __future__ import annotations

from typing import Iterable, Literal

from pydantic import BaseModel, Field, field_validator

from geocell.cellid import MAX_LEVEL, CellId
from geocell.geo.cap import Cap
from geocell.geo.earth import cap_from_center_radius
from geocell.geo.interval import R1Interval, S1Interval
from geocell.geo.latlng import LatLng
from geocell.geo.latlng_rect import LatLngRect
from geocell.validation import validate_token

# -----------------------------------------------------------------------------
# Geometry Models
# -----------------------------------------------------------------------------


class Location(BaseModel):
    """A point on the Earth's surface (WGS84 degrees)."""

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in degrees")

    def to_latlng(self) -> LatLng:
        return LatLng.from_degrees(self.lat, self.lon)


class CapGeometry(BaseModel):
    """A circular region on the Earth's surface."""

    type: Literal["cap"] = "cap"
    center: Location
    radius: float = Field(..., gt=0, description="Radius in meters")

    def to_cap(self) -> Cap:
        return cap_from_center_radius(self.center.to_latlng(), self.radius)


class BoundingBox(BaseModel):
    """Latitude/longitude box; min_lon > max_lon means it crosses the antimeridian."""

    min_lat: float = Field(..., ge=-90, le=90)
    max_lat: float = Field(..., ge=-90, le=90)
    min_lon: float = Field(..., ge=-180, le=180)
    max_lon: float = Field(..., ge=-180, le=180)

    @field_validator("max_lat")
    @classmethod
    def validate_lat_order(cls, v: float, info) -> float:
        min_lat = info.data.get("min_lat")
        if min_lat is not None and v < min_lat:
            raise ValueError("max_lat must not be below min_lat")
        return v

    def to_rect(self) -> LatLngRect:
        lo = LatLng.from_degrees(self.min_lat, self.min_lon)
        hi = LatLng.from_degrees(self.max_lat, self.max_lon)
        return LatLngRect(R1Interval(lo.lat, hi.lat), S1Interval(lo.lng, hi.lng))

    @classmethod
    def from_rect(cls, rect: LatLngRect) -> BoundingBox:
        lo = rect.lo()
        hi = rect.hi()
        return cls(
            min_lat=lo.lat_degrees,
            max_lat=hi.lat_degrees,
            min_lon=lo.lng_degrees,
            max_lon=hi.lng_degrees,
        )


# -----------------------------------------------------------------------------
# Covering Models
# -----------------------------------------------------------------------------


class CoveringOptions(BaseModel):
    """Constraints for a region covering. Out-of-range levels are clamped."""

    min_level: int = Field(default=0, description="Smallest level (largest cells) to use")
    max_level: int = Field(default=MAX_LEVEL, description="Largest level (smallest cells) to use")
    level_mod: int = Field(default=1, description="Only use levels min_level + k * level_mod")
    max_cells: int = Field(default=8, ge=1, description="Desired maximum number of cells")

    @field_validator("min_level", "max_level")
    @classmethod
    def clamp_level(cls, v: int) -> int:
        return max(0, min(MAX_LEVEL, v))

    @field_validator("level_mod")
    @classmethod
    def clamp_level_mod(cls, v: int) -> int:
        return max(1, min(3, v))


class Covering(BaseModel):
    """A covering as a list of cell tokens, with the options that produced it."""

    interior: bool = False
    options: CoveringOptions
    tokens: list[str]

    @field_validator("tokens")
    @classmethod
    def validate_tokens(cls, v: list[str]) -> list[str]:
        return [validate_token(token) for token in v]

    @classmethod
    def from_cells(
        cls, cell_ids: Iterable[CellId], options: CoveringOptions, interior: bool = False
    ) -> Covering:
        return cls(
            interior=interior,
            options=options,
            tokens=[cell_id.to_token() for cell_id in cell_ids],
        )

    def cell_ids(self) -> list[CellId]:
        return [CellId.from_token(token) for token in self.tokens]
