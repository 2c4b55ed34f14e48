"""Angles and latitude/longitude pairs."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .constants import M_PI, M_PI_2
from .point import Point


@dataclass(frozen=True, order=True)
class Angle:
    """A one-dimensional angle stored in radians."""

    radians: float

    @classmethod
    def from_degrees(cls, degrees: float) -> Angle:
        return cls(math.radians(degrees))

    @classmethod
    def between(cls, a: Point, b: Point) -> Angle:
        """Return the angle between two points on the sphere."""
        return cls(a.angle(b))

    @property
    def degrees(self) -> float:
        return math.degrees(self.radians)

    def __repr__(self) -> str:
        return f"Angle({self.degrees}d)"


@dataclass(frozen=True)
class LatLng:
    """A point on the sphere as latitude/longitude in radians."""

    lat: float
    lng: float

    @classmethod
    def from_degrees(cls, lat_degrees: float, lng_degrees: float) -> LatLng:
        return cls(math.radians(lat_degrees), math.radians(lng_degrees))

    @classmethod
    def from_point(cls, p: Point) -> LatLng:
        """Convert a direction vector (not necessarily unit length)."""
        return cls(
            math.atan2(p.z, math.sqrt(p.x * p.x + p.y * p.y)),
            math.atan2(p.y, p.x),
        )

    @property
    def lat_degrees(self) -> float:
        return math.degrees(self.lat)

    @property
    def lng_degrees(self) -> float:
        return math.degrees(self.lng)

    def is_valid(self) -> bool:
        """True if latitude is within [-90, 90] and longitude within [-180, 180]."""
        return abs(self.lat) <= M_PI_2 and abs(self.lng) <= M_PI

    def normalized(self) -> LatLng:
        """Clamp the latitude and wrap the longitude into the valid range."""
        return LatLng(
            max(-M_PI_2, min(M_PI_2, self.lat)),
            math.remainder(self.lng, 2 * M_PI),
        )

    def to_point(self) -> Point:
        phi = self.lat
        theta = self.lng
        cos_phi = math.cos(phi)
        return Point(math.cos(theta) * cos_phi, math.sin(theta) * cos_phi, math.sin(phi))

    def get_distance(self, other: LatLng) -> Angle:
        """
        Return the great-circle angle to another point (haversine form).

        Args:
            other: The other point

        Returns:
            Angular distance
        """
        dlat = math.sin(0.5 * (other.lat - self.lat))
        dlng = math.sin(0.5 * (other.lng - self.lng))
        x = dlat * dlat + dlng * dlng * math.cos(self.lat) * math.cos(other.lat)
        return Angle(2 * math.atan2(math.sqrt(x), math.sqrt(max(0.0, 1.0 - x))))

    def approx_equals(self, other: LatLng, max_error: float = 1e-9) -> bool:
        return abs(self.lat - other.lat) < max_error and abs(self.lng - other.lng) < max_error

    def __repr__(self) -> str:
        return f"LatLng({self.lat_degrees}, {self.lng_degrees})"
