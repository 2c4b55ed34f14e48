"""Conversions between ground distances on Earth and angles on the unit sphere."""

import math

from .cap import Cap
from .constants import EARTH_RADIUS_M
from .latlng import Angle, LatLng


def haversine_distance(loc1: LatLng, loc2: LatLng) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Uses the Haversine formula for accuracy at all distances.

    Args:
        loc1: First location
        loc2: Second location

    Returns:
        Distance in meters
    """
    dlat = loc2.lat - loc1.lat
    dlon = loc2.lng - loc1.lng

    a = math.sin(dlat / 2) ** 2 + math.cos(loc1.lat) * math.cos(loc2.lat) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return EARTH_RADIUS_M * c


def meters_to_angle(meters: float) -> Angle:
    return Angle(meters / EARTH_RADIUS_M)


def angle_to_meters(angle: Angle) -> float:
    return angle.radians * EARTH_RADIUS_M


def cap_from_center_radius(center: LatLng, radius_m: float) -> Cap:
    """
    Build the cap covering a ground circle.

    Args:
        center: Center of the circle
        radius_m: Radius in meters

    Returns:
        Cap whose boundary is the circle; radii of half the circumference or
        more give the full cap
    """
    angle = meters_to_angle(radius_m)
    if angle.radians >= math.pi:
        return Cap.full()
    return Cap.from_axis_angle(center.normalized().to_point(), angle)
