"""Spherical geometry primitives: points, intervals, caps, rectangles and projections."""

from .cap import Cap
from .constants import EARTH_RADIUS_M
from .earth import angle_to_meters, cap_from_center_radius, haversine_distance, meters_to_angle
from .interval import R1Interval, S1Interval
from .latlng import Angle, LatLng
from .latlng_rect import LatLngRect
from .metrics import AVG_AREA, AVG_EDGE, MAX_AREA, MAX_WIDTH, MIN_AREA, MIN_WIDTH, Metric
from .point import Point

__all__ = [
    "EARTH_RADIUS_M",
    "Point",
    "Angle",
    "LatLng",
    "R1Interval",
    "S1Interval",
    "Cap",
    "LatLngRect",
    "Metric",
    "MIN_WIDTH",
    "MAX_WIDTH",
    "AVG_EDGE",
    "MIN_AREA",
    "MAX_AREA",
    "AVG_AREA",
    "haversine_distance",
    "meters_to_angle",
    "angle_to_meters",
    "cap_from_center_radius",
]
