"""Latitude/longitude rectangles on the sphere."""

from __future__ import annotations

import math

from geocell.errors import InvalidVertexIndex

from .cap import Cap
from .constants import M_PI, M_PI_2
from .interval import R1Interval, S1Interval
from .latlng import Angle, LatLng
from .point import Point, robust_cross_prod, simple_crossing


class LatLngRect:
    """
    A closed rectangle in latitude/longitude space.

    The latitude interval is bounded by [-pi/2, pi/2]; the longitude
    interval may wrap across the antimeridian. The rectangle is empty when
    the latitude interval is.
    """

    __slots__ = ("lat", "lng")

    def __init__(self, lat: R1Interval, lng: S1Interval):
        self.lat = lat
        self.lng = lng

    @classmethod
    def from_latlng(cls, lo: LatLng, hi: LatLng) -> LatLngRect:
        return cls(R1Interval(lo.lat, hi.lat), S1Interval(lo.lng, hi.lng))

    @classmethod
    def empty(cls) -> LatLngRect:
        return cls(R1Interval.empty(), S1Interval.empty())

    @classmethod
    def full(cls) -> LatLngRect:
        return cls(cls.full_lat(), S1Interval.full())

    @staticmethod
    def full_lat() -> R1Interval:
        return R1Interval(-M_PI_2, M_PI_2)

    @classmethod
    def from_center_size(cls, center: LatLng, size: LatLng) -> LatLngRect:
        """Build a rectangle of the given size (lat span, lng span) around a center."""
        return cls.from_point(center).expanded(LatLng(0.5 * size.lat, 0.5 * size.lng))

    @classmethod
    def from_point(cls, p: LatLng) -> LatLngRect:
        return cls.from_latlng(p, p)

    @classmethod
    def from_point_pair(cls, p1: LatLng, p2: LatLng) -> LatLngRect:
        """The smallest rectangle containing two points."""
        return cls(
            R1Interval.from_point_pair(p1.lat, p2.lat),
            S1Interval.from_point_pair(p1.lng, p2.lng),
        )

    @classmethod
    def from_edge(cls, a: Point, b: Point) -> LatLngRect:
        """Bound the great-circle edge AB, including any latitude bulge."""
        r = cls.from_point_pair(LatLng.from_point(a), LatLng.from_point(b))

        # The edge reaches its extreme latitude where the plane through the
        # edge is closest to a pole. That only matters if this point lies
        # strictly between a and b.
        ab = robust_cross_prod(a, b)
        direction = ab.cross(Point(0, 0, 1))
        da = direction.dot(a)
        db = direction.dot(b)
        if da * db >= 0:
            return r

        abs_lat = math.acos(abs(ab.z / ab.norm()))
        if da < 0:
            return cls(R1Interval(r.lat.lo, abs_lat), r.lng)
        return cls(R1Interval(-abs_lat, r.lat.hi), r.lng)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LatLngRect):
            return NotImplemented
        return self.lat == other.lat and self.lng == other.lng

    def __hash__(self) -> int:
        return hash((self.lat, self.lng))

    def __repr__(self) -> str:
        return f"LatLngRect(lo={self.lo()!r}, hi={self.hi()!r})"

    def is_valid(self) -> bool:
        return (
            abs(self.lat.lo) <= M_PI_2
            and abs(self.lat.hi) <= M_PI_2
            and self.lng.is_valid()
            and self.lat.is_empty() == self.lng.is_empty()
        )

    def is_empty(self) -> bool:
        return self.lat.is_empty()

    def is_full(self) -> bool:
        return self.lat == self.full_lat() and self.lng.is_full()

    def is_inverted(self) -> bool:
        return self.lng.is_inverted()

    def lo(self) -> LatLng:
        return LatLng(self.lat.lo, self.lng.lo)

    def hi(self) -> LatLng:
        return LatLng(self.lat.hi, self.lng.hi)

    def vertex(self, k: int) -> LatLng:
        """Return vertex k (0..3) in counter-clockwise order from lo()."""
        if k == 0:
            return self.lo()
        if k == 1:
            return LatLng(self.lat.lo, self.lng.hi)
        if k == 2:
            return self.hi()
        if k == 3:
            return LatLng(self.lat.hi, self.lng.lo)
        raise InvalidVertexIndex(f"Invalid vertex index: {k}")

    def center(self) -> LatLng:
        return LatLng(self.lat.center(), self.lng.center())

    def size(self) -> LatLng:
        return LatLng(self.lat.length(), self.lng.length())

    def area(self) -> float:
        """Surface area in steradians."""
        if self.is_empty():
            return 0.0
        return self.lng.length() * abs(math.sin(self.lat.hi) - math.sin(self.lat.lo))

    def contains_latlng(self, ll: LatLng) -> bool:
        return self.lat.contains(ll.lat) and self.lng.contains(ll.lng)

    def contains_point(self, p: Point) -> bool:
        return self.contains_latlng(LatLng.from_point(p))

    def interior_contains_latlng(self, ll: LatLng) -> bool:
        return self.lat.interior_contains(ll.lat) and self.lng.interior_contains(ll.lng)

    def interior_contains_point(self, p: Point) -> bool:
        return self.interior_contains_latlng(LatLng.from_point(p))

    def contains_rect(self, other: LatLngRect) -> bool:
        return self.lat.contains_interval(other.lat) and self.lng.contains_interval(other.lng)

    def interior_contains_rect(self, other: LatLngRect) -> bool:
        return self.lat.interior_contains_interval(
            other.lat
        ) and self.lng.interior_contains_interval(other.lng)

    def intersects_rect(self, other: LatLngRect) -> bool:
        return self.lat.intersects(other.lat) and self.lng.intersects(other.lng)

    def interior_intersects(self, other: LatLngRect) -> bool:
        return self.lat.interior_intersects(other.lat) and self.lng.interior_intersects(other.lng)

    def intersects_cell(self, cell) -> bool:
        """
        Exact test for whether this rectangle meets a cell.

        Unlike may_intersect_cell(), which only compares bounding
        rectangles, this checks the cell's edges against the rectangle's.
        """
        if self.is_empty():
            return False
        if self.contains_point(cell.center()):
            return True
        if cell.contains_point(self.center().to_point()):
            return True
        if not self.intersects_rect(cell.rect_bound()):
            return False

        vertices = []
        vertices_ll = []
        for k in range(4):
            v = cell.vertex(k)
            ll = LatLng.from_point(v)
            if self.contains_latlng(ll):
                return True
            vertices.append(v)
            vertices_ll.append(ll)

        # No vertex of either shape is inside the other, so they can only
        # meet where a cell edge crosses a rectangle edge.
        for k in range(4):
            edge_lng = S1Interval.from_point_pair(vertices_ll[k].lng, vertices_ll[(k + 1) & 3].lng)
            if not self.lng.intersects(edge_lng):
                continue
            a = vertices[k]
            b = vertices[(k + 1) & 3]
            if edge_lng.contains(self.lng.lo) and _intersects_lng_edge(a, b, self.lat, self.lng.lo):
                return True
            if edge_lng.contains(self.lng.hi) and _intersects_lng_edge(a, b, self.lat, self.lng.hi):
                return True
            if _intersects_lat_edge(a, b, self.lat.lo, self.lng):
                return True
            if _intersects_lat_edge(a, b, self.lat.hi, self.lng):
                return True
        return False

    def add_latlng(self, ll: LatLng) -> LatLngRect:
        return LatLngRect(self.lat.add_point(ll.lat), self.lng.add_point(ll.lng))

    def add_point(self, p: Point) -> LatLngRect:
        return self.add_latlng(LatLng.from_point(p))

    def expanded(self, margin: LatLng) -> LatLngRect:
        """Grow by a (lat, lng) margin on each side, clamping latitude to the poles."""
        if self.is_empty():
            return self
        return LatLngRect(
            self.lat.expanded(margin.lat).intersection(self.full_lat()),
            self.lng.expanded(margin.lng),
        )

    def union(self, other: LatLngRect) -> LatLngRect:
        return LatLngRect(self.lat.union(other.lat), self.lng.union(other.lng))

    def intersection(self, other: LatLngRect) -> LatLngRect:
        lat = self.lat.intersection(other.lat)
        lng = self.lng.intersection(other.lng)
        if lat.is_empty() or lng.is_empty():
            return LatLngRect.empty()
        return LatLngRect(lat, lng)

    def approx_equals(self, other: LatLngRect, max_error: float = 1e-15) -> bool:
        return self.lat.approx_equals(other.lat, max_error) and self.lng.approx_equals(
            other.lng, max_error
        )

    # Region operations

    def cap_bound(self) -> Cap:
        """
        Return the smaller of a cap centred on the nearer pole and a cap
        centred on the rectangle's midpoint.
        """
        if self.is_empty():
            return Cap.empty()

        if self.lat.lo + self.lat.hi < 0:
            pole_z = -1
            pole_angle = M_PI_2 + self.lat.hi
        else:
            pole_z = 1
            pole_angle = M_PI_2 - self.lat.lo
        pole_cap = Cap.from_axis_angle(Point(0, 0, pole_z), Angle(pole_angle))

        # The mid cap is only bounded when the longitude span is under 180
        # degrees; a span of 180 or more always gives a larger cap.
        lng_span = self.lng.hi - self.lng.lo
        if math.remainder(lng_span, 2 * M_PI) >= 0 and lng_span < 2 * M_PI:
            mid_cap = Cap.from_axis_angle(self.center().to_point(), Angle(0))
            for k in range(4):
                mid_cap = mid_cap.add_point(self.vertex(k).to_point())
            if mid_cap.height < pole_cap.height:
                return mid_cap
        return pole_cap

    def rect_bound(self) -> LatLngRect:
        return self

    def contains_cell(self, cell) -> bool:
        # Rect bounds of cells are exact except near the poles, so this is
        # conservative but close.
        return self.contains_rect(cell.rect_bound())

    def may_intersect_cell(self, cell) -> bool:
        return self.intersects_rect(cell.rect_bound())


def _intersects_lng_edge(a: Point, b: Point, lat: R1Interval, lng: float) -> bool:
    """True if edge AB crosses the meridian segment at ``lng`` spanning ``lat``."""
    return simple_crossing(
        a, b, LatLng(lat.lo, lng).to_point(), LatLng(lat.hi, lng).to_point()
    )


def _intersects_lat_edge(a: Point, b: Point, lat: float, lng: S1Interval) -> bool:
    """True if edge AB crosses the parallel at ``lat`` within ``lng``."""
    # Build a frame with z normal to the edge's great circle, pointing to
    # the northern hemisphere, and x towards the edge's northernmost point.
    z = robust_cross_prod(a, b).normalize()
    if z.z < 0:
        z = -z
    y = robust_cross_prod(z, Point(0, 0, 1)).normalize()
    x = y.cross(z)

    sin_lat = math.sin(lat)
    if abs(sin_lat) >= x.z:
        # The great circle never reaches this latitude.
        return False

    # theta is the angle in the x-y plane where the circle meets the parallel.
    cos_theta = sin_lat / x.z
    sin_theta = math.sqrt(1 - cos_theta * cos_theta)
    theta = math.atan2(sin_theta, cos_theta)

    ab_theta = S1Interval.from_point_pair(
        math.atan2(a.dot(y), a.dot(x)), math.atan2(b.dot(y), b.dot(x))
    )
    if ab_theta.contains(theta):
        isect = x * cos_theta + y * sin_theta
        if lng.contains(math.atan2(isect.y, isect.x)):
            return True
    if ab_theta.contains(-theta):
        isect = x * cos_theta - y * sin_theta
        if lng.contains(math.atan2(isect.y, isect.x)):
            return True
    return False
