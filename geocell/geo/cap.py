"""
Spherical caps.

A cap is the part of the sphere cut off by a plane. It is stored as an
axis and a height, which keeps good precision for very small caps and makes
containment tests cheap. With unit radius:

    h = 1 - cos(theta) = 2 sin^2(theta / 2)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from .constants import M_PI
from .interval import R1Interval, S1Interval
from .latlng import Angle, LatLng
from .point import Point, is_unit_length

if TYPE_CHECKING:
    from .latlng_rect import LatLngRect

# Multiplying a positive result by this keeps it at least as large as the
# exact value.
ROUND_UP = 1.0 + 1.0 / (1 << 52)


class Cap:
    """A disc-shaped region on the unit sphere."""

    __slots__ = ("axis", "height")

    def __init__(self, axis: Point, height: float):
        self.axis = axis
        self.height = float(height)

    @classmethod
    def from_axis_height(cls, axis: Point, height: float) -> Cap:
        """``axis`` should be unit length."""
        return cls(axis, height)

    @classmethod
    def from_axis_angle(cls, axis: Point, angle: Angle) -> Cap:
        """Build a cap from its opening angle, between 0 and 180 degrees."""
        d = math.sin(0.5 * angle.radians)
        return cls(axis, 2 * d * d)

    @classmethod
    def from_axis_area(cls, axis: Point, area: float) -> Cap:
        """Build a cap from its area in steradians (0 to 4 pi)."""
        return cls(axis, area / (2 * M_PI))

    @classmethod
    def empty(cls) -> Cap:
        return cls(Point(1, 0, 0), -1)

    @classmethod
    def full(cls) -> Cap:
        return cls(Point(1, 0, 0), 2)

    def __repr__(self) -> str:
        return f"Cap(axis={self.axis!r}, height={self.height!r})"

    def area(self) -> float:
        return 2 * M_PI * max(0.0, self.height)

    def angle(self) -> Angle:
        """Opening angle; negative for empty caps."""
        if self.is_empty():
            return Angle(-1.0)
        return Angle(2 * math.asin(math.sqrt(0.5 * self.height)))

    def is_valid(self) -> bool:
        # Negative heights mean empty, but nothing may exceed 2.
        return is_unit_length(self.axis) and self.height <= 2

    def is_empty(self) -> bool:
        return self.height < 0

    def is_full(self) -> bool:
        return self.height >= 2

    def complement(self) -> Cap:
        """
        Return the complement of the interior of the cap.

        The complement of a singleton cap is the full cap, the same as the
        complement of the empty cap.
        """
        height = -1.0 if self.is_full() else 2 - max(self.height, 0.0)
        return Cap(-self.axis, height)

    def contains_cap(self, other: Cap) -> bool:
        if self.is_full() or other.is_empty():
            return True
        return self.angle().radians >= self.axis.angle(other.axis) + other.angle().radians

    def interior_intersects(self, other: Cap) -> bool:
        """True if the interior of this cap meets ``other`` (not symmetric)."""
        return not self.complement().contains_cap(other)

    def contains_point(self, p: Point) -> bool:
        return (self.axis - p).norm2() <= 2 * self.height

    def interior_contains_point(self, p: Point) -> bool:
        return self.is_full() or (self.axis - p).norm2() < 2 * self.height

    def add_point(self, p: Point) -> Cap:
        """
        Grow the cap just enough to include ``p`` (unit length).

        An empty cap becomes the singleton cap at ``p``; otherwise the axis
        is kept.
        """
        if self.is_empty():
            return Cap(p, 0)
        dist2 = (self.axis - p).norm2()
        return Cap(self.axis, max(self.height, ROUND_UP * 0.5 * dist2))

    def add_cap(self, other: Cap) -> Cap:
        if self.is_empty():
            return Cap(other.axis, other.height)
        angle = self.axis.angle(other.axis) + other.angle().radians
        if angle >= M_PI:
            return Cap(self.axis, 2)
        d = math.sin(0.5 * angle)
        return Cap(self.axis, max(self.height, ROUND_UP * 2 * d * d))

    def approx_equals(self, other: Cap, max_error: float = 1e-14) -> bool:
        return (
            (self.axis.aequal(other.axis, max_error) and abs(self.height - other.height) <= max_error)
            or (self.is_empty() and other.height <= max_error)
            or (other.is_empty() and self.height <= max_error)
            or (self.is_full() and other.height >= 2 - max_error)
            or (other.is_full() and self.height >= 2 - max_error)
        )

    # Region operations

    def cap_bound(self) -> Cap:
        return self

    def rect_bound(self) -> LatLngRect:
        from .latlng_rect import LatLngRect

        if self.is_empty():
            return LatLngRect.empty()

        axis_ll = LatLng.from_point(self.axis)
        cap_angle = self.angle().radians

        all_longitudes = False
        lat_lo = axis_ll.lat - cap_angle
        lat_hi = axis_ll.lat + cap_angle
        lng_lo = -M_PI
        lng_hi = M_PI
        if lat_lo <= -M_PI / 2:
            lat_lo = -M_PI / 2
            all_longitudes = True
        if lat_hi >= M_PI / 2:
            lat_hi = M_PI / 2
            all_longitudes = True
        if not all_longitudes:
            # The longitude span follows from the spherical law of sines for
            # the right triangle formed by the pole, the axis and a tangent
            # point on the cap boundary.
            sin_a = math.sqrt(self.height * (2 - self.height))
            sin_c = math.cos(axis_ll.lat)
            if sin_a <= sin_c:
                angle_a = math.asin(sin_a / sin_c)
                lng_lo = math.remainder(axis_ll.lng - angle_a, 2 * M_PI)
                lng_hi = math.remainder(axis_ll.lng + angle_a, 2 * M_PI)
        return LatLngRect(R1Interval(lat_lo, lat_hi), S1Interval(lng_lo, lng_hi))

    def contains_cell(self, cell) -> bool:
        vertices = []
        for k in range(4):
            v = cell.vertex(k)
            if not self.contains_point(v):
                return False
            vertices.append(v)
        # All vertices are inside; the cell is contained unless the
        # complement reaches into it.
        return not self.complement()._intersects_cell(cell, vertices)

    def may_intersect_cell(self, cell) -> bool:
        vertices = []
        for k in range(4):
            v = cell.vertex(k)
            if self.contains_point(v):
                return True
            vertices.append(v)
        return self._intersects_cell(cell, vertices)

    def _intersects_cell(self, cell, vertices: list[Point]) -> bool:
        """Edge test for a cell none of whose vertices lie in the cap."""
        # A hemisphere or larger is convex with its complement, so with no
        # vertex inside no other point of the cell is either.
        if self.height >= 1:
            return False
        if self.is_empty():
            return False
        if cell.contains_point(self.axis):
            return True

        sin2_angle = self.height * (2 - self.height)
        for k in range(4):
            edge = cell.edge_raw(k)
            dot = self.axis.dot(edge)
            if dot > 0:
                # The axis is inside this edge's half-space.
                continue
            if dot * dot > sin2_angle * edge.norm2():
                # The whole cap lies outside this edge.
                return False
            # The great circle through the edge meets the cap; check whether
            # the closest point lies between the edge's endpoints.
            direction = edge.cross(self.axis)
            if direction.dot(vertices[k]) < 0 and direction.dot(vertices[(k + 1) & 3]) > 0:
                return True
        return False
