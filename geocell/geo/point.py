"""
Three-dimensional vectors on (or near) the unit sphere.

Also hosts the small set of spherical-triangle helpers the cell geometry
needs: robust cross products, orientation and crossing tests, and
triangle areas.
"""

from __future__ import annotations

import math


class Point:
    """An immutable 3-vector. Points on the sphere are unit length."""

    __slots__ = ("x", "y", "z")

    def __init__(self, x: float, y: float, z: float):
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Point:
        return Point(-self.x, -self.y, -self.z)

    def __mul__(self, m: float) -> Point:
        return Point(self.x * m, self.y * m, self.z * m)

    __rmul__ = __mul__

    def __truediv__(self, m: float) -> Point:
        return Point(self.x / m, self.y / m, self.z / m)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.x == other.x and self.y == other.y and self.z == other.z

    def __hash__(self) -> int:
        return hash((self.x, self.y, self.z))

    def __lt__(self, other: Point) -> bool:
        return (self.x, self.y, self.z) < (other.x, other.y, other.z)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __repr__(self) -> str:
        return f"Point({self.x!r}, {self.y!r}, {self.z!r})"

    def get(self, axis: int) -> float:
        """Return the coordinate for axis 0, 1 or 2."""
        if axis == 0:
            return self.x
        if axis == 1:
            return self.y
        return self.z

    def dot(self, other: Point) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Point) -> Point:
        return Point(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def norm2(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def norm(self) -> float:
        return math.sqrt(self.norm2())

    def normalize(self) -> Point:
        """Return the unit vector in this direction (the zero vector stays zero)."""
        n = self.norm()
        if n != 0:
            n = 1 / n
        return self * n

    def fabs(self) -> Point:
        return Point(abs(self.x), abs(self.y), abs(self.z))

    def largest_abs_component(self) -> int:
        """Return the axis with the largest absolute coordinate."""
        a = self.fabs()
        if a.x > a.y:
            return 0 if a.x > a.z else 2
        return 1 if a.y > a.z else 2

    def to_face(self) -> int:
        """Return the cube face (0..5) this direction points at."""
        face = self.largest_abs_component()
        if self.get(face) < 0:
            face += 3
        return face

    def ortho(self) -> Point:
        """Return a unit vector orthogonal to this one."""
        k = self.largest_abs_component()
        if k == 1:
            temp = Point(1, 0, 0)
        elif k == 2:
            temp = Point(0, 1, 0)
        else:
            temp = Point(0, 0, 1)
        return self.cross(temp).normalize()

    def angle(self, other: Point) -> float:
        """Return the angle in radians between two vectors, in [0, pi]."""
        return math.atan2(self.cross(other).norm(), self.dot(other))

    def aequal(self, other: Point, margin: float) -> bool:
        """Return True if every coordinate differs by less than ``margin``."""
        return (
            abs(self.x - other.x) < margin
            and abs(self.y - other.y) < margin
            and abs(self.z - other.z) < margin
        )


ORIGIN = Point(0, 0, 0)


def is_unit_length(p: Point) -> bool:
    return abs(p.norm2() - 1) <= 1e-15


def robust_cross_prod(a: Point, b: Point) -> Point:
    """
    Return a vector orthogonal to both a and b.

    Computed as (b + a) x (b - a), which is twice a x b but loses less
    precision when a and b are nearly parallel. Falls back to an arbitrary
    orthogonal vector when a == b.
    """
    x = (b + a).cross(b - a)
    if x != ORIGIN:
        return x
    return a.ortho()


def simple_ccw(a: Point, b: Point, c: Point) -> bool:
    """Return True if a, b, c are strictly counter-clockwise."""
    return c.cross(a).dot(b) > 0


def simple_crossing(a: Point, b: Point, c: Point, d: Point) -> bool:
    """Return True if edge AB crosses edge CD at a point interior to both."""
    ab = a.cross(b)
    cd = c.cross(d)
    acb = -ab.dot(c)
    cbd = -cd.dot(b)
    bda = ab.dot(d)
    dac = cd.dot(a)
    return acb * cbd > 0 and cbd * bda > 0 and bda * dac > 0


def girard_area(a: Point, b: Point, c: Point) -> float:
    """Return the area of triangle ABC using Girard's formula."""
    ab = a.cross(b)
    bc = b.cross(c)
    ac = a.cross(c)
    return max(0.0, ab.angle(ac) - ab.angle(bc) + bc.angle(ac))


def area(a: Point, b: Point, c: Point) -> float:
    """
    Return the area of the spherical triangle ABC.

    Uses l'Huilier's theorem, which is accurate for small triangles, and
    switches to Girard's formula for long thin triangles where l'Huilier
    loses precision.

    Args:
        a: First vertex (unit length)
        b: Second vertex (unit length)
        c: Third vertex (unit length)

    Returns:
        Area in steradians
    """
    sa = b.angle(c)
    sb = c.angle(a)
    sc = a.angle(b)
    s = 0.5 * (sa + sb + sc)
    if s >= 3e-4:
        s2 = s * s
        dmin = s - max(sa, sb, sc)
        if dmin < 1e-2 * s * s2 * s2:
            girard = girard_area(a, b, c)
            if dmin < s * 0.1 * girard:
                return girard
    return 4 * math.atan(
        math.sqrt(
            max(
                0.0,
                math.tan(0.5 * s)
                * math.tan(0.5 * (s - sa))
                * math.tan(0.5 * (s - sb))
                * math.tan(0.5 * (s - sc)),
            )
        )
    )
