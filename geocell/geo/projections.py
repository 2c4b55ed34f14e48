"""
Cube-face projections between unit vectors and face-local coordinates.

Coordinate systems:
- (face, u, v): gnomonic coordinates on a cube face, u and v in [-1, 1].
- (face, s, t): the quadratic re-parameterisation of (u, v) that makes
  cells at the same level roughly equal in area, also in [-1, 1].
- xyz: a direction vector from the center of the sphere.
"""

from __future__ import annotations

import math

from .point import Point

# Per face: the u-axis, v-axis and outward normal.
_X_POS = Point(1, 0, 0)
_X_NEG = Point(-1, 0, 0)
_Y_POS = Point(0, 1, 0)
_Y_NEG = Point(0, -1, 0)
_Z_POS = Point(0, 0, 1)
_Z_NEG = Point(0, 0, -1)

FACE_UVW_AXES = (
    (_Y_POS, _Z_POS, _X_POS),
    (_X_NEG, _Z_POS, _Y_POS),
    (_X_NEG, _Y_NEG, _Z_POS),
    (_Z_NEG, _Y_NEG, _X_NEG),
    (_Z_NEG, _X_POS, _Y_NEG),
    (_Y_POS, _X_POS, _Z_NEG),
)


def st_to_uv(s: float) -> float:
    if s >= 0:
        return (1 / 3.0) * ((1 + s) * (1 + s) - 1)
    return (1 / 3.0) * (1 - (1 - s) * (1 - s))


def uv_to_st(u: float) -> float:
    if u >= 0:
        return math.sqrt(1 + 3 * u) - 1
    return 1 - math.sqrt(1 - 3 * u)


def face_uv_to_xyz(face: int, u: float, v: float) -> Point:
    """Return the (not normalized) direction for face-local (u, v)."""
    if face == 0:
        return Point(1, u, v)
    if face == 1:
        return Point(-u, 1, v)
    if face == 2:
        return Point(-u, -v, 1)
    if face == 3:
        return Point(-1, -v, -u)
    if face == 4:
        return Point(v, -1, -u)
    return Point(v, u, -1)


def valid_face_xyz_to_uv(face: int, p: Point) -> tuple[float, float]:
    """Project ``p`` onto ``face``; the caller guarantees p.dot(face normal) > 0."""
    if face == 0:
        return p.y / p.x, p.z / p.x
    if face == 1:
        return -p.x / p.y, p.z / p.y
    if face == 2:
        return -p.x / p.z, -p.y / p.z
    if face == 3:
        return p.z / p.x, p.y / p.x
    if face == 4:
        return p.z / p.y, -p.x / p.y
    return -p.y / p.z, -p.x / p.z


def face_xyz_to_uv(face: int, p: Point) -> tuple[float, float] | None:
    """
    Project ``p`` onto ``face``.

    Returns:
        (u, v), or None if the point lies in the opposite hemisphere of
        the face, where the projection is undefined
    """
    if face < 3:
        if p.get(face) <= 0:
            return None
    elif p.get(face - 3) >= 0:
        return None
    return valid_face_xyz_to_uv(face, p)


def xyz_to_face(p: Point) -> int:
    return p.to_face()


def face_si_ti_to_xyz(face: int, si: int, ti: int, max_size: int) -> Point:
    """Convert doubled leaf coordinates centred on the face origin to xyz."""
    scale = 1.0 / max_size
    return face_uv_to_xyz(face, st_to_uv(scale * si), st_to_uv(scale * ti))


def get_u_norm(face: int, u: float) -> Point:
    """Normal of the plane through the origin at constant u (not unit length)."""
    if face == 0:
        return Point(u, -1, 0)
    if face == 1:
        return Point(1, u, 0)
    if face == 2:
        return Point(1, 0, u)
    if face == 3:
        return Point(-u, 0, 1)
    if face == 4:
        return Point(0, -u, 1)
    return Point(0, -1, -u)


def get_v_norm(face: int, v: float) -> Point:
    """Normal of the plane through the origin at constant v (not unit length)."""
    if face == 0:
        return Point(-v, 0, 1)
    if face == 1:
        return Point(0, -v, 1)
    if face == 2:
        return Point(0, -1, -v)
    if face == 3:
        return Point(v, -1, 0)
    if face == 4:
        return Point(1, v, 0)
    return Point(1, 0, v)


def get_u_axis(face: int) -> Point:
    return FACE_UVW_AXES[face][0]


def get_v_axis(face: int) -> Point:
    return FACE_UVW_AXES[face][1]


def get_norm(face: int) -> Point:
    return FACE_UVW_AXES[face][2]
