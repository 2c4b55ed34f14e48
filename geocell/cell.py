"""
Cell geometry.

A Cell decodes a CellId once into its face, level, curve orientation and
(u, v) bounding square, and answers the geometric questions a region needs
to classify it: vertices, edge normals, bounds and areas.
"""

from __future__ import annotations

import math

from geocell.cellid import MAX_LEVEL, MAX_SIZE, CellId
from geocell.geo.cap import Cap
from geocell.geo.constants import M_1_PI, M_PI, M_PI_2, M_PI_4
from geocell.geo.interval import R1Interval, S1Interval
from geocell.geo.latlng import LatLng
from geocell.geo.latlng_rect import LatLngRect
from geocell.geo.metrics import AVG_AREA
from geocell.geo.point import Point, area
from geocell.geo.projections import (
    face_uv_to_xyz,
    face_xyz_to_uv,
    get_u_axis,
    get_u_norm,
    get_v_axis,
    get_v_norm,
    st_to_uv,
)
from geocell.validation import validate_vertex_index

# Rounding allowance applied to latitude/longitude bounds.
_MAX_ERROR = 1.0 / (1 << 51)

# Lowest latitude reached by the polar faces, less the rounding allowance.
_POLE_MIN_LAT = math.asin(math.sqrt(1.0 / 3)) - _MAX_ERROR


class Cell:
    """
    The geometry of one cell.

    Cells are immutable and cheap to build; the coverer creates them by
    subdivision as it searches.
    """

    __slots__ = ("cell_id", "face", "level", "orientation", "_uv")

    def __init__(self, cell_id: CellId):
        face, i, j, orientation = cell_id.to_face_ij_orientation()
        self.cell_id = cell_id
        self.face = face
        self.level = cell_id.level()
        self.orientation = orientation

        cell_size = 1 << (MAX_LEVEL - self.level)
        uv = []
        for ij in (i, j):
            lo = (ij & -cell_size) * 2 - MAX_SIZE
            hi = lo + cell_size * 2
            uv.append((st_to_uv(lo / MAX_SIZE), st_to_uv(hi / MAX_SIZE)))
        # ((u_lo, u_hi), (v_lo, v_hi))
        self._uv = tuple(uv)

    @classmethod
    def from_face_pos_level(cls, face: int, pos: int, level: int) -> Cell:
        return cls(CellId.from_face_pos_level(face, pos, level))

    @classmethod
    def from_point(cls, p: Point) -> Cell:
        return cls(CellId.from_point(p))

    @classmethod
    def from_latlng(cls, ll: LatLng) -> Cell:
        return cls(CellId.from_latlng(ll))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self.cell_id == other.cell_id

    def __hash__(self) -> int:
        return hash(self.cell_id)

    def __repr__(self) -> str:
        return f"Cell({self.face}, {self.level}, {self.orientation}, {self.cell_id.to_token()})"

    @property
    def id(self) -> CellId:
        return self.cell_id

    def is_leaf(self) -> bool:
        return self.level == MAX_LEVEL

    @property
    def u_bounds(self) -> tuple[float, float]:
        return self._uv[0]

    @property
    def v_bounds(self) -> tuple[float, float]:
        return self._uv[1]

    def subdivide(self) -> list[Cell]:
        """
        Return the four children in curve order, or an empty list for a
        leaf cell.
        """
        if self.is_leaf():
            return []
        children = []
        child_id = self.cell_id.child_begin()
        for _ in range(4):
            children.append(Cell(child_id))
            child_id = child_id.next()
        return children

    def vertex_raw(self, k: int) -> Point:
        """Vertex k (0..3) in counter-clockwise order; not unit length."""
        validate_vertex_index(k)
        return face_uv_to_xyz(self.face, self._uv[0][(k >> 1) ^ (k & 1)], self._uv[1][k >> 1])

    def vertex(self, k: int) -> Point:
        return self.vertex_raw(k).normalize()

    def edge_raw(self, k: int) -> Point:
        """
        Inward-facing normal of the great circle from vertex k to vertex
        k + 1 (mod 4); not unit length.
        """
        validate_vertex_index(k)
        if k == 0:
            return get_v_norm(self.face, self._uv[1][0])  # South
        if k == 1:
            return get_u_norm(self.face, self._uv[0][1])  # East
        if k == 2:
            return -get_v_norm(self.face, self._uv[1][1])  # North
        return -get_u_norm(self.face, self._uv[0][0])  # West

    def edge(self, k: int) -> Point:
        return self.edge_raw(k).normalize()

    def center_raw(self) -> Point:
        """
        Direction of the point where the cell splits into its children.
        This is not the centroid in (u, v) or xyz space.
        """
        return self.cell_id.to_point_raw()

    def center(self) -> Point:
        return self.center_raw().normalize()

    def center_uv(self) -> tuple[float, float]:
        _, i, j, _ = self.cell_id.to_face_ij_orientation()
        cell_size = 1 << (MAX_LEVEL - self.level)
        si = (i & -cell_size) * 2 + cell_size - MAX_SIZE
        ti = (j & -cell_size) * 2 + cell_size - MAX_SIZE
        return st_to_uv(si / MAX_SIZE), st_to_uv(ti / MAX_SIZE)

    def contains_point(self, p: Point) -> bool:
        uv = face_xyz_to_uv(self.face, p)
        if uv is None:
            return False
        u, v = uv
        return (
            self._uv[0][0] <= u <= self._uv[0][1]
            and self._uv[1][0] <= v <= self._uv[1][1]
        )

    # Areas

    @staticmethod
    def average_area(level: int) -> float:
        """
        Average area of cells at ``level``, in steradians.

        Accurate to within a factor of 1.7 and essentially free.
        """
        return AVG_AREA.get_value(level)

    def approx_area(self) -> float:
        """
        Approximate area, within 3% for all cells and 0.1% at level 5 and
        finer.
        """
        # Levels 0 and 1 are better served by the average.
        if self.level < 2:
            return self.average_area(self.level)

        # Flat area of the quadrilateral, then a correction for the
        # curvature of the sphere: treat the cell as a spherical cap whose
        # flat disc has the same area.
        flat_area = 0.5 * (self.vertex(2) - self.vertex(0)).cross(self.vertex(3) - self.vertex(1)).norm()
        return flat_area * 2 / (1 + math.sqrt(1 - min(M_1_PI * flat_area, 1.0)))

    def exact_area(self) -> float:
        """Area as the sum of two spherical triangles; slower but accurate."""
        v0 = self.vertex(0)
        v1 = self.vertex(1)
        v2 = self.vertex(2)
        v3 = self.vertex(3)
        return area(v0, v1, v2) + area(v0, v2, v3)

    # Region operations

    def cap_bound(self) -> Cap:
        # Centre the cap on the (u, v) midpoint, which gives a tighter bound
        # than the curve center.
        u = 0.5 * (self._uv[0][0] + self._uv[0][1])
        v = 0.5 * (self._uv[1][0] + self._uv[1][1])
        cap = Cap.from_axis_height(face_uv_to_xyz(self.face, u, v).normalize(), 0)
        for k in range(4):
            cap = cap.add_point(self.vertex(k))
        return cap

    def rect_bound(self) -> LatLngRect:
        if self.level > 0:
            # The latitude extremes are at opposite vertices; which pair
            # depends on the face orientation and which quadrant of the face
            # the cell is in.
            u = self._uv[0][0] + self._uv[0][1]
            v = self._uv[1][0] + self._uv[1][1]
            if get_u_axis(self.face).z == 0:
                i = 1 if u < 0 else 0
            else:
                i = 1 if u > 0 else 0
            if get_v_axis(self.face).z == 0:
                j = 1 if v < 0 else 0
            else:
                j = 1 if v > 0 else 0

            lat = R1Interval.from_point_pair(self._latitude(i, j), self._latitude(1 - i, 1 - j))
            lat = lat.expanded(_MAX_ERROR).intersection(LatLngRect.full_lat())
            if lat.lo == -M_PI_2 or lat.hi == M_PI_2:
                return LatLngRect(lat, S1Interval.full())
            lng = S1Interval.from_point_pair(self._longitude(i, 1 - j), self._longitude(1 - i, j))
            return LatLngRect(lat, lng.expanded(_MAX_ERROR))

        # Face cells: the bounds are fixed, and the polar faces take every
        # longitude.
        if self.face == 0:
            return LatLngRect(R1Interval(-M_PI_4, M_PI_4), S1Interval(-M_PI_4, M_PI_4))
        if self.face == 1:
            return LatLngRect(R1Interval(-M_PI_4, M_PI_4), S1Interval(M_PI_4, 3 * M_PI_4))
        if self.face == 2:
            return LatLngRect(R1Interval(_POLE_MIN_LAT, M_PI_2), S1Interval(-M_PI, M_PI))
        if self.face == 3:
            return LatLngRect(R1Interval(-M_PI_4, M_PI_4), S1Interval(3 * M_PI_4, -3 * M_PI_4))
        if self.face == 4:
            return LatLngRect(R1Interval(-M_PI_4, M_PI_4), S1Interval(-3 * M_PI_4, -M_PI_4))
        return LatLngRect(R1Interval(-M_PI_2, -_POLE_MIN_LAT), S1Interval(-M_PI, M_PI))

    def contains_cell(self, cell: Cell) -> bool:
        return self.cell_id.contains(cell.cell_id)

    def may_intersect_cell(self, cell: Cell) -> bool:
        return self.cell_id.intersects(cell.cell_id)

    def _latitude(self, i: int, j: int) -> float:
        p = face_uv_to_xyz(self.face, self._uv[0][i], self._uv[1][j])
        return math.atan2(p.z, math.sqrt(p.x * p.x + p.y * p.y))

    def _longitude(self, i: int, j: int) -> float:
        p = face_uv_to_xyz(self.face, self._uv[0][i], self._uv[1][j])
        return math.atan2(p.y, p.x)
