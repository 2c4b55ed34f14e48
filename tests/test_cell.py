"""Tests for cell geometry."""

import math

import pytest

from geocell.cell import Cell
from geocell.cellid import MAX_LEVEL, CellId
from geocell.errors import InvalidVertexIndex
from geocell.geo.latlng import LatLng
from geocell.geo.point import Point
from geocell.geo.projections import face_uv_to_xyz


class TestFaceCellGeometry:
    """Tests for level-0 cells."""

    def test_face_cell_bounds(self):
        """A face cell spans the whole (u, v) square."""
        for face in range(6):
            cell = Cell(CellId.from_face(face))
            assert cell.face == face
            assert cell.level == 0
            assert cell.orientation == face & 1
            assert cell.u_bounds == (-1.0, 1.0)
            assert cell.v_bounds == (-1.0, 1.0)

    def test_face_vertices_are_cube_corners(self):
        """Face cell vertices are normalized cube corners."""
        corner = 1 / math.sqrt(3)
        for k in range(4):
            v = Cell(CellId.from_face(0)).vertex(k)
            assert abs(v.x) == pytest.approx(corner)
            assert abs(v.y) == pytest.approx(corner)
            assert abs(v.z) == pytest.approx(corner)

    def test_face_area(self):
        """Each face is one sixth of the sphere."""
        for face in range(6):
            cell = Cell(CellId.from_face(face))
            assert cell.exact_area() == pytest.approx(4 * math.pi / 6, rel=1e-12)
            assert cell.approx_area() == pytest.approx(4 * math.pi / 6)
            assert Cell.average_area(0) == pytest.approx(4 * math.pi / 6)

    def test_polar_face_rect_bound(self):
        """Polar faces take every longitude."""
        assert Cell(CellId.from_face(2)).rect_bound().lng.is_full()
        assert Cell(CellId.from_face(5)).rect_bound().lng.is_full()
        assert Cell(CellId.from_face(2)).rect_bound().lat.hi == pytest.approx(math.pi / 2)

    def test_equatorial_face_rect_bound(self):
        """Face 0 spans 45 degrees either side of the prime meridian."""
        rect = Cell(CellId.from_face(0)).rect_bound()
        assert rect.lng.lo == pytest.approx(-math.pi / 4)
        assert rect.lng.hi == pytest.approx(math.pi / 4)
        assert rect.contains_point(Point(1, 0, 0))


class TestVerticesAndEdges:
    """Tests for cell corners and edge normals."""

    def test_vertices_counter_clockwise(self, sample_cell_ids):
        """Vertices run counter-clockwise around the center."""
        for cell_id in sample_cell_ids:
            if cell_id.level() > 20:
                # Too small for the orientation test to be reliable.
                continue
            cell = Cell(cell_id)
            center = cell.center()
            for k in range(4):
                a = cell.vertex(k)
                b = cell.vertex((k + 1) & 3)
                assert a.cross(b).dot(center) > 0

    def test_edges_face_inward(self, sample_cell_ids):
        """Edge normals point towards the cell and are orthogonal to their vertices."""
        for cell_id in sample_cell_ids:
            cell = Cell(cell_id)
            center = cell.center()
            for k in range(4):
                edge = cell.edge(k)
                assert edge.dot(center) > 0
                assert edge.dot(cell.vertex(k)) == pytest.approx(0, abs=1e-14)
                assert edge.dot(cell.vertex((k + 1) & 3)) == pytest.approx(0, abs=1e-14)

    def test_vertices_unit_length(self, sample_cell_ids):
        """vertex() normalizes vertex_raw()."""
        for cell_id in sample_cell_ids[:20]:
            cell = Cell(cell_id)
            for k in range(4):
                assert cell.vertex(k).norm() == pytest.approx(1.0)

    @pytest.mark.parametrize("k", [-1, 4, 10])
    def test_bad_vertex_index(self, k):
        """Vertex and edge indices must be 0..3."""
        cell = Cell(CellId.from_face(1))
        with pytest.raises(InvalidVertexIndex):
            cell.vertex(k)
        with pytest.raises(InvalidVertexIndex):
            cell.edge(k)

    def test_center_uv(self, sample_cell_ids):
        """center_uv lies inside the cell's (u, v) bounds and projects to center()."""
        assert Cell(CellId.from_face(2)).center_uv() == (0.0, 0.0)
        for cell_id in sample_cell_ids:
            cell = Cell(cell_id)
            u, v = cell.center_uv()
            assert cell.u_bounds[0] <= u <= cell.u_bounds[1]
            assert cell.v_bounds[0] <= v <= cell.v_bounds[1]
            p = face_uv_to_xyz(cell.face, u, v).normalize()
            assert p.angle(cell.center()) < 1e-14

    def test_bad_vertex_index_is_index_error(self):
        """InvalidVertexIndex can be caught as IndexError."""
        with pytest.raises(IndexError):
            Cell(CellId.from_face(1)).vertex_raw(5)


class TestSubdivision:
    """Tests for cell children."""

    def test_subdivide_matches_children(self):
        """Subdivided cells are the id children in curve order."""
        cell = Cell.from_latlng(LatLng.from_degrees(51.5, -0.12))
        parent = Cell(cell.cell_id.parent(8))
        children = parent.subdivide()
        assert [child.cell_id for child in children] == list(parent.cell_id.children())
        for child in children:
            assert child.level == 9
            assert parent.contains_cell(child)
            assert parent.u_bounds[0] <= child.u_bounds[0] <= child.u_bounds[1] <= parent.u_bounds[1]
            assert parent.v_bounds[0] <= child.v_bounds[0] <= child.v_bounds[1] <= parent.v_bounds[1]

    def test_leaf_has_no_children(self):
        """Leaf cells do not subdivide."""
        leaf = Cell.from_point(Point(0, 1, 0))
        assert leaf.is_leaf()
        assert leaf.level == MAX_LEVEL
        assert leaf.subdivide() == []

    def test_children_area_sum(self):
        """The children's exact areas add up to the parent's."""
        parent = Cell(CellId.from_face(3).child_begin(3).next())
        total = sum(child.exact_area() for child in parent.subdivide())
        assert total == pytest.approx(parent.exact_area(), rel=1e-10)

    def test_approx_area_close_to_exact(self, sample_cell_ids):
        """approx_area is within 3% of exact_area."""
        for cell_id in sample_cell_ids:
            if cell_id.level() > 20:
                continue
            cell = Cell(cell_id)
            assert cell.approx_area() == pytest.approx(cell.exact_area(), rel=0.03)

    def test_from_face_pos_level(self):
        """A cell can be built from a face, curve position and level."""
        assert Cell.from_face_pos_level(0, 0, 0) == Cell(CellId.from_face(0))
        assert Cell.from_face_pos_level(4, 0, 3).cell_id == CellId.from_face(4).child_begin(3)


class TestContainment:
    """Tests for point containment and region operations."""

    def test_contains_own_points(self, sample_points):
        """A leaf and its ancestors contain the point that produced it."""
        for p in sample_points:
            cell = Cell.from_point(p)
            assert cell.contains_point(p)
            assert Cell(cell.cell_id.parent(10)).contains_point(p)

    def test_does_not_contain_antipode(self, sample_points):
        """A cell smaller than a face never contains both a point and its antipode."""
        for p in sample_points:
            cell = Cell(CellId.from_point(p).parent(5))
            assert not cell.contains_point(-p)

    def test_contains_center(self, sample_cell_ids):
        """The center of a cell is inside it."""
        for cell_id in sample_cell_ids:
            cell = Cell(cell_id)
            assert cell.contains_point(cell.center())

    def test_cap_bound_contains_vertices(self, sample_cell_ids):
        """The bounding cap contains the center and all four vertices."""
        for cell_id in sample_cell_ids:
            cell = Cell(cell_id)
            cap = cell.cap_bound()
            assert cap.contains_point(cell.center())
            for k in range(4):
                assert cap.contains_point(cell.vertex(k))

    def test_rect_bound_contains_vertices(self, sample_cell_ids):
        """The bounding rectangle contains the center and all four vertices."""
        for cell_id in sample_cell_ids:
            cell = Cell(cell_id)
            rect = cell.rect_bound()
            assert rect.contains_point(cell.center())
            for k in range(4):
                assert rect.contains_point(cell.vertex(k))

    def test_region_interface(self):
        """Cells contain and intersect their descendants only."""
        parent = Cell(CellId.from_face(0).child_begin(2))
        child = Cell(parent.cell_id.child_begin(6))
        sibling = Cell(parent.cell_id.next())
        assert parent.contains_cell(child)
        assert parent.may_intersect_cell(child)
        assert not parent.contains_cell(sibling)
        assert not parent.may_intersect_cell(sibling)
        assert not child.contains_cell(parent)
        assert child.may_intersect_cell(parent)
