"""Tests for 64-bit cell identifiers."""

import pytest

from geocell.cellid import MAX_LEVEL, MAX_SIZE, POS_TO_ORIENTATION, U64_MASK, CellId, st_to_ij
from geocell.errors import InvalidCellId, InvalidToken, LevelOutOfRange
from geocell.geo.latlng import LatLng
from geocell.geo.point import Point


class TestFaceCells:
    """Tests for the six level-0 cells."""

    def test_face_ids(self):
        """Face cells have the face in the top bits and the marker at bit 60."""
        for face in range(6):
            cell_id = CellId.from_face(face)
            assert cell_id.id == (face << 61) + (1 << 60)
            assert cell_id.face == face
            assert cell_id.level() == 0
            assert cell_id.is_face()
            assert not cell_id.is_leaf()

    def test_face_tokens(self):
        """Face tokens are a single hex digit."""
        tokens = [CellId.from_face(face).to_token() for face in range(6)]
        assert tokens == ["1", "3", "5", "7", "9", "b"]

    def test_face_orientation(self):
        """Odd faces start with their axes swapped."""
        for face in range(6):
            assert CellId.from_face(face).to_face_ij_orientation().orientation == face & 1

    def test_invalid_face(self):
        """Faces outside 0..5 are rejected."""
        with pytest.raises(InvalidCellId):
            CellId.from_face(6)
        with pytest.raises(InvalidCellId):
            CellId.from_face(-1)

    def test_face_center_point(self):
        """The center of face 0 is the +x axis."""
        p = CellId.from_face(0).to_point()
        assert p.x == pytest.approx(1.0)
        assert p.y == pytest.approx(0.0, abs=1e-12)
        assert p.z == pytest.approx(0.0, abs=1e-12)


class TestKnownIds:
    """Tests against hand-computed ids."""

    def test_first_leaf(self):
        """The leaf at the origin of face 0 is id 1."""
        cell_id = CellId.from_face_ij(0, 0, 0)
        assert cell_id.id == 1
        assert cell_id.level() == MAX_LEVEL
        assert cell_id.is_leaf()

    def test_level_one_on_face_zero(self):
        """Quadrant (0, 1) of face 0 is the second child along the curve."""
        cell_id = CellId.from_face_ij(0, 0, MAX_SIZE // 2).parent(1)
        assert cell_id.id == 0x0C00000000000000
        assert str(cell_id) == "0/1"

    def test_level_one_on_face_one(self):
        """Face 1 is swapped, so quadrant (1, 0) is its second child."""
        cell_id = CellId.from_face_ij(1, MAX_SIZE // 2, 0).parent(1)
        assert cell_id.id == 0x2C00000000000000

    def test_from_latlng_origin(self):
        """Latitude 0, longitude 0 lies on face 0 at the face center."""
        cell_id = CellId.from_latlng(LatLng.from_degrees(0, 0))
        face, i, j, _ = cell_id.to_face_ij_orientation()
        assert face == 0
        assert (i, j) == (MAX_SIZE // 2, MAX_SIZE // 2)

    def test_from_point_north_pole(self):
        """The north pole lies on face 2."""
        assert CellId.from_point(Point(0, 0, 1)).face == 2
        assert CellId.from_point(Point(0, 0, -1)).face == 5

    def test_str(self):
        """Cells print as face/child-path."""
        assert str(CellId.from_face(3)) == "3/"
        assert str(CellId.from_face(3).child_begin(2)) == "3/00"
        assert str(CellId.none()).startswith("Invalid")


class TestFaceIJ:
    """Tests for conversion between ids and leaf coordinates."""

    def test_round_trip_corners(self):
        """Leaf coordinates at the face corners survive a round trip."""
        for face in range(6):
            for i in (0, MAX_SIZE - 1):
                for j in (0, MAX_SIZE - 1):
                    decoded = CellId.from_face_ij(face, i, j).to_face_ij_orientation()
                    assert (decoded.face, decoded.i, decoded.j) == (face, i, j)

    def test_round_trip_random(self, rng):
        """Random leaf coordinates survive a round trip."""
        for _ in range(500):
            face = rng.randrange(6)
            i = rng.randrange(MAX_SIZE)
            j = rng.randrange(MAX_SIZE)
            decoded = CellId.from_face_ij(face, i, j).to_face_ij_orientation()
            assert (decoded.face, decoded.i, decoded.j) == (face, i, j)

    def test_orientation_follows_parent_chain(self, rng):
        """Each child's orientation is its parent's xor the step taken at its position."""
        for _ in range(200):
            cell_id = CellId.from_face_ij(
                rng.randrange(6), rng.randrange(MAX_SIZE), rng.randrange(MAX_SIZE)
            )
            while not cell_id.is_face():
                parent = cell_id.parent()
                child = cell_id.to_face_ij_orientation()
                above = parent.to_face_ij_orientation()
                step = POS_TO_ORIENTATION[cell_id.child_position(cell_id.level())]
                assert child.orientation == above.orientation ^ step
                assert child.face == above.face
                assert parent.level() == cell_id.level() - 1
                cell_id = parent
            assert cell_id.to_face_ij_orientation().orientation == cell_id.face & 1

    def test_out_of_range_coordinates(self):
        """Leaf coordinates must lie on the face."""
        with pytest.raises(InvalidCellId):
            CellId.from_face_ij(0, MAX_SIZE, 0)
        with pytest.raises(InvalidCellId):
            CellId.from_face_ij(0, 0, -1)

    def test_decode_invalid(self):
        """The none id and the sentinel cannot be decoded."""
        with pytest.raises(InvalidCellId):
            CellId.none().to_face_ij_orientation()
        with pytest.raises(InvalidCellId):
            CellId.sentinel().to_face_ij_orientation()

    def test_st_to_ij_clamps(self):
        """Coordinates outside [-1, 1] clamp to the edge leaves."""
        assert st_to_ij(-1.0) == 0
        assert st_to_ij(-2.0) == 0
        assert st_to_ij(1.0) == MAX_SIZE - 1
        assert st_to_ij(0.0) == MAX_SIZE // 2


class TestPoints:
    """Tests for conversion between ids and points."""

    def test_leaf_center_round_trip(self, sample_cell_ids):
        """The center of a leaf maps back to the same leaf."""
        for cell_id in sample_cell_ids:
            leaf = cell_id.child_begin(MAX_LEVEL)
            assert CellId.from_point(leaf.to_point()) == leaf

    def test_cell_contains_its_center(self, sample_cell_ids):
        """The leaf containing a cell center descends from that cell."""
        for cell_id in sample_cell_ids:
            leaf = CellId.from_point(cell_id.to_point())
            assert leaf.parent(cell_id.level()) == cell_id

    def test_point_lies_in_its_leaf(self, sample_points):
        """A point is close to the center of the leaf containing it."""
        for p in sample_points:
            center = CellId.from_point(p).to_point()
            # Leaf cells are well under 1e-8 radians across.
            assert p.angle(center) < 1e-8

    def test_to_latlng(self):
        """to_latlng agrees with to_point."""
        cell_id = CellId.from_latlng(LatLng.from_degrees(40.7128, -74.0060))
        ll = cell_id.to_latlng()
        assert ll.lat_degrees == pytest.approx(40.7128, abs=1e-6)
        assert ll.lng_degrees == pytest.approx(-74.0060, abs=1e-6)


class TestTokens:
    """Tests for the hex token encoding."""

    def test_round_trip(self, sample_cell_ids):
        """Every valid id survives token encoding."""
        for cell_id in sample_cell_ids:
            token = cell_id.to_token()
            assert not token.endswith("0")
            assert len(token) <= 16
            assert CellId.from_token(token) == cell_id

    def test_none_token(self):
        """The none id encodes as X."""
        assert CellId.none().to_token() == "X"
        assert CellId.from_token("X") == CellId.none()

    def test_upper_case_accepted(self):
        """Tokens are case-insensitive on input."""
        assert CellId.from_token("B") == CellId.from_face(5)
        assert CellId.from_token("89C25") == CellId.from_token("89c25")

    def test_leaf_token_length(self):
        """Leaf tokens use all 16 digits."""
        assert len(CellId.from_face_ij(0, 0, 0).to_token()) == 16

    @pytest.mark.parametrize("token", ["", "g", "12345678901234567", " 1", "1_0", "0x1", "-1", "x"])
    def test_invalid_tokens(self, token):
        """Malformed tokens raise InvalidToken."""
        with pytest.raises(InvalidToken):
            CellId.from_token(token)

    def test_invalid_token_is_value_error(self):
        """InvalidToken can be caught as ValueError."""
        with pytest.raises(ValueError):
            CellId.from_token("zz")

    def test_invalid_cell_id_is_value_error(self):
        """InvalidCellId can be caught as ValueError."""
        with pytest.raises(ValueError):
            CellId.from_face(7)
        with pytest.raises(ValueError):
            CellId.none().to_face_ij_orientation()


class TestHierarchy:
    """Tests for parents, children and containment."""

    def test_parent_levels(self, rng):
        """Ancestors have the requested level and contain the cell."""
        leaf = CellId.from_face_ij(3, rng.randrange(MAX_SIZE), rng.randrange(MAX_SIZE))
        for level in range(MAX_LEVEL + 1):
            ancestor = leaf.parent(level)
            assert ancestor.level() == level
            assert ancestor.face == 3
            assert ancestor.contains(leaf)
            assert ancestor.intersects(leaf)

    def test_parent_chain_reaches_face(self):
        """Walking up from the first leaf reaches the face 0 root."""
        cell_id = CellId.from_face_ij(0, 0, 0)
        for expected_level in range(MAX_LEVEL - 1, -1, -1):
            cell_id = cell_id.parent()
            assert cell_id.level() == expected_level
        assert cell_id == CellId.from_face(0)
        assert cell_id.id >> 61 == 0

    def test_immediate_parent(self, sample_cell_ids):
        """parent() is parent(level - 1)."""
        for cell_id in sample_cell_ids:
            if cell_id.is_face():
                continue
            assert cell_id.parent() == cell_id.parent(cell_id.level() - 1)

    def test_face_has_no_parent(self):
        """Asking a face for its parent is an error."""
        with pytest.raises(LevelOutOfRange):
            CellId.from_face(0).parent()

    def test_parent_below_own_level(self):
        """An ancestor cannot be finer than the cell."""
        with pytest.raises(LevelOutOfRange):
            CellId.from_face(0).child_begin(5).parent(6)

    def test_children(self):
        """A cell has four children in curve order, each contained by it."""
        parent = CellId.from_face(2).child_begin(4)
        children = list(parent.children())
        assert len(children) == 4
        assert children == sorted(children)
        for position, child in enumerate(children):
            assert child.parent() == parent
            assert child.level() == 5
            assert child.child_position(5) == position
            assert parent.contains(child)
            assert not child.contains(parent)

    def test_descendants_at_level(self):
        """children(level) yields 4 ** depth descendants."""
        assert len(list(CellId.from_face(1).children(3))) == 64

    def test_leaf_has_no_children(self):
        """A leaf cell cannot be subdivided."""
        with pytest.raises(LevelOutOfRange):
            CellId.from_face_ij(0, 0, 0).child_begin()

    def test_child_level_above_own_level(self):
        """Descendants must be at least as fine as the cell."""
        with pytest.raises(LevelOutOfRange):
            CellId.from_face(0).child_begin(3).child_begin(2)

    def test_range_covers_descendants(self):
        """range_min and range_max are the first and last descendant leaves."""
        cell_id = CellId.from_face(4).child_begin(7).next()
        assert cell_id.range_min() == cell_id.child_begin(MAX_LEVEL)
        assert cell_id.range_max() == cell_id.child_end(MAX_LEVEL).prev()

    def test_sibling_ranges_disjoint(self):
        """Siblings do not overlap and neither contains the other."""
        a, b, c, d = CellId.from_face(0).child_begin(3).children()
        assert a.range_max() < b.range_min()
        assert not a.intersects(b)
        assert not b.contains(a)
        assert not c.intersects(d)

    def test_sibling_ranges_tile_parent(self, sample_cell_ids):
        """The four children's leaf ranges exactly tile the parent's range."""
        for parent in sample_cell_ids:
            if parent.is_leaf():
                continue
            children = list(parent.children())
            assert len(children) == 4
            assert children[0].range_min() == parent.range_min()
            assert children[-1].range_max() == parent.range_max()
            for prev, nxt in zip(children, children[1:]):
                assert nxt.range_min().id == prev.range_max().id + 1

    def test_level_of_none(self):
        """The none id has no level."""
        with pytest.raises(InvalidCellId):
            CellId.none().level()


class TestTraversal:
    """Tests for stepping along the curve."""

    def test_next_prev(self):
        """next and prev are inverses at every level."""
        cell_id = CellId.from_face(3).child_begin(10)
        assert cell_id.next().prev() == cell_id
        assert cell_id.next().level() == 10

    def test_next_crosses_faces(self):
        """The last cell of one face is followed by the first of the next."""
        last = CellId.from_face(1).child_end(4).prev()
        assert last.next() == CellId.from_face(2).child_begin(4)

    def test_begin_end(self):
        """begin and end bracket the cells of a level."""
        assert CellId.begin(0) == CellId.from_face(0)
        assert CellId.end(0).prev() == CellId.from_face(5)
        assert CellId.begin(MAX_LEVEL).id == 1

    def test_wrap_faces(self):
        """next_wrap and prev_wrap wrap between face 5 and face 0."""
        assert CellId.from_face(5).next_wrap() == CellId.from_face(0)
        assert CellId.from_face(0).prev_wrap() == CellId.from_face(5)
        assert CellId.from_face(2).next_wrap() == CellId.from_face(3)

    def test_wrap_leaves(self):
        """Leaf traversal wraps too."""
        assert CellId.begin(MAX_LEVEL).prev_wrap() == CellId.end(MAX_LEVEL).prev()
        assert CellId.end(MAX_LEVEL).prev().next_wrap() == CellId.begin(MAX_LEVEL)

    def test_unsigned_ordering(self):
        """The sentinel sorts after every valid id, including face 5."""
        ids = [CellId.sentinel(), CellId.from_face(5), CellId.none(), CellId.from_face(0)]
        assert sorted(ids) == [CellId.none(), CellId.from_face(0), CellId.from_face(5), CellId.sentinel()]
        assert CellId.sentinel().id == U64_MASK

    def test_out_of_range_id(self):
        """Ids must fit in 64 bits."""
        with pytest.raises(InvalidCellId):
            CellId(1 << 64)
        with pytest.raises(InvalidCellId):
            CellId(-1)

    def test_validity(self):
        """Ids must carry a marker bit at an even offset on a real face."""
        assert not CellId.none().is_valid()
        assert not CellId.sentinel().is_valid()
        assert not CellId(2).is_valid()
        assert not CellId((6 << 61) + (1 << 60)).is_valid()
        assert CellId(1).is_valid()


class TestNeighbors:
    """Tests for edge, vertex and all-neighbor queries."""

    def test_face_edge_neighbors(self):
        """Face 0 borders faces 5, 1, 2 and 4 (south, east, north, west)."""
        neighbors = CellId.from_face(0).get_edge_neighbors()
        assert neighbors == [CellId.from_face(f) for f in (5, 1, 2, 4)]

    def test_edge_neighbor_symmetry(self, sample_cell_ids):
        """Each edge neighbor lists the cell among its own edge neighbors."""
        for cell_id in sample_cell_ids:
            neighbors = cell_id.get_edge_neighbors()
            assert len(neighbors) == 4
            for neighbor in neighbors:
                assert neighbor.level() == cell_id.level()
                assert neighbor != cell_id
                assert cell_id in neighbor.get_edge_neighbors()

    def test_vertex_neighbors(self):
        """A cell away from cube corners has four vertex neighbors."""
        leaf = CellId.from_latlng(LatLng.from_degrees(10, 10))
        neighbors = leaf.get_vertex_neighbors(5)
        assert len(neighbors) == 4
        assert len(set(neighbors)) == 4
        assert leaf.parent(5) in neighbors
        assert all(n.level() == 5 for n in neighbors)

    def test_vertex_neighbors_at_cube_corner(self):
        """Only three cells meet at a cube corner."""
        corner_leaf = CellId.from_face_ij(0, 0, 0)
        for level in (0, 3, 12):
            neighbors = corner_leaf.get_vertex_neighbors(level)
            assert len(neighbors) == 3
            assert len({n.face for n in neighbors}) == 3

    def test_vertex_neighbors_level_must_be_coarser(self):
        """The vertex neighbor level must be above the cell's own level."""
        cell_id = CellId.from_face(0).child_begin(5)
        with pytest.raises(LevelOutOfRange):
            cell_id.get_vertex_neighbors(5)

    def test_all_neighbors_same_level(self):
        """An interior cell has eight neighbors at its own level."""
        cell_id = CellId.from_face_ij(0, MAX_SIZE // 2 + 12345, MAX_SIZE // 2 + 54321).parent(5)
        neighbors = cell_id.get_all_neighbors(5)
        assert len(neighbors) == 8
        assert len(set(neighbors)) == 8
        assert cell_id not in neighbors
        for edge_neighbor in cell_id.get_edge_neighbors():
            assert edge_neighbor in neighbors

    def test_all_neighbors_finer_level(self):
        """One level finer, an interior cell has twelve neighbors."""
        cell_id = CellId.from_face_ij(0, MAX_SIZE // 2 + 12345, MAX_SIZE // 2 + 54321).parent(5)
        neighbors = cell_id.get_all_neighbors(6)
        assert len(neighbors) == 12
        assert len(set(neighbors)) == 12
        for neighbor in neighbors:
            assert neighbor.level() == 6
            assert not cell_id.intersects(neighbor)

    def test_all_neighbors_level_must_be_finer(self):
        """Neighbors cannot be coarser than the cell."""
        with pytest.raises(LevelOutOfRange):
            CellId.from_face(0).child_begin(5).get_all_neighbors(4)

    def test_neighbors_are_adjacent(self):
        """Edge neighbors of a small cell are close to it."""
        leaf = CellId.from_latlng(LatLng.from_degrees(-33.8568, 151.2153))
        cell_id = leaf.parent(12)
        center = cell_id.to_point()
        for neighbor in cell_id.get_edge_neighbors():
            # Level 12 cells are roughly 0.0005 radians across.
            assert center.angle(neighbor.to_point()) < 0.002
