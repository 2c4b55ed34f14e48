"""
64-bit hierarchical cell identifiers.

A cell id packs a cube face and a position along that face's Hilbert
curve into one unsigned 64-bit integer:

    id = [face: 3 bits][path: 2 bits per level][1][0 ... 0]

A cell at level L has 2L path bits, each pair choosing one of the four
children at that level, followed by a single marker bit. Leaf cells
(level 30) have no trailing zeros. Because ids are plain non-negative
Python ints below 2**64, every ordering comparison is unsigned.

Id 0 is the "none" value and 2**64 - 1 is the "sentinel", which sorts
after every valid id.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, NamedTuple

from geocell.errors import InvalidCellId, LevelOutOfRange
from geocell.geo.constants import MAX_LEVEL
from geocell.geo.latlng import LatLng
from geocell.geo.point import Point
from geocell.geo.projections import (
    face_si_ti_to_xyz,
    face_uv_to_xyz,
    uv_to_st,
    valid_face_xyz_to_uv,
)
from geocell.validation import validate_face, validate_level, validate_token

FACE_BITS = 3
NUM_FACES = 6
POS_BITS = 2 * MAX_LEVEL + 1
MAX_SIZE = 1 << MAX_LEVEL

U64_MASK = 0xFFFFFFFFFFFFFFFF

# Offset that wraps the curve from the end of face 5 back to face 0.
WRAP_OFFSET = NUM_FACES << POS_BITS

SWAP_MASK = 0x01
INVERT_MASK = 0x02

# POS_TO_IJ[orientation][pos] is the (i << 1 | j) quadrant visited at
# curve position ``pos``; POS_TO_ORIENTATION[pos] is xor-ed into the
# orientation of that child.
POS_TO_IJ = (
    (0, 1, 3, 2),  # canonical: (0,0), (0,1), (1,1), (1,0)
    (0, 2, 3, 1),  # axes swapped: (0,0), (1,0), (1,1), (0,1)
    (3, 2, 0, 1),  # bits inverted: (1,1), (1,0), (0,0), (0,1)
    (3, 1, 0, 2),  # swapped and inverted: (1,1), (0,1), (0,0), (1,0)
)
POS_TO_ORIENTATION = (SWAP_MASK, 0, 0, INVERT_MASK | SWAP_MASK)

LOOKUP_BITS = 4
_LOOKUP_MASK = (1 << LOOKUP_BITS) - 1


def _build_lookup_tables() -> tuple[tuple[int, ...], tuple[int, ...]]:
    """
    Build the (i, j) <-> curve position tables for 4-bit groups.

    LOOKUP_POS maps a key "iiiijjjjoo" (4 bits of i, 4 bits of j, 2 bits of
    orientation) to "ppppppppoo" (8 bits of curve position and the
    orientation of the subcell reached). LOOKUP_IJ is the inverse.
    """
    size = 1 << (2 * LOOKUP_BITS + 2)
    lookup_pos = [0] * size
    lookup_ij = [0] * size

    def init_cell(level: int, i: int, j: int, orig_orientation: int, pos: int, orientation: int):
        if level == LOOKUP_BITS:
            ij = (i << LOOKUP_BITS) + j
            lookup_pos[(ij << 2) + orig_orientation] = (pos << 2) + orientation
            lookup_ij[(pos << 2) + orig_orientation] = (ij << 2) + orientation
            return
        level += 1
        i <<= 1
        j <<= 1
        pos <<= 2
        for sub_pos in range(4):
            ij = POS_TO_IJ[orientation][sub_pos]
            init_cell(
                level,
                i + (ij >> 1),
                j + (ij & 1),
                orig_orientation,
                pos + sub_pos,
                orientation ^ POS_TO_ORIENTATION[sub_pos],
            )

    for orientation in range(4):
        init_cell(0, 0, 0, orientation, 0, orientation)
    return tuple(lookup_pos), tuple(lookup_ij)


LOOKUP_POS, LOOKUP_IJ = _build_lookup_tables()


class FaceIJ(NamedTuple):
    """A decoded cell: face, leaf coordinates and curve orientation."""

    face: int
    i: int
    j: int
    orientation: int


def st_to_ij(s: float) -> int:
    """Return the leaf i- or j-index containing the s- or t-value in [-1, 1]."""
    m = MAX_SIZE / 2
    return max(0, min(MAX_SIZE - 1, math.floor(m * s + (m - 0.5) + 0.5)))


def lowest_on_bit_for_level(level: int) -> int:
    return 1 << (2 * (MAX_LEVEL - level))


@dataclass(frozen=True, order=True)
class CellId:
    """An immutable cell identifier ordered as an unsigned 64-bit integer."""

    id: int

    def __post_init__(self):
        if not 0 <= self.id <= U64_MASK:
            raise InvalidCellId(f"Cell id {self.id} does not fit in 64 bits")

    @classmethod
    def none(cls) -> CellId:
        return cls(0)

    @classmethod
    def sentinel(cls) -> CellId:
        return cls(U64_MASK)

    @classmethod
    def from_face(cls, face: int) -> CellId:
        validate_face(face)
        return cls((face << POS_BITS) + lowest_on_bit_for_level(0))

    @classmethod
    def from_face_pos_level(cls, face: int, pos: int, level: int) -> CellId:
        """
        Return the cell at ``level`` containing curve position ``pos``
        (61 bits) on ``face``.
        """
        validate_face(face)
        validate_level(level)
        return cls((face << POS_BITS) + (pos | 1)).parent(level)

    @classmethod
    def from_face_ij(cls, face: int, i: int, j: int) -> CellId:
        """Return the leaf cell at leaf coordinates (i, j) on ``face``."""
        validate_face(face)
        if not (0 <= i < MAX_SIZE and 0 <= j < MAX_SIZE):
            raise InvalidCellId(f"Leaf coordinates ({i}, {j}) are outside [0, {MAX_SIZE})")

        n = face << (POS_BITS - 1)
        # Alternating faces have opposite curve orientations so that every
        # face gets a right-handed coordinate system.
        bits = face & SWAP_MASK
        for k in range(7, -1, -1):
            bits += ((i >> (k * LOOKUP_BITS)) & _LOOKUP_MASK) << (LOOKUP_BITS + 2)
            bits += ((j >> (k * LOOKUP_BITS)) & _LOOKUP_MASK) << 2
            bits = LOOKUP_POS[bits]
            n |= (bits >> 2) << (k * 2 * LOOKUP_BITS)
            bits &= SWAP_MASK | INVERT_MASK
        return cls(n * 2 + 1)

    @classmethod
    def from_face_ij_wrap(cls, face: int, i: int, j: int) -> CellId:
        """
        Return the leaf cell for (i, j) that may lie just off ``face``,
        re-deriving the face it actually falls on.
        """
        # Clamp to one leaf beyond the face boundary.
        i = max(-1, min(MAX_SIZE, i))
        j = max(-1, min(MAX_SIZE, j))

        # At least one of s, t lies just outside [-1, 1]. Treating them as
        # (u, v) is exact along the boundary and keeps the mapping to the
        # adjacent face a pure permutation of coordinates.
        scale = 1.0 / MAX_SIZE
        s = scale * ((i << 1) + 1 - MAX_SIZE)
        t = scale * ((j << 1) + 1 - MAX_SIZE)
        p = face_uv_to_xyz(face, s, t)
        face = p.to_face()
        u, v = valid_face_xyz_to_uv(face, p)
        return cls.from_face_ij(face, st_to_ij(u), st_to_ij(v))

    @classmethod
    def from_face_ij_same(cls, face: int, i: int, j: int, same_face: bool) -> CellId:
        if same_face:
            return cls.from_face_ij(face, i, j)
        return cls.from_face_ij_wrap(face, i, j)

    @classmethod
    def from_point(cls, p: Point) -> CellId:
        """Return the leaf cell containing a direction vector."""
        face = p.to_face()
        u, v = valid_face_xyz_to_uv(face, p)
        return cls.from_face_ij(face, st_to_ij(uv_to_st(u)), st_to_ij(uv_to_st(v)))

    @classmethod
    def from_latlng(cls, ll: LatLng) -> CellId:
        return cls.from_point(ll.to_point())

    @classmethod
    def from_token(cls, token: str) -> CellId:
        """
        Decode a token produced by to_token().

        Raises:
            InvalidToken: for empty, over-long or non-hex tokens
        """
        token = validate_token(token)
        if token == "X":
            return cls.none()
        return cls(int(token.ljust(16, "0"), 16))

    @classmethod
    def begin(cls, level: int) -> CellId:
        """First cell at ``level`` along the curve."""
        return cls.from_face(0).child_begin(level)

    @classmethod
    def end(cls, level: int) -> CellId:
        """One past the last cell at ``level`` (not a valid id)."""
        return cls.from_face(5).child_end(level)

    def __str__(self) -> str:
        if not self.is_valid():
            return f"Invalid: {self.id:016x}"
        path = "".join(str(self.child_position(level)) for level in range(1, self.level() + 1))
        return f"{self.face}/{path}"

    def __repr__(self) -> str:
        if not self.is_valid():
            return f"CellId(0x{self.id:016x})"
        return f"CellId(face={self.face}, pos={self.pos():x}, level={self.level()})"

    def to_token(self) -> str:
        """
        Encode as hex with trailing zeros stripped.

        Larger cells get shorter tokens; the none id encodes as "X".
        """
        if self.id == 0:
            return "X"
        return f"{self.id:016x}".rstrip("0")

    @property
    def face(self) -> int:
        return self.id >> POS_BITS

    def pos(self) -> int:
        """Position along the face's curve, in 0..2**61 - 1."""
        return self.id & (U64_MASK >> FACE_BITS)

    def lowest_on_bit(self) -> int:
        return self.id & -self.id

    def is_valid(self) -> bool:
        return self.face < NUM_FACES and (self.lowest_on_bit() & 0x1555555555555555) != 0

    def is_leaf(self) -> bool:
        return (self.id & 1) != 0

    def is_face(self) -> bool:
        return self.id != 0 and (self.id & (lowest_on_bit_for_level(0) - 1)) == 0

    def level(self) -> int:
        """Subdivision level, 0 (face) to 30 (leaf)."""
        if self.id == 0:
            raise InvalidCellId("The none cell id has no level")
        return MAX_LEVEL - ((self.lowest_on_bit().bit_length() - 1) >> 1)

    def child_position(self, level: int) -> int:
        """Position (0..3) of this cell's ancestor at ``level`` within its parent."""
        validate_level(level, 1, self.level())
        return (self.id >> (2 * (MAX_LEVEL - level) + 1)) & 3

    def to_face_ij_orientation(self) -> FaceIJ:
        """
        Decode into (face, i, j, orientation).

        For non-leaf cells (i, j) is a leaf cell adjacent to the cell
        center.

        Raises:
            InvalidCellId: for the none id, the sentinel, or any id that
                does not follow the bit layout
        """
        if not self.is_valid():
            raise InvalidCellId(f"Cannot decode invalid cell id 0x{self.id:016x}")

        face = self.face
        i = 0
        j = 0
        bits = face & SWAP_MASK
        # Each step maps 8 bits of curve position to 4 bits each of i and
        # j. The first step only has 2 bits of each because the face bits
        # sit above them.
        for k in range(7, -1, -1):
            nbits = MAX_LEVEL - 7 * LOOKUP_BITS if k == 7 else LOOKUP_BITS
            bits += ((self.id >> (k * 2 * LOOKUP_BITS + 1)) & ((1 << (2 * nbits)) - 1)) << 2
            bits = LOOKUP_IJ[bits]
            i += (bits >> (LOOKUP_BITS + 2)) << (k * LOOKUP_BITS)
            j += ((bits >> 2) & _LOOKUP_MASK) << (k * LOOKUP_BITS)
            bits &= SWAP_MASK | INVERT_MASK

        # The trailing "10" of a non-leaf id has no effect, but each "00"
        # pair after it flips the swap bit; an odd number of them leaves it
        # flipped.
        if self.lowest_on_bit() & 0x1111111111111110:
            bits ^= SWAP_MASK
        return FaceIJ(face, i, j, bits)

    def to_point_raw(self) -> Point:
        """Direction of the cell center (not unit length)."""
        face, i, j, _ = self.to_face_ij_orientation()
        # (i, j) is one of the two leaf cells nearest the center; the low
        # bit of i tells which, and (si, ti) doubles the coordinates so the
        # center of a leaf can be represented exactly.
        if self.is_leaf():
            delta = 1
        elif (i ^ (self.id >> 2)) & 1:
            delta = 2
        else:
            delta = 0
        si = (i << 1) + delta - MAX_SIZE
        ti = (j << 1) + delta - MAX_SIZE
        return face_si_ti_to_xyz(face, si, ti, MAX_SIZE)

    def to_point(self) -> Point:
        return self.to_point_raw().normalize()

    def to_latlng(self) -> LatLng:
        return LatLng.from_point(self.to_point_raw())

    # Hierarchy

    def parent(self, level: int | None = None) -> CellId:
        """Return the immediate parent, or the ancestor at ``level``."""
        if level is None:
            if self.is_face():
                raise LevelOutOfRange("A face cell has no parent")
            new_lsb = self.lowest_on_bit() << 2
        else:
            validate_level(level, 0, self.level())
            new_lsb = lowest_on_bit_for_level(level)
        return CellId((self.id & -new_lsb) | new_lsb)

    def child_begin(self, level: int | None = None) -> CellId:
        """First child, or first descendant at ``level``."""
        old_lsb = self.lowest_on_bit()
        if level is None:
            if self.is_leaf():
                raise LevelOutOfRange("A leaf cell has no children")
            return CellId(self.id - old_lsb + (old_lsb >> 2))
        validate_level(level, self.level())
        return CellId(self.id - old_lsb + lowest_on_bit_for_level(level))

    def child_end(self, level: int | None = None) -> CellId:
        """One past the last child (or descendant at ``level``); may be invalid."""
        old_lsb = self.lowest_on_bit()
        if level is None:
            if self.is_leaf():
                raise LevelOutOfRange("A leaf cell has no children")
            return CellId(self.id + old_lsb + (old_lsb >> 2))
        validate_level(level, self.level())
        return CellId(self.id + old_lsb + lowest_on_bit_for_level(level))

    def children(self, level: int | None = None) -> Iterator[CellId]:
        """Iterate over the children (or descendants at ``level``) in curve order."""
        end = self.child_end(level)
        child = self.child_begin(level)
        while child != end:
            yield child
            child = child.next()

    def range_min(self) -> CellId:
        """Smallest leaf id contained in this cell."""
        return CellId(self.id - (self.lowest_on_bit() - 1))

    def range_max(self) -> CellId:
        """Largest leaf id contained in this cell."""
        return CellId(self.id + (self.lowest_on_bit() - 1))

    def contains(self, other: CellId) -> bool:
        return self.range_min().id <= other.id <= self.range_max().id

    def intersects(self, other: CellId) -> bool:
        return (
            other.range_min().id <= self.range_max().id
            and other.range_max().id >= self.range_min().id
        )

    # Curve traversal

    def next(self) -> CellId:
        """Next cell at this level; crosses faces but does not wrap past face 5."""
        return CellId((self.id + (self.lowest_on_bit() << 1)) & U64_MASK)

    def prev(self) -> CellId:
        """Previous cell at this level; does not wrap before face 0."""
        return CellId((self.id - (self.lowest_on_bit() << 1)) & U64_MASK)

    def next_wrap(self) -> CellId:
        """Like next(), but wraps from the last face back to the first."""
        n = self.next()
        if n.id < WRAP_OFFSET:
            return n
        return CellId(n.id - WRAP_OFFSET)

    def prev_wrap(self) -> CellId:
        """Like prev(), but wraps from the first face to the last."""
        p = self.prev()
        if p.id < WRAP_OFFSET:
            return p
        return CellId((p.id + WRAP_OFFSET) & U64_MASK)

    # Neighbors

    def get_edge_neighbors(self) -> list[CellId]:
        """
        Return the four cells sharing an edge with this one, in the order
        south, east, north, west (the order of Cell.edge()).
        """
        level = self.level()
        size = 1 << (MAX_LEVEL - level)
        face, i, j, _ = self.to_face_ij_orientation()
        return [
            CellId.from_face_ij_same(face, i, j - size, j - size >= 0).parent(level),
            CellId.from_face_ij_same(face, i + size, j, i + size < MAX_SIZE).parent(level),
            CellId.from_face_ij_same(face, i, j + size, j + size < MAX_SIZE).parent(level),
            CellId.from_face_ij_same(face, i - size, j, i - size >= 0).parent(level),
        ]

    def get_vertex_neighbors(self, level: int) -> list[CellId]:
        """
        Return the cells at ``level`` that share the vertex closest to
        this cell.

        There are normally four, or three when the vertex is a cube
        corner. ``level`` must be below this cell's level so that the
        closest vertex is well defined.
        """
        validate_level(level, 0, self.level() - 1)
        face, i, j, _ = self.to_face_ij_orientation()

        # The next bit of i and j below ``level`` tells which quadrant of
        # the ancestor this cell is in, and so which way to step.
        halfsize = 1 << (MAX_LEVEL - (level + 1))
        size = halfsize << 1
        if i & halfsize:
            ioffset = size
            isame = (i + size) < MAX_SIZE
        else:
            ioffset = -size
            isame = (i - size) >= 0
        if j & halfsize:
            joffset = size
            jsame = (j + size) < MAX_SIZE
        else:
            joffset = -size
            jsame = (j - size) >= 0

        neighbors = [
            self.parent(level),
            CellId.from_face_ij_same(face, i + ioffset, j, isame).parent(level),
            CellId.from_face_ij_same(face, i, j + joffset, jsame).parent(level),
        ]
        # With both steps off the face the vertex is a cube corner.
        if isame or jsame:
            neighbors.append(
                CellId.from_face_ij_same(face, i + ioffset, j + joffset, isame and jsame).parent(
                    level
                )
            )
        return neighbors

    def get_all_neighbors(self, nbr_level: int) -> list[CellId]:
        """
        Return every cell at ``nbr_level`` whose boundary touches this
        cell without overlapping it, including diagonal neighbors.

        ``nbr_level`` must be at least this cell's level. Near a cube
        corner the same neighbor may appear more than once.
        """
        level = self.level()
        validate_level(nbr_level, level)
        face, i, j, _ = self.to_face_ij_orientation()

        # Snap to the lower-left leaf so offsets are relative to the corner.
        size = 1 << (MAX_LEVEL - level)
        i &= -size
        j &= -size
        nbr_size = 1 << (MAX_LEVEL - nbr_level)

        neighbors = []
        k = -nbr_size
        while True:
            if k < 0:
                same_face = j + k >= 0
            elif k >= size:
                same_face = j + k < MAX_SIZE
            else:
                same_face = True
                # South and north.
                neighbors.append(
                    CellId.from_face_ij_same(face, i + k, j - nbr_size, j - size >= 0).parent(
                        nbr_level
                    )
                )
                neighbors.append(
                    CellId.from_face_ij_same(face, i + k, j + size, j + size < MAX_SIZE).parent(
                        nbr_level
                    )
                )
            # West, east and the diagonals.
            neighbors.append(
                CellId.from_face_ij_same(
                    face, i - nbr_size, j + k, same_face and i - size >= 0
                ).parent(nbr_level)
            )
            neighbors.append(
                CellId.from_face_ij_same(
                    face, i + size, j + k, same_face and i + size < MAX_SIZE
                ).parent(nbr_level)
            )
            if k >= size:
                break
            k += nbr_size
        return neighbors
