"""Sets of cells representing a region as a disjoint union."""

from __future__ import annotations

from bisect import bisect_left
from typing import Iterable, Iterator

from geocell.cell import Cell
from geocell.cellid import MAX_LEVEL, CellId
from geocell.errors import InvalidCellId, LevelOutOfRange
from geocell.geo.cap import Cap
from geocell.geo.latlng_rect import LatLngRect
from geocell.geo.point import ORIGIN, Point
from geocell.validation import validate_level


class CellSet:
    """
    An ordered collection of cell ids.

    After normalize() the ids are sorted, no id contains another, and no
    four ids are the children of one parent. The binary-search queries
    (contains, intersects and the region operations) assume a normalized
    set.
    """

    __slots__ = ("_cell_ids",)

    def __init__(self, cell_ids: Iterable[CellId] = ()):
        ids = list(cell_ids)
        for cell_id in ids:
            if not cell_id.is_valid():
                raise InvalidCellId(f"Cannot add invalid cell id {cell_id!r} to a cell set")
        self._cell_ids = ids

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> CellSet:
        return cls(CellId.from_token(token) for token in tokens)

    @classmethod
    def normalized(cls, cell_ids: Iterable[CellId]) -> CellSet:
        cell_set = cls(cell_ids)
        cell_set.normalize()
        return cell_set

    @property
    def cell_ids(self) -> list[CellId]:
        return list(self._cell_ids)

    def __len__(self) -> int:
        return len(self._cell_ids)

    def __iter__(self) -> Iterator[CellId]:
        return iter(self._cell_ids)

    def __getitem__(self, index: int) -> CellId:
        return self._cell_ids[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CellSet):
            return NotImplemented
        return self._cell_ids == other._cell_ids

    def __repr__(self) -> str:
        return f"CellSet({self.to_tokens()!r})"

    def to_tokens(self) -> list[str]:
        return [cell_id.to_token() for cell_id in self._cell_ids]

    def normalize(self) -> bool:
        """
        Sort, drop duplicates and contained cells, and collapse every group
        of four siblings into their parent, repeatedly.

        Returns:
            True if the number of cells went down
        """
        output: list[CellId] = []
        for cell_id in sorted(self._cell_ids):
            # Skip cells covered by the previous one.
            if output and output[-1].contains(cell_id):
                continue
            # Drop earlier cells this one covers.
            while output and cell_id.contains(output[-1]):
                output.pop()

            # Collapse while the last three ids plus this one are the four
            # children of a common parent. The xor check is a fast filter;
            # the mask check confirms they share every bit above the
            # child position.
            while len(output) >= 3:
                a, b, c = output[-3].id, output[-2].id, output[-1].id
                if a ^ b ^ c != cell_id.id:
                    break
                mask = cell_id.lowest_on_bit() << 1
                mask = ~(mask + (mask << 1))
                id_masked = cell_id.id & mask
                if (
                    (a & mask) != id_masked
                    or (b & mask) != id_masked
                    or (c & mask) != id_masked
                    or cell_id.is_face()
                ):
                    break
                del output[-3:]
                cell_id = cell_id.parent()
            output.append(cell_id)

        changed = len(output) < len(self._cell_ids)
        self._cell_ids = output
        return changed

    def denormalize(self, min_level: int, level_mod: int) -> list[CellId]:
        """
        Expand cells so every level is at least ``min_level`` and a whole
        number of ``level_mod`` steps above it (capped at the leaf level).
        """
        validate_level(min_level)
        if not 1 <= level_mod <= 3:
            raise LevelOutOfRange(f"level_mod {level_mod} is outside 1..3")

        output = []
        for cell_id in self._cell_ids:
            level = cell_id.level()
            new_level = max(min_level, level)
            if level_mod > 1:
                # MAX_LEVEL is a multiple of 1, 2 and 3, so this rounds up to
                # the next allowed level.
                new_level += (MAX_LEVEL - (new_level - min_level)) % level_mod
                new_level = min(MAX_LEVEL, new_level)
            if new_level == level:
                output.append(cell_id)
            else:
                output.extend(cell_id.children(new_level))
        return output

    def contains(self, cell_id: CellId) -> bool:
        """True if some cell in the set contains ``cell_id``."""
        pos = bisect_left(self._cell_ids, cell_id)
        if pos < len(self._cell_ids) and self._cell_ids[pos].range_min() <= cell_id:
            return True
        return pos != 0 and self._cell_ids[pos - 1].range_max() >= cell_id

    def intersects(self, cell_id: CellId) -> bool:
        """True if some cell in the set overlaps ``cell_id``."""
        pos = bisect_left(self._cell_ids, cell_id)
        if pos < len(self._cell_ids) and self._cell_ids[pos].range_min() <= cell_id.range_max():
            return True
        return pos != 0 and self._cell_ids[pos - 1].range_max() >= cell_id.range_min()

    def contains_point(self, p: Point) -> bool:
        return self.contains(CellId.from_point(p))

    # Region operations

    def cap_bound(self) -> Cap:
        if not self._cell_ids:
            return Cap.empty()

        # Area-weighted centroid of the cell centers as the axis, then grow
        # to take in each cell's own cap.
        centroid = ORIGIN
        for cell_id in self._cell_ids:
            centroid = centroid + cell_id.to_point() * Cell.average_area(cell_id.level())
        if centroid == ORIGIN:
            centroid = Point(1, 0, 0)
        else:
            centroid = centroid.normalize()

        cap = Cap.from_axis_height(centroid, 0)
        for cell_id in self._cell_ids:
            cap = cap.add_cap(Cell(cell_id).cap_bound())
        return cap

    def rect_bound(self) -> LatLngRect:
        bound = LatLngRect.empty()
        for cell_id in self._cell_ids:
            bound = bound.union(Cell(cell_id).rect_bound())
        return bound

    def contains_cell(self, cell: Cell) -> bool:
        return self.contains(cell.cell_id)

    def may_intersect_cell(self, cell: Cell) -> bool:
        return self.intersects(cell.cell_id)
