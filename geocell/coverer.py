"""
Region coverings.

RegionCoverer approximates an arbitrary region by a small set of cells,
either covering it (every point of the region is in some cell) or lying
inside it (every cell is contained by the region). The search is a
best-first branch and bound: large, poorly resolved cells are refined
first, and once the cell budget is used up the remaining candidates are
taken as they are.
"""

from __future__ import annotations

import heapq
import itertools
import logging

from geocell.cell import Cell
from geocell.cellid import MAX_LEVEL, CellId
from geocell.cellset import CellSet
from geocell.config import settings
from geocell.errors import PreconditionViolated
from geocell.geo.metrics import MIN_WIDTH
from geocell.geo.point import Point
from geocell.models import CoveringOptions
from geocell.region import Region
from geocell.validation import validate_level

logger = logging.getLogger(__name__)

FACE_CELLS = tuple(Cell(CellId.from_face(face)) for face in range(6))


class Candidate:
    """A search node: a cell, whether it is final, and its surviving children."""

    __slots__ = ("cell", "is_terminal", "children")

    def __init__(self, cell: Cell, is_terminal: bool):
        self.cell = cell
        self.is_terminal = is_terminal
        # Up to 4 ** level_mod entries, filled by expansion.
        self.children: list[Candidate] = []

    def __repr__(self) -> str:
        return f"Candidate({self.cell!r}, terminal={self.is_terminal}, children={len(self.children)})"


class RegionCoverer:
    """
    Compute cell coverings of regions under level and size constraints.

    Typical use::

        coverer = RegionCoverer().set_max_cells(5)
        cells = coverer.get_covering_cells(Cap.from_axis_angle(axis, angle))

    max_cells is a target, not a hard limit: up to 6 cells may be returned
    when the region touches all six faces, up to 3 for a tiny region at a
    cube corner, and any number when min_level is too fine for the region.
    Interior coverings may be empty even for non-empty regions.

    Instances hold working state for the duration of a covering call and
    are not thread-safe. Use one coverer per thread.
    """

    DEFAULT_MAX_CELLS = 8

    def __init__(self, options: CoveringOptions | None = None):
        if options is None:
            options = CoveringOptions(
                min_level=settings.default_min_level,
                max_level=settings.default_max_level,
                level_mod=settings.default_level_mod,
                max_cells=settings.default_max_cells,
            )
        self._min_level = 0
        self._max_level = MAX_LEVEL
        self._level_mod = 1
        self._max_cells = self.DEFAULT_MAX_CELLS
        self.set_min_level(options.min_level)
        self.set_max_level(options.max_level)
        self.set_level_mod(options.level_mod)
        self.set_max_cells(options.max_cells)

        # Per-call state
        self._interior_covering = False
        self._region: Region | None = None
        self._result: list[CellId] = []
        self._queue: list[tuple[int, int, Candidate]] = []
        self._counter = itertools.count()
        self.candidates_created = 0

    def __repr__(self) -> str:
        return (
            f"RegionCoverer(min_level={self._min_level}, max_level={self._max_level}, "
            f"level_mod={self._level_mod}, max_cells={self._max_cells})"
        )

    # Configuration

    @property
    def min_level(self) -> int:
        return self._min_level

    @property
    def max_level(self) -> int:
        return self._max_level

    @property
    def level_mod(self) -> int:
        return self._level_mod

    @property
    def max_cells(self) -> int:
        return self._max_cells

    @property
    def options(self) -> CoveringOptions:
        return CoveringOptions(
            min_level=self._min_level,
            max_level=self._max_level,
            level_mod=self._level_mod,
            max_cells=self._max_cells,
        )

    def set_min_level(self, min_level: int) -> RegionCoverer:
        """Set the smallest level used, clamped to 0..30."""
        self._min_level = max(0, min(MAX_LEVEL, min_level))
        return self

    def set_max_level(self, max_level: int) -> RegionCoverer:
        """Set the largest level used, clamped to 0..30."""
        self._max_level = max(0, min(MAX_LEVEL, max_level))
        return self

    def set_level_mod(self, level_mod: int) -> RegionCoverer:
        """
        Only use levels where (level - min_level) is a multiple of
        level_mod, clamped to 1..3. This raises the branching factor to
        4, 16 or 64.
        """
        self._level_mod = max(1, min(3, level_mod))
        return self

    def set_max_cells(self, max_cells: int) -> RegionCoverer:
        """Set the desired number of cells, at least 1."""
        self._max_cells = max(1, max_cells)
        return self

    def reset(self) -> None:
        """Discard state left behind by a covering call that raised."""
        self._queue.clear()
        self._result = []
        self._region = None

    # Coverings

    def get_covering(self, region: Region) -> CellSet:
        """
        Return a normalized covering of ``region``.

        It honours max_level and max_cells, but normalization may merge
        cells below min_level or off the level_mod stride; use
        get_covering_cells() when those must hold.
        """
        self._interior_covering = False
        return CellSet.normalized(self._get_covering_internal(region))

    def get_interior_covering(self, region: Region) -> CellSet:
        """Return a normalized set of cells contained in ``region``."""
        self._interior_covering = True
        return CellSet.normalized(self._get_covering_internal(region))

    def get_covering_cells(self, region: Region) -> list[CellId]:
        """Return a covering that satisfies every level constraint."""
        return self.get_covering(region).denormalize(self._min_level, self._level_mod)

    def get_interior_covering_cells(self, region: Region) -> list[CellId]:
        """Return an interior covering that satisfies every level constraint."""
        return self.get_interior_covering(region).denormalize(self._min_level, self._level_mod)

    @staticmethod
    def get_simple_covering(region: Region, start: Point, level: int) -> list[CellId]:
        """
        Cover a connected region with cells of one level by flood fill
        from the cell containing ``start``.

        Each cell of the result intersects the region, and cells that only
        touch the region through a vertex may be missed.
        """
        validate_level(level)
        first = CellId.from_point(start).parent(level)
        seen = {first}
        frontier = [first]
        output = []
        while frontier:
            cell_id = frontier.pop()
            if not region.may_intersect_cell(Cell(cell_id)):
                continue
            output.append(cell_id)
            for neighbor in cell_id.get_edge_neighbors():
                if neighbor not in seen:
                    seen.add(neighbor)
                    frontier.append(neighbor)
        return output

    # Search

    def _max_children_shift(self) -> int:
        return 2 * self._level_mod

    def _new_candidate(self, cell: Cell) -> Candidate | None:
        """
        Return a candidate for ``cell`` if the region may meet it, marking
        it terminal when it should not be expanded further.
        """
        if not self._region.may_intersect_cell(cell):
            return None

        is_terminal = False
        if cell.level >= self._min_level:
            if self._interior_covering:
                if self._region.contains_cell(cell):
                    is_terminal = True
                elif cell.level + self._level_mod > self._max_level:
                    return None
            elif cell.level + self._level_mod > self._max_level or self._region.contains_cell(cell):
                is_terminal = True

        self.candidates_created += 1
        return Candidate(cell, is_terminal)

    def _add_candidate(self, candidate: Candidate | None) -> None:
        """Emit a terminal candidate, or expand it and queue it."""
        if candidate is None:
            return

        if candidate.is_terminal:
            self._result.append(candidate.cell.cell_id)
            return

        # Step one level at a time below min_level so as not to skip it.
        num_levels = 1 if candidate.cell.level < self._min_level else self._level_mod
        num_terminals = self._expand_children(candidate, candidate.cell, num_levels)

        shift = self._max_children_shift()
        if not candidate.children:
            # Nothing of the region survives inside this cell.
            return
        if (
            not self._interior_covering
            and num_terminals == 1 << shift
            and candidate.cell.level >= self._min_level
        ):
            # Every child would be emitted, so emit the parent instead. This
            # is not valid for interior coverings, where a child meeting the
            # region is not the same as a child inside it.
            candidate.is_terminal = True
            self._add_candidate(candidate)
        else:
            # Larger cells first, then fewer children, then fewer terminal
            # children.
            key = (
                ((candidate.cell.level << shift) + len(candidate.children)) << shift
            ) + num_terminals
            heapq.heappush(self._queue, (key, next(self._counter), candidate))

    def _expand_children(self, candidate: Candidate, cell: Cell, num_levels: int) -> int:
        """
        Add the descendants of ``cell`` ``num_levels`` down that the region
        may meet as children of ``candidate``.

        Returns:
            The number of children marked terminal
        """
        num_levels -= 1
        num_terminals = 0
        for child_cell in cell.subdivide():
            if num_levels > 0:
                if self._region.may_intersect_cell(child_cell):
                    num_terminals += self._expand_children(candidate, child_cell, num_levels)
                continue
            child = self._new_candidate(child_cell)
            if child is not None:
                candidate.children.append(child)
                if child.is_terminal:
                    num_terminals += 1
        return num_terminals

    def _get_initial_candidates(self) -> None:
        """Seed the search from the region's bounding cap, or from the faces."""
        if self._max_cells >= 4:
            # Start at the finest level whose cells are at least as wide as
            # the cap, so at most one cell vertex falls inside it and 3 or 4
            # cells around that vertex cover it.
            cap = self._region.cap_bound()
            level = min(
                MIN_WIDTH.get_max_level(2 * cap.angle().radians),
                min(self._max_level, MAX_LEVEL - 1),
            )
            if self._level_mod > 1 and level > self._min_level:
                level -= (level - self._min_level) % self._level_mod
            if level > 0:
                logger.debug(f"Seeding covering at level {level}")
                base = CellId.from_point(cap.axis).get_vertex_neighbors(level)
                for cell_id in base:
                    self._add_candidate(self._new_candidate(Cell(cell_id)))
                return

        logger.debug("Seeding covering from the six face cells")
        for face_cell in FACE_CELLS:
            self._add_candidate(self._new_candidate(face_cell))

    def _get_covering_internal(self, region: Region) -> list[CellId]:
        """Run the search and return the emitted cell ids (not normalized)."""
        if self._queue or self._result:
            raise PreconditionViolated(
                "Coverer still holds state from an unfinished covering; call reset()"
            )

        self._region = region
        self.candidates_created = 0
        try:
            self._get_initial_candidates()
            while self._queue and (
                not self._interior_covering or len(self._result) < self._max_cells
            ):
                candidate = heapq.heappop(self._queue)[2]
                pending = 0 if self._interior_covering else len(self._queue)
                if (
                    candidate.cell.level < self._min_level
                    or len(candidate.children) == 1
                    or len(self._result) + pending + len(candidate.children) <= self._max_cells
                ):
                    for child in candidate.children:
                        self._add_candidate(child)
                elif not self._interior_covering:
                    # Out of budget: take the cell as it is.
                    candidate.is_terminal = True
                    self._add_candidate(candidate)
        finally:
            self._queue.clear()
            self._region = None

        result = self._result
        self._result = []
        logger.debug(
            f"{'Interior covering' if self._interior_covering else 'Covering'} produced "
            f"{len(result)} cells from {self.candidates_created} candidates"
        )
        return result
