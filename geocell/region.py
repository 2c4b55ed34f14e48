"""The interface a shape must offer to be covered by cells."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from geocell.cell import Cell
    from geocell.geo.cap import Cap
    from geocell.geo.latlng_rect import LatLngRect


@runtime_checkable
class Region(Protocol):
    """
    A region on the sphere.

    Cap, LatLngRect, Cell and CellSet all implement this. The two cell
    tests may be conservative in one direction only: contains_cell() may
    return False for a contained cell, and may_intersect_cell() may return
    True for a disjoint one.
    """

    def cap_bound(self) -> Cap:
        """A spherical cap containing the region."""
        ...

    def rect_bound(self) -> LatLngRect:
        """A latitude/longitude rectangle containing the region."""
        ...

    def contains_cell(self, cell: Cell) -> bool:
        """True only if the region is known to contain the whole cell."""
        ...

    def may_intersect_cell(self, cell: Cell) -> bool:
        """False only if the region is known not to meet the cell."""
        ...
