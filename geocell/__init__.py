"""
geocell - hierarchical cells on the sphere

Maps points and regions on the unit sphere to 64-bit cell ids and
approximates regions by small sets of cells, so spatial queries can run on
ordinary scalar-key indexes.
"""

__version__ = "0.1.0"

from geocell.cell import Cell
from geocell.cellid import CellId
from geocell.cellset import CellSet
from geocell.coverer import RegionCoverer
from geocell.errors import (
    GeoCellError,
    InvalidCellId,
    InvalidToken,
    InvalidVertexIndex,
    LevelOutOfRange,
    PreconditionViolated,
)
from geocell.region import Region

__all__ = [
    "__version__",
    "Cell",
    "CellId",
    "CellSet",
    "Region",
    "RegionCoverer",
    "GeoCellError",
    "InvalidCellId",
    "InvalidToken",
    "InvalidVertexIndex",
    "LevelOutOfRange",
    "PreconditionViolated",
]
