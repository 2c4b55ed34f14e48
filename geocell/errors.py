"""Errors raised by geocell."""


class GeoCellError(Exception):
    """Base class for all geocell errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidCellId(GeoCellError, ValueError):
    """A cell id that cannot be decoded (none, sentinel, or bad face)."""


class InvalidToken(GeoCellError, ValueError):
    """A token that is not a valid hex encoding of a cell id."""


class LevelOutOfRange(GeoCellError, ValueError):
    """A level outside 0..30, or on the wrong side of a cell's own level."""


class InvalidVertexIndex(GeoCellError, IndexError):
    """A vertex or edge index outside 0..3."""


class PreconditionViolated(GeoCellError, RuntimeError):
    """A covering started while state from an earlier run was still held."""
