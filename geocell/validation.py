"""Validation helpers for untrusted cell inputs."""

from __future__ import annotations

import re

from geocell.errors import InvalidCellId, InvalidToken, InvalidVertexIndex, LevelOutOfRange
from geocell.geo.constants import MAX_LEVEL

NUM_FACES = 6
MAX_TOKEN_LEN = 16

_TOKEN_RE = re.compile(r"[0-9a-fA-F]+")


def validate_token(token: str) -> str:
    """Validate a cell token and return it lower-cased.

    Policy:
    - must be a non-empty string
    - at most 16 characters
    - hex digits only (no sign, prefix, whitespace or separators)

    The single-character token "X" is accepted as the encoding of the
    invalid id and returned unchanged.
    """
    if not isinstance(token, str):
        raise InvalidToken(f"Token must be a string, got {type(token).__name__}")
    if not token:
        raise InvalidToken("Token must not be empty")
    if token == "X":
        return token
    if len(token) > MAX_TOKEN_LEN:
        raise InvalidToken(f"Token is too long: {token!r}")
    if not _TOKEN_RE.fullmatch(token):
        raise InvalidToken(f"Token contains non-hex characters: {token!r}")
    return token.lower()


def validate_level(level: int, lo: int = 0, hi: int = MAX_LEVEL) -> int:
    """Check that ``lo <= level <= hi``; the bounds default to 0..30."""
    if not lo <= level <= hi:
        raise LevelOutOfRange(f"Level {level} is outside {lo}..{hi}")
    return level


def validate_face(face: int) -> int:
    if not 0 <= face < NUM_FACES:
        raise InvalidCellId(f"Face {face} is outside 0..{NUM_FACES - 1}")
    return face


def validate_vertex_index(k: int) -> int:
    if not 0 <= k <= 3:
        raise InvalidVertexIndex(f"Invalid vertex index: {k}")
    return k
