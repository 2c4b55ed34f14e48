"""Pytest configuration and fixtures for geocell tests."""

import math
import random

import pytest

from geocell.cellid import MAX_LEVEL, MAX_SIZE, CellId
from geocell.geo.point import Point


def random_point(rng: random.Random) -> Point:
    """A uniformly distributed unit vector."""
    z = rng.uniform(-1.0, 1.0)
    theta = rng.uniform(0.0, 2 * math.pi)
    r = math.sqrt(1.0 - z * z)
    return Point(r * math.cos(theta), r * math.sin(theta), z)


def random_cell_id(rng: random.Random, level: int | None = None) -> CellId:
    """A cell at a random position, at ``level`` or a random level."""
    if level is None:
        level = rng.randint(0, MAX_LEVEL)
    leaf = CellId.from_face_ij(rng.randrange(6), rng.randrange(MAX_SIZE), rng.randrange(MAX_SIZE))
    return leaf.parent(level)


@pytest.fixture
def rng():
    """A seeded random generator so failures are reproducible."""
    return random.Random(20240601)


@pytest.fixture
def sample_points(rng):
    """A batch of random unit vectors."""
    return [random_point(rng) for _ in range(200)]


@pytest.fixture
def sample_cell_ids(rng):
    """A batch of random cells at random levels."""
    return [random_cell_id(rng) for _ in range(200)]
