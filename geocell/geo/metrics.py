"""Per-level cell size metrics for the quadratic projection."""

import math

from .constants import MAX_LEVEL, M_PI, M_SQRT2


class Metric:
    """
    A measure of cell size that scales by a fixed factor per level.

    A metric of dimension 1 measures lengths (its value halves at each
    level); dimension 2 measures areas (its value quarters). The value at
    level L is ``deriv * 2 ** (-dim * L)``.
    """

    def __init__(self, dim: int, deriv: float):
        self.dim = dim
        self.deriv = deriv

    def __repr__(self) -> str:
        return f"Metric(dim={self.dim}, deriv={self.deriv})"

    def get_value(self, level: int) -> float:
        return math.ldexp(self.deriv, -self.dim * level)

    def get_closest_level(self, value: float) -> int:
        """Return the level whose metric value is closest to ``value``."""
        return self.get_min_level((M_SQRT2 if self.dim == 1 else 2) * value)

    def get_min_level(self, value: float) -> int:
        """
        Return the minimum level such that the metric is at most ``value``.

        Returns MAX_LEVEL for non-positive values.
        """
        if value <= 0:
            return MAX_LEVEL
        exponent = math.frexp(value / self.deriv)[1]
        return max(0, min(MAX_LEVEL, -((exponent - 1) >> (self.dim - 1))))

    def get_max_level(self, value: float) -> int:
        """
        Return the maximum level such that the metric is at least ``value``.

        Returns MAX_LEVEL for non-positive values.
        """
        if value <= 0:
            return MAX_LEVEL
        exponent = math.frexp(self.deriv / value)[1]
        return max(0, min(MAX_LEVEL, (exponent - 1) >> (self.dim - 1)))


MIN_WIDTH = Metric(1, 2 * M_SQRT2 / 3)
MAX_WIDTH = Metric(1, 1.704897179199218452)
AVG_EDGE = Metric(1, 1.459213746386106062)
MIN_AREA = Metric(2, 8 * M_SQRT2 / 9)
MAX_AREA = Metric(2, 2.635799256963161491)
AVG_AREA = Metric(2, 4 * M_PI / 6)
