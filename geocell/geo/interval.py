"""
Closed intervals on the real line and on the unit circle.

R1Interval bounds latitudes; S1Interval bounds longitudes and handles
wrap-around at the antimeridian, where -pi and pi denote the same point.
"""

from __future__ import annotations

import math
from dataclasses import InitVar, dataclass

from .constants import M_PI


@dataclass(frozen=True, eq=False)
class R1Interval:
    """A closed interval [lo, hi] of real numbers; empty when lo > hi."""

    lo: float
    hi: float

    @classmethod
    def empty(cls) -> R1Interval:
        return cls(1.0, 0.0)

    @classmethod
    def from_point(cls, p: float) -> R1Interval:
        return cls(p, p)

    @classmethod
    def from_point_pair(cls, p1: float, p2: float) -> R1Interval:
        if p1 <= p2:
            return cls(p1, p2)
        return cls(p2, p1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, R1Interval):
            return NotImplemented
        return (self.lo == other.lo and self.hi == other.hi) or (
            self.is_empty() and other.is_empty()
        )

    def __hash__(self) -> int:
        if self.is_empty():
            return hash("R1Interval.empty")
        return hash((self.lo, self.hi))

    def is_empty(self) -> bool:
        return self.lo > self.hi

    def center(self) -> float:
        return 0.5 * (self.lo + self.hi)

    def length(self) -> float:
        """Length of the interval; negative when empty."""
        return self.hi - self.lo

    def contains(self, p: float) -> bool:
        return self.lo <= p <= self.hi

    def interior_contains(self, p: float) -> bool:
        return self.lo < p < self.hi

    def contains_interval(self, y: R1Interval) -> bool:
        if y.is_empty():
            return True
        return y.lo >= self.lo and y.hi <= self.hi

    def interior_contains_interval(self, y: R1Interval) -> bool:
        if y.is_empty():
            return True
        return y.lo > self.lo and y.hi < self.hi

    def intersects(self, y: R1Interval) -> bool:
        if self.lo <= y.lo:
            return y.lo <= self.hi and y.lo <= y.hi
        return self.lo <= y.hi and self.lo <= self.hi

    def interior_intersects(self, y: R1Interval) -> bool:
        return y.lo < self.hi and self.lo < y.hi and self.lo < self.hi and y.lo <= y.hi

    def add_point(self, p: float) -> R1Interval:
        if self.is_empty():
            return R1Interval.from_point(p)
        if p < self.lo:
            return R1Interval(p, self.hi)
        if p > self.hi:
            return R1Interval(self.lo, p)
        return self

    def expanded(self, radius: float) -> R1Interval:
        if self.is_empty():
            return self
        return R1Interval(self.lo - radius, self.hi + radius)

    def union(self, y: R1Interval) -> R1Interval:
        if self.is_empty():
            return y
        if y.is_empty():
            return self
        return R1Interval(min(self.lo, y.lo), max(self.hi, y.hi))

    def intersection(self, y: R1Interval) -> R1Interval:
        return R1Interval(max(self.lo, y.lo), min(self.hi, y.hi))

    def approx_equals(self, y: R1Interval, max_error: float = 1e-15) -> bool:
        if self.is_empty():
            return y.length() <= max_error
        if y.is_empty():
            return self.length() <= max_error
        return abs(y.lo - self.lo) + abs(y.hi - self.hi) <= max_error


@dataclass(frozen=True, eq=False)
class S1Interval:
    """
    A closed interval on the unit circle, with endpoints in [-pi, pi].

    The interval runs counter-clockwise from lo to hi, so lo > hi means it
    crosses the antimeridian ("inverted"). The full interval is [-pi, pi]
    and the empty interval is [pi, -pi]. Unless ``checked`` is set, a bound
    of -pi is rewritten to pi so that each point has one representation.
    """

    lo: float
    hi: float
    checked: InitVar[bool] = False

    def __post_init__(self, checked: bool):
        if not checked:
            if self.lo == -M_PI and self.hi != M_PI:
                object.__setattr__(self, "lo", M_PI)
            if self.hi == -M_PI and self.lo != M_PI:
                object.__setattr__(self, "hi", M_PI)

    @classmethod
    def empty(cls) -> S1Interval:
        return cls(M_PI, -M_PI, True)

    @classmethod
    def full(cls) -> S1Interval:
        return cls(-M_PI, M_PI, True)

    @classmethod
    def from_point(cls, p: float) -> S1Interval:
        if p == -M_PI:
            p = M_PI
        return cls(p, p, True)

    @classmethod
    def from_point_pair(cls, p1: float, p2: float) -> S1Interval:
        """Return the shorter interval containing both points."""
        if p1 == -M_PI:
            p1 = M_PI
        if p2 == -M_PI:
            p2 = M_PI
        if cls.positive_distance(p1, p2) <= M_PI:
            return cls(p1, p2, True)
        return cls(p2, p1, True)

    @staticmethod
    def positive_distance(a: float, b: float) -> float:
        """Return the distance from a to b in [0, 2pi), stable for small values."""
        d = b - a
        if d >= 0:
            return d
        return (b + M_PI) - (a - M_PI)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, S1Interval):
            return NotImplemented
        return self.lo == other.lo and self.hi == other.hi

    def __hash__(self) -> int:
        return hash((self.lo, self.hi))

    def __repr__(self) -> str:
        return f"S1Interval({self.lo!r}, {self.hi!r})"

    def is_valid(self) -> bool:
        return (
            abs(self.lo) <= M_PI
            and abs(self.hi) <= M_PI
            and not (self.lo == -M_PI and self.hi != M_PI)
            and not (self.hi == -M_PI and self.lo != M_PI)
        )

    def is_full(self) -> bool:
        return self.hi - self.lo == 2 * M_PI

    def is_empty(self) -> bool:
        return self.lo - self.hi == 2 * M_PI

    def is_inverted(self) -> bool:
        return self.lo > self.hi

    def center(self) -> float:
        """Midpoint in (-pi, pi]; arbitrary for full and empty intervals."""
        center = 0.5 * (self.lo + self.hi)
        if not self.is_inverted():
            return center
        return center + M_PI if center <= 0 else center - M_PI

    def length(self) -> float:
        """Length of the interval; -1 when empty."""
        length = self.hi - self.lo
        if length >= 0:
            return length
        length += 2 * M_PI
        return length if length > 0 else -1.0

    def complement(self) -> S1Interval:
        """Return the closure of the complement (a singleton maps to full)."""
        if self.lo == self.hi:
            return S1Interval.full()
        return S1Interval(self.hi, self.lo, True)

    def contains(self, p: float) -> bool:
        if p == -M_PI:
            p = M_PI
        return self.fast_contains(p)

    def fast_contains(self, p: float) -> bool:
        """Like contains() but skips normalising -pi to pi."""
        if self.is_inverted():
            return (p >= self.lo or p <= self.hi) and not self.is_empty()
        return self.lo <= p <= self.hi

    def interior_contains(self, p: float) -> bool:
        if p == -M_PI:
            p = M_PI
        if self.is_inverted():
            return p > self.lo or p < self.hi
        return (self.lo < p < self.hi) or self.is_full()

    def contains_interval(self, y: S1Interval) -> bool:
        if self.is_inverted():
            if y.is_inverted():
                return y.lo >= self.lo and y.hi <= self.hi
            return (y.lo >= self.lo or y.hi <= self.hi) and not self.is_empty()
        if y.is_inverted():
            return self.is_full() or y.is_empty()
        return y.lo >= self.lo and y.hi <= self.hi

    def interior_contains_interval(self, y: S1Interval) -> bool:
        if self.is_inverted():
            if not y.is_inverted():
                return y.lo > self.lo or y.hi < self.hi
            return (y.lo > self.lo and y.hi < self.hi) or y.is_empty()
        if y.is_inverted():
            return self.is_full() or y.is_empty()
        return (y.lo > self.lo and y.hi < self.hi) or self.is_full()

    def intersects(self, y: S1Interval) -> bool:
        """
        Return True if the intervals share a point.

        Because pi has two representations, [-pi, -3] and [2, pi] intersect.
        """
        if self.is_empty() or y.is_empty():
            return False
        if self.is_inverted():
            # Every non-empty inverted interval contains pi.
            return y.is_inverted() or y.lo <= self.hi or y.hi >= self.lo
        if y.is_inverted():
            return y.lo <= self.hi or y.hi >= self.lo
        return y.lo <= self.hi and y.hi >= self.lo

    def interior_intersects(self, y: S1Interval) -> bool:
        if self.is_empty() or y.is_empty() or self.lo == self.hi:
            return False
        if self.is_inverted():
            return y.is_inverted() or y.lo < self.hi or y.hi > self.lo
        if y.is_inverted():
            return y.lo < self.hi or y.hi > self.lo
        return (y.lo < self.hi and y.hi > self.lo) or self.is_full()

    def add_point(self, p: float) -> S1Interval:
        """Expand by the minimum amount needed to contain ``p``."""
        if p == -M_PI:
            p = M_PI
        if self.fast_contains(p):
            return self
        if self.is_empty():
            return S1Interval.from_point(p)
        dlo = S1Interval.positive_distance(p, self.lo)
        dhi = S1Interval.positive_distance(self.hi, p)
        if dlo < dhi:
            return S1Interval(p, self.hi)
        return S1Interval(self.lo, p)

    def expanded(self, radius: float) -> S1Interval:
        if self.is_empty():
            return self
        # Allow a 1-bit rounding error on each endpoint.
        if self.length() + 2 * radius >= 2 * M_PI - 1e-15:
            return S1Interval.full()
        lo = math.remainder(self.lo - radius, 2 * M_PI)
        hi = math.remainder(self.hi + radius, 2 * M_PI)
        if lo == -M_PI:
            lo = M_PI
        return S1Interval(lo, hi)

    def union(self, y: S1Interval) -> S1Interval:
        if y.is_empty():
            return self
        if self.fast_contains(y.lo):
            if self.fast_contains(y.hi):
                if self.contains_interval(y):
                    return self
                return S1Interval.full()
            return S1Interval(self.lo, y.hi, True)
        if self.fast_contains(y.hi):
            return S1Interval(y.lo, self.hi, True)
        # Either y contains this interval or the two are disjoint.
        if self.is_empty() or y.fast_contains(self.lo):
            return y
        dlo = S1Interval.positive_distance(y.hi, self.lo)
        dhi = S1Interval.positive_distance(self.hi, y.lo)
        if dlo < dhi:
            return S1Interval(y.lo, self.hi, True)
        return S1Interval(self.lo, y.hi, True)

    def intersection(self, y: S1Interval) -> S1Interval:
        """Smallest interval containing the intersection (which may be two pieces)."""
        if y.is_empty():
            return S1Interval.empty()
        if self.fast_contains(y.lo):
            if self.fast_contains(y.hi):
                if y.length() < self.length():
                    return y
                return self
            return S1Interval(y.lo, self.hi, True)
        if self.fast_contains(y.hi):
            return S1Interval(self.lo, y.hi, True)
        if y.fast_contains(self.lo):
            return self
        return S1Interval.empty()

    def approx_equals(self, y: S1Interval, max_error: float = 1e-9) -> bool:
        if self.is_empty():
            return y.length() <= max_error
        if y.is_empty():
            return self.length() <= max_error
        return (
            abs(math.remainder(y.lo - self.lo, 2 * M_PI))
            + abs(math.remainder(y.hi - self.hi, 2 * M_PI))
            <= max_error
        )
