"""
Knot vector utilities.

A knot vector is a non-decreasing sequence of real numbers that defines
the parametric domain and basis function support for B-splines/NURBS.

Mathematical background:
- Clamped (open) knot vectors have p+1 repeated knots at each end, so the
  curve interpolates its first and last control points
- The number of basis functions n = len(knots) - p - 1
- An interior knot of multiplicity k lowers continuity there to C^{p-k}
"""

import numpy as np
from typing import List, Tuple
from dataclasses import dataclass

from ..errors import InvalidArgumentError


@dataclass
class KnotVector:
    """
    Represents a univariate knot vector.

    Attributes:
        knots: The knot values (non-decreasing sequence)
        degree: Polynomial degree p

    The knot array is stored read-only; build a new KnotVector to change it.
    """
    knots: np.ndarray
    degree: int

    def __post_init__(self):
        self.knots = np.array(self.knots, dtype=np.float64)
        self.degree = int(self.degree)
        self._validate()
        self.knots.flags.writeable = False

    def _validate(self):
        """Validate knot vector properties."""
        if self.degree < 0:
            raise InvalidArgumentError(f"Degree must be non-negative, got {self.degree}")
        if self.knots.ndim != 1:
            raise InvalidArgumentError("Knot vector must be one-dimensional.")
        if len(self.knots) < 2 * (self.degree + 1):
            raise InvalidArgumentError(
                f"Knot vector too short for degree {self.degree}. "
                f"Need at least {2 * (self.degree + 1)} knots, got {len(self.knots)}."
            )
        if not np.all(np.isfinite(self.knots)):
            raise InvalidArgumentError("Knot values must be finite.")
        # Check non-decreasing
        if not np.all(np.diff(self.knots) >= 0):
            raise InvalidArgumentError("Knot vector must be non-decreasing.")
        if self.knots[self.degree] >= self.knots[-self.degree - 1]:
            raise InvalidArgumentError("Knot vector has an empty parametric domain.")

    @property
    def n_basis(self) -> int:
        """Number of basis functions."""
        return len(self.knots) - self.degree - 1

    @property
    def domain(self) -> Tuple[float, float]:
        """Parametric domain [knots[p], knots[n]]."""
        return (float(self.knots[self.degree]), float(self.knots[self.n_basis]))

    def find_span(self, xi: float) -> int:
        """
        Find the knot span index containing parameter value xi.

        For xi in [xi_i, xi_{i+1}), returns i.
        Uses the convention that the last span is closed: [xi_{n-1}, xi_n].

        Parameters:
            xi: Parameter value

        Returns:
            Span index i such that xi in [xi_i, xi_{i+1})
        """
        n = self.n_basis
        p = self.degree

        # Handle boundary cases
        if xi >= self.knots[n]:
            return n - 1
        if xi <= self.knots[p]:
            return p

        # Binary search
        low = p
        high = n
        mid = (low + high) // 2

        while xi < self.knots[mid] or xi >= self.knots[mid + 1]:
            if xi < self.knots[mid]:
                high = mid
            else:
                low = mid
            mid = (low + high) // 2

        return mid


def make_open_knot_vector(n_basis: int, degree: int,
                           domain: Tuple[float, float] = (0.0, 1.0)) -> KnotVector:
    """
    Create an open (clamped) uniform knot vector.

    Open knot vectors have the first and last knot repeated p+1 times,
    ensuring the basis interpolates the first and last control points.

    Parameters:
        n_basis: Number of basis functions desired
        degree: Polynomial degree p
        domain: Parametric domain (start, end)

    Returns:
        KnotVector with uniform internal knots
    """
    p = degree
    n = n_basis
    n_knots = n + p + 1
    n_internal = n_knots - 2 * (p + 1)

    if n_internal < 0:
        raise InvalidArgumentError(
            f"Cannot create knot vector: n_basis={n_basis} too small for degree={degree}"
        )

    a, b = domain

    # Start with p+1 repeated knots at start
    knots = [a] * (p + 1)

    # Add uniform internal knots
    if n_internal > 0:
        internal = np.linspace(a, b, n_internal + 2)[1:-1]
        knots.extend(internal)

    # End with p+1 repeated knots at end
    knots.extend([b] * (p + 1))

    return KnotVector(np.array(knots), degree)


def make_bezier_segment_knots(n_segments: int, degree: int = 2) -> KnotVector:
    """
    Knot vector for n_segments Bezier segments stitched end to end.

    The ends are clamped with multiplicity p+1 and every segment boundary
    k/n_segments is repeated p times, so each segment is an independent
    Bezier span joined to its neighbours with C0 continuity.

    For degree 2:
        1 segment:  [0, 0, 0, 1, 1, 1]
        2 segments: [0, 0, 0, 1/2, 1/2, 1, 1, 1]
        4 segments: [0, 0, 0, 1/4, 1/4, 1/2, 1/2, 3/4, 3/4, 1, 1, 1]

    Parameters:
        n_segments: Number of Bezier segments (>= 1)
        degree: Degree of every segment

    Returns:
        KnotVector with len = n_segments * degree + degree + 2
    """
    if n_segments < 1:
        raise InvalidArgumentError(f"Need at least one segment, got {n_segments}")

    knots: List[float] = [0.0] * (degree + 1)
    for k in range(1, n_segments):
        knots.extend([k / n_segments] * degree)
    knots.extend([1.0] * (degree + 1))

    return KnotVector(np.array(knots), degree)

