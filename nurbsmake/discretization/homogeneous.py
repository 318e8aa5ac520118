"""
Homogeneous control points.

A rational control point is a physical point P together with a weight
w > 0. NURBS data stores it in homogeneous form

    Pw = (w*x, w*y, w*z, w)

so rational curves can be evaluated with the same machinery as
polynomial ones: evaluate the homogeneous curve, then divide by the last
coordinate.

While a control net is being built, points and weights travel together
as a HomogeneousPoint. Separate point/weight arrays only appear at the
boundary, through the homogenize/dehomogenize helpers below.
"""

import numpy as np
from typing import Optional
from dataclasses import dataclass

from ..errors import InvalidArgumentError


def _check_weights(weights: np.ndarray) -> None:
    if not np.all(np.isfinite(weights)):
        raise InvalidArgumentError("Weights must be finite")
    if np.any(weights <= 0):
        raise InvalidArgumentError("All weights must be positive")


@dataclass(frozen=True, eq=False)
class HomogeneousPoint:
    """
    A control point paired with its NURBS weight.

    Attributes:
        point: Physical coordinates (x, y) or (x, y, z)
        weight: NURBS weight (1.0 for B-splines)
    """
    point: np.ndarray
    weight: float = 1.0

    def __post_init__(self):
        point = np.array(self.point, dtype=np.float64)
        point.flags.writeable = False
        object.__setattr__(self, 'point', point)
        object.__setattr__(self, 'weight', float(self.weight))
        _check_weights(np.array([self.weight]))

    @property
    def n_dim(self) -> int:
        """Number of spatial dimensions."""
        return len(self.point)

    @property
    def homogeneous(self) -> np.ndarray:
        """(w*x, w*y, [w*z,] w) as a new array."""
        return np.append(self.point * self.weight, self.weight)

    @classmethod
    def from_homogeneous(cls, hpoint: np.ndarray) -> "HomogeneousPoint":
        """Split a homogeneous coordinate array back into point and weight."""
        hpoint = np.asarray(hpoint, dtype=np.float64)
        w = hpoint[-1]
        _check_weights(np.array([w]))
        return cls(hpoint[:-1] / w, w)

    def translated(self, offset: np.ndarray) -> "HomogeneousPoint":
        """Same weight, point moved by offset."""
        return HomogeneousPoint(self.point + offset, self.weight)

    def reweighted(self, factor: float) -> "HomogeneousPoint":
        """Same point, weight multiplied by factor."""
        return HomogeneousPoint(self.point, self.weight * factor)

    def __repr__(self) -> str:
        return f"HomogeneousPoint(point={self.point}, w={self.weight})"


def homogenize_1d(points: np.ndarray,
                  weights: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Pack points and weights into homogeneous coordinates.

    Parameters:
        points: Array of shape (n, d)
        weights: Array of shape (n,), defaults to 1.0

    Returns:
        Array of shape (n, d+1)
    """
    points = np.atleast_2d(np.asarray(points, dtype=np.float64))
    n = points.shape[0]

    if weights is None:
        weights = np.ones(n)
    else:
        weights = np.asarray(weights, dtype=np.float64)
        if weights.shape != (n,):
            raise InvalidArgumentError(
                f"Weights shape {weights.shape} doesn't match {n} control points"
            )
    _check_weights(weights)

    return np.hstack([points * weights[:, None], weights[:, None]])


def weight_1d(hpoints: np.ndarray) -> np.ndarray:
    """Weights of a (n, d+1) homogeneous array."""
    return np.asarray(hpoints, dtype=np.float64)[:, -1].copy()


def dehomogenize_1d(hpoints: np.ndarray) -> np.ndarray:
    """
    Recover physical points from homogeneous coordinates.

    Parameters:
        hpoints: Array of shape (n, d+1)

    Returns:
        Array of shape (n, d)
    """
    hpoints = np.asarray(hpoints, dtype=np.float64)
    w = hpoints[:, -1]
    _check_weights(w)
    return hpoints[:, :-1] / w[:, None]


def homogenize_2d(points: np.ndarray,
                  weights: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Pack a control grid and its weights into homogeneous coordinates.

    Parameters:
        points: Array of shape (n_u, n_v, d)
        weights: Array of shape (n_u, n_v), defaults to 1.0

    Returns:
        Array of shape (n_u, n_v, d+1)
    """
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 3:
        raise InvalidArgumentError(f"Control grid must have shape (n_u, n_v, d), got {points.shape}")

    if weights is None:
        weights = np.ones(points.shape[:2])
    else:
        weights = np.asarray(weights, dtype=np.float64)
        if weights.shape != points.shape[:2]:
            raise InvalidArgumentError(
                f"Weights shape {weights.shape} doesn't match grid {points.shape[:2]}"
            )
    _check_weights(weights)

    return np.concatenate([points * weights[..., None], weights[..., None]], axis=-1)


def weight_2d(hpoints: np.ndarray) -> np.ndarray:
    """Weights of a (n_u, n_v, d+1) homogeneous grid."""
    return np.asarray(hpoints, dtype=np.float64)[..., -1].copy()


def dehomogenize_2d(hpoints: np.ndarray) -> np.ndarray:
    """
    Recover physical points from a homogeneous grid.

    Parameters:
        hpoints: Array of shape (n_u, n_v, d+1)

    Returns:
        Array of shape (n_u, n_v, d)
    """
    hpoints = np.asarray(hpoints, dtype=np.float64)
    w = hpoints[..., -1]
    _check_weights(w)
    return hpoints[..., :-1] / w[..., None]


def pack_rows(rows) -> np.ndarray:
    """
    Stack rows of HomogeneousPoint objects into a homogeneous grid.

    Parameters:
        rows: Sequence of equal-length sequences of HomogeneousPoint

    Returns:
        Array of shape (n_rows, n_cols, d+1)
    """
    grid = [[hp.homogeneous for hp in row] for row in rows]
    if not grid or not grid[0]:
        raise InvalidArgumentError("Control grid must not be empty")
    if any(len(row) != len(grid[0]) for row in grid):
        raise InvalidArgumentError("All control grid rows must have the same length")
    return np.array(grid, dtype=np.float64)


def unpack_row(hpoints: np.ndarray):
    """Split a (n, d+1) homogeneous array into HomogeneousPoint objects."""
    return [HomogeneousPoint.from_homogeneous(h) for h in np.asarray(hpoints)]
