"""
Point and vector helpers.

numpy arrays already provide addition, subtraction and scaling. This
module adds the pieces that need a degeneracy check: conversion of user
input to float arrays, normalization against a zero-norm tolerance, and
projection onto a ray.
"""

import numpy as np

from ..errors import InvalidArgumentError, NumericDegeneracyError


def as_point(p, name: str = "point") -> np.ndarray:
    """
    Convert input to a 1-D float64 array.

    Parameters:
        p: Sequence of coordinates
        name: Label used in error messages

    Returns:
        Array of shape (d,)
    """
    arr = np.array(p, dtype=np.float64)
    if arr.ndim != 1 or arr.size == 0:
        raise InvalidArgumentError(f"{name} must be a non-empty 1-D coordinate sequence")
    if not np.all(np.isfinite(arr)):
        raise InvalidArgumentError(f"{name} has non-finite coordinates: {arr}")
    return arr


def as_points(points, name: str = "points") -> np.ndarray:
    """Convert a sequence of points to an (n, d) float64 array."""
    arr = np.array(points, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] == 0:
        raise InvalidArgumentError(f"{name} must be a sequence of equal-length coordinate sequences")
    if not np.all(np.isfinite(arr)):
        raise InvalidArgumentError(f"{name} has non-finite coordinates")
    return arr


def norm(v: np.ndarray) -> float:
    """Euclidean length."""
    return float(np.linalg.norm(v))


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(b) - np.asarray(a)))


def normalized(v: np.ndarray, tol: float) -> np.ndarray:
    """
    Unit vector in the direction of v.

    Raises NumericDegeneracyError if the norm is not above tol.
    """
    length = norm(v)
    if not np.isfinite(length) or length <= tol:
        raise NumericDegeneracyError(f"Cannot normalize vector of length {length}")
    return np.asarray(v, dtype=np.float64) / length


def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Cross product of two 3-vectors."""
    return np.cross(a, b)


def lerp(t: float, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """t*a + (1-t)*b"""
    return t * np.asarray(a) + (1.0 - t) * np.asarray(b)


def closest_point_on_ray(pt: np.ndarray, origin: np.ndarray,
                         direction: np.ndarray, tol: float) -> np.ndarray:
    """
    Orthogonal projection of pt onto the line origin + t*direction.

    Parameters:
        pt: Point to project
        origin: Ray origin
        direction: Ray direction (any non-zero length)
        tol: Zero-norm tolerance for the direction

    Returns:
        Projected point
    """
    d = normalized(direction, tol)
    return origin + np.dot(pt - origin, d) * d
