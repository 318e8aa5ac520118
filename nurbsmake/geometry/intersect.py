"""
Ray/ray intersection.

Two rays r0(u0) = a0 + u0*a and r1(u1) = b0 + u1*b are intersected by
minimizing |r0(u0) - r1(u1)|^2. Setting both partial derivatives to
zero gives the normal equations

    (a.a) u0 - (a.b) u1 = a.(b0 - a0)
    (a.b) u0 - (b.b) u1 = b.(b0 - a0)

whose determinant (a.b)^2 - (a.a)(b.b) vanishes exactly when the rays
are parallel. For coplanar, non-parallel rays the two closest points
coincide with the intersection point.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..errors import InvalidArgumentError, NumericDegeneracyError
from ..io.config import resolve_tolerance
from .vec import as_point

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class RayIntersection:
    """
    Closest approach of two rays.

    Attributes:
        u0: Parameter along the first ray
        u1: Parameter along the second ray
        point0: origin0 + u0 * dir0
        point1: origin1 + u1 * dir1
    """
    u0: float
    u1: float
    point0: np.ndarray
    point1: np.ndarray


def intersect_rays(origin0, dir0, origin1, dir1,
                   tol: Optional[float] = None) -> RayIntersection:
    """
    Intersect two rays.

    Parameters:
        origin0, dir0: First ray
        origin1, dir1: Second ray
        tol: Threshold for zero-length directions and parallel rays

    Returns:
        RayIntersection with the parameters on both rays
    """
    tol = resolve_tolerance(tol)
    a0 = as_point(origin0, "origin0")
    a = as_point(dir0, "dir0")
    b0 = as_point(origin1, "origin1")
    b = as_point(dir1, "dir1")

    if not (len(a0) == len(a) == len(b0) == len(b)):
        raise InvalidArgumentError("Ray origins and directions must share one dimension")

    daa = np.dot(a, a)
    dbb = np.dot(b, b)
    if daa <= tol * tol or dbb <= tol * tol:
        raise NumericDegeneracyError("Ray direction has zero length")

    dab = np.dot(a, b)
    dab0 = np.dot(a, b0)
    daa0 = np.dot(a, a0)
    dbb0 = np.dot(b, b0)
    dba0 = np.dot(b, a0)

    div = daa * dbb - dab * dab

    # div / (daa * dbb) is sin^2 of the angle between the rays, so tol
    # bounds the angle itself and matches the arc sweep threshold
    if abs(div) <= tol * tol * daa * dbb:
        raise InvalidArgumentError("Rays are parallel; intersection is undefined")

    num = dab * (dab0 - daa0) - daa * (dbb0 - dba0)
    w = num / div
    t = (dab0 - daa0 + w * dab) / daa

    point0 = a0 + t * a
    point1 = b0 + w * b

    if not (np.isfinite(t) and np.isfinite(w)):
        raise NumericDegeneracyError("Ray intersection produced non-finite parameters")

    logger.debug(f"Rays intersect at u0={t:g}, u1={w:g}")
    return RayIntersection(float(t), float(w), point0, point1)
