"""
NURBS (Non-Uniform Rational B-Spline) curve and surface records.

NURBS extend B-splines by introducing weights for each control point,
enabling exact representation of conic sections (circles, ellipses, etc.).

A NURBS curve point is computed as:

    C(xi) = sum_i (N_i(xi) * w_i * P_i) / sum_i (N_i(xi) * w_i)

where:
- N_i are B-spline basis functions
- w_i are weights (positive real numbers)
- P_i are control points

Control points are stored in homogeneous form Pw_i = (w_i * P_i, w_i), so
the numerator and denominator above are simply the spatial and weight
components of sum_i N_i(xi) * Pw_i.

This module provides:
- NURBSGeometry: Abstract base for NURBS geometries
- NURBSCurve: curve record (degree, knots, homogeneous control points)
- NURBSSurface: surface record (two degrees, two knot vectors,
  homogeneous control grid)

Both records validate their invariants once on construction and are
immutable afterwards: stored arrays are read-only, accessors hand out
copies.
"""

import math
import numpy as np
from typing import List, Sequence, Tuple, Optional
from abc import ABC, abstractmethod

from ..errors import InvalidArgumentError
from ..discretization.knot_vector import KnotVector
from ..discretization.homogeneous import (
    HomogeneousPoint, homogenize_1d, homogenize_2d, unpack_row
)
from .bspline import eval_basis, eval_basis_ders

# Slack allowed when a parameter lands just outside the knot domain
_DOMAIN_SLACK = 1e-12


def _check_homogeneous(cps: np.ndarray) -> None:
    if cps.shape[-1] < 2:
        raise InvalidArgumentError(
            "Homogeneous control points need at least one coordinate plus a weight"
        )
    if not np.all(np.isfinite(cps)):
        raise InvalidArgumentError("Control points must be finite")
    if np.any(cps[..., -1] <= 0):
        raise InvalidArgumentError("All weights must be positive")


def _check_parameter(kv: KnotVector, xi: float) -> None:
    lo, hi = kv.domain
    slack = _DOMAIN_SLACK * max(1.0, hi - lo)
    if not (lo - slack <= xi <= hi + slack):
        raise InvalidArgumentError(f"Parameter {xi} outside domain {kv.domain}")


class NURBSGeometry(ABC):
    """
    Abstract base class for NURBS geometry records.

    Key responsibilities:
    - Store homogeneous control points
    - Expose point/weight views of them
    - Evaluate geometry at parameter values
    """

    @property
    @abstractmethod
    def n_dim_parametric(self) -> int:
        """Number of parametric dimensions (1=curve, 2=surface)."""
        pass

    @property
    @abstractmethod
    def n_dim_physical(self) -> int:
        """Number of physical/spatial dimensions."""
        pass

    @property
    @abstractmethod
    def control_points(self) -> np.ndarray:
        """Homogeneous control points (last axis is (w*P, w))."""
        pass

    @property
    def points(self) -> np.ndarray:
        """Dehomogenized control point coordinates."""
        cps = self.control_points
        return cps[..., :-1] / cps[..., -1:]

    @property
    def weights(self) -> np.ndarray:
        """NURBS weights."""
        return self.control_points[..., -1]

    @abstractmethod
    def eval_point(self, xi):
        """Evaluate geometry at a parameter value."""
        pass

    @abstractmethod
    def eval_derivatives(self, xi) -> Tuple[np.ndarray, ...]:
        """Evaluate geometry and its first derivatives at a parameter value."""
        pass


class NURBSCurve(NURBSGeometry):
    """
    NURBS curve in arbitrary dimensional space.

    Attributes:
        degree: Polynomial degree p
        knots: Knot vector, len(knots) == n + p + 1
        control_points: (n, d+1) homogeneous control points
    """

    def __init__(self, degree: int, knots: Sequence[float],
                 control_points: np.ndarray):
        """
        Initialize a NURBS curve.

        Parameters:
            degree: Polynomial degree
            knots: Non-decreasing knot values
            control_points: Array of shape (n, d+1) of homogeneous points
        """
        self._knot_vector = KnotVector(knots, degree)

        cps = np.array(control_points, dtype=np.float64)
        if cps.ndim != 2:
            raise InvalidArgumentError(
                f"Curve control points must have shape (n, d+1), got {cps.shape}"
            )
        if cps.shape[0] != self._knot_vector.n_basis:
            raise InvalidArgumentError(
                f"Number of control points ({cps.shape[0]}) must equal "
                f"len(knots) - degree - 1 ({self._knot_vector.n_basis})"
            )
        _check_homogeneous(cps)
        cps.flags.writeable = False
        self._control_points = cps

    @classmethod
    def from_points(cls, degree: int, knots: Sequence[float], points: np.ndarray,
                    weights: Optional[np.ndarray] = None) -> "NURBSCurve":
        """Build a curve from separate point and weight arrays."""
        return cls(degree, knots, homogenize_1d(points, weights))

    @classmethod
    def from_homogeneous_points(cls, degree: int, knots: Sequence[float],
                                hpoints: Sequence[HomogeneousPoint]) -> "NURBSCurve":
        """Build a curve from a sequence of HomogeneousPoint."""
        if len(hpoints) == 0:
            raise InvalidArgumentError("Curve needs at least one control point")
        return cls(degree, knots, np.array([hp.homogeneous for hp in hpoints]))

    @property
    def n_dim_parametric(self) -> int:
        return 1

    @property
    def n_dim_physical(self) -> int:
        return self._control_points.shape[1] - 1

    @property
    def n_control_points(self) -> int:
        return self._control_points.shape[0]

    @property
    def control_points(self) -> np.ndarray:
        return self._control_points.copy()

    @property
    def homogeneous_points(self) -> List[HomogeneousPoint]:
        return unpack_row(self._control_points)

    @property
    def knot_vector(self) -> KnotVector:
        return self._knot_vector

    @property
    def knots(self) -> np.ndarray:
        return self._knot_vector.knots.copy()

    @property
    def degree(self) -> int:
        return self._knot_vector.degree

    @property
    def domain(self) -> Tuple[float, float]:
        return self._knot_vector.domain

    def eval_point(self, xi: float) -> np.ndarray:
        """
        Evaluate curve at parameter value.

        Parameters:
            xi: Parameter value

        Returns:
            Point coordinates as (d,) array
        """
        _check_parameter(self._knot_vector, xi)
        span = self._knot_vector.find_span(xi)
        N = eval_basis(self._knot_vector, xi, span)

        start = span - self.degree
        Pw = np.dot(N, self._control_points[start:start + self.degree + 1])

        return Pw[:-1] / Pw[-1]

    def eval_derivatives(self, xi: float, n_ders: int = 1) -> Tuple[np.ndarray, ...]:
        """
        Evaluate curve and derivatives at parameter value.

        Uses the formula for rational derivatives (Piegl & Tiller, Eq. 4.8).

        Parameters:
            xi: Parameter value
            n_ders: Number of derivatives

        Returns:
            Tuple (C, dC/dxi, d²C/dxi², ...) of arrays
        """
        _check_parameter(self._knot_vector, xi)
        span = self._knot_vector.find_span(xi)

        # Derivatives above the degree vanish; the basis routine stops at p
        Nders = np.zeros((n_ders + 1, self.degree + 1))
        basis_ders = eval_basis_ders(self._knot_vector, xi, n_ders, span)
        Nders[:basis_ders.shape[0]] = basis_ders

        start = span - self.degree
        Pw_local = self._control_points[start:start + self.degree + 1]

        # Homogeneous derivatives: spatial part A^(k), weight part w^(k)
        Aw_ders = Nders @ Pw_local
        A_ders = Aw_ders[:, :-1]
        w_ders = Aw_ders[:, -1]

        # C^(k) = (A^(k) - sum_{j=1}^{k} C(k,j) * w^(j) * C^(k-j)) / w^(0)
        C_ders = np.zeros((n_ders + 1, self.n_dim_physical))

        for k in range(n_ders + 1):
            v = A_ders[k].copy()
            for j in range(1, k + 1):
                v -= math.comb(k, j) * w_ders[j] * C_ders[k - j]
            C_ders[k] = v / w_ders[0]

        return tuple(C_ders[k] for k in range(n_ders + 1))

    def __repr__(self) -> str:
        return (f"NURBSCurve(degree={self.degree}, n_control_points={self.n_control_points}, "
                f"n_dim={self.n_dim_physical}, domain={self.domain})")


class NURBSSurface(NURBSGeometry):
    """
    NURBS surface in 3D (or 2D) space.

    A NURBS surface S(u, v) is defined by:
    - Two knot vectors (u and v directions)
    - Control points P_{i,j} arranged in an (n_u, n_v) grid
    - Weights w_{i,j} > 0

    The surface point is:
    S(u, v) = sum_{i,j} N_i(u) N_j(v) Pw_{i,j}, dehomogenized

    Row i of the grid runs along v at the i-th u control point.
    """

    def __init__(self, degree_u: int, degree_v: int,
                 knots_u: Sequence[float], knots_v: Sequence[float],
                 control_points: np.ndarray):
        """
        Initialize a NURBS surface.

        Parameters:
            degree_u: Degree in u
            degree_v: Degree in v
            knots_u: Knot values in u
            knots_v: Knot values in v
            control_points: Array of shape (n_u, n_v, d+1) of homogeneous points
        """
        self._kv_u = KnotVector(knots_u, degree_u)
        self._kv_v = KnotVector(knots_v, degree_v)

        cps = np.array(control_points, dtype=np.float64)
        if cps.ndim != 3:
            raise InvalidArgumentError(
                f"Surface control points must have shape (n_u, n_v, d+1), got {cps.shape}"
            )

        expected = (self._kv_u.n_basis, self._kv_v.n_basis)
        if cps.shape[:2] != expected:
            raise InvalidArgumentError(
                f"Control grid shape {cps.shape[:2]} doesn't match "
                f"knot vectors, expected {expected}"
            )
        _check_homogeneous(cps)
        cps.flags.writeable = False
        self._control_points = cps

    @classmethod
    def from_points(cls, degree_u: int, degree_v: int,
                    knots_u: Sequence[float], knots_v: Sequence[float],
                    points: np.ndarray,
                    weights: Optional[np.ndarray] = None) -> "NURBSSurface":
        """Build a surface from separate point and weight grids."""
        return cls(degree_u, degree_v, knots_u, knots_v, homogenize_2d(points, weights))

    @property
    def n_dim_parametric(self) -> int:
        return 2

    @property
    def n_dim_physical(self) -> int:
        return self._control_points.shape[2] - 1

    @property
    def n_control_points(self) -> int:
        return self._control_points.shape[0] * self._control_points.shape[1]

    @property
    def n_control_points_per_dir(self) -> Tuple[int, int]:
        """Number of control points in each direction (n_u, n_v)."""
        return self._control_points.shape[:2]

    @property
    def control_points(self) -> np.ndarray:
        return self._control_points.copy()

    @property
    def knot_vectors(self) -> Tuple[KnotVector, KnotVector]:
        return (self._kv_u, self._kv_v)

    @property
    def knots_u(self) -> np.ndarray:
        return self._kv_u.knots.copy()

    @property
    def knots_v(self) -> np.ndarray:
        return self._kv_v.knots.copy()

    @property
    def degree_u(self) -> int:
        return self._kv_u.degree

    @property
    def degree_v(self) -> int:
        return self._kv_v.degree

    @property
    def degrees(self) -> Tuple[int, int]:
        return (self._kv_u.degree, self._kv_v.degree)

    @property
    def domain(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Parametric domain as ((u_min, u_max), (v_min, v_max))."""
        return (self._kv_u.domain, self._kv_v.domain)

    def _local_grid(self, u: float, v: float):
        _check_parameter(self._kv_u, u)
        _check_parameter(self._kv_v, v)
        span_u = self._kv_u.find_span(u)
        span_v = self._kv_v.find_span(v)
        p_u, p_v = self.degrees
        local = self._control_points[span_u - p_u:span_u + 1, span_v - p_v:span_v + 1]
        return span_u, span_v, local

    def eval_point(self, xi: Tuple[float, float]) -> np.ndarray:
        """
        Evaluate surface at parameter values.

        Parameters:
            xi: Parameter values (u, v)

        Returns:
            Point coordinates as (d,) array
        """
        u, v = xi
        span_u, span_v, local = self._local_grid(u, v)

        N_u = eval_basis(self._kv_u, u, span_u)
        N_v = eval_basis(self._kv_v, v, span_v)

        Sw = np.einsum('i,j,ijk->k', N_u, N_v, local)
        return Sw[:-1] / Sw[-1]

    def eval_derivatives(self, xi: Tuple[float, float]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Evaluate surface point and first derivatives.

        Parameters:
            xi: Parameter values (u, v)

        Returns:
            Tuple (S, dS/du, dS/dv) of (d,) arrays
        """
        u, v = xi
        span_u, span_v, local = self._local_grid(u, v)

        Nders_u = eval_basis_ders(self._kv_u, u, 1, span_u)
        Nders_v = eval_basis_ders(self._kv_v, v, 1, span_v)

        N_u = Nders_u[0]
        N_v = Nders_v[0]
        # Degree 0 has no derivative row
        dN_u = Nders_u[1] if Nders_u.shape[0] > 1 else np.zeros_like(N_u)
        dN_v = Nders_v[1] if Nders_v.shape[0] > 1 else np.zeros_like(N_v)

        Sw = np.einsum('i,j,ijk->k', N_u, N_v, local)
        dSw_du = np.einsum('i,j,ijk->k', dN_u, N_v, local)
        dSw_dv = np.einsum('i,j,ijk->k', N_u, dN_v, local)

        A, W = Sw[:-1], Sw[-1]

        # Apply quotient rule: d/du(A/W) = (dA/du * W - A * dW/du) / W^2
        S = A / W
        dS_du = (dSw_du[:-1] * W - A * dSw_du[-1]) / (W * W)
        dS_dv = (dSw_dv[:-1] * W - A * dSw_dv[-1]) / (W * W)

        return (S, dS_du, dS_dv)

    def __repr__(self) -> str:
        return (f"NURBSSurface(degrees={self.degrees}, "
                f"n_control_points_per_dir={self.n_control_points_per_dir}, "
                f"n_dim={self.n_dim_physical})")
