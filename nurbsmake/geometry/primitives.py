"""
Primitive geometry constructors.

This module turns geometric intent into exact NURBS data:
- Circular and elliptical arcs (multi-segment rational quadratic Bezier)
- Polylines (degree 1, chord-length knots)
- Extruded and swept surfaces (translational sweeps of a profile)
- Surfaces of revolution, and the cylinder, cone and sphere built on them
- Single-span Bezier curves and bilinear four-point patches

Every constructor is a pure function. Inputs are validated before any
control net is built, so a failure never leaves a partial result. The
optional ``tol`` argument (default DEFAULT_TOLERANCE) is the zero
threshold for lengths, norms and the ray intersections used to place
arc control points.
"""

import logging
import numpy as np
from typing import List, Optional, Sequence, Tuple

from ..errors import InvalidArgumentError, NumericDegeneracyError
from ..io.config import resolve_tolerance
from ..discretization.knot_vector import make_open_knot_vector, make_bezier_segment_knots
from ..discretization.homogeneous import HomogeneousPoint, pack_rows
from .nurbs import NURBSCurve, NURBSSurface
from .intersect import intersect_rays
from .vec import as_point, as_points, closest_point_on_ray, cross, lerp, norm, normalized

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * np.pi

# Upper bound of the swept angle -> number of rational quadratic segments.
# A single segment stays exact with a positive middle weight only up to
# 90 degrees, so every segment spans at most a quarter turn.
ARC_SEGMENT_TABLE: Tuple[Tuple[float, int], ...] = (
    (0.5 * np.pi, 1),
    (np.pi, 2),
    (1.5 * np.pi, 3),
    (TWO_PI, 4),
)


def arc_segment_count(theta: float, tol: Optional[float] = None) -> int:
    """
    Number of Bezier segments needed for an arc sweeping theta radians.

    Parameters:
        theta: Swept angle, 0 < theta <= 2*pi
        tol: Slack applied to the table bounds

    Returns:
        Segment count in 1..4
    """
    tol = resolve_tolerance(tol)
    if not theta > tol:
        raise InvalidArgumentError(f"Arc sweep must be positive, got {theta}")
    for bound, count in ARC_SEGMENT_TABLE:
        if theta <= bound + tol:
            return count
    raise InvalidArgumentError(f"Arc sweep {theta} exceeds a full revolution")


def _positive(value: float, name: str) -> float:
    value = float(value)
    if not (np.isfinite(value) and value > 0.0):
        raise InvalidArgumentError(f"{name} must be positive, got {value}")
    return value


def _unit_axis(v, name: str, tol: float) -> np.ndarray:
    arr = as_point(v, name)
    length = norm(arr)
    if length <= tol:
        raise InvalidArgumentError(f"{name} must have non-zero length")
    return arr / length


def _require_dim(name: str, arr: np.ndarray, n_dim: int) -> None:
    if len(arr) != n_dim:
        raise InvalidArgumentError(f"{name} has dimension {len(arr)}, expected {n_dim}")


def _require_curve(curve, name: str) -> None:
    if not isinstance(curve, NURBSCurve):
        raise InvalidArgumentError(f"{name} must be a NURBSCurve, got {type(curve).__name__}")


def _require_finite(points: np.ndarray, what: str) -> None:
    if not np.all(np.isfinite(points)):
        raise NumericDegeneracyError(f"Non-finite control point while building {what}")


def _arc_control_points(center: np.ndarray, x: np.ndarray, y: np.ndarray,
                        start: float, dtheta: float, n_segments: int,
                        tol: float) -> List[np.ndarray]:
    """
    Control points of an elliptical arc split into Bezier segments.

    The ellipse is P(t) = center + x*cos(t) + y*sin(t). Segment endpoints
    lie on it; each middle point is where the tangents at the two
    endpoints meet.

    Returns:
        2*n_segments + 1 points, endpoints at even indices
    """
    def on_curve(t):
        return center + x * np.cos(t) + y * np.sin(t)

    def tangent(t):
        return normalized(y * np.cos(t) - x * np.sin(t), tol)

    P0 = on_curve(start)
    T0 = tangent(start)
    points = [P0]

    for i in range(1, n_segments + 1):
        angle = start + i * dtheta
        P2 = on_curve(angle)
        T2 = tangent(angle)

        inters = intersect_rays(P0, T0, P2, T2, tol)
        P1 = P0 + T0 * inters.u0

        points.extend([P1, P2])
        P0, T0 = P2, T2

    _require_finite(np.array(points), "arc")
    return points


def ellipse_arc(center, xaxis, yaxis, xradius: float, yradius: float,
                start_angle: float, end_angle: float,
                tol: Optional[float] = None) -> NURBSCurve:
    """
    Create a NURBS curve representing an elliptical arc.

    The arc is P(t) = center + xradius*cos(t)*x + yradius*sin(t)*y for t
    from start_angle to end_angle, with x, y the normalized axes. It is
    split into at most four rational quadratic Bezier segments of equal
    angle, which makes the representation exact.

    Parameters:
        center: Center of the ellipse
        xaxis: Direction of the first semi-axis
        yaxis: Direction of the second semi-axis, perpendicular to xaxis
        xradius: Length of the first semi-axis
        yradius: Length of the second semi-axis
        start_angle: Start angle in radians (>= 0)
        end_angle: End angle in radians; if smaller than start_angle the
            arc runs a full turn, to start_angle + 2*pi
        tol: Zero tolerance

    Returns:
        Degree 2 NURBSCurve with 2*n_segments + 1 control points
    """
    tol = resolve_tolerance(tol)
    center = as_point(center, "center")
    xradius = _positive(xradius, "xradius")
    yradius = _positive(yradius, "yradius")
    x_hat = _unit_axis(xaxis, "xaxis", tol)
    y_hat = _unit_axis(yaxis, "yaxis", tol)
    _require_dim("xaxis", x_hat, len(center))
    _require_dim("yaxis", y_hat, len(center))

    if abs(np.dot(x_hat, y_hat)) > tol:
        raise InvalidArgumentError("xaxis and yaxis must be perpendicular")

    start_angle = float(start_angle)
    end_angle = float(end_angle)
    if not (np.isfinite(start_angle) and np.isfinite(end_angle)):
        raise InvalidArgumentError("Arc angles must be finite")
    if start_angle < 0.0:
        raise InvalidArgumentError(f"start_angle must be non-negative, got {start_angle}")
    if end_angle < start_angle:
        end_angle = start_angle + TWO_PI

    theta = end_angle - start_angle
    n_segments = arc_segment_count(theta, tol)
    dtheta = theta / n_segments
    w1 = np.cos(dtheta / 2.0)

    points = _arc_control_points(center, x_hat * xradius, y_hat * yradius,
                                 start_angle, dtheta, n_segments, tol)

    # Weight 1 on the arc, w1 at the tangent intersections
    hpoints = [HomogeneousPoint(p, 1.0 if k % 2 == 0 else w1)
               for k, p in enumerate(points)]

    kv = make_bezier_segment_knots(n_segments, degree=2)
    curve = NURBSCurve.from_homogeneous_points(2, kv.knots, hpoints)

    logger.debug(f"Elliptical arc: sweep={theta:.6g} rad, {n_segments} segment(s), "
                 f"{curve.n_control_points} control points")
    return curve


def arc(center, xaxis, yaxis, radius: float, start_angle: float, end_angle: float,
        tol: Optional[float] = None) -> NURBSCurve:
    """
    Create a NURBS curve representing a circular arc.

    Same as ellipse_arc with both radii equal to radius.
    """
    return ellipse_arc(center, xaxis, yaxis, radius, radius, start_angle, end_angle, tol=tol)


def polyline_curve(points, tol: Optional[float] = None) -> NURBSCurve:
    """
    Create a degree 1 NURBS curve through a sequence of points.

    The knots are the cumulative chord lengths, clamped and normalized to
    [0, 1], so the parameter is proportional to arc length.

    Parameters:
        points: Sequence of at least two points of equal dimension
        tol: Zero tolerance for the total length

    Returns:
        NURBSCurve with degree 1, len(points) control points, unit weights
    """
    tol = resolve_tolerance(tol)
    pts = as_points(points, "points")
    n = pts.shape[0]
    if n < 2:
        raise InvalidArgumentError(f"A polyline needs at least 2 points, got {n}")

    chords = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    cumulative = np.concatenate([[0.0], np.cumsum(chords)])
    total = cumulative[-1]
    if total <= tol:
        raise InvalidArgumentError("Polyline has zero total length")

    knots = np.concatenate([[0.0], cumulative, [total]]) / total
    knots[-2:] = 1.0

    curve = NURBSCurve.from_points(1, knots, pts)
    logger.debug(f"Polyline: {n} points, length={total:.6g}")
    return curve


def rational_bezier_curve(points, weights: Optional[Sequence[float]] = None) -> NURBSCurve:
    """
    Create a single-span rational Bezier curve.

    Parameters:
        points: n >= 2 control points
        weights: Optional n positive weights, defaults to 1.0

    Returns:
        NURBSCurve of degree n-1 with knots [0]*n + [1]*n
    """
    pts = as_points(points, "points")
    n = pts.shape[0]
    if n < 2:
        raise InvalidArgumentError(f"A Bezier curve needs at least 2 points, got {n}")

    degree = n - 1
    kv = make_open_knot_vector(n, degree)
    return NURBSCurve.from_points(degree, kv.knots, pts, weights)


def extruded_surface(axis, length: float, profile: NURBSCurve,
                     tol: Optional[float] = None) -> NURBSSurface:
    """
    Create the surface swept by translating a profile along a straight line.

    Three rows of control points are placed along u: the profile, the
    profile moved by length/2 * axis, and the profile moved by
    length * axis. Every row of a column shares that column's profile
    weight, so the surface is linear in u:

        S(u, v) = profile(v) + u * length * axis

    Parameters:
        axis: Extrusion direction (normally unit length)
        length: Extrusion distance along axis
        profile: Curve to extrude
        tol: Zero tolerance for the extrusion vector

    Returns:
        NURBSSurface with degree_u 2 (a single Bezier span) and the
        profile's degree, knots and weights in v
    """
    tol = resolve_tolerance(tol)
    _require_curve(profile, "profile")
    axis = as_point(axis, "axis")
    _require_dim("axis", axis, profile.n_dim_physical)

    length = float(length)
    if not np.isfinite(length):
        raise InvalidArgumentError(f"Extrusion length must be finite, got {length}")

    translation = axis * length
    if norm(translation) <= tol:
        raise InvalidArgumentError("Extrusion vector has zero length")

    profile_points = profile.homogeneous_points
    rows = [[hp.translated(translation * fraction) for hp in profile_points]
            for fraction in (0.0, 0.5, 1.0)]

    grid = pack_rows(rows)
    _require_finite(grid, "extruded surface")

    kv_u = make_bezier_segment_knots(1, degree=2)
    surface = NURBSSurface(2, profile.degree, kv_u.knots, profile.knots, grid)
    logger.debug(f"Extruded surface: length={length:.6g}, "
                 f"grid={surface.n_control_points_per_dir}")
    return surface


def sweep1_surface(profile: NURBSCurve, rail: NURBSCurve,
                   tol: Optional[float] = None) -> NURBSSurface:
    """
    Create the surface swept by translating a profile along a rail curve.

    The profile keeps its orientation; it is only translated. Row i of
    the control grid is the profile moved by rail(u_i) - rail(u_start),
    where u_i are n_rail parameters spaced evenly over the rail's domain
    (n_rail = number of rail control points). The weight of grid point
    (i, j) is profile_weight[j] * rail_weight[i].

    The rail's control polygon serves as the discretization of the
    sweep; rails whose control polygon is a poor proxy for the curve
    (strongly non-uniform parametrization or weights) give a distorted
    surface.

    Parameters:
        profile: Cross-section curve
        rail: Path curve with at least two control points
        tol: Zero tolerance for the extent of the rail control polygon

    Returns:
        NURBSSurface with the rail's degree/knots in u and the profile's
        degree/knots in v
    """
    tol = resolve_tolerance(tol)
    _require_curve(profile, "profile")
    _require_curve(rail, "rail")

    if profile.n_dim_physical != rail.n_dim_physical:
        raise InvalidArgumentError(
            f"Profile dimension {profile.n_dim_physical} doesn't match "
            f"rail dimension {rail.n_dim_physical}"
        )

    n_rail = rail.n_control_points
    if n_rail < 2:
        raise InvalidArgumentError("Rail needs at least two control points")

    rail_points = rail.points
    if np.max(np.linalg.norm(rail_points - rail_points[0], axis=1)) <= tol:
        raise InvalidArgumentError("Rail control points all coincide")

    u_min, u_max = rail.domain
    rail_start = rail.eval_point(u_min)
    rail_weights = rail.weights
    profile_points = profile.homogeneous_points

    rows = []
    for i in range(n_rail):
        u_i = u_min + (u_max - u_min) * i / (n_rail - 1)
        rail_offset = rail.eval_point(u_i) - rail_start
        rows.append([hp.translated(rail_offset).reweighted(rail_weights[i])
                     for hp in profile_points])

    grid = pack_rows(rows)
    _require_finite(grid, "swept surface")

    surface = NURBSSurface(rail.degree, profile.degree, rail.knots, profile.knots, grid)
    logger.debug(f"Swept surface: grid={surface.n_control_points_per_dir}")
    return surface


def revolved_surface(profile: NURBSCurve, center, axis, theta: float,
                     tol: Optional[float] = None) -> NURBSSurface:
    """
    Create a surface of revolution.

    Each profile control point is rotated about the line through center
    along axis, using the same Bezier segment layout as ellipse_arc. The
    arc traced by control point j carries the profile weight w_j at its
    endpoints and cos(dtheta/2) * w_j at its middle points. Control points
    lying on the axis stay put.

    Parameters:
        profile: 3D curve to revolve
        center: A point on the axis of revolution
        axis: Direction of the axis of revolution
        theta: Angle of revolution in radians, 0 < theta <= 2*pi
        tol: Zero tolerance

    Returns:
        NURBSSurface with degree 2 in u (around the axis) and the profile
        in v
    """
    tol = resolve_tolerance(tol)
    _require_curve(profile, "profile")
    center = as_point(center, "center")
    axis_hat = _unit_axis(axis, "axis", tol)
    _require_dim("center", center, 3)
    _require_dim("axis", axis_hat, 3)
    if profile.n_dim_physical != 3:
        raise InvalidArgumentError("Only 3D profiles can be revolved")

    n_segments = arc_segment_count(float(theta), tol)
    dtheta = float(theta) / n_segments
    wm = np.cos(dtheta / 2.0)

    columns = []
    for hp in profile.homogeneous_points:
        O = closest_point_on_ray(hp.point, center, axis_hat, tol)
        X = hp.point - O
        r = norm(X)

        if r <= tol:
            # On the axis: every control point of this column is O
            points = [O] * (2 * n_segments + 1)
        else:
            X = X / r
            Y = cross(axis_hat, X)
            points = _arc_control_points(O, r * X, r * Y, 0.0, dtheta, n_segments, tol)
            points[0] = hp.point

        columns.append([HomogeneousPoint(p, hp.weight if k % 2 == 0 else wm * hp.weight)
                        for k, p in enumerate(points)])

    # columns run around the axis; rows of the grid are u
    grid = pack_rows(list(zip(*columns)))
    _require_finite(grid, "revolved surface")

    kv_u = make_bezier_segment_knots(n_segments, degree=2)
    surface = NURBSSurface(2, profile.degree, kv_u.knots, profile.knots, grid)
    logger.debug(f"Revolved surface: theta={float(theta):.6g} rad, {n_segments} segment(s), "
                 f"grid={surface.n_control_points_per_dir}")
    return surface


def _frame(axis, xaxis, tol: float) -> Tuple[np.ndarray, np.ndarray]:
    axis_hat = _unit_axis(axis, "axis", tol)
    x_hat = _unit_axis(xaxis, "xaxis", tol)
    _require_dim("axis", axis_hat, 3)
    _require_dim("xaxis", x_hat, 3)
    if abs(np.dot(axis_hat, x_hat)) > tol:
        raise InvalidArgumentError("xaxis must be perpendicular to axis")
    return axis_hat, x_hat


def cylindrical_surface(axis, xaxis, base, height: float, radius: float,
                        tol: Optional[float] = None) -> NURBSSurface:
    """
    Create a cylinder by extruding a full circle.

    Parameters:
        axis: Cylinder axis direction
        xaxis: Direction perpendicular to axis where the seam lies
        base: Center of the bottom circle
        height: Extent along axis
        radius: Cylinder radius

    Returns:
        NURBSSurface, u along the axis, v around it
    """
    tol = resolve_tolerance(tol)
    axis_hat, x_hat = _frame(axis, xaxis, tol)
    yaxis = cross(axis_hat, x_hat)

    circle = arc(base, x_hat, yaxis, radius, 0.0, TWO_PI, tol=tol)
    return extruded_surface(axis_hat, height, circle, tol=tol)


def conical_surface(axis, xaxis, base, height: float, radius: float,
                    tol: Optional[float] = None) -> NURBSSurface:
    """
    Create a cone by revolving the line from the apex to the base rim.

    Parameters:
        axis: Direction from the base center to the apex
        xaxis: Direction perpendicular to axis where the seam lies
        base: Center of the base circle
        height: Apex distance from base along axis
        radius: Base radius

    Returns:
        NURBSSurface, u around the axis, v from apex (0) to rim (1)
    """
    tol = resolve_tolerance(tol)
    axis_hat, x_hat = _frame(axis, xaxis, tol)
    base = as_point(base, "base")
    radius = _positive(radius, "radius")
    height = _positive(height, "height")

    apex = base + height * axis_hat
    rim = base + radius * x_hat
    profile = NURBSCurve.from_points(1, [0.0, 0.0, 1.0, 1.0], np.array([apex, rim]))

    return revolved_surface(profile, base, axis_hat, TWO_PI, tol=tol)


def spherical_surface(center, axis, xaxis, radius: float,
                      tol: Optional[float] = None) -> NURBSSurface:
    """
    Create a sphere by revolving a half circle about axis.

    The half circle runs from the south pole (center - radius*axis)
    through center + radius*xaxis to the north pole.

    Parameters:
        center: Sphere center
        axis: Polar axis
        xaxis: Direction perpendicular to axis where the seam lies
        radius: Sphere radius

    Returns:
        NURBSSurface, u around the axis, v from pole to pole
    """
    tol = resolve_tolerance(tol)
    axis_hat, x_hat = _frame(axis, xaxis, tol)

    half_circle = arc(center, -axis_hat, x_hat, radius, 0.0, np.pi, tol=tol)
    return revolved_surface(half_circle, center, axis_hat, TWO_PI, tol=tol)


def four_point_surface(p1, p2, p3, p4, degree: int = 3) -> NURBSSurface:
    """
    Create a bilinear patch through four corner points.

    The patch is degree-elevated to the requested degree in both
    directions, with control points evenly spaced on the bilinear patch.
    Corners: S(0,0)=p1, S(1,0)=p2, S(1,1)=p3, S(0,1)=p4.

    Parameters:
        p1, p2, p3, p4: Corner points, in order around the patch
        degree: Degree in u and v (>= 1)

    Returns:
        NURBSSurface with unit weights
    """
    if degree < 1:
        raise InvalidArgumentError(f"Degree must be at least 1, got {degree}")

    p1 = as_point(p1, "p1")
    p2 = as_point(p2, "p2")
    p3 = as_point(p3, "p3")
    p4 = as_point(p4, "p4")
    for name, p in (("p2", p2), ("p3", p3), ("p4", p4)):
        _require_dim(name, p, len(p1))

    points = np.zeros((degree + 1, degree + 1, len(p1)))
    for i in range(degree + 1):
        l = 1.0 - i / degree
        p1p2 = lerp(l, p1, p2)
        p4p3 = lerp(l, p4, p3)
        for j in range(degree + 1):
            points[i, j] = lerp(1.0 - j / degree, p1p2, p4p3)

    knots = make_open_knot_vector(degree + 1, degree).knots
    return NURBSSurface.from_points(degree, degree, knots, knots, points)
