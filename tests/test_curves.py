"""
Unit tests for curve constructors: arcs, polylines and Bezier curves.
"""

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal, assert_almost_equal

from nurbsmake.errors import InvalidArgumentError
from nurbsmake.geometry.primitives import (
    ARC_SEGMENT_TABLE, arc_segment_count,
    arc, ellipse_arc, polyline_curve, rational_bezier_curve,
)


SAMPLES = np.linspace(0.0, 1.0, 41)


class TestArc:
    """Tests for circular arcs."""

    def test_quarter_arc(self, unit_frame):
        """A quarter turn is a single rational quadratic segment."""
        center, xaxis, yaxis = unit_frame
        center = center + np.array([1.0, 2.0, 3.0])
        r = 2.5

        curve = arc(center, xaxis, yaxis, r, 0.0, np.pi / 2)

        assert curve.degree == 2
        assert curve.n_control_points == 3
        assert_array_almost_equal(curve.knots, [0, 0, 0, 1, 1, 1])

        points = curve.points
        assert np.linalg.norm(points[0] - center) == pytest.approx(r)
        assert np.linalg.norm(points[-1] - center) == pytest.approx(r)
        assert_array_almost_equal(points[1], center + [r, r, 0.0])

        assert_array_almost_equal(curve.weights, [1.0, np.cos(np.pi / 4), 1.0])

    @pytest.mark.parametrize("theta", [1e-4, 5e-6, 1e-6])
    def test_tiny_sweep(self, unit_frame, theta):
        """Sweeps far below a degree but above tol are still built."""
        center, xaxis, yaxis = unit_frame

        curve = arc(center, xaxis, yaxis, 1.0, 0.0, theta)

        assert curve.n_control_points == 3
        assert_array_almost_equal(curve.points[-1], [np.cos(theta), np.sin(theta), 0.0])
        assert np.linalg.norm(curve.eval_point(0.5)) == pytest.approx(1.0, abs=1e-9)

    def test_points_lie_on_circle(self, unit_frame):
        """Every evaluated point is at distance r from the center."""
        center, xaxis, yaxis = unit_frame
        r = 3.0

        for start, end in [(0.0, np.pi / 3), (0.5, 2.5), (1.0, 4.5), (0.0, 2 * np.pi)]:
            curve = arc(center, xaxis, yaxis, r, start, end)
            for u in SAMPLES:
                p = curve.eval_point(u)
                assert np.linalg.norm(p - center) == pytest.approx(r, abs=1e-10)

    def test_endpoints(self, unit_frame):
        """The curve starts and ends at the given angles."""
        center, xaxis, yaxis = unit_frame
        curve = arc(center, xaxis, yaxis, 2.0, np.pi / 6, 4 * np.pi / 3)

        assert_array_almost_equal(curve.eval_point(0.0),
                                  [2 * np.cos(np.pi / 6), 2 * np.sin(np.pi / 6), 0.0])
        assert_array_almost_equal(curve.eval_point(1.0),
                                  [2 * np.cos(4 * np.pi / 3), 2 * np.sin(4 * np.pi / 3), 0.0])

    def test_full_circle(self, unit_frame):
        """A full turn uses four segments and closes on itself."""
        center, xaxis, yaxis = unit_frame
        curve = arc(center, xaxis, yaxis, 1.0, 0.0, 2 * np.pi)

        assert curve.n_control_points == 9
        assert_array_almost_equal(curve.knots,
                                  [0, 0, 0, 0.25, 0.25, 0.5, 0.5, 0.75, 0.75, 1, 1, 1])
        assert_array_almost_equal(curve.eval_point(0.0), curve.eval_point(1.0))
        assert_array_almost_equal(curve.eval_point(0.25), [0.0, 1.0, 0.0])
        assert_array_almost_equal(curve.eval_point(0.5), [-1.0, 0.0, 0.0])

    def test_planar_input(self):
        """Arcs can be built from 2D points and axes."""
        curve = arc([0.0, 0.0], [1.0, 0.0], [0.0, 1.0], 1.0, 0.0, np.pi)

        assert curve.n_dim_physical == 2
        assert_array_almost_equal(curve.eval_point(0.5), [0.0, 1.0])

    def test_axes_are_normalized(self, unit_frame):
        """Axis length does not affect the arc."""
        center, xaxis, yaxis = unit_frame
        a = arc(center, xaxis, yaxis, 1.0, 0.0, np.pi)
        b = arc(center, 5 * xaxis, 0.1 * yaxis, 1.0, 0.0, np.pi)

        assert_array_almost_equal(a.control_points, b.control_points)

    def test_middle_weights(self, unit_frame):
        """Middle weights are cos(dtheta / 2), endpoints are 1."""
        center, xaxis, yaxis = unit_frame
        curve = arc(center, xaxis, yaxis, 1.0, 0.0, 3.0)
        dtheta = 3.0 / 2

        assert_array_almost_equal(curve.weights,
                                  [1.0, np.cos(dtheta / 2), 1.0, np.cos(dtheta / 2), 1.0])

    def test_middle_points_on_tangents(self, unit_frame):
        """Each middle control point is where the endpoint tangents meet."""
        center, xaxis, yaxis = unit_frame
        curve = arc(center, xaxis, yaxis, 1.0, 0.0, 5.0)
        points = curve.points

        for k in range(1, len(points), 2):
            # The tangent at an on-circle point is perpendicular to its radius
            assert np.dot(points[k] - points[k - 1], points[k - 1]) == pytest.approx(0.0, abs=1e-10)
            assert np.dot(points[k] - points[k + 1], points[k + 1]) == pytest.approx(0.0, abs=1e-10)


class TestEllipseArc:
    """Tests for elliptical arcs."""

    def test_points_on_ellipse(self, unit_frame):
        """Evaluated points satisfy the ellipse equation."""
        center, xaxis, yaxis = unit_frame
        a, b = 3.0, 1.5

        curve = ellipse_arc(center, xaxis, yaxis, a, b, 0.2, 5.9)
        for u in SAMPLES:
            x, y, z = curve.eval_point(u)
            assert (x / a) ** 2 + (y / b) ** 2 == pytest.approx(1.0, abs=1e-10)
            assert z == pytest.approx(0.0)

    def test_tilted_plane(self):
        """Arcs in an arbitrary plane stay in that plane."""
        center = np.array([1.0, -1.0, 2.0])
        xaxis = np.array([1.0, 1.0, 0.0])
        yaxis = np.array([0.0, 0.0, 1.0])
        normal = np.cross(xaxis, yaxis)

        curve = ellipse_arc(center, xaxis, yaxis, 2.0, 1.0, 0.0, 4.0)

        for u in SAMPLES:
            assert np.dot(curve.eval_point(u) - center, normal) == pytest.approx(0.0, abs=1e-10)

    def test_end_before_start_is_full_turn(self, unit_frame):
        """end < start means a full revolution from start."""
        center, xaxis, yaxis = unit_frame
        start, end = 1.0, 0.5

        wrapped = ellipse_arc(center, xaxis, yaxis, 2.0, 1.0, start, end)
        explicit = ellipse_arc(center, xaxis, yaxis, 2.0, 1.0, start, start + 2 * np.pi)

        assert wrapped.n_control_points == 9
        assert len(wrapped.knots) == 12
        assert_array_almost_equal(wrapped.control_points, explicit.control_points)
        assert_array_almost_equal(wrapped.knots, explicit.knots)

    def test_full_turn_knot_vector(self, unit_frame):
        """Four segments: clamped ends, doubled knots at 1/4, 1/2, 3/4."""
        center, xaxis, yaxis = unit_frame
        curve = ellipse_arc(center, xaxis, yaxis, 2.0, 1.0, 0.5, 0.25)

        knots = curve.knots
        assert_array_almost_equal(knots[:3], [0.0, 0.0, 0.0])
        assert_array_almost_equal(knots[-3:], [1.0, 1.0, 1.0])
        assert_array_almost_equal(knots[3:-3], [0.25, 0.25, 0.5, 0.5, 0.75, 0.75])

    def test_circle_special_case(self, unit_frame):
        """arc is ellipse_arc with equal radii."""
        center, xaxis, yaxis = unit_frame

        a = arc(center, xaxis, yaxis, 1.5, 0.3, 2.0)
        b = ellipse_arc(center, xaxis, yaxis, 1.5, 1.5, 0.3, 2.0)

        assert_array_almost_equal(a.control_points, b.control_points)
        assert_array_almost_equal(a.knots, b.knots)

    @pytest.mark.parametrize("xradius, yradius", [(0.0, 1.0), (1.0, 0.0), (-1.0, 1.0), (1.0, np.nan)])
    def test_non_positive_radius(self, unit_frame, xradius, yradius):
        center, xaxis, yaxis = unit_frame
        with pytest.raises(InvalidArgumentError):
            ellipse_arc(center, xaxis, yaxis, xradius, yradius, 0.0, 1.0)

    def test_zero_axis(self, unit_frame):
        center, xaxis, _ = unit_frame
        with pytest.raises(InvalidArgumentError):
            ellipse_arc(center, xaxis, [0.0, 0.0, 0.0], 1.0, 1.0, 0.0, 1.0)

    def test_axes_not_perpendicular(self, unit_frame):
        center, xaxis, _ = unit_frame
        with pytest.raises(InvalidArgumentError):
            ellipse_arc(center, xaxis, [1.0, 1.0, 0.0], 1.0, 1.0, 0.0, 1.0)

    def test_parallel_axes(self, unit_frame):
        """Parallel axes would make the segment tangents parallel."""
        center, xaxis, _ = unit_frame
        with pytest.raises(InvalidArgumentError):
            ellipse_arc(center, xaxis, -2 * xaxis, 1.0, 1.0, 0.0, 1.0)

    def test_negative_start_angle(self, unit_frame):
        center, xaxis, yaxis = unit_frame
        with pytest.raises(InvalidArgumentError):
            ellipse_arc(center, xaxis, yaxis, 1.0, 1.0, -0.5, 1.0)

    def test_zero_sweep(self, unit_frame):
        center, xaxis, yaxis = unit_frame
        with pytest.raises(InvalidArgumentError):
            ellipse_arc(center, xaxis, yaxis, 1.0, 1.0, 1.0, 1.0)

    def test_sweep_over_full_turn(self, unit_frame):
        center, xaxis, yaxis = unit_frame
        with pytest.raises(InvalidArgumentError):
            ellipse_arc(center, xaxis, yaxis, 1.0, 1.0, 0.0, 7.0)

    def test_dimension_mismatch(self, unit_frame):
        center, xaxis, yaxis = unit_frame
        with pytest.raises(InvalidArgumentError):
            ellipse_arc([0.0, 0.0], xaxis, yaxis, 1.0, 1.0, 0.0, 1.0)


class TestArcSegmentCount:
    """Tests for the angular span -> segment count table."""

    @pytest.mark.parametrize("bound, count", ARC_SEGMENT_TABLE)
    def test_boundaries(self, bound, count):
        """Each bound is inclusive; just above it needs one more segment."""
        assert arc_segment_count(bound) == count
        assert arc_segment_count(bound - 1e-6) == count
        if count < 4:
            assert arc_segment_count(bound + 1e-6) == count + 1

    @pytest.mark.parametrize("theta, n_control_points", [
        (np.pi / 2, 3),
        (np.pi / 2 + 1e-6, 5),
        (np.pi, 5),
        (np.pi + 1e-6, 7),
        (1.5 * np.pi, 7),
        (1.5 * np.pi + 1e-6, 9),
    ])
    def test_control_point_count(self, unit_frame, theta, n_control_points):
        """2 * n_segments + 1 control points."""
        center, xaxis, yaxis = unit_frame
        curve = arc(center, xaxis, yaxis, 1.0, 0.0, theta)

        assert curve.n_control_points == n_control_points
        assert len(curve.knots) == n_control_points + 3

    def test_out_of_range(self):
        with pytest.raises(InvalidArgumentError):
            arc_segment_count(0.0)
        with pytest.raises(InvalidArgumentError):
            arc_segment_count(2 * np.pi + 1e-3)


class TestPolylineCurve:
    """Tests for polylines."""

    @pytest.mark.parametrize("n", [2, 3, 5, 8])
    def test_structure(self, n):
        """Knot and control point counts, unit weights, clamped ends."""
        rng = np.random.default_rng(n)
        points = rng.uniform(-1.0, 1.0, size=(n, 3))

        curve = polyline_curve(points)

        assert curve.degree == 1
        assert len(curve.knots) == n + 2
        assert curve.n_control_points == n
        assert_array_almost_equal(curve.weights, np.ones(n))
        assert curve.knots[0] == 0.0
        assert curve.knots[1] == 0.0
        assert curve.knots[n] == 1.0
        assert curve.knots[n + 1] == 1.0
        assert np.all(np.diff(curve.knots) >= 0)

    def test_chord_length_knots(self):
        """Interior knots are the normalized cumulative chord lengths."""
        curve = polyline_curve([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 3.0, 0.0]])

        assert_array_almost_equal(curve.knots, [0.0, 0.0, 0.25, 1.0, 1.0])

    def test_passes_through_vertices(self):
        """Evaluating at each interior knot gives the vertex."""
        points = np.array([[0.0, 0.0], [2.0, 0.0], [2.0, 2.0], [0.0, 2.0]])
        curve = polyline_curve(points)

        for k, p in enumerate(points):
            assert_array_almost_equal(curve.eval_point(curve.knots[k + 1]), p)

        # Half way along the total length of 6
        assert_array_almost_equal(curve.eval_point(0.5), [2.0, 1.0])

    def test_too_few_points(self):
        with pytest.raises(InvalidArgumentError):
            polyline_curve([[0.0, 0.0, 0.0]])
        with pytest.raises(InvalidArgumentError):
            polyline_curve([])

    def test_coincident_points(self):
        with pytest.raises(InvalidArgumentError):
            polyline_curve([[1.0, 1.0, 1.0]] * 3)

    def test_ragged_points(self):
        with pytest.raises(ValueError):
            polyline_curve([[0.0, 0.0], [1.0, 0.0, 0.0]])


class TestRationalBezierCurve:
    """Tests for single-span Bezier curves."""

    def test_structure(self):
        curve = rational_bezier_curve([[0.0, 0.0], [1.0, 1.0], [2.0, 0.0], [3.0, 1.0]])

        assert curve.degree == 3
        assert_array_almost_equal(curve.knots, [0, 0, 0, 0, 1, 1, 1, 1])
        assert_array_almost_equal(curve.eval_point(0.0), [0.0, 0.0])
        assert_array_almost_equal(curve.eval_point(1.0), [3.0, 1.0])

    def test_weights_reproduce_circle(self):
        """Quarter circle as a rational quadratic Bezier curve."""
        w = np.cos(np.pi / 4)
        curve = rational_bezier_curve([[1.0, 0.0], [1.0, 1.0], [0.0, 1.0]], [1.0, w, 1.0])

        for u in SAMPLES:
            assert_almost_equal(np.linalg.norm(curve.eval_point(u)), 1.0)

    def test_too_few_points(self):
        with pytest.raises(InvalidArgumentError):
            rational_bezier_curve([[0.0, 0.0]])
