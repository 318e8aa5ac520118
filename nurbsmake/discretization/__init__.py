"""
Discretization module: knot vectors and homogeneous control points.

Provides:
- KnotVector: Knot vector representation
- HomogeneousPoint: Control point paired with its NURBS weight
- homogenize/dehomogenize helpers for control polygons and grids
"""

from .knot_vector import (
    KnotVector,
    make_open_knot_vector,
    make_bezier_segment_knots,
)
from .homogeneous import (
    HomogeneousPoint,
    homogenize_1d,
    dehomogenize_1d,
    weight_1d,
    homogenize_2d,
    dehomogenize_2d,
    weight_2d,
)
