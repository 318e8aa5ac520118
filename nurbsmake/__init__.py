"""
nurbsmake - exact NURBS primitives

Builds the degree, knot vector and homogeneous control net of common
shapes so that a NURBS evaluator reproduces them exactly:

- Curves: circular and elliptical arcs, polylines, rational Bezier curves
- Surfaces: extrusions, translational sweeps, surfaces of revolution,
  cylinders, cones, spheres, bilinear patches

Key modules:
- geometry: NURBSCurve/NURBSSurface records and the primitive constructors
- discretization: Knot vectors and homogeneous control points
- io: Tolerance configuration

Quick start:
    import numpy as np
    from nurbsmake import arc, extruded_surface

    # Quarter circle of radius 2 in the xy-plane
    quarter = arc([0, 0, 0], [1, 0, 0], [0, 1, 0], 2.0, 0.0, np.pi / 2)
    quarter.eval_point(0.5)        # -> [sqrt(2), sqrt(2), 0]

    # Extrude it 3 units along z
    wall = extruded_surface([0, 0, 1], 3.0, quarter)
    wall.eval_point((1.0, 0.5))    # -> [sqrt(2), sqrt(2), 3]
"""

__version__ = "0.1.0"

from .errors import NURBSError, InvalidArgumentError, NumericDegeneracyError
from .io.config import DEFAULT_TOLERANCE, PrimitiveConfig, load_config
from .discretization.homogeneous import (
    HomogeneousPoint,
    homogenize_1d,
    dehomogenize_1d,
    weight_1d,
    homogenize_2d,
    dehomogenize_2d,
    weight_2d,
)
from .geometry.nurbs import NURBSCurve, NURBSSurface
from .geometry.intersect import RayIntersection, intersect_rays
from .geometry.primitives import (
    arc,
    ellipse_arc,
    polyline_curve,
    rational_bezier_curve,
    extruded_surface,
    sweep1_surface,
    revolved_surface,
    cylindrical_surface,
    conical_surface,
    spherical_surface,
    four_point_surface,
)
from .logging_config import setup_logging
