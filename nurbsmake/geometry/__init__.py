"""
Geometry module: NURBS records, evaluation and primitive constructors.
"""

from .nurbs import NURBSCurve, NURBSSurface
from .intersect import RayIntersection, intersect_rays
from .primitives import (
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
