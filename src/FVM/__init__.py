"""FVM package: geometry for vertex-centred finite volumes on triangular meshes.

This package precomputes, once per mesh, everything a vertex-centred finite
volume discretisation needs: control volume areas, control volume edges and
normals, linear shape functions, and the boundary/interior topology.

Main components:
- Triangulation: points, triangles and adjacency structures
- build_geometry: builds the immutable FVMGeometry
- boundary_information, interior_information: topology builders
- element_information: per-element geometry and control volumes
"""

from .datastructures import (
    Triangle,
    TriangleIndex,
    GeometryParameters,
    BoundaryEdgeMatrix,
    OutwardNormalBoundary,
    BoundaryInformation,
    InteriorInformation,
    ElementInformation,
    LEFT,
    RIGHT,
    BOTTOM,
    TOP,
    BOUNDARY_TOL,
    EDGE_VERTICES,
)
from .errors import (
    GeometryError,
    InputInconsistencyError,
    DegenerateGeometryError,
    OrientationMismatchError,
)
from .mesh import Triangulation
from .boundary import boundary_information, boundary_edge_matrix, outward_normal_boundary
from .hull import convex_hull
from .interior import interior_information
from .assembly import element_information
from .geometry import FVMGeometry, build_geometry

__all__ = [
    # Mesh
    "Triangle",
    "TriangleIndex",
    "Triangulation",
    "LEFT",
    "RIGHT",
    "BOTTOM",
    "TOP",
    "BOUNDARY_TOL",
    "EDGE_VERTICES",
    # Records
    "GeometryParameters",
    "BoundaryEdgeMatrix",
    "OutwardNormalBoundary",
    "BoundaryInformation",
    "InteriorInformation",
    "ElementInformation",
    # Errors
    "GeometryError",
    "InputInconsistencyError",
    "DegenerateGeometryError",
    "OrientationMismatchError",
    # Builders
    "boundary_information",
    "boundary_edge_matrix",
    "outward_normal_boundary",
    "convex_hull",
    "interior_information",
    "element_information",
    # Geometry
    "FVMGeometry",
    "build_geometry",
]
