"""Finite volume geometry of a triangular mesh.

Example
-------
>>> from FVM import Triangulation, build_geometry
>>>
>>> tri = Triangulation.rectangle(0.0, 0.0, 1.0, 1.0, 8, 8)
>>> geo = build_geometry(tri, tri.boundary_segments())
>>> round(geo.total_area, 12)
1.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from .assembly import element_information
from .boundary import boundary_information
from .datastructures import (
    BoundaryEdgeMatrix,
    BoundaryInformation,
    ElementInformation,
    GeometryParameters,
    InteriorEdge,
    InteriorInformation,
    OutwardNormalBoundary,
    Triangle,
)
from .interior import interior_information
from .mesh import Triangulation

if TYPE_CHECKING:
    import meshio

log = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class FVMGeometry:
    """
    Geometric data for a vertex-centred finite volume discretisation.

    Attributes
    ----------
    triangulation : Triangulation
        Points, triangles and adjacency structures of the mesh.
    boundary_information : BoundaryInformation
    interior_information : InteriorInformation
    element_information_list : mapping
        Canonical triangle -> ElementInformation, read-only.
    volumes : ndarray (n_nodes,)
        Area of each node's control volume.
    total_area : float
    """

    triangulation: Triangulation
    boundary_information: BoundaryInformation
    interior_information: InteriorInformation
    element_information_list: Mapping[Triangle, ElementInformation]
    volumes: NDArray[np.float64]
    total_area: float

    # Mesh
    @property
    def points(self) -> NDArray[np.float64]:
        return self.triangulation.points

    @property
    def elements(self) -> tuple[Triangle, ...]:
        return tuple(self.triangulation.index)

    def get_point(self, i: int) -> NDArray[np.float64]:
        return self.triangulation.get_point(i)

    def get_adjacent(self, u: int, v: int) -> int:
        return self.triangulation.get_adjacent(u, v)

    def get_neighbours(self, i: int) -> frozenset[int]:
        return frozenset(self.triangulation.neighbours.get(i, ()))

    def get_adjacent2vertex(self, w: int) -> frozenset[tuple[int, int]]:
        """Oriented edges (u, v) such that (u, v, w) is a mesh triangle."""
        return frozenset(self.triangulation.adjacent2vertex.get(w, ()))

    def canonical(self, T: Iterable[int]) -> Triangle:
        """Rotation of T used as key by this geometry."""
        return self.triangulation.index.canonical(T)

    # Elements
    def get_element_information(self, T: Iterable[int]) -> ElementInformation:
        return self.element_information_list[self.canonical(T)]

    def get_centroid(self, T: Iterable[int]) -> NDArray[np.float64]:
        return self.get_element_information(T).centroid

    def get_midpoints(self, T: Iterable[int], i: int | None = None) -> NDArray[np.float64]:
        m = self.get_element_information(T).midpoints
        return m if i is None else m[i]

    def get_control_volume_edge_midpoints(self, T: Iterable[int], i: int | None = None) -> NDArray[np.float64]:
        m = self.get_element_information(T).control_volume_edge_midpoints
        return m if i is None else m[i]

    def get_lengths(self, T: Iterable[int], i: int | None = None):
        lengths = self.get_element_information(T).lengths
        return lengths if i is None else float(lengths[i])

    def get_normals(self, T: Iterable[int], i: int | None = None) -> NDArray[np.float64]:
        n = self.get_element_information(T).normals
        return n if i is None else n[i]

    def get_shape_function_coefficients(self, T: Iterable[int], i: int | None = None):
        s = self.get_element_information(T).shape_function_coefficients
        return s if i is None else float(s[i])

    def get_area(self, T: Iterable[int]) -> float:
        return self.get_element_information(T).area

    # Control volumes
    def get_volume(self, i: int) -> float:
        return float(self.volumes[i])

    # Boundary
    def get_boundary_edge_information(self) -> BoundaryEdgeMatrix:
        return self.boundary_information.edge_information

    def get_boundary_normals(self) -> OutwardNormalBoundary:
        return self.boundary_information.normal_information

    @property
    def num_boundary_edges(self) -> int:
        return self.boundary_information.num_boundary_edges

    @property
    def boundary_nodes(self) -> tuple[int, ...]:
        return self.boundary_information.boundary_nodes

    @property
    def boundary_elements(self) -> tuple[Triangle, ...]:
        return self.boundary_information.boundary_elements

    # Interior
    @property
    def interior_nodes(self) -> tuple[int, ...]:
        return self.interior_information.nodes

    @property
    def interior_elements(self) -> tuple[Triangle, ...]:
        return self.interior_information.elements

    def get_interior_edges(self, T: Iterable[int]) -> tuple[InteriorEdge, ...]:
        return self.interior_information.get_interior_edges(self.canonical(T))

    def summary(self) -> dict:
        """Counts and areas, for logging."""
        return {
            "n_nodes": self.triangulation.num_points,
            "n_elements": self.triangulation.num_triangles,
            "n_boundary_nodes": len(self.boundary_nodes),
            "n_interior_nodes": len(self.interior_nodes),
            "n_boundary_edges": self.num_boundary_edges,
            "n_segments": len(set(self.get_boundary_edge_information().types.tolist())),
            "n_boundary_elements": len(self.boundary_elements),
            "n_interior_elements": len(self.interior_elements),
            "total_area": self.total_area,
            "min_volume": float(self.volumes.min()) if len(self.volumes) else 0.0,
            "max_volume": float(self.volumes.max()) if len(self.volumes) else 0.0,
        }

    def to_meshio(self) -> meshio.Mesh:
        """Mesh with control volume areas and boundary flags as point data, element areas as cell data."""
        import meshio as mio

        triangles = np.array(self.elements, dtype=np.int64).reshape(-1, 3)
        points = np.column_stack([self.points, np.zeros(len(self.points))])
        boundary = np.zeros(len(self.points), dtype=np.int64)
        boundary[list(self.boundary_nodes)] = 1
        areas = np.array([self.element_information_list[Triangle(*T)].area for T in triangles.tolist()])
        return mio.Mesh(
            points,
            [("triangle", triangles)],
            point_data={"control_volume": np.asarray(self.volumes), "boundary": boundary},
            cell_data={"area": [areas]},
        )


def build_geometry(
    triangulation: Triangulation,
    segments: Sequence[Sequence[int]],
    params: GeometryParameters | None = None,
) -> FVMGeometry:
    """
    Precompute the finite volume geometry of a triangulation.

    Parameters
    ----------
    triangulation : Triangulation
        Counter-clockwise triangles with their adjacency structures.
    segments : list of list of int
        Boundary nodes per segment, counter-clockwise, with
        ``segments[i][0] == segments[i-1][-1]``. A single segment lists the
        whole boundary once.
    params : GeometryParameters, optional

    Returns
    -------
    FVMGeometry

    Raises
    ------
    InputInconsistencyError, DegenerateGeometryError, OrientationMismatchError
        Construction is all or nothing.
    """
    params = params or GeometryParameters()
    log.info(
        f"Building FVM geometry: {triangulation.num_points} nodes, "
        f"{triangulation.num_triangles} triangles, {len(segments)} boundary segment(s)"
    )

    element_infos, volumes, total_area = element_information(
        triangulation.points, triangulation.triangles, params
    )
    boundary_info = boundary_information(triangulation, segments)
    interior_info = interior_information(
        boundary_info.boundary_nodes,
        triangulation.num_points,
        triangulation.index,
        boundary_info.boundary_elements,
        triangulation.neighbours,
        triangulation.points,
        boundary_edges=boundary_info.edge_information.edges(),
        hull_tol=params.hull_tol,
    )

    geo = FVMGeometry(
        triangulation=triangulation,
        boundary_information=boundary_info,
        interior_information=interior_info,
        element_information_list=element_infos,
        volumes=volumes,
        total_area=total_area,
    )
    log.info(
        f"FVM geometry ready: {geo.num_boundary_edges} boundary edges, "
        f"{len(geo.boundary_elements)} boundary / {len(geo.interior_elements)} interior elements, "
        f"total area {total_area:.6e}"
    )
    return geo
