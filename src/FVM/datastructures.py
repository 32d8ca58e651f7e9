"""Data structures shared by the geometry builders.

Architecture: inputs vs derived records

             Input / config                Derived (immutable)
             ──────────────                ───────────────────
Topology     Triangle, TriangleIndex       BoundaryEdgeMatrix, OutwardNormalBoundary
                                           BoundaryInformation, InteriorInformation
Geometry     GeometryParameters            ElementInformation
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, NamedTuple

import numpy as np
from numpy.typing import NDArray

from .errors import OrientationMismatchError

# Boundary side constants for rectangular domains
LEFT, RIGHT, BOTTOM, TOP = 0, 1, 2, 3

# Tolerance for boundary node detection (floating-point comparison)
BOUNDARY_TOL = 1e-10

# Edge k (0,1,2) connects these local vertex positions
EDGE_VERTICES = np.array([[0, 1], [1, 2], [2, 0]])


class Triangle(NamedTuple):
    """Ordered vertex triple (i, j, k), counter-clockwise.

    Tuple equality is rotation sensitive. Use ``TriangleIndex.canonical`` to map
    any rotation to the one stored by the mesh.
    """

    i: int
    j: int
    k: int

    def rotations(self) -> tuple[Triangle, Triangle, Triangle]:
        return (
            self,
            Triangle(self.j, self.k, self.i),
            Triangle(self.k, self.i, self.j),
        )

    def edges(self) -> tuple[tuple[int, int], tuple[int, int], tuple[int, int]]:
        return ((self.i, self.j), (self.j, self.k), (self.k, self.i))


class TriangleIndex:
    """The mesh's triangle set with rotation-aware lookup."""

    def __init__(self, triangles: Iterable[Iterable[int]]):
        self._triangles = tuple(Triangle(*map(int, T)) for T in triangles)
        self._members = frozenset(self._triangles)

    def __len__(self) -> int:
        return len(self._triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self._triangles)

    def __contains__(self, T: object) -> bool:
        return T in self._members

    def canonical(self, T: Iterable[int]) -> Triangle:
        """Return the rotation of ``T`` that the mesh stores."""
        T = Triangle(*map(int, T))
        for R in T.rotations():
            if R in self._members:
                return R
        raise OrientationMismatchError(
            f"Triangle {tuple(T)} matches none of its rotations in the mesh", triangle=tuple(T)
        )


@dataclass(frozen=True)
class GeometryParameters:
    """Tunables for geometry construction."""

    degenerate_tol: float = 1e-12
    hull_tol: float = 1e-12
    boundary_tol: float = BOUNDARY_TOL
    check_orientation: bool = True

    def to_dict(self) -> dict:
        return dict(self.__dict__)


@dataclass(frozen=True, eq=False)
class BoundaryEdgeMatrix:
    """Boundary edges in counter-clockwise order.

    Attributes
    ----------
    left_nodes, right_nodes : ndarray (n_edges,)
        Edge n runs from ``left_nodes[n]`` to ``right_nodes[n]``.
    adjacent_nodes : ndarray (n_edges,)
        Apex so that (left, right, apex) is a positively oriented mesh triangle.
    types : ndarray (n_edges,)
        Segment id of each edge.
    """

    left_nodes: NDArray[np.int64]
    right_nodes: NDArray[np.int64]
    adjacent_nodes: NDArray[np.int64]
    types: NDArray[np.int64]

    def __len__(self) -> int:
        return len(self.left_nodes)

    def edge(self, n: int) -> tuple[int, int, int, int]:
        """(left, right, apex, segment id) of edge n."""
        return (
            int(self.left_nodes[n]),
            int(self.right_nodes[n]),
            int(self.adjacent_nodes[n]),
            int(self.types[n]),
        )

    def edges(self) -> Iterator[tuple[int, int]]:
        """Iterate over the (left, right) pairs."""
        for u, v in zip(self.left_nodes, self.right_nodes):
            yield int(u), int(v)


@dataclass(frozen=True, eq=False)
class OutwardNormalBoundary:
    """Unit outward normal for each boundary edge."""

    x_normals: NDArray[np.float64]
    y_normals: NDArray[np.float64]
    types: NDArray[np.int64]

    def __len__(self) -> int:
        return len(self.x_normals)

    def normal(self, n: int) -> NDArray[np.float64]:
        return np.array([self.x_normals[n], self.y_normals[n]])


@dataclass(frozen=True, eq=False)
class BoundaryInformation:
    """Boundary edges, normals, nodes (counter-clockwise) and boundary elements."""

    edge_information: BoundaryEdgeMatrix
    normal_information: OutwardNormalBoundary
    boundary_nodes: tuple[int, ...]
    boundary_elements: tuple[Triangle, ...]

    @property
    def num_boundary_edges(self) -> int:
        return len(self.edge_information)


# ((u, ju), (v, jv)) with T[ju] == u and T[jv] == v
InteriorEdge = tuple[tuple[int, int], tuple[int, int]]


@dataclass(frozen=True, eq=False)
class InteriorInformation:
    """Interior nodes, interior elements and interior edges of boundary elements."""

    nodes: tuple[int, ...]
    elements: tuple[Triangle, ...]
    interior_edge_boundary_element_identifier: Mapping[Triangle, tuple[InteriorEdge, ...]]

    def get_interior_edges(self, T: Triangle) -> tuple[InteriorEdge, ...]:
        return self.interior_edge_boundary_element_identifier[T]


@dataclass(frozen=True, eq=False)
class ElementInformation:
    """
    Geometry of one triangle.

    Attributes
    ----------
    centroid : ndarray (2,)
    midpoints : ndarray (3, 2)
        Midpoints of edges (i,j), (j,k), (k,i).
    control_volume_edge_midpoints : ndarray (3, 2)
        Midpoint of each centroid-to-edge-midpoint segment.
    lengths : ndarray (3,)
        Lengths of the control volume edges.
    normals : ndarray (3, 2)
        Unit normals of the control volume edges.
    shape_function_coefficients : ndarray (9,)
        (a1, a2, a3, b1, b2, b3, c1, c2, c3) with phi_i = a_i x + b_i y + c_i.
    sub_areas : ndarray (3,)
        Part of the element inside the control volume of each vertex.
    area : float
    """

    centroid: NDArray[np.float64]
    midpoints: NDArray[np.float64]
    control_volume_edge_midpoints: NDArray[np.float64]
    lengths: NDArray[np.float64]
    normals: NDArray[np.float64]
    shape_function_coefficients: NDArray[np.float64]
    sub_areas: NDArray[np.float64]
    area: float
