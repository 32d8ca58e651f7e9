from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .datastructures import (
    BoundaryEdgeMatrix,
    BoundaryInformation,
    OutwardNormalBoundary,
    Triangle,
    TriangleIndex,
)
from .errors import InputInconsistencyError
from .mesh import Triangulation
from .primitives import edge_length

log = logging.getLogger(__name__)


def boundary_node_cycle(segments: Sequence[Sequence[int]]) -> tuple[list[int], list[int]]:
    """
    Join boundary segments into one counter-clockwise cycle.

    Consecutive segments share their junction node, so the last node of every
    segment is dropped. A single segment is taken as the whole cycle.

    Returns
    -------
    nodes : list of int
        Boundary nodes, each listed once.
    types : list of int
        Segment id of the edge leaving each node.
    """
    segments = [[int(v) for v in seg] for seg in segments]
    if not segments or any(len(seg) == 0 for seg in segments):
        raise InputInconsistencyError("Boundary segments must be non-empty")

    nodes: list[int] = []
    types: list[int] = []
    if len(segments) > 1:
        for n, seg in enumerate(segments):
            if len(seg) < 2:
                raise InputInconsistencyError(
                    f"Segment {n} has {len(seg)} node(s) and spans no boundary edge"
                )
            previous = segments[n - 1]
            if seg[0] != previous[-1]:
                raise InputInconsistencyError(
                    f"Segment {n} starts at node {seg[0]} but segment "
                    f"{(n - 1) % len(segments)} ends at node {previous[-1]}"
                )
            nodes.extend(seg[:-1])
            types.extend([n] * (len(seg) - 1))
    else:
        seg = segments[0]
        if len(seg) > 1 and seg[0] == seg[-1]:
            seg = seg[:-1]
        nodes.extend(seg)
        types.extend([0] * len(seg))

    if len(nodes) < 3:
        raise InputInconsistencyError(f"Boundary cycle needs at least 3 nodes, got {len(nodes)}")
    if len(set(nodes)) != len(nodes):
        raise InputInconsistencyError("Boundary cycle visits a node more than once")
    return nodes, types


def boundary_edge_matrix(
    triangulation: Triangulation,
    segments: Sequence[Sequence[int]],
) -> BoundaryEdgeMatrix:
    """Left, right, apex and segment id of each boundary edge."""
    nodes, types = boundary_node_cycle(segments)
    n_edges = len(nodes)

    E = np.empty((4, n_edges), dtype=np.int64)  # [left; right; apex; type]
    E[0, :] = nodes
    E[1, :] = nodes[1:] + nodes[:1]
    for n in range(n_edges):
        u, v = int(E[0, n]), int(E[1, n])
        E[2, n] = triangulation.get_adjacent(u, v)
        if not triangulation.is_boundary_edge(u, v):
            raise InputInconsistencyError(
                f"Edge {(u, v)} has triangles on both sides and is not on the boundary",
                edge=(u, v),
            )
    E[3, :] = types

    n_mesh_edges = len(triangulation.boundary_edges())
    if n_mesh_edges != n_edges:
        raise InputInconsistencyError(
            f"Boundary segments cover {n_edges} edges but the mesh boundary has {n_mesh_edges}"
        )

    E.setflags(write=False)
    return BoundaryEdgeMatrix(E[0], E[1], E[2], E[3])


def outward_normal_boundary(
    points: NDArray[np.float64],
    edges: BoundaryEdgeMatrix,
) -> OutwardNormalBoundary:
    """Unit outward normal of each boundary edge: (right - left) rotated 90 degrees clockwise."""
    r = points[edges.right_nodes] - points[edges.left_nodes]
    length = edge_length(r)
    x_normals = r[:, 1] / length
    y_normals = -r[:, 0] / length
    for a in (x_normals, y_normals):
        a.setflags(write=False)
    return OutwardNormalBoundary(x_normals, y_normals, edges.types)


def boundary_elements(edges: BoundaryEdgeMatrix, index: TriangleIndex) -> tuple[Triangle, ...]:
    """Mesh triangles incident to a boundary edge, in canonical rotation and without repeats."""
    elements = (
        index.canonical((u, v, w))
        for u, v, w in zip(edges.left_nodes, edges.right_nodes, edges.adjacent_nodes)
    )
    return tuple(dict.fromkeys(elements))


def boundary_information(
    triangulation: Triangulation,
    segments: Sequence[Sequence[int]],
) -> BoundaryInformation:
    """Build the boundary edges, outward normals, boundary nodes and boundary elements."""
    edges = boundary_edge_matrix(triangulation, segments)
    normals = outward_normal_boundary(triangulation.points, edges)
    elements = boundary_elements(edges, triangulation.index)
    nodes = tuple(int(v) for v in edges.left_nodes)

    log.debug(
        f"Boundary: {len(edges)} edges in {len(set(edges.types.tolist()))} segments, "
        f"{len(elements)} boundary elements"
    )
    return BoundaryInformation(edges, normals, nodes, elements)


def get_edge_midpoints(points: NDArray[np.float64], edges: BoundaryEdgeMatrix) -> NDArray[np.float64]:
    """Midpoint coordinates of each boundary edge."""
    return 0.5 * (points[edges.left_nodes] + points[edges.right_nodes])


def get_segment_edges(edges: BoundaryEdgeMatrix, segment: int) -> NDArray[np.int64]:
    """Indices of the boundary edges on one segment."""
    return np.flatnonzero(edges.types == segment)
