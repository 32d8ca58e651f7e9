from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from .datastructures import EDGE_VERTICES, InteriorEdge, InteriorInformation, Triangle, TriangleIndex
from .hull import convex_hull, hull_edges

log = logging.getLogger(__name__)


def interior_nodes(boundary_nodes: Iterable[int], num_nodes: int) -> tuple[int, ...]:
    """All node indices that are not boundary nodes."""
    return tuple(sorted(set(range(num_nodes)).difference(boundary_nodes)))


def interior_elements(index: TriangleIndex, boundary_elements: Iterable[Triangle]) -> tuple[Triangle, ...]:
    """Mesh triangles that are not boundary elements, in mesh order."""
    excluded = {index.canonical(T) for T in boundary_elements}
    elements = (index.canonical(T) for T in index)
    return tuple(T for T in elements if T not in excluded)


def construct_interior_edge_boundary_element_identifier(
    boundary_elements: Iterable[Triangle],
    excluded_edges: set[tuple[int, int]],
) -> Mapping[Triangle, tuple[InteriorEdge, ...]]:
    """
    Map each boundary element to its edges that lie inside the domain.

    An edge (u, v) of element T is recorded as ``((u, ju), (v, jv))`` with
    ``T[ju] == u`` and ``T[jv] == v``, unless (u, v) is in ``excluded_edges``.
    """
    identifier = {}
    for T in boundary_elements:
        res = []
        for ju, jv in EDGE_VERTICES.tolist():
            u, v = T[ju], T[jv]
            if (u, v) not in excluded_edges:
                res.append(((u, ju), (v, jv)))
        # at most two, else T would not touch the boundary
        identifier[T] = tuple(res)
    return MappingProxyType(identifier)


def interior_information(
    boundary_nodes: Sequence[int],
    num_nodes: int,
    index: TriangleIndex,
    boundary_elements: Sequence[Triangle],
    neighbours: dict[int, set[int]],
    points: NDArray[np.float64],
    boundary_edges: Iterable[tuple[int, int]] = (),
    hull_tol: float = 1e-12,
) -> InteriorInformation:
    """
    Interior nodes, interior elements, and the interior edges of every boundary element.

    Edges on the convex hull of the connectivity graph are never interior.
    Edges listed in ``boundary_edges`` are excluded as well, which matters only
    for non-convex domains where the boundary leaves the hull.
    """
    nodes = interior_nodes(boundary_nodes, num_nodes)
    elements = interior_elements(index, boundary_elements)

    hull = convex_hull(points, neighbours.keys(), tol=hull_tol)
    excluded = hull_edges(hull) | set(boundary_edges)
    identifier = construct_interior_edge_boundary_element_identifier(boundary_elements, excluded)

    log.debug(
        f"Interior: {len(nodes)} nodes, {len(elements)} elements, "
        f"convex hull with {len(hull)} nodes"
    )
    return InteriorInformation(nodes, elements, identifier)
