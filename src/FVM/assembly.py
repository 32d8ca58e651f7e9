from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

import numpy as np
from numba import njit
from numpy.typing import NDArray

from .datastructures import ElementInformation, GeometryParameters, Triangle
from .errors import DegenerateGeometryError, OrientationMismatchError
from .primitives import (
    centroid,
    control_volume_edge_midpoint,
    edge_length,
    edge_vector,
    midpoint,
    outward_normal,
    shape_function_coefficients,
    signed_area,
    sub_control_volume_area,
)

log = logging.getLogger(__name__)


@njit
def accumulate_control_volumes(triangles, sub_areas, num_nodes):
    """
    Sum sub-control-volume areas into nodal volumes, triangle by triangle.

    Returns (volumes, total_area). The fold runs in triangle order so the
    result is reproducible bit for bit.
    """
    volumes = np.zeros(num_nodes, dtype=np.float64)
    total_area = 0.0
    for e in range(triangles.shape[0]):
        S1 = sub_areas[e, 0]
        S2 = sub_areas[e, 1]
        S3 = sub_areas[e, 2]
        volumes[triangles[e, 0]] += S1
        volumes[triangles[e, 1]] += S2
        volumes[triangles[e, 2]] += S3
        total_area += S1 + S2 + S3
    return volumes, total_area


def check_triangles(
    points: NDArray[np.float64],
    triangles: NDArray[np.int64],
    params: GeometryParameters,
) -> None:
    """Reject zero-area triangles and, if requested, clockwise ones."""
    p = points[triangles]
    area = signed_area(p[:, 0], p[:, 1], p[:, 2])
    h2 = np.max(np.sum((p - np.roll(p, 1, axis=1)) ** 2, axis=2), axis=1)

    degenerate = np.flatnonzero(np.abs(2 * area) <= params.degenerate_tol * h2)
    if len(degenerate):
        T = tuple(int(v) for v in triangles[degenerate[0]])
        raise DegenerateGeometryError(
            f"{len(degenerate)} degenerate triangle(s), first {T} with area {area[degenerate[0]]:.3e}",
            triangle=T,
        )

    if params.check_orientation:
        clockwise = np.flatnonzero(area < 0)
        if len(clockwise):
            T = tuple(int(v) for v in triangles[clockwise[0]])
            raise OrientationMismatchError(
                f"{len(clockwise)} clockwise triangle(s), first {T}", triangle=T
            )


def compute_element_geometry(
    points: NDArray[np.float64],
    triangles: NDArray[np.int64],
) -> dict[str, NDArray[np.float64]]:
    """
    Control volume geometry of all triangles at once.

    Returns
    -------
    dict with arrays
        centroids (T, 2), midpoints (T, 3, 2), control_volume_edge_midpoints (T, 3, 2),
        lengths (T, 3), normals (T, 3, 2), sub_areas (T, 3), areas (T,),
        shape_function_coefficients (T, 9)
    """
    p = points[triangles]  # (T, 3, 2)
    p1, p2, p3 = p[:, 0], p[:, 1], p[:, 2]

    c = centroid(p1, p2, p3)
    m = np.stack([midpoint(p1, p2), midpoint(p2, p3), midpoint(p3, p1)], axis=1)
    cv_midpoints = control_volume_edge_midpoint(m, c[:, None, :])

    e = edge_vector(c[:, None, :], m)
    lengths = edge_length(e)
    normals = outward_normal(e, lengths)

    # Diagonals of each vertex's quadrilateral: vertex -> centroid, and m_{l-1} -> m_l
    pv = edge_vector(c[:, None, :], p)
    q = m - np.roll(m, 1, axis=1)
    S = sub_control_volume_area(pv, q)
    areas = S[:, 0] + S[:, 1] + S[:, 2]

    s = shape_function_coefficients(p1[:, 0], p1[:, 1], p2[:, 0], p2[:, 1], p3[:, 0], p3[:, 1])

    return {
        "centroids": c,
        "midpoints": m,
        "control_volume_edge_midpoints": cv_midpoints,
        "lengths": lengths,
        "normals": normals,
        "sub_areas": S,
        "areas": areas,
        "shape_function_coefficients": s,
    }


def element_information(
    points: NDArray[np.float64],
    triangles: NDArray[np.int64],
    params: GeometryParameters | None = None,
) -> tuple[Mapping[Triangle, ElementInformation], NDArray[np.float64], float]:
    """
    Per-element records, nodal control volume areas and total mesh area.

    Parameters
    ----------
    points : ndarray (n_nodes, 2)
    triangles : ndarray (n_elem, 3)
        Counter-clockwise triangles in the mesh's own rotation.
    params : GeometryParameters, optional

    Returns
    -------
    element_infos : mapping
        Triangle -> ElementInformation, read-only
    volumes : ndarray (n_nodes,)
    total_area : float
    """
    params = params or GeometryParameters()
    triangles = np.array(triangles, dtype=np.int64).reshape(-1, 3)

    check_triangles(points, triangles, params)
    geo = compute_element_geometry(points, triangles)
    volumes, total_area = accumulate_control_volumes(
        triangles, np.ascontiguousarray(geo["sub_areas"]), len(points)
    )
    for a in (volumes, *geo.values()):
        a.setflags(write=False)

    element_infos = {}
    for e, T in enumerate(triangles.tolist()):
        element_infos[Triangle(*T)] = ElementInformation(
            centroid=geo["centroids"][e],
            midpoints=geo["midpoints"][e],
            control_volume_edge_midpoints=geo["control_volume_edge_midpoints"][e],
            lengths=geo["lengths"][e],
            normals=geo["normals"][e],
            shape_function_coefficients=geo["shape_function_coefficients"][e],
            sub_areas=geo["sub_areas"][e],
            area=float(geo["areas"][e]),
        )

    log.debug(f"Assembled geometry of {len(element_infos)} elements, total area {total_area:.6e}")
    return MappingProxyType(element_infos), volumes, float(total_area)
