"""Geometric primitives for triangles and their control volumes.

Points and vectors carry their (x, y) components in the last axis, so every
function works on a single point ``(2,)`` or a stack ``(..., 2)``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .errors import DegenerateGeometryError


def centroid(p1: ArrayLike, p2: ArrayLike, p3: ArrayLike) -> NDArray[np.float64]:
    """Arithmetic mean of the three vertices."""
    p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p1, p2, p3))
    return (p1 + p2 + p3) / 3


def midpoint(p: ArrayLike, q: ArrayLike) -> NDArray[np.float64]:
    p, q = np.asarray(p, dtype=np.float64), np.asarray(q, dtype=np.float64)
    return (p + q) / 2


def control_volume_edge_midpoint(m: ArrayLike, c: ArrayLike) -> NDArray[np.float64]:
    """Midpoint between an edge midpoint ``m`` and the centroid ``c``."""
    return midpoint(m, c)


def edge_vector(c: ArrayLike, m: ArrayLike) -> NDArray[np.float64]:
    """Control volume edge from the edge midpoint ``m`` to the centroid ``c``."""
    return np.asarray(c, dtype=np.float64) - np.asarray(m, dtype=np.float64)


def edge_length(v: ArrayLike) -> NDArray[np.float64]:
    v = np.asarray(v, dtype=np.float64)
    return np.sqrt(v[..., 0] ** 2 + v[..., 1] ** 2)


def outward_normal(v: ArrayLike, length: ArrayLike) -> NDArray[np.float64]:
    """
    Rotate ``v`` by 90 degrees clockwise and normalise.

    Parameters
    ----------
    v : ndarray (..., 2)
        Edge vector.
    length : ndarray (...)
        Length of ``v``.

    Returns
    -------
    n : ndarray (..., 2)
        ``(vy / length, -vx / length)``

    Raises
    ------
    DegenerateGeometryError
        If any length is zero.
    """
    v = np.asarray(v, dtype=np.float64)
    length = np.asarray(length, dtype=np.float64)
    if np.any(length == 0):
        raise DegenerateGeometryError("Cannot normalise a zero-length edge")
    n = np.empty_like(v)
    n[..., 0] = v[..., 1] / length
    n[..., 1] = -v[..., 0] / length
    return n


def sub_control_volume_area(p: ArrayLike, q: ArrayLike) -> NDArray[np.float64]:
    """Half the absolute cross product of ``p`` and ``q``.

    With ``p`` the vertex-to-centroid vector and ``q`` the vector joining the two
    adjacent edge midpoints, this is the area of the quadrilateral cut from the
    triangle by the vertex's control volume.
    """
    p, q = np.asarray(p, dtype=np.float64), np.asarray(q, dtype=np.float64)
    return 0.5 * np.abs(p[..., 0] * q[..., 1] - p[..., 1] * q[..., 0])


def signed_area(p1: ArrayLike, p2: ArrayLike, p3: ArrayLike) -> NDArray[np.float64]:
    """Shoelace area of triangle (p1, p2, p3), positive when counter-clockwise."""
    p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p1, p2, p3))
    return 0.5 * (
        (p2[..., 0] - p1[..., 0]) * (p3[..., 1] - p1[..., 1])
        - (p2[..., 1] - p1[..., 1]) * (p3[..., 0] - p1[..., 0])
    )


def shape_function_coefficients(
    x1: ArrayLike,
    y1: ArrayLike,
    x2: ArrayLike,
    y2: ArrayLike,
    x3: ArrayLike,
    y3: ArrayLike,
) -> NDArray[np.float64]:
    """
    Coefficients of the linear basis functions phi_i = a_i x + b_i y + c_i.

    phi_i is 1 at vertex i and 0 at the other two vertices.

    Returns
    -------
    s : ndarray (..., 9)
        (a1, a2, a3, b1, b2, b3, c1, c2, c3)

    Raises
    ------
    DegenerateGeometryError
        If the triangle has zero area.
    """
    x1, y1, x2, y2, x3, y3 = (np.asarray(a, dtype=np.float64) for a in (x1, y1, x2, y2, x3, y3))
    delta = x1 * y2 - y1 * x2 - x1 * y3 + x3 * y1 + x2 * y3 - x3 * y2
    if np.any(delta == 0):
        raise DegenerateGeometryError("Shape functions are undefined for a zero-area triangle")

    s = np.empty(np.shape(delta) + (9,), dtype=np.float64)
    s[..., 0] = (y2 - y3) / delta
    s[..., 1] = (y3 - y1) / delta
    s[..., 2] = (y1 - y2) / delta
    s[..., 3] = (x3 - x2) / delta
    s[..., 4] = (x1 - x3) / delta
    s[..., 5] = (x2 - x1) / delta
    s[..., 6] = (x2 * y3 - x3 * y2) / delta
    s[..., 7] = (x3 * y1 - x1 * y3) / delta
    s[..., 8] = (x1 * y2 - x2 * y1) / delta
    return s
