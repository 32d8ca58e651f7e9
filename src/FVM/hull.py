"""Convex hull of a planar point set (Andrew's monotone chain).

Points lying on a hull edge are kept, so every boundary node of a convex
domain appears in the hull, not only its corners.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np
from numpy.typing import NDArray


def _cross(o: NDArray[np.float64], a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    return float((a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0]))


def convex_hull(
    points: NDArray[np.float64],
    vertices: Iterable[int] | None = None,
    tol: float = 1e-12,
) -> list[int]:
    """
    Counter-clockwise convex hull.

    Parameters
    ----------
    points : ndarray (n_nodes, 2)
        Coordinates.
    vertices : iterable of int, optional
        Node indices to consider (default: all).
    tol : float
        Relative tolerance for collinearity, scaled by the squared extent of the
        point set. Points within it of a hull edge stay on the hull.

    Returns
    -------
    hull : list of int
        Node indices in counter-clockwise order, first node not repeated.
    """
    idx = np.arange(len(points)) if vertices is None else np.array(sorted(set(vertices)), dtype=np.int64)
    if len(idx) < 3:
        return [int(v) for v in idx]

    pts = points[idx]
    order = np.lexsort((pts[:, 1], pts[:, 0]))
    extent = float(np.max(pts.max(axis=0) - pts.min(axis=0)))
    eps = tol * extent**2

    def chain(sequence):
        hull: list[int] = []
        for v in sequence:
            while len(hull) >= 2 and _cross(points[hull[-2]], points[hull[-1]], points[v]) < -eps:
                hull.pop()
            hull.append(int(v))
        return hull

    sorted_idx = idx[order]
    lower = chain(sorted_idx)
    upper = chain(sorted_idx[::-1])
    return lower[:-1] + upper[:-1]


def hull_edges(hull: list[int]) -> set[tuple[int, int]]:
    """Ordered (u, v) pairs of consecutive hull nodes, cyclically."""
    n = len(hull)
    return {(hull[m], hull[(m + 1) % n]) for m in range(n)}
