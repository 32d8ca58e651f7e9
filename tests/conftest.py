"""Shared meshes for the geometry tests."""

import numpy as np
import pytest

from FVM import Triangulation


@pytest.fixture
def equilateral():
    """Single equilateral triangle; every node on the boundary."""
    points = np.array([[0.0, 0.0], [1.0, 0.0], [0.5, np.sqrt(3) / 2]])
    return Triangulation(points, [[0, 1, 2]])


@pytest.fixture
def square_two():
    """Unit square split along the (0,0)-(1,1) diagonal."""
    points = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    return Triangulation(points, [[0, 1, 2], [0, 2, 3]])


@pytest.fixture
def square_segments():
    """Bottom, right, top, left."""
    return [[0, 1], [1, 2], [2, 3], [3, 0]]


@pytest.fixture
def l_shape():
    """L-shaped domain of three unit cells, reentrant corner at node 4 = (1, 1)."""
    points = np.array([
        [0.0, 0.0], [1.0, 0.0], [2.0, 0.0],
        [0.0, 1.0], [1.0, 1.0], [2.0, 1.0],
        [0.0, 2.0], [1.0, 2.0],
    ])
    triangles = [
        [0, 1, 4], [0, 4, 3],
        [1, 2, 5], [1, 5, 4],
        [3, 4, 7], [3, 7, 6],
    ]
    return Triangulation(points, triangles)


@pytest.fixture
def rectangle():
    """Structured 6 x 5 mesh of [0, 2] x [1, 2]."""
    return Triangulation.rectangle(0.0, 1.0, 2.0, 1.0, 6, 5)


@pytest.fixture
def jittered():
    """Structured mesh with randomly displaced interior nodes (unstructured geometry)."""
    base = Triangulation.rectangle(0.0, 0.0, 1.0, 1.0, 8, 8)
    rng = np.random.default_rng(42)
    points = base.points.copy()
    interior = np.ones(len(points), dtype=bool)
    interior[base.boundary_cycle()] = False
    h = 1.0 / 8
    points[interior] += rng.uniform(-0.1 * h, 0.1 * h, size=(int(interior.sum()), 2))
    return Triangulation(points, base.triangles, dict(base.edge_tags))
