"""Exceptions raised while building the finite volume geometry.

Every error is fatal: construction aborts and no geometry is returned.
"""

from __future__ import annotations


class GeometryError(ValueError):
    """Base class for all geometry construction failures."""


class InputInconsistencyError(GeometryError):
    """Boundary segments or triangulation data that do not fit together."""

    def __init__(self, message: str, edge: tuple[int, int] | None = None):
        super().__init__(message)
        self.edge = edge


class DegenerateGeometryError(GeometryError):
    """Zero-area triangle or zero-length control volume edge."""

    def __init__(self, message: str, triangle: tuple[int, int, int] | None = None):
        super().__init__(message)
        self.triangle = triangle


class OrientationMismatchError(GeometryError):
    """Triangle that matches none of its rotations in the mesh, or is clockwise."""

    def __init__(self, message: str, triangle: tuple[int, int, int] | None = None):
        super().__init__(message)
        self.triangle = triangle
