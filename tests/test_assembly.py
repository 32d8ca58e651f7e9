"""Tests for per-element geometry and control volume assembly."""

import numpy as np
import pytest

from FVM import (
    DegenerateGeometryError,
    GeometryParameters,
    OrientationMismatchError,
    Triangle,
    element_information,
)
from FVM.assembly import accumulate_control_volumes, check_triangles, compute_element_geometry
from FVM.primitives import signed_area


class TestElementGeometry:
    """Test the vectorised element computations."""

    def test_equilateral(self, equilateral):
        geo = compute_element_geometry(equilateral.points, equilateral.triangles)
        assert np.allclose(geo["centroids"][0], [0.5, np.sqrt(3) / 6])
        assert np.isclose(geo["areas"][0], np.sqrt(3) / 4)
        assert np.allclose(geo["sub_areas"][0], np.sqrt(3) / 12)
        assert np.allclose(geo["midpoints"][0], [[0.5, 0.0], [0.75, np.sqrt(3) / 4], [0.25, np.sqrt(3) / 4]])

    def test_control_volume_edges(self, jittered):
        geo = compute_element_geometry(jittered.points, jittered.triangles)
        c = geo["centroids"][:, None, :]
        m = geo["midpoints"]
        e = c - m
        assert np.allclose(geo["control_volume_edge_midpoints"], 0.5 * (c + m))
        assert np.allclose(geo["lengths"], np.linalg.norm(e, axis=2))
        assert np.allclose(np.linalg.norm(geo["normals"], axis=2), 1.0)
        assert np.allclose(np.sum(geo["normals"] * e, axis=2), 0.0)

    def test_area_matches_shoelace(self, jittered):
        geo = compute_element_geometry(jittered.points, jittered.triangles)
        p = jittered.points[jittered.triangles]
        shoelace = signed_area(p[:, 0], p[:, 1], p[:, 2])
        assert np.allclose(geo["areas"], shoelace, rtol=1e-10, atol=0)

    def test_sub_areas_are_thirds(self, jittered):
        """The median-dual region of each vertex is one third of the triangle."""
        geo = compute_element_geometry(jittered.points, jittered.triangles)
        assert np.allclose(geo["sub_areas"], geo["areas"][:, None] / 3, rtol=1e-10, atol=0)

    def test_shape_functions_interpolate_vertices(self, jittered):
        geo = compute_element_geometry(jittered.points, jittered.triangles)
        s = geo["shape_function_coefficients"]
        p = jittered.points[jittered.triangles]
        for e in range(len(p)):
            a, b, c = s[e, 0:3], s[e, 3:6], s[e, 6:9]
            phi = np.array([a * x + b * y + c for x, y in p[e]])
            assert np.allclose(phi, np.eye(3))


class TestControlVolumes:
    """Test nodal accumulation."""

    def test_fold(self):
        triangles = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.int64)
        sub_areas = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        volumes, total = accumulate_control_volumes(triangles, sub_areas, 5)
        assert np.allclose(volumes, [5.0, 2.0, 8.0, 6.0, 0.0])
        assert np.isclose(total, 21.0)

    def test_volumes_sum_to_area(self, jittered):
        _, volumes, total_area = element_information(jittered.points, jittered.triangles)
        assert np.isclose(volumes.sum(), total_area, rtol=1e-10)
        assert np.isclose(total_area, 1.0, rtol=1e-10)

    def test_interior_volume_on_uniform_grid(self, rectangle):
        """Six incident triangles of area h1*h2/2, a third each."""
        _, volumes, _ = element_information(rectangle.points, rectangle.triangles)
        interior = np.ones(rectangle.num_points, dtype=bool)
        interior[rectangle.boundary_cycle()] = False
        h1, h2 = 2.0 / 6, 1.0 / 5
        assert np.allclose(volumes[interior], h1 * h2)

    def test_deterministic(self, jittered):
        _, v1, a1 = element_information(jittered.points, jittered.triangles)
        _, v2, a2 = element_information(jittered.points, jittered.triangles)
        assert np.array_equal(v1, v2)
        assert a1 == a2


class TestElementInformation:
    """Test the per-element records."""

    def test_keys_are_mesh_rotation(self, square_two):
        infos, _, _ = element_information(square_two.points, square_two.triangles)
        assert list(infos) == [Triangle(0, 1, 2), Triangle(0, 2, 3)]

    def test_record_fields(self, square_two):
        infos, _, _ = element_information(square_two.points, square_two.triangles)
        info = infos[Triangle(0, 1, 2)]
        assert np.allclose(info.centroid, [2 / 3, 1 / 3])
        assert info.midpoints.shape == (3, 2)
        assert info.control_volume_edge_midpoints.shape == (3, 2)
        assert info.lengths.shape == (3,)
        assert info.normals.shape == (3, 2)
        assert info.shape_function_coefficients.shape == (9,)
        assert np.isclose(info.area, 0.5)
        assert np.isclose(info.sub_areas.sum(), 0.5)

    def test_read_only(self, square_two):
        infos, volumes, _ = element_information(square_two.points, square_two.triangles)
        with pytest.raises(ValueError):
            volumes[0] = 1.0
        with pytest.raises(ValueError):
            infos[Triangle(0, 1, 2)].centroid[0] = 1.0
        with pytest.raises(TypeError):
            infos[Triangle(0, 1, 2)] = None


class TestChecks:
    """Test rejection of degenerate and clockwise triangles."""

    def test_collinear(self):
        points = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]])
        with pytest.raises(DegenerateGeometryError) as exc:
            element_information(points, [[0, 1, 2]])
        assert exc.value.triangle == (0, 1, 2)

    def test_nearly_collinear(self):
        points = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 1e-15]])
        with pytest.raises(DegenerateGeometryError):
            check_triangles(points, np.array([[0, 1, 2]]), GeometryParameters())

    def test_clockwise(self, equilateral):
        with pytest.raises(OrientationMismatchError) as exc:
            element_information(equilateral.points, [[0, 2, 1]])
        assert exc.value.triangle == (0, 2, 1)

    def test_orientation_check_disabled(self, equilateral):
        params = GeometryParameters(check_orientation=False)
        infos, volumes, total_area = element_information(equilateral.points, [[0, 2, 1]], params)
        assert np.isclose(total_area, np.sqrt(3) / 4)
        assert np.all(volumes > 0)
