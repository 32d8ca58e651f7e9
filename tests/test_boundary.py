"""Tests for boundary edges, outward normals and boundary elements."""

import numpy as np
import pytest

from FVM import InputInconsistencyError, Triangle, boundary_edge_matrix, boundary_information
from FVM.boundary import boundary_node_cycle, get_edge_midpoints, get_segment_edges


class TestBoundaryNodeCycle:
    """Test joining segments into one cycle."""

    def test_segments_share_junctions(self, square_segments):
        nodes, types = boundary_node_cycle(square_segments)
        assert nodes == [0, 1, 2, 3]
        assert types == [0, 1, 2, 3]

    def test_single_segment(self):
        nodes, types = boundary_node_cycle([[4, 5, 6, 7]])
        assert nodes == [4, 5, 6, 7]
        assert types == [0, 0, 0, 0]

    def test_single_closed_segment(self):
        """A trailing repeat of the first node is dropped."""
        nodes, _ = boundary_node_cycle([[4, 5, 6, 7, 4]])
        assert nodes == [4, 5, 6, 7]

    def test_junction_mismatch(self):
        with pytest.raises(InputInconsistencyError, match="Segment 1"):
            boundary_node_cycle([[0, 1], [2, 3], [3, 0]])

    def test_empty_segment(self):
        with pytest.raises(InputInconsistencyError):
            boundary_node_cycle([[0, 1, 2], []])

    def test_too_few_nodes(self):
        with pytest.raises(InputInconsistencyError):
            boundary_node_cycle([[0, 1]])

    def test_repeated_node(self):
        with pytest.raises(InputInconsistencyError, match="more than once"):
            boundary_node_cycle([[0, 1, 2, 1, 3]])

    def test_single_node_segment(self):
        """A one-node segment between two others spans no edge."""
        with pytest.raises(InputInconsistencyError, match="Segment 1"):
            boundary_node_cycle([[0, 1, 2], [2], [2, 3, 0]])


class TestBoundaryEdgeMatrix:
    """Test the left/right/apex/type table."""

    def test_square(self, square_two, square_segments):
        E = boundary_edge_matrix(square_two, square_segments)
        assert len(E) == 4
        assert E.left_nodes.tolist() == [0, 1, 2, 3]
        assert E.right_nodes.tolist() == [1, 2, 3, 0]
        assert E.adjacent_nodes.tolist() == [2, 0, 0, 2]
        assert E.types.tolist() == [0, 1, 2, 3]
        assert E.edge(1) == (1, 2, 0, 1)
        assert list(E.edges()) == [(0, 1), (1, 2), (2, 3), (3, 0)]

    def test_apex_makes_positive_triangle(self, rectangle):
        E = boundary_edge_matrix(rectangle, rectangle.boundary_segments())
        for n in range(len(E)):
            u, v, w, _ = E.edge(n)
            assert rectangle.get_adjacent(u, v) == w
            assert (u, v, w) in {R for T in rectangle.index for R in T.rotations()}

    def test_read_only(self, square_two, square_segments):
        E = boundary_edge_matrix(square_two, square_segments)
        with pytest.raises(ValueError):
            E.types[0] = 9

    def test_clockwise_segments(self, square_two):
        with pytest.raises(InputInconsistencyError) as exc:
            boundary_edge_matrix(square_two, [[0, 3, 2, 1]])
        assert exc.value.edge == (0, 3)

    def test_chord_is_not_boundary(self, square_two):
        with pytest.raises(InputInconsistencyError) as exc:
            boundary_edge_matrix(square_two, [[0, 2, 3]])
        assert exc.value.edge == (0, 2)

    def test_segment_helpers(self, square_two, square_segments):
        E = boundary_edge_matrix(square_two, square_segments)
        assert np.allclose(get_edge_midpoints(square_two.points, E)[0], [0.5, 0.0])
        assert get_segment_edges(E, 2).tolist() == [2]


class TestBoundaryNormals:
    """Test outward unit normals."""

    def test_square_compass(self, square_two, square_segments):
        info = boundary_information(square_two, square_segments)
        N = info.normal_information
        assert np.allclose(N.x_normals, [0, 1, 0, -1])
        assert np.allclose(N.y_normals, [-1, 0, 1, 0])
        assert np.allclose(N.normal(0), [0, -1])
        assert N.types.tolist() == [0, 1, 2, 3]

    def test_points_away_from_convex_domain(self, rectangle):
        info = boundary_information(rectangle, rectangle.boundary_segments())
        N = info.normal_information
        n = np.column_stack([N.x_normals, N.y_normals])
        mid = get_edge_midpoints(rectangle.points, info.edge_information)
        centre = rectangle.points.mean(axis=0)
        assert np.allclose(np.linalg.norm(n, axis=1), 1.0)
        assert np.all(np.sum(n * (mid - centre), axis=1) > 0)

    def test_constant_per_side(self, rectangle):
        info = boundary_information(rectangle, rectangle.boundary_segments())
        N = info.normal_information
        for t in set(N.types.tolist()):
            idx = N.types == t
            assert np.allclose(N.x_normals[idx], N.x_normals[idx][0])
            assert np.allclose(N.y_normals[idx], N.y_normals[idx][0])

    def test_reentrant_corner(self, l_shape):
        info = boundary_information(l_shape, l_shape.boundary_segments())
        E, N = info.edge_information, info.normal_information
        edges = list(E.edges())
        assert np.allclose(N.normal(edges.index((5, 4))), [0, 1])
        assert np.allclose(N.normal(edges.index((4, 7))), [1, 0])


class TestBoundaryElements:
    """Test boundary nodes and elements."""

    def test_square(self, square_two, square_segments):
        info = boundary_information(square_two, square_segments)
        assert info.boundary_nodes == (0, 1, 2, 3)
        assert info.boundary_elements == (Triangle(0, 1, 2), Triangle(0, 2, 3))
        assert info.num_boundary_edges == 4

    def test_canonical_and_unique(self, rectangle):
        info = boundary_information(rectangle, rectangle.boundary_segments())
        elements = info.boundary_elements
        assert len(set(elements)) == len(elements)
        assert all(T in rectangle.index for T in elements)
        # Every element on the boundary of a 6 x 5 grid, corners counted once
        assert len(elements) == 2 * (6 + 5) - 2

    def test_all_l_shape_elements_touch_boundary(self, l_shape):
        info = boundary_information(l_shape, [[0, 1, 2, 5, 4, 7, 6, 3]])
        assert set(info.boundary_elements) == set(l_shape.index)
