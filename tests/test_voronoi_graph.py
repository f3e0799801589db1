"""Tests for Voronoi graph generation."""

import pytest
import numpy as np
from py_terrain.core.alea_prng import AleaPRNG
from py_terrain.core.exceptions import ConfigurationError, GridGeometryError
from py_terrain.core.voronoi_graph import (
    GridConfig, build_voronoi_graph, generate_voronoi_graph, get_boundary_points,
    get_jittered_grid, find_grid_cell, lattice_size
)


class TestJitteredGrid:
    """Test jittered grid generation."""

    def test_grid_size(self):
        """One point per lattice square."""
        points = get_jittered_grid(100, 100, 10, AleaPRNG("test_seed"))
        assert len(points) == 100

    def test_point_bounds(self):
        points = get_jittered_grid(100, 100, 10, AleaPRNG("test_seed"))
        assert np.all(points[:, 0] >= 0)
        assert np.all(points[:, 0] <= 100)
        assert np.all(points[:, 1] >= 0)
        assert np.all(points[:, 1] <= 100)

    def test_points_stay_in_their_square(self):
        spacing = 10
        points = get_jittered_grid(100, 100, spacing, AleaPRNG("squares"))
        for index, (x, y) in enumerate(points):
            row, col = divmod(index, 10)
            assert col * spacing <= x <= (col + 1) * spacing
            assert row * spacing <= y <= (row + 1) * spacing

    def test_jittering_consistency(self):
        points1 = get_jittered_grid(50, 50, 5, AleaPRNG("test_seed"))
        points2 = get_jittered_grid(50, 50, 5, AleaPRNG("test_seed"))
        np.testing.assert_array_equal(points1, points2)

    def test_different_seeds(self):
        points1 = get_jittered_grid(50, 50, 5, AleaPRNG("seed1"))
        points2 = get_jittered_grid(50, 50, 5, AleaPRNG("seed2"))
        assert not np.array_equal(points1, points2)


class TestBoundaryPoints:
    """Test boundary point generation."""

    def test_boundary_outside_map(self):
        boundary = get_boundary_points(100, 100, 10)
        assert len(boundary) > 0
        outside = ((boundary[:, 0] < 0) | (boundary[:, 0] > 100)
                   | (boundary[:, 1] < 0) | (boundary[:, 1] > 100))
        assert np.all(outside)


class TestVoronoiGraph:
    """Test full graph generation."""

    @pytest.fixture
    def graph(self):
        return generate_voronoi_graph(GridConfig(200, 200, 400), seed="graph_test")

    def test_graph_shape(self, graph):
        cells_x, cells_y = lattice_size(200, 200, graph.spacing)
        assert graph.n_cells == cells_x * cells_y == 400
        assert graph.cells_x == 20
        assert graph.cells_y == 20
        assert graph.heights.dtype == np.uint8
        assert np.all(graph.heights == 0)

    def test_neighbors_symmetric(self, graph):
        for cell_id, neighbors in enumerate(graph.cell_neighbors):
            assert cell_id not in neighbors
            for neighbor_id in neighbors:
                assert cell_id in graph.cell_neighbors[neighbor_id]

    def test_border_flags(self, graph):
        # first and last lattice rows touch the map edge
        assert np.all(graph.cell_border_flags[:graph.cells_x] == 1)
        assert np.all(graph.cell_border_flags[-graph.cells_x:] == 1)
        center = find_grid_cell(100, 100, graph)
        assert graph.cell_border_flags[center] == 0

    def test_cell_polygons(self, graph):
        assert all(len(ring) >= 3 for ring in graph.cell_vertices)
        assert np.all(graph.cell_areas > 0)

    def test_vertex_cells_consistent(self, graph):
        for cell_id, ring in enumerate(graph.cell_vertices):
            for vertex_id in ring:
                assert cell_id in graph.vertex_cells[vertex_id]

    def test_deterministic(self):
        config = GridConfig(150, 100, 300)
        graph1 = generate_voronoi_graph(config, seed="same")
        graph2 = generate_voronoi_graph(config, seed="same")
        np.testing.assert_array_equal(graph1.points, graph2.points)
        assert graph1.cell_neighbors == graph2.cell_neighbors

    def test_adjacency_matches_neighbors(self, graph):
        degree = np.asarray(graph.adjacency.sum(axis=1)).ravel()
        assert list(degree) == [len(n) for n in graph.cell_neighbors]

    def test_invalid_config(self):
        with pytest.raises(ConfigurationError):
            generate_voronoi_graph(GridConfig(0, 100, 100), seed="bad")
        with pytest.raises(ConfigurationError):
            generate_voronoi_graph(GridConfig(100, 100, 0), seed="bad")

    def test_duplicate_points_rejected(self):
        points = np.array([[10.0, 10.0], [10.0, 10.0], [50.0, 50.0]])
        with pytest.raises(GridGeometryError):
            build_voronoi_graph(
                points, get_boundary_points(100, 100, 10),
                spacing=10, cells_desired=3, width=100, height=100,
                seed="dup", cells_x=1, cells_y=1,
            )


class TestFindGridCell:
    """Test coordinate to lattice cell lookup."""

    def test_corners(self):
        graph = generate_voronoi_graph(GridConfig(100, 100, 100), seed="find")
        assert find_grid_cell(0, 0, graph) == 0
        assert find_grid_cell(100, 100, graph) == graph.n_cells - 1
        assert find_grid_cell(15, 5, graph) == 1
        assert find_grid_cell(5, 15, graph) == graph.cells_x
