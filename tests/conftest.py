"""Shared fixtures building small hand-shaped grids."""

import pytest
import numpy as np
from py_terrain.core.voronoi_graph import GridConfig, generate_voronoi_graph


def island_heights(graph, land_radius=70, lake_radius=15):
    """Ocean everywhere, a round island in the center with a lake in its middle."""
    center = np.array([graph.graph_width / 2, graph.graph_height / 2])
    distance = np.sqrt(((graph.points - center) ** 2).sum(axis=1))
    heights = np.full(graph.n_cells, 5, dtype=np.uint8)
    heights[distance < land_radius] = 50
    heights[distance < lake_radius] = 10
    return heights


@pytest.fixture
def small_graph():
    """20x20 lattice over a 200x200 map."""
    return generate_voronoi_graph(GridConfig(200, 200, 400), seed="small_graph")


@pytest.fixture
def island_graph(small_graph):
    small_graph.heights = island_heights(small_graph)
    return small_graph
