"""
Tests for heightmap generation module.
"""

import pytest
import numpy as np
from py_terrain.core.alea_prng import AleaPRNG
from py_terrain.core.features import FeatureType, Features
from py_terrain.core.heightmap_generator import HeightmapConfig, HeightmapGenerator
from py_terrain.core.heightmap_template import (
    InvertAxes, InvertStep, HeightBand, LAND_HEIGHTS, parse_template
)
from py_terrain.core.voronoi_graph import GridConfig, find_grid_cell, generate_voronoi_graph
from py_terrain.config.heightmap_templates import get_template, list_templates


@pytest.fixture
def graph():
    return generate_voronoi_graph(GridConfig(300, 300, 1000), seed="heightmap_test")


def make_generator(graph, seed="heightmap_test"):
    return HeightmapGenerator(HeightmapConfig.from_graph(graph), graph, AleaPRNG(seed))


class TestHeightmapGenerator:
    """Test heightmap generation functionality."""

    def test_initialization(self, graph):
        generator = make_generator(graph)
        assert generator.heights.shape == (graph.n_cells,)
        assert np.all(generator.heights == 0)
        assert generator.blob_power == 0.93
        assert generator.line_power == 0.75

    def test_single_hill_forms_one_island(self, graph):
        generator = make_generator(graph)
        heights = generator.from_template("Hill 1 40-50 50-50 50-50")
        graph.heights = heights

        start = find_grid_cell(150, 150, graph)
        assert 40 <= heights[start] <= 50
        assert heights[start] == heights.max()

        Features(graph).markup_grid()
        land = [f for f in graph.features[1:] if f.land]
        assert len(land) == 1
        assert land[0].type in (FeatureType.ISLAND, FeatureType.LANDMASS)
        assert graph.feature_ids[start] == land[0].id

    def test_hill_decays_outward(self, graph):
        generator = make_generator(graph)
        heights = generator.from_template("Hill 1 50 50 50")
        start = find_grid_cell(150, 150, graph)
        for neighbor in graph.cell_neighbors[start]:
            assert heights[neighbor] < heights[start]

    def test_pit_lowers(self, graph):
        generator = make_generator(graph)
        generator.heights[:] = 60
        generator.apply_step(parse_template("Pit 1 30 50 50").steps[0])
        assert generator.heights.min() < 60
        assert generator.heights.max() == 60

    def test_smooth_flat_unchanged(self, graph):
        generator = make_generator(graph)
        generator.smooth(1.0)
        assert np.all(generator.heights == 0)

        generator.heights[:] = 42
        generator.smooth(0.5)
        np.testing.assert_allclose(generator.heights, 42)

    def test_smooth_reduces_spikes(self, graph):
        generator = make_generator(graph)
        center = find_grid_cell(150, 150, graph)
        generator.heights[center] = 100
        generator.smooth(1.0)
        assert generator.heights[center] < 100
        for neighbor in graph.cell_neighbors[center]:
            assert generator.heights[neighbor] > 0

    def test_modify_land_band(self, graph):
        generator = make_generator(graph)
        generator.heights[:] = 10
        generator.heights[:10] = 60
        generator.modify(LAND_HEIGHTS, multiply=0.5)
        np.testing.assert_allclose(generator.heights[:10], 40)
        np.testing.assert_allclose(generator.heights[10:], 10)

    def test_modify_clamps(self, graph):
        generator = make_generator(graph)
        generator.heights[:] = 90
        generator.modify(HeightBand(0, 100), add=50)
        assert generator.heights.max() == 100
        generator.modify(HeightBand(0, 100), add=-200)
        assert generator.heights.min() == 0

    def test_mask_fades_edges(self, graph):
        generator = make_generator(graph)
        generator.heights[:] = 50
        generator.mask(1)
        corner = find_grid_cell(0, 0, graph)
        center = find_grid_cell(150, 150, graph)
        assert generator.heights[corner] < generator.heights[center]

    def test_invert_mirrors_lattice(self, graph):
        template = parse_template("Hill 1 40-50 20-30 50-50\nHill 1 30 70-80 20-30")
        plain = make_generator(graph).from_template(template)
        mirrored = make_generator(graph).from_template(
            template.appended(InvertStep(1.0, InvertAxes.X))
        )

        cells_x = graph.cells_x
        index = np.arange(graph.n_cells)
        mirror = (cells_x - index % cells_x - 1) + (index // cells_x) * cells_x
        np.testing.assert_array_equal(mirrored, plain[mirror])

    def test_zero_probability_invert_is_noop(self, graph):
        generator = make_generator(graph)
        generator.heights[:10] = 30
        before = generator.heights.copy()
        generator.invert(0.0, InvertAxes.BOTH)
        np.testing.assert_array_equal(generator.heights, before)

    def test_strait_cuts_water(self, graph):
        generator = make_generator(graph)
        generator.heights[:] = 50
        generator.apply_step(parse_template("Strait 2 vertical").steps[0])
        assert generator.heights.min() < 50

    def test_range_and_trough(self, graph):
        generator = make_generator(graph)
        generator.heights[:] = 30
        generator.apply_step(parse_template("Range 1 40 20-80 20-80").steps[0])
        assert generator.heights.max() > 30
        generator.apply_step(parse_template("Trough 1 20 20-80 20-80").steps[0])
        assert generator.heights.min() < 30

    def test_deterministic(self, graph):
        template = get_template("continents")
        heights1 = make_generator(graph, "same").from_template(template)
        heights2 = make_generator(graph, "same").from_template(template)
        np.testing.assert_array_equal(heights1, heights2)

    @pytest.mark.parametrize("name", list_templates())
    def test_templates_stay_in_range(self, graph, name):
        heights = make_generator(graph).from_template(get_template(name))
        assert heights.dtype == np.uint8
        assert heights.min() >= 0
        assert heights.max() <= 100
