"""End-to-end tests for map generation."""

import pytest
import numpy as np
from py_terrain import (
    ConfigurationError, GenerationCancelled, MapRequest, TemplateError, generate_map
)
from py_terrain.config.heightmap_templates import TEMPLATES, list_templates
from py_terrain.config.settings import Settings
from py_terrain.core.biomes import MARINE, BiomeTable
from py_terrain.core.features import FeatureType
from py_terrain.core.pipeline import STAGES
from py_terrain.core.voronoi_graph import WATER_LEVEL

ISLAND_TEMPLATE = """
Hill 1 90-99 45-55 45-55
Hill 4 20-30 25-75 25-75
Smooth 2
"""


def small_request(**overrides):
    data = dict(seed="pipeline", width=300, height=300, cells_desired=1000,
                template=ISLAND_TEMPLATE)
    data.update(overrides)
    return MapRequest(**data)


@pytest.fixture(scope="module")
def result():
    return generate_map(small_request())


class TestGenerateMap:
    """Test the full pipeline."""

    def test_result_shape(self, result):
        assert result.has_land
        assert result.grid.n_cells == 32 * 32
        assert result.pack.n_cells <= result.grid.n_cells
        assert result.features is result.pack.features
        assert isinstance(result.biome_table, BiomeTable)

    def test_elevation_range(self, result):
        for graph in (result.grid, result.pack):
            assert graph.heights.dtype == np.uint8
            assert graph.heights.max() <= 100

    def test_every_cell_in_one_feature(self, result):
        pack = result.pack
        assert np.all(pack.feature_ids > 0)
        assert sum(f.cells for f in pack.features[1:]) == pack.n_cells
        assert any(f.type is FeatureType.OCEAN for f in pack.features[1:])

    def test_biomes(self, result):
        pack = result.pack
        water = pack.heights < WATER_LEVEL
        assert np.all(pack.biomes[water] == MARINE)
        assert np.all(pack.biomes[~water] != MARINE)
        assert pack.biomes.max() < len(result.biome_table)

    def test_flux_grows_downstream(self, result):
        pack = result.pack
        for river in result.rivers:
            # lakes reset flux to their outflow, so compare within land runs only
            run = []
            for cell_id in river.cells + [-1]:
                if cell_id >= 0 and pack.heights[cell_id] >= WATER_LEVEL:
                    run.append(cell_id)
                    continue
                for upstream, downstream in zip(run, run[1:]):
                    assert pack.flux[downstream] >= pack.flux[upstream]
                run = []

    def test_deterministic(self, result):
        again = generate_map(small_request())
        np.testing.assert_array_equal(result.grid.heights, again.grid.heights)
        np.testing.assert_array_equal(result.pack.points, again.pack.points)
        np.testing.assert_array_equal(result.pack.precipitation, again.pack.precipitation)
        np.testing.assert_array_equal(result.pack.flux, again.pack.flux)
        np.testing.assert_array_equal(result.pack.biomes, again.pack.biomes)
        assert [r.cells for r in result.rivers] == [r.cells for r in again.rivers]

    def test_seed_changes_map(self, result):
        other = generate_map(small_request(seed="another"))
        assert not np.array_equal(result.grid.heights, other.grid.heights)

    def test_named_template(self):
        result = generate_map(small_request(template="volcano"))
        assert result.has_land

    def test_dict_request(self):
        result = generate_map(dict(seed=7, width=300, height=300, cells_desired=1000,
                                   template=ISLAND_TEMPLATE))
        assert result.has_land

    def test_no_land(self):
        result = generate_map(small_request(template="Add -10 all"))
        assert not result.has_land
        assert result.pack.n_cells == result.grid.n_cells
        assert result.rivers == []
        assert np.all(result.pack.biomes == MARINE)


class TestCancellation:
    """Test cancellation between stages."""

    def test_cancel_before_first_stage(self):
        with pytest.raises(GenerationCancelled) as exc_info:
            generate_map(small_request(), should_cancel=lambda: True)
        assert exc_info.value.stage == STAGES[0]

    def test_cancel_after_stages(self):
        calls = []

        def should_cancel():
            calls.append(1)
            return len(calls) == 3

        with pytest.raises(GenerationCancelled) as exc_info:
            generate_map(small_request(), should_cancel=should_cancel)
        assert exc_info.value.stage == STAGES[2]

    def test_never_cancelled(self):
        calls = []

        def should_cancel():
            calls.append(1)
            return False

        generate_map(small_request(), should_cancel=should_cancel)
        assert len(calls) == len(STAGES)


class TestValidation:
    """Test request validation."""

    def test_invalid_request(self):
        with pytest.raises(ConfigurationError):
            MapRequest.create(seed=1, width=-5)
        with pytest.raises(ConfigurationError):
            generate_map(dict(seed=1, cells_desired=0))

    def test_bad_template(self):
        with pytest.raises(TemplateError):
            generate_map(small_request(template="Hill 1 90-99 50"))

    def test_unknown_template_name(self):
        with pytest.raises(ConfigurationError):
            generate_map(small_request(template="nonexistent"))

    def test_limits(self):
        settings = Settings(max_map_width=100)
        with pytest.raises(ConfigurationError):
            generate_map(small_request(), settings=settings)

    def test_latitudes(self):
        with pytest.raises(ConfigurationError):
            generate_map(small_request(lat_n=-40, lat_s=40))

    def test_winds(self):
        with pytest.raises(ConfigurationError):
            MapRequest.create(seed=1, winds=[90, 90])


class TestTemplates:
    """Test generation with every built-in template."""

    @pytest.mark.parametrize("template", list_templates())
    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_builtin_template_completes(self, template, seed):
        result = generate_map(dict(seed=seed, width=600, height=500, cells_desired=2000,
                                   template=template))
        pack = result.pack
        assert pack.heights.max() <= 100
        assert np.all(pack.biomes[pack.heights < WATER_LEVEL] == MARINE)

    @pytest.mark.parametrize("template,seed,width,height,cells", [
        ("highIsland", 3, 1200, 1000, 5000),
        ("mediterranean", 0, 1200, 1000, 5000),
        ("mediterranean", 5, 1200, 1000, 5000),
        ("taklamakan", 3, 1200, 1000, 5000),
        ("archipelago", "a", 600, 500, 2000),
    ])
    def test_hard_depressions_complete(self, template, seed, width, height, cells):
        result = generate_map(dict(seed=seed, width=width, height=height,
                                   cells_desired=cells, template=template))
        lakes = [f for f in result.features[1:] if f.is_lake]
        for lake in lakes:
            assert np.all(result.pack.heights[result.pack.feature_ids == lake.id] < WATER_LEVEL)


class TestInvert:
    """Test mirrored generation."""

    @pytest.mark.parametrize("seed", ["a", "b", "c"])
    def test_appended_invert_mirrors_grid(self, seed):
        text = TEMPLATES["continents"]
        request = dict(seed=seed, width=600, height=500, cells_desired=2000)
        plain = generate_map(dict(request, template=text))
        mirrored = generate_map(dict(request, template=text + "\nInvert 1 horizontal"))

        grid = plain.grid
        index = np.arange(grid.n_cells)
        mirror = (grid.cells_x - index % grid.cells_x - 1) + (index // grid.cells_x) * grid.cells_x
        np.testing.assert_array_equal(mirrored.grid.heights, plain.grid.heights[mirror])

    def test_breach_stays_off_grid_heights(self):
        request = small_request(template=TEMPLATES["continents"])
        breached = generate_map(request)
        kept = generate_map(request.model_copy(update={"open_near_sea_lakes": False}))
        np.testing.assert_array_equal(breached.grid.heights, kept.grid.heights)
