"""
Map generation pipeline.

Runs every stage in order on an explicit generation context:
1. Grid: jittered points and Voronoi graph
2. Heightmap: template steps on the grid
3. Grid features: flood fill, water distance field, near-sea lake breach
   on a copy of the grid that feeds the pack
4. Pack: re-graph and packed feature markup
5. Climate: temperature and precipitation
6. Hydrology: lakes, flux and rivers
7. Biomes
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np
import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from .alea_prng import AleaPRNG
from .biomes import BiomeClassifier, BiomeOptions, BiomeTable
from .cell_packing import regraph
from .climate import Climate, ClimateOptions, MapCoordinates
from .exceptions import ConfigurationError, GenerationCancelled
from .features import Feature, Features
from .heightmap_generator import HeightmapConfig, HeightmapGenerator
from .heightmap_template import HeightmapTemplate, parse_template
from .hydrology import Hydrology, HydrologyOptions, River
from .voronoi_graph import WATER_LEVEL, GridConfig, VoronoiGraph, generate_voronoi_graph
from ..config.heightmap_templates import TEMPLATES, get_template
from ..config.settings import Settings, settings as default_settings

logger = structlog.get_logger()

STAGES = ("grid", "heightmap", "grid_features", "pack", "climate", "hydrology", "biomes")


class MapRequest(BaseModel):
    """Inputs for one generated map."""

    seed: Union[int, str] = Field(description="Seed for every random draw")
    width: int = Field(default_factory=lambda: default_settings.default_map_width, gt=0,
                    description="Map width")
    height: int = Field(default_factory=lambda: default_settings.default_map_height, gt=0,
                    description="Map height")
    cells_desired: int = Field(default_factory=lambda: default_settings.default_cells_desired, gt=0,
                    description="Approximate grid cell count")
    template: str = Field(default="continents", description="Template name or template text")

    lat_n: float = Field(default=90, ge=-90, le=90, description="Latitude of the north edge")
    lat_s: float = Field(default=-90, ge=-90, le=90, description="Latitude of the south edge")
    temperature_equator: float = Field(default=25, description="Sea level temperature at the equator")
    temperature_north_pole: float = Field(default=-30, description="Sea level temperature at the north pole")
    temperature_south_pole: float = Field(default=-30, description="Sea level temperature at the south pole")
    precipitation_modifier: float = Field(default=1.0, ge=0, description="Precipitation multiplier")
    winds: Optional[List[int]] = Field(default=None, description="Wind angle per 30 degree tier")

    open_near_sea_lakes: bool = Field(default=True, description="Breach lakes next to the ocean")

    @field_validator("template")
    @classmethod
    def template_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("template must not be blank")
        return value

    @field_validator("winds")
    @classmethod
    def six_winds(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value is not None and len(value) != 6:
            raise ValueError("winds needs one angle per 30 degree tier (6 values)")
        return value

    @classmethod
    def create(cls, **data) -> "MapRequest":
        """Validate a request, raising ConfigurationError on bad input."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid map request: {e}") from e

    def resolve_template(self) -> HeightmapTemplate:
        if self.template in TEMPLATES:
            return get_template(self.template)
        return parse_template(self.template, name="custom")

    def climate_options(self) -> ClimateOptions:
        options = ClimateOptions(
            temperature_equator=self.temperature_equator,
            temperature_north_pole=self.temperature_north_pole,
            temperature_south_pole=self.temperature_south_pole,
            precipitation_modifier=self.precipitation_modifier,
        )
        if self.winds is not None:
            options.winds = list(self.winds)
        return options


@dataclass
class GenerationContext:
    """State handed from stage to stage."""

    request: MapRequest
    settings: Settings
    prng: AleaPRNG
    should_cancel: Optional[Callable[[], bool]] = None
    outputs: Dict[str, Any] = field(default_factory=dict)

    @property
    def seed(self) -> str:
        return str(self.request.seed)

    def checkpoint(self, stage: str) -> None:
        """Raise GenerationCancelled if the caller asked to stop before ``stage``."""
        if self.should_cancel is not None and self.should_cancel():
            logger.info("Generation cancelled", stage=stage, seed=self.seed)
            raise GenerationCancelled(stage)


@dataclass
class MapResult:
    grid: VoronoiGraph
    pack: VoronoiGraph
    features: List[Optional[Feature]]
    rivers: List[River]
    biome_table: BiomeTable
    has_land: bool


def _check_limits(request: MapRequest, settings: Settings) -> None:
    if request.width > settings.max_map_width or request.height > settings.max_map_height:
        raise ConfigurationError(
            f"Map size {request.width}x{request.height} exceeds "
            f"{settings.max_map_width}x{settings.max_map_height}"
        )
    if request.cells_desired > settings.max_cells_desired:
        raise ConfigurationError(
            f"cells_desired={request.cells_desired} exceeds {settings.max_cells_desired}"
        )
    if request.lat_s > request.lat_n:
        raise ConfigurationError(
            f"lat_s={request.lat_s} must not be north of lat_n={request.lat_n}"
        )


def _stage_grid(ctx: GenerationContext) -> None:
    request = ctx.request
    config = GridConfig(request.width, request.height, request.cells_desired)
    ctx.outputs["grid"] = generate_voronoi_graph(config, ctx.seed, ctx.prng)


def _stage_heightmap(ctx: GenerationContext) -> None:
    grid = ctx.outputs["grid"]
    template = ctx.outputs["template"]
    # heightmap draws restart from the seed
    ctx.prng = AleaPRNG(ctx.seed)
    generator = HeightmapGenerator(HeightmapConfig.from_graph(grid), grid, ctx.prng)
    grid.heights = generator.from_template(template)


def _stage_grid_features(ctx: GenerationContext) -> None:
    grid = ctx.outputs["grid"]
    Features(grid).markup_grid()
    source = grid
    if ctx.request.open_near_sea_lakes:
        # breached heights only feed the pack, grid heights stay the template output
        source = replace(grid, heights=grid.heights.copy())
        Features(source).open_near_sea_lakes()
    ctx.outputs["pack_source"] = source


def _stage_pack(ctx: GenerationContext) -> None:
    pack = regraph(ctx.outputs["pack_source"])
    Features(pack).markup_pack(pack)
    ctx.outputs["pack"] = pack


def _stage_climate(ctx: GenerationContext) -> None:
    request = ctx.request
    climate = Climate(
        ctx.outputs["grid"], ctx.prng,
        options=request.climate_options(),
        map_coords=MapCoordinates(lat_n=request.lat_n, lat_s=request.lat_s),
    )
    climate.calculate_temperatures()
    climate.generate_precipitation()
    climate.apply_to_pack(ctx.outputs["pack"])


def _stage_hydrology(ctx: GenerationContext) -> None:
    options = HydrologyOptions(
        max_depression_iterations=ctx.settings.max_depression_iterations,
        lake_elevation_limit=ctx.settings.lake_elevation_limit,
        min_river_flux=ctx.settings.min_river_flux,
    )
    ctx.outputs["rivers"] = Hydrology(ctx.outputs["pack"], options).run()


def _stage_biomes(ctx: GenerationContext) -> None:
    classifier = BiomeClassifier(ctx.outputs["pack"], ctx.outputs["biome_table"], BiomeOptions())
    classifier.classify()


_STAGE_FUNCTIONS = {
    "grid": _stage_grid,
    "heightmap": _stage_heightmap,
    "grid_features": _stage_grid_features,
    "pack": _stage_pack,
    "climate": _stage_climate,
    "hydrology": _stage_hydrology,
    "biomes": _stage_biomes,
}


def generate_map(request: Union[MapRequest, Dict[str, Any]],
                 biome_table: Optional[BiomeTable] = None,
                 should_cancel: Optional[Callable[[], bool]] = None,
                 settings: Optional[Settings] = None) -> MapResult:
    """
    Generate a complete map.

    Args:
        request: Map request or a mapping of its fields
        biome_table: Biome definitions, the default table when omitted
        should_cancel: Polled before each stage; returning True stops
            generation with GenerationCancelled
        settings: Limits and hydrology tuning, the global settings when omitted

    Returns:
        MapResult holding the grid, the packed graph and its features, rivers,
        the biome table used and whether any land exists

    Raises:
        ConfigurationError: For invalid requests, templates or biome tables.
        GridGeometryError: If a triangulation degenerates.
        DepressionResolutionError: If depressions cannot be resolved.
        GenerationCancelled: If ``should_cancel`` returned True between stages.
    """
    if not isinstance(request, MapRequest):
        request = MapRequest.create(**request)
    settings = settings or default_settings
    _check_limits(request, settings)

    ctx = GenerationContext(
        request=request,
        settings=settings,
        prng=AleaPRNG(str(request.seed)),
        should_cancel=should_cancel,
    )
    ctx.outputs["template"] = request.resolve_template()
    ctx.outputs["biome_table"] = biome_table or BiomeTable.default()

    logger.info("Starting map generation", seed=ctx.seed, width=request.width,
                height=request.height, cells_desired=request.cells_desired,
                template=ctx.outputs["template"].name)

    for stage in STAGES:
        ctx.checkpoint(stage)
        logger.debug("Running stage", stage=stage)
        _STAGE_FUNCTIONS[stage](ctx)

    pack = ctx.outputs["pack"]
    has_land = bool(np.any(pack.heights >= WATER_LEVEL))
    if not has_land:
        logger.warning("Generated map has no land", seed=ctx.seed,
                       template=ctx.outputs["template"].name)

    logger.info("Map generation complete", seed=ctx.seed,
                grid_cells=ctx.outputs["grid"].n_cells, pack_cells=pack.n_cells,
                features=len(pack.features) - 1, rivers=len(ctx.outputs["rivers"]))

    return MapResult(
        grid=ctx.outputs["grid"],
        pack=pack,
        features=pack.features,
        rivers=ctx.outputs["rivers"],
        biome_table=ctx.outputs["biome_table"],
        has_land=has_land,
    )
