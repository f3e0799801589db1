"""
Biome classification based on temperature, moisture and elevation.

This module implements:
- The biome table (names, colors, habitability, movement cost, icons)
- The moisture/temperature matrix lookup with marine, glacier, wetland
  and hot desert overrides
- Moisture from precipitation, river flux and neighboring land
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
import structlog
from pydantic import BaseModel, Field, ValidationError, model_validator

from .exceptions import ConfigurationError
from .voronoi_graph import WATER_LEVEL, VoronoiGraph
from ..utils.arrays import create_typed_array

logger = structlog.get_logger()

MOISTURE_BANDS = 5
TEMPERATURE_BANDS = 26

MARINE = 0
HOT_DESERT = 1
GLACIER = 11
WETLAND = 12


def _default_matrix() -> List[List[int]]:
    # rows are moisture bands (dry to wet), columns temperature bands (hot to cold)
    return [
        [1] * 20 + [2] * 5 + [10],
        [3] * 3 + [4] * 17 + [9] * 3 + [10] * 3,
        [5] + [6] * 6 + [8] * 11 + [9] * 5 + [10] * 3,
        [5] + [6] * 7 + [8] * 9 + [9] * 6 + [10] * 3,
        [7] * 13 + [8] * 3 + [9] * 7 + [10] * 3,
    ]


class BiomeTable(BaseModel):
    """Biome definitions as parallel arrays indexed by biome id."""

    names: List[str] = Field(description="Biome names, index 0 is marine")
    colors: List[str] = Field(description="Hex colors")
    habitability: List[int] = Field(description="Relative habitability 0-100")
    icons_density: List[int] = Field(description="Relief icon density")
    icons: List[Dict[str, int]] = Field(description="Relief icon weights")
    cost: List[int] = Field(description="Movement cost")
    matrix: List[List[int]] = Field(
        default_factory=_default_matrix,
        description="Biome id per moisture band and temperature band",
    )

    @model_validator(mode="after")
    def check_shape(self) -> "BiomeTable":
        size = len(self.names)
        for name in ("colors", "habitability", "icons_density", "icons", "cost"):
            if len(getattr(self, name)) != size:
                raise ValueError(f"{name} has {len(getattr(self, name))} entries, expected {size}")
        if len(self.matrix) != MOISTURE_BANDS:
            raise ValueError(f"matrix must have {MOISTURE_BANDS} moisture bands")
        for row in self.matrix:
            if len(row) != TEMPERATURE_BANDS:
                raise ValueError(f"matrix rows must have {TEMPERATURE_BANDS} temperature bands")
            for biome_id in row:
                if not 0 <= biome_id < size:
                    raise ValueError(f"matrix references unknown biome {biome_id}")
        if size <= WETLAND:
            raise ValueError(f"table needs at least {WETLAND + 1} biomes")
        return self

    @classmethod
    def create(cls, **data) -> "BiomeTable":
        """Validate a table, raising ConfigurationError on bad input."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid biome table: {e}") from e

    @classmethod
    def default(cls) -> "BiomeTable":
        return cls(
            names=[
                "Marine", "Hot desert", "Cold desert", "Savanna", "Grassland",
                "Tropical seasonal forest", "Temperate deciduous forest",
                "Tropical rainforest", "Temperate rainforest", "Taiga", "Tundra",
                "Glacier", "Wetland",
            ],
            colors=[
                "#466eab", "#fbe79f", "#b5b887", "#d2d082", "#c8d68f", "#b6d95d",
                "#29bc56", "#7dcb35", "#409c43", "#4b6b32", "#96784b", "#d5e7eb",
                "#0b9131",
            ],
            habitability=[0, 4, 10, 22, 30, 50, 100, 80, 90, 12, 4, 0, 12],
            icons_density=[0, 3, 2, 120, 120, 120, 120, 150, 150, 100, 5, 0, 250],
            icons=[
                {},
                {"dune": 3, "cactus": 6, "deadTree": 1},
                {"dune": 9, "deadTree": 1},
                {"acacia": 1, "grass": 9},
                {"grass": 1},
                {"acacia": 8, "palm": 1},
                {"deciduous": 1},
                {"acacia": 5, "palm": 3, "deciduous": 1, "swamp": 1},
                {"deciduous": 6, "swamp": 1},
                {"conifer": 1},
                {"grass": 1},
                {},
                {"swamp": 1},
            ],
            cost=[10, 200, 150, 60, 50, 70, 70, 80, 90, 200, 1000, 5000, 150],
        )

    def __len__(self) -> int:
        return len(self.names)


@dataclass
class BiomeOptions:
    """Biome classification thresholds."""

    glacier_temperature: int = -5
    hot_desert_temperature: int = 25
    hot_desert_moisture: int = 8
    river_moisture_bonus: float = 2.0


def is_wetland(moisture: float, temperature: float, height: int) -> bool:
    if temperature <= -2:
        return False
    if moisture > 40 and height < 25:
        return True
    return moisture > 24 and 24 < height < 60


def get_biome_id(moisture: float, temperature: float, height: int, has_river: bool,
                 table: Optional[BiomeTable] = None,
                 options: Optional[BiomeOptions] = None) -> int:
    """
    Biome for a single cell.

    Args:
        moisture: Cell moisture
        temperature: Cell temperature in degrees
        height: Cell elevation
        has_river: Whether a river flows through the cell
        table: Biome table supplying the matrix
        options: Classification thresholds

    Returns:
        Biome id, 0 if and only if the cell is water
    """
    options = options or BiomeOptions()
    matrix = table.matrix if table is not None else _default_matrix()

    if height < WATER_LEVEL:
        return MARINE
    if temperature < options.glacier_temperature:
        return GLACIER
    if is_wetland(moisture, temperature, height):
        return WETLAND
    if (temperature >= options.hot_desert_temperature and not has_river
            and moisture < options.hot_desert_moisture):
        return HOT_DESERT

    moisture_band = min(int(moisture // 5), MOISTURE_BANDS - 1)
    temperature_band = min(max(20 - int(temperature), 0), TEMPERATURE_BANDS - 1)
    return matrix[max(moisture_band, 0)][temperature_band]


class BiomeClassifier:
    """Assigns a biome to every cell of a packed graph."""

    def __init__(self, graph: VoronoiGraph, table: Optional[BiomeTable] = None,
                 options: Optional[BiomeOptions] = None):
        self.graph = graph
        self.table = table or BiomeTable.default()
        self.options = options or BiomeOptions()

    def calculate_moisture(self) -> np.ndarray:
        """Precipitation averaged with land neighbors, plus river bonus and 4."""
        graph = self.graph
        precipitation = graph.precipitation.astype(np.float64)
        flux = graph.flux if graph.flux is not None else np.zeros(graph.n_cells)
        river_ids = graph.river_ids
        bonus = self.options.river_moisture_bonus

        moisture = np.zeros(graph.n_cells, dtype=np.float64)
        for i in range(graph.n_cells):
            if graph.heights[i] < WATER_LEVEL:
                continue
            own = precipitation[i]
            if river_ids is not None and river_ids[i]:
                own += max(flux[i] / 10, bonus)
            values = [own] + [precipitation[c] for c in graph.cell_neighbors[i]
                              if graph.heights[c] >= WATER_LEVEL]
            moisture[i] = round(4 + sum(values) / len(values), 1)
        return moisture

    def classify(self) -> np.ndarray:
        graph = self.graph
        if graph.precipitation is None or graph.temperatures is None:
            raise ValueError("Graph has no climate data. Apply Climate to the graph first")

        moisture = self.calculate_moisture()
        biomes = create_typed_array(len(self.table), graph.n_cells)
        for i in range(graph.n_cells):
            has_river = graph.river_ids is not None and bool(graph.river_ids[i])
            biomes[i] = get_biome_id(
                moisture[i], int(graph.temperatures[i]), int(graph.heights[i]),
                has_river, self.table, self.options,
            )

        graph.moisture = moisture
        graph.biomes = biomes
        logger.info("Biomes classified", cells=graph.n_cells, counts=self.statistics())
        return biomes

    def statistics(self) -> Dict[str, int]:
        """Cell count per biome name, omitting absent biomes."""
        counts = np.bincount(self.graph.biomes, minlength=len(self.table))
        return {self.table.names[i]: int(c) for i, c in enumerate(counts) if c}
