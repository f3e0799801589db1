"""
Climate calculation for temperature and precipitation.

This module implements:
- Latitude-based temperature bands with a tropical zone
- Altitude temperature drop
- Prevailing wind passes depositing precipitation
- Orographic effects and rain shadows

Both fields are computed on the grid, whose row-major lattice the wind passes
walk along, and then copied onto packed cells through ``grid_indices``.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .voronoi_graph import WATER_LEVEL, VoronoiGraph

logger = structlog.get_logger()


def _default_winds() -> List[int]:
    # one angle per 30 degree tier, north to south
    return [225, 45, 225, 315, 135, 315]


def _default_latitude_modifiers() -> List[float]:
    # one entry per 5 degree band from the equator
    return [4, 2, 2, 2, 1, 1, 2, 2, 2, 2, 3, 3, 2, 2, 1, 1, 1, 0.5]


@dataclass
class ClimateOptions:
    """Climate parameters."""

    temperature_equator: float = 25.0
    temperature_north_pole: float = -30.0
    temperature_south_pole: float = -30.0
    height_exponent: float = 1.8
    temperature_lapse_rate: float = 6.5  # degrees per km

    tropic_north: int = 16
    tropic_south: int = -20
    tropical_gradient: float = 0.15

    precipitation_modifier: float = 1.0
    base_precipitation_horizontal: float = 120.0
    base_precipitation_vertical: float = 60.0
    max_passable_elevation: int = 85
    permafrost_threshold: float = -5.0
    coastal_precipitation_divisor: Tuple[int, int] = (10, 20)

    winds: List[int] = field(default_factory=_default_winds)
    latitude_precipitation_modifiers: List[float] = field(
        default_factory=_default_latitude_modifiers
    )


@dataclass
class MapCoordinates:
    """Latitude span covered by the map, north edge to south edge."""

    lat_n: float = 90
    lat_s: float = -90

    @property
    def lat_t(self) -> float:
        return self.lat_n - self.lat_s


class Climate:
    """Computes temperature and precipitation on the grid."""

    def __init__(self, graph: VoronoiGraph, prng: AleaPRNG,
                 options: ClimateOptions = None, map_coords: MapCoordinates = None):
        """
        Args:
            graph: Grid with final heights
            prng: Generator for coastal precipitation
            options: Climate parameters
            map_coords: Latitude span of the map
        """
        self.graph = graph
        self.prng = prng
        self.options = options or ClimateOptions()
        self.map_coords = map_coords or MapCoordinates()

        self.temperatures = None
        self.precipitation = None

    def calculate_temperatures(self) -> np.ndarray:
        """Sea level temperature per lattice row minus altitude drop per cell."""
        opts = self.options
        n_cells = self.graph.n_cells
        cells_x = self.graph.cells_x
        heights = self.graph.heights

        temp_north_tropic = opts.temperature_equator - opts.tropic_north * opts.tropical_gradient
        temp_south_tropic = opts.temperature_equator + opts.tropic_south * opts.tropical_gradient
        northern_gradient = (temp_north_tropic - opts.temperature_north_pole) / (90 - opts.tropic_north)
        southern_gradient = (temp_south_tropic - opts.temperature_south_pole) / (90 + opts.tropic_south)

        def sea_level_temperature(latitude: float) -> float:
            if opts.tropic_south <= latitude <= opts.tropic_north:
                return opts.temperature_equator - abs(latitude) * opts.tropical_gradient
            if latitude > 0:
                return temp_north_tropic - (latitude - opts.tropic_north) * northern_gradient
            return temp_south_tropic + (latitude - opts.tropic_south) * southern_gradient

        altitude = np.maximum(heights.astype(np.float64) - 18, 0) ** opts.height_exponent
        altitude_drop = np.where(
            heights >= WATER_LEVEL,
            np.round(altitude / 1000 * opts.temperature_lapse_rate),
            0,
        )

        temperatures = np.zeros(n_cells, dtype=np.int8)
        for row_start in range(0, n_cells, cells_x):
            y = self.graph.points[row_start][1]
            latitude = self.map_coords.lat_n - (y / self.graph.graph_height) * self.map_coords.lat_t
            row = slice(row_start, min(row_start + cells_x, n_cells))
            values = sea_level_temperature(latitude) - altitude_drop[row]
            temperatures[row] = np.trunc(np.clip(values, -128, 127))

        self.temperatures = temperatures
        logger.info("Temperatures calculated",
                    min=int(temperatures.min()), max=int(temperatures.max()),
                    mean=round(float(temperatures.mean()), 1))
        return temperatures

    def generate_precipitation(self) -> np.ndarray:
        """Pass prevailing winds over the lattice rows and columns."""
        if self.temperatures is None:
            self.calculate_temperatures()

        opts = self.options
        n_cells = self.graph.n_cells
        cells_x, cells_y = self.graph.cells_x, self.graph.cells_y
        cells_number_modifier = (self.graph.cells_desired / 10000) ** 0.25
        modifier = cells_number_modifier * opts.precipitation_modifier
        lat_modifiers = opts.latitude_precipitation_modifiers

        self._precipitation = np.zeros(n_cells, dtype=np.float64)
        self._modifier = modifier

        westerly = []
        easterly = []
        northerly = 0
        southerly = 0

        for row, row_start in enumerate(range(0, n_cells, cells_x)):
            lat = self.map_coords.lat_n - (row / cells_y) * self.map_coords.lat_t
            lat_band = min(int((abs(lat) - 1) / 5), len(lat_modifiers) - 1)
            lat_mod = lat_modifiers[max(lat_band, 0)]
            wind_tier = min(int(abs(lat - 89) / 30), len(opts.winds) - 1)
            is_west, is_east, is_north, is_south = self._wind_directions(opts.winds[wind_tier])

            if is_west:
                westerly.append((row_start, lat_mod))
            if is_east:
                easterly.append((row_start + cells_x - 1, lat_mod))
            if is_north:
                northerly += 1
            if is_south:
                southerly += 1

        base = opts.base_precipitation_horizontal * modifier
        if westerly:
            self._pass_wind([(c, min(base * m, 255)) for c, m in westerly], 1, cells_x)
        if easterly:
            self._pass_wind([(c, min(base * m, 255)) for c, m in easterly], -1, cells_x)

        vertical_total = northerly + southerly
        if northerly:
            lat_mod_n = self._edge_latitude_modifier(self.map_coords.lat_n)
            max_prec = northerly / vertical_total * opts.base_precipitation_vertical * modifier * lat_mod_n
            self._pass_wind([(c, max_prec) for c in range(cells_x)], cells_x, cells_y)
        if southerly:
            lat_mod_s = self._edge_latitude_modifier(self.map_coords.lat_s)
            max_prec = southerly / vertical_total * opts.base_precipitation_vertical * modifier * lat_mod_s
            self._pass_wind([(c, max_prec) for c in range(n_cells - cells_x, n_cells)],
                            -cells_x, cells_y)

        self.precipitation = np.clip(np.floor(self._precipitation), 0, 255).astype(np.uint8)
        logger.info("Precipitation generated",
                    max=int(self.precipitation.max()),
                    mean=round(float(self.precipitation.mean()), 1))
        return self.precipitation

    def _edge_latitude_modifier(self, latitude: float) -> float:
        modifiers = self.options.latitude_precipitation_modifiers
        if self.map_coords.lat_t > 60:
            return float(np.mean(modifiers))
        band = min(max(int((abs(latitude) - 1) / 5), 0), len(modifiers) - 1)
        return modifiers[band]

    @staticmethod
    def _wind_directions(angle: float) -> Tuple[bool, bool, bool, bool]:
        is_west = 40 < angle < 140
        is_east = 220 < angle < 320
        is_north = 100 < angle < 260
        is_south = angle > 280 or angle < 80
        return is_west, is_east, is_north, is_south

    def _pass_wind(self, sources: Sequence[Tuple[int, float]], step: int, steps: int) -> None:
        """Carry humidity from each source cell along ``step`` for ``steps`` cells."""
        heights = self.graph.heights
        temperatures = self.temperatures
        precipitation = self._precipitation
        n_cells = self.graph.n_cells
        opts = self.options
        low, high = opts.coastal_precipitation_divisor

        for first, max_prec in sources:
            humidity = max_prec - heights[first]
            if humidity <= 0:
                continue

            current = first
            for _ in range(steps):
                if not 0 <= current < n_cells:
                    break
                following = current + step
                in_bounds = 0 <= following < n_cells

                if temperatures[current] < opts.permafrost_threshold:
                    current = following
                    continue

                if heights[current] < WATER_LEVEL:
                    if in_bounds and heights[following] >= WATER_LEVEL:
                        precipitation[following] += max(humidity / self.prng.rand(low, high), 1)
                    else:
                        humidity = min(humidity + 5 * self._modifier, max_prec)
                        precipitation[current] += 5 * self._modifier
                    current = following
                    continue

                passable = in_bounds and heights[following] <= opts.max_passable_elevation
                if passable:
                    amount = self._precipitation_amount(humidity, current, following)
                    precipitation[current] += amount
                    evaporation = 1 if amount > 1.5 else 0
                    humidity = min(max(humidity - amount + evaporation, 0), max_prec)
                else:
                    precipitation[current] += humidity
                    humidity = 0
                current = following

    def _precipitation_amount(self, humidity: float, cell: int, following: int) -> float:
        """Normal loss plus orographic lift on the windward slope."""
        heights = self.graph.heights
        normal_loss = max(humidity / (10 * self._modifier), 1)
        diff = max(int(heights[following]) - int(heights[cell]), 0)
        lift = diff * (heights[following] / 70) ** 2
        return min(max(normal_loss + lift, 1), humidity)

    def apply_to_pack(self, pack: VoronoiGraph) -> None:
        """Copy grid temperature and precipitation onto packed cells."""
        if self.temperatures is None:
            self.calculate_temperatures()
        if self.precipitation is None:
            self.generate_precipitation()
        pack.temperatures = self.temperatures[pack.grid_indices]
        pack.precipitation = self.precipitation[pack.grid_indices]
