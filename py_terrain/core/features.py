"""
Geographic feature detection and markup.

This module handles:
- Flood fill of land and water into connected features
- Ocean/lake and landmass/island classification
- Coastline detection and the coastal distance field
- Feature groups (ocean, sea, gulf, continent, island, isle, lake island)
- Haven and harbor assignment for coastal packed cells
- Breaching lakes that sit next to the ocean
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Tuple

import numpy as np
import structlog

from .voronoi_graph import WATER_LEVEL, VoronoiGraph
from ..utils.arrays import create_typed_array

logger = structlog.get_logger()

# Distance field markers
DEEPER_LAND = 3
LANDLOCKED = 2
LAND_COAST = 1
UNMARKED = 0
WATER_COAST = -1
DEEP_WATER = -2

LAKE_ELEVATION_DELTA = 0.1


class FeatureType(str, Enum):
    OCEAN = "ocean"
    LAKE = "lake"
    ISLAND = "island"
    LANDMASS = "landmass"


@dataclass
class Feature:
    """A maximal connected component of land or water cells."""

    id: int
    type: FeatureType
    land: bool
    border: bool  # touches map edge
    cells: int  # number of member cells
    first_cell: int
    area: float = 0.0
    group: str = ""

    # Lake attributes
    height: Optional[float] = None
    shoreline: List[int] = field(default_factory=list)
    outlet_cell: Optional[int] = None
    closed: bool = False
    flux: float = 0.0
    evaporation: float = 0.0
    temperature: Optional[float] = None
    inlets: List[int] = field(default_factory=list)
    outlet: int = 0  # river id leaving the lake
    river: int = 0  # river id bringing the most water in
    entering_flux: float = 0.0

    @property
    def is_lake(self) -> bool:
        return self.type is FeatureType.LAKE


def classify(land: bool, border: bool) -> FeatureType:
    if land:
        return FeatureType.LANDMASS if border else FeatureType.ISLAND
    return FeatureType.OCEAN if border else FeatureType.LAKE


def markup_distance_field(distance_field: np.ndarray, neighbors: List[List[int]],
                          start: int, increment: int, limit: int = 127) -> None:
    """
    Extend the distance field layer by layer into unmarked cells.

    Cells already holding ``start - increment`` seed the first layer; each
    subsequent layer is one step further, until nothing is marked or the limit
    is reached.
    """
    frontier = np.flatnonzero(distance_field == start - increment).tolist()
    distance = start
    while frontier:
        marked = []
        for cell_id in frontier:
            for neighbor_id in neighbors[cell_id]:
                if distance_field[neighbor_id] == UNMARKED:
                    distance_field[neighbor_id] = distance
                    marked.append(neighbor_id)
        if distance == limit:
            break
        frontier = marked
        distance += increment


class Features:
    """Handles geographic feature detection and markup."""

    def __init__(self, graph: VoronoiGraph):
        """
        Args:
            graph: Grid graph with populated heights
        """
        self.graph = graph
        self.n_cells = graph.n_cells

    def _flood_fill(self, graph: VoronoiGraph) -> Tuple[np.ndarray, np.ndarray, List]:
        """
        Breadth-first fill of same-class cells into features.

        Returns:
            Tuple of (feature_ids, distance_field, features) where index 0 of
            ``features`` is a placeholder so ids start at 1.
        """
        n_cells = graph.n_cells
        is_land = graph.heights >= WATER_LEVEL
        neighbors = graph.cell_neighbors
        border_flags = graph.cell_border_flags
        cell_areas = graph.cell_areas

        feature_ids = np.zeros(n_cells, dtype=np.int64)
        distance_field = np.zeros(n_cells, dtype=np.int8)
        features: List[Optional[Feature]] = [None]

        next_unmarked = 0
        while True:
            while next_unmarked < n_cells and feature_ids[next_unmarked]:
                next_unmarked += 1
            if next_unmarked >= n_cells:
                break

            first_cell = next_unmarked
            feature_id = len(features)
            land = bool(is_land[first_cell])
            border = False
            cell_count = 0
            area = 0.0

            feature_ids[first_cell] = feature_id
            queue = deque([first_cell])
            while queue:
                cell_id = queue.popleft()
                cell_count += 1
                area += cell_areas[cell_id]
                if border_flags[cell_id]:
                    border = True

                for neighbor_id in neighbors[cell_id]:
                    if is_land[neighbor_id] == land:
                        if not feature_ids[neighbor_id]:
                            feature_ids[neighbor_id] = feature_id
                            queue.append(neighbor_id)
                    elif land:
                        distance_field[cell_id] = LAND_COAST
                        distance_field[neighbor_id] = WATER_COAST

            features.append(Feature(
                id=feature_id,
                type=classify(land, border),
                land=land,
                border=border,
                cells=cell_count,
                first_cell=first_cell,
                area=float(area),
            ))

        typed_ids = create_typed_array(len(features), n_cells)
        typed_ids[:] = feature_ids
        return typed_ids, distance_field, features

    def markup_grid(self) -> None:
        """Mark grid features and the water side of the distance field."""
        feature_ids, distance_field, features = self._flood_fill(self.graph)
        markup_distance_field(distance_field, self.graph.cell_neighbors,
                              start=DEEP_WATER, increment=-1, limit=-10)

        self.graph.distance_field = distance_field
        self.graph.feature_ids = feature_ids
        self.graph.features = features

        counts = {kind.value: sum(1 for f in features[1:] if f.type is kind)
                  for kind in FeatureType}
        logger.info("Grid features marked", features=len(features) - 1, **counts)

    def open_near_sea_lakes(self, breach_limit: float = 22) -> int:
        """
        Turn lakes into ocean inlets where a single low coastal cell separates them.

        Returns:
            Number of lakes opened
        """
        graph = self.graph
        features = graph.features
        if not any(f.is_lake for f in features[1:]):
            return 0

        opened = set()
        for cell_id in range(self.n_cells):
            lake_id = int(graph.feature_ids[cell_id])
            if not features[lake_id].is_lake or lake_id in opened:
                continue
            for coast_cell in graph.cell_neighbors[cell_id]:
                if (graph.distance_field[coast_cell] != LAND_COAST
                        or graph.heights[coast_cell] > breach_limit):
                    continue
                touches_ocean = any(
                    features[graph.feature_ids[n]].type is FeatureType.OCEAN
                    for n in graph.cell_neighbors[coast_cell]
                )
                if touches_ocean:
                    graph.heights[coast_cell] = WATER_LEVEL - 1
                    opened.add(lake_id)
                    break

        if opened:
            logger.info("Opened near-sea lakes", lakes=len(opened))
            self.markup_grid()
        return len(opened)

    def markup_pack(self, packed_graph: VoronoiGraph) -> None:
        """
        Mark packed features with the full distance field, groups and havens.

        Also used to re-classify a graph after hydrology turns depressions
        into lakes.
        """
        feature_ids, distance_field, features = self._flood_fill(packed_graph)
        neighbors = packed_graph.cell_neighbors

        markup_distance_field(distance_field, neighbors, start=LANDLOCKED, increment=1)
        markup_distance_field(distance_field, neighbors, start=DEEP_WATER,
                              increment=-1, limit=-10)

        haven, harbor = self._define_havens(packed_graph, distance_field)

        self._define_groups(packed_graph, feature_ids, distance_field, features)
        for feature in features[1:]:
            if feature.is_lake:
                self._define_lake_shore(packed_graph, feature, feature_ids)

        packed_graph.distance_field = distance_field
        packed_graph.feature_ids = feature_ids
        packed_graph.features = features
        packed_graph.haven = haven
        packed_graph.harbor = harbor

        logger.info("Packed features marked", features=len(features) - 1,
                    lakes=sum(1 for f in features[1:] if f.is_lake))

    @staticmethod
    def _define_havens(graph: VoronoiGraph,
                       distance_field: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Closest water neighbor and water neighbor count for coastal land."""
        n_cells = graph.n_cells
        haven = create_typed_array(n_cells, n_cells)
        harbor = np.zeros(n_cells, dtype=np.uint8)
        points = graph.points

        for cell_id in np.flatnonzero(distance_field == LAND_COAST):
            water = [n for n in graph.cell_neighbors[cell_id]
                     if graph.heights[n] < WATER_LEVEL]
            if not water:
                continue
            deltas = points[water] - points[cell_id]
            haven[cell_id] = water[int(np.argmin((deltas ** 2).sum(axis=1)))]
            harbor[cell_id] = len(water)
        return haven, harbor

    @staticmethod
    def _define_groups(graph: VoronoiGraph, feature_ids: np.ndarray,
                       distance_field: np.ndarray, features: List) -> None:
        """Size-based groups; lake groups are refined later by hydrology."""
        grid_cells = graph.cells_desired
        ocean_min = grid_cells / 25
        sea_min = grid_cells / 1000
        continent_min = grid_cells / 10
        island_min = grid_cells / 1000

        adjacent_water: List[Set[int]] = [set() for _ in features]
        for cell_id in np.flatnonzero(distance_field == LAND_COAST):
            for neighbor_id in graph.cell_neighbors[cell_id]:
                if graph.heights[neighbor_id] < WATER_LEVEL:
                    adjacent_water[feature_ids[cell_id]].add(int(feature_ids[neighbor_id]))

        for feature in features[1:]:
            if feature.type is FeatureType.OCEAN:
                if feature.cells > ocean_min:
                    feature.group = "ocean"
                elif feature.cells > sea_min:
                    feature.group = "sea"
                else:
                    feature.group = "gulf"
            elif feature.is_lake:
                feature.group = "freshwater"
            else:
                water = adjacent_water[feature.id]
                if (not feature.border and water
                        and all(features[w].is_lake for w in water)):
                    feature.group = "lake_island"
                elif feature.cells > continent_min:
                    feature.group = "continent"
                elif feature.cells > island_min:
                    feature.group = "island"
                else:
                    feature.group = "isle"

    @staticmethod
    def _define_lake_shore(graph: VoronoiGraph, lake: Feature,
                           feature_ids: np.ndarray) -> None:
        """Shoreline cells and surface height of a lake."""
        shoreline = set()
        for cell_id in np.flatnonzero(feature_ids == lake.id):
            for neighbor_id in graph.cell_neighbors[cell_id]:
                if graph.heights[neighbor_id] >= WATER_LEVEL:
                    shoreline.add(int(neighbor_id))
        lake.shoreline = sorted(shoreline)
        if lake.shoreline:
            min_shore = float(graph.heights[lake.shoreline].min())
        else:
            min_shore = float(WATER_LEVEL)
        lake.height = round(min_shore - LAKE_ELEVATION_DELTA, 2)
