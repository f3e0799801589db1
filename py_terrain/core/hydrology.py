"""
Hydrology system for lakes, water flux and rivers.

This module implements:
- Lakes in deep depressions that cannot drain
- Height alteration and iterative depression resolution
- Lake climate data, outlets and closed basins
- Water drainage in descending elevation order with confluences
- River definition with meandering, discharge, length and width
- Lake groups (frozen, lava, dry, sinkhole, salt, freshwater)
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import structlog

from .exceptions import DepressionResolutionError
from .features import Feature, Features, FeatureType
from .voronoi_graph import WATER_LEVEL, VoronoiGraph
from ..utils.arrays import create_typed_array

logger = structlog.get_logger()

# River width model
FLUX_FACTOR = 500
MAX_FLUX_WIDTH = 1
LENGTH_FACTOR = 200
LENGTH_STEP_WIDTH = 1 / LENGTH_FACTOR
LENGTH_PROGRESSION = [n / LENGTH_FACTOR for n in (1, 1, 2, 3, 5, 8, 13, 21, 34)]


@dataclass
class HydrologyOptions:
    """Hydrology parameters."""
    max_depression_iterations: int = 250
    lake_elevation_limit: float = 20  # 80 disables lakes in deep depressions
    max_depression_search: Optional[int] = None  # cells searched per depression, None for unbounded
    min_river_flux: float = 30.0
    min_river_cells: int = 3
    min_discharge: float = 0.0
    min_length: float = 0.0
    meandering: float = 0.5
    height_exponent: float = 1.8


@dataclass
class River:
    """A river from source to mouth.

    ``cells`` may end with -1 when the river pours off the map edge.
    ``points`` holds meandered ``(x, y, flux)`` triples.
    """
    id: int
    cells: List[int]
    source: int
    mouth: int
    discharge: float
    length: float
    width: float
    source_width: float
    width_factor: float
    parent: int = 0
    basin: int = 0
    points: List[Tuple[float, float, float]] = field(default_factory=list)
    tributaries: List[int] = field(default_factory=list)


def get_offset(flux: float, point_index: int, width_factor: float,
               starting_width: float) -> float:
    """Half-width of a river at a given meandered point."""
    if point_index == 0:
        return starting_width
    flux_width = min(flux ** 0.7 / FLUX_FACTOR, MAX_FLUX_WIDTH)
    if point_index < len(LENGTH_PROGRESSION):
        progression = LENGTH_PROGRESSION[point_index]
    else:
        progression = LENGTH_PROGRESSION[-1]
    length_width = point_index * LENGTH_STEP_WIDTH + progression
    return width_factor * (length_width + flux_width) + starting_width


def get_source_width(flux: float) -> float:
    return round(min(max(flux, 0) ** 0.9 / FLUX_FACTOR, MAX_FLUX_WIDTH), 2)


def get_width(offset: float) -> float:
    """Mouth width from the final offset."""
    return round((offset / 1.5) ** 1.8, 2)


def approximate_length(points: List[Tuple[float, float, float]]) -> float:
    length = 0.0
    for previous, current in zip(points, points[1:]):
        length += math.hypot(current[0] - previous[0], current[1] - previous[1])
    return round(length, 2)


class Hydrology:
    """Simulates drainage on a packed graph.

    The graph needs heights, packed feature markup (``Features.markup_pack``),
    per-cell precipitation and temperatures.
    """

    def __init__(self, graph: VoronoiGraph, options: Optional[HydrologyOptions] = None):
        self.graph = graph
        self.options = options or HydrologyOptions()
        self.rivers: List[River] = []

        self._rivers_data: Dict[int, List[int]] = {}
        self._river_parents: Dict[int, int] = {}
        self._next_river = 1
        self._flux: Optional[np.ndarray] = None
        self._confluences: Optional[np.ndarray] = None
        self._river_ids: Optional[np.ndarray] = None
        self._lake_pits: List[int] = []

    def run(self) -> List[River]:
        """Run every hydrology step and return the river list."""
        graph = self.graph
        if graph.features is None or graph.distance_field is None or graph.haven is None:
            raise ValueError("Graph features are not marked. Call Features.markup_pack() first")
        if graph.precipitation is None or graph.temperatures is None:
            raise ValueError("Graph has no climate data. Apply Climate to the graph first")

        logger.info("Starting hydrology", cells=graph.n_cells)
        self.add_lakes_in_deep_depressions()
        h = self.alter_heights()
        self.detect_closed_lakes(h)
        h = self.resolve_depressions(h)
        self.drain_water(h)
        self.define_rivers(h)
        self.calculate_confluence_flux(h)
        self.define_lake_groups()

        logger.info("Hydrology complete", rivers=len(self.rivers),
                    lakes=len(self._lakes()),
                    max_flux=float(graph.flux.max()) if graph.n_cells else 0.0)
        return self.rivers

    def _lakes(self) -> List[Feature]:
        return [f for f in self.graph.features[1:] if f.is_lake]

    def add_lakes_in_deep_depressions(self) -> int:
        """
        Turn land minima that cannot pour anywhere into lakes.

        From each local minimum the search spreads through cells lower than
        the minimum plus ``lake_elevation_limit``. Reaching water or the map
        border means the minimum drains. Otherwise the minimum and its
        equal-height neighbors become a lake and features are re-marked.

        Returns:
            Number of lakes added
        """
        opts = self.options
        if opts.lake_elevation_limit >= 80:
            return 0

        graph = self.graph
        heights = graph.heights
        neighbors = graph.cell_neighbors
        border = graph.cell_border_flags
        max_search = opts.max_depression_search or graph.n_cells
        drained = np.zeros(graph.n_cells, dtype=bool)
        added = 0

        for i in range(graph.n_cells):
            height = int(heights[i])
            if border[i] or height < WATER_LEVEL or drained[i]:
                continue
            if height > min(int(heights[c]) for c in neighbors[i]):
                continue

            threshold = height + opts.lake_elevation_limit
            checked = {i}
            queue = [i]
            drains = False
            while queue and not drains and len(checked) <= max_search:
                current = queue.pop()
                for n in neighbors[current]:
                    if n in checked or heights[n] >= threshold:
                        continue
                    if heights[n] < WATER_LEVEL or border[n]:
                        drains = True
                        break
                    checked.add(n)
                    queue.append(n)

            if drains:
                # any minimum reached from here at or above this height drains too
                for c in checked:
                    if heights[c] >= height:
                        drained[c] = True
                continue

            lake_cells = [i] + [c for c in neighbors[i] if heights[c] == height]
            heights[lake_cells] = WATER_LEVEL - 1
            self._lake_pits.append(i)
            added += 1

        if added:
            logger.info("Lakes added in deep depressions", lakes=added)
            Features(graph).markup_pack(graph)
        return added

    def alter_heights(self) -> np.ndarray:
        """
        Float working heights with a coastal distance tie-breaker.

        Land gets ``t / 100 + mean(neighbor t) / 10000`` added so flat land
        slopes away from the coast. Integer graph heights are not modified.
        """
        graph = self.graph
        distance = graph.distance_field.astype(np.float64)
        degree = np.maximum(np.asarray(graph.adjacency.sum(axis=1)).ravel(), 1)
        mean_distance = (graph.adjacency @ distance) / degree

        h = graph.heights.astype(np.float64)
        land = (graph.heights >= WATER_LEVEL) & (distance >= 1)
        h[land] += distance[land] / 100 + mean_distance[land] / 10000
        return h

    def detect_closed_lakes(self, h: np.ndarray) -> None:
        """Mark lakes whose basin cannot spill to the ocean, the border or a lower lake."""
        graph = self.graph
        features = graph.features
        neighbors = graph.cell_neighbors
        limit = self.options.lake_elevation_limit

        for lake in self._lakes():
            lake.closed = False
            max_elevation = lake.height + limit
            if max_elevation > 99 or not lake.shoreline:
                continue

            lowest = min(lake.shoreline, key=lambda c: h[c])
            deep = True
            queue = [lowest]
            checked = {lowest}
            while queue and deep:
                current = queue.pop()
                for n in neighbors[current]:
                    if n in checked or h[n] >= max_elevation:
                        continue
                    if h[n] < WATER_LEVEL:
                        other = features[graph.feature_ids[n]]
                        if other.type is FeatureType.OCEAN or lake.height > other.height:
                            deep = False
                    elif graph.cell_border_flags[n]:
                        deep = False
                    checked.add(n)
                    queue.append(n)
            lake.closed = deep

    def resolve_depressions(self, h: np.ndarray) -> np.ndarray:
        """
        Raise depressed land cells and lakes until every inland cell drains.

        Lakes are raised over their lowest shore for most of the budget and
        closed in place near its end. When the budget runs out, or the number
        of depressions keeps growing, the cells still being raised are flooded
        into lakes and resolution runs once more with every lake closed in
        place.

        Returns:
            Working heights, recomputed when depressions were flooded

        Raises:
            DepressionResolutionError: If depressions remain after the
                flooded pass.
        """
        iterations, depressions, stuck = self._raise_depressions(h)
        if not depressions:
            return h

        logger.warning("Depressions unresolved, flooding them", iterations=iterations,
                       depressions=depressions, cells=len(stuck))
        self.flood_depressions(stuck)
        h = self.alter_heights()
        self.detect_closed_lakes(h)

        iterations, depressions, _ = self._raise_depressions(h, close_lakes=True)
        if depressions:
            raise DepressionResolutionError("Depressions unresolved", iterations, depressions)
        return h

    def _raise_depressions(self, h: np.ndarray,
                           close_lakes: bool = False) -> Tuple[int, int, List[int]]:
        """
        One resolution pass over the working heights.

        Returns:
            Tuple of (iterations, depressions left, land cells raised in the
            last iteration); no depressions are left on success
        """
        graph = self.graph
        heights = graph.heights
        features = graph.features
        feature_ids = graph.feature_ids
        neighbors = graph.cell_neighbors

        max_iterations = self.options.max_depression_iterations
        check_lake_max_iteration = max_iterations * 0.85
        elevate_lake_max_iteration = max_iterations * 0.75

        lakes = self._lakes()
        land = [i for i in range(graph.n_cells)
                if heights[i] >= WATER_LEVEL and not graph.cell_border_flags[i]]
        land.sort(key=lambda i: h[i])

        def surface(cell_id: int) -> float:
            feature = features[feature_ids[cell_id]]
            if feature.is_lake:
                return feature.height
            return h[cell_id]

        progress = []
        previous = None
        depressions = 0
        raised: List[int] = []
        for iteration in range(max_iterations):
            if not close_lakes and len(progress) > 5 and sum(progress) > 0:
                logger.debug("Depression count is growing", iterations=iteration)
                return iteration, depressions, raised

            depressions = 0
            raised = []

            if iteration < check_lake_max_iteration:
                for lake in lakes:
                    if lake.closed or not lake.shoreline:
                        continue
                    min_height = min(h[s] for s in lake.shoreline)
                    if min_height >= 100 or lake.height > min_height:
                        continue

                    if close_lakes or iteration > elevate_lake_max_iteration:
                        for s in lake.shoreline:
                            h[s] = heights[s]
                        lake.height = min(h[s] for s in lake.shoreline) - 1
                        lake.closed = True
                        continue

                    depressions += 1
                    lake.height = min_height + 0.2

            for i in land:
                min_height = min(surface(c) for c in neighbors[i])
                if min_height >= 100 or h[i] > min_height:
                    continue
                depressions += 1
                h[i] = min_height + 0.1
                raised.append(i)

            if previous is not None:
                progress.append(depressions - previous)
            previous = depressions

            if depressions == 0:
                logger.info("Depressions resolved", iterations=iteration + 1)
                return iteration + 1, 0, []

        return max_iterations, depressions, raised

    def flood_depressions(self, cells: List[int]) -> int:
        """
        Turn depression cells into lake water and re-mark features.

        Returns:
            Number of cells flooded
        """
        if not cells:
            return 0
        graph = self.graph
        graph.heights[cells] = WATER_LEVEL - 1
        Features(graph).markup_pack(graph)
        logger.info("Depressions flooded", cells=len(cells), lakes=len(self._lakes()))
        return len(cells)

    def _define_lake_climate_data(self, h: np.ndarray) -> Dict[int, List[Feature]]:
        """Lake flux, temperature, evaporation and outlet cells.

        Returns:
            Map from outlet cell to the open lakes spilling through it
        """
        graph = self.graph
        prec = graph.precipitation
        temperatures = graph.temperatures
        exponent = self.options.height_exponent

        # lakes filling a deep depression pour over the lowest land around its minimum
        pit_outlets: Dict[int, int] = {}
        for pit in self._lake_pits:
            rim = [c for c in graph.cell_neighbors[pit] if graph.heights[c] >= WATER_LEVEL]
            if not rim or graph.heights[pit] >= WATER_LEVEL:
                continue
            lake_id = int(graph.feature_ids[pit])
            lowest = min(rim, key=lambda c: h[c])
            if lake_id not in pit_outlets or h[lowest] < h[pit_outlets[lake_id]]:
                pit_outlets[lake_id] = lowest

        lake_out_cells: Dict[int, List[Feature]] = {}
        for lake in self._lakes():
            shoreline = lake.shoreline
            lake.flux = float(sum(int(prec[c]) for c in shoreline))
            if lake.cells < 6 or not shoreline:
                lake.temperature = float(temperatures[lake.first_cell])
            else:
                lake.temperature = round(float(np.mean(temperatures[shoreline])), 1)

            height = max(lake.height - 18, 0) ** exponent
            evaporation = ((700 * (lake.temperature + 0.006 * height)) / 50 + 75) / (80 - lake.temperature)
            lake.evaporation = float(round(evaporation * lake.cells))
            lake.inlets = []
            lake.outlet = 0
            lake.river = 0
            lake.entering_flux = 0.0

            if not shoreline:
                continue
            lake.outlet_cell = pit_outlets.get(lake.id, min(shoreline, key=lambda c: h[c]))
            if lake.closed:
                continue
            lake_out_cells.setdefault(lake.outlet_cell, []).append(lake)
        return lake_out_cells

    def _add_cell_to_river(self, cell_id: int, river_id: int) -> None:
        self._rivers_data.setdefault(river_id, []).append(cell_id)

    def _new_river(self, cell_id: int) -> int:
        river_id = self._next_river
        self._next_river += 1
        self._river_ids[cell_id] = river_id
        self._add_cell_to_river(cell_id, river_id)
        return river_id

    def drain_water(self, h: np.ndarray) -> None:
        """
        Accumulate flux from the highest land cell down and proclaim rivers.

        Every land cell adds its precipitation, then passes its whole flux to
        its lowest neighbor (or its haven on the coast). Flux above
        ``min_river_flux`` forms or extends a river.
        """
        graph = self.graph
        n_cells = graph.n_cells
        neighbors = graph.cell_neighbors
        feature_ids = graph.feature_ids

        self._flux = np.zeros(n_cells, dtype=np.float64)
        self._confluences = np.zeros(n_cells, dtype=np.float64)
        self._river_ids = np.zeros(n_cells, dtype=np.int64)
        self._rivers_data = {}
        self._river_parents = {}
        self._next_river = 1

        flux = self._flux
        river_ids = self._river_ids
        min_flux = self.options.min_river_flux
        cells_number_modifier = (graph.cells_desired / 10000) ** 0.25

        land = [i for i in range(n_cells) if h[i] >= WATER_LEVEL]
        land.sort(key=lambda i: h[i], reverse=True)
        lake_out_cells = self._define_lake_climate_data(h)

        for i in land:
            flux[i] += graph.precipitation[i] / cells_number_modifier

            spilling = [lake for lake in lake_out_cells.get(i, [])
                        if lake.flux > lake.evaporation]
            for lake in spilling:
                lake_cell = next(c for c in neighbors[i]
                                 if h[c] < WATER_LEVEL and feature_ids[c] == lake.id)
                flux[lake_cell] += max(lake.flux - lake.evaporation, 0)

                if not lake.river or river_ids[lake_cell] != lake.river:
                    chained = lake.river and any(
                        river_ids[c] == lake.river for c in neighbors[lake_cell]
                    )
                    if chained:
                        river_ids[lake_cell] = lake.river
                        self._add_cell_to_river(lake_cell, lake.river)
                    else:
                        self._new_river(lake_cell)
                lake.outlet = int(river_ids[lake_cell])
                self._flow_down(i, flux[lake_cell], lake.outlet, h)

            if spilling:
                outlet = spilling[0].outlet
                for lake in spilling:
                    for inlet in lake.inlets:
                        self._river_parents[inlet] = outlet

            # near-border cell pours its river off the map
            if graph.cell_border_flags[i] and river_ids[i]:
                self._add_cell_to_river(-1, int(river_ids[i]))
                continue

            if i in lake_out_cells:
                source_lakes = {lake.id for lake in spilling}
                candidates = [c for c in neighbors[i] if feature_ids[c] not in source_lakes]
                if not candidates:
                    continue
                target = min(candidates, key=lambda c: h[c])
            elif graph.harbor[i]:
                target = int(graph.haven[i])
            else:
                target = min(neighbors[i], key=lambda c: h[c])

            if h[i] <= h[target]:
                continue

            if flux[i] < min_flux:
                if h[target] >= WATER_LEVEL:
                    flux[target] += flux[i]
                continue

            if not river_ids[i]:
                self._new_river(i)
            self._flow_down(target, flux[i], int(river_ids[i]), h)

        logger.info("Water drained", river_segments=len(self._rivers_data))

    def _flow_down(self, to_cell: int, from_flux: float, river: int, h: np.ndarray) -> None:
        """Pass flux into a cell, resolving which river continues on a merge."""
        flux = self._flux
        confluences = self._confluences
        river_ids = self._river_ids

        to_flux = flux[to_cell] - confluences[to_cell]
        to_river = int(river_ids[to_cell])

        if to_river:
            if from_flux > to_flux:
                confluences[to_cell] += flux[to_cell]
                if h[to_cell] >= WATER_LEVEL:
                    self._river_parents[to_river] = river
                river_ids[to_cell] = river
            else:
                confluences[to_cell] += from_flux
                if h[to_cell] >= WATER_LEVEL:
                    self._river_parents[river] = to_river
        else:
            river_ids[to_cell] = river

        if h[to_cell] < WATER_LEVEL:
            water_body = self.graph.features[self.graph.feature_ids[to_cell]]
            if water_body.is_lake:
                if not water_body.river or from_flux > water_body.entering_flux:
                    water_body.river = river
                    water_body.entering_flux = from_flux
                water_body.flux += from_flux
                water_body.inlets.append(river)
        else:
            flux[to_cell] += from_flux

        self._add_cell_to_river(to_cell, river)

    def _river_point(self, cells: List[int], index: int) -> Tuple[float, float]:
        cell_id = cells[index]
        if cell_id != -1:
            x, y = self.graph.points[cell_id]
            return float(x), float(y)

        # project the last land cell onto the nearest map edge
        x, y = self.graph.points[cells[index - 1]]
        width, height = self.graph.graph_width, self.graph.graph_height
        nearest = min(y, height - y, x, width - x)
        if nearest == y:
            return float(x), 0.0
        if nearest == height - y:
            return float(x), float(height)
        if nearest == x:
            return 0.0, float(y)
        return float(width), float(y)

    def add_meandering(self, cells: List[int]) -> List[Tuple[float, float, float]]:
        """Interpolate curved points between river cells."""
        heights = self.graph.heights
        flux = self._flux
        meandering = self.options.meandering

        meandered = []
        last_step = len(cells) - 1
        points = [self._river_point(cells, i) for i in range(len(cells))]
        step = 1 if heights[cells[0]] < WATER_LEVEL else 10

        for i in range(last_step + 1):
            cell_id = cells[i]
            x1, y1 = points[i]
            meandered.append((x1, y1, float(flux[cell_id])))
            if i == last_step:
                break

            next_cell = cells[i + 1]
            x2, y2 = points[i + 1]
            if next_cell == -1:
                meandered.append((x2, y2, float(flux[cell_id])))
                break

            dist2 = (x2 - x1) ** 2 + (y2 - y1) ** 2
            if dist2 <= 25 and len(cells) >= 6:
                step += 1
                continue

            meander = meandering + 1 / step + max(meandering - step / 100, 0)
            angle = math.atan2(y2 - y1, x2 - x1)
            sin_meander = math.sin(angle) * meander
            cos_meander = math.cos(angle) * meander

            if step < 20 and (dist2 > 64 or (dist2 > 36 and len(cells) < 5)):
                meandered.append(((x1 * 2 + x2) / 3 - sin_meander,
                                  (y1 * 2 + y2) / 3 + cos_meander, 0.0))
                meandered.append(((x1 + x2 * 2) / 3 + sin_meander / 2,
                                  (y1 + y2 * 2) / 3 - cos_meander / 2, 0.0))
            elif dist2 > 25 or len(cells) < 6:
                meandered.append(((x1 + x2) / 2 - sin_meander,
                                  (y1 + y2) / 2 + cos_meander, 0.0))
            step += 1

        return meandered

    def _basin(self, river_id: int, by_id: Dict[int, River]) -> int:
        visited = {river_id}
        current = river_id
        while True:
            parent = by_id[current].parent
            if not parent or parent == current or parent not in by_id or parent in visited:
                return current
            visited.add(parent)
            current = parent

    def define_rivers(self, h: np.ndarray) -> List[River]:
        """
        Build the river list from drained segments and mark river cells.

        Rivers with too few cells, too little discharge or too short a course
        are dropped from the output only. Flux, river ids and confluences on
        the graph keep every simulated segment. Basins are resolved among the
        kept rivers only.
        """
        graph = self.graph
        opts = self.options
        flux = self._flux

        cells_number_modifier = (graph.cells_desired / 10000) ** 0.25
        default_width_factor = round(1 / cells_number_modifier, 2)
        main_stem_width_factor = default_width_factor * 1.2

        candidates: Dict[int, River] = {}
        for river_id in sorted(self._rivers_data):
            cells = self._rivers_data[river_id]
            if len(cells) < opts.min_river_cells or len(cells) < 2:
                continue

            source = cells[0]
            mouth = cells[-2]
            parent = self._river_parents.get(river_id, 0)
            width_factor = (main_stem_width_factor if not parent or parent == river_id
                            else default_width_factor)
            points = self.add_meandering(cells)
            discharge = float(flux[mouth])
            source_width = get_source_width(float(flux[source]))
            offset = get_offset(discharge, len(points), width_factor, source_width)

            candidates[river_id] = River(
                id=river_id,
                cells=cells,
                source=source,
                mouth=mouth,
                discharge=discharge,
                length=approximate_length(points),
                width=get_width(offset),
                source_width=source_width,
                width_factor=width_factor,
                parent=parent,
                points=points,
            )

        kept_by_id = {r.id: r for r in candidates.values()
                      if r.discharge >= opts.min_discharge and r.length >= opts.min_length}
        for river in kept_by_id.values():
            river.basin = self._basin(river.id, kept_by_id)
            if river.parent in kept_by_id and river.parent != river.id:
                kept_by_id[river.parent].tributaries.append(river.id)

        # cell markup covers every simulated segment, culled or not
        river_ids = create_typed_array(max(self._rivers_data, default=0), graph.n_cells)
        confluences = np.zeros(graph.n_cells, dtype=np.float64)
        for river_id in sorted(self._rivers_data):
            for cell_id in self._rivers_data[river_id]:
                if cell_id < 0 or graph.heights[cell_id] < WATER_LEVEL:
                    continue
                if river_ids[cell_id]:
                    confluences[cell_id] = 1
                else:
                    river_ids[cell_id] = river_id

        kept = list(kept_by_id.values())
        graph.flux = flux
        graph.river_ids = river_ids
        graph.confluences = confluences
        self.rivers = kept

        logger.info("Rivers defined", rivers=len(kept),
                    culled=len(self._rivers_data) - len(kept))
        return kept

    def calculate_confluence_flux(self, h: np.ndarray) -> None:
        """Flux joining at each confluence from all but the largest inflow."""
        graph = self.graph
        confluences = graph.confluences
        for i in np.flatnonzero(confluences):
            influx = sorted(
                (graph.flux[c] for c in graph.cell_neighbors[i]
                 if graph.river_ids[c] and h[c] > h[i]),
                reverse=True,
            )
            confluences[i] = float(sum(influx[1:]))

    def define_lake_groups(self) -> None:
        for lake in self._lakes():
            if lake.temperature is not None and lake.temperature < -3:
                lake.group = "frozen"
            elif lake.height > 60 and lake.cells < 10 and lake.first_cell % 10 == 0:
                lake.group = "lava"
            elif not lake.inlets and not lake.outlet and lake.evaporation > lake.flux * 4:
                lake.group = "dry"
            elif (not lake.inlets and not lake.outlet and lake.cells < 3
                  and lake.first_cell % 10 == 0):
                lake.group = "sinkhole"
            elif not lake.outlet and lake.evaporation > lake.flux:
                lake.group = "salt"
            else:
                lake.group = "freshwater"
