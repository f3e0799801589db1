"""
Heightmap generation.

Interprets a parsed ``HeightmapTemplate`` against the fixed grid topology.
Heights are kept as float32 while steps run and floored to uint8 in
[0, 100] once the template completes.
"""

from collections import deque
from dataclasses import dataclass
from typing import List, Union

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .heightmap_template import (
    AddStep,
    HeightBand,
    HeightmapTemplate,
    HillStep,
    InvertAxes,
    InvertStep,
    MaskStep,
    MultiplyStep,
    PitStep,
    RangeStep,
    SmoothStep,
    Step,
    StraitDirection,
    StraitStep,
    TroughStep,
    parse_template,
    resolve_count,
    resolve_point,
)
from .voronoi_graph import WATER_LEVEL, VoronoiGraph, find_grid_cell

logger = structlog.get_logger()

# Spreading decay per hop for blobs, keyed by desired cell count
BLOB_POWER = {
    1000: 0.93,
    2000: 0.95,
    5000: 0.97,
    10000: 0.98,
    20000: 0.99,
    30000: 0.991,
    40000: 0.993,
    50000: 0.994,
    60000: 0.995,
    70000: 0.9955,
    80000: 0.996,
    90000: 0.9964,
    100000: 0.9973,
}

# Spreading decay per frontier for ridges and troughs
LINE_POWER = {
    1000: 0.75,
    2000: 0.77,
    5000: 0.79,
    10000: 0.81,
    20000: 0.82,
    30000: 0.83,
    40000: 0.84,
    50000: 0.86,
    60000: 0.87,
    70000: 0.88,
    80000: 0.91,
    90000: 0.92,
    100000: 0.93,
}

PLACEMENT_ATTEMPTS = 50


@dataclass
class HeightmapConfig:
    """Map size and resolution the generator works against."""

    width: float
    height: float
    cells_x: int
    cells_y: int
    cells_desired: int = 10000

    @classmethod
    def from_graph(cls, graph: VoronoiGraph) -> "HeightmapConfig":
        return cls(
            width=graph.graph_width,
            height=graph.graph_height,
            cells_x=graph.cells_x,
            cells_y=graph.cells_y,
            cells_desired=graph.cells_desired,
        )


def get_blob_power(cells: int) -> float:
    return BLOB_POWER.get(cells, 0.98)


def get_line_power(cells: int) -> float:
    return LINE_POWER.get(cells, 0.81)


class HeightmapGenerator:
    """
    Sculpts grid elevation from template steps.

    Each primitive reads and writes ``self.heights`` only and clamps every
    value it writes to [0, 100].
    """

    def __init__(self, config: HeightmapConfig, graph: VoronoiGraph, prng: AleaPRNG):
        """
        Args:
            config: Map size and resolution
            graph: Grid providing points and neighbors
            prng: Generator consumed by the random primitives
        """
        self.config = config
        self.graph = graph
        self.prng = prng
        self.n_cells = graph.n_cells

        self.heights = np.zeros(self.n_cells, dtype=np.float32)

        self.blob_power = get_blob_power(config.cells_desired)
        self.line_power = get_line_power(config.cells_desired)

    @staticmethod
    def _lim(value: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        return np.clip(value, 0, 100)

    def _random_cell(self, step: Union[HillStep, PitStep]) -> int:
        x = resolve_point(step.range_x, self.config.width, self.prng)
        y = resolve_point(step.range_y, self.config.height, self.prng)
        return find_grid_cell(x, y, self.graph)

    def from_template(self, template: Union[HeightmapTemplate, str]) -> np.ndarray:
        """
        Run every step of a template on a zeroed elevation array.

        Args:
            template: Parsed template or template text

        Returns:
            uint8 heights in [0, 100]
        """
        if isinstance(template, str):
            template = parse_template(template)

        self.heights = np.zeros(self.n_cells, dtype=np.float32)
        logger.info("Applying heightmap template", template=template.name,
                    steps=len(template), cells=self.n_cells)

        for step in template.steps:
            self.apply_step(step)

        heights = np.floor(self._lim(self.heights)).astype(np.uint8)

        land_cells = int(np.count_nonzero(heights >= WATER_LEVEL))
        if land_cells == 0:
            logger.warning("Heightmap template produced no land", template=template.name)
        elif land_cells == self.n_cells:
            logger.warning("Heightmap template produced no water", template=template.name)
        logger.info("Heightmap generated", land_cells=land_cells,
                    max_height=int(heights.max()), mean_height=float(heights.mean()))
        return heights

    def apply_step(self, step: Step) -> None:
        """Dispatch a single step to its primitive."""
        if isinstance(step, HillStep):
            self.add_hill(step)
        elif isinstance(step, PitStep):
            self.add_pit(step)
        elif isinstance(step, RangeStep):
            self.add_range(step)
        elif isinstance(step, TroughStep):
            self.add_trough(step)
        elif isinstance(step, StraitStep):
            self.add_strait(step)
        elif isinstance(step, MaskStep):
            self.mask(step.power)
        elif isinstance(step, InvertStep):
            self.invert(step.probability, step.axes)
        elif isinstance(step, AddStep):
            self.modify(step.band, add=step.value)
        elif isinstance(step, MultiplyStep):
            self.modify(step.band, multiply=step.value)
        elif isinstance(step, SmoothStep):
            self.smooth(step.blend)
        else:
            raise TypeError(f"Unsupported heightmap step: {type(step).__name__}")

    def add_hill(self, step: HillStep) -> None:
        """Raise one or more blobs that decay outward from their seed cells."""
        count = resolve_count(step.count, self.prng)
        for _ in range(count):
            self._add_one_hill(step)

    def _add_one_hill(self, step: HillStep) -> None:
        # uint8 so decayed values truncate as they spread
        change = np.zeros(self.n_cells, dtype=np.uint8)
        h = int(self._lim(resolve_count(step.height, self.prng)))

        start = self._random_cell(step)
        attempts = 1
        while self.heights[start] + h > 90 and attempts < PLACEMENT_ATTEMPTS:
            start = self._random_cell(step)
            attempts += 1

        change[start] = h
        queue = deque([start])
        neighbors = self.graph.cell_neighbors
        while queue:
            current = queue.popleft()
            for neighbor in neighbors[current]:
                if change[neighbor]:
                    continue
                value = change[current] ** self.blob_power * (self.prng.random() * 0.2 + 0.9)
                change[neighbor] = min(int(value), 255)
                if change[neighbor] > 1:
                    queue.append(neighbor)

        self.heights = self._lim(self.heights + change).astype(np.float32)

    def add_pit(self, step: PitStep) -> None:
        """Lower one or more blobs, starting from land cells where possible."""
        count = resolve_count(step.count, self.prng)
        for _ in range(count):
            self._add_one_pit(step)

    def _add_one_pit(self, step: PitStep) -> None:
        used = np.zeros(self.n_cells, dtype=bool)
        h = float(self._lim(resolve_count(step.height, self.prng)))

        start = self._random_cell(step)
        attempts = 1
        while self.heights[start] < WATER_LEVEL and attempts < PLACEMENT_ATTEMPTS:
            start = self._random_cell(step)
            attempts += 1

        queue = deque([start])
        neighbors = self.graph.cell_neighbors
        while queue:
            current = queue.popleft()
            h = h ** self.blob_power * (self.prng.random() * 0.2 + 0.9)
            if h < 1:
                return
            for neighbor in neighbors[current]:
                if used[neighbor]:
                    continue
                lowered = self.heights[neighbor] - h * (self.prng.random() * 0.2 + 0.9)
                self.heights[neighbor] = self._lim(lowered)
                used[neighbor] = True
                queue.append(neighbor)

    def _get_ridge_path(self, start: int, end: int, used: np.ndarray,
                        shortcut: float) -> List[int]:
        """Greedy walk from start toward end through unused cells.

        Each candidate's distance is halved with probability ``1 - shortcut``
        so the path wanders.
        """
        points = self.graph.points
        path = [start]
        used[start] = True
        current = start
        while current != end:
            best = np.inf
            best_cell = current
            for neighbor in self.graph.cell_neighbors[current]:
                if used[neighbor]:
                    continue
                diff = ((points[end][0] - points[neighbor][0]) ** 2
                        + (points[end][1] - points[neighbor][1]) ** 2)
                if self.prng.random() > shortcut:
                    diff /= 2
                if diff < best:
                    best = diff
                    best_cell = neighbor
            if best == np.inf:
                return path
            current = best_cell
            path.append(current)
            used[current] = True
        return path

    def _random_endpoint(self, start_x: float, start_y: float, max_ratio: float) -> int:
        width, height = self.config.width, self.config.height
        attempts = 0
        while True:
            end_x = self.prng.random() * width * 0.8 + width * 0.1
            end_y = self.prng.random() * height * 0.7 + height * 0.15
            dist = abs(end_y - start_y) + abs(end_x - start_x)
            attempts += 1
            if (width / 8 <= dist <= width * max_ratio) or attempts >= PLACEMENT_ATTEMPTS:
                return find_grid_cell(end_x, end_y, self.graph)

    def _spread_along_path(self, path: List[int], used: np.ndarray, h: float,
                           sign: int) -> int:
        """Apply decaying height change in frontiers around a path.

        Returns the number of frontiers processed.
        """
        queue = list(path)
        layers = 0
        while queue:
            frontier = queue
            queue = []
            layers += 1
            for cell in frontier:
                delta = h * (self.prng.random() * 0.3 + 0.85)
                self.heights[cell] = self._lim(self.heights[cell] + sign * delta)
            h = h ** self.line_power - 1
            if h < 2:
                break
            for cell in frontier:
                for neighbor in self.graph.cell_neighbors[cell]:
                    if not used[neighbor]:
                        queue.append(neighbor)
                        used[neighbor] = True
        return layers

    def _add_prominences(self, path: List[int], layers: int) -> None:
        """Every sixth path cell drags a downhill trail toward its own height."""
        for d, current in enumerate(path):
            if d % 6 != 0:
                continue
            for _ in range(layers):
                neighbors = self.graph.cell_neighbors[current]
                lowest = min(neighbors, key=lambda c: self.heights[c])
                self.heights[lowest] = (self.heights[current] * 2 + self.heights[lowest]) / 3
                current = lowest

    def add_range(self, step: RangeStep) -> None:
        """Raise mountain ridges between random start and end points."""
        count = resolve_count(step.count, self.prng)
        for _ in range(count):
            used = np.zeros(self.n_cells, dtype=bool)
            h = float(self._lim(resolve_count(step.height, self.prng)))

            start_x = resolve_point(step.range_x, self.config.width, self.prng)
            start_y = resolve_point(step.range_y, self.config.height, self.prng)
            end = self._random_endpoint(start_x, start_y, 1 / 3)
            start = find_grid_cell(start_x, start_y, self.graph)

            path = self._get_ridge_path(start, end, used, shortcut=0.85)
            layers = self._spread_along_path(path, used, h, sign=1)
            self._add_prominences(path, layers)

    def add_trough(self, step: TroughStep) -> None:
        """Carve valleys between a land start point and a random end point."""
        count = resolve_count(step.count, self.prng)
        for _ in range(count):
            used = np.zeros(self.n_cells, dtype=bool)
            h = float(self._lim(resolve_count(step.height, self.prng)))

            attempts = 0
            while True:
                start_x = resolve_point(step.range_x, self.config.width, self.prng)
                start_y = resolve_point(step.range_y, self.config.height, self.prng)
                start = find_grid_cell(start_x, start_y, self.graph)
                attempts += 1
                if self.heights[start] >= WATER_LEVEL or attempts >= PLACEMENT_ATTEMPTS:
                    break
            end = self._random_endpoint(start_x, start_y, 1 / 2)

            path = self._get_ridge_path(start, end, used, shortcut=0.8)
            layers = self._spread_along_path(path, used, h, sign=-1)
            self._add_prominences(path, layers)

    def add_strait(self, step: StraitStep) -> None:
        """Cut a low corridor across the map."""
        width = min(resolve_count(step.width, self.prng), self.config.cells_x / 3)
        if width < 1 and self.prng.chance(width):
            return
        if width <= 0:
            return

        used = np.zeros(self.n_cells, dtype=bool)
        graph_w, graph_h = self.config.width, self.config.height
        vertical = step.direction is StraitDirection.VERTICAL

        if vertical:
            start_x = np.floor(self.prng.random() * graph_w * 0.4 + graph_w * 0.3)
            start_y = 5
            end_x = np.floor(graph_w - start_x - graph_w * 0.1 + self.prng.random() * graph_w * 0.2)
            end_y = graph_h - 5
        else:
            start_x = 5
            start_y = np.floor(self.prng.random() * graph_h * 0.4 + graph_h * 0.3)
            end_x = graph_w - 5
            end_y = np.floor(graph_h - start_y - graph_h * 0.1 + self.prng.random() * graph_h * 0.2)

        start = find_grid_cell(start_x, start_y, self.graph)
        end = find_grid_cell(end_x, end_y, self.graph)

        points = self.graph.points
        path = []
        current = start
        # the walk may revisit cells, bound it by the cell count
        for _ in range(self.n_cells):
            if current == end:
                break
            best = np.inf
            for neighbor in self.graph.cell_neighbors[current]:
                diff = ((points[end][0] - points[neighbor][0]) ** 2
                        + (points[end][1] - points[neighbor][1]) ** 2)
                if self.prng.random() > 0.8:
                    diff /= 2
                if diff < best:
                    best = diff
                    current = neighbor
            path.append(current)

        exp_step = 0.1 / width
        carved = []
        while width > 0:
            exponent = 0.9 - exp_step * width
            for cell in path:
                for neighbor in self.graph.cell_neighbors[cell]:
                    if used[neighbor]:
                        continue
                    used[neighbor] = True
                    carved.append(neighbor)
                    value = self.heights[neighbor] ** exponent
                    self.heights[neighbor] = 5 if value > 100 else value
            path = list(carved)
            width -= 1

    def smooth(self, blend: float = 0.5) -> None:
        """Blend each height toward the mean of itself and its neighbors."""
        adjacency = self.graph.adjacency
        degree = np.asarray(adjacency.sum(axis=1)).ravel()
        heights = self.heights.astype(np.float64)
        mean = (adjacency @ heights + heights) / (degree + 1)
        blended = heights * (1 - blend) + mean * blend
        self.heights = self._lim(blended).astype(np.float32)

    def mask(self, power: float = 1) -> None:
        """Fade heights toward the edges, or toward the center for negative power."""
        fr = abs(power) if power else 1
        x = self.graph.points[:, 0]
        y = self.graph.points[:, 1]
        nx = 2 * x / self.config.width - 1
        ny = 2 * y / self.config.height - 1
        distance = (1 - nx ** 2) * (1 - ny ** 2)
        if power < 0:
            distance = 1 - distance
        masked = self.heights * distance
        self.heights = self._lim((self.heights * (fr - 1) + masked) / fr).astype(np.float32)

    def modify(self, band: HeightBand, add: float = 0, multiply: float = 1) -> None:
        """Add to or multiply heights inside a band.

        Land bands keep results above sea level and scale relative to it.
        """
        heights = self.heights.astype(np.float64)
        selected = (heights >= band.low) & (heights <= band.high)
        values = heights[selected]
        land = band.is_land

        if add:
            values = np.maximum(values + add, WATER_LEVEL) if land else values + add
        if multiply != 1:
            values = (values - WATER_LEVEL) * multiply + WATER_LEVEL if land else values * multiply

        heights[selected] = self._lim(values)
        self.heights = heights.astype(np.float32)

    def invert(self, probability: float, axes: InvertAxes) -> None:
        """Mirror the lattice heights along one or both axes with a probability."""
        if not self.prng.chance(probability):
            return

        cells_x, cells_y = self.config.cells_x, self.config.cells_y
        index = np.arange(self.n_cells)
        x = index % cells_x
        y = index // cells_x
        if axes is not InvertAxes.Y:
            x = cells_x - x - 1
        if axes is not InvertAxes.X:
            y = cells_y - y - 1
        self.heights = self.heights[x + y * cells_x].copy()
