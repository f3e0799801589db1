"""Jittered grid and Voronoi cell graph construction."""

import numpy as np
from scipy import sparse
from scipy.spatial import QhullError, Voronoi
from typing import List, Tuple, NamedTuple, Optional
from dataclasses import dataclass, field
import structlog

from .alea_prng import AleaPRNG
from .exceptions import ConfigurationError, GridGeometryError

logger = structlog.get_logger()

# Elevation below this value is water, at or above it is land
WATER_LEVEL = 20


class GridConfig(NamedTuple):
    """Map rectangle and target cell count for grid generation."""
    width: float
    height: float
    cells_desired: int


@dataclass
class VoronoiGraph:
    """Cell graph shared by the grid and the packed graph.

    The grid is built straight from the jittered lattice. The pack is
    re-triangulated by ``regraph`` and additionally carries ``grid_indices``
    plus the per-cell climate, hydrology and biome arrays filled by later
    stages.
    """
    # Grid parameters
    spacing: float
    cells_desired: int
    graph_width: float
    graph_height: float
    seed: str

    # Points data
    boundary_points: np.ndarray
    points: np.ndarray
    cells_x: int
    cells_y: int

    # Cell connectivity data
    cell_neighbors: List[List[int]]
    cell_vertices: List[List[int]]   # polygon vertex ids in ring order
    cell_border_flags: np.ndarray    # 1 if the cell touches a boundary guard point
    heights: np.ndarray              # uint8 elevation in [0, 100]
    cell_areas: np.ndarray

    # Vertex data
    vertex_coordinates: np.ndarray
    vertex_neighbors: List[List[int]]
    vertex_cells: List[List[int]]

    # Packed cell -> grid cell, set by regraph
    grid_indices: Optional[np.ndarray] = field(default=None)

    # Feature markup
    distance_field: Optional[np.ndarray] = field(default=None)
    feature_ids: Optional[np.ndarray] = field(default=None)
    features: Optional[List] = field(default=None)   # index 0 is a placeholder
    haven: Optional[np.ndarray] = field(default=None)
    harbor: Optional[np.ndarray] = field(default=None)

    # Climate
    temperatures: Optional[np.ndarray] = field(default=None)
    precipitation: Optional[np.ndarray] = field(default=None)

    # Hydrology
    flux: Optional[np.ndarray] = field(default=None)
    confluences: Optional[np.ndarray] = field(default=None)
    river_ids: Optional[np.ndarray] = field(default=None)

    # Biomes
    moisture: Optional[np.ndarray] = field(default=None)
    biomes: Optional[np.ndarray] = field(default=None)

    _adjacency: Optional[sparse.csr_matrix] = field(default=None, repr=False)

    @property
    def n_cells(self) -> int:
        return len(self.points)

    def is_land(self, cell_id: int) -> bool:
        return int(self.heights[cell_id]) >= WATER_LEVEL

    @property
    def adjacency(self) -> sparse.csr_matrix:
        """Sparse symmetric cell adjacency matrix, built on first use."""
        if self._adjacency is None:
            rows = []
            cols = []
            for cell_id, neighbors in enumerate(self.cell_neighbors):
                rows.extend([cell_id] * len(neighbors))
                cols.extend(neighbors)
            data = np.ones(len(rows), dtype=np.float64)
            self._adjacency = sparse.csr_matrix(
                (data, (rows, cols)), shape=(self.n_cells, self.n_cells)
            )
        return self._adjacency


def get_jittered_grid(width: float, height: float, spacing: float,
                      prng: AleaPRNG) -> np.ndarray:
    """
    Generate one jittered point per lattice square, row-major.

    Each point is displaced by at most 45% of the spacing on each axis, so it
    never leaves its lattice square and no two points can coincide.

    Args:
        width: Map width
        height: Map height
        spacing: Lattice square size
        prng: Generator used for the jitter

    Returns:
        Array of [x, y] point coordinates
    """
    radius = spacing / 2
    jittering = radius * 0.9
    double_jittering = jittering * 2

    cells_x, cells_y = lattice_size(width, height, spacing)
    points = np.empty((cells_x * cells_y, 2), dtype=np.float64)

    index = 0
    for row in range(cells_y):
        y = radius + row * spacing
        for col in range(cells_x):
            x = radius + col * spacing
            xj = min(round(x + prng.random() * double_jittering - jittering, 2), width)
            yj = min(round(y + prng.random() * double_jittering - jittering, 2), height)
            points[index] = (xj, yj)
            index += 1

    return points


def lattice_size(width: float, height: float, spacing: float) -> Tuple[int, int]:
    """Number of lattice columns and rows covering the map."""
    cells_x = int((width + 0.5 * spacing - 1e-10) / spacing)
    cells_y = int((height + 0.5 * spacing - 1e-10) / spacing)
    return max(cells_x, 1), max(cells_y, 1)


def get_boundary_points(width: float, height: float, spacing: float) -> np.ndarray:
    """
    Generate guard points just outside the map edge.

    They bound every visible cell so no grid cell has an infinite region.
    """
    offset = round(-1 * spacing)
    b_spacing = spacing * 2
    w = width - offset * 2
    h = height - offset * 2

    number_x = max(int(np.ceil(w / b_spacing) - 1), 1)
    number_y = max(int(np.ceil(h / b_spacing) - 1), 1)

    points = []
    for i in range(number_x):
        x = int(np.ceil((w * (i + 0.5)) / number_x + offset))
        points.append([x, offset])
        points.append([x, h + offset])

    for i in range(number_y):
        y = int(np.ceil((h * (i + 0.5)) / number_y + offset))
        points.append([offset, y])
        points.append([w + offset, y])

    return np.array(points, dtype=np.float64)


def build_cell_connectivity(vor: Voronoi, n_points: int) -> Tuple[List[List[int]], np.ndarray]:
    """
    Derive neighbor lists and border flags from the Voronoi ridges.

    Two cells are neighbors when they share a ridge. A cell sharing a ridge
    with a boundary guard point touches the map border.
    """
    ridge_points = np.asarray(vor.ridge_points)
    first, second = ridge_points[:, 0], ridge_points[:, 1]

    inner = (first < n_points) & (second < n_points)
    cell_neighbors = [set() for _ in range(n_points)]
    for p1, p2 in ridge_points[inner]:
        cell_neighbors[p1].add(int(p2))
        cell_neighbors[p2].add(int(p1))

    border_flags = np.zeros(n_points, dtype=np.uint8)
    border_flags[first[(first < n_points) & (second >= n_points)]] = 1
    border_flags[second[(second < n_points) & (first >= n_points)]] = 1

    return [sorted(neighbors) for neighbors in cell_neighbors], border_flags


def build_cell_vertices(vor: Voronoi, n_points: int) -> List[List[int]]:
    """
    Ordered polygon vertex ids for every cell.

    Raises:
        GridGeometryError: If any input point did not get a bounded region.
    """
    cell_vertices = []
    for i in range(n_points):
        region_index = vor.point_region[i]
        region = vor.regions[region_index] if region_index >= 0 else []
        ring = [v for v in region if v != -1]
        if len(ring) < 3:
            raise GridGeometryError(
                f"Triangulation yielded no cell for point {i}; "
                f"{n_points} points produced fewer usable cells"
            )
        cell_vertices.append(ring)
    return cell_vertices


def build_vertex_connectivity(vor: Voronoi,
                              cell_vertices: List[List[int]]) -> Tuple[List[List[int]], List[List[int]]]:
    """Vertex-to-vertex adjacency from finite ridges and vertex-to-cell membership."""
    n_vertices = len(vor.vertices)
    vertex_neighbors = [set() for _ in range(n_vertices)]
    vertex_cells = [set() for _ in range(n_vertices)]

    for ridge in vor.ridge_vertices:
        if -1 in ridge or len(ridge) != 2:
            continue
        v1, v2 = ridge
        vertex_neighbors[v1].add(v2)
        vertex_neighbors[v2].add(v1)

    for cell_id, ring in enumerate(cell_vertices):
        for vertex_id in ring:
            vertex_cells[vertex_id].add(cell_id)

    return ([sorted(v) for v in vertex_neighbors],
            [sorted(c) for c in vertex_cells])


def polygon_area(coordinates: np.ndarray) -> float:
    """Unsigned shoelace area of a polygon ring."""
    if len(coordinates) < 3:
        return 0.0
    x = coordinates[:, 0]
    y = coordinates[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2)


def build_voronoi_graph(points: np.ndarray, boundary_points: np.ndarray, *,
                        spacing: float, cells_desired: int, width: float,
                        height: float, seed: str, cells_x: int,
                        cells_y: int) -> VoronoiGraph:
    """
    Triangulate points with their guard points and wrap the dual as a graph.

    Raises:
        GridGeometryError: On duplicate points or a collapsed triangulation.
    """
    if len(points) == 0:
        raise GridGeometryError("Cannot build a cell graph from zero points")

    all_points = np.vstack([points, boundary_points])
    unique_count = len(np.unique(all_points, axis=0))
    if unique_count != len(all_points):
        raise GridGeometryError(
            f"{len(all_points) - unique_count} duplicate points in point set"
        )

    try:
        vor = Voronoi(all_points)
    except QhullError as exc:
        raise GridGeometryError(f"Triangulation failed: {exc}") from exc

    logger.debug("Voronoi diagram calculated",
                 vertices=len(vor.vertices), ridges=len(vor.ridge_points))

    n_points = len(points)
    cell_neighbors, border_flags = build_cell_connectivity(vor, n_points)
    cell_vertices = build_cell_vertices(vor, n_points)
    vertex_neighbors, vertex_cells = build_vertex_connectivity(vor, cell_vertices)

    cell_areas = np.array(
        [polygon_area(vor.vertices[ring]) for ring in cell_vertices],
        dtype=np.float64,
    )

    return VoronoiGraph(
        spacing=spacing,
        cells_desired=cells_desired,
        graph_width=width,
        graph_height=height,
        seed=seed,
        boundary_points=boundary_points,
        points=points,
        cells_x=cells_x,
        cells_y=cells_y,
        cell_neighbors=cell_neighbors,
        cell_vertices=cell_vertices,
        cell_border_flags=border_flags,
        heights=np.zeros(n_points, dtype=np.uint8),
        cell_areas=cell_areas,
        vertex_coordinates=vor.vertices,
        vertex_neighbors=vertex_neighbors,
        vertex_cells=vertex_cells,
    )


def generate_voronoi_graph(config: GridConfig, seed: str,
                           prng: Optional[AleaPRNG] = None) -> VoronoiGraph:
    """
    Build the full-resolution grid for a map.

    Args:
        config: Map size and desired cell count
        seed: Seed string recorded on the graph
        prng: Generator for the jitter; a fresh one seeded from ``seed``
            is used when omitted

    Returns:
        Grid graph with zeroed heights

    Raises:
        ConfigurationError: For non-positive dimensions or cell count.
        GridGeometryError: If triangulation degenerates.
    """
    if config.width <= 0 or config.height <= 0:
        raise ConfigurationError(
            f"Map dimensions must be positive, got {config.width}x{config.height}"
        )
    if config.cells_desired <= 0:
        raise ConfigurationError(
            f"cells_desired must be positive, got {config.cells_desired}"
        )

    logger.info("Generating Voronoi graph",
                width=config.width, height=config.height,
                cells_desired=config.cells_desired, seed=seed)

    spacing = round(float(np.sqrt((config.width * config.height) / config.cells_desired)), 2)
    if spacing <= 0:
        raise ConfigurationError(
            f"cells_desired={config.cells_desired} is too dense for the map size"
        )
    cells_x, cells_y = lattice_size(config.width, config.height, spacing)

    grid_points = get_jittered_grid(config.width, config.height, spacing,
                                    prng or AleaPRNG(seed))
    boundary_points = get_boundary_points(config.width, config.height, spacing)

    graph = build_voronoi_graph(
        grid_points, boundary_points,
        spacing=spacing,
        cells_desired=config.cells_desired,
        width=config.width,
        height=config.height,
        seed=seed,
        cells_x=cells_x,
        cells_y=cells_y,
    )

    logger.info("Grid generated", spacing=spacing, cells_x=cells_x,
                cells_y=cells_y, cells=graph.n_cells,
                border_cells=int(graph.cell_border_flags.sum()))
    return graph


def find_grid_cell(x: float, y: float, graph: VoronoiGraph) -> int:
    """Index of the lattice cell containing coordinates (x, y)."""
    col = int(np.floor(min(max(x, 0) / graph.spacing, graph.cells_x - 1)))
    row = int(np.floor(min(max(y, 0) / graph.spacing, graph.cells_y - 1)))
    return row * graph.cells_x + col
