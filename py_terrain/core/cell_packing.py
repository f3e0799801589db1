"""
Pack derivation (re-graph).

Builds the packed graph used by every stage after feature markup:
1. Drops deep ocean cells and most deep lake cells from the grid
2. Adds intermediate points between distant same-type coastal neighbors
3. Re-triangulates the kept points with the grid's boundary guard points

Resolution is concentrated on land and coastlines while open ocean is
represented only by its coastal ring.
"""

import numpy as np
import structlog

from .exceptions import GridGeometryError
from .features import DEEP_WATER, LAND_COAST, WATER_COAST, FeatureType
from .voronoi_graph import WATER_LEVEL, VoronoiGraph, build_voronoi_graph
from ..utils.arrays import create_typed_array

logger = structlog.get_logger()


def regraph(graph: VoronoiGraph) -> VoronoiGraph:
    """
    Create the packed graph from a marked-up grid.

    Args:
        graph: Grid with heights set and ``Features.markup_grid`` applied

    Returns:
        Packed graph whose ``grid_indices`` map each packed cell to the grid
        cell it came from

    Raises:
        ValueError: If the grid has no distance field yet.
        GridGeometryError: If no cells survive or triangulation fails.
    """
    if graph.distance_field is None or graph.features is None:
        raise ValueError("Grid features are not marked. Call Features.markup_grid() first")

    logger.info("Starting reGraph operation", grid_cells=graph.n_cells)

    cell_types = graph.distance_field
    heights = graph.heights
    features = graph.features
    has_land = bool(np.any(heights >= WATER_LEVEL))
    spacing_squared = graph.spacing ** 2

    new_points = []
    new_heights = []
    new_grid_indices = []
    seen = set()

    for i in range(graph.n_cells):
        height = heights[i]
        cell_type = cell_types[i]

        if has_land:
            # deep water away from any coast
            if height < WATER_LEVEL and cell_type != WATER_COAST and cell_type != DEEP_WATER:
                continue
            # thin out water one step from the coast, always inside lakes
            if cell_type == DEEP_WATER and (
                i % 4 == 0 or features[graph.feature_ids[i]].type is FeatureType.LAKE
            ):
                continue

        x, y = graph.points[i]
        new_points.append((x, y))
        seen.add((x, y))
        new_heights.append(height)
        new_grid_indices.append(i)

        if cell_type != LAND_COAST and cell_type != WATER_COAST:
            continue
        if graph.cell_border_flags[i]:
            continue

        for neighbor_id in graph.cell_neighbors[i]:
            if i > neighbor_id or cell_types[neighbor_id] != cell_type:
                continue
            nx, ny = graph.points[neighbor_id]
            if (y - ny) ** 2 + (x - nx) ** 2 < spacing_squared:
                continue
            midpoint = (round((x + nx) / 2, 1), round((y + ny) / 2, 1))
            if midpoint in seen:
                continue
            seen.add(midpoint)
            new_points.append(midpoint)
            new_heights.append(height)
            new_grid_indices.append(i)

    if not new_points:
        raise GridGeometryError("No cells left after masking deep ocean")

    packed = build_voronoi_graph(
        np.array(new_points, dtype=np.float64),
        graph.boundary_points,
        spacing=graph.spacing,
        cells_desired=graph.cells_desired,
        width=graph.graph_width,
        height=graph.graph_height,
        seed=graph.seed,
        cells_x=graph.cells_x,
        cells_y=graph.cells_y,
    )
    packed.heights = np.array(new_heights, dtype=np.uint8)
    grid_indices = create_typed_array(graph.n_cells, len(new_grid_indices))
    grid_indices[:] = new_grid_indices
    packed.grid_indices = grid_indices

    logger.info("reGraph complete",
                grid_cells=graph.n_cells,
                packed_cells=packed.n_cells,
                coastal_points_added=len(new_grid_indices) - len(set(new_grid_indices)))
    return packed
