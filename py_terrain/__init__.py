"""
Procedural terrain generation: Voronoi grid, heightmap templates, features,
hydrology and biomes.

The package only emits structlog events. Applications choose how they are
rendered by calling ``py_terrain.utils.logging.configure_logging(settings)``
once at startup::

    from py_terrain import generate_map
    from py_terrain.config import settings
    from py_terrain.utils.logging import configure_logging

    configure_logging(settings)
    result = generate_map({"seed": 42, "template": "continents"})
"""

from .core.pipeline import GenerationContext, MapRequest, MapResult, generate_map
from .core.exceptions import (
    ConfigurationError,
    DepressionResolutionError,
    GenerationCancelled,
    GridGeometryError,
    TemplateError,
    TerrainError,
)

__version__ = "0.1.0"

__all__ = ['generate_map', 'MapRequest', 'MapResult', 'GenerationContext',
           'TerrainError', 'ConfigurationError', 'TemplateError', 'GridGeometryError',
           'DepressionResolutionError', 'GenerationCancelled']
