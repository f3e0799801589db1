"""
Core terrain generation functionality.
"""

from .voronoi_graph import GridConfig, VoronoiGraph, generate_voronoi_graph
from .heightmap_generator import HeightmapGenerator, HeightmapConfig
from .features import Features, Feature, FeatureType
from .cell_packing import regraph
from .climate import Climate, ClimateOptions, MapCoordinates
from .hydrology import Hydrology, HydrologyOptions, River
from .biomes import BiomeClassifier, BiomeOptions, BiomeTable, get_biome_id

__all__ = ['GridConfig', 'VoronoiGraph', 'generate_voronoi_graph',
           'HeightmapGenerator', 'HeightmapConfig',
           'Features', 'Feature', 'FeatureType', 'regraph',
           'Climate', 'ClimateOptions', 'MapCoordinates',
           'Hydrology', 'HydrologyOptions', 'River',
           'BiomeClassifier', 'BiomeOptions', 'BiomeTable', 'get_biome_id']
