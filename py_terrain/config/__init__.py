"""
Configuration modules for map generation.
"""

from .heightmap_templates import get_template, list_templates, TEMPLATES
from .settings import Settings, settings

__all__ = ['get_template', 'list_templates', 'TEMPLATES', 'Settings', 'settings']
