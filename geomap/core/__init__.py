# geomap Core Module
"""
Core map building logic for geomap.

Contains:
- GeologyMap pipeline (load, reproject, fortify, color, plot)
- One-call map rendering
"""

from geomap.core.geology_map import GeologyMap, render_map

__all__ = ["GeologyMap", "render_map"]
