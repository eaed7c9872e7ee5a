"""Utility package exports for geomap."""

from geomap.utils.colors import (
    add_color_column,
    categorical_palette,
    derive_colors,
    extract_unit_key,
    parse_rgb,
)
from geomap.utils.fortify import fortify, geometry_parts, join_attributes
from geomap.utils.reproject import align_layers, epsg_code, reproject_layer, resolve_crs
from geomap.utils.shapefile_io import (
    ShapefileSummary,
    inspect_shapefile,
    load_faults,
    load_layer,
    load_polygons,
    normalize_shp_path,
)

__all__ = [
    "ShapefileSummary",
    "add_color_column",
    "align_layers",
    "categorical_palette",
    "derive_colors",
    "epsg_code",
    "extract_unit_key",
    "fortify",
    "geometry_parts",
    "inspect_shapefile",
    "join_attributes",
    "load_faults",
    "load_layer",
    "load_polygons",
    "normalize_shp_path",
    "parse_rgb",
    "reproject_layer",
    "resolve_crs",
]
