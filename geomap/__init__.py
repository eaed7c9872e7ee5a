# geomap - Geological Map Tutorial Package
"""
geomap: shapefile loading, reprojection and plotting for geology map posts.

This package provides the helpers behind the blog tutorials:
- Shapefile inspection and loading (polygons and faults)
- Reprojection by EPSG code or PROJ string
- Flattening geometries into vertex tables
- Color codes derived from unit attributes
- Blog post front matter and code chunk parsing
"""

__version__ = "0.1.0"
