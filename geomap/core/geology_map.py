"""
Geology Map Core Module.

Loads unit polygons and fault traces, reprojects them, flattens them into
vertex tables and draws them with matplotlib.
"""

from pathlib import Path
from typing import Optional, List, Tuple

import geopandas as gpd
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from loguru import logger
from matplotlib.collections import LineCollection, PatchCollection
from matplotlib.lines import Line2D
from matplotlib.patches import Patch, PathPatch
from matplotlib.path import Path as MplPath
from shapely.geometry import MultiPolygon
from shapely.geometry.polygon import orient

from geomap.config import MapConfig
from geomap.utils.colors import derive_colors
from geomap.utils.fortify import fortify, join_attributes
from geomap.utils.reproject import reproject_layer, resolve_crs
from geomap.utils.shapefile_io import (
    load_faults,
    load_polygons,
    validate_geometry_kind,
)

FIGURE_SUFFIXES = (".png", ".pdf", ".svg")


def _orient_polygon(geom):
    """Orient exteriors counter-clockwise and holes clockwise."""
    if geom.geom_type == "Polygon":
        return orient(geom, sign=1.0)
    if geom.geom_type == "MultiPolygon":
        return MultiPolygon([orient(part, sign=1.0) for part in geom.geoms])
    return geom


def _feature_path(feature_vertices: pd.DataFrame) -> MplPath:
    """Build one compound path from all rings of a feature."""
    vertex_list = []
    code_list = []
    for _, ring in feature_vertices.groupby("piece", sort=True):
        ring_xy = ring.sort_values("order")[["x", "y"]].to_numpy(dtype=float)
        if ring_xy.shape[0] < 3:
            continue
        codes = np.full(ring_xy.shape[0], MplPath.LINETO, dtype=MplPath.code_type)
        codes[0] = MplPath.MOVETO
        codes[-1] = MplPath.CLOSEPOLY
        vertex_list.append(ring_xy)
        code_list.append(codes)
    if not vertex_list:
        return MplPath(np.empty((0, 2)))
    return MplPath(np.vstack(vertex_list), np.concatenate(code_list))


def _line_segments(vertices: pd.DataFrame) -> List[np.ndarray]:
    """Split a line vertex table into per-part coordinate arrays."""
    segments = []
    for _, part in vertices.groupby("group", sort=False):
        part_xy = part.sort_values("order")[["x", "y"]].to_numpy(dtype=float)
        if part_xy.shape[0] >= 2:
            segments.append(part_xy)
    return segments


def _axis_labels(crs) -> Tuple[str, str]:
    """Axis labels for a CRS, longitude/latitude for geographic ones."""
    if crs is None:
        return "X", "Y"
    if crs.is_geographic:
        return "Longitude", "Latitude"
    axis_info = crs.axis_info
    if len(axis_info) >= 2:
        return (
            f"{axis_info[0].name} ({axis_info[0].unit_name})",
            f"{axis_info[1].name} ({axis_info[1].unit_name})",
        )
    return "X", "Y"


class GeologyMap:
    """
    Geology map built from unit polygons and optional fault traces.

    Both layers are reprojected to ``config.target_crs``. Polygons get a
    ``unit_key`` and ``color`` derived from ``config.unit_field`` and both
    layers are flattened into vertex tables that drive the plot.

    Examples
    --------
    >>> geo_map = GeologyMap(MapConfig(target_crs="EPSG:32611"))
    >>> geo_map.load("geology.shp", "faults.shp").save("map.png")
    """

    def __init__(self, config: Optional[MapConfig] = None):
        self.config = config if config is not None else MapConfig()
        self.crs = resolve_crs(self.config.target_crs)
        self.polygons_gdf: Optional[gpd.GeoDataFrame] = None
        self.faults_gdf: Optional[gpd.GeoDataFrame] = None
        self.polygon_vertices: Optional[pd.DataFrame] = None
        self.fault_vertices: Optional[pd.DataFrame] = None

    def load(self, polygons_path, faults_path=None) -> "GeologyMap":
        """
        Load polygons and faults from shapefiles and prepare them for plotting.
        """
        polygons_gdf = load_polygons(polygons_path, assume_crs=self.config.assume_crs)
        faults_gdf = None
        if faults_path is not None:
            faults_gdf = load_faults(faults_path, assume_crs=self.config.assume_crs)
        return self.set_layers(polygons_gdf, faults_gdf)

    def set_layers(
        self,
        polygons_gdf: gpd.GeoDataFrame,
        faults_gdf: Optional[gpd.GeoDataFrame] = None,
    ) -> "GeologyMap":
        """
        Prepare in-memory layers.

        Parameters
        ----------
        polygons_gdf : gpd.GeoDataFrame
            Unit polygons carrying ``config.unit_field``.
        faults_gdf : gpd.GeoDataFrame, optional
            Fault lines.

        Returns
        -------
        GeologyMap
            ``self`` for chaining.
        """
        cfg = self.config
        if polygons_gdf.empty:
            raise ValueError("polygon layer is empty")
        validate_geometry_kind(polygons_gdf, "polygon")

        polygons = reproject_layer(polygons_gdf, self.crs, assume_crs=cfg.assume_crs)
        polygons = polygons.reset_index(drop=True)
        oriented = gpd.GeoSeries(
            [_orient_polygon(geom) for geom in polygons.geometry],
            index=polygons.index,
            name=polygons.geometry.name,
            crs=polygons.crs,
        )
        polygons = polygons.set_geometry(oriented)
        unit_keys, colors = derive_colors(
            polygons,
            cfg.unit_field,
            cfg.color_mode,
            unit_pattern=cfg.unit_pattern,
            rgb_pattern=cfg.rgb_pattern,
            cmap_name=cfg.palette,
            missing_color=cfg.missing_color,
        )
        polygons["unit_key"] = unit_keys
        polygons["color"] = colors

        vertices = fortify(polygons)
        self.polygon_vertices = join_attributes(
            vertices, polygons, columns=[cfg.unit_field, "unit_key", "color"]
        )
        self.polygons_gdf = polygons
        logger.info(
            f"Prepared {len(polygons)} polygons "
            f"({len(self.polygon_vertices)} vertices) in {self.crs.name}"
        )

        self.faults_gdf = None
        self.fault_vertices = None
        if faults_gdf is not None:
            if faults_gdf.empty:
                logger.warning("Fault layer is empty, skipping")
            else:
                validate_geometry_kind(faults_gdf, "line")
                faults = reproject_layer(
                    faults_gdf, self.crs, assume_crs=cfg.assume_crs
                ).reset_index(drop=True)
                self.faults_gdf = faults
                self.fault_vertices = fortify(faults)
                logger.info(f"Prepared {len(faults)} fault traces")
        return self

    def legend_entries(self) -> List[Tuple[str, str]]:
        """
        Sorted ``(unit_key, color)`` pairs present on the map.
        """
        if self.polygons_gdf is None:
            return []
        pairs = (
            self.polygons_gdf[["unit_key", "color"]]
            .dropna(subset=["unit_key"])
            .drop_duplicates(subset=["unit_key"])
        )
        return sorted((str(k), str(c)) for k, c in pairs.itertuples(index=False))

    def plot(self, ax=None):
        """
        Draw polygons and faults.

        Parameters
        ----------
        ax : matplotlib.axes.Axes, optional
            Target axes. A new figure is created when omitted.

        Returns
        -------
        matplotlib.figure.Figure
            Figure holding the map.
        """
        if self.polygon_vertices is None:
            raise RuntimeError("No layers loaded, call load() or set_layers() first")
        cfg = self.config
        if ax is None:
            fig, ax = plt.subplots(figsize=cfg.figure_size, dpi=cfg.dpi)
        else:
            fig = ax.figure

        patches = []
        face_colors = []
        for _, feature in self.polygon_vertices.groupby("id", sort=True):
            path = _feature_path(feature)
            if len(path.vertices) == 0:
                continue
            patches.append(PathPatch(path))
            face_colors.append(feature["color"].iloc[0])
        polygon_collection = PatchCollection(
            patches,
            facecolors=face_colors,
            edgecolors=cfg.edge_color,
            linewidths=cfg.edge_width,
            alpha=cfg.fill_alpha,
            zorder=1,
        )
        ax.add_collection(polygon_collection, autolim=True)

        handles = [
            Patch(facecolor=color, edgecolor="none", label=key)
            for key, color in self.legend_entries()
        ]

        if self.fault_vertices is not None:
            segments = _line_segments(self.fault_vertices)
            ax.add_collection(
                LineCollection(
                    segments,
                    colors=cfg.fault_color,
                    linewidths=cfg.fault_width,
                    zorder=2,
                ),
                autolim=True,
            )
            handles.append(
                Line2D([], [], color=cfg.fault_color, linewidth=cfg.fault_width, label="Fault")
            )

        ax.autoscale_view()
        ax.set_aspect("equal", adjustable="datalim")
        x_label, y_label = _axis_labels(self.crs)
        ax.set_xlabel(x_label)
        ax.set_ylabel(y_label)
        ax.set_title(self.crs.name)
        if handles:
            ax.legend(handles=handles, loc="best", fontsize="small", frameon=True)
        return fig

    def save(self, output_path) -> Path:
        """
        Render the map and write it to PNG, PDF or SVG.
        """
        out_path = Path(output_path)
        if out_path.suffix == "":
            out_path = out_path.with_suffix(".png")
        if out_path.suffix.lower() not in FIGURE_SUFFIXES:
            raise ValueError(f"Unsupported figure format: {out_path.suffix}")
        out_path.parent.mkdir(parents=True, exist_ok=True)

        fig = self.plot()
        try:
            fig.savefig(out_path, dpi=self.config.dpi, bbox_inches="tight")
        finally:
            plt.close(fig)
        logger.info(f"Saved map to {out_path}")
        return out_path

    def summary(self) -> dict:
        """
        Counts and metadata of the prepared layers.
        """
        return {
            "crs": self.crs.to_string(),
            "polygons": 0 if self.polygons_gdf is None else len(self.polygons_gdf),
            "polygon_vertices": (
                0 if self.polygon_vertices is None else len(self.polygon_vertices)
            ),
            "faults": 0 if self.faults_gdf is None else len(self.faults_gdf),
            "unit_keys": [key for key, _ in self.legend_entries()],
        }


def render_map(
    polygons_path,
    output_path,
    faults_path=None,
    config: Optional[MapConfig] = None,
) -> Path:
    """
    Load layers, render the map and save it in one call.
    """
    geo_map = GeologyMap(config).load(polygons_path, faults_path)
    return geo_map.save(output_path)
