"""Flatten geometries into one-row-per-vertex tables.

The vertex table is the plotting input: every ring or line part becomes one
``group`` of ordered ``x``/``y`` rows, and interior rings are flagged with
``hole`` so they can be drawn as cut-outs.
"""

from __future__ import annotations

from typing import Iterable

import geopandas as gpd
import numpy as np
import pandas as pd
from shapely.geometry.base import BaseGeometry

VERTEX_COLUMNS = ["id", "piece", "order", "hole", "group", "x", "y"]


def _xy(coords) -> np.ndarray:
    """Return coordinate sequence as ``(N, 2)`` float array."""
    coord_array = np.asarray(coords, dtype=np.float64)
    if coord_array.ndim != 2 or coord_array.shape[0] == 0:
        return np.empty((0, 2), dtype=np.float64)
    return coord_array[:, :2]


def _polygon_rings(polygon) -> list[tuple[np.ndarray, bool]]:
    rings = [(_xy(polygon.exterior.coords), False)]
    rings.extend((_xy(ring.coords), True) for ring in polygon.interiors)
    return rings


def geometry_parts(geom: BaseGeometry) -> list[tuple[np.ndarray, bool]]:
    """Split one geometry into ordered ``(xy, is_hole)`` parts.

    Parameters
    ----------
    geom : shapely.geometry.base.BaseGeometry
        Polygon, line or point geometry, single or multi.

    Returns
    -------
    list[tuple[numpy.ndarray, bool]]
        Parts in drawing order. Polygon exteriors precede their holes.

    Raises
    ------
    TypeError
        Raised for geometry collections and unknown types.
    """
    geom_type = geom.geom_type
    if geom_type == "Polygon":
        return _polygon_rings(geom)
    if geom_type == "MultiPolygon":
        parts: list[tuple[np.ndarray, bool]] = []
        for polygon in geom.geoms:
            parts.extend(_polygon_rings(polygon))
        return parts
    if geom_type in {"LineString", "LinearRing", "Point"}:
        return [(_xy(geom.coords), False)]
    if geom_type in {"MultiLineString", "MultiPoint"}:
        return [(_xy(part.coords), False) for part in geom.geoms]
    raise TypeError(f"Unsupported geometry type: {geom_type}")


def _feature_ids(gdf: gpd.GeoDataFrame, id_field: str | None) -> list:
    """Resolve per-row feature ids and ensure they are unique."""
    if id_field is None:
        return list(range(len(gdf)))
    if id_field not in gdf.columns:
        raise KeyError(f"id field not found: {id_field}")
    id_series = gdf[id_field]
    if id_series.isna().any():
        raise ValueError(f"id field {id_field} contains missing values")
    if id_series.duplicated().any():
        raise ValueError(f"id field {id_field} contains duplicated values")
    return id_series.tolist()


def _vertex_block(feature_id, parts: Iterable[tuple[np.ndarray, bool]]) -> pd.DataFrame:
    """Build vertex rows for one feature."""
    xy_list = []
    piece_list = []
    hole_list = []
    for piece_index, (xy, is_hole) in enumerate(parts, start=1):
        if xy.shape[0] == 0:
            continue
        xy_list.append(xy)
        piece_list.append(np.full(xy.shape[0], piece_index, dtype=int))
        hole_list.append(np.full(xy.shape[0], is_hole, dtype=bool))
    if not xy_list:
        return pd.DataFrame(columns=VERTEX_COLUMNS)

    xy_all = np.vstack(xy_list)
    piece_all = np.concatenate(piece_list)
    return pd.DataFrame(
        {
            "id": [feature_id] * xy_all.shape[0],
            "piece": piece_all,
            "order": np.arange(1, xy_all.shape[0] + 1, dtype=int),
            "hole": np.concatenate(hole_list),
            "group": [f"{feature_id}.{piece}" for piece in piece_all],
            "x": xy_all[:, 0],
            "y": xy_all[:, 1],
        }
    )


def fortify(gdf: gpd.GeoDataFrame, id_field: str | None = None) -> pd.DataFrame:
    """Flatten a layer into a vertex table.

    Parameters
    ----------
    gdf : geopandas.GeoDataFrame
        Layer with polygon, line or point geometries.
    id_field : str, optional
        Attribute used as feature id. Positional row index when omitted.

    Returns
    -------
    pandas.DataFrame
        Columns ``id, piece, order, hole, group, x, y``.

    Examples
    --------
    >>> vertices = fortify(polygons_gdf)
    >>> vertices.groupby("group").size().head()
    """
    if not isinstance(gdf, gpd.GeoDataFrame):
        raise TypeError("gdf must be a GeoDataFrame")
    if gdf.empty:
        raise ValueError("layer is empty")

    feature_ids = _feature_ids(gdf, id_field)
    blocks = []
    for feature_id, geom in zip(feature_ids, gdf.geometry):
        if geom is None or geom.is_empty:
            continue
        blocks.append(_vertex_block(feature_id, geometry_parts(geom)))
    if not blocks:
        raise ValueError("layer has no drawable geometry")

    vertices = pd.concat(blocks, ignore_index=True)
    vertices["hole"] = vertices["hole"].astype(bool)
    return vertices[VERTEX_COLUMNS]


def join_attributes(
    vertices: pd.DataFrame,
    gdf: gpd.GeoDataFrame,
    id_field: str | None = None,
    columns: list[str] | None = None,
) -> pd.DataFrame:
    """Left-join layer attributes onto a vertex table by feature id.

    Parameters
    ----------
    vertices : pandas.DataFrame
        Output of :func:`fortify` built with the same ``id_field``.
    gdf : geopandas.GeoDataFrame
        Source layer.
    id_field : str, optional
        Attribute used as feature id when fortifying.
    columns : list[str], optional
        Attribute subset to join. All non-geometry columns when omitted.

    Returns
    -------
    pandas.DataFrame
        Vertex table with attribute columns, in original vertex order.
    """
    attr_df = pd.DataFrame(gdf.drop(columns=gdf.geometry.name))
    if columns is not None:
        missing = [col for col in columns if col not in attr_df.columns]
        if missing:
            raise KeyError(f"attribute columns not found: {', '.join(missing)}")
        attr_df = attr_df[list(columns)]
    attr_df.index = pd.Index(_feature_ids(gdf, id_field))

    joined = vertices.merge(
        attr_df,
        how="left",
        left_on="id",
        right_index=True,
        suffixes=("", "_attr"),
        validate="many_to_one",
    ).reset_index(drop=True)
    if len(joined) != len(vertices):
        raise ValueError("attribute join changed vertex count")
    return joined
