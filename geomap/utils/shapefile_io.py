"""Shapefile readers for geology polygons and fault lines."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import geopandas as gpd
import shapefile
from loguru import logger

from geomap.utils.reproject import resolve_crs

GEOMETRY_KINDS = {
    "polygon": {"Polygon", "MultiPolygon"},
    "line": {"LineString", "MultiLineString"},
}


@dataclass
class ShapefileSummary:
    """Header information of one shapefile dataset.

    Parameters
    ----------
    path : Path
        Path of the ``.shp`` file.
    shape_type : str
        pyshp shape type name, e.g. ``POLYGON``.
    record_count : int
        Number of records in the attribute table.
    bbox : tuple[float, float, float, float]
        ``(xmin, ymin, xmax, ymax)`` from the file header.
    fields : list[str]
        Attribute field names.
    crs_wkt : str | None
        Content of the ``.prj`` sidecar when present.
    """

    path: Path
    shape_type: str
    record_count: int
    bbox: tuple[float, float, float, float]
    fields: list[str] = field(default_factory=list)
    crs_wkt: str | None = None


def normalize_shp_path(path: str | Path) -> Path:
    """Append ``.shp`` unless the path already ends with it.

    Dotted layer names such as ``ca.geology`` keep their full name.

    Parameters
    ----------
    path : str | Path
        User-provided shapefile path, with or without suffix.

    Returns
    -------
    pathlib.Path
        Path with ``.shp`` extension.
    """
    path_obj = Path(path)
    if path_obj.suffix.lower() == ".shp":
        return path_obj
    return path_obj.with_name(path_obj.name + ".shp")


def _read_prj(shp_path: Path) -> str | None:
    """Read PRJ sidecar text when it exists."""
    prj_path = shp_path.with_suffix(".prj")
    if not prj_path.exists():
        return None
    text = prj_path.read_text(encoding="utf-8").strip()
    return text or None


def _require_exists(shp_path: Path) -> None:
    if not shp_path.exists():
        raise FileNotFoundError(f"Shapefile not found: {shp_path}")


def inspect_shapefile(path: str | Path) -> ShapefileSummary:
    """Read shapefile header, fields and CRS without loading geometries.

    Parameters
    ----------
    path : str | Path
        Shapefile path.

    Returns
    -------
    ShapefileSummary
        Header summary.

    Examples
    --------
    >>> summary = inspect_shapefile("geology.shp")
    >>> summary.shape_type
    'POLYGON'
    """
    shp_path = normalize_shp_path(path)
    _require_exists(shp_path)
    with shapefile.Reader(str(shp_path)) as reader:
        # First field entry is the dBase deletion flag.
        field_names = [f[0] for f in reader.fields if f[0] != "DeletionFlag"]
        summary = ShapefileSummary(
            path=shp_path,
            shape_type=reader.shapeTypeName,
            record_count=len(reader),
            bbox=tuple(float(v) for v in reader.bbox),
            fields=field_names,
            crs_wkt=_read_prj(shp_path),
        )
    logger.debug(
        f"Inspected {shp_path.name}: {summary.shape_type}, "
        f"{summary.record_count} records"
    )
    return summary


def validate_geometry_kind(gdf: gpd.GeoDataFrame, expected: str | None) -> None:
    """Check that every geometry belongs to the expected kind.

    Parameters
    ----------
    gdf : geopandas.GeoDataFrame
        Loaded layer.
    expected : str | None
        ``polygon``, ``line`` or ``None`` to accept anything.

    Raises
    ------
    ValueError
        Raised when the kind is unknown or geometry types mismatch.
    """
    if expected is None:
        return
    if expected not in GEOMETRY_KINDS:
        raise ValueError(f"Unsupported geometry kind: {expected}")
    geom_types = set(gdf.geometry.geom_type.unique().tolist())
    unexpected = geom_types - GEOMETRY_KINDS[expected]
    if unexpected:
        raise ValueError(
            f"Expected {expected} geometry, got {', '.join(sorted(unexpected))}"
        )


def _drop_empty_geometries(gdf: gpd.GeoDataFrame, label: str) -> gpd.GeoDataFrame:
    """Drop rows whose geometry is null or empty."""
    bad_mask = gdf.geometry.isna() | gdf.geometry.is_empty
    if not bad_mask.any():
        return gdf
    logger.warning(f"Dropping {int(bad_mask.sum())} empty geometries from {label}")
    return gdf.loc[~bad_mask].copy()


def load_layer(
    path: str | Path,
    expected: str | None = None,
    assume_crs: str | None = None,
) -> gpd.GeoDataFrame:
    """Load one shapefile layer as GeoDataFrame.

    Parameters
    ----------
    path : str | Path
        Shapefile path.
    expected : str, optional
        Required geometry kind, ``polygon`` or ``line``.
    assume_crs : str, optional
        CRS assigned when the file carries none.

    Returns
    -------
    geopandas.GeoDataFrame
        Non-empty layer with validated geometry kind.
    """
    shp_path = normalize_shp_path(path)
    _require_exists(shp_path)
    gdf = gpd.read_file(shp_path)
    if gdf.empty:
        raise ValueError(f"Shapefile has no features: {shp_path}")

    gdf = _drop_empty_geometries(gdf, shp_path.name)
    if gdf.empty:
        raise ValueError(f"Shapefile has only empty geometries: {shp_path}")
    validate_geometry_kind(gdf, expected)

    if gdf.crs is None and assume_crs:
        logger.info(f"{shp_path.name} has no CRS, assuming {assume_crs}")
        gdf = gdf.set_crs(resolve_crs(assume_crs))

    logger.info(f"Loaded {len(gdf)} features from {shp_path.name}")
    return gdf


def load_polygons(
    path: str | Path, assume_crs: str | None = None
) -> gpd.GeoDataFrame:
    """Load geologic unit polygons."""
    return load_layer(path, expected="polygon", assume_crs=assume_crs)


def load_faults(path: str | Path, assume_crs: str | None = None) -> gpd.GeoDataFrame:
    """Load fault traces."""
    return load_layer(path, expected="line", assume_crs=assume_crs)
