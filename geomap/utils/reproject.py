"""CRS parsing and layer reprojection helpers."""

from __future__ import annotations

import geopandas as gpd
from pyproj import CRS
from pyproj.exceptions import CRSError


def resolve_crs(value: CRS | int | str | None) -> CRS:
    """Parse EPSG code or PROJ string into ``pyproj.CRS``.

    Parameters
    ----------
    value : pyproj.CRS | int | str
        ``4326``, ``"4326"``, ``"EPSG:4326"`` or ``"+proj=longlat ..."``.

    Returns
    -------
    pyproj.CRS
        Parsed coordinate reference system.

    Raises
    ------
    ValueError
        Raised when value is empty or not understood by pyproj.

    Examples
    --------
    >>> resolve_crs(4326).to_epsg()
    4326
    """
    if isinstance(value, CRS):
        return value
    if value is None:
        raise ValueError("CRS value is missing")
    if isinstance(value, bool):
        raise ValueError(f"Invalid CRS value: {value!r}")
    if isinstance(value, int):
        crs_text = f"EPSG:{value}"
    else:
        crs_text = str(value).strip()
        if not crs_text:
            raise ValueError("CRS value is empty")
        if crs_text.isdigit():
            crs_text = f"EPSG:{crs_text}"
    try:
        return CRS.from_user_input(crs_text)
    except CRSError as exc:
        raise ValueError(f"Unrecognized CRS: {value!r}") from exc


def epsg_code(crs: CRS | int | str | None) -> int | None:
    """Return EPSG code of a CRS, or ``None`` when it has none."""
    if crs is None:
        return None
    return resolve_crs(crs).to_epsg()


def reproject_layer(
    gdf: gpd.GeoDataFrame,
    target: CRS | int | str,
    assume_crs: CRS | int | str | None = None,
) -> gpd.GeoDataFrame:
    """Reproject a layer into the target CRS.

    Parameters
    ----------
    gdf : geopandas.GeoDataFrame
        Input layer. It is not modified.
    target : pyproj.CRS | int | str
        Target CRS as EPSG code or PROJ string.
    assume_crs : pyproj.CRS | int | str, optional
        Source CRS used when ``gdf`` has none.

    Returns
    -------
    geopandas.GeoDataFrame
        Copy of the layer in the target CRS.
    """
    target_crs = resolve_crs(target)
    layer = gdf
    if layer.crs is None:
        if assume_crs is None:
            raise ValueError("layer CRS is missing")
        layer = layer.set_crs(resolve_crs(assume_crs))
    if layer.crs == target_crs:
        return layer.copy()
    return layer.to_crs(target_crs)


def align_layers(
    reference: gpd.GeoDataFrame,
    other: gpd.GeoDataFrame,
) -> tuple[gpd.GeoDataFrame, gpd.GeoDataFrame]:
    """Align ``other`` to the CRS of ``reference``.

    Returns
    -------
    tuple[geopandas.GeoDataFrame, geopandas.GeoDataFrame]
        Reference copy and ``other`` converted to the reference CRS.
    """
    if reference.crs is None:
        raise ValueError("reference CRS is missing")
    if other.crs is None:
        raise ValueError("other CRS is missing")
    if reference.crs == other.crs:
        return reference.copy(), other.copy()
    return reference.copy(), other.to_crs(reference.crs)
