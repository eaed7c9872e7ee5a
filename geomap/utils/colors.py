"""Derive fill colors from geologic unit attributes."""

from __future__ import annotations

import re
from typing import Iterable

import geopandas as gpd
import matplotlib
import pandas as pd
from matplotlib.colors import to_hex

from geomap.config import VALID_COLOR_MODES

DEFAULT_UNIT_PATTERN = r"^[A-Z]+"
DEFAULT_RGB_PATTERN = r"(\d{1,3})\D+(\d{1,3})\D+(\d{1,3})"
DEFAULT_MISSING_COLOR = "#cccccc"


def extract_unit_key(values: Iterable, pattern: str = DEFAULT_UNIT_PATTERN) -> pd.Series:
    """Extract the first regex match of every value.

    Parameters
    ----------
    values : Iterable
        Attribute values, usually unit labels such as ``Kgr`` or ``Tv``.
    pattern : str
        Regular expression searched in each value.

    Returns
    -------
    pandas.Series
        Matched text, ``NA`` where the value is missing or unmatched.

    Examples
    --------
    >>> extract_unit_key(["Kgr", "Tv", None]).tolist()
    ['K', 'T', <NA>]
    """
    series = pd.Series(values, dtype="string")
    regex = re.compile(pattern)

    def _match(text):
        if pd.isna(text):
            return pd.NA
        found = regex.search(text)
        if found is None or not found.group(0):
            return pd.NA
        return found.group(0)

    return series.map(_match).astype("string")


def parse_rgb(values: Iterable, pattern: str = DEFAULT_RGB_PATTERN) -> pd.Series:
    """Parse red/green/blue triplets into ``#rrggbb`` strings.

    Accepts ``"255 200 100"``, ``"255-200-100"`` or ``"RGB(255,200,100)"``.
    Components outside ``0..255`` give ``NA``.
    """
    series = pd.Series(values, dtype="string")
    regex = re.compile(pattern)

    def _parse(text):
        if pd.isna(text):
            return pd.NA
        found = regex.search(text)
        if found is None:
            return pd.NA
        rgb = [int(found.group(i)) for i in (1, 2, 3)]
        if any(v > 255 for v in rgb):
            return pd.NA
        return "#{:02x}{:02x}{:02x}".format(*rgb)

    return series.map(_parse).astype("string")


def categorical_palette(keys: Iterable, cmap_name: str = "tab20") -> dict[str, str]:
    """Map unique keys to hex colors sampled from a colormap.

    Keys are sorted before sampling, so the same key set always gives the
    same colors.
    """
    unique_keys = sorted({str(k) for k in keys if not pd.isna(k)})
    if not unique_keys:
        return {}
    cmap = matplotlib.colormaps[cmap_name]
    count = len(unique_keys)
    if getattr(cmap, "N", 256) < 256:
        # Qualitative maps: step through the listed colors.
        positions = [i % cmap.N / cmap.N for i in range(count)]
    else:
        positions = [i / max(1, count - 1) for i in range(count)]
    return {key: to_hex(cmap(pos)) for key, pos in zip(unique_keys, positions)}


def derive_colors(
    gdf: gpd.GeoDataFrame,
    field: str,
    mode: str = "prefix",
    unit_pattern: str = DEFAULT_UNIT_PATTERN,
    rgb_pattern: str = DEFAULT_RGB_PATTERN,
    cmap_name: str = "tab20",
    missing_color: str = DEFAULT_MISSING_COLOR,
) -> tuple[pd.Series, pd.Series]:
    """Derive per-feature unit keys and fill colors.

    Parameters
    ----------
    gdf : geopandas.GeoDataFrame
        Polygon layer.
    field : str
        Attribute holding unit labels or RGB text.
    mode : str
        ``prefix`` extracts a key by regex and maps it through the palette,
        ``rgb`` parses triplets, ``value`` maps the raw value.

    Returns
    -------
    tuple[pandas.Series, pandas.Series]
        Unit keys and hex colors, both aligned to ``gdf.index``.
    """
    if field not in gdf.columns:
        raise KeyError(f"color field not found: {field}")
    if mode not in VALID_COLOR_MODES:
        raise ValueError(f"Unsupported color mode: {mode}")

    raw = gdf[field]
    if mode == "rgb":
        colors = parse_rgb(raw, rgb_pattern)
        # Unparsed triplets get no unit key.
        keys = pd.Series(raw, dtype="string").where(colors.notna(), pd.NA)
    else:
        if mode == "prefix":
            keys = extract_unit_key(raw, unit_pattern)
        else:
            keys = pd.Series(raw, dtype="string").str.strip().replace("", pd.NA)
        palette = categorical_palette(keys, cmap_name)
        colors = keys.map(palette, na_action="ignore").astype("string")

    keys.index = gdf.index
    colors.index = gdf.index
    colors = colors.fillna(missing_color)
    return keys, colors.astype(str)


def add_color_column(
    gdf: gpd.GeoDataFrame,
    field: str,
    mode: str = "prefix",
    **kwargs,
) -> gpd.GeoDataFrame:
    """Return a copy of ``gdf`` with ``unit_key`` and ``color`` columns."""
    keys, colors = derive_colors(gdf, field, mode, **kwargs)
    out_gdf = gdf.copy()
    out_gdf["unit_key"] = keys
    out_gdf["color"] = colors
    return out_gdf
