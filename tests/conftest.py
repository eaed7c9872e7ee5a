"""Pytest bootstrap helpers and shared geology fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")


def _append_repo_root() -> None:
    """Ensure repository root is present in import path."""
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_text = str(repo_root)
    if repo_root_text in sys.path:
        return
    sys.path.insert(0, repo_root_text)


_append_repo_root()

import geopandas as gpd  # noqa: E402
import pytest  # noqa: E402
from shapely.geometry import LineString, MultiLineString, Polygon  # noqa: E402


@pytest.fixture
def units_gdf() -> gpd.GeoDataFrame:
    """Three unit polygons in UTM zone 11N, the first one with a hole."""
    shell = [(500000, 4000000), (501000, 4000000), (501000, 4001000), (500000, 4001000)]
    hole = [(500200, 4000200), (500400, 4000200), (500400, 4000400), (500200, 4000400)]
    polygons = [
        Polygon(shell, [hole]),
        Polygon([(501000, 4000000), (502000, 4000000), (502000, 4001000), (501000, 4001000)]),
        Polygon([(500000, 4001000), (502000, 4001000), (501000, 4002000)]),
    ]
    return gpd.GeoDataFrame(
        {
            "UNIT_LINK": ["Kgr", "Tv", "Kqm"],
            "RGB": ["255 200 100", "10-20-30", "bad"],
        },
        geometry=polygons,
        crs="EPSG:32611",
    )


@pytest.fixture
def faults_gdf() -> gpd.GeoDataFrame:
    """Two fault traces crossing the units."""
    return gpd.GeoDataFrame(
        {"NAME": ["San Jacinto", "Elsinore"]},
        geometry=[
            LineString([(500100, 4000100), (501900, 4001900)]),
            MultiLineString(
                [
                    [(500000, 4001500), (500800, 4001200)],
                    [(501200, 4001000), (502000, 4000500)],
                ]
            ),
        ],
        crs="EPSG:32611",
    )


@pytest.fixture
def units_shp(tmp_path: Path, units_gdf: gpd.GeoDataFrame) -> Path:
    shp_path = tmp_path / "units.shp"
    units_gdf.to_file(shp_path)
    return shp_path


@pytest.fixture
def faults_shp(tmp_path: Path, faults_gdf: gpd.GeoDataFrame) -> Path:
    shp_path = tmp_path / "faults.shp"
    faults_gdf.to_file(shp_path)
    return shp_path
