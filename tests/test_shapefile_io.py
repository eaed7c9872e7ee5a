"""Tests for shapefile inspection and layer loading."""

from pathlib import Path

import geopandas as gpd
import pytest
from shapely.geometry import Point, Polygon

from geomap.utils.shapefile_io import (
    inspect_shapefile,
    load_faults,
    load_layer,
    load_polygons,
    normalize_shp_path,
)


def test_normalize_shp_path_adds_suffix() -> None:
    assert normalize_shp_path("data/geology") == Path("data/geology.shp")
    assert normalize_shp_path("data/geology.SHP") == Path("data/geology.SHP")


def test_normalize_shp_path_keeps_dotted_layer_names() -> None:
    assert normalize_shp_path("data/ca.geology") == Path("data/ca.geology.shp")
    assert normalize_shp_path("ca_geol_poly.v2") == Path("ca_geol_poly.v2.shp")


def test_load_polygons_dotted_layer_name(tmp_path: Path, units_gdf: gpd.GeoDataFrame) -> None:
    units_gdf.to_file(tmp_path / "ca.geology.shp")
    gdf = load_polygons(tmp_path / "ca.geology")
    assert len(gdf) == 3


def test_inspect_shapefile_reads_header(units_shp: Path) -> None:
    """Inspection should report type, count, fields and CRS sidecar."""
    summary = inspect_shapefile(units_shp)
    assert summary.shape_type == "POLYGON"
    assert summary.record_count == 3
    assert summary.fields == ["UNIT_LINK", "RGB"]
    assert summary.bbox == pytest.approx((500000.0, 4000000.0, 502000.0, 4002000.0))
    assert summary.crs_wkt is not None and "UTM" in summary.crs_wkt


def test_inspect_shapefile_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        inspect_shapefile(tmp_path / "nothing.shp")


def test_load_polygons_accepts_path_without_suffix(units_shp: Path) -> None:
    gdf = load_polygons(units_shp.with_suffix(""))
    assert len(gdf) == 3
    assert gdf.crs.to_epsg() == 32611


def test_load_faults_reads_lines(faults_shp: Path) -> None:
    gdf = load_faults(faults_shp)
    assert set(gdf.geometry.geom_type) <= {"LineString", "MultiLineString"}


def test_load_faults_rejects_polygons(units_shp: Path) -> None:
    """Loading a polygon layer as faults should name the offending type."""
    with pytest.raises(ValueError, match="Polygon"):
        load_faults(units_shp)


def test_load_layer_rejects_unknown_kind(units_shp: Path) -> None:
    with pytest.raises(ValueError, match="kind"):
        load_layer(units_shp, expected="raster")


def test_load_layer_assigns_assumed_crs(tmp_path: Path) -> None:
    """Layers without .prj should pick up the assumed CRS."""
    gdf = gpd.GeoDataFrame(
        {"UNIT_LINK": ["Qal"]},
        geometry=[Polygon([(0, 0), (1, 0), (1, 1), (0, 0)])],
        crs=None,
    )
    shp_path = tmp_path / "no_crs.shp"
    gdf.to_file(shp_path)

    assert load_polygons(shp_path).crs is None
    assumed = load_polygons(shp_path, assume_crs="EPSG:4326")
    assert assumed.crs.to_epsg() == 4326


def test_load_layer_drops_empty_geometries(tmp_path: Path) -> None:
    gdf = gpd.GeoDataFrame(
        {"NAME": ["a", "b"]},
        geometry=[Point(1, 1), None],
        crs="EPSG:4326",
    )
    shp_path = tmp_path / "points.shp"
    gdf.to_file(shp_path)

    loaded = load_layer(shp_path)
    assert loaded["NAME"].tolist() == ["a"]


def test_load_layer_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_layer(tmp_path / "missing.shp")
