"""Tests for the command line entry point."""

from pathlib import Path

from main import main


def test_main_renders_map(units_shp: Path, faults_shp: Path, tmp_path: Path) -> None:
    out_path = tmp_path / "map.png"
    exit_code = main(
        [
            str(units_shp),
            "--faults",
            str(faults_shp),
            "--crs",
            "4326",
            "--config",
            str(tmp_path / "absent.json"),
            "-o",
            str(out_path),
        ]
    )
    assert exit_code == 0
    assert out_path.exists()


def test_main_reports_missing_input(tmp_path: Path) -> None:
    exit_code = main(
        [
            str(tmp_path / "missing.shp"),
            "--config",
            str(tmp_path / "absent.json"),
            "-o",
            str(tmp_path / "map.png"),
        ]
    )
    assert exit_code == 1


def test_main_reports_bad_color_field(units_shp: Path, tmp_path: Path) -> None:
    exit_code = main(
        [
            str(units_shp),
            "--field",
            "AGE",
            "--config",
            str(tmp_path / "absent.json"),
            "-o",
            str(tmp_path / "map.png"),
        ]
    )
    assert exit_code == 1


def test_main_reports_invalid_config(units_shp: Path, tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text('{"dpi": "high"}', encoding="utf-8")
    exit_code = main([str(units_shp), "--config", str(config_path), "-o", str(tmp_path / "map.png")])
    assert exit_code == 1
    assert not (tmp_path / "map.png").exists()
