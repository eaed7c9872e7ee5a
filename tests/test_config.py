"""Tests for JSON map configuration."""

import json
from pathlib import Path

import pytest

from geomap.config import MapConfig, load_config, save_config


def test_load_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    """Missing config file should fall back to defaults."""
    cfg = load_config(tmp_path / "absent.json")
    assert cfg == MapConfig()


def test_load_config_merges_partial_file(tmp_path: Path) -> None:
    """Keys present in the file override defaults, the rest stay default."""
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"target_crs": "EPSG:32611", "figure_size": [4, 3]}),
        encoding="utf-8",
    )
    cfg = load_config(config_path)
    assert cfg.target_crs == "EPSG:32611"
    assert cfg.figure_size == (4.0, 3.0)
    assert cfg.unit_field == "UNIT_LINK"


def test_load_config_rejects_unknown_keys(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"colour": "red"}), encoding="utf-8")
    with pytest.raises(ValueError, match="colour"):
        load_config(config_path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"color_mode": "rainbow"},
        {"dpi": 0},
        {"fill_alpha": 1.5},
        {"edge_width": -1},
        {"figure_size": [0, 4]},
        {"unit_pattern": "([A-Z"},
        {"rgb_pattern": r"(\d+)"},
    ],
)
def test_config_rejects_bad_settings(overrides: dict) -> None:
    """Each invalid setting should raise ValueError."""
    with pytest.raises(ValueError):
        MapConfig(**overrides)


def test_load_config_rejects_wrong_value_type(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"dpi": "high"}), encoding="utf-8")
    with pytest.raises(ValueError, match="dpi"):
        load_config(config_path)


def test_load_config_rejects_non_object_root(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps([1, 2]), encoding="utf-8")
    with pytest.raises(ValueError, match="object"):
        load_config(config_path)


def test_assignment_is_validated() -> None:
    """Overrides applied after loading go through the same checks."""
    cfg = MapConfig()
    with pytest.raises(ValueError):
        cfg.color_mode = "hue"
    with pytest.raises(ValueError):
        cfg.colour = "red"
    cfg.color_mode = "rgb"
    assert cfg.color_mode == "rgb"


def test_save_config_writes_loadable_json(tmp_path: Path) -> None:
    cfg = MapConfig(target_crs="+proj=utm +zone=11 +datum=WGS84", dpi=72)
    out_path = save_config(cfg, tmp_path / "nested" / "config.json")
    assert load_config(out_path) == cfg
