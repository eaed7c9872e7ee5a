"""JSON-backed settings for map rendering."""

from __future__ import annotations

import json
import re
from pathlib import Path

from loguru import logger
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

VALID_COLOR_MODES = ("prefix", "rgb", "value")

DEFAULT_CONFIG_PATH = Path("config.json")


class MapConfig(BaseModel):
    """
    Configuration for building a geology map.

    Assignments are validated too, so command line overrides fail the same
    way a bad config file does.

    Parameters
    ----------
    target_crs : str | int
        EPSG code or PROJ string all layers are reprojected to.
    assume_crs : str, optional
        CRS assigned to layers shipped without ``.prj`` sidecar.
    unit_field : str
        Polygon attribute used to derive fill colors.
    color_mode : str
        One of ``prefix``, ``rgb`` or ``value``.
    unit_pattern : str
        Regex whose first match is the unit key in ``prefix`` mode.
    rgb_pattern : str
        Regex with three groups capturing red, green and blue.
    palette : str
        Matplotlib colormap name for categorical keys.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    target_crs: str | int = "EPSG:4326"
    assume_crs: str | int | None = None
    unit_field: str = "UNIT_LINK"
    color_mode: str = "prefix"
    unit_pattern: str = r"^[A-Z]+"
    rgb_pattern: str = r"(\d{1,3})\D+(\d{1,3})\D+(\d{1,3})"
    palette: str = "tab20"
    missing_color: str = "#cccccc"
    figure_size: tuple[float, float] = (8.0, 8.0)
    dpi: int = Field(default=150, gt=0)
    fault_color: str = "black"
    fault_width: float = Field(default=1.0, gt=0)
    edge_color: str = "none"
    edge_width: float = Field(default=0.3, ge=0)
    fill_alpha: float = Field(default=0.9, ge=0.0, le=1.0)

    @field_validator("color_mode")
    @classmethod
    def check_color_mode(cls, value: str) -> str:
        if value not in VALID_COLOR_MODES:
            raise ValueError(f"Unsupported color mode: {value}")
        return value

    @field_validator("figure_size")
    @classmethod
    def check_figure_size(cls, value: tuple[float, float]) -> tuple[float, float]:
        if min(value) <= 0:
            raise ValueError(f"Invalid figure size: {value}")
        return value

    @field_validator("unit_pattern", "rgb_pattern")
    @classmethod
    def check_regex(cls, value: str, info: ValidationInfo) -> str:
        try:
            compiled = re.compile(value)
        except re.error as exc:
            raise ValueError(f"Invalid regex for {info.field_name}: {exc}") from exc
        if info.field_name == "rgb_pattern" and compiled.groups < 3:
            raise ValueError("rgb_pattern must define three capture groups")
        return value


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> MapConfig:
    """Load map settings from a JSON file.

    Parameters
    ----------
    path : str | Path
        JSON file with a flat object of setting names.

    Returns
    -------
    MapConfig
        Validated configuration. Defaults are used when the file is absent.

    Raises
    ------
    ValueError
        Raised for unknown keys, wrong value types or invalid values.
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.warning(f"Config file not found, using defaults: {config_path}")
        return MapConfig()

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be an object: {config_path}")

    try:
        cfg = MapConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid config {config_path}: {exc}") from exc
    logger.debug(f"Loaded config from {config_path}")
    return cfg


def save_config(cfg: MapConfig, path: str | Path = DEFAULT_CONFIG_PATH) -> Path:
    """Write settings as JSON and return the written path."""
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(cfg.model_dump(mode="json"), f, indent=2)
    return config_path
