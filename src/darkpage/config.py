"""Engine configuration: thresholds, output colors and config file loading.

All values default to the tuned constants of the engine, so an empty or
missing darkpage_config.yaml yields the standard behavior.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigError

CONFIG_FILENAME = "darkpage_config.yaml"


class ThresholdSet(BaseModel):
    """Brightness and saturation thresholds (brightness on the 0-255 scale)."""

    model_config = ConfigDict(frozen=True)

    bg_brightness: float = 100  # Backgrounds brighter than this get darkened
    text_brightness: float = 200  # Gray text dimmer than this gets lightened
    keep_black: float = 30  # Near-black text on dark backgrounds is kept
    colorful_saturation: float = 15  # HSL saturation above this counts as a brand color
    dark_min: float = 10  # Dark band lower bound
    dark_max: float = 25  # Dark band upper bound
    input_offset: float = 10  # Inputs sit this much above the dark band
    light_text_target: int = 255  # Output text brightness
    site_dark_brightness: float = 50  # Root/body darker than this marks a dark site
    border_brightness: float = 150
    vector_brightness: float = 150
    icon_max_size: float = 400  # Both dimensions must be below this to invert

    @model_validator(mode="after")
    def check_dark_band(self) -> ThresholdSet:
        """Dark band must be ordered and inside the brightness scale."""
        if not 0 <= self.dark_min <= self.dark_max <= 255:  # noqa: PLR2004
            raise ValueError(
                f"dark band must satisfy 0 <= dark_min <= dark_max <= 255, "
                f"got [{self.dark_min}, {self.dark_max}]"
            )
        return self

    @property
    def dark_range(self) -> float:
        return self.dark_max - self.dark_min


class OutputColors(BaseModel):
    """Fixed values the engine writes."""

    model_config = ConfigDict(frozen=True)

    input_border: str = "rgb(136, 136, 136)"
    vector_paint: str = "rgb(224, 224, 224)"
    side_border: str = "rgb(51, 51, 51)"
    root_background: str = "rgb(0, 0, 0)"
    inversion_filter: str = "invert(1) brightness(1.2)"


class EngineConfig(BaseModel):
    """Top-level configuration for a darkening session."""

    model_config = ConfigDict(frozen=True)

    thresholds: ThresholdSet = Field(default_factory=ThresholdSet)
    colors: OutputColors = Field(default_factory=OutputColors)
    prune_removed: bool = True  # Restore and drop snapshots of removed elements
    profiles_dir: Path | None = None  # Directory of <hostname>.css site stylesheets


def load_config(config_path: Path | str) -> EngineConfig:
    """Load engine configuration from a YAML file.

    Args:
        config_path: Path to darkpage_config.yaml

    Returns:
        The validated EngineConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigError: If the file is not valid YAML or fails validation
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config YAML: {e}") from e

    if data is None:
        return EngineConfig()
    if not isinstance(data, dict):
        raise ConfigError("Config must contain a mapping at the root level")

    # Relative profile directories are relative to the config file
    profiles_dir = data.get("profiles_dir")
    if profiles_dir is not None and not Path(profiles_dir).is_absolute():
        data["profiles_dir"] = config_path.parent / profiles_dir

    try:
        return EngineConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid config {config_path}: {e}") from e


def discover_config(page_path: Path | None = None, config_path: Path | None = None) -> EngineConfig:
    """Find and load configuration.

    Search order:
    1. Explicit config_path argument
    2. Page file directory / darkpage_config.yaml
    3. Current directory / darkpage_config.yaml
    4. Built-in defaults
    """
    if config_path is not None:
        return load_config(config_path)

    if page_path is not None:
        page_config = Path(page_path).parent / CONFIG_FILENAME
        if page_config.exists():
            return load_config(page_config)

    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return EngineConfig()
