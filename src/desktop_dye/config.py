"""Configuration management for DesktopDye."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .core.exceptions import ConfigError
from .core.models import AlgorithmKind, ColorFormat, SelectionMode

# Default paths
CONFIG_DIR = Path.home() / ".desktop_dye"
CONFIG_FILE_NAME = "config.yaml"
LOG_DIR = CONFIG_DIR / "logs"

# Home Assistant token can be kept out of the config file
HA_TOKEN_ENV = "DESKTOP_DYE_HA_TOKEN"

# Pipeline defaults
DEFAULT_SAMPLE_SIZE = 3
DEFAULT_ALGORITHM = AlgorithmKind.QUANTIZATION
DEFAULT_CAPTURE_INTERVAL = 3.0  # seconds
DEFAULT_SELECTION_MODE = SelectionMode.DEFAULT
DEFAULT_HUE_SHIFT = 45.0  # degrees
DEFAULT_COLOR_FORMAT = ColorFormat.RGB
DEFAULT_BRIGHTNESS_FACTOR = 1.0

SAMPLE_SIZE_RANGE = (1, 10)

DEFAULT_CONFIG_FILE_CONTENTS = """\
# DesktopDye configuration

# Home Assistant connection (required)
ha_endpoint: "http://homeassistant.local:8123"
ha_token: "<long-lived access token>"
ha_target_entity_id: "input_text.desktop_dye_colors"

# Screen to capture. Leave unset to use the primary screen.
# screen_id: 1

# Number of colors to extract (1-10)
sample_size: 3

# Dominant color algorithm: quantization | clustering
algorithm: quantization

# Seconds between captures
capture_interval: 3.0

# Color selection mode: default | brightness | hue_shift
mode: default

# Half-width of the hue fan in degrees (hue_shift mode)
hue_shift: 45.0

# Payload format: rgb | rgbb | hsb
color_format: rgb

# Multiplier applied to the brightness of every color
brightness_factor: 1.0
"""

# Friendly names used in validation messages
_FIELD_LABELS = {
    "ha_endpoint": "Home Assistant endpoint",
    "ha_token": "Home Assistant token",
    "ha_target_entity_id": "Home Assistant target entity ID",
}


class PipelineSettings(BaseModel):
    """Options consumed by the color pipeline."""
    sample_size: int = Field(
        default=DEFAULT_SAMPLE_SIZE, ge=SAMPLE_SIZE_RANGE[0], le=SAMPLE_SIZE_RANGE[1]
    )
    algorithm: AlgorithmKind = DEFAULT_ALGORITHM
    mode: SelectionMode = DEFAULT_SELECTION_MODE
    hue_shift: float = DEFAULT_HUE_SHIFT
    color_format: ColorFormat = DEFAULT_COLOR_FORMAT
    brightness_factor: float = Field(default=DEFAULT_BRIGHTNESS_FACTOR, ge=0.0)

    model_config = {"frozen": True}


class DesktopDyeConfig(PipelineSettings):
    """Full application configuration, as read from ``config.yaml``."""
    screen_id: Optional[int] = None
    ha_endpoint: str
    ha_token: str
    ha_target_entity_id: str
    capture_interval: float = Field(default=DEFAULT_CAPTURE_INTERVAL, gt=0.0)

    @field_validator("ha_endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        problems = []
        if not value.startswith(("http://", "https://")):
            problems.append(f'must start with http:// or https://. Found "{value}"')
        if value.endswith("/"):
            problems.append(f'must not end with /. Found "{value}"')
        if value.count(":") != 2:
            problems.append(f"must contain exactly two ':', the second before the port. Found \"{value}\"")
        if problems:
            raise ValueError("; ".join(problems))
        return value


def get_config_path() -> Path:
    """Return the config file path, ``~/.desktop_dye/config.yaml``."""
    return CONFIG_DIR / CONFIG_FILE_NAME


def config_exists(path: Optional[Path] = None) -> bool:
    return (path or get_config_path()).exists()


def create_default_config(path: Optional[Path] = None) -> Path:
    """Write the default config file.

    Raises:
        ConfigError: If the config file already exists.
    """
    path = path or get_config_path()
    if path.exists():
        raise ConfigError(f"Config file already exists: {path}")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_FILE_CONTENTS, encoding="utf-8")
    return path


def _format_errors(exc: ValidationError) -> list[str]:
    lines = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "config"
        label = _FIELD_LABELS.get(field, field)
        if error["type"] == "missing":
            lines.append(f"Missing {label} in config file")
            continue
        message = error["msg"].removeprefix("Value error, ")
        lines.append(f"{label} {message}" if field in _FIELD_LABELS else f"{label}: {message}")
    return lines


def parse_config(data: dict[str, Any]) -> DesktopDyeConfig:
    """Validate raw config values, applying defaults and the token override.

    Raises:
        ConfigError: Listing every validation problem, one per line.
    """
    data = dict(data)
    token = os.environ.get(HA_TOKEN_ENV)
    if token:
        data["ha_token"] = token.strip()

    try:
        return DesktopDyeConfig.model_validate(data)
    except ValidationError as e:
        errors = "\n".join(f"  - {line}" for line in _format_errors(e))
        raise ConfigError(f"Config file is invalid. Please fix the following errors:\n{errors}") from e


def load_config(path: Optional[Path] = None) -> DesktopDyeConfig:
    """Read and validate the config file.

    Raises:
        ConfigError: If the file does not exist, is not valid YAML, or fails validation.
    """
    path = path or get_config_path()
    if not path.exists():
        raise ConfigError(f"Config file does not exist: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping of settings")

    return parse_config(data)


def setup_logging(verbose: bool = False) -> None:
    """Configure centralized logging with console and file handlers.

    Sets up the ``desktop_dye`` logger namespace with a rotating file
    handler (``~/.desktop_dye/logs/desktop_dye.log``) and a console
    handler. All child loggers (e.g. ``desktop_dye.pipeline``) inherit
    these handlers automatically.

    Args:
        verbose: If True, set console level to DEBUG; otherwise INFO.
                 The file handler always captures DEBUG.
    """
    level = logging.DEBUG if verbose else logging.INFO

    root = logging.getLogger("desktop_dye")
    root.setLevel(logging.DEBUG)

    # Avoid duplicate handlers on repeated calls
    if root.handlers:
        return

    log_format = "%(asctime)s %(name)s %(levelname)s %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(log_format, datefmt=date_format))
    root.addHandler(console)

    # Rotating file handler: 5 MB max, keep 3 backups
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        LOG_DIR / "desktop_dye.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
    root.addHandler(file_handler)
