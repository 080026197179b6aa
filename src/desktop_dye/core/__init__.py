"""Core models and errors shared across DesktopDye."""

from .exceptions import (
    CaptureFailed,
    ConfigError,
    DesktopDyeError,
    ExtractionFailed,
    HomeAssistantError,
    PipelineError,
)
from .models import AlgorithmKind, ColorFormat, HsvColor, PaletteEntry, RgbColor, SelectionMode

__all__ = [
    "AlgorithmKind",
    "ColorFormat",
    "HsvColor",
    "PaletteEntry",
    "RgbColor",
    "SelectionMode",
    "DesktopDyeError",
    "ConfigError",
    "PipelineError",
    "CaptureFailed",
    "ExtractionFailed",
    "HomeAssistantError",
]
