"""Pydantic models for colors and pipeline options."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SelectionMode(str, Enum):
    """How the final colors are picked from the extracted palette."""
    DEFAULT = "default"
    BRIGHTNESS = "brightness"
    HUE_SHIFT = "hue_shift"

    @property
    def label(self) -> str:
        return {
            SelectionMode.DEFAULT: "Default",
            SelectionMode.BRIGHTNESS: "Brightness",
            SelectionMode.HUE_SHIFT: "Hue Shift",
        }[self]


class ColorFormat(str, Enum):
    """Wire format of the state payload sent to Home Assistant."""
    RGB = "rgb"
    RGBB = "rgbb"
    HSB = "hsb"

    @property
    def label(self) -> str:
        return self.value.upper()


class AlgorithmKind(str, Enum):
    """Available dominant color algorithms."""
    QUANTIZATION = "quantization"
    CLUSTERING = "clustering"


class RgbColor(BaseModel):
    """8-bit RGB color. Equality is exact per channel."""
    red: int = Field(ge=0, le=255)
    green: int = Field(ge=0, le=255)
    blue: int = Field(ge=0, le=255)

    model_config = {"frozen": True}

    @classmethod
    def of(cls, red: int, green: int, blue: int) -> "RgbColor":
        return cls(red=red, green=green, blue=blue)

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.red, self.green, self.blue)


class HsvColor(BaseModel):
    """Floating point HSV color.

    Hue is in degrees and is conventionally within [0, 360) but that is not
    enforced here, so hue-shift results can be represented as computed.
    Equality is exact per field, with no tolerance.
    """
    hue: float
    saturation: float
    value: float

    model_config = {"frozen": True}

    @classmethod
    def of(cls, hue: float, saturation: float, value: float) -> "HsvColor":
        return cls(hue=hue, saturation=saturation, value=value)

    def with_fields(self, **changes: float) -> "HsvColor":
        """Return a copy with the given fields replaced."""
        return self.model_copy(update=changes)


class PaletteEntry(BaseModel):
    """One extracted color with its estimated share of the sampled pixels."""
    color: RgbColor
    weight: Optional[float] = Field(default=None, description="Dominance share, 0-1")

    model_config = {"frozen": True}
