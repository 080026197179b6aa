"""Conversions between 8-bit RGB, floating point HSV and actuator encodings."""

import math
from colorsys import hsv_to_rgb as _hsv_to_rgb
from colorsys import rgb_to_hsv as _rgb_to_hsv
from typing import NamedTuple

from ..core.models import HsvColor, RgbColor

MAX_CHANNEL = 255
HUE_DEGREES = 360.0


class HsbTriple(NamedTuple):
    """HSB as Home Assistant expects it: hue degrees, saturation and brightness percentages."""
    hue: float
    saturation: float
    brightness: float


def round_half_away(value: float, decimals: int = 3) -> float:
    """Round to ``decimals`` places, with halves rounded away from zero.

    Python's built-in ``round`` rounds halves to even, which would make
    ``2.5`` come out as ``2``.
    """
    carrier = 10 ** decimals
    scaled = math.floor(abs(value) * carrier + 0.5)
    return math.copysign(scaled, value) / carrier


def channel_to_unit(channel: int) -> float:
    """Map an 8-bit channel to [0, 1] with exact endpoints."""
    if channel == 0:
        return 0.0
    if channel == MAX_CHANNEL:
        return 1.0
    return channel / MAX_CHANNEL


def unit_to_channel(component: float) -> int:
    """Quantize a [0, 1] component to 8 bits.

    Out-of-range input is clamped. In-range values are truncated, not
    rounded, so conversions carry a slight downward bias.
    """
    if component <= 0.0:
        return 0
    if component >= 1.0:
        return MAX_CHANNEL
    return int(component * MAX_CHANNEL)


def rgb_to_hsv(color: RgbColor) -> HsvColor:
    h, s, v = _rgb_to_hsv(
        channel_to_unit(color.red),
        channel_to_unit(color.green),
        channel_to_unit(color.blue),
    )
    return HsvColor(hue=h * HUE_DEGREES, saturation=s, value=v)


def hsv_to_rgb(color: HsvColor) -> RgbColor:
    r, g, b = _hsv_to_rgb((color.hue % HUE_DEGREES) / HUE_DEGREES, color.saturation, color.value)
    return RgbColor(red=unit_to_channel(r), green=unit_to_channel(g), blue=unit_to_channel(b))


def to_hex(color: RgbColor | HsvColor) -> str:
    """Lowercase hex string without a ``#`` prefix, e.g. ``ff8000``."""
    if isinstance(color, HsvColor):
        color = hsv_to_rgb(color)
    return f"{color.red:02x}{color.green:02x}{color.blue:02x}"


def to_hsb(color: HsvColor) -> HsbTriple:
    """Convert to the actuator's HSB representation, each field rounded to 3 places."""
    return HsbTriple(
        hue=round_half_away(color.hue, 3),
        saturation=round_half_away(color.saturation * 100.0, 3),
        brightness=brightness_percent(color),
    )


def brightness_percent(color: HsvColor) -> float:
    """Value channel as a 0-100 percentage rounded to 3 places."""
    return round_half_away(color.value * 100.0, 3)
