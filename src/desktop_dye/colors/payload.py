"""Serialization of final colors into the Home Assistant state payload.

One token per color, tokens separated by a single space, fields inside a
token separated by commas:

- ``rgb``:  ``r,g,b``
- ``rgbb``: ``r,g,b,brightness%``
- ``hsb``:  ``hue,saturation%,brightness%``

Real-valued fields are rounded half away from zero to 3 places and always
printed with 3 decimals.
"""

from collections.abc import Sequence

from ..core.models import ColorFormat, HsvColor
from .conversion import brightness_percent, hsv_to_rgb, to_hsb

TOKEN_SEPARATOR = " "
FIELD_SEPARATOR = ","


def _decimal(value: float) -> str:
    return f"{value:.3f}"


def encode_color(color: HsvColor, color_format: ColorFormat) -> str:
    """Encode a single color as one payload token."""
    color_format = ColorFormat(color_format)
    if color_format == ColorFormat.RGB:
        rgb = hsv_to_rgb(color)
        fields = [str(rgb.red), str(rgb.green), str(rgb.blue)]
    elif color_format == ColorFormat.RGBB:
        rgb = hsv_to_rgb(color)
        fields = [str(rgb.red), str(rgb.green), str(rgb.blue), _decimal(brightness_percent(color))]
    else:
        hsb = to_hsb(color)
        fields = [_decimal(hsb.hue), _decimal(hsb.saturation), _decimal(hsb.brightness)]
    return FIELD_SEPARATOR.join(fields)


def encode_payload(colors: Sequence[HsvColor], color_format: ColorFormat) -> str:
    """Encode all colors; an empty sequence encodes to an empty string."""
    return TOKEN_SEPARATOR.join(encode_color(c, color_format) for c in colors)


def describe_color(color: HsvColor, color_format: ColorFormat) -> str:
    """Human readable description used in terminal output."""
    color_format = ColorFormat(color_format)
    rgb = hsv_to_rgb(color)
    if color_format == ColorFormat.RGB:
        return f"RGB({rgb.red}, {rgb.green}, {rgb.blue})"
    if color_format == ColorFormat.RGBB:
        return f"RGBB({rgb.red}, {rgb.green}, {rgb.blue}, {_decimal(brightness_percent(color))}%)"
    return f"H: {color.hue:.3f}°, S: {color.saturation:.3f}, B: {color.value:.3f}"
