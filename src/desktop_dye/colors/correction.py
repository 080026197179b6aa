"""Color adjustments applied between extraction and encoding.

- :func:`boost_vividness` lifts saturation and value of every extracted color.
- :func:`apply_selection_mode` reorders or regenerates colors per mode.
- :func:`scale_brightness` applies the user's global brightness factor.

All functions are pure: they return new lists and never modify their input.
"""

from collections.abc import Sequence

from ..core.models import HsvColor, SelectionMode

VIVIDNESS_BOOST = 0.2

# Value above which a color counts as "bright" in brightness mode
BRIGHTNESS_THRESHOLD = 0.80


def boost_vividness(colors: Sequence[HsvColor], amount: float = VIVIDNESS_BOOST) -> list[HsvColor]:
    """Add ``amount`` to saturation and value, capped at 1.0. Hue is untouched."""
    return [
        c.with_fields(
            saturation=min(c.saturation + amount, 1.0),
            value=min(c.value + amount, 1.0),
        )
        for c in colors
    ]


def normalize_hue(hue: float) -> float:
    """Bring a hue back into range with a single wrap.

    Only one 360 degree correction is applied in either direction, so hues
    more than a full turn out of range stay out of range. A hue of exactly
    360 is left as is.
    """
    if hue < 0.0:
        return hue + 360.0
    elif hue > 360.0:
        return hue - 360.0
    return hue


def select_primary_by_brightness(
    colors: Sequence[HsvColor], threshold: float = BRIGHTNESS_THRESHOLD
) -> HsvColor:
    """Pick the first color brighter than ``threshold``, else the brightest one.

    Among equally bright fallback candidates the earliest one wins.
    """
    for color in colors:
        if color.value > threshold:
            return color
    return max(colors, key=lambda c: c.value)


def hue_shift_fan(colors: Sequence[HsvColor], hue_shift: float) -> list[HsvColor]:
    """Spread hues evenly around the first color's hue.

    Produces ``len(colors)`` colors from ``hue - hue_shift`` to
    ``hue + hue_shift``, all sharing the first color's saturation and value.
    A single color is returned unchanged.
    """
    primary = colors[0]
    count = len(colors)
    if count == 1:
        return list(colors)

    lower_hue = primary.hue - hue_shift
    hue_step = hue_shift * 2.0 / (count - 1)

    return [
        HsvColor(
            hue=normalize_hue(lower_hue + hue_step * i),
            saturation=primary.saturation,
            value=primary.value,
        )
        for i in range(count)
    ]


def apply_selection_mode(
    colors: Sequence[HsvColor],
    mode: SelectionMode,
    hue_shift: float = 45.0,
) -> list[HsvColor]:
    """Produce the final ordered colors for ``mode``.

    Args:
        colors: Non-empty boosted palette, in extraction order.
        mode: Selection mode.
        hue_shift: Fan half-width in degrees (hue shift mode only).

    Returns:
        - DEFAULT: the colors unchanged.
        - BRIGHTNESS: the primary color (see :func:`select_primary_by_brightness`)
          followed by every other color in original order. Copies that are
          exactly equal to the primary are dropped; colors that merely look
          the same but differ by float rounding are kept.
        - HUE_SHIFT: a hue fan around the first color (see :func:`hue_shift_fan`).
    """
    mode = SelectionMode(mode)
    if mode == SelectionMode.DEFAULT:
        return list(colors)

    if mode == SelectionMode.BRIGHTNESS:
        primary = select_primary_by_brightness(colors)
        return [primary] + [c for c in colors if c != primary]

    return hue_shift_fan(colors, hue_shift)


def scale_brightness(colors: Sequence[HsvColor], factor: float) -> list[HsvColor]:
    """Multiply every value by ``factor``, capped at 1.0.

    A factor of exactly 1.0 returns the colors untouched so no float noise
    is introduced.
    """
    if factor == 1.0:
        return list(colors)
    return [c.with_fields(value=min(c.value * factor, 1.0)) for c in colors]
