"""The color pipeline: pixels in, final colors and state payload out.

One call to :func:`run_pipeline` handles a single capture cycle::

    extract -> to HSV -> boost -> selection mode -> brightness -> change check -> encode

The pipeline is synchronous and keeps no state of its own. The caller owns
the previous cycle's :class:`FinalColors` and passes it back in so that
unchanged results can be detected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .colors.conversion import rgb_to_hsv
from .colors.correction import apply_selection_mode, boost_vividness, scale_brightness
from .colors.extraction import DominantColorAlgorithm, extract_dominant_colors, get_algorithm
from .colors.payload import encode_payload
from .config import PipelineSettings
from .core.models import ColorFormat, HsvColor, RgbColor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinalColors:
    """Result of one pipeline run."""
    colors: tuple[HsvColor, ...]
    payload: str
    color_format: ColorFormat
    palette: tuple[HsvColor, ...] = ()
    changed: bool = True

    @property
    def dominant(self) -> Optional[HsvColor]:
        """First boosted palette color, before mode correction."""
        return self.palette[0] if self.palette else None


def has_changed(previous: Optional[Sequence[HsvColor]], current: Sequence[HsvColor]) -> bool:
    """Whether ``current`` differs from the previous cycle's colors.

    Comparison is exact per field: colors that differ only by float
    rounding count as changed.
    """
    if previous is None:
        return True
    if len(previous) != len(current):
        return True
    return any(a != b for a, b in zip(previous, current))


def run_pipeline(
    pixels: np.ndarray | Iterable[RgbColor],
    settings: PipelineSettings,
    previous_result: Optional[FinalColors] = None,
    algorithm: Optional[DominantColorAlgorithm] = None,
) -> FinalColors:
    """Turn captured pixels into final colors and their encoded payload.

    Args:
        pixels: Captured pixel samples.
        settings: Validated pipeline settings.
        previous_result: The last successful result, or None on the first cycle.
        algorithm: Algorithm override; built from ``settings.algorithm`` when omitted.

    Returns:
        FinalColors with ``changed`` set by comparing against ``previous_result``.

    Raises:
        ExtractionFailed: If no dominant colors could be calculated.
    """
    if algorithm is None:
        algorithm = get_algorithm(settings.algorithm)

    dominant = extract_dominant_colors(pixels, algorithm, settings.sample_size)
    palette = boost_vividness([rgb_to_hsv(c) for c in dominant])

    colors = apply_selection_mode(palette, settings.mode, settings.hue_shift)
    colors = scale_brightness(colors, settings.brightness_factor)

    previous = previous_result.colors if previous_result is not None else None
    changed = has_changed(previous, colors)
    if not changed:
        logger.debug("Colors unchanged since previous cycle")

    payload = encode_payload(colors, settings.color_format)
    logger.debug("Pipeline produced %d colors: %r", len(colors), payload)

    return FinalColors(
        colors=tuple(colors),
        payload=payload,
        color_format=ColorFormat(settings.color_format),
        palette=tuple(palette),
        changed=changed,
    )
