"""Dominant color extraction from captured screen pixels.

Two interchangeable algorithms reduce an arbitrary number of pixel samples
to a small palette:

- ``quantization``: Pillow's median-cut quantizer over RGB space.
- ``clustering``: k-means in CIELAB space (scikit-learn + scikit-image).

Both implement the :class:`DominantColorAlgorithm` protocol and are built
through :func:`get_algorithm`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

import numpy as np

from ..core.exceptions import ExtractionFailed
from ..core.models import AlgorithmKind, PaletteEntry, RgbColor

logger = logging.getLogger(__name__)

# Allowed palette sizes
MIN_SAMPLE_SIZE = 1
MAX_SAMPLE_SIZE = 10

# Clustering works on a deterministic random subset of the screen
DEFAULT_MAX_SAMPLES = 20_000
DEFAULT_SEED = 42


def as_pixel_array(pixels: np.ndarray | Iterable[RgbColor | tuple[int, int, int]]) -> np.ndarray:
    """Normalize pixel samples to an ``(N, 3)`` uint8 array."""
    if isinstance(pixels, np.ndarray):
        arr = pixels
    else:
        rows = [p.as_tuple() if isinstance(p, RgbColor) else tuple(p) for p in pixels]
        arr = np.asarray(rows, dtype=np.uint8)
    if arr.size == 0:
        return np.empty((0, 3), dtype=np.uint8)
    return np.ascontiguousarray(arr.reshape(-1, 3), dtype=np.uint8)


@runtime_checkable
class DominantColorAlgorithm(Protocol):
    """Protocol for dominant color algorithms."""

    @property
    def name(self) -> str:
        """Short identifier (e.g. 'quantization')."""
        ...

    def weighted_palette(self, pixels: np.ndarray, k: int) -> list[PaletteEntry]:
        """Return up to ``k`` colors with their dominance share."""
        ...

    def extract(self, pixels: np.ndarray, k: int) -> list[RgbColor]:
        """Return up to ``k`` colors in the algorithm's presentation order."""
        ...


class QuantizationAlgorithm:
    """Median-cut quantization using Pillow.

    Every pixel is used (no sub-sampling) and the palette is built in a
    single pass. Entries are ordered by pixel count, most frequent first.
    """

    name = AlgorithmKind.QUANTIZATION.value

    def weighted_palette(self, pixels: np.ndarray, k: int) -> list[PaletteEntry]:
        from PIL import Image

        arr = as_pixel_array(pixels)
        if len(arr) == 0:
            return []

        img = Image.fromarray(arr.reshape(1, -1, 3), "RGB")
        quantized = img.quantize(colors=k, method=Image.Quantize.MEDIANCUT)

        palette_data = quantized.getpalette()
        if palette_data is None:
            return []
        histogram = quantized.histogram()

        # Build (count, color) pairs from palette
        color_counts: list[tuple[int, RgbColor]] = []
        for i in range(min(k, len(histogram), len(palette_data) // 3)):
            count = histogram[i]
            if count == 0:
                continue
            r, g, b = palette_data[i * 3:i * 3 + 3]
            color_counts.append((count, RgbColor(red=r, green=g, blue=b)))

        color_counts.sort(key=lambda x: x[0], reverse=True)

        total = len(arr)
        return [PaletteEntry(color=color, weight=count / total) for count, color in color_counts[:k]]

    def extract(self, pixels: np.ndarray, k: int) -> list[RgbColor]:
        return [entry.color for entry in self.weighted_palette(pixels, k)]


class ClusteringAlgorithm:
    """K-means clustering of pixels in CIELAB space.

    Clustering in a perceptual space groups colors the way they look rather
    than by raw channel distance. The returned dominance weight is each
    cluster's share of the sampled pixels.

    :meth:`extract` orders colors by ascending weight, so the least dominant
    cluster comes first.
    """

    name = AlgorithmKind.CLUSTERING.value

    def __init__(self, max_samples: int = DEFAULT_MAX_SAMPLES, seed: int = DEFAULT_SEED):
        self.max_samples = max_samples
        self.seed = seed

    def _sample(self, arr: np.ndarray) -> np.ndarray:
        """Deterministically down-sample to at most ``max_samples`` pixels."""
        if len(arr) <= self.max_samples:
            return arr
        rng = np.random.default_rng(self.seed)
        indices = rng.choice(len(arr), size=self.max_samples, replace=False)
        logger.debug("Down-sampled %d pixels to %d", len(arr), self.max_samples)
        return arr[indices]

    def weighted_palette(self, pixels: np.ndarray, k: int) -> list[PaletteEntry]:
        from skimage.color import lab2rgb, rgb2lab
        from sklearn.cluster import KMeans

        arr = as_pixel_array(pixels)
        if len(arr) == 0:
            return []

        sample = self._sample(arr)
        n_unique = len(np.unique(sample, axis=0))
        n_clusters = min(k, n_unique)

        lab = rgb2lab(sample.reshape(-1, 1, 3)).reshape(-1, 3)
        kmeans = KMeans(n_clusters=n_clusters, n_init="auto", random_state=self.seed)
        labels = kmeans.fit_predict(lab)

        centers_rgb = lab2rgb(kmeans.cluster_centers_.reshape(-1, 1, 3)).reshape(-1, 3)
        centers_u8 = np.clip(np.round(centers_rgb * 255), 0, 255).astype(np.uint8)

        counts = np.bincount(labels, minlength=n_clusters)
        total = counts.sum()

        return [
            PaletteEntry(
                color=RgbColor(red=int(c[0]), green=int(c[1]), blue=int(c[2])),
                weight=float(count / total),
            )
            for c, count in zip(centers_u8, counts)
        ]

    def extract(self, pixels: np.ndarray, k: int) -> list[RgbColor]:
        entries = sorted(self.weighted_palette(pixels, k), key=lambda e: e.weight)
        return [entry.color for entry in entries]


def get_algorithm(kind: AlgorithmKind | str) -> DominantColorAlgorithm:
    """Factory: instantiate the algorithm for ``kind``.

    Raises:
        ValueError: If the kind is not recognized.
    """
    kind = AlgorithmKind(kind)
    if kind == AlgorithmKind.QUANTIZATION:
        return QuantizationAlgorithm()
    elif kind == AlgorithmKind.CLUSTERING:
        return ClusteringAlgorithm()
    else:
        raise ValueError(f"Unknown algorithm: {kind}")


def extract_dominant_colors(
    pixels: np.ndarray | Iterable[RgbColor],
    algorithm: DominantColorAlgorithm,
    k: int,
) -> list[RgbColor]:
    """Reduce pixel samples to at most ``k`` dominant colors.

    Args:
        pixels: Pixel samples, as an ``(N, 3)`` array or a sequence of colors.
        algorithm: The algorithm to run.
        k: Requested palette size (1-10).

    Returns:
        Non-empty list of colors in the algorithm's order.

    Raises:
        ExtractionFailed: If the algorithm errors or returns no colors.
    """
    arr = as_pixel_array(pixels)
    try:
        colors = algorithm.extract(arr, k)
    except Exception as e:
        logger.warning("%s extraction failed", algorithm.name, exc_info=True)
        raise ExtractionFailed(f"Failed to calculate dominant colors: {e}") from e

    if not colors:
        raise ExtractionFailed("Failed to calculate dominant colors, got 0 results")

    logger.debug("%s extracted %d colors from %d pixels", algorithm.name, len(colors), len(arr))
    return colors
