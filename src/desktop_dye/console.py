"""Terminal rendering helpers: title banner, timed progress steps and color swatches."""

import random
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from rich.console import Console
from rich.text import Text

from .colors.conversion import hsv_to_rgb, to_hex
from .core.models import HsvColor, RgbColor

console = Console()

PACKAGE_NAME = "DesktopDye"

# Gradient endpoints for the title banner
TITLE_COLORS: list[tuple[int, int, int]] = [
    (152, 31, 172),
    (255, 0, 106),
    (0, 140, 255),
    (255, 140, 0),
]


def _lerp(start: tuple[int, int, int], end: tuple[int, int, int], t: float) -> tuple[int, int, int]:
    return tuple(int(a + (b - a) * t) for a, b in zip(start, end))


def render_title(version: str, rng: Optional[random.Random] = None) -> Text:
    """Package name on a gradient between two randomly chosen colors."""
    rng = rng or random.Random()
    start, end = rng.sample(TITLE_COLORS, 2)

    title = Text()
    count = len(PACKAGE_NAME)
    for i, char in enumerate(PACKAGE_NAME):
        r, g, b = _lerp(start, end, i / count)
        title.append(char, style=f"bold rgb(255,255,255) on rgb({r},{g},{b})")
    title.append(f" v{version}")
    return title


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


@contextmanager
def step(prompt: str, out: Console = console) -> Iterator[None]:
    """Show a spinner while the block runs, then a ✔/✘ line with its duration.

    Exceptions raised inside the block are re-raised after the ✘ line.
    """
    started = time.perf_counter()
    label = f"[{_timestamp()}] {prompt}"
    try:
        with out.status(Text(f"{label}..."), spinner="dots"):
            yield
    except Exception:
        elapsed_ms = (time.perf_counter() - started) * 1000
        out.print(Text("✘ ", style="red") + Text(label, style="bold") + Text(f" (took {elapsed_ms:.2f}ms)"))
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    out.print(Text("✔ ", style="green") + Text(label) + Text(f" (took {elapsed_ms:.2f}ms)"))


def swatch(color: HsvColor | RgbColor, label: str) -> Text:
    """``label`` on the color's background, with readable foreground text."""
    if isinstance(color, HsvColor):
        rgb = hsv_to_rgb(color)
        bright = color.value > 0.5
    else:
        rgb = color
        bright = max(rgb.as_tuple()) > 127
    foreground = "black" if bright else "white"
    return Text(label, style=f"bold {foreground} on rgb({rgb.red},{rgb.green},{rgb.blue})")


def hex_label(color: HsvColor | RgbColor) -> str:
    return f"#{to_hex(color)}"
