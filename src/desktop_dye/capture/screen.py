"""Screen enumeration and pixel capture via mss."""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.exceptions import CaptureFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScreenInfo:
    """A capturable monitor. ``id`` is the mss monitor index (1-based)."""
    id: int
    left: int
    top: int
    width: int
    height: int
    is_primary: bool = False

    @property
    def region(self) -> dict:
        return {"left": self.left, "top": self.top, "width": self.width, "height": self.height}


def list_screens() -> list[ScreenInfo]:
    """List all monitors. mss puts the primary monitor first.

    Raises:
        CaptureFailed: If monitors cannot be queried.
    """
    import mss

    try:
        with mss.mss() as sct:
            # monitors[0] is the union of all screens
            monitors = sct.monitors[1:]
    except Exception as e:
        raise CaptureFailed(f"Failed to list screens: {e}") from e

    return [
        ScreenInfo(
            id=i,
            left=m["left"],
            top=m["top"],
            width=m["width"],
            height=m["height"],
            is_primary=(i == 1),
        )
        for i, m in enumerate(monitors, start=1)
    ]


def find_screen(screens: list[ScreenInfo], screen_id: Optional[int] = None) -> ScreenInfo:
    """Return the screen with ``screen_id``, or the primary screen when None.

    Raises:
        CaptureFailed: If there are no screens or the requested one is missing.
    """
    if not screens:
        raise CaptureFailed("No screens found")

    if screen_id is not None:
        for screen in screens:
            if screen.id == screen_id:
                return screen
        raise CaptureFailed(f"Failed to find screen with id {screen_id}")

    for screen in screens:
        if screen.is_primary:
            return screen
    raise CaptureFailed("Failed to find primary screen")


def _grab(screen: ScreenInfo):
    import mss

    try:
        with mss.mss() as sct:
            return sct.grab(screen.region)
    except Exception as e:
        raise CaptureFailed(f"Failed to capture screen {screen.id}: {e}") from e


def capture_pixels(screen: ScreenInfo) -> np.ndarray:
    """Capture a screen and return its pixels as an ``(N, 3)`` uint8 RGB array.

    Raises:
        CaptureFailed: If the capture fails or yields no pixels.
    """
    shot = _grab(screen)
    pixels = np.frombuffer(shot.rgb, dtype=np.uint8).reshape(-1, 3)
    if len(pixels) == 0:
        raise CaptureFailed(f"Screen {screen.id} capture returned no pixels")
    logger.debug("Captured %d pixels from screen %d", len(pixels), screen.id)
    return pixels


def capture_image(screen: ScreenInfo):
    """Capture a screen as a Pillow RGB image."""
    from PIL import Image

    shot = _grab(screen)
    return Image.frombytes("RGB", shot.size, shot.rgb)
