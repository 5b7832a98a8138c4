"""Framebuffer conversion for external renderers.

The core only exposes a (32, 64) boolean grid; these helpers turn it into
pixels or text for whatever front end is drawing it.
"""

import numpy as np
from typing import Tuple

Color = Tuple[int, int, int]

# name: (lit, unlit)
COLOR_SCHEMES = {
    "white": ((255, 255, 255), (0, 0, 0)),
    "classic": ((0, 255, 0), (0, 0, 0)),
    "amber": ((255, 176, 0), (0, 0, 0)),
    "blue": ((0, 255, 255), (0, 0, 64)),
    "retro": ((255, 255, 0), (64, 0, 64)),
}


def create_color_scheme(scheme: str = "white") -> Tuple[Color, Color]:
    """Look up a predefined ``(on_color, off_color)`` pair by name."""
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES)}"
        )
    return COLOR_SCHEMES[scheme]


def framebuffer_to_rgb(
    display,
    scale: int = 10,
    on_color: Color = (255, 255, 255),
    off_color: Color = (0, 0, 0),
) -> np.ndarray:
    """Convert the boolean framebuffer to an RGB image.

    Args:
        display: Boolean array of shape (32, 64), row-major
        scale: Nearest-neighbour upscaling factor (default: 10x)
        on_color: RGB color for lit pixels
        off_color: RGB color for unlit pixels

    Returns:
        uint8 array of shape (32*scale, 64*scale, 3)
    """
    if scale < 1:
        raise ValueError(f"Scale must be a positive integer, got {scale}")

    lit = np.asarray(display, dtype=np.bool_)[..., None]
    frame = np.where(
        lit,
        np.asarray(on_color, dtype=np.uint8),
        np.asarray(off_color, dtype=np.uint8),
    )
    return frame.repeat(scale, axis=0).repeat(scale, axis=1)


def framebuffer_to_text(display, on: str = "#", off: str = ".") -> str:
    """Render the framebuffer as one text line per screen row."""
    lit = np.asarray(display, dtype=np.bool_)
    return "\n".join("".join(on if pixel else off for pixel in row) for row in lit)
