"""CHIP-8 rendering utilities for the external renderer."""

from typing import Tuple, Union

import jax.numpy as jnp
import numpy as np

RGB = Tuple[int, int, int]


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 1,
    on_color: RGB = (255, 255, 255),
    off_color: RGB = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 boolean display to RGB array with optional upscaling.

    Args:
        display: Boolean array of shape (64, 32) representing CHIP-8 display
        scale: Upscaling factor (pixel scale)
        on_color: RGB color for "on" pixels (foreground)
        off_color: RGB color for "off" pixels (background)

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    pixels = np.asarray(display, dtype=np.bool_)

    # Original: (64 width, 32 height) -> Display: (32 height, 64 width)
    pixels = pixels.T
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Apply upscaling using nearest neighbor interpolation
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def create_color_scheme(scheme: str = "mono") -> Tuple[RGB, RGB]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("mono", "classic", "amber", "violet", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "mono": ((255, 255, 255), (0, 0, 0)),  # White on black
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "violet": ((179, 102, 184), (45, 25, 61)),  # Lilac on plum
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]


def parse_color(color: Union[int, str, RGB]) -> RGB:
    """Normalise ``0xRRGGBB``, ``"#RRGGBB"`` or an RGB tuple to an RGB tuple."""
    if isinstance(color, str):
        text = color.strip().lstrip("#")
        if text.lower().startswith("0x"):
            text = text[2:]
        try:
            color = int(text, 16)
        except ValueError:
            raise ValueError(f"Invalid color '{color}'") from None

    if isinstance(color, int):
        if not 0 <= color <= 0xFFFFFF:
            raise ValueError(f"Color {color:#x} outside 0x000000-0xFFFFFF")
        return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF

    rgb = tuple(int(c) for c in color)
    if len(rgb) != 3 or any(not 0 <= c <= 255 for c in rgb):
        raise ValueError(f"Invalid RGB color {color!r}")
    return rgb
