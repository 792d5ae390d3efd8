"""Framebuffer readout helpers for host renderers."""

from typing import Tuple

import jax.numpy as jnp
import numpy as np
from PIL import Image

from chip8vm.constants import PIXEL_OFF, SCREEN_WIDTH, SCREEN_HEIGHT


def framebuffer_to_grid(framebuffer: jnp.ndarray) -> np.ndarray:
    """Flat row-major framebuffer to a boolean ``(height, width)`` grid."""
    pixels = np.asarray(framebuffer) != PIXEL_OFF
    return pixels.reshape(SCREEN_HEIGHT, SCREEN_WIDTH)


def framebuffer_to_rgb(
    framebuffer: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert the framebuffer to an RGB array with optional upscaling.

    Args:
        framebuffer: Flat ``uint32`` framebuffer of length 64*32
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    pixels = framebuffer_to_grid(framebuffer)
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Nearest neighbour upscaling
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def framebuffer_to_text(framebuffer: jnp.ndarray, on: str = "#", off: str = ".") -> str:
    """Render the framebuffer as lines of text, one character per pixel."""
    pixels = framebuffer_to_grid(framebuffer)
    return "\n".join("".join(on if lit else off for lit in row) for row in pixels)


COLOR_SCHEMES = {
    "classic": ((0, 255, 0), (0, 0, 0)),
    "amber": ((255, 176, 0), (0, 0, 0)),
    "white": ((255, 255, 255), (0, 0, 0)),
    "paper": ((32, 32, 32), (240, 234, 214)),
}


def create_color_scheme(scheme: str = "classic") -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """``(on_color, off_color)`` for one of the names in ``COLOR_SCHEMES``."""
    try:
        return COLOR_SCHEMES[scheme]
    except KeyError:
        raise ValueError(f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES)}") from None


def save_frame(framebuffer: jnp.ndarray, path: str, scale: int = 8, color_scheme: str = "classic") -> Image.Image:
    """Write the framebuffer to an image file; the format follows the extension."""
    on_color, off_color = create_color_scheme(color_scheme)
    image = Image.fromarray(framebuffer_to_rgb(framebuffer, scale, on_color, off_color))
    image.save(path)
    return image
