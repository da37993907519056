"""
Animation Writer
================

Quantizes captured frames and writes them as an animated GIF.

Each frame is reduced to a 256-colour palette with Floyd-Steinberg
dithering before encoding. Encoding itself is Pillow's.
"""

import logging
from pathlib import Path
from typing import List, Sequence, Union

import cv2
import numpy as np
from PIL import Image

from spectral_match.errors import SpectralMatchError


logger = logging.getLogger(__name__)


class AnimationWriteError(SpectralMatchError):
    """Raised when an animation cannot be written."""
    pass


def quantize_frame(image: np.ndarray, colors: int = 256) -> Image.Image:
    """
    Convert a BGR frame into a paletted image.

    Args:
        image: BGR image (H, W, 3), dtype=uint8
        colors: Palette size

    Returns:
        Pillow image in mode "P"
    """
    rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    return Image.fromarray(rgb).quantize(colors=colors, dither=Image.Dither.FLOYDSTEINBERG)


def write_animation(
    path: Union[str, Path],
    frames: Sequence[Image.Image],
    frame_delay_ms: int = 0,
) -> None:
    """
    Encode paletted frames as an animated GIF, in order.

    Args:
        path: Destination file
        frames: Paletted frames
        frame_delay_ms: Display time of each frame

    Raises:
        AnimationWriteError: If there is nothing to write or the file
            cannot be written
    """
    frames: List[Image.Image] = list(frames)
    if not frames:
        raise AnimationWriteError(f"No frames to write to {path}")

    try:
        frames[0].save(
            path,
            format="GIF",
            save_all=True,
            append_images=frames[1:],
            duration=frame_delay_ms,
            loop=0,
        )
    except OSError as e:
        raise AnimationWriteError(f"Cannot write animation {path}: {e}")

    logger.info(f"Wrote {len(frames)} frames to {path}")
