"""
Capture Module
==============

Output helpers for the picture mode.

Components:
    - quantize_frame / write_animation: paletted GIF sequences (Pillow)
    - remove_background: border-touching region removal (scikit-image)
"""

from spectral_match.capture.animation import (
    AnimationWriteError,
    quantize_frame,
    write_animation,
)
from spectral_match.capture.segmentation import (
    border_region_mask,
    remove_background,
    segment_regions,
)

__all__ = [
    "AnimationWriteError",
    "quantize_frame",
    "write_animation",
    "border_region_mask",
    "remove_background",
    "segment_regions",
]
