"""
Background Removal
==================

Optional preprocessing filter for captured animations.

A graph-based segmentation (Felzenszwalb-Huttenlocher, via scikit-image)
splits the frame into regions. Regions touching the image border are
treated as background and blanked:
    - any pixel on the top row
    - the upper half of the left and right columns

The bottom edge is left out so a subject cut off by the lower frame
border is kept.
"""

import logging

import cv2
import numpy as np
from skimage.segmentation import felzenszwalb


logger = logging.getLogger(__name__)


def segment_regions(
    image: np.ndarray,
    sigma: float = 0.8,
    scale: float = 100.0,
    min_size: int = 20,
) -> np.ndarray:
    """
    Label every pixel with the region it belongs to.

    Args:
        image: BGR image (H, W, 3), dtype=uint8
        sigma: Gaussian pre-smoothing width
        scale: Higher values give larger regions
        min_size: Minimum region size in pixels

    Returns:
        Integer label array (H, W)
    """
    rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    return felzenszwalb(rgb, scale=scale, sigma=sigma, min_size=min_size, channel_axis=-1)


def border_region_mask(labels: np.ndarray) -> np.ndarray:
    """
    Mask of all regions that touch the top edge or the upper side edges.

    Args:
        labels: Integer region labels (H, W)

    Returns:
        Boolean mask (H, W), True where the pixel should be removed
    """
    height, width = labels.shape
    half = height // 2

    touching = np.concatenate([
        labels[0, :],
        labels[:half, width - 1],
        labels[:half, 0],
    ])
    return np.isin(labels, np.unique(touching))


def remove_background(
    image: np.ndarray,
    sigma: float = 0.8,
    scale: float = 100.0,
    min_size: int = 20,
) -> np.ndarray:
    """
    Copy of the image with border-touching regions set to black.

    Args:
        image: BGR image (H, W, 3), dtype=uint8
        sigma: Gaussian pre-smoothing width
        scale: Higher values give larger regions
        min_size: Minimum region size in pixels

    Returns:
        BGR image of the same shape
    """
    labels = segment_regions(image, sigma=sigma, scale=scale, min_size=min_size)
    mask = border_region_mask(labels)

    result = image.copy()
    result[mask] = 0

    logger.debug(
        f"Background removal: {int(labels.max()) + 1} regions, "
        f"{mask.mean() * 100:.1f}% of pixels removed"
    )
    return result
