"""
Luma Sampling
=============

Dedicated module for turning camera frames into fixed-size luma samples.

Design Rules:
    - This is the ONLY place in the codebase that touches frame pixels
      on the way to the spectral transform
    - Output is float64 luma (the Y of YCrCb), resized to the transform size
    - Shape checks happen here, before the transform runs
"""

import logging
from dataclasses import dataclass

import cv2
import numpy as np

from spectral_match.errors import SampleShapeError
from spectral_match.stream.frame import Frame


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FrameSample:
    """
    Fixed-size luma grid taken from one frame.

    Attributes:
        frame_id: Frame the sample was taken from
        luma: Luma intensities as np.ndarray (H, W), dtype=float64
    """

    frame_id: int
    luma: np.ndarray

    @property
    def width(self) -> int:
        return self.luma.shape[1]

    @property
    def height(self) -> int:
        return self.luma.shape[0]

    def __repr__(self) -> str:
        return f"FrameSample(frame_id={self.frame_id}, size={self.width}x{self.height})"


def sample_luma(frame: Frame, width: int, height: int) -> FrameSample:
    """
    Extract the luma plane of a frame and resize it to width x height.

    Args:
        frame: Captured BGR frame
        width: Target sample width
        height: Target sample height

    Returns:
        FrameSample with a (height, width) float64 luma grid

    Raises:
        SampleShapeError: If the frame is not a 3-channel image
    """
    image = frame.image
    if image.ndim != 3 or image.shape[2] != 3:
        raise SampleShapeError(
            f"Invalid image shape for frame {frame.frame_id}: {image.shape}"
        )

    ycrcb = cv2.cvtColor(image, cv2.COLOR_BGR2YCrCb)
    luma = ycrcb[..., 0]

    if luma.shape != (height, width):
        luma = cv2.resize(luma, (width, height), interpolation=cv2.INTER_AREA)

    return FrameSample(frame_id=frame.frame_id, luma=luma.astype(np.float64))


def check_sample_shape(sample: FrameSample, width: int, height: int) -> None:
    """
    Reject samples whose grid differs from the configured transform size.

    Raises:
        SampleShapeError: If the luma grid is not (height, width)
    """
    if sample.luma.ndim != 2:
        raise SampleShapeError(
            f"Sample for frame {sample.frame_id} must be 2D, got shape {sample.luma.shape}"
        )
    if sample.luma.shape != (height, width):
        raise SampleShapeError(
            f"Sample for frame {sample.frame_id} is {sample.width}x{sample.height}, "
            f"transform expects {width}x{height}"
        )
