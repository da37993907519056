"""
Frame Data Model
=================

Internal frame representation for the capture pipeline.

This module defines the typed Frame class passed from the camera feed to
downstream processing stages.

Design Rules:
    - This is the ONLY frame format passed to downstream stages
    - Holds the decoded BGR image exactly as the camera delivered it
    - Immutable once created
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class Frame:
    """
    Captured camera frame.

    Attributes:
        frame_id: Monotonically increasing counter assigned by the feed
        timestamp: UNIX timestamp when the frame was read from the driver
        image: BGR image as np.ndarray (H, W, 3), dtype=uint8
    """

    frame_id: int
    timestamp: float
    image: np.ndarray

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the full image."""
        return (
            f"Frame(frame_id={self.frame_id}, "
            f"timestamp={self.timestamp:.3f}, "
            f"shape={self.image.shape})"
        )
