"""
Stream Module
=============

Camera acquisition and frame hand-off components.

This module provides the ingestion layer for spectral-match:
    - Frame: Typed frame data model (internal representation)
    - FrameBuffer: Bounded FIFO between producer and consumer
    - CameraSource / OpenCVCamera: Camera backends
    - CameraFeed: Producer task with a cooperative stop event
    - FrameSample / sample_luma: Fixed-size luma grids for the transform

Example:
    from spectral_match.stream import CameraFeed, FrameBuffer, OpenCVCamera

    buffer = FrameBuffer(maxsize=1)
    feed = CameraFeed(OpenCVCamera("/dev/video0"), buffer)

    stop = asyncio.Event()
    feed.start(stop)
    while True:
        frame = await buffer.get()
        process(frame)
"""

from spectral_match.stream.frame import Frame
from spectral_match.stream.buffer import FrameBuffer
from spectral_match.stream.camera import CameraFeed, CameraSource, OpenCVCamera
from spectral_match.stream.luma import FrameSample, check_sample_shape, sample_luma


__all__ = [
    "Frame",
    "FrameBuffer",
    "CameraFeed",
    "CameraSource",
    "OpenCVCamera",
    "FrameSample",
    "check_sample_shape",
    "sample_luma",
]
