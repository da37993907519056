"""
Camera Feed
===========

Camera acquisition and the single frame producer.

This module provides:
    - CameraSource: Protocol for anything that can deliver BGR frames
    - OpenCVCamera: cv2.VideoCapture backed source (V4L2 devices, indices)
    - CameraFeed: producer task pushing frames into a FrameBuffer

Design Rules:
    - Blocking driver calls run on one worker thread owned by the feed,
      so a release never overlaps a read that is still in flight
    - A stalled read is abandoned after the timeout; the run does not wait
      for it to return
    - Stopping is cooperative: the feed checks its stop event once per frame,
      so one frame already in flight may still be delivered
    - The feed never touches the point store
"""

import asyncio
import concurrent.futures
import logging
import time
from typing import Optional, Protocol, Union

import cv2
import numpy as np

from spectral_match.errors import CameraError
from spectral_match.stream.buffer import FrameBuffer
from spectral_match.stream.frame import Frame


logger = logging.getLogger(__name__)


class CameraSource(Protocol):
    """
    Protocol for camera backends.

    Implementations deliver one BGR uint8 image (H, W, 3) per read() call,
    blocking until the driver has a frame.
    """

    def open(self) -> None:
        """Acquire the device."""
        ...

    def read(self) -> np.ndarray:
        """Block until the next frame is available and return it."""
        ...

    def close(self) -> None:
        """Release the device."""
        ...


class OpenCVCamera:
    """
    Camera source backed by OpenCV's VideoCapture.

    Attributes:
        device: Device path (e.g. /dev/video0) or numeric index
    """

    def __init__(self, device: Union[str, int] = "/dev/video0") -> None:
        if isinstance(device, str) and device.isdigit():
            device = int(device)
        self.device = device
        self._capture: Optional[cv2.VideoCapture] = None

    def open(self) -> None:
        capture = cv2.VideoCapture(self.device)
        if not capture.isOpened():
            capture.release()
            raise CameraError(f"Could not open camera device: {self.device}")
        self._capture = capture
        logger.info(f"Camera opened: {self.device}")

    def read(self) -> np.ndarray:
        if self._capture is None:
            raise CameraError("Camera is not open")
        ok, image = self._capture.read()
        if not ok or image is None:
            raise CameraError(f"Camera {self.device} returned no frame")
        return image

    def close(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info(f"Camera released: {self.device}")


class CameraFeed:
    """
    Producer that streams camera frames into a FrameBuffer.

    Attributes:
        camera: Source of frames
        buffer: Hand-off channel to the consumer
        frames_captured: Frames read from the driver so far

    Example:
        buffer = FrameBuffer(maxsize=1)
        feed = CameraFeed(OpenCVCamera("/dev/video0"), buffer)

        stop = asyncio.Event()
        feed.start(stop)
        frame = await buffer.get()
        await feed.stop()
    """

    def __init__(
        self,
        camera: CameraSource,
        buffer: FrameBuffer,
        read_timeout_seconds: float = 5.0,
    ) -> None:
        """
        Initialize camera feed.

        Args:
            camera: Camera source to read from
            buffer: FrameBuffer receiving frames in capture order
            read_timeout_seconds: Maximum wait for a single driver read
        """
        self.camera = camera
        self.buffer = buffer
        self.read_timeout_seconds = read_timeout_seconds
        self.frames_captured: int = 0

        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        """Whether the producer task is alive."""
        return self._task is not None and not self._task.done()

    def start(self, stop_event: asyncio.Event) -> asyncio.Task:
        """
        Start streaming in a background task.

        Args:
            stop_event: Cancellation token observed once per frame

        Returns:
            The producer task
        """
        if self.running:
            raise RuntimeError("CameraFeed already started")
        self._stop_event = stop_event
        self._task = asyncio.create_task(self.run(stop_event), name="camera_feed")
        return self._task

    async def stop(self, timeout: float = 5.0) -> None:
        """
        Request the producer to stop and wait for it.

        Frames still waiting in the buffer are discarded so a producer
        suspended on a full buffer can observe the stop event. A producer
        stuck in a driver read is cancelled after the timeout.
        """
        if self._stop_event is not None:
            self._stop_event.set()

        task = self._task
        if task is None:
            return

        discarded = self.buffer.clear()
        if discarded:
            logger.debug(f"Discarded {discarded} unconsumed frames on stop")

        _, pending = await asyncio.wait({task}, timeout=timeout)
        if pending:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        elif not task.cancelled() and task.exception() is not None:
            logger.warning(f"Camera feed ended with error: {task.exception()}")

    def failure(self) -> Optional[BaseException]:
        """
        Error that ended the producer, if it has ended.

        Returns:
            The producer's exception, a CameraError if it stopped without
            one, or None while it is still streaming.
        """
        task = self._task
        if task is None or not task.done():
            return None
        if task.cancelled():
            return CameraError("Camera feed was cancelled")
        return task.exception() or CameraError("Camera feed ended")

    async def run(self, stop_event: asyncio.Event) -> None:
        """
        Stream frames until the stop event is set.

        Raises:
            CameraError: If the camera cannot be opened, read, or stalls
        """
        self._stop_event = stop_event
        loop = asyncio.get_running_loop()
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="camera_feed",
        )
        reading = False

        try:
            await loop.run_in_executor(executor, self.camera.open)
            logger.info("Camera feed started")

            try:
                while not stop_event.is_set():
                    reading = True
                    try:
                        image = await asyncio.wait_for(
                            loop.run_in_executor(executor, self.camera.read),
                            timeout=self.read_timeout_seconds,
                        )
                    except asyncio.TimeoutError:
                        raise CameraError(
                            f"Camera read timed out after {self.read_timeout_seconds:.1f}s"
                        )
                    except Exception:
                        reading = False
                        raise
                    reading = False

                    frame = Frame(
                        frame_id=self.frames_captured,
                        timestamp=time.time(),
                        image=image,
                    )
                    self.frames_captured += 1
                    await self.buffer.put(frame)
            finally:
                if reading:
                    # Queued behind the abandoned read on the same thread
                    executor.submit(self.camera.close)
                    logger.warning("Camera read still in flight; release deferred")
                else:
                    await loop.run_in_executor(executor, self.camera.close)
                logger.info(f"Camera feed stopped after {self.frames_captured} frames")
        finally:
            executor.shutdown(wait=False)
