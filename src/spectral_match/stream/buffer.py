"""
Frame Buffer
=============

Bounded FIFO hand-off channel between the camera feed and the consumer.

Design Rules:
    - Fixed maximum size; the producer waits while the buffer is full
    - Frames leave in exactly the order they were captured
    - Exposes minimal metrics for observability
    - Does NOT process or modify frames
"""

import asyncio
import logging
from typing import Optional

from spectral_match.stream.frame import Frame


logger = logging.getLogger(__name__)


class FrameBuffer:
    """
    Bounded FIFO queue for frames.

    This is the ONLY interface between the camera feed and the
    transform/matching stages. Nothing is ever dropped: when the
    buffer is full, put() suspends until the consumer catches up.

    Attributes:
        maxsize: Maximum number of frames to buffer
        total_put: Number of frames handed over so far

    Example:
        buffer = FrameBuffer(maxsize=1)

        # Producer
        await buffer.put(frame)

        # Consumer
        frame = await buffer.get()
    """

    def __init__(self, maxsize: int = 1) -> None:
        """
        Initialize frame buffer.

        Args:
            maxsize: Maximum frames to buffer. Must be >= 1.
        """
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")

        self._maxsize = maxsize
        self._queue: asyncio.Queue[Frame] = asyncio.Queue(maxsize=maxsize)
        self._total_put: int = 0
        self._total_get: int = 0

    @property
    def maxsize(self) -> int:
        """Maximum buffer size."""
        return self._maxsize

    @property
    def size(self) -> int:
        """Current number of frames in buffer."""
        return self._queue.qsize()

    @property
    def total_put(self) -> int:
        """Total frames ever put into buffer."""
        return self._total_put

    async def put(self, frame: Frame) -> None:
        """
        Add frame to buffer, waiting for a free slot if full.

        Args:
            frame: Frame to add
        """
        if self._queue.full():
            logger.debug(f"Buffer full, waiting to hand over frame {frame.frame_id}")
        await self._queue.put(frame)
        self._total_put += 1

    async def get(self, timeout: Optional[float] = None) -> Optional[Frame]:
        """
        Get next frame from buffer.

        Args:
            timeout: Maximum seconds to wait. None = wait forever.

        Returns:
            Next frame, or None if timeout occurred.
        """
        try:
            if timeout is not None:
                frame = await asyncio.wait_for(self._queue.get(), timeout=timeout)
            else:
                frame = await self._queue.get()
        except asyncio.TimeoutError:
            return None
        self._total_get += 1
        return frame

    def get_nowait(self) -> Optional[Frame]:
        """
        Get next frame without waiting.

        Returns:
            Next frame if available, None otherwise.
        """
        try:
            frame = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        self._total_get += 1
        return frame

    def clear(self) -> int:
        """
        Clear all frames from buffer.

        Returns:
            Number of frames cleared.
        """
        cleared = 0
        while self.get_nowait() is not None:
            cleared += 1
        return cleared

    def metrics(self) -> dict:
        """
        Get buffer metrics for observability.

        Returns:
            Dict with size, maxsize, total_put, total_get
        """
        return {
            "size": self.size,
            "maxsize": self._maxsize,
            "total_put": self._total_put,
            "total_get": self._total_get,
        }
