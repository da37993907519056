"""
Run Modes
=========

Frame processing paths behind the command line.

    learn:   capture one frame, append its embedding under a label, save
    infer:   classify every captured frame, emit label + distance and,
             with enough history, a 2-D projection coordinate
    picture: capture a fixed number of frames into GIF animations

Ownership:
    The camera feed only produces frames. The point store is loaded once
    per run and owned by the consuming path below; it is saved once at
    the end of learn and never written by infer.
"""

import asyncio
import functools
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, List, Optional

import numpy as np

from spectral_match.capture import quantize_frame, remove_background, write_animation
from spectral_match.config import Settings
from spectral_match.errors import ConfigurationError, ProjectionError, StoreNotFoundError
from spectral_match.matching import IncrementalProjector, NearestNeighborClassifier
from spectral_match.spectral import SpectralTransform, extract_embedding
from spectral_match.store import LabeledPoints, PointEntry, load_points, save_points
from spectral_match.stream import (
    CameraFeed,
    CameraSource,
    Frame,
    FrameBuffer,
    check_sample_shape,
    sample_luma,
)


logger = logging.getLogger(__name__)

NextFrame = Callable[[], Awaitable[Frame]]


# =============================================================================
# Embedding
# =============================================================================

class FrameEmbedder:
    """
    Frame to embedding vector: luma sample, transform, low-frequency block.

    Example:
        embedder = FrameEmbedder(settings)
        vector = embedder.embed(frame)
    """

    def __init__(self, settings: Settings) -> None:
        self.config = settings.embedding_config()
        self.transform = SpectralTransform(
            width=self.config.transform_width,
            height=self.config.transform_height,
            representation=self.config.representation,
        )

    def embed(self, frame: Frame) -> np.ndarray:
        """Embedding vector of a frame under the configured settings."""
        width = self.config.transform_width
        height = self.config.transform_height

        sample = sample_luma(frame, width, height)
        check_sample_shape(sample, width, height)

        coefficients = self.transform.transform(sample.luma)
        return extract_embedding(
            coefficients,
            self.config.embedding_width,
            self.config.embedding_height,
        )


# =============================================================================
# Streaming
# =============================================================================

@asynccontextmanager
async def open_stream(
    camera: CameraSource,
    settings: Settings,
    poll_interval: float = 0.5,
) -> AsyncIterator[NextFrame]:
    """
    Run a camera feed for the duration of the block.

    Yields:
        Coroutine function returning the next frame in capture order.
        It raises the feed's error if the producer dies.
    """
    buffer = FrameBuffer(maxsize=settings.camera.max_queue_size)
    feed = CameraFeed(
        camera,
        buffer,
        read_timeout_seconds=settings.camera.read_timeout_seconds,
    )
    stop_event = asyncio.Event()
    feed.start(stop_event)

    async def next_frame() -> Frame:
        while True:
            frame = await buffer.get(timeout=poll_interval)
            if frame is not None:
                return frame
            failure = feed.failure()
            if failure is not None:
                raise failure

    try:
        yield next_frame
    finally:
        await feed.stop()


# =============================================================================
# Learn
# =============================================================================

async def learn(settings: Settings, camera: CameraSource, label: str) -> PointEntry:
    """
    Capture one frame and append its embedding to the store under a label.

    A missing store file starts an empty store.

    Args:
        settings: Run configuration
        camera: Camera source
        label: Non-empty label name

    Returns:
        The label's entry after the append
    """
    if not label:
        raise ConfigurationError("learn needs a non-empty label")

    warmup = settings.capture.warmup_seconds
    if warmup > 0:
        logger.info(f"Waiting {warmup:.1f}s before capture")
        await asyncio.sleep(warmup)

    embedder = FrameEmbedder(settings)
    store_path = settings.store.path
    points = load_points(store_path, embedder.config)
    if points is None:
        points = LabeledPoints(embedder.config)

    async with open_stream(camera, settings) as next_frame:
        frame = await next_frame()

    vector = embedder.embed(frame)
    entry = points.learn(label, vector)
    save_points(store_path, points)

    logger.info(f"Learned {label!r} from frame {frame.frame_id}: {len(entry)} vectors")
    return entry


# =============================================================================
# Infer
# =============================================================================

class FrameClassifier:
    """
    Per-frame inference over a loaded store.

    Produces the output line for one frame: "<label> <distance>", followed
    by " <x> <y>" when the label's history is long enough to project.
    """

    def __init__(self, settings: Settings, points: LabeledPoints) -> None:
        self.embedder = FrameEmbedder(settings)
        self.points = points
        self.classifier = NearestNeighborClassifier(points)
        self.projector = IncrementalProjector(
            scalar=settings.projection.scalar,
            components=settings.projection.components,
        )
        self.min_history = settings.projection.min_history
        self.projection_errors: int = 0

    def process(self, frame: Frame) -> str:
        vector = self.embedder.embed(frame)
        match = self.classifier.classify(vector)
        if match is None:
            return "no match"

        line = str(match)
        entry = self.points.get(match.label)
        if entry is not None and len(entry) > self.min_history:
            try:
                point = self.projector.project(entry.points, vector)
                line = f"{line} {point}"
            except ProjectionError as e:
                self.projection_errors += 1
                logger.warning(f"Projection skipped (frame={frame.frame_id}): {e}")
        return line


async def infer(
    settings: Settings,
    camera: CameraSource,
    emit: Callable[[str], None] = print,
    max_frames: Optional[int] = None,
) -> int:
    """
    Classify captured frames against the persisted store.

    Args:
        settings: Run configuration
        camera: Camera source
        emit: Receives one output line per frame
        max_frames: Stop after this many frames (None = run until interrupted)

    Returns:
        Number of frames processed

    Raises:
        StoreNotFoundError: If there is no store to classify against
    """
    embedding_config = settings.embedding_config()
    points = load_points(settings.store.path, embedding_config)
    if points is None:
        raise StoreNotFoundError(
            f"No point store at {settings.store.path}; learn at least one label first"
        )

    frame_classifier = FrameClassifier(settings, points)
    processed = 0

    async with open_stream(camera, settings) as next_frame:
        while max_frames is None or processed < max_frames:
            frame = await next_frame()
            emit(frame_classifier.process(frame))
            processed += 1

    logger.info(
        f"Inference finished: {processed} frames, "
        f"{frame_classifier.projection_errors} projection errors"
    )
    return processed


# =============================================================================
# Picture
# =============================================================================

async def capture_animation(settings: Settings, camera: CameraSource) -> List[Path]:
    """
    Capture a fixed number of frames and write them as GIF animations.

    With segmentation enabled a second animation is written in which
    border-touching regions are removed.

    Returns:
        Paths of the written animations
    """
    capture = settings.capture
    segmentation = settings.segmentation
    loop = asyncio.get_running_loop()

    frames = []
    segmented = []
    async with open_stream(camera, settings) as next_frame:
        for _ in range(capture.frames):
            frame = await next_frame()
            frames.append(quantize_frame(frame.image))

            if capture.segmentation:
                cleaned = await loop.run_in_executor(
                    None,
                    functools.partial(
                        remove_background,
                        frame.image,
                        sigma=segmentation.sigma,
                        scale=segmentation.scale,
                        min_size=segmentation.min_size,
                    ),
                )
                segmented.append(quantize_frame(cleaned))

    written = [Path(capture.output_path)]
    write_animation(capture.output_path, frames, capture.frame_delay_ms)
    if capture.segmentation:
        write_animation(capture.segmented_path, segmented, capture.frame_delay_ms)
        written.append(Path(capture.segmented_path))
    return written
