"""
Test Configuration
==================

Pytest fixtures and test configuration for spectral-match.
"""

import threading
from typing import List, Optional

import numpy as np
import pytest

from spectral_match.config import Settings
from spectral_match.errors import CameraError
from spectral_match.models.embedding import EmbeddingConfig, Representation


class FakeCamera:
    """Camera source replaying a fixed list of BGR images."""

    def __init__(
        self,
        images: List[np.ndarray],
        cycle: bool = True,
        fail_on_open: bool = False,
    ) -> None:
        self.images = images
        self.cycle = cycle
        self.fail_on_open = fail_on_open
        self.reads = 0
        self.opened = False
        self.closed = False
        self._lock = threading.Lock()

    def open(self) -> None:
        if self.fail_on_open:
            raise CameraError("fake camera unavailable")
        self.opened = True

    def read(self) -> np.ndarray:
        with self._lock:
            if not self.cycle and self.reads >= len(self.images):
                raise CameraError("fake camera exhausted")
            image = self.images[self.reads % len(self.images)]
            self.reads += 1
        return image

    def close(self) -> None:
        self.closed = True


class StalledCamera:
    """Camera whose reads block until released."""

    def __init__(self) -> None:
        self.release = threading.Event()
        self.closed = threading.Event()
        self.closed_during_read = False
        self._reading = False

    def open(self) -> None:
        pass

    def read(self) -> np.ndarray:
        self._reading = True
        self.release.wait(timeout=10.0)
        self._reading = False
        return np.zeros((48, 64, 3), dtype=np.uint8)

    def close(self) -> None:
        if self._reading:
            self.closed_during_read = True
        self.closed.set()


def random_images(count: int, seed: int = 0, shape=(48, 64, 3)) -> List[np.ndarray]:
    rng = np.random.default_rng(seed)
    return [rng.integers(0, 256, size=shape, dtype=np.uint8) for _ in range(count)]


@pytest.fixture
def make_camera():
    """Factory for fake cameras."""
    def _make(images: Optional[List[np.ndarray]] = None, **kwargs) -> FakeCamera:
        return FakeCamera(images if images is not None else random_images(4), **kwargs)
    return _make


@pytest.fixture
def complex_config():
    """Default 24x24 transform with an 8x8 complex embedding."""
    return EmbeddingConfig()


@pytest.fixture
def real_2x2_config():
    """Tiny real-valued configuration for hand-computed distances."""
    return EmbeddingConfig(
        transform_width=2,
        transform_height=2,
        embedding_width=2,
        embedding_height=2,
        representation=Representation.REAL,
    )


@pytest.fixture
def run_settings(tmp_path):
    """Settings writing every artifact under tmp_path, without warm-up."""
    return Settings.model_validate({
        "camera": {"read_timeout_seconds": 2.0},
        "store": {"path": str(tmp_path / "points.json")},
        "capture": {
            "frames": 4,
            "warmup_seconds": 0,
            "output_path": str(tmp_path / "webcamera.gif"),
            "segmented_path": str(tmp_path / "segmented.gif"),
        },
    })
