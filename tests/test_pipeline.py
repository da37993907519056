"""
Run Mode Tests
==============

learn / infer / picture against a fake camera.
"""

import asyncio
import time

import numpy as np
import pytest
from PIL import Image

from conftest import StalledCamera, random_images
from spectral_match.errors import CameraError, StoreNotFoundError
from spectral_match.models.embedding import Representation
from spectral_match.pipeline import FrameEmbedder, capture_animation, infer, learn
from spectral_match.store import LabeledPoints, load_points, save_points
from spectral_match.stream import Frame


def run_infer(settings, camera, max_frames):
    lines = []
    count = asyncio.run(infer(settings, camera, emit=lines.append, max_frames=max_frames))
    return count, lines


class TestFrameEmbedder:
    """Tests for frame to embedding wiring."""

    def test_embedding_shape_and_dtype(self, run_settings):
        frame = Frame(frame_id=0, timestamp=0.0, image=random_images(1)[0])

        vector = FrameEmbedder(run_settings).embed(frame)

        assert vector.shape == (64,)
        assert vector.dtype == np.complex128

    def test_real_representation(self, run_settings):
        settings = run_settings.model_copy(update={
            "transform": run_settings.transform.model_copy(update={"representation": Representation.REAL}),
        })
        frame = Frame(frame_id=0, timestamp=0.0, image=random_images(1)[0])

        vector = FrameEmbedder(settings).embed(frame)

        assert vector.dtype == np.float64


class TestLearn:
    """Tests for the learn path."""

    def test_first_learn_creates_store(self, run_settings, make_camera):
        entry = asyncio.run(learn(run_settings, make_camera(), "alice"))

        assert entry.name == "alice"
        assert len(entry) == 1

        points = load_points(run_settings.store.path, run_settings.embedding_config())
        assert points.labels == ["alice"]

    def test_learn_appends_to_existing_store(self, run_settings, make_camera):
        asyncio.run(learn(run_settings, make_camera(random_images(1, seed=1)), "alice"))
        asyncio.run(learn(run_settings, make_camera(random_images(1, seed=2)), "bob"))
        entry = asyncio.run(learn(run_settings, make_camera(random_images(1, seed=3)), "alice"))

        assert len(entry) == 2
        points = load_points(run_settings.store.path, run_settings.embedding_config())
        assert points.labels == ["alice", "bob"]
        assert points.total_vectors == 3

    def test_learned_vector_is_first_frame(self, run_settings, make_camera):
        images = random_images(3, seed=4)
        entry = asyncio.run(learn(run_settings, make_camera(images), "alice"))

        expected = FrameEmbedder(run_settings).embed(
            Frame(frame_id=0, timestamp=0.0, image=images[0])
        )
        assert np.array_equal(entry.points[0], expected)

    def test_camera_failure_aborts_without_saving(self, run_settings, make_camera):
        with pytest.raises(CameraError):
            asyncio.run(learn(run_settings, make_camera(fail_on_open=True), "alice"))

        assert load_points(run_settings.store.path, run_settings.embedding_config()) is None

    def test_stalled_camera_fails_promptly(self, run_settings):
        settings = run_settings.model_copy(update={
            "camera": run_settings.camera.model_copy(update={"read_timeout_seconds": 0.3}),
        })
        camera = StalledCamera()

        started = time.monotonic()
        try:
            with pytest.raises(CameraError):
                asyncio.run(learn(settings, camera, "alice"))
            elapsed = time.monotonic() - started
        finally:
            camera.release.set()

        assert elapsed < 3.0
        assert load_points(settings.store.path, settings.embedding_config()) is None


class TestInfer:
    """Tests for the inference path."""

    def test_missing_store_aborts(self, run_settings, make_camera):
        with pytest.raises(StoreNotFoundError):
            run_infer(run_settings, make_camera(), max_frames=1)

    def test_empty_store_reports_no_match(self, run_settings, make_camera):
        save_points(run_settings.store.path, LabeledPoints(run_settings.embedding_config()))

        count, lines = run_infer(run_settings, make_camera(), max_frames=2)

        assert count == 2
        assert lines == ["no match", "no match"]

    def test_learned_frame_is_recognised(self, run_settings, make_camera):
        alice, bob = random_images(2, seed=6)
        asyncio.run(learn(run_settings, make_camera([alice]), "alice"))
        asyncio.run(learn(run_settings, make_camera([bob]), "bob"))

        _, lines = run_infer(run_settings, make_camera([bob, alice]), max_frames=2)

        assert lines == ["bob 0.000000", "alice 0.000000"]

    def test_projection_after_enough_history(self, run_settings, make_camera):
        for seed in range(3):
            asyncio.run(learn(run_settings, make_camera(random_images(1, seed=10 + seed)), "carol"))

        _, lines = run_infer(run_settings, make_camera(random_images(1, seed=20)), max_frames=1)

        fields = lines[0].split()
        assert fields[0] == "carol"
        assert len(fields) == 4
        assert all(np.isfinite(float(value)) for value in fields[1:])

    def test_no_projection_with_short_history(self, run_settings, make_camera):
        for seed in range(2):
            asyncio.run(learn(run_settings, make_camera(random_images(1, seed=30 + seed)), "dave"))

        _, lines = run_infer(run_settings, make_camera(random_images(1, seed=40)), max_frames=1)

        assert len(lines[0].split()) == 2

    def test_degenerate_projection_skips_coordinate(self, run_settings, make_camera):
        """A failed projection drops the coordinate for that frame only."""
        image = random_images(1, seed=50)
        for _ in range(3):
            asyncio.run(learn(run_settings, make_camera(image), "erin"))

        count, lines = run_infer(run_settings, make_camera(image), max_frames=2)

        assert count == 2
        assert lines == ["erin 0.000000", "erin 0.000000"]

    def test_store_not_modified_by_infer(self, run_settings, make_camera):
        asyncio.run(learn(run_settings, make_camera(), "alice"))
        before = open(run_settings.store.path).read()

        run_infer(run_settings, make_camera(), max_frames=3)

        assert open(run_settings.store.path).read() == before


class TestCaptureAnimation:
    """Tests for the picture path."""

    def test_writes_camera_animation(self, run_settings, make_camera):
        written = asyncio.run(capture_animation(run_settings, make_camera(random_images(4, seed=60))))

        assert [str(p) for p in written] == [run_settings.capture.output_path]
        with Image.open(run_settings.capture.output_path) as gif:
            assert gif.format == "GIF"
            assert gif.n_frames == 4

    def test_writes_segmented_animation(self, run_settings, make_camera):
        settings = run_settings.model_copy(update={
            "capture": run_settings.capture.model_copy(update={"segmentation": True, "frames": 2}),
        })

        written = asyncio.run(capture_animation(settings, make_camera(random_images(2, seed=61))))

        assert len(written) == 2
        with Image.open(settings.capture.segmented_path) as gif:
            assert gif.n_frames == 2
