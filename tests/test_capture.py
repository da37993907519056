"""
Capture Output Tests
====================

Background removal masks and GIF encoding.
"""

import numpy as np
import pytest
from PIL import Image

from spectral_match.capture import (
    AnimationWriteError,
    border_region_mask,
    quantize_frame,
    remove_background,
    segment_regions,
    write_animation,
)


class TestBorderRegionMask:
    """Tests for background region selection."""

    def test_removes_regions_touching_top_and_upper_sides(self):
        labels = np.array([
            [1, 1, 1, 1],
            [2, 3, 3, 4],
            [2, 3, 3, 4],
            [5, 5, 5, 5],
        ])

        mask = border_region_mask(labels)

        removed = set(np.unique(labels[mask]).tolist())
        kept = set(np.unique(labels[~mask]).tolist())
        assert removed == {1, 2, 4}
        assert kept == {3, 5}

    def test_bottom_edge_does_not_count(self):
        """A region only touching the lower frame border stays."""
        labels = np.array([
            [1, 1, 1, 1],
            [1, 1, 1, 1],
            [1, 2, 2, 1],
            [1, 2, 2, 1],
        ])

        mask = border_region_mask(labels)

        assert not mask[labels == 2].any()

    def test_lower_half_of_sides_does_not_count(self):
        labels = np.array([
            [1, 1, 1],
            [1, 1, 1],
            [1, 1, 1],
            [2, 1, 3],
        ])

        mask = border_region_mask(labels)

        assert not mask[labels == 2].any()
        assert not mask[labels == 3].any()


class TestRemoveBackground:
    """Tests for the full segmentation filter."""

    def test_shape_kept_and_top_row_cleared(self):
        image = np.random.default_rng(0).integers(0, 256, size=(32, 40, 3), dtype=np.uint8)

        result = remove_background(image)

        assert result.shape == image.shape
        assert result.dtype == np.uint8
        assert not result[0].any()

    def test_input_untouched(self):
        image = np.full((16, 16, 3), 200, dtype=np.uint8)
        original = image.copy()

        remove_background(image)

        assert np.array_equal(image, original)

    def test_segment_labels_cover_frame(self):
        image = np.zeros((20, 30, 3), dtype=np.uint8)
        image[10:, :] = 255

        labels = segment_regions(image)

        assert labels.shape == (20, 30)
        assert len(np.unique(labels)) >= 2


class TestAnimation:
    """Tests for GIF output."""

    def test_quantize_gives_paletted_image(self):
        image = np.random.default_rng(1).integers(0, 256, size=(16, 24, 3), dtype=np.uint8)

        frame = quantize_frame(image)

        assert frame.mode == "P"
        assert frame.size == (24, 16)

    def test_writes_frames_in_order(self, tmp_path):
        path = tmp_path / "out.gif"
        colours = [(0, 0, 255), (0, 255, 0), (255, 0, 0)]
        frames = [quantize_frame(np.full((8, 8, 3), c, dtype=np.uint8)) for c in colours]

        write_animation(path, frames, frame_delay_ms=100)

        with Image.open(path) as gif:
            assert gif.n_frames == 3
            assert gif.info.get("loop") == 0

    def test_empty_sequence_rejected(self, tmp_path):
        with pytest.raises(AnimationWriteError):
            write_animation(tmp_path / "out.gif", [])

    def test_unwritable_path(self, tmp_path):
        frame = quantize_frame(np.zeros((4, 4, 3), dtype=np.uint8))
        with pytest.raises(AnimationWriteError):
            write_animation(tmp_path / "missing" / "out.gif", [frame])
