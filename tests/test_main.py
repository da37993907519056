"""
Command Line Tests
==================
"""

import pytest
from pydantic import ValidationError

from conftest import random_images
from spectral_match import main as cli
from spectral_match.config import Settings


@pytest.fixture
def fake_device(monkeypatch, make_camera):
    """Route every OpenCVCamera the CLI builds to one fake camera."""
    camera = make_camera(random_images(1, seed=99))
    monkeypatch.setattr(cli, "OpenCVCamera", lambda device: camera)
    return camera


class TestParser:
    """Tests for argument parsing."""

    def test_learn(self):
        args = cli.build_parser().parse_args(["learn", "alice", "--no-wait"])

        assert args.command == "learn"
        assert args.label == "alice"
        assert args.no_wait

    def test_infer_with_globals(self):
        args = cli.build_parser().parse_args(
            ["--device", "/dev/video2", "--store", "s.json", "infer", "--max-frames", "10"]
        )

        assert args.command == "infer"
        assert args.device == "/dev/video2"
        assert args.store == "s.json"
        assert args.max_frames == 10

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestApplyOverrides:
    """Tests for flag precedence over loaded settings."""

    def test_flags_replace_settings(self):
        args = cli.build_parser().parse_args(
            ["--device", "3", "--store", "other.json", "picture", "--segmentation", "--frames", "5"]
        )

        settings = cli.apply_overrides(Settings(), args)

        assert settings.camera.device == "3"
        assert settings.store.path == "other.json"
        assert settings.capture.segmentation
        assert settings.capture.frames == 5

    def test_no_flags_keeps_settings(self):
        base = Settings()
        args = cli.build_parser().parse_args(["infer"])

        assert cli.apply_overrides(base, args) == base

    @pytest.mark.parametrize("frames", ["0", "-3"])
    def test_out_of_range_flag_rejected(self, frames):
        args = cli.build_parser().parse_args(["picture", "--frames", frames])

        with pytest.raises(ValidationError):
            cli.apply_overrides(Settings(), args)

    def test_no_wait_disables_warmup(self):
        args = cli.build_parser().parse_args(["learn", "alice", "--no-wait"])

        settings = cli.apply_overrides(Settings(), args)

        assert settings.capture.warmup_seconds == 0.0


class TestMain:
    """End-to-end runs against a fake camera."""

    def test_invalid_config_exits_1(self, tmp_path, capsys):
        path = tmp_path / "config.yaml"
        path.write_text("embedding:\n  width: 100\n")

        assert cli.main(["--config", str(path), "infer"]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_malformed_config_exits_1(self, tmp_path, capsys):
        path = tmp_path / "config.yaml"
        path.write_text("camera: [unclosed\n")

        assert cli.main(["--config", str(path), "infer", "--max-frames", "1"]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_zero_frames_exits_1(self, tmp_path, fake_device):
        assert cli.main(["--store", str(tmp_path / "points.json"), "picture", "--frames", "0"]) == 1
        assert fake_device.reads == 0

    def test_infer_without_store_exits_1(self, tmp_path, fake_device):
        store = tmp_path / "points.json"

        assert cli.main(["--store", str(store), "infer", "--max-frames", "1"]) == 1

    def test_learn_then_infer(self, tmp_path, fake_device, capsys):
        store = tmp_path / "points.json"

        assert cli.main(["--store", str(store), "learn", "alice", "--no-wait"]) == 0
        assert store.exists()

        assert cli.main(["--store", str(store), "infer", "--max-frames", "2"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == ["alice 0.000000", "alice 0.000000"]
