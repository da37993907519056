"""
spectral-match Command Line
===========================

Entry point for the spectral fingerprint matcher.

Commands:
    picture            Capture frames into webcamera.gif (and segmented.gif)
    learn LABEL        Capture one frame and store its embedding under LABEL
    infer              Classify frames continuously against the store

Examples:
    spectral-match learn alice
    spectral-match --device /dev/video2 infer --max-frames 100
    spectral-match picture --segmentation

Exit Codes:
    0   success
    1   configuration, store, camera or projection failure
    130 interrupted
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from spectral_match import __version__
from spectral_match.config import Settings, load_config, setup_logging
from spectral_match.errors import SpectralMatchError
from spectral_match.pipeline import capture_animation, infer, learn
from spectral_match.stream import OpenCVCamera


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spectral-match",
        description="Learn and recognise camera scenes by their spectral fingerprint",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: search the working directory)",
    )
    parser.add_argument(
        "--device",
        default=None,
        help="Video device path or index (overrides camera.device)",
    )
    parser.add_argument(
        "--store",
        default=None,
        help="Point store file (overrides store.path)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    picture = commands.add_parser("picture", help="Capture frames into a GIF animation")
    picture.add_argument(
        "--segmentation",
        action="store_true",
        help="Also write a background-removed animation",
    )
    picture.add_argument("--frames", type=int, default=None, help="Number of frames to capture")

    learn_cmd = commands.add_parser("learn", help="Store the embedding of one frame under a label")
    learn_cmd.add_argument("label", help="Label to learn")
    learn_cmd.add_argument(
        "--no-wait",
        action="store_true",
        help="Capture immediately instead of after the warm-up delay",
    )

    infer_cmd = commands.add_parser("infer", help="Classify frames against the point store")
    infer_cmd.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Stop after this many frames (default: run until interrupted)",
    )

    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """
    Settings with command line flags applied on top.

    The result is validated again, so flags obey the same limits as the
    config file.

    Raises:
        ValidationError: If a flag value is out of range
    """
    data = settings.model_dump()
    if args.device is not None:
        data["camera"]["device"] = args.device
    if args.store is not None:
        data["store"]["path"] = args.store

    if getattr(args, "segmentation", False):
        data["capture"]["segmentation"] = True
    if getattr(args, "frames", None) is not None:
        data["capture"]["frames"] = args.frames
    if getattr(args, "no_wait", False):
        data["capture"]["warmup_seconds"] = 0.0

    return Settings.model_validate(data)


async def run(settings: Settings, args: argparse.Namespace) -> None:
    camera = OpenCVCamera(settings.camera.device)

    if args.command == "picture":
        written = await capture_animation(settings, camera)
        logger.info(f"Animations written: {', '.join(str(p) for p in written)}")
    elif args.command == "learn":
        await learn(settings, camera, args.label)
    elif args.command == "infer":
        await infer(
            settings,
            camera,
            emit=lambda line: print(line, flush=True),
            max_frames=args.max_frames,
        )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = apply_overrides(load_config(args.config), args)
    except (ValidationError, SpectralMatchError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(settings)

    try:
        asyncio.run(run(settings, args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    except SpectralMatchError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
