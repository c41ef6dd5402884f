"""
Command-line entry point (``stitch-up``).

Commands:
    run        Full pipeline: headline images -> final video
    scenes     Headline images -> scenes.json
    images     scenes.json -> images + metadata.json
    videos     images metadata.json -> videos + videos.json
    assemble   videos.json + music.json -> final video

Progress is logged to stderr; the path of the final artifact is printed to
stdout.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

from stitchup import __version__
from stitchup.config import Settings, load_settings
from stitchup.logging_config import setup_logging
from stitchup.services.pipeline import PipelineError, PipelineOrchestrator

logger = logging.getLogger(__name__)

# argparse destination -> Settings field
SETTING_OVERRIDES = {
    "input_dir": "input_dir",
    "output_dir": "output_dir",
    "max_scenes": "max_scenes",
    "model": "claude_model",
    "video_provider": "video_provider",
    "video_length": "video_length",
    "log_level": "log_level",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stitch-up",
        description="Turn the day's headline images into a music video",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="YAML or JSON config file")
    common.add_argument("--input-dir", type=Path, help="Directory with headline images")
    common.add_argument("--output-dir", type=Path, help="Root directory for generated files")
    common.add_argument("--max-scenes", type=int, help="Maximum number of headline images to use")
    common.add_argument("--model", help="Claude model for scenes and lyrics")
    common.add_argument(
        "--video-provider",
        choices=["runway", "replicate", "script"],
        help="Image-to-video strategy",
    )
    common.add_argument("--video-length", type=int, help="Clip length in seconds")
    common.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("run", parents=[common], help="Run the full pipeline")
    commands.add_parser("scenes", parents=[common], help="Generate scenes from headline images")

    images = commands.add_parser("images", parents=[common], help="Create images from scenes")
    images.add_argument("--scenes", type=Path, help="scenes.json (default: <output-dir>/scenes.json)")

    videos = commands.add_parser("videos", parents=[common], help="Convert images to videos")
    videos.add_argument("--images", type=Path, help="Image metadata.json")
    videos.add_argument("--scenes", type=Path, help="scenes.json for prompt context")

    assemble = commands.add_parser("assemble", parents=[common], help="Assemble the final video")
    assemble.add_argument("--videos", type=Path, help="videos.json")
    assemble.add_argument("--music", type=Path, help="music.json")

    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with every flag the user passed applied on top."""
    update: dict[str, Any] = {
        field: getattr(args, dest)
        for dest, field in SETTING_OVERRIDES.items()
        if getattr(args, dest, None) is not None
    }
    if not update:
        return settings
    return settings.model_copy(update=update)


async def dispatch(orchestrator: PipelineOrchestrator, args: argparse.Namespace) -> str:
    """Run the selected command and return the text printed on stdout."""
    if args.command == "run":
        result = await orchestrator.run()
        return str(result.output_path)

    if args.command == "scenes":
        scenes = await orchestrator.generate_scenes()
        logger.info(f"Generated {len(scenes)} scenes")
        return str(orchestrator.store.scenes_path)

    if args.command == "images":
        images = await orchestrator.create_images(args.scenes)
        logger.info(f"Created {len(images)} images")
        return str(orchestrator.store.images_path)

    if args.command == "videos":
        videos = await orchestrator.convert_videos(args.images, args.scenes)
        logger.info(f"Converted {len(videos)} videos")
        return str(orchestrator.store.videos_path)

    final_path = await orchestrator.assemble(args.videos, args.music)
    return str(final_path)


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """
    CLI entry point.

    Args:
        argv: Arguments without the program name (sys.argv[1:] if None)
        settings: Base settings (loaded from config file and env if None)

    Returns:
        Process exit code: 0 on success, 1 on pipeline failure
    """
    args = build_parser().parse_args(argv)

    settings = apply_overrides(settings or load_settings(args.config), args)
    setup_logging(settings)

    orchestrator = PipelineOrchestrator(settings)
    try:
        output = asyncio.run(dispatch(orchestrator, args))
    except PipelineError as e:
        logger.error(f"Pipeline failed: {e}")
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
