"""
Video conversion strategies.

Turning still images into short clips is one capability with
interchangeable implementations, selected once from settings:

- ProviderVideoConverter: drives a job provider (Runway or Replicate)
  through the JobPoller, one image at a time.
- ExternalScriptVideoConverter: shells out to a standalone converter script
  (Node.js) that writes clips plus a videos.json index.

Both accept the same inputs (images + scenes) and return the same
StageOutcome of Video records.
"""

import asyncio
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from stitchup.config import Settings
from stitchup.models.schemas import Image, Scene, StageOutcome, StageReport, Video
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.job_poller import JobPoller
from stitchup.services.placeholders import PlaceholderFactory, is_placeholder
from stitchup.services.providers.replicate_client import ReplicateClient
from stitchup.services.providers.runway_client import RunwayClient
from stitchup.utils.media_utils import find_executable, short_uid

if TYPE_CHECKING:
    from stitchup.services.stages.batch import BatchRunner

logger = logging.getLogger(__name__)

STAGE_NAME = "videos"


class ConverterScriptError(RuntimeError):
    """Raised when the external converter script cannot run or fails."""


class VideoConverter(Protocol):
    """Converts images (with their scenes for prompt context) into videos."""

    async def convert(self, images: list[Image], scenes: list[Scene]) -> StageOutcome:
        ...


def find_matching_scene(scene_id: str, scenes: list[Scene]) -> Scene | None:
    """
    Find the scene an image was generated from.

    Exact id match first, then the id (underscores as spaces, without the
    ``scene_`` prefix) contained in the scene title or source title.
    """
    for scene in scenes:
        if scene.id == scene_id:
            return scene

    needle = scene_id.lower().removeprefix("scene_").replace("_", " ").strip()
    if not needle:
        return None
    for scene in scenes:
        haystacks = (scene.title.lower(), scene.source_title.lower().replace("_", " "))
        if any(needle in haystack for haystack in haystacks):
            return scene
    return None


def resolve_prompt_text(image: Image, scenes: list[Scene]) -> str:
    """
    Text prompt guiding the animation of ``image``.

    A missing scene reference degrades to a generic description rather
    than failing.
    """
    if image.description:
        return image.description

    scene = find_matching_scene(image.scene_id, scenes)
    if scene is None:
        return f"Generated from scene {image.scene_id}"

    text = scene.description or (f"A scene depicting {scene.title}" if scene.title else "")
    text = text or f"Generated from scene {image.scene_id}"
    if scene.mood:
        text = f"{text.rstrip('.')}. The mood is {scene.mood}."
    return text


class ProviderVideoConverter:
    """
    Converts images to videos through an image-to-video job provider.

    With no client (credential absent) the whole batch is produced by the
    placeholder factory and no network call is made.
    """

    def __init__(
        self,
        settings: Settings,
        runner: "BatchRunner",
        placeholders: PlaceholderFactory,
        client: RunwayClient | ReplicateClient | None,
    ):
        self.settings = settings
        self.runner = runner
        self.placeholders = placeholders
        self.client = client

    async def convert(self, images: list[Image], scenes: list[Scene]) -> StageOutcome:
        async def generate(image: Image) -> Video:
            return await self.convert_one(image, scenes)

        return await self.runner.run(
            STAGE_NAME,
            images,
            generate=generate,
            placeholder=self.placeholders.create_video,
            use_placeholders=self.client is None,
            label=lambda image: Path(image.path).name,
        )

    async def convert_one(self, image: Image, scenes: list[Scene]) -> Video:
        """
        Animate one image and save the clip.

        Raises:
            ProviderError: Any provider/poller failure for this image
        """
        if self.client is None:
            raise RuntimeError("ProviderVideoConverter has no provider client configured")

        image_path = Path(image.path)
        prompt_text = resolve_prompt_text(image, scenes)
        logger.info(f"Converting {image_path.name} via {self.client.provider}: {prompt_text[:80]}")

        payload = self.client.build_payload(image_path.read_bytes(), prompt_text)
        video_bytes = await JobPoller.from_settings(self.client, self.settings).run(payload)

        output_dir = self.settings.video_output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / f"video_{image_path.stem}_{short_uid()}.mp4"
        path.write_bytes(video_bytes)

        logger.info(f"Video saved: {path.name} ({len(video_bytes)} bytes)")
        return Video(
            path=path,
            image_id=image.scene_id,
            length_seconds=self.settings.video_length,
        )


class ExternalScriptVideoConverter:
    """
    Converts images by running an external converter script.

    Command line: ``node <script> --input-dir <images> --output-dir <videos>
    --video-length <seconds> [--api-key <key>]``; the script writes
    ``videos.json`` into the output directory.
    """

    def __init__(
        self,
        settings: Settings,
        runner: "BatchRunner",
        placeholders: PlaceholderFactory,
        api_key: str | None,
        store: ArtifactStore | None = None,
    ):
        self.settings = settings
        self.runner = runner
        self.placeholders = placeholders
        self.api_key = api_key
        self.store = store or ArtifactStore(settings)

    async def convert(self, images: list[Image], scenes: list[Scene]) -> StageOutcome:
        if not self.api_key:
            return await self.runner.run(
                STAGE_NAME,
                images,
                generate=self.placeholders.create_video,
                placeholder=self.placeholders.create_video,
                use_placeholders=True,
                label=lambda image: Path(image.path).name,
            )

        output_dir = self.settings.video_output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        index_path = output_dir / "videos.json"
        index_path.unlink(missing_ok=True)

        # The script converts every image in --input-dir, so it only sees this batch
        with tempfile.TemporaryDirectory(prefix="stitchup_images_") as staging:
            input_dir = self.stage_images(images, Path(staging))
            cmd = self.build_command(input_dir, output_dir)
            await asyncio.to_thread(self._run_script, cmd)

        if not index_path.exists():
            raise ConverterScriptError(f"Converter script wrote no index: {index_path}")
        videos = self.store.load_videos(index_path)
        report = StageReport(
            stage=STAGE_NAME,
            attempted=len(images),
            succeeded=len(videos),
            placeholders=sum(1 for video in videos if is_placeholder(video.path)),
        )
        logger.info(report.summary())
        return StageOutcome(value=videos, report=report)

    @staticmethod
    def stage_images(images: list[Image], directory: Path) -> Path:
        """Copy exactly the given images into ``directory`` and return it."""
        for image in images:
            source = Path(image.path)
            shutil.copy2(source, directory / source.name)
        return directory

    def build_command(self, input_dir: Path, output_dir: Path) -> list[str]:
        """
        Build the converter command line.

        Raises:
            ConverterScriptError: If node or the script is missing
        """
        node = find_executable(self.settings.node_path)
        if node is None:
            raise ConverterScriptError(f"Node.js executable not found: {self.settings.node_path}")

        script = Path(self.settings.video_converter_script)
        if not script.exists():
            raise ConverterScriptError(f"Converter script not found: {script}")

        cmd = [
            node,
            str(script),
            "--input-dir", str(input_dir),
            "--output-dir", str(output_dir),
            "--video-length", str(self.settings.video_length),
        ]
        if self.api_key:
            cmd += ["--api-key", self.api_key]
        return cmd

    def _run_script(self, cmd: list[str]) -> None:
        """
        Run the converter script (installing its npm dependencies first if needed).

        Raises:
            ConverterScriptError: Non-zero exit or timeout
        """
        script_dir = Path(cmd[1]).parent
        if (script_dir / "package.json").exists() and not (script_dir / "node_modules").exists():
            npm = find_executable("npm")
            if npm is not None:
                logger.info(f"Installing converter script dependencies in {script_dir}")
                subprocess.run([npm, "install"], cwd=script_dir, capture_output=True, text=True, timeout=600)

        logger.info(f"Running converter script: {Path(cmd[1]).name}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.settings.stage_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ConverterScriptError(
                f"Converter script timed out after {self.settings.stage_timeout}s"
            ) from e

        if result.returncode != 0:
            logger.error(f"Converter script failed: {result.stderr[:500]}")
            raise ConverterScriptError(f"Converter script error (code {result.returncode})")


def create_video_converter(
    settings: Settings,
    runner: "BatchRunner",
    placeholders: PlaceholderFactory,
    client: RunwayClient | ReplicateClient | None = None,
) -> VideoConverter:
    """
    Select the video conversion strategy from ``settings.video_provider``.

    Args:
        settings: Application settings
        runner: Batch runner applying pacing, deadline and failure policy
        placeholders: Factory for offline artifacts
        client: Job provider client for the in-process strategy (None -> placeholders)

    Returns:
        VideoConverter implementation
    """
    if settings.video_provider == "script":
        logger.info("Video conversion: external script")
        return ExternalScriptVideoConverter(
            settings, runner, placeholders, api_key=settings.runway_api_key or None
        )

    logger.info(f"Video conversion: {settings.video_provider} provider")
    return ProviderVideoConverter(settings, runner, placeholders, client)
