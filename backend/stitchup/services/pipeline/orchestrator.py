"""
Pipeline orchestrator.

Runs the seven stages in dependency order, threading each stage's result
into the next. Supports both the full run and single steps over artifacts
persisted by an earlier invocation (the per-stage CLI commands).
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from stitchup.config import Settings, get_settings
from stitchup.models.schemas import ArtifactMode, Image, Scene, StageReport, Video
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.stages import StageContext, StageError, create_default_stages
from stitchup.services.stages.base import BaseStage

from .provider_factory import ProviderClients, ProviderFactory

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """
    Fatal pipeline error.

    Attributes:
        stage: Name of the stage that aborted the run
        message: Error description
        cause: Original exception (if any)
    """

    def __init__(
        self,
        stage: str,
        message: str,
        cause: Exception | None = None,
    ):
        self.stage = stage
        self.message = message
        self.cause = cause
        super().__init__(f"[{stage}] {message}")


@dataclass
class PipelineResult:
    """
    Result of a full run.

    Attributes:
        output_path: Final video (or placeholder manifest)
        reports: One StageReport per executed stage, in execution order
    """

    output_path: Path
    reports: list[StageReport] = field(default_factory=list)

    @property
    def placeholder(self) -> bool:
        return any(report.mode != ArtifactMode.REAL for report in self.reports)


class PipelineOrchestrator:
    """
    Pipeline orchestrator.

    Example (full pipeline):
        orchestrator = PipelineOrchestrator(settings)
        result = await orchestrator.run(Path("input"))
        print(result.output_path)

    Example (single steps, reading earlier artifacts from disk):
        scenes = await orchestrator.generate_scenes()
        images = await orchestrator.create_images()
        videos = await orchestrator.convert_videos()
        final_path = await orchestrator.assemble()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        provider_factory: ProviderFactory | None = None,
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            settings: Application settings (uses defaults if None)
            provider_factory: Client source (built from settings if None)
        """
        self.settings = settings or get_settings()
        self.provider_factory = provider_factory or ProviderFactory(self.settings)
        self.store = ArtifactStore(self.settings)

    # ═══════════════════════════════════════════════════════════════════════════
    # Full Pipeline
    # ═══════════════════════════════════════════════════════════════════════════

    async def run(self, input_dir: Path | None = None) -> PipelineResult:
        """
        Run every stage.

        Args:
            input_dir: Headline image directory (settings.input_dir if None)

        Returns:
            PipelineResult with the final output path and stage reports

        Raises:
            PipelineError: If a stage produced nothing or failed fatally
        """
        logger.info("Starting pipeline run")

        async with self.provider_factory.open() as clients:
            registry = self._build_registry(clients)
            context = StageContext().with_metadata("input_dir", input_dir)
            context = await self._execute(registry.get_all(), context)

        reports = context.get_metadata("reports", [])
        self._log_summary(reports)

        result = PipelineResult(output_path=context.get_result("assembly"), reports=reports)
        logger.info(f"Pipeline finished: {result.output_path}")
        return result

    # ═══════════════════════════════════════════════════════════════════════════
    # Single steps
    # ═══════════════════════════════════════════════════════════════════════════

    async def generate_scenes(self, input_dir: Path | None = None) -> list[Scene]:
        """Load headline images and describe them as scenes (saves scenes.json)."""
        context = StageContext().with_metadata("input_dir", input_dir)
        context = await self._run_steps("scenes", context)
        return context.get_result("scenes")

    async def create_images(self, scenes_file: Path | None = None) -> list[Image]:
        """Create one image per stored scene (saves images metadata.json)."""
        scenes = self._load("scenes", self.store.load_scenes, scenes_file)
        context = StageContext(results={"scenes": scenes})
        context = await self._run_steps("images", context)
        return context.get_result("images")

    async def convert_videos(
        self,
        images_file: Path | None = None,
        scenes_file: Path | None = None,
    ) -> list[Video]:
        """
        Convert stored images to videos (saves videos.json).

        Scenes are optional context for prompts; without a scenes file the
        image descriptions are used alone.
        """
        images = self._load("images", self.store.load_images, images_file)
        try:
            scenes = self.store.load_scenes(scenes_file)
        except FileNotFoundError:
            logger.warning("No scenes file found, converting without scene context")
            scenes = []

        context = StageContext(results={"images": images, "scenes": scenes})
        context = await self._run_steps("videos", context)
        return context.get_result("videos")

    async def assemble(
        self,
        videos_file: Path | None = None,
        music_file: Path | None = None,
    ) -> Path:
        """Assemble stored videos and music into the final output."""
        videos = self._load("videos", self.store.load_videos, videos_file)
        music = self._load("music", self.store.load_music, music_file)

        context = StageContext(results={"videos": videos, "music": music})
        context = await self._run_steps("assembly", context)
        return context.get_result("assembly")

    # ═══════════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════════

    def _build_registry(self, clients: ProviderClients):
        return create_default_stages(
            self.settings,
            vision_client=clients.vision,
            image_client=clients.image,
            video_client=clients.video,
            music_client=clients.music,
        )

    async def _run_steps(self, target: str, context: StageContext) -> StageContext:
        """Run ``target`` plus whichever of its dependencies the context lacks."""
        async with self.provider_factory.open() as clients:
            registry = self._build_registry(clients)
            stages = registry.build_pipeline([target], satisfied=context.results)
            context = await self._execute(stages, context)

        self._log_summary(context.get_metadata("reports", []))
        return context

    async def _execute(self, stages: list[BaseStage], context: StageContext) -> StageContext:
        """
        Execute stages in order.

        Raises:
            PipelineError: On the first stage-level failure
        """
        for stage in stages:
            logger.info(f"Stage: {stage.name}")
            try:
                outcome = await stage.execute(context)
            except StageError as e:
                logger.error(f"Stage {stage.name} failed: {e.message}")
                raise PipelineError(stage.name, e.message, e) from e

            reports = [*context.get_metadata("reports", []), outcome.report]
            context = context.with_result(stage.name, outcome.value).with_metadata("reports", reports)

        return context

    def _load(self, stage: str, loader: Any, path: Path | None) -> Any:
        try:
            return loader(path)
        except FileNotFoundError as e:
            raise PipelineError(stage, f"Missing input: {e}", e) from e

    def _log_summary(self, reports: list[StageReport]) -> None:
        for report in reports:
            logger.info(f"  {report.summary()}")
