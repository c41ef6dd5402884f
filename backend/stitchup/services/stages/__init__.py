"""
Pipeline stages for the stitch-up run.

Data flows Content -> Scenes -> Images -> Videos and, separately,
Content -> Lyrics -> Music; Videos and Music meet at Assembly.

Usage:
    from stitchup.services.stages import StageContext, create_default_stages

    registry = create_default_stages(settings, vision_client=claude)
    context = StageContext()
    for stage in registry.get_all():
        outcome = await stage.execute(context)
        context = context.with_result(stage.name, outcome.value)
"""

from stitchup.config import Settings
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.placeholders import PlaceholderFactory
from stitchup.services.providers.claude_client import ClaudeClient
from stitchup.services.providers.huggingface_client import HuggingFaceClient
from stitchup.services.providers.replicate_client import ReplicateClient
from stitchup.services.providers.runway_client import RunwayClient
from stitchup.services.providers.suno_client import SunoClient
from stitchup.services.stages.base import (
    BaseStage,
    NoArtifactsProducedError,
    StageContext,
    StageDeadlineError,
    StageError,
    StageRegistry,
)
from stitchup.services.stages.batch import BatchRunner
from stitchup.services.stages.assembly_stage import AssemblyStage
from stitchup.services.stages.content_stage import ContentStage
from stitchup.services.stages.image_stage import ImageStage
from stitchup.services.stages.lyrics_stage import LyricsStage
from stitchup.services.stages.music_stage import MusicStage
from stitchup.services.stages.scene_stage import SceneStage
from stitchup.services.stages.video_stage import VideoStage
from stitchup.services.video_converter import create_video_converter


def create_default_stages(
    settings: Settings,
    vision_client: ClaudeClient | None = None,
    image_client: HuggingFaceClient | None = None,
    video_client: RunwayClient | ReplicateClient | None = None,
    music_client: SunoClient | None = None,
) -> StageRegistry:
    """
    Build a registry with the seven pipeline stages.

    A None client puts that stage into placeholder mode.

    Args:
        settings: Application settings
        vision_client: Scene descriptions and lyrics
        image_client: Image synthesis
        video_client: Image-to-video job provider
        music_client: Music job provider

    Returns:
        StageRegistry in registration order content, scenes, images,
        videos, lyrics, music, assembly
    """
    store = ArtifactStore(settings)
    runner = BatchRunner(settings)
    placeholders = PlaceholderFactory(settings)
    converter = create_video_converter(settings, runner, placeholders, video_client)

    registry = StageRegistry()
    registry.register(ContentStage(settings, store))
    registry.register(SceneStage(settings, vision_client, runner, placeholders, store))
    registry.register(ImageStage(settings, image_client, runner, placeholders, store))
    registry.register(VideoStage(settings, converter, store))
    registry.register(LyricsStage(settings, vision_client, store))
    registry.register(MusicStage(settings, music_client, runner, placeholders, store))
    registry.register(AssemblyStage(settings))
    return registry


__all__ = [
    # Base classes
    "BaseStage",
    "StageContext",
    "StageError",
    "StageRegistry",
    "NoArtifactsProducedError",
    "StageDeadlineError",
    "BatchRunner",
    "create_default_stages",
    # Stage implementations
    "ContentStage",
    "SceneStage",
    "ImageStage",
    "VideoStage",
    "LyricsStage",
    "MusicStage",
    "AssemblyStage",
]
