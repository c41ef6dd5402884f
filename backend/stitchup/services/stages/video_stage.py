"""
Video stage: animates each image into a short clip.
"""

from stitchup.config import Settings
from stitchup.models.schemas import Image, Scene, StageOutcome
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.stages.base import (
    BaseStage,
    NoArtifactsProducedError,
    StageContext,
    StageError,
)
from stitchup.services.video_converter import VideoConverter


class VideoStage(BaseStage):
    """Convert images to videos with the configured strategy.

    Input (from context):
        - images: list[Image]
        - scenes: list[Scene] (prompt context)

    Output:
        list[Video]
    """

    name = "videos"
    depends_on = ["images", "scenes"]

    def __init__(self, settings: Settings, converter: VideoConverter, store: ArtifactStore):
        self.settings = settings
        self.converter = converter
        self.store = store

    async def execute(self, context: StageContext) -> StageOutcome:
        self.validate_context(context)

        images: list[Image] = context.get_result("images")
        scenes: list[Scene] = context.get_result("scenes")

        try:
            outcome = await self.converter.convert(images, scenes)
        except StageError:
            raise
        except Exception as e:
            raise StageError(self.name, f"Video conversion failed: {e}", e)

        if not outcome.value:
            raise NoArtifactsProducedError(self.name, attempted=len(images))

        try:
            self.store.save_videos(outcome.value)
        except OSError as e:
            raise StageError(self.name, f"Saving video index failed: {e}", e)

        return outcome
