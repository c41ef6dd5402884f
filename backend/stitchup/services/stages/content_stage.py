"""
Content stage: collects headline images into the run's Content record.
"""

from pathlib import Path

from stitchup.config import Settings
from stitchup.models.schemas import Content, StageOutcome, StageReport
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.content_loader import ContentLoader
from stitchup.services.stages.base import (
    BaseStage,
    NoArtifactsProducedError,
    StageContext,
    StageError,
)


class ContentStage(BaseStage):
    """Load headline images from the input directory.

    Input (from context metadata):
        - input_dir: Optional override of settings.input_dir

    Output:
        Content with sorted image paths and one Article per headline
    """

    name = "content"
    depends_on = []

    def __init__(self, settings: Settings, store: ArtifactStore):
        self.settings = settings
        self.store = store
        self.loader = ContentLoader(settings)

    async def execute(self, context: StageContext) -> StageOutcome:
        """Load content.

        Raises:
            NoArtifactsProducedError: If the input directory has no images
            StageError: If loading or saving fails
        """
        input_dir: Path | None = context.get_metadata("input_dir")

        try:
            content: Content = self.loader.load(input_dir)
        except OSError as e:
            raise StageError(self.name, f"Loading headline images failed: {e}", e)

        if not content.image_paths:
            raise NoArtifactsProducedError(self.name, attempted=0)

        self.store.save_content(content)

        count = len(content.image_paths)
        return StageOutcome(
            value=content,
            report=StageReport(stage=self.name, attempted=count, succeeded=count),
        )
