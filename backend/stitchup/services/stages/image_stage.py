"""
Image stage: one synthesized image per scene.
"""

from stitchup.config import Settings
from stitchup.models.schemas import Scene, StageOutcome
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.image_creator import ImageCreator
from stitchup.services.placeholders import PlaceholderFactory
from stitchup.services.providers.huggingface_client import HuggingFaceClient
from stitchup.services.stages.base import BaseStage, StageContext, StageError
from stitchup.services.stages.batch import BatchRunner


class ImageStage(BaseStage):
    """Create images for scenes.

    Input (from context):
        - scenes: list[Scene]

    Output:
        list[Image]
    """

    name = "images"
    depends_on = ["scenes"]

    def __init__(
        self,
        settings: Settings,
        client: HuggingFaceClient | None,
        runner: BatchRunner,
        placeholders: PlaceholderFactory,
        store: ArtifactStore,
    ):
        self.settings = settings
        self.client = client
        self.runner = runner
        self.placeholders = placeholders
        self.store = store
        self.creator = ImageCreator(settings, client)

    async def execute(self, context: StageContext) -> StageOutcome:
        self.validate_context(context)

        scenes: list[Scene] = context.get_result("scenes")

        outcome = await self.runner.run(
            self.name,
            scenes,
            generate=self.creator.create_image,
            placeholder=self.placeholders.create_image,
            use_placeholders=self.client is None,
            label=lambda scene: scene.id,
        )

        try:
            self.store.save_images(outcome.value)
        except OSError as e:
            raise StageError(self.name, f"Saving image metadata failed: {e}", e)

        return outcome
