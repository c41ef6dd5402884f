"""
Scene stage: one Scene per headline image, via the vision provider.
"""

from pathlib import Path

from stitchup.config import Settings
from stitchup.models.schemas import Content, StageOutcome
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.placeholders import PlaceholderFactory
from stitchup.services.providers.claude_client import ClaudeClient
from stitchup.services.scene_generator import SceneGenerator
from stitchup.services.stages.base import BaseStage, StageContext, StageError
from stitchup.services.stages.batch import BatchRunner


class SceneStage(BaseStage):
    """Describe headline images as scenes.

    Input (from context):
        - content: Content

    Output:
        list[Scene], at most settings.max_scenes
    """

    name = "scenes"
    depends_on = ["content"]

    def __init__(
        self,
        settings: Settings,
        client: ClaudeClient | None,
        runner: BatchRunner,
        placeholders: PlaceholderFactory,
        store: ArtifactStore,
    ):
        self.settings = settings
        self.client = client
        self.runner = runner
        self.placeholders = placeholders
        self.store = store
        self.generator = SceneGenerator(settings, client)

    async def execute(self, context: StageContext) -> StageOutcome:
        self.validate_context(context)

        content: Content = context.get_result("content")
        image_paths = content.image_paths[: self.settings.max_scenes]

        outcome = await self.runner.run(
            self.name,
            image_paths,
            generate=self.generator.generate_scene,
            placeholder=self.placeholders.create_scene,
            use_placeholders=self.client is None,
            label=lambda path: Path(path).name,
        )

        try:
            self.store.save_scenes(outcome.value)
        except OSError as e:
            raise StageError(self.name, f"Saving scenes failed: {e}", e)

        return outcome
