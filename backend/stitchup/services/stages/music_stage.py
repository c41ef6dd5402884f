"""
Music stage: turns lyrics into the soundtrack.
"""

from stitchup.config import Settings
from stitchup.models.schemas import Lyrics, StageOutcome
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.music_generator import MusicGenerator
from stitchup.services.placeholders import PlaceholderFactory
from stitchup.services.providers.suno_client import SunoClient
from stitchup.services.stages.base import BaseStage, StageContext, StageError
from stitchup.services.stages.batch import BatchRunner


class MusicStage(BaseStage):
    """Generate music for the lyrics.

    Input (from context):
        - lyrics: Lyrics

    Output:
        Music
    """

    name = "music"
    depends_on = ["lyrics"]

    def __init__(
        self,
        settings: Settings,
        client: SunoClient | None,
        runner: BatchRunner,
        placeholders: PlaceholderFactory,
        store: ArtifactStore,
    ):
        self.client = client
        self.runner = runner
        self.placeholders = placeholders
        self.store = store
        self.generator = MusicGenerator(settings, client)

    async def execute(self, context: StageContext) -> StageOutcome:
        self.validate_context(context)

        lyrics: Lyrics = context.get_result("lyrics")

        outcome = await self.runner.run(
            self.name,
            [lyrics],
            generate=self.generator.generate,
            placeholder=self.placeholders.create_music,
            use_placeholders=self.client is None,
            label=lambda item: item.title,
        )
        music = outcome.value[0]

        try:
            self.store.save_music(music)
        except OSError as e:
            raise StageError(self.name, f"Saving music metadata failed: {e}", e)

        return StageOutcome(value=music, report=outcome.report)
