"""
Lyrics stage: song text about the day's headlines.
"""

from stitchup.config import Settings
from stitchup.models.schemas import Content, StageOutcome, StageReport
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.lyric_creator import LyricCreator
from stitchup.services.providers.claude_client import ClaudeClient
from stitchup.services.stages.base import BaseStage, StageContext, StageError


class LyricsStage(BaseStage):
    """Create lyrics for the soundtrack.

    Input (from context):
        - content: Content

    Output:
        Lyrics (template lyrics are reported as placeholder output)
    """

    name = "lyrics"
    depends_on = ["content"]

    def __init__(self, settings: Settings, client: ClaudeClient | None, store: ArtifactStore):
        self.settings = settings
        self.store = store
        self.creator = LyricCreator(settings, client)

    async def execute(self, context: StageContext) -> StageOutcome:
        self.validate_context(context)

        content: Content = context.get_result("content")
        lyrics, from_template = await self.creator.create(content)

        try:
            self.store.save_lyrics(lyrics)
        except OSError as e:
            raise StageError(self.name, f"Saving lyrics failed: {e}", e)

        report = StageReport(
            stage=self.name,
            attempted=1,
            succeeded=1,
            placeholders=1 if from_template else 0,
        )
        return StageOutcome(value=lyrics, report=report)
