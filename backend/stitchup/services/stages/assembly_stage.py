"""
Assembly stage: clips + soundtrack -> final video.
"""

from stitchup.config import Settings
from stitchup.models.schemas import Music, StageOutcome, StageReport, Video
from stitchup.services.assembler import Assembler
from stitchup.services.stages.base import BaseStage, StageContext, StageError


class AssemblyStage(BaseStage):
    """Assemble the final video.

    Input (from context):
        - videos: list[Video]
        - music: Music

    Output:
        Path of the final file
    """

    name = "assembly"
    depends_on = ["videos", "music"]

    def __init__(self, settings: Settings):
        self.settings = settings
        self.assembler = Assembler(settings)

    async def execute(self, context: StageContext) -> StageOutcome:
        self.validate_context(context)

        videos: list[Video] = context.get_result("videos")
        music: Music = context.get_result("music")

        try:
            result = await self.assembler.assemble(videos, music)
        except Exception as e:
            raise StageError(self.name, f"Assembly failed: {e}", e)

        report = StageReport(
            stage=self.name,
            attempted=1,
            succeeded=1,
            placeholders=1 if result.placeholder else 0,
        )
        return StageOutcome(value=result.path, report=report)
