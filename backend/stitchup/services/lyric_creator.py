"""
Lyric creator.

Writes a short song about the day's headlines, either through the text
model or from a built-in template.
"""

import logging

from stitchup.config import Settings
from stitchup.models.schemas import Content, Lyrics
from stitchup.services.providers.base import ProviderError
from stitchup.services.providers.claude_client import ClaudeClient

logger = logging.getLogger(__name__)

LYRICS_PROMPT = """\
Write original song lyrics for an upbeat news-roundup jingle dated {date}.
The song covers these headlines:
{headlines}

Use section headers on their own lines: [VERSE 1], [CHORUS], [VERSE 2], [BRIDGE], [CHORUS].
Keep it under 30 lines. Reply with the lyrics only."""


def lyrics_title(content: Content) -> str:
    return f"News of the Day: {content.date}"


def build_template_lyrics(content: Content) -> Lyrics:
    """Template lyrics; the second verse names the first headline when there is one."""
    sections = [
        "[VERSE 1]\n"
        "Headlines flashing on the screen,\n"
        "Stories from the world between,\n"
        "Every hour something new,\n"
        "Here's the news we're bringing you.",
        "[CHORUS]\n"
        "News of the day, news of the day,\n"
        "Turn it up and hear what they say,\n"
        "From the markets to the sky,\n"
        "Watch the world go rolling by.",
    ]

    if content.articles:
        sections.append(
            "[VERSE 2]\n"
            f"From {content.articles[0].title},\n"
            "To the stories still untold,\n"
            "Every picture, every line,\n"
            "Keeps the moment frozen in time."
        )

    sections += [
        "[BRIDGE]\n"
        "Stop and listen, take a breath,\n"
        "Tomorrow brings a story fresh.",
        sections[1],
    ]

    return Lyrics(title=lyrics_title(content), content="\n\n".join(sections))


class LyricCreator:
    """
    Creates soundtrack lyrics for the run.

    Example:
        lyrics, from_template = await LyricCreator(settings, client).create(content)
    """

    def __init__(self, settings: Settings, client: ClaudeClient | None):
        self.settings = settings
        self.client = client

    async def create(self, content: Content) -> tuple[Lyrics, bool]:
        """
        Create lyrics, falling back to the template on any provider failure.

        Returns:
            (lyrics, from_template)
        """
        if self.client is None:
            logger.info("No text provider configured, using template lyrics")
            return build_template_lyrics(content), True

        headlines = "\n".join(f"- {article.title}" for article in content.articles) or "- (no headlines)"
        prompt = LYRICS_PROMPT.format(date=content.date, headlines=headlines)

        try:
            text = await self.client.generate(prompt)
        except ProviderError as e:
            logger.warning(f"Lyrics generation failed, using template: {e}")
            return build_template_lyrics(content), True

        if not text.strip():
            logger.warning("Lyrics generation returned empty text, using template")
            return build_template_lyrics(content), True

        logger.info(f"Lyrics generated: {len(text.splitlines())} lines")
        return Lyrics(title=lyrics_title(content), content=text.strip()), False
