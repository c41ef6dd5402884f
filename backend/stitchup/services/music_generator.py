"""
Music generator: turns lyrics into a soundtrack via a music job provider.
"""

import logging

from stitchup.config import Settings
from stitchup.models.schemas import Lyrics, Music
from stitchup.services.job_poller import JobPoller
from stitchup.services.providers.suno_client import SunoClient
from stitchup.utils.media_utils import short_uid, slugify

logger = logging.getLogger(__name__)


class MusicGenerator:
    """
    Generates music for lyrics through the JobPoller.

    Example:
        async with SunoClient.from_settings(settings) as client:
            music = await MusicGenerator(settings, client).generate(lyrics)
    """

    def __init__(self, settings: Settings, client: SunoClient | None):
        self.settings = settings
        self.client = client

    async def generate(self, lyrics: Lyrics) -> Music:
        """
        Submit lyrics, wait for the song and save it as MP3.

        Raises:
            ProviderError: Any provider/poller failure
            ValueError: If lyrics are empty
            RuntimeError: If called without a client
        """
        if self.client is None:
            raise RuntimeError("MusicGenerator has no music client configured")
        if not lyrics.content.strip():
            raise ValueError("Cannot generate music from empty lyrics")

        lyrics_id = slugify(lyrics.title)
        logger.info(f"Generating music for: {lyrics.title}")

        payload = self.client.build_payload(lyrics.title, lyrics.content)
        audio_bytes = await JobPoller.from_settings(self.client, self.settings).run(payload)

        output_dir = self.settings.music_output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / f"music_{lyrics_id}_{short_uid()}.mp3"
        path.write_bytes(audio_bytes)

        logger.info(f"Music saved: {path.name} ({len(audio_bytes)} bytes)")
        return Music(
            path=path,
            lyrics_id=lyrics_id,
            length_seconds=self.settings.music_length,
        )
