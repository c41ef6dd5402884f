"""
Placeholder artifact factory.

Creates structurally valid artifacts without calling any provider, so an
unconfigured run still walks every stage end to end. Placeholder files
carry a ``placeholder_`` filename prefix; that prefix is how downstream
stages (assembly) tell them apart from real media.
"""

import logging
import zlib
from pathlib import Path

from stitchup.config import Settings
from stitchup.models.schemas import Image, Lyrics, Music, Scene, Video
from stitchup.utils.media_utils import (
    sanitize_filename,
    scene_id_from_filename,
    short_uid,
    slugify,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "placeholder_"

# (title, description, mood)
SCENE_CATALOGUE: tuple[tuple[str, str, str], ...] = (
    (
        "Global Climate Summit",
        "World leaders gather in a glass-walled conference hall as "
        "protesters hold banners outside under a grey sky.",
        "urgent",
    ),
    (
        "Tech Regulation Debate",
        "Lawmakers question technology executives in a packed hearing "
        "room lit by camera flashes.",
        "tense",
    ),
    (
        "Medical Breakthrough",
        "Researchers in a bright laboratory study a glowing screen of "
        "cell images, a vaccine vial in the foreground.",
        "hopeful",
    ),
    (
        "Markets in Motion",
        "Traders watch walls of red and green tickers on a busy "
        "exchange floor at the opening bell.",
        "energetic",
    ),
    (
        "Space Mission Launch",
        "A rocket lifts off at dawn, its exhaust plume lit orange over "
        "a crowd of spectators on the beach.",
        "triumphant",
    ),
)


def is_placeholder(path: Path) -> bool:
    """True if ``path`` names a placeholder artifact."""
    return Path(path).name.startswith(PLACEHOLDER_PREFIX)


class PlaceholderFactory:
    """
    Factory for artifacts used when a provider credential is absent.

    Example:
        factory = PlaceholderFactory(settings)
        scene = await factory.create_scene(Path("input/flood.png"))
        video = await factory.create_video(image)
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    async def create_scene(self, image_path: Path) -> Scene:
        """Built-in scene for a headline image; id still derived from the filename."""
        index = zlib.crc32(image_path.name.encode("utf-8")) % len(SCENE_CATALOGUE)
        title, description, mood = SCENE_CATALOGUE[index]
        logger.debug(f"Placeholder scene for {image_path.name}: {title}")
        return Scene(
            id=scene_id_from_filename(image_path.name),
            title=title,
            description=description,
            mood=mood,
            source_title=image_path.name,
        )

    async def create_image(self, scene: Scene) -> Image:
        output_dir = self.settings.image_output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / f"{PLACEHOLDER_PREFIX}image_{sanitize_filename(scene.title)[:20]}_{short_uid()}.png"
        path.write_text(
            f"Placeholder image for scene: {scene.title}\n"
            f"Description: {scene.description}\n",
            encoding="utf-8",
        )
        return Image(path=path, scene_id=scene.id, description=scene.description)

    async def create_video(self, image: Image) -> Video:
        output_dir = self.settings.video_output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / f"{PLACEHOLDER_PREFIX}{Path(image.path).stem}_{short_uid()}.mp4"
        path.write_text(
            f"This is a placeholder for a video generated from {Path(image.path).name}\n"
            f"Description: {image.description}\n",
            encoding="utf-8",
        )
        return Video(
            path=path,
            image_id=image.scene_id,
            length_seconds=self.settings.video_length,
        )

    async def create_music(self, lyrics: Lyrics) -> Music:
        output_dir = self.settings.music_output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        lyrics_id = slugify(lyrics.title)
        path = output_dir / f"{PLACEHOLDER_PREFIX}music_{lyrics_id}_{short_uid()}.mp3"
        path.write_text(
            f"Placeholder soundtrack for: {lyrics.title}\n\n{lyrics.content}\n",
            encoding="utf-8",
        )
        return Music(
            path=path,
            lyrics_id=lyrics_id,
            length_seconds=self.settings.music_length,
        )
