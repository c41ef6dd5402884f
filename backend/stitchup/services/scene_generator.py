"""
Scene generator.

Asks a vision model to describe a headline image as a visual scene
(title, description, mood) suitable as an image-synthesis prompt.
"""

import logging
import re
from pathlib import Path

from stitchup.config import Settings
from stitchup.models.schemas import Scene
from stitchup.services.providers.claude_client import ClaudeClient
from stitchup.utils.json_utils import extract_json_object
from stitchup.utils.media_utils import scene_id_from_filename

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "A visual representation of a news story."
DEFAULT_MOOD = "neutral"

SCENE_PROMPT = """\
This image is a screenshot of a news headline.
Describe a single photographic scene that would illustrate this story.

Respond with a JSON object only:
{"title": "<short scene title>", "description": "<2-3 sentences describing the visual scene>", "mood": "<one word mood>"}"""

TITLE_MARKER = re.compile(r"\btitle[*\s]*:[*\s]*(.+)$", re.IGNORECASE | re.MULTILINE)
DESCRIPTION_MARKER = re.compile(
    r"\bdescription[*\s]*:[*\s]*(.+?)(?=[\s*#]*\bmood[*\s]*:|\Z)",
    re.IGNORECASE | re.DOTALL,
)
MOOD_MARKER = re.compile(r"\bmood[*\s]*:[*\s]*(.+)$", re.IGNORECASE | re.MULTILINE)


def _clean(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().strip('"').strip()


def extract_scene_fields(text: str) -> tuple[str, str, str]:
    """
    Manual fallback: read ``Title:``, ``Description:`` and ``Mood:`` markers.

    The description runs until the ``Mood:`` marker (or end of text).

    Returns:
        (title, description, mood); missing fields are empty strings
    """
    title = TITLE_MARKER.search(text)
    description = DESCRIPTION_MARKER.search(text)
    mood = MOOD_MARKER.search(text)
    return (
        _clean(title.group(1)) if title else "",
        " ".join(description.group(1).split()) if description else "",
        _clean(mood.group(1)) if mood else "",
    )


def parse_scene_response(text: str, image_name: str) -> Scene:
    """
    Build a Scene from a vision model response.

    Tries the embedded JSON object first, then the marker fallback. If
    neither yields anything the whole response becomes the description.

    Args:
        text: Raw model response
        image_name: Headline image filename

    Returns:
        Scene with id derived from ``image_name``
    """
    data = extract_json_object(text)
    if data is not None:
        title = _clean(data.get("title"))
        description = _clean(data.get("description"))
        mood = _clean(data.get("mood"))
    else:
        logger.debug(f"No JSON in scene response for {image_name}, using marker extraction")
        title, description, mood = extract_scene_fields(text)
        if not (title or description or mood):
            description = text.strip()

    return Scene(
        id=scene_id_from_filename(image_name),
        title=title or f"News Scene: {Path(image_name).stem}",
        description=description or DEFAULT_DESCRIPTION,
        mood=mood or DEFAULT_MOOD,
        source_title=image_name,
    )


class SceneGenerator:
    """
    Describes headline images as scenes using the vision provider.

    Example:
        async with ClaudeClient.from_settings(settings) as client:
            generator = SceneGenerator(settings, client)
            scene = await generator.generate_scene(Path("input/flood.png"))
    """

    def __init__(self, settings: Settings, client: ClaudeClient | None):
        """
        Args:
            settings: Application settings
            client: Vision client; None means placeholder mode
        """
        self.settings = settings
        self.client = client

    async def generate_scene(self, image_path: Path) -> Scene:
        """
        Generate one scene for a headline image.

        Raises:
            ProviderError: If the vision call fails
            RuntimeError: If called without a client
        """
        if self.client is None:
            raise RuntimeError("SceneGenerator has no vision client configured")

        image_bytes = image_path.read_bytes()
        logger.info(f"Generating scene: {image_path.name} ({len(image_bytes)} bytes)")

        response = await self.client.describe_image(SCENE_PROMPT, image_bytes)
        scene = parse_scene_response(response, image_path.name)

        logger.info(f"Scene generated: {scene.id} - {scene.title} ({scene.mood})")
        return scene
