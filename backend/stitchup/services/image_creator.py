"""
Image creator: synthesizes one still image per scene.
"""

import logging

from stitchup.config import Settings
from stitchup.models.schemas import Image, Scene
from stitchup.services.providers.huggingface_client import HuggingFaceClient
from stitchup.utils.media_utils import sanitize_filename, short_uid

logger = logging.getLogger(__name__)


def build_image_prompt(scene: Scene) -> str:
    """Scene description (or title) plus the mood sentence when a mood is set."""
    prompt = scene.description or scene.title
    if scene.mood:
        prompt += f" The mood is {scene.mood}."
    return prompt


class ImageCreator:
    """
    Creates images for scenes through the image-synthesis provider.

    Example:
        async with HuggingFaceClient.from_settings(settings) as client:
            creator = ImageCreator(settings, client)
            image = await creator.create_image(scene)
    """

    def __init__(self, settings: Settings, client: HuggingFaceClient | None):
        self.settings = settings
        self.client = client

    async def create_image(self, scene: Scene) -> Image:
        """
        Synthesize and save an image for ``scene``.

        Returns:
            Image pointing at the saved PNG

        Raises:
            ProviderError: If synthesis fails
            RuntimeError: If called without a client
        """
        if self.client is None:
            raise RuntimeError("ImageCreator has no image client configured")

        logger.info(f"Creating image for scene: {scene.id}")
        image_bytes = await self.client.generate_image(build_image_prompt(scene))

        output_dir = self.settings.image_output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / f"image_{sanitize_filename(scene.title)[:20]}_{short_uid()}.png"
        path.write_bytes(image_bytes)

        logger.info(f"Image saved: {path.name} ({len(image_bytes)} bytes)")
        return Image(path=path, scene_id=scene.id, description=scene.description)
