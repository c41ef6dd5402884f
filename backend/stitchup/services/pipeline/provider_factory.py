"""
Provider selection.

Decides which provider clients a run gets from the configured credentials
and opens them for the duration of the run. A provider without a credential
gets no client, which puts the stages that use it into placeholder mode.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass

from stitchup.config import Settings
from stitchup.services.providers import (
    ClaudeClient,
    HuggingFaceClient,
    ReplicateClient,
    RunwayClient,
    SunoClient,
)

logger = logging.getLogger(__name__)


@dataclass
class ProviderClients:
    """
    Clients available to one pipeline run.

    Attributes:
        vision: Scene descriptions and lyrics (Claude)
        image: Image synthesis (Hugging Face)
        video: Image-to-video job provider (Runway or Replicate)
        music: Music job provider (Suno)
    """

    vision: ClaudeClient | None = None
    image: HuggingFaceClient | None = None
    video: RunwayClient | ReplicateClient | None = None
    music: SunoClient | None = None

    def describe(self) -> dict[str, str]:
        """Provider name per role, or "placeholder"."""
        return {
            role: type(client).__name__ if client is not None else "placeholder"
            for role, client in (
                ("vision", self.vision),
                ("image", self.image),
                ("video", self.video),
                ("music", self.music),
            )
        }


class ProviderFactory:
    """
    Builds provider clients from settings.

    Example:
        factory = ProviderFactory(settings)
        async with factory.open() as clients:
            registry = create_default_stages(
                settings,
                vision_client=clients.vision,
                image_client=clients.image,
                video_client=clients.video,
                music_client=clients.music,
            )
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def video_client_type(self) -> type[RunwayClient] | type[ReplicateClient] | None:
        """
        Job provider class for in-process video conversion.

        Returns:
            RunwayClient or ReplicateClient, or None when the external
            script handles conversion or the credential is missing
        """
        provider = self.settings.video_provider
        if provider == "runway" and self.settings.runway_api_key:
            return RunwayClient
        if provider == "replicate" and self.settings.replicate_api_key:
            return ReplicateClient
        return None

    @asynccontextmanager
    async def open(self) -> AsyncIterator[ProviderClients]:
        """
        Open every client that has a credential; close them all on exit.

        Yields:
            ProviderClients with None for missing credentials
        """
        settings = self.settings
        async with AsyncExitStack() as stack:
            clients = ProviderClients()

            if settings.claude_api_key:
                clients.vision = await stack.enter_async_context(ClaudeClient.from_settings(settings))
            if settings.huggingface_api_key:
                clients.image = await stack.enter_async_context(HuggingFaceClient.from_settings(settings))

            video_type = self.video_client_type()
            if video_type is not None:
                clients.video = await stack.enter_async_context(video_type.from_settings(settings))

            if settings.suno_api_key:
                clients.music = await stack.enter_async_context(SunoClient.from_settings(settings))

            for role, name in clients.describe().items():
                logger.info(f"Provider for {role}: {name}")

            yield clients
