"""
Runway image-to-video job provider.
"""

import logging
from typing import Any

import httpx

from stitchup.config import Settings
from stitchup.services.providers.base import JobProviderClient, ProviderConfig
from stitchup.utils.media_utils import encode_image_data_uri

logger = logging.getLogger(__name__)


class RunwayClient(JobProviderClient):
    """
    Async client for Runway's image_to_video jobs.

    Example:
        async with RunwayClient.from_settings(settings) as client:
            poller = JobPoller(client, poll_interval=5, max_attempts=60)
            video_bytes = await poller.run(client.build_payload(image_bytes, "A storm"))
    """

    provider = "runway"

    JOB_ID_PATHS = ("id", "jobId")
    RESULT_PATHS = ("videoUrl", "output.video", "output.0")
    ERROR_PATHS = ("error", "failure")

    def __init__(
        self,
        config: ProviderConfig,
        model: str = "gen3a_turbo",
        api_version: str = "2024-11-06",
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config, http_client=http_client)
        self.model = model
        self.api_version = api_version

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "RunwayClient":
        """
        Create RunwayClient from application settings.

        Raises:
            ValueError: If RUNWAY_API_KEY is not set
        """
        if not settings.runway_api_key:
            raise ValueError("RunwayClient requires RUNWAY_API_KEY.")

        config = ProviderConfig(
            base_url=settings.runway_url.rstrip("/"),
            api_key=settings.runway_api_key,
            timeout=settings.http_timeout,
        )
        return cls(
            config,
            model=settings.runway_model,
            api_version=settings.runway_api_version,
            http_client=http_client,
        )

    def auth_headers(self) -> dict[str, str]:
        headers = super().auth_headers()
        headers["X-Runway-Version"] = self.api_version
        return headers

    @property
    def submit_url(self) -> str:
        return f"{self.config.base_url}/image_to_video"

    def status_url(self, job_id: str) -> str:
        return f"{self.config.base_url}/image_to_video/{job_id}"

    def alternate_status_url(self, job_id: str) -> str | None:
        return f"{self.config.base_url}/jobs/{job_id}"

    def build_payload(self, image_bytes: bytes, prompt_text: str) -> dict[str, Any]:
        """Request body animating ``image_bytes`` guided by ``prompt_text``."""
        return {
            "promptImage": encode_image_data_uri(image_bytes),
            "promptText": prompt_text,
            "model": self.model,
        }
