"""
Replicate predictions job provider (stable-video-diffusion).
"""

import logging
from typing import Any

import httpx

from stitchup.config import Settings
from stitchup.services.providers.base import JobProviderClient, ProviderConfig
from stitchup.utils.media_utils import encode_image_data_uri

logger = logging.getLogger(__name__)

# Motion parameters for stable-video-diffusion
VIDEO_INPUT_DEFAULTS = {
    "motion_bucket_id": 127,
    "fps": 6,
    "num_frames": 25,
    "noise_aug_strength": 0.1,
}


class ReplicateClient(JobProviderClient):
    """Async client for Replicate prediction jobs."""

    provider = "replicate"

    JOB_ID_PATHS = ("id",)
    RESULT_PATHS = ("output", "output.0", "output.video")
    ERROR_PATHS = ("error",)

    def __init__(
        self,
        config: ProviderConfig,
        model_version: str,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config, http_client=http_client)
        self.model_version = model_version

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "ReplicateClient":
        """
        Create ReplicateClient from application settings.

        Raises:
            ValueError: If REPLICATE_API_KEY is not set
        """
        if not settings.replicate_api_key:
            raise ValueError("ReplicateClient requires REPLICATE_API_KEY.")

        config = ProviderConfig(
            base_url=settings.replicate_url.rstrip("/"),
            api_key=settings.replicate_api_key,
            timeout=settings.http_timeout,
        )
        return cls(config, model_version=settings.replicate_model, http_client=http_client)

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Token {self.config.api_key}"}

    @property
    def submit_url(self) -> str:
        return f"{self.config.base_url}/predictions"

    def status_url(self, job_id: str) -> str:
        return f"{self.config.base_url}/predictions/{job_id}"

    def build_payload(self, image_bytes: bytes, prompt_text: str) -> dict[str, Any]:
        return {
            "version": self.model_version,
            "input": {
                "image": encode_image_data_uri(image_bytes),
                "prompt": prompt_text,
                **VIDEO_INPUT_DEFAULTS,
            },
        }
