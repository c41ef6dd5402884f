"""
Suno-style music generation job provider.

Targets the self-hosted suno-api wrapper: a custom_generate call returns a
list of clips, and the clip list endpoint reports status and audio URL.
"""

import logging
from typing import Any

import httpx

from stitchup.config import Settings
from stitchup.models.schemas import JobStatus
from stitchup.services.providers.base import (
    DEFAULT_STATUS_MAP,
    JobProviderClient,
    ProviderConfig,
)

logger = logging.getLogger(__name__)


class SunoClient(JobProviderClient):
    """Async client for lyric-to-song jobs."""

    provider = "suno"

    JOB_ID_PATHS = ("id", "taskId", "task_id", "0.id", "data.taskId")
    STATUS_PATHS = ("status", "0.status", "data.status")
    RESULT_PATHS = ("audioUrl", "audio_url", "0.audio_url", "output.audio", "output.0")
    ERROR_PATHS = ("error", "error_message", "0.error_message")
    STATUS_MAP = {
        **DEFAULT_STATUS_MAP,
        "streaming": JobStatus.RUNNING,
        "complete": JobStatus.COMPLETED,
    }

    def __init__(
        self,
        config: ProviderConfig,
        style: str = "",
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config, http_client=http_client)
        self.style = style

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "SunoClient":
        """
        Create SunoClient from application settings.

        Raises:
            ValueError: If SUNO_API_KEY is not set
        """
        if not settings.suno_api_key:
            raise ValueError("SunoClient requires SUNO_API_KEY.")

        config = ProviderConfig(
            base_url=settings.suno_url.rstrip("/"),
            api_key=settings.suno_api_key,
            timeout=settings.http_timeout,
        )
        return cls(config, style=settings.music_style, http_client=http_client)

    @property
    def submit_url(self) -> str:
        return f"{self.config.base_url}/api/custom_generate"

    def status_url(self, job_id: str) -> str:
        return f"{self.config.base_url}/api/get?ids={job_id}"

    def build_payload(self, title: str, lyrics: str) -> dict[str, Any]:
        return {
            "prompt": lyrics,
            "title": title,
            "tags": self.style,
            "make_instrumental": False,
            "wait_audio": False,
        }
