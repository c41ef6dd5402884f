"""
Base provider client and error hierarchy for generative AI services.

Every remote collaborator (vision model, image synthesis, video and music
job services) is wrapped in a client derived from BaseProviderClient so the
pipeline can swap providers without touching stage code.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stitchup.models.schemas import JobStatus

logger = logging.getLogger(__name__)

MAX_ERROR_BODY = 2000


@dataclass
class ProviderConfig:
    """
    Configuration for provider client instances.

    Attributes:
        base_url: API endpoint URL
        api_key: API key for authenticated services
        timeout: Request timeout in seconds
        max_retries: Number of retry attempts for transient errors
    """

    base_url: str
    api_key: str | None = None
    timeout: float = 120.0
    max_retries: int = 3


class ProviderError(Exception):
    """
    Base exception for provider errors.

    Attributes:
        message: Error description
        provider: Provider name (runway, replicate, huggingface, ...)
        status_code: HTTP status code if available
        response_body: Response body if available
        original_error: Underlying exception if available
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body
        self.original_error = original_error
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider:
            parts.append(f"provider={self.provider}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " | ".join(parts)


class ProviderTimeoutError(ProviderError):
    """Raised when a request to the provider times out."""

    pass


class ProviderConnectionError(ProviderError):
    """Raised when connection to the provider fails."""

    pass


class MalformedResponseError(ProviderError):
    """Raised when a response body cannot be parsed."""

    pass


class MissingJobIdentifierError(MalformedResponseError):
    """Raised when a submission response carries no job id."""

    pass


class MissingResultLocationError(MalformedResponseError):
    """Raised when a completed job reports no result URL."""

    pass


class GenerationFailedError(ProviderError):
    """Raised when the provider reports the job as failed.

    ``message`` is the provider's own failure text, unmodified.
    """

    pass


class PollTimeoutError(ProviderError):
    """Raised when a job does not reach a terminal state within the poll budget."""

    pass


class DownloadError(ProviderError):
    """Raised when fetching a finished result fails."""

    pass


# Retry configuration for transient transport errors on single-shot calls
RETRY_DECORATOR = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=4, max=60),
    retry=retry_if_exception_type((ProviderConnectionError, ProviderTimeoutError)),
    reraise=True,
)


class BaseProviderClient(ABC):
    """
    Abstract base class for provider clients.

    Provides the async context manager protocol. Subclasses must implement
    close().
    """

    provider: str = "provider"

    def __init__(self, config: ProviderConfig):
        """
        Initialize provider client with configuration.

        Args:
            config: Client configuration with URL, key, timeout
        """
        self.config = config

    @abstractmethod
    async def close(self) -> None:
        """Close the client and release resources."""
        pass

    async def __aenter__(self) -> "BaseProviderClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()


class HttpProviderClient(BaseProviderClient):
    """
    Provider client speaking plain HTTP/JSON through httpx.

    An externally supplied ``http_client`` is not closed by this client.
    """

    def __init__(
        self,
        config: ProviderConfig,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config)
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=config.timeout)

    async def close(self) -> None:
        if self._owns_http_client:
            await self.http_client.aclose()
        logger.debug(f"{self.provider} client closed")

    def auth_headers(self) -> dict[str, str]:
        """Authentication headers sent with every API request."""
        if not self.config.api_key:
            return {}
        return {"Authorization": f"Bearer {self.config.api_key}"}

    async def request(
        self,
        method: str,
        url: str,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request, mapping transport failures to provider errors.

        Args:
            method: HTTP method
            url: Absolute URL
            authenticated: Whether to attach auth_headers()
            **kwargs: Passed through to httpx

        Returns:
            httpx.Response (any status code)

        Raises:
            ProviderTimeoutError: On request timeout
            ProviderConnectionError: On any other transport failure
        """
        headers = dict(kwargs.pop("headers", None) or {})
        if authenticated:
            headers.update(self.auth_headers())

        try:
            return await self.http_client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"{self.provider} request timeout: {method} {url}",
                provider=self.provider,
                original_error=e,
            ) from e
        except httpx.TransportError as e:
            raise ProviderConnectionError(
                f"Cannot connect to {self.provider}: {e}",
                provider=self.provider,
                original_error=e,
            ) from e

    def raise_for_status(self, response: httpx.Response, action: str) -> None:
        """
        Raise ProviderError for a non-success HTTP status.

        Args:
            response: Received response
            action: Short description for the message ("submission", ...)
        """
        if response.is_success:
            return
        body = response.text[:MAX_ERROR_BODY]
        logger.error(f"{self.provider} {action} failed: HTTP {response.status_code} - {body[:200]}")
        raise ProviderError(
            f"{self.provider} {action} failed with HTTP {response.status_code}",
            provider=self.provider,
            status_code=response.status_code,
            response_body=body,
        )

    def parse_json(self, response: httpx.Response) -> Any:
        """
        Parse a JSON object or array body.

        Raises:
            MalformedResponseError: If the body is not a JSON object/array
        """
        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResponseError(
                f"{self.provider} returned a non-JSON body",
                provider=self.provider,
                status_code=response.status_code,
                response_body=response.text[:MAX_ERROR_BODY],
                original_error=e,
            ) from e

        if not isinstance(data, (dict, list)):
            raise MalformedResponseError(
                f"{self.provider} returned JSON {type(data).__name__}, expected object",
                provider=self.provider,
                status_code=response.status_code,
                response_body=response.text[:MAX_ERROR_BODY],
            )
        return data


DEFAULT_STATUS_MAP: dict[str, JobStatus] = {
    "submitted": JobStatus.SUBMITTED,
    "pending": JobStatus.QUEUED,
    "queued": JobStatus.QUEUED,
    "starting": JobStatus.QUEUED,
    "throttled": JobStatus.QUEUED,
    "running": JobStatus.RUNNING,
    "processing": JobStatus.RUNNING,
    "in_progress": JobStatus.RUNNING,
    "completed": JobStatus.COMPLETED,
    "succeeded": JobStatus.COMPLETED,
    "success": JobStatus.COMPLETED,
    "failed": JobStatus.FAILED,
    "failure": JobStatus.FAILED,
    "error": JobStatus.FAILED,
    "cancelled": JobStatus.FAILED,
    "canceled": JobStatus.FAILED,
}


class JobProviderClient(HttpProviderClient):
    """
    Adapter for a provider that runs generation as an asynchronous job.

    Subclasses supply the endpoints and the ordered extraction paths; the
    JobPoller owns the submit / poll / download protocol.

    Class attributes:
        JOB_ID_PATHS: Where the job id may appear in the submission response
        STATUS_PATHS: Where the status string may appear in a poll response
        RESULT_PATHS: Where the result URL may appear once completed
        ERROR_PATHS: Where an in-band error/failure message may appear
        STATUS_MAP: Lower-cased provider status -> JobStatus
    """

    JOB_ID_PATHS: tuple[str, ...] = ("id", "jobId")
    STATUS_PATHS: tuple[str, ...] = ("status",)
    RESULT_PATHS: tuple[str, ...] = ()
    ERROR_PATHS: tuple[str, ...] = ("error",)
    STATUS_MAP: dict[str, JobStatus] = DEFAULT_STATUS_MAP

    @property
    @abstractmethod
    def submit_url(self) -> str:
        """Endpoint accepting job submissions."""

    @abstractmethod
    def status_url(self, job_id: str) -> str:
        """Endpoint reporting the status of ``job_id``."""

    def alternate_status_url(self, job_id: str) -> str | None:
        """Fallback status endpoint tried once if the primary returns 404."""
        return None

    def map_status(self, raw_status: str | None) -> JobStatus | None:
        """
        Translate a provider status string.

        Returns:
            Mapped JobStatus, or None for a missing/unrecognised status
        """
        if not raw_status:
            return None
        return self.STATUS_MAP.get(raw_status.strip().lower())

    async def submit(self, payload: dict[str, Any]) -> Any:
        """
        Submit a generation job.

        Args:
            payload: Provider-specific request body

        Returns:
            Parsed submission response

        Raises:
            ProviderError: Non-success HTTP status
            MalformedResponseError: Unparseable body
        """
        logger.debug(f"{self.provider} submit: POST {self.submit_url}")
        response = await self.request("POST", self.submit_url, json=payload)
        self.raise_for_status(response, "submission")
        return self.parse_json(response)

    async def get_status(self, url: str) -> httpx.Response:
        """Fetch a status document; the caller interprets the status code."""
        return await self.request("GET", url)

    async def download(self, url: str) -> bytes:
        """
        Fetch finished output bytes with a plain unauthenticated GET.

        Raises:
            DownloadError: On transport failure or non-success status
        """
        try:
            response = await self.request("GET", url, authenticated=False, follow_redirects=True)
        except ProviderError as e:
            raise DownloadError(
                f"Download from {url} failed: {e.message}",
                provider=self.provider,
                original_error=e,
            ) from e

        if not response.is_success:
            raise DownloadError(
                f"Download from {url} failed with HTTP {response.status_code}",
                provider=self.provider,
                status_code=response.status_code,
                response_body=response.text[:MAX_ERROR_BODY],
            )
        return response.content
