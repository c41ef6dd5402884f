"""
Provider clients for the generative AI services.

Exports:
    - ProviderConfig, error hierarchy
    - ClaudeClient (vision + text), HuggingFaceClient (images)
    - RunwayClient, ReplicateClient (video jobs), SunoClient (music jobs)
"""

from stitchup.services.providers.base import (
    BaseProviderClient,
    DownloadError,
    GenerationFailedError,
    HttpProviderClient,
    JobProviderClient,
    MalformedResponseError,
    MissingJobIdentifierError,
    MissingResultLocationError,
    PollTimeoutError,
    ProviderConfig,
    ProviderConnectionError,
    ProviderError,
    ProviderTimeoutError,
)
from stitchup.services.providers.claude_client import ClaudeClient
from stitchup.services.providers.huggingface_client import HuggingFaceClient
from stitchup.services.providers.replicate_client import ReplicateClient
from stitchup.services.providers.runway_client import RunwayClient
from stitchup.services.providers.suno_client import SunoClient

__all__ = [
    # Base
    "BaseProviderClient",
    "HttpProviderClient",
    "JobProviderClient",
    "ProviderConfig",
    # Errors
    "ProviderError",
    "ProviderConnectionError",
    "ProviderTimeoutError",
    "MalformedResponseError",
    "MissingJobIdentifierError",
    "MissingResultLocationError",
    "GenerationFailedError",
    "PollTimeoutError",
    "DownloadError",
    # Clients
    "ClaudeClient",
    "HuggingFaceClient",
    "ReplicateClient",
    "RunwayClient",
    "SunoClient",
]
