"""
Claude API client implementation.

Provides the vision call used for scene generation (prompt + image) and
plain text generation used for lyrics.
"""

import base64
import logging

from anthropic import APIConnectionError, APIStatusError, APITimeoutError, AsyncAnthropic

from stitchup.config import Settings
from stitchup.services.providers.base import (
    RETRY_DECORATOR,
    BaseProviderClient,
    MalformedResponseError,
    ProviderConfig,
    ProviderConnectionError,
    ProviderError,
    ProviderTimeoutError,
)
from stitchup.utils.media_utils import detect_image_mime_type

logger = logging.getLogger(__name__)

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5"
DEFAULT_MAX_TOKENS = 1024


class ClaudeClient(BaseProviderClient):
    """
    Async client for Anthropic's Claude API.

    Example:
        async with ClaudeClient.from_settings(settings) as client:
            text = await client.describe_image(prompt, image_bytes)
    """

    provider = "claude"

    def __init__(
        self,
        config: ProviderConfig,
        default_model: str = DEFAULT_CLAUDE_MODEL,
        client: AsyncAnthropic | None = None,
    ):
        """
        Initialize Claude client.

        Args:
            config: Provider configuration with API key
            default_model: Default Claude model to use
            client: Pre-built SDK client (tests)

        Raises:
            ValueError: If API key is not provided
        """
        super().__init__(config)
        self.default_model = default_model

        if client is None and not config.api_key:
            raise ValueError(
                "ClaudeClient requires API key. "
                "Set CLAUDE_API_KEY environment variable."
            )

        # Transport retries are handled by RETRY_DECORATOR
        self.client = client or AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url or None,
            timeout=config.timeout,
            max_retries=0,
        )

        logger.info(f"ClaudeClient initialized, model: {default_model}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClaudeClient":
        """
        Create ClaudeClient from application settings.

        Raises:
            ValueError: If CLAUDE_API_KEY not set
        """
        config = ProviderConfig(
            base_url=settings.anthropic_url or "",
            api_key=settings.claude_api_key,
            timeout=settings.http_timeout,
        )
        return cls(config=config, default_model=settings.claude_model)

    async def close(self) -> None:
        """Close the client and release resources."""
        await self.client.close()
        logger.debug("ClaudeClient closed")

    async def describe_image(
        self,
        prompt: str,
        image_bytes: bytes,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> str:
        """
        Ask the model about an image.

        Args:
            prompt: Instruction text
            image_bytes: Raw image; MIME type detected from magic bytes
            max_tokens: Max tokens to generate

        Returns:
            Model's text response

        Raises:
            ProviderError: If the request fails
        """
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": detect_image_mime_type(image_bytes),
                    "data": base64.b64encode(image_bytes).decode("ascii"),
                },
            },
            {"type": "text", "text": prompt},
        ]
        return await self._create([{"role": "user", "content": content}], max_tokens)

    async def generate(self, prompt: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> str:
        """Generate text from a single user prompt."""
        return await self._create([{"role": "user", "content": prompt}], max_tokens)

    @RETRY_DECORATOR
    async def _create(self, messages: list[dict], max_tokens: int) -> str:
        model = self.default_model
        logger.debug(f"Claude request: model={model}, max_tokens={max_tokens}")

        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                messages=messages,
            )
        except APITimeoutError as e:
            logger.error(f"Claude timeout: {e}")
            raise ProviderTimeoutError(
                "Claude request timeout",
                provider=self.provider,
                original_error=e,
            ) from e
        except APIConnectionError as e:
            logger.error(f"Claude connection error: {e}")
            raise ProviderConnectionError(
                f"Cannot connect to Claude API: {e}",
                provider=self.provider,
                original_error=e,
            ) from e
        except APIStatusError as e:
            logger.error(f"Claude API error: {e.status_code} - {e.message}")
            raise ProviderError(
                f"Claude API error: {e.message}",
                provider=self.provider,
                status_code=e.status_code,
                response_body=str(e.body) if e.body else None,
                original_error=e,
            ) from e

        text_blocks = [block.text for block in response.content if getattr(block, "type", "") == "text"]
        if not text_blocks:
            raise MalformedResponseError("Claude returned no text content", provider=self.provider)

        content = "".join(text_blocks)
        logger.info(
            f"Claude response: {len(content)} chars, "
            f"tokens: {response.usage.input_tokens} in / {response.usage.output_tokens} out"
        )
        return content
