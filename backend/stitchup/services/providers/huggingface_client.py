"""
Hugging Face inference API client for text-to-image synthesis.

The request body depends on the model family; families are looked up in
MODEL_FAMILIES by substring of the model id, first match wins.
"""

import logging
from typing import Any

import httpx

from stitchup.config import Settings
from stitchup.services.providers.base import (
    RETRY_DECORATOR,
    HttpProviderClient,
    MalformedResponseError,
    ProviderConfig,
    ProviderError,
)
from stitchup.utils.field_extraction import first_match

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MODEL = "stabilityai/stable-diffusion-xl-base-1.0"

# family marker -> (prompt suffix, extra request parameters)
MODEL_FAMILIES: dict[str, tuple[str, dict[str, Any]]] = {
    "stable-diffusion": (
        " Photorealistic, high detail, dramatic lighting, 8k, cinematic, "
        "professional photography.",
        {
            "negative_prompt": "blurry, low quality, distorted, deformed, disfigured",
            "num_inference_steps": 50,
            "guidance_scale": 7.5,
        },
    ),
}


def model_family(model: str) -> str | None:
    """Return the MODEL_FAMILIES key matching ``model``, if any."""
    lowered = model.lower()
    for marker in MODEL_FAMILIES:
        if marker in lowered:
            return marker
    return None


def build_image_request(prompt: str, model: str) -> dict[str, Any]:
    """
    Build the inference request body for ``model``.

    Args:
        prompt: Image prompt
        model: Hugging Face model id

    Returns:
        JSON body with ``inputs`` and, for known families, ``parameters``
    """
    family = model_family(model)
    if family is None:
        return {"inputs": prompt}

    suffix, parameters = MODEL_FAMILIES[family]
    return {"inputs": prompt + suffix, "parameters": dict(parameters)}


class HuggingFaceClient(HttpProviderClient):
    """
    Async client for Hugging Face text-to-image models.

    Example:
        async with HuggingFaceClient.from_settings(settings) as client:
            png_bytes = await client.generate_image("A flooded city street")
    """

    provider = "huggingface"

    def __init__(
        self,
        config: ProviderConfig,
        model: str = DEFAULT_IMAGE_MODEL,
        http_client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config, http_client=http_client)
        self.model = model

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "HuggingFaceClient":
        """
        Create HuggingFaceClient from application settings.

        Raises:
            ValueError: If HUGGINGFACE_API_KEY is not set
        """
        if not settings.huggingface_api_key:
            raise ValueError("HuggingFaceClient requires HUGGINGFACE_API_KEY.")

        config = ProviderConfig(
            base_url=settings.huggingface_url.rstrip("/"),
            api_key=settings.huggingface_api_key,
            timeout=settings.http_timeout,
        )
        return cls(config, model=settings.huggingface_model, http_client=http_client)

    @property
    def model_url(self) -> str:
        return f"{self.config.base_url}/{self.model}"

    @RETRY_DECORATOR
    async def generate_image(self, prompt: str) -> bytes:
        """
        Synthesize an image from a prompt.

        Args:
            prompt: Image description

        Returns:
            Raw image bytes

        Raises:
            ProviderError: Non-success status or in-band JSON error
            MalformedResponseError: JSON body without an error field, or empty body
        """
        body = build_image_request(prompt, self.model)
        logger.debug(f"HuggingFace request: model={self.model}, prompt={len(prompt)} chars")

        response = await self.request("POST", self.model_url, json=body)
        self.raise_for_status(response, "image synthesis")

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            data = self.parse_json(response)
            message = first_match(data, ("error", "errors.0", "message"))
            if message:
                raise ProviderError(
                    f"HuggingFace error: {message}",
                    provider=self.provider,
                    status_code=response.status_code,
                    response_body=response.text[:2000],
                )
            raise MalformedResponseError(
                "HuggingFace returned JSON instead of image bytes",
                provider=self.provider,
                status_code=response.status_code,
                response_body=response.text[:2000],
            )

        if not response.content:
            raise MalformedResponseError("HuggingFace returned an empty body", provider=self.provider)

        logger.info(f"HuggingFace image: {len(response.content)} bytes")
        return response.content
