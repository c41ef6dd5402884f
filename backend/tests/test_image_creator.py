"""
Tests for stitchup.services.image_creator and the Hugging Face client
"""

from pathlib import Path

import httpx
import pytest

from stitchup.models.schemas import Scene
from stitchup.services.image_creator import ImageCreator, build_image_prompt
from stitchup.services.providers import MalformedResponseError, ProviderConfig, ProviderError
from stitchup.services.providers.huggingface_client import HuggingFaceClient, build_image_request
from tests.fakes import PNG_BYTES, mock_http_client

HF_URL = "https://hf.test/models"
SDXL = "stabilityai/stable-diffusion-xl-base-1.0"


def hf_client(handler, model: str = SDXL) -> HuggingFaceClient:
    config = ProviderConfig(base_url=HF_URL, api_key="hf-key")
    return HuggingFaceClient(config, model=model, http_client=mock_http_client(handler))


class TestImageRequest:
    """Table-driven request bodies."""

    def test_stable_diffusion_family_gets_parameters_and_style(self):
        body = build_image_request("A storm.", SDXL)

        assert body["inputs"].startswith("A storm. Photorealistic")
        assert body["parameters"]["num_inference_steps"] == 50
        assert body["parameters"]["guidance_scale"] == 7.5
        assert "negative_prompt" in body["parameters"]

    def test_other_models_get_plain_inputs(self):
        assert build_image_request("A storm.", "black-forest-labs/FLUX.1-schnell") == {"inputs": "A storm."}

    def test_prompt_appends_mood(self):
        scene = Scene(id="s", title="T", description="Rain on glass.", mood="melancholy")
        assert build_image_prompt(scene) == "Rain on glass. The mood is melancholy."

    def test_prompt_without_description_uses_title(self):
        assert build_image_prompt(Scene(id="s", title="Harbour")) == "Harbour"


class TestHuggingFaceClient:
    @pytest.mark.asyncio
    async def test_json_error_body(self):
        client = hf_client(lambda request: httpx.Response(200, json={"error": "Model is loading"}))

        with pytest.raises(ProviderError, match="Model is loading"):
            await client.generate_image("A storm.")

    @pytest.mark.asyncio
    async def test_json_body_without_error_is_malformed(self):
        client = hf_client(lambda request: httpx.Response(200, json={"ok": True}))

        with pytest.raises(MalformedResponseError):
            await client.generate_image("A storm.")

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = hf_client(lambda request: httpx.Response(503, text="unavailable"))

        with pytest.raises(ProviderError) as exc_info:
            await client.generate_image("A storm.")

        assert exc_info.value.status_code == 503


class TestImageCreator:
    @pytest.mark.asyncio
    async def test_saves_image_bytes(self, settings):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})

        scene = Scene(id="scene_storm", title="Storm Over Harbour Town", description="Waves.", mood="tense")
        image = await ImageCreator(settings, hf_client(handler)).create_image(scene)

        path = Path(image.path)
        assert path.parent == settings.image_output_dir
        assert path.name.startswith("image_storm_over_harbour_t_")
        assert path.read_bytes() == PNG_BYTES
        assert image.scene_id == "scene_storm"
        assert image.description == "Waves."
        assert requests[0].url == httpx.URL(f"{HF_URL}/{SDXL}")
        assert requests[0].headers["Authorization"] == "Bearer hf-key"
