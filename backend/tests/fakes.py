"""Test doubles and sample bytes shared across test modules."""

import httpx

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32
VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42fake-video"
AUDIO_BYTES = b"ID3fake-audio"


def mock_http_client(handler) -> httpx.AsyncClient:
    """httpx client whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeVisionClient:
    """Stands in for ClaudeClient; records prompts and returns canned text."""

    provider = "claude"

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []
        self.images: list[bytes] = []

    async def describe_image(self, prompt: str, image_bytes: bytes) -> str:
        self.prompts.append(prompt)
        self.images.append(image_bytes)
        if self.error:
            raise self.error
        return self.reply

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply
