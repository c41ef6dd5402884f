"""
Shared fixtures.

Every test runs offline: credentials are empty, external tools point at
names that do not exist, and poll/item delays are zero.
"""

from pathlib import Path

import pytest

from stitchup.config import Settings
from stitchup.models.schemas import Image, Scene
from tests.fakes import JPEG_BYTES, PNG_BYTES


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Offline settings rooted in a temporary directory."""
    return Settings(
        _env_file=None,
        claude_api_key="",
        huggingface_api_key="",
        runway_api_key="",
        replicate_api_key="",
        suno_api_key="",
        input_dir=tmp_path / "input",
        output_dir=tmp_path / "output",
        poll_interval=0,
        max_poll_attempts=5,
        item_delay=0,
        placeholder_delay=0,
        stage_timeout=10,
        ffmpeg_path="stitchup-test-missing-ffmpeg",
        node_path="stitchup-test-missing-node",
    )


@pytest.fixture
def headline_images(settings: Settings) -> list[Path]:
    """Three headline screenshots in the input directory."""
    settings.input_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for name in ("Storm Hits-Coast.png", "markets_rally.png", "rocket-launch.jpg"):
        path = settings.input_dir / name
        path.write_bytes(JPEG_BYTES if name.endswith(".jpg") else PNG_BYTES)
        paths.append(path)
    return paths


@pytest.fixture
def scenes() -> list[Scene]:
    return [
        Scene(
            id="scene_storm_hits_coast",
            title="Storm Hits Coast",
            description="Waves crash over a seawall as a lighthouse flickers.",
            mood="tense",
            source_title="Storm Hits-Coast.png",
        ),
        Scene(
            id="scene_markets_rally",
            title="Markets Rally",
            description="Traders cheer under green tickers.",
            mood="energetic",
            source_title="markets_rally.png",
        ),
        Scene(
            id="scene_rocket_launch",
            title="Rocket Launch",
            description="",
            mood="",
            source_title="rocket-launch.jpg",
        ),
    ]


@pytest.fixture
def images(settings: Settings, scenes: list[Scene]) -> list[Image]:
    """One real image file per scene."""
    image_dir = settings.image_output_dir
    image_dir.mkdir(parents=True, exist_ok=True)
    result = []
    for scene in scenes:
        path = image_dir / f"image_{scene.id}.png"
        path.write_bytes(PNG_BYTES)
        result.append(Image(path=path, scene_id=scene.id, description=scene.description))
    return result

