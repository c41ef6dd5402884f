"""
Application configuration and settings.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "STITCH_UP_CONFIG"
DEFAULT_CONFIG_NAMES = (".stitch-up.yaml", ".stitch-up.json")


class Settings(BaseSettings):
    """Application settings loaded from config file and environment variables."""

    # Credentials (empty string means absent -> placeholder mode)
    claude_api_key: str = Field(
        "", validation_alias=AliasChoices("claude_api_key", "anthropic_api_key")
    )
    huggingface_api_key: str = ""
    runway_api_key: str = ""
    replicate_api_key: str = ""
    suno_api_key: str = ""

    # Models
    claude_model: str = "claude-sonnet-4-5"
    huggingface_model: str = "stabilityai/stable-diffusion-xl-base-1.0"
    runway_model: str = "gen3a_turbo"
    replicate_model: str = (
        "3f0457e4619daac51203dedb472816fd4af51f3149fa7a9e0b5ffcf1b8172438"
    )

    # Endpoints
    anthropic_url: str | None = None  # None -> SDK default
    huggingface_url: str = "https://api-inference.huggingface.co/models"
    runway_url: str = "https://api.dev.runwayml.com/v1"
    runway_api_version: str = "2024-11-06"
    replicate_url: str = "https://api.replicate.com/v1"
    suno_url: str = "http://localhost:3000"

    # Paths
    input_dir: Path = Path("input")
    output_dir: Path = Path.home() / "stitch-up-output"
    images_dir: Path | None = None  # Defaults to output_dir/images
    videos_dir: Path | None = None  # Defaults to output_dir/videos
    music_dir: Path | None = None  # Defaults to output_dir/music
    final_dir: Path | None = None  # Defaults to output_dir/final

    # Pipeline tunables
    max_scenes: int = 5
    video_length: int = 10
    music_length: int = 120
    music_style: str = "pop, upbeat, news jingle"
    video_provider: Literal["runway", "replicate", "script"] = "runway"
    poll_interval: float = 5.0
    max_poll_attempts: int = 60
    item_delay: float = 2.0
    placeholder_delay: float = 0.1
    stage_timeout: float | None = 300.0
    http_timeout: float = 120.0

    # External tools
    ffmpeg_path: str = "ffmpeg"
    node_path: str = "node"
    video_converter_script: Path = Path("scripts/video-converter.js")

    # Logging
    log_level: str = "INFO"

    # Per-module log levels (optional overrides)
    log_level_providers: str | None = None
    log_level_pipeline: str | None = None
    log_level_poller: str | None = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def image_output_dir(self) -> Path:
        return self.images_dir or self.output_dir / "images"

    @property
    def video_output_dir(self) -> Path:
        return self.videos_dir or self.output_dir / "videos"

    @property
    def music_output_dir(self) -> Path:
        return self.music_dir or self.output_dir / "music"

    @property
    def final_output_dir(self) -> Path:
        return self.final_dir or self.output_dir / "final"

    @property
    def video_api_key(self) -> str:
        """Credential for the configured video provider."""
        if self.video_provider == "replicate":
            return self.replicate_api_key
        return self.runway_api_key


def find_config_file(config_path: Path | None = None) -> Path | None:
    """
    Locate the optional config file.

    Lookup order (first found wins):
    1. Explicit ``config_path`` argument
    2. ``STITCH_UP_CONFIG`` environment variable
    3. ``~/.stitch-up.yaml``, then ``~/.stitch-up.json``

    Args:
        config_path: Explicit path (e.g. from ``--config``)

    Returns:
        Path to an existing config file, or None

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist
    """
    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return path

    for name in DEFAULT_CONFIG_NAMES:
        candidate = Path.home() / name
        if candidate.exists():
            return candidate
    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML or JSON config file.

    JSON is a subset of YAML, so both formats go through yaml.safe_load.

    Args:
        path: Config file path

    Returns:
        Mapping of settings field names to values

    Raises:
        ValueError: If the file does not contain a mapping
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    return {str(key).lower(): value for key, value in data.items()}


def load_settings(config_path: Path | None = None) -> Settings:
    """
    Build settings honouring the config file.

    Priority (lowest to highest): defaults, config file, environment / .env.

    Args:
        config_path: Optional explicit config file path

    Returns:
        Fresh Settings instance
    """
    path = find_config_file(config_path)
    if path is None:
        return Settings()

    file_values = load_config_file(path)
    logger.debug(f"Loaded {len(file_values)} settings from {path}")

    # Values present in the environment win over the file
    env_settings = Settings()
    env_values = env_settings.model_dump(include=env_settings.model_fields_set)
    return Settings(**{**file_values, **env_values})


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
