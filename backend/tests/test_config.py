"""
Tests for stitchup.config
"""

import json

import pytest

from stitchup.config import CONFIG_ENV_VAR, Settings, find_config_file, load_config_file, load_settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No stray config or .env from the developer machine."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in (CONFIG_ENV_VAR, "MAX_SCENES", "RUNWAY_URL", "VIDEO_PROVIDER"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_stage_directories_derive_from_output_dir(self, tmp_path):
        settings = Settings(_env_file=None, output_dir=tmp_path)

        assert settings.image_output_dir == tmp_path / "images"
        assert settings.video_output_dir == tmp_path / "videos"
        assert settings.music_output_dir == tmp_path / "music"
        assert settings.final_output_dir == tmp_path / "final"

    def test_explicit_stage_directory_wins(self, tmp_path):
        settings = Settings(_env_file=None, output_dir=tmp_path, videos_dir=tmp_path / "clips")
        assert settings.video_output_dir == tmp_path / "clips"

    def test_video_api_key_follows_provider(self):
        settings = Settings(
            _env_file=None,
            runway_api_key="rw",
            replicate_api_key="rp",
            video_provider="replicate",
        )
        assert settings.video_api_key == "rp"

    def test_anthropic_key_alias(self, clean_env):
        clean_env.delenv("CLAUDE_API_KEY", raising=False)
        clean_env.setenv("ANTHROPIC_API_KEY", "sk-test")
        assert Settings(_env_file=None).claude_api_key == "sk-test"


class TestConfigFile:
    def test_file_values_apply_below_environment(self, clean_env, tmp_path):
        config = tmp_path / "stitch-up.yaml"
        config.write_text("max_scenes: 3\nrunway_url: https://runway.example/v1\n", encoding="utf-8")
        clean_env.setenv("MAX_SCENES", "7")

        settings = load_settings(config)

        assert settings.max_scenes == 7
        assert settings.runway_url == "https://runway.example/v1"

    def test_json_config_and_env_var_lookup(self, clean_env, tmp_path):
        config = tmp_path / "custom.json"
        config.write_text(json.dumps({"VIDEO_PROVIDER": "replicate"}), encoding="utf-8")
        clean_env.setenv(CONFIG_ENV_VAR, str(config))

        assert find_config_file() == config
        assert load_settings().video_provider == "replicate"

    def test_home_directory_default(self, clean_env, tmp_path):
        (tmp_path / ".stitch-up.yaml").write_text("max_scenes: 2\n", encoding="utf-8")
        assert load_settings().max_scenes == 2

    def test_no_config_file(self, clean_env):
        assert find_config_file() is None
        assert load_settings().max_scenes == 5

    def test_non_mapping_is_rejected(self, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError):
            load_config_file(config)
