"""
Tests for stitchup.services.video_converter
"""

import json
import subprocess
from pathlib import Path

import httpx
import pytest

from stitchup.models.schemas import ArtifactMode, Image, Scene
from stitchup.services.placeholders import PlaceholderFactory, is_placeholder
from stitchup.services.providers import ProviderConfig, RunwayClient
from stitchup.services.stages import BatchRunner
from stitchup.services.video_converter import (
    ConverterScriptError,
    ExternalScriptVideoConverter,
    ProviderVideoConverter,
    create_video_converter,
    find_matching_scene,
    resolve_prompt_text,
)
from tests.fakes import VIDEO_BYTES, mock_http_client


def build_converter(settings, client=None):
    return create_video_converter(
        settings, BatchRunner(settings), PlaceholderFactory(settings), client
    )


class TestPromptResolution:
    """Prompt text for the image-to-video request."""

    def test_image_description_wins(self, scenes):
        image = Image(path=Path("a.png"), scene_id="scene_storm_hits_coast", description="A calm bay.")
        assert resolve_prompt_text(image, scenes) == "A calm bay."

    def test_falls_back_to_matching_scene_with_mood(self, scenes):
        image = Image(path=Path("a.png"), scene_id="scene_storm_hits_coast")
        assert resolve_prompt_text(image, scenes) == (
            "Waves crash over a seawall as a lighthouse flickers. The mood is tense."
        )

    def test_scene_without_description_uses_title(self, scenes):
        image = Image(path=Path("a.png"), scene_id="scene_rocket_launch")
        assert resolve_prompt_text(image, scenes) == "A scene depicting Rocket Launch"

    def test_unknown_scene_degrades_to_generic_prompt(self, scenes):
        image = Image(path=Path("a.png"), scene_id="scene_volcano")
        assert resolve_prompt_text(image, scenes) == "Generated from scene scene_volcano"

    def test_containment_match_on_title(self):
        scene = Scene(id="s1", title="Markets Rally Again", description="Bulls run.")
        assert find_matching_scene("scene_markets_rally", [scene]) is scene

    def test_containment_match_on_source_title(self):
        scene = Scene(id="s2", title="Untitled", source_title="rocket_launch.png")
        assert find_matching_scene("scene_rocket_launch", [scene]) is scene


class TestProviderVideoConverter:
    """In-process conversion through a job provider."""

    @pytest.mark.asyncio
    async def test_without_credential_every_image_gets_a_placeholder(self, settings, images, scenes):
        converter = build_converter(settings)
        assert isinstance(converter, ProviderVideoConverter)

        outcome = await converter.convert(images, scenes)

        assert len(outcome.value) == 3
        assert [video.image_id for video in outcome.value] == [scene.id for scene in scenes]
        assert all(is_placeholder(video.path) for video in outcome.value)
        assert all(Path(video.path).exists() for video in outcome.value)
        assert all(video.length_seconds == settings.video_length for video in outcome.value)
        assert outcome.report.mode == ArtifactMode.PLACEHOLDER

    @pytest.mark.asyncio
    async def test_provider_path_saves_downloaded_clips(self, settings, images, scenes):
        submitted: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                submitted.append(json.loads(request.content))
                return httpx.Response(200, json={"id": f"job-{len(submitted)}"})
            if request.url.host == "cdn.test":
                return httpx.Response(200, content=VIDEO_BYTES)
            return httpx.Response(200, json={"status": "SUCCEEDED", "output": ["https://cdn.test/v.mp4"]})

        client = RunwayClient(
            ProviderConfig(base_url="https://runway.test/v1", api_key="key"),
            http_client=mock_http_client(handler),
        )
        converter = build_converter(settings, client)

        outcome = await converter.convert(images, scenes)

        assert len(outcome.value) == 3
        assert outcome.report.mode == ArtifactMode.REAL
        first = outcome.value[0]
        assert Path(first.path).name.startswith("video_image_scene_storm_hits_coast_")
        assert Path(first.path).read_bytes() == VIDEO_BYTES
        assert first.image_id == "scene_storm_hits_coast"
        assert submitted[0]["promptText"] == scenes[0].description
        assert submitted[0]["promptImage"].startswith("data:image/png;base64,")
        assert submitted[2]["promptText"] == "A scene depicting Rocket Launch"

    @pytest.mark.asyncio
    async def test_one_failed_job_skips_only_that_image(self, settings, images, scenes):
        submissions = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal submissions
            if request.method == "POST":
                submissions += 1
                return httpx.Response(200, json={"id": f"job-{submissions}"})
            if request.url.host == "cdn.test":
                return httpx.Response(200, content=VIDEO_BYTES)
            if request.url.path.endswith("job-2"):
                return httpx.Response(200, json={"status": "FAILED", "failure": "nsfw content"})
            return httpx.Response(200, json={"status": "SUCCEEDED", "videoUrl": "https://cdn.test/v.mp4"})

        client = RunwayClient(
            ProviderConfig(base_url="https://runway.test/v1", api_key="key"),
            http_client=mock_http_client(handler),
        )

        outcome = await build_converter(settings, client).convert(images, scenes)

        assert [video.image_id for video in outcome.value] == [
            "scene_storm_hits_coast",
            "scene_rocket_launch",
        ]
        assert len(outcome.report.failures) == 1
        assert "nsfw content" in outcome.report.failures[0]


class TestExternalScriptVideoConverter:
    """Conversion by the standalone converter script."""

    @pytest.fixture
    def script_settings(self, settings, tmp_path):
        script = tmp_path / "converter" / "video-converter.js"
        script.parent.mkdir()
        script.write_text("// converter", encoding="utf-8")
        return settings.model_copy(
            update={
                "video_provider": "script",
                "runway_api_key": "runway-key",
                "video_converter_script": script,
            }
        )

    @pytest.mark.asyncio
    async def test_without_credential_uses_placeholders(self, settings, images, scenes):
        converter = build_converter(settings.model_copy(update={"video_provider": "script"}))
        assert isinstance(converter, ExternalScriptVideoConverter)

        outcome = await converter.convert(images, scenes)

        assert len(outcome.value) == 3
        assert all(is_placeholder(video.path) for video in outcome.value)

    @pytest.mark.asyncio
    async def test_runs_script_and_reads_its_index(self, script_settings, images, scenes, monkeypatch):
        calls: list[list[str]] = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            output_dir = Path(cmd[cmd.index("--output-dir") + 1])
            (output_dir / "clip.mp4").write_bytes(VIDEO_BYTES)
            (output_dir / "videos.json").write_text(
                json.dumps([{"path": str(output_dir / "clip.mp4"), "imageID": "scene_a", "length": 10}]),
                encoding="utf-8",
            )
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr("stitchup.services.video_converter.find_executable", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr("stitchup.services.video_converter.subprocess.run", fake_run)

        outcome = await build_converter(script_settings).convert(images, scenes)

        (cmd,) = calls
        assert cmd[:2] == ["/usr/bin/stitchup-test-missing-node", str(script_settings.video_converter_script)]
        assert cmd[cmd.index("--input-dir") + 1] != str(script_settings.image_output_dir)
        assert cmd[cmd.index("--video-length") + 1] == "10"
        assert cmd[cmd.index("--api-key") + 1] == "runway-key"
        assert outcome.value[0].image_id == "scene_a"
        assert outcome.value[0].length_seconds == 10
        assert outcome.report.mode == ArtifactMode.REAL

    @pytest.mark.asyncio
    async def test_script_failure_raises(self, script_settings, images, scenes, monkeypatch):
        monkeypatch.setattr("stitchup.services.video_converter.find_executable", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(
            "stitchup.services.video_converter.subprocess.run",
            lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1, stdout="", stderr="boom"),
        )

        with pytest.raises(ConverterScriptError):
            await build_converter(script_settings).convert(images, scenes)

    @pytest.mark.asyncio
    async def test_missing_node_raises(self, script_settings, images, scenes):
        with pytest.raises(ConverterScriptError, match="Node.js"):
            await build_converter(script_settings).convert(images, scenes)

    @pytest.mark.asyncio
    async def test_script_only_sees_the_given_images(self, script_settings, images, scenes, monkeypatch):
        image_dir = script_settings.image_output_dir
        (image_dir / "image_old_headline_1a2b3c4d.png").write_bytes(b"\x89PNG old")
        (image_dir / "placeholder_image_old_5e6f7a8b.png").write_text("placeholder", encoding="utf-8")
        seen: list[str] = []

        def fake_run(cmd, **kwargs):
            input_dir = Path(cmd[cmd.index("--input-dir") + 1])
            output_dir = Path(cmd[cmd.index("--output-dir") + 1])
            entries = []
            for image_path in sorted(input_dir.glob("*.png")):
                seen.append(image_path.name)
                clip = output_dir / f"video_{image_path.stem}.mp4"
                clip.write_bytes(VIDEO_BYTES)
                entries.append({"path": str(clip), "imageID": image_path.stem, "length": 10})
            (output_dir / "videos.json").write_text(json.dumps(entries), encoding="utf-8")
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr("stitchup.services.video_converter.find_executable", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr("stitchup.services.video_converter.subprocess.run", fake_run)

        outcome = await build_converter(script_settings).convert(images, scenes)

        assert seen == sorted(Path(image.path).name for image in images)
        assert len(outcome.value) == len(images)
        assert outcome.report.succeeded <= outcome.report.attempted

    @pytest.mark.asyncio
    async def test_stale_index_is_not_reused(self, script_settings, images, scenes, monkeypatch):
        video_dir = script_settings.video_output_dir
        video_dir.mkdir(parents=True, exist_ok=True)
        (video_dir / "videos.json").write_text(
            json.dumps([{"path": str(video_dir / "old.mp4"), "imageID": "scene_old", "length": 10}]),
            encoding="utf-8",
        )
        monkeypatch.setattr("stitchup.services.video_converter.find_executable", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(
            "stitchup.services.video_converter.subprocess.run",
            lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, stdout="", stderr=""),
        )

        with pytest.raises(ConverterScriptError, match="no index"):
            await build_converter(script_settings).convert(images, scenes)
