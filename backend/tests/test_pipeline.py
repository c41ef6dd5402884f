"""
Tests for stitchup.services.pipeline and stitchup.cli

End-to-end runs without credentials: every provider-backed stage falls
back to placeholders, so the whole chain runs offline.
"""

import json
import logging

import pytest

from stitchup.cli import main
from stitchup.models.schemas import ArtifactMode
from stitchup.services.pipeline import PipelineError, PipelineOrchestrator, ProviderFactory
from stitchup.services.placeholders import is_placeholder


@pytest.fixture
def restore_logging():
    """setup_logging() replaces root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestProviderFactory:
    @pytest.mark.asyncio
    async def test_no_credentials_no_clients(self, settings):
        async with ProviderFactory(settings).open() as clients:
            assert clients.describe() == {
                "vision": "placeholder",
                "image": "placeholder",
                "video": "placeholder",
                "music": "placeholder",
            }

    @pytest.mark.asyncio
    async def test_clients_follow_credentials(self, settings):
        configured = settings.model_copy(
            update={"replicate_api_key": "r8", "suno_api_key": "suno", "video_provider": "replicate"}
        )

        async with ProviderFactory(configured).open() as clients:
            described = clients.describe()

        assert described["video"] == "ReplicateClient"
        assert described["music"] == "SunoClient"
        assert described["vision"] == "placeholder"

    def test_script_strategy_needs_no_job_client(self, settings):
        configured = settings.model_copy(update={"runway_api_key": "rw", "video_provider": "script"})
        assert ProviderFactory(configured).video_client_type() is None


class TestPipelineOrchestrator:
    @pytest.mark.asyncio
    async def test_full_offline_run(self, settings, headline_images):
        result = await PipelineOrchestrator(settings).run()

        assert [report.stage for report in result.reports] == [
            "content",
            "scenes",
            "images",
            "videos",
            "lyrics",
            "music",
            "assembly",
        ]
        assert result.placeholder is True
        assert result.output_path.exists()
        assert is_placeholder(result.output_path)
        assert all(report.succeeded >= 1 for report in result.reports)
        assert result.reports[3].mode == ArtifactMode.PLACEHOLDER

        scenes = json.loads((settings.output_dir / "scenes.json").read_text(encoding="utf-8"))
        assert [scene["id"] for scene in scenes] == [
            "scene_storm_hits_coast",
            "scene_markets_rally",
            "scene_rocket_launch",
        ]
        videos = json.loads((settings.video_output_dir / "videos.json").read_text(encoding="utf-8"))
        assert [video["image_id"] for video in videos] == [scene["id"] for scene in scenes]

    @pytest.mark.asyncio
    async def test_max_scenes_caps_the_batch(self, settings, headline_images):
        result = await PipelineOrchestrator(settings.model_copy(update={"max_scenes": 2})).run()

        assert result.reports[1].attempted == 2
        assert result.reports[3].succeeded == 2

    @pytest.mark.asyncio
    async def test_no_headline_images_aborts(self, settings):
        with pytest.raises(PipelineError) as exc_info:
            await PipelineOrchestrator(settings).run()

        assert exc_info.value.stage == "content"
        assert not settings.final_output_dir.exists()

    @pytest.mark.asyncio
    async def test_single_steps_chain_through_files(self, settings, headline_images):
        orchestrator = PipelineOrchestrator(settings)

        scenes = await orchestrator.generate_scenes()
        images = await orchestrator.create_images()
        videos = await orchestrator.convert_videos()

        assert len(scenes) == len(images) == len(videos) == 3
        assert [video.image_id for video in videos] == [scene.id for scene in scenes]

    @pytest.mark.asyncio
    async def test_step_with_missing_input_file(self, settings):
        with pytest.raises(PipelineError, match="Missing input"):
            await PipelineOrchestrator(settings).create_images()


class TestCli:
    def test_run_prints_final_path(self, settings, headline_images, capsys, restore_logging):
        exit_code = main(["run"], settings=settings)

        output = capsys.readouterr().out.strip()
        assert exit_code == 0
        assert output.startswith(str(settings.final_output_dir))

    def test_flags_override_settings(self, settings, headline_images, tmp_path, capsys, restore_logging):
        other_output = tmp_path / "elsewhere"

        exit_code = main(["scenes", "--max-scenes", "1", "--output-dir", str(other_output)], settings=settings)

        assert exit_code == 0
        scenes = json.loads((other_output / "scenes.json").read_text(encoding="utf-8"))
        assert len(scenes) == 1

    def test_pipeline_failure_exit_code(self, settings, capsys, restore_logging):
        assert main(["run"], settings=settings) == 1
        assert capsys.readouterr().out == ""

    def test_assemble_needs_music(self, settings, headline_images, capsys, restore_logging):
        assert main(["scenes"], settings=settings) == 0
        assert main(["images"], settings=settings) == 0
        assert main(["videos"], settings=settings) == 0
        assert main(["assemble"], settings=settings) == 1
