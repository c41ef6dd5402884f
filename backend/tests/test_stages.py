"""
Tests for stitchup.services.stages (registry ordering and stage wiring)
"""

import pytest

from stitchup.models.schemas import ArtifactMode, StageOutcome, StageReport
from stitchup.services.artifact_store import ArtifactStore
from stitchup.services.stages import (
    BaseStage,
    ContentStage,
    NoArtifactsProducedError,
    StageContext,
    StageError,
    StageRegistry,
    create_default_stages,
)


class DummyStage(BaseStage):
    def __init__(self, name: str, depends_on: list[str]):
        self.name = name
        self.depends_on = depends_on

    async def execute(self, context: StageContext) -> StageOutcome:
        return StageOutcome(value=self.name, report=StageReport(stage=self.name))


def names(stages: list[BaseStage]) -> list[str]:
    return [stage.name for stage in stages]


class TestStageRegistry:
    def test_default_execution_order(self, settings):
        registry = create_default_stages(settings)

        assert names(registry.get_all()) == [
            "content",
            "scenes",
            "images",
            "videos",
            "lyrics",
            "music",
            "assembly",
        ]

    def test_build_pipeline_pulls_in_dependencies(self, settings):
        registry = create_default_stages(settings)

        assert names(registry.build_pipeline(["videos"])) == ["content", "scenes", "images", "videos"]
        assert names(registry.build_pipeline(["music"])) == ["content", "lyrics", "music"]

    def test_build_pipeline_stops_at_satisfied_stages(self, settings):
        registry = create_default_stages(settings)

        assert names(registry.build_pipeline(["images"], satisfied={"scenes"})) == ["images"]
        assert names(registry.build_pipeline(["videos"], satisfied={"images", "scenes"})) == ["videos"]
        assert names(registry.build_pipeline(["assembly"], satisfied={"videos"})) == [
            "content",
            "lyrics",
            "music",
            "assembly",
        ]

    def test_build_pipeline_unknown_target(self, settings):
        with pytest.raises(KeyError):
            create_default_stages(settings).build_pipeline(["subtitles"])

    def test_duplicate_registration(self):
        registry = StageRegistry()
        registry.register(DummyStage("a", []))

        with pytest.raises(ValueError):
            registry.register(DummyStage("a", []))

    def test_circular_dependency(self):
        registry = StageRegistry()
        registry.register(DummyStage("a", ["b"]))
        registry.register(DummyStage("b", ["a"]))

        with pytest.raises(ValueError, match="Circular"):
            registry.get_all()

    def test_unknown_stage(self):
        with pytest.raises(KeyError):
            StageRegistry().get("missing")


class TestStageContext:
    def test_with_result_does_not_mutate(self):
        context = StageContext()
        updated = context.with_result("content", 1)

        assert not context.has_result("content")
        assert updated.get_result("content") == 1

    def test_missing_dependency(self, settings):
        stage = create_default_stages(settings).get("images")

        with pytest.raises(StageError, match="Missing dependencies"):
            stage.validate_context(StageContext())


class TestContentStage:
    @pytest.mark.asyncio
    async def test_collects_sorted_images(self, settings, headline_images):
        (settings.input_dir / "notes.txt").write_text("not an image", encoding="utf-8")
        stage = ContentStage(settings, ArtifactStore(settings))

        outcome = await stage.execute(StageContext())

        content = outcome.value
        assert [path.name for path in content.image_paths] == [
            "Storm Hits-Coast.png",
            "markets_rally.png",
            "rocket-launch.jpg",
        ]
        assert content.articles[0].title == "Storm Hits Coast"
        assert content.title.startswith("News Headlines: ")
        assert outcome.report.mode == ArtifactMode.REAL

    @pytest.mark.asyncio
    async def test_no_images(self, settings):
        stage = ContentStage(settings, ArtifactStore(settings))

        with pytest.raises(NoArtifactsProducedError):
            await stage.execute(StageContext())
