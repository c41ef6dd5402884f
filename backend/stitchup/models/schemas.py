"""
Pydantic models for the stitch-up pipeline.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ArtifactModel(BaseModel):
    """Base for pipeline artifacts: immutable once produced."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Article(ArtifactModel):
    """A single news item the run is about."""

    title: str
    summary: str = ""
    source: str = ""  # Headline image filename or URL


class Content(ArtifactModel):
    """Input bundle for the run: headline images plus descriptive text."""

    title: str
    date: str
    description: str = ""
    image_paths: list[Path] = Field(default_factory=list)
    articles: list[Article] = Field(default_factory=list)


class Scene(ArtifactModel):
    """Structured description of one headline image."""

    id: str = ""
    title: str = ""
    description: str = ""
    mood: str = ""
    source_title: str = ""  # Headline image filename the scene came from


class Image(ArtifactModel):
    """A synthesized still image for a scene."""

    path: Path
    scene_id: str = Field(
        "", validation_alias=AliasChoices("scene_id", "sceneID", "SceneID")
    )
    description: str = ""


class Video(ArtifactModel):
    """A short clip animated from one image."""

    path: Path
    image_id: str = Field(
        "", validation_alias=AliasChoices("image_id", "imageID", "ImageID")
    )
    length_seconds: float = Field(
        0, validation_alias=AliasChoices("length_seconds", "length", "Length")
    )


class Lyrics(ArtifactModel):
    """Song text for the soundtrack."""

    title: str
    content: str


class Music(ArtifactModel):
    """The soundtrack audio file."""

    path: Path
    lyrics_id: str = Field(
        "", validation_alias=AliasChoices("lyrics_id", "lyricsID", "LyricsID")
    )
    length_seconds: float = Field(
        0, validation_alias=AliasChoices("length_seconds", "length", "Length")
    )


class JobStatus(str, Enum):
    """Lifecycle of a provider-side generation job."""

    SUBMITTED = "submitted"
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.TIMED_OUT)

    @property
    def rank(self) -> int:
        """Position in the forward-only lifecycle; terminal states share the top."""
        return _STATUS_RANK[self]


_STATUS_RANK = {
    JobStatus.SUBMITTED: 0,
    JobStatus.QUEUED: 1,
    JobStatus.RUNNING: 2,
    JobStatus.COMPLETED: 3,
    JobStatus.FAILED: 3,
    JobStatus.TIMED_OUT: 3,
}


class GenerationJob(BaseModel):
    """
    Handle for an asynchronous provider job.

    Only the job poller mutates it, and only through advance().
    """

    job_id: str
    provider: str
    status_url: str
    status: JobStatus = JobStatus.SUBMITTED
    submitted_at: datetime = Field(default_factory=datetime.now)
    result_location: str | None = None
    error_message: str | None = None
    attempts: int = 0

    def advance(self, status: JobStatus) -> bool:
        """
        Move the job forward to ``status``.

        Transitions never go backwards and terminal states are absorbing.

        Returns:
            True if the status changed
        """
        if self.status.is_terminal or status.rank < self.status.rank:
            return False
        if status == self.status:
            return False
        self.status = status
        return True


class ArtifactMode(str, Enum):
    """Whether a stage produced real provider output or placeholders."""

    REAL = "real"
    PLACEHOLDER = "placeholder"
    MIXED = "mixed"


class StageReport(BaseModel):
    """Outcome counters for one stage run."""

    stage: str
    attempted: int = 0
    succeeded: int = 0
    placeholders: int = 0
    cancelled: bool = False
    failures: list[str] = Field(default_factory=list)

    @property
    def mode(self) -> ArtifactMode:
        if self.placeholders == 0:
            return ArtifactMode.REAL
        if self.placeholders >= self.succeeded:
            return ArtifactMode.PLACEHOLDER
        return ArtifactMode.MIXED

    def summary(self) -> str:
        text = (
            f"{self.stage}: {self.succeeded}/{self.attempted} succeeded "
            f"({self.mode.value.upper()} output)"
        )
        if self.cancelled:
            text += ", cancelled by stage deadline"
        if self.failures:
            text += f", {len(self.failures)} failed"
        return text


@dataclass
class StageOutcome:
    """Value produced by a stage together with its report."""

    value: Any
    report: StageReport
