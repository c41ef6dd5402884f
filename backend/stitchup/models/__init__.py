"""
Pydantic models for the stitch-up pipeline.
"""

from stitchup.models.schemas import (
    Article,
    ArtifactMode,
    Content,
    GenerationJob,
    Image,
    JobStatus,
    Lyrics,
    Music,
    Scene,
    StageOutcome,
    StageReport,
    Video,
)

__all__ = [
    "Article",
    "ArtifactMode",
    "Content",
    "GenerationJob",
    "Image",
    "JobStatus",
    "Lyrics",
    "Music",
    "Scene",
    "StageOutcome",
    "StageReport",
    "Video",
]
