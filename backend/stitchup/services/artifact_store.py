"""
Artifact store.

Persists the intermediate records of each stage as JSON next to the media
files, so later stages (or a later CLI invocation) can pick them up:

- <output_dir>/content.json
- <output_dir>/scenes.json
- <images_dir>/metadata.json
- <videos_dir>/videos.json
- <output_dir>/lyrics.json
- <music_dir>/music.json
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from stitchup.config import Settings
from stitchup.models.schemas import Content, Image, Lyrics, Music, Scene, Video

logger = logging.getLogger(__name__)

_scene_list = TypeAdapter(list[Scene])
_image_list = TypeAdapter(list[Image])
_video_list = TypeAdapter(list[Video])


class ArtifactStore:
    """
    JSON persistence for pipeline artifacts.

    Example:
        store = ArtifactStore(settings)
        store.save_scenes(scenes)
        scenes = store.load_scenes()
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def content_path(self) -> Path:
        return self.settings.output_dir / "content.json"

    @property
    def scenes_path(self) -> Path:
        return self.settings.output_dir / "scenes.json"

    @property
    def images_path(self) -> Path:
        return self.settings.image_output_dir / "metadata.json"

    @property
    def videos_path(self) -> Path:
        return self.settings.video_output_dir / "videos.json"

    @property
    def lyrics_path(self) -> Path:
        return self.settings.output_dir / "lyrics.json"

    @property
    def music_path(self) -> Path:
        return self.settings.music_output_dir / "music.json"

    def save_content(self, content: Content) -> Path:
        return self._write(self.content_path, content.model_dump(mode="json"))

    def load_content(self, path: Path | None = None) -> Content:
        return Content.model_validate(self._read(path or self.content_path))

    def save_scenes(self, scenes: list[Scene]) -> Path:
        return self._write(self.scenes_path, _scene_list.dump_python(scenes, mode="json"))

    def load_scenes(self, path: Path | None = None) -> list[Scene]:
        return _scene_list.validate_python(self._read(path or self.scenes_path))

    def save_images(self, images: list[Image]) -> Path:
        return self._write(self.images_path, _image_list.dump_python(images, mode="json"))

    def load_images(self, path: Path | None = None) -> list[Image]:
        return _image_list.validate_python(self._read(path or self.images_path))

    def save_videos(self, videos: list[Video]) -> Path:
        return self._write(self.videos_path, _video_list.dump_python(videos, mode="json"))

    def load_videos(self, path: Path | None = None) -> list[Video]:
        """
        Load video records.

        Accepts both this package's field names and the external converter
        script's (``imageID``, ``length``).
        """
        return _video_list.validate_python(self._read(path or self.videos_path))

    def save_lyrics(self, lyrics: Lyrics) -> Path:
        return self._write(self.lyrics_path, lyrics.model_dump(mode="json"))

    def load_lyrics(self, path: Path | None = None) -> Lyrics:
        return Lyrics.model_validate(self._read(path or self.lyrics_path))

    def save_music(self, music: Music) -> Path:
        return self._write(self.music_path, music.model_dump(mode="json"))

    def load_music(self, path: Path | None = None) -> Music:
        return Music.model_validate(self._read(path or self.music_path))

    def _write(self, path: Path, data: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.debug(f"Saved: {path}")
        return path

    def _read(self, path: Path) -> Any:
        if not path.exists():
            raise FileNotFoundError(f"Artifact file not found: {path}")
        return json.loads(path.read_text(encoding="utf-8"))
