"""
Tests for stitchup.services.artifact_store
"""

import json
from pathlib import Path

import pytest

from stitchup.models.schemas import Lyrics, Music, Scene, Video
from stitchup.services.artifact_store import ArtifactStore


class TestArtifactStore:
    @pytest.fixture
    def store(self, settings):
        return ArtifactStore(settings)

    def test_scene_round_trip_preserves_empty_strings(self, store):
        scenes = [
            Scene(id="scene_a", title="A", description="", mood="", source_title="a.png"),
            Scene(id="scene_b", title="B", description="Desc", mood="calm", source_title=""),
        ]

        store.save_scenes(scenes)

        assert store.load_scenes() == scenes
        raw = json.loads(store.scenes_path.read_text(encoding="utf-8"))
        assert raw[0] == {
            "id": "scene_a",
            "title": "A",
            "description": "",
            "mood": "",
            "source_title": "a.png",
        }

    def test_images_metadata_lives_in_images_dir(self, store, settings, images):
        path = store.save_images(images)

        assert path == settings.image_output_dir / "metadata.json"
        assert store.load_images() == images

    def test_video_records_are_read_leniently(self, store, settings, tmp_path):
        settings.video_output_dir.mkdir(parents=True)
        store.videos_path.write_text(
            json.dumps(
                [
                    {"path": "/v/a.mp4", "imageID": "scene_a", "length": 10},
                    {"path": "/v/b.mp4", "image_id": "scene_b", "length_seconds": 5.5},
                ]
            ),
            encoding="utf-8",
        )

        videos = store.load_videos()

        assert videos == [
            Video(path=Path("/v/a.mp4"), image_id="scene_a", length_seconds=10),
            Video(path=Path("/v/b.mp4"), image_id="scene_b", length_seconds=5.5),
        ]

    def test_lyrics_and_music(self, store, tmp_path):
        lyrics = Lyrics(title="News of the Day: May 1, 2026", content="[VERSE 1]\nla")
        music = Music(path=tmp_path / "song.mp3", lyrics_id="news_of_the_day", length_seconds=120)

        store.save_lyrics(lyrics)
        store.save_music(music)

        assert store.load_lyrics() == lyrics
        assert store.load_music() == music

    def test_missing_file(self, store):
        with pytest.raises(FileNotFoundError):
            store.load_videos()
