"""
Final assembly using ffmpeg.

Concatenates the clips and muxes the soundtrack into one MP4.
"""

import asyncio
import logging
import subprocess
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from stitchup.config import Settings
from stitchup.models.schemas import Music, Video
from stitchup.services.placeholders import PLACEHOLDER_PREFIX, is_placeholder
from stitchup.utils.media_utils import find_executable, short_uid

logger = logging.getLogger(__name__)


class AssemblyError(RuntimeError):
    """Raised when ffmpeg fails to produce the final video."""


@dataclass
class AssemblyResult:
    path: Path
    placeholder: bool


class Assembler:
    """
    Assembles videos and music into the final output.

    Without ffmpeg on PATH, or when any input is a placeholder, a
    manifest listing the inputs is written instead.

    Example:
        result = await Assembler(settings).assemble(videos, music)
        print(result.path)
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    async def assemble(self, videos: list[Video], music: Music) -> AssemblyResult:
        """
        Produce the final video.

        Args:
            videos: Clips in playback order
            music: Soundtrack

        Returns:
            AssemblyResult with the output path

        Raises:
            ValueError: If there are no videos
            AssemblyError: If ffmpeg fails
        """
        if not videos:
            raise ValueError("Cannot assemble without videos")

        output_dir = self.settings.final_output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        name = f"final_output_{datetime.now():%Y%m%d_%H%M%S}_{short_uid()}.mp4"

        ffmpeg = find_executable(self.settings.ffmpeg_path)
        placeholder_inputs = [
            Path(item.path).name for item in (*videos, music) if is_placeholder(item.path)
        ]

        if ffmpeg is None or placeholder_inputs:
            reason = "ffmpeg not found" if ffmpeg is None else f"placeholder inputs: {len(placeholder_inputs)}"
            path = self._write_manifest(output_dir / f"{PLACEHOLDER_PREFIX}{name}", videos, music, reason)
            logger.warning(f"Assembly skipped ({reason}), wrote placeholder: {path.name}")
            return AssemblyResult(path=path, placeholder=True)

        output_path = output_dir / name
        with tempfile.TemporaryDirectory(prefix="stitchup_") as tmp:
            tmp_dir = Path(tmp)
            concat_list = tmp_dir / "clips.txt"
            concat_list.write_text(
                "".join(self.concat_entry(Path(video.path)) for video in videos),
                encoding="utf-8",
            )
            concatenated = tmp_dir / "concatenated.mp4"

            logger.info(f"Concatenating {len(videos)} clips")
            await asyncio.to_thread(self._run_ffmpeg, self.concat_command(ffmpeg, concat_list, concatenated))

            logger.info(f"Muxing soundtrack: {Path(music.path).name}")
            await asyncio.to_thread(
                self._run_ffmpeg, self.mux_command(ffmpeg, concatenated, Path(music.path), output_path)
            )

        if not output_path.exists():
            raise AssemblyError("Assembly failed: output file not created")

        logger.info(f"Final video: {output_path}")
        return AssemblyResult(path=output_path, placeholder=False)

    @staticmethod
    def concat_entry(path: Path) -> str:
        """One concat demuxer line; quotes in the path are escaped as '\\''."""
        escaped = str(path.resolve()).replace("'", "'\\''")
        return f"file '{escaped}'\n"

    @staticmethod
    def concat_command(ffmpeg: str, concat_list: Path, output: Path) -> list[str]:
        return [
            ffmpeg,
            "-y",
            "-f", "concat",
            "-safe", "0",
            "-i", str(concat_list),
            "-c", "copy",
            str(output),
        ]

    @staticmethod
    def mux_command(ffmpeg: str, video: Path, audio: Path, output: Path) -> list[str]:
        return [
            ffmpeg,
            "-y",
            "-i", str(video),
            "-i", str(audio),
            "-map", "0:v:0",
            "-map", "1:a:0",
            "-c:v", "copy",
            "-c:a", "aac",
            "-shortest",
            str(output),
        ]

    def _run_ffmpeg(self, cmd: list[str]) -> None:
        """
        Run ffmpeg.

        Raises:
            AssemblyError: If ffmpeg returns non-zero exit code
        """
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=600,
        )

        if result.returncode != 0:
            logger.error(f"ffmpeg failed: {result.stderr[:500]}")
            raise AssemblyError(f"ffmpeg error (code {result.returncode})")

    def _write_manifest(self, path: Path, videos: list[Video], music: Music, reason: str) -> Path:
        lines = [
            f"Placeholder final video ({reason})",
            "",
            "Clips:",
            *(f"  {Path(video.path).name} ({video.length_seconds:g}s)" for video in videos),
            "",
            f"Soundtrack: {Path(music.path).name}",
        ]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
