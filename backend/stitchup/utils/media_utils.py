"""
Media utilities for image/video/audio file handling.

Provides common functions for media file operations:
- Headline image discovery by extension
- Image MIME detection from magic bytes and data-URI encoding
- Filename sanitizing and identifier derivation
"""

import base64
import logging
import re
import shutil
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

# Supported image extensions
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})

PNG_SIGNATURE = b"\x89PNG"
UNSAFE_FILENAME_CHARS = re.compile(r'[\s/\\:*?"<>|\']')


def is_image_file(file_path: Path) -> bool:
    """Check if file is a supported image by extension.

    Args:
        file_path: Path to file

    Returns:
        True if file has an image extension
    """
    return file_path.suffix.lower() in IMAGE_EXTENSIONS


def list_image_files(directory: Path) -> list[Path]:
    """List supported images in a directory, sorted by name.

    Args:
        directory: Directory to scan (not recursive)

    Returns:
        Sorted list of image paths; empty if the directory is missing
    """
    if not directory.is_dir():
        logger.warning(f"Image directory does not exist: {directory}")
        return []
    return sorted(p for p in directory.iterdir() if p.is_file() and is_image_file(p))


def detect_image_mime_type(data: bytes) -> str:
    """Detect image MIME type from magic bytes.

    Only PNG is recognised explicitly; everything else is sent as JPEG.

    Args:
        data: Raw image bytes

    Returns:
        "image/png" or "image/jpeg"
    """
    if data[:3] == PNG_SIGNATURE[:3]:
        return "image/png"
    return "image/jpeg"


def encode_image_data_uri(data: bytes) -> str:
    """Encode image bytes as a base64 data URI with detected MIME type."""
    mime_type = detect_image_mime_type(data)
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def sanitize_filename(name: str) -> str:
    """Replace whitespace and characters unsafe in filenames with '_' and lower-case.

    Example:
        >>> sanitize_filename('Storm: "Category 5"')
        'storm___category_5_'
    """
    return UNSAFE_FILENAME_CHARS.sub("_", name).lower()


def slugify(text: str, default: str = "untitled") -> str:
    """Collapse text to a lower-case [a-z0-9_] slug."""
    slug = re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")
    return slug or default


def scene_id_from_filename(filename: str) -> str:
    """Derive a scene id from a headline image filename.

    Example:
        >>> scene_id_from_filename("Market Crash-2024.png")
        'scene_market_crash_2024'
    """
    stem = Path(filename).stem
    return "scene_" + re.sub(r"[ \-]", "_", stem).lower()


def short_uid() -> str:
    """Random 8-hex suffix used to keep output filenames unique."""
    return uuid.uuid4().hex[:8]


def find_executable(name: str) -> str | None:
    """Resolve an executable on PATH (or an explicit path).

    Args:
        name: Executable name or path (e.g. "ffmpeg", "node")

    Returns:
        Absolute path, or None if not found
    """
    path = shutil.which(name)
    if path is None:
        logger.debug(f"Executable not found on PATH: {name}")
    return path
