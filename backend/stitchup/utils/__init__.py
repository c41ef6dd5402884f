"""
Shared utilities.

Modules:
    json_utils: JSON extraction from model responses
    field_extraction: Ordered first-match lookups in provider responses
    media_utils: Media file handling (discovery, MIME detection, naming)
"""

from stitchup.utils.field_extraction import first_match, lookup_path
from stitchup.utils.json_utils import extract_json_object, extract_json_text
from stitchup.utils.media_utils import (
    detect_image_mime_type,
    encode_image_data_uri,
    find_executable,
    is_image_file,
    list_image_files,
    sanitize_filename,
    scene_id_from_filename,
    short_uid,
    slugify,
)

__all__ = [
    # json_utils
    "extract_json_object",
    "extract_json_text",
    # field_extraction
    "first_match",
    "lookup_path",
    # media_utils
    "detect_image_mime_type",
    "encode_image_data_uri",
    "find_executable",
    "is_image_file",
    "list_image_files",
    "sanitize_filename",
    "scene_id_from_filename",
    "short_uid",
    "slugify",
]
