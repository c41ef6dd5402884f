"""
Ordered field-extraction rules for loosely specified provider responses.

Providers disagree on where they put a job id, a status or a result URL,
and sometimes change it between API versions. Each lookup is expressed as
an ordered list of dotted paths; the first path that yields a non-empty
string wins.

Example:
    >>> first_match({"output": {"video": "https://x/v.mp4"}}, ["videoUrl", "output.video"])
    'https://x/v.mp4'
    >>> first_match({"output": ["https://x/v.mp4"]}, ["output.0"])
    'https://x/v.mp4'
"""

from collections.abc import Iterable
from typing import Any


def lookup_path(data: Any, path: str) -> Any:
    """
    Walk a dotted path through nested dicts and lists.

    Numeric segments index into lists; anything that does not resolve
    yields None instead of raising.

    Args:
        data: Parsed JSON (dict, list or scalar)
        path: Dotted path, e.g. "output.video" or "0.audio_url"

    Returns:
        Value at the path, or None
    """
    current = data
    for segment in path.split("."):
        if isinstance(current, dict):
            current = current.get(segment)
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def first_match(data: Any, paths: Iterable[str]) -> str | None:
    """
    Return the first non-empty string found along ``paths``.

    Args:
        data: Parsed JSON response
        paths: Ordered candidate paths

    Returns:
        Matched string, or None if no rule matches
    """
    for path in paths:
        value = lookup_path(data, path)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str) and value.strip():
            return value
    return None
