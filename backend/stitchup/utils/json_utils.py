"""
JSON extraction from model responses.

Vision/text models often wrap JSON in markdown fences or prose.

Example:
    from stitchup.utils.json_utils import extract_json_object

    data = extract_json_object('Sure! {"title": "Flood"} Hope that helps.')
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def extract_json_text(text: str) -> str:
    """
    Cut the JSON object out of a model response.

    Takes the span from the first ``{`` to its matching ``}``, ignoring
    braces inside string literals.

    Args:
        text: Raw model response

    Returns:
        JSON object text (empty string if there is no ``{``)
    """
    if not text:
        return ""

    cleaned = text.strip()
    fenced = CODE_FENCE.search(cleaned)
    if fenced and "{" in fenced.group(1):
        cleaned = fenced.group(1).strip()

    start = cleaned.find("{")
    if start == -1:
        return ""

    depth = 0
    in_string = False
    escape_next = False
    for i, char in enumerate(cleaned[start:], start):
        if escape_next:
            escape_next = False
        elif char == "\\":
            escape_next = True
        elif char == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return cleaned[start : i + 1]

    # Unbalanced: fall back to the last closing brace
    end = cleaned.rfind("}")
    return cleaned[start : end + 1] if end > start else ""


def extract_json_object(text: str) -> dict[str, Any] | None:
    """
    Parse the first JSON object embedded in a model response.

    Args:
        text: Raw model response

    Returns:
        Parsed dict, or None if no valid object was found
    """
    json_text = extract_json_text(text)
    if not json_text:
        return None

    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as e:
        preview = json_text[:200] + "..." if len(json_text) > 200 else json_text
        logger.debug(f"Failed to parse JSON: {e}. Input: {preview}")
        return None

    return data if isinstance(data, dict) else None
