"""Tolerant parsing of structured data out of model replies.

Models often wrap JSON in code fences or surround it with prose. These
helpers accept clean JSON, fenced JSON, or the outermost bracketed span
embedded in free text.
"""

import json
import logging
from typing import Any

from research_council.errors import ParseError

logger = logging.getLogger(__name__)


def clean_json_response(response: str) -> str:
    """Strip surrounding whitespace and Markdown code-fence markers."""
    response = response.strip()
    if response.startswith("```json"):
        response = response[7:]
    elif response.startswith("```"):
        response = response[3:]
    if response.endswith("```"):
        response = response[:-3]
    return response.strip()


def _embedded_spans(text: str, brackets: str) -> list[str]:
    spans = []
    for open_char, close_char in zip(brackets[::2], brackets[1::2]):
        start = text.find(open_char)
        end = text.rfind(close_char) + 1
        if start != -1 and end > start:
            spans.append((start, text[start:end]))
    return [span for _, span in sorted(spans)]


def parse_json(text: str, brackets: str = "[]{}") -> Any:
    """Parse JSON from a model reply.

    Args:
        text: Raw reply text.
        brackets: Bracket pairs to search for when the whole text is not JSON.

    Returns:
        The decoded value.

    Raises:
        ParseError: If no JSON value can be recovered.
    """
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Empty model output")

    cleaned = clean_json_response(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for span in _embedded_spans(cleaned, brackets):
        try:
            return json.loads(span)
        except json.JSONDecodeError:
            continue
    raise ParseError(f"No JSON found in model output: {text[:80]!r}")


def parse_list(text: str) -> list[Any]:
    """Parse a JSON list, returning [] when the reply holds none."""
    try:
        value = parse_json(text, brackets="[]")
    except ParseError as exc:
        logger.debug("Could not parse list: %s", exc)
        return []
    return value if isinstance(value, list) else []


def parse_object(text: str) -> dict[str, Any] | None:
    """Parse a JSON object, returning None when the reply holds none."""
    try:
        value = parse_json(text, brackets="{}")
    except ParseError as exc:
        logger.debug("Could not parse object: %s", exc)
        return None
    return value if isinstance(value, dict) else None
