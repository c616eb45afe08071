"""Lenient JSON parsing for model output."""
import json
import re
from typing import Any, Optional

from ..core.exceptions import ParseError

CODE_FENCE_PATTERN = re.compile(r'```(?:json|JSON)?')


def _loads(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers, keeping what they wrap."""
    return CODE_FENCE_PATTERN.sub('', text).strip()


def parse_json_with_fallback(text: Optional[str]) -> Optional[Any]:
    """
    Parse JSON from model output in three tiers.

    1. the raw text
    2. the text with code-fence markers stripped
    3. the substring between the first '{' and the last '}'

    Returns None when all three fail.
    """
    if not text or not text.strip():
        return None

    parsed = _loads(text)
    if parsed is not None:
        return parsed

    cleaned = strip_code_fences(text)
    parsed = _loads(cleaned)
    if parsed is not None:
        return parsed

    first = cleaned.find('{')
    last = cleaned.rfind('}')
    if first != -1 and last > first:
        return _loads(cleaned[first:last + 1])

    return None


def parse_json_object(text: Optional[str], what: str) -> dict:
    """Like parse_json_with_fallback but requires a JSON object, raising ParseError otherwise."""
    parsed = parse_json_with_fallback(text)
    if not isinstance(parsed, dict):
        raise ParseError(what, text or "")
    return parsed
