"""Parsing of structured (JSON) replies from the LLM."""
import json
import re
from typing import Any

from core.errors import LLMResponseError

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?|\n?```", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model sometimes wraps JSON in."""
    return _FENCE_RE.sub("", text or "").strip()


def parse_json_response(text: str, expect: type = dict) -> Any:
    """
    Parse an LLM reply as JSON.

    Args:
        text: Raw reply text
        expect: Required top-level type

    Raises:
        LLMResponseError: if the reply is not valid JSON of the expected type
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        preview = cleaned[:80].replace("\n", " ")
        raise LLMResponseError(f"LLM reply is not valid JSON ({e.msg}): {preview!r}") from e

    if not isinstance(data, expect):
        raise LLMResponseError(f"Expected a JSON {expect.__name__}, got {type(data).__name__}")
    return data
