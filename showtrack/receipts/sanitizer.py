"""Clean up model-service output so the JSON payload can be parsed."""

from __future__ import annotations

import json
import re
from decimal import Decimal
from typing import Any

from .errors import ResponseParseFailed

_FENCE = re.compile(r"```[A-Za-z]*[ \t]*\n?")

# Narrative lead-in such as "Here is the JSON:". Never crosses a bracket.
_NARRATIVE_PREFIX = re.compile(
    r"^(?:here is|here's|here are|the following|this is)[^\n:{\[]*[:\n]\s*",
    re.IGNORECASE,
)

_CLOSERS = {"{": "}", "[": "]"}


def sanitize(raw: str) -> str:
    """Return the first balanced JSON object or array in *raw*.

    Code fences, backticks and a narrative prefix are stripped first. When
    no balanced span is found, the trimmed text is returned unchanged so
    the caller's JSON parse reports the failure. Never raises.
    """
    if not isinstance(raw, str):
        return ""

    cleaned = _FENCE.sub("", raw).replace("`", "").strip()
    cleaned = _NARRATIVE_PREFIX.sub("", cleaned, count=1)

    starts = [i for i in (cleaned.find("{"), cleaned.find("[")) if i != -1]
    if not starts:
        return cleaned
    start = min(starts)

    end = _balanced_end(cleaned, start)
    if end is None:
        return cleaned
    return cleaned[start : end + 1]


def _balanced_end(text: str, start: int) -> int | None:
    """Index of the bracket closing ``text[start]``, or None."""
    opener = text[start]
    closer = _CLOSERS[opener]
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
    return None


def parse_json_payload(raw: str, expected: type) -> Any:
    """Sanitize and decode a provider response.

    Floats are decoded as Decimal so money keeps its literal value.

    Raises:
        ResponseParseFailed: If the payload is not valid JSON of the
            *expected* top-level type (dict or list).
    """
    cleaned = sanitize(raw)
    try:
        payload = json.loads(cleaned, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise ResponseParseFailed(f"invalid JSON from provider: {e.msg}") from e

    if not isinstance(payload, expected):
        raise ResponseParseFailed(
            f"expected JSON {expected.__name__}, got {type(payload).__name__}"
        )
    return payload
