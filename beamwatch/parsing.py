"""Parse-or-degrade handling for reasoning-service responses.

The reasoning service returns free text that should contain one JSON object,
often wrapped in prose or a code fence. ``parse_json_payload`` either yields a
validated model or a ``ParseFailure``; it never raises, so every call site
chooses its own typed fallback.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

# Greedy: spans from the first "{" to the last "}" in the response.
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True, slots=True)
class Parsed(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class ParseFailure:
    reason: str
    raw: str = ""


def parse_json_payload(text: str, model: type[T]) -> Parsed[T] | ParseFailure:
    """Extract the embedded JSON object from *text* and validate it as *model*."""
    match = _JSON_OBJECT.search(text or "")
    if match is None:
        return ParseFailure("no JSON object in response", raw=(text or "")[:200])
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        return ParseFailure(f"invalid JSON: {exc.msg}", raw=match.group(0)[:200])
    if not isinstance(data, dict):
        return ParseFailure("JSON payload is not an object", raw=match.group(0)[:200])
    try:
        return Parsed(model.model_validate(data))
    except ValidationError as exc:
        return ParseFailure(
            f"schema mismatch: {exc.error_count()} error(s)", raw=match.group(0)[:200]
        )
