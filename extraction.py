# extraction.py
"""Best-effort structured extraction from free-form model replies."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Sequence

_LABEL_STRIP_CHARS = " \t\r\n\"'`*"
_TRAILING_PUNCTUATION = ".,;:!?"


@dataclass(frozen=True)
class Extraction:
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any) -> Extraction:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> Extraction:
        return cls(ok=False, error=error)


def find_balanced_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` substring of ``text``, if any.

    Braces inside double-quoted strings are ignored.
    """

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unbalanced from this opening brace; try the next one.
        start = text.find("{", start + 1)
    return None


def extract_json_object(text: Optional[str]) -> Extraction:
    if not text:
        return Extraction.failure("empty reply")

    candidate = find_balanced_object(text)
    if candidate is None:
        return Extraction.failure("no JSON object found in reply")

    try:
        payload = json.loads(candidate)
    except ValueError as exc:
        return Extraction.failure(f"invalid JSON: {exc}")

    if not isinstance(payload, dict):
        return Extraction.failure("reply is not a JSON object")
    return Extraction.success(payload)


def clean_label(text: str) -> str:
    cleaned = text.strip(_LABEL_STRIP_CHARS)
    cleaned = cleaned.rstrip(_TRAILING_PUNCTUATION)
    return cleaned.strip(_LABEL_STRIP_CHARS)


def match_label(text: Optional[str], candidates: Sequence[str]) -> Extraction:
    """Match a model reply against ``candidates`` case-insensitively.

    Returns the candidate's own spelling on success.
    """

    if not text or not text.strip():
        return Extraction.failure("empty reply")

    cleaned = clean_label(text).lower()
    for candidate in candidates:
        if candidate.lower() == cleaned:
            return Extraction.success(candidate)

    # Models sometimes answer on the first line and explain below it.
    first_line = clean_label(text.strip().splitlines()[0]).lower()
    for candidate in candidates:
        if candidate.lower() == first_line:
            return Extraction.success(candidate)

    return Extraction.failure(f"reply {text.strip()!r} does not match any option")
