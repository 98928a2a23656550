"""Utilities to pull JSON objects out of LLM output."""

from __future__ import annotations

import json


def extract_json(text: str) -> dict | list:
    """Extract JSON from an LLM response, handling ```json blocks.

    Tries in order:
    1. Direct json.loads on the full text
    2. Strip fenced code block markers and parse
    3. The last complete top-level object in the text
    """
    text = text.strip()

    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    stripped = _strip_code_fences(text)
    if stripped != text:
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass

    return extract_last_json(text)


def extract_last_json(text: str) -> dict:
    """Return the last outermost ``{...}`` object in ``text``.

    Narration around the object is ignored, including stray braces in it.
    Only the last candidate is considered: if it does not parse, earlier
    objects in the narration are not used. Raises ValueError in that case
    and when there is no candidate at all.
    """
    spans = find_json_spans(text)
    if not spans:
        raise ValueError(f"Could not extract JSON from text: {text[:200]}...")
    start, end = spans[-1]
    try:
        value = json.loads(text[start:end])
    except json.JSONDecodeError as e:
        raise ValueError(f"Last JSON object is malformed: {e}") from e
    if not isinstance(value, dict):
        raise ValueError("Last JSON value is not an object")
    return value


def find_json_spans(text: str) -> list[tuple[int, int]]:
    """Find (start, end) spans of balanced top-level ``{...}`` regions.

    Braces inside double-quoted strings do not count toward nesting, so
    ``{"a": "}"}`` is one span. An unmatched ``}`` is skipped, and an
    unmatched ``{`` is skipped by rescanning the text that follows it.
    """
    spans: list[tuple[int, int]] = []
    pos = 0
    while pos < len(text):
        stray = _scan_spans(text, pos, spans)
        if stray is None:
            break
        pos = stray + 1
    return spans


def _scan_spans(text: str, pos: int, spans: list[tuple[int, int]]) -> int | None:
    """Append spans found from ``pos`` on; return the index of an unclosed ``{``."""
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for i in range(pos, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"' and depth > 0:
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                spans.append((start, i + 1))

    return start if depth > 0 else None


def _strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers from text."""
    lines = text.split("\n")

    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]

    while lines and lines[-1].strip() in ("```", ""):
        lines = lines[:-1]

    return "\n".join(lines).strip()
