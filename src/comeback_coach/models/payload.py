"""Resume input passed to the analysis pipeline.

Text and uploaded files are separate types. The ``[FILE_DATA:<mime>:<base64>]``
string form exists only so a file upload can live in the session slot, which
holds plain strings.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SENTINEL_PREFIX = "[FILE_DATA:"
SENTINEL_SUFFIX = "]"


@dataclass(frozen=True)
class TextInput:
    text: str


@dataclass(frozen=True)
class FilePayload:
    mime_type: str
    data: bytes
    filename: str = ""

    @property
    def b64_data(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_sentinel(self) -> str:
        return f"{SENTINEL_PREFIX}{self.mime_type}:{self.b64_data}{SENTINEL_SUFFIX}"


AnalysisInput = TextInput | FilePayload


def parse_analysis_input(raw: str) -> AnalysisInput:
    """Decode a stored resume string, recognising the file sentinel.

    A malformed sentinel is treated as ordinary text.
    """
    stripped = raw.strip()
    if not (stripped.startswith(SENTINEL_PREFIX) and stripped.endswith(SENTINEL_SUFFIX)):
        return TextInput(raw)

    body = stripped[len(SENTINEL_PREFIX) : -len(SENTINEL_SUFFIX)]
    mime_type, sep, b64 = body.partition(":")
    if not sep or not mime_type or not b64:
        logger.warning("Malformed file sentinel, treating as text")
        return TextInput(raw)
    try:
        data = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("File sentinel payload is not valid base64, treating as text")
        return TextInput(raw)
    return FilePayload(mime_type=mime_type, data=data)


def to_session_string(item: AnalysisInput) -> str:
    """Encode an input for the session slot."""
    if isinstance(item, FilePayload):
        return item.to_sentinel()
    return item.text


def describe_input(item: AnalysisInput) -> str:
    """Short human-readable label for logs and progress messages."""
    if isinstance(item, FilePayload):
        name = item.filename or "upload"
        return f"{name} ({item.mime_type}, {len(item.data)} bytes)"
    return f"text ({len(item.text)} chars)"
