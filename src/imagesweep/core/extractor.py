"""Reference extraction from HTML/plain-text and JSON column values.

Extraction is a total function: malformed payloads produce an empty set, never an exception.
Every candidate passes through :func:`normalize` so it compares equal to the root-relative
paths emitted by the inventory scanner.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote

logger = logging.getLogger(__name__)

# JSON keys that carry an image reference, checked in this order.
REFERENCE_KEYS: tuple[str, ...] = (
    "image_intro",
    "image_fulltext",
    "image",
    "menu_image",
    "backgroundimage",
    "imagefile",
)

# Heuristic match for paths embedded in HTML or free text. Boundaries are part of the
# normalization contract; swapping in an HTML parser changes what a match contains.
REFERENCE_PATTERN = re.compile(r"images/[a-zA-Z0-9_\-\s/.%]+", re.IGNORECASE | re.ASCII)


def normalize(candidate: str) -> str:
    """Normalize a raw reference into an asset path.

    Drops everything from the first ``#`` (Joomla appends ``#joomlaImage://...``), decodes
    percent escapes and removes one leading slash.
    """

    head = candidate.split("#", 1)[0]
    decoded = unquote(head, errors="replace")
    if decoded.startswith("/"):
        decoded = decoded[1:]
    return decoded


def extract(raw: Any, structured: bool = False) -> set[str]:
    """Return the normalized asset paths referenced by a single field value."""

    if not isinstance(raw, str) or not raw.strip():
        return set()
    if structured:
        return _extract_structured(raw)
    return {normalize(match.group(0)) for match in REFERENCE_PATTERN.finditer(raw)}


def _extract_structured(raw: str) -> set[str]:
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        logger.debug("Ignoring unparsable structured value: %s", exc)
        return set()
    if not isinstance(payload, Mapping):
        return set()

    found: set[str] = set()
    for key in REFERENCE_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value:
            found.add(normalize(value))
    return found


__all__ = ["REFERENCE_KEYS", "REFERENCE_PATTERN", "extract", "normalize"]
