"""Parsing for the free-form ``tags`` field.

Clients send either a JSON array (``["ink", "portrait"]``) or a comma-separated
string (``ink, portrait``). Both are reduced to one ordered list of trimmed,
non-empty strings; storage keeps that list JSON-encoded.
"""

import json
from collections.abc import Iterable


def _clean(values: Iterable[object]) -> list[str]:
    cleaned = (str(v).strip() for v in values if v is not None)
    return [v for v in cleaned if v]


def parse_tags(raw: str | list | None) -> list[str] | None:
    """Return the normalized tag list, or ``None`` when no tags were given."""
    if raw is None:
        return None
    if isinstance(raw, list):
        return _clean(raw)

    text = raw.strip()
    if not text:
        return None

    try:
        decoded = json.loads(text)
    except ValueError:
        decoded = None
    if isinstance(decoded, list):
        return _clean(decoded)

    return _clean(text.split(","))


def encode_tags(tags: list[str] | None) -> str | None:
    if tags is None:
        return None
    return json.dumps(tags)


def decode_tags(stored: str | None) -> list[str] | None:
    """Read a stored tag column back into a list.

    Rows written before tags were normalized may hold a bare CSV string, so
    this goes through ``parse_tags`` rather than ``json.loads``.
    """
    if stored is None:
        return None
    return parse_tags(stored)
