"""Slug helpers for gallery and artist URLs."""

import re

DEFAULT_GALLERY_SLUG = "gallery"
DEFAULT_ARTIST_SLUG = "artist"

RESERVED_SLUGS = frozenset(
    {
        "admin",
        "api",
        "studio",
        "auth",
        "login",
        "logout",
        "signup",
        "register",
        "dashboard",
        "system",
        "uploads",
        "static",
        "public",
        "next",
        "favicon",
        "assets",
        "g",
        "gallery",
        "galleries",
        "pricing",
        "prices",
        "commissions",
    }
)

_DISALLOWED_GALLERY_CHARS = re.compile(r"[^a-z0-9\s-]")
_DISALLOWED_ARTIST_CHARS = re.compile(r"[^a-z0-9-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")
_WORD_START = re.compile(r"\b\w")

_ARTIST_SLUG = re.compile(r"^[a-z0-9-]+$")
ARTIST_SLUG_MIN_LENGTH = 3
ARTIST_SLUG_MAX_LENGTH = 64
# Room left for a "-NN" suffix on generated artist slugs
_GENERATED_BASE_MAX_LENGTH = ARTIST_SLUG_MAX_LENGTH - 4


def slugify(text: str | None) -> str:
    """Turn a free-text gallery name into a URL slug.

    Lowercases and trims, drops everything outside ``[a-z0-9]``, whitespace and
    hyphens, turns whitespace runs into single hyphens and strips hyphens from
    both ends. Falls back to ``gallery`` when nothing is left.
    """
    value = _DISALLOWED_GALLERY_CHARS.sub("", str(text or "").lower().strip())
    value = _WHITESPACE.sub("-", value)
    value = _HYPHENS.sub("-", value).strip("-")
    return value or DEFAULT_GALLERY_SLUG


def slug_candidate(base: str, attempt: int) -> str:
    """``base`` for the first attempt, then ``base-1``, ``base-2``, ..."""
    return base if attempt == 0 else f"{base}-{attempt}"


def humanize_slug(slug: str) -> str:
    """``my-new-gallery`` -> ``My New Gallery``."""
    return _WORD_START.sub(lambda m: m.group(0).upper(), slug.replace("-", " "))


def sanitize_slug(text: str | None) -> str:
    value = _DISALLOWED_ARTIST_CHARS.sub("", str(text or "").lower().strip())
    return _HYPHENS.sub("-", value).strip("-")


def is_reserved_slug(slug: str | None) -> bool:
    return str(slug or "").lower() in RESERVED_SLUGS


def base_from_email(email: str | None) -> str:
    """Default artist slug for a new account, taken from the email local part."""
    local = str(email or "").lower().split("@")[0]
    base = sanitize_slug(local)[:_GENERATED_BASE_MAX_LENGTH].strip("-")
    if len(base) < ARTIST_SLUG_MIN_LENGTH or is_reserved_slug(base):
        return DEFAULT_ARTIST_SLUG
    return base


def artist_slug_problem(slug: str | None) -> str | None:
    """Return why ``slug`` cannot be used as an artist URL, or None if it can.

    Availability (uniqueness) is checked by the caller against the database.
    """
    if not slug:
        return "Slug is required"
    if not _ARTIST_SLUG.match(slug) or len(slug) < ARTIST_SLUG_MIN_LENGTH:
        return "Slug must be at least 3 characters and contain only lowercase letters, numbers, and hyphens"
    if len(slug) > ARTIST_SLUG_MAX_LENGTH:
        return "Slug must be at most 64 characters"
    if is_reserved_slug(slug):
        return "Artist URL is reserved"
    return None
