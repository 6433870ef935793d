"""Shared utility functions for service layer."""
import re
import secrets
import string
from dataclasses import dataclass
from urllib.parse import urlsplit

from services.exceptions import InvalidInputError

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def escape_ilike(value: str) -> str:
    r"""
    Escape special ILIKE characters for safe use in LIKE/ILIKE patterns.

    LIKE/ILIKE treats these characters specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is the escape character

    This function escapes them so they match literally. Use together with
    ``escape="\\"`` on the ``ilike()`` call.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def normalize_search(value: str | None) -> str | None:
    """Trim and lower-case a free-text search; empty input means no search."""
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


def slugify(value: str) -> str:
    """
    Derive a URL slug from free text.

    Lower-cases and trims, collapses every run of non-alphanumeric characters
    to a single hyphen and strips leading/trailing hyphens.

    Examples:
        "Notion HQ" -> "notion-hq"
        "  Dev & Infra!! " -> "dev-infra"
    """
    return _NON_ALNUM.sub("-", value.lower().strip()).strip("-")


def random_suffix(length: int = 4) -> str:
    """Short random lowercase alphanumeric token used to break slug collisions."""
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class NormalizedUrl:
    """Homepage identity of a URL."""

    canonical_url: str
    origin: str


def normalize_to_homepage(url: str) -> NormalizedUrl:
    """
    Reduce a URL (with or without scheme) to its homepage identity.

    The scheme becomes https, a leading ``www.`` is stripped from the host and
    path/query/fragment are discarded, so every page of a site collapses to
    the same canonical record.

    Raises:
        InvalidInputError: If no hostname can be extracted.
    """
    raw = url.strip()
    if not raw:
        raise InvalidInputError("URL is required")
    if "://" not in raw:
        raw = f"https://{raw}"
    try:
        hostname = urlsplit(raw).hostname
    except ValueError as e:
        raise InvalidInputError(f"Invalid URL: {url}") from e
    if not hostname:
        raise InvalidInputError(f"Invalid URL: {url}")
    origin = hostname.removeprefix("www.")
    return NormalizedUrl(canonical_url=f"https://{origin}/", origin=origin)


def matches_search(search: str | None, *fields: str | None) -> bool:
    """Case-insensitive substring match of a normalized search over joined fields."""
    if not search:
        return True
    haystack = " ".join(field or "" for field in fields).lower()
    return search in haystack
