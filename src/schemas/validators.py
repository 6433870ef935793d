"""
Shared validation functions for Pydantic schemas.

Length limits come from Settings so they can be tuned per deployment.
"""
import re

from core.config import get_settings

# Owner keys are opaque client-generated identifiers; only the length is constrained
MAX_OWNER_KEY_LENGTH = 200

# Same pattern the waitlist has always accepted: something@something.tld, no whitespace
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_title_length(title: str | None) -> str | None:
    """Validate that title doesn't exceed maximum length."""
    settings = get_settings()
    if title is not None and len(title) > settings.max_title_length:
        raise ValueError(
            f"Title exceeds maximum length of {settings.max_title_length:,} characters "
            f"(got {len(title):,} characters).",
        )
    return title


def validate_description_length(description: str | None) -> str | None:
    """Validate that description doesn't exceed maximum length."""
    settings = get_settings()
    if description is not None and len(description) > settings.max_description_length:
        max_len = settings.max_description_length
        raise ValueError(
            f"Description exceeds maximum length of {max_len:,} characters "
            f"(got {len(description):,} characters).",
        )
    return description


def normalize_categories(categories: list[str] | None) -> list[str]:
    """
    Trim categories, drop empties and duplicates, keep first-seen order.

    Order matters: the first category is the website's primary category.
    """
    if not categories:
        return []
    normalized: list[str] = []
    seen: set[str] = set()
    for category in categories:
        trimmed = category.strip()
        if trimmed and trimmed not in seen:
            seen.add(trimmed)
            normalized.append(trimmed)
    return normalized


def normalize_email(email: str) -> str:
    """
    Trim and lower-case an email, then validate its shape.

    Raises:
        ValueError: If the result does not look like an email address.
    """
    normalized = email.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError("Please enter a valid email address.")
    return normalized
