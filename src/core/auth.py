"""
Owner identification.

Callers identify themselves with an opaque owner key sent in the
``X-Owner-Key`` header. The key is not verified; it only scopes boards and
memberships.
"""
from fastapi import Header, HTTPException, status

from schemas.validators import MAX_OWNER_KEY_LENGTH

OWNER_KEY_HEADER = "X-Owner-Key"


def _clean(owner_key: str | None) -> str | None:
    if owner_key is None:
        return None
    owner_key = owner_key.strip()
    if not owner_key:
        return None
    if len(owner_key) > MAX_OWNER_KEY_LENGTH:
        raise HTTPException(
            status_code=422,
            detail=f"{OWNER_KEY_HEADER} exceeds {MAX_OWNER_KEY_LENGTH} characters",
        )
    return owner_key


async def get_optional_owner_key(
    x_owner_key: str | None = Header(default=None, alias=OWNER_KEY_HEADER),
) -> str | None:
    """Owner key if the caller sent one, else None."""
    return _clean(x_owner_key)


async def get_owner_key(
    x_owner_key: str | None = Header(default=None, alias=OWNER_KEY_HEADER),
) -> str:
    """
    Owner key of the caller.

    Raises:
        HTTPException: 401 if the header is missing or blank.
    """
    owner_key = _clean(x_owner_key)
    if owner_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {OWNER_KEY_HEADER} header",
        )
    return owner_key
