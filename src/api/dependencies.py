"""FastAPI dependencies for injection."""
from core.auth import get_optional_owner_key, get_owner_key
from core.config import get_settings
from db.session import get_async_session

__all__ = [
    "get_async_session",
    "get_optional_owner_key",
    "get_owner_key",
    "get_settings",
]
