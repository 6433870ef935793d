"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UTCDateTime, UUIDv7Mixin
from models.board import Board
from models.board_item import BoardItem
from models.waitlist_entry import WaitlistEntry
from models.website import Website

__all__ = [
    "Base",
    "Board",
    "BoardItem",
    "TimestampMixin",
    "UTCDateTime",
    "UUIDv7Mixin",
    "WaitlistEntry",
    "Website",
]
