"""BoardItem model: membership of one website in one owner's board."""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, UTCDateTime, UUIDv7Mixin, utc_now

if TYPE_CHECKING:
    from models.board import Board
    from models.website import Website


class BoardItem(Base, UUIDv7Mixin):
    """
    BoardItem model - links a board, a website and the board's owner.

    owner_key is copied from the board for per-owner scans. An owner may hold
    at most one membership per website across all of their boards.
    """

    __tablename__ = "board_items"
    __table_args__ = (
        UniqueConstraint("owner_key", "website_id", name="uq_board_items_owner_key_website_id"),
    )

    # id provided by UUIDv7Mixin
    owner_key: Mapped[str] = mapped_column(String(200), index=True)
    board_id: Mapped[UUID] = mapped_column(
        ForeignKey("boards.id", ondelete="CASCADE"),
        index=True,
    )
    website_id: Mapped[UUID] = mapped_column(
        ForeignKey("websites.id", ondelete="CASCADE"),
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utc_now,
        nullable=False,
    )

    board: Mapped["Board"] = relationship(back_populates="items")
    website: Mapped["Website"] = relationship(back_populates="board_items")
