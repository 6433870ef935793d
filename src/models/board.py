"""Board model: a named collection of saved websites owned by one owner key."""
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.board_item import BoardItem


DEFAULT_BOARD_SLUG = "default"
DEFAULT_BOARD_NAME = "My Waps"


class Board(Base, UUIDv7Mixin, TimestampMixin):
    """Board model - slug is unique per owner, not globally."""

    __tablename__ = "boards"
    __table_args__ = (
        # Backs the insert-if-absent behaviour of ensure_default_board/ensure_public_board
        UniqueConstraint("owner_key", "slug", name="uq_boards_owner_key_slug"),
    )

    # id provided by UUIDv7Mixin
    owner_key: Mapped[str] = mapped_column(
        String(200),
        index=True,
        comment="Opaque owner identifier supplied by the client",
    )
    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(200), index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    items: Mapped[list["BoardItem"]] = relationship(back_populates="board")
