"""Website model: the canonical record shared by every board that saves a site."""
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.board_item import BoardItem


class Website(Base, UUIDv7Mixin, TimestampMixin):
    """
    Website model - one row per distinct canonical (homepage) URL.

    save_count and public_save_count are denormalized counters maintained
    incrementally by every membership add/remove (see services.counters).
    """

    __tablename__ = "websites"

    # id provided by UUIDv7Mixin
    canonical_url: Mapped[str] = mapped_column(
        Text,
        unique=True,
        index=True,
        comment="Homepage-normalized URL, e.g. 'https://notion.so/'",
    )
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    origin: Mapped[str] = mapped_column(
        String(255),
        comment="Hostname without leading 'www.'",
    )
    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str] = mapped_column(Text, default="")
    # Ordered list, first entry is the primary category
    categories: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    favicon_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    og_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    save_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
    public_save_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False, index=True,
    )

    board_items: Mapped[list["BoardItem"]] = relationship(back_populates="website")
