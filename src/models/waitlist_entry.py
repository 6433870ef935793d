"""Waitlist entry model for pre-launch signups and referrals."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class WaitlistEntry(Base, UUIDv7Mixin, TimestampMixin):
    """Waitlist entry - unique by normalized email, carries its own referral code."""

    __tablename__ = "waitlist_entries"

    # id provided by UUIDv7Mixin
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    source: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Where the signup came from, e.g. 'landing', 'cta-footer'",
    )
    ref: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        comment="Referral code of the entry that invited this one",
    )
    referral_code: Mapped[str] = mapped_column(String(32), unique=True, index=True)
