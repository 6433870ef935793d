"""
Counter ledger for Website.save_count / Website.public_save_count.

Every membership insert and delete goes through this module so the
increment/decrement rule lives in one place:

- save_count moves by one for every membership, whatever the board visibility.
- public_save_count moves by one only when the board is public at the time
  of the write.
- Both counters floor at zero.

Counters are not recomputed from memberships. Toggling a board's visibility
after it already holds memberships leaves public_save_count as it was; the
explore feed recomputes its own distinct-owner count at read time.
"""
from dataclasses import dataclass
from typing import Literal
from uuid import UUID

from sqlalchemy import case, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from models.base import utc_now
from models.website import Website


@dataclass(frozen=True)
class CounterDelta:
    """Change to apply to a website's counters."""

    saves: int
    public_saves: int


def membership_delta(is_public_board: bool, sign: Literal[1, -1]) -> CounterDelta:
    """Delta produced by adding (sign=1) or removing (sign=-1) one membership."""
    return CounterDelta(saves=sign, public_saves=sign if is_public_board else 0)


def apply_membership_delta(
    save_count: int,
    public_save_count: int,
    delta: CounterDelta,
) -> tuple[int, int]:
    """
    Pure form of the ledger rule: new (save_count, public_save_count).

    Mirrors the clamped SQL expression used by bump_website_counters.
    """
    return (
        max(0, save_count + delta.saves),
        max(0, public_save_count + delta.public_saves),
    )


def _clamped(column: InstrumentedAttribute, amount: int):  # noqa: ANN202
    """SQL expression for ``max(0, column + amount)`` that works on every dialect."""
    return case((column + amount < 0, 0), else_=column + amount)


async def bump_website_counters(
    db: AsyncSession,
    website_id: UUID,
    delta: CounterDelta,
) -> Website | None:
    """
    Atomically apply a counter delta to a website.

    Runs as a single UPDATE so concurrent saves/removes of the same website
    never lose an increment. Any copy of the website already loaded in the
    session is refreshed with the new values.

    Returns:
        The updated website, or None if it no longer exists.
    """
    stmt = (
        update(Website)
        .where(Website.id == website_id)
        .values(
            save_count=_clamped(Website.save_count, delta.saves),
            public_save_count=_clamped(Website.public_save_count, delta.public_saves),
            updated_at=utc_now(),
        )
        .returning(Website)
        .execution_options(synchronize_session=False, populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()
