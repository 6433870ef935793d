"""Service layer for waitlist signups."""
import logging
import secrets
import string
import time

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.waitlist_entry import WaitlistEntry
from schemas.waitlist import WaitlistJoin, WaitlistJoinResult, WaitlistStats

logger = logging.getLogger(__name__)

REFERRAL_CODE_LENGTH = 6
REFERRAL_CODE_ATTEMPTS = 5
_CODE_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    """Upper-case base-36 representation of a non-negative integer."""
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_CODE_ALPHABET[remainder])
    return "".join(reversed(digits))


def random_referral_code() -> str:
    """Six random upper-case base-36 characters, e.g. ``F9K3PQ``."""
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH))


async def get_by_email(db: AsyncSession, email: str) -> WaitlistEntry | None:
    """Lookup by normalized email."""
    result = await db.execute(select(WaitlistEntry).where(WaitlistEntry.email == email))
    return result.scalar_one_or_none()


async def _code_taken(db: AsyncSession, code: str) -> bool:
    result = await db.execute(
        select(WaitlistEntry.id).where(WaitlistEntry.referral_code == code),
    )
    return result.first() is not None


async def generate_unique_code(db: AsyncSession) -> str:
    """
    Referral code not used by any entry yet.

    Tries a handful of random codes; if all collide, falls back to the
    current time in milliseconds, base-36 encoded.
    """
    for _ in range(REFERRAL_CODE_ATTEMPTS):
        code = random_referral_code()
        if not await _code_taken(db, code):
            return code
    logger.warning("Referral code attempts exhausted, using timestamp fallback")
    return to_base36(time.time_ns() // 1_000_000)


async def count_entries(db: AsyncSession) -> int:
    """Total number of waitlist entries."""
    result = await db.execute(select(func.count()).select_from(WaitlistEntry))
    return result.scalar_one()


async def _position(db: AsyncSession, entry: WaitlistEntry) -> int:
    # 1-based; entries sharing the same timestamp share the later position
    result = await db.execute(
        select(func.count())
        .select_from(WaitlistEntry)
        .where(WaitlistEntry.created_at <= entry.created_at),
    )
    return result.scalar_one()


async def _result(db: AsyncSession, entry: WaitlistEntry, existing: bool) -> WaitlistJoinResult:
    return WaitlistJoinResult(
        existing=existing,
        id=entry.id,
        email=entry.email,
        referral_code=entry.referral_code,
        position=await _position(db, entry),
        total=await count_entries(db),
    )


async def join(db: AsyncSession, data: WaitlistJoin) -> WaitlistJoinResult:
    """
    Join the waitlist, idempotent by email.

    A repeated signup returns the original entry (``existing=True``) with its
    referral code and current position; nothing is written.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    existing = await get_by_email(db, data.email)
    if existing is not None:
        return await _result(db, existing, existing=True)

    entry = WaitlistEntry(
        email=data.email,
        name=data.name.strip() if data.name else None,
        source=data.source,
        ref=data.ref,
        referral_code=await generate_unique_code(db),
    )
    try:
        async with db.begin_nested():  # Creates savepoint
            db.add(entry)
    except IntegrityError:
        # Concurrent signup with the same email won the insert
        existing = await get_by_email(db, data.email)
        if existing is None:
            raise
        return await _result(db, existing, existing=True)

    await db.refresh(entry)
    logger.info("Waitlist signup %s (source=%s)", entry.id, entry.source)
    return await _result(db, entry, existing=False)


async def stats(db: AsyncSession) -> WaitlistStats:
    """Aggregate waitlist stats."""
    return WaitlistStats(total=await count_entries(db))
