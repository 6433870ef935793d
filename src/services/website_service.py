"""Service layer for the website registry: canonical records keyed by homepage URL."""
import logging
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utc_now
from models.website import Website
from schemas.website import WebsiteSort, WebsiteUpsert
from services.utils import escape_ilike, normalize_search, random_suffix, slugify

logger = logging.getLogger(__name__)

# Bounded retries when a freshly generated slug still collides
MAX_SLUG_ATTEMPTS = 3

LIST_IDS_DEFAULT = 10_000
LIST_IDS_MAX = 10_000
LIST_ALL_DEFAULT = 120
LIST_ALL_MIN = 10
LIST_ALL_MAX = 500


def clamp_limit(limit: int | None, default: int, minimum: int, maximum: int) -> int:
    """Apply a default and bound a caller-supplied page size."""
    return min(max(limit if limit is not None else default, minimum), maximum)


async def get_by_id(db: AsyncSession, website_id: UUID) -> Website | None:
    """Get a website by id."""
    return await db.get(Website, website_id)


async def get_by_canonical_url(db: AsyncSession, canonical_url: str) -> Website | None:
    """Exact-match lookup by canonical URL."""
    result = await db.execute(
        select(Website).where(Website.canonical_url == canonical_url),
    )
    return result.scalar_one_or_none()


async def get_by_slug(db: AsyncSession, slug: str) -> Website | None:
    """Exact-match lookup by slug."""
    result = await db.execute(select(Website).where(Website.slug == slug))
    return result.scalar_one_or_none()


async def _slug_taken(db: AsyncSession, slug: str) -> bool:
    result = await db.execute(select(Website.id).where(Website.slug == slug))
    return result.first() is not None


async def resolve_unique_slug(db: AsyncSession, base: str) -> str:
    """
    Return ``base`` if free, otherwise ``base`` plus a 4-character random suffix.

    Collisions of the suffixed slug are possible but unlikely; they are
    re-checked up to MAX_SLUG_ATTEMPTS times and the last candidate is used
    regardless (the unique index is the final guard).
    """
    if not await _slug_taken(db, base):
        return base
    candidate = f"{base}-{random_suffix()}"
    for _ in range(MAX_SLUG_ATTEMPTS - 1):
        if not await _slug_taken(db, candidate):
            break
        logger.info("Slug collision for %s, retrying", candidate)
        candidate = f"{base}-{random_suffix()}"
    return candidate


async def upsert(db: AsyncSession, data: WebsiteUpsert) -> Website:
    """
    Create or refresh the website identified by ``data.canonical_url``.

    If a record exists its metadata is patched in place (slug only when a
    non-empty one is supplied; favicon/og-image only when supplied) and its
    counters are left untouched. Otherwise a new record is inserted with zero
    counters and a slug made unique across all websites.

    Safe to call repeatedly with the same URL. A concurrent first insert of the
    same URL is detected through the unique index and turned into a patch.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    existing = await get_by_canonical_url(db, data.canonical_url)
    if existing is not None:
        return await _patch(db, existing, data)

    base_slug = slugify(data.slug or data.title) or slugify(data.origin) or "site"
    final_slug = await resolve_unique_slug(db, base_slug)

    website = Website(
        canonical_url=data.canonical_url,
        origin=data.origin,
        title=data.title,
        slug=final_slug,
        description=data.description,
        categories=list(data.categories),
        favicon_url=data.favicon_url,
        og_image_url=data.og_image_url,
        save_count=0,
        public_save_count=0,
    )
    try:
        async with db.begin_nested():  # Creates savepoint
            db.add(website)
    except IntegrityError:
        # Another writer inserted the same canonical URL between our SELECT and INSERT
        existing = await get_by_canonical_url(db, data.canonical_url)
        if existing is None:
            raise
        return await _patch(db, existing, data)

    await db.refresh(website)
    logger.info("Registered website %s (%s)", website.canonical_url, website.slug)
    return website


async def _patch(db: AsyncSession, website: Website, data: WebsiteUpsert) -> Website:
    website.title = data.title
    new_slug = slugify(data.slug) if data.slug else ""
    if new_slug and new_slug != website.slug:
        website.slug = await resolve_unique_slug(db, new_slug)
    website.description = data.description
    website.categories = list(data.categories)
    if data.favicon_url is not None:
        website.favicon_url = data.favicon_url
    if data.og_image_url is not None:
        website.og_image_url = data.og_image_url
    website.origin = data.origin
    # Always stamped so an unchanged refresh still counts as one
    website.updated_at = utc_now()
    await db.flush()
    await db.refresh(website)
    return website


async def list_ids(db: AsyncSession, limit: int | None = None) -> list[UUID]:
    """All website ids in creation order, truncated to ``limit`` (1..10000)."""
    lim = clamp_limit(limit, LIST_IDS_DEFAULT, 1, LIST_IDS_MAX)
    result = await db.execute(
        select(Website.id)
        .order_by(Website.created_at.asc(), Website.id.asc())
        .limit(lim),
    )
    return list(result.scalars().all())


def build_text_search_filter(search: str):  # noqa: ANN201
    """Case-insensitive substring filter over title, description and origin."""
    pattern = f"%{escape_ilike(search)}%"
    return or_(
        Website.title.ilike(pattern, escape="\\"),
        Website.description.ilike(pattern, escape="\\"),
        Website.origin.ilike(pattern, escape="\\"),
    )


async def list_all(
    db: AsyncSession,
    query: str | None = None,
    sort: WebsiteSort = WebsiteSort.POPULAR,
    min_save_count: int = 0,
    limit: int | None = None,
) -> list[Website]:
    """
    List websites with optional search, popularity floor and ordering.

    Args:
        db: Database session.
        query: Case-insensitive substring over title, description and origin.
        sort:
            - "recent": created_at desc, then title asc.
            - "popular": save_count desc, then created_at desc, then title asc.
        min_save_count: Only include websites saved at least this many times.
        limit: Page size, bounded to 10..500 (default 120).
    """
    lim = clamp_limit(limit, LIST_ALL_DEFAULT, LIST_ALL_MIN, LIST_ALL_MAX)
    stmt = select(Website)

    if min_save_count > 0:
        stmt = stmt.where(Website.save_count >= min_save_count)

    search = normalize_search(query)
    if search:
        stmt = stmt.where(build_text_search_filter(search))

    if sort == WebsiteSort.RECENT:
        stmt = stmt.order_by(Website.created_at.desc(), Website.title.asc())
    else:
        stmt = stmt.order_by(
            Website.save_count.desc(),
            Website.created_at.desc(),
            Website.title.asc(),
        )

    result = await db.execute(stmt.limit(lim))
    return list(result.scalars().all())
