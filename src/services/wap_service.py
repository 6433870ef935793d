"""
Flows that span the registry, boards and memberships: adding a website by URL
and seeding a public board with every known website.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from models.website import Website
from schemas.website import AddWebsiteRequest, WebsiteUpsert
from services import board_item_service, board_service, scanner, website_service
from services.exceptions import InvalidInputError, WapsError
from services.utils import normalize_to_homepage

logger = logging.getLogger(__name__)

DISCOVER_BOARD_NAME = "Discover"


@dataclass(frozen=True)
class AddWebsiteResult:
    """Outcome of adding a website by URL."""

    website: Website
    created: bool
    scanned: bool
    board_item_id: UUID | None = None
    deduped: bool | None = None


@dataclass(frozen=True)
class SeedResult:
    """Counts from seeding a public board."""

    board_id: UUID
    total: int
    added: int
    deduped: int
    failed: int


def public_board_name(board_slug: str) -> str:
    """Display name for a lazily created public board."""
    return DISCOVER_BOARD_NAME if board_slug == "discover" else board_slug


def _has_overrides(data: AddWebsiteRequest) -> bool:
    return any(
        value is not None
        for value in (data.title, data.slug, data.description, data.category, data.favicon_url)
    )


async def add_website(
    db: AsyncSession,
    data: AddWebsiteRequest,
    owner_key: str | None = None,
) -> AddWebsiteResult:
    """
    Register a website from any of its URLs and optionally save it.

    A canonical URL that is already registered is never rescanned; if
    ``data`` carries any metadata, the stored record is refreshed with it.
    Otherwise the homepage is scanned and the result, overlaid with any
    metadata supplied in ``data``, is upserted.

    ``data.save_to``:
        - "none": register only.
        - "default": save to the caller's default board (needs ``owner_key``).
        - "discover": save to the public seed board, created lazily.

    Raises:
        InvalidInputError: If the URL has no hostname, or "default" is
            requested without an owner key.
    """
    if data.save_to == "default" and not owner_key:
        raise InvalidInputError("An owner key is required to save to the default board")

    normalized = normalize_to_homepage(data.url)
    website = await website_service.get_by_canonical_url(db, normalized.canonical_url)
    created = website is None
    scanned = False

    if website is None:
        scan = await scanner.scan_website(normalized.canonical_url)
        scanned = True
        website = await website_service.upsert(
            db,
            WebsiteUpsert(
                canonical_url=scan.canonical_url,
                origin=scan.origin,
                title=data.title or scan.title,
                slug=data.slug or scan.slug,
                description=data.description or scan.description,
                categories=[data.category or scan.category],
                favicon_url=data.favicon_url or scan.favicon_url,
            ),
        )
    elif _has_overrides(data):
        # Refresh the stored record with the submitted values, without rescanning
        website = await website_service.upsert(
            db,
            WebsiteUpsert(
                canonical_url=website.canonical_url,
                origin=website.origin,
                title=data.title or website.title,
                slug=data.slug or website.slug,
                description=(
                    data.description if data.description is not None else website.description
                ),
                categories=[data.category] if data.category else list(website.categories),
                favicon_url=data.favicon_url or website.favicon_url,
                og_image_url=website.og_image_url,
            ),
        )

    if data.save_to == "default":
        saved = await board_item_service.add_to_default(db, owner_key, website.id)
    elif data.save_to == "discover":
        settings = get_settings()
        board = await board_service.ensure_public_board(
            db,
            settings.seed_owner_key,
            settings.seed_board_slug,
            public_board_name(settings.seed_board_slug),
        )
        saved = await board_item_service.add_to_board(
            db, settings.seed_owner_key, board.id, website.id,
        )
    else:
        saved = None

    await db.refresh(website)
    return AddWebsiteResult(
        website=website,
        created=created,
        scanned=scanned,
        board_item_id=saved.board_item_id if saved else None,
        deduped=saved.deduped if saved else None,
    )


async def seed_public_board(
    db: AsyncSession,
    owner_key: str = "seed",
    board_slug: str = "discover",
    limit: int | None = None,
) -> SeedResult:
    """
    Put every registered website (up to ``limit``) on a public board.

    The board is created as public when missing, or made public when it
    exists as a private board. Websites already saved by ``owner_key`` count
    as deduped; a website that cannot be added counts as failed and the run
    continues.
    """
    board = await board_service.get_by_owner_and_slug(db, owner_key, board_slug)
    if board is None:
        board = await board_service.ensure_public_board(
            db, owner_key, board_slug, public_board_name(board_slug),
        )
    elif not board.is_public:
        board = await board_service.set_public(db, owner_key, board.id, True)

    website_ids = await website_service.list_ids(db, limit)

    added = deduped = failed = 0
    for website_id in website_ids:
        try:
            result = await board_item_service.add_to_board(db, owner_key, board.id, website_id)
        except WapsError as e:
            logger.warning("Could not seed website %s: %s", website_id, e.message)
            failed += 1
            continue
        if result.deduped:
            deduped += 1
        else:
            added += 1

    logger.info(
        "Seeded board %s/%s: %d added, %d deduped, %d failed",
        owner_key, board_slug, added, deduped, failed,
    )
    return SeedResult(
        board_id=board.id,
        total=len(website_ids),
        added=added,
        deduped=deduped,
        failed=failed,
    )
