"""Tests for the website registry service."""
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from sqlalchemy.ext.asyncio import AsyncSession

from schemas.website import WebsiteSort, WebsiteUpsert
from services import website_service
from services.counters import bump_website_counters, membership_delta


def _notion(**overrides: object) -> WebsiteUpsert:
    data = {
        "canonical_url": "https://notion.so/",
        "origin": "notion.so",
        "title": "Notion",
        "slug": "notion",
        "description": "All-in-one workspace",
        "categories": ["Productivity"],
    }
    data.update(overrides)
    return WebsiteUpsert(**data)


# =============================================================================
# upsert
# =============================================================================


async def test__upsert__creates_record_with_zero_counters(db_session: AsyncSession) -> None:
    website = await website_service.upsert(db_session, _notion())

    assert website.id is not None
    assert website.slug == "notion"
    assert website.categories == ["Productivity"]
    assert website.save_count == 0
    assert website.public_save_count == 0
    assert website.created_at is not None


async def test__upsert__same_canonical_url_patches_same_record(db_session: AsyncSession) -> None:
    first = await website_service.upsert(db_session, _notion())
    second = await website_service.upsert(db_session, _notion(title="Notion HQ", slug=""))

    assert second.id == first.id
    assert second.title == "Notion HQ"
    assert second.slug == "notion"

    listed = await website_service.list_all(db_session)
    assert [w.title for w in listed] == ["Notion HQ"]


async def test__upsert__leaves_counters_untouched(db_session: AsyncSession) -> None:
    website = await website_service.upsert(db_session, _notion())
    await bump_website_counters(db_session, website.id, membership_delta(True, 1))

    patched = await website_service.upsert(db_session, _notion(description="Updated"))

    assert patched.description == "Updated"
    assert patched.save_count == 1
    assert patched.public_save_count == 1


async def test__upsert__identical_refresh_moves_updated_at(db_session: AsyncSession) -> None:
    first = await website_service.upsert(db_session, _notion())
    first_updated_at = first.updated_at
    later = first_updated_at + timedelta(minutes=5)

    with patch("services.website_service.utc_now", return_value=later):
        second = await website_service.upsert(db_session, _notion())

    assert second.id == first.id
    assert second.updated_at == later


async def test__upsert__keeps_favicon_when_not_supplied(db_session: AsyncSession) -> None:
    await website_service.upsert(db_session, _notion(favicon_url="https://notion.so/icon.png"))
    patched = await website_service.upsert(db_session, _notion(favicon_url=None))

    assert patched.favicon_url == "https://notion.so/icon.png"


async def test__upsert__slug_collision_gets_random_suffix(db_session: AsyncSession) -> None:
    first = await website_service.upsert(db_session, _notion())
    other = await website_service.upsert(
        db_session,
        _notion(canonical_url="https://notion.com/", origin="notion.com"),
    )

    assert first.slug == "notion"
    assert other.slug.startswith("notion-")
    assert len(other.slug) == len("notion-") + 4


async def test__upsert__slug_derived_from_title_when_absent(db_session: AsyncSession) -> None:
    website = await website_service.upsert(db_session, _notion(slug="", title="Notion HQ"))
    assert website.slug == "notion-hq"


async def test__upsert__slug_falls_back_to_origin(db_session: AsyncSession) -> None:
    website = await website_service.upsert(db_session, _notion(slug="", title="!!!"))
    assert website.slug == "notion-so"


async def test__upsert__patch_with_new_slug_is_made_unique(db_session: AsyncSession) -> None:
    await website_service.upsert(
        db_session,
        _notion(canonical_url="https://figma.com/", origin="figma.com", title="Figma", slug="figma"),
    )
    await website_service.upsert(db_session, _notion())

    patched = await website_service.upsert(db_session, _notion(slug="Figma"))

    assert patched.slug.startswith("figma-")


async def test__resolve_unique_slug__accepts_last_candidate_after_retries(
    db_session: AsyncSession,
) -> None:
    await website_service.upsert(db_session, _notion())
    await website_service.upsert(
        db_session,
        _notion(canonical_url="https://notion.com/", origin="notion.com", slug="notion-aaaa"),
    )

    with patch("services.website_service.random_suffix", return_value="aaaa"):
        slug = await website_service.resolve_unique_slug(db_session, "notion")

    # Every candidate collided; the last one is returned and the unique index guards it
    assert slug == "notion-aaaa"


# =============================================================================
# lookups
# =============================================================================


async def test__get_by_canonical_url__exact_match_only(db_session: AsyncSession) -> None:
    website = await website_service.upsert(db_session, _notion())

    assert (await website_service.get_by_canonical_url(db_session, "https://notion.so/")).id == website.id
    assert await website_service.get_by_canonical_url(db_session, "https://www.notion.so/") is None


async def test__get_by_slug(db_session: AsyncSession) -> None:
    website = await website_service.upsert(db_session, _notion())

    assert (await website_service.get_by_slug(db_session, "notion")).id == website.id
    assert await website_service.get_by_slug(db_session, "missing") is None


# =============================================================================
# list_ids / list_all
# =============================================================================


async def test__list_ids__creation_order_and_limit(db_session: AsyncSession, make_website) -> None:  # noqa: ANN001
    created = [await make_website(f"site{i}.com") for i in range(3)]

    assert await website_service.list_ids(db_session) == [w.id for w in created]
    assert await website_service.list_ids(db_session, limit=2) == [w.id for w in created[:2]]


async def test__list_all__popular_orders_by_save_count(db_session: AsyncSession, make_website) -> None:  # noqa: ANN001
    quiet = await make_website("quiet.com", "Quiet")
    busy = await make_website("busy.com", "Busy")
    for _ in range(3):
        await bump_website_counters(db_session, busy.id, membership_delta(False, 1))
    await bump_website_counters(db_session, quiet.id, membership_delta(False, 1))

    listed = await website_service.list_all(db_session, sort=WebsiteSort.POPULAR)

    assert [w.slug for w in listed] == ["busy", "quiet"]


async def test__list_all__recent_orders_by_created_at_then_title(
    db_session: AsyncSession, make_website,  # noqa: ANN001
) -> None:
    old = await make_website("old.com", "Old")
    zeta = await make_website("zeta.com", "Zeta")
    alpha = await make_website("alpha.com", "Alpha")
    base = datetime(2026, 1, 1, tzinfo=UTC)
    old.created_at = base
    zeta.created_at = base + timedelta(days=1)
    alpha.created_at = base + timedelta(days=1)
    await db_session.flush()

    listed = await website_service.list_all(db_session, sort=WebsiteSort.RECENT)

    assert [w.title for w in listed] == ["Alpha", "Zeta", "Old"]


async def test__list_all__min_save_count_filters(db_session: AsyncSession, make_website) -> None:  # noqa: ANN001
    await make_website("quiet.com", "Quiet")
    busy = await make_website("busy.com", "Busy")
    await bump_website_counters(db_session, busy.id, membership_delta(False, 1))

    listed = await website_service.list_all(db_session, min_save_count=1)

    assert [w.slug for w in listed] == ["busy"]


async def test__list_all__search_matches_title_description_origin(
    db_session: AsyncSession, make_website,  # noqa: ANN001
) -> None:
    await make_website("notion.so", "Notion", description="Docs and wikis")
    await make_website("figma.com", "Figma", description="Design tool")

    assert [w.title for w in await website_service.list_all(db_session, query="WIKI")] == ["Notion"]
    assert [w.title for w in await website_service.list_all(db_session, query="figma.com")] == ["Figma"]
    assert await website_service.list_all(db_session, query="100%") == []


def test__clamp_limit() -> None:
    assert website_service.clamp_limit(None, 120, 10, 500) == 120
    assert website_service.clamp_limit(1, 120, 10, 500) == 10
    assert website_service.clamp_limit(10_000, 120, 10, 500) == 500
    assert website_service.clamp_limit(42, 120, 10, 500) == 42
