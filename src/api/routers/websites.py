"""Website registry endpoints: scan, add, upsert, lookups and listings."""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_optional_owner_key
from schemas.website import (
    AddWebsiteRequest,
    AddWebsiteResponse,
    ScanRequest,
    ScanResponse,
    WebsiteDetailsResponse,
    WebsiteIdsResponse,
    WebsiteResponse,
    WebsiteSort,
    WebsiteSummary,
    WebsiteUpsert,
)
from services import feed_service, scanner, wap_service, website_service
from services.utils import normalize_to_homepage

router = APIRouter(prefix="/websites", tags=["websites"])


@router.post("/scan", response_model=ScanResponse)
async def scan_website(data: ScanRequest) -> ScanResponse:
    """
    Preview the metadata the scanner finds for a URL's homepage.

    Never fails because of the remote site; unreachable sites yield defaults
    and an ``error`` describing what went wrong.
    """
    result = await scanner.scan_website(data.url)
    return ScanResponse(
        canonical_url=result.canonical_url,
        origin=result.origin,
        title=result.title,
        slug=result.slug,
        description=result.description,
        category=result.category,
        favicon_url=result.favicon_url,
        error=result.error,
    )


@router.post("/", response_model=AddWebsiteResponse, status_code=201)
async def add_website(
    data: AddWebsiteRequest,
    owner_key: str | None = Depends(get_optional_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> AddWebsiteResponse:
    """
    Register a website by any of its URLs, scanning it when new.

    - **save_to**: 'none', 'default' (caller's default board, needs X-Owner-Key)
      or 'discover' (public discovery board)
    """
    if data.save_to == "default" and owner_key is None:
        raise HTTPException(status_code=401, detail="Missing X-Owner-Key header")
    result = await wap_service.add_website(db, data, owner_key)
    return AddWebsiteResponse(
        website=WebsiteResponse.model_validate(result.website),
        created=result.created,
        scanned=result.scanned,
        board_item_id=result.board_item_id,
        deduped=result.deduped,
    )


@router.put("/", response_model=WebsiteResponse)
async def upsert_website(
    data: WebsiteUpsert,
    db: AsyncSession = Depends(get_async_session),
) -> WebsiteResponse:
    """Create or refresh the website with ``canonical_url``; counters are untouched."""
    website = await website_service.upsert(db, data)
    return WebsiteResponse.model_validate(website)


@router.get("/", response_model=list[WebsiteSummary])
async def list_websites(
    q: str | None = Query(default=None, description="Search title, description and origin"),
    sort: WebsiteSort = Query(default=WebsiteSort.POPULAR, description="Ordering"),
    min_save_count: int = Query(default=0, ge=0, description="Minimum save_count"),
    limit: int | None = Query(default=None, description="Page size (10..500, default 120)"),
    db: AsyncSession = Depends(get_async_session),
) -> list[WebsiteSummary]:
    """List websites with optional search, popularity floor and ordering."""
    websites = await website_service.list_all(
        db, query=q, sort=sort, min_save_count=min_save_count, limit=limit,
    )
    return [WebsiteSummary.model_validate(w) for w in websites]


@router.get("/ids", response_model=WebsiteIdsResponse)
async def list_website_ids(
    limit: int | None = Query(default=None, description="Maximum ids (1..10000)"),
    db: AsyncSession = Depends(get_async_session),
) -> WebsiteIdsResponse:
    """All website ids in creation order."""
    return WebsiteIdsResponse(ids=await website_service.list_ids(db, limit))


@router.get("/by-url", response_model=WebsiteResponse)
async def get_website_by_url(
    url: str = Query(min_length=1, description="Any URL of the site"),
    db: AsyncSession = Depends(get_async_session),
) -> WebsiteResponse:
    """Look up a website by any of its URLs (normalized to the homepage first)."""
    normalized = normalize_to_homepage(url)
    website = await website_service.get_by_canonical_url(db, normalized.canonical_url)
    if website is None:
        raise HTTPException(status_code=404, detail="Website not found")
    return WebsiteResponse.model_validate(website)


@router.get("/{slug}", response_model=WebsiteDetailsResponse)
async def get_website_details(
    slug: str,
    owner_key: str | None = Depends(get_optional_owner_key),
    db: AsyncSession = Depends(get_async_session),
) -> WebsiteDetailsResponse:
    """Website by slug plus whether the caller has saved it."""
    details = await feed_service.get_website_details(db, slug, owner_key)
    if details is None:
        raise HTTPException(status_code=404, detail="Website not found")
    return WebsiteDetailsResponse(
        website=WebsiteResponse.model_validate(details.website),
        is_saved=details.is_saved,
        board_item_id=details.board_item_id,
    )


@router.get("/{slug}/similar", response_model=list[WebsiteSummary])
async def get_similar_websites(
    slug: str,
    limit: int | None = Query(default=None, description="Maximum results (default 8, max 24)"),
    db: AsyncSession = Depends(get_async_session),
) -> list[WebsiteSummary]:
    """Websites sharing a category with ``slug``, most publicly saved first."""
    websites = await feed_service.get_similar_websites(db, slug, limit)
    return [WebsiteSummary.model_validate(w) for w in websites]
