"""
Metadata scanner: fetches a site's homepage and derives title, description,
favicon and a heuristic category.

Best-effort by contract. Network failures never propagate; the scan falls
back to values derived from the hostname.
"""
import ipaddress
import logging
import re
import socket
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from core.config import get_settings
from services.exceptions import UpstreamError
from services.utils import normalize_to_homepage, slugify

logger = logging.getLogger(__name__)

FALLBACK_FAVICON = "https://www.google.com/s2/favicons?sz=64&domain={host}"
DEFAULT_CATEGORY = "Tools"

# Ordered: first matching rule wins
CATEGORY_RULES: list[tuple[str, re.Pattern[str]]] = [
    ("Design", re.compile(r"\bfigma|design|palette|color|font\b")),
    (
        "Productivity",
        re.compile(r"\bnotion|todo|task|note|kanban|linear|jira|trello|airtable\b"),
    ),
    ("Dev & Infra", re.compile(r"\bvercel|github|deploy|code|api|redis|kafka|infra|devops\b")),
    ("Reading", re.compile(r"\bread|article|blog|medium|pocket|readwise\b")),
    ("Education", re.compile(r"\bcourse|learn|duolingo|coursera|udemy\b")),
    ("Music & Audio", re.compile(r"\bmusic|podcast|spotify|audio\b")),
    ("Video", re.compile(r"\bvideo|youtube|stream\b")),
]

ICON_RELS = {"icon", "shortcut icon", "apple-touch-icon"}


class SSRFBlockedError(Exception):
    """Raised when a URL targets a private/internal network address."""

    pass


def is_private_ip(ip_str: str) -> bool:
    """
    Check if an IP address is private, loopback, or otherwise internal.

    Args:
        ip_str: IP address string (IPv4 or IPv6).

    Returns:
        True if the IP is private/internal, False if public.
    """
    try:
        ip = ipaddress.ip_address(ip_str)
        return (
            ip.is_private
            or ip.is_loopback
            or ip.is_link_local
            or ip.is_multicast
            or ip.is_reserved
            or ip.is_unspecified
        )
    except ValueError:
        # If we can't parse it, block it to be safe
        return True


def validate_url_not_private(url: str) -> None:
    """
    Validate that a URL does not target a private/internal network.

    Resolves the hostname to check the actual IP address, preventing
    DNS rebinding attacks where a hostname resolves to an internal IP.

    Raises:
        SSRFBlockedError: If the URL targets a private network.
        ValueError: If the URL is malformed or the hostname does not resolve.
    """
    hostname = urlparse(url).hostname
    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")

    if hostname.lower() in ("localhost", "localhost.localdomain"):
        raise SSRFBlockedError(f"Blocked request to localhost: {url}")

    try:
        addrinfo = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ValueError(f"Could not resolve hostname: {hostname}") from e
    for _, _, _, _, sockaddr in addrinfo:
        ip_str = sockaddr[0]
        if is_private_ip(ip_str):
            raise SSRFBlockedError(
                f"Blocked request to private/internal address: {url} resolves to {ip_str}",
            )


@dataclass
class FetchResult:
    """Raw homepage HTML and where it was finally served from."""

    html: str
    final_url: str
    status_code: int


@dataclass
class ExtractedMetadata:
    """Title, description and favicon pulled out of a page."""

    title: str | None
    description: str | None
    favicon_url: str


@dataclass
class ScanResult:
    """Best-effort metadata for a homepage."""

    canonical_url: str
    origin: str
    title: str
    slug: str
    description: str
    category: str
    favicon_url: str
    error: str | None = None  # Why defaults were used, if the fetch failed


async def fetch_html(url: str, timeout: float | None = None) -> FetchResult:  # noqa: ASYNC109
    """
    Fetch a page's HTML, following redirects.

    Raises:
        UpstreamError: On SSRF rejection, network failure, timeout or non-2xx status.
    """
    settings = get_settings()
    try:
        validate_url_not_private(url)
    except (SSRFBlockedError, ValueError) as e:
        raise UpstreamError(str(e)) from e

    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout if timeout is not None else settings.scanner_timeout,
            headers={"User-Agent": settings.scanner_user_agent},
            http2=True,
        ) as client:
            response = await client.get(url)
    except httpx.TimeoutException as e:
        raise UpstreamError("Request timed out") from e
    except httpx.RequestError as e:
        raise UpstreamError(f"Request failed: {e}") from e

    final_url = str(response.url)
    try:
        validate_url_not_private(final_url)
    except (SSRFBlockedError, ValueError) as e:
        raise UpstreamError(f"Redirect blocked: {e}") from e

    if not response.is_success:
        raise UpstreamError(f"HTTP {response.status_code}")

    return FetchResult(html=response.text, final_url=final_url, status_code=response.status_code)


def fallback_favicon(base_url: str) -> str:
    """Favicon service URL for the page's host."""
    return FALLBACK_FAVICON.format(host=urlparse(base_url).hostname or "")


def _meta_content(soup: BeautifulSoup, **attrs: str) -> str | None:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return tag["content"].strip() or None
    return None


def extract_metadata(html: str, base_url: str) -> ExtractedMetadata:
    """
    Extract title, description and favicon from HTML.

    Pure function with no I/O. Uses BeautifulSoup for parsing.

    Description priority: <meta name="description">, then og:description.
    Favicon: first <link rel="icon" | "shortcut icon" | "apple-touch-icon">,
    resolved against ``base_url``; otherwise a favicon-service URL for the host.
    """
    soup = BeautifulSoup(html, "lxml")

    title = None
    title_tag = soup.find("title")
    if title_tag and title_tag.string:
        title = title_tag.string.strip() or None

    description = (
        _meta_content(soup, name="description")
        or _meta_content(soup, property="og:description")
    )

    favicon_url = None
    for link in soup.find_all("link", href=True):
        rel = " ".join(link.get("rel") or []).lower()
        if rel in ICON_RELS:
            favicon_url = urljoin(base_url, link["href"])
            break

    return ExtractedMetadata(
        title=title,
        description=description,
        favicon_url=favicon_url or fallback_favicon(base_url),
    )


def guess_category(title: str, html: str, body_prefix: int | None = None) -> str:
    """
    Pick a category by keyword rules over the title and the start of the page.

    Rules are tried in order and the first match wins; nothing matching means
    DEFAULT_CATEGORY.
    """
    prefix = body_prefix if body_prefix is not None else get_settings().scanner_body_prefix
    text = f"{title} {html[:prefix]}".lower()
    for category, pattern in CATEGORY_RULES:
        if pattern.search(text):
            return category
    return DEFAULT_CATEGORY


def default_description(title: str) -> str:
    """Description used when the page provides none."""
    return f"“{title}” is a website you can explore for more details and features."


async def scan_website(url: str) -> ScanResult:
    """
    Scan a site's homepage for metadata.

    The URL is reduced to its homepage first. Fetch failures are logged and
    replaced by defaults: the origin as title, a generic description, the
    favicon service and a category guessed from the title alone.

    Raises:
        InvalidInputError: If the URL has no hostname.
    """
    normalized = normalize_to_homepage(url)

    html = ""
    error = None
    try:
        fetched = await fetch_html(normalized.canonical_url)
        html = fetched.html
    except UpstreamError as e:
        logger.warning("Scan of %s failed: %s", normalized.canonical_url, e.message)
        error = e.message

    basic = extract_metadata(html, normalized.canonical_url)
    title = basic.title or normalized.origin
    return ScanResult(
        canonical_url=normalized.canonical_url,
        origin=normalized.origin,
        title=title,
        slug=slugify(title),
        description=basic.description or default_description(title),
        category=guess_category(title, html),
        favicon_url=basic.favicon_url,
        error=error,
    )
