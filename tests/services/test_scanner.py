"""
Tests for the metadata scanner.

Tests cover:
- SSRF guard: private/loopback targets are refused
- fetch_html: HTTP fetching with mocked responses (success, timeout, errors)
- extract_metadata / guess_category: pure functions over HTML
- scan_website: end to end with a mocked transport, including fallbacks
"""
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from core.config import get_settings
from services.exceptions import InvalidInputError, UpstreamError
from services.scanner import (
    SSRFBlockedError,
    default_description,
    extract_metadata,
    fetch_html,
    guess_category,
    is_private_ip,
    scan_website,
    validate_url_not_private,
)

NOTION_HTML = """
<html>
<head>
  <title> Notion – Your connected workspace </title>
  <meta name="description" content="A workspace for notes and docs.">
  <meta property="og:description" content="OG description">
  <link rel="stylesheet" href="/main.css">
  <link rel="shortcut icon" href="/images/favicon.ico">
</head>
<body>Write, plan, organize.</body>
</html>
"""


@pytest.fixture
def allow_public_urls():  # noqa: ANN201
    """Skip DNS resolution in the SSRF guard."""
    with patch("services.scanner.validate_url_not_private") as mock_validate:
        yield mock_validate


def _mock_client(response: object = None, side_effect: Exception | None = None) -> AsyncMock:
    mock_client = AsyncMock()
    if side_effect is not None:
        mock_client.get.side_effect = side_effect
    else:
        mock_client.get.return_value = response
    mock_client.__aenter__.return_value = mock_client
    mock_client.__aexit__.return_value = None
    return mock_client


# =============================================================================
# SSRF guard
# =============================================================================


@pytest.mark.parametrize(
    ("ip", "expected"),
    [
        ("127.0.0.1", True),
        ("10.1.2.3", True),
        ("192.168.0.10", True),
        ("169.254.169.254", True),
        ("::1", True),
        ("0.0.0.0", True),
        ("not-an-ip", True),
        ("8.8.8.8", False),
        ("2606:4700:4700::1111", False),
    ],
)
def test__is_private_ip(ip: str, expected: bool) -> None:
    assert is_private_ip(ip) is expected


@pytest.mark.parametrize(
    "url",
    ["http://localhost/", "http://127.0.0.1:8000/", "http://10.0.0.5/"],
)
def test__validate_url_not_private__blocks_internal_targets(url: str) -> None:
    with pytest.raises(SSRFBlockedError):
        validate_url_not_private(url)


def test__validate_url_not_private__requires_hostname() -> None:
    with pytest.raises(ValueError, match="no hostname"):
        validate_url_not_private("https:///nothing")


# =============================================================================
# fetch_html
# =============================================================================


async def test__fetch_html__success(allow_public_urls) -> None:  # noqa: ANN001, ARG001
    mock_response = AsyncMock()
    mock_response.text = NOTION_HTML
    mock_response.url = "https://www.notion.so/"
    mock_response.status_code = 200
    mock_response.is_success = True

    with patch("services.scanner.httpx.AsyncClient") as mock_client_class:
        mock_client_class.return_value = _mock_client(mock_response)

        result = await fetch_html("https://notion.so/")

    settings = get_settings()
    assert result.html == NOTION_HTML
    assert result.final_url == "https://www.notion.so/"
    assert result.status_code == 200
    mock_client_class.assert_called_once_with(
        follow_redirects=True,
        timeout=settings.scanner_timeout,
        headers={"User-Agent": settings.scanner_user_agent},
        http2=True,
    )


async def test__fetch_html__timeout(allow_public_urls) -> None:  # noqa: ANN001, ARG001
    with patch("services.scanner.httpx.AsyncClient") as mock_client_class:
        mock_client_class.return_value = _mock_client(
            side_effect=httpx.TimeoutException("Connection timed out"),
        )

        with pytest.raises(UpstreamError, match="timed out"):
            await fetch_html("https://notion.so/")


async def test__fetch_html__connection_error(allow_public_urls) -> None:  # noqa: ANN001, ARG001
    with patch("services.scanner.httpx.AsyncClient") as mock_client_class:
        mock_client_class.return_value = _mock_client(
            side_effect=httpx.ConnectError("Connection refused"),
        )

        with pytest.raises(UpstreamError, match="Request failed"):
            await fetch_html("https://notion.so/")


async def test__fetch_html__non_success_status(allow_public_urls) -> None:  # noqa: ANN001, ARG001
    mock_response = AsyncMock()
    mock_response.url = "https://notion.so/"
    mock_response.status_code = 503
    mock_response.is_success = False

    with patch("services.scanner.httpx.AsyncClient") as mock_client_class:
        mock_client_class.return_value = _mock_client(mock_response)

        with pytest.raises(UpstreamError, match="HTTP 503"):
            await fetch_html("https://notion.so/")


async def test__fetch_html__private_target_never_requested() -> None:
    with patch("services.scanner.httpx.AsyncClient") as mock_client_class:
        with pytest.raises(UpstreamError):
            await fetch_html("http://127.0.0.1/")

    mock_client_class.assert_not_called()


async def test__fetch_html__redirect_to_private_target_blocked() -> None:
    mock_response = AsyncMock()
    mock_response.url = "http://169.254.169.254/latest/meta-data"
    mock_response.status_code = 200
    mock_response.is_success = True

    def only_first_allowed(url: str) -> None:
        if "169.254" in url:
            raise SSRFBlockedError("blocked")

    with (
        patch("services.scanner.validate_url_not_private", side_effect=only_first_allowed),
        patch("services.scanner.httpx.AsyncClient") as mock_client_class,
    ):
        mock_client_class.return_value = _mock_client(mock_response)

        with pytest.raises(UpstreamError, match="Redirect blocked"):
            await fetch_html("https://notion.so/")


# =============================================================================
# extract_metadata
# =============================================================================


def test__extract_metadata__title_description_favicon() -> None:
    metadata = extract_metadata(NOTION_HTML, "https://notion.so/")

    assert metadata.title == "Notion – Your connected workspace"
    assert metadata.description == "A workspace for notes and docs."
    assert metadata.favicon_url == "https://notion.so/images/favicon.ico"


def test__extract_metadata__og_description_fallback() -> None:
    html = '<head><meta property="og:description" content="From OG"></head>'

    assert extract_metadata(html, "https://notion.so/").description == "From OG"


def test__extract_metadata__apple_touch_icon_absolute_href() -> None:
    html = '<head><link rel="apple-touch-icon" href="https://cdn.example.com/icon.png"></head>'

    metadata = extract_metadata(html, "https://example.com/")

    assert metadata.favicon_url == "https://cdn.example.com/icon.png"


def test__extract_metadata__empty_html_uses_defaults() -> None:
    metadata = extract_metadata("", "https://notion.so/")

    assert metadata.title is None
    assert metadata.description is None
    assert metadata.favicon_url == "https://www.google.com/s2/favicons?sz=64&domain=notion.so"


def test__extract_metadata__blank_title_is_none() -> None:
    assert extract_metadata("<title>   </title>", "https://notion.so/").title is None


# =============================================================================
# guess_category
# =============================================================================


@pytest.mark.parametrize(
    ("title", "html", "expected"),
    [
        ("Figma", "", "Design"),
        ("Trello", "", "Productivity"),
        ("Vercel", "", "Dev & Infra"),
        ("Readwise", "", "Reading"),
        ("Duolingo", "", "Education"),
        ("Spotify", "", "Music & Audio"),
        ("YouTube", "", "Video"),
        ("Example", "<p>nothing to see</p>", "Tools"),
        ("Example", "<p>Watch every video</p>", "Video"),
    ],
)
def test__guess_category(title: str, html: str, expected: str) -> None:
    assert guess_category(title, html) == expected


def test__guess_category__first_matching_rule_wins() -> None:
    # Mentions both a design and a dev keyword; Design comes first
    assert guess_category("GitHub", "<p>design systems</p>") == "Design"


def test__guess_category__only_reads_body_prefix() -> None:
    html = "x" * 50 + "spotify"

    assert guess_category("Example", html, body_prefix=50) == "Tools"
    assert guess_category("Example", html, body_prefix=100) == "Music & Audio"


# =============================================================================
# scan_website
# =============================================================================


@respx.mock
async def test__scan_website__uses_page_metadata(allow_public_urls) -> None:  # noqa: ANN001, ARG001
    route = respx.get("https://notion.so/").mock(
        return_value=httpx.Response(200, text=NOTION_HTML),
    )

    result = await scan_website("https://www.notion.so/product?utm=1")

    assert route.called
    assert result.canonical_url == "https://notion.so/"
    assert result.origin == "notion.so"
    assert result.title == "Notion – Your connected workspace"
    assert result.slug == "notion-your-connected-workspace"
    assert result.description == "A workspace for notes and docs."
    assert result.favicon_url == "https://notion.so/images/favicon.ico"
    assert result.category == "Productivity"
    assert result.error is None


@respx.mock
async def test__scan_website__unreachable_site_falls_back(allow_public_urls) -> None:  # noqa: ANN001, ARG001
    respx.get("https://notion.so/").mock(side_effect=httpx.ConnectError("refused"))

    result = await scan_website("notion.so")

    assert result.title == "notion.so"
    assert result.slug == "notion-so"
    assert result.description == default_description("notion.so")
    assert result.description.startswith("“notion.so” is a website")
    assert result.favicon_url == "https://www.google.com/s2/favicons?sz=64&domain=notion.so"
    # Category falls back to the title alone
    assert result.category == "Productivity"
    assert result.error is not None


@respx.mock
async def test__scan_website__error_status_falls_back(allow_public_urls) -> None:  # noqa: ANN001, ARG001
    respx.get("https://example.org/").mock(return_value=httpx.Response(500, text="<title>Oops</title>"))

    result = await scan_website("example.org")

    assert result.title == "example.org"
    assert result.category == "Tools"
    assert result.error == "HTTP 500"


async def test__scan_website__invalid_url() -> None:
    with pytest.raises(InvalidInputError):
        await scan_website("   ")
