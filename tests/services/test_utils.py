"""Tests for service-layer utility functions."""
import pytest

from services.exceptions import InvalidInputError
from services.utils import (
    escape_ilike,
    matches_search,
    normalize_search,
    normalize_to_homepage,
    random_suffix,
    slugify,
)


# =============================================================================
# normalize_to_homepage
# =============================================================================


@pytest.mark.parametrize(
    ("url", "canonical_url", "origin"),
    [
        ("https://www.notion.so/product/ai?x=1#top", "https://notion.so/", "notion.so"),
        ("notion.so", "https://notion.so/", "notion.so"),
        ("http://Figma.com/files", "https://figma.com/", "figma.com"),
        ("https://docs.github.com/en", "https://docs.github.com/", "docs.github.com"),
        ("  www.example.org  ", "https://example.org/", "example.org"),
    ],
)
def test__normalize_to_homepage__collapses_to_homepage(
    url: str, canonical_url: str, origin: str,
) -> None:
    normalized = normalize_to_homepage(url)
    assert normalized.canonical_url == canonical_url
    assert normalized.origin == origin


def test__normalize_to_homepage__only_leading_www_is_stripped() -> None:
    assert normalize_to_homepage("https://wwwx.example.com").origin == "wwwx.example.com"
    assert normalize_to_homepage("https://a.www.example.com").origin == "a.www.example.com"


@pytest.mark.parametrize("url", ["", "   ", "https://", "https:///path-only"])
def test__normalize_to_homepage__rejects_urls_without_hostname(url: str) -> None:
    with pytest.raises(InvalidInputError):
        normalize_to_homepage(url)


# =============================================================================
# slugify
# =============================================================================


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Notion", "notion"),
        ("Notion HQ", "notion-hq"),
        ("  Dev & Infra!! ", "dev-infra"),
        ("--already-slugged--", "already-slugged"),
        ("Café Olé", "caf-ol"),
        ("!!!", ""),
    ],
)
def test__slugify(value: str, expected: str) -> None:
    assert slugify(value) == expected


def test__random_suffix__is_lowercase_alphanumeric() -> None:
    suffix = random_suffix()
    assert len(suffix) == 4
    assert suffix.isalnum()
    assert suffix == suffix.lower()


# =============================================================================
# search helpers
# =============================================================================


def test__normalize_search__blank_means_no_search() -> None:
    assert normalize_search(None) is None
    assert normalize_search("   ") is None
    assert normalize_search("  NoTion ") == "notion"


def test__escape_ilike__escapes_wildcards() -> None:
    assert escape_ilike("50%_off\\") == "50\\%\\_off\\\\"


def test__matches_search__substring_over_any_field() -> None:
    assert matches_search(None, "anything")
    assert matches_search("hq", "Notion HQ", None)
    assert matches_search("notion.so", "Title", "https://notion.so/")
    assert not matches_search("figma", "Notion", "notion.so")
