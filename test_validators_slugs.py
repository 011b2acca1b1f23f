"""
URL validation and slug tests.
"""

import pytest

from pagevault.core.errors import InvalidInputError
from pagevault.utils.slugs import MAX_SLUG_LENGTH, SlugAllocator, slugify_url
from pagevault.utils.validators import require_capture_url, validate_url


@pytest.mark.parametrize("url", [
    "http://example.com",
    "https://example.com/path?q=1#frag",
    "http://127.0.0.1:8080/",
    "http://localhost:3000/app",
    "https://[::1]:8443/",
    "HTTPS://Example.COM/",
    "https://bücher.de/",
    "http://例え.テスト/",
])
def test_valid_urls(url):
    is_valid, checked, error = validate_url(url)
    assert is_valid, error
    assert checked == url
    assert require_capture_url(url) == url


@pytest.mark.parametrize("url", [
    None,
    "",
    "example.com",
    "//example.com/path",
    "ftp://example.com",
    "mailto:someone@example.com",
    "http://",
    "http:///path-only",
    "http://exa mple.com",
    " https://example.com",
    "http://[::1",
    "http://example.com:99999/",
    "http://-bad-.example/",
    "http://a..b.example/",
])
def test_invalid_urls(url):
    is_valid, checked, error = validate_url(url)
    assert not is_valid
    assert checked == ""
    assert error
    with pytest.raises(InvalidInputError):
        require_capture_url(url)


def test_invalid_input_error_is_a_value_error():
    with pytest.raises(ValueError):
        require_capture_url("ftp://example.com")


@pytest.mark.parametrize("url,slug", [
    ("https://example.com/", "example-com"),
    ("HTTP://Example.com/Some/Path", "example-com-some-path"),
    ("https://example.com/a--b__c", "example-com-a-b-c"),
    ("ftp://example.com", "ftp-example-com"),
    ("https://", ""),
])
def test_slugify_url(url, slug):
    assert slugify_url(url) == slug


def test_slugify_truncates():
    slug = slugify_url("https://example.com/" + "a" * 300)
    assert len(slug) == MAX_SLUG_LENGTH


def test_allocator_suffixes_collisions():
    slugs = SlugAllocator()
    assert slugs.allocate("page") == "page"
    assert slugs.allocate("page") == "page-2"
    assert slugs.allocate("page") == "page-3"
    assert slugs.allocate("page-2") == "page-2-2"


def test_allocator_falls_back_for_empty_slug():
    slugs = SlugAllocator()
    assert slugs.allocate("") == "snapshot"
    assert slugs.allocate_for_url("https://") == "snapshot-2"


def test_allocator_keeps_suffixed_slugs_within_limit():
    slugs = SlugAllocator()
    base = "x" * MAX_SLUG_LENGTH
    first = slugs.allocate(base)
    second = slugs.allocate(base)
    third = slugs.allocate(base)
    assert first == base
    assert second == "x" * (MAX_SLUG_LENGTH - 2) + "-2"
    assert third == "x" * (MAX_SLUG_LENGTH - 2) + "-3"
    assert len({first, second, third}) == 3
