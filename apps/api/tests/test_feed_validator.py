import pytest

from doppel_feed.fetcher import build_feed_url
from doppel_feed.validator import extract_username, validate_profile_url


@pytest.mark.parametrize(
    "url",
    [
        "https://letterboxd.com/someone/",
        "https://letterboxd.com/someone",
        "http://www.letterboxd.com/someone/films/",
    ],
)
def test_accepts_profile_urls(url):
    assert validate_profile_url(url) is True


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/someone/",
        "https://letterboxd.com.evil.io/someone/",
        "https://notletterboxd.com/someone/",
        "https://letterboxd.com/",
        "https://letterboxd.com",
        "ftp://letterboxd.com/someone/",
        "not a url",
        "http://[::1",
        "",
        None,
    ],
)
def test_rejects_everything_else(url):
    assert validate_profile_url(url) is False


def test_extract_username_and_feed_url():
    url = "https://letterboxd.com/someone/films/diary/"
    assert extract_username(url) == "someone"
    assert build_feed_url(url) == "https://letterboxd.com/someone/rss/"
