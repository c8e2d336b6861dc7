from urllib.parse import urlparse

from doppel_core.config import LETTERBOXD_HOST


def _host_matches(hostname: str | None) -> bool:
    if not hostname:
        return False
    host = hostname.lower()
    return host == LETTERBOXD_HOST or host == f"www.{LETTERBOXD_HOST}"


def validate_profile_url(url: str) -> bool:
    """True when `url` is a letterboxd.com URL with a profile slug. Never raises."""
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except (TypeError, ValueError, AttributeError):
        return False

    if parsed.scheme not in ("http", "https"):
        return False
    if not _host_matches(hostname):
        return False
    segments = parsed.path.split("/")
    return len(segments) >= 2 and bool(segments[1].strip())


def extract_username(url: str) -> str:
    return urlparse(url).path.split("/")[1]
