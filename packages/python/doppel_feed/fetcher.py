from __future__ import annotations

import logging

import httpx

from doppel_core.config import (
    BROWSER_USER_AGENT,
    FEED_TIMEOUT_S,
    LETTERBOXD_RSS_TEMPLATE,
    RSS_ACCEPT_HEADER,
)
from doppel_feed.errors import FetchFailure
from doppel_feed.validator import extract_username

log = logging.getLogger(__name__)


def build_feed_url(profile_url: str) -> str:
    return LETTERBOXD_RSS_TEMPLATE.format(username=extract_username(profile_url))


class LetterboxdFetcher:
    """
    Single best-effort GET of a member's RSS feed. No retries.

    Pass `client` to reuse a connection pool (or a MockTransport in tests);
    otherwise a short-lived client is opened per fetch.
    """

    HEADERS = {
        "User-Agent": BROWSER_USER_AGENT,
        "Accept": RSS_ACCEPT_HEADER,
    }

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = FEED_TIMEOUT_S,
    ):
        self.client = client
        self.timeout = timeout

    async def fetch(self, profile_url: str) -> str:
        rss_url = build_feed_url(profile_url)
        log.info("Fetching RSS feed from %s", rss_url)

        try:
            if self.client is not None:
                response = await self._get(self.client, rss_url)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._get(client, rss_url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            log.warning("Letterboxd feed timed out: %s", rss_url)
            raise FetchFailure(
                f"Timed out after {self.timeout:g}s fetching Letterboxd feed"
            ) from e
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            log.warning("Letterboxd feed returned HTTP %s: %s", code, rss_url)
            raise FetchFailure(f"Letterboxd responded with status {code}") from e
        except httpx.RequestError as e:
            log.error("Failed to fetch Letterboxd RSS: %s", e)
            raise FetchFailure(f"Failed to fetch Letterboxd feed: {e}") from e

        return response.text

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        return await client.get(
            url,
            headers=self.HEADERS,
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
        )
