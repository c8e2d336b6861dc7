from __future__ import annotations

import logging

from doppel_feed.aggregator import aggregate
from doppel_feed.errors import EmptyFeed, FeedError, InvalidUrl
from doppel_feed.fetcher import LetterboxdFetcher
from doppel_feed.normalizer import normalize_items
from doppel_feed.parser import parse_feed
from doppel_feed.schemas import TasteProfile
from doppel_feed.validator import validate_profile_url

log = logging.getLogger(__name__)


class LetterboxdService:
    """
    URL -> validate -> fetch -> parse -> normalize -> aggregate -> TasteProfile.

    Every feed error kind is turned into TasteProfile(status="error"); nothing
    raised inside the pipeline crosses this boundary.
    """

    def __init__(self, fetcher: LetterboxdFetcher | None = None):
        self.fetcher = fetcher or LetterboxdFetcher()

    async def get_profile(self, url: str | None) -> TasteProfile:
        if not url or not url.strip():
            return TasteProfile.not_provided()

        url = url.strip()
        log.info("Starting Letterboxd profile fetch for %s", url)
        try:
            if not validate_profile_url(url):
                raise InvalidUrl("Invalid Letterboxd URL format")
            xml_text = await self.fetcher.fetch(url)
            profile = self._build(xml_text)
        except FeedError as e:
            log.warning("Letterboxd profile unavailable (%s): %s", e.code, e)
            return TasteProfile.failure(e.message)
        except Exception as e:
            log.exception("Failed to fetch Letterboxd RSS")
            return TasteProfile.failure(f"{e} ({type(e).__name__})")

        log.info(
            "Letterboxd profile ready: %d ratings, %d favorite films",
            len(profile.recent_ratings),
            len(profile.favorite_films),
        )
        return profile

    def parse_document(self, xml_text: str) -> TasteProfile:
        """Build a profile from an already-fetched RSS document."""
        try:
            return self._build(xml_text)
        except FeedError as e:
            log.warning("Letterboxd document rejected (%s): %s", e.code, e)
            return TasteProfile.failure(e.message)

    @staticmethod
    def _build(xml_text: str) -> TasteProfile:
        channel = parse_feed(xml_text)
        if not channel.items:
            raise EmptyFeed("No activity found in profile")
        records, genre_counts = normalize_items(channel.items)
        return aggregate(records, genre_counts)
