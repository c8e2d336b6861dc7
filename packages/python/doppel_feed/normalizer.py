from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from doppel_core.config import MAX_FEED_ITEMS
from doppel_feed.errors import NoValidRecords
from doppel_feed.schemas import FeedItem, RatingRecord

log = logging.getLogger(__name__)

UNRATED = "Watched"


def split_genres(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [g.strip() for g in raw.split(",") if g.strip()]


def format_rating(raw: str | None) -> str:
    value = (raw or "").strip()
    return f"{value}/5" if value else UNRATED


def normalize_item(item: FeedItem, genre_counts: Counter) -> RatingRecord | None:
    """
    Map one feed item to a RatingRecord, or None when it has no title.

    Genres are counted before the title check, so an untitled item still
    contributes to the genre signal.
    """
    genres = split_genres(item.film_genres)
    genre_counts.update(genres)

    title = (item.film_title or item.title or "").strip()
    if not title:
        return None

    return RatingRecord(
        title=title,
        rating=format_rating(item.member_rating),
        year=(item.film_year or "").strip(),
        genres=genres,
    )


def normalize_items(
    items: Sequence[FeedItem], limit: int = MAX_FEED_ITEMS
) -> tuple[list[RatingRecord], Counter]:
    """
    Normalize the most recent `limit` items.

    Returns the surviving records (feed order) and the genre frequency table
    built over every processed item. Raises NoValidRecords when nothing
    survives.
    """
    genre_counts: Counter = Counter()
    records: list[RatingRecord] = []

    for idx, item in enumerate(items[:limit]):
        try:
            record = normalize_item(item, genre_counts)
        except Exception as e:
            log.warning("Error processing feed item %d: %s", idx, e)
            continue
        if record is None:
            log.warning("Dropping feed item %d: missing title", idx)
            continue
        records.append(record)

    if not records:
        log.error("No valid ratings found in profile")
        raise NoValidRecords("No valid ratings found in profile")

    return records, genre_counts
