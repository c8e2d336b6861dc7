from __future__ import annotations

import re
from collections import Counter
from typing import Sequence

from doppel_core.config import (
    FAVORITE_RATING_THRESHOLD,
    MAX_FAVORITE_FILMS,
    MAX_FAVORITE_GENRES,
    MAX_RECENT_RATINGS,
)
from doppel_feed.schemas import RatingRecord, TasteProfile

_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def leading_float(value: str) -> float | None:
    """Parse the leading number: "4.5/5" -> 4.5, "Watched" -> None."""
    m = _LEADING_FLOAT.match(value or "")
    return float(m.group(1)) if m else None


def favorite_films(
    records: Sequence[RatingRecord],
    threshold: float = FAVORITE_RATING_THRESHOLD,
    limit: int = MAX_FAVORITE_FILMS,
) -> list[str]:
    # feed order (most recent first), not score order
    out: list[str] = []
    for r in records:
        score = leading_float(r.rating)
        if score is not None and score >= threshold:
            out.append(r.title)
            if len(out) >= limit:
                break
    return out


def favorite_genres(genre_counts: Counter, limit: int = MAX_FAVORITE_GENRES) -> list[str]:
    # Counter.most_common is stable: ties keep first-occurrence order
    return [genre for genre, _ in genre_counts.most_common(limit)]


def aggregate(records: Sequence[RatingRecord], genre_counts: Counter) -> TasteProfile:
    return TasteProfile.success(
        recent_ratings=records[:MAX_RECENT_RATINGS],
        favorite_genres=favorite_genres(genre_counts),
        favorite_films=favorite_films(records),
    )
