from __future__ import annotations

from typing import Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator
from pydantic.alias_generators import to_camel

ProfileStatus = Literal["success", "error", "not_provided"]

_TASTE_FIELDS = ("recent_ratings", "favorite_genres", "favorite_films")


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


# ---------- Parsed feed (intermediate schema) ----------
class FeedItem(_CamelModel):
    """One <item> of the RSS channel, keyed by local tag name."""

    title: str | None = None
    film_title: str | None = None
    film_year: str | None = None
    member_rating: str | None = None
    film_genres: str | None = None


class FeedChannel(_CamelModel):
    title: str | None = None
    link: str | None = None
    items: list[FeedItem] = Field(default_factory=list)


# ---------- Normalized taste profile ----------
class RatingRecord(_CamelModel):
    title: str = Field(..., min_length=1)
    rating: str  # "N/5" or "Watched"
    year: str = ""
    genres: tuple[str, ...] = ()


class TasteProfile(_CamelModel):
    status: ProfileStatus
    recent_ratings: tuple[RatingRecord, ...] = ()
    favorite_genres: tuple[str, ...] = ()
    favorite_films: tuple[str, ...] = ()
    error: str | None = None

    @model_validator(mode="after")
    def _error_iff_failed(self):
        if (self.status == "error") != (self.error is not None):
            raise ValueError("error must be set iff status is 'error'")
        return self

    @model_serializer(mode="wrap")
    def _drop_absent_fields(self, handler):
        # error only on failures; taste fields only on success
        data = handler(self)
        dropped = [] if self.status == "success" else list(_TASTE_FIELDS)
        if self.error is None:
            dropped.append("error")
        for name in dropped:
            data.pop(name, None)
            data.pop(to_camel(name), None)
        return data

    @classmethod
    def success(
        cls,
        *,
        recent_ratings: Sequence[RatingRecord],
        favorite_genres: Sequence[str],
        favorite_films: Sequence[str],
    ) -> "TasteProfile":
        return cls(
            status="success",
            recent_ratings=tuple(recent_ratings),
            favorite_genres=tuple(favorite_genres),
            favorite_films=tuple(favorite_films),
        )

    @classmethod
    def failure(cls, message: str) -> "TasteProfile":
        return cls(status="error", error=message or "Unknown error occurred")

    @classmethod
    def not_provided(cls) -> "TasteProfile":
        return cls(status="not_provided")

    @property
    def is_usable(self) -> bool:
        return self.status == "success"


# ---------- Music profile (produced elsewhere, read-only here) ----------
class MusicTrack(_CamelModel):
    name: str
    artist: str


class MusicProfile(_CamelModel):
    status: ProfileStatus
    top_artists: list[str] | None = None
    top_genres: list[str] | None = None
    recent_tracks: list[MusicTrack] | None = None
    error: str | None = None

    @property
    def is_usable(self) -> bool:
        return self.status == "success"
