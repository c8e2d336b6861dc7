from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from doppel_feed.schemas import MusicProfile, TasteProfile
from doppel_twin.schemas import ChatTurn, PersonalityDescriptor


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LetterboxdProfileRequest(BaseModel):
    url: str = Field(..., examples=["https://letterboxd.com/someone/"])


class LetterboxdParseRequest(BaseModel):
    xml: str = Field(..., min_length=1)


class TwinCreateRequest(_CamelModel):
    name: str
    bio: str = ""
    letterboxd_url: str | None = None
    spotify_data: MusicProfile | None = None

    @field_validator("name")
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class TwinCreateResponse(_CamelModel):
    personality: PersonalityDescriptor
    letterboxd: TasteProfile


class TwinChatRequest(_CamelModel):
    name: str
    personality: PersonalityDescriptor
    message: str
    history: list[ChatTurn | str] = Field(default_factory=list, examples=[[]])

    @field_validator("message")
    def validate_message(cls, v):
        if not v.strip():
            raise ValueError("Message cannot be empty")
        return v
