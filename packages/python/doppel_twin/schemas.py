from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PersonalityDescriptor(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    interests: list[str] = Field(default_factory=list)
    style: str
    traits: list[str] = Field(default_factory=list)
    personality_insight: str


class DescriptorFields(BaseModel):
    """The structured part the descriptor-stage completion must return."""

    interests: list[str]
    style: str
    traits: list[str]


class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
