from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from doppel_core.config import CHAT_COMPLETION_MODEL
from doppel_core.llm_client import first_message_content
from doppel_feed.schemas import MusicProfile, TasteProfile
from doppel_twin.errors import SynthesisFailure
from doppel_twin.schemas import DescriptorFields, PersonalityDescriptor
from doppel_twin.twin_prompts import build_descriptor_prompt, build_insight_prompt

if TYPE_CHECKING:
    from doppel_core.llm_client import LlmClient

log = logging.getLogger(__name__)


def _strip_fences(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[-1].rsplit("```", 1)[0].strip()
    return text


def parse_descriptor_fields(raw: str) -> DescriptorFields:
    """Validate the descriptor-stage JSON. Raises SynthesisFailure."""
    text = _strip_fences(raw)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        log.warning("Descriptor stage returned non-JSON: %s", text[:200])
        raise SynthesisFailure("Personality descriptor was not valid JSON") from e
    try:
        return DescriptorFields.model_validate(data)
    except ValidationError as e:
        log.warning("Descriptor stage returned unexpected shape: %s", e)
        raise SynthesisFailure("Personality descriptor is missing required fields") from e


class PersonalitySynthesizer:
    """
    Two sequential completions: a free-text insight, then the structured
    descriptor. A descriptor is all-or-nothing; any failure raises
    SynthesisFailure.
    """

    def __init__(self, llm_client: "LlmClient", model: str = CHAT_COMPLETION_MODEL):
        self.llm = llm_client
        self.model = model

    async def _complete(self, stage: str, prompt: str, **kwargs) -> str:
        try:
            resp = await self.llm.chat(
                messages=[{"role": "user", "content": prompt}],
                model=self.model,
                **kwargs,
            )
        except Exception as e:
            log.error("%s stage failed: %s", stage, e)
            raise SynthesisFailure(f"{stage} generation failed: {e}") from e

        content = first_message_content(resp)
        if not content.strip():
            raise SynthesisFailure(f"{stage} generation returned no content")
        return content

    async def analyze(
        self,
        bio: str,
        film: TasteProfile | None = None,
        music: MusicProfile | None = None,
    ) -> str:
        return await self._complete("Insight", build_insight_prompt(bio, film, music))

    async def synthesize(
        self,
        name: str,
        bio: str,
        film: TasteProfile | None = None,
        music: MusicProfile | None = None,
    ) -> PersonalityDescriptor:
        insight = await self.analyze(bio, film, music)

        raw = await self._complete(
            "Descriptor",
            build_descriptor_prompt(name, bio, film, music, insight),
            response_format={"type": "json_object"},
        )
        fields = parse_descriptor_fields(raw)

        log.info(
            "Synthesized personality for %s: %d interests, %d traits",
            name,
            len(fields.interests),
            len(fields.traits),
        )
        return PersonalityDescriptor(
            interests=fields.interests,
            style=fields.style,
            traits=fields.traits,
            personality_insight=insight,
        )
