from typing import TYPE_CHECKING, cast

from fastapi import Request

from app.deps.deps import _get_state_attr

if TYPE_CHECKING:
    from doppel_twin.dialogue import DialogueStreamer
    from doppel_twin.synthesizer import PersonalitySynthesizer


def get_synthesizer(request: Request) -> "PersonalitySynthesizer":
    """
    FastAPI dependency that returns the shared PersonalitySynthesizer.
    """
    return cast(
        "PersonalitySynthesizer",
        _get_state_attr(request, "synthesizer", "LLM client not initialized"),
    )


def get_dialogue_streamer(request: Request) -> "DialogueStreamer":
    return cast(
        "DialogueStreamer",
        _get_state_attr(request, "dialogue_streamer", "LLM client not initialized"),
    )
