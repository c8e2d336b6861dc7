from __future__ import annotations

from typing import Sequence

from doppel_core.config import MAX_PROMPT_TRACKS
from doppel_feed.schemas import MusicProfile, TasteProfile
from doppel_twin.schemas import ChatTurn, PersonalityDescriptor

NO_FILM_DATA = "No movie preference data available."
NO_MUSIC_DATA = "No music preference data available."

EVIDENCE_ONLY_RULES = """Create a personality that matches the user's actual traits and interests.
Only include interests and preferences that are evidenced in the provided data.
Do not make assumptions about media preferences unless specifically shown."""

DESCRIPTOR_FORMAT = """Respond with a single JSON object in this format: {
  "interests": string[],
  "style": string,
  "traits": string[]
}"""

UNFAMILIAR_TOPIC_RULE = (
    "If asked about preferences or interests not in your profile, acknowledge "
    "that you're still learning about those aspects instead of making something up"
)


def _join(values: Sequence[str] | None) -> str:
    return ", ".join(values or [])


# ---------- Evidence sections ----------
def film_section(film: TasteProfile | None, heading: str = "Movie Preferences") -> str:
    # "error" and "not_provided" both collapse to the placeholder
    if film is None or not film.is_usable:
        return NO_FILM_DATA
    ratings = _join([f"{r.title} ({r.rating})" for r in film.recent_ratings])
    return "\n".join(
        [
            f"{heading}:",
            f"- Recent ratings: {ratings}",
            f"- Favorite genres: {_join(film.favorite_genres)}",
            f"- Favorite films: {_join(film.favorite_films)}",
        ]
    )


def music_section(music: MusicProfile | None, heading: str = "Music Preferences") -> str:
    if music is None or not music.is_usable:
        return NO_MUSIC_DATA
    tracks = _join(
        [f"{t.name} by {t.artist}" for t in (music.recent_tracks or [])[:MAX_PROMPT_TRACKS]]
    )
    return "\n".join(
        [
            f"{heading}:",
            f"- Top artists: {_join(music.top_artists)}",
            f"- Favorite genres: {_join(music.top_genres)}",
            f"- Recent tracks: {tracks}",
        ]
    )


# ---------- Synthesis ----------
def build_insight_prompt(
    bio: str,
    film: TasteProfile | None = None,
    music: MusicProfile | None = None,
) -> str:
    return "\n".join(
        [
            "Analyze this person's personality based on:",
            f"Bio: {bio.strip()}",
            "",
            film_section(film, "Their movie preferences"),
            "",
            music_section(music, "Their music preferences"),
            "",
            "Ground every observation in the bio and preferences above; "
            "do not invent tastes that are not listed.",
        ]
    )


def build_descriptor_prompt(
    name: str,
    bio: str,
    film: TasteProfile | None,
    music: MusicProfile | None,
    insight: str,
) -> str:
    return "\n".join(
        [
            f"Generate a digital twin personality for {name} based on:",
            f"Bio: {bio.strip()}",
            "",
            film_section(film),
            "",
            music_section(music),
            "",
            f"Personality Analysis: {insight.strip()}",
            "",
            EVIDENCE_ONLY_RULES,
            "",
            DESCRIPTOR_FORMAT,
        ]
    )


# ---------- Dialogue ----------
def _render_turn(turn: ChatTurn | str, name: str) -> str:
    if isinstance(turn, str):
        return turn
    speaker = name if turn.role == "assistant" else "User"
    return f"{speaker}: {turn.content}"


def build_dialogue_prompt(
    personality: PersonalityDescriptor,
    name: str,
    message: str,
    history: Sequence[ChatTurn | str] = (),
) -> str:
    """Role-play prompt for one reply; `history` is oldest-first."""
    context = "\n".join(_render_turn(t, name) for t in history) or "(none)"
    return f"""You are roleplaying as {name}, a digital twin of the user. Stay in character throughout the conversation.

Your Personality Profile:
- Name: {name}
- Key Interests: {_join(personality.interests)}
- Communication Style: {personality.style}
- Notable Traits: {_join(personality.traits)}

Additional Context About You:
{personality.personality_insight}

Your Role:
- You are a digital twin who shares the exact same traits and interests as shown in your profile
- Only discuss topics and preferences that are evidenced in your profile
- {UNFAMILIAR_TOPIC_RULE}
- Stay consistently in character, using your defined communication style

Previous messages for context:
{context}

Remember to maintain your personality while responding to:
{message}"""
