from types import SimpleNamespace
from typing import Any, Dict, List
from xml.sax.saxutils import escape

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def anyio_backend():
    return "asyncio"


# ---------- RSS documents ----------
def _tag(name: str, value: str | None) -> str:
    if value is None:
        return ""
    return f"<{name}>{escape(value)}</{name}>"


def make_rss(items: List[Dict[str, Any]]) -> str:
    """
    Build a Letterboxd-style RSS document. Item keys: title, film_title,
    year, rating, genres. Missing keys produce no element.
    """
    body = []
    for item in items:
        rating = item.get("rating")
        body.append(
            "<item>"
            + _tag("title", item.get("title"))
            + _tag("letterboxd:filmTitle", item.get("film_title"))
            + _tag("letterboxd:filmYear", item.get("year"))
            + _tag("letterboxd:memberRating", None if rating is None else str(rating))
            + _tag("letterboxd:filmGenres", item.get("genres"))
            + "</item>"
        )
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<rss version="2.0" xmlns:letterboxd="https://letterboxd.com">'
        "<channel><title>Letterboxd - someone</title>"
        "<link>https://letterboxd.com/someone/</link>"
        + "".join(body)
        + "</channel></rss>"
    )


@pytest.fixture
def rss():
    return make_rss


# ---------- Fake LLM backend ----------
def _completion(content: str | None):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


class FakeLlmClient:
    """
    Stand-in for LlmClient. `chat` pops scripted replies in order (an
    Exception instance is raised instead of returned); `chat_stream` yields
    scripted fragments, then raises `stream_error` if set.
    """

    def __init__(
        self,
        replies: List[Any] | None = None,
        fragments: List[str] | None = None,
        stream_error: Exception | None = None,
    ):
        self.replies = list(replies or [])
        self.fragments = list(fragments or [])
        self.stream_error = stream_error
        self.calls: List[Dict[str, Any]] = []
        self.stream_calls: List[Dict[str, Any]] = []

    async def chat(self, *, messages, model=None, **kwargs):
        self.calls.append({"messages": messages, "model": model, **kwargs})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return _completion(reply)

    async def chat_stream(self, *, messages, model=None, **kwargs):
        self.stream_calls.append({"messages": messages, "model": model, **kwargs})
        for fragment in self.fragments:
            yield fragment
        if self.stream_error is not None:
            raise self.stream_error


@pytest.fixture
def fake_llm():
    return FakeLlmClient


# ---------- API ----------
class FakeLetterboxdService:
    def __init__(self, profile=None):
        self.profile = profile
        self.urls: List[Any] = []

    async def get_profile(self, url):
        from doppel_feed.schemas import TasteProfile

        self.urls.append(url)
        if not url:
            return TasteProfile.not_provided()
        return self.profile or TasteProfile.failure("Invalid Letterboxd URL format")

    def parse_document(self, xml_text):
        from doppel_feed.letterboxd_service import LetterboxdService

        return LetterboxdService().parse_document(xml_text)


@pytest.fixture()
def api():
    """
    Returns a factory: api(letterboxd=..., synthesizer=..., streamer=...)
    -> TestClient with those dependencies overridden.
    """
    from app.main import app  # type: ignore
    from app.deps.deps import get_letterboxd_service  # type: ignore
    from app.deps.deps_llm import get_dialogue_streamer, get_synthesizer  # type: ignore

    def _build(letterboxd=None, synthesizer=None, streamer=None) -> TestClient:
        app.dependency_overrides[get_letterboxd_service] = lambda: (
            letterboxd or FakeLetterboxdService()
        )
        if synthesizer is not None:
            app.dependency_overrides[get_synthesizer] = lambda: synthesizer
        if streamer is not None:
            app.dependency_overrides[get_dialogue_streamer] = lambda: streamer
        return TestClient(app)

    try:
        yield _build
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def fake_letterboxd():
    return FakeLetterboxdService
