import json
import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from doppel_core.errors import DomainError

from app.deps.deps import get_letterboxd_service
from app.deps.deps_llm import get_dialogue_streamer, get_synthesizer
from app.schemas import TwinChatRequest, TwinCreateRequest, TwinCreateResponse

router = APIRouter(prefix="/twins", tags=["twins"])

log = logging.getLogger(__name__)


@router.post("", response_model=TwinCreateResponse)
async def create_twin(
    req: TwinCreateRequest,
    letterboxd=Depends(get_letterboxd_service),
    synthesizer=Depends(get_synthesizer),
):
    """
    Build a twin from bio + Letterboxd feed (+ optional Spotify-shaped data).

    A failed or missing feed degrades to "no movie data"; only a failed
    synthesis fails the request.
    """
    film = await letterboxd.get_profile(req.letterboxd_url)

    try:
        personality = await synthesizer.synthesize(
            req.name, req.bio, film=film, music=req.spotify_data
        )
    except DomainError as e:
        raise HTTPException(status_code=e.status, detail=str(e))

    return TwinCreateResponse(personality=personality, letterboxd=film)


@router.post("/chat")
async def chat_with_twin(
    req: TwinChatRequest,
    streamer=Depends(get_dialogue_streamer),
):
    """
    Streaming chat endpoint.

    Events:
      - started: {}
      - delta: {text}
      - done / error
    """

    async def gen() -> AsyncIterator[bytes]:
        yield _sse("started", {})
        fragments = streamer.stream(req.personality, req.name, req.message, req.history)
        try:
            async for text in fragments:
                yield _sse("delta", {"text": text})
            yield _sse("done", {"ok": True})
        except Exception as e:
            log.error("Twin chat stream failed: %s", e)
            yield _sse("error", {"message": str(e)})
        finally:
            await fragments.aclose()

    return StreamingResponse(
        gen(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache, no-transform",
            "Connection": "keep-alive",
        },
    )


def _sse(event: str, data: dict | str) -> bytes:
    if isinstance(data, dict):
        payload = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    else:
        payload = data
    return f"event: {event}\ndata: {payload}\n\n".encode("utf-8")
