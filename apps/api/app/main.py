import logging
from contextlib import asynccontextmanager

import httpx
from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic_settings import BaseSettings, SettingsConfigDict

from doppel_core.config import (
    CHAT_COMPLETION_MODEL,
    DIALOGUE_MODEL,
    FEED_TIMEOUT_S,
)
from doppel_core.llm_client import LlmClient
from doppel_feed.fetcher import LetterboxdFetcher
from doppel_feed.letterboxd_service import LetterboxdService
from doppel_twin.dialogue import DialogueStreamer
from doppel_twin.synthesizer import PersonalitySynthesizer
from .routers import all_routers

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    app_name: str = "Doppel Twin API"
    # credentials
    openai_api_key: str | None = None
    # generation
    chat_model: str = CHAT_COMPLETION_MODEL
    dialogue_model: str = DIALOGUE_MODEL
    llm_timeout_s: float = 60.0
    # feed
    feed_timeout_s: float = FEED_TIMEOUT_S
    log_level: str = "INFO"
    # env conifg
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def _init_llm_stack(app: FastAPI) -> None:
    settings: Settings = app.state.settings
    api_key = (settings.openai_api_key or "").strip()
    if not api_key:
        log.warning("OPENAI_API_KEY missing; twin synthesis and chat are disabled")
        return

    llm = LlmClient(
        model=settings.chat_model, timeout=settings.llm_timeout_s, api_key=api_key
    )
    app.state.llm_client = llm
    app.state.synthesizer = PersonalitySynthesizer(llm, model=settings.chat_model)
    app.state.dialogue_streamer = DialogueStreamer(llm, model=settings.dialogue_model)


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_dotenv(find_dotenv(), override=False)

    settings = Settings()
    app.state.settings = settings

    logging.basicConfig(level=settings.log_level.upper())
    logging.getLogger("httpx").setLevel(logging.WARNING)

    feed_client = httpx.AsyncClient()
    app.state.letterboxd_service = LetterboxdService(
        LetterboxdFetcher(feed_client, timeout=settings.feed_timeout_s)
    )
    _init_llm_stack(app)

    try:
        yield
    finally:
        await feed_client.aclose()
        llm = getattr(app.state, "llm_client", None)
        if llm is not None:
            await llm.aclose()


app = FastAPI(title="Doppel Twin API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    s = getattr(app.state, "settings", None)
    return {"status": "ok", "service": s.app_name if s else app.title}


for r in all_routers:
    app.include_router(r)
