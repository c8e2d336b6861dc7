from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Sequence

import anyio

from doppel_core.config import DIALOGUE_MODEL
from doppel_twin.errors import DialogueFailure
from doppel_twin.schemas import ChatTurn, PersonalityDescriptor
from doppel_twin.twin_prompts import build_dialogue_prompt

if TYPE_CHECKING:
    from doppel_core.llm_client import LlmClient

log = logging.getLogger(__name__)


class FragmentStream:
    """
    Forward-only async iterator over reply fragments.

    A producer task pulls deltas from the backend and pushes them through an
    unbuffered memory channel; the consumer receives them in arrival order.
    The producer starts on the first `__anext__`, and a backend error is
    raised to the consumer (as DialogueFailure) after the fragments that
    arrived before it. Not restartable.
    """

    def __init__(self, source: AsyncIterator[str]):
        self._source = source
        self._send, self._receive = anyio.create_memory_object_stream(0)
        self._task: asyncio.Task | None = None
        self._error: BaseException | None = None
        self._closed = False

    def __aiter__(self) -> "FragmentStream":
        return self

    async def __anext__(self) -> str:
        if self._closed:
            raise StopAsyncIteration
        if self._task is None:
            self._task = asyncio.create_task(self._produce())

        try:
            return await self._receive.receive()
        except anyio.EndOfStream:
            await self._task
            await self.aclose()
            if self._error is not None:
                raise DialogueFailure(f"Reply stream failed: {self._error}") from self._error
            raise StopAsyncIteration

    async def _produce(self) -> None:
        async with self._send:
            try:
                async for fragment in self._source:
                    if fragment:
                        await self._send.send(fragment)
            except anyio.BrokenResourceError:
                # consumer closed early
                pass
            except Exception as e:
                log.error("Dialogue backend stream failed: %s", e)
                self._error = e

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._receive.aclose()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        # release the backend response held by an unfinished source
        close_source = getattr(self._source, "aclose", None)
        if close_source is not None:
            await close_source()


class DialogueStreamer:
    def __init__(self, llm_client: "LlmClient", model: str = DIALOGUE_MODEL):
        self.llm = llm_client
        self.model = model

    def stream(
        self,
        personality: PersonalityDescriptor,
        name: str,
        message: str,
        history: Sequence[ChatTurn | str] = (),
    ) -> FragmentStream:
        """Start a new in-character reply. Each call is a fresh backend request."""
        prompt = build_dialogue_prompt(personality, name, message, history)
        source = self.llm.chat_stream(
            messages=[{"role": "user", "content": prompt}],
            model=self.model,
        )
        return FragmentStream(source)

    async def reply(
        self,
        personality: PersonalityDescriptor,
        name: str,
        message: str,
        history: Sequence[ChatTurn | str] = (),
    ) -> str:
        parts: list[str] = []
        async for fragment in self.stream(personality, name, message, history):
            parts.append(fragment)
        return "".join(parts)
