"""
Async wrapper around the OpenAI Chat Completions API, shared by the
personality synthesizer (chat) and the dialogue streamer (chat_stream).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, Optional

from openai import AsyncOpenAI

from doppel_core.config import CHAT_COMPLETION_MODEL


class LlmClient:
    """
    Thin wrapper around OpenAI's chat completion API.

    Credentials are passed in explicitly; nothing is read from process-wide
    state except the OpenAI SDK's own OPENAI_API_KEY fallback when
    ``api_key`` is None.
    """

    def __init__(
        self,
        model: str = CHAT_COMPLETION_MODEL,
        timeout: float | None = 60.0,
        api_key: str | None = None,
        max_retries: int = 2,
    ) -> None:
        client_kwargs: dict = {"timeout": timeout, "max_retries": max_retries}
        if api_key is not None:
            client_kwargs["api_key"] = api_key

        self._async_client = AsyncOpenAI(**client_kwargs)
        self._default_model = model

    # ── Async: non-streaming ──────────────────────────────────────────

    async def chat(
        self,
        *,
        messages: list[dict[str, Any]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        response_format: Optional[dict[str, Any]] = None,
    ):
        """
        Call the OpenAI chat completion endpoint.

        Returns the raw OpenAI response object.
        """
        kwargs: dict[str, Any] = dict(
            model=model or self._default_model,
            messages=messages,
            temperature=temperature,
        )

        if response_format is not None:
            kwargs["response_format"] = response_format

        resp = await self._async_client.chat.completions.create(**kwargs)
        return resp

    # ── Async: streaming ──────────────────────────────────────────────

    async def chat_stream(
        self,
        *,
        messages: list[dict[str, Any]],
        model: Optional[str] = None,
        temperature: float = 0.7,
    ) -> AsyncIterator[str]:
        """
        Stream content deltas from the OpenAI chat completion endpoint.

        Yields non-empty strings in arrival order.
        """
        kwargs: dict[str, Any] = dict(
            model=model or self._default_model,
            messages=messages,
            temperature=temperature,
            stream=True,
        )

        stream = await self._async_client.chat.completions.create(**kwargs)

        # closing the generator early closes the HTTP response too
        async with stream:
            async for chunk in stream:
                choices = getattr(chunk, "choices", None)
                if not choices:
                    continue

                delta = getattr(choices[0], "delta", None)
                if not delta:
                    continue

                content = getattr(delta, "content", None)
                if content:
                    yield content

    async def aclose(self) -> None:
        await self._async_client.close()


def first_message_content(resp: Any) -> str:
    """Pull ``choices[0].message.content`` out of a chat response, or ""."""
    choices = getattr(resp, "choices", None)
    if not choices:
        return ""
    msg = getattr(choices[0], "message", None)
    return (getattr(msg, "content", None) or "") if msg is not None else ""
