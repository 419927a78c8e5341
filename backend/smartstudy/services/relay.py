"""
Chat relay to a local Ollama model.

Forwards a single user message to Ollama's /api/chat with streaming enabled
and re-emits the reply as ChatEvents:
  - one non-terminal event per non-empty content chunk
  - exactly one terminal event (done=True), either the final
    cumulative response or an error report

The relay is stateless and never touches study data.
"""
from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

import httpx

from smartstudy.config import settings
from smartstudy.models.chat import ChatEvent

logger = logging.getLogger(__name__)

UPSTREAM_ERROR = "Error talking to Ollama"


class UpstreamFailure(Exception):
    """Raised when Ollama answers with an error or an unreadable stream."""


async def _ollama_chunks(
    client: httpx.AsyncClient, message: str
) -> AsyncIterator[dict]:
    payload = {
        "model": settings.chat_model,
        "messages": [{"role": "user", "content": message}],
        "stream": True,
    }
    async with client.stream(
        "POST",
        f"{settings.ollama_base_url}/api/chat",
        json=payload,
        timeout=settings.relay_timeout,
    ) as res:
        if res.status_code != 200:
            body = (await res.aread()).decode(errors="replace")
            raise UpstreamFailure(f"Ollama returned {res.status_code}: {body[:200]}")
        async for line in res.aiter_lines():
            if not line.strip():
                continue
            try:
                chunk = json.loads(line)
            except json.JSONDecodeError as e:
                raise UpstreamFailure(f"Malformed chunk from Ollama: {line[:200]}") from e
            if chunk.get("error"):
                raise UpstreamFailure(str(chunk["error"]))
            yield chunk


async def stream_chat(
    message: str,
    client: httpx.AsyncClient | None = None,
) -> AsyncIterator[ChatEvent]:
    """Yield ChatEvents for the model's reply to `message`. Never raises."""
    logger.info("Relaying chat message (%d chars)", len(message))
    full_response = ""
    owns_client = client is None
    client = client or httpx.AsyncClient()
    try:
        async with aclosing(_ollama_chunks(client, message)) as chunks:
            async for chunk in chunks:
                content = (chunk.get("message") or {}).get("content") or ""
                if content:
                    full_response += content
                    yield ChatEvent(content=content, full_response=full_response)
                if chunk.get("done"):
                    break
    except Exception as e:
        logger.error("Chat relay failed: %s", e)
        yield ChatEvent(error=UPSTREAM_ERROR, detail=str(e), done=True)
        return
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Chat relay complete (%d chars)", len(full_response))
    yield ChatEvent(content="", full_response=full_response, done=True)
