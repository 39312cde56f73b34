"""Single-response streamer: one model call, start to finish."""

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, Sequence

import httpx

from ..errors import TransportError
from ..logging_config import get_logger
from ..models import ChatMessage
from .cancellation import CancellationToken
from .decoder import iter_fragments

logger = get_logger(__name__)

CHAT_PATH = "/api/chat"


async def _noop(*args) -> None:
    return None


@dataclass
class StreamCallbacks:
    """Incremental reporting hooks for one stream."""

    on_start: Callable[[], Awaitable[None]] = _noop
    on_delta: Callable[[str], Awaitable[None]] = _noop
    on_complete: Callable[[str], Awaitable[None]] = _noop
    on_error: Callable[[str], Awaitable[None]] = _noop


class IResponseStreamer(Protocol):
    """Drives one streamed model call and reports through callbacks."""

    async def stream(
        self,
        model_id: str,
        messages: Sequence[ChatMessage],
        token: CancellationToken,
        callbacks: StreamCallbacks,
        web_search: bool = False,
    ) -> None:
        """Stream a completion. Never raises for expected failures."""
        ...


class ResponseStreamer:
    """Streams chat completions from the relay.

    Exactly one of on_complete/on_error fires per call, unless the token
    is cancelled, in which case neither does.
    """

    def __init__(self, client: httpx.AsyncClient, path: str = CHAT_PATH):
        self._client = client
        self._path = path

    async def stream(
        self,
        model_id: str,
        messages: Sequence[ChatMessage],
        token: CancellationToken,
        callbacks: StreamCallbacks,
        web_search: bool = False,
    ) -> None:
        """Stream a completion. Never raises for expected failures."""
        if token.cancelled:
            return

        work = asyncio.create_task(
            self._run(model_id, messages, token, callbacks, web_search)
        )
        waiter = asyncio.create_task(token.wait())
        try:
            done, _ = await asyncio.wait(
                {work, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            work.cancel()
            waiter.cancel()
            raise

        if work in done:
            waiter.cancel()
            work.result()
            return

        # Cancelled mid-flight: abort the request and the read loop
        work.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await work
        logger.info("Stream for %s cancelled", model_id)

    async def _run(
        self,
        model_id: str,
        messages: Sequence[ChatMessage],
        token: CancellationToken,
        callbacks: StreamCallbacks,
        web_search: bool,
    ) -> None:
        logger.info(
            "Starting stream for %s",
            model_id,
            extra={"context": {"model": model_id, "messages": len(messages)}},
        )
        try:
            full_text = await self._request(
                model_id, messages, token, callbacks, web_search
            )
        except TransportError as e:
            if token.cancelled:
                return
            logger.warning("Stream for %s failed: %s", model_id, e)
            await callbacks.on_error(str(e))
            return

        if full_text is None or token.cancelled:
            return

        logger.info(
            "Stream for %s completed",
            model_id,
            extra={"context": {"model": model_id, "chars": len(full_text)}},
        )
        await callbacks.on_complete(full_text)

    async def _request(
        self,
        model_id: str,
        messages: Sequence[ChatMessage],
        token: CancellationToken,
        callbacks: StreamCallbacks,
        web_search: bool,
    ) -> str | None:
        """Issue the request and pump fragments. None means cancelled."""
        payload = {
            "model": model_id,
            "messages": [m.to_dict() for m in messages],
            "webSearch": web_search,
        }
        parts: list[str] = []

        try:
            async with self._client.stream("POST", self._path, json=payload) as response:
                if not response.is_success:
                    body = await response.aread()
                    raise TransportError.from_response(
                        response.status_code, body.decode("utf-8", errors="replace")
                    )

                if token.cancelled:
                    return None
                await callbacks.on_start()

                async for fragment in iter_fragments(response.aiter_bytes()):
                    if token.cancelled:
                        return None
                    parts.append(fragment)
                    await callbacks.on_delta(fragment)

        except httpx.HTTPError as e:
            raise TransportError(f"Network error: {str(e) or type(e).__name__}") from e

        return "".join(parts)
