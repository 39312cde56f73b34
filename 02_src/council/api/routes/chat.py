"""Streaming chat relay route."""

from typing import Literal

import httpx
from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.background import BackgroundTask

from ...logging_config import get_logger
from ...relay import IUpstream

logger = get_logger(__name__)


class ChatMessageModel(BaseModel):
    """One role/content message."""

    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Request model for a streamed chat completion."""

    model_config = ConfigDict(populate_by_name=True)

    model: str | None = None
    messages: list[ChatMessageModel] | None = None
    web_search: bool = Field(False, alias="webSearch")


def create_chat_router(upstream: IUpstream) -> APIRouter:
    """Create chat relay router."""
    router = APIRouter(prefix="/api", tags=["chat"])

    @router.post("/chat")
    async def chat(request: ChatRequest):
        """Forward the request upstream and pipe the event stream back verbatim."""
        if not request.model or request.messages is None:
            return JSONResponse(
                {"error": "Model and messages are required"}, status_code=400
            )

        if not upstream.configured:
            return JSONResponse(
                {"error": "API key not configured on server"}, status_code=500
            )

        messages = [m.model_dump() for m in request.messages]
        try:
            response = await upstream.open_stream(
                request.model, messages, web_search=request.web_search
            )
        except httpx.HTTPError as e:
            logger.error("Upstream request failed: %s", e, exc_info=True)
            return JSONResponse(
                {"error": str(e) or type(e).__name__}, status_code=500
            )

        if not response.is_success:
            body = await response.aread()
            await response.aclose()
            text = body.decode("utf-8", errors="replace")
            logger.warning(
                "Upstream rejected request: %s",
                response.status_code,
                extra={"context": {"model": request.model, "body": text[:500]}},
            )
            return JSONResponse(
                {"error": f"OpenRouter API error: {response.status_code} - {text}"},
                status_code=response.status_code,
            )

        # Closing the upstream response also runs when the client disconnects
        return StreamingResponse(
            response.aiter_raw(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
            background=BackgroundTask(response.aclose),
        )

    return router
