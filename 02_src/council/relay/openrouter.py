"""Upstream client for the OpenRouter chat completion API."""

from typing import Protocol

import httpx

from ..config import Settings
from ..logging_config import get_logger

logger = get_logger(__name__)

COMPLETIONS_PATH = "/chat/completions"
WEB_SEARCH_PLUGIN = {"id": "web"}


class IUpstream(Protocol):
    """Credential-holding access to the model provider."""

    @property
    def configured(self) -> bool:
        """True when a credential is available."""
        ...

    async def open_stream(
        self, model: str, messages: list[dict], web_search: bool = False
    ) -> httpx.Response:
        """Start a streaming completion; the caller must close the response."""
        ...

    async def aclose(self) -> None:
        """Release the HTTP client."""
        ...


class OpenRouterClient:
    """Forwards chat requests to OpenRouter with the server-side API key."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        app_url: str,
        app_title: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._app_url = app_url
        self._app_title = app_title
        # No read timeout: a live stream may idle between tokens
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(None, connect=10.0),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "OpenRouterClient":
        return cls(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_url,
            app_url=settings.app_url,
            app_title=settings.app_title,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    @staticmethod
    def build_payload(model: str, messages: list[dict], web_search: bool = False) -> dict:
        payload = {"model": model, "messages": messages, "stream": True}
        if web_search:
            payload["plugins"] = [WEB_SEARCH_PLUGIN]
        return payload

    async def open_stream(
        self, model: str, messages: list[dict], web_search: bool = False
    ) -> httpx.Response:
        """Start a streaming completion; the caller must close the response."""
        if not self._api_key:
            raise RuntimeError("OPENROUTER_API_KEY not configured")

        request = self._client.build_request(
            "POST",
            COMPLETIONS_PATH,
            json=self.build_payload(model, messages, web_search),
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "HTTP-Referer": self._app_url,
                "X-Title": self._app_title,
            },
        )
        logger.info(
            "Forwarding chat request",
            extra={"context": {"model": model, "messages": len(messages), "web_search": web_search}},
        )
        return await self._client.send(request, stream=True)

    async def aclose(self) -> None:
        await self._client.aclose()
