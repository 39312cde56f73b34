"""Tests for the relay FastAPI application."""

import json

import httpx
import pytest

from council.api import create_fastapi_app
from council.config import Settings
from council.relay import OpenRouterClient


class Upstream:
    """Mock OpenRouter endpoint recording the forwarded requests."""

    def __init__(self, response=None, error=None):
        self.requests: list[httpx.Request] = []
        self._response = response
        self._error = error

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error:
            raise self._error
        return self._response

    @property
    def body(self) -> dict:
        return json.loads(self.requests[-1].content)


def build_client(upstream: Upstream, api_key="sk-test", models_path=None) -> httpx.AsyncClient:
    settings = Settings(openrouter_api_key=api_key)
    if models_path is not None:
        settings.models_path = models_path
    relay = OpenRouterClient.from_settings(settings, transport=httpx.MockTransport(upstream))
    app = create_fastapi_app(settings, relay)
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://relay.test")


CHAT_BODY = {"model": "openai/gpt-4o", "messages": [{"role": "user", "content": "Hi"}]}


class TestHealth:
    """Tests for GET /api/health."""

    @pytest.mark.asyncio
    async def test_health(self):
        """Health check answers ok."""
        async with build_client(Upstream()) as client:
            response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestChatRelay:
    """Tests for POST /api/chat."""

    @pytest.mark.asyncio
    async def test_streams_upstream_body_verbatim(self, sse):
        """The upstream event stream is piped back byte for byte."""
        body = sse("Hello", " world") + b": keepalive\n\n"
        upstream = Upstream(httpx.Response(200, content=body))

        async with build_client(upstream) as client:
            response = await client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.content == body

    @pytest.mark.asyncio
    async def test_forwards_request_with_credentials(self, sse):
        """The relay injects the key and forces streaming."""
        upstream = Upstream(httpx.Response(200, content=sse("x")))

        async with build_client(upstream) as client:
            await client.post("/api/chat", json=CHAT_BODY)

        request = upstream.requests[0]
        assert request.url.path == "/api/v1/chat/completions"
        assert request.headers["authorization"] == "Bearer sk-test"
        assert request.headers["x-title"] == "Bot Council"
        assert upstream.body == {
            "model": "openai/gpt-4o",
            "messages": [{"role": "user", "content": "Hi"}],
            "stream": True,
        }

    @pytest.mark.asyncio
    async def test_web_search_adds_plugin(self, sse):
        """webSearch enables the web plugin upstream."""
        upstream = Upstream(httpx.Response(200, content=sse("x")))

        async with build_client(upstream) as client:
            await client.post("/api/chat", json={**CHAT_BODY, "webSearch": True})

        assert upstream.body["plugins"] == [{"id": "web"}]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"messages": [{"role": "user", "content": "Hi"}]},
            {"model": "openai/gpt-4o"},
            {"model": "", "messages": []},
        ],
    )
    async def test_missing_fields_rejected(self, body):
        """Requests without model or messages answer 400."""
        upstream = Upstream()
        async with build_client(upstream) as client:
            response = await client.post("/api/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Model and messages are required"}
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_missing_key(self):
        """Without a configured key the relay answers 500."""
        upstream = Upstream()
        async with build_client(upstream, api_key=None) as client:
            response = await client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 500
        assert response.json() == {"error": "API key not configured on server"}
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_upstream_error_propagated(self):
        """Provider errors keep their status and carry the provider text."""
        upstream = Upstream(httpx.Response(401, text="invalid key"))

        async with build_client(upstream) as client:
            response = await client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 401
        assert response.json() == {"error": "OpenRouter API error: 401 - invalid key"}

    @pytest.mark.asyncio
    async def test_upstream_unreachable(self):
        """Network failures upstream answer 500."""
        upstream = Upstream(error=httpx.ConnectError("no route to host"))

        async with build_client(upstream) as client:
            response = await client.post("/api/chat", json=CHAT_BODY)

        assert response.status_code == 500
        assert response.json() == {"error": "no route to host"}


class TestModelsCatalog:
    """Tests for GET /models.txt."""

    @pytest.mark.asyncio
    async def test_serves_catalog(self, tmp_path):
        """The catalog file is served as plain text."""
        path = tmp_path / "models.txt"
        path.write_text("# models\na, Alpha\n", encoding="utf-8")

        async with build_client(Upstream(), models_path=path) as client:
            response = await client.get("/models.txt")

        assert response.status_code == 200
        assert response.text == "# models\na, Alpha\n"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_missing_catalog(self, tmp_path):
        """A missing catalog answers 404."""
        async with build_client(Upstream(), models_path=tmp_path / "none.txt") as client:
            response = await client.get("/models.txt")
        assert response.status_code == 404
