"""FastAPI relay application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import Settings
from ..logging_config import get_logger
from ..relay import IUpstream, OpenRouterClient
from .routes import chat, health

logger = get_logger(__name__)


def create_fastapi_app(
    settings: Settings | None = None,
    upstream: IUpstream | None = None,
) -> FastAPI:
    """Create and configure the relay application."""
    settings = settings or Settings.from_env()
    upstream = upstream or OpenRouterClient.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage relay lifespan."""
        if not upstream.configured:
            logger.warning("OPENROUTER_API_KEY is not set; /api/chat will answer 500")
        logger.info("Relay started")
        yield
        await upstream.aclose()
        logger.info("Relay stopped")

    fastapi_app = FastAPI(
        title="Bot Council Relay",
        description="Credential-holding pass-through for streamed chat completions",
        version="0.1.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(health.create_health_router(settings.models_path))
    fastapi_app.include_router(chat.create_chat_router(upstream))

    return fastapi_app
