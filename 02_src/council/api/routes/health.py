"""Health and catalog routes."""

from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


def create_health_router(models_path: Path) -> APIRouter:
    """Create health and catalog router."""
    router = APIRouter(tags=["health"])

    @router.get("/api/health", response_model=StatusResponse)
    async def health() -> dict:
        """Liveness probe."""
        return {"status": "ok"}

    @router.get("/models.txt", response_class=PlainTextResponse)
    async def models_catalog() -> str:
        """Serve the model catalog file verbatim."""
        try:
            return Path(models_path).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail="Model catalog not found")

    return router
