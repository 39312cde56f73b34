"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"
DEFAULT_MODELS_PATH = DATA_DIR / "models.txt"

DEFAULT_OPENROUTER_URL = "https://openrouter.ai/api/v1"
DEFAULT_SYNTHESIS_MODEL = "anthropic/claude-3.5-sonnet"

# Dialogue bounds
MIN_TURNS = 1
MAX_TURNS = 50
DEFAULT_MAX_TURNS = 10
TURN_DELAY_SECONDS = 0.5

DEFAULT_PANEL_COUNT = 4


PathLike = Union[str, Path]


def resolve_path(env_value: PathLike | None, default: Path) -> Path:
    """Resolve a configured path, relative paths against the project root."""
    if not env_value:
        return default

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


@dataclass
class Settings:
    """Process settings, read from the environment."""

    openrouter_api_key: str | None = None
    openrouter_url: str = DEFAULT_OPENROUTER_URL
    app_url: str = "http://localhost:5174"
    app_title: str = "Bot Council"
    api_host: str = "localhost"
    api_port: int = 3001
    relay_url: str = "http://localhost:3001"
    synthesis_model: str = DEFAULT_SYNTHESIS_MODEL
    models_path: Path = DEFAULT_MODELS_PATH
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:5174"]
    )
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        api_host = os.getenv("API_HOST", "localhost")
        api_port = int(os.getenv("API_PORT", "3001"))
        cors = os.getenv("CORS_ORIGINS")

        settings = cls(
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY") or None,
            openrouter_url=os.getenv("OPENROUTER_URL", DEFAULT_OPENROUTER_URL),
            app_url=os.getenv("APP_URL", "http://localhost:5174"),
            app_title=os.getenv("APP_TITLE", "Bot Council"),
            api_host=api_host,
            api_port=api_port,
            relay_url=os.getenv("RELAY_URL", f"http://{api_host}:{api_port}"),
            synthesis_model=os.getenv("SYNTHESIS_MODEL", DEFAULT_SYNTHESIS_MODEL),
            models_path=resolve_path(os.getenv("MODELS_FILE"), DEFAULT_MODELS_PATH),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
        if cors:
            settings.cors_origins = [o.strip() for o in cors.split(",") if o.strip()]
        return settings
