"""Main entry point for the Bot Council relay."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from council.api import create_fastapi_app
from council.config import Settings
from council.logging_config import setup_logging


def main():
    """Run the relay."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    settings = Settings.from_env()
    setup_logging(settings.log_level)

    app = create_fastapi_app(settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
