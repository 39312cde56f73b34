"""Core composition root and lifecycle management."""

from typing import Protocol

import httpx

from .catalog import ModelCatalog
from .config import Settings
from .dialogue import DialogueEngine
from .event_bus import EventBus
from .fanout import FanOutOrchestrator
from .logging_config import get_logger
from .models import StreamState
from .streaming import ResponseStreamer
from .synthesis import SynthesisRequester

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Cancel in-flight work and release resources."""
        ...


class Application:
    """Wires the streaming core against a running relay."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings or Settings.from_env()
        self._transport = transport

        # Components (will be initialized in start())
        self._catalog: ModelCatalog | None = None
        self._event_bus: EventBus | None = None
        self._http: httpx.AsyncClient | None = None
        self._streamer: ResponseStreamer | None = None
        self._fanout: FanOutOrchestrator | None = None
        self._synthesis: SynthesisRequester | None = None
        self._dialogue: DialogueEngine | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Catalog and EventBus (no dependencies)
        self._catalog = ModelCatalog.load(self._settings.models_path)
        self._event_bus = EventBus()

        # 2. Relay client and streamer
        self._http = httpx.AsyncClient(
            base_url=self._settings.relay_url,
            timeout=httpx.Timeout(None, connect=10.0),
            transport=self._transport,
        )
        self._streamer = ResponseStreamer(self._http)
        logger.info("Streamer initialized against %s", self._settings.relay_url)

        # 3. Orchestrators (depend on streamer, EventBus, catalog)
        self._fanout = FanOutOrchestrator(
            self._streamer, self._event_bus, self._catalog
        )
        self._synthesis = SynthesisRequester(
            self._streamer, self._event_bus, self._settings.synthesis_model
        )
        self._dialogue = DialogueEngine(
            self._streamer, self._event_bus, self._catalog
        )
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Cancel in-flight work and release resources."""
        if self._dialogue:
            await self._dialogue.stop()
        if self._synthesis:
            await self._synthesis.cancel()
        if self._fanout:
            await self._fanout.cancel()
        if self._http:
            await self._http.aclose()
            logger.info("Relay client closed")

    async def synthesize(self) -> StreamState:
        """Synthesize the completed fan-out panels."""
        return await self.synthesis.synthesize(
            self.fanout.completed_results(), self.fanout.last_prompt
        )

    @property
    def catalog(self) -> ModelCatalog:
        if self._catalog is None:
            raise RuntimeError("Application not started")
        return self._catalog

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            raise RuntimeError("Application not started")
        return self._event_bus

    @property
    def fanout(self) -> FanOutOrchestrator:
        if self._fanout is None:
            raise RuntimeError("Application not started")
        return self._fanout

    @property
    def synthesis(self) -> SynthesisRequester:
        if self._synthesis is None:
            raise RuntimeError("Application not started")
        return self._synthesis

    @property
    def dialogue(self) -> DialogueEngine:
        if self._dialogue is None:
            raise RuntimeError("Application not started")
        return self._dialogue
