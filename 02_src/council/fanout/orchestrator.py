"""FanOutOrchestrator: one prompt, N independently streamed panels."""

import asyncio
from collections.abc import Mapping, Sequence
from typing import Protocol

from ..catalog import ModelCatalog
from ..config import DEFAULT_PANEL_COUNT
from ..errors import ValidationError
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import ChatMessage, PanelResult, Role, StreamState, StreamStatus, Topic
from ..streaming import CancellationToken, IResponseStreamer, stream_into_slot

logger = get_logger(__name__)

Selections = Mapping[str, str] | Sequence[str]


class IFanOutOrchestrator(Protocol):
    """Sends one prompt to every selected panel in parallel."""

    @property
    def busy(self) -> bool:
        """True while any panel is loading or streaming."""
        ...

    async def send(
        self, prompt: str, selections: Selections, web_search: bool = False
    ) -> list[str]:
        """Start one stream per selected panel. Returns the started panel ids."""
        ...

    async def cancel(self, panel_id: str | None = None) -> None:
        """Cancel one panel, or all of them."""
        ...

    async def wait(self) -> None:
        """Wait for every in-flight panel to reach a terminal state."""
        ...


class FanOutOrchestrator:
    """Runs one ResponseStreamer per panel with per-panel failure isolation."""

    SOURCE = "fanout"

    def __init__(
        self,
        streamer: IResponseStreamer,
        event_bus: IEventBus,
        catalog: ModelCatalog | None = None,
        panel_count: int = DEFAULT_PANEL_COUNT,
    ):
        if panel_count < 1:
            raise ValueError("panel_count must be positive")

        self._streamer = streamer
        self._event_bus = event_bus
        self._catalog = catalog or ModelCatalog()

        self._panel_ids = [f"panel-{i}" for i in range(1, panel_count + 1)]
        self._states: dict[str, StreamState] = {
            panel_id: StreamState(slot_id=panel_id) for panel_id in self._panel_ids
        }
        self._tokens: dict[str, CancellationToken] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._last_prompt: str | None = None

    @property
    def panel_ids(self) -> list[str]:
        return list(self._panel_ids)

    @property
    def states(self) -> dict[str, StreamState]:
        """Snapshot of every panel's state, keyed by panel id."""
        return dict(self._states)

    @property
    def last_prompt(self) -> str | None:
        return self._last_prompt

    @property
    def busy(self) -> bool:
        return any(state.in_flight for state in self._states.values())

    def state(self, panel_id: str) -> StreamState:
        return self._states[panel_id]

    def label(self, panel_id: str) -> str:
        """Panel heading: the model's display name, else `LLM <n>`."""
        model_id = self._states[panel_id].model_id
        if model_id:
            return self._catalog.display_name(model_id)
        return f"LLM {self._panel_ids.index(panel_id) + 1}"

    def completed_results(self) -> list[PanelResult]:
        """Completed, non-error panels in panel order, ready for synthesis."""
        return [
            PanelResult(
                display_name=self._catalog.display_name(state.model_id),
                text=state.accumulated_text,
            )
            for state in (self._states[p] for p in self._panel_ids)
            if state.status is StreamStatus.DONE
        ]

    async def send(
        self, prompt: str, selections: Selections, web_search: bool = False
    ) -> list[str]:
        """Start one stream per selected panel. Returns the started panel ids."""
        if not prompt or not prompt.strip():
            raise ValidationError("Please enter a prompt")
        if self.busy:
            raise ValidationError("A request is already in flight")

        selected = self._resolve_selections(selections)
        if not selected:
            raise ValidationError("Please select at least one model")

        self._last_prompt = prompt
        messages = [ChatMessage(role=Role.USER, content=prompt)]

        logger.info(
            "Fanning out prompt to %s panels",
            len(selected),
            extra={"context": {"panels": selected, "web_search": web_search}},
        )

        for panel_id, model_id in selected.items():
            token = CancellationToken()
            self._tokens[panel_id] = token
            # Mark loading before the task runs so busy is true immediately
            self._states[panel_id] = self._states[panel_id].loading(model_id)
            self._tasks[panel_id] = asyncio.create_task(
                self._run_panel(panel_id, model_id, messages, token, web_search)
            )

        return list(selected)

    async def cancel(self, panel_id: str | None = None) -> None:
        """Cancel one panel, or all of them."""
        panel_ids = [panel_id] if panel_id else list(self._tasks)
        tasks = []
        for pid in panel_ids:
            token = self._tokens.get(pid)
            if token:
                token.cancel()
            task = self._tasks.get(pid)
            if task:
                tasks.append(task)

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def wait(self) -> None:
        """Wait for every in-flight panel to reach a terminal state."""
        tasks = list(self._tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _resolve_selections(self, selections: Selections) -> dict[str, str]:
        if isinstance(selections, Mapping):
            pairs = list(selections.items())
        else:
            if len(selections) > len(self._panel_ids):
                raise ValidationError(
                    f"Got {len(selections)} selections for {len(self._panel_ids)} panels"
                )
            pairs = list(zip(self._panel_ids, selections))

        selected: dict[str, str] = {}
        for panel_id, model_id in pairs:
            if panel_id not in self._states:
                raise ValidationError(f"Unknown panel: {panel_id}")
            if model_id:
                selected[panel_id] = model_id
        return selected

    async def _run_panel(
        self,
        panel_id: str,
        model_id: str,
        messages: list[ChatMessage],
        token: CancellationToken,
        web_search: bool,
    ) -> None:
        async def publish(state: StreamState) -> None:
            self._states[panel_id] = state
            await self._event_bus.emit(
                Topic.PANEL, self.SOURCE, {"panel_id": panel_id, "state": state}
            )

        try:
            final = await stream_into_slot(
                self._streamer,
                self._states[panel_id].reset(),
                model_id,
                messages,
                token,
                publish,
                web_search=web_search,
            )
            logger.info("Panel %s finished with status %s", panel_id, final.status.value)
        except Exception as e:
            # Isolate unexpected failures to this panel
            logger.error("Panel %s crashed: %s", panel_id, e, exc_info=True)
            await publish(self._states[panel_id].failed(str(e)))
        finally:
            if self._tasks.get(panel_id) is asyncio.current_task():
                self._tasks.pop(panel_id, None)
                self._tokens.pop(panel_id, None)
