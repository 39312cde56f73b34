"""SynthesisRequester: merge several panel answers into one."""

from typing import Protocol, Sequence

from ..errors import ValidationError
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import ChatMessage, PanelResult, Role, StreamState, Topic
from ..streaming import CancellationToken, IResponseStreamer, stream_into_slot

logger = get_logger(__name__)

SYNTHESIS_INSTRUCTION = (
    "Synthesize the responses above into a single, definitive answer. "
    "Combine the best insights from each response, correct any errors or "
    "inaccuracies you find, and make the final answer as comprehensive and "
    "coherent as possible."
)

SEPARATOR = "\n\n---\n\n"


def build_synthesis_prompt(
    results: Sequence[PanelResult], original_prompt: str | None = None
) -> str:
    """Compose one instruction embedding every panel's name and full text."""
    sections = []
    if original_prompt and original_prompt.strip():
        sections.append(f"[Original Prompt]:\n{original_prompt}")

    sections.append("The following responses were given by different AI models.")
    for result in results:
        sections.append(f"[Response from {result.display_name}]:\n{result.text}")

    sections.append(SYNTHESIS_INSTRUCTION)
    return SEPARATOR.join(sections)


class ISynthesisRequester(Protocol):
    """Streams a combined answer from completed panel results."""

    async def synthesize(
        self, results: Sequence[PanelResult], original_prompt: str | None = None
    ) -> StreamState:
        """Run one synthesis stream and return its final state."""
        ...


class SynthesisRequester:
    """Drives one stream against the designated synthesis model."""

    SOURCE = "synthesis"
    SLOT_ID = "synthesis"

    def __init__(
        self,
        streamer: IResponseStreamer,
        event_bus: IEventBus,
        synthesis_model: str,
    ):
        self._streamer = streamer
        self._event_bus = event_bus
        self._synthesis_model = synthesis_model
        self._state = StreamState(slot_id=self.SLOT_ID)
        self._token: CancellationToken | None = None

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state.in_flight

    @property
    def synthesis_model(self) -> str:
        return self._synthesis_model

    async def synthesize(
        self, results: Sequence[PanelResult], original_prompt: str | None = None
    ) -> StreamState:
        """Run one synthesis stream and return its final state."""
        if not results:
            raise ValidationError("No completed responses to synthesize")
        if self.busy:
            raise ValidationError("Synthesis already in progress")

        prompt = build_synthesis_prompt(results, original_prompt)
        self._token = CancellationToken()

        logger.info(
            "Synthesizing %s responses with %s",
            len(results),
            self._synthesis_model,
            extra={"context": {"sources": [r.display_name for r in results]}},
        )

        try:
            # Web search stays off for synthesis regardless of the fan-out flag
            return await stream_into_slot(
                self._streamer,
                self._state.reset(),
                self._synthesis_model,
                [ChatMessage(role=Role.USER, content=prompt)],
                self._token,
                self._publish,
                web_search=False,
            )
        finally:
            self._token = None

    async def cancel(self) -> None:
        if self._token:
            self._token.cancel()

    async def _publish(self, state: StreamState) -> None:
        self._state = state
        await self._event_bus.emit(
            Topic.SYNTHESIS, self.SOURCE, {"slot_id": self.SLOT_ID, "state": state}
        )
