"""DialogueEngine: an automated, turn-taking conversation between two models."""

import asyncio
from typing import Protocol

from ..catalog import ModelCatalog
from ..config import TURN_DELAY_SECONDS
from ..errors import CancellationError, ValidationError
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import (
    DialogueConfig,
    DialogueSnapshot,
    DialogueStatus,
    DialogueTurnRecord,
    Speaker,
    Topic,
)
from ..streaming import CancellationToken, IResponseStreamer, StreamCallbacks
from .history import build_turn_messages, export_text
from .prompts import system_prompt

logger = get_logger(__name__)


class IDialogueEngine(Protocol):
    """Runs one two-model dialogue at a time."""

    async def start(self, config: DialogueConfig) -> asyncio.Task:
        """Validate the config and launch the run in the background."""
        ...

    async def run(self, config: DialogueConfig) -> DialogueStatus:
        """Run a dialogue to its terminal state."""
        ...

    async def stop(self) -> None:
        """Cancel the running dialogue and wait for it to settle."""
        ...

    def snapshot(self) -> DialogueSnapshot:
        """Read-only view of the current run."""
        ...


class DialogueEngine:
    """Alternates turns between Model A and Model B.

    State machine: idle -> running -> completed | stopped | errored. The
    transcript is owned by the run task; observers get DialogueSnapshot
    copies through the event bus after every mutation.
    """

    SOURCE = "dialogue"

    def __init__(
        self,
        streamer: IResponseStreamer,
        event_bus: IEventBus,
        catalog: ModelCatalog | None = None,
        turn_delay: float = TURN_DELAY_SECONDS,
    ):
        self._streamer = streamer
        self._event_bus = event_bus
        self._catalog = catalog or ModelCatalog()
        self._turn_delay = turn_delay

        self._status = DialogueStatus.IDLE
        self._config: DialogueConfig | None = None
        self._transcript: list[DialogueTurnRecord] = []
        self._current_turn = 0
        self._current_speaker: Speaker | None = None
        self._streaming_text = ""
        self._token: CancellationToken | None = None
        self._task: asyncio.Task | None = None

    @property
    def status(self) -> DialogueStatus:
        return self._status

    @property
    def running(self) -> bool:
        return self._status is DialogueStatus.RUNNING

    @property
    def transcript(self) -> tuple[DialogueTurnRecord, ...]:
        return tuple(self._transcript)

    @property
    def current_turn(self) -> int:
        return self._current_turn

    @property
    def current_speaker(self) -> Speaker | None:
        return self._current_speaker

    @property
    def streaming_text(self) -> str:
        return self._streaming_text

    @property
    def progress(self) -> float:
        """Fraction of the configured turns reached so far."""
        if not self._config:
            return 0.0
        return self._current_turn / self._config.max_turns

    def snapshot(self) -> DialogueSnapshot:
        """Read-only view of the current run."""
        return DialogueSnapshot(
            status=self._status,
            transcript=tuple(self._transcript),
            current_turn=self._current_turn,
            current_speaker=self._current_speaker,
            streaming_text=self._streaming_text,
            max_turns=self._config.max_turns if self._config else 0,
        )

    async def start(self, config: DialogueConfig) -> asyncio.Task:
        """Validate the config and launch the run in the background."""
        if self.running:
            raise ValidationError("A dialogue is already running")
        config = config.validated()

        self._config = config
        self._status = DialogueStatus.RUNNING
        self._transcript = [
            DialogueTurnRecord(
                turn_index=0,
                speaker=Speaker.USER,
                model_id=None,
                content=config.initial_prompt,
            )
        ]
        self._current_turn = 0
        self._current_speaker = None
        self._streaming_text = ""
        self._token = CancellationToken()

        self._task = asyncio.create_task(self._run(config, self._token))
        return self._task

    async def run(self, config: DialogueConfig) -> DialogueStatus:
        """Run a dialogue to its terminal state."""
        task = await self.start(config)
        return await task

    async def stop(self) -> None:
        """Cancel the running dialogue and wait for it to settle."""
        if self._token:
            self._token.cancel()
        if self._task:
            await asyncio.gather(self._task, return_exceptions=True)

    async def wait(self) -> DialogueStatus:
        if self._task:
            await asyncio.gather(self._task, return_exceptions=True)
        return self._status

    def clear(self) -> None:
        """Forget the last transcript. Not allowed while running."""
        if self.running:
            raise ValidationError("Cannot clear a running dialogue")
        self._transcript = []
        self._current_turn = 0
        self._streaming_text = ""
        self._status = DialogueStatus.IDLE

    def export_text(self) -> str:
        return export_text(self._transcript, self._catalog.display_name)

    async def _run(self, config: DialogueConfig, token: CancellationToken) -> DialogueStatus:
        names = {
            Speaker.A: self._catalog.display_name(config.model_a),
            Speaker.B: self._catalog.display_name(config.model_b),
        }
        logger.info(
            "Dialogue started",
            extra={
                "context": {
                    "model_a": config.model_a,
                    "model_b": config.model_b,
                    "max_turns": config.max_turns,
                }
            },
        )
        await self._publish()

        status = DialogueStatus.COMPLETED
        try:
            for turn_index in range(config.max_turns):
                token.raise_if_cancelled()

                error = await self._play_turn(config, turn_index, names, token)
                if error is not None:
                    self._transcript.append(
                        DialogueTurnRecord(
                            turn_index=turn_index + 1,
                            speaker=Speaker.SYSTEM_ERROR,
                            model_id=None,
                            content=f"Error: {error}",
                        )
                    )
                    logger.error("Dialogue turn %s failed: %s", turn_index + 1, error)
                    status = DialogueStatus.ERRORED
                    break

                # Pacing between turns; also a cancellation point
                if turn_index < config.max_turns - 1:
                    await token.sleep(self._turn_delay)

        except CancellationError:
            status = DialogueStatus.STOPPED
        except asyncio.CancelledError:
            status = DialogueStatus.STOPPED
            raise
        except Exception as e:
            logger.error("Dialogue crashed: %s", e, exc_info=True)
            self._transcript.append(
                DialogueTurnRecord(
                    turn_index=self._current_turn,
                    speaker=Speaker.SYSTEM_ERROR,
                    model_id=None,
                    content=f"Error: {e}",
                )
            )
            status = DialogueStatus.ERRORED
        finally:
            self._status = status
            self._current_speaker = None
            self._streaming_text = ""
            self._token = None
            logger.info(
                "Dialogue finished with status %s",
                status.value,
                extra={"context": {"turns": len(self._transcript) - 1}},
            )
            await self._publish()

        return status

    async def _play_turn(
        self,
        config: DialogueConfig,
        turn_index: int,
        names: dict[Speaker, str],
        token: CancellationToken,
    ) -> str | None:
        """Stream one turn and append its record. Returns an error message, if any."""
        speaker = Speaker.for_turn(turn_index)
        model_id = config.model_for(speaker)
        own_name = names[speaker]
        other_name = names[speaker.other]

        self._current_turn = turn_index + 1
        self._current_speaker = speaker
        self._streaming_text = ""
        await self._publish()

        messages = build_turn_messages(
            self._transcript,
            speaker,
            other_name,
            system_prompt(speaker, own_name, other_name),
        )
        logger.info(
            "Turn %s of %s: %s (%s) speaking",
            turn_index + 1,
            config.max_turns,
            own_name,
            speaker.value,
        )

        result: dict[str, str] = {}

        async def on_delta(fragment: str) -> None:
            self._streaming_text += fragment
            await self._publish()

        async def on_complete(full_text: str) -> None:
            result["text"] = full_text

        async def on_error(message: str) -> None:
            result["error"] = message

        await self._streamer.stream(
            model_id,
            messages,
            token,
            StreamCallbacks(on_delta=on_delta, on_complete=on_complete, on_error=on_error),
            web_search=False,
        )

        if "error" in result:
            return result["error"]
        if "text" not in result:
            token.raise_if_cancelled()
            return "Stream ended without a response"

        self._transcript.append(
            DialogueTurnRecord(
                turn_index=turn_index + 1,
                speaker=speaker,
                model_id=model_id,
                content=result["text"],
            )
        )
        self._streaming_text = ""
        await self._publish()
        return None

    async def _publish(self) -> None:
        await self._event_bus.emit(
            Topic.DIALOGUE, self.SOURCE, {"snapshot": self.snapshot()}
        )
