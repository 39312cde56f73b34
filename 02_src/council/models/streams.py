"""Per-slot stream state models."""

from dataclasses import dataclass, replace
from enum import Enum


class StreamStatus(str, Enum):
    """Lifecycle of one model call."""

    IDLE = "idle"
    LOADING = "loading"
    STREAMING = "streaming"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class StreamState:
    """Immutable snapshot of one slot's stream.

    A new snapshot is produced on every transition; observers never see a
    shared mutable object.
    """

    slot_id: str
    model_id: str | None = None
    accumulated_text: str = ""
    status: StreamStatus = StreamStatus.IDLE
    error_detail: str | None = None

    @property
    def in_flight(self) -> bool:
        return self.status in (StreamStatus.LOADING, StreamStatus.STREAMING)

    def loading(self, model_id: str) -> "StreamState":
        return StreamState(
            slot_id=self.slot_id, model_id=model_id, status=StreamStatus.LOADING
        )

    def streaming(self) -> "StreamState":
        return replace(self, status=StreamStatus.STREAMING)

    def append(self, fragment: str) -> "StreamState":
        return replace(
            self,
            accumulated_text=self.accumulated_text + fragment,
            status=StreamStatus.STREAMING,
        )

    def done(self, full_text: str) -> "StreamState":
        return replace(self, accumulated_text=full_text, status=StreamStatus.DONE)

    def failed(self, message: str) -> "StreamState":
        return replace(self, status=StreamStatus.ERROR, error_detail=message)

    def reset(self) -> "StreamState":
        return StreamState(slot_id=self.slot_id)


@dataclass(frozen=True)
class PanelResult:
    """A completed, non-error panel response paired with its label."""

    display_name: str
    text: str
