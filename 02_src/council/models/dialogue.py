"""Dialogue-related data models."""

from dataclasses import dataclass
from enum import Enum

from ..config import MAX_TURNS, MIN_TURNS
from ..errors import ValidationError


class Speaker(str, Enum):
    """Who produced a transcript record."""

    USER = "user"
    A = "A"
    B = "B"
    SYSTEM_ERROR = "system-error"

    @property
    def other(self) -> "Speaker":
        if self is Speaker.A:
            return Speaker.B
        if self is Speaker.B:
            return Speaker.A
        raise ValueError(f"{self.value} has no counterpart")

    @classmethod
    def for_turn(cls, turn_index: int) -> "Speaker":
        """A speaks on even 0-based turn indices, B on odd ones."""
        return cls.A if turn_index % 2 == 0 else cls.B


class DialogueStatus(str, Enum):
    """Lifecycle of a dialogue run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    ERRORED = "errored"

    @property
    def terminal(self) -> bool:
        return self in (
            DialogueStatus.COMPLETED,
            DialogueStatus.STOPPED,
            DialogueStatus.ERRORED,
        )


@dataclass(frozen=True)
class DialogueTurnRecord:
    """One entry of the transcript. The seed prompt is turn 0."""

    turn_index: int
    speaker: Speaker
    model_id: str | None
    content: str


def clamp_turns(max_turns: int) -> int:
    """Clamp a requested turn count into [MIN_TURNS, MAX_TURNS]."""
    return max(MIN_TURNS, min(MAX_TURNS, int(max_turns)))


@dataclass(frozen=True)
class DialogueConfig:
    """Settings of one dialogue run."""

    model_a: str
    model_b: str
    initial_prompt: str
    max_turns: int = 10

    def validated(self) -> "DialogueConfig":
        """Return a copy with a clamped turn count, or raise ValidationError."""
        if not self.model_a or not self.model_b:
            raise ValidationError("Please select both models")
        if not self.initial_prompt or not self.initial_prompt.strip():
            raise ValidationError("Please enter an initial prompt")
        return DialogueConfig(
            model_a=self.model_a,
            model_b=self.model_b,
            initial_prompt=self.initial_prompt.strip(),
            max_turns=clamp_turns(self.max_turns),
        )

    def model_for(self, speaker: Speaker) -> str:
        return self.model_a if speaker is Speaker.A else self.model_b


@dataclass(frozen=True)
class DialogueSnapshot:
    """Read-only view of a dialogue run handed to observers."""

    status: DialogueStatus
    transcript: tuple[DialogueTurnRecord, ...]
    current_turn: int
    current_speaker: Speaker | None
    streaming_text: str
    max_turns: int
