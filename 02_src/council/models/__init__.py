"""Core data models for Bot Council."""

from .bus import BusMessage, Topic
from .dialogue import (
    DialogueConfig,
    DialogueSnapshot,
    DialogueStatus,
    DialogueTurnRecord,
    Speaker,
)
from .messages import ChatMessage, ModelDescriptor, Role
from .streams import PanelResult, StreamState, StreamStatus

__all__ = [
    # Messages
    "ChatMessage",
    "ModelDescriptor",
    "Role",
    # Streams
    "StreamState",
    "StreamStatus",
    "PanelResult",
    # Dialogue
    "DialogueConfig",
    "DialogueSnapshot",
    "DialogueStatus",
    "DialogueTurnRecord",
    "Speaker",
    # Bus
    "BusMessage",
    "Topic",
]
