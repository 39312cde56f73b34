"""Observer channel data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Topic(str, Enum):
    """EventBus topics."""

    PANEL = "panel"
    SYNTHESIS = "synthesis"
    DIALOGUE = "dialogue"


@dataclass
class BusMessage:
    """A snapshot published through the EventBus."""

    id: str
    topic: Topic
    payload: dict  # varies by topic; values are immutable snapshots
    source: str  # component that published
    timestamp: datetime
