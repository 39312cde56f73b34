"""Message-related data models."""

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Chat roles understood by the backend."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ModelDescriptor:
    """A selectable model: opaque provider id plus a display name."""

    id: str
    display_name: str


@dataclass(frozen=True)
class ChatMessage:
    """A single message in a request's conversation."""

    role: Role
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}
