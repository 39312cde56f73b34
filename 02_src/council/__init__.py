"""Bot Council: multi-model streaming fan-out and dual-agent dialogue."""

from .app import Application, IApplication
from .catalog import ModelCatalog, parse_catalog
from .config import Settings
from .dialogue import DialogueEngine, IDialogueEngine
from .errors import (
    CancellationError,
    CouncilError,
    MalformedFragmentError,
    TransportError,
    ValidationError,
)
from .event_bus import EventBus, IEventBus
from .fanout import FanOutOrchestrator, IFanOutOrchestrator
from .models import (
    BusMessage,
    ChatMessage,
    DialogueConfig,
    DialogueSnapshot,
    DialogueStatus,
    DialogueTurnRecord,
    ModelDescriptor,
    PanelResult,
    Role,
    Speaker,
    StreamState,
    StreamStatus,
    Topic,
)
from .streaming import (
    CancellationToken,
    IResponseStreamer,
    ResponseStreamer,
    StreamCallbacks,
)
from .synthesis import ISynthesisRequester, SynthesisRequester

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "BusMessage",
    "ChatMessage",
    "DialogueConfig",
    "DialogueSnapshot",
    "DialogueStatus",
    "DialogueTurnRecord",
    "ModelDescriptor",
    "PanelResult",
    "Role",
    "Speaker",
    "StreamState",
    "StreamStatus",
    "Topic",
    # Errors
    "CouncilError",
    "ValidationError",
    "TransportError",
    "CancellationError",
    "MalformedFragmentError",
    # Components
    "ModelCatalog",
    "parse_catalog",
    "IEventBus",
    "EventBus",
    "CancellationToken",
    "IResponseStreamer",
    "ResponseStreamer",
    "StreamCallbacks",
    "IFanOutOrchestrator",
    "FanOutOrchestrator",
    "ISynthesisRequester",
    "SynthesisRequester",
    "IDialogueEngine",
    "DialogueEngine",
]
