"""Pytest configuration and fixtures."""

import asyncio
import json
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from council.catalog import ModelCatalog  # noqa: E402
from council.event_bus import EventBus  # noqa: E402
from council.models import BusMessage, ChatMessage, Topic  # noqa: E402


CATALOG_TEXT = """# test catalog
openai/gpt-4o, GPT-4o
anthropic/claude-3.5-sonnet, Claude 3.5 Sonnet

google/gemini-pro, Gemini Pro
meta/llama-3, Llama 3
"""


@dataclass
class StreamCall:
    """One recorded streamer invocation."""

    model_id: str
    messages: list[ChatMessage]
    web_search: bool


class FakeStreamer:
    """Scripted stand-in for ResponseStreamer.

    Each call takes the next entry of `script` (a reply string, or an
    Exception whose text is reported through on_error); without a script
    it answers from `replies` or a default text. With `blocking` set, the
    stream pauses after its first fragment until released or cancelled.
    """

    def __init__(self, replies=None, errors=None, script=None, blocking=False):
        self.calls: list[StreamCall] = []
        self.replies: dict[str, str] = replies or {}
        self.errors: dict[str, str] = errors or {}
        self.script: list = list(script or [])
        self.blocking = blocking
        self.release = asyncio.Event()
        self.first_delta = asyncio.Event()

    async def stream(self, model_id, messages, token, callbacks, web_search=False):
        self.calls.append(StreamCall(model_id, list(messages), web_search))
        if token.cancelled:
            return

        await callbacks.on_start()

        if self.script:
            outcome = self.script.pop(0)
        elif model_id in self.errors:
            outcome = RuntimeError(self.errors[model_id])
        else:
            outcome = self.replies.get(model_id, f"reply {len(self.calls)} from {model_id}")

        if isinstance(outcome, Exception):
            await callbacks.on_error(str(outcome))
            return

        half = len(outcome) // 2
        await callbacks.on_delta(outcome[:half])
        self.first_delta.set()

        if self.blocking:
            while not token.cancelled and not self.release.is_set():
                await asyncio.sleep(0.005)
            if token.cancelled:
                return

        await callbacks.on_delta(outcome[half:])
        await callbacks.on_complete(outcome)


class Recorder:
    """Collects every BusMessage published on a topic."""

    def __init__(self):
        self.messages: list[BusMessage] = []

    async def __call__(self, message: BusMessage) -> None:
        self.messages.append(message)


@pytest.fixture
def catalog():
    """Catalog with four models."""
    return ModelCatalog.from_text(CATALOG_TEXT)


@pytest.fixture
def event_bus():
    """Create a fresh EventBus."""
    return EventBus()


@pytest.fixture
def fake_streamer():
    """Scripted streamer; tests adjust its replies and errors."""
    return FakeStreamer()


@pytest.fixture
def panel_recorder(event_bus):
    recorder = Recorder()
    event_bus.subscribe(Topic.PANEL, recorder)
    return recorder


@pytest.fixture
def dialogue_recorder(event_bus):
    recorder = Recorder()
    event_bus.subscribe(Topic.DIALOGUE, recorder)
    return recorder


def build_sse(*fragments: str, done: bool = True) -> bytes:
    """Build an SSE body carrying the given content fragments."""
    lines = [
        "data: " + json.dumps({"choices": [{"delta": {"content": f}}]}, ensure_ascii=False) + "\n\n"
        for f in fragments
    ]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


@pytest.fixture
def sse():
    """SSE body builder."""
    return build_sse


@pytest.fixture
def make_streamer():
    """Factory for custom FakeStreamer instances."""
    return FakeStreamer
