"""Dialogue module."""

from .engine import DialogueEngine, IDialogueEngine
from .history import build_turn_messages, coalesce, export_text, relabel
from .prompts import system_prompt

__all__ = [
    "DialogueEngine",
    "IDialogueEngine",
    "build_turn_messages",
    "coalesce",
    "export_text",
    "relabel",
    "system_prompt",
]
