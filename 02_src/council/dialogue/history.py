"""Projection of a dialogue transcript into one speaker's message list.

The transcript is the only source of truth; the message list for a turn
is recomputed from it every time, never patched incrementally.
"""

from typing import Iterable, Sequence

from ..models import ChatMessage, DialogueTurnRecord, Role, Speaker

TOPIC_MARKER = "[Discussion Topic]:"
RECORD_SEPARATOR = "\n\n---\n\n"


def relabel(
    record: DialogueTurnRecord, speaker: Speaker, other_name: str
) -> ChatMessage | None:
    """Map one record to a role from `speaker`'s point of view."""
    if record.speaker is Speaker.USER:
        return ChatMessage(Role.USER, f"{TOPIC_MARKER} {record.content}")
    if record.speaker is speaker:
        return ChatMessage(Role.ASSISTANT, record.content)
    if record.speaker is Speaker.SYSTEM_ERROR:
        return None
    return ChatMessage(Role.USER, f"[{other_name}]: {record.content}")


def coalesce(messages: Iterable[ChatMessage]) -> list[ChatMessage]:
    """Merge consecutive same-role messages, joined by a blank line."""
    merged: list[ChatMessage] = []
    for message in messages:
        if not message.content:
            continue
        if merged and merged[-1].role is message.role:
            previous = merged.pop()
            message = ChatMessage(
                previous.role, f"{previous.content}\n\n{message.content}"
            )
        merged.append(message)
    return merged


def build_turn_messages(
    transcript: Sequence[DialogueTurnRecord],
    speaker: Speaker,
    other_name: str,
    instruction: str,
) -> list[ChatMessage]:
    """System instruction first, then the coalesced, relabeled transcript."""
    relabeled = (relabel(record, speaker, other_name) for record in transcript)
    body = coalesce(m for m in relabeled if m is not None)
    return [ChatMessage(Role.SYSTEM, instruction), *body]


def export_text(transcript: Sequence[DialogueTurnRecord], display_name) -> str:
    """Plain-text rendering of a transcript for copying."""
    blocks = []
    for record in transcript:
        if record.speaker is Speaker.USER:
            blocks.append(f"[Initial Prompt]\n{record.content}")
        elif record.speaker is Speaker.SYSTEM_ERROR:
            blocks.append(record.content)
        else:
            name = display_name(record.model_id)
            blocks.append(f"[Model {record.speaker.value}: {name}]\n{record.content}")
    return RECORD_SEPARATOR.join(blocks)
