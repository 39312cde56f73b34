"""Synthesis module."""

from .requester import (
    SYNTHESIS_INSTRUCTION,
    ISynthesisRequester,
    SynthesisRequester,
    build_synthesis_prompt,
)

__all__ = [
    "SYNTHESIS_INSTRUCTION",
    "ISynthesisRequester",
    "SynthesisRequester",
    "build_synthesis_prompt",
]
