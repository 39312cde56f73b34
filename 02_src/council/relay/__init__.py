"""Relay module."""

from .openrouter import IUpstream, OpenRouterClient

__all__ = ["IUpstream", "OpenRouterClient"]
