"""Fan-out module."""

from .orchestrator import FanOutOrchestrator, IFanOutOrchestrator

__all__ = ["FanOutOrchestrator", "IFanOutOrchestrator"]
