"""Runtime context and event system for scenario execution."""

from .console import ConsoleObserver
from .context import RunContext
from .events import HarnessObserver, NoOpObserver, StatusLevel

__all__ = ["RunContext", "HarnessObserver", "NoOpObserver", "StatusLevel", "ConsoleObserver"]
