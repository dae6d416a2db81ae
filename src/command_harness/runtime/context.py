"""Runtime context for scenario execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping

from .events import HarnessObserver, StatusLevel

if TYPE_CHECKING:
    from ..harness.scenario import ScenarioResult


@dataclass
class RunContext:
    """Observers and metadata shared by the scenarios of one run.

    Holds no scenario state; every scenario generates its own correlation id.
    """

    observers: list[HarnessObserver] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def add_observer(self, observer: HarnessObserver) -> None:
        """Add an event observer."""
        self.observers.append(observer)

    def remove_observer(self, observer: HarnessObserver) -> None:
        """Remove an event observer."""
        if observer in self.observers:
            self.observers.remove(observer)

    async def notify_scenario_start(self, name: str, kind: str) -> None:
        for observer in self.observers:
            await observer.on_scenario_start(name, kind)

    async def notify_submit(self, variables: Mapping[str, Any], accepted: bool, detail: Any) -> None:
        for observer in self.observers:
            await observer.on_submit(variables, accepted, detail)

    async def notify_poll_attempt(self, key: str, attempt: int, record_count: int, elapsed: float) -> None:
        for observer in self.observers:
            await observer.on_poll_attempt(key, attempt, record_count, elapsed)

    async def notify_status(self, message: str, level: StatusLevel | str = StatusLevel.INFO) -> None:
        for observer in self.observers:
            await observer.on_status(message, level)

    async def notify_scenario_end(self, result: "ScenarioResult") -> None:
        for observer in self.observers:
            await observer.on_scenario_end(result)
