"""Observer pattern for scenario execution events."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from ..harness.scenario import ScenarioResult


class StatusLevel(str, Enum):
    """Status level for scenario execution notifications."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class HarnessObserver(ABC):
    """Abstract base class for observing scenario execution events.

    Implement this interface to log, report, or display what the harness is
    doing: submissions, poll attempts, timeouts, and scenario verdicts.
    """

    @abstractmethod
    async def on_scenario_start(self, name: str, kind: str) -> None:
        """Called before a scenario submits anything.

        Args:
            name (str): Scenario name.
            kind (str): ScenarioKind value of the scenario.
        """

    @abstractmethod
    async def on_submit(self, variables: Mapping[str, Any], accepted: bool, detail: Any) -> None:
        """Called after a command submission returns or raises.

        Args:
            variables (Mapping[str, Any]): Variables sent with the command.
            accepted (bool): Whether the backend accepted the command.
            detail (Any): Response data on acceptance, rejection message otherwise.
        """

    @abstractmethod
    async def on_poll_attempt(self, key: str, attempt: int, record_count: int, elapsed: float) -> None:
        """Called after each query made while waiting for an effect."""

    @abstractmethod
    async def on_status(self, message: str, level: StatusLevel | str = StatusLevel.INFO) -> None:
        """Called for status updates during execution.

        Args:
            message (str): Human-readable status message.
            level: StatusLevel enum or string ("info", "warning", "error").
        """

    @abstractmethod
    async def on_scenario_end(self, result: "ScenarioResult") -> None:
        """Called with the verdict once a scenario finishes."""


class NoOpObserver(HarnessObserver):
    """Observer that ignores all events."""

    async def on_scenario_start(self, name: str, kind: str) -> None:
        pass

    async def on_submit(self, variables: Mapping[str, Any], accepted: bool, detail: Any) -> None:
        pass

    async def on_poll_attempt(self, key: str, attempt: int, record_count: int, elapsed: float) -> None:
        pass

    async def on_status(self, message: str, level: StatusLevel | str = StatusLevel.INFO) -> None:
        pass

    async def on_scenario_end(self, result: "ScenarioResult") -> None:
        pass
