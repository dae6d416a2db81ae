"""command_harness: scenario verification for commands of event-sourced backends."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("command-harness")
except PackageNotFoundError:
    __version__ = "dev"

from .errors import (
    CommandRejectedError,
    HarnessConfigurationError,
    HarnessError,
    ScenarioFailure,
    SchemaError,
)
from .harness import (
    CommandHarness,
    CommandPlan,
    HarnessEnvironment,
    ResultBundle,
    Scenario,
    ScenarioKind,
    ScenarioResult,
    build_scenarios,
    load_plan_directory,
    load_plan_file,
    run_scenario,
)
from .keys import QueryKind, event_key, query_key, snapshot_key
from .mutation import CommandMutation, build_command_mutation
from .polling import PollOutcome, PollState, has_records, next_state, poll_until
from .runtime import ConsoleObserver, HarnessObserver, NoOpObserver, RunContext, StatusLevel
from .schema import ExpectedEvent, ExpectedWork, FieldSpec, PrimitiveType, WorkExpectation
from .settings import HarnessSettings
from .variables import VariableSets, build_variable_sets

__all__ = [
    "__version__",
    # Errors
    "HarnessError",
    "SchemaError",
    "HarnessConfigurationError",
    "CommandRejectedError",
    "ScenarioFailure",
    # Schema
    "FieldSpec",
    "PrimitiveType",
    "ExpectedEvent",
    "ExpectedWork",
    "WorkExpectation",
    # Generators
    "VariableSets",
    "build_variable_sets",
    "CommandMutation",
    "build_command_mutation",
    # Keys
    "QueryKind",
    "query_key",
    "snapshot_key",
    "event_key",
    # Polling
    "PollState",
    "PollOutcome",
    "next_state",
    "poll_until",
    "has_records",
    # Harness
    "CommandPlan",
    "HarnessEnvironment",
    "Scenario",
    "ScenarioKind",
    "ScenarioResult",
    "build_scenarios",
    "run_scenario",
    "CommandHarness",
    "ResultBundle",
    "load_plan_file",
    "load_plan_directory",
    # Runtime
    "RunContext",
    "HarnessObserver",
    "NoOpObserver",
    "StatusLevel",
    "ConsoleObserver",
    # Config
    "HarnessSettings",
]
