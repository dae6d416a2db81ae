"""Scenario derivation and execution for command plans."""

from .loader import load_plan_directory, load_plan_file, parse_plan
from .orchestrator import CommandHarness, ResultBundle, build_scenarios, run_scenario
from .plan import CommandPlan
from .scenario import HarnessEnvironment, Scenario, ScenarioKind, ScenarioResult

__all__ = [
    "CommandPlan",
    "HarnessEnvironment",
    "Scenario",
    "ScenarioKind",
    "ScenarioResult",
    "build_scenarios",
    "run_scenario",
    "CommandHarness",
    "ResultBundle",
    "parse_plan",
    "load_plan_file",
    "load_plan_directory",
]
