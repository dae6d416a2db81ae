"""Derive scenarios from a command plan and run them."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Mapping, Optional

from ..constants import ROLE_EMAIL_DOMAIN
from ..errors import HarnessConfigurationError, ScenarioFailure
from ..keys import event_key, snapshot_key
from ..polling import PollOutcome, has_records, poll_until
from ..runtime.events import HarnessObserver, StatusLevel
from ..schema.expectations import ExpectationKind, ExpectedEvent, ExpectedWork
from ..transport.base import CommandClient, error_message
from ..verifiers import EventVerifier, VerifierResult, WorkVerifier
from .plan import CommandPlan
from .scenario import HarnessEnvironment, Scenario, ScenarioKind, ScenarioResult


async def _submit(
    environment: HarnessEnvironment,
    client: CommandClient,
    plan: CommandPlan,
    variables: Mapping[str, Any],
) -> Any:
    """Submit the command and report the acceptance to observers."""
    data = await client.mutate(variables, plan.mutation)
    await environment.context.notify_submit(variables, True, data)
    return data


async def _expect_acceptance(
    environment: HarnessEnvironment,
    client: CommandClient,
    plan: CommandPlan,
    variables: Mapping[str, Any],
) -> Any:
    data = await _submit(environment, client, plan, variables)
    if not data:
        raise ScenarioFailure(
            f"{plan.command_name} returned no data for {dict(variables)!r}; expected a successful response."
        )
    return data


async def _expect_rejection(
    environment: HarnessEnvironment,
    client: CommandClient,
    plan: CommandPlan,
    variables: Mapping[str, Any],
    require_message: bool = True,
) -> str:
    """Submit the command and require the backend to refuse it.

    Returns:
        The rejection message
    """
    try:
        data = await client.mutate(variables, plan.mutation)
    except Exception as exc:
        message = error_message(exc)
        await environment.context.notify_submit(variables, False, message)
        if require_message and not message.strip():
            raise ScenarioFailure(
                f"{plan.command_name} rejected {dict(variables)!r} without an error message."
            ) from exc
        return message

    await environment.context.notify_submit(variables, True, data)
    raise ScenarioFailure(
        f"{plan.command_name} accepted {dict(variables)!r}; expected it to be rejected."
    )


def _primary_client(plan: CommandPlan, environment: HarnessEnvironment) -> CommandClient:
    """Client used by the non-authorization scenarios.

    Open commands use the environment's client; restricted ones act as a fresh
    identity holding the first authorized role.
    """
    if not plan.checks_authorization:
        return environment.client
    return _role_client(environment, plan.authorized_roles[0])


def _role_client(environment: HarnessEnvironment, role: str) -> CommandClient:
    provider = environment.identity_provider
    if provider is None:
        raise HarnessConfigurationError(
            f"Command is restricted to role '{role}' but no identity provider was configured."
        )
    identity = f"{environment.id_factory()}@{ROLE_EMAIL_DOMAIN}"
    return provider.client_for(provider.token_for(identity, role))


def _authorization_variables(plan: CommandPlan) -> dict[str, Any]:
    sets = plan.variable_sets
    return dict(sets.required_only) if sets.has_required else dict(sets.all)


async def _unauthorized_rejection(plan: CommandPlan, environment: HarnessEnvironment) -> str:
    return await _expect_rejection(
        environment, environment.anonymous_client, plan, _authorization_variables(plan), require_message=False
    )


async def _role_acceptance(plan: CommandPlan, role: str, environment: HarnessEnvironment) -> Any:
    client = _role_client(environment, role)
    return await _expect_acceptance(environment, client, plan, _authorization_variables(plan))


async def _acceptance(plan: CommandPlan, environment: HarnessEnvironment) -> Any:
    client = _primary_client(plan, environment)
    return await _expect_acceptance(environment, client, plan, dict(plan.variable_sets.all))


async def _required_field_rejection(plan: CommandPlan, environment: HarnessEnvironment) -> str:
    client = _primary_client(plan, environment)
    return await _expect_rejection(environment, client, plan, {})


async def _required_only_acceptance(plan: CommandPlan, environment: HarnessEnvironment) -> Any:
    client = _primary_client(plan, environment)
    return await _expect_acceptance(environment, client, plan, dict(plan.variable_sets.required_only))


async def _empty_value_rejection(plan: CommandPlan, environment: HarnessEnvironment) -> str:
    client = _primary_client(plan, environment)
    return await _expect_rejection(environment, client, plan, dict(plan.variable_sets.empty))


async def _invalid_type_rejection(plan: CommandPlan, environment: HarnessEnvironment) -> str:
    client = _primary_client(plan, environment)
    return await _expect_rejection(environment, client, plan, dict(plan.variable_sets.invalid_type))


async def _wait_for_records(
    plan: CommandPlan,
    environment: HarnessEnvironment,
    key: str,
) -> PollOutcome[Any]:
    async def on_attempt(attempt: int, result: Any, elapsed: float) -> None:
        await environment.context.notify_poll_attempt(key, attempt, len(result or ()), elapsed)

    return await poll_until(
        lambda: environment.event_store.query(key),
        has_records,
        plan.poll_interval,
        plan.result_wait,
        on_attempt=on_attempt,
    )


def _failure_message(prefix: str, result: VerifierResult) -> str:
    return (
        f"{prefix}: expected {result.expected_value!r} ({result.comparison_type}), "
        f"observed {result.metadata.get('record_count', 0) if result.metadata else 0} record(s): "
        f"{result.actual_value!r}"
    )


async def _work_verification(
    plan: CommandPlan, work: ExpectedWork, environment: HarnessEnvironment
) -> VerifierResult:
    if work.expectation is None:
        raise HarnessConfigurationError(
            f"Work '{work.description}' has no expectation; declare exists, absent, or the values to look for."
        )

    client = _primary_client(plan, environment)
    correlation_id = environment.id_factory()
    key = snapshot_key(work.entity, correlation_id)
    variables = {**work.triggering_input, plan.correlation_field: correlation_id}

    await _submit(environment, client, plan, variables)

    outcome = await _wait_for_records(plan, environment, key)
    # Absent work always waits out the deadline.
    if outcome.timed_out and work.expectation.kind is not ExpectationKind.ABSENT:
        await environment.context.notify_status(
            f"Command did not do '{work.description}' within {plan.result_wait:g} seconds",
            StatusLevel.WARNING,
        )

    # The verdict always comes from a fresh query, not from the last poll.
    final_records = await environment.event_store.query(key)
    result = WorkVerifier(work.expectation, name=work.description).verify(final_records)
    if not result.success:
        raise ScenarioFailure(_failure_message(f"Work '{work.description}' not done at {key}", result))
    return result


async def _event_verification(
    plan: CommandPlan, event: ExpectedEvent, environment: HarnessEnvironment
) -> VerifierResult:
    client = _primary_client(plan, environment)
    correlation_id = environment.id_factory()
    key = event_key(event.entity, correlation_id)
    variables = {**event.triggering_input, plan.correlation_field: correlation_id}

    try:
        await _submit(environment, client, plan, variables)
    except Exception as exc:
        message = error_message(exc)
        await environment.context.notify_submit(variables, False, message)
        await environment.context.notify_status(
            f"Error calling {plan.command_name} for event '{event.event_name}': {message}. "
            "Check the event's triggering inputs.",
            StatusLevel.WARNING,
        )

    outcome = await _wait_for_records(plan, environment, key)
    if outcome.timed_out:
        await environment.context.notify_status(
            f"Command did not register '{event.event_name}' within {plan.result_wait:g} seconds",
            StatusLevel.WARNING,
        )

    final_records = await environment.event_store.query(key)
    result = EventVerifier(event.event_name).verify(final_records)
    if not result.success:
        raise ScenarioFailure(
            _failure_message(f"Event '{event.event_name}' not registered at {key}", result)
        )
    return result


def build_scenarios(plan: CommandPlan) -> list[Scenario]:
    """Derive the scenario list for a command plan.

    Scenarios conditioned on required fields are omitted when the schema has
    none, and authorization scenarios when the command is open to all roles.

    Args:
        plan: Validated command plan

    Returns:
        Scenarios in execution order
    """
    scenarios: list[Scenario] = []

    if plan.checks_authorization:
        scenarios.append(
            Scenario(
                name="should not allow unauthorized role to make request",
                kind=ScenarioKind.UNAUTHORIZED_REJECTION,
                body=partial(_unauthorized_rejection, plan),
            )
        )
        for role in plan.authorized_roles:
            scenarios.append(
                Scenario(
                    name=f"should allow '{role}' role to make request",
                    kind=ScenarioKind.ROLE_ACCEPTANCE,
                    body=partial(_role_acceptance, plan, role),
                )
            )

    input_names = ", ".join(field.name for field in plan.fields)
    scenarios.append(
        Scenario(
            name=f"should accept the inputs: {input_names}",
            kind=ScenarioKind.ACCEPTANCE,
            body=partial(_acceptance, plan),
        )
    )

    if plan.has_required_fields:
        scenarios.append(
            Scenario(
                name="should throw an error when required inputs are missing",
                kind=ScenarioKind.REQUIRED_FIELD_REJECTION,
                body=partial(_required_field_rejection, plan),
            )
        )
        scenarios.append(
            Scenario(
                name="should succeed when submitting only required inputs",
                kind=ScenarioKind.REQUIRED_ONLY_ACCEPTANCE,
                body=partial(_required_only_acceptance, plan),
            )
        )

    scenarios.append(
        Scenario(
            name="should throw an error when inputs values are empty",
            kind=ScenarioKind.EMPTY_VALUE_REJECTION,
            body=partial(_empty_value_rejection, plan),
        )
    )
    scenarios.append(
        Scenario(
            name="should throw an error when inputs are of an invalid type",
            kind=ScenarioKind.INVALID_TYPE_REJECTION,
            body=partial(_invalid_type_rejection, plan),
        )
    )

    for work in plan.work:
        scenarios.append(
            Scenario(
                name=f"should do the work to: {work.description}",
                kind=ScenarioKind.WORK_VERIFICATION,
                body=partial(_work_verification, plan, work),
                timeout=plan.scenario_timeout,
            )
        )

    for event in plan.registered_events:
        scenarios.append(
            Scenario(
                name=f"should register the event: {event.event_name}",
                kind=ScenarioKind.EVENT_VERIFICATION,
                body=partial(_event_verification, plan, event),
                timeout=plan.scenario_timeout,
            )
        )

    return scenarios


async def run_scenario(scenario: Scenario, environment: HarnessEnvironment) -> ScenarioResult:
    """Run one scenario and capture its outcome instead of raising.

    Args:
        scenario: Scenario to run
        environment: Collaborators to run it against

    Returns:
        ScenarioResult; failures and unexpected errors are recorded in ``error``
    """
    await environment.context.notify_scenario_start(scenario.name, scenario.kind.value)
    start_time = time.perf_counter()

    try:
        detail = await scenario.run(environment)
        result = ScenarioResult(name=scenario.name, kind=scenario.kind, success=True, detail=detail)
    except ScenarioFailure as exc:
        result = ScenarioResult(name=scenario.name, kind=scenario.kind, success=False, error=str(exc))
    except Exception as exc:
        result = ScenarioResult(
            name=scenario.name,
            kind=scenario.kind,
            success=False,
            error=f"{type(exc).__name__}: {exc}",
        )
        await environment.context.notify_status(f"{scenario.name}: {result.error}", StatusLevel.ERROR)

    result.execution_time_ms = int((time.perf_counter() - start_time) * 1000)
    await environment.context.notify_scenario_end(result)
    return result


@dataclass
class ResultBundle:
    """Scenario results for one command plan."""

    command_name: str
    results: list[ScenarioResult]
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> list[ScenarioResult]:
        return [result for result in self.results if result.success]

    @property
    def failed(self) -> list[ScenarioResult]:
        return [result for result in self.results if not result.success]

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        """Convert results to a dictionary suitable for JSON export."""
        return {
            "command": self.command_name,
            "success": self.success,
            "passed": len(self.passed),
            "failed": len(self.failed),
            "results": [result.to_dict() for result in self.results],
            "metadata": dict(self.metadata),
        }


class CommandHarness:
    """Runs every scenario derived from a command plan.

    ```python
    plan = load_plan_file(Path("plans/order_snack.json"))
    async with httpx.AsyncClient() as http_client:
        environment = HarnessEnvironment.from_settings(HarnessSettings.from_env(), http_client)
        harness = CommandHarness(plan, environment)
        harness.add_observer(ConsoleObserver())
        bundle = await harness.run()
    ```
    """

    def __init__(
        self,
        plan: CommandPlan,
        environment: HarnessEnvironment,
        max_concurrent_scenarios: int = 1,
    ):
        """Initialize command harness.

        Args:
            plan: Command plan to derive scenarios from
            environment: Collaborators scenarios run against
            max_concurrent_scenarios: Scenarios allowed to run at the same time.
                Scenarios share no state, so any value >= 1 is safe.
        """
        if max_concurrent_scenarios < 1:
            raise ValueError(
                f"max_concurrent_scenarios must be at least 1, got {max_concurrent_scenarios}."
            )
        self.plan = plan
        self.environment = environment
        self.max_concurrent_scenarios = max_concurrent_scenarios
        self.scenarios = build_scenarios(plan)

    def add_observer(self, observer: HarnessObserver) -> None:
        self.environment.context.add_observer(observer)

    async def run(self, kinds: Optional[set[ScenarioKind]] = None) -> ResultBundle:
        """Run the plan's scenarios.

        Args:
            kinds: Optional subset of scenario classes to run

        Returns:
            ResultBundle with one result per scenario, in scenario order
        """
        selected = [s for s in self.scenarios if kinds is None or s.kind in kinds]
        semaphore = asyncio.Semaphore(self.max_concurrent_scenarios)

        async def run_limited(scenario: Scenario) -> ScenarioResult:
            async with semaphore:
                return await run_scenario(scenario, self.environment)

        results = await asyncio.gather(*(run_limited(scenario) for scenario in selected))
        return ResultBundle(
            command_name=self.plan.command_name,
            results=list(results),
            metadata=dict(self.plan.metadata),
        )
