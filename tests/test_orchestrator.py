import pytest

from command_harness import (
    CommandHarness,
    CommandPlan,
    CommandRejectedError,
    ExpectedEvent,
    ExpectedWork,
    FieldSpec,
    HarnessConfigurationError,
    HarnessEnvironment,
    HarnessObserver,
    RunContext,
    ScenarioFailure,
    ScenarioKind,
    SchemaError,
    WorkExpectation,
    build_scenarios,
    run_scenario,
)

from .fakes import FakeCommandClient, FakeEventStore, FakeIdentityProvider, SnackBackend


class RecordingObserver(HarnessObserver):
    def __init__(self):
        self.events = []

    async def on_scenario_start(self, name, kind):
        self.events.append(("start", name))

    async def on_submit(self, variables, accepted, detail):
        self.events.append(("submit", dict(variables), accepted))

    async def on_poll_attempt(self, key, attempt, record_count, elapsed):
        self.events.append(("poll", key, attempt, record_count))

    async def on_status(self, message, level="info"):
        self.events.append(("status", str(getattr(level, "value", level)), message))

    async def on_scenario_end(self, result):
        self.events.append(("end", result.name, result.success))

    def statuses(self, level):
        return [event[2] for event in self.events if event[0] == "status" and event[1] == level]


class LenientBackend(SnackBackend):
    """Backend that accepts anything it is sent."""

    def submit(self, variables, role):
        self.submissions.append(dict(variables))
        return True


class SilentRejectionClient:
    """Client the backend refuses without saying why."""

    async def mutate(self, variables, mutation):
        raise CommandRejectedError("")


class RevealOnTimeout(RecordingObserver):
    """Makes the backend's records visible once polling has given up."""

    def __init__(self, backend):
        super().__init__()
        self.backend = backend

    async def on_status(self, message, level="info"):
        await super().on_status(message, level)
        if str(getattr(level, "value", level)) == "warning":
            self.backend.visibility_delay = 0


def _scenario(plan, name):
    return next(s for s in build_scenarios(plan) if s.name == name)


def _environment(backend, observer=None):
    context = RunContext()
    if observer is not None:
        context.add_observer(observer)
    ids = iter(f"id-{n}" for n in range(1, 1000))
    return HarnessEnvironment(
        client=FakeCommandClient(backend),
        event_store=FakeEventStore(backend),
        identity_provider=FakeIdentityProvider(backend),
        id_factory=lambda: next(ids),
        context=context,
    )


def test_scenarios_for_open_command(snack_plan):
    scenarios = build_scenarios(snack_plan)

    assert [s.name for s in scenarios] == [
        "should accept the inputs: fruit, drink, tid",
        "should throw an error when required inputs are missing",
        "should succeed when submitting only required inputs",
        "should throw an error when inputs values are empty",
        "should throw an error when inputs are of an invalid type",
        "should do the work to: capitalize the 'fruit' value",
        "should do the work to: tattle when candy is ordered",
        "should register the event: FruitOrdered",
        "should register the event: DrinkOrdered",
        "should register the event: CandyOrdered",
    ]
    polling = [s for s in scenarios if s.timeout is not None]
    assert {s.kind for s in polling} == {ScenarioKind.WORK_VERIFICATION, ScenarioKind.EVENT_VERIFICATION}
    assert all(s.timeout == pytest.approx(1.0) for s in polling)


def test_required_scenarios_skipped_without_required_fields():
    plan = CommandPlan(command_name="OrderSnack", fields=[FieldSpec("fruit"), FieldSpec("tid")])
    kinds = [s.kind for s in build_scenarios(plan)]

    assert ScenarioKind.REQUIRED_FIELD_REJECTION not in kinds
    assert ScenarioKind.REQUIRED_ONLY_ACCEPTANCE not in kinds
    assert kinds == [
        ScenarioKind.ACCEPTANCE,
        ScenarioKind.EMPTY_VALUE_REJECTION,
        ScenarioKind.INVALID_TYPE_REJECTION,
    ]


@pytest.mark.parametrize("roles", [["all"], [], ["admin", "all"]])
def test_universal_roles_skip_authorization(snack_fields, roles):
    plan = CommandPlan(command_name="OrderSnack", fields=snack_fields, authorized_roles=roles)
    kinds = {s.kind for s in build_scenarios(plan)}
    assert ScenarioKind.UNAUTHORIZED_REJECTION not in kinds
    assert ScenarioKind.ROLE_ACCEPTANCE not in kinds


@pytest.mark.asyncio
async def test_full_plan_passes_against_correct_backend(snack_plan, backend, environment):
    observer = RecordingObserver()
    harness = CommandHarness(snack_plan, environment)
    harness.add_observer(observer)

    bundle = await harness.run()

    assert bundle.success, [(r.name, r.error) for r in bundle.failed]
    assert len(bundle.passed) == 10
    assert bundle.to_dict()["passed"] == 10
    assert observer.statuses("warning") == []
    assert observer.events[0] == ("start", "should accept the inputs: fruit, drink, tid")


@pytest.mark.asyncio
async def test_full_plan_passes_with_concurrent_scenarios(snack_plan, backend, environment):
    bundle = await CommandHarness(snack_plan, environment, max_concurrent_scenarios=4).run()
    assert bundle.success, [(r.name, r.error) for r in bundle.failed]


@pytest.mark.asyncio
async def test_run_can_select_scenario_kinds(snack_plan, environment):
    bundle = await CommandHarness(snack_plan, environment).run(kinds={ScenarioKind.ACCEPTANCE})
    assert [r.kind for r in bundle.results] == [ScenarioKind.ACCEPTANCE]


@pytest.mark.asyncio
async def test_missing_required_input_is_rejected_with_message(backend, environment):
    plan = CommandPlan(command_name="OrderSnack", fields=[FieldSpec("fruit", "String", required=True)])

    message = await _scenario(plan, "should throw an error when required inputs are missing").run(environment)
    assert "fruit" in message
    assert environment.client.submitted == [{}]

    data = await _scenario(plan, "should succeed when submitting only required inputs").run(environment)
    assert data == {"OrderSnack": True}


@pytest.mark.asyncio
async def test_work_scenario_polls_snapshot_key(snack_plan, backend):
    environment = _environment(backend)
    scenario = _scenario(snack_plan, "should do the work to: tattle when candy is ordered")

    result = await scenario.run(environment)

    assert result.success
    assert environment.client.submitted == [{"fruit": "candy", "tid": "id-1"}]
    # Two empty polls, one satisfied poll, then the final check.
    assert environment.event_store.keys == ["Tattle-id-1-snapshot"] * 4


@pytest.mark.asyncio
async def test_event_scenario_polls_event_key(snack_plan, backend):
    environment = _environment(backend)
    scenario = _scenario(snack_plan, "should register the event: DrinkOrdered")

    result = await scenario.run(environment)

    assert result.success
    assert set(environment.event_store.keys) == {"Drink-id-1-event"}


@pytest.mark.asyncio
async def test_work_not_done_fails_after_final_check(snack_plan, snack_fields):
    backend = SnackBackend(snack_fields, capitalize_fruit=False)
    observer = RecordingObserver()
    environment = _environment(backend, observer)
    scenario = _scenario(snack_plan, "should do the work to: capitalize the 'fruit' value")

    with pytest.raises(ScenarioFailure, match="capitalize the 'fruit' value"):
        await scenario.run(environment)
    assert observer.statuses("warning") == []


@pytest.mark.asyncio
async def test_timeout_is_reported_then_final_check_decides(snack_fields):
    plan = CommandPlan(
        command_name="OrderSnack",
        fields=snack_fields,
        work=[ExpectedWork("tattle", {"fruit": "candy"}, "Tattle", WorkExpectation.exists())],
        poll_interval=0.01,
        result_wait=0.03,
    )
    observer = RecordingObserver()
    slow = SnackBackend(snack_fields, visibility_delay=1000)
    with pytest.raises(ScenarioFailure, match="Tattle-id-1-snapshot"):
        await build_scenarios(plan)[-1].run(_environment(slow, observer))
    assert observer.statuses("warning") == ["Command did not do 'tattle' within 0.03 seconds"]

    # Slow but eventually correct: polling gives up, the final query sees the record.
    eventual = SnackBackend(snack_fields, visibility_delay=1000)
    observer = RevealOnTimeout(eventual)
    result = await build_scenarios(plan)[-1].run(_environment(eventual, observer))
    assert result.success
    assert len(observer.statuses("warning")) == 1


@pytest.mark.asyncio
async def test_absent_expectation(snack_fields, backend):
    plan = CommandPlan(
        command_name="OrderSnack",
        fields=snack_fields,
        work=[ExpectedWork("no tattle for apples", {"fruit": "apple"}, "Tattle", WorkExpectation.absent())],
        poll_interval=0.01,
        result_wait=0.03,
    )
    observer = RecordingObserver()
    result = await build_scenarios(plan)[-1].run(_environment(backend, observer))
    assert result.success
    assert observer.statuses("warning") == []


@pytest.mark.asyncio
async def test_rejection_scenarios_fail_when_backend_accepts(snack_plan, snack_fields):
    environment = _environment(LenientBackend(snack_fields))
    results = await CommandHarness(snack_plan, environment).run(
        kinds={
            ScenarioKind.REQUIRED_FIELD_REJECTION,
            ScenarioKind.EMPTY_VALUE_REJECTION,
            ScenarioKind.INVALID_TYPE_REJECTION,
        }
    )

    assert len(results.failed) == 3
    assert all("expected it to be rejected" in r.error for r in results.failed)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name",
    [
        "should throw an error when required inputs are missing",
        "should throw an error when inputs values are empty",
        "should throw an error when inputs are of an invalid type",
    ],
)
async def test_rejection_without_message_fails(snack_plan, backend, name):
    environment = HarnessEnvironment(client=SilentRejectionClient(), event_store=FakeEventStore(backend))

    with pytest.raises(ScenarioFailure, match="without an error message"):
        await _scenario(snack_plan, name).run(environment)


@pytest.mark.asyncio
async def test_unauthorized_rejection_needs_no_message(snack_fields, backend):
    plan = CommandPlan(command_name="OrderSnack", fields=snack_fields, authorized_roles=["admin"])
    environment = HarnessEnvironment(
        client=FakeCommandClient(backend, role="admin"),
        event_store=FakeEventStore(backend),
        unauthenticated_client=SilentRejectionClient(),
    )

    assert await build_scenarios(plan)[0].run(environment) == ""


@pytest.mark.asyncio
async def test_bundle_carries_plan_metadata(snack_fields, environment):
    plan = CommandPlan(command_name="OrderSnack", fields=snack_fields, metadata={"owner": "snacks"})
    bundle = await CommandHarness(plan, environment).run(kinds={ScenarioKind.ACCEPTANCE})

    exported = bundle.to_dict()
    assert exported["metadata"] == {"owner": "snacks"}
    assert exported["passed"] == 1


@pytest.mark.asyncio
async def test_unset_work_expectation_fails_before_submitting(snack_fields, backend):
    plan = CommandPlan(
        command_name="OrderSnack",
        fields=snack_fields,
        work=[ExpectedWork("forgot expectation", {"fruit": "apple"}, "Fruit")],
    )
    environment = _environment(backend)
    scenario = build_scenarios(plan)[-1]

    with pytest.raises(HarnessConfigurationError):
        await scenario.run(environment)
    assert environment.client.submitted == []

    result = await run_scenario(scenario, environment)
    assert not result.success
    assert result.error.startswith("HarnessConfigurationError")


@pytest.mark.asyncio
async def test_event_submit_error_is_logged_and_scenario_fails(snack_fields, backend):
    plan = CommandPlan(
        command_name="OrderSnack",
        fields=snack_fields,
        registered_events=[ExpectedEvent({"fruit": ""}, "FruitOrdered", "Fruit")],
        poll_interval=0.01,
        result_wait=0.02,
    )
    observer = RecordingObserver()

    with pytest.raises(ScenarioFailure, match="FruitOrdered"):
        await build_scenarios(plan)[-1].run(_environment(backend, observer))

    warnings = observer.statuses("warning")
    assert "Check the event's triggering inputs" in warnings[0]
    assert warnings[1] == "Command did not register 'FruitOrdered' within 0.02 seconds"


@pytest.mark.asyncio
async def test_authorization_scenarios(snack_fields):
    backend = SnackBackend(snack_fields, allowed_roles={"admin", "staff"})
    plan = CommandPlan(command_name="OrderSnack", fields=snack_fields, authorized_roles=["admin", "staff"])
    environment = _environment(backend)

    scenarios = build_scenarios(plan)
    assert [s.name for s in scenarios[:3]] == [
        "should not allow unauthorized role to make request",
        "should allow 'admin' role to make request",
        "should allow 'staff' role to make request",
    ]

    bundle = await CommandHarness(plan, environment).run()

    assert bundle.success, [(r.name, r.error) for r in bundle.failed]
    issued = environment.identity_provider.issued
    assert ("id-1@example.com", "admin") in issued
    assert {role for _, role in issued} == {"admin", "staff"}


@pytest.mark.asyncio
async def test_unauthorized_scenario_fails_when_anyone_may_submit(snack_fields):
    plan = CommandPlan(command_name="OrderSnack", fields=snack_fields, authorized_roles=["admin"])
    environment = _environment(SnackBackend(snack_fields))

    with pytest.raises(ScenarioFailure, match="expected it to be rejected"):
        await build_scenarios(plan)[0].run(environment)


@pytest.mark.asyncio
async def test_restricted_plan_needs_identity_provider(snack_fields, backend):
    plan = CommandPlan(command_name="OrderSnack", fields=snack_fields, authorized_roles=["admin"])
    environment = HarnessEnvironment(client=FakeCommandClient(backend), event_store=FakeEventStore(backend))

    result = await run_scenario(build_scenarios(plan)[1], environment)

    assert not result.success
    assert "no identity provider" in result.error


def test_effects_require_correlation_field():
    with pytest.raises(SchemaError, match="'tid'"):
        CommandPlan(
            command_name="OrderSnack",
            fields=[FieldSpec("fruit", required=True)],
            registered_events=[ExpectedEvent({"fruit": "apple"}, "FruitOrdered", "Fruit")],
        )


def test_correlation_field_must_hold_strings():
    with pytest.raises(SchemaError, match="must be String or ID"):
        CommandPlan(
            command_name="OrderSnack",
            fields=[FieldSpec("fruit"), FieldSpec("tid", "Int")],
            registered_events=[ExpectedEvent({"fruit": "apple"}, "FruitOrdered", "Fruit")],
        )


def test_triggering_input_must_use_known_fields(snack_fields):
    with pytest.raises(SchemaError, match="unknown field"):
        CommandPlan(
            command_name="OrderSnack",
            fields=snack_fields,
            work=[ExpectedWork("x", {"candy": "yes"}, "Tattle", WorkExpectation.exists())],
        )


def test_invalid_poll_timing_rejected(snack_fields):
    with pytest.raises(ValueError, match="poll_interval"):
        CommandPlan(command_name="OrderSnack", fields=snack_fields, poll_interval=0)
