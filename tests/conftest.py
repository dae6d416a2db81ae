"""Shared fixtures: the snack-ordering command and an in-memory backend."""

from itertools import count

import pytest

from command_harness import (
    CommandPlan,
    ExpectedEvent,
    ExpectedWork,
    FieldSpec,
    HarnessEnvironment,
    RunContext,
    WorkExpectation,
)

from .fakes import FakeCommandClient, FakeEventStore, FakeIdentityProvider, SnackBackend


@pytest.fixture
def snack_fields():
    return [
        FieldSpec(name="fruit", type="String", required=True),
        FieldSpec(name="drink", type="String", valid_example="water"),
        FieldSpec(name="tid", type="String"),
    ]


@pytest.fixture
def snack_plan(snack_fields):
    return CommandPlan(
        command_name="OrderSnack",
        fields=snack_fields,
        registered_events=[
            ExpectedEvent({"fruit": "apple"}, "FruitOrdered", "Fruit"),
            ExpectedEvent({"fruit": "pear", "drink": "water"}, "DrinkOrdered", "Drink"),
            ExpectedEvent({"fruit": "candy"}, "CandyOrdered", "Tattle"),
        ],
        work=[
            ExpectedWork(
                description="capitalize the 'fruit' value",
                triggering_input={"fruit": "apple"},
                entity="Fruit",
                expectation=WorkExpectation.contains("Apple"),
            ),
            ExpectedWork(
                description="tattle when candy is ordered",
                triggering_input={"fruit": "candy"},
                entity="Tattle",
                expectation=WorkExpectation.exists(),
            ),
        ],
        poll_interval=0.01,
        result_wait=0.5,
    )


@pytest.fixture
def backend(snack_fields):
    return SnackBackend(snack_fields)


@pytest.fixture
def environment(backend):
    ids = count(1)
    return HarnessEnvironment(
        client=FakeCommandClient(backend),
        event_store=FakeEventStore(backend),
        identity_provider=FakeIdentityProvider(backend),
        id_factory=lambda: f"id-{next(ids)}",
        context=RunContext(),
    )
