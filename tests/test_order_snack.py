"""Scenarios of the OrderSnack command run as individual pytest cases."""

from pathlib import Path

import pytest

from command_harness import build_scenarios, load_plan_file

PLAN = load_plan_file(Path(__file__).parent / "plans" / "order_snack.json")


@pytest.mark.asyncio
@pytest.mark.parametrize("scenario", build_scenarios(PLAN), ids=lambda scenario: scenario.name)
async def test_order_snack(scenario, environment):
    await scenario.run(environment)
