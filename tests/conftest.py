"""Pytest configuration and fixtures."""

from decimal import Decimal

import pytest

from gigo_sales.bonus import get_default_ladder
from gigo_sales.config import get_settings
from gigo_sales.records import Actor, PlanRecord, Role
from gigo_sales.storage import InMemoryReportStore
from gigo_sales.workflow import ApprovalWorkflow
from tests.helpers import PLAN_END, PLAN_START


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings and reward ladder between tests."""
    get_settings.cache_clear()
    get_default_ladder.cache_clear()
    yield
    get_settings.cache_clear()
    get_default_ladder.cache_clear()


@pytest.fixture
def director():
    return Actor(actor_id="elyor", name="Elyor (Director)", role=Role.DIRECTOR)


@pytest.fixture
def agent():
    return Actor(actor_id="muxlisa", name="Muxlisa", role=Role.AGENT)


@pytest.fixture
def other_agent():
    return Actor(actor_id="aziza", name="Aziza", role=Role.AGENT)


@pytest.fixture
def plan():
    """Quarterly plan for the default agent."""
    return PlanRecord(
        agent_id="muxlisa",
        total_target=Decimal("500000000"),
        start_date=PLAN_START,
        end_date=PLAN_END,
        debt_limit_percent=Decimal("7"),
        category_distribution={
            "qurt": Decimal("15"),
            "toys": Decimal("40"),
            "milchofka": Decimal("45"),
        },
    )


@pytest.fixture
def store(plan):
    return InMemoryReportStore(plans=[plan])



@pytest.fixture
def workflow(store):
    return ApprovalWorkflow(store)
