"""
Pytest configuration and shared fixtures.

Adds the project root to the Python path so that tests can import the domain,
repositories, services and api packages without installing them, and provides
an in-memory store seeded with two reps plus admin and rep contexts driven by a
controllable clock.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.context import OperationContext  # noqa: E402
from domain.customer import NewCustomer  # noqa: E402
from domain.rep import Rep, Role  # noqa: E402
from repositories.rep_repository import rep_insert  # noqa: E402
from repositories.store import InMemoryStore  # noqa: E402

START = datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc)
REP_ID = "rep-1"
OTHER_REP_ID = "rep-2"
ADMIN_ID = "admin-1"


class FakeClock:
    """Clock whose time only moves when a test advances it."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    store.commit([
        rep_insert(Rep(rep_id=REP_ID, name="Sam Jones", email="sam@example.com", mobile="07700900456",
                       region="South West", postcodes=("BS1", "BA1"))),
        rep_insert(Rep(rep_id=OTHER_REP_ID, name="Alex Brown", email="alex@example.com", mobile="07700900789",
                       region="Midlands", postcodes=("B1",))),
    ])
    return store


@pytest.fixture
def admin_ctx(clock: FakeClock) -> OperationContext:
    return OperationContext(actor_id=ADMIN_ID, role=Role.ADMIN, actor_name="Pat Admin", clock=clock)


@pytest.fixture
def rep_ctx(clock: FakeClock) -> OperationContext:
    return OperationContext(actor_id=REP_ID, role=Role.REP, actor_name="Sam Jones", clock=clock)


@pytest.fixture
def other_rep_ctx(clock: FakeClock) -> OperationContext:
    return OperationContext(actor_id=OTHER_REP_ID, role=Role.REP, actor_name="Alex Brown", clock=clock)


@pytest.fixture
def enquiry() -> NewCustomer:
    return NewCustomer(
        name="Jane Smith",
        email="jane@example.com",
        mobile="07700900123",
        postcode="BS1 4DJ",
        heating_system="gas_boiler",
        installation_type="heat_pump_solar",
    )
