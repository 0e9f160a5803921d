"""
Pytest configuration for the scheduling tests
"""

import os
import sys
from datetime import date
from typing import Callable

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

# Add repository root to path to import app modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config.settings import DEFAULT_TIME_SLOTS  # noqa: E402
from carebook.api.auth import TokenVerifier  # noqa: E402
from carebook.api.routes import create_app  # noqa: E402
from carebook.models import DoctorCatalog  # noqa: E402
from carebook.services import (  # noqa: E402
    AvailabilityChecker,
    BookingService,
    InMemoryAppointmentStore,
    LifecycleService,
    MeetLinkIssuer,
    SlotGenerator,
)
from carebook.tools.appointment_tools import AppointmentTools  # noqa: E402

# Fixed "today" for the clinic clock; 2025-03-10 is upcoming
TODAY = date(2025, 3, 1)
JWT_SECRET = "test-secret"


@pytest.fixture
def slot_generator():
    return SlotGenerator(DEFAULT_TIME_SLOTS)


@pytest.fixture
def catalog():
    return DoctorCatalog()


@pytest.fixture
def store():
    return InMemoryAppointmentStore()


@pytest.fixture
def availability(store, slot_generator, catalog):
    return AvailabilityChecker(store, slot_generator, catalog)


@pytest.fixture
def booking(store, availability):
    return BookingService(store, availability)


@pytest.fixture
def lifecycle(store, availability):
    return LifecycleService(store, availability, today=lambda: TODAY)


@pytest.fixture
def meet_links(store):
    return MeetLinkIssuer(store, base_url="https://meet.example.test/lookup")


@pytest.fixture
def tools(store, slot_generator, availability, booking, lifecycle, meet_links, catalog):
    return AppointmentTools(
        store=store,
        slot_generator=slot_generator,
        availability=availability,
        booking=booking,
        lifecycle=lifecycle,
        meet_links=meet_links,
        catalog=catalog,
    )


@pytest.fixture
def booking_payload() -> Callable[..., dict]:
    """Build a wire-format booking body, overriding any field."""
    def _make(**overrides) -> dict:
        payload = {
            "doctorName": "Dr. Harsha",
            "specialization": "Neurology",
            "date": "2025-03-10",
            "timeSlot": "10:00 AM",
            "patientName": "Alice",
            "patientPhone": "+15550100",
            "reason": "Migraine follow-up",
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def book(booking, booking_payload):
    """Book through the service with a payload override."""
    async def _book(owner_id: str = "user-a", **overrides):
        request = booking.parse_request(booking_payload(**overrides))
        return await booking.book(request, owner_id)

    return _book


@pytest.fixture
def token_verifier():
    return TokenVerifier(JWT_SECRET)


@pytest.fixture
def auth_headers(token_verifier) -> Callable[[str], dict]:
    def _make(user_id: str) -> dict:
        return {"Authorization": f"Bearer {token_verifier.issue(user_id)}"}

    return _make


@pytest_asyncio.fixture
async def client(tools, token_verifier):
    app = create_app(tools, token_verifier)
    async with TestClient(TestServer(app)) as test_client:
        yield test_client
