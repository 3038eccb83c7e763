from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from travel_booking.analytics.store import clear_events
from travel_booking.app import app
from travel_booking.bookings.service import clear_bookings
from travel_booking.gateway.client import get_gateway

from .upstream import make_gateway, refuse_connection


@pytest.fixture(autouse=True)
def _reset_state():
    clear_events()
    clear_bookings()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    gateway = make_gateway()
    app.dependency_overrides[get_gateway] = lambda: gateway
    return TestClient(app)


@pytest.fixture
def failing_client():
    gateway = make_gateway(refuse_connection)
    app.dependency_overrides[get_gateway] = lambda: gateway
    return TestClient(app)
