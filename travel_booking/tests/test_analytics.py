from __future__ import annotations

import pytest

from travel_booking.analytics.aggregator import compute_analytics
from travel_booking.analytics.store import record_event

from .test_app import SEARCH
from .test_bookings import BOOKING


def test_analytics_returns_empty_initially(client):
    body = client.get("/analytics").json()
    assert body["total_searches"] == 0
    assert body["avg_response_time_ms"] == 0.0
    assert body["total_bookings"] == 0


def test_analytics_tracks_searches(client):
    client.post("/api/search", json=SEARCH)
    client.post("/api/search", json=dict(SEARCH, sort="name", filters={"starRating": [5]}))
    client.post("/api/search", json=dict(SEARCH, destination_id="A6Dz", filters={"starRating": [1]}))

    body = client.get("/analytics").json()
    assert body["total_searches"] == 3
    assert body["top_destinations"][0] == {"destination_id": "RsBU", "count": 2}
    assert body["sort_usage"] == {"price-asc": 2, "name": 1}
    assert body["filter_usage"]["star_rating"] == 66.7
    assert body["filter_usage"]["guest_rating"] == 0.0
    assert body["zero_result_searches"] == 1


def test_analytics_tracks_failures(failing_client):
    failing_client.post("/api/search", json=SEARCH)
    body = failing_client.get("/analytics").json()
    assert body["total_searches"] == 0
    assert body["failed_searches"] == 1


def test_analytics_counts_bookings(client):
    client.post("/api/bookings", json=BOOKING)
    body = client.get("/analytics").json()
    assert body["total_bookings"] == 1
    assert body["booking_value"] == round(BOOKING["pricePerNight"] * 3, 2)


def test_compute_analytics_direct():
    events = [
        {"type": "search", "destination_id": "x", "sort": "name", "response_time_ms": 10.0,
         "price_range": [0, 100], "total_results": 4},
        {"type": "search", "destination_id": "x", "sort": "name", "response_time_ms": 20.0,
         "total_results": 2},
    ]
    body = compute_analytics(events)
    assert body["avg_response_time_ms"] == 15.0
    assert body["filter_usage"]["price_range"] == 50.0


def test_unknown_event_type_rejected():
    with pytest.raises(ValueError):
        record_event("click", {})
