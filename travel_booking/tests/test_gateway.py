from __future__ import annotations

import asyncio
from datetime import date

import httpx
import pytest

from travel_booking.gateway.client import GatewayError, PriceQuery
from travel_booking.gateway.config import GatewayConfig

from .upstream import make_gateway, refuse_connection

QUERY = PriceQuery(
    destination_id="RsBU",
    checkin=date(2026, 11, 1),
    checkout=date(2026, 11, 4),
    guests="2|2",
)


def _run(coro):
    return asyncio.run(coro)


def test_get_hotels_validates_records():
    hotels = _run(make_gateway().get_hotels("RsBU"))
    assert [h.id for h in hotels] == ["a", "b", "c"]
    assert hotels[1].description == ""


def test_get_hotel_prices_unwraps_envelope():
    prices = _run(make_gateway().get_hotel_prices(QUERY))
    assert {p.id: p.price for p in prices} == {"a": 100, "c": 50}


def test_get_room_prices_drops_bad_offers():
    response = _run(make_gateway().get_room_prices("a", QUERY))
    assert [r.key for r in response.rooms] == ["r-1", "r-2"]


def test_get_hotel_details():
    hotel = _run(make_gateway().get_hotel("c"))
    assert hotel.name == "Charlie Suites"


def test_price_query_forwards_defaults():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    _run(make_gateway(handler).get_hotel_prices(QUERY))
    params = seen[0].url.params
    assert params["destination_id"] == "RsBU"
    assert params["checkin"] == "2026-11-01"
    assert params["checkout"] == "2026-11-04"
    assert params["guests"] == "2|2"
    assert params["lang"] == GatewayConfig().lang
    assert params["currency"] == GatewayConfig().currency
    assert params["partner_id"] == str(GatewayConfig().partner_id)


def test_room_prices_omit_destination():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"completed": False, "rooms": []})

    response = _run(make_gateway(handler).get_room_prices("diH7", QUERY))
    assert response.completed is False
    assert seen[0].url.path == "/api/hotels/diH7/prices"
    assert "destination_id" not in seen[0].url.params


def test_price_query_overrides():
    query = QUERY.model_copy(update={"currency": "USD", "partner_id": 7})
    params = query.to_params()
    assert params["currency"] == "USD"
    assert params["partner_id"] == 7


def test_price_query_rejects_reversed_dates():
    with pytest.raises(ValueError):
        PriceQuery(checkin=date(2026, 11, 4), checkout=date(2026, 11, 1), guests="2")


# ── Failures ─────────────────────────────────────────────────────────────


def test_connection_error_raises_gateway_error():
    with pytest.raises(GatewayError) as excinfo:
        _run(make_gateway(refuse_connection).get_hotels("RsBU"))
    assert excinfo.value.endpoint == "/api/hotels"
    assert excinfo.value.status_code is None


def test_http_error_status_is_kept():
    gateway = make_gateway(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(GatewayError) as excinfo:
        _run(gateway.get_hotel_prices(QUERY))
    assert excinfo.value.status_code == 503


def test_non_json_body_is_gateway_error():
    gateway = make_gateway(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(GatewayError, match="invalid JSON"):
        _run(gateway.get_hotels("RsBU"))


def test_unknown_hotel_is_gateway_error():
    with pytest.raises(GatewayError) as excinfo:
        _run(make_gateway().get_hotel("zz"))
    assert excinfo.value.status_code == 404


def test_unexpected_hotel_record_is_gateway_error():
    gateway = make_gateway(lambda request: httpx.Response(200, json={"name": "no id"}))
    with pytest.raises(GatewayError, match="unexpected hotel record"):
        _run(gateway.get_hotel("x"))
