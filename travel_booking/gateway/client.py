from __future__ import annotations

import logging
from datetime import date
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field, ValidationError, model_validator

from ..hotels.models import (
    Hotel,
    HotelPrice,
    RoomPriceResponse,
    coerce_hotels,
    coerce_prices,
    coerce_rooms,
)
from .config import DEFAULT_GATEWAY_CONFIG, GatewayConfig

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """The pricing API could not be reached or answered with an error."""

    def __init__(self, endpoint: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.message = message
        self.status_code = status_code


class PriceQuery(BaseModel):
    checkin: date
    checkout: date
    guests: str = Field(..., min_length=1, pattern=r"^\d+(\|\d+)*$")
    destination_id: str | None = None
    lang: str | None = None
    currency: str | None = None
    country_code: str | None = None
    partner_id: int | None = None

    @model_validator(mode="after")
    def _check_dates(self) -> PriceQuery:
        if self.checkout <= self.checkin:
            raise ValueError("checkout must be after checkin")
        return self

    def to_params(self, config: GatewayConfig = DEFAULT_GATEWAY_CONFIG) -> dict[str, Any]:
        params: dict[str, Any] = {
            "checkin": self.checkin.isoformat(),
            "checkout": self.checkout.isoformat(),
            "lang": self.lang or config.lang,
            "currency": self.currency or config.currency,
            "country_code": self.country_code or config.country_code,
            "guests": self.guests,
            "partner_id": self.partner_id if self.partner_id is not None else config.partner_id,
        }
        if self.destination_id:
            params["destination_id"] = self.destination_id
        return params


class HotelApiClient:
    """Thin async client for the hotel pricing API. No retries, one timeout."""

    def __init__(
        self,
        config: GatewayConfig = DEFAULT_GATEWAY_CONFIG,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._transport = transport

    async def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get(endpoint, params=params)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Hotel API %s returned HTTP %s", endpoint, status, exc_info=True)
            raise GatewayError(endpoint, f"Upstream returned HTTP {status}", status) from exc
        except httpx.HTTPError as exc:
            logger.warning("Hotel API request to %s failed", endpoint, exc_info=True)
            raise GatewayError(endpoint, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            logger.warning("Hotel API %s returned a non-JSON body", endpoint, exc_info=True)
            raise GatewayError(endpoint, "Upstream returned invalid JSON") from exc

    async def get_hotels(self, destination_id: str) -> list[Hotel]:
        payload = await self._get("/api/hotels", {"destination_id": destination_id})
        return coerce_hotels(payload)

    async def get_hotel(self, hotel_id: str) -> Hotel:
        endpoint = f"/api/hotels/{quote(hotel_id, safe='')}"
        payload = await self._get(endpoint)
        try:
            return Hotel.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Hotel API %s returned an unexpected record", endpoint, exc_info=True)
            raise GatewayError(endpoint, "Upstream returned an unexpected hotel record") from exc

    async def get_hotel_prices(self, query: PriceQuery) -> list[HotelPrice]:
        payload = await self._get("/api/hotels/prices", query.to_params(self.config))
        return coerce_prices(payload)

    async def get_room_prices(self, hotel_id: str, query: PriceQuery) -> RoomPriceResponse:
        params = query.to_params(self.config)
        params.pop("destination_id", None)
        payload = await self._get(f"/api/hotels/{quote(hotel_id, safe='')}/prices", params)
        return coerce_rooms(payload)


_default_client = HotelApiClient()


def get_gateway() -> HotelApiClient:
    """FastAPI dependency returning the process-wide gateway client."""
    return _default_client
