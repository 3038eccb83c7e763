from __future__ import annotations

import asyncio
import logging
import os
import time
from datetime import date, datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events, record_event
from .bookings.models import Booking, BookingRequest, BookingResponse
from .bookings.service import create_booking, get_booking
from .destinations.catalog import get_destination, get_destinations
from .destinations.matcher import MAX_MATCHES, match_destinations
from .gateway.client import GatewayError, HotelApiClient, PriceQuery, get_gateway
from .hotels.models import (
    Destination,
    Hotel,
    HotelPrice,
    ResultPage,
    RoomPriceResponse,
    SearchRequest,
)
from .hotels.results import build_result_page

logging.basicConfig(
    level=getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

app = FastAPI(title="Hotel Search & Booking API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",")],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _upstream_failure(message: str, exc: GatewayError) -> HTTPException:
    return HTTPException(status_code=502, detail={"error": message, "details": exc.message})


def _price_query(**fields) -> PriceQuery:
    try:
        return PriceQuery(**fields)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/api/destinations", response_model=list[Destination])
def search_destinations(
    q: str = "",
    limit: int = Query(default=MAX_MATCHES, ge=1, le=20),
) -> list[Destination]:
    return match_destinations(q, get_destinations(), limit=limit)


@app.get("/api/destinations/{uid}", response_model=Destination)
def destination_detail(uid: str) -> Destination:
    destination = get_destination(uid)
    if destination is None:
        raise HTTPException(status_code=404, detail="Destination not found")
    return destination


# ── Hotel API proxy ──────────────────────────────────────────────────────
# /api/hotels/prices must be registered before /api/hotels/{hotel_id}.


@app.get("/api/hotels/prices", response_model=list[HotelPrice])
async def hotel_prices(
    destination_id: str = Query(..., min_length=1),
    checkin: date = Query(...),
    checkout: date = Query(...),
    guests: str = Query(...),
    lang: str | None = None,
    currency: str | None = None,
    country_code: str | None = None,
    partner_id: int | None = None,
    gateway: HotelApiClient = Depends(get_gateway),
) -> list[HotelPrice]:
    query = _price_query(
        destination_id=destination_id, checkin=checkin, checkout=checkout, guests=guests,
        lang=lang, currency=currency, country_code=country_code, partner_id=partner_id,
    )
    try:
        return await gateway.get_hotel_prices(query)
    except GatewayError as exc:
        raise _upstream_failure("Failed to fetch hotel prices", exc) from exc


@app.get("/api/hotels/{hotel_id}/prices", response_model=RoomPriceResponse)
async def room_prices(
    hotel_id: str,
    checkin: date = Query(...),
    checkout: date = Query(...),
    guests: str = Query(...),
    lang: str | None = None,
    currency: str | None = None,
    country_code: str | None = None,
    partner_id: int | None = None,
    gateway: HotelApiClient = Depends(get_gateway),
) -> RoomPriceResponse:
    query = _price_query(
        checkin=checkin, checkout=checkout, guests=guests,
        lang=lang, currency=currency, country_code=country_code, partner_id=partner_id,
    )
    try:
        return await gateway.get_room_prices(hotel_id, query)
    except GatewayError as exc:
        raise _upstream_failure("Failed to fetch hotel price", exc) from exc


@app.get("/api/hotels", response_model=list[Hotel])
async def hotels(
    destination_id: str = Query(..., min_length=1),
    gateway: HotelApiClient = Depends(get_gateway),
) -> list[Hotel]:
    try:
        return await gateway.get_hotels(destination_id)
    except GatewayError as exc:
        raise _upstream_failure("Failed to fetch hotels", exc) from exc


@app.get("/api/hotels/{hotel_id}", response_model=Hotel)
async def hotel_detail(
    hotel_id: str,
    gateway: HotelApiClient = Depends(get_gateway),
) -> Hotel:
    try:
        return await gateway.get_hotel(hotel_id)
    except GatewayError as exc:
        raise _upstream_failure("Failed to fetch hotel details", exc) from exc


# ── Search results ───────────────────────────────────────────────────────


@app.post("/api/search", response_model=ResultPage)
async def search(
    body: SearchRequest,
    gateway: HotelApiClient = Depends(get_gateway),
) -> ResultPage:
    start_time = time.time()
    query = PriceQuery(
        destination_id=body.destination_id,
        checkin=body.checkin,
        checkout=body.checkout,
        guests=body.party,
    )

    # Both fetches always finish so neither failure goes unretrieved.
    hotel_list, price_list = await asyncio.gather(
        gateway.get_hotels(body.destination_id),
        gateway.get_hotel_prices(query),
        return_exceptions=True,
    )
    try:
        for outcome in (hotel_list, price_list):
            if isinstance(outcome, BaseException):
                raise outcome
    except GatewayError as exc:
        record_event("search_failed", {
            "destination_id": body.destination_id,
            "endpoint": exc.endpoint,
            "error": exc.message,
        })
        raise _upstream_failure("Failed to load hotels", exc) from exc

    page = build_result_page(
        hotel_list,
        price_list,
        filters=body.filters,
        sort_key=body.sort,
        page=body.page,
        request_id=body.request_id,
    )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("search", {
        "destination_id": body.destination_id,
        "sort": page.sort.value,
        "star_rating": sorted(body.filters.star_rating),
        "guest_rating": sorted(body.filters.guest_rating),
        "price_range": list(body.filters.price_range) if body.filters.price_range else None,
        "page": body.page,
        "total_hotels": len(hotel_list),
        "total_results": page.total_results,
        "response_time_ms": elapsed_ms,
    })
    return page


# ── Bookings ─────────────────────────────────────────────────────────────


@app.post("/api/bookings", response_model=BookingResponse)
def bookings(body: BookingRequest) -> BookingResponse:
    booking = create_booking(body)
    record_event("booking", {
        "hotel_id": booking.hotel_id,
        "nights": booking.nights,
        "total_price": booking.total_price,
    })
    return BookingResponse(success=True, booking=booking)


@app.get("/api/bookings/{booking_id}", response_model=Booking)
def booking_detail(booking_id: str) -> Booking:
    booking = get_booking(booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


# ── Analytics ────────────────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
