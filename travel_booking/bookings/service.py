from __future__ import annotations

import logging
import os
import threading
import time
from collections import OrderedDict
from datetime import datetime, timezone

from .models import Booking, BookingRequest

logger = logging.getLogger(__name__)

MAX_BOOKINGS = int(os.getenv("BOOKINGS_MAX_KEPT", "10000"))

# Mock confirmations for this process only; nothing is written anywhere.
# Sync endpoints run in a threadpool, so id allocation and inserts share a lock.
_bookings: OrderedDict[str, Booking] = OrderedDict()
_last_id_ms: int = 0
_lock = threading.Lock()


def _next_booking_id() -> str:
    global _last_id_ms
    with _lock:
        now_ms = int(time.time() * 1000)
        _last_id_ms = max(now_ms, _last_id_ms + 1)
        return f"BK{_last_id_ms}"


def create_booking(request: BookingRequest) -> Booking:
    total = None
    if request.price_per_night is not None:
        total = round(request.price_per_night * request.nights, 2)

    booking = Booking(
        id=_next_booking_id(),
        hotel_id=request.hotel_id,
        room_key=request.room_key,
        check_in=request.check_in,
        check_out=request.check_out,
        guests=request.guests,
        guest_info=request.guest_info,
        nights=request.nights,
        price_per_night=request.price_per_night,
        total_price=total,
        status="confirmed",
        booking_date=datetime.now(timezone.utc).isoformat(),
    )
    with _lock:
        _bookings[booking.id] = booking
        while len(_bookings) > MAX_BOOKINGS:
            _bookings.popitem(last=False)
    logger.info("Confirmed mock booking %s for hotel %s", booking.id, booking.hotel_id)
    return booking


def get_booking(booking_id: str) -> Booking | None:
    return _bookings.get(booking_id)


def clear_bookings() -> None:
    with _lock:
        _bookings.clear()
