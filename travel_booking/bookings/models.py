from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GuestInfo(_CamelModel):
    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=10)
    special_requests: str | None = None


class BillingAddress(_CamelModel):
    street: str = Field(..., min_length=5)
    city: str = Field(..., min_length=2)
    state: str = Field(..., min_length=2)
    zip_code: str = Field(..., min_length=5)
    country: str = Field(..., min_length=2)


class PaymentInfo(_CamelModel):
    card_number: str = Field(..., min_length=16, max_length=19)
    expiry_date: str = Field(..., pattern=r"^(0[1-9]|1[0-2])/\d{2}$")
    cvv: str = Field(..., min_length=3, max_length=4)
    billing_address: BillingAddress


class BookingRequest(_CamelModel):
    hotel_id: str = Field(..., min_length=1)
    room_key: str = Field(..., min_length=1)
    check_in: date
    check_out: date
    guests: str = Field(..., min_length=1)
    guest_info: GuestInfo
    payment_info: PaymentInfo
    price_per_night: float | None = Field(default=None, ge=0.0)

    @model_validator(mode="after")
    def _check_stay(self) -> BookingRequest:
        if self.check_out <= self.check_in:
            raise ValueError("checkOut must be after checkIn")
        return self

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


class Booking(_CamelModel):
    """Booking acknowledgment. Payment details are never echoed back."""

    id: str
    hotel_id: str
    room_key: str
    check_in: date
    check_out: date
    guests: str
    guest_info: GuestInfo
    nights: int
    price_per_night: float | None = None
    total_price: float | None = None
    status: str = "confirmed"
    booking_date: str


class BookingResponse(BaseModel):
    success: bool
    booking: Booking
