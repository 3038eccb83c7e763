from __future__ import annotations

import logging
import math
from datetime import date
from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


def _keys_or_list(value: Any) -> list[str]:
    """The remote API sends some collections as ``{name: flag}`` objects."""
    if value is None:
        return []
    if isinstance(value, dict):
        return [str(k) for k, v in value.items() if v]
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value if v is not None]
    return [str(value)]


class Destination(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    uid: str = Field(..., min_length=1)
    term: str = Field(..., min_length=1)
    state: str = ""
    type: str = "city"
    lat: float | None = None
    lng: float | None = None


class ImageDetails(BaseModel):
    prefix: str = ""
    suffix: str = ""
    count: int = 0


class MarketRate(BaseModel):
    supplier: str
    price: float = Field(..., allow_inf_nan=False)


class Hotel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    address: str = ""
    categories: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    description: str = ""
    latitude: float | None = None
    longitude: float | None = None
    image_details: ImageDetails | None = None

    @field_validator("categories", "amenities", mode="before")
    @classmethod
    def _normalize_collection(cls, value: Any) -> list[str]:
        return _keys_or_list(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _default_rating(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("name", "address", "description", mode="before")
    @classmethod
    def _default_text(cls, value: Any) -> Any:
        return "" if value is None else value

    def image_url(self, index: int = 0) -> str | None:
        if not self.image_details or index >= self.image_details.count:
            return None
        return f"{self.image_details.prefix}{index}{self.image_details.suffix}"


class HotelPrice(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    id: str = Field(..., min_length=1)
    price: float = Field(..., ge=0.0, allow_inf_nan=False)
    search_rank: float | None = Field(
        default=None,
        validation_alias=AliasChoices("searchRank", "search_rank"),
        serialization_alias="searchRank",
    )
    market_rates: list[MarketRate] = Field(default_factory=list)


class Room(BaseModel):
    """A bookable room offer for one hotel.

    Accepts both the snake_case and camelCase spellings the pricing API has
    been seen to return and always serialises snake_case.
    """

    model_config = ConfigDict(extra="ignore")

    key: str = Field(..., min_length=1)
    room_normalized_description: str = Field(
        default="",
        validation_alias=AliasChoices(
            "room_normalized_description", "roomNormalizedDescription"
        ),
    )
    free_cancellation: bool = Field(
        default=False,
        validation_alias=AliasChoices("free_cancellation", "freeCancellation"),
    )
    description: str = ""
    long_description: str = Field(
        default="",
        validation_alias=AliasChoices("long_description", "longDescription"),
    )
    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    price: float = Field(..., ge=0.0, allow_inf_nan=False)
    market_rates: list[MarketRate] = Field(
        default_factory=list,
        validation_alias=AliasChoices("market_rates", "marketRates"),
    )

    @field_validator("images", mode="before")
    @classmethod
    def _image_urls(cls, value: Any) -> list[str]:
        urls: list[str] = []
        for item in value or []:
            if isinstance(item, str):
                urls.append(item)
            elif isinstance(item, dict):
                url = item.get("url") or item.get("high_resolution_url")
                if url:
                    urls.append(str(url))
        return urls

    @field_validator("amenities", mode="before")
    @classmethod
    def _normalize_amenities(cls, value: Any) -> list[str]:
        return _keys_or_list(value)

    @field_validator("description", "long_description", "room_normalized_description", mode="before")
    @classmethod
    def _default_text(cls, value: Any) -> Any:
        return "" if value is None else value


class RoomPriceResponse(BaseModel):
    completed: bool = True
    rooms: list[Room] = Field(default_factory=list)


class FilterOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    star_rating: set[int] = Field(
        default_factory=set,
        validation_alias=AliasChoices("starRating", "star_rating"),
        serialization_alias="starRating",
    )
    guest_rating: set[int] = Field(
        default_factory=set,
        validation_alias=AliasChoices("guestRating", "guest_rating"),
        serialization_alias="guestRating",
    )
    price_range: tuple[float, float] | None = Field(
        default=None,
        validation_alias=AliasChoices("priceRange", "price_range"),
        serialization_alias="priceRange",
    )

    @model_validator(mode="after")
    def _check_price_range(self) -> FilterOptions:
        if self.price_range is not None and self.price_range[0] > self.price_range[1]:
            raise ValueError("priceRange minimum must not exceed maximum")
        return self


class SortKey(str, Enum):
    price_asc = "price-asc"
    price_high = "price-high"
    rating_high = "rating-high"
    rating_low = "rating-low"
    name_asc = "name"

    @classmethod
    def parse(cls, value: str | SortKey | None) -> SortKey:
        """Resolve a UI sort value, falling back to :data:`DEFAULT_SORT`."""
        if isinstance(value, SortKey):
            return value
        if value == "price-low":
            return cls.price_asc
        try:
            return cls(value)
        except (TypeError, ValueError):
            return DEFAULT_SORT


DEFAULT_SORT = SortKey.price_asc


class HotelResult(BaseModel):
    hotel: Hotel
    price: HotelPrice | None = None


class ResultPage(BaseModel):
    results: list[HotelResult]
    page: int
    page_size: int
    total_results: int
    total_pages: int
    sort: SortKey
    price_bounds: tuple[float, float]
    request_id: str | None = None


def coerce_prices(raw: Any) -> list[HotelPrice]:
    """Normalise whatever the pricing API returned into a list of prices.

    Accepts ``None``, a list, or the ``{"hotels": [...]}`` envelope. Entries
    that fail validation are skipped; anything else yields an empty list.
    """
    if isinstance(raw, dict):
        raw = raw.get("hotels")
    if not isinstance(raw, (list, tuple)):
        return []

    prices: list[HotelPrice] = []
    skipped = 0
    for item in raw:
        if isinstance(item, HotelPrice):
            prices.append(item)
            continue
        try:
            prices.append(HotelPrice.model_validate(item))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("Skipped %d malformed price entries", skipped)
    return prices


def coerce_hotels(raw: Any) -> list[Hotel]:
    """Validate a remote hotel list, dropping records that do not fit the schema."""
    if not isinstance(raw, (list, tuple)):
        return []

    hotels: list[Hotel] = []
    skipped = 0
    for item in raw:
        if isinstance(item, Hotel):
            hotels.append(item)
            continue
        try:
            hotels.append(Hotel.model_validate(item))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning("Skipped %d malformed hotel records", skipped)
    return hotels


def coerce_rooms(raw: Any) -> RoomPriceResponse:
    if isinstance(raw, list):
        raw = {"rooms": raw}
    if not isinstance(raw, dict):
        return RoomPriceResponse(completed=False)

    rooms: list[Room] = []
    for item in raw.get("rooms") or []:
        try:
            rooms.append(Room.model_validate(item))
        except ValidationError:
            logger.warning("Skipped malformed room offer: %r", item)
    return RoomPriceResponse(completed=bool(raw.get("completed", True)), rooms=rooms)


def format_guests(adults: int, children: int, rooms: int) -> str:
    """Encode the party as the API expects: guests per room, one entry per room.

    ``format_guests(3, 1, 2) == "2|2"``
    """
    rooms = max(rooms, 1)
    per_room = math.ceil((adults + children) / rooms)
    return "|".join([str(per_room)] * rooms)


class SearchRequest(BaseModel):
    destination_id: str = Field(..., min_length=1)
    checkin: date
    checkout: date
    adults: int = Field(default=2, ge=1, le=8)
    children: int = Field(default=0, ge=0, le=6)
    rooms: int = Field(default=1, ge=1, le=5)
    guests: str | None = Field(default=None, pattern=r"^\d+(\|\d+)*$")
    filters: FilterOptions = Field(default_factory=FilterOptions)
    sort: str | None = DEFAULT_SORT.value
    page: int = 1
    request_id: str | None = Field(
        default=None,
        description="Echoed back so the client can drop responses to superseded searches",
    )

    @field_validator("sort", mode="before")
    @classmethod
    def _loose_sort(cls, value: Any) -> str | None:
        # Anything that is not a string sorts by the default order.
        return value if isinstance(value, str) else None

    @model_validator(mode="after")
    def _check_dates(self) -> SearchRequest:
        if self.checkout <= self.checkin:
            raise ValueError("checkout must be after checkin")
        return self

    @property
    def party(self) -> str:
        return self.guests or format_guests(self.adults, self.children, self.rooms)
