"""Compose, filter, sort and paginate the hotels returned for one search.

Every stage is a pure function over in-memory lists; ``build_result_page``
runs them in the fixed order compose -> filter -> sort -> paginate.
"""
from __future__ import annotations

import math
import unicodedata
from typing import Any, Iterable, Sequence

from .models import (
    DEFAULT_SORT,
    FilterOptions,
    Hotel,
    HotelPrice,
    HotelResult,
    ResultPage,
    SortKey,
    coerce_prices,
)

PAGE_SIZE = 12
DEFAULT_PRICE_BOUNDS: tuple[float, float] = (0.0, 1000.0)
MAX_GUEST_RATING = 10


# ── Compose ──────────────────────────────────────────────────────────────


def compose_results(hotels: Iterable[Hotel], prices: Any) -> list[HotelResult]:
    """Attach the first matching price to each hotel, keeping hotel order."""
    price_by_id: dict[str, HotelPrice] = {}
    for price in coerce_prices(prices):
        price_by_id.setdefault(price.id, price)

    return [HotelResult(hotel=hotel, price=price_by_id.get(hotel.id)) for hotel in hotels]


def price_bounds(prices: Any) -> tuple[float, float]:
    """Slider bounds for the price filter, rounded out to the nearest 10."""
    values = [p.price for p in coerce_prices(prices)]
    if not values:
        return DEFAULT_PRICE_BOUNDS
    return (
        float(math.floor(min(values) / 10) * 10),
        float(math.ceil(max(values) / 10) * 10),
    )


# ── Filter ───────────────────────────────────────────────────────────────


def estimated_guest_rating(hotel: Hotel) -> float:
    """Stand-in guest score out of 10, derived from the star rating."""
    return min(hotel.rating * 2, MAX_GUEST_RATING)


def passes_filters(result: HotelResult, filters: FilterOptions) -> bool:
    hotel, price = result.hotel, result.price

    if filters.star_rating and hotel.rating not in filters.star_rating:
        return False

    if price is not None and filters.price_range is not None:
        low, high = filters.price_range
        if price.price < low or price.price > high:
            return False

    if filters.guest_rating:
        estimate = estimated_guest_rating(hotel)
        if not any(estimate >= threshold for threshold in filters.guest_rating):
            return False

    return True


def filter_results(
    results: Iterable[HotelResult], filters: FilterOptions | None = None
) -> list[HotelResult]:
    if filters is None:
        return list(results)
    return [r for r in results if passes_filters(r, filters)]


# ── Sort ─────────────────────────────────────────────────────────────────


def _name_key(result: HotelResult) -> tuple[str, str]:
    name = result.hotel.name
    folded = unicodedata.normalize("NFKD", name)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch)).casefold()
    return folded, name


def _price_key(result: HotelResult, direction: int) -> tuple[bool, float]:
    if result.price is None:
        return True, 0.0
    return False, direction * result.price.price


def sort_results(
    results: Iterable[HotelResult], sort_key: SortKey | str | None = DEFAULT_SORT
) -> list[HotelResult]:
    """Return a new list ordered by *sort_key*.

    Python's sort is stable, so equal keys keep their input order. Results
    without a price go last for both price orders.
    """
    key = SortKey.parse(sort_key)
    items = list(results)

    if key is SortKey.price_asc:
        return sorted(items, key=lambda r: _price_key(r, 1))
    if key is SortKey.price_high:
        return sorted(items, key=lambda r: _price_key(r, -1))
    if key is SortKey.rating_high:
        return sorted(items, key=lambda r: -r.hotel.rating)
    if key is SortKey.rating_low:
        return sorted(items, key=lambda r: r.hotel.rating)
    return sorted(items, key=_name_key)


# ── Paginate ─────────────────────────────────────────────────────────────


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(count / page_size) if count > 0 else 0


def paginate(
    results: Sequence[HotelResult], page: int, page_size: int = PAGE_SIZE
) -> list[HotelResult]:
    """Return the 1-based *page*; out-of-range pages are empty."""
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(results[start:start + page_size])


# ── Pipeline ─────────────────────────────────────────────────────────────


def build_result_page(
    hotels: Iterable[Hotel],
    prices: Any,
    filters: FilterOptions | None = None,
    sort_key: SortKey | str | None = DEFAULT_SORT,
    page: int = 1,
    request_id: str | None = None,
) -> ResultPage:
    key = SortKey.parse(sort_key)
    price_list = coerce_prices(prices)

    composed = compose_results(hotels, price_list)
    filtered = filter_results(composed, filters)
    ordered = sort_results(filtered, key)

    return ResultPage(
        results=paginate(ordered, page),
        page=page,
        page_size=PAGE_SIZE,
        total_results=len(ordered),
        total_pages=total_pages(len(ordered)),
        sort=key,
        price_bounds=price_bounds(price_list),
        request_id=request_id,
    )
