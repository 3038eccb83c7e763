from __future__ import annotations

from collections import Counter
from typing import Any

FILTER_FIELDS = ("star_rating", "guest_rating", "price_range")
TOP_N = 10


def _percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    by_type: dict[str, list[dict[str, Any]]] = {"search": [], "search_failed": [], "booking": []}
    for event in events:
        by_type.setdefault(event["type"], []).append(event)

    searches = by_type["search"]
    bookings = by_type["booking"]
    total = len(searches)

    timings = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    destinations = Counter(s.get("destination_id", "unknown") for s in searches)
    filters_used = Counter(f for s in searches for f in FILTER_FIELDS if s.get(f))
    revenue = [b["total_price"] for b in bookings if b.get("total_price") is not None]

    return {
        "total_searches": total,
        "failed_searches": len(by_type["search_failed"]),
        "zero_result_searches": sum(1 for s in searches if not s.get("total_results")),
        "avg_response_time_ms": round(sum(timings) / len(timings), 1) if timings else 0.0,
        "top_destinations": [
            {"destination_id": uid, "count": count}
            for uid, count in destinations.most_common(TOP_N)
        ],
        "sort_usage": dict(Counter(s.get("sort", "unknown") for s in searches)),
        "filter_usage": {f: _percent(filters_used[f], total) for f in FILTER_FIELDS},
        "total_bookings": len(bookings),
        "booking_value": round(sum(revenue), 2),
    }
