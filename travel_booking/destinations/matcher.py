from __future__ import annotations

from difflib import SequenceMatcher
from typing import Sequence

from ..hotels.models import Destination

MAX_MATCHES = 5
MIN_MATCH_SCORE = 0.7

_PREFIX_SCORE = 1.0
_SUBSTRING_SCORE = 0.95


def _field_score(matcher: SequenceMatcher, query: str, value: str) -> float:
    """Score *query* against one field, allowing for small typos.

    ``matcher`` already holds the query as its second sequence, which is the
    one SequenceMatcher caches.
    """
    value = value.strip().casefold()
    if not value:
        return 0.0
    if value.startswith(query):
        return _PREFIX_SCORE
    if query in value:
        return _SUBSTRING_SCORE

    matcher.set_seq1(value)
    best = matcher.ratio()

    # Best partial alignment: the query against each same-length window.
    width = len(query)
    for start in range(max(len(value) - width + 1, 0)):
        matcher.set_seq1(value[start:start + width])
        if matcher.real_quick_ratio() <= best or matcher.quick_ratio() <= best:
            continue
        best = max(best, matcher.ratio())
    return best


def _score(matcher: SequenceMatcher, needle: str, destination: Destination) -> float:
    return max(
        _field_score(matcher, needle, destination.term),
        _field_score(matcher, needle, destination.state),
    )


def score_destination(query: str, destination: Destination) -> float:
    needle = query.strip().casefold()
    if not needle:
        return 0.0
    return _score(SequenceMatcher(None, b=needle, autojunk=False), needle, destination)


def match_destinations(
    query: str | None,
    destinations: Sequence[Destination],
    limit: int = MAX_MATCHES,
    min_score: float = MIN_MATCH_SCORE,
) -> list[Destination]:
    """Return the destinations that best match *query*, most relevant first.

    An empty query matches nothing. Equal scores keep catalog order.
    """
    if not query or not query.strip() or not destinations or limit < 1:
        return []

    needle = query.strip().casefold()
    matcher = SequenceMatcher(None, b=needle, autojunk=False)

    scored: list[tuple[float, Destination]] = []
    for destination in destinations:
        score = _score(matcher, needle, destination)
        if score >= min_score:
            scored.append((score, destination))

    scored.sort(key=lambda item: -item[0])
    return [destination for _, destination in scored[:limit]]
