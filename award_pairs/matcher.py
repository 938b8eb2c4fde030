"""
Round-trip date-pair matching.
Pairs outbound availability with return availability inside a night window,
buckets the candidates by trip length and keeps a spread of up to five lengths.
"""
import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional

from .eligibility import is_admissible
from .models import (
    BUSINESS,
    CABINS,
    ECONOMY,
    AvailabilityRecord,
    CabinMatch,
    DatePair,
    MatchResult,
    NoMatchReason,
    other_cabin,
)

logger = logging.getLogger(__name__)

MAX_DURATIONS = 5


def _index_by_date(
    records: Iterable[AvailabilityRecord],
    budget_miles: Optional[float],
) -> dict[date, dict[str, list[AvailabilityRecord]]]:
    """Group admissible records by date, split per cabin. Keeps input order within a date."""
    by_date: dict[date, dict[str, list[AvailabilityRecord]]] = {}
    for record in records:
        for cabin in CABINS:
            if not is_admissible(record, cabin, budget_miles):
                continue
            slot = by_date.setdefault(record.date, {c: [] for c in CABINS})
            slot[cabin].append(record)
    return by_date


def select_durations(durations: Iterable[int], limit: int = MAX_DURATIONS) -> list[int]:
    """Pick up to *limit* night counts spread evenly across the available range.

    With more than *limit* distinct values, index i (0..limit-1) maps to
    round(i * (n - 1) / (limit - 1)) of the sorted values, rounding halves up.
    Duplicate indices collapse, so fewer than *limit* values can come back.
    """
    available = sorted(set(durations))
    if len(available) <= limit:
        return available

    step = (len(available) - 1) / (limit - 1)
    selected: list[int] = []
    for i in range(limit):
        idx = math.floor(i * step + 0.5)
        value = available[idx]
        if value not in selected:
            selected.append(value)
    return selected


def no_match_message(
    reason: NoMatchReason,
    origin: str,
    destination: str,
    min_nights: int,
    max_nights: int,
) -> str:
    if reason == NoMatchReason.NO_OUTBOUND:
        return f"No outbound availability found for {origin} → {destination} in this date range"
    if reason == NoMatchReason.NO_RETURN:
        return f"No return availability found for {destination} → {origin} in this date range"
    return f"No date pairs found for {min_nights}–{max_nights} nights in this month"


def normalize_nights(min_nights: int, max_nights: int) -> tuple[int, int]:
    """Clamp the window to min >= 1 and max >= min."""
    min_n = max(1, int(min_nights))
    max_n = max(min_n, int(max_nights))
    return min_n, max_n


def match_date_pairs(
    outbound: Iterable[AvailabilityRecord],
    return_legs: Iterable[AvailabilityRecord],
    min_nights: int,
    max_nights: int,
    preferred_cabin: str,
    budget_miles: Optional[float] = None,
) -> MatchResult:
    """
    Match outbound and return availability into round-trip date pairs.

    Args:
        outbound: Records for origin -> destination
        return_legs: Records for destination -> origin
        min_nights: Shortest stay (inclusive, at least 1)
        max_nights: Longest stay (inclusive)
        preferred_cabin: economy or business; the other cabin is used when
            the preferred one has no space
        budget_miles: Per-leg mileage cap; None means no cap

    Returns:
        MatchResult with at most five pairs sorted by nights, or an empty
        result carrying the reason nothing matched.
    """
    min_nights, max_nights = normalize_nights(min_nights, max_nights)
    preferred_cabin = BUSINESS if (preferred_cabin or "").lower() == BUSINESS else ECONOMY

    # Stable sort: records sharing a date keep their input order
    sorted_outbound = sorted(outbound, key=lambda r: r.date)
    outbound_by_date = _index_by_date(sorted_outbound, budget_miles)
    return_by_date = _index_by_date(return_legs, budget_miles)

    if not outbound_by_date:
        return MatchResult(reason=NoMatchReason.NO_OUTBOUND)
    if not return_by_date:
        return MatchResult(reason=NoMatchReason.NO_RETURN)

    sorted_return_dates = sorted(return_by_date)
    pairs_by_nights: dict[int, list[DatePair]] = defaultdict(list)

    for depart in sorted(outbound_by_date):
        out_slot = outbound_by_date[depart]
        if out_slot[preferred_cabin]:
            chosen_cabin = preferred_cabin
        elif out_slot[other_cabin(preferred_cabin)]:
            chosen_cabin = other_cabin(preferred_cabin)
        else:
            continue

        earliest = depart + timedelta(days=min_nights)
        latest = depart + timedelta(days=max_nights)
        window = [d for d in sorted_return_dates if earliest <= d <= latest]

        cabin = chosen_cabin
        return_dates = [d for d in window if return_by_date[d][cabin]]
        was_fallback = False
        if not return_dates and out_slot[other_cabin(chosen_cabin)]:
            # The outbound date must also be bookable in the fallback cabin
            cabin = other_cabin(chosen_cabin)
            return_dates = [d for d in window if return_by_date[d][cabin]]
            was_fallback = True
        if not return_dates:
            continue

        out_record = out_slot[cabin][0]

        for return_date in return_dates:
            nights = (return_date - depart).days
            pairs_by_nights[nights].append(DatePair(
                depart_date=depart,
                return_date=return_date,
                nights=nights,
                cabin_match=CabinMatch(cabin=cabin, was_fallback=was_fallback),
                outbound=out_record,
                return_leg=return_by_date[return_date][cabin][0],
            ))

    if not pairs_by_nights:
        return MatchResult(reason=NoMatchReason.NO_PAIRS_IN_RANGE)

    selected = select_durations(pairs_by_nights)
    logger.debug(
        "Durations available %s, selected %s",
        sorted(pairs_by_nights), selected,
    )

    # Buckets were filled in ascending outbound order, so [0] is the earliest departure
    pairs = [pairs_by_nights[nights][0] for nights in selected]
    pairs.sort(key=lambda p: p.nights)
    return MatchResult(pairs=pairs)
