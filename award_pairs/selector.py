"""Pick the best flight-level itinerary for one leg of a date pair."""

import math
from typing import Any, Optional

from .eligibility import capability_for
from .models import TripSummary

# Missing stop counts / durations sort after every real value
STOPS_SENTINEL = 999
DURATION_SENTINEL = 99999


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def _int_or_none(value: Any) -> Optional[int]:
    n = _number(value)
    return int(n) if n is not None else None


def _rank_key(trip: dict) -> tuple:
    stops = _number(trip.get("Stops"))
    duration = _number(trip.get("TotalDuration"))
    return (
        stops if stops is not None else STOPS_SENTINEL,
        duration if duration is not None else DURATION_SENTINEL,
    )


def select_best_trip(candidates: list[dict], cabin: str) -> Optional[dict]:
    """
    Choose the best trip-detail candidate for *cabin*.

    Candidates whose Cabin label matches case-insensitively are ranked by
    fewest stops, then shortest total duration. Ties keep input order.
    Returns None when no candidate is in the cabin.
    """
    wanted = (cabin or "").lower()
    matching = [
        t for t in candidates
        if isinstance(t, dict) and str(t.get("Cabin") or "").lower() == wanted
    ]
    if not matching:
        return None
    return sorted(matching, key=_rank_key)[0]


def extract_trip_summary(trip: Optional[dict]) -> Optional[TripSummary]:
    """Reduce a raw trip-detail object to the fields shown on a card."""
    if not trip:
        return None
    source = trip.get("Source") or ""
    capability = capability_for(source)
    aircraft = trip.get("Aircraft")
    return TripSummary(
        origin=trip.get("OriginAirport") or "",
        destination=trip.get("DestinationAirport") or "",
        departs_at=trip.get("DepartsAt") or "",
        arrives_at=trip.get("ArrivesAt") or "",
        stops=_int_or_none(trip.get("Stops")),
        carriers=trip.get("Carriers") or "",
        flight_numbers=trip.get("FlightNumbers") or "",
        aircraft=(aircraft[0] or "") if isinstance(aircraft, list) and aircraft else "",
        cabin=trip.get("Cabin") or "",
        remaining_seats=_int_or_none(trip.get("RemainingSeats")),
        total_duration=_int_or_none(trip.get("TotalDuration")),
        source=source,
        program_name=capability.name if capability else source,
        mileage_cost=_number(trip.get("MileageCost")),
    )


def best_trip_summary(candidates: list[dict], cabin: str) -> Optional[TripSummary]:
    return extract_trip_summary(select_best_trip(candidates, cabin))
