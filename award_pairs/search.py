"""Search orchestration: paired-date cards and single-direction redemption options.

Both searches validate their input before touching any provider. Upstream
fetches fan out with asyncio.gather and the first ProviderError aborts the
whole search; nothing is retried.

Usage::

    async with SeatsClient(api_key) as seats:
        result = await find_date_pair_cards(
            seats, "BLR", "BKK", date(2026, 2, 1), date(2026, 2, 28),
            min_nights=3, max_nights=10, cabin_pref="economy",
        )
"""

import asyncio
import calendar
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .aggregator import build_card, build_option, dedupe_options, group_by_destination
from .budget import card_multiplier, miles_from_points
from .eligibility import find_eligible_options
from .errors import InvalidRequest
from .matcher import match_date_pairs, no_match_message, normalize_nights
from .models import (
    BUSINESS,
    CABINS,
    ECONOMY,
    Card,
    DatePair,
    OptionSearchResult,
    PairSearchResult,
)
from .narrative import FALLBACK_SUMMARY, NarrativeGenerator
from .providers.base import BaseProvider
from .resolver import DestinationResolver
from .selector import best_trip_summary

logger = logging.getLogger(__name__)

ORIGIN_CODE = {
    "Delhi": "DEL",
    "Mumbai": "BOM",
    "Bengaluru": "BLR",
    "Hyderabad": "HYD",
    "Chennai": "MAA",
}

CABIN_CODE = {
    "Economy": "Y",
    "Business": "J",
    "Premium Economy": "W",
    "First": "F",
}

MONTH_FORMATS = ("%Y-%m-%d", "%Y-%m", "%B %Y", "%b %Y", "%B %d %Y", "%b %d %Y")

PAIR_SEARCH_TAKE = 100
OPTION_SEARCH_TAKE = 500


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------

def month_to_date_range(travel_month: Optional[str]) -> tuple[date, date]:
    """Return the first and last day of the month named by *travel_month*.

    Accepts ``2026-02``, ``2026-02-15``, ``February 2026`` and ``Feb 2026``.
    """
    if not travel_month or not isinstance(travel_month, str):
        raise InvalidRequest("Invalid travelMonth: required")

    text = travel_month.strip().replace(",", "")
    parsed = None
    for fmt in MONTH_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
            break
        except ValueError:
            continue
    if parsed is None:
        raise InvalidRequest("Invalid travelMonth format", detail=f"Could not parse {travel_month!r}")

    _, last_day = calendar.monthrange(parsed.year, parsed.month)
    return date(parsed.year, parsed.month, 1), date(parsed.year, parsed.month, last_day)


def resolve_origin(origin: str) -> str:
    return ORIGIN_CODE.get(origin, origin)


def cabin_code(label: Optional[str]) -> str:
    code = CABIN_CODE.get(label or "")
    if code is None:
        raise InvalidRequest(
            "Invalid cabin",
            detail="Cabin must be Economy, Business, Premium Economy, or First",
        )
    return code


def engine_cabin(code: str) -> str:
    """The matching engine only knows two cabins; J is business, the rest economy."""
    return BUSINESS if code == "J" else ECONOMY


# ---------------------------------------------------------------------------
# Paired-date search
# ---------------------------------------------------------------------------

async def _card_for_pair(provider: BaseProvider, pair: DatePair) -> Card:
    out_trips, ret_trips = await asyncio.gather(
        provider.get_trips(pair.outbound.id),
        provider.get_trips(pair.return_leg.id),
    )
    return build_card(
        pair,
        best_trip_summary(out_trips, pair.cabin),
        best_trip_summary(ret_trips, pair.cabin),
    )


async def find_date_pair_cards(
    provider: BaseProvider,
    origin: str,
    destination: str,
    start_date: Optional[date],
    end_date: Optional[date],
    min_nights: int = 3,
    max_nights: int = 10,
    cabin_pref: str = ECONOMY,
    budget_miles: Optional[float] = None,
) -> PairSearchResult:
    """
    Find up to five bookable round trips between two airports in a date range.

    Args:
        provider: Availability + trip-detail source
        origin: Origin IATA code
        destination: Destination IATA code
        start_date / end_date: Search range, usually one month
        min_nights / max_nights: Stay length window (inclusive)
        cabin_pref: "economy" or "business"
        budget_miles: Per-leg mileage cap (None = no cap)

    Returns:
        PairSearchResult with cards, or no cards and an explanatory message.
    """
    if not origin or not destination or not start_date or not end_date:
        raise InvalidRequest(
            "Missing required query params",
            detail="Required: origin_airport, destination_airport, start_date, end_date",
        )
    cabin_pref = (cabin_pref or "").lower()
    if cabin_pref not in CABINS:
        raise InvalidRequest("Invalid cabin", detail="Cabin must be economy or business")
    origin = origin.upper()
    destination = destination.upper()
    min_nights, max_nights = normalize_nights(min_nights, max_nights)

    outbound, return_legs = await asyncio.gather(
        provider.search_availability(origin, destination, start_date, end_date, take=PAIR_SEARCH_TAKE),
        provider.search_availability(destination, origin, start_date, end_date, take=PAIR_SEARCH_TAKE),
    )
    logger.info(f"{origin}<->{destination}: {len(outbound)} outbound, {len(return_legs)} return records")

    result = PairSearchResult(
        origin=origin,
        destination=destination,
        start_date=start_date,
        end_date=end_date,
        min_nights=min_nights,
        max_nights=max_nights,
    )

    match = match_date_pairs(outbound, return_legs, min_nights, max_nights, cabin_pref, budget_miles)
    if match.reason is not None:
        result.message = no_match_message(match.reason, origin, destination, min_nights, max_nights)
        return result

    result.cards = list(await asyncio.gather(
        *[_card_for_pair(provider, pair) for pair in match.pairs]
    ))
    return result


# ---------------------------------------------------------------------------
# Single-direction "what can I reach" search
# ---------------------------------------------------------------------------

@dataclass
class OptionsRequest:
    """Input for find_reachable_options."""
    points: Optional[float]
    origin: str
    destination: str
    travel_month: str
    cabin: str  # Economy / Business / Premium Economy / First
    card_name: str
    only_direct: bool = False
    trip_duration: Optional[int] = None

    def validate(self) -> None:
        required = {
            "points": self.points,
            "origin": self.origin,
            "destination": self.destination,
            "travel_month": self.travel_month,
            "cabin": self.cabin,
            "card_name": self.card_name,
        }
        missing = [name for name, value in required.items() if value is None or value == ""]
        if missing:
            raise InvalidRequest("Missing required fields", detail=f"Missing: {', '.join(missing)}")
        try:
            points = float(self.points)
        except (TypeError, ValueError):
            raise InvalidRequest("Invalid points: must be a number")
        if not math.isfinite(points) or points < 0:
            raise InvalidRequest("Invalid points: must be a non-negative number")


async def find_reachable_options(
    provider: BaseProvider,
    request: OptionsRequest,
    resolver: Optional[DestinationResolver] = None,
    narrator: Optional[NarrativeGenerator] = None,
) -> OptionSearchResult:
    """
    List affordable one-way redemptions from an origin to a (free-text) destination.

    Points are converted to partner miles with the card's multiplier, the
    destination is resolved to airports, and every admissible record becomes an
    option. Options are deduplicated, reduced to the cheapest (and cheapest
    non-stop) per destination, capped, and decorated with a short trip summary.
    """
    request.validate()

    points = float(request.points)
    multiplier = card_multiplier(request.card_name)
    partner_miles = miles_from_points(points, multiplier)
    origin_airport = resolve_origin(request.origin)
    start_date, end_date = month_to_date_range(request.travel_month)
    code = cabin_code(request.cabin)
    cabin = engine_cabin(code)

    resolver = resolver or DestinationResolver()
    narrator = narrator or NarrativeGenerator()

    resolution = await resolver.resolve(request.destination)
    codes = [c for c in resolution.codes if c]
    destination_airport = ",".join(codes) if codes else request.destination.strip()

    records = await provider.search_availability(
        origin_airport,
        destination_airport,
        start_date,
        end_date,
        take=OPTION_SEARCH_TAKE,
        only_direct=request.only_direct,
    )

    admissible = find_eligible_options(records, partner_miles, cabin)
    logger.info(
        f"{len(admissible)} of {len(records)} records admissible "
        f"({cabin}, budget {partner_miles:,} miles)"
    )

    names = resolution.city_names()
    options = [build_option(a, origin_airport, multiplier, names) for a in admissible]
    options.sort(key=lambda o: o.points_required)
    options = group_by_destination(dedupe_options(options))

    summaries = await asyncio.gather(*[
        narrator.generate(o.destination_name or o.destination or destination_airport, request.trip_duration)
        for o in options
    ])
    for option, summary in zip(options, summaries):
        option.trip_summary = summary or list(FALLBACK_SUMMARY)

    return OptionSearchResult(
        points=points,
        card_name=request.card_name,
        multiplier=multiplier,
        partner_miles=partner_miles,
        origin_airport=origin_airport,
        destination_airport=destination_airport,
        start_date=start_date,
        end_date=end_date,
        cabin_code=code,
        options=options,
    )
