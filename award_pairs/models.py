"""Data models for award-pairs date-pair matching."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

ECONOMY = "economy"
BUSINESS = "business"
CABINS = (ECONOMY, BUSINESS)

# seats.aero field prefix per cabin
CABIN_PREFIX = {
    ECONOMY: "Y",
    BUSINESS: "J",
}


def other_cabin(cabin: str) -> str:
    return BUSINESS if cabin == ECONOMY else ECONOMY


def cabin_display(cabin: str) -> str:
    return {
        ECONOMY: "Economy",
        BUSINESS: "Business",
    }.get(cabin, cabin.title())


def _route_destination(raw: dict) -> Optional[str]:
    if raw.get("destination_airport"):
        return raw["destination_airport"]
    if raw.get("DestinationAirport"):
        return raw["DestinationAirport"]
    route = raw.get("Route")
    if isinstance(route, str) and "-" in route:
        return route.split("-")[1].strip() or None
    if isinstance(route, dict):
        return route.get("DestinationAirport")
    return None


def _route_origin(raw: dict) -> Optional[str]:
    if raw.get("origin_airport"):
        return raw["origin_airport"]
    if raw.get("OriginAirport"):
        return raw["OriginAirport"]
    route = raw.get("Route")
    if isinstance(route, str) and "-" in route:
        return route.split("-")[0].strip() or None
    if isinstance(route, dict):
        return route.get("OriginAirport")
    return None


@dataclass(frozen=True)
class AvailabilityRecord:
    """One calendar day of award space for one program on one direction."""
    id: str
    date: date
    source: str  # program id, lowercased (united / aeroplan / ...)
    origin: Optional[str] = None
    destination: Optional[str] = None
    available: dict[str, bool] = field(default_factory=dict)
    mileage_cost: dict[str, Any] = field(default_factory=dict)  # raw, coerced later
    stops: dict[str, Optional[int]] = field(default_factory=dict)
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, raw: dict) -> "AvailabilityRecord":
        """Build a record from a seats.aero cached-search object."""
        available = {}
        mileage_cost = {}
        stops = {}
        for cabin, prefix in CABIN_PREFIX.items():
            available[cabin] = (
                raw.get(f"{prefix}AvailableRaw") is True
                or raw.get(f"{prefix}Available") is True
            )
            cost = raw.get(f"{prefix}MileageCostRaw")
            if cost is None:
                cost = raw.get(f"{prefix}MileageCost")
            mileage_cost[cabin] = cost

            explicit_stops = raw.get("stops")
            if isinstance(explicit_stops, int) and not isinstance(explicit_stops, bool):
                stops[cabin] = explicit_stops
            elif raw.get(f"{prefix}DirectRaw") is True:
                stops[cabin] = 0
            else:
                stops[cabin] = None

        return cls(
            id=str(raw.get("ID", "")),
            date=date.fromisoformat(str(raw.get("Date", ""))[:10]),
            source=str(raw.get("Source") or "").lower(),
            origin=_route_origin(raw),
            destination=_route_destination(raw),
            available=available,
            mileage_cost=mileage_cost,
            stops=stops,
            raw=raw,
        )


@dataclass(frozen=True)
class ProgramCapability:
    """How far a program's cached availability can be trusted."""
    level: str  # LIVE_RELIABLE / LIMITED_RELIABLE
    name: str
    disclaimer: Optional[str] = None


@dataclass(frozen=True)
class AdmissibleRecord:
    """A (record, cabin) combination that is available and affordable."""
    date: date
    cabin: str
    cost: float
    source: str
    record: AvailabilityRecord


@dataclass(frozen=True)
class CabinMatch:
    cabin: str
    was_fallback: bool = False


@dataclass
class DatePair:
    """A candidate round trip inside the night window."""
    depart_date: date
    return_date: date
    nights: int
    cabin_match: CabinMatch
    outbound: AvailabilityRecord
    return_leg: AvailabilityRecord

    @property
    def cabin(self) -> str:
        return self.cabin_match.cabin

    @property
    def was_fallback(self) -> bool:
        return self.cabin_match.was_fallback


class NoMatchReason(str, Enum):
    NO_OUTBOUND = "no_outbound_availability"
    NO_RETURN = "no_return_availability"
    NO_PAIRS_IN_RANGE = "no_pairs_in_range"


@dataclass
class MatchResult:
    pairs: list[DatePair] = field(default_factory=list)
    reason: Optional[NoMatchReason] = None


@dataclass
class TripSummary:
    """Flight-level detail for one leg, taken from a trip-detail candidate."""
    origin: str
    destination: str
    departs_at: str  # ISO datetime string as returned by the provider
    arrives_at: str
    stops: Optional[int]
    carriers: str
    flight_numbers: str
    aircraft: str
    cabin: str
    remaining_seats: Optional[int] = None
    total_duration: Optional[int] = None  # minutes
    source: str = ""
    program_name: str = ""
    mileage_cost: Optional[float] = None

    def format_duration(self) -> str:
        if self.total_duration is None:
            return "–"
        h = self.total_duration // 60
        m = self.total_duration % 60
        return f"{h}h{m:02d}m"


@dataclass
class Card:
    """A bookable date pair with the chosen itinerary for each leg."""
    depart_date: date
    return_date: date
    nights: int
    cabin: str
    outbound_summary: Optional[TripSummary]
    return_summary: Optional[TripSummary]
    total_points: float
    was_fallback: bool = False


@dataclass
class RedemptionOption:
    """One affordable single-direction redemption (the "what can I reach" mode)."""
    program: str
    capability: str
    disclaimer: Optional[str]
    mileage_cost: float
    points_required: int
    cabin: str  # display label: Economy / Business
    origin: str
    destination: Optional[str]
    destination_name: Optional[str]
    stops: Optional[int]
    date: Optional[date] = None
    trip_summary: list[str] = field(default_factory=list)

    @property
    def is_nonstop(self) -> bool:
        return self.stops == 0


@dataclass
class PairSearchResult:
    """Response for a paired-date search."""
    origin: str
    destination: str
    start_date: date
    end_date: date
    min_nights: int
    max_nights: int
    cards: list[Card] = field(default_factory=list)
    message: Optional[str] = None


@dataclass
class OptionSearchResult:
    """Response for a single-direction options search."""
    points: float
    card_name: str
    multiplier: float
    partner_miles: int
    origin_airport: str
    destination_airport: str
    start_date: date
    end_date: date
    cabin_code: str
    options: list[RedemptionOption] = field(default_factory=list)
