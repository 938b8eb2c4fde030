"""Assembly of the final card and option lists."""

import math
from typing import Optional

from .budget import points_from_miles
from .eligibility import LIMITED_RELIABLE, capability_for
from .models import (
    AdmissibleRecord,
    Card,
    DatePair,
    RedemptionOption,
    TripSummary,
    cabin_display,
)

MAX_OPTIONS = 10


def build_card(
    pair: DatePair,
    outbound_summary: Optional[TripSummary],
    return_summary: Optional[TripSummary],
) -> Card:
    """Combine a matched pair with its per-leg itineraries.

    A leg without a matching itinerary contributes 0 to the total.
    """
    outbound_points = (outbound_summary.mileage_cost if outbound_summary else None) or 0
    return_points = (return_summary.mileage_cost if return_summary else None) or 0
    return Card(
        depart_date=pair.depart_date,
        return_date=pair.return_date,
        nights=(pair.return_date - pair.depart_date).days,
        cabin=pair.cabin,
        outbound_summary=outbound_summary,
        return_summary=return_summary,
        total_points=outbound_points + return_points,
        was_fallback=pair.was_fallback,
    )


def build_option(
    admissible: AdmissibleRecord,
    origin: str,
    multiplier: float,
    destination_names: Optional[dict[str, str]] = None,
) -> RedemptionOption:
    """Turn an admissible record into a single-direction redemption option."""
    record = admissible.record
    capability = capability_for(record.source)
    destination = record.destination
    name = (destination_names or {}).get(destination) if destination else None
    return RedemptionOption(
        program=capability.name,
        capability=capability.level,
        disclaimer=capability.disclaimer if capability.level == LIMITED_RELIABLE else None,
        mileage_cost=admissible.cost,
        points_required=math.ceil(points_from_miles(admissible.cost, multiplier)),
        cabin=cabin_display(admissible.cabin),
        origin=origin,
        destination=destination,
        destination_name=name or destination,
        stops=record.stops.get(admissible.cabin),
        date=admissible.date,
    )


def dedupe_options(options: list[RedemptionOption]) -> list[RedemptionOption]:
    """Keep the first option per (program, origin, destination, cabin, cost)."""
    seen: dict[tuple, RedemptionOption] = {}
    for opt in options:
        key = (opt.program, opt.origin, opt.destination, opt.cabin, opt.mileage_cost)
        if key not in seen:
            seen[key] = opt
    return list(seen.values())


def group_by_destination(
    options: list[RedemptionOption],
    limit: int = MAX_OPTIONS,
) -> list[RedemptionOption]:
    """
    Keep at most two options per destination and cap the list.

    Per destination: the cheapest option, plus the cheapest non-stop option
    when that is a different one. Destinations are ordered by their cheapest
    option and the flattened list is truncated to *limit*.
    """
    groups: dict[Optional[str], list[RedemptionOption]] = {}
    for opt in options:
        groups.setdefault(opt.destination, []).append(opt)

    kept: list[list[RedemptionOption]] = []
    for group in groups.values():
        ranked = sorted(group, key=lambda o: o.points_required)
        cheapest = ranked[0]
        picks = [cheapest]
        nonstop = next((o for o in ranked if o.is_nonstop), None)
        if nonstop is not None and nonstop is not cheapest:
            picks.append(nonstop)
        kept.append(picks)

    kept.sort(key=lambda picks: picks[0].points_required)
    flattened = [opt for picks in kept for opt in picks]
    return flattened[:limit]
