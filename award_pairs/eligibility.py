"""Per-record cabin availability, cost extraction and budget admissibility."""

import logging
import math
from typing import Any, Iterable, Optional

from .models import AdmissibleRecord, AvailabilityRecord, ProgramCapability

logger = logging.getLogger(__name__)

LIVE_RELIABLE = "LIVE_RELIABLE"
LIMITED_RELIABLE = "LIMITED_RELIABLE"

SAVER_ONLY_DISCLAIMER = "Saver-level availability only; results may be incomplete"

PROGRAM_CAPABILITY = {
    "united": ProgramCapability(LIVE_RELIABLE, "United MileagePlus"),
    "aeroplan": ProgramCapability(LIVE_RELIABLE, "Air Canada Aeroplan"),
    "singapore": ProgramCapability(LIMITED_RELIABLE, "Singapore KrisFlyer", SAVER_ONLY_DISCLAIMER),
    "flyingblue": ProgramCapability(LIMITED_RELIABLE, "Air France–KLM Flying Blue", SAVER_ONLY_DISCLAIMER),
}

ALLOWED_SOURCES = list(PROGRAM_CAPABILITY)


def capability_for(source: str) -> Optional[ProgramCapability]:
    return PROGRAM_CAPABILITY.get((source or "").lower())


def coerce_cost(raw: Any) -> Optional[float]:
    """Coerce a raw mileage cost to a finite float, or None if it isn't one."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(value):
        return None
    return value


def is_available(record: AvailabilityRecord, cabin: str) -> bool:
    return record.available.get(cabin) is True


def cabin_cost(record: AvailabilityRecord, cabin: str) -> Optional[float]:
    """Positive mileage cost for *cabin*, or None when missing/invalid."""
    cost = coerce_cost(record.mileage_cost.get(cabin))
    if cost is None or cost <= 0:
        return None
    return cost


def admissible_cost(
    record: AvailabilityRecord,
    cabin: str,
    budget_miles: Optional[float] = None,
) -> Optional[float]:
    """Mileage cost when the record is bookable in *cabin* within *budget_miles*, else None.

    A budget of None means no cap.
    """
    if capability_for(record.source) is None:
        return None
    if not is_available(record, cabin):
        return None
    cost = cabin_cost(record, cabin)
    if cost is None:
        # Upstream flags the cabin as open but has no usable price
        logger.debug(
            "Dropping %s %s %s: available without a valid cost (%r)",
            record.source, record.date, cabin, record.mileage_cost.get(cabin),
        )
        return None
    if budget_miles is not None and cost > budget_miles:
        return None
    return cost


def is_admissible(
    record: AvailabilityRecord,
    cabin: str,
    budget_miles: Optional[float] = None,
) -> bool:
    return admissible_cost(record, cabin, budget_miles) is not None


def find_eligible_options(
    records: Iterable[AvailabilityRecord],
    budget_miles: Optional[float],
    cabin: str,
) -> list[AdmissibleRecord]:
    """Return every record admissible in *cabin* under *budget_miles*, in input order."""
    results: list[AdmissibleRecord] = []
    for record in records:
        cost = admissible_cost(record, cabin, budget_miles)
        if cost is None:
            continue
        results.append(AdmissibleRecord(
            date=record.date,
            cabin=cabin,
            cost=cost,
            source=record.source,
            record=record,
        ))
    return results
