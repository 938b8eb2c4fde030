"""Free-text destination -> airport codes, via OpenAI with a passthrough fallback."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)

MAX_AIRPORTS = 5

RESOLVER_PROMPT = """You are a travel location resolver.

Given a free-text destination that may be a city, a country, a region or an
ambiguous region, return airport IATA codes suitable for award-flight searches.

Rules:
- City or country: return 1 to 3 airports.
- Region or ambiguous region: return exactly 5 airports. For an ambiguous
  region choose one sensible interpretation, set confidence to "medium" and
  explain the assumption in "notes".
- Never return more than 5 airports. Never invent codes. Use UPPERCASE IATA.
- Prefer major international hubs with strong long-haul and alliance
  connectivity; optimize for likely award availability.
- If the input already looks like a valid IATA code, return it as-is.
- distanceKm is an approximate great-circle distance from the location
  center, or 0 when not meaningful.

Destination: "{destination}"
"""

RESOLUTION_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "airports": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "iata": {"type": "string"},
                    "city": {"type": ["string", "null"]},
                    "country": {"type": ["string", "null"]},
                    "distanceKm": {"type": "number"},
                },
                "required": ["iata", "city", "country", "distanceKm"],
            },
        },
        "input_type": {
            "type": "string",
            "enum": ["city", "country", "region", "ambiguous_region", "unknown"],
        },
        "confidence": {"type": "string", "enum": ["high", "medium", "low"]},
        "notes": {"type": "string"},
    },
    "required": ["airports", "input_type", "confidence", "notes"],
}


@dataclass
class Airport:
    iata: str
    city: Optional[str] = None
    country: Optional[str] = None
    distance_km: float = 0


@dataclass
class Resolution:
    """Airports a free-text destination resolved to."""
    airports: list[Airport] = field(default_factory=list)
    input_type: str = "unknown"
    confidence: str = "low"
    notes: str = ""

    @property
    def codes(self) -> list[str]:
        return [a.iata for a in self.airports]

    def city_names(self) -> dict[str, str]:
        """IATA -> display name (city when known)."""
        return {a.iata: a.city or a.iata for a in self.airports}


def fallback_resolution(raw: Optional[str]) -> Resolution:
    """Pass the raw input through as a single airport code."""
    return Resolution(
        airports=[Airport(iata=(raw or "").strip())],
        input_type="unknown",
        confidence="low",
        notes="LLM unavailable; passed through raw input",
    )


def _parse_resolution(content: str) -> Optional[Resolution]:
    parsed = json.loads(content)
    airports_raw = parsed.get("airports") if isinstance(parsed, dict) else None
    if not isinstance(airports_raw, list) or not airports_raw:
        return None

    airports = []
    for a in airports_raw[:MAX_AIRPORTS]:
        if not isinstance(a, dict):
            continue
        iata = str(a.get("iata") or "").strip().upper()
        if not iata:
            continue
        distance = a.get("distanceKm")
        airports.append(Airport(
            iata=iata,
            city=a.get("city") or None,
            country=a.get("country") or None,
            distance_km=distance if isinstance(distance, (int, float)) else 0,
        ))
    if not airports:
        return None

    return Resolution(
        airports=airports,
        input_type=parsed.get("input_type") or "unknown",
        confidence=parsed.get("confidence") or "low",
        notes=parsed.get("notes") or "",
    )


class DestinationResolver:
    """Resolve free text to 1-5 airports. Never raises; degrades to passthrough."""

    def __init__(self, client: Any = None, model: str = "gpt-4o-mini"):
        # client: an openai.AsyncOpenAI (or compatible); None disables the LLM
        self.client = client
        self.model = model

    @classmethod
    def from_api_key(cls, api_key: str, model: str = "gpt-4o-mini") -> "DestinationResolver":
        if not api_key:
            return cls(None, model)
        from openai import AsyncOpenAI
        return cls(AsyncOpenAI(api_key=api_key), model)

    async def resolve(self, destination: Optional[str]) -> Resolution:
        if not destination or not destination.strip():
            return fallback_resolution(destination)
        if self.client is None:
            return fallback_resolution(destination)

        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "user", "content": RESOLVER_PROMPT.format(destination=destination)},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "location_resolution",
                        "schema": RESOLUTION_SCHEMA,
                        "strict": True,
                    },
                },
            )
            content = resp.choices[0].message.content or ""
            if not content:
                return fallback_resolution(destination)
            resolution = _parse_resolution(content)
        except Exception as e:
            logger.warning(f"Destination resolver failed for {destination!r}: {e}")
            return fallback_resolution(destination)

        if resolution is None:
            return fallback_resolution(destination)

        logger.info(f"Resolved {destination!r} -> {', '.join(resolution.codes)} ({resolution.confidence})")
        return resolution
