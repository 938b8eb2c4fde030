"""Short destination trip summaries generated with OpenAI."""

import json
import logging
from typing import Any, Optional

from .cache import SummaryCache, make_key

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = ["Explore the city at your own pace"]
MAX_BULLETS = 5

SUMMARY_PROMPT = """You are generating a concise trip summary for a generic sightseeing, first-time visit.
Destination: {destination}
Duration: {days} day(s)

Return a JSON object {{"bullets": [...]}} with 3-5 short bullet strings (one sentence each),
max 5 bullets, no numbering, no emojis, no specific hotels or bookings. If duration < 5,
reduce bullets accordingly. Focus on a realistic day-by-day flow (arrival, central
landmarks, culture/food, optional day trip, departure)."""


def clamp_days(days: Any) -> int:
    try:
        n = int(days)
    except (TypeError, ValueError):
        n = 1
    return max(1, min(n, 30))


def parse_bullets(content: str) -> list[str]:
    """Pull the bullet list out of a model reply; tolerant of a few JSON shapes."""
    parsed = json.loads(content)
    if isinstance(parsed, list):
        bullets = parsed
    elif isinstance(parsed, dict):
        bullets = next(
            (parsed[k] for k in ("bullets", "summary", "tripSummary") if isinstance(parsed.get(k), list)),
            [],
        )
    else:
        bullets = []
    cleaned = [b.strip() for b in bullets if isinstance(b, str) and b.strip()]
    return cleaned[:MAX_BULLETS]


class NarrativeGenerator:
    """Generates 3-5 bullet trip summaries per (destination, days).

    Results are cached in the injected SummaryCache, which also coalesces
    concurrent requests for the same destination. Any failure (or missing
    credentials) yields FALLBACK_SUMMARY; failures are not cached.
    """

    def __init__(self, client: Any = None, cache: Optional[SummaryCache] = None, model: str = "gpt-4o-mini"):
        self.client = client
        self.cache = cache if cache is not None else SummaryCache()
        self.model = model

    @classmethod
    def from_api_key(cls, api_key: str, cache: Optional[SummaryCache] = None, model: str = "gpt-4o-mini") -> "NarrativeGenerator":
        if not api_key:
            return cls(None, cache, model)
        from openai import AsyncOpenAI
        return cls(AsyncOpenAI(api_key=api_key), cache, model)

    async def generate(self, destination: Optional[str], days: Optional[int]) -> list[str]:
        if self.client is None:
            return list(FALLBACK_SUMMARY)

        key = make_key(destination, days)
        try:
            return await self.cache.get_or_create(key, lambda: self._generate(destination, days))
        except Exception as e:
            logger.warning(f"Trip summary failed for {destination or 'unknown'}: {e}")
            return list(FALLBACK_SUMMARY)

    async def _generate(self, destination: Optional[str], days: Optional[int]) -> list[str]:
        safe_days = clamp_days(days)
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": "Return only JSON. No extra text."},
                {"role": "user", "content": SUMMARY_PROMPT.format(
                    destination=destination or "unknown", days=safe_days,
                )},
            ],
            response_format={"type": "json_object"},
        )
        content = resp.choices[0].message.content or ""
        logger.debug(f"Trip summary raw output for {destination}: {content}")
        bullets = parse_bullets(content)
        if not bullets:
            raise ValueError("model returned no usable bullets")
        logger.info(f"Generated {len(bullets)} summary bullets for {destination} ({safe_days} days)")
        return bullets
