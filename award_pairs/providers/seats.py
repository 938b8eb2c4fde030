"""seats.aero partner API client (cached search + trip detail)."""

import logging
from datetime import date
from typing import Any, Optional

import httpx

from .base import BaseProvider
from ..eligibility import ALLOWED_SOURCES
from ..errors import ConfigError, ProviderError
from ..models import AvailabilityRecord

logger = logging.getLogger(__name__)

SEATS_BASE_URL = "https://seats.aero/partnerapi"


class SeatsClient(BaseProvider):
    """Async client for the seats.aero partner API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = SEATS_BASE_URL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def provider_name(self) -> str:
        return "seats.aero"

    async def __aenter__(self) -> "SeatsClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def _get(self, path: str, params: Optional[dict] = None, *, what: str) -> Any:
        """GET a partner API path and return the decoded JSON body."""
        if not self.api_key:
            raise ConfigError("SEATS_API_KEY missing on server")

        client = self._get_client()
        try:
            resp = await client.get(
                path,
                params=params,
                headers={
                    "accept": "application/json",
                    "Partner-Authorization": self.api_key,
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"{what} request failed: {e}")
            raise ProviderError(f"{what} failed", status=502, detail=str(e) or type(e).__name__) from e

        if resp.status_code < 200 or resp.status_code >= 300:
            logger.warning(f"{what} returned status {resp.status_code}")
            raise ProviderError(f"{what} failed", status=resp.status_code, detail=resp.text)

        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(f"{what} failed", status=502, detail=resp.text) from e

    async def search_availability(
        self,
        origin: str,
        destination: str,
        start_date: date,
        end_date: date,
        *,
        take: int = 100,
        only_direct: bool = False,
        sources: Optional[list[str]] = None,
    ) -> list[AvailabilityRecord]:
        """Search seats.aero cached availability between two airports (or airport lists)."""
        params = {
            "origin_airport": origin.upper(),
            "destination_airport": destination.upper(),
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
            "take": str(take),
            "include_trips": "false",
            "only_direct_flights": "true" if only_direct else "false",
            "include_filtered": "false",
            "sources": ",".join(sources or ALLOWED_SOURCES),
        }
        logger.info(f"seats.aero: cached search {origin}->{destination} {start_date}..{end_date}")
        body = await self._get("/search", params, what="Seats Cached Search")
        return self._parse_records(body)

    async def get_trips(self, availability_id: str) -> list[dict]:
        """Fetch the flight-level trips for one availability ID."""
        body = await self._get(
            f"/trips/{availability_id}",
            {"include_filtered": "false"},
            what="Seats Get Trips",
        )
        data = body.get("data") if isinstance(body, dict) else None
        return data if isinstance(data, list) else []

    @staticmethod
    def _parse_records(body: Any) -> list[AvailabilityRecord]:
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list):
            return []

        records: list[AvailabilityRecord] = []
        for item in data:
            if not isinstance(item, dict) or not item.get("Date"):
                continue
            try:
                records.append(AvailabilityRecord.from_api(item))
            except ValueError:
                logger.debug(f"Skipping availability with unparseable date: {item.get('Date')!r}")
        logger.debug(f"seats.aero: parsed {len(records)} of {len(data)} availability objects")
        return records
