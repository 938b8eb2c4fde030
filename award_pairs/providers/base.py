"""Base provider interface."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from ..models import AvailabilityRecord


class BaseProvider(ABC):
    """Abstract base class for award availability sources."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Name of the availability source."""
        ...

    @abstractmethod
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
        """
        Fetch cached award availability for a date range.

        Args:
            origin: IATA airport code, or several joined with commas
            destination: IATA airport code, or several joined with commas
            start_date: First day to search
            end_date: Last day to search (inclusive)
            take: Maximum records to return
            only_direct: Restrict to non-stop availability
            sources: Program ids to include

        Returns:
            One record per day/program/route with availability.

        Raises:
            ProviderError on a non-success response or network failure.
        """
        ...

    @abstractmethod
    async def get_trips(self, availability_id: str) -> list[dict]:
        """
        Fetch flight-level itineraries behind one availability record.

        Raises:
            ProviderError on a non-success response or network failure.
        """
        ...
