"""Exceptions raised by award-pairs searches."""

from typing import Optional


class AwardPairsError(Exception):
    """Base error carrying an HTTP-like status and optional raw detail."""

    status = 500

    def __init__(self, message: str, status: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.detail = detail

    def to_dict(self) -> dict:
        out = {"error": self.message}
        if self.detail:
            out["detail"] = self.detail
        return out


class InvalidRequest(AwardPairsError):
    """Missing or malformed input. Raised before any upstream call."""

    status = 400


class ConfigError(AwardPairsError):
    """Required configuration (e.g. the seats.aero API key) is missing."""


class ProviderError(AwardPairsError):
    """Non-success response or network failure from an upstream provider."""

    status = 502
