"""Award availability providers."""

from .base import BaseProvider
from .seats import SeatsClient

__all__ = ["BaseProvider", "SeatsClient"]
