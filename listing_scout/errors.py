# === FILE: listing_scout/errors.py ===
"""Exception hierarchy shared by the crawler and the extractor."""
from __future__ import annotations

from typing import Optional

__all__ = ("ScoutError", "TransportError", "BlockedError", "ExtractionError")


class ScoutError(Exception):
    """Base class for every error raised by ListingScout."""


class TransportError(ScoutError):
    """Fetch failed: timeout, connection failure or an unusable HTTP status.

    ``retryable`` is False for outcomes another attempt cannot change
    (e.g. HTTP 404); the scheduler then fails the request immediately.
    """

    def __init__(self, message: str, *, status: Optional[int] = None, retryable: bool = True) -> None:
        super().__init__(message)
        self.status = status
        self.retryable = retryable


class BlockedError(TransportError):
    """The fetched page is an anti-bot block page."""

    def __init__(self, reason: str, *, status: Optional[int] = None) -> None:
        super().__init__(f"blocked: {reason}", status=status, retryable=True)
        self.reason = reason


class ExtractionError(ScoutError):
    """A selector or field parser failed on a property page."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field
