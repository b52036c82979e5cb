# listing_scout/crawler/models.py
"""
Data models for the ListingScout crawler.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = (
    "SearchRequest",
    "PropertyRequest",
    "CrawlRequest",
    "CrawlBudget",
    "CrawlStats",
    "PropertyRecord",
    "utc_now",
)


_ERROR_FIELDS = {"url", "scraped_at", "error", "original_address"}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _RequestBase:
    __slots__ = ()

    def with_next_attempt(self) -> Any:
        """Copy of this request with ``attempt`` incremented (the only mutable part)."""
        return replace(self, attempt=self.attempt + 1)  # type: ignore[attr-defined]


@dataclass(slots=True, frozen=True)
class SearchRequest(_RequestBase):
    """Listing-search results page expected to yield property links."""

    url: str
    original_address: str
    attempt: int = 0
    label: ClassVar[str] = "SEARCH"


@dataclass(slots=True, frozen=True)
class PropertyRequest(_RequestBase):
    """Single listing detail page expected to yield one record."""

    url: str
    from_search: bool = False
    original_address: Optional[str] = None
    attempt: int = 0
    label: ClassVar[str] = "PROPERTY"


CrawlRequest = Union[SearchRequest, PropertyRequest]


@dataclass(slots=True)
class CrawlBudget:
    """Process-wide cap on admitted requests; ``issued`` never exceeds ``max_requests``."""

    max_requests: int
    issued: int = 0

    def try_issue(self) -> bool:
        if self.issued >= self.max_requests:
            return False
        self.issued += 1
        return True

    @property
    def remaining(self) -> int:
        return self.max_requests - self.issued

    @property
    def exhausted(self) -> bool:
        return self.issued >= self.max_requests


@dataclass(slots=True)
class CrawlStats:
    """Counters for one crawl run."""

    issued: int = 0
    rejected: int = 0
    fetched: int = 0
    retried: int = 0
    blocked: int = 0
    emitted: int = 0
    failed: int = 0
    links_enqueued: int = 0
    drift_warnings: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class PropertyRecord(BaseModel):
    """One output row; serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    scraped_at: datetime = Field(default_factory=utc_now)
    address: Optional[str] = None
    suburb: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    full_address: Optional[str] = None
    price: Optional[int] = None
    price_text: Optional[str] = None
    property_type: Optional[str] = None
    property_status: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    parking_spaces: Optional[int] = None
    land_size: Optional[int] = None
    building_size: Optional[int] = None
    listing_id: Optional[str] = None
    description: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    agent_name: Optional[str] = None
    agency_name: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    image_count: int = 0
    original_address: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failed(
        cls,
        url: str,
        error: Union[str, BaseException],
        *,
        original_address: Optional[str] = None,
    ) -> PropertyRecord:
        """Error-shaped record: only url, timestamp, error and seed address."""
        return cls(url=url, error=str(error) or type(error).__name__, original_address=original_address)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict; error records carry only their four fields."""
        if self.error is not None:
            return self.model_dump(mode="json", by_alias=True, include=_ERROR_FIELDS, exclude_none=True)
        exclude = {"error"}
        if self.original_address is None:
            exclude.add("original_address")
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
