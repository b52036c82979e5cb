# === FILE: listing_scout/parser/extractor.py ===
"""Page → PropertyRecord transform.

Composes the selector resolver, the field parsers and the image resolver for
one site profile.  :meth:`RecordExtractor.extract` never raises: any failure
inside comes back as the error side of an :class:`ExtractionResult`, and
:meth:`ExtractionResult.to_record` is the one place that turns it into the
error-shaped record.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from listing_scout.crawler.link_extractor import extract_property_links
from listing_scout.crawler.models import PropertyRecord
from listing_scout.errors import ExtractionError
from listing_scout.logger import get_logger
from listing_scout.parser.fields import (
    listing_id_from_url,
    parse_area,
    parse_count,
    parse_price,
    split_address,
)
from listing_scout.parser.html_parser import PageDocument
from listing_scout.parser.images import ImageResolver
from listing_scout.parser.selectors import SelectorResolver
from listing_scout.profiles import SiteProfile

__all__ = ("ExtractionResult", "RecordExtractor")

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class ExtractionResult:
    """Either a record or the error that prevented building one."""

    record: Optional[PropertyRecord] = None
    error: Optional[ExtractionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.record is not None

    def to_record(self, url: str, original_address: Optional[str] = None) -> PropertyRecord:
        if self.record is None:
            return PropertyRecord.failed(
                url, self.error or ExtractionError("no record produced"), original_address=original_address
            )
        if original_address is not None:
            return self.record.model_copy(update={"original_address": original_address})
        return self.record


def _area(text: Optional[str]) -> Optional[int]:
    area = parse_area(text)
    return area if area is not None else parse_count(text)


class RecordExtractor:
    """Builds records for pages of one site profile."""

    def __init__(
        self,
        profile: SiteProfile,
        *,
        resolver: Optional[SelectorResolver] = None,
        images: Optional[ImageResolver] = None,
    ) -> None:
        self.profile = profile
        self.resolver = resolver or SelectorResolver.from_specs(profile.fields)
        self.images = images or ImageResolver(profile.images)

    def extract(self, doc: PageDocument, url: str) -> ExtractionResult:
        try:
            return ExtractionResult(record=self._build(doc, url))
        except ExtractionError as exc:
            logger.error("Error extracting data from %s: %s", url, exc)
            return ExtractionResult(error=exc)
        except Exception as exc:  # hostile markup must not end the batch
            logger.error("Error extracting data from %s: %s: %s", url, type(exc).__name__, exc)
            return ExtractionResult(error=ExtractionError(f"{type(exc).__name__}: {exc}"))

    def extract_record(
        self, doc: PageDocument, url: str, *, original_address: Optional[str] = None
    ) -> PropertyRecord:
        """Total variant of :meth:`extract`: always returns a record."""
        return self.extract(doc, url).to_record(url, original_address)

    def discover_links(self, doc: PageDocument) -> List[str]:
        """Property URLs on a search results page."""
        return extract_property_links(doc, self.profile.link_rules, self.profile.base_url)

    # Internals -------------------------------------------------------------
    def _value(self, doc: PageDocument, field: str) -> Optional[str]:
        res = self.resolver.resolve(doc, field)
        if res.found:
            logger.debug("%s <- %s", field, res.strategy)
        return res.value

    def _build(self, doc: PageDocument, url: str) -> PropertyRecord:
        price_text = self._value(doc, "price_text")
        address = split_address(self._value(doc, "full_address"))
        images = self.images.resolve(doc)

        return PropertyRecord(
            url=url,
            address=address.address,
            suburb=address.suburb,
            state=address.state,
            postcode=address.postcode,
            full_address=address.full,
            price=parse_price(price_text),
            price_text=price_text,
            property_type=self._value(doc, "property_type"),
            property_status=self._value(doc, "property_status"),
            bedrooms=parse_count(self._value(doc, "bedrooms")),
            bathrooms=parse_count(self._value(doc, "bathrooms")),
            parking_spaces=parse_count(self._value(doc, "parking_spaces")),
            land_size=_area(self._value(doc, "land_size")),
            building_size=_area(self._value(doc, "building_size")),
            listing_id=self._value(doc, "listing_id") or listing_id_from_url(url),
            description=self._value(doc, "description"),
            features=self.resolver.resolve_many(doc, "features"),
            agent_name=self._value(doc, "agent_name"),
            agency_name=self._value(doc, "agency_name"),
            images=list(images.urls),
            image_count=images.count,
        )
