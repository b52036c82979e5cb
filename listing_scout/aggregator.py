# File: listing_scout/aggregator.py
"""listing_scout.aggregator: Collects crawl records and counters into one report."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from listing_scout.crawler.models import CrawlStats, PropertyRecord


@dataclass(slots=True)
class CrawlReport:
    """Outcome of one crawl: records in processing order plus run counters."""

    records: List[PropertyRecord] = field(default_factory=list)
    stats: CrawlStats = field(default_factory=CrawlStats)
    site: Optional[str] = None

    @property
    def succeeded(self) -> List[PropertyRecord]:
        return [r for r in self.records if r.ok]

    @property
    def failed(self) -> List[PropertyRecord]:
        return [r for r in self.records if not r.ok]

    def summary(self) -> Dict[str, Any]:
        """Counters plus a per-suburb tally of extracted listings."""
        suburbs = Counter(r.suburb for r in self.succeeded if r.suburb)
        return {
            "site": self.site,
            "records": len(self.records),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "suburbs": dict(suburbs.most_common()),
            **self.stats.as_dict(),
        }

    def to_list(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.records]

    def json(self, *, pretty: bool = False) -> str:
        """JSON array of records, as written by the JSON report."""
        return json.dumps(self.to_list(), ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(
    records: Iterable[PropertyRecord],
    stats: Optional[CrawlStats] = None,
    *,
    site: Optional[str] = None,
) -> CrawlReport:
    """Builds a CrawlReport from sink contents."""
    return CrawlReport(records=list(records), stats=stats or CrawlStats(), site=site)
