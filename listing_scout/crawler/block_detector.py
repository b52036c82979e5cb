# listing_scout/crawler/block_detector.py
"""
Best-effort detection of anti-bot block pages.

Markers are matched as case-insensitive substrings, never fuzzily; the lists
stay short so that ordinary listing pages do not trip them.  False negatives
are acceptable, the retry path catches most of them as transport failures.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from listing_scout.config import BlockRules
from listing_scout.parser.html_parser import PageDocument

__all__ = ("BlockVerdict", "BlockDetector")


@dataclass(slots=True, frozen=True)
class BlockVerdict:
    """Detector outcome; ``reason`` names the marker that matched."""

    blocked: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.blocked


_CLEAR = BlockVerdict(False)


class BlockDetector:
    """Checks title, body text and HTTP status against denylists."""

    def __init__(
        self,
        title_markers: Iterable[str] = ("403", "access denied"),
        body_phrases: Iterable[str] = ("unusual traffic", "blocked", "access denied"),
        block_statuses: Iterable[int] = (403, 429),
    ) -> None:
        self.title_markers: Tuple[str, ...] = tuple(m.lower() for m in title_markers if m)
        self.body_phrases: Tuple[str, ...] = tuple(p.lower() for p in body_phrases if p)
        self.block_statuses: frozenset[int] = frozenset(block_statuses)

    @classmethod
    def from_rules(cls, rules: BlockRules) -> BlockDetector:
        return cls(rules.title_markers, rules.body_phrases, rules.statuses)

    def inspect(self, title: str = "", body: str = "", status: Optional[int] = None) -> BlockVerdict:
        if status is not None and status in self.block_statuses:
            return BlockVerdict(True, f"status {status}")
        low_title = (title or "").lower()
        for marker in self.title_markers:
            if marker in low_title:
                return BlockVerdict(True, f"title contains '{marker}'")
        low_body = (body or "").lower()
        for phrase in self.body_phrases:
            if phrase in low_body:
                return BlockVerdict(True, f"body contains '{phrase}'")
        return _CLEAR

    def inspect_document(self, doc: PageDocument) -> BlockVerdict:
        return self.inspect(doc.title, doc.text, doc.status)
