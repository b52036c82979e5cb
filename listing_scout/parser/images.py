# === FILE: listing_scout/parser/images.py ===
"""Listing image discovery and canonicalisation.

Pipeline (each stage takes and returns an ordered set, i.e. a ``dict`` used
as an insertion-ordered set; nothing is shared between calls):

1. collect  : union of several independent discovery strategies;
2. normalise: strip thumbnail sizing segments, rewrite legacy size suffixes;
3. filter   : drop decorative assets and, optionally, anything without a
               listing-shaped filename.

Discovery strategies overlap heavily, so the union is deduplicated first and
the decorative check runs once per distinct URL.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlparse

from pydantic import BaseModel, ConfigDict, Field

from listing_scout.parser.html_parser import PageDocument

__all__ = (
    "ImageRules",
    "ImageSet",
    "ImageResolver",
    "parse_srcset",
    "normalize_image_url",
    "DISCOVERY_STRATEGIES",
)

_FIT_IN_RE = re.compile(r"/fit-in/\d+x\d+(?:/filters:[^/]*)?(?=/)")
_SIZE_SEGMENT_RE = re.compile(r"/\d{2,5}x\d{2,5}(?=/)")
_LEGACY_SIZE_RE = re.compile(r"-(?:small|medium)(?=[./_-]|$)")
_SCRIPT_URL_RE = re.compile(r"https?://[^\"'\s<>\\]+?\.(?:jpe?g|png|webp)(?:\?[^\"'\s<>\\]*)?", re.IGNORECASE)
_DATA_ATTRS = ("data-images", "data-gallery", "data-photos")

OrderedSet = Dict[str, None]


class ImageRules(BaseModel):
    """Per-site image policy (part of a site profile)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    hosts: List[str] = Field(default_factory=list, description="Accepted host substrings; empty = any host.")
    extensions: List[str] = Field(default_factory=lambda: ["jpg", "jpeg", "png", "webp"])
    decorative_markers: List[str] = Field(
        default_factory=lambda: ["icon", "logo", "avatar", "40x40", "50x50"],
    )
    listing_pattern: Optional[str] = Field(
        None, description="Regex a URL must match when the site co-mingles unrelated imagery."
    )
    img_selector: str = "img"


@dataclass(slots=True, frozen=True)
class ImageSet:
    """Resolved listing images in first-discovery order."""

    urls: Tuple[str, ...] = ()

    @property
    def count(self) -> int:
        return len(self.urls)


def parse_srcset(srcset: str) -> List[str]:
    """URLs of a responsive ``srcset`` list (descriptors dropped)."""
    out: List[str] = []
    for candidate in srcset.split(","):
        parts = candidate.strip().split()
        if parts:
            out.append(parts[0])
    return out


def normalize_image_url(url: str) -> str:
    """Canonical/high-resolution form of a thumbnail URL."""
    url = _FIT_IN_RE.sub("", url)
    url = _SIZE_SEGMENT_RE.sub("", url)
    return _LEGACY_SIZE_RE.sub("-large", url)


# --------------------------------------------------------------------------- #
# Discovery strategies: PageDocument -> iterable of raw candidate strings      #
# --------------------------------------------------------------------------- #


def _from_img_attributes(doc: PageDocument, rules: ImageRules) -> Iterable[str]:
    for img in doc.soup.select(rules.img_selector):
        for attr in ("src", "data-src"):
            value = img.get(attr)
            if isinstance(value, str):
                yield value


def _from_img_srcset(doc: PageDocument, rules: ImageRules) -> Iterable[str]:
    for img in doc.soup.select("img[srcset]"):
        yield from parse_srcset(str(img.get("srcset") or ""))


def _from_picture_sources(doc: PageDocument, rules: ImageRules) -> Iterable[str]:
    for source in doc.soup.select("picture source[srcset]"):
        yield from parse_srcset(str(source.get("srcset") or ""))


def _from_scripts(doc: PageDocument, rules: ImageRules) -> Iterable[str]:
    for script in doc.soup.find_all("script"):
        body = script.string or script.get_text()
        if body:
            yield from _SCRIPT_URL_RE.findall(body.replace("\\/", "/"))


def _from_data_attributes(doc: PageDocument, rules: ImageRules) -> Iterable[str]:
    selector = ", ".join(f"[{a}]" for a in _DATA_ATTRS)
    for el in doc.soup.select(selector):
        raw = next((el.get(a) for a in _DATA_ATTRS if el.get(a)), None)
        if not isinstance(raw, str):
            continue
        try:
            data = json.loads(raw)
        except ValueError:
            yield from (u.strip() for u in raw.split(",") if u.strip().startswith("http"))
            continue
        if not isinstance(data, list):
            continue
        for item in data:
            if isinstance(item, str):
                yield item
            elif isinstance(item, dict):
                value = item.get("url") or item.get("src")
                if isinstance(value, str):
                    yield value


DiscoveryStrategy = Callable[[PageDocument, ImageRules], Iterable[str]]

DISCOVERY_STRATEGIES: Tuple[Tuple[str, DiscoveryStrategy], ...] = (
    ("img", _from_img_attributes),
    ("srcset", _from_img_srcset),
    ("picture", _from_picture_sources),
    ("script", _from_scripts),
    ("data-attributes", _from_data_attributes),
)


class ImageResolver:
    """collect → normalise → filter, returning an :class:`ImageSet`."""

    def __init__(
        self,
        rules: Optional[ImageRules] = None,
        strategies: Sequence[Tuple[str, DiscoveryStrategy]] = DISCOVERY_STRATEGIES,
    ) -> None:
        self.rules = rules or ImageRules()
        self.strategies = tuple(strategies)
        self._listing_re = re.compile(self.rules.listing_pattern) if self.rules.listing_pattern else None

    # Stages ----------------------------------------------------------------
    def collect(self, doc: PageDocument) -> OrderedSet:
        found: OrderedSet = {}
        for _name, strategy in self.strategies:
            for raw in strategy(doc, self.rules):
                url = self._absolute(raw, doc.url)
                if url:
                    found.setdefault(url, None)
        return found

    @staticmethod
    def normalize(candidates: OrderedSet) -> Dict[str, str]:
        """Map each canonical URL to the first raw URL that produced it."""
        canonical: Dict[str, str] = {}
        for raw in candidates:
            canonical.setdefault(normalize_image_url(raw), raw)
        return canonical

    def filter(self, canonical: Dict[str, str]) -> OrderedSet:
        return {url: None for url, raw in canonical.items() if self._keep(url, raw)}

    # Public API ------------------------------------------------------------
    def resolve_candidates(self, candidates: Iterable[str], base_url: str = "") -> ImageSet:
        collected: OrderedSet = {}
        for raw in candidates:
            url = self._absolute(raw, base_url)
            if url:
                collected.setdefault(url, None)
        return ImageSet(tuple(self.filter(self.normalize(collected))))

    def resolve(self, doc: PageDocument) -> ImageSet:
        return ImageSet(tuple(self.filter(self.normalize(self.collect(doc)))))

    # Helpers ---------------------------------------------------------------
    @staticmethod
    def _absolute(raw: str, base_url: str) -> Optional[str]:
        raw = raw.strip()
        if not raw or raw.startswith("data:"):
            return None
        url = urljoin(base_url, raw) if base_url else raw
        return url if urlparse(url).scheme in ("http", "https") else None

    def _is_decorative(self, url: str) -> bool:
        low = url.lower()
        return any(marker.lower() in low for marker in self.rules.decorative_markers)

    def _has_image_format(self, url: str) -> bool:
        # CDN resize URLs carry the format in a filter segment, e.g. filters:format(jpeg)
        low = url.lower()
        path = urlparse(low).path
        return any(f".{ext}" in path or f"format({ext})" in low for ext in self.rules.extensions)

    def _keep(self, url: str, raw: str) -> bool:
        if self._is_decorative(url) or self._is_decorative(raw):
            return False
        low = url.lower()
        if self.rules.hosts and not any(h.lower() in low for h in self.rules.hosts):
            return False
        if self.rules.extensions and not (self._has_image_format(url) or self._has_image_format(raw)):
            return False
        if self._listing_re is not None and not self._listing_re.search(url):
            return False
        return True
