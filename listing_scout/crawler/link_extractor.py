# listing_scout/crawler/link_extractor.py
"""
Property-link discovery on search result pages, plus URL normalisation.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlparse, urlunparse

from listing_scout.parser.html_parser import PageDocument
from listing_scout.profiles import LinkRule

__all__ = ("extract_property_links", "normalize_url")


def normalize_url(url: str) -> str:
    """
    Normalize URL by lowercasing scheme and netloc and dropping query,
    fragment and trailing slash (listing URLs are identified by path alone).
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = parsed.path.rstrip("/") or "/"
    return urlunparse((scheme, netloc, path, "", "", ""))


def _same_site(host: str, base_host: str) -> bool:
    host = host.removeprefix("www.")
    base_host = base_host.removeprefix("www.")
    return host == base_host or host.endswith("." + base_host)


def extract_property_links(
    doc: PageDocument,
    rules: Iterable[LinkRule],
    base_url: Optional[str] = None,
) -> List[str]:
    """
    Apply every rule to *doc* and return the union of matching links.

    Links are made absolute against the page URL, restricted to the site of
    *base_url* (or of the page), normalised and deduplicated in discovery
    order.  Ignores mailto:, javascript: and fragment-only hrefs.
    """
    base_host = urlparse(base_url or doc.url).netloc.lower()
    found: dict[str, None] = {}
    for rule in rules:
        pattern = re.compile(rule.pattern) if rule.pattern else None
        exclude = re.compile(rule.exclude) if rule.exclude else None
        for tag in doc.soup.select(rule.selector):
            href_val = tag.get(rule.attr)
            if not isinstance(href_val, str):
                continue
            raw = href_val.strip()
            if not raw or raw.startswith(("mailto:", "javascript:", "#")):
                continue
            absolute = urljoin(doc.url or (base_url or ""), raw)
            parsed = urlparse(absolute)
            if parsed.scheme not in ("http", "https") or not _same_site(parsed.netloc.lower(), base_host):
                continue
            link = normalize_url(absolute)
            if pattern is not None and not pattern.search(link):
                continue
            if exclude is not None and exclude.search(link):
                continue
            found.setdefault(link, None)
    return list(found)
