# listing_scout/crawler/seeds.py
"""
Turns configured addresses and start URLs into the initial crawl requests.
"""
from __future__ import annotations

import re
from typing import List
from urllib.parse import quote

from listing_scout.config import CrawlConfig
from listing_scout.crawler.models import CrawlRequest, PropertyRequest, SearchRequest
from listing_scout.logger import get_logger
from listing_scout.profiles import SiteProfile

__all__ = ("address_slug", "expand_seeds")

logger = get_logger(__name__)

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9-]")


def address_slug(address: str) -> str:
    """``"59 Whitsunday Dr, Kirwan QLD 4817"`` → ``"59-whitsunday-dr-kirwan-qld-4817"``."""
    slug = re.sub(r"\s+", "-", address.strip().lower())
    return _SLUG_STRIP_RE.sub("", slug)


def expand_seeds(config: CrawlConfig, profile: SiteProfile) -> List[CrawlRequest]:
    """One SEARCH request per address, one PROPERTY request per start URL.

    Profiles without a search endpoint address properties directly, so their
    addresses become PROPERTY requests that keep the original address.
    """
    requests: List[CrawlRequest] = []

    for address in config.addresses:
        if profile.search_url is not None:
            url = profile.search_url.format(query=quote(address, safe=""))
            requests.append(SearchRequest(url=url, original_address=address))
        elif profile.address_url is not None:
            url = profile.address_url.format(slug=address_slug(address))
            requests.append(PropertyRequest(url=url, original_address=address))
        else:
            logger.warning("Profile %s cannot address '%s'; skipped", profile.name, address)
            continue
        logger.info("Added address: %s -> %s", address, url)

    if config.addresses and profile.search_url is not None:
        min_required = 2 * len(config.addresses)
        if config.max_requests_per_crawl < min_required:
            logger.warning(
                "max_requests_per_crawl (%d) may be too low for %d addresses; recommended at least %d "
                "(each address needs 1 search + 1 or more property requests)",
                config.max_requests_per_crawl,
                len(config.addresses),
                min_required,
            )

    for start in config.start_urls:
        requests.append(PropertyRequest(url=str(start.url)))
        logger.info("Added property URL: %s", start.url)

    return requests
