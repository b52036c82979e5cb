# File: listing_scout/engine.py
"""listing_scout.engine: orchestration layer that wires a crawl together and aggregates its records."""

from __future__ import annotations

import asyncio
from typing import Optional

from listing_scout.aggregator import CrawlReport, aggregate_results
from listing_scout.config import CrawlConfig, load_config
from listing_scout.crawler.block_detector import BlockDetector
from listing_scout.crawler.fetcher import Fetcher, HttpFetcher
from listing_scout.crawler.models import CrawlBudget
from listing_scout.crawler.pacing import PacingPolicy
from listing_scout.crawler.scheduler import CrawlScheduler
from listing_scout.crawler.seeds import expand_seeds
from listing_scout.crawler.session import Identity
from listing_scout.logger import get_logger
from listing_scout.parser.extractor import RecordExtractor
from listing_scout.profiles import SiteProfile, profile_for
from listing_scout.report.sink import MemorySink, Sink

__all__ = ["Engine", "start_crawl", "build_pacing"]

logger = get_logger(__name__)


def build_pacing(cfg: CrawlConfig, profile: SiteProfile) -> PacingPolicy:
    """Config window when set, otherwise the site profile's default."""
    window = cfg.pacing_window or profile.pacing
    return PacingPolicy.from_window(
        window,
        backoff_factor=cfg.backoff_factor,
        max_backoff=cfg.max_backoff,
        stealth=cfg.stealth,
    )


async def start_crawl(
    cfg: CrawlConfig,
    sink: Optional[Sink] = None,
    *,
    fetcher: Optional[Fetcher] = None,
    identity: Optional[Identity] = None,
) -> CrawlReport:
    """
    Run one crawl for *cfg* and return its report.

    Every record is also forwarded to *sink* as it is produced.  A custom
    *fetcher* replaces the aiohttp transport (used by tests and offline runs).
    """
    profile = profile_for(cfg)
    seeds = expand_seeds(cfg, profile)
    memory = MemorySink(delegate=sink)
    if not seeds:
        logger.warning("No addresses or start URLs configured; nothing to crawl")
        return aggregate_results([], site=profile.name)

    identity = identity or Identity.from_config(cfg.stealth, cfg.proxy)
    pacing = build_pacing(cfg, profile)
    logger.info("Site profile: %s, pacing %s, %d seed(s)", profile.name, pacing, len(seeds))

    def scheduler_for(transport: Fetcher) -> CrawlScheduler:
        return CrawlScheduler(
            transport,
            RecordExtractor(profile),
            memory,
            budget=CrawlBudget(cfg.max_requests_per_crawl),
            pacing=pacing,
            detector=BlockDetector.from_rules(cfg.block),
            identity=identity,
            max_request_retries=cfg.max_request_retries,
            request_timeout=cfg.request_timeout_seconds,
            max_concurrency=cfg.max_concurrency,
        )

    if fetcher is not None:
        scheduler = scheduler_for(fetcher)
        stats = await scheduler.run(seeds)
    else:
        async with HttpFetcher(identity, passthrough_status=cfg.block.statuses) as http:
            scheduler = scheduler_for(http)
            stats = await scheduler.run(seeds)

    logger.info("Scraping completed: %d record(s)", len(memory))
    return aggregate_results(memory.records, stats, site=profile.name)


class Engine:
    """Synchronous facade for scripts that embed the crawler: load config, run, return the report."""

    @staticmethod
    def load_config(path: Optional[str]) -> CrawlConfig:
        """Load YAML/JSON config, or the default file."""
        return load_config(path)

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config

    def start_crawl(self, timeout: Optional[float] = None, sink: Optional[Sink] = None) -> CrawlReport:
        """Run the crawl to completion (or *timeout* seconds) in a fresh event loop."""
        logger.info("Starting crawl…")
        try:
            return asyncio.run(asyncio.wait_for(start_crawl(self.config, sink), timeout=timeout))
        except asyncio.TimeoutError:
            logger.error("Crawl did not finish within %s seconds", timeout)
            raise
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
