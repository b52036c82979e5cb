# === FILE: listing_scout/crawler/scheduler.py ===
"""
Crawl state machine: fetch → block check → extract → enqueue children / emit.

Per request::

    PENDING → FETCHING → BLOCKED ──────────────┐
                       → EXTRACTING → ENQUEUED_CHILDREN (SEARCH)
                                    → EMITTED (PROPERTY)
    any transport failure → FAILED → retry (PENDING, attempt+1) or exhausted

Every request is preceded by a pacing delay.  Workers default to one, so
requests never overlap and the shared identity is never touched concurrently.
Nothing raised while processing one request escapes its worker.
"""
from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Iterable, Optional, Protocol, Set

from listing_scout.crawler.block_detector import BlockDetector
from listing_scout.crawler.fetcher import Fetcher, FetchOptions
from listing_scout.crawler.models import (
    CrawlBudget,
    CrawlRequest,
    CrawlStats,
    PropertyRecord,
    PropertyRequest,
    SearchRequest,
)
from listing_scout.crawler.pacing import PacingPolicy
from listing_scout.errors import BlockedError, TransportError
from listing_scout.logger import get_logger
from listing_scout.parser.extractor import RecordExtractor
from listing_scout.parser.html_parser import PageDocument
from listing_scout.report.sink import Sink

__all__ = ("SessionHandle", "CrawlScheduler")

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class SessionHandle(Protocol):
    def retire(self) -> None: ...

    def mark_good(self) -> None: ...


class CrawlScheduler:
    """Owns the request queue, retry counts and the request budget."""

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: RecordExtractor,
        sink: Sink,
        *,
        budget: CrawlBudget,
        pacing: PacingPolicy,
        detector: Optional[BlockDetector] = None,
        identity: Optional[SessionHandle] = None,
        max_request_retries: int = 3,
        request_timeout: float = 60.0,
        max_concurrency: int = 1,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.fetcher = fetcher
        self.extractor = extractor
        self.sink = sink
        self.budget = budget
        self.pacing = pacing
        self.detector = detector or BlockDetector()
        self.identity = identity
        self.max_request_retries = max_request_retries
        self.request_timeout = request_timeout
        self.max_concurrency = max_concurrency
        self._sleep = sleep
        self.stats = CrawlStats()
        self._seen: Set[str] = set()

    # ------------------------------------------------------------------ run
    async def run(self, seeds: Iterable[CrawlRequest]) -> CrawlStats:
        start = time.monotonic()
        queue: asyncio.Queue[CrawlRequest] = asyncio.Queue()
        for request in seeds:
            self._admit(queue, request)

        if queue.empty():
            logger.warning("Nothing to crawl: no requests admitted")
            return self.stats

        logger.info("Crawl started: %d request(s) queued, budget %d", queue.qsize(), self.budget.max_requests)
        workers = [asyncio.create_task(self._worker(queue)) for _ in range(self.max_concurrency)]
        await queue.join()
        for w in workers:
            w.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

        duration = time.monotonic() - start
        logger.info(
            "Crawler finished: %d record(s), %d failed, %d blocked, %d rejected by budget in %.2f s",
            self.stats.emitted,
            self.stats.failed,
            self.stats.blocked,
            self.stats.rejected,
            duration,
        )
        return self.stats

    def _admit(self, queue: asyncio.Queue[CrawlRequest], request: CrawlRequest) -> bool:
        if request.url in self._seen:
            logger.debug("Skipping duplicate %s", request.url)
            return False
        if not self.budget.try_issue():
            self.stats.rejected += 1
            logger.warning("Request budget (%d) exhausted; not queuing %s", self.budget.max_requests, request.url)
            return False
        self._seen.add(request.url)
        self.stats.issued += 1
        queue.put_nowait(request)
        return True

    async def _worker(self, queue: asyncio.Queue[CrawlRequest]) -> None:
        while True:
            request = await queue.get()
            try:
                await self._process(queue, request)
            except Exception as exc:
                logger.exception("Unhandled error while processing %s", request.url)
                self.stats.failed += 1
                self._emit(
                    PropertyRecord.failed(
                        request.url, f"Unhandled error: {exc}", original_address=request.original_address
                    )
                )
            finally:
                queue.task_done()

    # -------------------------------------------------------- state machine
    async def _process(self, queue: asyncio.Queue[CrawlRequest], request: CrawlRequest) -> None:
        logger.info("Processing %s: %s (attempt %d)", request.label, request.url, request.attempt + 1)
        delay = self.pacing.next_delay(request.attempt)
        logger.debug("Waiting %.1fs before request...", delay)
        await self._sleep(delay)

        try:
            doc = await self._fetch(request.url)
            verdict = self.detector.inspect_document(doc)
            if verdict.blocked:
                self.stats.blocked += 1
                logger.warning("Blocking detected on %s: %s", request.url, verdict.reason)
                if self.identity is not None:
                    self.identity.retire()
                raise BlockedError(verdict.reason or "block page", status=doc.status)
        except TransportError as exc:
            self._on_failure(queue, request, exc)
            return

        if self.identity is not None:
            self.identity.mark_good()

        match request:
            case SearchRequest():
                self._handle_search(queue, request, doc)
            case PropertyRequest():
                self._handle_property(request, doc)

    async def _fetch(self, url: str) -> PageDocument:
        self.stats.fetched += 1
        options = FetchOptions(timeout=self.request_timeout, headers=self.pacing.headers())
        try:
            return await asyncio.wait_for(self.fetcher.fetch(url, options), timeout=self.request_timeout)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Timed out after {self.request_timeout:.0f}s: {url}") from exc

    def _on_failure(self, queue: asyncio.Queue[CrawlRequest], request: CrawlRequest, exc: TransportError) -> None:
        if exc.retryable and request.attempt < self.max_request_retries:
            self.stats.retried += 1
            logger.warning(
                "Request %s failed (%s); retry %d/%d",
                request.url,
                exc,
                request.attempt + 1,
                self.max_request_retries,
            )
            queue.put_nowait(request.with_next_attempt())
            return

        self.stats.failed += 1
        logger.error("Request %s failed after %d attempt(s): %s", request.url, request.attempt + 1, exc)
        self._emit(
            PropertyRecord.failed(
                request.url,
                f"Failed after {request.attempt + 1} attempt(s): {exc}",
                original_address=request.original_address,
            )
        )

    def _handle_search(self, queue: asyncio.Queue[CrawlRequest], request: SearchRequest, doc: PageDocument) -> None:
        links = self.extractor.discover_links(doc)
        logger.info("Found %d property links on search page", len(links))
        if not links:
            self.stats.drift_warnings += 1
            logger.warning("No property links found on %s. Page structure may have changed.", request.url)
            return
        for link in links:
            child = PropertyRequest(url=link, from_search=True, original_address=request.original_address)
            if self._admit(queue, child):
                self.stats.links_enqueued += 1
                logger.info("Enqueued: %s", link)

    def _handle_property(self, request: PropertyRequest, doc: PageDocument) -> None:
        result = self.extractor.extract(doc, request.url)
        record = result.to_record(request.url, request.original_address)
        if result.ok:
            logger.info("Extracted: %s", record.full_address or "Unknown address")
            logger.info(
                "Price: %s, Beds: %s, Baths: %s, Parking: %s",
                record.price_text,
                record.bedrooms,
                record.bathrooms,
                record.parking_spaces,
            )
            if record.image_count:
                logger.info("Images: %d found", record.image_count)
            else:
                self.stats.drift_warnings += 1
                logger.warning("No images found on %s - page structure may have changed", request.url)
        self._emit(record)

    def _emit(self, record: PropertyRecord) -> None:
        self.sink.append(record)
        self.stats.emitted += 1
