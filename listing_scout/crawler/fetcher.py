# listing_scout/crawler/fetcher.py
"""
Fetcher module: the HTTP transport behind the scheduler.

The scheduler depends only on the :class:`Fetcher` protocol
(``fetch(url, options) -> PageDocument``, raising :class:`TransportError`);
:class:`HttpFetcher` is the aiohttp implementation.  Retries, pacing and
block detection are not done here.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from listing_scout.crawler.session import Identity
from listing_scout.errors import TransportError
from listing_scout.logger import get_logger
from listing_scout.parser.html_parser import PageDocument, parse_document

__all__ = ("FetchOptions", "Fetcher", "HttpFetcher")

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class FetchOptions:
    """Per-request transport options."""

    timeout: float = 60.0
    headers: Mapping[str, str] = field(default_factory=dict)


class Fetcher(Protocol):
    async def fetch(self, url: str, options: FetchOptions) -> PageDocument: ...


class HttpFetcher:
    """aiohttp transport sharing the identity's cookies, user agent and proxy."""

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (408,)

    def __init__(
        self,
        identity: Identity,
        *,
        passthrough_status: Iterable[int] = (403, 429),
        session: Optional[ClientSession] = None,
    ) -> None:
        self.identity = identity
        self._passthrough = frozenset(passthrough_status)
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> HttpFetcher:
        if self.session is None:
            self.session = ClientSession(cookie_jar=self.identity.cookie_jar, raise_for_status=False)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str, options: FetchOptions) -> PageDocument:
        """
        GET *url* and parse it.

        Block-page statuses (403/429 by default) come back as documents so the
        block detector can judge them; 5xx and 408 raise a retryable
        TransportError, any other non-2xx a non-retryable one.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")
        headers = {**options.headers, "User-Agent": self.identity.user_agent}
        try:
            async with self.session.get(
                url,
                headers=headers,
                proxy=self.identity.proxy,
                timeout=ClientTimeout(total=options.timeout),
                allow_redirects=True,
            ) as resp:
                status = resp.status
                if status in self._RETRY_STATUS:
                    raise TransportError(f"HTTP {status} from {url}", status=status)
                if status >= 400 and status not in self._passthrough:
                    raise TransportError(f"HTTP {status} from {url}", status=status, retryable=False)
                text = await resp.text(errors="replace")
                final_url = str(resp.url)
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Timed out after {options.timeout:.0f}s: {url}") from exc
        except ClientError as exc:
            raise TransportError(f"Connection error for {url}: {exc}") from exc

        logger.debug("Fetched %s -> HTTP %d (%d bytes)", url, status, len(text))
        return parse_document(text, url=final_url, status=status)
