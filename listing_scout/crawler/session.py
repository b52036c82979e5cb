# listing_scout/crawler/session.py
"""
Session identity shared by the sequential requests of one run.

The scheduler only calls :meth:`Identity.retire` (after a block page) and
:meth:`Identity.mark_good` (after a clean fetch).  The fetcher reads the
cookie jar, user agent and proxy.
"""
from __future__ import annotations

import random
from typing import Optional, Sequence

from aiohttp import CookieJar

from listing_scout.config import ProxyConfig, StealthOptions
from listing_scout.logger import get_logger

__all__ = ("Identity",)

logger = get_logger(__name__)


class Identity:
    """Cookies + user agent + proxy, rotated as a unit on retirement."""

    def __init__(
        self,
        user_agents: Sequence[str],
        proxies: Sequence[str] = (),
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not user_agents:
            raise ValueError("at least one user agent is required")
        self._user_agents = tuple(user_agents)
        self._proxies = tuple(proxies)
        self._rng = rng or random.Random()
        self._ua_idx = self._rng.randrange(len(self._user_agents))
        self._proxy_idx = self._rng.randrange(len(self._proxies)) if self._proxies else 0
        self._cookie_jar: Optional[CookieJar] = None
        self.generation = 0
        self.good_count = 0

    @classmethod
    def from_config(cls, stealth: StealthOptions, proxy: ProxyConfig) -> Identity:
        return cls(stealth.user_agents, proxy.urls)

    @property
    def user_agent(self) -> str:
        return self._user_agents[self._ua_idx]

    @property
    def proxy(self) -> Optional[str]:
        return self._proxies[self._proxy_idx] if self._proxies else None

    @property
    def cookie_jar(self) -> CookieJar:
        # created lazily: aiohttp binds the jar to the running loop
        if self._cookie_jar is None:
            self._cookie_jar = CookieJar()
        return self._cookie_jar

    def retire(self) -> None:
        """Drop cookies and move to the next user agent / proxy."""
        self.generation += 1
        self.good_count = 0
        if self._cookie_jar is not None:
            self._cookie_jar.clear()
        self._ua_idx = self._next(self._ua_idx, len(self._user_agents))
        if self._proxies:
            self._proxy_idx = self._next(self._proxy_idx, len(self._proxies))
        logger.info("Identity retired (generation %d)", self.generation)

    def mark_good(self) -> None:
        self.good_count += 1

    def _next(self, idx: int, size: int) -> int:
        if size <= 1:
            return idx
        return (idx + self._rng.randrange(1, size)) % size

    def __repr__(self) -> str:
        return f"<Identity gen={self.generation} good={self.good_count} proxy={'yes' if self._proxies else 'no'}>"
