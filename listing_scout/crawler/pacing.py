# listing_scout/crawler/pacing.py
"""
Randomised inter-request delays and the stealth parameters sent with them.

The policy only computes durations; the scheduler decides when to wait, so
tests swap the sleep coroutine and never touch the wall clock.
"""
from __future__ import annotations

import random
from typing import Any, Dict, Optional

from listing_scout.config import PacingWindow, StealthOptions

__all__ = ("PacingPolicy", "PRESETS")

# (min_ms, max_ms)
PRESETS: Dict[str, PacingWindow] = {
    "heavy": PacingWindow(min_ms=15_000, max_ms=30_000),
    "light": PacingWindow(min_ms=2_000, max_ms=5_000),
}


class PacingPolicy:
    """Draws delays from a ``[min, max]`` window, widening them on retries."""

    def __init__(
        self,
        min_seconds: float,
        max_seconds: float,
        *,
        backoff_factor: float = 1.5,
        max_backoff: float = 4.0,
        stealth: Optional[StealthOptions] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if min_seconds < 0 or max_seconds < min_seconds:
            raise ValueError(f"invalid pacing window [{min_seconds}, {max_seconds}]")
        self.min_seconds = min_seconds
        self.max_seconds = max_seconds
        self.backoff_factor = backoff_factor
        self.max_backoff = max_backoff
        self.stealth = stealth or StealthOptions()
        self._rng = rng or random.Random()

    @classmethod
    def from_window(cls, window: PacingWindow, **kwargs) -> PacingPolicy:
        return cls(window.min_ms / 1000.0, window.max_ms / 1000.0, **kwargs)

    @classmethod
    def preset(cls, name: str, **kwargs) -> PacingPolicy:
        return cls.from_window(PRESETS[name], **kwargs)

    def next_delay(self, attempt: int = 0) -> float:
        """Seconds to wait before the next navigation; ``attempt`` > 0 for retries."""
        delay = self._rng.uniform(self.min_seconds, self.max_seconds)
        if attempt > 0:
            delay *= min(self.backoff_factor ** attempt, self.max_backoff)
        return delay

    def headers(self, user_agent: Optional[str] = None) -> Dict[str, str]:
        """Header hints for the transport (locale, accept, optional UA)."""
        hdrs = {
            "Accept": self.stealth.accept,
            "Accept-Language": self.stealth.accept_language,
        }
        if user_agent:
            hdrs["User-Agent"] = user_agent
        hdrs.update(self.stealth.extra_headers)
        return hdrs

    def launch_options(self) -> Dict[str, Any]:
        """Settings for a browser-driven transport: locale, viewport, automation-signal flags."""
        return {
            "locale": self.stealth.locale,
            "viewport": dict(self.stealth.viewport),
            "args": list(self.stealth.browser_args),
            "mask_webdriver": self.stealth.mask_webdriver,
            "extra_http_headers": self.headers(),
        }

    def __repr__(self) -> str:
        return f"<PacingPolicy {self.min_seconds:.1f}-{self.max_seconds:.1f}s x{self.backoff_factor}>"
