# File: tests/test_pacing.py
import random

import pytest

from listing_scout.config import PacingWindow, StealthOptions
from listing_scout.crawler.pacing import PRESETS, PacingPolicy


def test_delays_stay_within_window():
    policy = PacingPolicy(2.0, 5.0, rng=random.Random(42))
    delays = [policy.next_delay() for _ in range(200)]
    assert all(2.0 <= d <= 5.0 for d in delays)
    assert len(set(delays)) > 1


def test_retry_delays_widen_up_to_cap():
    policy = PacingPolicy(1.0, 1.0, backoff_factor=2.0, max_backoff=4.0)
    assert [policy.next_delay(a) for a in range(4)] == [1.0, 2.0, 4.0, 4.0]


def test_presets_and_window():
    heavy = PacingPolicy.preset("heavy")
    assert (heavy.min_seconds, heavy.max_seconds) == (15.0, 30.0)
    light = PacingPolicy.from_window(PRESETS["light"])
    assert (light.min_seconds, light.max_seconds) == (2.0, 5.0)
    with pytest.raises(KeyError):
        PacingPolicy.preset("reckless")


def test_invalid_window_rejected():
    with pytest.raises(ValueError):
        PacingPolicy(5.0, 1.0)
    with pytest.raises(ValueError):
        PacingWindow(min_ms=3000, max_ms=1000)


def test_stealth_headers():
    stealth = StealthOptions(accept_language="en-GB", extra_headers={"DNT": "1"})
    headers = PacingPolicy(0, 0, stealth=stealth).headers(user_agent="TestAgent/1.0")
    assert headers["Accept-Language"] == "en-GB"
    assert headers["User-Agent"] == "TestAgent/1.0"
    assert headers["DNT"] == "1"
    assert "User-Agent" not in PacingPolicy(0, 0).headers()


def test_launch_options_expose_stealth_configuration():
    stealth = StealthOptions(locale="en-GB", browser_args=["--disable-blink-features=AutomationControlled"])
    opts = PacingPolicy.preset("heavy", stealth=stealth).launch_options()
    assert opts["locale"] == "en-GB"
    assert opts["args"] == ["--disable-blink-features=AutomationControlled"]
    assert opts["mask_webdriver"] is True
    assert opts["viewport"] == {"width": 1920, "height": 1080}
    assert opts["extra_http_headers"]["Accept-Language"] == stealth.accept_language
