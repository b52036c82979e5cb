# File: tests/test_block_detector.py
import pytest

from listing_scout.config import BlockRules
from listing_scout.crawler.block_detector import BlockDetector


@pytest.fixture()
def detector() -> BlockDetector:
    return BlockDetector.from_rules(BlockRules())


def test_block_page_fixture_is_detected(detector, load_doc):
    verdict = detector.inspect_document(load_doc("block_page.html"))
    assert verdict.blocked
    assert verdict.reason == "title contains '403'"


def test_body_phrase_detected(detector):
    verdict = detector.inspect("Just a moment", "Our systems have detected UNUSUAL TRAFFIC from you")
    assert verdict
    assert "unusual traffic" in verdict.reason


def test_body_mentioning_blocked_request(detector):
    verdict = detector.inspect("Domain", "Sorry, your request has been blocked.")
    assert verdict.blocked
    assert verdict.reason == "body contains 'blocked'"


def test_ordinary_listing_page_is_not_blocked(detector, load_doc):
    for name in ("domain_property.html", "domain_search.html", "property_no_price.html"):
        verdict = detector.inspect_document(load_doc(name))
        assert not verdict, name
        assert verdict.reason is None


@pytest.mark.parametrize("status,blocked", [(403, True), (429, True), (200, False), (None, False)])
def test_status_codes(detector, status, blocked):
    assert detector.inspect("Listing", "Nice house", status).blocked is blocked


def test_script_text_is_not_body_text(detector, load_doc):
    doc = load_doc("block_page.html")
    assert "access denied" not in doc.text.lower()


def test_custom_denylists():
    detector = BlockDetector(title_markers=["captcha"], body_phrases=[], block_statuses=[])
    assert detector.inspect("Please solve this CAPTCHA", "", 403).reason == "title contains 'captcha'"
    assert not detector.inspect("403 Forbidden", "unusual traffic", 403)
