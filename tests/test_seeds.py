# File: tests/test_seeds.py
import pytest

from listing_scout.config import CrawlConfig
from listing_scout.crawler.models import PropertyRequest, SearchRequest
from listing_scout.crawler.seeds import address_slug, expand_seeds
from listing_scout.profiles import available_profiles, load_profile


def test_builtin_profiles_load():
    assert {"domain", "realestate"} <= set(available_profiles())
    realestate = load_profile("realestate")
    assert realestate.search_url is None
    assert (realestate.pacing.min_ms, realestate.pacing.max_ms) == (15000, 30000)


def test_unknown_profile_name():
    with pytest.raises(ValueError):
        load_profile("nosuchsite")


def test_custom_profile_file(tmp_path):
    path = tmp_path / "mysite.yaml"
    path.write_text(
        "name: mysite\nbase_url: https://example.com\nsearch_url: 'https://example.com/s?q={query}'\n"
        "fields:\n  price_text:\n    - {kind: text, selector: '.price'}\n",
        encoding="utf-8",
    )
    profile = load_profile(path)
    assert profile.name == "mysite"
    assert profile.fields["price_text"][0].selector == ".price"


def test_profile_rejects_unknown_field(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text(
        "name: bad\nbase_url: https://example.com\nfields:\n  colour:\n    - {kind: text, selector: '.c'}\n",
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        load_profile(path)


def test_address_slug():
    assert address_slug("59 Whitsunday Dr, Kirwan QLD 4817") == "59-whitsunday-dr-kirwan-qld-4817"


def test_addresses_become_search_requests(domain_profile):
    cfg = CrawlConfig(
        addresses=["59 Whitsunday Drive, Kirwan QLD 4817"],
        start_urls=["https://www.domain.com.au/1-example-street-kirwan-qld-4817-2019312347"],
    )
    seeds = expand_seeds(cfg, domain_profile)

    assert len(seeds) == 2
    search, prop = seeds
    assert isinstance(search, SearchRequest)
    assert search.url == (
        "https://www.domain.com.au/sale/?excludeunderoffer=1&street=59%20Whitsunday%20Drive%2C%20Kirwan%20QLD%204817"
    )
    assert search.original_address == "59 Whitsunday Drive, Kirwan QLD 4817"
    assert search.attempt == 0
    assert isinstance(prop, PropertyRequest)
    assert prop.original_address is None
    assert not prop.from_search


def test_slug_profile_maps_addresses_to_property_requests():
    cfg = CrawlConfig(site="realestate", addresses=["59 Whitsunday Dr, Kirwan QLD 4817"])
    (seed,) = expand_seeds(cfg, load_profile("realestate"))
    assert isinstance(seed, PropertyRequest)
    assert seed.url == "https://www.realestate.com.au/property/59-whitsunday-dr-kirwan-qld-4817"
    assert seed.original_address == "59 Whitsunday Dr, Kirwan QLD 4817"


def test_low_budget_warning(domain_profile, scout_log):
    cfg = CrawlConfig(addresses=["1 A St, Kirwan QLD 4817", "2 B St, Kirwan QLD 4817"], max_requests_per_crawl=3)
    expand_seeds(cfg, domain_profile)
    assert "may be too low for 2 addresses" in scout_log.text


def test_no_warning_with_enough_budget(domain_profile, scout_log):
    cfg = CrawlConfig(addresses=["1 A St, Kirwan QLD 4817"], max_requests_per_crawl=2)
    expand_seeds(cfg, domain_profile)
    assert "may be too low" not in scout_log.text


def test_retry_copy_increments_attempt():
    req = SearchRequest(url="https://www.domain.com.au/sale/?street=x", original_address="x")
    again = req.with_next_attempt().with_next_attempt()
    assert again.attempt == 2
    assert again.url == req.url and again.original_address == "x"
    assert req.attempt == 0
