# File: tests/conftest.py
import logging
from pathlib import Path
from typing import Callable, Iterator, Optional

import pytest

from listing_scout.logger import LOGGER_NAME
from listing_scout.parser.html_parser import PageDocument, parse_document
from listing_scout.profiles import SiteProfile, load_profile

FIXTURES = Path(__file__).parent / "fixtures"

PROPERTY_URL = "https://www.domain.com.au/59-whitsunday-drive-kirwan-qld-4817-2019312345"
SEARCH_ADDRESS = "59 Whitsunday Drive, Kirwan QLD 4817"


def read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


@pytest.fixture()
def load_doc() -> Callable[..., PageDocument]:
    """
    Return a factory parsing a fixture file into a PageDocument.
    """

    def _load(name: str, url: str = PROPERTY_URL, status: Optional[int] = 200) -> PageDocument:
        return parse_document(read_fixture(name), url=url, status=status)

    return _load


@pytest.fixture()
def domain_profile() -> SiteProfile:
    return load_profile("domain")


@pytest.fixture()
def scout_log(caplog) -> Iterator[pytest.LogCaptureFixture]:
    """
    caplog for the project logger (it does not propagate to root).
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    try:
        yield caplog
    finally:
        lg.removeHandler(caplog.handler)
