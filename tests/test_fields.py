# File: tests/test_fields.py
import pytest

from listing_scout.parser.fields import (
    AddressParts,
    clean_text,
    listing_id_from_url,
    parse_area,
    parse_count,
    parse_price,
    split_address,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("$12,345", 12345),
        ("Offers over $1,250,000", 1250000),
        ("$ 450000 - $480,000", 450000),
        ("Contact agent", None),
        ("Auction Sat 10am", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_price(text, expected):
    assert parse_price(text) == expected


def test_split_address_full():
    parts = split_address("59 Whitsunday Drive, Kirwan QLD 4817")
    assert parts == AddressParts(
        full="59 Whitsunday Drive, Kirwan QLD 4817",
        address="59 Whitsunday Drive",
        suburb="Kirwan",
        state="QLD",
        postcode="4817",
    )


def test_split_address_multi_word_suburb():
    parts = split_address("12 Smith Street, Mount Louisa QLD 4814")
    assert parts.address == "12 Smith Street"
    assert parts.suburb == "Mount Louisa"
    assert (parts.state, parts.postcode) == ("QLD", "4814")


def test_split_address_uses_first_comma():
    parts = split_address("Unit 5, 12 Main Street, Kirwan QLD 4817")
    assert parts.full == "Unit 5, 12 Main Street, Kirwan QLD 4817"
    assert parts.address == "Unit 5"
    assert (parts.state, parts.postcode) == ("QLD", "4817")


def test_split_address_without_comma_keeps_full_string():
    parts = split_address("59 Whitsunday Drive Kirwan QLD 4817")
    assert parts.full == "59 Whitsunday Drive Kirwan QLD 4817"
    assert parts.address is None
    assert parts.suburb is None
    assert parts.state is None
    assert parts.postcode is None


def test_split_address_two_location_tokens_has_no_suburb():
    parts = split_address("59 Whitsunday Drive, QLD 4817")
    assert parts.address == "59 Whitsunday Drive"
    assert parts.suburb is None
    assert (parts.state, parts.postcode) == ("QLD", "4817")


def test_split_address_comma_before_state():
    parts = split_address("59 Whitsunday Drive, Kirwan, Qld 4817")
    assert parts.address == "59 Whitsunday Drive"
    assert parts.suburb == "Kirwan"
    assert (parts.state, parts.postcode) == ("Qld", "4817")


def test_split_address_empty():
    assert split_address("   ") == AddressParts(full=None)


@pytest.mark.parametrize(
    "text,expected",
    [("4 Beds", 4), ("Beds: 3", 3), ("2", 2), ("Studio", None), (None, None)],
)
def test_parse_count(text, expected):
    assert parse_count(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [("612m²", 612), ("Land 1,012 m2", 1012), ("405.5 sqm", 405), ("2 ha", None), (None, None)],
)
def test_parse_area(text, expected):
    assert parse_area(text) == expected


def test_clean_text_collapses_whitespace():
    assert clean_text("  Offers \n over\t$1  ") == "Offers over $1"
    assert clean_text(" \n ") is None


def test_listing_id_from_url():
    assert listing_id_from_url("https://www.domain.com.au/59-whitsunday-drive-kirwan-qld-4817-2019312345") == "2019312345"
    assert listing_id_from_url("https://www.realestate.com.au/property-house-qld-kirwan-143160680/") == "143160680"
    assert listing_id_from_url("https://www.domain.com.au/sale/kirwan-qld/") is None
