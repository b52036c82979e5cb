# === FILE: listing_scout/parser/fields.py ===
"""Pure text → typed value parsers for listing fields.

Every parser returns ``None`` instead of raising when its input does not have
the expected shape; the caller keeps the raw text next to the parsed value.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

__all__ = (
    "AddressParts",
    "clean_text",
    "parse_price",
    "split_address",
    "parse_count",
    "parse_area",
    "listing_id_from_url",
)

_WS_RE = re.compile(r"\s+")
_PRICE_RE = re.compile(r"\$\s?(\d[\d,]*)")
_INT_RE = re.compile(r"\d+")
_AREA_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*(?:m²|m2|sqm)", re.IGNORECASE)
_LISTING_ID_RE = re.compile(r"[-/](\d+)/?$")


@dataclass(slots=True, frozen=True)
class AddressParts:
    """Decomposed "street, suburb STATE POSTCODE" string."""

    full: Optional[str]
    address: Optional[str] = None
    suburb: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None


def clean_text(text: Optional[str]) -> Optional[str]:
    """Collapse whitespace; empty or missing text becomes ``None``."""
    if text is None:
        return None
    cleaned = _WS_RE.sub(" ", text).strip()
    return cleaned or None


def parse_price(text: Optional[str]) -> Optional[int]:
    """Integer value of the first ``$12,345`` token in *text*.

    >>> parse_price("Offers over $1,250,000")
    1250000
    >>> parse_price("Contact agent") is None
    True
    """
    if not text:
        return None
    m = _PRICE_RE.search(text)
    if not m:
        return None
    digits = m.group(1).replace(",", "")
    return int(digits) if digits else None


def split_address(text: Optional[str]) -> AddressParts:
    """Split ``"59 Whitsunday Drive, Kirwan QLD 4817"`` into its parts.

    The street is everything before the first comma and the location is the
    remainder, tokenised on whitespace (later commas count as whitespace, so
    ``"59 Whitsunday Drive, Kirwan, Qld 4817"`` decomposes the same way).
    The last two location tokens are state and postcode and whatever precedes
    them is the suburb.  With fewer than two comma parts nothing is
    decomposed; with only two location tokens the suburb stays ``None``.
    The full string is always kept.
    """
    full = clean_text(text)
    if full is None:
        return AddressParts(full=None)

    street, sep, location = full.partition(",")
    street = street.strip()
    tokens = location.replace(",", " ").split()
    if not sep or not street or not tokens:
        return AddressParts(full=full)

    suburb = state = postcode = None
    if len(tokens) >= 3:
        suburb = " ".join(tokens[:-2])
        state, postcode = tokens[-2], tokens[-1]
    elif len(tokens) == 2:
        state, postcode = tokens
    return AddressParts(full=full, address=street, suburb=suburb, state=state, postcode=postcode)


def parse_count(text: Optional[str]) -> Optional[int]:
    """First integer token of *text* (``"3 Beds"`` → 3)."""
    if not text:
        return None
    m = _INT_RE.search(text)
    return int(m.group(0)) if m else None


def parse_area(text: Optional[str]) -> Optional[int]:
    """Whole square metres in *text* (``"Land 1,012m²"`` → 1012)."""
    if not text:
        return None
    m = _AREA_RE.search(text)
    if not m:
        return None
    return int(float(m.group(1).replace(",", "")))


def listing_id_from_url(url: Optional[str]) -> Optional[str]:
    """Trailing numeric suffix of the URL path (``…-kirwan-qld-4817-2019356789``)."""
    if not url:
        return None
    path = urlparse(url).path
    m = _LISTING_ID_RE.search(path)
    return m.group(1) if m else None
