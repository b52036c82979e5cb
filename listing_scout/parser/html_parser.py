# === FILE: listing_scout/parser/html_parser.py ===
"""HTML parsing utilities for ListingScout.

Every fetched page is wrapped in a :class:`PageDocument` exactly once, right
after the transport returns.  Downstream code (block detection, selector
strategies, image discovery, link discovery) only ever sees this handle:

* soup  : the parsed BeautifulSoup tree;
* title : document <title> text or ``""`` if absent;
* text  : visible text (scripts and styles removed), for keyword checks;
* html  : the raw markup, kept for script-literal scans.

A document belongs to one request's processing and is never retained after it.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from bs4 import BeautifulSoup

__all__: Sequence[str] = ("PageDocument", "parse_document")

_INVISIBLE = ("script", "style", "noscript", "template")


@dataclass(slots=True)
class PageDocument:
    """Parsed page handle handed to the detector and the extractor."""

    url: str
    html: str
    soup: BeautifulSoup
    title: str = ""
    status: Optional[int] = None
    _text: Optional[str] = field(default=None, repr=False)

    @property
    def text(self) -> str:
        """Visible page text, computed lazily on a copy of the tree."""
        if self._text is None:
            shadow = BeautifulSoup(self.html, "html.parser")
            for element in shadow(list(_INVISIBLE)):
                element.decompose()
            self._text = " ".join(shadow.stripped_strings)
        return self._text

    # Convenience helpers ---------------------------------------------------
    def select_one_text(self, selector: str) -> str:
        """Trimmed text of the first match of *selector*, or ``""``."""
        el = self.soup.select_one(selector)
        return el.get_text(" ", strip=True) if el else ""


def parse_document(page: Any, *, url: str = "", status: Optional[int] = None) -> PageDocument:
    """Parse raw HTML (string) or any object with ``url`` and ``content``.

    Parameters
    ----------
    page
        Either a *str* (HTML markup) **or** an object with ``url`` and
        ``content`` attributes (``bytes`` content is decoded as UTF-8).
    url
        Page URL when *page* is plain markup.
    status
        HTTP status of the response, if known.
    """
    if hasattr(page, "content") and hasattr(page, "url"):
        html = page.content
        url = str(page.url)
    else:
        html = page
    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")
    html = str(html or "")

    soup = BeautifulSoup(html, "html.parser")
    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    return PageDocument(url=url, html=html, soup=soup, title=title, status=status)
