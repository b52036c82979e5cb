# File: listing_scout/report/__init__.py
"""listing_scout.report: record sinks and the JSON / HTML reports used by the CLI and tests."""

from __future__ import annotations

from listing_scout.report.html_report import render_html
from listing_scout.report.json_report import render_json
from listing_scout.report.sink import JsonLinesSink, MemorySink, Sink

__all__ = ["render_json", "render_html", "Sink", "MemorySink", "JsonLinesSink"]
