# listing_scout/report/json_report.py

"""
JSON report for ListingScout.

Serialises a CrawlReport (or a plain list of records) to a file.
"""
import json
from pathlib import Path
from typing import Iterable, Union

from listing_scout.aggregator import CrawlReport, aggregate_results
from listing_scout.crawler.models import PropertyRecord


def render_json(
    report: Union[CrawlReport, Iterable[PropertyRecord]],
    output_path: Union[Path, str],
    *,
    pretty: bool = True,
) -> Path:
    """
    Save *report* as a JSON array of records at *output_path*.

    :param report: CrawlReport, or any iterable of PropertyRecord
    :param output_path: path to the JSON file
    :return: Path of the written file

    Example:
    ```python
    from listing_scout.report.json_report import render_json
    report_path = render_json(report, 'reports/listings.json')
    ```
    """
    if not isinstance(report, CrawlReport):
        report = aggregate_results(report)
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.to_list(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
