# listing_scout/report/sink.py
"""
Record sinks: where the scheduler appends every terminal outcome.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator, List, Optional, Protocol, Union

from listing_scout.crawler.models import PropertyRecord
from listing_scout.logger import get_logger

__all__ = ("Sink", "MemorySink", "JsonLinesSink")

logger = get_logger(__name__)


class Sink(Protocol):
    def append(self, record: PropertyRecord) -> None: ...


class MemorySink:
    """Keeps records in processing order; optionally forwards each to *delegate*."""

    def __init__(self, delegate: Optional[Sink] = None) -> None:
        self.records: List[PropertyRecord] = []
        self.delegate = delegate

    def append(self, record: PropertyRecord) -> None:
        self.records.append(record)
        if self.delegate is not None:
            self.delegate.append(record)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[PropertyRecord]:
        return iter(self.records)


class JsonLinesSink:
    """Append-only JSON Lines file, one record per line, flushed per record."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.written = 0

    def append(self, record: PropertyRecord) -> None:
        line = json.dumps(record.to_dict(), ensure_ascii=False)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        self.written += 1
        logger.debug("Wrote record %d to %s", self.written, self.path)
