"""Sink contract consumed by the run loop, plus a dry-run implementation."""

from __future__ import annotations

from typing import Protocol, Sequence

from floriscraper.logging_config import get_logger
from floriscraper.models import ProductRecord

LOGGER = get_logger(__name__)


class Sink(Protocol):
    """Tabular destination with a single status cell and one data range."""

    def set_status(self, text: str) -> None: ...

    def clear_range(self, range_id: str) -> None: ...

    def write_table(
        self,
        range_id: str,
        header: Sequence[str],
        records: Sequence[ProductRecord],
    ) -> None: ...


class DryRunSink:
    """Logs what would be written instead of touching the spreadsheet."""

    def set_status(self, text: str) -> None:
        LOGGER.info("[dry-run] status -> %s", text)

    def clear_range(self, range_id: str) -> None:
        LOGGER.info("[dry-run] clear %s", range_id)

    def write_table(
        self,
        range_id: str,
        header: Sequence[str],
        records: Sequence[ProductRecord],
    ) -> None:
        LOGGER.info(
            "[dry-run] write %s | columns=%d rows=%d",
            range_id,
            len(header),
            len(records),
        )
        for record in records[:3]:
            LOGGER.info("[dry-run] sample row: %s", record.as_row())
