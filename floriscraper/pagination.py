"""Pagination walker: page-by-page traversal of the product grid."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Protocol, Sequence

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

import floriscraper.selectors as selectors
from floriscraper.errors import GridTimeoutError, PageLoadError
from floriscraper.extractors import FieldExtractor, ItemSurface, PlaywrightItemSurface
from floriscraper.health import HealthMonitor
from floriscraper.logging_config import get_logger
from floriscraper.models import ProductRecord
from floriscraper.playwright_env import SettlePolicy

LOGGER = get_logger(__name__)

GRID_TIMEOUT_MS = 60_000


class NextControl(str, Enum):
    ABSENT = "absent"
    DISABLED = "disabled"
    ENABLED = "enabled"


class ListingPage(Protocol):
    """The currently rendered page of the listing."""

    async def wait_for_grid(self, page_number: int) -> None: ...

    async def items(self) -> Sequence[ItemSurface]: ...

    async def next_control(self) -> NextControl: ...

    async def advance(self) -> None: ...


@dataclass(frozen=True)
class WalkResult:
    """Accumulator threaded through traversal; the final value is the run's result set."""

    records: tuple[ProductRecord, ...] = ()
    page_counts: tuple[int, ...] = ()
    truncated: bool = False

    def with_page(self, page_records: Sequence[ProductRecord]) -> "WalkResult":
        return replace(
            self,
            records=self.records + tuple(page_records),
            page_counts=self.page_counts + (len(page_records),),
        )

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def pages(self) -> int:
        return len(self.page_counts)


class PaginationWalker:
    """Collects every page until the next control is absent or disabled.

    ``max_pages`` bounds the walk in case the next control never reports
    itself disabled; normal listings end well before it.
    """

    def __init__(
        self,
        listing: ListingPage,
        extractor: FieldExtractor,
        *,
        max_pages: int | None = None,
        monitor: HealthMonitor | None = None,
    ) -> None:
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self._listing = listing
        self._extractor = extractor
        self._max_pages = max_pages
        self._monitor = monitor

    async def collect_page(self, page_number: int, acc: WalkResult) -> WalkResult:
        """Extract every item on the rendered page and fold it into *acc*."""

        LOGGER.info("Scraping page %d...", page_number)
        surfaces = await self._listing.items()
        page_records = [await self._extractor.extract(surface) for surface in surfaces]
        LOGGER.info("Page %d scraped (%d products)", page_number, len(page_records))
        if self._monitor is not None:
            self._monitor.record_page(page=page_number, count=len(page_records))
        return acc.with_page(page_records)

    async def walk(self) -> WalkResult:
        acc = WalkResult()
        page_number = 1
        while True:
            await self._listing.wait_for_grid(page_number)
            acc = await self.collect_page(page_number, acc)

            control = await self._listing.next_control()
            if control is not NextControl.ENABLED:
                LOGGER.info(
                    "Pagination finished | pages=%d total=%d next=%s",
                    acc.pages,
                    acc.total,
                    control.value,
                )
                return acc

            if self._max_pages is not None and page_number >= self._max_pages:
                LOGGER.warning(
                    "Stopping at max_pages=%d with next page still enabled | total=%d",
                    self._max_pages,
                    acc.total,
                )
                return replace(acc, truncated=True)

            await self._listing.advance()
            page_number += 1


class PlaywrightListing:
    """:class:`ListingPage` over the Explorer grid on a live Playwright page."""

    def __init__(
        self,
        page: Any,
        settle: SettlePolicy,
        *,
        grid_timeout_ms: int = GRID_TIMEOUT_MS,
    ) -> None:
        self._page = page
        self._settle = settle
        self._grid_timeout_ms = grid_timeout_ms

    async def wait_for_grid(self, page_number: int) -> None:
        try:
            await self._page.wait_for_selector(selectors.GRID, timeout=self._grid_timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise GridTimeoutError(url=self._page.url, page=page_number) from exc

    async def items(self) -> list[ItemSurface]:
        handles = await self._page.query_selector_all(selectors.ITEM)
        return [PlaywrightItemSurface(handle) for handle in handles]

    async def next_control(self) -> NextControl:
        button = await self._page.query_selector(selectors.NEXT_PAGE)
        if button is None:
            return NextControl.ABSENT
        if await button.get_attribute("disabled") is not None:
            return NextControl.DISABLED
        return NextControl.ENABLED

    async def advance(self) -> None:
        button = await self._page.query_selector(selectors.NEXT_PAGE)
        if button is None:
            raise PageLoadError("Next page control vanished before click", url=self._page.url)
        await button.click()
        await self._settle.wait("pagination")
