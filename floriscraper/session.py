"""Browser session bootstrap: sign-in, navigation and listing view preparation."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from playwright.async_api import Error as PlaywrightError, async_playwright

import floriscraper.selectors as selectors
from floriscraper.config import Settings
from floriscraper.errors import PageLoadError
from floriscraper.filters import FilterPanel, PlaywrightFilterPanel
from floriscraper.logging_config import get_logger
from floriscraper.pagination import ListingPage, PlaywrightListing
from floriscraper.playwright_env import (
    VIEWPORT,
    SettlePolicy,
    close_browser,
    launch_browser,
    settle_policy,
)

LOGGER = get_logger(__name__)


class ExplorerSession:
    """One signed-in page on the Explorer purchase view."""

    def __init__(self, page: Any, settings: Settings, settle: SettlePolicy) -> None:
        self.page = page
        self.settings = settings
        self.settle = settle

    async def _goto(self, url: str, wait_until: str) -> None:
        try:
            await self.page.goto(url, wait_until=wait_until)
        except PlaywrightError as exc:
            raise PageLoadError(url=url) from exc

    async def sign_in(self) -> None:
        await self._goto(selectors.LOGIN_URL, "load")
        await self.page.locator(selectors.LOGIN_IDENTIFIER).fill(self.settings.email)
        await self.page.click(selectors.LOGIN_NEXT)
        await self.page.locator(selectors.LOGIN_PASSCODE).fill(self.settings.password)
        await self.page.click(selectors.LOGIN_VERIFY)
        await self.page.wait_for_load_state("networkidle")
        await self.settle.wait("sign_in")
        LOGGER.info("Signed in as %s", self.settings.email)

    async def open_purchase_view(self) -> None:
        await self._goto(selectors.EXPLORER_URL, "networkidle")
        tab = self.page.locator(selectors.PURCHASE_TAB)
        try:
            await tab.wait_for(state="visible", timeout=self.settings.timeouts.tab_ms)
        except PlaywrightError as exc:
            raise PageLoadError("Purchase tab never became visible", url=self.page.url) from exc
        await tab.click()
        await self.settle.wait("tab")
        LOGGER.info("Purchase view opened")

    async def open_filter_panel(self) -> FilterPanel:
        await self.page.click(selectors.FILTER_PANEL_OPEN)
        await self.settle.wait("panel")
        return PlaywrightFilterPanel(self.page)

    async def submit_search(self) -> None:
        """Run the search, close the sidebar and widen the page size."""

        await self.page.click(selectors.SEARCH_BUTTON)
        await self.settle.wait("search")

        close_button = self.page.locator(selectors.FILTER_PANEL_CLOSE)
        if await close_button.is_visible():
            await close_button.click()
        await self.settle.wait("sidebar_close")

        page_size = self.settings.page_size
        if page_size is None:
            return
        dropdown = await self.page.query_selector(selectors.PAGE_SIZE_DROPDOWN)
        if dropdown is None:
            LOGGER.warning("Page size dropdown not found; keeping default page size")
            return
        await dropdown.select_option(str(page_size))
        await self.settle.wait("dropdown")
        LOGGER.info("Page size set to %d", page_size)

    def listing(self) -> ListingPage:
        return PlaywrightListing(
            self.page,
            self.settle,
            grid_timeout_ms=self.settings.timeouts.grid_ms,
        )


@asynccontextmanager
async def open_session(
    settings: Settings,
    *,
    headless: bool | None = None,
) -> AsyncIterator[ExplorerSession]:
    """Launch one browser, yield a session on a fresh page, always close the browser."""

    async with async_playwright() as playwright:
        browser = await launch_browser(playwright, headless=headless)
        try:
            context = await browser.new_context(viewport=VIEWPORT)
            page = await context.new_page()
            page.set_default_timeout(settings.timeouts.action_ms)
            yield ExplorerSession(page, settings, settle_policy(settings.settle_ms))
        finally:
            await close_browser(browser)
            LOGGER.info("Browser session closed")
