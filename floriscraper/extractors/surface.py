"""Locator strategy for one listed item: one raw read per record field."""

from __future__ import annotations

from typing import Any, Protocol

import floriscraper.selectors as selectors

from .dom_utils import query_attribute, query_property, query_text, query_texts


class ItemSurface(Protocol):
    """Raw per-field reads scoped to one item.

    Each method returns the raw text (or ``None`` when the node is absent) and
    may raise on browser errors; the field extractor absorbs both.
    """

    async def detail_text(self) -> str | None: ...

    async def price_text(self) -> str | None: ...

    async def packing_text(self) -> str | None: ...

    async def quantity_text(self) -> str | None: ...

    async def image_src(self) -> str | None: ...

    async def farm_image_alt(self) -> str | None: ...

    async def farm_text(self) -> str | None: ...

    async def characteristic_values(self) -> list[str]: ...

    async def helper_select_text(self) -> str | None: ...

    async def helper_stack(self) -> tuple[str, str | None] | None: ...


class PlaywrightItemSurface:
    """:class:`ItemSurface` backed by a Playwright element handle for one grid item."""

    def __init__(self, handle: Any) -> None:
        self._handle = handle

    async def detail_text(self) -> str | None:
        return await query_text(self._handle, selectors.DETAILS, rendered=True)

    async def price_text(self) -> str | None:
        return await query_text(self._handle, selectors.PRICE)

    async def packing_text(self) -> str | None:
        return await query_text(self._handle, selectors.PACKING)

    async def quantity_text(self) -> str | None:
        return await query_text(self._handle, selectors.QUANTITY)

    async def image_src(self) -> str | None:
        return await query_property(self._handle, selectors.IMAGE, "src")

    async def farm_image_alt(self) -> str | None:
        farm = await self._handle.query_selector(selectors.FARM)
        if farm is None:
            return None
        return await query_attribute(farm, selectors.FARM_IMAGE, "alt")

    async def farm_text(self) -> str | None:
        return await query_text(self._handle, selectors.FARM)

    async def characteristic_values(self) -> list[str]:
        return await query_texts(self._handle, selectors.CHARACTERISTIC_VALUES)

    async def helper_select_text(self) -> str | None:
        return await query_text(self._handle, selectors.HELPER_SELECT, rendered=True)

    async def helper_stack(self) -> tuple[str, str | None] | None:
        stack = await self._handle.query_selector(selectors.HELPER_STACK)
        if stack is None:
            return None
        main = await query_text(stack, selectors.HELPER_STACK_MAIN, rendered=True)
        chip = await query_text(stack, selectors.HELPER_STACK_CHIP, rendered=True)
        return main or "", chip or None
