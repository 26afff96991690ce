"""Field extraction: turn one item surface into a :class:`ProductRecord`.

Every field is read independently. A read that raises or finds no node
resolves that field to its empty value (or the helper sentinel) and the
remaining fields are still extracted, so :meth:`FieldExtractor.extract`
never raises for a single malformed item.
"""

from __future__ import annotations

import re
from typing import Any, Awaitable, Callable

from floriscraper.health import HealthMonitor
from floriscraper.logging_config import get_logger
from floriscraper.models import ProductRecord
from floriscraper.reporter import format_timestamp

from .surface import ItemSurface

LOGGER = get_logger(__name__)

PACKING_SEPARATOR = " - "
CURRENCY_SYMBOL = "€"

# "×33×80" -> 80: the last multiplication group wins.
_QTY_TIMES = re.compile(r"×(\d+)(?!.*×)")
_QTY_PCS = re.compile(r"(\d+)\s*pcs", re.I)


def split_detail_lines(text: str | None) -> tuple[str, str, str]:
    """Return (name, variety, code) from the multi-line detail block."""

    lines = [line.strip() for line in (text or "").split("\n")]
    lines = [line for line in lines if line]
    padded = lines[:3] + [""] * (3 - min(len(lines), 3))
    return padded[0], padded[1], padded[2]


def packing_code_from(text: str | None) -> str:
    if not text:
        return ""
    return text.strip().split(PACKING_SEPARATOR)[0]


def quantity_from(text: str | None) -> str:
    """Return the per-unit quantity digits, or ``""`` when no signal is present."""

    if not text:
        return ""
    match = _QTY_TIMES.search(text)
    if match:
        return match.group(1)
    match = _QTY_PCS.search(text)
    if match:
        return match.group(1)
    return ""


def quantity_price_combo(quantity_text: str | None, price_text: str | None) -> str:
    """Combine quantity and price as ``"80 * €0.37"``, ``"€0.37"`` or ``""``.

    A missing quantity node (``None``) yields ``""`` even when a price exists;
    a present node without a quantity signal falls back to the price alone.
    """

    if quantity_text is None:
        return ""
    price_only = (price_text or "").replace(CURRENCY_SYMBOL, "").strip()
    if not price_only:
        return ""
    qty = quantity_from(quantity_text)
    if qty:
        return f"{qty} * {CURRENCY_SYMBOL}{price_only}"
    return f"{CURRENCY_SYMBOL}{price_only}"


def farm_name_from(image_alt: str | None, container_text: str | None) -> str:
    alt = (image_alt or "").strip()
    if alt:
        return alt
    return (container_text or "").strip()


def helper_tag_from(
    select_text: str | None,
    stack: tuple[str, str | None] | None,
) -> str | None:
    """Resolve the helper tag; ``None`` means neither widget produced text."""

    selected = (select_text or "").strip()
    if selected:
        return selected
    if stack is None:
        return None
    main, chip = stack
    main = (main or "").strip()
    chip = (chip or "").strip()
    if chip:
        return f"{main} ({chip})"
    return main or None


class FieldExtractor:
    """Builds records from item surfaces, guarding each field read."""

    def __init__(
        self,
        *,
        clock: Callable[[], str] = format_timestamp,
        monitor: HealthMonitor | None = None,
    ) -> None:
        self._clock = clock
        self._monitor = monitor

    async def _read(
        self,
        field_name: str,
        read: Callable[[], Awaitable[Any]],
        *,
        expected: bool = True,
    ) -> Any | None:
        try:
            value = await read()
        except Exception as exc:
            LOGGER.debug("Field %s unavailable: %s", field_name, exc)
            self._miss(field_name, f"{type(exc).__name__}: {exc}")
            return None
        if value is None and expected:
            self._miss(field_name, "node not found")
        return value

    def _miss(self, field_name: str, reason: str) -> None:
        if self._monitor is not None:
            self._monitor.record_field_miss(field_name, reason)

    async def extract(self, surface: ItemSurface) -> ProductRecord:
        image = await self._read("image_url", surface.image_src)
        details = await self._read("details", surface.detail_text)
        name, variety, code = split_detail_lines(details)
        price = await self._read("price", surface.price_text)
        packing = await self._read("packing_code", surface.packing_text)
        quantity = await self._read("quantity", surface.quantity_text)
        farm_alt = await self._read("farm_image_alt", surface.farm_image_alt, expected=False)
        farm_text = None
        if not (farm_alt or "").strip():
            farm_text = await self._read("farm_name", surface.farm_text)
        characteristics = await self._read("characteristics", surface.characteristic_values)

        helper_select = await self._read(
            "helper_select", surface.helper_select_text, expected=False
        )
        helper_stack = None
        if not (helper_select or "").strip():
            helper_stack = await self._read("helper_stack", surface.helper_stack, expected=False)

        return ProductRecord(
            name=name,
            variety=variety,
            code=code,
            packing_code=packing_code_from(packing),
            price=price or "",
            image_url=image or "",
            quantity_price_combo=quantity_price_combo(quantity, price),
            farm_name=farm_name_from(farm_alt, farm_text),
            characteristics=tuple(characteristics or ()),
            helper_tag=helper_tag_from(helper_select, helper_stack),
            capture_timestamp=self._clock(),
        )
