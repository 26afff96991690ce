"""Filter controller: converge the listing's filter panel to a target state."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol

import floriscraper.selectors as selectors
from floriscraper.errors import FilterControlError
from floriscraper.extractors.dom_utils import has_class, inner_text_safe
from floriscraper.logging_config import get_logger
from floriscraper.models import FilterSpec
from floriscraper.playwright_env import SettlePolicy

LOGGER = get_logger(__name__)

_COUNT_SUFFIX = re.compile(r"\s*\(\s*[\d.,]+\s*\)$")


class FilterOption(Protocol):
    async def label(self) -> str | None: ...

    async def is_checked(self) -> bool: ...

    async def toggle(self) -> None: ...


class FilterGroup(Protocol):
    async def is_collapsed(self) -> bool: ...

    async def expand(self) -> None: ...

    async def options(self) -> list[FilterOption]: ...

    async def find_toggle(self, label: str, control: str) -> FilterOption | None: ...


class FilterPanel(Protocol):
    async def find_group(self, label: str) -> FilterGroup | None: ...

    async def find_toggle(self, label: str, control: str) -> FilterOption | None: ...


@dataclass
class FilterReport:
    """Counts of what one :meth:`FilterController.apply` call did."""

    toggled: int = 0
    unchanged: int = 0
    skipped: list[str] = field(default_factory=list)


class FilterController:
    """Applies :class:`FilterSpec` entries in order, toggling only mismatched options.

    Callers order specs coarse-to-fine: a "select all" style control listed
    after individual options would override them.
    """

    def __init__(self, panel: FilterPanel, settle: SettlePolicy) -> None:
        self._panel = panel
        self._settle = settle

    async def apply(self, specs: Iterable[FilterSpec]) -> FilterReport:
        report = FilterReport()
        for spec in specs:
            try:
                await self._apply_one(spec, report)
            except Exception as exc:
                LOGGER.warning("Filter %s not applied: %s", spec.display_name, exc)
                report.skipped.append(spec.display_name)
        LOGGER.info(
            "Filters applied | toggled=%d unchanged=%d skipped=%d",
            report.toggled,
            report.unchanged,
            len(report.skipped),
        )
        return report

    async def _apply_one(self, spec: FilterSpec, report: FilterReport) -> None:
        group: FilterGroup | None = None
        if spec.group:
            group = await self._panel.find_group(spec.group)
            if group is None:
                LOGGER.warning("Filter group '%s' not found; skipping", spec.group)
                report.skipped.append(spec.display_name)
                return
            if await group.is_collapsed():
                await group.expand()
                await self._settle.wait("accordion")

        if spec.kind == "toggle":
            await self._converge_toggle(spec, group, report)
        elif group is None:
            raise FilterControlError("Checkbox filter needs a group", group=spec.display_name)
        else:
            await self._converge_checkboxes(spec, group, report)

    async def _converge_toggle(
        self,
        spec: FilterSpec,
        group: FilterGroup | None,
        report: FilterReport,
    ) -> None:
        label, target = next(iter(spec.options.items()))
        scope: Any = group if group is not None else self._panel
        option = await scope.find_toggle(label, spec.control)
        if option is None:
            LOGGER.warning("Toggle '%s' not found in %s; skipping", label, spec.display_name)
            report.skipped.append(f"{spec.display_name}/{label}")
            return
        await self._converge_option(option, label, target, report)

    async def _converge_checkboxes(
        self,
        spec: FilterSpec,
        group: FilterGroup,
        report: FilterReport,
    ) -> None:
        seen: set[str] = set()
        for option in await group.options():
            try:
                label = await option.label()
                if not label:
                    continue
                target = spec.target_for(label)
                if target is None:
                    continue
                seen.update(name for name in spec.options if name in label)
                await self._converge_option(option, label, target, report)
            except Exception as exc:
                LOGGER.warning("Option in '%s' not converged: %s", spec.group, exc)

        for missing in sorted(set(spec.options) - seen):
            LOGGER.warning("Option '%s' not found in group '%s'", missing, spec.group)
            report.skipped.append(f"{spec.display_name}/{missing}")

    async def _converge_option(
        self,
        option: FilterOption,
        label: str,
        target: bool,
        report: FilterReport,
    ) -> None:
        if await option.is_checked() == target:
            report.unchanged += 1
            LOGGER.debug("Filter option '%s' already %s", label, "on" if target else "off")
            return
        await option.toggle()
        await self._settle.wait("filter_toggle")
        report.toggled += 1
        LOGGER.info("Filter option '%s' switched %s", label, "on" if target else "off")


class CheckboxOption:
    """A checkbox input, optionally toggled through its wrapping label."""

    def __init__(self, checkbox: Any, label_text: str | None, *, click_target: Any = None) -> None:
        self._checkbox = checkbox
        self._label_text = label_text
        self._click_target = click_target

    async def label(self) -> str | None:
        return self._label_text

    async def is_checked(self) -> bool:
        return await self._checkbox.is_checked()

    async def toggle(self) -> None:
        if self._click_target is not None:
            await self._click_target.click()
            return
        await self._checkbox.set_checked(not await self._checkbox.is_checked())


class ToggleButtonOption:
    """A segmented button whose "on" state is a selected CSS class."""

    def __init__(self, button: Any, label_text: str | None) -> None:
        self._button = button
        self._label_text = label_text

    async def label(self) -> str | None:
        return self._label_text

    async def is_checked(self) -> bool:
        return await has_class(self._button, selectors.TOGGLE_BUTTON_SELECTED_CLASS)

    async def toggle(self) -> None:
        await self._button.click()


def toggle_label_matches(rendered: str, label: str) -> bool:
    """Exact match on the rendered label, ignoring a trailing ``(count)``."""

    return _COUNT_SUFFIX.sub("", rendered.strip()) == label


async def _find_toggle_in(root: Any, label: str, control: str) -> FilterOption | None:
    if control == "button":
        button = await root.query_selector(f'{selectors.SUPPLIER_COMBO} button:text-is("{label}")')
        return ToggleButtonOption(button, label) if button is not None else None

    # :has-text is a case-insensitive substring match; narrow it to the exact label.
    for label_node in await root.query_selector_all(f'label:has-text("{label}")'):
        text = await inner_text_safe(label_node)
        if text is None or not toggle_label_matches(text, label):
            continue
        checkbox = await label_node.query_selector(selectors.CHECKBOX)
        if checkbox is None:
            LOGGER.warning("Label '%s' has no checkbox input", label)
            return None
        return CheckboxOption(checkbox, label, click_target=label_node)
    return None


class PlaywrightFilterGroup:
    """One MUI accordion in the filter sidebar."""

    def __init__(self, accordion: Any) -> None:
        self._accordion = accordion

    async def is_collapsed(self) -> bool:
        collapse = await self._accordion.query_selector(selectors.ACCORDION_COLLAPSE)
        if collapse is None:
            return False
        return await has_class(collapse, selectors.ACCORDION_COLLAPSED_CLASS)

    async def expand(self) -> None:
        summary = await self._accordion.query_selector(selectors.ACCORDION_SUMMARY)
        if summary is None:
            raise FilterControlError("Accordion has no summary button")
        await summary.click()

    async def options(self) -> list[FilterOption]:
        found: list[FilterOption] = []
        for checkbox in await self._accordion.query_selector_all(selectors.CHECKBOX):
            text = await checkbox.evaluate(
                "(el) => { const l = el.closest('label'); return l ? l.innerText.trim() : null; }"
            )
            found.append(CheckboxOption(checkbox, text))
        return found

    async def find_toggle(self, label: str, control: str) -> FilterOption | None:
        return await _find_toggle_in(self._accordion, label, control)


class PlaywrightFilterPanel:
    """The Explorer filter sidebar, located on a live page."""

    def __init__(self, page: Any) -> None:
        self._page = page

    async def find_group(self, label: str) -> FilterGroup | None:
        for accordion in await self._page.query_selector_all(selectors.ACCORDION):
            span = await accordion.query_selector(selectors.ACCORDION_LABEL)
            if (await inner_text_safe(span)) == label:
                return PlaywrightFilterGroup(accordion)
        return None

    async def find_toggle(self, label: str, control: str) -> FilterOption | None:
        return await _find_toggle_in(self._page, label, control)
