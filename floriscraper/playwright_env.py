"""Centralised helpers for Playwright launch and settle-delay configuration."""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, fields, replace
from typing import Any

from playwright.async_api import Browser, Playwright

from .logging_config import get_logger

LOGGER = get_logger(__name__)

_FALSE_VALUES = {"0", "false", "no", "off"}
_SUPPORTED_BROWSERS = {"firefox", "chromium", "webkit"}

VIEWPORT = {"width": 1280, "height": 800}


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in _FALSE_VALUES


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def headless_enabled() -> bool:
    """Return True if Playwright should run in headless mode."""

    return _as_bool(os.getenv("FLORISCRAPER_HEADLESS"), True)


def browser_name() -> str:
    """Return the Playwright browser type to launch (Firefox unless overridden)."""

    value = (os.getenv("FLORISCRAPER_BROWSER") or "firefox").strip().lower()
    if value not in _SUPPORTED_BROWSERS:
        LOGGER.warning("Unsupported FLORISCRAPER_BROWSER=%s; using firefox", value)
        return "firefox"
    return value


def slow_mo_ms() -> int | None:
    value = _env_int("FLORISCRAPER_SLOW_MO_MS", 0)
    return value if value > 0 else None


def wait_multiplier() -> float:
    """Global scale applied to every settle delay."""

    return max(_env_float("FLORISCRAPER_WAIT_MULTIPLIER", 1.0), 0.0)


def launch_kwargs(*, headless: bool | None = None) -> dict[str, Any]:
    """Return kwargs passed to ``<browser_type>.launch``."""

    kwargs: dict[str, Any] = {
        "headless": headless_enabled() if headless is None else headless,
    }
    slow_mo = slow_mo_ms()
    if slow_mo:
        kwargs["slow_mo"] = slow_mo
    return kwargs


async def launch_browser(playwright: Playwright, *, headless: bool | None = None) -> Browser:
    """Launch the configured browser type."""

    browser_type = getattr(playwright, browser_name())
    return await browser_type.launch(**launch_kwargs(headless=headless))


async def close_browser(browser: Browser | None) -> None:
    """Close the provided browser without raising."""

    if browser is None:
        return
    try:
        await browser.close()
    except Exception as exc:
        LOGGER.warning("Failed to close browser: %s", exc)


@dataclass(frozen=True)
class SettlePolicy:
    """Fixed pauses (milliseconds) after UI-mutating actions, per transition kind.

    The listing re-renders asynchronously without an observable ready signal
    for every transition, so each kind gets a fixed wait rather than polling.
    """

    accordion: int = 500
    filter_toggle: int = 500
    pagination: int = 4000
    dropdown: int = 3000
    search: int = 5000
    panel: int = 2000
    tab: int = 3000
    sign_in: int = 5000
    sidebar_close: int = 1000

    def scaled(self, multiplier: float) -> "SettlePolicy":
        factor = max(multiplier, 0.0)
        return replace(
            self,
            **{f.name: int(getattr(self, f.name) * factor) for f in fields(self)},
        )

    def delay_ms(self, kind: str) -> int:
        try:
            return int(getattr(self, kind))
        except AttributeError:
            raise ValueError(f"Unknown settle kind: {kind}") from None

    async def wait(self, kind: str) -> None:
        delay = self.delay_ms(kind)
        if delay <= 0:
            return
        await asyncio.sleep(delay / 1000)


def settle_policy(overrides: dict[str, int] | None = None) -> SettlePolicy:
    """Build the settle policy from config overrides and the env multiplier."""

    base = SettlePolicy()
    if overrides:
        known = {f.name for f in fields(SettlePolicy)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            LOGGER.warning("Ignoring unknown settle delays: %s", ", ".join(unknown))
        base = replace(base, **{k: int(v) for k, v in overrides.items() if k in known})
    return base.scaled(wait_multiplier())
