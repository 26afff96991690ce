"""Custom exception types for the Explorer scraper."""

from __future__ import annotations

from typing import Optional


class ScraperError(Exception):
    """Base class carrying optional page context for log lines."""

    default_message = "Scraper error."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        url: Optional[str] = None,
        page: Optional[int] = None,
        group: Optional[str] = None,
    ) -> None:
        self.message = message or self.default_message
        self.url = url
        self.page = page
        self.group = group
        super().__init__(self.message)

    def __str__(self) -> str:
        context_parts: list[str] = []
        if self.url:
            context_parts.append(f"url={self.url}")
        if self.page is not None:
            context_parts.append(f"page={self.page}")
        if self.group:
            context_parts.append(f"group={self.group}")
        context = ", ".join(context_parts)
        return f"{self.message} ({context})" if context else self.message


class ConfigurationError(ScraperError):
    """Raised when required credentials or identifiers are missing."""

    default_message = "Invalid configuration."


class PageLoadError(ScraperError):
    """Raised when a navigation step fails to load or render."""

    default_message = "Failed to load page."


class GridTimeoutError(PageLoadError):
    """Raised when the product grid never appears within the wait bound."""

    default_message = "Product grid did not render in time."


class FilterControlError(ScraperError):
    """Raised by filter panels when an expected control is missing."""

    default_message = "Filter control not found."


class SinkError(ScraperError):
    """Raised when the tabular sink rejects a write."""

    default_message = "Sink write failed."
