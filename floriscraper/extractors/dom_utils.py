"""Helper utilities for reading text and attributes from rendered DOM nodes."""

from __future__ import annotations

from typing import Any

from playwright.async_api import Error as PlaywrightError


async def query_text(root: Any, selector: str, *, rendered: bool = False) -> str | None:
    """Return the trimmed text of the first match under *root*.

    ``rendered=True`` reads ``innerText`` (line breaks as laid out) instead of
    ``textContent``. Returns ``None`` when nothing matches; browser errors
    propagate to the caller.
    """

    node = await root.query_selector(selector)
    if node is None:
        return None
    value = await (node.inner_text() if rendered else node.text_content())
    if value is None:
        return None
    return value.strip()


async def query_texts(root: Any, selector: str) -> list[str]:
    """Return the trimmed ``textContent`` of every match under *root*, in order."""

    values: list[str] = []
    for node in await root.query_selector_all(selector):
        text = await node.text_content()
        values.append((text or "").strip())
    return values


async def query_attribute(root: Any, selector: str, attribute: str) -> str | None:
    node = await root.query_selector(selector)
    if node is None:
        return None
    value = await node.get_attribute(attribute)
    if value is None:
        return None
    return value.strip()


async def query_property(root: Any, selector: str, prop: str) -> str | None:
    """Return a DOM property (e.g. the resolved ``src``) of the first match."""

    node = await root.query_selector(selector)
    if node is None:
        return None
    value = await node.evaluate(f"(el) => el.{prop}")
    return str(value) if value is not None else None


async def inner_text_safe(node: Any) -> str | None:
    """Return the stripped inner text for *node* while ignoring DOM failures."""

    if node is None:
        return None
    try:
        result = await node.inner_text()
    except PlaywrightError:
        return None
    if result is None:
        return None
    return result.strip()


async def has_class(node: Any, class_name: str) -> bool:
    return bool(await node.evaluate("(el, name) => el.classList.contains(name)", class_name))
