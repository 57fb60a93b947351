"""Selector-list element lookup.

Each lookup walks an ordered list of CSS/XPath strategies and returns the
first visible match. Lookups never raise: a selector that errors is treated
as a miss, and None means every strategy missed.
"""

from __future__ import annotations

from playwright.async_api import ElementHandle, Page


async def is_visible(el: ElementHandle) -> bool:
    try:
        return await el.is_visible()
    except Exception:
        return False


async def find_first_visible(page: Page, selectors: list[str]) -> tuple[ElementHandle | None, str | None]:
    """Return (element, selector) for the first selector with a visible match."""
    for selector in selectors:
        try:
            el = await page.query_selector(selector)
            if el and await el.is_visible():
                return el, selector
        except Exception:
            continue
    return None, None


async def find_text_in(root: ElementHandle, selectors: list[str], min_length: int = 0) -> str | None:
    """Text of the first child matching one of the selectors, longer than min_length."""
    for selector in selectors:
        try:
            el = await root.query_selector(selector)
            if not el:
                continue
            text = (await el.inner_text()).strip()
            if len(text) > min_length:
                return text
        except Exception:
            continue
    return None


async def count_visible(elements: list[ElementHandle], limit: int = 20) -> int:
    visible = 0
    for el in elements[:limit]:
        if await is_visible(el):
            visible += 1
    return visible
