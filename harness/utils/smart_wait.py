"""Bounded waits on the page.

Each wait returns False on timeout instead of raising, so callers decide
whether a slow page is worth a warning or a failure.
"""

from __future__ import annotations

from playwright.async_api import Page


_READY_STATE_JS = """() => {
    const rs = document.readyState;
    return rs === 'interactive' || rs === 'complete';
}"""


async def wait_for_ready_state(page: Page, timeout_ms: int = 5000) -> bool:
    """Wait until document.readyState is interactive or complete."""
    try:
        await page.wait_for_function(_READY_STATE_JS, timeout=timeout_ms)
        return True
    except Exception:
        return False


async def read_ready_state(page: Page) -> str:
    try:
        return await page.evaluate("() => document.readyState")
    except Exception:
        return "unknown"


async def wait_for_element(page: Page, selector: str, timeout_ms: int = 5000, state: str = "attached") -> bool:
    """Wait for an element to be attached (or visible, with state='visible')."""
    try:
        await page.wait_for_selector(selector, state=state, timeout=timeout_ms)
        return True
    except Exception:
        return False


async def pause(page: Page, ms: int):
    if ms > 0:
        await page.wait_for_timeout(ms)
