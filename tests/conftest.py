"""In-memory stand-ins for the Playwright page and element handles."""

from __future__ import annotations

import inspect
import re
from pathlib import Path
from typing import Callable

import pytest

from harness.config import HarnessConfig

_XPATH_PHRASE = re.compile(r",'([^']*)'\)\]$")


class FakeElement:

    def __init__(
        self,
        text: str = "",
        visible: bool = True,
        children: dict[str, "FakeElement"] | None = None,
        broken: bool = False,
        on_press: Callable[[str], None] | None = None,
    ):
        self.text = text
        self.visible = visible
        self.children = children or {}
        self.broken = broken
        self.on_press = on_press
        self.fills: list[str] = []
        self.presses: list[str] = []
        self.scrolled = False

    async def is_visible(self) -> bool:
        if self.broken:
            raise RuntimeError("element detached")
        return self.visible

    async def inner_text(self) -> str:
        return self.text

    async def query_selector(self, selector: str):
        return self.children.get(selector)

    async def scroll_into_view_if_needed(self):
        self.scrolled = True

    async def fill(self, value: str):
        self.fills.append(value)

    async def press(self, key: str):
        self.presses.append(key)
        if self.on_press:
            result = self.on_press(key)
            if inspect.isawaitable(result):
                await result


class FakeDialog:

    def __init__(self, message: str = "XSS", type: str = "alert"):
        self.message = message
        self.type = type
        self.dismissed = False

    async def dismiss(self):
        self.dismissed = True


class FakePage:
    """Selector table plus a few page-level properties.

    ``xpath=`` queries are answered from ``messages`` by substring match on
    the lower-cased phrase, the same way the no-results XPath behaves.
    """

    def __init__(
        self,
        url: str = "https://hithouse.ba/",
        elements: dict[str, list[FakeElement]] | None = None,
        messages: list[FakeElement] | None = None,
        ready_state: str = "complete",
        body_html: str = "",
        title: str = "Hit House",
        broken: bool = False,
    ):
        self.url = url
        self.elements = elements or {}
        self.messages = messages or []
        self.ready_state = ready_state
        self.body_html = body_html
        self._title = title
        self.broken = broken
        self.gotos: list[str] = []
        self.waits: list[int] = []
        self.handlers: dict[str, list[Callable]] = {}
        self.screenshots: list[str] = []
        self.default_timeout: int | None = None

    async def query_selector_all(self, selector: str) -> list[FakeElement]:
        if self.broken:
            raise RuntimeError("Target page, context or browser has been closed")
        if selector.startswith("xpath="):
            match = _XPATH_PHRASE.search(selector)
            phrase = match.group(1) if match else ""
            return [m for m in self.messages if phrase and phrase in m.text.lower()]
        return list(self.elements.get(selector, []))

    async def query_selector(self, selector: str):
        found = await self.query_selector_all(selector)
        return found[0] if found else None

    async def evaluate(self, script: str):
        if self.broken:
            raise RuntimeError("Execution context was destroyed")
        if "innerHTML" in script:
            return self.body_html.lower()
        if "readyState" in script:
            return self.ready_state
        return None

    async def wait_for_function(self, script: str, timeout: int = 0):
        if self.ready_state not in ("interactive", "complete"):
            raise TimeoutError(f"Timeout {timeout}ms exceeded")

    async def wait_for_selector(self, selector: str, state: str = "attached", timeout: int = 0):
        if not self.elements.get(selector):
            raise TimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def wait_for_timeout(self, ms: int):
        self.waits.append(ms)

    async def goto(self, url: str, wait_until: str = "load", timeout: int = 0):
        self.gotos.append(url)
        self.url = url

    async def title(self) -> str:
        return self._title

    async def screenshot(self, path: str, full_page: bool = False):
        Path(path).write_bytes(b"\x89PNG fake")
        self.screenshots.append(path)

    def on(self, event: str, handler: Callable):
        self.handlers.setdefault(event, []).append(handler)

    def set_default_timeout(self, timeout: int):
        self.default_timeout = timeout

    async def fire(self, event: str, payload):
        for handler in self.handlers.get(event, []):
            await handler(payload)


def products(n: int, visible: bool = True) -> list[FakeElement]:
    return [
        FakeElement(text=f"Product {i}", visible=visible, children={"h3 a": FakeElement(text=f"Laptop model {i}")})
        for i in range(n)
    ]


def search_box(on_press: Callable[[str], None] | None = None) -> FakeElement:
    return FakeElement(on_press=on_press)


@pytest.fixture
def config(tmp_path) -> HarnessConfig:
    return HarnessConfig.model_validate({
        "timeouts": {"settle_ms": 0, "keystroke_pause_ms": 0, "test_ms": 5_000},
        "screenshots": {"directory": str(tmp_path / "screenshots"), "after_search_delay_ms": 0},
        "reports": {
            "directory": str(tmp_path / "reports"),
            "latest_snapshot_path": str(tmp_path / "test-results.json"),
        },
        "queue": {"inter_test_delay_ms": 0, "confirmation_delay_ms": 0},
    })


@pytest.fixture
def events() -> list[tuple[str, dict]]:
    return []


@pytest.fixture
def on_progress(events):
    def record(event_type: str, data: dict):
        events.append((event_type, data))
    return record
