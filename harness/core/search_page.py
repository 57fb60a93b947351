"""Page object for the shop's search box.

Drives one search at a time: find the input through its selector list,
type the term, press Enter, wait for the page to settle. Result counting
is delegated to ResultClassifier.
"""

from __future__ import annotations

from typing import Callable
from urllib.parse import urlparse

from playwright.async_api import ElementHandle, Page

from harness.config import HarnessConfig
from harness.core.classifier import ResultClassifier
from harness.models.types import HealthStatus, ResultCount
from harness.utils.element_finder import find_first_visible, find_text_in
from harness.utils.exceptions import NotFound
from harness.utils.smart_wait import pause, read_ready_state, wait_for_element, wait_for_ready_state


class SearchPage:

    def __init__(self, page: Page, config: HarnessConfig, on_progress: Callable | None = None):
        self.page = page
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.selectors = config.selectors
        self.timeouts = config.timeouts
        self._on_progress = on_progress or (lambda *_: None)
        self.classifier = ResultClassifier(
            result_selectors=self.selectors.results,
            no_results_phrases=self.selectors.no_results_phrases,
            on_progress=self._on_progress,
        )

    @property
    def host(self) -> str:
        return urlparse(self.base_url).hostname or ""

    def is_on_site(self, url: str) -> bool:
        hostname = urlparse(url).hostname or ""
        return bool(self.host) and (hostname == self.host or hostname.endswith("." + self.host))

    # ─── Navigation ───

    async def navigate_to_homepage(self) -> bool:
        current = await self.current_url()
        if self._looks_like_homepage(current):
            el, _ = await find_first_visible(self.page, [self.selectors.primary_search_input])
            if el:
                self._emit("navigate", {"url": current, "skipped": True})
                return True

        self._emit("navigate", {"url": self.base_url, "skipped": False})
        await self.page.goto(self.base_url, wait_until="domcontentloaded", timeout=self.timeouts.page_load_ms)

        if not await wait_for_ready_state(self.page, self.timeouts.ready_state_ms):
            self._emit("warning", {"source": "navigate", "message": "Timed out waiting for document.readyState"})

        if not await wait_for_element(self.page, self.selectors.primary_search_input, self.timeouts.search_input_ms):
            self._emit("warning", {"source": "navigate", "message": "Search input was not located after navigation"})

        return True

    def _looks_like_homepage(self, url: str) -> bool:
        if not self.is_on_site(url):
            return False
        return not any(marker in url for marker in self.selectors.non_home_url_markers)

    # ─── Search ───

    async def find_search_input(self) -> ElementHandle | None:
        el, selector = await find_first_visible(self.page, self.selectors.search_inputs)
        if el:
            self._emit("search_input", {"selector": selector})
        return el

    async def search(self, term: str) -> bool:
        el = await self.find_search_input()
        if el is None:
            raise NotFound("Search input", self.selectors.search_inputs)

        self._emit("search", {"term": term})
        await el.scroll_into_view_if_needed()
        await el.fill("")
        await pause(self.page, self.timeouts.keystroke_pause_ms)
        await el.fill(term)
        await pause(self.page, self.timeouts.keystroke_pause_ms)
        await el.press("Enter")
        await pause(self.page, self.timeouts.settle_ms)
        return True

    async def count_results(self) -> ResultCount:
        return await self.classifier.count_results(self.page)

    async def get_product_titles(self, limit: int = 10) -> list[str]:
        titles: list[str] = []
        for selector in self.selectors.results:
            try:
                products = await self.page.query_selector_all(selector)
            except Exception:
                continue
            if not products:
                continue
            for product in products[:limit]:
                text = await find_text_in(product, self.selectors.product_titles, min_length=5)
                if text:
                    titles.append(text)
            break
        return titles

    # ─── Page info ───

    async def current_url(self) -> str:
        try:
            return self.page.url or "N/A"
        except Exception:
            return "N/A"

    async def page_title(self) -> str:
        try:
            return await self.page.title()
        except Exception:
            return "N/A"

    async def health_check(self) -> HealthStatus:
        url = await self.current_url()
        ready_state = await read_ready_state(self.page)
        search_input = await self.find_search_input()
        status = HealthStatus(
            ok=bool(
                self.is_on_site(url)
                and search_input is not None
                and ready_state in ("interactive", "complete")
            ),
            url=url,
            ready_state=ready_state,
            has_search_input=search_input is not None,
        )
        self._emit("health_check", status.to_dict())
        return status

    def _emit(self, event_type: str, data: dict):
        try:
            self._on_progress(event_type, data)
        except Exception:
            pass
