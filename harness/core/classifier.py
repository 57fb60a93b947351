"""Infer the result count of a search from the rendered page.

Priority order:
1. Product containers. The first selector with at least one visible match
   (among its first 20) decides the count, and a coexisting "no results"
   message is ignored.
2. A visible "no results" phrase whose text carries no positive number.
3. Neither: count 0 without a no-results signal, left for the caller to
   judge.

Classification never raises. A browser fault anywhere degrades to case 3.
"""

from __future__ import annotations

import re
from typing import Callable

from playwright.async_api import Page

from harness.models.types import ResultCount
from harness.utils.element_finder import count_visible, is_visible
from harness.utils.probe import attempt

_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = "abcdefghijklmnopqrstuvwxyz"
_NUMBER = re.compile(r"\d+")

VISIBILITY_SAMPLE = 20


def no_results_xpath(phrase: str) -> str:
    """XPath matching elements whose own text contains the phrase, case-insensitively."""
    return f"xpath=//*[contains(translate(text(),'{_UPPER}','{_LOWER}'),'{phrase.lower()}')]"


def mentions_positive_count(text: str) -> bool:
    """True when the text holds a number above zero ("23 products found")."""
    return any(int(n) > 0 for n in _NUMBER.findall(text))


class ResultClassifier:

    def __init__(
        self,
        result_selectors: list[str],
        no_results_phrases: list[str],
        on_progress: Callable | None = None,
    ):
        self.result_selectors = list(result_selectors)
        self.no_results_phrases = [p.lower() for p in no_results_phrases]
        self._on_progress = on_progress or (lambda *_: None)

    async def count_results(self, page: Page) -> ResultCount:
        probe = await attempt(self._classify(page))
        if not probe.known:
            self._emit("warning", {"source": "classifier", "message": probe.error})
        result = probe.or_default(ResultCount())
        self._emit("classify", {
            "count": result.count,
            "has_no_results": result.has_no_results,
            "ambiguous": result.is_ambiguous,
        })
        return result

    async def _classify(self, page: Page) -> ResultCount:
        for selector in self.result_selectors:
            elements = await page.query_selector_all(selector)
            if not elements:
                continue
            visible = await count_visible(elements, VISIBILITY_SAMPLE)
            if visible > 0:
                return ResultCount(count=len(elements), has_no_results=False)

        if await self._has_no_results_message(page):
            return ResultCount(count=0, has_no_results=True)
        return ResultCount(count=0, has_no_results=False)

    async def _has_no_results_message(self, page: Page) -> bool:
        for phrase in self.no_results_phrases:
            elements = await page.query_selector_all(no_results_xpath(phrase))
            for el in elements:
                if not await is_visible(el):
                    continue
                text = (await el.inner_text()).lower()
                if mentions_positive_count(text):
                    continue
                return True
        return False

    def _emit(self, event_type: str, data: dict):
        try:
            self._on_progress(event_type, data)
        except Exception:
            pass
