"""Screenshots grouped by day.

Layout: <directory>/<DD.MM.YYYY>/<HH-MM> <test id> - <reason>.png
Every capture is best-effort and returns None instead of raising.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Callable

from playwright.async_api import Page

from harness.config import ScreenshotConfig

_UNSAFE = re.compile(r'[\\/:*?"<>|]')


def sanitize_for_filename(text: str | None, max_len: int = 50) -> str:
    if not text:
        return ""
    return _UNSAFE.sub("", text).strip()[:max_len]


def stamp(now: datetime | None = None) -> tuple[str, str]:
    """(time, date folder) as ("HH-MM", "DD.MM.YYYY")."""
    now = now or datetime.now()
    return now.strftime("%H-%M"), now.strftime("%d.%m.%Y")


class ScreenshotStore:

    def __init__(self, page: Page, config: ScreenshotConfig, on_progress: Callable | None = None):
        self.page = page
        self.config = config
        self.base_dir = Path(config.directory)
        self._on_progress = on_progress or (lambda *_: None)

    async def take(self, test_id: str, reason: str = "") -> str | None:
        if not self.config.enabled:
            return None
        safe_reason = sanitize_for_filename(reason)
        suffix = f" - {safe_reason}" if safe_reason else ""
        return await self._capture(test_id, suffix)

    async def on_failure(self, test_id: str) -> str | None:
        if not self.config.on_failure:
            return None
        return await self.take(test_id, "Failure")

    async def on_success(self, test_id: str) -> str | None:
        if not self.config.on_success:
            return None
        return await self.take(test_id, "Success")

    async def after_search(self, test_id: str, term: str, results_count: int) -> str | None:
        if not (self.config.enabled and self.config.after_search):
            return None
        try:
            await self.page.wait_for_timeout(self.config.after_search_delay_ms)
        except Exception:
            pass
        safe_term = sanitize_for_filename(term or "empty")
        return await self._capture(test_id, f" - search_{safe_term}_{results_count}results")

    async def _capture(self, test_id: str, suffix: str) -> str | None:
        try:
            time_part, date_folder = stamp()
            date_dir = self.base_dir / date_folder
            date_dir.mkdir(parents=True, exist_ok=True)
            path = date_dir / f"{time_part} {sanitize_for_filename(test_id)}{suffix}.png"

            await self.page.screenshot(path=str(path), full_page=False)

            if not path.exists() or path.stat().st_size == 0:
                self._emit("warning", {"source": "screenshot", "message": f"Empty screenshot: {path}"})
                return None

            self._emit("screenshot", {"path": str(path), "size": path.stat().st_size})
            return str(path)
        except Exception as e:
            self._emit("warning", {"source": "screenshot", "message": f"Could not save screenshot: {str(e)[:200]}"})
            return None

    def _emit(self, event_type: str, data: dict):
        try:
            self._on_progress(event_type, data)
        except Exception:
            pass
