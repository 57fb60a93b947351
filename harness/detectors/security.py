"""XSS / injection heuristics run after a search.

Flags are hints for a human reviewer, not verified findings. Each check
is independent; a check that cannot run reports "not detected".
"""

from __future__ import annotations

from typing import Callable
from urllib.parse import unquote

from playwright.async_api import Dialog, Page

from harness.models.types import XssAnalysis
from harness.utils.probe import attempt

EVENT_ATTRIBUTES = ("onerror", "onclick", "onload")
SCRIPT_TAG = "<script"
SCRIPT_PROTOCOL = "javascript:"


class SecurityDetector:

    def __init__(self, on_progress: Callable | None = None):
        self.dialogs: list[dict] = []
        self._on_progress = on_progress or (lambda *_: None)

    def attach_listeners(self, page: Page):
        """Record and dismiss every native dialog the page opens."""

        async def on_dialog(dialog: Dialog):
            self.dialogs.append({
                "type": dialog.type,
                "message": dialog.message,
                "url": page.url,
            })
            try:
                await dialog.dismiss()
            except Exception:
                pass

        page.on("dialog", on_dialog)

    def reset(self):
        """Forget dialogs recorded before the next search."""
        self.dialogs.clear()

    async def analyze(self, page: Page, payload: str) -> XssAnalysis:
        url = page.url or ""
        url_lower = url.lower()
        decoded = unquote(url).lower()
        has_script_in_url = any(
            marker in candidate
            for candidate in (url_lower, decoded)
            for marker in (SCRIPT_TAG, SCRIPT_PROTOCOL)
        )

        markup = (await attempt(page.evaluate(
            "() => (document.body ? document.body.innerHTML : '').toLowerCase()"
        ))).or_default("") or ""
        payload_lower = payload.lower()

        alert_triggered = bool(self.dialogs)
        self.dialogs.clear()

        analysis = XssAnalysis(
            has_script_in_url=has_script_in_url,
            has_script_in_dom=SCRIPT_TAG in markup,
            alert_triggered=alert_triggered,
            has_event_attributes=any(attr in markup for attr in EVENT_ATTRIBUTES),
            has_inner_html_injection=bool(payload_lower) and payload_lower in markup,
        )
        self._emit("xss_analysis", {"payload": payload, "url": url, **analysis.to_dict()})
        return analysis

    def _emit(self, event_type: str, data: dict):
        try:
            self._on_progress(event_type, data)
        except Exception:
            pass
