"""Runs the search suite end to end in one browser session.

Launches the browser, checks the site is usable, queues every selected
test behind the TestCaseWrapper, and always leaves a final JSON snapshot
behind, even when the health check or the run itself blows up.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from playwright.async_api import Page, async_playwright

from harness.config import HarnessConfig
from harness.core.reporter import TestReporter
from harness.core.search_page import SearchPage
from harness.core.test_case import TestCaseWrapper
from harness.core.test_queue import TestQueue
from harness.detectors.security import SecurityDetector
from harness.models.definition import TestDefinition
from harness.models.report import RunSummary
from harness.models.types import HealthStatus
from harness.suites.search import build_search_suite
from harness.utils.exceptions import HealthCheckFailed
from harness.utils.screenshots import ScreenshotStore

SuiteFactory = Callable[[SearchPage, SecurityDetector, HarnessConfig], list[TestDefinition]]


@dataclass
class RunOutcome:
    summary: RunSummary
    report_path: Path | None = None
    health: HealthStatus | None = None
    queue_stats: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "summary": self.summary.to_dict(),
            "report_path": str(self.report_path) if self.report_path else None,
            "health": self.health.to_dict() if self.health else None,
            "queue": dict(self.queue_stats),
        }


class SearchTestRunner:
    """End-to-end runner: one browser, one page, every test in sequence."""

    def __init__(
        self,
        config: HarnessConfig,
        only: Iterable[str] | None = None,
        on_progress: Callable | None = None,
        suite_factory: SuiteFactory = build_search_suite,
    ):
        self.config = config
        self.only = {test_id.strip().upper() for test_id in only or [] if test_id.strip()}
        self.suite_factory = suite_factory
        self._on_progress = on_progress or (lambda *_: None)
        self.reporter = TestReporter(config.reports, on_progress=self._on_progress)
        self.queue = TestQueue(config.queue, on_progress=self._on_progress)
        self.health: HealthStatus | None = None
        self.report_path: Path | None = None

    async def run(self) -> RunOutcome:
        browser_cfg = self.config.browser
        async with async_playwright() as pw:
            browser = await getattr(pw, browser_cfg.name).launch(
                headless=browser_cfg.headless,
                args=list(browser_cfg.args),
            )
            try:
                ctx = await browser.new_context(
                    viewport={"width": browser_cfg.width, "height": browser_cfg.height},
                )
                page = await ctx.new_page()
                page.set_default_timeout(self.config.timeouts.page_load_ms)
                return await self.run_on_page(page)
            finally:
                await browser.close()

    async def run_on_page(self, page: Page) -> RunOutcome:
        security = SecurityDetector(on_progress=self._on_progress)
        security.attach_listeners(page)
        search_page = SearchPage(page, self.config, on_progress=self._on_progress)
        screenshots = ScreenshotStore(page, self.config.screenshots, on_progress=self._on_progress)

        try:
            await search_page.navigate_to_homepage()
            self.health = await search_page.health_check()
            if not self.health.ok:
                await screenshots.take("HEALTHCHECK", "site not ready")
                raise HealthCheckFailed(
                    self.health.url, self.health.ready_state, self.health.has_search_input
                )

            wrapper = TestCaseWrapper(
                self.reporter,
                screenshots=screenshots,
                on_progress=self._on_progress,
                timeout_ms=self.config.timeouts.test_ms,
            )
            for definition in self._select(self.suite_factory(search_page, security, self.config)):
                self.queue.add_test(definition.id, definition.title, wrapper.wrap(definition))

            await self.queue.run()
        finally:
            self._save_report()

        outcome = RunOutcome(
            summary=self.reporter.summary(),
            report_path=self.report_path,
            health=self.health,
            queue_stats=self.queue.stats(),
        )
        self._emit("run_complete", {
            "total": outcome.summary.total_tests,
            "passed": outcome.summary.passed,
            "failed": outcome.summary.failed,
            "success_rate": outcome.summary.success_rate_label,
            "report": str(self.report_path) if self.report_path else None,
        })
        return outcome

    def _select(self, definitions: list[TestDefinition]) -> list[TestDefinition]:
        if not self.only:
            return definitions
        known = {d.id for d in definitions}
        for missing in sorted(self.only - known):
            self._emit("warning", {"source": "runner", "message": f"Unknown test id {missing}, skipping"})
        return [d for d in definitions if d.id in self.only]

    def _save_report(self):
        self.reporter.finalize()
        try:
            self.report_path = self.reporter.save_json()
        except OSError as e:
            self._emit("warning", {"source": "runner", "message": f"Could not save final report: {e}"})

    def _emit(self, event_type: str, data: dict):
        try:
            self._on_progress(event_type, data)
        except Exception:
            pass
