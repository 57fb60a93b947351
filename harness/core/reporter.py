"""Run-wide result aggregation and persistence.

Every ingested test is appended to two live logs right away (JSON lines
and a readable text mirror), so a crash mid-run keeps every finished
result. finalize() and save_json() produce the end-of-run snapshot.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Callable

from harness.config import ReportConfig
from harness.models.report import AggregateReport, CategoryStats, CategorySummary, RunSummary, success_rate
from harness.models.types import BugEntry, SecurityIssue, TestCase, TestStatus

DEFAULT_CATEGORY = "uncategorized"


class TestReporter:
    __test__ = False

    def __init__(self, config: ReportConfig | None = None, on_progress: Callable | None = None):
        self.config = config or ReportConfig()
        self.directory = Path(self.config.directory)
        self.results = AggregateReport()
        self._on_progress = on_progress or (lambda *_: None)
        self._ensure_directory()

    @property
    def live_json_path(self) -> Path:
        return self.directory / self.config.live_json_name

    @property
    def live_text_path(self) -> Path:
        return self.directory / self.config.live_text_name

    def _ensure_directory(self):
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._emit("warning", {"source": "reporter", "message": f"Cannot create {self.directory}: {e}"})

    # ─── Aggregation ───

    def ingest(self, test_case: TestCase):
        results = self.results
        results.total_tests += 1
        results.tests.append(test_case.to_dict())

        if test_case.status == TestStatus.PASS:
            results.passed += 1
        elif test_case.status == TestStatus.FAIL:
            results.failed += 1
        else:
            results.skipped += 1

        category = test_case.category or DEFAULT_CATEGORY
        results.categories.setdefault(category, CategoryStats()).record(test_case.status)

        if test_case.bug:
            results.bugs.append(BugEntry(
                test_id=test_case.id,
                description=test_case.description,
                actual=test_case.actual,
                input=test_case.input,
                timestamp=test_case.timestamp,
            ))

        if test_case.security_issue:
            results.security_issues.append(SecurityIssue(
                test_id=test_case.id,
                description=test_case.description,
                actual=test_case.actual,
                input=test_case.input,
                timestamp=test_case.timestamp,
            ))

        self._persist_live(test_case)

    def _persist_live(self, test_case: TestCase):
        now = datetime.now()
        entry = {
            "date": now.strftime("%d.%m.%Y"),
            "time": now.strftime("%H:%M:%S"),
            "timestamp": now.isoformat(),
            "test_id": test_case.id,
            "description": test_case.description,
            "status": test_case.status.value,
            "input": test_case.input,
            "expected": test_case.expected,
            "actual": test_case.actual,
            "category": test_case.category,
            "type_label": test_case.type_label,
            "results_count": test_case.results_count,
            "has_no_results": test_case.has_no_results,
            "execution_time": test_case.execution_time_label,
            "error": test_case.error,
            "screenshot": test_case.screenshot,
        }
        line = (
            f"[{entry['date']} {entry['time']}] {entry['status']} - "
            f"{test_case.id}: {test_case.description}\n"
        )
        try:
            with self.live_json_path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
            with self.live_text_path.open("a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            self._emit("warning", {"source": "reporter", "message": f"Could not save test result: {e}"})

    # ─── End of run ───

    def finalize(self):
        if self.results.finalized:
            return
        self.results.ended_at = datetime.now()
        self.results.duration = (self.results.ended_at - self.results.started_at).total_seconds()

    def snapshot(self) -> dict:
        return self.results.to_dict()

    def save_json(self) -> Path:
        stamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")
        path = self.directory / f"test-results-{stamp}.json"
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.snapshot(), indent=2, ensure_ascii=False), encoding="utf-8")
        self._emit("report_saved", {"path": str(path)})

        if self.config.latest_snapshot_path:
            latest = Path(self.config.latest_snapshot_path)
            try:
                latest.parent.mkdir(parents=True, exist_ok=True)
                latest.write_text(path.read_text(encoding="utf-8"), encoding="utf-8")
            except OSError as e:
                self._emit("warning", {"source": "reporter", "message": f"Could not write {latest}: {e}"})
        return path

    def summary(self) -> RunSummary:
        results = self.results
        categories = tuple(
            CategorySummary(
                name=name,
                total=stats.total,
                passed=stats.passed,
                failed=stats.failed,
                skipped=stats.skipped,
                success_rate=success_rate(stats.passed, stats.total),
            )
            for name, stats in results.categories.items()
        )
        return RunSummary(
            total_tests=results.total_tests,
            passed=results.passed,
            failed=results.failed,
            skipped=results.skipped,
            success_rate=success_rate(results.passed, results.total_tests),
            duration=results.duration,
            categories=categories,
            bugs=tuple(results.bugs),
            security_issues=tuple(results.security_issues),
        )

    def _emit(self, event_type: str, data: dict):
        try:
            self._on_progress(event_type, data)
        except Exception:
            pass
