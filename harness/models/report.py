"""Run-wide aggregation records.

AggregateReport is mutated only by TestReporter.ingest and finalized once.
RunSummary and CategorySummary are frozen views derived from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from harness.models.types import BugEntry, SecurityIssue, TestStatus


def success_rate(passed: int, total: int) -> float:
    """Percentage of passed tests, 0 when nothing ran."""
    if total <= 0:
        return 0.0
    return passed / total * 100


@dataclass
class CategoryStats:
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    def record(self, status: TestStatus):
        self.total += 1
        if status == TestStatus.PASS:
            self.passed += 1
        elif status == TestStatus.FAIL:
            self.failed += 1
        else:
            self.skipped += 1

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
        }


@dataclass
class AggregateReport:
    started_at: datetime = field(default_factory=datetime.now)
    ended_at: datetime | None = None
    duration: float = 0.0   # seconds
    total_tests: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    tests: list[dict] = field(default_factory=list)
    bugs: list[BugEntry] = field(default_factory=list)
    security_issues: list[SecurityIssue] = field(default_factory=list)
    categories: dict[str, CategoryStats] = field(default_factory=dict)

    @property
    def finalized(self) -> bool:
        return self.ended_at is not None

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration": self.duration,
            "total_tests": self.total_tests,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "bugs": [b.to_dict() for b in self.bugs],
            "security_issues": [s.to_dict() for s in self.security_issues],
            "tests": list(self.tests),
            "categories": {name: stats.to_dict() for name, stats in self.categories.items()},
        }


@dataclass(frozen=True)
class CategorySummary:
    name: str
    total: int
    passed: int
    failed: int
    skipped: int
    success_rate: float

    @property
    def success_rate_label(self) -> str:
        return f"{self.success_rate:.1f}%"

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "success_rate": self.success_rate_label,
        }


@dataclass(frozen=True)
class RunSummary:
    total_tests: int
    passed: int
    failed: int
    skipped: int
    success_rate: float
    duration: float
    categories: tuple[CategorySummary, ...] = ()
    bugs: tuple[BugEntry, ...] = ()
    security_issues: tuple[SecurityIssue, ...] = ()

    @property
    def success_rate_label(self) -> str:
        return f"{self.success_rate:.2f}%"

    @property
    def duration_label(self) -> str:
        return f"{self.duration / 60:.2f} min"

    @property
    def bugs_found(self) -> int:
        return len(self.bugs)

    @property
    def security_issues_found(self) -> int:
        return len(self.security_issues)

    def category(self, name: str) -> CategorySummary | None:
        for cat in self.categories:
            if cat.name == name:
                return cat
        return None

    def to_dict(self) -> dict:
        return {
            "total_tests": self.total_tests,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "success_rate": self.success_rate_label,
            "duration": self.duration_label,
            "bugs_found": self.bugs_found,
            "security_issues_found": self.security_issues_found,
            "categories": {c.name: c.to_dict() for c in self.categories},
            "bugs": [b.to_dict() for b in self.bugs],
            "security_issues": [s.to_dict() for s in self.security_issues],
        }
