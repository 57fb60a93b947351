from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class TestStatus(str, Enum):
    __test__ = False

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    PASS = "PASS"
    FAIL = "FAIL"


class Category(str, Enum):
    SECURITY = "security"
    PERFORMANCE = "performance"
    BOUNDARY = "boundary"
    I18N = "i18n"
    FUNCTIONAL = "functional"
    NEGATIVE = "negative"
    OTHER = "other"


class Severity(str, Enum):
    HIGH = "HIGH"


@dataclass(frozen=True)
class ResultCount:
    """What the results page says about a search."""

    count: int = 0
    has_no_results: bool = False

    @property
    def is_ambiguous(self) -> bool:
        # Neither products nor a "no results" message were found.
        return self.count == 0 and not self.has_no_results


@dataclass(frozen=True)
class XssAnalysis:
    has_script_in_url: bool = False
    has_script_in_dom: bool = False
    alert_triggered: bool = False
    has_event_attributes: bool = False
    has_inner_html_injection: bool = False

    @property
    def is_suspicious(self) -> bool:
        return (
            self.alert_triggered
            or self.has_script_in_url
            or self.has_script_in_dom
            or self.has_inner_html_injection
        )

    def to_dict(self) -> dict:
        return {
            "has_script_in_url": self.has_script_in_url,
            "has_script_in_dom": self.has_script_in_dom,
            "alert_triggered": self.alert_triggered,
            "has_event_attributes": self.has_event_attributes,
            "has_inner_html_injection": self.has_inner_html_injection,
        }


@dataclass(frozen=True)
class HealthStatus:
    ok: bool
    url: str
    ready_state: str
    has_search_input: bool

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "url": self.url,
            "ready_state": self.ready_state,
            "has_search_input": self.has_search_input,
        }


@dataclass
class TestCase:
    """One logical search test: identity, input, and outcome record.

    The business logic fills the outcome fields; the wrapper sets status,
    timing, screenshot and error details before handing it to the reporter.
    """

    __test__ = False  # not a pytest class

    id: str
    description: str
    technique: str = ""
    category: str | None = None
    type_label: str | None = None
    input: str = ""
    expected: str = ""

    status: TestStatus = TestStatus.PENDING
    actual: str = ""
    titles: list[str] = field(default_factory=list)
    results_count: int = 0
    has_no_results: bool = False
    bug: bool = False
    security_issue: bool = False
    page_title: str | None = None
    performance: str | None = None
    execution_time: float | None = None
    screenshot: str | None = None
    error: str | None = None
    error_stack: str | None = None
    timestamp: datetime | None = None

    def apply_count(self, result: ResultCount):
        self.results_count = result.count
        self.has_no_results = result.has_no_results

    @property
    def execution_time_label(self) -> str:
        if self.execution_time is None:
            return "N/A"
        return f"{self.execution_time:.2f}s"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "technique": self.technique,
            "category": self.category,
            "type_label": self.type_label,
            "input": self.input,
            "expected": self.expected,
            "status": self.status.value,
            "actual": self.actual,
            "titles": list(self.titles),
            "results_count": self.results_count,
            "has_no_results": self.has_no_results,
            "bug": self.bug,
            "security_issue": self.security_issue,
            "page_title": self.page_title,
            "performance": self.performance,
            "execution_time": self.execution_time_label,
            "screenshot": self.screenshot,
            "error": self.error,
            "error_stack": self.error_stack,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True)
class BugEntry:
    test_id: str
    description: str
    actual: str
    input: str
    timestamp: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "test_id": self.test_id,
            "description": self.description,
            "actual": self.actual,
            "input": self.input,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True)
class SecurityIssue:
    test_id: str
    description: str
    actual: str
    input: str
    severity: Severity = Severity.HIGH
    timestamp: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "test_id": self.test_id,
            "description": self.description,
            "actual": self.actual,
            "input": self.input,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
