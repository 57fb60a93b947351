import asyncio
from pathlib import Path

import pytest
from conftest import FakePage

from harness.config import ReportConfig, ScreenshotConfig
from harness.core.reporter import TestReporter
from harness.core.test_case import TestCaseWrapper
from harness.models.definition import TestDefinition
from harness.models.types import TestStatus as Status
from harness.utils.exceptions import CheckFailed, MissingResult, ValidationFailed
from harness.utils.screenshots import ScreenshotStore


@pytest.fixture
def reporter(tmp_path) -> TestReporter:
    return TestReporter(ReportConfig(directory=str(tmp_path / "reports"), latest_snapshot_path=None))


def definition(logic, validator=None, test_id="TC001") -> TestDefinition:
    return TestDefinition(
        id=test_id,
        description="Search with valid term",
        technique="Equivalence Partitioning",
        input="laptop",
        expected="Results > 0",
        logic=logic,
        validator=validator,
        category="functional",
    )


async def test_pass_is_recorded(reporter, events, on_progress):
    async def logic(tc):
        tc.actual = "Found 5 results"
        tc.results_count = 5

    outcome = await TestCaseWrapper(reporter, on_progress=on_progress).execute(definition(logic))

    assert outcome.success
    assert outcome.test_case.status == Status.PASS
    assert outcome.test_case.execution_time is not None
    assert outcome.test_case.timestamp is not None
    assert reporter.results.passed == 1
    assert [kind for kind, _ in events] == ["test_start", "test_result"]
    assert events[-1][1]["status"] == "PASS"


async def test_missing_actual_fails(reporter):
    async def logic(tc):
        tc.results_count = 3

    with pytest.raises(MissingResult):
        await TestCaseWrapper(reporter).execute(definition(logic))

    recorded = reporter.results.tests[0]
    assert recorded["status"] == "FAIL"
    assert "did not set an actual result" in recorded["error"]


async def test_validator_rejection_fails(reporter):
    async def logic(tc):
        tc.actual = "Found 0 results"

    with pytest.raises(ValidationFailed, match="Validation failed: no results"):
        await TestCaseWrapper(reporter).execute(definition(logic, validator=lambda tc: (False, "no results")))

    assert reporter.results.failed == 1


async def test_logic_error_is_recorded_then_reraised(reporter):
    async def logic(tc):
        tc.actual = "partial"
        raise CheckFailed("expected results")

    with pytest.raises(CheckFailed):
        await TestCaseWrapper(reporter).execute(definition(logic))

    recorded = reporter.results.tests[0]
    assert recorded["error"] == "expected results"
    assert "CheckFailed" in recorded["error_stack"]
    assert recorded["actual"] == "partial"


async def test_slow_logic_times_out(reporter):
    async def logic(tc):
        await asyncio.sleep(5)

    wrapper = TestCaseWrapper(reporter, timeout_ms=10)
    with pytest.raises(asyncio.TimeoutError):
        await wrapper.execute(definition(logic))

    assert reporter.results.failed == 1


async def test_wrap_returns_zero_arg_callable(reporter):
    async def logic(tc):
        tc.actual = "ok"

    run = TestCaseWrapper(reporter).wrap(definition(logic))
    outcome = await run()
    assert outcome.success


async def test_after_search_screenshot_is_attached(reporter, tmp_path):
    page = FakePage()
    shots = ScreenshotStore(page, ScreenshotConfig(directory=str(tmp_path / "shots"), after_search_delay_ms=0))

    async def logic(tc):
        tc.actual = "Found 2 results"
        tc.results_count = 2

    outcome = await TestCaseWrapper(reporter, screenshots=shots).execute(definition(logic))

    path = Path(outcome.test_case.screenshot)
    assert path.exists()
    assert "TC001 - search_laptop_2results" in path.name


async def test_failure_takes_failure_screenshot(reporter, tmp_path):
    page = FakePage()
    shots = ScreenshotStore(page, ScreenshotConfig(
        directory=str(tmp_path / "shots"), after_search=False,
    ))

    async def logic(tc):
        raise CheckFailed("boom")

    with pytest.raises(CheckFailed):
        await TestCaseWrapper(reporter, screenshots=shots).execute(definition(logic))

    assert reporter.results.tests[0]["screenshot"].endswith("TC001 - Failure.png")
