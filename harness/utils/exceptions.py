"""Exception types raised by the harness."""


class HarnessError(Exception):
    """Base class for all harness errors."""


class NotFound(HarnessError):
    """A required page element matched none of its selector strategies."""

    def __init__(self, what: str, selectors: list[str] | None = None):
        self.what = what
        self.selectors = list(selectors or [])
        message = f"{what} not found"
        if self.selectors:
            message += f" (tried: {', '.join(self.selectors)})"
        super().__init__(message)


class CheckFailed(HarnessError):
    """A test's expectation about the page did not hold."""


class MissingResult(HarnessError):
    """Test logic finished without recording an actual result."""

    def __init__(self, test_id: str):
        self.test_id = test_id
        super().__init__(f"Test {test_id} did not set an actual result; the test logic never reported an outcome")


class ValidationFailed(HarnessError):
    """A post-condition validator rejected the test outcome."""

    def __init__(self, reason: str):
        self.reason = reason or "unknown reason"
        super().__init__(f"Validation failed: {self.reason}")


class AlreadyRunning(HarnessError):
    """TestQueue.run() was called while a run is in progress."""


class HealthCheckFailed(HarnessError):
    """The target site failed its pre-run health check."""

    def __init__(self, url: str, ready_state: str, has_search_input: bool):
        self.url = url
        self.ready_state = ready_state
        self.has_search_input = has_search_input
        super().__init__(
            f"Site health check failed (url={url}, readyState={ready_state}, "
            f"search input={has_search_input})"
        )
