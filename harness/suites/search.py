"""Product search suite (TC001-TC025).

Each case navigates to the homepage, runs one search (or a few), and
records what the results page showed. Cases that look for abuse (empty
input, injection, malformed input) flag ``bug`` / ``security_issue`` on
the TestCase so the reporter can list them separately from plain
failures.
"""

from __future__ import annotations

import time

from harness.config import HarnessConfig
from harness.core.search_page import SearchPage
from harness.detectors.security import SecurityDetector
from harness.models.definition import TestDefinition, TestLogic, Validator
from harness.models.types import Category, ResultCount, TestCase
from harness.utils.exceptions import CheckFailed

TEST_TYPE_LABELS = {
    "TC001": "POSITIVE / VALID SEARCH",
    "TC002": "POSITIVE / VALID SEARCH",
    "TC003": "POSITIVE / VALID SEARCH",
    "TC004": "NEGATIVE / EMPTY INPUT",
    "TC005": "NEGATIVE / INVALID SEARCH",
    "TC006": "NEGATIVE / SPECIAL CHARS",
    "TC007": "FUNCTIONAL / NUMERIC",
    "TC008": "BOUNDARY / LONG STRING",
    "TC009": "BOUNDARY / SINGLE CHAR",
    "TC010": "FUNCTIONAL / I18N-EN",
    "TC011": "ROBUSTNESS / TRIM",
    "TC012": "SECURITY / SQL INJECTION",
    "TC013": "SECURITY / XSS",
    "TC014": "BOUNDARY / MIN VALID LENGTH",
    "TC015": "FUNCTIONAL / UNICODE",
    "TC016": "FUNCTIONAL / CASE SENSITIVITY",
    "TC017": "FUNCTIONAL / PARTIAL MATCH",
    "TC018": "FUNCTIONAL / MULTI WORD",
    "TC019": "FUNCTIONAL / DECIMAL",
    "TC020": "FUNCTIONAL / SPECIAL CHARS",
    "TC021": "NEGATIVE / WHITESPACE EDGE",
    "TC022": "PERFORMANCE",
    "TC023": "SECURITY / HTML ENTITIES",
    "TC024": "FUNCTIONAL / URL ENCODING",
    "TC025": "ROBUSTNESS / MALFORMED INPUT",
}

NEGATIVE_TEST_IDS = frozenset({"TC004", "TC005", "TC006", "TC008", "TC009", "TC021", "TC025"})


def infer_category(technique: str | None, test_id: str) -> str:
    """Map a test technique to one of the report categories."""
    t = (technique or "").lower()
    if "security" in t:
        return Category.SECURITY.value
    if "performance" in t:
        return Category.PERFORMANCE.value
    if "boundary" in t:
        return Category.BOUNDARY.value
    if "unicode" in t or "i18n" in t:
        return Category.I18N.value
    if "functional" in t or "equivalence" in t:
        return Category.FUNCTIONAL.value
    if test_id in NEGATIVE_TEST_IDS:
        return Category.NEGATIVE.value
    return Category.OTHER.value


def check(condition: bool, message: str):
    if not condition:
        raise CheckFailed(message)


def define(
    test_id: str,
    description: str,
    technique: str,
    input: str,
    expected: str,
    logic: TestLogic,
    validator: Validator | None = None,
    name: str | None = None,
) -> TestDefinition:
    return TestDefinition(
        id=test_id,
        description=description,
        technique=technique,
        input=input,
        expected=expected,
        logic=logic,
        validator=validator,
        category=infer_category(technique, test_id),
        type_label=TEST_TYPE_LABELS.get(test_id),
        name=name,
    )


def has_results(test_case: TestCase) -> tuple[bool, str]:
    if test_case.results_count > 0:
        return True, ""
    return False, f'expected results for "{test_case.input}", got {test_case.results_count}'


class SearchSuite:
    """Builds the search TestDefinitions against one live SearchPage."""

    def __init__(self, search_page: SearchPage, security: SecurityDetector, config: HarnessConfig):
        self.page = search_page
        self.security = security
        self.data = config.test_data

    # ─── Shared steps ───

    async def _search(self, test_case: TestCase, term: str, titles: int = 5) -> ResultCount:
        await self.page.navigate_to_homepage()
        await self.page.search(term)
        result = await self.page.count_results()
        test_case.apply_count(result)
        if titles:
            test_case.titles = (await self.page.get_product_titles())[:titles]
        return result

    @staticmethod
    def _describe(result: ResultCount, url: str) -> str:
        return f"Results: {result.count}, no-results message: {result.has_no_results}, URL: {url}"

    @staticmethod
    def _flag_bug(test_case: TestCase, note: str, security: bool = False):
        test_case.bug = True
        if security:
            test_case.security_issue = True
            test_case.actual += f" SECURITY ISSUE: {note}"
        else:
            test_case.actual += f" POSSIBLE BUG: {note}"

    def _plausible(self, result: ResultCount) -> bool:
        return (
            result.count == 0
            or result.has_no_results
            or 0 < result.count < self.data.plausible_results_ceiling
        )

    # ─── Case builders ───

    def _valid_term(self, term: str, with_page_title: bool = False) -> TestLogic:
        async def logic(test_case: TestCase):
            result = await self._search(test_case, term)
            url = await self.page.current_url()
            test_case.actual = f"Found {result.count} results. URL: {url}"
            if with_page_title:
                test_case.page_title = await self.page.page_title()
            if result.is_ambiguous:
                raise CheckFailed(f'Search for "{term}" returned neither results nor a no-results message')
        return logic

    def _expect_no_results(self, term: str, bug_note: str | None, fail_fast: bool = False) -> TestLogic:
        async def logic(test_case: TestCase):
            result = await self._search(test_case, term, titles=0)
            test_case.actual = self._describe(result, await self.page.current_url())
            unexpected = result.count > 0 and not result.has_no_results
            if unexpected and bug_note:
                self._flag_bug(test_case, bug_note)
                if fail_fast:
                    raise CheckFailed(
                        f'"{term}" returned {result.count} results without a no-results message'
                    )
            check(not unexpected, f"Expected 0 results or a no-results message, got {result.count} results")
        return logic

    def _observe(self, term: str, titles: int = 5, label: str = "") -> TestLogic:
        async def logic(test_case: TestCase):
            result = await self._search(test_case, term, titles=titles)
            test_case.actual = f"Found {result.count} results{label}"
            check(result.count >= 0, f"Negative result count for {term!r}")
        return logic

    async def _empty_input(self, test_case: TestCase):
        result = await self._search(test_case, "", titles=0)
        test_case.actual = self._describe(result, await self.page.current_url())
        if result.count > self.data.too_many_results and not result.has_no_results:
            self._flag_bug(test_case, "returns every product for an empty query without a message")
        check(
            self._plausible(result),
            f"Empty search returned {result.count} results without a no-results message",
        )

    async def _single_char(self, test_case: TestCase):
        result = await self._search(test_case, "a")
        test_case.actual = f"Found {result.count} results, no-results message: {result.has_no_results}"
        if result.count > self.data.too_many_results and not result.has_no_results:
            self._flag_bug(test_case, "returns every product for an overly broad query without a warning")
        check(result.count >= 0, "Negative result count")

    async def _trim(self, test_case: TestCase):
        result = await self._search(test_case, "  laptop  ")
        test_case.actual = f"Found {result.count} results, URL: {await self.page.current_url()}"
        if result.count == 0:
            self._flag_bug(test_case, "0 results, surrounding whitespace may not be trimmed")
        check(result.count >= 0, "Negative result count")

    async def _sql_injection(self, test_case: TestCase):
        payload = self.data.sql_injection
        result = await self._search(test_case, payload, titles=0)
        test_case.actual = self._describe(result, await self.page.current_url())
        if result.count > self.data.too_many_results:
            self._flag_bug(test_case, "too many results returned, SQL injection may have succeeded", security=True)
        check(result.count >= 0, "Negative result count")

    async def _xss(self, test_case: TestCase):
        for payload in self.data.xss_payloads:
            self.security.reset()
            result = await self._search(test_case, payload, titles=0)
            url = await self.page.current_url()
            analysis = await self.security.analyze(self.page.page, payload)
            test_case.actual = (
                f"Payload: {payload}, {self._describe(result, url)}, "
                f"script_url={analysis.has_script_in_url}, script_dom={analysis.has_script_in_dom}, "
                f"events={analysis.has_event_attributes}, alert={analysis.alert_triggered}"
            )

            if analysis.alert_triggered:
                test_case.bug = True
                test_case.security_issue = True
                raise CheckFailed(f"XSS payload opened a browser dialog (payload: {payload})")

            if analysis.is_suspicious:
                test_case.bug = True
                test_case.security_issue = True
                raise CheckFailed(f"Possible XSS (script tag or unsanitized HTML) for payload: {payload}")

    async def _case_sensitivity(self, test_case: TestCase):
        upper = await self._search(test_case, "LAPTOP", titles=3)
        upper_titles = list(test_case.titles)
        lower = await self._search(test_case, "laptop", titles=0)

        test_case.apply_count(upper)
        test_case.titles = upper_titles
        test_case.actual = f"Upper case: {upper.count} results, lower case: {lower.count} results"
        check(upper.count >= 0 and lower.count >= 0, "Negative result count")

    async def _performance(self, test_case: TestCase):
        start = time.monotonic()
        await self.page.navigate_to_homepage()
        await self.page.search("laptop")
        elapsed = time.monotonic() - start

        result = await self.page.count_results()
        test_case.apply_count(result)
        test_case.titles = (await self.page.get_product_titles())[:3]
        test_case.performance = f"{elapsed:.2f}s"
        test_case.actual = f"Search finished in {elapsed:.2f}s, found {result.count} results"
        check(
            elapsed < self.data.max_search_seconds,
            f"Search took {elapsed:.2f}s, limit is {self.data.max_search_seconds:.0f}s",
        )

    async def _malformed_input(self, test_case: TestCase):
        result = await self._search(test_case, "d\\", titles=0)
        url = await self.page.current_url()
        test_case.actual = self._describe(result, url)

        if not self.page.is_on_site(url):
            self._flag_bug(test_case, "redirected off the site after malformed input", security=True)
            raise CheckFailed(f"Malformed input left the {self.page.host} domain (now at {url})")

        if result.count > self.data.too_many_results and not result.has_no_results:
            self._flag_bug(test_case, "malformed input returns too many results")

        check(self._plausible(result), f"Malformed input returned {result.count} results")

    # ─── Suite ───

    def definitions(self) -> list[TestDefinition]:
        valid = self.data.valid_terms
        invalid_term = self.data.invalid_terms[0]
        long_string = "a" * self.data.long_string_length

        return [
            define(
                "TC001", f'Search with valid term "{valid[0]}"',
                "Equivalence Partitioning - valid partition", valid[0],
                "Returns search results (count > 0)",
                self._valid_term(valid[0], with_page_title=True), has_results,
            ),
            define(
                "TC002", f'Search with valid term "{valid[1]}"',
                "Equivalence Partitioning - valid partition", valid[1],
                "Returns search results (count > 0)",
                self._valid_term(valid[1]), has_results,
            ),
            define(
                "TC003", f'Search with valid term "{valid[2]}"',
                "Equivalence Partitioning - valid partition", valid[2],
                "Returns search results (count > 0)",
                self._valid_term(valid[2]), has_results,
            ),
            define(
                "TC004", "Search with an empty string (0 characters)",
                "Boundary Value Analysis", '"" (empty string)',
                'Shows an error, all products, or a "no results" message',
                self._empty_input,
            ),
            define(
                "TC005", "Search for a product that does not exist",
                "Equivalence Partitioning - invalid partition", invalid_term,
                'Shows "no results" or 0 results',
                self._expect_no_results(invalid_term, "returns results for a nonexistent term", fail_fast=True),
            ),
            define(
                "TC006", "Search with special characters",
                "Equivalence Partitioning - invalid partition", "!@#$%",
                'Shows "no results", an error, or 0 results',
                self._expect_no_results("!@#$%", None),
            ),
            define(
                "TC007", "Search with a numeric value",
                "Equivalence Partitioning", "123",
                "May return products with 123 in the name or price, or 0 results",
                self._observe("123"),
            ),
            define(
                "TC008", f"Search with a long string ({self.data.long_string_length} characters)",
                "Boundary Value Analysis", f"String of {self.data.long_string_length} characters",
                'Shows an error, "no results", or 0 results',
                self._expect_no_results(long_string, "returns results for an overly long string"),
            ),
            define(
                "TC009", "Search with a single character (minimum length)",
                "Boundary Value Analysis", "a",
                "May return results, a too-broad-query message, or all products",
                self._single_char,
            ),
            define(
                "TC010", "Search with an English term",
                "Equivalence Partitioning", "keyboard",
                "May return results (if any exist) or 0 results",
                self._observe("keyboard"),
            ),
            define(
                "TC011", "Search with leading and trailing spaces (trim)",
                "Error Guessing", '"  laptop  " (with spaces)',
                'Trims the spaces and returns the same results as "laptop"',
                self._trim,
            ),
            define(
                "TC012", "Search with an SQL injection attempt",
                "Error Guessing / Security Testing", self.data.sql_injection,
                'Does not return all products; shows an error or "no results"',
                self._sql_injection, name="SQL injection",
            ),
            define(
                "TC013", "XSS with several payloads and DOM/URL analysis",
                "Error Guessing / Security Testing / XSS", self.data.xss_payloads[0],
                "No script runs, no script tag in the URL or DOM, error or no results shown",
                self._xss, name="XSS payloads",
            ),
            define(
                "TC014", "Search with two characters (minimum valid length)",
                "Boundary Value Analysis", "ab",
                "Returns search results",
                self._observe("ab"),
            ),
            define(
                "TC015", "Search with Croatian characters (Unicode)",
                "Equivalence Partitioning / Unicode", "čajnik",
                "Returns search results (if such products exist)",
                self._observe("čajnik"),
            ),
            define(
                "TC016", "Search with different letter case",
                "Functional Testing - Case Sensitivity", "LAPTOP vs laptop",
                "Returns results regardless of letter case",
                self._case_sensitivity,
            ),
            define(
                "TC017", "Search with a partial match",
                "Functional Testing - Partial Match", "lap",
                'Returns results containing "lap" in the name',
                self._observe("lap", label=" for a partial match"),
            ),
            define(
                "TC018", "Search with multiple words",
                "Functional Testing - Multiple Words", "laptop torba",
                "Returns results for both words",
                self._observe("laptop torba", label=" for multiple words"),
            ),
            define(
                "TC019", "Search with a decimal number",
                "Functional Testing - Numeric Search", "15.6",
                "Returns results containing the number",
                self._observe("15.6", label=" containing numbers"),
            ),
            define(
                "TC020", "Search with a hyphen",
                "Functional Testing - Special Characters", "laptop-stand",
                "Returns results or an error message",
                self._observe("laptop-stand", titles=3),
            ),
            define(
                "TC021", 'Search with a whitespace variant "miš  " (two trailing spaces)',
                "Error Guessing / Whitespace Handling", '"miš  " (miš + two spaces)',
                "Treats excess whitespace as an invalid query and shows no results",
                self._expect_no_results("miš  ", 'whitespace variant "miš  " returns products', fail_fast=True),
            ),
            define(
                "TC022", "Search performance (response time)",
                "Performance Testing", "laptop",
                f"Search completes in under {self.data.max_search_seconds:.0f} seconds",
                self._performance,
            ),
            define(
                "TC023", "Search with HTML entities",
                "Security Testing - HTML Entities", "laptop&amp;stand",
                "Sanitizes HTML entities",
                self._observe("laptop&amp;stand", titles=3),
            ),
            define(
                "TC024", "Search with URL-encoded characters",
                "Functional Testing - URL Encoding", "laptop%20stand",
                "Decodes URL encoding",
                self._observe("laptop%20stand", titles=3),
            ),
            define(
                "TC025", "Malformed input `d\\` (d and a backslash)",
                "Error Guessing / Robustness / Security", "d\\",
                "No 500 page or crash; 0 results or a clear message",
                self._malformed_input,
            ),
        ]


def build_search_suite(search_page: SearchPage, security: SecurityDetector, config: HarnessConfig) -> list[TestDefinition]:
    return SearchSuite(search_page, security, config).definitions()
