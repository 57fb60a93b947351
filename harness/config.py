"""Harness configuration.

Defaults target hithouse.ba. A JSON file can override any field, and a
few SEARCHPROBE_* environment variables override the file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field


class TimeoutConfig(BaseModel):
    test_ms: int = 120_000
    page_load_ms: int = 15_000
    ready_state_ms: int = 5_000
    search_input_ms: int = 7_000
    settle_ms: int = 2_000
    keystroke_pause_ms: int = 200


class BrowserConfig(BaseModel):
    name: str = "chromium"
    headless: bool = False
    width: int = 1920
    height: int = 1080
    args: list[str] = Field(default_factory=lambda: [
        "--disable-blink-features=AutomationControlled",
        "--no-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
        "--disable-extensions",
        "--disable-background-networking",
        "--disable-sync",
        "--disable-translate",
        "--disable-default-apps",
        "--disable-features=TranslateUI",
    ])


class ScreenshotConfig(BaseModel):
    enabled: bool = True
    directory: str = "./screenshots"
    on_failure: bool = True
    on_success: bool = True
    after_search: bool = True
    after_search_delay_ms: int = 1_000


class ReportConfig(BaseModel):
    directory: str = "./reports"
    live_json_name: str = "test-results-live.jsonl"
    live_text_name: str = "test-results-live.txt"
    latest_snapshot_path: str | None = "./test-results.json"


class QueueConfig(BaseModel):
    inter_test_delay_ms: int = 1_500
    confirmation_delay_ms: int = 1_000


class SelectorConfig(BaseModel):
    search_inputs: list[str] = Field(default_factory=lambda: [
        "#search_query_top",
        'input[name="pretraga_polje"]',
        'input[type="search"]',
        'input[type="text"]',
    ])
    results: list[str] = Field(default_factory=lambda: [
        ".caption-proizvod",
        ".product",
        ".product-item",
        "[data-product-id]",
    ])
    product_titles: list[str] = Field(default_factory=lambda: [
        "h3 a",
        "h3",
        ".product-name",
        ".product-title",
    ])
    no_results_phrases: list[str] = Field(default_factory=lambda: [
        "nema rezultata",
        "nema proizvoda",
        "0 rezultata",
        "0 proizvoda",
        "nije pronađeno",
        "no results found",
    ])
    # URL fragments that mean we are not on the homepage any more.
    non_home_url_markers: list[str] = Field(default_factory=lambda: ["search", "idproizvod"])

    @property
    def primary_search_input(self) -> str:
        return self.search_inputs[0]


class TestDataConfig(BaseModel):
    valid_terms: list[str] = Field(default_factory=lambda: ["laptop", "miš", "tastatura", "monitor", "procesor"])
    invalid_terms: list[str] = Field(default_factory=lambda: ["xyz123abc456", "nonexistentproduct999"])
    xss_payloads: list[str] = Field(default_factory=lambda: [
        '<script>alert("XSS")</script>',
        '"><script>alert("XSS2")</script>',
        "<img src=x onerror=\"alert('XSS3')\">",
    ])
    sql_injection: str = "' OR '1'='1"
    long_string_length: int = 100
    max_search_seconds: float = 10.0
    too_many_results: int = 100
    plausible_results_ceiling: int = 50


class HarnessConfig(BaseModel):
    base_url: str = "https://hithouse.ba"
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    screenshots: ScreenshotConfig = Field(default_factory=ScreenshotConfig)
    reports: ReportConfig = Field(default_factory=ReportConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    selectors: SelectorConfig = Field(default_factory=SelectorConfig)
    test_data: TestDataConfig = Field(default_factory=TestDataConfig)


_ENV_TRUE = {"1", "true", "yes", "on"}


def load_config(path: str | Path | None = None, env: dict[str, str] | None = None) -> HarnessConfig:
    """Build the config from defaults, an optional JSON file, then env vars."""
    data: dict = {}
    if path:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    config = HarnessConfig.model_validate(data)

    env = os.environ if env is None else env
    if env.get("SEARCHPROBE_BASE_URL"):
        config.base_url = env["SEARCHPROBE_BASE_URL"].rstrip("/")
    if env.get("SEARCHPROBE_HEADLESS"):
        config.browser.headless = env["SEARCHPROBE_HEADLESS"].strip().lower() in _ENV_TRUE
    if env.get("SEARCHPROBE_REPORTS_DIR"):
        config.reports.directory = env["SEARCHPROBE_REPORTS_DIR"]
    if env.get("SEARCHPROBE_SCREENSHOTS_DIR"):
        config.screenshots.directory = env["SEARCHPROBE_SCREENSHOTS_DIR"]
    return config
