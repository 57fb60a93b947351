#!/usr/bin/env python3
"""
Search test harness CLI
Usage: python run_search_tests.py [--base-url https://hithouse.ba] [--headless] [--only TC001,TC013]
"""

import argparse
import asyncio
import json
import sys

from harness.config import HarnessConfig, load_config
from harness.core.report import print_report, save_html_report
from harness.core.runner import RunOutcome, SearchTestRunner
from harness.utils.exceptions import HealthCheckFailed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="End-to-end tests for an e-commerce product search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  python run_search_tests.py\n"
               "  python run_search_tests.py --headless --only TC001,TC013\n"
               "  python run_search_tests.py --config harness.json --html report.html --fail-on-error",
    )
    parser.add_argument("--base-url", help="Site under test (default: from config)")
    parser.add_argument("--headless", action="store_true", help="Run the browser without a window")
    parser.add_argument("--only", default="", help="Comma-separated test ids to run (default: all)")
    parser.add_argument("--delay", type=int, help="Pause between tests in ms (default: 1500)")
    parser.add_argument("--config", help="JSON config file")
    parser.add_argument("--json", action="store_true", help="Print the run summary as JSON instead of a table")
    parser.add_argument("--html", help="Also write the report as HTML to this file")
    parser.add_argument("--fail-on-error", action="store_true", help="Exit 1 if any test failed")

    args = parser.parse_args(argv)
    config = build_config(args)
    only = [t for t in args.only.split(",") if t.strip()]

    if not args.json:
        print(f"\n  Search tests against {config.base_url}")
        mode = "headless" if config.browser.headless else "headful (visible browser)"
        print(f"  Tests: {', '.join(only) if only else 'all'} | Mode: {mode}\n")

    outcome = asyncio.run(run_tests(config, only, quiet=args.json))
    if outcome is None:
        return 1

    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_report(outcome.summary, report_path=outcome.report_path)

    if args.html:
        path = save_html_report(outcome.summary, args.html, report_path=outcome.report_path)
        if not args.json:
            print(f"  HTML report: {path}\n")

    if args.fail_on_error and outcome.summary.failed > 0:
        return 1
    return 0


def build_config(args: argparse.Namespace) -> HarnessConfig:
    config = load_config(args.config)
    if args.base_url:
        url = args.base_url
        if not url.startswith("http"):
            url = f"https://{url}"
        config.base_url = url.rstrip("/")
    if args.headless:
        config.browser.headless = True
    if args.delay is not None:
        config.queue.inter_test_delay_ms = max(0, args.delay)
    return config


def _cli_progress(event_type: str, data: dict):
    if event_type == "navigate":
        if not data.get("skipped"):
            print(f"   Opening {data.get('url', '')[:80]}")
    elif event_type == "health_check":
        status = "OK" if data.get("ok") else "FAILED"
        print(f"   [HEALTH] {status} readyState={data.get('ready_state')} search input={data.get('has_search_input')}")
    elif event_type == "queue_start":
        print(f"\n   Running {data.get('total', 0)} tests in sequence\n")
    elif event_type == "queue_entry":
        print(f"   [{data.get('index', '?')}/{data.get('total', '?')}] {data.get('id', '')} {data.get('name', '')[:70]}")
    elif event_type == "search":
        print(f"         Searching {data.get('term', '')[:60]!r}")
    elif event_type == "classify":
        label = "no-results message" if data.get("has_no_results") else f"{data.get('count', 0)} results"
        print(f"         {label}")
    elif event_type == "xss_analysis":
        flags = [k for k, v in data.items() if isinstance(v, bool) and v]
        print(f"         [XSS] {', '.join(flags) if flags else 'clean'}")
    elif event_type == "test_result":
        status = data.get("status", "")
        extra = ""
        if data.get("security_issue"):
            extra = " [SECURITY]"
        elif data.get("bug"):
            extra = " [BUG]"
        print(f"         {status} in {data.get('execution_time', 'N/A')}{extra}")
        if data.get("error"):
            print(f"         {data['error'][:120]}")
    elif event_type == "warning":
        print(f"         [WARN] {data.get('source', '')}: {data.get('message', '')[:120]}")
    elif event_type == "queue_complete":
        print(f"\n   Done: {data.get('completed', 0)}/{data.get('total', 0)} tests, {data.get('errored', 0)} errored\n")
    elif event_type == "report_saved":
        print(f"   Report saved: {data.get('path', '')}")


async def run_tests(config: HarnessConfig, only: list[str], quiet: bool = False) -> RunOutcome | None:
    runner = SearchTestRunner(config, only=only, on_progress=None if quiet else _cli_progress)
    try:
        return await runner.run()
    except HealthCheckFailed as e:
        print(f"\n  Site is not ready, aborting: {e}", file=sys.stderr)
    except Exception as e:
        print(f"\n  Error during run: {e}", file=sys.stderr)
    return None


if __name__ == "__main__":
    sys.exit(main())
