"""Render the end-of-run summary with Rich."""

from __future__ import annotations

import io
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from harness.models.report import RunSummary

STATUS_COLORS = {"PASS": "green", "FAIL": "red", "SKIPPED": "yellow"}


def _rate_style(rate: float) -> str:
    return "green" if rate >= 80 else "yellow" if rate >= 60 else "red"


def print_report(summary: RunSummary, console: Console | None = None, report_path: str | Path | None = None):
    """Print the run summary: totals, categories, bugs and security issues."""
    console = console or Console()

    header = Text()
    header.append("\n Search Test Report\n", style="bold")
    header.append(f" {summary.total_tests} tests in {summary.duration_label}\n", style="dim")
    if report_path:
        header.append(f" {report_path}\n", style="dim")
    console.print(Panel(header, border_style="blue"))

    # Totals
    console.print()
    totals = Text()
    totals.append("  Success rate: ", style="bold")
    totals.append(summary.success_rate_label, style=f"bold {_rate_style(summary.success_rate)}")
    totals.append(f"   passed {summary.passed}", style=STATUS_COLORS["PASS"])
    totals.append(f"  failed {summary.failed}", style=STATUS_COLORS["FAIL"])
    totals.append(f"  skipped {summary.skipped}", style=STATUS_COLORS["SKIPPED"])
    console.print(totals)
    console.print()

    if summary.categories:
        table = Table(title="Categories", show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("Category", min_width=14)
        table.add_column("Total", width=6, justify="right")
        table.add_column("Pass", width=6, justify="right")
        table.add_column("Fail", width=6, justify="right")
        table.add_column("Skip", width=6, justify="right")
        table.add_column("Rate", width=8, justify="right")

        for cat in sorted(summary.categories, key=lambda c: c.name):
            style = _rate_style(cat.success_rate)
            table.add_row(
                cat.name,
                str(cat.total),
                str(cat.passed),
                str(cat.failed),
                str(cat.skipped),
                f"[{style}]{cat.success_rate_label}[/{style}]",
            )
        console.print(table)
        console.print()

    if summary.bugs:
        bug_table = Table(title=f"Bugs ({summary.bugs_found})", show_header=True, header_style="bold", padding=(0, 1))
        bug_table.add_column("Test", width=6)
        bug_table.add_column("Input", max_width=30)
        bug_table.add_column("Observed", min_width=40)
        for bug in summary.bugs:
            bug_table.add_row(bug.test_id, Text(bug.input[:30]), Text(bug.actual[:120]))
        console.print(bug_table)
        console.print()

    if summary.security_issues:
        sec_table = Table(
            title=f"Security issues ({summary.security_issues_found})",
            show_header=True, header_style="bold red", padding=(0, 1),
        )
        sec_table.add_column("Sev", width=5, justify="center")
        sec_table.add_column("Test", width=6)
        sec_table.add_column("Input", max_width=30)
        sec_table.add_column("Observed", min_width=40)
        for issue in summary.security_issues:
            sec_table.add_row(
                Text(issue.severity.value, style="red bold"),
                issue.test_id,
                Text(issue.input[:30]),
                Text(issue.actual[:120]),
            )
        console.print(sec_table)
        console.print()

    if not summary.bugs and not summary.security_issues:
        console.print("  [green bold]No bugs or security issues flagged.[/green bold]\n")


def save_html_report(summary: RunSummary, path: str | Path, report_path: str | Path | None = None) -> Path:
    """Render the same report into a standalone HTML file."""
    console = Console(record=True, width=120, file=io.StringIO())
    print_report(summary, console=console, report_path=report_path)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    console.save_html(str(path))
    return path
