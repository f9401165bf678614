"""Console rendering of audit results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table

from ..engine.models import BatchOutcome
from ..services import ALL_SERVICES

if TYPE_CHECKING:
    from ..orchestrator import AuditReport


def format_failure(outcome: BatchOutcome) -> str:
    return f"ERROR: {outcome.service.label} - batch {outcome.index}: {outcome.error}"


def report_lines(report: "AuditReport") -> list[str]:
    summary = report.summary
    lines = [
        f"{summary.total_packages} packages to audit against",
        f"{summary.unique_across_services} unique packages between both APIs",
    ]
    for service in ALL_SERVICES:
        tally = summary.tally(service)
        lines.append(
            f"{tally.distinct_count} packages from {service.display_name} "
            f"with {tally.match_total} fingerprint matches"
        )
    return lines


def render_report(report: "AuditReport", console: Console, err_console: Console) -> None:
    """Print one error line per failed batch, then the count lines."""

    for outcome in report.failures:
        err_console.print(
            format_failure(outcome), style="red", markup=False, highlight=False, soft_wrap=True
        )
    for line in report_lines(report):
        console.print(line, markup=False, highlight=False, soft_wrap=True)


def render_summary_table(report: "AuditReport") -> Table:
    summary = report.summary
    table = Table(
        title=(
            f"Fingerprint audit · {summary.total_packages} packages · "
            f"{report.batch_count} batches"
        ),
        box=box.SIMPLE_HEAD,
    )
    table.add_column("Service", style="cyan", no_wrap=True)
    table.add_column("Packages", style="green", justify="right")
    table.add_column("Matches", style="green", justify="right")
    table.add_column("Batches ok", justify="right")
    table.add_column("Batches failed", style="red", justify="right")
    for service in ALL_SERVICES:
        tally = summary.tally(service)
        table.add_row(
            service.display_name,
            str(tally.distinct_count),
            str(tally.match_total),
            str(tally.succeeded_batches),
            str(tally.failed_batches),
        )
    table.add_row("Both", str(summary.unique_across_services), "-", "-", "-", style="bold")
    return table


__all__ = ["format_failure", "render_report", "render_summary_table", "report_lines"]
