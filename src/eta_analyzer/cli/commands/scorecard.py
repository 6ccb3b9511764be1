"""
Scorecard command - goal pacing and KPIs from an exported activity log.
"""
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from eta_analyzer.analytics import (
    BreakdownEntry,
    GoalResult,
    RecordsFileError,
    ScorecardEngine,
    ScorecardReport,
    load_records_file,
)
from eta_analyzer.analytics.records import parse_timestamp
from eta_analyzer.config.schema import AppConfig
from eta_analyzer.reporting.formatters import score_style, status_label, status_style
from eta_analyzer.utils.log_setup import EngineNames, LogPhases, log_context

console = Console()

# Module-level defaults for typer arguments
RECORDS_ARGUMENT = typer.Argument(
    ...,
    help="JSON or YAML export with 'activities' and 'deals' lists",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)
NOW_OPTION = typer.Option(
    None,
    "--now",
    help="Reference date/time in ISO format (default: current time)",
)


def parse_now(value: Optional[str]) -> datetime:
    """Resolve the --now option.

    Raises:
        typer.BadParameter: If the value is not an ISO date or datetime
    """
    if value is None:
        return datetime.now()
    parsed = parse_timestamp(value)
    if parsed is None:
        raise typer.BadParameter(f"Not an ISO date/time: {value}")
    return parsed


def _goal_table(title: str, goals: tuple[GoalResult, ...]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Goal", style="dim")
    table.add_column("Actual / Target", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Status")
    for goal in goals:
        style = status_style(goal.status)
        table.add_row(
            goal.name,
            f"{goal.actual} / {goal.target}",
            f"{goal.progress_pct:.0f}%",
            f"[{style}]● {status_label(goal.status)}[/{style}]",
        )
    return table


def _breakdown_table(title: str, entries: tuple[BreakdownEntry, ...]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Category", style="dim")
    table.add_column("Count", justify="right")
    for entry in entries:
        table.add_row(entry.label, str(entry.count))
    return table


def render_report(report: ScorecardReport) -> None:
    """Print the scorecard sections in the order the dashboard shows them."""
    style = score_style(report.overall_score, 80, 50)
    console.print(
        f"Overall: [bold {style}]{report.overall_score}[/bold {style}] [{style}]{report.overall_label}[/{style}]"
        f"  [dim]({report.month_label} · {report.quarter_label})[/dim]\n"
    )

    summary = Table(title="Summary", show_header=True, header_style="bold cyan")
    summary.add_column("Metric", style="dim")
    summary.add_column("Value", justify="right")
    summary.add_row("Total Activities", str(report.activity_summary.total))
    summary.add_row("This Month", str(report.activity_summary.this_month))
    summary.add_row("Networking", str(report.activity_summary.networking))
    summary.add_row("Deals Reviewed", str(report.pipeline.reviewed))
    summary.add_row("Active Pipeline", str(report.pipeline.active))
    summary.add_row("Deals Passed", str(report.pipeline.passed))
    console.print(summary)
    console.print()

    console.print(_goal_table(f"Monthly Goals · {report.month_label}", report.monthly_goals))
    console.print()
    console.print(_goal_table(f"Quarterly Goals · {report.quarter_label}", report.quarterly_goals))
    console.print()

    for metric in (report.response_rate, report.cim_compliance):
        mstyle = status_style(metric.status)
        console.print(
            f"{metric.name}: [bold {mstyle}]{metric.value_pct}%[/bold {mstyle}] [dim]target: {metric.target_pct}%[/dim]"
        )
    console.print()

    if report.by_contact_type:
        console.print(_breakdown_table("Networking by Contact Type", report.by_contact_type))
    else:
        console.print("[dim]No networking activity with a contact type yet.[/dim]")
    if report.by_venue:
        console.print(_breakdown_table("Networking by Venue", report.by_venue))
    else:
        console.print("[dim]No networking activity with a venue yet.[/dim]")


def scorecard_cmd(
    ctx: typer.Context,
    records_path: Path = RECORDS_ARGUMENT,
    now: Optional[str] = NOW_OPTION,
):
    """
    Build the search scorecard from an exported activity log.

    Example:
        eta-analyzer scorecard data/export.json
        eta-analyzer scorecard data/export.yaml --now 2026-10-17
    """
    console.print("\n[bold cyan]ETA Analyzer - Search Scorecard[/bold cyan]\n")

    config: AppConfig = ctx.obj["config"]
    reference = parse_now(now)

    try:
        with log_context(phase=LogPhases.LOADING):
            activities, deals = load_records_file(records_path)
    except RecordsFileError as e:
        console.print(f"[bold red]✗[/bold red] {e!s}", style="red")
        raise typer.Exit(code=1) from e

    with log_context(phase=LogPhases.SCORING, engine=EngineNames.SCORECARD):
        engine = ScorecardEngine(
            goal_targets=config.scorecard.goal_targets,
            response_rate_target=config.scorecard.response_rate_target,
            cim_min_description_length=config.scorecard.cim_min_description_length,
            cim_compliance_green_pct=config.scorecard.cim_compliance_green_pct,
        )
        report = engine.build_report(activities, deals, reference)

    with log_context(phase=LogPhases.REPORTING):
        render_report(report)
