"""
Screen command - quick valuation, structure and SBA check for one deal.
"""
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from eta_analyzer.analytics import DealAnalysis, DealFinancialInputs, StructuringEngine
from eta_analyzer.config.schema import AppConfig, ScreeningConfig
from eta_analyzer.reporting.formatters import (
    DASH,
    format_currency,
    format_multiple,
    format_pct,
    score_style,
    status_style,
)
from eta_analyzer.utils.log_setup import EngineNames, LogPhases, log_context

console = Console()

# Module-level defaults for typer options
REVENUE_OPTION = typer.Option(0.0, "--revenue", help="Annual revenue ($)")
EBITDA_OPTION = typer.Option(0.0, "--ebitda", help="Annual EBITDA ($)")
ASKING_OPTION = typer.Option(0.0, "--asking-price", help="Asking price ($)")
NAME_OPTION = typer.Option(None, "--name", "-n", help="Deal name used in log context")
DOWN_PAYMENT_OPTION = typer.Option(None, "--down-payment", help="Down payment % (default: from config)")
SELLER_NOTE_OPTION = typer.Option(None, "--seller-note", help="Seller note % (default: from config)")
SBA_RATE_OPTION = typer.Option(None, "--sba-rate", help="SBA rate % (default: from config)")
SBA_TERM_OPTION = typer.Option(None, "--sba-term", help="SBA term in years (default: from config)")
NOTE_RATE_OPTION = typer.Option(None, "--seller-note-rate", help="Seller note rate % (default: from config)")
NOTE_TERM_OPTION = typer.Option(None, "--seller-note-term", help="Seller note term in years (default: from config)")


def _pick(value: Optional[float], default: float) -> float:
    return default if value is None else value


def build_inputs(
    screening: ScreeningConfig,
    revenue: float,
    ebitda: float,
    asking_price: float,
    down_payment: Optional[float] = None,
    seller_note: Optional[float] = None,
    sba_rate: Optional[float] = None,
    sba_term: Optional[float] = None,
    seller_note_rate: Optional[float] = None,
    seller_note_term: Optional[float] = None,
) -> DealFinancialInputs:
    """Combine CLI values with the configured structure defaults."""
    return DealFinancialInputs(
        revenue=revenue,
        ebitda=ebitda,
        asking_price=asking_price,
        down_payment_pct=_pick(down_payment, screening.down_payment_pct),
        seller_note_pct=_pick(seller_note, screening.seller_note_pct),
        sba_rate_annual_pct=_pick(sba_rate, screening.sba_rate_pct),
        sba_term_years=_pick(sba_term, screening.sba_term_years),
        seller_note_rate_annual_pct=_pick(seller_note_rate, screening.seller_note_rate_pct),
        seller_note_term_years=_pick(seller_note_term, screening.seller_note_term_years),
    )


def _metric_style(value: float, green: float, yellow: float) -> str:
    if value >= green:
        return "green"
    if value >= yellow:
        return "yellow"
    return "red"


def render_analysis(analysis: DealAnalysis, inputs: DealFinancialInputs) -> None:
    """Print score, key metrics, sources & uses and the SBA badge."""
    if analysis.has_data:
        style = score_style(analysis.score, 70, 45)
        console.print(f"[bold {style}]{analysis.score}[/bold {style}]  [{style}]{analysis.label}[/{style}]\n")
        for factor in analysis.factors:
            fstyle = status_style(factor.tone)
            console.print(f"  [{fstyle}]●[/{fstyle}] {factor.note}  [dim]({factor.points}/{factor.max_points})[/dim]")
        console.print()

    metrics = Table(title="Key Metrics", show_header=True, header_style="bold cyan")
    metrics.add_column("Metric", style="dim")
    metrics.add_column("Value", justify="right")

    margin = analysis.ebitda_margin
    multiple = analysis.multiple
    dscr = analysis.dscr
    coc = analysis.cash_on_cash_return
    multiple_style = "green" if multiple <= 3 else "yellow" if multiple <= 4 else "red"
    metrics.add_row("EBITDA Margin", format_pct(margin, dash_if_empty=True), style=_metric_style(margin, 0.2, 0.1))
    metrics.add_row("Multiple", format_multiple(multiple), style=multiple_style)
    metrics.add_row("DSCR", format_multiple(dscr, digits=2), style=_metric_style(dscr, 1.5, 1.25))
    metrics.add_row(
        "Annual Debt Service",
        format_currency(analysis.annual_debt_service) if analysis.annual_debt_service > 0 else DASH,
    )
    metrics.add_row(
        "Free Cash Flow",
        format_currency(analysis.free_cash_flow) if analysis.has_data else DASH,
        style="green" if analysis.free_cash_flow > 0 else "red",
    )
    metrics.add_row("Cash-on-Cash Return", format_pct(coc, dash_if_empty=True), style=_metric_style(coc, 0.5, 0.25))
    console.print(metrics)
    console.print()

    if not analysis.has_data:
        console.print("[yellow]i[/yellow] Enter revenue, EBITDA or asking price to score the deal.")
        return

    sources = Table(title="Sources & Uses", show_header=True, header_style="bold cyan")
    sources.add_column("Source", style="dim")
    sources.add_column("Amount", justify="right")
    sources.add_column("Monthly Payment", justify="right")
    sources.add_row("Equity (Down Payment)", format_currency(analysis.equity_injection), DASH)
    sources.add_row("SBA Loan", format_currency(analysis.loan_amount), format_currency(analysis.loan_monthly_payment))
    sources.add_row(
        "Seller Note", format_currency(analysis.seller_note), format_currency(analysis.seller_note_monthly_payment)
    )
    sources.add_row(
        "[bold]Total[/bold]",
        f"[bold]{format_currency(inputs.asking_price)}[/bold]",
        f"[bold]{format_currency(analysis.total_monthly_payment)}[/bold]",
    )
    console.print(sources)
    console.print()

    if analysis.loan_eligible:
        console.print("[bold green]✓ SBA 7(a) ELIGIBLE[/bold green] - asking price within the loan limit")
    else:
        console.print("[bold red]✗ EXCEEDS SBA 7(a) LIMIT[/bold red] - asking price exceeds the limit")

    for warning in analysis.warnings:
        console.print(f"[yellow]⚠[/yellow] {warning}")


def screen_cmd(
    ctx: typer.Context,
    revenue: float = REVENUE_OPTION,
    ebitda: float = EBITDA_OPTION,
    asking_price: float = ASKING_OPTION,
    name: Optional[str] = NAME_OPTION,
    down_payment: Optional[float] = DOWN_PAYMENT_OPTION,
    seller_note: Optional[float] = SELLER_NOTE_OPTION,
    sba_rate: Optional[float] = SBA_RATE_OPTION,
    sba_term: Optional[float] = SBA_TERM_OPTION,
    seller_note_rate: Optional[float] = NOTE_RATE_OPTION,
    seller_note_term: Optional[float] = NOTE_TERM_OPTION,
):
    """
    Screen a deal: valuation multiple, margins, debt service and SBA eligibility.

    Structure terms not given on the command line come from the
    [bold]screening[/bold] section of the configuration.

    Example:
        eta-analyzer screen --revenue 5000000 --ebitda 1000000 --asking-price 3500000
        eta-analyzer screen --ebitda 800000 --asking-price 3000000 --down-payment 15
    """
    console.print("\n[bold cyan]ETA Analyzer - Quick Deal Screener[/bold cyan]\n")

    config: AppConfig = ctx.obj["config"]
    inputs = build_inputs(
        config.screening,
        revenue,
        ebitda,
        asking_price,
        down_payment,
        seller_note,
        sba_rate,
        sba_term,
        seller_note_rate,
        seller_note_term,
    )

    context = {"phase": LogPhases.SCREENING, "engine": EngineNames.STRUCTURING}
    if name:
        context["deal_name"] = name

    with log_context(**context):
        engine = StructuringEngine(sba_loan_limit=config.screening.sba_loan_limit)
        analysis = engine.analyze(inputs)
        logger.info("Screened deal: score {} ({})", analysis.score, analysis.label)

    render_analysis(analysis, inputs)
