"""
Config command - Display the merged configuration.
"""
import typer
from rich.console import Console
from rich.table import Table

from eta_analyzer.config.loader import ConfigLoader
from eta_analyzer.config.schema import AppConfig

console = Console()


def _section_table(title: str, rows: list[tuple[str, str]]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value", style="green")
    for setting, value in rows:
        table.add_row(setting, value)
    return table


def config_cmd(
    ctx: typer.Context,
    sources: bool = typer.Option(
        False,
        "--sources",
        help="Also list where configuration values came from",
    ),
):
    """
    Display current configuration settings.

    Shows the merged configuration from all sources:
    - Environment variables (ETA_ prefix)
    - Config file from --config option
    - Default config.yaml
    - Built-in defaults

    Example:
        eta-analyzer config
        eta-analyzer --config custom-config.yaml config --sources
    """
    console.print("\n[bold cyan]ETA Analyzer - Configuration[/bold cyan]\n")

    config_path = ctx.obj.get("config_path")
    config: AppConfig = ctx.obj["config"]
    console.print(f"[green]✓[/green] Using config file: [bold]{config_path or 'config.yaml'}[/bold]\n")

    console.print(
        _section_table(
            "Paths Configuration",
            [
                ("Logs Directory", str(config.paths.logs_dir)),
                ("Data Directory", str(config.paths.data_dir)),
            ],
        )
    )
    console.print()

    screening = config.screening
    console.print(
        _section_table(
            "Screening Defaults",
            [
                ("Down Payment", f"{screening.down_payment_pct:g}%"),
                ("Seller Note", f"{screening.seller_note_pct:g}%"),
                ("SBA Rate", f"{screening.sba_rate_pct:g}%"),
                ("SBA Term", f"{screening.sba_term_years:g} yrs"),
                ("Seller Note Rate", f"{screening.seller_note_rate_pct:g}%"),
                ("Seller Note Term", f"{screening.seller_note_term_years:g} yrs"),
                ("SBA Loan Limit", f"${screening.sba_loan_limit:,.0f}"),
            ],
        )
    )
    console.print()

    scorecard = config.scorecard
    scorecard_rows = [
        ("Response Rate Target", f"{scorecard.response_rate_target}%"),
        ("CIM Note Min Length", str(scorecard.cim_min_description_length)),
        ("CIM Compliance Green", f"{scorecard.cim_compliance_green_pct}%"),
    ]
    scorecard_rows.extend((f"Target: {key}", str(target)) for key, target in sorted(scorecard.goal_targets.items()))
    console.print(_section_table("Scorecard Configuration", scorecard_rows))
    console.print()

    console.print(
        _section_table(
            "Logging Configuration",
            [
                ("Level", config.logging.level),
                ("Console", str(config.logging.console)),
                ("File", str(config.logging.file)),
                ("Retention", f"{config.logging.retention_days} days"),
            ],
        )
    )
    console.print()

    if sources:
        info = ConfigLoader(str(config_path) if config_path else None).get_config_sources_info()
        yaml_info = info["yaml_file"]
        console.print("[bold cyan]Configuration Sources:[/bold cyan]")
        console.print(f"  YAML: {yaml_info['path']} ({'found' if yaml_info['exists'] else 'not found'})")
        console.print(f"  Environment variables: {info['environment_variables']['count']}")
        for name in info["environment_variables"]["variables"]:
            console.print(f"    [green]✓[/green] {name}")
        console.print()
