"""
Main CLI application using Typer.
Provides entry point and command routing for ETA Analyzer.
"""
from pathlib import Path

import typer
from rich.console import Console

from eta_analyzer.cli.commands.config import config_cmd
from eta_analyzer.cli.commands.scorecard import scorecard_cmd
from eta_analyzer.cli.commands.screen import screen_cmd
from eta_analyzer.config.loader import ConfigurationError, load_config
from eta_analyzer.utils.log_setup import setup_logging

app = typer.Typer(
    name="eta-analyzer",
    help="ETA Analyzer - deal screening and search scorecards for acquisition searchers",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool):
    """Display version information."""
    if value:
        try:
            from importlib.metadata import version

            app_version = version("eta-analyzer")
        except Exception:
            # Fallback if package not installed
            from eta_analyzer import __version__ as app_version

        console.print(f"[bold cyan]ETA Analyzer[/bold cyan] version [green]{app_version}[/green]")
        raise typer.Exit()


# Module-level typer options
VERSION_OPTION = typer.Option(
    None,
    "--version",
    "-v",
    callback=version_callback,
    is_eager=True,
    help="Show version and exit.",
)
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to configuration file (default: ./config.yaml)",
    exists=True,
    dir_okay=False,
    readable=True,
)
VERBOSE_OPTION = typer.Option(
    False,
    "--verbose",
    help="Enable verbose output (DEBUG level logging)",
)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = VERSION_OPTION,
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    ETA Analyzer - screen acquisition targets and track search goals.

    Use [bold cyan]eta-analyzer COMMAND --help[/bold cyan] for command-specific help.
    """
    try:
        app_config = load_config(str(config) if config else None, validate=False)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e!s}", style="red")
        console.print(
            "\n[yellow]Tip:[/yellow] Check your config.yaml file or use --config to specify a different path."
        )
        raise typer.Exit(code=1) from e

    ctx.obj = {
        "config_path": config,
        "config": app_config,
        "verbose": verbose,
    }

    try:
        log_level = "DEBUG" if verbose else app_config.logging.level
        setup_logging(
            log_level=log_level,
            log_dir=str(app_config.paths.logs_dir),
            retention_days=app_config.logging.retention_days,
            console=app_config.logging.console,
            file=app_config.logging.file,
        )
    except Exception as e:
        console.print(f"[bold red]Logging Setup Error:[/bold red] {e!s}", style="red")
        raise typer.Exit(code=1) from e


app.command(name="screen")(screen_cmd)
app.command(name="scorecard")(scorecard_cmd)
app.command(name="config")(config_cmd)


if __name__ == "__main__":
    app()
