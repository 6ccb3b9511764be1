"""
CLI commands package.
Contains individual command implementations.
"""
from eta_analyzer.cli.commands.config import config_cmd
from eta_analyzer.cli.commands.scorecard import scorecard_cmd
from eta_analyzer.cli.commands.screen import screen_cmd

__all__ = ["config_cmd", "scorecard_cmd", "screen_cmd"]
