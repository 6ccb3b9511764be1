"""Configuration package for ETA Analyzer.

This package provides configuration management with Pydantic BaseSettings
for type validation and automatic environment variable override support.

Environment Variables:
    Use ETA_ prefix for overrides. For nested configs use double underscore.
    Examples:
        ETA_PATHS__LOGS_DIR=/custom/logs
        ETA_SCREENING__SBA_RATE_PCT=9.75
        ETA_SCORECARD__RESPONSE_RATE_TARGET=50
"""

from .loader import ConfigLoader, ConfigurationError, load_config, load_config_for_testing
from .schema import (
    AppConfig,
    LoggingConfig,
    PathsConfig,
    ScorecardConfig,
    ScreeningConfig,
)

__all__ = [
    "AppConfig",
    "ConfigLoader",
    "ConfigurationError",
    "LoggingConfig",
    "PathsConfig",
    "ScorecardConfig",
    "ScreeningConfig",
    "load_config",
    "load_config_for_testing",
]
