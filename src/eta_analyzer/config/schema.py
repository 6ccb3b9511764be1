"""Configuration schema using Pydantic BaseSettings with environment variable support.

This module defines the configuration schema for the ETA Analyzer application.
Environment variables can be used to override config values using the ETA_ prefix.
For example: ETA_SCREENING__SBA_RATE_PCT=9.75 or ETA_PATHS__LOGS_DIR="/var/log/eta"
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from eta_analyzer.analytics.scorecard_engine import GOAL_KEYS


class PathsConfig(BaseSettings):
    """File system paths configuration."""

    model_config = SettingsConfigDict(env_prefix="ETA_PATHS__", env_nested_delimiter="__")

    logs_dir: Path = Field(default="./logs", description="Directory for log files")
    data_dir: Path = Field(default="./data", description="Directory holding exported store records")

    @field_validator("logs_dir", "data_dir", mode="before")
    @classmethod
    def validate_paths(cls, v):
        """Convert string paths to Path objects and resolve them."""
        if isinstance(v, str):
            return Path(v).expanduser().resolve()
        return v


class ScreeningConfig(BaseSettings):
    """Default deal structure and lender limits for the screener."""

    model_config = SettingsConfigDict(env_prefix="ETA_SCREENING__", env_nested_delimiter="__")

    down_payment_pct: float = Field(default=10.0, ge=0.0, le=100.0, description="Equity share of asking price")
    seller_note_pct: float = Field(default=10.0, ge=0.0, le=100.0, description="Seller-financed share")
    sba_rate_pct: float = Field(default=10.5, ge=0.0, description="Senior loan annual rate")
    sba_term_years: float = Field(default=10.0, ge=0.0, description="Senior loan term")
    seller_note_rate_pct: float = Field(default=6.0, ge=0.0, description="Seller note annual rate")
    seller_note_term_years: float = Field(default=5.0, ge=0.0, description="Seller note term")
    sba_loan_limit: float = Field(default=5_000_000.0, gt=0.0, description="Asking price ceiling for SBA eligibility")


class ScorecardConfig(BaseSettings):
    """Goal targets and compliance thresholds for the scorecard."""

    model_config = SettingsConfigDict(env_prefix="ETA_SCORECARD__", env_nested_delimiter="__")

    response_rate_target: int = Field(default=40, ge=0, le=100, description="Outreach response-rate target (%)")
    cim_min_description_length: int = Field(
        default=20, ge=0, description="Characters a CIM review note needs to count as logged"
    )
    cim_compliance_green_pct: int = Field(default=90, ge=0, le=100, description="CIM compliance that reads green")
    goal_targets: dict[str, int] = Field(default_factory=dict, description="Per-goal target overrides")

    @field_validator("goal_targets")
    @classmethod
    def validate_goal_targets(cls, v):
        """Validate goal keys against the known goals and reject negative targets."""
        for key, target in v.items():
            if key not in GOAL_KEYS:
                raise ValueError(f"Unknown goal: {key}. Valid goals: {list(GOAL_KEYS)}")
            if target < 0:
                raise ValueError(f"Goal target for {key} must be non-negative (got {target})")
        return v


class LoggingConfig(BaseSettings):
    """Logging system configuration."""

    model_config = SettingsConfigDict(env_prefix="ETA_LOGGING__", env_nested_delimiter="__")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Logging level")
    console: bool = Field(default=True, description="Enable console logging")
    file: bool = Field(default=True, description="Enable file logging")
    retention_days: int = Field(default=30, gt=0, description="Log file retention in days")


class AppConfig(BaseSettings):
    """Main application configuration combining all sections."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    screening: ScreeningConfig = Field(default_factory=ScreeningConfig)
    scorecard: ScorecardConfig = Field(default_factory=ScorecardConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="ETA_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        for directory in (self.paths.logs_dir, self.paths.data_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def get_log_file_path(self) -> Path:
        """Get the current log file path with date."""
        from datetime import datetime

        date_str = datetime.now().strftime("%Y-%m-%d")
        return self.paths.logs_dir / f"{date_str}.log"

    def get_error_log_path(self) -> Path:
        """Get the error log file path."""
        return self.paths.logs_dir / "errors.log"
