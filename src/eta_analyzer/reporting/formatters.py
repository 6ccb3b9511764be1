"""Display formatting for screener and scorecard output."""

from __future__ import annotations

from typing import Any

from eta_analyzer.analytics.models import Status
from eta_analyzer.analytics.records import safe_float

DASH = "—"

STATUS_LABELS = {
    Status.GREEN: "On Track",
    Status.YELLOW: "At Risk",
    Status.RED: "Behind",
}

# Rich styles per signal
STATUS_STYLES = {
    Status.GREEN: "green",
    Status.YELLOW: "yellow",
    Status.RED: "red",
}


def format_currency(value: Any) -> str:
    """Compact dollar amount: ``$3.50M``, ``$350K``, ``$950`` or ``$0``."""
    amount = safe_float(value)
    if amount == 0:
        return "$0"
    if amount >= 1e6:
        return f"${amount / 1e6:.2f}M"
    if amount >= 1e3:
        return f"${amount / 1e3:.0f}K"
    return f"${amount:,.0f}"


def format_pct(ratio: float, dash_if_empty: bool = False) -> str:
    """Ratio to percent with one decimal (0.2 -> ``"20.0%"``)."""
    if dash_if_empty and ratio <= 0:
        return DASH
    return f"{ratio * 100:.1f}%"


def format_multiple(value: float, digits: int = 1) -> str:
    if value <= 0:
        return DASH
    return f"{value:.{digits}f}x"


def status_label(status: Status | None) -> str:
    return STATUS_LABELS.get(status, "Behind")


def status_style(status: Status | None) -> str:
    return STATUS_STYLES.get(status, "red")


def score_style(score: int, strong: int, moderate: int) -> str:
    if score >= strong:
        return "green"
    if score >= moderate:
        return "yellow"
    return "red"


__all__ = [
    "DASH",
    "format_currency",
    "format_multiple",
    "format_pct",
    "score_style",
    "status_label",
    "status_style",
]
