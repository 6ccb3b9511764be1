"""Console formatting helpers for engine output."""

from .formatters import (
    format_currency,
    format_multiple,
    format_pct,
    score_style,
    status_label,
    status_style,
)

__all__ = [
    "format_currency",
    "format_multiple",
    "format_pct",
    "score_style",
    "status_label",
    "status_style",
]
