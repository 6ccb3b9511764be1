"""Period windows and time-proportional pacing status.

A goal should not read red just because its month or quarter is not over.
Progress is judged against the share of the period that has elapsed, with
20% slack for monthly goals and 30% for quarterly ones.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
from typing import Optional

from .models import GoalPeriod, Status

MONTHLY_SLACK = 0.8
QUARTERLY_SLACK = 0.7


def first_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def first_of_quarter(now: datetime) -> datetime:
    """Midnight on Jan 1, Apr 1, Jul 1 or Oct 1 of ``now``'s quarter."""
    quarter_month = (now.month - 1) // 3 * 3 + 1
    return first_of_month(now).replace(month=quarter_month)


def period_start(period: GoalPeriod, now: datetime) -> datetime:
    if period is GoalPeriod.QUARTER:
        return first_of_quarter(now)
    return first_of_month(now)


def month_label(now: datetime) -> str:
    """e.g. ``"October 2026"``"""
    return f"{calendar.month_name[now.month]} {now.year}"


def quarter_label(now: datetime) -> str:
    """e.g. ``"Q4 2026"``"""
    return f"Q{(now.month - 1) // 3 + 1} {now.year}"


def align_to(value: datetime, reference: datetime) -> datetime:
    """Make ``value`` comparable with ``reference``.

    Naive values are read in the reference's zone; aware values compared
    against a naive reference are converted to UTC wall time.
    """
    if reference.tzinfo is not None and value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    if reference.tzinfo is None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def in_window(timestamp: Optional[datetime], start: datetime) -> bool:
    """True when ``timestamp`` falls on or after ``start``."""
    if timestamp is None:
        return False
    return align_to(timestamp, start) >= start


def monthly_time_fraction(now: datetime) -> float:
    days_in_month = calendar.monthrange(now.year, now.month)[1]
    return now.day / days_in_month


def quarterly_time_fraction(now: datetime) -> float:
    # Months are approximated as 30 days inside the quarter
    month_in_quarter = (now.month - 1) % 3
    return (month_in_quarter + now.day / 30) / 3


def monthly_status(actual: float, target: float, now: datetime) -> Status:
    return _pacing_status(actual, target, monthly_time_fraction(now), MONTHLY_SLACK)


def quarterly_status(actual: float, target: float, now: datetime) -> Status:
    return _pacing_status(actual, target, quarterly_time_fraction(now), QUARTERLY_SLACK)


def pacing_status(period: GoalPeriod, actual: float, target: float, now: datetime) -> Status:
    if period is GoalPeriod.QUARTER:
        return quarterly_status(actual, target, now)
    return monthly_status(actual, target, now)


def _pacing_status(actual: float, target: float, time_fraction: float, slack: float) -> Status:
    if target <= 0 or actual >= target:
        return Status.GREEN
    if actual / target >= time_fraction * slack:
        return Status.YELLOW
    return Status.RED


__all__ = [
    "MONTHLY_SLACK",
    "QUARTERLY_SLACK",
    "align_to",
    "first_of_month",
    "first_of_quarter",
    "in_window",
    "month_label",
    "monthly_status",
    "monthly_time_fraction",
    "pacing_status",
    "period_start",
    "quarter_label",
    "quarterly_status",
    "quarterly_time_fraction",
]
