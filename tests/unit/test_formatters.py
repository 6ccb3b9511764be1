"""Unit tests for display formatting."""

import pytest

from eta_analyzer.analytics import Status
from eta_analyzer.reporting import (
    format_currency,
    format_multiple,
    format_pct,
    score_style,
    status_label,
    status_style,
)
from eta_analyzer.reporting.formatters import DASH


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, "$0"),
        (None, "$0"),
        ("garbage", "$0"),
        (950, "$950"),
        (350_000, "$350K"),
        (3_500_000, "$3.50M"),
        (1_000_000, "$1.00M"),
        ("2,800,000", "$2.80M"),
    ],
)
def test_format_currency(value, expected):
    assert format_currency(value) == expected


def test_format_pct():
    assert format_pct(0.2) == "20.0%"
    assert format_pct(1.3312) == "133.1%"
    assert format_pct(0) == "0.0%"
    assert format_pct(0, dash_if_empty=True) == DASH


def test_format_multiple():
    assert format_multiple(3.5) == "3.5x"
    assert format_multiple(1.8712, digits=2) == "1.87x"
    assert format_multiple(0) == DASH
    assert format_multiple(-2) == DASH


def test_status_labels_and_styles():
    assert status_label(Status.GREEN) == "On Track"
    assert status_label(Status.YELLOW) == "At Risk"
    assert status_label(Status.RED) == "Behind"
    assert status_style(Status.YELLOW) == "yellow"
    assert status_style(None) == "red"


@pytest.mark.parametrize("score,style", [(90, "green"), (70, "green"), (50, "yellow"), (10, "red")])
def test_score_style(score, style):
    assert score_style(score, 70, 45) == style
