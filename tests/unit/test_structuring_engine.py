"""Unit tests for the deal structuring and scoring engine."""

from __future__ import annotations

import math

import pytest

from eta_analyzer.analytics import (
    DealFinancialInputs,
    Status,
    StructuringEngine,
    amortized_payment,
    score_label,
)
from eta_analyzer.analytics.structuring_engine import (
    CASH_ON_CASH_FACTOR,
    DSCR_FACTOR,
    MARGIN_FACTOR,
    MULTIPLE_FACTOR,
    loan_eligibility_factor,
)


@pytest.fixture
def engine():
    return StructuringEngine()


@pytest.fixture
def reference_inputs():
    return DealFinancialInputs(
        revenue=5_000_000,
        ebitda=1_000_000,
        asking_price=3_500_000,
        down_payment_pct=10,
        seller_note_pct=10,
        sba_rate_annual_pct=10.5,
        sba_term_years=10,
        seller_note_rate_annual_pct=6,
        seller_note_term_years=5,
    )


def _factor(analysis, name):
    return next((f for f in analysis.factors if f.name == name), None)


# ============================================================
# Amortized payment
# ============================================================
class TestAmortizedPayment:
    """Tests for the fixed-rate installment formula."""

    @pytest.mark.parametrize(
        "principal,rate,years",
        [
            (2_800_000, 10.5, 10),
            (350_000, 6.0, 5),
            (100_000, 0.5, 30),
            (1_000, 24.0, 1),
        ],
    )
    def test_total_paid_covers_principal(self, principal, rate, years):
        """Interest is never negative, so payments add up to at least the principal."""
        payment = amortized_payment(principal, rate, years)
        assert payment > 0
        assert payment * years * 12 >= principal

    def test_known_payment(self):
        """$100k at 6% over 30 years is the textbook $599.55/month."""
        assert amortized_payment(100_000, 6.0, 30) == pytest.approx(599.55, abs=0.01)

    def test_zero_principal(self):
        assert amortized_payment(0, 10.5, 10) == 0

    def test_zero_rate_returns_zero(self):
        assert amortized_payment(500_000, 0, 10) == 0

    def test_non_positive_term_returns_zero(self):
        assert amortized_payment(500_000, 7.0, 0) == 0
        assert amortized_payment(500_000, 7.0, -3) == 0

    def test_negative_rate_returns_zero(self):
        assert amortized_payment(500_000, -2.0, 10) == 0

    def test_enormous_term_does_not_overflow(self):
        """Very long terms approach an interest-only payment."""
        payment = amortized_payment(120_000, 12.0, 1e9)
        assert payment == pytest.approx(1_200.0)


# ============================================================
# Reference deal
# ============================================================
class TestReferenceDeal:
    """The standard screener example: $5M revenue, $1M EBITDA, $3.5M ask."""

    def test_structure(self, engine, reference_inputs):
        analysis = engine.analyze(reference_inputs)

        assert analysis.ebitda_margin == pytest.approx(0.20)
        assert analysis.multiple == pytest.approx(3.5)
        assert analysis.equity_injection == pytest.approx(350_000)
        assert analysis.seller_note == pytest.approx(350_000)
        assert analysis.loan_amount == pytest.approx(2_800_000)
        assert analysis.loan_eligible is True

    def test_debt_service(self, engine, reference_inputs):
        analysis = engine.analyze(reference_inputs)

        assert analysis.loan_monthly_payment == pytest.approx(37_782, abs=10)
        assert analysis.seller_note_monthly_payment == pytest.approx(6_766, abs=5)
        expected_annual = (analysis.loan_monthly_payment + analysis.seller_note_monthly_payment) * 12
        assert analysis.annual_debt_service == pytest.approx(expected_annual)
        assert analysis.dscr > 0
        assert analysis.dscr == pytest.approx(1.87, abs=0.01)
        assert analysis.free_cash_flow == pytest.approx(1_000_000 - analysis.annual_debt_service)
        assert analysis.cash_on_cash_return == pytest.approx(analysis.free_cash_flow / 350_000)

    def test_score_and_notes(self, engine, reference_inputs):
        analysis = engine.analyze(reference_inputs)

        assert "Moderate multiple (3-4x)" in analysis.notes
        assert analysis.notes == (
            "Moderate multiple (3-4x)",
            "Strong margins (≥20%)",
            "Strong DSCR (≥1.5x)",
            "SBA eligible (≤$5M)",
            "Strong cash-on-cash (≥50%)",
        )
        assert analysis.score == 90
        assert analysis.label == "STRONG"
        assert analysis.has_data is True
        assert analysis.warnings == ()

    def test_idempotent(self, engine, reference_inputs):
        first = engine.analyze(reference_inputs)
        second = engine.analyze(reference_inputs)
        assert first == second
        assert StructuringEngine().analyze(reference_inputs) == first


# ============================================================
# Scoring bands
# ============================================================
class TestScoreBands:
    """Band boundaries of each factor table."""

    @pytest.mark.parametrize(
        "value,points",
        [(2.5, 25), (3.0, 25), (3.01, 15), (4.0, 15), (4.01, 5), (12.0, 5)],
    )
    def test_multiple_bands(self, value, points):
        assert MULTIPLE_FACTOR.band_for(value).points == points

    @pytest.mark.parametrize(
        "value,points",
        [(0.35, 25), (0.20, 25), (0.1999, 15), (0.10, 15), (0.0999, 5), (0.01, 5)],
    )
    def test_margin_bands(self, value, points):
        assert MARGIN_FACTOR.band_for(value).points == points

    @pytest.mark.parametrize(
        "value,points",
        [(2.0, 25), (1.5, 25), (1.49, 15), (1.25, 15), (1.24, 5), (0.3, 5)],
    )
    def test_dscr_bands(self, value, points):
        assert DSCR_FACTOR.band_for(value).points == points

    @pytest.mark.parametrize(
        "value,points",
        [(0.8, 10), (0.5, 10), (0.49, 5), (0.25, 5), (0.24, 0), (0.0, 0), (-1.5, 0)],
    )
    def test_cash_on_cash_bands(self, value, points):
        assert CASH_ON_CASH_FACTOR.band_for(value).points == points

    def test_positive_only_factors_skip_zero(self):
        for factor in (MULTIPLE_FACTOR, MARGIN_FACTOR, DSCR_FACTOR):
            assert factor.band_for(0.0) is None
            assert factor.band_for(-1.0) is None

    def test_eligibility_bands(self):
        factor = loan_eligibility_factor(5_000_000)
        assert factor.band_for(1.0).points == 15
        assert factor.band_for(1.0).tone is Status.GREEN
        assert factor.band_for(0.0).points == 0
        assert factor.band_for(0.0).note == "Exceeds SBA limit"

    @pytest.mark.parametrize(
        "score,label",
        [(100, "STRONG"), (70, "STRONG"), (69, "MODERATE"), (45, "MODERATE"), (44, "WEAK"), (0, "WEAK")],
    )
    def test_score_label(self, score, label):
        assert score_label(score) == label


# ============================================================
# Edge cases
# ============================================================
class TestEdgeCases:
    """Degrade-to-zero behaviour and partial data."""

    def test_no_data_has_no_score(self, engine):
        analysis = engine.analyze(DealFinancialInputs())
        assert analysis.has_data is False
        assert analysis.score == 0
        assert analysis.notes == ()
        assert analysis.factors == ()

    def test_malformed_values_coerce_to_zero(self, engine):
        inputs = DealFinancialInputs(
            revenue="not a number",  # type: ignore[arg-type]
            ebitda=None,  # type: ignore[arg-type]
            asking_price=float("nan"),
            sba_rate_annual_pct="abc",  # type: ignore[arg-type]
        )
        analysis = engine.analyze(inputs)
        assert analysis.has_data is False
        assert analysis.score == 0
        assert analysis.loan_monthly_payment == 0

    def test_string_amounts_are_parsed(self, engine):
        inputs = DealFinancialInputs(
            revenue="5,000,000",  # type: ignore[arg-type]
            ebitda="1000000",  # type: ignore[arg-type]
            asking_price="$3,500,000",  # type: ignore[arg-type]
        )
        analysis = engine.analyze(inputs)
        assert analysis.multiple == pytest.approx(3.5)

    def test_ebitda_only_scores_eligibility_and_cash_on_cash(self, engine):
        """Zero multiple, margin and DSCR contribute nothing and no note."""
        analysis = engine.analyze(DealFinancialInputs(ebitda=500_000))

        assert analysis.has_data is True
        assert [f.name for f in analysis.factors] == ["loan_eligibility", "cash_on_cash"]
        assert analysis.notes == ("SBA eligible (≤$5M)", "Low cash-on-cash (<25%)")
        assert analysis.score == 15

    def test_loss_making_business(self, engine):
        analysis = engine.analyze(DealFinancialInputs(revenue=2_000_000, ebitda=-100_000, asking_price=1_000_000))

        assert analysis.multiple == 0
        assert analysis.ebitda_margin < 0
        assert _factor(analysis, "multiple") is None
        assert _factor(analysis, "ebitda_margin") is None
        assert _factor(analysis, "dscr") is None
        assert analysis.free_cash_flow < 0

    def test_exceeds_sba_limit(self, engine):
        analysis = engine.analyze(DealFinancialInputs(revenue=20_000_000, ebitda=2_000_000, asking_price=6_000_000))
        assert analysis.loan_eligible is False
        assert "Exceeds SBA limit" in analysis.notes
        assert _factor(analysis, "loan_eligibility").points == 0

    def test_limit_is_inclusive(self, engine):
        analysis = engine.analyze(DealFinancialInputs(ebitda=1_000_000, asking_price=5_000_000))
        assert analysis.loan_eligible is True

    def test_custom_loan_limit(self, reference_inputs):
        analysis = StructuringEngine(sba_loan_limit=1_000_000).analyze(reference_inputs)
        assert analysis.loan_eligible is False
        assert analysis.score == 75

    def test_financing_above_hundred_percent(self, engine):
        """Inconsistent structures are computed as given, with a warning."""
        inputs = DealFinancialInputs(
            revenue=3_000_000,
            ebitda=600_000,
            asking_price=2_000_000,
            down_payment_pct=70,
            seller_note_pct=50,
        )
        analysis = engine.analyze(inputs)

        assert analysis.loan_amount == pytest.approx(-400_000)
        assert analysis.loan_monthly_payment < 0
        assert len(analysis.warnings) == 1
        assert "exceed 100%" in analysis.warnings[0]
        assert 0 <= analysis.score <= 100

    def test_zero_down_payment(self, engine):
        analysis = engine.analyze(
            DealFinancialInputs(revenue=5_000_000, ebitda=1_000_000, asking_price=3_500_000, down_payment_pct=0)
        )
        assert analysis.equity_injection == 0
        assert analysis.cash_on_cash_return == 0
        assert _factor(analysis, "cash_on_cash").points == 0

    @pytest.mark.parametrize("revenue", [0, 1, 750_000, 1e12])
    @pytest.mark.parametrize("ebitda", [-5e5, 0, 90_000, 2e6])
    @pytest.mark.parametrize("asking", [0, 400_000, 4_999_999, 9e9])
    def test_score_always_in_range(self, engine, revenue, ebitda, asking):
        analysis = engine.analyze(DealFinancialInputs(revenue=revenue, ebitda=ebitda, asking_price=asking))
        assert 0 <= analysis.score <= 100
        assert len(analysis.notes) == len(analysis.factors)

    def test_extreme_asking_price_stays_finite(self, engine):
        analysis = engine.analyze(
            DealFinancialInputs(revenue=1e6, ebitda=5e5, asking_price=1e308, down_payment_pct=100)
        )
        derived = [
            analysis.ebitda_margin,
            analysis.multiple,
            analysis.equity_injection,
            analysis.seller_note,
            analysis.loan_amount,
            analysis.loan_monthly_payment,
            analysis.seller_note_monthly_payment,
            analysis.annual_debt_service,
            analysis.dscr,
            analysis.free_cash_flow,
            analysis.cash_on_cash_return,
        ]
        assert all(math.isfinite(value) for value in derived)
        assert not analysis.loan_eligible
        assert 0 <= analysis.score <= 100
        assert len(analysis.notes) == len(analysis.factors)
        assert _factor(analysis, "cash_on_cash").note == "Low cash-on-cash (<25%)"

    def test_tiny_revenue_margin_degrades_to_zero(self, engine):
        analysis = engine.analyze(DealFinancialInputs(revenue=1e-310, ebitda=1e10, asking_price=0))
        assert analysis.ebitda_margin == 0
        assert math.isfinite(analysis.multiple)
        assert 0 <= analysis.score <= 100
