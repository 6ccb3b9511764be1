"""Deal structuring and scoring engine.

Turns a business's financials plus a proposed financing structure (equity
down payment, seller note, SBA-style senior loan) into debt service,
coverage and return metrics, then scores the deal 0-100 across five
factors. Band thresholds live in ordered tables so each boundary can be
tuned and tested without touching control flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .models import DealAnalysis, DealFinancialInputs, FactorScore, Status
from .records import safe_float

SBA_LOAN_LIMIT = 5_000_000.0


def amortized_payment(principal: float, annual_rate_pct: float, term_years: float) -> float:
    """Fixed monthly payment that fully repays ``principal`` over the term.

    Returns 0 when the rate or the term is not positive.
    """
    monthly_rate = annual_rate_pct / 100 / 12
    periods = term_years * 12
    if monthly_rate <= 0 or periods <= 0:
        return 0.0
    try:
        growth = (1 + monthly_rate) ** periods
    except OverflowError:
        # n -> infinity: interest-only payment
        return principal * monthly_rate
    if growth - 1 == 0:
        return principal / periods
    return principal * monthly_rate * growth / (growth - 1)


# ----------------------------------------------------------------------
# Score tables
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class ScoreBand:
    """One row of a factor's threshold table."""

    bound: float
    points: int
    tone: Status
    note: str


@dataclass(frozen=True)
class ScoringFactor:
    """A scored metric and its bands, ordered best first.

    For ``lower_is_better`` factors a value lands in the first band whose
    bound it does not exceed; otherwise in the first band whose bound it
    reaches. Factors with ``requires_positive`` skip non-positive values.
    """

    name: str
    max_points: int
    bands: tuple[ScoreBand, ...]
    lower_is_better: bool = False
    requires_positive: bool = True

    def band_for(self, value: float) -> Optional[ScoreBand]:
        if self.requires_positive and value <= 0:
            return None
        for band in self.bands:
            if self.lower_is_better and value <= band.bound:
                return band
            if not self.lower_is_better and value >= band.bound:
                return band
        return None


MULTIPLE_FACTOR = ScoringFactor(
    name="multiple",
    max_points=25,
    lower_is_better=True,
    bands=(
        ScoreBand(3.0, 25, Status.GREEN, "Attractive multiple (≤3x)"),
        ScoreBand(4.0, 15, Status.YELLOW, "Moderate multiple (3-4x)"),
        ScoreBand(float("inf"), 5, Status.RED, "High multiple (>4x)"),
    ),
)

MARGIN_FACTOR = ScoringFactor(
    name="ebitda_margin",
    max_points=25,
    bands=(
        ScoreBand(0.20, 25, Status.GREEN, "Strong margins (≥20%)"),
        ScoreBand(0.10, 15, Status.YELLOW, "Moderate margins (10-20%)"),
        ScoreBand(float("-inf"), 5, Status.RED, "Thin margins (<10%)"),
    ),
)

DSCR_FACTOR = ScoringFactor(
    name="dscr",
    max_points=25,
    bands=(
        ScoreBand(1.5, 25, Status.GREEN, "Strong DSCR (≥1.5x)"),
        ScoreBand(1.25, 15, Status.YELLOW, "Adequate DSCR (1.25-1.5x)"),
        ScoreBand(float("-inf"), 5, Status.RED, "Weak DSCR (<1.25x)"),
    ),
)

CASH_ON_CASH_FACTOR = ScoringFactor(
    name="cash_on_cash",
    max_points=10,
    requires_positive=False,
    bands=(
        ScoreBand(0.50, 10, Status.GREEN, "Strong cash-on-cash (≥50%)"),
        ScoreBand(0.25, 5, Status.YELLOW, "Moderate cash-on-cash (25-50%)"),
        ScoreBand(float("-inf"), 0, Status.RED, "Low cash-on-cash (<25%)"),
    ),
)


def loan_eligibility_factor(limit: float) -> ScoringFactor:
    """Eligibility is scored on 1.0 (eligible) or 0.0 (over the limit)."""
    limit_text = f"${limit / 1e6:g}M" if limit >= 1e6 else f"${limit:,.0f}"
    return ScoringFactor(
        name="loan_eligibility",
        max_points=15,
        requires_positive=False,
        bands=(
            ScoreBand(1.0, 15, Status.GREEN, f"SBA eligible (≤{limit_text})"),
            ScoreBand(float("-inf"), 0, Status.RED, "Exceeds SBA limit"),
        ),
    )


SCORE_LABELS: tuple[tuple[int, str], ...] = (
    (70, "STRONG"),
    (45, "MODERATE"),
)


def score_label(score: int) -> str:
    for floor, label in SCORE_LABELS:
        if score >= floor:
            return label
    return "WEAK"


# ----------------------------------------------------------------------
# Engine
# ----------------------------------------------------------------------
class StructuringEngine:
    """Compute deal structure metrics and an attractiveness score."""

    def __init__(self, sba_loan_limit: float = SBA_LOAN_LIMIT) -> None:
        self.logger = logger.bind(module="structuring_engine")
        self.sba_loan_limit = safe_float(sba_loan_limit, SBA_LOAN_LIMIT)
        self.factors: tuple[ScoringFactor, ...] = (
            MULTIPLE_FACTOR,
            MARGIN_FACTOR,
            DSCR_FACTOR,
            loan_eligibility_factor(self.sba_loan_limit),
            CASH_ON_CASH_FACTOR,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def analyze(self, inputs: DealFinancialInputs) -> DealAnalysis:
        """Analyze one deal.

        Never raises: unusable numbers are treated as 0, and inconsistent
        structures (down payment plus seller note above 100%) are computed
        as given with an advisory warning attached.

        Args:
            inputs: Financials and financing structure.

        Returns:
            DealAnalysis with derived metrics, score, notes and warnings.
        """
        revenue = safe_float(inputs.revenue)
        ebitda = safe_float(inputs.ebitda)
        asking = safe_float(inputs.asking_price)
        down_pct = safe_float(inputs.down_payment_pct)
        note_pct = safe_float(inputs.seller_note_pct)

        # Derived values pass through safe_float so extreme inputs degrade to 0
        ebitda_margin = safe_float(ebitda / revenue) if revenue > 0 else 0.0
        multiple = safe_float(asking / ebitda) if ebitda > 0 else 0.0

        equity_injection = safe_float(asking * (down_pct / 100))
        seller_note = safe_float(asking * (note_pct / 100))
        loan_amount = safe_float(asking - equity_injection - seller_note)

        loan_payment = safe_float(
            amortized_payment(
                loan_amount,
                safe_float(inputs.sba_rate_annual_pct),
                safe_float(inputs.sba_term_years),
            )
        )
        note_payment = safe_float(
            amortized_payment(
                seller_note,
                safe_float(inputs.seller_note_rate_annual_pct),
                safe_float(inputs.seller_note_term_years),
            )
        )

        annual_debt_service = safe_float((loan_payment + note_payment) * 12)
        dscr = safe_float(ebitda / annual_debt_service) if annual_debt_service > 0 else 0.0
        free_cash_flow = safe_float(ebitda - annual_debt_service)
        cash_on_cash = safe_float(free_cash_flow / equity_injection) if equity_injection > 0 else 0.0
        loan_eligible = asking <= self.sba_loan_limit

        has_data = revenue > 0 or ebitda > 0 or asking > 0
        factors: tuple[FactorScore, ...] = ()
        if has_data:
            factors = self._score(
                {
                    "multiple": multiple,
                    "ebitda_margin": ebitda_margin,
                    "dscr": dscr,
                    "loan_eligibility": 1.0 if loan_eligible else 0.0,
                    "cash_on_cash": cash_on_cash,
                }
            )
        score = sum(f.points for f in factors)

        warnings = self._structure_warnings(down_pct, note_pct, loan_amount)

        analysis = DealAnalysis(
            ebitda_margin=ebitda_margin,
            multiple=multiple,
            equity_injection=equity_injection,
            seller_note=seller_note,
            loan_amount=loan_amount,
            loan_monthly_payment=loan_payment,
            seller_note_monthly_payment=note_payment,
            annual_debt_service=annual_debt_service,
            dscr=dscr,
            free_cash_flow=free_cash_flow,
            cash_on_cash_return=cash_on_cash,
            loan_eligible=loan_eligible,
            has_data=has_data,
            score=score,
            label=score_label(score),
            notes=tuple(f.note for f in factors),
            factors=factors,
            warnings=warnings,
        )

        self.logger.debug(
            "Deal analyzed: multiple={:.2f} margin={:.3f} dscr={:.2f} score={}",
            multiple,
            ebitda_margin,
            dscr,
            score,
        )
        return analysis

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _score(self, metrics: dict[str, float]) -> tuple[FactorScore, ...]:
        """Score every factor that lands in a band, in table order."""
        scored: list[FactorScore] = []
        for factor in self.factors:
            band = factor.band_for(metrics[factor.name])
            if band is None:
                continue
            scored.append(
                FactorScore(
                    name=factor.name,
                    points=band.points,
                    max_points=factor.max_points,
                    tone=band.tone,
                    note=band.note,
                )
            )
        return tuple(scored)

    def _structure_warnings(self, down_pct: float, note_pct: float, loan_amount: float) -> tuple[str, ...]:
        warnings: list[str] = []
        if down_pct + note_pct > 100:
            warnings.append(
                f"Down payment ({down_pct:g}%) and seller note ({note_pct:g}%) exceed 100% of asking price"
            )
        if down_pct < 0 or note_pct < 0:
            warnings.append("Negative financing percentage")
        if loan_amount < 0:
            self.logger.warning("Structure leaves a negative senior loan amount ({:.2f})", loan_amount)
        return tuple(warnings)


__all__ = [
    "CASH_ON_CASH_FACTOR",
    "DSCR_FACTOR",
    "MARGIN_FACTOR",
    "MULTIPLE_FACTOR",
    "SBA_LOAN_LIMIT",
    "SCORE_LABELS",
    "ScoreBand",
    "ScoringFactor",
    "StructuringEngine",
    "amortized_payment",
    "loan_eligibility_factor",
    "score_label",
]
