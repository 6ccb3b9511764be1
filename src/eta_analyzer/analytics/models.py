"""Shared dataclasses and enums for the analytics engines."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Status(Enum):
    """Traffic-light signal shared by score factors and goal pacing."""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class GoalPeriod(Enum):
    """Window a goal is measured over."""

    MONTH = "month"
    QUARTER = "quarter"


class ActivityKind(Enum):
    """Kinds of logged activity."""

    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    COFFEE = "coffee"
    NOTE = "note"
    CIM_REVIEW = "cim_review"
    SITE_VISIT = "site_visit"
    LOI_SENT = "loi_sent"
    CONFERENCE = "conference"
    LINKEDIN = "linkedin"
    INTRO_MADE = "intro_made"
    CRITERIA_SHARED = "criteria_shared"


class ContactType(Enum):
    """Category of the person an activity was logged against."""

    BROKER = "Broker / Intermediary"
    MA_ADVISOR = "M&A Advisor"
    BANKER = "Banker / Lender"
    SEARCHER = "Searcher / Peer"
    INVESTOR = "Investor"
    ACCOUNTANT = "CPA / Accountant"
    ATTORNEY = "Attorney / Lawyer"
    SELLER = "Seller / Owner"
    FORMER_COLLEAGUE = "Former Colleague"
    INDUSTRY_CONTACT = "Industry Contact"
    OTHER = "Other"


class Venue(Enum):
    """Channel or setting an activity happened in."""

    EMAIL = "Email"
    PHONE = "Phone Call"
    VIDEO = "Video Call / Zoom"
    IN_PERSON = "Coffee / In-Person"
    NETWORKING_EVENT = "Networking Event"
    CONFERENCE = "Conference / Trade Show"
    ALUMNI_MIXER = "Alumni Mixer"
    COHORT_GATHERING = "Cohort Gathering"
    LINKEDIN = "LinkedIn"
    CHAMBER_OF_COMMERCE = "Chamber of Commerce"
    INDUSTRY_ASSOCIATION = "Industry Association"
    OTHER = "Other"


class DealStage(Enum):
    """Pipeline stage of a tracked deal."""

    IDENTIFIED = "identified"
    INITIAL_REVIEW = "initial_review"
    OUTREACH = "outreach"
    DILIGENCE = "diligence"
    LOI = "loi"
    CLOSED = "closed"
    PASSED = "passed"


# ----------------------------------------------------------------------
# Deal structuring
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class DealFinancialInputs:
    """Financials and proposed financing structure for one business.

    Amounts are plain currency units. Percentages are expressed as 0-100.
    Structure defaults match the screener form a searcher starts from.
    """

    revenue: float = 0.0
    ebitda: float = 0.0
    asking_price: float = 0.0
    down_payment_pct: float = 10.0
    seller_note_pct: float = 10.0
    sba_rate_annual_pct: float = 10.5
    sba_term_years: float = 10.0
    seller_note_rate_annual_pct: float = 6.0
    seller_note_term_years: float = 5.0


@dataclass(frozen=True)
class FactorScore:
    """Points awarded for one scoring factor and the band it landed in."""

    name: str
    points: int
    max_points: int
    tone: Status
    note: str


@dataclass(frozen=True)
class DealAnalysis:
    """Derived deal metrics and attractiveness score."""

    ebitda_margin: float = 0.0
    multiple: float = 0.0
    equity_injection: float = 0.0
    seller_note: float = 0.0
    loan_amount: float = 0.0
    loan_monthly_payment: float = 0.0
    seller_note_monthly_payment: float = 0.0
    annual_debt_service: float = 0.0
    dscr: float = 0.0
    free_cash_flow: float = 0.0
    cash_on_cash_return: float = 0.0
    loan_eligible: bool = False
    has_data: bool = False
    score: int = 0
    label: str = "WEAK"
    notes: tuple[str, ...] = ()
    factors: tuple[FactorScore, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def total_monthly_payment(self) -> float:
        return self.loan_monthly_payment + self.seller_note_monthly_payment


# ----------------------------------------------------------------------
# Scorecard
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class ActivityRecord:
    """One logged outreach or deal activity."""

    timestamp: Optional[datetime] = None
    is_outbound: bool = False
    got_response: bool = False
    is_public_share: bool = False
    generated_lead: bool = False
    activity_kind: ActivityKind = ActivityKind.NOTE
    contact_type: Optional[ContactType] = None
    venue: Optional[Venue] = None
    associated_deal_id: Optional[str] = None
    description_length: int = 0

    @property
    def is_networking(self) -> bool:
        return not self.associated_deal_id


@dataclass(frozen=True)
class DealRecord:
    """Pipeline deal as far as the scorecard is concerned."""

    stage: DealStage = DealStage.IDENTIFIED
    deal_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.stage not in (DealStage.PASSED, DealStage.CLOSED)


@dataclass(frozen=True)
class ActivityPartitions:
    """Activities split by period window and networking/deal category."""

    month: tuple[ActivityRecord, ...]
    month_networking: tuple[ActivityRecord, ...]
    quarter: tuple[ActivityRecord, ...]
    quarter_networking: tuple[ActivityRecord, ...]


@dataclass(frozen=True)
class GoalDefinition:
    """A periodic goal and how its actual value is counted."""

    key: str
    name: str
    period: GoalPeriod
    target: int
    actual_computation: Callable[[ActivityPartitions], int]


@dataclass(frozen=True)
class GoalResult:
    """Progress of one goal at the reference instant."""

    key: str
    name: str
    period: GoalPeriod
    actual: int
    target: int
    status: Status

    @property
    def progress_pct(self) -> float:
        if self.target <= 0:
            return 0.0
        return min(self.actual / self.target, 1.0) * 100


@dataclass(frozen=True)
class RatioMetric:
    """A percentage metric with its target, e.g. response rate."""

    name: str
    value_pct: int
    target_pct: int
    status: Status


@dataclass(frozen=True)
class BreakdownEntry:
    label: str
    count: int


@dataclass(frozen=True)
class ActivitySummary:
    total: int = 0
    this_month: int = 0
    networking: int = 0


@dataclass(frozen=True)
class PipelineSummary:
    reviewed: int = 0
    active: int = 0
    closed: int = 0
    passed: int = 0


@dataclass(frozen=True)
class ScorecardReport:
    """Everything the scorecard view renders for one reference instant."""

    now: datetime
    month_label: str
    quarter_label: str
    monthly_goals: tuple[GoalResult, ...]
    quarterly_goals: tuple[GoalResult, ...]
    response_rate: RatioMetric
    cim_compliance: RatioMetric
    overall_score: int
    overall_label: str
    by_contact_type: tuple[BreakdownEntry, ...] = ()
    by_venue: tuple[BreakdownEntry, ...] = ()
    activity_summary: ActivitySummary = field(default_factory=ActivitySummary)
    pipeline: PipelineSummary = field(default_factory=PipelineSummary)

    @property
    def goals(self) -> tuple[GoalResult, ...]:
        return self.monthly_goals + self.quarterly_goals

    def goal(self, key: str) -> GoalResult:
        """Look up a goal result by key."""
        for result in self.goals:
            if result.key == key:
                return result
        raise KeyError(key)


__all__ = [
    "ActivityKind",
    "ActivityPartitions",
    "ActivityRecord",
    "ActivitySummary",
    "BreakdownEntry",
    "ContactType",
    "DealAnalysis",
    "DealFinancialInputs",
    "DealRecord",
    "DealStage",
    "FactorScore",
    "GoalDefinition",
    "GoalPeriod",
    "GoalResult",
    "PipelineSummary",
    "RatioMetric",
    "ScorecardReport",
    "Status",
    "Venue",
]
