"""Analytics engines for deal screening and search scorecards."""

from .models import (
    ActivityKind,
    ActivityPartitions,
    ActivityRecord,
    ActivitySummary,
    BreakdownEntry,
    ContactType,
    DealAnalysis,
    DealFinancialInputs,
    DealRecord,
    DealStage,
    FactorScore,
    GoalDefinition,
    GoalPeriod,
    GoalResult,
    PipelineSummary,
    RatioMetric,
    ScorecardReport,
    Status,
    Venue,
)
from .pacing import (
    first_of_month,
    first_of_quarter,
    month_label,
    monthly_status,
    pacing_status,
    quarter_label,
    quarterly_status,
)
from .records import (
    RecordsFileError,
    activity_from_row,
    deal_from_row,
    inputs_from_mapping,
    load_records_file,
    safe_float,
)
from .scorecard_engine import DEFAULT_GOALS, GOAL_KEYS, ScorecardEngine
from .structuring_engine import StructuringEngine, amortized_payment, score_label

__all__ = [
    # Models
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
    # Structuring Engine
    "StructuringEngine",
    "amortized_payment",
    "score_label",
    # Scorecard Engine
    "DEFAULT_GOALS",
    "GOAL_KEYS",
    "ScorecardEngine",
    # Pacing
    "first_of_month",
    "first_of_quarter",
    "month_label",
    "monthly_status",
    "pacing_status",
    "quarter_label",
    "quarterly_status",
    # Records
    "RecordsFileError",
    "activity_from_row",
    "deal_from_row",
    "inputs_from_mapping",
    "load_records_file",
    "safe_float",
]
