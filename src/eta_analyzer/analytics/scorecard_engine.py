"""Goal pacing and KPI scorecard engine.

Aggregates the logged activity history into monthly and quarterly goal
progress, two all-time compliance ratios and an overall search-health score.
The reference instant is always passed in, so period boundaries are
deterministic.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from loguru import logger

from .models import (
    ActivityKind,
    ActivityPartitions,
    ActivityRecord,
    ActivitySummary,
    BreakdownEntry,
    ContactType,
    DealRecord,
    DealStage,
    GoalDefinition,
    GoalPeriod,
    GoalResult,
    PipelineSummary,
    RatioMetric,
    ScorecardReport,
    Status,
)
from .pacing import (
    in_window,
    month_label,
    pacing_status,
    period_start,
    quarter_label,
)
from .records import activity_from_row, deal_from_row

BROKER_CONTACT_TYPES = frozenset({ContactType.BROKER, ContactType.MA_ADVISOR, ContactType.BANKER})
MEETING_KINDS = frozenset({ActivityKind.MEETING, ActivityKind.COFFEE})

RESPONSE_RATE_TARGET = 40
CIM_COMPLIANCE_TARGET = 100
CIM_COMPLIANCE_GREEN_PCT = 90
CIM_MIN_DESCRIPTION_LENGTH = 20

OVERALL_LABELS: tuple[tuple[int, str], ...] = (
    (80, "STRONG"),
    (50, "ON PACE"),
)

# Goals rolled into the overall score alongside the response rate
OVERALL_SCORE_GOALS = ("outbound_contacts", "meetings", "criteria_shared", "inbound_leads")


def _count(records: Iterable[ActivityRecord], predicate: Callable[[ActivityRecord], bool]) -> int:
    return sum(1 for record in records if predicate(record))


DEFAULT_GOALS: tuple[GoalDefinition, ...] = (
    GoalDefinition(
        key="outbound_contacts",
        name="Outbound networking contacts",
        period=GoalPeriod.MONTH,
        target=3,
        actual_computation=lambda p: _count(p.month_networking, lambda a: a.is_outbound),
    ),
    GoalDefinition(
        key="broker_contacts",
        name="New broker/banker/advisor contacts",
        period=GoalPeriod.MONTH,
        target=3,
        actual_computation=lambda p: _count(p.month_networking, lambda a: a.contact_type in BROKER_CONTACT_TYPES),
    ),
    GoalDefinition(
        key="criteria_shared",
        name="Criteria shared publicly",
        period=GoalPeriod.MONTH,
        target=3,
        actual_computation=lambda p: _count(p.month, lambda a: a.is_public_share),
    ),
    GoalDefinition(
        key="intros_made",
        name="Give-first intros made",
        period=GoalPeriod.MONTH,
        target=1,
        actual_computation=lambda p: _count(p.month, lambda a: a.activity_kind is ActivityKind.INTRO_MADE),
    ),
    GoalDefinition(
        key="meetings",
        name="Meetings completed",
        period=GoalPeriod.QUARTER,
        target=3,
        actual_computation=lambda p: _count(p.quarter_networking, lambda a: a.activity_kind in MEETING_KINDS),
    ),
    GoalDefinition(
        key="cims_received",
        name="Qualified CIMs received",
        period=GoalPeriod.QUARTER,
        target=1,
        actual_computation=lambda p: _count(p.quarter, lambda a: a.activity_kind is ActivityKind.CIM_REVIEW),
    ),
    GoalDefinition(
        key="inbound_leads",
        name="Inbound leads generated",
        period=GoalPeriod.QUARTER,
        target=2,
        actual_computation=lambda p: _count(p.quarter, lambda a: a.generated_lead),
    ),
    GoalDefinition(
        key="warm_intros",
        name="Warm intros to sellers/brokers",
        period=GoalPeriod.QUARTER,
        target=1,
        actual_computation=lambda p: _count(
            p.quarter, lambda a: a.activity_kind is ActivityKind.INTRO_MADE and a.generated_lead
        ),
    ),
)

GOAL_KEYS = tuple(goal.key for goal in DEFAULT_GOALS)


def round_half_up(value: float) -> int:
    """Round halves upward, as dashboards usually display percentages."""
    return int(math.floor(value + 0.5))


def overall_label(score: int) -> str:
    for floor, label in OVERALL_LABELS:
        if score >= floor:
            return label
    return "NEEDS ATTENTION"


def achievement_ratio(actual: float, target: float) -> float:
    """Share of the target reached, capped at 1. A zero target counts as met."""
    if target <= 0:
        return 1.0
    return min(actual / target, 1.0)


def partition_activities(activities: Iterable[ActivityRecord], now: datetime) -> ActivityPartitions:
    """Split activities into this-month and this-quarter windows."""
    month_start = period_start(GoalPeriod.MONTH, now)
    quarter_start = period_start(GoalPeriod.QUARTER, now)

    month = tuple(a for a in activities if in_window(a.timestamp, month_start))
    quarter = tuple(a for a in activities if in_window(a.timestamp, quarter_start))
    return ActivityPartitions(
        month=month,
        month_networking=tuple(a for a in month if a.is_networking),
        quarter=quarter,
        quarter_networking=tuple(a for a in quarter if a.is_networking),
    )


def _breakdown(labels: Iterable[str]) -> tuple[BreakdownEntry, ...]:
    counts: dict[str, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    # sorted() is stable, so ties keep first-encountered order
    ordered = sorted(counts.items(), key=lambda item: -item[1])
    return tuple(BreakdownEntry(label=label, count=count) for label, count in ordered)


class ScorecardEngine:
    """Build the searcher's goal scorecard from raw activity history."""

    def __init__(
        self,
        goal_targets: Optional[Mapping[str, int]] = None,
        response_rate_target: int = RESPONSE_RATE_TARGET,
        cim_min_description_length: int = CIM_MIN_DESCRIPTION_LENGTH,
        cim_compliance_green_pct: int = CIM_COMPLIANCE_GREEN_PCT,
    ) -> None:
        """Initialize the engine.

        Args:
            goal_targets: Optional target overrides keyed by goal key
                          (e.g. ``{"meetings": 5}``).
            response_rate_target: Response-rate target in percent.
            cim_min_description_length: Characters a CIM review description
                                        needs to count as logged.
            cim_compliance_green_pct: Compliance percentage that reads green.

        Raises:
            ValueError: If an override names an unknown goal or is negative.
        """
        self.logger = logger.bind(module="scorecard_engine")
        overrides = dict(goal_targets or {})
        unknown = set(overrides) - set(GOAL_KEYS)
        if unknown:
            raise ValueError(f"Unknown goal key(s): {sorted(unknown)}. Valid keys: {list(GOAL_KEYS)}")
        negative = sorted(key for key, target in overrides.items() if target < 0)
        if negative:
            raise ValueError(f"Goal targets must be non-negative: {negative}")

        self.goals: tuple[GoalDefinition, ...] = tuple(
            replace(goal, target=int(overrides.get(goal.key, goal.target))) for goal in DEFAULT_GOALS
        )
        self.response_rate_target = response_rate_target
        self.cim_min_description_length = cim_min_description_length
        self.cim_compliance_green_pct = cim_compliance_green_pct

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def build_report(
        self,
        activities: Iterable[ActivityRecord | Mapping[str, Any]],
        deals: Iterable[DealRecord | Mapping[str, Any]],
        now: datetime,
    ) -> ScorecardReport:
        """Compute the scorecard at ``now``.

        Raw store rows are accepted in place of records and adapted on the
        fly. The inputs are only read.

        Args:
            activities: Logged activities, any order.
            deals: Pipeline deals.
            now: Reference instant for period windows and pacing.

        Returns:
            ScorecardReport for the month and quarter containing ``now``.
        """
        activity_list = tuple(a if isinstance(a, ActivityRecord) else activity_from_row(a) for a in activities)
        deal_list = tuple(d if isinstance(d, DealRecord) else deal_from_row(d) for d in deals)

        partitions = partition_activities(activity_list, now)
        results = tuple(self._evaluate_goal(goal, partitions, now) for goal in self.goals)

        response_rate = self.response_rate(activity_list)
        cim_compliance = self.cim_compliance(activity_list)
        score = self.overall_score(results, response_rate)

        networking = tuple(a for a in activity_list if a.is_networking)
        report = ScorecardReport(
            now=now,
            month_label=month_label(now),
            quarter_label=quarter_label(now),
            monthly_goals=tuple(r for r in results if r.period is GoalPeriod.MONTH),
            quarterly_goals=tuple(r for r in results if r.period is GoalPeriod.QUARTER),
            response_rate=response_rate,
            cim_compliance=cim_compliance,
            overall_score=score,
            overall_label=overall_label(score),
            by_contact_type=_breakdown(a.contact_type.value for a in networking if a.contact_type is not None),
            by_venue=_breakdown(a.venue.value for a in networking if a.venue is not None),
            activity_summary=ActivitySummary(
                total=len(activity_list),
                this_month=len(partitions.month),
                networking=len(networking),
            ),
            pipeline=self._pipeline(deal_list),
        )

        self.logger.info(
            "Scorecard built for {}: {} activities, overall score {} ({})",
            report.month_label,
            len(activity_list),
            score,
            report.overall_label,
        )
        return report

    def response_rate(self, activities: Iterable[ActivityRecord]) -> RatioMetric:
        """All-time response rate on outbound networking outreach."""
        outbound = [a for a in activities if a.is_outbound and a.is_networking]
        responses = _count(outbound, lambda a: a.got_response)
        value = round_half_up(responses / len(outbound) * 100) if outbound else 0
        status = Status.GREEN if value >= self.response_rate_target else Status.RED
        return RatioMetric(
            name="Response rate (all-time)",
            value_pct=value,
            target_pct=self.response_rate_target,
            status=status,
        )

    def cim_compliance(self, activities: Iterable[ActivityRecord]) -> RatioMetric:
        """Share of CIM reviews logged with a real decision note.

        With no CIM reviews at all the searcher is vacuously compliant.
        """
        cims = [a for a in activities if a.activity_kind is ActivityKind.CIM_REVIEW]
        logged = _count(cims, lambda a: a.description_length > self.cim_min_description_length)
        value = round_half_up(logged / len(cims) * 100) if cims else 100
        status = Status.GREEN if value >= self.cim_compliance_green_pct else Status.YELLOW
        return RatioMetric(
            name="CIM log compliance",
            value_pct=value,
            target_pct=CIM_COMPLIANCE_TARGET,
            status=status,
        )

    def overall_score(self, results: Iterable[GoalResult], response_rate: RatioMetric) -> int:
        """Average capped achievement of the headline goals, as 0-100."""
        by_key = {r.key: r for r in results}
        ratios = [achievement_ratio(by_key[key].actual, by_key[key].target) for key in OVERALL_SCORE_GOALS]
        ratios.insert(1, achievement_ratio(response_rate.value_pct, response_rate.target_pct))
        return round_half_up(sum(ratios) / len(ratios) * 100)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _evaluate_goal(self, goal: GoalDefinition, partitions: ActivityPartitions, now: datetime) -> GoalResult:
        actual = goal.actual_computation(partitions)
        return GoalResult(
            key=goal.key,
            name=goal.name,
            period=goal.period,
            actual=actual,
            target=goal.target,
            status=pacing_status(goal.period, actual, goal.target, now),
        )

    def _pipeline(self, deals: tuple[DealRecord, ...]) -> PipelineSummary:
        return PipelineSummary(
            reviewed=len(deals),
            active=sum(1 for d in deals if d.is_active),
            closed=sum(1 for d in deals if d.stage is DealStage.CLOSED),
            passed=sum(1 for d in deals if d.stage is DealStage.PASSED),
        )


__all__ = [
    "BROKER_CONTACT_TYPES",
    "DEFAULT_GOALS",
    "GOAL_KEYS",
    "MEETING_KINDS",
    "OVERALL_SCORE_GOALS",
    "RESPONSE_RATE_TARGET",
    "ScorecardEngine",
    "achievement_ratio",
    "overall_label",
    "partition_activities",
    "round_half_up",
]
