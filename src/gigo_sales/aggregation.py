"""Pure aggregation over report sets and plans.

Nothing here stores state. ``PlanRecord.current_total`` is the one cached
aggregate, and :func:`recompute_current_total` is its reference definition.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from gigo_sales.config import get_settings
from gigo_sales.errors import ValidationError
from gigo_sales.records import HUNDRED, ZERO, PlanRecord, ReportRecord, ReportStatus

DAYS_PER_MONTH = 30


class Timeframe(str, Enum):
    """Reporting periods offered on the agent dashboard."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class ProgressBand(str, Enum):
    """Colour band for a progress percentage."""

    RED = "red"
    AMBER = "amber"
    GREEN = "green"


@dataclass(frozen=True)
class PlanBreakdown:
    """Targets derived from a plan's total and window."""

    total_target: Decimal
    daily_target: Decimal
    monthly_target: Decimal
    category_targets: dict[str, Decimal]


@dataclass(frozen=True)
class TimeframeSales:
    total: Decimal
    count: int


def _approved(reports: Iterable[ReportRecord]) -> list[ReportRecord]:
    return [report for report in reports if report.status == ReportStatus.APPROVED]


def approved_total(reports: Iterable[ReportRecord]) -> Decimal:
    """Sum of report totals over approved reports."""
    return sum((report.total_amount for report in _approved(reports)), ZERO)


def category_breakdown(reports: Iterable[ReportRecord]) -> dict[str, Decimal]:
    """Per-category sums over approved reports."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for name in get_settings().sales_categories:
        totals[name] = ZERO
    for report in _approved(reports):
        for name, amount in report.category_amounts.items():
            totals[name] += amount
    return dict(totals)


def debt_ratio(reports: Iterable[ReportRecord]) -> Decimal:
    """Debt as a percentage of sales over approved reports (0 with no sales)."""
    approved = _approved(reports)
    total = sum((report.total_amount for report in approved), ZERO)
    if total == 0:
        return ZERO
    debt = sum((report.debt_amount for report in approved), ZERO)
    return debt / total * HUNDRED


def progress_percent(plan: PlanRecord | None, approved: Decimal) -> Decimal:
    """Approved sales as a percentage of the plan target (0 without a plan)."""
    if plan is None:
        return ZERO
    return approved / plan.total_target * HUNDRED


def category_target(plan: PlanRecord, category: str) -> Decimal:
    """Sub-target for one category: total target times its share."""
    try:
        share = plan.category_distribution[category]
    except KeyError:
        raise ValidationError(
            f"Plan for {plan.agent_id} has no share for category {category!r}"
        ) from None
    return plan.total_target * share / HUNDRED


def is_debt_over_limit(plan: PlanRecord, ratio: Decimal) -> bool:
    """True when the debt ratio strictly exceeds the plan's limit."""
    return ratio > plan.debt_limit_percent


def counts_toward(plan: PlanRecord | None, report: ReportRecord | None) -> bool:
    """Whether the report is part of the plan's current_total."""
    return (
        plan is not None
        and report is not None
        and report.agent_id == plan.agent_id
        and report.status == ReportStatus.APPROVED
        and plan.contains(report.report_date)
    )


def reports_in_window(plan: PlanRecord, reports: Iterable[ReportRecord]) -> list[ReportRecord]:
    return [
        report
        for report in reports
        if report.agent_id == plan.agent_id and plan.contains(report.report_date)
    ]


def recompute_current_total(plan: PlanRecord, reports: Iterable[ReportRecord]) -> Decimal:
    """Rebuild current_total from the authoritative report set."""
    return sum(
        (report.total_amount for report in reports if counts_toward(plan, report)),
        ZERO,
    )


def category_progress(plan: PlanRecord, reports: Iterable[ReportRecord]) -> dict[str, Decimal]:
    """Approved sales per category as a percentage of its sub-target."""
    breakdown = category_breakdown(reports_in_window(plan, reports))
    progress: dict[str, Decimal] = {}
    for name in plan.category_distribution:
        target = category_target(plan, name)
        sold = breakdown.get(name, ZERO)
        progress[name] = sold / target * HUNDRED if target else ZERO
    return progress


def plan_breakdown(plan: PlanRecord) -> PlanBreakdown:
    """Daily, monthly and per-category targets for a plan."""
    daily = plan.total_target / plan.window_days
    return PlanBreakdown(
        total_target=plan.total_target,
        daily_target=daily,
        monthly_target=daily * DAYS_PER_MONTH,
        category_targets={
            name: category_target(plan, name) for name in plan.category_distribution
        },
    )


def daily_totals(reports: Iterable[ReportRecord]) -> dict[date, Decimal]:
    """Approved sales summed per calendar date, in date order."""
    totals: dict[date, Decimal] = defaultdict(lambda: ZERO)
    for report in _approved(reports):
        totals[report.report_date] += report.total_amount
    return dict(sorted(totals.items()))


def _in_timeframe(day: date, timeframe: Timeframe, today: date) -> bool:
    if timeframe == Timeframe.DAILY:
        return day == today
    if timeframe == Timeframe.WEEKLY:
        return today - timedelta(days=7) <= day <= today
    if timeframe == Timeframe.MONTHLY:
        return day.year == today.year and day.month == today.month
    if timeframe == Timeframe.YEARLY:
        return day.year == today.year
    return True  # QUARTERLY covers the whole plan period


def sales_in_timeframe(
    reports: Iterable[ReportRecord],
    timeframe: Timeframe,
    today: date,
    status: ReportStatus | None = None,
) -> TimeframeSales:
    """Sum and count reports falling in a dashboard timeframe.

    Args:
        reports: Reports to consider.
        timeframe: Period to select.
        today: Reference date for the period.
        status: Only count reports in this status; all statuses when None.
    """
    selected = [
        report
        for report in reports
        if (status is None or report.status == status)
        and _in_timeframe(report.report_date, Timeframe(timeframe), today)
    ]
    return TimeframeSales(
        total=sum((report.total_amount for report in selected), ZERO),
        count=len(selected),
    )


def days_remaining(plan: PlanRecord, today: date) -> int:
    """Days left in the window, counting today and the end date; never negative."""
    return max(0, (plan.end_date - today).days + 1)


def progress_band(percent: Decimal) -> ProgressBand:
    settings = get_settings()
    if percent >= Decimal(str(settings.progress_green_from)):
        return ProgressBand.GREEN
    if percent >= Decimal(str(settings.progress_amber_from)):
        return ProgressBand.AMBER
    return ProgressBand.RED
