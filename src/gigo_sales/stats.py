"""Per-agent dashboard summary built from the aggregation engine and reward ladder."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from gigo_sales.aggregation import (
    ProgressBand,
    approved_total,
    category_breakdown,
    category_progress,
    days_remaining,
    debt_ratio,
    is_debt_over_limit,
    progress_band,
    progress_percent,
    reports_in_window,
)
from gigo_sales.bonus import BonusLadder, BonusStanding, get_default_ladder
from gigo_sales.records import HUNDRED, ZERO, PlanRecord, ReportRecord, ReportStatus


@dataclass(frozen=True)
class AgentStats:
    """Everything the agent and director dashboards show for one agent."""

    agent_id: str
    total_sales: Decimal
    category_sales: dict[str, Decimal]
    category_progress: dict[str, Decimal]
    progress_percent: Decimal
    debt_ratio: Decimal
    debt_over_limit: bool
    band: ProgressBand
    bonus: BonusStanding
    pending_count: int = 0
    days_remaining: int = 0

    @property
    def is_completed(self) -> bool:
        return self.progress_percent >= HUNDRED


def build_agent_stats(
    agent_id: str,
    plan: PlanRecord | None,
    reports: Iterable[ReportRecord],
    today: date,
    ladder: BonusLadder | None = None,
) -> AgentStats:
    """Summarize one agent's reports against their plan.

    With a plan only in-window reports count; without one, every approved
    report of the agent is summed and progress is 0.
    """
    own = [report for report in reports if report.agent_id == agent_id]
    counted = reports_in_window(plan, own) if plan is not None else own
    ladder = ladder or get_default_ladder()

    total = approved_total(counted)
    ratio = debt_ratio(counted)
    progress = progress_percent(plan, total)

    return AgentStats(
        agent_id=agent_id,
        total_sales=total,
        category_sales=category_breakdown(counted),
        category_progress=category_progress(plan, own) if plan is not None else {},
        progress_percent=progress,
        debt_ratio=ratio,
        debt_over_limit=is_debt_over_limit(plan, ratio) if plan is not None else False,
        band=progress_band(progress),
        bonus=ladder.standing(progress, plan, total),
        pending_count=sum(1 for report in own if report.status == ReportStatus.PENDING),
        days_remaining=days_remaining(plan, today) if plan is not None else 0,
    )


def team_total(plans: Iterable[PlanRecord]) -> Decimal:
    """Sum of current totals across plans (director overview)."""
    return sum((plan.current_total for plan in plans), ZERO)
