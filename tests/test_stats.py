"""Tests for per-agent dashboard statistics."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from gigo_sales.aggregation import ProgressBand
from gigo_sales.bonus import BonusLadder
from gigo_sales.records import PlanRecord, ReportRecord, ReportStatus
from gigo_sales.stats import build_agent_stats, team_total
from tests.helpers import IN_WINDOW, OUT_OF_WINDOW, amounts


def _report(
    report_id, status=ReportStatus.APPROVED, day=IN_WINDOW, debt=0, agent_id="muxlisa", **cats
):
    return ReportRecord(
        id=report_id,
        agent_id=agent_id,
        report_date=day,
        category_amounts=amounts(**cats),
        debt_amount=debt,
        status=status,
    )


class TestBuildAgentStats:
    def test_summary_for_agent_with_plan(self, plan):
        reports = [
            _report("a", qurt=75000000, toys=200000000, milchofka=180000000, debt=40000000),
            _report("p", status=ReportStatus.PENDING, qurt=1),
            _report("late", qurt=999, day=OUT_OF_WINDOW),
            _report("other", qurt=5, agent_id="aziza"),
        ]
        ladder = BonusLadder.from_pairs([(85, "A"), (90, "B"), (100, "C")])

        stats = build_agent_stats("muxlisa", plan, reports, date(2025, 3, 1), ladder)

        assert stats.total_sales == Decimal("455000000")
        assert stats.progress_percent == Decimal("91")
        assert stats.category_sales["toys"] == Decimal("200000000")
        assert stats.category_progress["qurt"] == Decimal("100")
        assert stats.band == ProgressBand.GREEN
        assert stats.bonus.reached_prizes == ["A", "B"]
        assert stats.bonus.remaining_amount == Decimal("45000000")
        assert stats.debt_over_limit is True
        assert stats.pending_count == 1
        assert stats.days_remaining == 31
        assert stats.is_completed is False

    def test_summary_without_plan(self):
        reports = [_report("a", qurt=100)]

        stats = build_agent_stats("muxlisa", None, reports, date(2025, 3, 1))

        assert stats.total_sales == Decimal("100")
        assert stats.progress_percent == Decimal("0")
        assert stats.band == ProgressBand.RED
        assert stats.category_progress == {}
        assert stats.debt_over_limit is False
        assert stats.bonus.next.threshold == Decimal("85")

    def test_completed_plan(self):
        plan = PlanRecord.create("muxlisa", 100, date(2025, 1, 1))

        stats = build_agent_stats("muxlisa", plan, [_report("a", toys=100)], date(2025, 1, 2))

        assert stats.is_completed is True
        assert stats.bonus.next is None


def test_team_total(plan):
    plans = [
        replace(plan, current_total=Decimal("30")),
        replace(plan, agent_id="aziza", current_total=Decimal("12")),
    ]

    assert team_total(plans) == Decimal("42")
