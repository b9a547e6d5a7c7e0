"""Approval state machine for sales reports.

Every mutating operation runs inside one store transaction and applies the
compensating change to the agent's plan, so that ``plan.current_total``
always equals the sum of approved, in-window report totals.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Literal

import structlog

from gigo_sales.aggregation import counts_toward, recompute_current_total
from gigo_sales.audit import AuditAction, AuditLog
from gigo_sales.config import get_settings
from gigo_sales.errors import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from gigo_sales.records import (
    ZERO,
    Actor,
    PlanRecord,
    ReportRecord,
    ReportStatus,
    Role,
    check_category_keys,
)
from gigo_sales.storage import ReportStore

logger = structlog.get_logger(__name__)

# Moves back to PENDING happen only through edit_amounts.
TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.APPROVED, ReportStatus.REJECTED}),
    ReportStatus.APPROVED: frozenset({ReportStatus.PENDING}),
    ReportStatus.REJECTED: frozenset({ReportStatus.PENDING}),
}


class ApprovalWorkflow:
    """Submit, approve, reject, edit and delete reports; configure plans."""

    def __init__(
        self,
        store: ReportStore,
        audit_log: AuditLog | None = None,
        categories: list[str] | None = None,
        reconcile_mode: Literal["delta", "recompute"] | None = None,
    ) -> None:
        settings = get_settings()
        self._store = store
        self._audit_log = audit_log if audit_log is not None else AuditLog()
        self._categories = list(categories or settings.sales_categories)
        self._reconcile_mode = reconcile_mode or settings.reconcile_mode
        self._logger = logger.bind(component="approval_workflow")

    @property
    def audit_log(self) -> AuditLog:
        return self._audit_log

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    # === Permissions ===

    @staticmethod
    def _require_director(actor: Actor, operation: str) -> None:
        if not actor.is_director:
            raise PermissionDeniedError(
                f"Only a director may {operation} (actor {actor.name!r} is {actor.role.value})"
            )

    @staticmethod
    def _require_own_agent(actor: Actor, agent_id: str, operation: str) -> None:
        if actor.role != Role.AGENT:
            raise PermissionDeniedError(f"Only an agent may {operation}")
        if actor.actor_id != agent_id:
            raise PermissionDeniedError(
                f"Agent {actor.actor_id!r} may not {operation} for agent {agent_id!r}"
            )

    @staticmethod
    def _require_editor(actor: Actor, report: ReportRecord) -> None:
        if actor.is_director:
            return
        if actor.actor_id != report.agent_id:
            raise PermissionDeniedError(
                f"Agent {actor.actor_id!r} may not edit report {report.id} "
                f"owned by {report.agent_id!r}"
            )

    @staticmethod
    def _check_transition(report: ReportRecord, target: ReportStatus) -> None:
        if target not in TRANSITIONS[report.status]:
            raise InvalidTransitionError(
                f"Report {report.id} is {report.status.value}; cannot move to {target.value}",
                current_status=report.status,
                requested=target.value,
            )

    # === Plan reconciliation ===

    def _reconcile(
        self,
        store: ReportStore,
        agent_id: str,
        before: ReportRecord | None,
        after: ReportRecord | None,
    ) -> PlanRecord | None:
        """Apply the plan change implied by a report moving from before to after."""
        plan = store.get_plan(agent_id)
        if plan is None:
            if after is not None and after.is_approved:
                self._logger.info(
                    "plan_credit_deferred",
                    agent_id=agent_id,
                    report_id=after.id,
                    amount=str(after.total_amount),
                )
            return None

        if self._reconcile_mode == "recompute":
            new_total = recompute_current_total(plan, store.list_reports(agent_id))
        else:
            old_share = before.total_amount if counts_toward(plan, before) else ZERO
            new_share = after.total_amount if counts_toward(plan, after) else ZERO
            new_total = max(ZERO, plan.current_total - old_share) + new_share

        if after is not None and after.is_approved and not plan.contains(after.report_date):
            self._logger.warning(
                "plan_credit_skipped_out_of_window",
                agent_id=agent_id,
                report_id=after.id,
                report_date=after.report_date.isoformat(),
            )

        if new_total == plan.current_total:
            return plan

        updated = replace(plan, current_total=new_total)
        store.put_plan(updated)
        self._logger.info(
            "plan_credited" if new_total > plan.current_total else "plan_debited",
            agent_id=agent_id,
            previous_total=str(plan.current_total),
            current_total=str(new_total),
        )
        return updated

    # === Report operations ===

    def submit(
        self,
        agent_id: str,
        category_amounts: Mapping[str, Any],
        debt_amount: Any,
        report_date: date,
        *,
        actor: Actor,
    ) -> ReportRecord:
        """Create a PENDING report for the acting agent."""
        self._require_own_agent(actor, agent_id, "submit reports")
        report = ReportRecord.create(
            agent_id=agent_id,
            category_amounts=category_amounts,
            debt_amount=debt_amount,
            report_date=report_date,
            agent_name=actor.name,
            categories=self._categories,
        )

        def _apply(store: ReportStore) -> ReportRecord:
            store.put_report(report)
            return report

        self._store.run_transaction(_apply)
        self._audit_log.record(
            AuditAction.SALE_SUBMITTED,
            actor,
            details=f"{report.report_date.isoformat()}: {report.total_amount}",
            agent_id=agent_id,
            report_id=report.id,
        )
        self._logger.info(
            "report_submitted",
            report_id=report.id,
            agent_id=agent_id,
            total=str(report.total_amount),
        )
        return report

    def approve(self, report_id: str, *, actor: Actor) -> ReportRecord:
        """Approve a PENDING report and credit the agent's plan."""
        self._require_director(actor, "approve reports")

        def _apply(store: ReportStore) -> ReportRecord:
            report = store.get_report(report_id)
            self._check_transition(report, ReportStatus.APPROVED)
            approved = replace(report, status=ReportStatus.APPROVED)
            store.put_report(approved)
            self._reconcile(store, report.agent_id, before=report, after=approved)
            return approved

        approved = self._store.run_transaction(_apply)
        self._audit_log.record(
            AuditAction.SALE_APPROVED,
            actor,
            details=str(approved.total_amount),
            agent_id=approved.agent_id,
            report_id=approved.id,
        )
        self._logger.info(
            "report_approved",
            report_id=approved.id,
            agent_id=approved.agent_id,
            total=str(approved.total_amount),
        )
        return approved

    def reject(self, report_id: str, *, actor: Actor) -> ReportRecord:
        """Reject a PENDING report. Nothing was counted, so the plan is untouched."""
        self._require_director(actor, "reject reports")

        def _apply(store: ReportStore) -> ReportRecord:
            report = store.get_report(report_id)
            self._check_transition(report, ReportStatus.REJECTED)
            rejected = replace(report, status=ReportStatus.REJECTED)
            store.put_report(rejected)
            return rejected

        rejected = self._store.run_transaction(_apply)
        self._audit_log.record(
            AuditAction.SALE_REJECTED,
            actor,
            agent_id=rejected.agent_id,
            report_id=rejected.id,
        )
        self._logger.info("report_rejected", report_id=rejected.id, agent_id=rejected.agent_id)
        return rejected

    def edit_amounts(
        self,
        report_id: str,
        new_category_amounts: Mapping[str, Any],
        new_debt_amount: Any,
        *,
        actor: Actor,
        report_date: date | None = None,
    ) -> ReportRecord:
        """Replace a report's amounts and send it back to PENDING.

        An APPROVED report first has its old total reversed from the plan.
        The owning agent or a director may edit; ``actor.name`` is stamped
        as ``last_edited_by``.
        """

        def _apply(store: ReportStore) -> tuple[ReportRecord, ReportRecord]:
            report = store.get_report(report_id)
            self._require_editor(actor, report)
            check_category_keys(new_category_amounts, self._categories)
            edited = replace(
                report,
                category_amounts=dict(new_category_amounts),
                debt_amount=new_debt_amount,
                report_date=report_date or report.report_date,
                status=ReportStatus.PENDING,
                last_edited_by=actor.name,
            )
            store.put_report(edited)
            self._reconcile(store, report.agent_id, before=report, after=edited)
            return report, edited

        previous, edited = self._store.run_transaction(_apply)
        self._audit_log.record(
            AuditAction.SALE_EDITED,
            actor,
            details=f"{previous.total_amount} -> {edited.total_amount}",
            agent_id=edited.agent_id,
            report_id=edited.id,
        )
        self._logger.info(
            "report_edited",
            report_id=edited.id,
            agent_id=edited.agent_id,
            previous_status=previous.status.value,
            previous_total=str(previous.total_amount),
            total=str(edited.total_amount),
            editor=actor.name,
        )
        return edited

    def delete(self, report_id: str, *, actor: Actor) -> ReportRecord:
        """Remove a report, reversing its contribution if it was approved."""
        self._require_director(actor, "delete reports")

        def _apply(store: ReportStore) -> ReportRecord:
            report = store.get_report(report_id)
            store.delete_report(report_id)
            self._reconcile(store, report.agent_id, before=report, after=None)
            return report

        removed = self._store.run_transaction(_apply)
        self._audit_log.record(
            AuditAction.SALE_DELETED,
            actor,
            details=f"{removed.status.value}: {removed.total_amount}",
            agent_id=removed.agent_id,
            report_id=removed.id,
        )
        self._logger.info(
            "report_deleted",
            report_id=removed.id,
            agent_id=removed.agent_id,
            status=removed.status.value,
        )
        return removed

    def get_report(self, report_id: str) -> ReportRecord:
        return self._store.get_report(report_id)

    # === Plan operations ===

    def get_plan(self, agent_id: str) -> PlanRecord:
        plan = self._store.get_plan(agent_id)
        if plan is None:
            raise NotFoundError(f"No active plan for agent {agent_id}")
        return plan

    def configure_plan(
        self,
        agent_id: str,
        *,
        actor: Actor,
        total_target: Any = None,
        start_date: date | None = None,
        end_date: date | None = None,
        debt_limit_percent: Any = None,
        category_distribution: Mapping[str, Any] | None = None,
    ) -> PlanRecord:
        """Create the agent's plan or update the given fields of it.

        ``current_total`` is rebuilt from the approved reports, which also
        applies credits deferred while the agent had no plan.
        """
        self._require_director(actor, "configure plans")

        def _apply(store: ReportStore) -> PlanRecord:
            existing = store.get_plan(agent_id)
            if existing is None:
                if total_target is None or start_date is None:
                    raise ValidationError("A new plan needs total_target and start_date")
                plan = PlanRecord.create(
                    agent_id=agent_id,
                    total_target=total_target,
                    start_date=start_date,
                    end_date=end_date,
                    debt_limit_percent=debt_limit_percent,
                    category_distribution=category_distribution,
                )
            else:
                changes: dict[str, Any] = {
                    "total_target": total_target,
                    "start_date": start_date,
                    "end_date": end_date,
                    "debt_limit_percent": debt_limit_percent,
                    "category_distribution": (
                        dict(category_distribution) if category_distribution is not None else None
                    ),
                }
                plan = replace(
                    existing, **{key: value for key, value in changes.items() if value is not None}
                )

            unknown = sorted(set(plan.category_distribution) - set(self._categories))
            if unknown:
                raise ValidationError(
                    f"Distribution names unknown categories: {', '.join(unknown)}",
                    details={"unknown": unknown},
                )

            plan = replace(
                plan, current_total=recompute_current_total(plan, store.list_reports(agent_id))
            )
            store.put_plan(plan)
            return plan

        plan = self._store.run_transaction(_apply)
        self._audit_log.record(
            AuditAction.PLAN_UPDATED,
            actor,
            details=(
                f"target={plan.total_target} window={plan.start_date.isoformat()}"
                f"..{plan.end_date.isoformat()}"
            ),
            agent_id=agent_id,
        )
        self._logger.info(
            "plan_configured",
            agent_id=agent_id,
            total_target=str(plan.total_target),
            current_total=str(plan.current_total),
        )
        return plan

    def reconcile_plan(self, agent_id: str, *, actor: Actor) -> PlanRecord:
        """Recompute and persist current_total from scratch."""
        self._require_director(actor, "reconcile plans")

        def _apply(store: ReportStore) -> tuple[PlanRecord, Decimal]:
            plan = store.get_plan(agent_id)
            if plan is None:
                raise NotFoundError(f"No active plan for agent {agent_id}")
            recomputed = replace(
                plan, current_total=recompute_current_total(plan, store.list_reports(agent_id))
            )
            store.put_plan(recomputed)
            return recomputed, plan.current_total

        plan, previous_total = self._store.run_transaction(_apply)
        if plan.current_total != previous_total:
            self._audit_log.record(
                AuditAction.PLAN_UPDATED,
                actor,
                details=f"current_total {previous_total} -> {plan.current_total}",
                agent_id=agent_id,
            )
            self._logger.warning(
                "plan_total_drift_corrected",
                agent_id=agent_id,
                previous_total=str(previous_total),
                current_total=str(plan.current_total),
            )
        return plan
