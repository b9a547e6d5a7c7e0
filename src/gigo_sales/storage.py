"""Storage collaborator contract and an in-memory implementation."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TypeVar

import structlog

from gigo_sales.errors import NotFoundError
from gigo_sales.records import PlanRecord, ReportRecord

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ReportStore(ABC):
    """What the approval workflow needs from persistence.

    Implementations must make :meth:`run_transaction` atomic over every
    report and plan write issued inside it.
    """

    @abstractmethod
    def get_report(self, report_id: str) -> ReportRecord:
        """Return the report or raise NotFoundError."""
        pass

    @abstractmethod
    def put_report(self, report: ReportRecord) -> None:
        pass

    @abstractmethod
    def delete_report(self, report_id: str) -> None:
        pass

    @abstractmethod
    def list_reports(self, agent_id: str | None = None) -> list[ReportRecord]:
        """All reports, or only those of one agent."""
        pass

    @abstractmethod
    def get_plan(self, agent_id: str) -> PlanRecord | None:
        pass

    @abstractmethod
    def put_plan(self, plan: PlanRecord) -> None:
        pass

    @abstractmethod
    def run_transaction(self, fn: Callable[[ReportStore], T]) -> T:
        """Run ``fn`` atomically; nothing it wrote survives if it raises."""
        pass


class InMemoryReportStore(ReportStore):
    """Dict-backed store with snapshot/rollback transactions.

    Records are frozen with read-only mappings, so a shallow copy of each
    dict is a full snapshot.
    """

    def __init__(
        self,
        reports: list[ReportRecord] | None = None,
        plans: list[PlanRecord] | None = None,
    ) -> None:
        self._reports: dict[str, ReportRecord] = {r.id: r for r in reports or []}
        self._plans: dict[str, PlanRecord] = {p.agent_id: p for p in plans or []}
        self._lock = threading.RLock()
        self._logger = logger.bind(component="in_memory_store")

    def get_report(self, report_id: str) -> ReportRecord:
        with self._lock:
            try:
                return self._reports[report_id]
            except KeyError:
                raise NotFoundError(f"Report {report_id} not found") from None

    def put_report(self, report: ReportRecord) -> None:
        with self._lock:
            self._reports[report.id] = report

    def delete_report(self, report_id: str) -> None:
        with self._lock:
            if self._reports.pop(report_id, None) is None:
                raise NotFoundError(f"Report {report_id} not found")

    def list_reports(self, agent_id: str | None = None) -> list[ReportRecord]:
        with self._lock:
            return [
                report
                for report in self._reports.values()
                if agent_id is None or report.agent_id == agent_id
            ]

    def get_plan(self, agent_id: str) -> PlanRecord | None:
        with self._lock:
            return self._plans.get(agent_id)

    def put_plan(self, plan: PlanRecord) -> None:
        with self._lock:
            self._plans[plan.agent_id] = plan

    def list_plans(self) -> list[PlanRecord]:
        with self._lock:
            return list(self._plans.values())

    def run_transaction(self, fn: Callable[[ReportStore], T]) -> T:
        with self._lock:
            reports_snapshot = dict(self._reports)
            plans_snapshot = dict(self._plans)
            try:
                return fn(self)
            except Exception:
                self._reports = reports_snapshot
                self._plans = plans_snapshot
                self._logger.debug("transaction_rolled_back")
                raise
