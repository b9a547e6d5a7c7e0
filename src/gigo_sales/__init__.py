"""GIGO Sales - report approval and plan aggregation engine."""

__version__ = "0.1.0"

from gigo_sales.aggregation import (
    ProgressBand,
    Timeframe,
    approved_total,
    category_breakdown,
    category_target,
    debt_ratio,
    is_debt_over_limit,
    progress_percent,
    recompute_current_total,
)
from gigo_sales.audit import AuditAction, AuditEntry, AuditLog
from gigo_sales.bonus import BonusLadder, BonusStanding, BonusTier, load_bonus_tiers
from gigo_sales.config import configure_logging, get_settings
from gigo_sales.errors import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    SalesEngineError,
    ValidationError,
)
from gigo_sales.records import Actor, PlanRecord, ReportRecord, ReportStatus, Role
from gigo_sales.stats import AgentStats, build_agent_stats
from gigo_sales.storage import InMemoryReportStore, ReportStore
from gigo_sales.workflow import ApprovalWorkflow

__all__ = [
    # Version
    "__version__",
    # Records
    "Actor",
    "Role",
    "ReportRecord",
    "ReportStatus",
    "PlanRecord",
    # Workflow & storage
    "ApprovalWorkflow",
    "ReportStore",
    "InMemoryReportStore",
    # Aggregation
    "approved_total",
    "category_breakdown",
    "category_target",
    "debt_ratio",
    "is_debt_over_limit",
    "progress_percent",
    "recompute_current_total",
    "ProgressBand",
    "Timeframe",
    # Rewards & stats
    "BonusTier",
    "BonusLadder",
    "BonusStanding",
    "load_bonus_tiers",
    "AgentStats",
    "build_agent_stats",
    # Audit
    "AuditAction",
    "AuditEntry",
    "AuditLog",
    # Errors
    "SalesEngineError",
    "ValidationError",
    "InvalidTransitionError",
    "NotFoundError",
    "PermissionDeniedError",
    # Config
    "get_settings",
    "configure_logging",
]
