"""Report and plan records, the actors that touch them, and their validation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from uuid import uuid4

from gigo_sales.config import get_settings
from gigo_sales.errors import ValidationError

ZERO = Decimal("0")
HUNDRED = Decimal("100")

CATEGORY_PREFIX = "category_"
DISTRIBUTION_PREFIX = "distribution_"


class ReportStatus(str, Enum):
    """Lifecycle states of a sales report."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Role(str, Enum):
    """Roles supplied by the identity collaborator."""

    DIRECTOR = "director"
    AGENT = "agent"


@dataclass(frozen=True)
class Actor:
    """The person performing an action."""

    actor_id: str
    name: str
    role: Role

    @property
    def is_director(self) -> bool:
        return self.role == Role.DIRECTOR


def to_amount(value: Any, label: str = "amount") -> Decimal:
    """Convert a user-supplied number into a finite Decimal."""
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"{label} must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise ValidationError(f"{label} must be finite, got {value!r}")
    return amount


def _parse_date(value: Any, label: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise ValidationError(f"{label} is not an ISO date: {value!r}") from exc
    raise ValidationError(f"{label} must be a date, got {value!r}")


def check_category_keys(amounts: Mapping[str, Any], categories: Iterable[str]) -> None:
    """Require exactly the configured category keys."""
    expected = set(categories)
    given = set(amounts)
    missing = sorted(expected - given)
    unknown = sorted(given - expected)
    if missing:
        raise ValidationError(
            f"Missing category amounts: {', '.join(missing)}", details={"missing": missing}
        )
    if unknown:
        raise ValidationError(
            f"Unknown categories: {', '.join(unknown)}", details={"unknown": unknown}
        )


@dataclass(frozen=True)
class ReportRecord:
    """A single sales submission by an agent.

    ``total_amount`` is always derived from ``category_amounts``; it is never
    stored on its own. The amounts are held in a read-only mapping.
    """

    id: str
    agent_id: str
    report_date: date
    category_amounts: Mapping[str, Decimal] = field(hash=False)
    debt_amount: Decimal = ZERO
    status: ReportStatus = ReportStatus.PENDING
    last_edited_by: str | None = None
    agent_name: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        amounts = {
            str(name): to_amount(value, f"{name} amount")
            for name, value in self.category_amounts.items()
        }
        debt = to_amount(self.debt_amount, "debt amount")

        negative = sorted(name for name, value in amounts.items() if value < 0)
        if negative:
            raise ValidationError(
                f"Amounts must not be negative: {', '.join(negative)}",
                details={"negative": negative},
            )
        if debt < 0:
            raise ValidationError("Debt amount must not be negative")
        if not amounts or all(value == 0 for value in amounts.values()):
            raise ValidationError("At least one category amount must be positive")

        total = sum(amounts.values(), ZERO)
        if debt > total:
            raise ValidationError(
                f"Debt amount {debt} exceeds the report total {total}",
                details={"debt_amount": str(debt), "total_amount": str(total)},
            )

        object.__setattr__(self, "category_amounts", MappingProxyType(amounts))
        object.__setattr__(self, "debt_amount", debt)
        object.__setattr__(self, "status", ReportStatus(self.status))
        object.__setattr__(self, "report_date", _parse_date(self.report_date, "report date"))

    @property
    def total_amount(self) -> Decimal:
        return sum(self.category_amounts.values(), ZERO)

    @property
    def is_approved(self) -> bool:
        return self.status == ReportStatus.APPROVED

    @classmethod
    def create(
        cls,
        agent_id: str,
        category_amounts: Mapping[str, Any],
        debt_amount: Any,
        report_date: date,
        agent_name: str = "",
        categories: Iterable[str] | None = None,
    ) -> ReportRecord:
        """Build a new PENDING report after checking its category keys."""
        check_category_keys(
            category_amounts,
            categories if categories is not None else get_settings().sales_categories,
        )
        return cls(
            id=uuid4().hex,
            agent_id=agent_id,
            report_date=report_date,
            category_amounts=dict(category_amounts),
            debt_amount=debt_amount,
            agent_name=agent_name,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a flat key/value record for storage."""
        data: dict[str, Any] = {
            "id": self.id,
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "date": self.report_date.isoformat(),
            "debt_amount": str(self.debt_amount),
            "total_amount": str(self.total_amount),
            "status": self.status.value,
            "last_edited_by": self.last_edited_by,
            "created_at": self.created_at.isoformat(),
        }
        for name, value in self.category_amounts.items():
            data[f"{CATEGORY_PREFIX}{name}"] = str(value)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReportRecord:
        """Rebuild a report from its flat storage shape.

        A stored ``total_amount`` is ignored; the total is always recomputed.
        """
        amounts = {
            key[len(CATEGORY_PREFIX):]: value
            for key, value in data.items()
            if key.startswith(CATEGORY_PREFIX)
        }
        created_raw = data.get("created_at")
        created_at = (
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str)
            else created_raw or datetime.now(timezone.utc)
        )
        return cls(
            id=str(data["id"]),
            agent_id=str(data["agent_id"]),
            report_date=_parse_date(data["date"], "report date"),
            category_amounts=amounts,
            debt_amount=data.get("debt_amount", ZERO),
            status=ReportStatus(str(data.get("status", ReportStatus.PENDING.value)).upper()),
            last_edited_by=data.get("last_edited_by"),
            agent_name=str(data.get("agent_name") or ""),
            created_at=created_at,
        )


@dataclass(frozen=True)
class PlanRecord:
    """A time-boxed sales target for one agent.

    ``current_total`` is the only stored aggregate: the sum of approved,
    in-window report totals for the agent.
    """

    agent_id: str
    total_target: Decimal
    start_date: date
    end_date: date
    current_total: Decimal = ZERO
    debt_limit_percent: Decimal = Decimal("7")
    category_distribution: Mapping[str, Decimal] = field(
        default_factory=lambda: dict(get_settings().category_distribution), hash=False
    )

    def __post_init__(self) -> None:
        target = to_amount(self.total_target, "total target")
        current = to_amount(self.current_total, "current total")
        limit = to_amount(self.debt_limit_percent, "debt limit percent")
        start = _parse_date(self.start_date, "start date")
        end = _parse_date(self.end_date, "end date")
        distribution = {
            str(name): to_amount(share, f"{name} share")
            for name, share in self.category_distribution.items()
        }

        if target <= 0:
            raise ValidationError("Total target must be positive")
        if current < 0:
            raise ValidationError("Current total must not be negative")
        if end <= start:
            raise ValidationError(
                f"Plan end date {end} must be after start date {start}"
            )
        if not ZERO <= limit <= HUNDRED:
            raise ValidationError(f"Debt limit must be between 0 and 100, got {limit}")
        if any(share < 0 for share in distribution.values()):
            raise ValidationError("Category shares must not be negative")
        if sum(distribution.values(), ZERO) != HUNDRED:
            raise ValidationError(
                "Category distribution must sum to 100",
                details={name: str(share) for name, share in distribution.items()},
            )

        object.__setattr__(self, "total_target", target)
        object.__setattr__(self, "current_total", current)
        object.__setattr__(self, "debt_limit_percent", limit)
        object.__setattr__(self, "start_date", start)
        object.__setattr__(self, "end_date", end)
        object.__setattr__(self, "category_distribution", MappingProxyType(distribution))

    @property
    def window_days(self) -> int:
        """Number of days in the inclusive window."""
        return (self.end_date - self.start_date).days + 1

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @classmethod
    def create(
        cls,
        agent_id: str,
        total_target: Any,
        start_date: date,
        end_date: date | None = None,
        debt_limit_percent: Any = None,
        category_distribution: Mapping[str, Any] | None = None,
    ) -> PlanRecord:
        """Build a plan, filling omitted fields from settings."""
        settings = get_settings()
        if end_date is None:
            end_date = start_date + timedelta(days=settings.plan_window_days - 1)
        if debt_limit_percent is None:
            debt_limit_percent = settings.debt_limit_percent
        if category_distribution is None:
            category_distribution = settings.category_distribution
        return cls(
            agent_id=agent_id,
            total_target=total_target,
            start_date=start_date,
            end_date=end_date,
            debt_limit_percent=debt_limit_percent,
            category_distribution=dict(category_distribution),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "agent_id": self.agent_id,
            "total_target": str(self.total_target),
            "current_total": str(self.current_total),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "debt_limit_percent": str(self.debt_limit_percent),
        }
        for name, share in self.category_distribution.items():
            data[f"{DISTRIBUTION_PREFIX}{name}"] = str(share)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlanRecord:
        distribution = {
            key[len(DISTRIBUTION_PREFIX):]: value
            for key, value in data.items()
            if key.startswith(DISTRIBUTION_PREFIX)
        }
        return cls(
            agent_id=str(data["agent_id"]),
            total_target=data["total_target"],
            start_date=_parse_date(data["start_date"], "start date"),
            end_date=_parse_date(data["end_date"], "end date"),
            current_total=data.get("current_total", ZERO),
            debt_limit_percent=data.get("debt_limit_percent", Decimal("7")),
            category_distribution=distribution,
        )
