"""Audit trail of report and plan actions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from gigo_sales.records import Actor


class AuditAction(str, Enum):
    """Kinds of recorded actions."""

    SALE_SUBMITTED = "SALE_SUBMITTED"
    SALE_APPROVED = "SALE_APPROVED"
    SALE_REJECTED = "SALE_REJECTED"
    SALE_EDITED = "SALE_EDITED"
    SALE_DELETED = "SALE_DELETED"
    PLAN_UPDATED = "PLAN_UPDATED"


@dataclass
class AuditEntry:
    """One recorded action."""

    action: AuditAction
    actor_id: str
    actor_name: str
    details: str = ""
    agent_id: str | None = None
    report_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entry_id: UUID = field(default_factory=uuid4)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.entry_id),
            "action": self.action.value,
            "user_id": self.actor_id,
            "user_name": self.actor_name,
            "details": self.details,
            "agent_id": self.agent_id,
            "report_id": self.report_id,
            "timestamp": self.timestamp.isoformat(),
        }


class AuditLog:
    """Append-only, in-memory list of audit entries."""

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []

    def record(
        self,
        action: AuditAction,
        actor: Actor,
        details: str = "",
        agent_id: str | None = None,
        report_id: str | None = None,
    ) -> AuditEntry:
        entry = AuditEntry(
            action=action,
            actor_id=actor.actor_id,
            actor_name=actor.name,
            details=details,
            agent_id=agent_id,
            report_id=report_id,
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> list[AuditEntry]:
        return self._entries.copy()

    def for_agent(self, agent_id: str) -> list[AuditEntry]:
        return [entry for entry in self._entries if entry.agent_id == agent_id]

    def __len__(self) -> int:
        return len(self._entries)
