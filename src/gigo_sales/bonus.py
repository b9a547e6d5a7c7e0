"""Reward ladder: progress thresholds mapped to prizes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
import yaml  # type: ignore[import-untyped]

from gigo_sales.config import get_settings
from gigo_sales.errors import ValidationError
from gigo_sales.records import HUNDRED, ZERO, PlanRecord, to_amount

logger = structlog.get_logger(__name__)

DEFAULT_REWARDS_PATH = Path(__file__).resolve().parent / "config" / "rewards.yaml"


@dataclass(frozen=True)
class BonusTier:
    """A progress threshold (percent of plan) and the prize it unlocks."""

    threshold: Decimal
    prize: str
    icon: str | None = None

    def __post_init__(self) -> None:
        threshold = to_amount(self.threshold, "bonus threshold")
        if threshold < 0:
            raise ValidationError(f"Bonus threshold must not be negative, got {threshold}")
        object.__setattr__(self, "threshold", threshold)


@dataclass(frozen=True)
class BonusStanding:
    """Where an agent stands on the ladder."""

    progress: Decimal
    reached: tuple[BonusTier, ...] = ()
    current: BonusTier | None = None
    next: BonusTier | None = None
    remaining: Decimal = ZERO
    remaining_amount: Decimal = ZERO

    @property
    def reached_prizes(self) -> list[str]:
        return [tier.prize for tier in self.reached]


@dataclass(frozen=True)
class BonusLadder:
    """Ascending list of bonus tiers."""

    tiers: tuple[BonusTier, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "tiers", tuple(sorted(self.tiers, key=lambda tier: tier.threshold))
        )

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[Any, str]]) -> BonusLadder:
        return cls(tuple(BonusTier(threshold=threshold, prize=prize) for threshold, prize in pairs))

    def reached(self, progress: Decimal) -> list[BonusTier]:
        return [tier for tier in self.tiers if tier.threshold <= progress]

    def current(self, progress: Decimal) -> BonusTier | None:
        """Highest reached tier."""
        reached = self.reached(progress)
        return reached[-1] if reached else None

    def next(self, progress: Decimal) -> BonusTier | None:
        """Lowest tier not yet reached."""
        for tier in self.tiers:
            if tier.threshold > progress:
                return tier
        return None

    def standing(
        self,
        progress: Decimal,
        plan: PlanRecord | None = None,
        approved_total: Decimal = ZERO,
    ) -> BonusStanding:
        """Reached tiers plus the distance to the next one.

        ``remaining_amount`` needs the plan target; without a plan it is 0.
        """
        progress = to_amount(progress, "progress")
        next_tier = self.next(progress)
        remaining = ZERO
        remaining_amount = ZERO
        if next_tier is not None:
            remaining = next_tier.threshold - progress
            if plan is not None:
                needed = plan.total_target * next_tier.threshold / HUNDRED
                remaining_amount = max(ZERO, needed - approved_total)
        return BonusStanding(
            progress=progress,
            reached=tuple(self.reached(progress)),
            current=self.current(progress),
            next=next_tier,
            remaining=remaining,
            remaining_amount=remaining_amount,
        )


def load_bonus_tiers(path: Path) -> BonusLadder:
    """Load a reward ladder from a YAML file with a top-level ``tiers`` list."""
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    tiers_raw = data.get("tiers") if isinstance(data, dict) else None
    if not isinstance(tiers_raw, list):
        raise ValidationError(f"{path.name}: tiers must be a list")

    tiers: list[BonusTier] = []
    for idx, item in enumerate(tiers_raw):
        if not isinstance(item, dict):
            raise ValidationError(f"{path.name}: tiers[{idx}] must be a mapping")
        if "threshold" not in item or "prize" not in item:
            raise ValidationError(f"{path.name}: tiers[{idx}] needs threshold and prize")
        icon = item.get("icon")
        tiers.append(
            BonusTier(
                threshold=item["threshold"],
                prize=str(item["prize"]),
                icon=str(icon) if icon is not None else None,
            )
        )

    logger.debug("bonus_tiers_loaded", path=str(path), count=len(tiers))
    return BonusLadder(tuple(tiers))


@lru_cache
def get_default_ladder() -> BonusLadder:
    """Ladder from BONUS_TIERS_FILE, or the packaged rewards.yaml."""
    path = get_settings().bonus_tiers_file or DEFAULT_REWARDS_PATH
    return load_bonus_tiers(Path(path))
