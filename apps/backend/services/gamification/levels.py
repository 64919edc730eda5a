"""
Gamification levels and XP.

Level thresholds are closed-form: xp_for_level(n) = floor(100 * n ** 1.5).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Literal, Optional

RankingPeriod = Literal["weekly", "monthly"]

MAX_LEVEL = 1000


def xp_for_level(level: int) -> int:
    return math.floor(100 * math.pow(level, 1.5))


def level_for_xp(xp: int) -> int:
    xp = max(0, int(xp or 0))
    level = 1
    while level < MAX_LEVEL and xp_for_level(level + 1) <= xp:
        level += 1
    return level


@dataclass(frozen=True)
class XpProgress:
    current_level_xp: int
    next_level_xp: int
    progress_percent: float
    xp_to_next_level: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_level_xp": self.current_level_xp,
            "next_level_xp": self.next_level_xp,
            "progress_percent": round(self.progress_percent, 2),
            "xp_to_next_level": self.xp_to_next_level,
        }


def xp_progress(current_xp: int, level: int) -> XpProgress:
    current_level_xp = xp_for_level(level)
    next_level_xp = xp_for_level(level + 1)
    needed = next_level_xp - current_level_xp
    percent = (current_xp - current_level_xp) / needed * 100 if needed else 100.0
    return XpProgress(
        current_level_xp=current_level_xp,
        next_level_xp=next_level_xp,
        progress_percent=min(100.0, max(0.0, percent)),
        xp_to_next_level=next_level_xp - current_xp,
    )


@dataclass(frozen=True)
class GamificationConfig:
    gamification_enabled: bool = True
    rewards_enabled: bool = True
    leagues_enabled: bool = True
    challenges_enabled: bool = True
    badges_enabled: bool = True
    xp_per_sale: int = 10
    xp_new_customer_bonus: int = 50
    streak_bonus_7_days: int = 100
    streak_bonus_30_days: int = 500
    level_rewards: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "GamificationConfig":
        data = data or {}
        defaults = GamificationConfig()
        kwargs: Dict[str, Any] = {}
        for f in fields(GamificationConfig):
            value = data.get(f.name)
            if value is None:
                continue
            default = getattr(defaults, f.name)
            if isinstance(default, bool):
                kwargs[f.name] = bool(value)
            elif isinstance(default, int):
                try:
                    kwargs[f.name] = int(value)
                except (TypeError, ValueError):
                    continue
            elif isinstance(value, dict):
                kwargs[f.name] = value
        return GamificationConfig(**kwargs)


def xp_for_sale(config: GamificationConfig, *, new_customer: bool = False, streak_days: int = 0) -> int:
    """
    XP earned by one confirmed sale. Streak bonuses are paid once, on the
    day the streak reaches 7 or 30 days.
    """
    if not config.gamification_enabled:
        return 0
    xp = config.xp_per_sale
    if new_customer:
        xp += config.xp_new_customer_bonus
    if streak_days == 7:
        xp += config.streak_bonus_7_days
    elif streak_days == 30:
        xp += config.streak_bonus_30_days
    return xp


def ranking_window_start(period: RankingPeriod, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> datetime:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(tz)
    if period == "weekly":
        monday = local.date() - timedelta(days=local.weekday())
        return datetime(monday.year, monday.month, monday.day, tzinfo=tz)
    if period == "monthly":
        return datetime(local.year, local.month, 1, tzinfo=tz)
    raise ValueError(f"unknown ranking period: {period}")


def build_rankings(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    ordered = sorted(
        (r for r in rows or [] if isinstance(r, dict)),
        key=lambda r: int(r.get("xp") or 0),
        reverse=True,
    )
    return [
        {
            "position": i,
            "reseller_id": r.get("id"),
            "nome": r.get("nome"),
            "level": int(r.get("level") or 1),
            "xp_period": int(r.get("xp") or 0),
            "sales_period": r.get("total_sales_amount") or 0,
        }
        for i, r in enumerate(ordered, start=1)
    ]
