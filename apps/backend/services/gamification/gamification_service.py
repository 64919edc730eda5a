from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Dict, List, Optional

from apps.backend.services.core_service import CoreError

from .levels import (
    GamificationConfig,
    RankingPeriod,
    build_rankings,
    level_for_xp,
    ranking_window_start,
    xp_progress,
)

log = logging.getLogger("revenda.gamification")

PROFILE_COLUMNS = (
    "id,nome,email,avatar_url,xp,level,current_streak,longest_streak,"
    "last_activity_date,league_id,league_points,total_sales_amount,total_orders,total_customers"
)

RANKING_LIMIT = 100


class GamificationService:
    def __init__(self, supabase_client: Any, *, tz: tzinfo = timezone.utc) -> None:
        self.sb = supabase_client
        self.tz = tz

    def get_config(self) -> GamificationConfig:
        r = self.sb.table("gamification_config").select("*").limit(1).execute()
        rows = getattr(r, "data", None) or []
        if not rows:
            return GamificationConfig()
        return GamificationConfig.from_dict(rows[0])

    def get_profile(self, reseller_id: str) -> Dict[str, Any]:
        r = self.sb.table("resellers").select(PROFILE_COLUMNS).eq("id", reseller_id).limit(1).execute()
        rows = getattr(r, "data", None) or []
        if not rows:
            raise CoreError("Reseller not found", 404)
        return rows[0]

    def profile_progress(self, reseller_id: str) -> Dict[str, Any]:
        profile = self.get_profile(reseller_id)
        xp = int(profile.get("xp") or 0)
        # stored level can lag behind xp; the formula is authoritative
        level = max(int(profile.get("level") or 1), level_for_xp(xp))
        return {
            "reseller_id": reseller_id,
            "xp": xp,
            "level": level,
            "current_streak": int(profile.get("current_streak") or 0),
            "longest_streak": int(profile.get("longest_streak") or 0),
            "progress": xp_progress(xp, level).to_dict(),
        }

    def rankings(self, period: RankingPeriod, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        try:
            start = ranking_window_start(period, now, self.tz)
        except ValueError as e:
            raise CoreError(str(e), 400)

        r = (
            self.sb.table("resellers")
            .select(PROFILE_COLUMNS)
            .gte("last_activity_date", start.isoformat())
            .order("xp", desc=True)
            .limit(RANKING_LIMIT)
            .execute()
        )
        rows = getattr(r, "data", None) or []
        log.debug("Rankings %s since %s: %d resellers", period, start.isoformat(), len(rows))
        return build_rankings(rows)
