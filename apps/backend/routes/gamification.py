from typing import Literal

from fastapi import APIRouter, Query

from apps.backend.services import settings
from apps.backend.services.core_service import CoreError, require_supabase
from apps.backend.services.gamification.gamification_service import GamificationService
from apps.backend.services.gamification.levels import xp_for_level, xp_for_sale
from apps.backend.utils.envelope import fail

router = APIRouter(prefix="/gamification", tags=["gamification"])


def _service() -> GamificationService:
    if not settings.SETTINGS["gamification_enabled"]:
        raise CoreError("Gamification is disabled", 404)
    return GamificationService(require_supabase(), tz=settings.BUSINESS_TIMEZONE)


@router.get("/levels/{level}")
def level_threshold(level: int):
    if level < 1:
        return fail(CoreError("level must be >= 1", 400), "gamification_level")
    return {"level": level, "xp_required": xp_for_level(level), "next_level_xp": xp_for_level(level + 1)}


@router.get("/config")
def gamification_config():
    try:
        return _service().get_config().to_dict()
    except Exception as e:
        return fail(e, "gamification_config")


@router.get("/sale-xp")
def sale_xp(new_customer: bool = False, streak_days: int = Query(default=0, ge=0)):
    try:
        config = _service().get_config()
        return {"xp": xp_for_sale(config, new_customer=new_customer, streak_days=streak_days)}
    except Exception as e:
        return fail(e, "gamification_sale_xp")


@router.get("/resellers/{reseller_id}/progress")
def reseller_progress(reseller_id: str):
    try:
        return _service().profile_progress(reseller_id)
    except Exception as e:
        return fail(e, "gamification_progress")


@router.get("/rankings")
def rankings(period: Literal["weekly", "monthly"] = "weekly"):
    try:
        return {"period": period, "rankings": _service().rankings(period)}
    except Exception as e:
        return fail(e, "gamification_rankings")
