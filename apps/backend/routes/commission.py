from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Header, Query
from pydantic import BaseModel, Field

from apps.backend.services import settings
from apps.backend.services.core_service import require_admin, require_supabase
from apps.backend.services.commission.commission_engine import CommissionEngine
from apps.backend.services.commission.commission_repository import CommissionRepository
from apps.backend.services.commission.commission_service import CommissionService
from apps.backend.utils.envelope import fail

router = APIRouter(prefix="/commission", tags=["commission"])


# ===== Pydantic models =====
class SalesTierIn(BaseModel):
    id: Optional[str] = None
    name: str = ""
    min_monthly_sales: Decimal = Decimal("0")
    max_monthly_sales: Optional[Decimal] = None
    reseller_percentage: Decimal
    company_percentage: Optional[Decimal] = None


class CommissionConfigIn(BaseModel):
    use_dynamic_tiers: bool = False
    sales_tiers: List[SalesTierIn] = Field(default_factory=list)


class QuoteIn(BaseModel):
    amount: Decimal = Field(ge=0)
    company_id: Optional[str] = None


def _service() -> CommissionService:
    return CommissionService(
        CommissionRepository(require_supabase()),
        tz=settings.BUSINESS_TIMEZONE,
        standard_reseller_percentage=settings.STANDARD_RESELLER_PERCENTAGE,
    )


def _tier_payload(t: SalesTierIn) -> Dict[str, Any]:
    return {k: v for k, v in t.model_dump().items() if v is not None}


# ===== Endpoints =====
@router.get("/config")
async def get_config(company_id: Optional[str] = Query(default=None)):
    try:
        policy = await _service().get_policy(company_id)
        return policy.to_dict()
    except Exception as e:
        return fail(e, "commission_config")


@router.put("/config")
async def save_config(inb: CommissionConfigIn, x_admin_token: Optional[str] = Header(default=None)):
    try:
        require_admin(x_admin_token)
        payload = {
            "use_dynamic_tiers": inb.use_dynamic_tiers,
            "sales_tiers": [_tier_payload(t) for t in inb.sales_tiers],
        }
        policy = await _service().save_policy(payload)
        return {"ok": True, "config": policy.to_dict()}
    except Exception as e:
        return fail(e, "commission_config")


@router.get("/resolve")
async def resolve_volume(volume: Decimal = Query(ge=0), company_id: Optional[str] = Query(default=None)):
    """
    Preview which tier a given monthly volume falls into.
    """
    try:
        service = _service()
        policy = await service.get_policy(company_id)
        engine: CommissionEngine = service.engine(policy)
        return engine.status(volume).to_dict()
    except Exception as e:
        return fail(e, "commission_resolve")


@router.get("/resellers/{reseller_id}/current")
async def reseller_current(reseller_id: str, company_id: Optional[str] = Query(default=None)):
    try:
        return await _service().current_commission(reseller_id, company_id=company_id)
    except Exception as e:
        return fail(e, "commission_current")


@router.post("/resellers/{reseller_id}/quote")
async def reseller_quote(reseller_id: str, inb: QuoteIn):
    try:
        return await _service().quote_sale(reseller_id, inb.amount, company_id=inb.company_id)
    except Exception as e:
        return fail(e, "commission_quote")


@router.get("/resellers/{reseller_id}/career-level")
async def reseller_career_level(reseller_id: str, company_id: Optional[str] = Query(default=None)):
    try:
        level = await _service().career_level(reseller_id, company_id=company_id)
        return {"reseller_id": reseller_id, "career_level": level}
    except Exception as e:
        return fail(e, "commission_career_level")
