from fastapi import APIRouter

from apps.backend.services import settings
from apps.backend.services.core_service import CoreError, require_supabase
from apps.backend.services.financial.financial_service import FinancialService
from apps.backend.utils.envelope import fail

router = APIRouter(prefix="/financial", tags=["financial"])


@router.get("/resellers/{reseller_id}/summary")
def reseller_summary(reseller_id: str):
    try:
        if not settings.SETTINGS["financial_enabled"]:
            raise CoreError("Financial module is disabled", 404)
        return FinancialService(require_supabase()).reseller_summary(reseller_id)
    except Exception as e:
        return fail(e, "financial_summary")
