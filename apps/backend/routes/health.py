from fastapi.responses import JSONResponse
from fastapi import APIRouter

from apps.backend.services.core_service import (
    COMMISSION_TABLES,
    CoreError,
    check_tables,
    health_core,
    require_supabase,
)


router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health_root():
    return {"ok": True}


@router.get("/commission")
def health_commission():
    try:
        res = check_tables(require_supabase(), COMMISSION_TABLES)
    except CoreError as e:
        return JSONResponse(status_code=e.status_code, content={"ok": False, "error": e.message})
    return JSONResponse(content=res, status_code=200 if res.get("ok") else 503)


@router.get("/core")
def health_all():
    try:
        res = health_core()
    except CoreError as e:
        return JSONResponse(status_code=e.status_code, content={"ok": False, "error": e.message})
    return JSONResponse(content=res, status_code=200 if res.get("ok") else 503)
