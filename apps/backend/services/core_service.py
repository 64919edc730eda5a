import hmac
from typing import Dict, Iterable, Optional

from apps.backend.db import get_supabase
from apps.backend.services import settings

COMMISSION_TABLES = ("commission_config", "sales_with_split", "companies")
GAMIFICATION_TABLES = ("resellers", "gamification_config")
FINANCIAL_TABLES = ("withdrawals",)


class CoreError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def require_supabase():
    supabase = get_supabase()
    if not supabase:
        raise CoreError("Supabase client unavailable", 500)
    return supabase


def require_admin(token: Optional[str]) -> None:
    if not settings.ADMIN_TOKEN:
        raise CoreError("ADMIN_TOKEN not configured on server.", 501)
    if not token or not hmac.compare_digest(token.strip(), settings.ADMIN_TOKEN):
        raise CoreError("Unauthorized (missing/invalid X-Admin-Token).", 401)


def check_tables(supabase, tables: Iterable[str]) -> Dict:
    checks = {}
    for table in tables:
        try:
            supabase.table(table).select("*").limit(1).execute()
            checks[table] = True
        except Exception:
            checks[table] = False

    return {
        "ok": all(checks.values()),
        "checks": checks,
    }


def health_core() -> Dict:
    supabase = require_supabase()
    return check_tables(supabase, COMMISSION_TABLES + GAMIFICATION_TABLES + FINANCIAL_TABLES)
