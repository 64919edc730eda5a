import os
from decimal import Decimal
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

from apps.backend.services.commission.commission_policy import D, HUNDRED, _to_decimal

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return (os.getenv(name, default) or "").strip().lower() in ("1", "true", "yes", "on")


def _csv(name: str) -> list:
    return [x.strip() for x in (os.getenv(name) or "").split(",") if x.strip()]


def _percentage(raw, default: Decimal) -> Decimal:
    # malformed or out-of-range values fall back to the default
    value = _to_decimal(raw, default)
    if value < D("0") or value > HUNDRED:
        return default
    return value


SUPABASE_URL = (os.getenv("SUPABASE_URL") or "").strip()
SUPABASE_KEY = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY") or "").strip()

ADMIN_TOKEN = (os.getenv("ADMIN_TOKEN") or "").strip()

APP_VERSION = os.getenv("APP_VERSION", "0.1.0")
CORS_ALLOW_ORIGINS = _csv("CORS_ALLOW_ORIGINS")

# Calendar months for commission volume are cut in this timezone
BUSINESS_TIMEZONE = ZoneInfo(os.getenv("BUSINESS_TIMEZONE", "America/Sao_Paulo"))
STANDARD_RESELLER_PERCENTAGE = _percentage(os.getenv("STANDARD_RESELLER_PERCENTAGE"), D("70"))

SETTINGS = {
    "gamification_enabled": _flag("FEATURE_GAMIFICATION", "true"),
    "financial_enabled": _flag("FEATURE_FINANCIAL", "true"),
    "request_logging": _flag("REQUEST_LOGGING", "true"),
}
