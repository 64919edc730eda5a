import logging
from typing import Optional
from supabase import create_client, Client

from apps.backend.services import settings

log = logging.getLogger("revenda.db")


def get_supabase() -> Optional[Client]:
    if not (settings.SUPABASE_URL and settings.SUPABASE_KEY):
        return None
    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    except Exception:
        log.exception("Failed to create Supabase client")
        return None
