"""
Commission Repository (Supabase/Postgres Adapter)
=================================================

Purpose:
- DB-facing adapter for the commission tier document and paid-sales volume.
- Designed to work with the supabase-py client.

Expected tables:
1) public.commission_config
   - id text primary key               ("default")
   - use_dynamic_tiers boolean default false
   - sales_tiers jsonb default '[]'::jsonb
   - updated_at timestamptz default now()

2) public.companies
   - id uuid primary key
   - commission_settings jsonb null   (same shape as commission_config)

3) public.sales_with_split
   - reseller_id uuid
   - total_amount numeric
   - paid boolean
   - created_at timestamptz
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from .volume import sum_paid_volume

DEFAULT_CONFIG_ID = "default"


def _first_row(r: Any) -> Optional[Dict[str, Any]]:
    # maybe_single() yields None, a dict, or a one-element list depending on the client version
    data = getattr(r, "data", None) if r is not None else None
    if isinstance(data, dict):
        return data
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    return None


class CommissionRepository:
    def __init__(
        self,
        supabase_client: Any,
        *,
        table_config: str = "commission_config",
        table_companies: str = "companies",
        table_sales: str = "sales_with_split",
    ) -> None:
        self.sb = supabase_client
        self.table_config = table_config
        self.table_companies = table_companies
        self.table_sales = table_sales

    # -----------------------------
    # Tier document
    # -----------------------------
    async def get_config_json(self, config_id: str = DEFAULT_CONFIG_ID) -> Optional[Dict[str, Any]]:
        r = (
            self.sb.table(self.table_config)
            .select("*")
            .eq("id", config_id)
            .maybe_single()
            .execute()
        )
        return _first_row(r)

    async def upsert_config_json(self, config_json: Dict[str, Any], config_id: str = DEFAULT_CONFIG_ID) -> Dict[str, Any]:
        payload = {"id": config_id, **config_json}
        r = self.sb.table(self.table_config).upsert(payload).execute()
        return _first_row(r) or payload

    async def get_company_commission_settings(self, company_id: str) -> Optional[Dict[str, Any]]:
        r = (
            self.sb.table(self.table_companies)
            .select("commission_settings")
            .eq("id", company_id)
            .maybe_single()
            .execute()
        )
        row = _first_row(r)
        if not row:
            return None
        settings = row.get("commission_settings")
        return settings if isinstance(settings, dict) else None

    # -----------------------------
    # Sales volume
    # -----------------------------
    async def sum_paid_sales(self, reseller_id: str, start: datetime, end: datetime) -> Decimal:
        r = (
            self.sb.table(self.table_sales)
            .select("total_amount")
            .eq("reseller_id", reseller_id)
            .eq("paid", True)
            .gte("created_at", start.isoformat())
            .lt("created_at", end.isoformat())
            .execute()
        )
        rows = getattr(r, "data", None) or []
        return sum_paid_volume(rows)
