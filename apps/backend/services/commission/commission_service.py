"""
Commission Service (Integration Layer)
======================================

Orchestrates the commission policy, engine and split math with the
repository. Routes stay thin; no HTTP here.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from typing import Any, Dict, Optional

from .commission_engine import CommissionEngine, CommissionResult
from .commission_policy import CommissionPolicy, STANDARD_RESELLER_PERCENTAGE, _q2
from .commission_repository import CommissionRepository
from .split import calculate_split
from .volume import month_bounds

log = logging.getLogger("revenda.commission")


class CommissionService:
    def __init__(
        self,
        repo: CommissionRepository,
        *,
        tz: tzinfo = timezone.utc,
        standard_reseller_percentage: Decimal = STANDARD_RESELLER_PERCENTAGE,
    ) -> None:
        self.repo = repo
        self.tz = tz
        self.standard_reseller_percentage = standard_reseller_percentage

    # -----------------------------
    # Policy
    # -----------------------------
    async def get_policy(self, company_id: Optional[str] = None) -> CommissionPolicy:
        """
        Company-level commission_settings win over the shared "default" row.
        """
        if company_id:
            data = await self.repo.get_company_commission_settings(company_id)
            if data:
                return CommissionPolicy.from_dict(data)

        data = await self.repo.get_config_json()
        if not data:
            log.info("No commission config stored, using default tiers")
            return CommissionPolicy()
        return CommissionPolicy.from_dict(data)

    async def save_policy(self, payload: Dict[str, Any]) -> CommissionPolicy:
        policy = CommissionPolicy.from_admin_payload(payload)
        policy.validate_for_save()

        stamped = CommissionPolicy(
            use_dynamic_tiers=policy.use_dynamic_tiers,
            sales_tiers=policy.sales_tiers,
            updated_at=datetime.now(timezone.utc).isoformat(),
        )
        await self.repo.upsert_config_json(stamped.to_storage())
        log.info(
            "Commission config saved: dynamic=%s tiers=%d",
            stamped.use_dynamic_tiers,
            len(stamped.sales_tiers),
        )
        return stamped

    def engine(self, policy: CommissionPolicy) -> CommissionEngine:
        return CommissionEngine(policy, standard_reseller_percentage=self.standard_reseller_percentage)

    # -----------------------------
    # Volume
    # -----------------------------
    async def monthly_volume(self, reseller_id: str, now: Optional[datetime] = None) -> Decimal:
        start, end = month_bounds(now, self.tz)
        volume = await self.repo.sum_paid_sales(reseller_id, start, end)
        log.debug("Monthly volume for %s (%s): %s", reseller_id, start.date(), volume)
        return volume

    # -----------------------------
    # Resolution
    # -----------------------------
    async def current_commission(
        self,
        reseller_id: str,
        *,
        company_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        policy = await self.get_policy(company_id)
        volume = await self.monthly_volume(reseller_id, now)
        status = self.engine(policy).status(volume)
        return {"reseller_id": reseller_id, **status.to_dict()}

    async def quote_sale(
        self,
        reseller_id: str,
        amount: Any,
        *,
        company_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Split for a sale about to be confirmed, at the reseller's current tier.
        """
        policy = await self.get_policy(company_id)
        volume = await self.monthly_volume(reseller_id, now)
        commission: CommissionResult = self.engine(policy).resolve(volume)
        split = calculate_split(amount, commission.reseller_percentage)
        return {
            "reseller_id": reseller_id,
            "monthly_volume": str(_q2(volume)),
            "commission": commission.to_dict(),
            "split": split.to_dict(),
        }

    async def career_level(
        self,
        reseller_id: str,
        *,
        company_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[str]:
        policy = await self.get_policy(company_id)
        if not policy.use_dynamic_tiers:
            return None
        volume = await self.monthly_volume(reseller_id, now)
        return self.engine(policy).career_level(volume)
