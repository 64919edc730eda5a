"""
Commission Engine (Canonical)
=============================

Purpose:
- Deterministic tier resolution from a reseller's monthly paid-sales volume.
- No side effects, no DB access, no HTTP.
- Produces payloads for the sale-confirmation quote and the storefront
  career badge.

Resolution rules:
- Tiers are scanned ascending by min_monthly_sales; the first tier whose
  half-open range [min, max) contains the volume wins.
- When no tier contains the volume, the last tier applies (open-ended).
- Dynamic tiers disabled, or no tiers at all, resolve to the standard split.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from .commission_policy import (
    CommissionPolicy,
    SalesTier,
    D,
    HUNDRED,
    STANDARD_RESELLER_PERCENTAGE,
    STANDARD_TIER_NAME,
    _q2,
    _to_decimal,
)


@dataclass(frozen=True)
class CommissionResult:
    reseller_percentage: Decimal
    company_percentage: Decimal
    tier_name: str
    tier_id: Optional[str] = None
    is_dynamic: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reseller_percentage": str(_q2(self.reseller_percentage)),
            "company_percentage": str(_q2(self.company_percentage)),
            "tier_name": self.tier_name,
            "tier_id": self.tier_id,
            "is_dynamic": self.is_dynamic,
        }


@dataclass(frozen=True)
class TierStatus:
    """
    Snapshot of a reseller's position in the tier table.
    """
    monthly_volume: Decimal
    commission: CommissionResult
    next_tier: Optional[SalesTier]
    amount_to_next_tier: Optional[Decimal]
    is_top_tier: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthly_volume": str(_q2(self.monthly_volume)),
            "commission": self.commission.to_dict(),
            "next_tier": None
            if self.next_tier is None
            else {
                "id": self.next_tier.id,
                "name": self.next_tier.name,
                "min_monthly_sales": str(_q2(self.next_tier.min_monthly_sales)),
                "reseller_percentage": str(_q2(self.next_tier.reseller_percentage)),
            },
            "amount_to_next_tier": None
            if self.amount_to_next_tier is None
            else str(_q2(self.amount_to_next_tier)),
            "is_top_tier": self.is_top_tier,
        }


class CommissionEngine:
    def __init__(
        self,
        policy: CommissionPolicy,
        *,
        standard_reseller_percentage: Decimal = STANDARD_RESELLER_PERCENTAGE,
    ) -> None:
        self.policy = policy
        self.standard_reseller_percentage = _to_decimal(
            standard_reseller_percentage, STANDARD_RESELLER_PERCENTAGE
        )

    # -----------------------------
    # Core resolution
    # -----------------------------
    def standard(self) -> CommissionResult:
        return CommissionResult(
            reseller_percentage=self.standard_reseller_percentage,
            company_percentage=HUNDRED - self.standard_reseller_percentage,
            tier_name=STANDARD_TIER_NAME,
        )

    def resolve_tier(self, monthly_volume: Any) -> Optional[SalesTier]:
        """
        Tier containing the volume, the last tier when none does,
        None only when the table is empty.
        """
        volume = self._normalize_volume(monthly_volume)
        ordered = self.policy.sorted_tiers()
        for tier in ordered:
            if tier.contains(volume):
                return tier
        if ordered:
            return ordered[-1]
        return None

    def resolve(self, monthly_volume: Any) -> CommissionResult:
        if not self.policy.use_dynamic_tiers:
            return self.standard()

        tier = self.resolve_tier(monthly_volume)
        if tier is None:
            return self.standard()

        return CommissionResult(
            reseller_percentage=tier.reseller_percentage,
            company_percentage=tier.company_percentage,
            tier_name=tier.name,
            tier_id=tier.id,
            is_dynamic=True,
        )

    # -----------------------------
    # Progress
    # -----------------------------
    def status(self, monthly_volume: Any) -> TierStatus:
        volume = self._normalize_volume(monthly_volume)
        commission = self.resolve(volume)

        next_tier: Optional[SalesTier] = None
        if commission.is_dynamic:
            for tier in self.policy.sorted_tiers():
                if tier.min_monthly_sales > volume:
                    next_tier = tier
                    break

        remaining = None
        if next_tier is not None:
            remaining = _q2(max(D("0"), next_tier.min_monthly_sales - volume))

        return TierStatus(
            monthly_volume=_q2(volume),
            commission=commission,
            next_tier=next_tier,
            amount_to_next_tier=remaining,
            is_top_tier=next_tier is None,
        )

    def career_level(self, monthly_volume: Any) -> Optional[str]:
        """
        Tier name shown on the public storefront, or None when the
        company does not run dynamic tiers.
        """
        if not self.policy.use_dynamic_tiers or not self.policy.sales_tiers:
            return None
        tier = self.resolve_tier(monthly_volume)
        return tier.name if tier else None

    # -----------------------------
    # Utilities
    # -----------------------------
    @staticmethod
    def _normalize_volume(value: Any) -> Decimal:
        volume = _to_decimal(value, D("0"))
        if volume < D("0"):
            volume = D("0")
        return volume
