from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from .commission_policy import CommissionPolicyError, D, HUNDRED, _q2, _to_decimal


@dataclass(frozen=True)
class SplitResult:
    total_amount: Decimal
    reseller_percentage: Decimal
    company_percentage: Decimal
    reseller_amount: Decimal
    company_amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_amount": str(self.total_amount),
            "reseller_percentage": str(_q2(self.reseller_percentage)),
            "company_percentage": str(_q2(self.company_percentage)),
            "reseller_amount": str(self.reseller_amount),
            "company_amount": str(self.company_amount),
        }


def calculate_split(total_amount: Any, reseller_percentage: Any) -> SplitResult:
    """
    Divide a sale between reseller and company.

    The reseller share is rounded to cents and the company gets the
    remainder, so both parts always add up to the total.
    """
    total = _q2(_to_decimal(total_amount, D("0")))
    if total < D("0"):
        raise CommissionPolicyError("total_amount cannot be negative")

    pct = _to_decimal(reseller_percentage, D("-1"))
    if pct < D("0") or pct > HUNDRED:
        raise CommissionPolicyError("reseller_percentage must be between 0 and 100")

    reseller_amount = _q2(total * pct / HUNDRED)
    return SplitResult(
        total_amount=total,
        reseller_percentage=pct,
        company_percentage=HUNDRED - pct,
        reseller_amount=reseller_amount,
        company_amount=total - reseller_amount,
    )
