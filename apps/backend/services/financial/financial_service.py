"""
Financial Summary
=================

Reseller balances derived from paid sales and withdrawals.

Release rules:
- A paid sale becomes withdrawable `release_days` after paid_at,
  depending on the payment method (pix 1, card 30, cash 0, other 30).
- Withdrawals that are requested or processing are reserved against the
  available balance; completed withdrawals are deducted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from apps.backend.services.commission.commission_policy import D, _q2, _to_decimal

RELEASE_DAYS = {
    "pix": 1,
    "cartao": 30,
    "cartão": 30,
    "dinheiro": 0,
}
DEFAULT_RELEASE_DAYS = 30

SALE_CONFIRMED = "confirmada"
SALE_CANCELLED = "cancelada"
WITHDRAWAL_DONE = "concluido"
WITHDRAWAL_PENDING = ("solicitado", "em_processamento")


def release_days(payment_method: Optional[str]) -> int:
    return RELEASE_DAYS.get((payment_method or "").strip().lower(), DEFAULT_RELEASE_DAYS)


def _parse_ts(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        try:
            ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def release_date(paid_at: Any, payment_method: Optional[str]) -> Optional[datetime]:
    paid = _parse_ts(paid_at)
    if paid is None:
        return None
    return paid + timedelta(days=release_days(payment_method))


def is_balance_available(paid_at: Any, payment_method: Optional[str], now: Optional[datetime] = None) -> bool:
    released = release_date(paid_at, payment_method)
    if released is None:
        return False
    return (now or datetime.now(timezone.utc)) >= released


def _sum(rows: Iterable[Dict[str, Any]], column: str) -> Decimal:
    return _q2(sum((_to_decimal(r.get(column), D("0")) for r in rows), D("0")))


@dataclass(frozen=True)
class FinancialSummary:
    available_balance: Decimal
    pending_balance: Decimal
    future_balance: Decimal
    total_earned: Decimal
    total_withdrawn: Decimal
    future_releases: List[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "available_balance": str(self.available_balance),
            "pending_balance": str(self.pending_balance),
            "future_balance": str(self.future_balance),
            "total_earned": str(self.total_earned),
            "total_withdrawn": str(self.total_withdrawn),
            "future_releases": self.future_releases,
        }


def summarize(
    sales: List[Dict[str, Any]],
    withdrawals: List[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> FinancialSummary:
    now = now or datetime.now(timezone.utc)

    paid = [s for s in sales if s.get("paid") is True and s.get("status") == SALE_CONFIRMED]
    available = [s for s in paid if is_balance_available(s.get("paid_at"), s.get("payment_method"), now)]
    future = [s for s in paid if not is_balance_available(s.get("paid_at"), s.get("payment_method"), now)]
    pending = [s for s in sales if s.get("paid") is not True and s.get("status") != SALE_CANCELLED]

    withdrawn = _sum([w for w in withdrawals if w.get("status") == WITHDRAWAL_DONE], "amount")
    reserved = _sum([w for w in withdrawals if w.get("status") in WITHDRAWAL_PENDING], "amount")

    future_releases = []
    for s in future:
        released = release_date(s.get("paid_at"), s.get("payment_method"))
        future_releases.append(
            {
                "sale_id": s.get("id"),
                "reseller_amount": str(_q2(_to_decimal(s.get("reseller_amount"), D("0")))),
                "release_date": released.isoformat() if released else None,
            }
        )

    return FinancialSummary(
        available_balance=max(D("0.00"), _sum(available, "reseller_amount") - withdrawn - reserved),
        pending_balance=_sum(pending, "reseller_amount"),
        future_balance=_sum(future, "reseller_amount"),
        total_earned=_sum(paid, "reseller_amount"),
        total_withdrawn=withdrawn,
        future_releases=future_releases,
    )


class FinancialService:
    def __init__(self, supabase_client: Any) -> None:
        self.sb = supabase_client

    def reseller_summary(self, reseller_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        sales = (
            self.sb.table("sales_with_split")
            .select("id,reseller_amount,payment_method,paid,paid_at,status,created_at")
            .eq("reseller_id", reseller_id)
            .execute()
            .data
        ) or []
        withdrawals = (
            self.sb.table("withdrawals")
            .select("amount,status")
            .eq("reseller_id", reseller_id)
            .execute()
            .data
        ) or []
        summary = summarize(sales, withdrawals, now)
        return {"reseller_id": reseller_id, **summary.to_dict()}
