"""
Commission Policy (Canonical)
=============================

Single source of truth for the reseller commission split rules.

Key requirements implemented:
- A tier table maps a reseller's monthly paid-sales volume to a split
  between reseller and company.
- Tier ranges are half-open: [min_monthly_sales, max_monthly_sales).
- The last tier may be open-ended (max_monthly_sales = None).
- Admin saves overwrite the whole document; validation happens on save.

Non-goals:
- No DB access (pure domain rules).
- No HTTP / FastAPI logic.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional


D = Decimal

HUNDRED = D("100")

STANDARD_TIER_NAME = "Padrão"
STANDARD_RESELLER_PERCENTAGE = D("70")


class CommissionPolicyError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _q2(x: Decimal) -> Decimal:
    return x.quantize(D("0.01"), rounding=ROUND_HALF_UP)


def _to_decimal(v: Any, default: Decimal = D("0")) -> Decimal:
    if v is None:
        return default
    if isinstance(v, Decimal):
        return v
    if isinstance(v, bool):
        return default
    try:
        out = D(str(v).strip())
    except Exception:
        return default
    if not out.is_finite():
        return default
    return out


def _optional_decimal(v: Any) -> Optional[Decimal]:
    # Empty form inputs arrive as "" or 0 from the admin screen and mean "no upper bound".
    # Negative values are kept so validation rejects them.
    if v is None or v == "":
        return None
    out = _to_decimal(v, D("0"))
    if out == D("0"):
        return None
    return out


def _to_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(v, (int, float, Decimal)):
        return v == 1
    return False


def _json_number(x: Decimal) -> Any:
    q = _q2(x)
    return int(q) if q == q.to_integral_value() else float(q)


@dataclass(frozen=True)
class SalesTier:
    """
    A named bracket of monthly sales volume.

    Example:
        Iniciante: 0     <= volume < 2000  -> 65 / 35
        Ouro:      10000 <= volume         -> 80 / 20
    """
    id: str
    name: str
    min_monthly_sales: Decimal
    reseller_percentage: Decimal
    company_percentage: Decimal
    max_monthly_sales: Optional[Decimal] = None

    @property
    def is_open_ended(self) -> bool:
        return self.max_monthly_sales is None

    def contains(self, volume: Decimal) -> bool:
        if volume < self.min_monthly_sales:
            return False
        return self.max_monthly_sales is None or volume < self.max_monthly_sales

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "min_monthly_sales": str(_q2(self.min_monthly_sales)),
            "max_monthly_sales": None
            if self.max_monthly_sales is None
            else str(_q2(self.max_monthly_sales)),
            "reseller_percentage": str(_q2(self.reseller_percentage)),
            "company_percentage": str(_q2(self.company_percentage)),
        }

    def to_storage(self) -> Dict[str, Any]:
        """
        Shape of a tier inside the stored jsonb document: plain JSON numbers,
        and no max_monthly_sales key when the tier is open-ended.
        """
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "min_monthly_sales": _json_number(self.min_monthly_sales),
            "reseller_percentage": _json_number(self.reseller_percentage),
            "company_percentage": _json_number(self.company_percentage),
        }
        if self.max_monthly_sales is not None:
            out["max_monthly_sales"] = _json_number(self.max_monthly_sales)
        return out

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "SalesTier":
        reseller_pct = _to_decimal(data.get("reseller_percentage"), STANDARD_RESELLER_PERCENTAGE)
        company_raw = data.get("company_percentage")
        company_pct = (
            HUNDRED - reseller_pct
            if company_raw is None or company_raw == ""
            else _to_decimal(company_raw, HUNDRED - reseller_pct)
        )
        return SalesTier(
            id=str(data.get("id") or "").strip() or str(uuid.uuid4()),
            name=str(data.get("name") or "").strip(),
            min_monthly_sales=_to_decimal(data.get("min_monthly_sales"), D("0")),
            max_monthly_sales=_optional_decimal(data.get("max_monthly_sales")),
            reseller_percentage=reseller_pct,
            company_percentage=company_pct,
        )


def default_tiers() -> List[SalesTier]:
    return [
        SalesTier(
            id=str(uuid.uuid4()),
            name="Iniciante",
            min_monthly_sales=D("0"),
            max_monthly_sales=D("2000"),
            reseller_percentage=D("65"),
            company_percentage=D("35"),
        ),
        SalesTier(
            id=str(uuid.uuid4()),
            name="Bronze",
            min_monthly_sales=D("2000"),
            max_monthly_sales=D("4500"),
            reseller_percentage=D("70"),
            company_percentage=D("30"),
        ),
        SalesTier(
            id=str(uuid.uuid4()),
            name="Prata",
            min_monthly_sales=D("4500"),
            max_monthly_sales=D("10000"),
            reseller_percentage=D("75"),
            company_percentage=D("25"),
        ),
        SalesTier(
            id=str(uuid.uuid4()),
            name="Ouro",
            min_monthly_sales=D("10000"),
            max_monthly_sales=None,
            reseller_percentage=D("80"),
            company_percentage=D("20"),
        ),
    ]


@dataclass(frozen=True)
class CommissionPolicy:
    """
    Top-level commission configuration, stored as one JSON document.

    use_dynamic_tiers=False means every sale uses the standard split,
    regardless of the tier table.
    """
    use_dynamic_tiers: bool = False
    sales_tiers: List[SalesTier] = field(default_factory=default_tiers)
    updated_at: Optional[str] = None

    # -----------------------------
    # Ordering
    # -----------------------------
    def sorted_tiers(self) -> List[SalesTier]:
        return sorted(self.sales_tiers, key=lambda t: t.min_monthly_sales)

    # -----------------------------
    # Validation (admin save)
    # -----------------------------
    def validate_for_save(self) -> None:
        if not self.sales_tiers:
            raise CommissionPolicyError("At least one commission tier is required")

        for i, t in enumerate(self.sales_tiers, start=1):
            if not t.name.strip():
                raise CommissionPolicyError(f"Tier {i} needs a name")
            for label, pct in (
                ("reseller_percentage", t.reseller_percentage),
                ("company_percentage", t.company_percentage),
            ):
                if pct < D("0") or pct > HUNDRED:
                    raise CommissionPolicyError(f'Tier "{t.name}": {label} must be between 0 and 100')
            if t.reseller_percentage + t.company_percentage != HUNDRED:
                raise CommissionPolicyError(f'Tier "{t.name}": percentages must add up to 100')
            if t.min_monthly_sales < D("0"):
                raise CommissionPolicyError(f'Tier "{t.name}": minimum sales cannot be negative')
            if t.max_monthly_sales is not None and t.min_monthly_sales >= t.max_monthly_sales:
                raise CommissionPolicyError(f'Tier "{t.name}": minimum must be lower than maximum')

        ordered = self.sorted_tiers()
        if ordered[0].min_monthly_sales != D("0"):
            raise CommissionPolicyError(f'Tier "{ordered[0].name}" must start at 0')

        for current, following in zip(ordered, ordered[1:]):
            if current.max_monthly_sales is None:
                raise CommissionPolicyError(
                    f'Tier "{current.name}" is open-ended but is followed by "{following.name}"'
                )
            if current.max_monthly_sales < following.min_monthly_sales:
                raise CommissionPolicyError(
                    f'Gap between "{current.name}" and "{following.name}": '
                    f"{_q2(current.max_monthly_sales)} to {_q2(following.min_monthly_sales)} is not covered"
                )
            if current.max_monthly_sales > following.min_monthly_sales:
                raise CommissionPolicyError(
                    f'Tiers "{current.name}" and "{following.name}" overlap'
                )

    # -----------------------------
    # Serialization
    # -----------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "use_dynamic_tiers": self.use_dynamic_tiers,
            "sales_tiers": [t.to_dict() for t in self.sorted_tiers()],
            "updated_at": self.updated_at,
        }

    def to_storage(self) -> Dict[str, Any]:
        return {
            "use_dynamic_tiers": self.use_dynamic_tiers,
            "sales_tiers": [t.to_storage() for t in self.sorted_tiers()],
            "updated_at": self.updated_at,
        }

    @staticmethod
    def from_dict(data: Optional[Dict[str, Any]]) -> "CommissionPolicy":
        """
        Create a CommissionPolicy from the stored JSON document.
        A missing or empty tier list falls back to the default tiers.
        """
        data = data or {}

        tiers: List[SalesTier] = []
        for t in data.get("sales_tiers") or []:
            if isinstance(t, dict):
                tiers.append(SalesTier.from_dict(t))

        return CommissionPolicy(
            use_dynamic_tiers=_to_bool(data.get("use_dynamic_tiers")),
            sales_tiers=tiers if tiers else default_tiers(),
            updated_at=data.get("updated_at"),
        )

    @staticmethod
    def from_admin_payload(data: Optional[Dict[str, Any]]) -> "CommissionPolicy":
        """
        Like from_dict, but keeps an empty tier list empty so that
        validate_for_save can reject it.
        """
        data = data or {}
        tiers = [SalesTier.from_dict(t) for t in (data.get("sales_tiers") or []) if isinstance(t, dict)]
        return CommissionPolicy(
            use_dynamic_tiers=_to_bool(data.get("use_dynamic_tiers")),
            sales_tiers=tiers,
        )
