from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple

from .commission_policy import D, _q2, _to_decimal


def month_bounds(now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> Tuple[datetime, datetime]:
    """
    [start of month, start of next month) for the calendar month containing
    `now`, as seen in the business timezone.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(tz)

    start = datetime(local.year, local.month, 1, tzinfo=tz)
    if local.month == 12:
        end = datetime(local.year + 1, 1, 1, tzinfo=tz)
    else:
        end = datetime(local.year, local.month + 1, 1, tzinfo=tz)
    return start, end


def sum_paid_volume(rows: Iterable[Dict[str, Any]]) -> Decimal:
    total = D("0")
    for row in rows or []:
        if not isinstance(row, dict):
            continue
        total += _to_decimal(row.get("total_amount"), D("0"))
    return _q2(total)
