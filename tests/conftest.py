"""
Shared fixtures.

FakeSupabase mimics the subset of the supabase-py query builder used by
the repositories: select/eq/gte/lt/order/limit/maybe_single plus
upsert/insert, over in-memory tables.
"""

from datetime import datetime
from types import SimpleNamespace

import pytest


def _cmp_value(v):
    if isinstance(v, str):
        try:
            return datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError:
            return v
    return v


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table_name = table
        self.filters = []
        self.op = "select"
        self.payload = None
        self.single = False
        self.limit_n = None
        self.order_by = None

    # builders
    def select(self, *_cols):
        self.db.calls.append((self.table_name, "select"))
        return self

    def eq(self, col, val):
        self.db.calls.append((self.table_name, "eq", col, val))
        self.filters.append(lambda r: r.get(col) == val)
        return self

    def gte(self, col, val):
        self.db.calls.append((self.table_name, "gte", col, val))
        self.filters.append(lambda r: r.get(col) is not None and _cmp_value(r.get(col)) >= _cmp_value(val))
        return self

    def lt(self, col, val):
        self.db.calls.append((self.table_name, "lt", col, val))
        self.filters.append(lambda r: r.get(col) is not None and _cmp_value(r.get(col)) < _cmp_value(val))
        return self

    def order(self, col, desc=False):
        self.order_by = (col, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def maybe_single(self):
        self.single = True
        return self

    def upsert(self, payload):
        self.op = "upsert"
        self.payload = payload
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    # terminal
    def execute(self):
        if self.table_name in self.db.failing:
            raise RuntimeError(f"relation {self.table_name} does not exist")

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op in ("upsert", "insert"):
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            for item in items:
                existing = next((r for r in rows if "id" in item and r.get("id") == item["id"]), None)
                if existing is not None and self.op == "upsert":
                    existing.update(item)
                else:
                    rows.append(dict(item))
            return SimpleNamespace(data=[dict(i) for i in items])

        out = [r for r in rows if all(f(r) for f in self.filters)]
        if self.order_by:
            col, desc = self.order_by
            out.sort(key=lambda r: r.get(col) or 0, reverse=desc)
        if self.limit_n is not None:
            out = out[: self.limit_n]
        if self.single:
            # recent supabase-py returns None when maybe_single matches nothing
            return SimpleNamespace(data=dict(out[0])) if out else None
        return SimpleNamespace(data=[dict(r) for r in out])


class FakeSupabase:
    def __init__(self, tables=None):
        self.tables = tables or {}
        self.failing = set()
        self.calls = []

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def tier_rows():
    """
    Tier table from the admin defaults, as stored JSON.
    """
    return [
        {"id": "t1", "name": "Iniciante", "min_monthly_sales": 0, "max_monthly_sales": 2000,
         "reseller_percentage": 65, "company_percentage": 35},
        {"id": "t2", "name": "Bronze", "min_monthly_sales": 2000, "max_monthly_sales": 4500,
         "reseller_percentage": 70, "company_percentage": 30},
        {"id": "t3", "name": "Prata", "min_monthly_sales": 4500, "max_monthly_sales": 10000,
         "reseller_percentage": 75, "company_percentage": 25},
        {"id": "t4", "name": "Ouro", "min_monthly_sales": 10000, "max_monthly_sales": None,
         "reseller_percentage": 80, "company_percentage": 20},
    ]


@pytest.fixture
def dynamic_config(tier_rows):
    return {"id": "default", "use_dynamic_tiers": True, "sales_tiers": tier_rows}
