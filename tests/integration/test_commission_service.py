"""
Integration tests for CommissionService over the in-memory Supabase fake.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from apps.backend.services.commission.commission_policy import CommissionPolicyError
from apps.backend.services.commission.commission_repository import CommissionRepository
from apps.backend.services.commission.commission_service import CommissionService

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(fake_supabase):
    return CommissionService(CommissionRepository(fake_supabase), tz=timezone.utc)


@pytest.fixture
def october_sales(fake_supabase):
    fake_supabase.tables["sales_with_split"] = [
        {"reseller_id": "r1", "total_amount": 3000, "paid": True, "created_at": "2026-10-02T10:00:00+00:00"},
        {"reseller_id": "r1", "total_amount": 1500, "paid": True, "created_at": "2026-10-17T22:00:00+00:00"},
        # unpaid, other reseller, previous month: all excluded
        {"reseller_id": "r1", "total_amount": 9000, "paid": False, "created_at": "2026-10-05T10:00:00+00:00"},
        {"reseller_id": "r2", "total_amount": 9000, "paid": True, "created_at": "2026-10-05T10:00:00+00:00"},
        {"reseller_id": "r1", "total_amount": 9000, "paid": True, "created_at": "2026-09-30T23:59:59+00:00"},
    ]


@pytest.mark.asyncio
async def test_missing_config_falls_back_to_defaults(service):
    policy = await service.get_policy()
    assert policy.use_dynamic_tiers is False
    assert len(policy.sales_tiers) == 4


@pytest.mark.asyncio
async def test_monthly_volume_filters(service, october_sales, fake_supabase):
    volume = await service.monthly_volume("r1", NOW)
    assert volume == Decimal("4500.00")
    assert ("sales_with_split", "eq", "paid", True) in fake_supabase.calls


@pytest.mark.asyncio
async def test_current_commission_at_boundary(service, october_sales, fake_supabase, dynamic_config):
    fake_supabase.tables["commission_config"] = [dynamic_config]
    out = await service.current_commission("r1", now=NOW)
    assert out["monthly_volume"] == "4500.00"
    assert out["commission"]["tier_name"] == "Prata"
    assert out["next_tier"]["name"] == "Ouro"
    assert out["amount_to_next_tier"] == "5500.00"


@pytest.mark.asyncio
async def test_quote_sale(service, october_sales, fake_supabase, dynamic_config):
    fake_supabase.tables["commission_config"] = [dynamic_config]
    out = await service.quote_sale("r1", Decimal("120.00"), now=NOW)
    assert out["commission"]["reseller_percentage"] == "75.00"
    assert out["split"]["reseller_amount"] == "90.00"
    assert out["split"]["company_amount"] == "30.00"


@pytest.mark.asyncio
async def test_quote_sale_standard_split_when_disabled(service, october_sales):
    out = await service.quote_sale("r1", Decimal("100"), now=NOW)
    assert out["commission"]["tier_name"] == "Padrão"
    assert out["split"]["reseller_amount"] == "70.00"


@pytest.mark.asyncio
async def test_company_settings_override_default_row(service, october_sales, fake_supabase, dynamic_config, tier_rows):
    fake_supabase.tables["commission_config"] = [{"id": "default", "use_dynamic_tiers": False, "sales_tiers": []}]
    fake_supabase.tables["companies"] = [
        {"id": "c1", "commission_settings": {"use_dynamic_tiers": True, "sales_tiers": tier_rows}},
        {"id": "c2", "commission_settings": None},
    ]
    assert await service.career_level("r1", company_id="c1", now=NOW) == "Prata"
    assert await service.career_level("r1", company_id="c2", now=NOW) is None
    assert await service.career_level("r1", now=NOW) is None


@pytest.mark.asyncio
async def test_save_policy_overwrites_default_row(service, fake_supabase, tier_rows):
    fake_supabase.tables["commission_config"] = [{"id": "default", "use_dynamic_tiers": False, "sales_tiers": []}]
    saved = await service.save_policy({"use_dynamic_tiers": True, "sales_tiers": tier_rows})

    rows = fake_supabase.tables["commission_config"]
    assert len(rows) == 1
    assert rows[0]["id"] == "default"
    assert rows[0]["use_dynamic_tiers"] is True
    assert len(rows[0]["sales_tiers"]) == 4
    assert rows[0]["sales_tiers"][0]["min_monthly_sales"] == 0
    assert isinstance(rows[0]["sales_tiers"][0]["reseller_percentage"], int)
    assert "max_monthly_sales" not in rows[0]["sales_tiers"][-1]
    assert saved.updated_at is not None


@pytest.mark.asyncio
async def test_save_policy_rejects_gaps(service, fake_supabase, tier_rows):
    tier_rows[1]["min_monthly_sales"] = 2500
    with pytest.raises(CommissionPolicyError):
        await service.save_policy({"use_dynamic_tiers": True, "sales_tiers": tier_rows})
    assert "commission_config" not in fake_supabase.tables
