from decimal import Decimal

import pytest

from apps.backend.services.commission.commission_policy import CommissionPolicyError
from apps.backend.services.commission.split import calculate_split


def test_even_split():
    split = calculate_split(Decimal("200"), Decimal("75"))
    assert split.reseller_amount == Decimal("150.00")
    assert split.company_amount == Decimal("50.00")
    assert split.company_percentage == Decimal("25")


def test_parts_always_add_up_to_total():
    for total in ("99.99", "0.01", "1234.57", "10.05"):
        for pct in ("65", "70", "75", "80", "33.33"):
            split = calculate_split(Decimal(total), Decimal(pct))
            assert split.reseller_amount + split.company_amount == split.total_amount


def test_reseller_share_rounds_half_up():
    split = calculate_split(Decimal("99.99"), Decimal("65"))
    assert split.reseller_amount == Decimal("64.99")
    assert split.company_amount == Decimal("35.00")


def test_accepts_plain_numbers():
    split = calculate_split(50, 70)
    assert split.to_dict()["reseller_amount"] == "35.00"


@pytest.mark.parametrize("pct", [Decimal("-1"), Decimal("100.01"), "abc"])
def test_invalid_percentage_rejected(pct):
    with pytest.raises(CommissionPolicyError):
        calculate_split(Decimal("10"), pct)


def test_negative_total_rejected():
    with pytest.raises(CommissionPolicyError):
        calculate_split(Decimal("-10"), Decimal("70"))
