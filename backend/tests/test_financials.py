# tests/test_financials.py
from __future__ import annotations

from decimal import Decimal

import pytest

from woundcrm.core.errors import UnknownProductError
from woundcrm.core.financials import compute_financials, compute_treatment_financials, parse_wound_size
from woundcrm.core.money import quantize_cents


def test_scenario_a_membrane_wrap_ten_sq_cm():
    f = compute_financials(10, 1190.44)

    assert f.total_billable == Decimal("11904.40")
    assert f.invoice_amount == Decimal("7142.64")


@pytest.mark.parametrize(
    "area, price",
    [
        ("0", "1190.44"),
        ("1", "800.00"),
        ("2.5", "3574.39"),
        ("7.25", "1640.93"),
        ("160", "4770.00"),
        ("0.01", "0.01"),
    ],
)
def test_billable_and_invoice_follow_default_rate(area, price):
    f = compute_financials(area, price)

    assert f.total_billable == quantize_cents(Decimal(area) * Decimal(price))
    assert f.invoice_amount == quantize_cents(f.total_billable * Decimal("0.6"))


@pytest.mark.parametrize("blank", [None, "", "   ", "abc", "-5", -3, float("nan"), float("inf")])
def test_blank_or_invalid_wound_area_counts_as_zero(blank):
    f = compute_financials(blank, "1190.44")

    assert f.total_billable == Decimal("0.00")
    assert f.invoice_amount == Decimal("0.00")


@pytest.mark.parametrize("area, price", [("1e30", "1190.44"), ("10", "1e40")])
def test_out_of_range_amounts_count_as_zero(area, price):
    f = compute_financials(area, price)

    assert f.total_billable == Decimal("0")
    assert f.invoice_amount == Decimal("0")


def test_negative_price_counts_as_zero():
    f = compute_financials("10", "-1190.44")

    assert f.total_billable == Decimal("0.00")


def test_currency_formatted_price_is_accepted():
    f = compute_financials("2", "$1,190.44")

    assert f.total_billable == Decimal("2380.88")


def test_custom_invoice_rate():
    f = compute_financials("10", "100", invoice_rate=Decimal("0.5"))

    assert f.invoice_amount == Decimal("500.00")


def test_treatment_financials_use_the_product_price(pricing, treatment_factory):
    f = compute_treatment_financials(treatment_factory(wound_area="10"), pricing)

    assert f.invoice_amount == Decimal("7142.64")


def test_treatment_with_unknown_product_fails(pricing, treatment_factory):
    treatment = treatment_factory(graft_product=("Acme", "Ghost Graft", "Q0000-Q0"))

    with pytest.raises(UnknownProductError):
        compute_treatment_financials(treatment, pricing)


def test_treatment_blank_wound_area_is_stored_as_zero(treatment_factory):
    assert treatment_factory(wound_area="").wound_area == Decimal("0")
    assert treatment_factory(wound_area=-4).wound_area == Decimal("0")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("160", Decimal("160")),
        ("160.00", Decimal("160.00")),
        ("3x2", Decimal("6")),
        ("3 x 2 cm", Decimal("6")),
        ("2.5cm x 1.5cm", Decimal("3.75")),
        ("4×5", Decimal("20")),
        ("about 12 cm2", Decimal("12")),
        ("n/a", Decimal("0")),
        ("", Decimal("0")),
        (None, Decimal("0")),
    ],
)
def test_parse_wound_size(raw, expected):
    assert parse_wound_size(raw) == expected
