from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from woundcrm.core.pricing import PricingTable, default_pricing_table
from woundcrm.schemas.commission import CommissionAssignment
from woundcrm.schemas.invoice import Invoice, InvoiceStatus
from woundcrm.schemas.treatment import Treatment
from woundcrm.services.invoicing import InvoicingService


# ---------------------------------------------------------
# Reference data
# ---------------------------------------------------------
@pytest.fixture(scope="session")
def pricing() -> PricingTable:
    return default_pricing_table()


# Q3 2025 Membrane Wrap, 1190.44 / cm²
MEMBRANE_WRAP_Q3 = ("Biolab", "Membrane Wrap", "Q4205-Q3")


@pytest.fixture()
def service(pricing) -> InvoicingService:
    return InvoicingService(pricing)


# ---------------------------------------------------------
# Factories
# ---------------------------------------------------------
def make_treatment(**overrides) -> Treatment:
    data = dict(
        id=1,
        patient_id=100,
        graft_product=MEMBRANE_WRAP_Q3,
        wound_area="10",
        treatment_date=date(2024, 3, 1),
    )
    data.update(overrides)
    return Treatment(**data)


def make_invoice(
    invoice_id: int = 1,
    *,
    status: InvoiceStatus = InvoiceStatus.OPEN,
    invoice_amount: str = "1000.00",
    invoice_date: date | None = date(2024, 3, 1),
    payment_date: date | None = None,
    **overrides,
) -> Invoice:
    data = dict(
        id=invoice_id,
        treatment_id=invoice_id,
        invoice_number=f"INV-{invoice_id:04d}",
        total_billable=(Decimal(invoice_amount) / Decimal("0.6")).quantize(Decimal("0.01")),
        invoice_amount=Decimal(invoice_amount),
        status=status,
        invoice_date=invoice_date,
        due_date=invoice_date + timedelta(days=30) if invoice_date else None,
        payment_date=payment_date,
    )
    data.update(overrides)
    return Invoice(**data)


def make_assignment(
    invoice_id: int,
    rep_id: int,
    amount: str,
    rate: str = "10",
    name: str | None = None,
) -> CommissionAssignment:
    return CommissionAssignment(
        invoice_id=invoice_id,
        representative_id=rep_id,
        representative_name=name or f"Rep {rep_id}",
        commission_rate=Decimal(rate),
        commission_amount=Decimal(amount),
    )


@pytest.fixture()
def treatment_factory():
    return make_treatment


@pytest.fixture()
def invoice_factory():
    return make_invoice


@pytest.fixture()
def assignment_factory():
    return make_assignment
