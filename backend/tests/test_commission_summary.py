# tests/test_commission_summary.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

from woundcrm.core.commission_summary import summarize_commissions
from woundcrm.schemas.invoice import InvoiceStatus


def test_paid_vs_pending_by_commission_payment_date(invoice_factory, assignment_factory):
    paid = invoice_factory(
        1,
        status=InvoiceStatus.CLOSED,
        payment_date=date(2024, 3, 5),
        commission_payment_date=date(2024, 3, 15),
    )
    closed_unpaid = invoice_factory(2, status=InvoiceStatus.CLOSED, payment_date=date(2024, 3, 20))
    still_open = invoice_factory(3)
    by_invoice = {
        1: [assignment_factory(1, 1, "100.00"), assignment_factory(1, 2, "30.00")],
        2: [assignment_factory(2, 1, "50.00")],
        3: [assignment_factory(3, 2, "20.00")],
    }

    summary = summarize_commissions([paid, closed_unpaid, still_open], by_invoice)

    assert summary.total_paid == Decimal("130.00")
    assert summary.total_pending == Decimal("70.00")

    rep1, rep2 = summary.by_representative
    assert (rep1.representative_id, rep1.paid_commission, rep1.pending_commission) == (1, Decimal("100.00"), Decimal("50.00"))
    assert rep1.total_commission == Decimal("150.00")
    assert rep1.invoice_count == 2
    assert (rep2.representative_id, rep2.paid_commission, rep2.pending_commission) == (2, Decimal("30.00"), Decimal("20.00"))


def test_empty_summary():
    summary = summarize_commissions([], {})

    assert summary.total_paid == 0
    assert summary.total_pending == 0
    assert summary.by_representative == []
