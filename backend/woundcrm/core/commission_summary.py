# backend/woundcrm/core/commission_summary.py
from __future__ import annotations

from typing import Iterable

from woundcrm.core.commission_periods import AssignmentsByInvoice, assignments_of
from woundcrm.core.money import ZERO
from woundcrm.schemas.commission import CommissionSummary, RepCommissionSummary
from woundcrm.schemas.invoice import Invoice


def summarize_commissions(
    invoices: Iterable[Invoice],
    assignments_by_invoice: AssignmentsByInvoice,
) -> CommissionSummary:
    """
    Paid vs pending rep commission, overall and per representative.

    An assignment counts as paid once its invoice carries a
    commission_payment_date, regardless of invoice status.
    """
    by_rep: dict[int, dict] = {}
    total_paid = ZERO
    total_pending = ZERO

    for inv in invoices:
        paid = inv.commission_payment_date is not None
        for a in assignments_of(assignments_by_invoice.get(inv.id)):
            row = by_rep.setdefault(
                a.representative_id,
                {"name": a.representative_name, "paid": ZERO, "pending": ZERO, "invoices": set()},
            )
            if row["name"] is None:
                row["name"] = a.representative_name
            row["invoices"].add(inv.id)

            if paid:
                row["paid"] += a.commission_amount
                total_paid += a.commission_amount
            else:
                row["pending"] += a.commission_amount
                total_pending += a.commission_amount

    breakdown = [
        RepCommissionSummary(
            representative_id=rep_id,
            representative_name=row["name"],
            total_commission=row["paid"] + row["pending"],
            paid_commission=row["paid"],
            pending_commission=row["pending"],
            invoice_count=len(row["invoices"]),
        )
        for rep_id, row in sorted(by_rep.items())
    ]

    return CommissionSummary(total_paid=total_paid, total_pending=total_pending, by_representative=breakdown)
