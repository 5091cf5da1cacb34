# backend/woundcrm/core/invoice_lifecycle.py
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from woundcrm.core.config import settings
from woundcrm.core.errors import InvalidTransitionError
from woundcrm.schemas.invoice import Financials, Invoice, InvoiceStatus
from woundcrm.schemas.treatment import Treatment


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _coerce_status(value: Union[InvoiceStatus, str], current: InvoiceStatus) -> InvoiceStatus:
    try:
        return InvoiceStatus((value.value if isinstance(value, InvoiceStatus) else str(value)).strip().lower())
    except ValueError:
        raise InvalidTransitionError(
            f"Unknown invoice status {value!r}. Allowed: {[s.value for s in InvoiceStatus]}",
            current_status=current.value,
            requested_status=str(value),
        )


def create_invoice(
    *,
    invoice_id: int,
    treatment: Treatment,
    financials: Financials,
    invoice_number: str,
    invoice_date: date,
    due_date: Optional[date] = None,
) -> Invoice:
    """
    New open invoice snapshotting the treatment's financials.
    Later treatment edits do not touch it; due date defaults to invoice date + PAYABLE_TERM_DAYS.
    """
    return Invoice(
        id=invoice_id,
        treatment_id=treatment.id,
        invoice_number=invoice_number,
        total_billable=financials.total_billable,
        invoice_amount=financials.invoice_amount,
        status=InvoiceStatus.OPEN,
        invoice_date=invoice_date,
        due_date=due_date or invoice_date + timedelta(days=settings.PAYABLE_TERM_DAYS),
        treatment_date=treatment.treatment_date,
    )


def transition_invoice(
    invoice: Invoice,
    new_status: Union[InvoiceStatus, str],
    payment_date: Optional[date] = None,
) -> Invoice:
    """
    Move an invoice to any status. Returns a new Invoice; the input is untouched.

    Entering CLOSED requires payment_date in the same call. Leaving CLOSED keeps
    the old payment_date as history. A payment_date passed for any other target
    status is ignored.
    """
    target = _coerce_status(new_status, invoice.status)

    if target == InvoiceStatus.CLOSED:
        if payment_date is None:
            raise InvalidTransitionError(
                "A payment date is required to close an invoice.",
                current_status=invoice.status.value,
                requested_status=target.value,
            )
        return invoice.model_copy(update={"status": target, "payment_date": payment_date})

    return invoice.model_copy(update={"status": target})


def is_overdue(invoice: Invoice, today: Optional[date] = None) -> bool:
    """Calendar-day comparison; weekends and holidays are not special. No due date, never overdue."""
    if invoice.due_date is None:
        return False
    today = today or _today()
    return invoice.status != InvoiceStatus.CLOSED and today > invoice.due_date


def days_overdue(invoice: Invoice, today: Optional[date] = None) -> int:
    today = today or _today()
    if not is_overdue(invoice, today):
        return 0
    return (today - invoice.due_date).days


def record_commission_payment(invoice: Invoice, paid_on: Optional[date]) -> Invoice:
    """Stamp (or clear, with None) the date rep commissions were actually paid out."""
    return invoice.model_copy(update={"commission_payment_date": paid_on})


def record_house_payment(invoice: Invoice, paid_on: Optional[date]) -> Invoice:
    return invoice.model_copy(update={"house_payment_date": paid_on})
