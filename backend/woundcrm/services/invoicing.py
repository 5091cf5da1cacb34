"""Caller-side invoicing workflow.

Composes the pure engine in ``woundcrm.core`` the way the web layer uses it:

- price a treatment and open its invoice,
- (re)allocate rep commissions on every edit,
- move invoices through open / payable / closed,
- build the semimonthly commission report and its export rows.

The engine never logs; this module does.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Union

from woundcrm.core.commission_periods import (
    AssignmentsByInvoice,
    aggregate_periods,
    build_export_rows,
    date_range_for,
    filter_periods,
)
from woundcrm.core.commission_summary import summarize_commissions
from woundcrm.core.commissions import AssignmentLike, allocate_commissions
from woundcrm.core.config import settings
from woundcrm.core.errors import InvalidTransitionError, UnknownProductError
from woundcrm.core.financials import compute_treatment_financials
from woundcrm.core.invoice_lifecycle import create_invoice, transition_invoice
from woundcrm.core.pricing import PricingTable, default_pricing_table
from woundcrm.schemas.commission import (
    CommissionAllocation,
    CommissionExportRow,
    CommissionPaymentPeriod,
    CommissionSummary,
)
from woundcrm.schemas.invoice import Invoice, InvoiceStatus
from woundcrm.schemas.treatment import Treatment

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    lvl = (level or settings.LOG_LEVEL).strip().upper()
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # basicConfig is a no-op once handlers exist; the level still applies
    logging.getLogger().setLevel(lvl)


class InvoicingService:
    """
    Stateless apart from the pricing table it was built with.
    Persistence stays with the caller: every method returns new values to save.
    """

    def __init__(self, pricing: Optional[PricingTable] = None):
        self.pricing = pricing or default_pricing_table()

    # ==================== INVOICE CREATION ====================

    def invoice_treatment(
        self,
        treatment: Treatment,
        *,
        invoice_id: int,
        invoice_number: str,
        invoice_date: date,
        due_date: Optional[date] = None,
        assignments: Iterable[AssignmentLike] = (),
    ) -> tuple[Invoice, CommissionAllocation]:
        try:
            financials = compute_treatment_financials(treatment, self.pricing)
        except UnknownProductError:
            logger.warning(
                "Treatment %s references unknown graft product %s",
                treatment.id, treatment.graft_product,
            )
            raise

        invoice = create_invoice(
            invoice_id=invoice_id,
            treatment=treatment,
            financials=financials,
            invoice_number=invoice_number,
            invoice_date=invoice_date,
            due_date=due_date,
        )
        allocation = self.allocate(invoice, assignments)
        logger.info(
            "Invoice %s opened for treatment %s (billable=%s, invoice=%s, due=%s)",
            invoice.invoice_number, treatment.id,
            invoice.total_billable, invoice.invoice_amount, invoice.due_date,
        )
        return invoice, allocation

    # ==================== COMMISSIONS ====================

    def allocate(self, invoice: Invoice, assignments: Iterable[AssignmentLike]) -> CommissionAllocation:
        """Full recomputation for every add / edit / remove in the commission editor."""
        allocation = allocate_commissions(invoice.invoice_amount, assignments, invoice_id=invoice.id)
        if allocation.is_over_allocated:
            logger.warning(
                "Invoice %s over-allocated: rep rates total %s%% exceed pool of %s%%; house commission is 0",
                invoice.invoice_number, allocation.rate_total, allocation.pool_rate * 100,
            )
        else:
            logger.debug(
                "Invoice %s allocated: reps=%s house=%s",
                invoice.invoice_number, allocation.total_rep_commission, allocation.house_commission,
            )
        return allocation

    # ==================== STATUS ====================

    def change_status(
        self,
        invoice: Invoice,
        new_status: Union[InvoiceStatus, str],
        payment_date: Optional[date] = None,
    ) -> Invoice:
        try:
            updated = transition_invoice(invoice, new_status, payment_date)
        except InvalidTransitionError as e:
            logger.warning("Invoice %s status change rejected: %s", invoice.invoice_number, e)
            raise

        logger.info(
            "Invoice %s status %s -> %s (payment_date=%s)",
            invoice.invoice_number, invoice.status.value, updated.status.value, updated.payment_date,
        )
        return updated

    # ==================== REPORTING ====================

    def commission_report(
        self,
        invoices: Iterable[Invoice],
        assignments_by_invoice: AssignmentsByInvoice,
        *,
        preset: Optional[str] = None,
        today: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        representative_id: Optional[int] = None,
    ) -> list[CommissionPaymentPeriod]:
        """
        Semimonthly periods, optionally narrowed by a date preset
        (current_month, last_month, last_3_months, last_6_months) or a custom
        start/end on the period payment date.
        """
        if preset:
            start, end = date_range_for(preset, today or date.today())

        periods = filter_periods(
            aggregate_periods(invoices, assignments_by_invoice),
            start=start,
            end=end,
            representative_id=representative_id,
        )
        logger.info("Commission report: %d periods (start=%s, end=%s, rep=%s)", len(periods), start, end, representative_id)
        return periods

    def export_rows(
        self,
        invoices: Iterable[Invoice],
        assignments_by_invoice: AssignmentsByInvoice,
    ) -> list[CommissionExportRow]:
        rows = build_export_rows(invoices, assignments_by_invoice)
        logger.info("Commission export: %d rows", len(rows))
        return rows

    def summary(
        self,
        invoices: Iterable[Invoice],
        assignments_by_invoice: AssignmentsByInvoice,
    ) -> CommissionSummary:
        return summarize_commissions(invoices, assignments_by_invoice)
