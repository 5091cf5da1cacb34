# backend/woundcrm/core/commission_periods.py
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Union

from woundcrm.core.money import ZERO
from woundcrm.schemas.commission import (
    CommissionAllocation,
    CommissionAssignment,
    CommissionExportRow,
    CommissionPaymentPeriod,
)
from woundcrm.schemas.invoice import Invoice, InvoiceStatus

# Last day of the first payroll window (inclusive). The 16th starts the second one.
FIRST_HALF_LAST_DAY = 15

DATE_RANGE_PRESETS = ("current_month", "last_month", "last_3_months", "last_6_months")

AssignmentsByInvoice = Mapping[int, Union[CommissionAllocation, Iterable[CommissionAssignment]]]


@dataclass(frozen=True)
class PaymentWindow:
    period_start: date
    period_end: date
    payment_date: date


def _last_day(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def semimonthly_window(day: date) -> PaymentWindow:
    """
    1st-15th is paid on the 15th; 16th-end of month is paid on the last day.
    """
    if day.day <= FIRST_HALF_LAST_DAY:
        end = day.replace(day=FIRST_HALF_LAST_DAY)
        return PaymentWindow(period_start=day.replace(day=1), period_end=end, payment_date=end)

    end = _last_day(day.year, day.month)
    return PaymentWindow(period_start=day.replace(day=FIRST_HALF_LAST_DAY + 1), period_end=end, payment_date=end)


def reference_date(invoice: Invoice) -> Optional[date]:
    """payment_date, else invoice_date, else treatment_date (legacy rows)."""
    return invoice.payment_date or invoice.invoice_date or invoice.treatment_date


def assignments_of(value) -> tuple[CommissionAssignment, ...]:
    if value is None:
        return ()
    if isinstance(value, CommissionAllocation):
        return value.assignments
    return tuple(value)


def _bucketable(invoices: Iterable[Invoice]):
    """Closed invoices with a usable reference date, paired with their window."""
    for inv in invoices:
        if inv.status != InvoiceStatus.CLOSED:
            continue
        ref = reference_date(inv)
        if ref is None:
            continue
        yield inv, semimonthly_window(ref)


@dataclass
class _Bucket:
    representative_id: int
    window: PaymentWindow
    representative_name: Optional[str] = None
    total: Decimal = ZERO
    invoices: dict[int, Invoice] = field(default_factory=dict)


def aggregate_periods(
    invoices: Iterable[Invoice],
    assignments_by_invoice: AssignmentsByInvoice,
) -> list[CommissionPaymentPeriod]:
    """
    Group closed invoices' commission assignments into semimonthly payroll
    periods per representative, most recent payroll run first.
    """
    buckets: dict[tuple[int, date], _Bucket] = {}

    for inv, window in _bucketable(invoices):
        for a in assignments_of(assignments_by_invoice.get(inv.id)):
            key = (a.representative_id, window.payment_date)
            b = buckets.get(key)
            if b is None:
                b = buckets[key] = _Bucket(representative_id=a.representative_id, window=window)
            if b.representative_name is None:
                b.representative_name = a.representative_name
            b.total += a.commission_amount
            b.invoices.setdefault(inv.id, inv)

    periods = [
        CommissionPaymentPeriod(
            representative_id=b.representative_id,
            representative_name=b.representative_name,
            period_start=b.window.period_start,
            period_end=b.window.period_end,
            payment_date=b.window.payment_date,
            invoices=list(b.invoices.values()),
            total_commission=b.total,
            invoice_count=len(b.invoices),
        )
        for b in buckets.values()
    ]
    periods.sort(key=lambda p: p.representative_id)
    periods.sort(key=lambda p: p.payment_date, reverse=True)
    return periods


def build_export_rows(
    invoices: Iterable[Invoice],
    assignments_by_invoice: AssignmentsByInvoice,
) -> list[CommissionExportRow]:
    """One row per (closed invoice, assignment), newest commission payment first."""
    rows: list[CommissionExportRow] = []
    for inv, window in _bucketable(invoices):
        for a in assignments_of(assignments_by_invoice.get(inv.id)):
            rows.append(
                CommissionExportRow(
                    invoice_number=inv.invoice_number,
                    invoice_date=inv.invoice_date,
                    invoice_total=inv.invoice_amount,
                    invoice_payment_date=inv.payment_date,
                    commission_payment_date=window.payment_date,
                    rep_commission_rate=a.commission_rate,
                    rep_commission=a.commission_amount,
                    representative_name=a.representative_name or str(a.representative_id),
                    house_payment_date=inv.house_payment_date,
                )
            )

    rows.sort(key=lambda r: (r.invoice_number, r.representative_name))
    rows.sort(key=lambda r: r.commission_payment_date, reverse=True)
    return rows


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def date_range_for(preset: str, today: date) -> tuple[date, date]:
    """
    Report filter presets, inclusive on both ends.
    The multi-month presets start on the 1st of the month N months back and
    run to the end of the current month.
    """
    p = (preset or "").strip().lower()
    if p == "current_month":
        return today.replace(day=1), _last_day(today.year, today.month)
    if p == "last_month":
        y, m = _shift_month(today.year, today.month, -1)
        return date(y, m, 1), _last_day(y, m)
    if p in {"last_3_months", "last_6_months"}:
        y, m = _shift_month(today.year, today.month, -3 if p == "last_3_months" else -6)
        return date(y, m, 1), _last_day(today.year, today.month)
    raise ValueError(f"Unknown date range preset {preset!r}. Allowed: {list(DATE_RANGE_PRESETS)}")


def filter_periods(
    periods: Iterable[CommissionPaymentPeriod],
    start: Optional[date] = None,
    end: Optional[date] = None,
    representative_id: Optional[int] = None,
) -> list[CommissionPaymentPeriod]:
    out: list[CommissionPaymentPeriod] = []
    for p in periods:
        if start is not None and p.payment_date < start:
            continue
        if end is not None and p.payment_date > end:
            continue
        if representative_id is not None and p.representative_id != representative_id:
            continue
        out.append(p)
    return out
