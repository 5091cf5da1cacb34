# backend/woundcrm/schemas/commission.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from woundcrm.core.money import to_decimal
from woundcrm.schemas.invoice import Invoice


class CommissionAssignmentDraft(BaseModel):
    """
    One row of the commission editor, as typed by an admin.
    Rows without a representative (or with a zero rate) are ignored on allocation.
    """

    representative_id: Optional[int] = None
    representative_name: Optional[str] = Field(default=None, max_length=200)
    # percentage of the invoice amount, e.g. 15 for 15%
    commission_rate: Decimal = Decimal("0")

    @field_validator("commission_rate", mode="before")
    @classmethod
    def _coerce_rate(cls, v):
        return to_decimal(v)


class CommissionAssignment(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    invoice_id: Optional[int] = None
    representative_id: int
    representative_name: Optional[str] = None
    commission_rate: Decimal
    commission_amount: Decimal


class CommissionAllocation(BaseModel):
    """
    Result of a full recomputation over every assignment of one invoice.
    house_commission is clamped at zero; is_over_allocated tells the UI to flag it.
    """

    model_config = ConfigDict(frozen=True)

    invoice_id: Optional[int] = None
    invoice_amount: Decimal
    pool_rate: Decimal
    assignments: Tuple[CommissionAssignment, ...] = ()
    commission_pool: Decimal
    total_rep_commission: Decimal
    house_commission: Decimal
    rate_total: Decimal
    is_over_allocated: bool = False


class LegacyRepFields(BaseModel):
    """Flat single-rep view for consumers of the old sales_rep/sales_rep_commission columns."""

    primary_rep_id: int
    primary_rep_name: Optional[str] = None
    primary_rep_rate: Decimal
    primary_rep_commission: Decimal


class CommissionPaymentPeriod(BaseModel):
    representative_id: int
    representative_name: Optional[str] = None

    period_start: date
    period_end: date
    # fixed payroll date: the 15th or the last day of the month
    payment_date: date

    invoices: List[Invoice] = Field(default_factory=list)
    total_commission: Decimal
    invoice_count: int


# Compatibility contract with downstream spreadsheets: do not reorder or rename.
EXPORT_COLUMNS: Tuple[str, ...] = (
    "Invoice No.",
    "Invoice Date",
    "Invoice Total",
    "Invoice Payment Date",
    "Commission Payment Date",
    "Rep Commission Rate",
    "Rep Commission",
    "Sales Rep",
    "House Payment Date",
)


def _fmt_date(d: Optional[date]) -> str:
    return d.isoformat() if d else ""


class CommissionExportRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    invoice_number: str
    invoice_date: Optional[date] = None
    invoice_total: Decimal
    invoice_payment_date: Optional[date] = None
    commission_payment_date: date
    rep_commission_rate: Decimal
    rep_commission: Decimal
    representative_name: str
    house_payment_date: Optional[date] = None

    def as_row(self) -> List[str]:
        """Cell values in EXPORT_COLUMNS order."""
        return [
            self.invoice_number,
            _fmt_date(self.invoice_date),
            f"${self.invoice_total:.2f}",
            _fmt_date(self.invoice_payment_date),
            _fmt_date(self.commission_payment_date),
            f"{self.rep_commission_rate:.2f}%",
            f"${self.rep_commission:.2f}",
            self.representative_name,
            _fmt_date(self.house_payment_date),
        ]


class RepCommissionSummary(BaseModel):
    representative_id: int
    representative_name: Optional[str] = None

    total_commission: Decimal
    paid_commission: Decimal
    pending_commission: Decimal
    invoice_count: int


class CommissionSummary(BaseModel):
    total_paid: Decimal
    total_pending: Decimal
    by_representative: List[RepCommissionSummary] = Field(default_factory=list)
