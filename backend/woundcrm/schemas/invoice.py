# backend/woundcrm/schemas/invoice.py
from __future__ import annotations

import enum
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InvoiceStatus(str, enum.Enum):
    OPEN = "open"
    PAYABLE = "payable"
    CLOSED = "closed"


class Financials(BaseModel):
    """Derived amounts, persisted onto the invoice at save time."""

    model_config = ConfigDict(frozen=True)

    total_billable: Decimal
    invoice_amount: Decimal


class Invoice(BaseModel):
    """
    Invoice snapshot for one treatment.

    Status changes go through woundcrm.core.invoice_lifecycle, which returns a
    new Invoice instead of mutating this one and refuses to close without a
    payment date.

    NOTE:
      - payment_date is kept when a closed invoice is reopened (history), so a
        non-closed invoice may still carry one. Aggregation filters on status.
      - Rows imported from the legacy treatments table can be closed with no
        payment_date (and even no invoice_date); they are accepted here and
        bucketed by the fallback dates.
      - is_overdue is intentionally not a field; it depends on "today".
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    treatment_id: int
    invoice_number: str = Field(..., min_length=1, max_length=64)

    total_billable: Decimal = Field(..., ge=0)
    invoice_amount: Decimal = Field(..., ge=0)

    status: InvoiceStatus = InvoiceStatus.OPEN
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    payment_date: Optional[date] = None

    # last bucketing fallback for legacy rows
    treatment_date: Optional[date] = None

    # actual payout stamps (rep run / house run)
    commission_payment_date: Optional[date] = None
    house_payment_date: Optional[date] = None
