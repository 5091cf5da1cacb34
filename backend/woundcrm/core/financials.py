# backend/woundcrm/core/financials.py
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from woundcrm.core.config import settings
from woundcrm.core.money import NumberLike, quantize_cents, to_decimal
from woundcrm.core.pricing import PricingTable
from woundcrm.schemas.invoice import Financials
from woundcrm.schemas.treatment import Treatment

_LXW_RE = re.compile(r"([\d.]+)\s*(?:cm)?\s*[x×]\s*([\d.]+)", re.IGNORECASE)
_NUM_RE = re.compile(r"([\d.]+)")


def compute_financials(
    wound_area: NumberLike,
    price_per_sq_cm: NumberLike,
    invoice_rate: Optional[Decimal] = None,
) -> Financials:
    """
    total_billable = wound_area * price
    invoice_amount = total_billable * invoice_rate (default settings.INVOICE_RATE)

    Blank, malformed or negative inputs count as 0 so half-filled forms still compute.
    Both amounts are rounded to cents; invoice_amount is derived from the rounded
    billable so the two stored columns agree.
    """
    rate = settings.INVOICE_RATE if invoice_rate is None else to_decimal(invoice_rate)

    total_billable = quantize_cents(to_decimal(wound_area) * to_decimal(price_per_sq_cm))
    invoice_amount = quantize_cents(total_billable * rate)
    return Financials(total_billable=total_billable, invoice_amount=invoice_amount)


def compute_treatment_financials(
    treatment: Treatment,
    pricing: PricingTable,
    invoice_rate: Optional[Decimal] = None,
) -> Financials:
    # raises UnknownProductError; an unresolvable product is never priced at 0
    product = pricing.get(treatment.graft_product)
    return compute_financials(treatment.wound_area, product.price_per_sq_cm, invoice_rate)


def _parse(token: str) -> Decimal:
    try:
        d = Decimal(token)
    except InvalidOperation:
        return Decimal("0")
    return d if d.is_finite() else Decimal("0")


def parse_wound_size(raw: Optional[str]) -> Decimal:
    """
    Handle "160", "160.00", "3x2", "3 x 2 cm", "2.5cm x 1.5cm".
    "LxW" returns L*W; otherwise the first number; anything else is 0.
    """
    if raw is None:
        return Decimal("0")
    s = str(raw).strip().lower()
    if not s:
        return Decimal("0")

    m = _LXW_RE.search(s)
    if m:
        return _parse(m.group(1)) * _parse(m.group(2))

    m = _NUM_RE.search(s)
    if not m:
        return Decimal("0")
    return _parse(m.group(1))
