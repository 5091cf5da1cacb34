# backend/woundcrm/core/commissions.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Optional, Union

from woundcrm.core.config import settings
from woundcrm.core.money import NumberLike, ZERO, quantize_cents, to_decimal
from woundcrm.schemas.commission import (
    CommissionAllocation,
    CommissionAssignment,
    CommissionAssignmentDraft,
    LegacyRepFields,
)

HUNDRED = Decimal("100")

AssignmentLike = Union[CommissionAssignmentDraft, CommissionAssignment, dict[str, Any]]


def _as_draft(item: AssignmentLike) -> CommissionAssignmentDraft:
    if isinstance(item, CommissionAssignmentDraft):
        return item
    if isinstance(item, CommissionAssignment):
        return CommissionAssignmentDraft(
            representative_id=item.representative_id,
            representative_name=item.representative_name,
            commission_rate=item.commission_rate,
        )
    return CommissionAssignmentDraft.model_validate(item)


def allocate_commissions(
    invoice_amount: NumberLike,
    assignments: Iterable[AssignmentLike],
    pool_rate: Optional[Decimal] = None,
    *,
    invoice_id: Optional[int] = None,
) -> CommissionAllocation:
    """
    Split the commission pool of one invoice.

      pool              = invoice_amount * pool_rate            (default 40%)
      commission_amount = invoice_amount * commission_rate / 100 (per rep)
      house_commission  = max(0, pool - sum(commission_amount))

    Always recomputes the whole set. Rep amounts are honored as entered even
    when their rates add up past the pool; the house then gets 0 and
    is_over_allocated is set. Within the pool, cents lost to rounding each rep
    up are taken back from the largest rep amounts, so the reps never exceed it.
    """
    rate = settings.COMMISSION_POOL_RATE if pool_rate is None else to_decimal(pool_rate)
    amount = quantize_cents(to_decimal(invoice_amount))
    pool = quantize_cents(amount * rate)

    # blank editor rows
    drafts = [
        d for d in map(_as_draft, assignments)
        if d.representative_id is not None and d.commission_rate > 0
    ]
    amounts = [quantize_cents(amount * d.commission_rate / HUNDRED) for d in drafts]
    rate_total = sum((d.commission_rate for d in drafts), ZERO)

    if rate_total <= rate * HUNDRED:
        _trim_rounding_excess(amounts, sum(amounts, ZERO) - pool)

    computed = [
        CommissionAssignment(
            invoice_id=invoice_id,
            representative_id=d.representative_id,
            representative_name=d.representative_name,
            commission_rate=d.commission_rate,
            commission_amount=a,
        )
        for d, a in zip(drafts, amounts)
    ]
    total_rep = sum(amounts, ZERO)

    return CommissionAllocation(
        invoice_id=invoice_id,
        invoice_amount=amount,
        pool_rate=rate,
        assignments=tuple(computed),
        commission_pool=pool,
        total_rep_commission=total_rep,
        house_commission=max(ZERO, pool - total_rep),
        rate_total=rate_total,
        is_over_allocated=rate_total > rate * HUNDRED or total_rep > pool,
    )


def _trim_rounding_excess(amounts: list[Decimal], excess: Decimal) -> None:
    # largest first; ties keep entry order so the result is deterministic
    for i in sorted(range(len(amounts)), key=lambda i: -amounts[i]):
        if excess <= 0:
            return
        take = min(excess, amounts[i])
        amounts[i] -= take
        excess -= take


def _reallocate(allocation: CommissionAllocation, drafts: Iterable[AssignmentLike]) -> CommissionAllocation:
    return allocate_commissions(
        allocation.invoice_amount,
        drafts,
        allocation.pool_rate,
        invoice_id=allocation.invoice_id,
    )


def add_assignment(allocation: CommissionAllocation, draft: AssignmentLike) -> CommissionAllocation:
    return _reallocate(allocation, [*allocation.assignments, draft])


def update_assignment_rate(
    allocation: CommissionAllocation,
    index: int,
    commission_rate: NumberLike,
) -> CommissionAllocation:
    drafts = [_as_draft(a) for a in allocation.assignments]
    drafts[index] = drafts[index].model_copy(update={"commission_rate": to_decimal(commission_rate)})
    return _reallocate(allocation, drafts)


def remove_assignment(allocation: CommissionAllocation, index: int) -> CommissionAllocation:
    remaining = list(allocation.assignments)
    del remaining[index]
    return _reallocate(allocation, remaining)


def legacy_rep_fields(allocation: CommissionAllocation) -> Optional[LegacyRepFields]:
    """Flat primary-rep view; only defined when exactly one rep is assigned."""
    if len(allocation.assignments) != 1:
        return None
    a = allocation.assignments[0]
    return LegacyRepFields(
        primary_rep_id=a.representative_id,
        primary_rep_name=a.representative_name,
        primary_rep_rate=a.commission_rate,
        primary_rep_commission=a.commission_amount,
    )


def default_assignment_for(
    representative_id: int,
    representative_name: Optional[str] = None,
    commission_rate: NumberLike = None,
) -> CommissionAssignmentDraft:
    """
    Pre-filled editor row for the logged-in rep on a new treatment.
    Caller-side convenience; allocate_commissions never adds it by itself.
    """
    return CommissionAssignmentDraft(
        representative_id=representative_id,
        representative_name=representative_name,
        commission_rate=to_decimal(commission_rate),
    )
