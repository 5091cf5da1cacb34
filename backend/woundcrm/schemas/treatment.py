# backend/woundcrm/schemas/treatment.py
from __future__ import annotations

import enum
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from woundcrm.core.money import to_decimal
from woundcrm.core.pricing import ProductKey


class TreatmentStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Treatment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    graft_product: ProductKey
    # cm²; blank or negative form values are stored as 0
    wound_area: Decimal = Field(default=Decimal("0"), ge=0)
    treatment_date: date
    status: TreatmentStatus = TreatmentStatus.ACTIVE
    notes: Optional[str] = None

    @field_validator("wound_area", mode="before")
    @classmethod
    def _coerce_wound_area(cls, v):
        return to_decimal(v)
