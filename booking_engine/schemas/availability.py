from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

# Longest range a single request may override
MAX_OVERRIDE_DAYS = 730


class AvailabilityOverridePayload(BaseModel):
    """
    Schema for a host setting availability over ``[start_date, end_date)``.
    Each date in the range gets the same flag, price and minimum stay.
    """

    start_date: date = Field(..., description="First date to override")
    end_date: date = Field(..., description="Date after the last overridden date")
    available: bool = Field(True, description="False blocks the dates for booking")
    price: Optional[Decimal] = Field(None, gt=0, description="Nightly price for these dates")
    min_stay: Optional[int] = Field(
        None, ge=1, description="Minimum nights when arriving on these dates"
    )
    notes: Optional[str] = Field(None, description="Host notes")

    @model_validator(mode="after")
    def span_is_bounded(self) -> "AvailabilityOverridePayload":
        if (self.end_date - self.start_date).days > MAX_OVERRIDE_DAYS:
            raise ValueError(f"date range may not exceed {MAX_OVERRIDE_DAYS} days")
        return self
