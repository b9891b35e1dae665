"""Pydantic schemas for transit durations."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class TransitSpan(BaseModel):
    """A time-bounded transit with its human-scale label."""

    total_days: int = Field(ge=0)
    remaining_days: int = Field(ge=0)
    label: str
    phase: str  # 'beginning', 'active', 'ending'

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_remaining(self) -> TransitSpan:
        if self.remaining_days > self.total_days:
            raise ValueError(
                f"remaining_days {self.remaining_days} exceeds total_days {self.total_days}"
            )
        return self
