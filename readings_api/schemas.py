from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, field_validator

VALIDATION_ERROR_MESSAGE = "temperature and humidity must be numbers"


class ReadingIn(BaseModel):
    temperature: float
    humidity: float

    @field_validator("temperature", "humidity", mode="before")
    @classmethod
    def _must_be_number(cls, value: Any) -> Any:
        # JSON numbers only: no numeric strings, no booleans.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be a number")
        try:
            finite = math.isfinite(value)
        except OverflowError:
            # int too large to convert to float
            finite = False
        if not finite:
            raise ValueError("must be a finite number")
        return value


class ReadingOut(BaseModel):
    id: int
    temperature: float
    humidity: float
    created_at: str


class ErrorOut(BaseModel):
    error: str
