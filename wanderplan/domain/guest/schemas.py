"""Guest-mode migration schemas"""

import re
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models import EVENT_TYPES
from ...shared.validators import UtcDatetime, validate_currency
from ..trips.schemas import _normalize_destinations, _normalize_tags

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Guest event categories -> itinerary event types
CATEGORY_EVENT_TYPES = {
    "activity": "ACTIVITY",
    "food": "RESTAURANT",
    "transport": "TRANSPORTATION",
    "accommodation": "HOTEL",
    "shopping": "ACTIVITY",
    "other": "ACTIVITY",
}

# Guest expense categories -> expense categories
EXPENSE_CATEGORY_MAP = {
    "accommodation": "ACCOMMODATION",
    "transport": "TRANSPORTATION",
    "transportation": "TRANSPORTATION",
    "food": "FOOD",
    "activity": "ACTIVITIES",
    "activities": "ACTIVITIES",
    "shopping": "SHOPPING",
    "other": "OTHER",
}


def _check_time(v: Optional[str]) -> Optional[str]:
    if v in (None, ""):
        return None
    if not TIME_PATTERN.match(v):
        raise ValueError("Time must be in HH:MM format")
    return v


class GuestEvent(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    day: int = Field(..., ge=1, le=366)
    title: str = Field(..., min_length=1, max_length=200)
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    location: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    estimatedCost: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    type: Optional[str] = None
    order: int = Field(0, ge=0)

    @field_validator("startTime", "endTime")
    @classmethod
    def check_time(cls, v):
        return _check_time(v)

    @property
    def event_type(self) -> str:
        if self.type and self.type.upper() in EVENT_TYPES:
            return self.type.upper()
        return CATEGORY_EVENT_TYPES.get((self.category or "").lower(), "ACTIVITY")


class GuestExpense(BaseModel):
    id: Optional[str] = None
    description: str = Field(..., min_length=1, max_length=500)
    amount: float = Field(..., gt=0, le=999999999.99)
    currency: str = "USD"
    category: str = "other"
    date: Optional[UtcDatetime] = None
    eventId: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v):
        return validate_currency(v)

    @property
    def expense_category(self) -> str:
        return EXPENSE_CATEGORY_MAP.get(self.category.lower(), "OTHER")


class GuestTrip(BaseModel):
    """A trip as the browser kept it before the visitor signed up"""

    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    startDate: UtcDatetime
    endDate: UtcDatetime
    destinations: list[str] = Field(default_factory=list, max_length=50)
    tags: list[str] = Field(default_factory=list, max_length=20)
    visibility: Literal["private", "shared", "public"] = "private"
    events: list[GuestEvent] = Field(default_factory=list, max_length=500)
    expenses: list[GuestExpense] = Field(default_factory=list, max_length=500)

    @field_validator("visibility", mode="before")
    @classmethod
    def lower_visibility(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _normalize_tags(v)

    @field_validator("destinations")
    @classmethod
    def clean_destinations(cls, v):
        return _normalize_destinations(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.endDate < self.startDate:
            raise ValueError("End date must be after or equal to start date")
        return self


class MigrateRequest(BaseModel):
    # Trips are validated one by one so a bad trip does not block the rest
    trips: list[dict[str, Any]] = Field(..., max_length=50)


class MigrationResult(BaseModel):
    success: bool
    migratedCount: int
    failedCount: int
    errors: list[str]
    tripIdMap: dict[str, str]
