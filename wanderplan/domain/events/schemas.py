"""Event domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models import Event
from ...shared.validators import UtcDatetime, validate_currency, validate_uuid

EventType = Literal["FLIGHT", "HOTEL", "ACTIVITY", "RESTAURANT", "TRANSPORTATION", "DESTINATION"]


class EventLocation(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=500)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lon: Optional[float] = Field(None, ge=-180, le=180)


class EventCost(BaseModel):
    amount: float = Field(..., ge=0)
    currency: str = "USD"

    @field_validator("currency")
    @classmethod
    def validate_currency_code(cls, v):
        return validate_currency(v)


class EventCreate(BaseModel):
    """Schema for creating an itinerary event"""

    type: EventType
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    startDateTime: UtcDatetime
    endDateTime: Optional[UtcDatetime] = None
    location: Optional[EventLocation] = None
    order: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)
    confirmationNumber: Optional[str] = Field(None, max_length=100)
    cost: Optional[EventCost] = None

    @model_validator(mode="after")
    def validate_dates(self):
        if self.endDateTime and self.endDateTime < self.startDateTime:
            raise ValueError("End date/time must be after or equal to start date/time")
        return self


class EventUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""

    type: Optional[EventType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    startDateTime: Optional[UtcDatetime] = None
    endDateTime: Optional[UtcDatetime] = None
    location: Optional[EventLocation] = None
    order: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)
    confirmationNumber: Optional[str] = Field(None, max_length=100)
    cost: Optional[EventCost] = None

    @model_validator(mode="after")
    def validate_dates(self):
        if self.startDateTime and self.endDateTime and self.endDateTime < self.startDateTime:
            raise ValueError("End date/time must be after or equal to start date/time")
        return self


class ReorderEventsRequest(BaseModel):
    """New itinerary order: eventIds[i] gets order i"""

    eventIds: list[str]

    @field_validator("eventIds")
    @classmethod
    def validate_event_ids(cls, v):
        if not v:
            raise ValueError("At least one event ID is required")
        if any(not validate_uuid(event_id) for event_id in v):
            raise ValueError("Invalid event ID format")
        if len(set(v)) != len(v):
            raise ValueError("Event IDs must be unique")
        return v


class EventResponse(BaseModel):
    id: str
    tripId: str
    type: str
    title: str
    description: Optional[str] = None
    startDateTime: datetime
    endDateTime: Optional[datetime] = None
    order: int
    location: Optional[dict] = None
    cost: Optional[EventCost] = None
    notes: Optional[str] = None
    confirmationNumber: Optional[str] = None
    createdBy: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    class Config:
        from_attributes = True


def event_response(event: Event) -> EventResponse:
    return EventResponse(
        id=event.id,
        tripId=event.trip_id,
        type=event.type,
        title=event.title,
        description=event.description,
        startDateTime=event.start_date_time,
        endDateTime=event.end_date_time,
        order=event.order,
        location=event.location,
        cost=(
            EventCost(amount=event.cost, currency=event.currency or "USD")
            if event.cost is not None
            else None
        ),
        notes=event.notes,
        confirmationNumber=event.confirmation_number,
        createdBy=event.created_by,
        createdAt=event.created_at,
        updatedAt=event.updated_at,
    )
