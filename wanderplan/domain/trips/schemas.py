"""Trip domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models import Trip
from ...shared.validators import UtcDatetime, validate_hex_color, validate_uuid

Visibility = Literal["private", "shared", "public"]


def _normalize_visibility(v):
    return v.lower() if isinstance(v, str) else v


def _normalize_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    """Trim, drop blanks and duplicates (first occurrence wins)"""
    if tags is None:
        return None
    seen = []
    for tag in tags:
        tag = tag.strip()
        if not tag:
            continue
        if len(tag) > 50:
            raise ValueError("Tag names must be at most 50 characters")
        if tag not in seen:
            seen.append(tag)
    return seen


def _normalize_destinations(destinations: Optional[list[str]]) -> Optional[list[str]]:
    if destinations is None:
        return None
    cleaned = [d.strip() for d in destinations if d and d.strip()]
    if any(len(d) > 200 for d in cleaned):
        raise ValueError("Destination names must be at most 200 characters")
    return cleaned


class TripCreate(BaseModel):
    """Schema for creating a trip"""

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    startDate: Optional[UtcDatetime] = None
    endDate: Optional[UtcDatetime] = None
    destinations: list[str] = Field(default_factory=list, max_length=50)
    tags: list[str] = Field(default_factory=list, max_length=20)
    visibility: Visibility = "private"
    coverImageUrl: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Trip name is required")
        return v.strip()

    @field_validator("visibility", mode="before")
    @classmethod
    def lower_visibility(cls, v):
        return _normalize_visibility(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _normalize_tags(v)

    @field_validator("destinations")
    @classmethod
    def validate_destinations(cls, v):
        return _normalize_destinations(v)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.startDate and self.endDate and self.endDate < self.startDate:
            raise ValueError("End date must be after or equal to start date")
        return self


class TripUpdate(BaseModel):
    """Partial trip update; `tags` replaces the whole tag set when present"""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    startDate: Optional[UtcDatetime] = None
    endDate: Optional[UtcDatetime] = None
    destinations: Optional[list[str]] = Field(None, max_length=50)
    tags: Optional[list[str]] = Field(None, max_length=20)
    visibility: Optional[Visibility] = None
    coverImageUrl: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Trip name cannot be blank")
        return v.strip() if v is not None else v

    @field_validator("visibility", mode="before")
    @classmethod
    def lower_visibility(cls, v):
        return _normalize_visibility(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _normalize_tags(v)

    @field_validator("destinations")
    @classmethod
    def validate_destinations(cls, v):
        return _normalize_destinations(v)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.startDate and self.endDate and self.endDate < self.startDate:
            raise ValueError("End date must be after or equal to start date")
        return self


class DuplicateTripRequest(BaseModel):
    startDate: Optional[UtcDatetime] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Trip name cannot be blank")
        return v.strip() if v is not None else v


class _TripIdsRequest(BaseModel):
    tripIds: list[str]

    @field_validator("tripIds")
    @classmethod
    def validate_trip_ids(cls, v):
        if not v:
            raise ValueError("At least one trip ID is required")
        if any(not validate_uuid(trip_id) for trip_id in v):
            raise ValueError("Invalid trip ID format")
        return list(dict.fromkeys(v))


class BulkArchiveRequest(_TripIdsRequest):
    tripIds: list[str] = Field(..., max_length=100)
    archive: bool = True


class BulkDeleteRequest(_TripIdsRequest):
    tripIds: list[str] = Field(..., max_length=50)


class BulkTagRequest(_TripIdsRequest):
    tripIds: list[str] = Field(..., max_length=100)
    tagNames: list[str] = Field(..., min_length=1, max_length=10)
    tagColor: Optional[str] = None

    @field_validator("tagNames")
    @classmethod
    def validate_tag_names(cls, v):
        names = _normalize_tags(v)
        if not names:
            raise ValueError("At least one tag name is required")
        return names

    @field_validator("tagColor")
    @classmethod
    def validate_color(cls, v):
        return validate_hex_color(v)


class TripTagResponse(BaseModel):
    id: str
    name: str
    color: Optional[str] = None


class TripResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    destinations: list[str]
    visibility: str
    coverImageUrl: Optional[str] = None
    isArchived: bool
    createdBy: str
    tags: list[TripTagResponse]
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    class Config:
        from_attributes = True


class TripSummaryResponse(TripResponse):
    """List item with counts"""

    eventCount: int = 0
    collaboratorCount: int = 0
    userRole: Optional[str] = None


class TripDetailResponse(TripResponse):
    owner: dict[str, Any]
    events: list[Any]
    collaborators: list[dict[str, Any]]
    budget: Optional[dict[str, Any]] = None
    userRole: Optional[str] = None
    stats: dict[str, Any]


def trip_fields(trip: Trip) -> dict:
    """Fields shared by every trip representation"""
    return {
        "id": trip.id,
        "name": trip.name,
        "description": trip.description,
        "startDate": trip.start_date,
        "endDate": trip.end_date,
        "destinations": list(trip.destinations or []),
        "visibility": trip.visibility,
        "coverImageUrl": trip.cover_image_url,
        "isArchived": trip.is_archived,
        "createdBy": trip.created_by,
        "tags": [TripTagResponse(id=t.id, name=t.name, color=t.color) for t in trip.tags],
        "createdAt": trip.created_at,
        "updatedAt": trip.updated_at,
    }


def trip_response(trip: Trip) -> TripResponse:
    return TripResponse(**trip_fields(trip))
