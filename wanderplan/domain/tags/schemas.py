"""Tag domain schemas"""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import Tag
from ...shared.validators import require_uuid, validate_hex_color

TAG_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_]+$")


class TagCreate(BaseModel):
    tripId: str
    name: str = Field(..., min_length=1, max_length=50)
    color: Optional[str] = None

    @field_validator("tripId")
    @classmethod
    def check_trip_id(cls, v):
        return require_uuid(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Tag name is required")
        if not TAG_NAME_PATTERN.match(v):
            raise ValueError("Tag name can only contain letters, numbers, spaces, hyphens, and underscores")
        return v

    @field_validator("color")
    @classmethod
    def check_color(cls, v):
        return validate_hex_color(v)


class TagResponse(BaseModel):
    id: str
    name: str
    color: Optional[str] = None
    tripId: str
    tripName: str
    createdAt: Optional[datetime] = None


def tag_response(tag: Tag) -> TagResponse:
    return TagResponse(
        id=tag.id,
        name=tag.name,
        color=tag.color,
        tripId=tag.trip_id,
        tripName=tag.trip.name,
        createdAt=tag.created_at,
    )


def aggregate_tags(tags: list[Tag]) -> list[dict]:
    """Group tags by name for autocomplete: color, usage count and trip ids"""
    aggregated: dict[str, dict] = {}
    for tag in tags:
        entry = aggregated.setdefault(
            tag.name, {"name": tag.name, "color": tag.color, "count": 0, "tripIds": []}
        )
        entry["count"] += 1
        entry["tripIds"].append(tag.trip_id)
        if tag.color:
            entry["color"] = tag.color
    return list(aggregated.values())
