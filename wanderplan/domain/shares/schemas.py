"""Share link schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ...config import FRONTEND_URL
from ...models import Event, Trip, TripShareToken, User

DEFAULT_EXPIRY_DAYS = 30
MAX_EXPIRY_DAYS = 365


class ShareLinkCreate(BaseModel):
    expiresIn: int = Field(DEFAULT_EXPIRY_DAYS, ge=1, le=MAX_EXPIRY_DAYS, description="Days until the link expires")
    permissions: Literal["view_only", "comment"] = "view_only"


class ShareCreator(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    avatarUrl: Optional[str] = None


class ShareLinkResponse(BaseModel):
    id: str
    token: str
    shareUrl: str
    expiresAt: datetime
    permissions: str
    createdBy: Optional[ShareCreator] = None
    createdAt: Optional[datetime] = None


def share_url(token: str) -> str:
    return f"{FRONTEND_URL}/trips/share/{token}"


def _display_name(user: User) -> str:
    return " ".join(part for part in (user.first_name, user.last_name) if part) or user.email


def share_link_response(share: TripShareToken) -> ShareLinkResponse:
    creator = None
    if share.creator:
        creator = ShareCreator(
            id=share.creator.id,
            name=_display_name(share.creator),
            email=share.creator.email,
            avatarUrl=share.creator.avatar_url,
        )
    return ShareLinkResponse(
        id=share.id,
        token=share.token,
        shareUrl=share_url(share.token),
        expiresAt=share.expires_at,
        permissions=share.permissions,
        createdBy=creator,
        createdAt=share.created_at,
    )


def _public_person(user: Optional[User]) -> Optional[dict]:
    # No email on the public view
    if user is None:
        return None
    return {"id": user.id, "name": _display_name(user), "avatarUrl": user.avatar_url}


def _public_event(event: Event) -> dict:
    return {
        "id": event.id,
        "type": event.type,
        "title": event.title,
        "description": event.description,
        "startDateTime": event.start_date_time,
        "endDateTime": event.end_date_time,
        "location": event.location,
        "notes": event.notes,
        "confirmationNumber": event.confirmation_number,
        "cost": {"amount": event.cost, "currency": event.currency} if event.cost is not None else None,
        "creator": _public_person(event.creator),
    }


def public_trip_response(share: TripShareToken) -> dict:
    """Read-only trip view: no collaborators, expenses or emails"""
    trip: Trip = share.trip
    events = sorted(trip.events, key=lambda e: (e.start_date_time, e.order))

    duration = None
    if trip.start_date and trip.end_date:
        duration = (trip.end_date.date() - trip.start_date.date()).days + 1

    return {
        "id": trip.id,
        "name": trip.name,
        "description": trip.description,
        "startDate": trip.start_date,
        "endDate": trip.end_date,
        "destinations": list(trip.destinations or []),
        "coverImageUrl": trip.cover_image_url,
        "createdAt": trip.created_at,
        "updatedAt": trip.updated_at,
        "creator": _public_person(trip.owner),
        "events": [_public_event(e) for e in events],
        "budget": (
            {
                "totalBudget": trip.budget.total_budget,
                "currency": trip.budget.currency,
                "categoryBudgets": trip.budget.category_budgets or {},
            }
            if trip.budget
            else None
        ),
        "tags": [{"id": t.id, "name": t.name, "color": t.color} for t in trip.tags],
        "stats": {"eventCount": len(events), "tagCount": len(trip.tags), "durationDays": duration},
        "shareInfo": {
            "permissions": share.permissions,
            "expiresAt": share.expires_at,
            "isReadOnly": True,
        },
    }
