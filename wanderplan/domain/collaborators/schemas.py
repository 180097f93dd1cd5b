"""Collaborator domain schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...models import TripCollaborator
from ...shared.validators import validate_email

CollaboratorRole = Literal["VIEWER", "EDITOR", "ADMIN"]


def _upper(v):
    return v.upper() if isinstance(v, str) else v


class InviteCollaboratorRequest(BaseModel):
    email: str = Field(..., max_length=255)
    role: CollaboratorRole = "VIEWER"
    message: Optional[str] = Field(None, max_length=500)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("role", mode="before")
    @classmethod
    def upper_role(cls, v):
        return _upper(v)


class UpdateCollaboratorRequest(BaseModel):
    role: CollaboratorRole

    @field_validator("role", mode="before")
    @classmethod
    def upper_role(cls, v):
        return _upper(v)


class CollaboratorUser(BaseModel):
    id: str
    email: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    avatarUrl: Optional[str] = None


class CollaboratorResponse(BaseModel):
    id: str
    tripId: str
    userId: str
    role: str
    status: str
    invitedBy: Optional[str] = None
    invitedAt: Optional[datetime] = None
    joinedAt: Optional[datetime] = None
    user: CollaboratorUser


def collaborator_response(collaborator: TripCollaborator) -> CollaboratorResponse:
    user = collaborator.user
    return CollaboratorResponse(
        id=collaborator.id,
        tripId=collaborator.trip_id,
        userId=collaborator.user_id,
        role=collaborator.role,
        status=collaborator.status,
        invitedBy=collaborator.invited_by,
        invitedAt=collaborator.invited_at,
        joinedAt=collaborator.joined_at,
        user=CollaboratorUser(
            id=user.id,
            email=user.email,
            firstName=user.first_name,
            lastName=user.last_name,
            avatarUrl=user.avatar_url,
        ),
    )


def invitation_response(collaborator: TripCollaborator) -> dict:
    """Pending invitation as seen by the invitee"""
    trip = collaborator.trip
    inviter = collaborator.inviter
    return {
        "id": collaborator.id,
        "role": collaborator.role,
        "status": collaborator.status,
        "invitedAt": collaborator.invited_at,
        "trip": {
            "id": trip.id,
            "name": trip.name,
            "startDate": trip.start_date,
            "endDate": trip.end_date,
            "destinations": list(trip.destinations or []),
        },
        "invitedBy": (
            {"id": inviter.id, "email": inviter.email, "name": inviter.full_name}
            if inviter
            else None
        ),
    }
