"""
Trip permission checks

The owner (Trip.created_by) can do everything. Other users act through an
ACCEPTED TripCollaborator row whose role decides what they may do; pending or
declined invitations grant nothing.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from .models import Trip, TripCollaborator, User

logger = logging.getLogger(__name__)

EDIT_ROLES = ("EDITOR", "ADMIN")

# action -> message returned with 403
DENIED_MESSAGES = {
    "view": "You do not have permission to view this trip",
    "edit": "You do not have permission to edit this trip",
    "update": "Only the trip owner or an admin can update trip details",
    "delete": "Only the trip owner or an admin can delete items from this trip",
    "manage_collaborators": "Only the trip owner or an admin can manage collaborators",
    "admin": "Only the trip owner can perform this action",
    "vote": "You do not have permission to vote in this trip's polls",
    "share": "Only the trip owner or an admin can manage share links",
}


@dataclass
class TripPermissionContext:
    """The caller's relationship to a trip"""

    user_id: str
    trip_id: str
    is_owner: bool
    role: Optional[str] = None
    status: Optional[str] = None

    @property
    def is_accepted(self) -> bool:
        return self.status == "ACCEPTED"

    @property
    def effective_role(self) -> Optional[str]:
        """OWNER for the owner, the collaborator role once accepted, else None"""
        if self.is_owner:
            return "OWNER"
        return self.role if self.is_accepted else None

    def can_view(self) -> bool:
        return self.is_owner or self.is_accepted

    def can_edit(self) -> bool:
        return self.is_owner or (self.is_accepted and self.role in EDIT_ROLES)

    def can_delete(self) -> bool:
        return self.is_owner or (self.is_accepted and self.role == "ADMIN")

    def can_manage_collaborators(self) -> bool:
        return self.can_delete()

    def can_update(self) -> bool:
        return self.can_delete()

    def can_admin(self) -> bool:
        return self.is_owner

    def can_vote(self) -> bool:
        return self.can_view()

    def can_share(self) -> bool:
        return self.can_update()

    def allows(self, action: str) -> bool:
        checks = {
            "view": self.can_view,
            "edit": self.can_edit,
            "update": self.can_update,
            "delete": self.can_delete,
            "manage_collaborators": self.can_manage_collaborators,
            "admin": self.can_admin,
            "vote": self.can_vote,
            "share": self.can_share,
        }
        if action not in checks:
            raise ValueError(f"Unknown trip action: {action}")
        return checks[action]()


def get_active_trip(db: Session, trip_id: str) -> Optional[Trip]:
    """Trip by id, ignoring soft-deleted trips"""
    return db.query(Trip).filter(Trip.id == trip_id, Trip.deleted_at.is_(None)).first()


def get_permission_context(db: Session, user: User, trip: Trip) -> TripPermissionContext:
    if trip.created_by == user.id:
        return TripPermissionContext(user_id=user.id, trip_id=trip.id, is_owner=True)

    collaborator = (
        db.query(TripCollaborator)
        .filter(TripCollaborator.trip_id == trip.id, TripCollaborator.user_id == user.id)
        .first()
    )
    return TripPermissionContext(
        user_id=user.id,
        trip_id=trip.id,
        is_owner=False,
        role=collaborator.role if collaborator else None,
        status=collaborator.status if collaborator else None,
    )


def require_trip_permission(
    db: Session, user: User, trip_id: str, action: str = "view"
) -> tuple[Trip, TripPermissionContext]:
    """
    Load a trip and assert the caller may perform `action` on it.

    Raises:
        HTTPException 404 if the trip does not exist or is soft deleted,
        403 if the caller lacks the permission.
    """
    trip = get_active_trip(db, trip_id)
    if not trip:
        raise HTTPException(status_code=404, detail="Trip not found")

    context = get_permission_context(db, user, trip)
    if not context.allows(action):
        logger.warning(f"⚠️ User {user.id} denied '{action}' on trip {trip_id} (role={context.role})")
        raise HTTPException(status_code=403, detail=DENIED_MESSAGES[action])

    return trip, context


def trip_member_ids(db: Session, trip: Trip) -> set[str]:
    """Owner plus accepted collaborators"""
    rows = db.query(TripCollaborator.user_id).filter(
        TripCollaborator.trip_id == trip.id, TripCollaborator.status == "ACCEPTED"
    )
    return {trip.created_by} | {user_id for (user_id,) in rows}


def accessible_trip_ids_query(db: Session, user_id: str):
    """Subquery of ids for non-deleted trips the user owns or has accepted"""
    collaborating = db.query(TripCollaborator.trip_id).filter(
        TripCollaborator.user_id == user_id, TripCollaborator.status == "ACCEPTED"
    )
    return db.query(Trip.id).filter(
        Trip.deleted_at.is_(None),
        (Trip.created_by == user_id) | (Trip.id.in_(collaborating)),
    )
