"""Collaborator service - invitations and role management"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import TripCollaborator, User, utcnow
from ...permissions import require_trip_permission
from .repository import CollaboratorRepository
from .schemas import InviteCollaboratorRequest

logger = logging.getLogger(__name__)


class CollaboratorService:
    """Service layer for trip collaboration"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CollaboratorRepository()

    def list_collaborators(
        self, trip_id: str, user: User, status: Optional[str] = None
    ) -> list[TripCollaborator]:
        require_trip_permission(self.db, user, trip_id, "view")
        return self.repo.list_for_trip(self.db, trip_id, status)

    async def invite(
        self, trip_id: str, data: InviteCollaboratorRequest, user: User
    ) -> tuple[TripCollaborator, bool]:
        """
        Invite a registered user to a trip.

        Returns (collaborator, created). A previously declined invitation is
        re-sent with created=False.
        """
        trip, context = require_trip_permission(self.db, user, trip_id, "manage_collaborators")

        if data.role == "ADMIN" and not context.is_owner:
            raise HTTPException(status_code=403, detail="Only the trip owner can invite admins")

        invitee = self.repo.get_user_by_email(self.db, data.email)
        if not invitee:
            raise HTTPException(status_code=404, detail="No user found with this email address")
        if invitee.id == trip.created_by:
            raise HTTPException(status_code=400, detail="Cannot invite the trip owner")

        existing = self.repo.get_by_user(self.db, trip_id, invitee.id)
        created = existing is None
        if existing and existing.status == "ACCEPTED":
            raise HTTPException(status_code=400, detail="User is already a collaborator on this trip")
        if existing and existing.status == "PENDING":
            raise HTTPException(status_code=400, detail="User already has a pending invitation")

        collaborator = existing or TripCollaborator(trip_id=trip_id, user_id=invitee.id)
        collaborator.role = data.role
        collaborator.status = "PENDING"
        collaborator.invited_by = user.id
        collaborator.invited_at = utcnow()
        collaborator.joined_at = None
        collaborator = self.repo.save(self.db, collaborator)
        logger.info(
            f"✅ {'Invited' if created else 'Re-invited'} {invitee.id} to trip {trip_id} as {data.role}"
        )

        try:
            from ...email_service import send_trip_invitation_email

            await send_trip_invitation_email(
                to=invitee.email,
                inviter_name=user.full_name or user.email,
                trip_name=trip.name,
                role=data.role,
                message=data.message,
            )
        except Exception as e:
            logger.warning(f"⚠️ Failed to send invitation email for trip {trip_id}: {e}")

        return collaborator, created

    def update_role(self, trip_id: str, collaborator_id: str, role: str, user: User) -> TripCollaborator:
        _, context = require_trip_permission(self.db, user, trip_id, "manage_collaborators")
        collaborator = self.repo.get_for_trip(self.db, trip_id, collaborator_id)
        if not collaborator:
            raise HTTPException(status_code=404, detail="Collaborator not found")

        if (role == "ADMIN" or collaborator.role == "ADMIN") and not context.is_owner:
            raise HTTPException(
                status_code=403, detail="Only the trip owner can grant or revoke admin access"
            )

        collaborator.role = role
        collaborator = self.repo.save(self.db, collaborator)
        logger.info(f"✅ Collaborator {collaborator_id} on trip {trip_id} is now {role}")
        return collaborator

    def remove(self, trip_id: str, collaborator_id: str, user: User) -> dict:
        """Remove a collaborator; any collaborator may remove themselves"""
        collaborator = self.repo.get_for_trip(self.db, trip_id, collaborator_id)
        leaving = collaborator is not None and collaborator.user_id == user.id

        if leaving:
            require_trip_permission(self.db, user, trip_id, "view")
        else:
            _, context = require_trip_permission(self.db, user, trip_id, "manage_collaborators")
            if not collaborator:
                raise HTTPException(status_code=404, detail="Collaborator not found")
            if collaborator.role == "ADMIN" and not context.is_owner:
                raise HTTPException(status_code=403, detail="Only the trip owner can remove admins")

        self.repo.delete(self.db, collaborator)
        logger.info(f"🗑️ Collaborator {collaborator_id} removed from trip {trip_id} by {user.id}")
        return {
            "success": True,
            "message": "You left the trip" if leaving else "Collaborator removed successfully",
        }

    # ------------------------------------------------------------------
    # Invitee side
    # ------------------------------------------------------------------

    def list_invitations(self, user: User) -> list[TripCollaborator]:
        return self.repo.pending_for_user(self.db, user.id)

    def respond(self, invitation_id: str, accept: bool, user: User) -> TripCollaborator:
        invitation = self.repo.get_invitation(self.db, invitation_id, user.id)
        if not invitation:
            raise HTTPException(status_code=404, detail="Invitation not found")
        if invitation.status != "PENDING":
            raise HTTPException(
                status_code=400,
                detail=f"Invitation has already been {invitation.status.lower()}",
            )

        invitation.status = "ACCEPTED" if accept else "DECLINED"
        invitation.joined_at = utcnow() if accept else None
        invitation = self.repo.save(self.db, invitation)
        logger.info(f"✅ User {user.id} {invitation.status.lower()} invitation {invitation_id}")
        return invitation
