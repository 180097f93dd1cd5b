"""Collaborator router - trip membership and invitation endpoints"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    InviteCollaboratorRequest,
    UpdateCollaboratorRequest,
    collaborator_response,
    invitation_response,
)
from .service import CollaboratorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Collaborators"])


def get_collaborator_service(db: Session = Depends(get_db)) -> CollaboratorService:
    """Dependency injection for CollaboratorService"""
    return CollaboratorService(db)


# ============================================================================
# TRIP COLLABORATORS
# ============================================================================


@router.get("/trips/{trip_id}/collaborators")
async def list_collaborators(
    trip_id: str,
    status: Optional[Literal["PENDING", "ACCEPTED", "DECLINED"]] = Query(None),
    current_user: User = Depends(get_current_user),
    service: CollaboratorService = Depends(get_collaborator_service),
):
    collaborators = service.list_collaborators(trip_id, current_user, status)
    return {"collaborators": [collaborator_response(c) for c in collaborators]}


@router.post("/trips/{trip_id}/collaborators", status_code=201)
async def invite_collaborator(
    trip_id: str,
    data: InviteCollaboratorRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    service: CollaboratorService = Depends(get_collaborator_service),
):
    """Invite a user by email (owner or ADMIN)"""
    collaborator, created = await service.invite(trip_id, data, current_user)
    if not created:
        response.status_code = 200
    return {
        "message": "Invitation sent successfully" if created else "Invitation re-sent successfully",
        "collaborator": collaborator_response(collaborator),
    }


@router.patch("/trips/{trip_id}/collaborators/{collaborator_id}")
async def update_collaborator(
    trip_id: str,
    collaborator_id: str,
    data: UpdateCollaboratorRequest,
    current_user: User = Depends(get_current_user),
    service: CollaboratorService = Depends(get_collaborator_service),
):
    collaborator = service.update_role(trip_id, collaborator_id, data.role, current_user)
    return {"message": "Role updated successfully", "collaborator": collaborator_response(collaborator)}


@router.delete("/trips/{trip_id}/collaborators/{collaborator_id}")
async def remove_collaborator(
    trip_id: str,
    collaborator_id: str,
    current_user: User = Depends(get_current_user),
    service: CollaboratorService = Depends(get_collaborator_service),
):
    return service.remove(trip_id, collaborator_id, current_user)


# ============================================================================
# INVITATIONS (invitee side)
# ============================================================================


@router.get("/invitations")
async def list_invitations(
    current_user: User = Depends(get_current_user),
    service: CollaboratorService = Depends(get_collaborator_service),
):
    invitations = service.list_invitations(current_user)
    return {"invitations": [invitation_response(i) for i in invitations]}


@router.post("/invitations/{invitation_id}/accept")
async def accept_invitation(
    invitation_id: str,
    current_user: User = Depends(get_current_user),
    service: CollaboratorService = Depends(get_collaborator_service),
):
    invitation = service.respond(invitation_id, True, current_user)
    return {"message": "Invitation accepted", "invitation": invitation_response(invitation)}


@router.post("/invitations/{invitation_id}/decline")
async def decline_invitation(
    invitation_id: str,
    current_user: User = Depends(get_current_user),
    service: CollaboratorService = Depends(get_collaborator_service),
):
    invitation = service.respond(invitation_id, False, current_user)
    return {"message": "Invitation declined", "invitation": invitation_response(invitation)}


__all__ = [
    "router",
    "list_collaborators",
    "invite_collaborator",
    "update_collaborator",
    "remove_collaborator",
    "list_invitations",
    "accept_invitation",
    "decline_invitation",
]
