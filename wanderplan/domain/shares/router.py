"""Share link router - manage and open public trip links"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...errors import api_error
from ...models import User
from ...shared.validators import validate_uuid
from .schemas import ShareLinkCreate, public_trip_response, share_link_response
from .service import ShareService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trips", tags=["Sharing"])


def get_share_service(db: Session = Depends(get_db)) -> ShareService:
    """Dependency injection for ShareService"""
    return ShareService(db)


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("/share/{token}")
async def open_share_link(token: str, service: ShareService = Depends(get_share_service)):
    """Read-only trip view for anyone holding a valid link"""
    if not validate_uuid(token):
        raise api_error(400, "Invalid share token")
    share = service.resolve(token)
    return {"success": True, "data": public_trip_response(share)}


# ============================================================================
# OWNER / ADMIN
# ============================================================================


@router.post("/{trip_id}/share", status_code=201)
async def create_share_link(
    trip_id: str,
    data: Optional[ShareLinkCreate] = Body(None),
    current_user: User = Depends(get_current_user),
    service: ShareService = Depends(get_share_service),
):
    share = service.create_link(trip_id, data or ShareLinkCreate(), current_user)
    return {"success": True, "data": share_link_response(share)}


@router.get("/{trip_id}/share")
async def list_share_links(
    trip_id: str,
    current_user: User = Depends(get_current_user),
    service: ShareService = Depends(get_share_service),
):
    links = service.list_links(trip_id, current_user)
    return {
        "success": True,
        "data": {"tokens": [share_link_response(s) for s in links], "count": len(links)},
    }


@router.delete("/{trip_id}/share")
async def revoke_share_links(
    trip_id: str,
    current_user: User = Depends(get_current_user),
    service: ShareService = Depends(get_share_service),
):
    """Revoke every active link of the trip"""
    count = service.revoke_links(trip_id, current_user)
    return {
        "success": True,
        "message": "All share links revoked successfully",
        "data": {"revokedCount": count},
    }


__all__ = [
    "router",
    "open_share_link",
    "create_share_link",
    "list_share_links",
    "revoke_share_links",
]
