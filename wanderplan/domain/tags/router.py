"""Tag router - FastAPI endpoints for tags"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import TagCreate, tag_response
from .service import TagService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tags", tags=["Tags"])


def get_tag_service(db: Session = Depends(get_db)) -> TagService:
    """Dependency injection for TagService"""
    return TagService(db)


@router.get("")
async def list_tags(
    tripId: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
):
    """Tags across the user's trips, plus a by-name aggregation for autocomplete"""
    tags, aggregated = service.list_tags(current_user, tripId)
    return {
        "success": True,
        "data": {
            "tags": [tag_response(t) for t in tags],
            "aggregated": aggregated,
            "total": len(tags),
        },
    }


@router.post("", status_code=201)
async def create_tag(
    data: TagCreate,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
):
    tag = service.create_tag(data, current_user)
    return {"success": True, "data": tag_response(tag)}


@router.delete("/{tag_id}")
async def delete_tag(
    tag_id: str,
    current_user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
):
    tag = service.delete_tag(tag_id, current_user)
    return {
        "success": True,
        "message": "Tag deleted successfully",
        "data": {"id": tag.id, "name": tag.name},
    }


__all__ = ["router", "list_tags", "create_tag", "delete_tag"]
