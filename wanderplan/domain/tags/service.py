"""Tag service - Business logic for trip tags"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...errors import api_error
from ...models import Tag, User
from ...permissions import get_active_trip, get_permission_context
from ...shared.validators import validate_uuid
from .repository import DuplicateTagError, TagRepository
from .schemas import TagCreate, aggregate_tags

logger = logging.getLogger(__name__)


class TagService:
    """Service layer for tag business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TagRepository()

    def list_tags(self, user: User, trip_id: Optional[str] = None) -> tuple[list[Tag], list[dict]]:
        tags = self.repo.list_accessible(self.db, user.id, trip_id)
        return tags, aggregate_tags(tags)

    def create_tag(self, data: TagCreate, user: User) -> Tag:
        trip = get_active_trip(self.db, data.tripId)
        if not trip:
            raise HTTPException(status_code=404, detail="Trip not found")
        if not get_permission_context(self.db, user, trip).can_edit():
            raise HTTPException(
                status_code=403, detail="You do not have permission to add tags to this trip"
            )

        if self.repo.exists(self.db, trip.id, data.name):
            raise api_error(409, f'Tag "{data.name}" already exists on this trip', code="CONFLICT")
        try:
            tag = self.repo.create_tag(self.db, trip.id, data.name, data.color)
        except DuplicateTagError as e:
            raise api_error(409, f'Tag "{data.name}" already exists on this trip', code="CONFLICT") from e

        logger.info(f"🏷️ Tag '{tag.name}' added to trip {trip.id} by {user.id}")
        return tag

    def delete_tag(self, tag_id: str, user: User) -> Tag:
        if not validate_uuid(tag_id):
            raise api_error(400, "Invalid tag ID format", code="VALIDATION_ERROR")

        tag = self.repo.get_tag(self.db, tag_id)
        if not tag or tag.trip.deleted_at is not None:
            raise HTTPException(status_code=404, detail="Tag not found")
        if not get_permission_context(self.db, user, tag.trip).can_edit():
            raise HTTPException(status_code=403, detail="You do not have permission to delete this tag")

        self.repo.delete_tag(self.db, tag)
        logger.info(f"🗑️ Tag {tag_id} deleted by {user.id}")
        return tag
