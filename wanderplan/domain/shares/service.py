"""Share link service - public read-only links to a trip"""

import logging
from datetime import timedelta

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...errors import api_error
from ...models import TripShareToken, User, utcnow
from ...permissions import require_trip_permission
from .repository import ShareRepository
from .schemas import ShareLinkCreate

logger = logging.getLogger(__name__)


class ShareService:
    """Service layer for trip share links"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ShareRepository()

    def create_link(self, trip_id: str, data: ShareLinkCreate, user: User) -> TripShareToken:
        require_trip_permission(self.db, user, trip_id, "share")
        share = self.repo.create(
            self.db,
            trip_id=trip_id,
            permissions=data.permissions,
            expires_at=utcnow() + timedelta(days=data.expiresIn),
            created_by=user.id,
        )
        logger.info(f"🔗 Share link {share.id} created for trip {trip_id} by {user.id} ({data.expiresIn} days)")
        return share

    def list_links(self, trip_id: str, user: User) -> list[TripShareToken]:
        """Links that are neither revoked nor expired, newest first"""
        require_trip_permission(self.db, user, trip_id, "share")
        return self.repo.list_active(self.db, trip_id, utcnow())

    def revoke_links(self, trip_id: str, user: User) -> int:
        require_trip_permission(self.db, user, trip_id, "share")
        count = self.repo.revoke_all(self.db, trip_id, utcnow())
        logger.info(f"🔒 Revoked {count} share links for trip {trip_id} by {user.id}")
        return count

    def resolve(self, token: str) -> TripShareToken:
        """
        Look up a public share token.

        Raises:
            HTTPException 404 for unknown tokens or deleted trips,
            410 for revoked or expired links.
        """
        share = self.repo.get_by_token(self.db, token)
        if not share:
            raise api_error(
                404, "This share link is invalid or has been removed", code="SHARE_LINK_NOT_FOUND"
            )
        if not share.is_active or share.revoked_at is not None:
            raise api_error(410, "This share link has been revoked by the trip owner", code="SHARE_LINK_REVOKED")
        if share.expires_at < utcnow():
            raise api_error(
                410,
                "This share link has expired",
                code="SHARE_LINK_EXPIRED",
                details={"expiresAt": share.expires_at.isoformat()},
            )
        if share.trip.deleted_at is not None:
            raise HTTPException(status_code=404, detail="This trip is no longer available")
        return share
