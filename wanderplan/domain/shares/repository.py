"""Share link repository - Database operations for trip share tokens"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Trip, TripShareToken


class ShareRepository:
    """Repository for share token database operations"""

    @staticmethod
    def create(db: Session, **values) -> TripShareToken:
        share = TripShareToken(**values)
        db.add(share)
        db.commit()
        db.refresh(share)
        return share

    @staticmethod
    def list_active(db: Session, trip_id: str, now: datetime) -> list[TripShareToken]:
        return (
            db.query(TripShareToken)
            .options(joinedload(TripShareToken.creator))
            .filter(
                TripShareToken.trip_id == trip_id,
                TripShareToken.is_active.is_(True),
                TripShareToken.expires_at > now,
            )
            .order_by(TripShareToken.created_at.desc())
            .all()
        )

    @staticmethod
    def revoke_all(db: Session, trip_id: str, now: datetime) -> int:
        count = (
            db.query(TripShareToken)
            .filter(TripShareToken.trip_id == trip_id, TripShareToken.is_active.is_(True))
            .update({"is_active": False, "revoked_at": now}, synchronize_session=False)
        )
        db.commit()
        return count

    @staticmethod
    def get_by_token(db: Session, token: str) -> Optional[TripShareToken]:
        return (
            db.query(TripShareToken)
            .options(joinedload(TripShareToken.trip).joinedload(Trip.owner))
            .filter(TripShareToken.token == token)
            .first()
        )
