"""Collaborator repository - Database operations for trip memberships"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Trip, TripCollaborator, User


class CollaboratorRepository:
    """Repository for collaborator database operations"""

    @staticmethod
    def list_for_trip(db: Session, trip_id: str, status: Optional[str] = None) -> list[TripCollaborator]:
        query = (
            db.query(TripCollaborator)
            .options(joinedload(TripCollaborator.user))
            .filter(TripCollaborator.trip_id == trip_id)
        )
        if status:
            query = query.filter(TripCollaborator.status == status)
        return query.order_by(TripCollaborator.invited_at.asc()).all()

    @staticmethod
    def get_for_trip(db: Session, trip_id: str, collaborator_id: str) -> Optional[TripCollaborator]:
        return (
            db.query(TripCollaborator)
            .filter(TripCollaborator.id == collaborator_id, TripCollaborator.trip_id == trip_id)
            .first()
        )

    @staticmethod
    def get_by_user(db: Session, trip_id: str, user_id: str) -> Optional[TripCollaborator]:
        return (
            db.query(TripCollaborator)
            .filter(TripCollaborator.trip_id == trip_id, TripCollaborator.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.lower()).first()

    @staticmethod
    def pending_for_user(db: Session, user_id: str) -> list[TripCollaborator]:
        return (
            db.query(TripCollaborator)
            .join(Trip, Trip.id == TripCollaborator.trip_id)
            .filter(
                TripCollaborator.user_id == user_id,
                TripCollaborator.status == "PENDING",
                Trip.deleted_at.is_(None),
            )
            .order_by(TripCollaborator.invited_at.desc())
            .all()
        )

    @staticmethod
    def get_invitation(db: Session, invitation_id: str, user_id: str) -> Optional[TripCollaborator]:
        return (
            db.query(TripCollaborator)
            .join(Trip, Trip.id == TripCollaborator.trip_id)
            .filter(
                TripCollaborator.id == invitation_id,
                TripCollaborator.user_id == user_id,
                Trip.deleted_at.is_(None),
            )
            .first()
        )

    @staticmethod
    def save(db: Session, collaborator: TripCollaborator) -> TripCollaborator:
        db.add(collaborator)
        db.commit()
        db.refresh(collaborator)
        return collaborator

    @staticmethod
    def delete(db: Session, collaborator: TripCollaborator) -> None:
        db.delete(collaborator)
        db.commit()
