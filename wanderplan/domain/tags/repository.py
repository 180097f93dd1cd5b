"""Tag repository - Database operations for trip tags"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ...models import Tag
from ...permissions import accessible_trip_ids_query


class DuplicateTagError(Exception):
    """A tag with this name already exists on the trip"""


class TagRepository:
    """Repository for tag database operations"""

    @staticmethod
    def list_accessible(db: Session, user_id: str, trip_id: Optional[str] = None) -> list[Tag]:
        query = (
            db.query(Tag)
            .options(joinedload(Tag.trip))
            .filter(Tag.trip_id.in_(accessible_trip_ids_query(db, user_id)))
        )
        if trip_id:
            query = query.filter(Tag.trip_id == trip_id)
        return query.order_by(Tag.name.asc(), Tag.created_at.desc()).all()

    @staticmethod
    def get_tag(db: Session, tag_id: str) -> Optional[Tag]:
        return db.query(Tag).filter(Tag.id == tag_id).first()

    @staticmethod
    def exists(db: Session, trip_id: str, name: str) -> bool:
        return db.query(Tag.id).filter(Tag.trip_id == trip_id, Tag.name == name).first() is not None

    @staticmethod
    def create_tag(db: Session, trip_id: str, name: str, color: Optional[str]) -> Tag:
        tag = Tag(trip_id=trip_id, name=name, color=color)
        db.add(tag)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise DuplicateTagError(name) from e
        db.refresh(tag)
        return tag

    @staticmethod
    def delete_tag(db: Session, tag: Tag) -> None:
        db.delete(tag)
        db.commit()
