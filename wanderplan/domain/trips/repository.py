"""Trip repository - Database operations for trips"""

import random
from datetime import datetime
from typing import Optional

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session, selectinload

from ...models import Budget, Event, Tag, Trip, TripCollaborator, utcnow
from ...permissions import accessible_trip_ids_query
from ...shared.pagination import paginate
from ...utils.sanitization import escape_like

# Colors assigned to tags created without an explicit color
TAG_COLORS = [
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
    "#14B8A6",
    "#F97316",
]

SORT_COLUMNS = {
    "createdAt": Trip.created_at,
    "startDate": Trip.start_date,
    "endDate": Trip.end_date,
    "name": Trip.name,
}


def random_tag_color() -> str:
    return random.choice(TAG_COLORS)


class TripRepository:
    """Repository for trip database operations"""

    @staticmethod
    def list_trips(
        db: Session,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        sort: str = "createdAt",
        order: str = "desc",
        status: str = "active",
        search: Optional[str] = None,
        tags: Optional[list[str]] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> tuple[list[Trip], int]:
        """Trips the user owns or collaborates on (accepted), paginated"""
        query = (
            db.query(Trip)
            .filter(Trip.id.in_(accessible_trip_ids_query(db, user_id)))
            .options(selectinload(Trip.tags))
        )

        if status == "active":
            query = query.filter(Trip.is_archived.is_(False))
        elif status == "archived":
            query = query.filter(Trip.is_archived.is_(True))

        if search:
            pattern = f"%{escape_like(search)}%"
            query = query.filter(
                or_(
                    Trip.name.ilike(pattern, escape="\\"),
                    Trip.description.ilike(pattern, escape="\\"),
                    # destinations is a JSON list; match against its text form
                    cast(Trip.destinations, String).ilike(pattern, escape="\\"),
                )
            )

        if tags:
            tagged = db.query(Tag.trip_id).filter(Tag.name.in_(tags))
            query = query.filter(Trip.id.in_(tagged))

        if start_date:
            query = query.filter(Trip.start_date >= start_date)
        if end_date:
            query = query.filter(Trip.end_date <= end_date)

        column = SORT_COLUMNS.get(sort, Trip.created_at)
        query = query.order_by(column.desc() if order == "desc" else column.asc(), Trip.id)
        return paginate(query, page, limit)

    @staticmethod
    def get_trip(db: Session, trip_id: str) -> Optional[Trip]:
        """Trip by id including soft-deleted ones"""
        return db.query(Trip).filter(Trip.id == trip_id).first()

    @staticmethod
    def count_events(db: Session, trip_ids: list[str]) -> dict[str, int]:
        rows = (
            db.query(Event.trip_id, func.count(Event.id))
            .filter(Event.trip_id.in_(trip_ids))
            .group_by(Event.trip_id)
            .all()
        )
        return dict(rows)

    @staticmethod
    def count_accepted_collaborators(db: Session, trip_ids: list[str]) -> dict[str, int]:
        rows = (
            db.query(TripCollaborator.trip_id, func.count(TripCollaborator.id))
            .filter(
                TripCollaborator.trip_id.in_(trip_ids),
                TripCollaborator.status == "ACCEPTED",
            )
            .group_by(TripCollaborator.trip_id)
            .all()
        )
        return dict(rows)

    @staticmethod
    def add_tags(db: Session, trip_id: str, names: list[str], color: Optional[str] = None) -> list[Tag]:
        """Stage tags on the session (no commit)"""
        tags = [
            Tag(trip_id=trip_id, name=name, color=color or random_tag_color()) for name in names
        ]
        db.add_all(tags)
        return tags

    @staticmethod
    def create_trip(db: Session, tag_names: list[str], **trip_data) -> Trip:
        """Insert a trip and its tags in one transaction"""
        try:
            trip = Trip(**trip_data)
            db.add(trip)
            db.flush()
            TripRepository.add_tags(db, trip.id, tag_names)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(trip)
        return trip

    @staticmethod
    def update_trip(db: Session, trip: Trip, updates: dict, tag_names: Optional[list[str]]) -> Trip:
        """
        Apply field updates and, when tag_names is given, replace the tag set.
        Field updates, tag deletion and tag insertion commit together.
        """
        try:
            for key, value in updates.items():
                setattr(trip, key, value)

            if tag_names is not None:
                existing = {tag.name: tag for tag in trip.tags}
                for name, tag in existing.items():
                    if name not in tag_names:
                        db.delete(tag)
                db.flush()
                TripRepository.add_tags(
                    db, trip.id, [name for name in tag_names if name not in existing]
                )
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(trip)
        db.expire(trip, ["tags"])
        return trip

    @staticmethod
    def soft_delete_trip(db: Session, trip: Trip) -> Trip:
        trip.deleted_at = utcnow()
        db.commit()
        db.refresh(trip)
        return trip

    @staticmethod
    def set_archived(db: Session, trip: Trip, archived: bool) -> Trip:
        trip.is_archived = archived
        db.commit()
        db.refresh(trip)
        return trip

    @staticmethod
    def duplicate_trip(
        db: Session,
        source: Trip,
        owner_id: str,
        name: str,
        start_date: Optional[datetime],
    ) -> Trip:
        """Copy a trip with its events, budget and tags, shifting dates to start_date"""
        shift = None
        if start_date and source.start_date:
            shift = start_date - source.start_date

        def shifted(value):
            if value is None or shift is None:
                return value
            return value + shift

        try:
            copy = Trip(
                name=name,
                description=source.description,
                start_date=start_date or source.start_date,
                end_date=shifted(source.end_date),
                destinations=list(source.destinations or []),
                visibility="PRIVATE",
                cover_image_url=source.cover_image_url,
                is_archived=False,
                created_by=owner_id,
            )
            db.add(copy)
            db.flush()

            for event in source.events:
                db.add(
                    Event(
                        trip_id=copy.id,
                        created_by=owner_id,
                        type=event.type,
                        title=event.title,
                        description=event.description,
                        start_date_time=shifted(event.start_date_time),
                        end_date_time=shifted(event.end_date_time),
                        order=event.order,
                        location=dict(event.location) if event.location else None,
                        cost=event.cost,
                        currency=event.currency,
                        notes=event.notes,
                        confirmation_number=event.confirmation_number,
                    )
                )

            if source.budget:
                db.add(
                    Budget(
                        trip_id=copy.id,
                        total_budget=source.budget.total_budget,
                        currency=source.budget.currency,
                        category_budgets=dict(source.budget.category_budgets or {}),
                    )
                )

            for tag in source.tags:
                db.add(Tag(trip_id=copy.id, name=tag.name, color=tag.color))

            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(copy)
        return copy
