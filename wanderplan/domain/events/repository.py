"""Event repository - Database operations for itinerary events"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Event
from ...utils.sanitization import escape_like

SORT_COLUMNS = {
    "startDateTime": Event.start_date_time,
    "order": Event.order,
    "createdAt": Event.created_at,
}


class EventRepository:
    """Repository for event database operations"""

    @staticmethod
    def list_events(
        db: Session,
        trip_id: str,
        types: Optional[list[str]] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        search: Optional[str] = None,
        sort: str = "startDateTime",
        order_by: str = "asc",
    ) -> list[Event]:
        """Events of a trip with optional filters"""
        query = db.query(Event).filter(Event.trip_id == trip_id)

        if types:
            query = query.filter(Event.type.in_(types))
        if start_date:
            query = query.filter(Event.start_date_time >= start_date)
        if end_date:
            query = query.filter(Event.start_date_time <= end_date)
        if search:
            pattern = f"%{escape_like(search)}%"
            query = query.filter(
                or_(
                    Event.title.ilike(pattern, escape="\\"),
                    Event.description.ilike(pattern, escape="\\"),
                    Event.notes.ilike(pattern, escape="\\"),
                )
            )

        column = SORT_COLUMNS.get(sort, Event.start_date_time)
        column = column.desc() if order_by == "desc" else column.asc()
        return query.order_by(column, Event.order.asc()).all()

    @staticmethod
    def get_event(db: Session, trip_id: str, event_id: str) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id, Event.trip_id == trip_id).first()

    @staticmethod
    def get_events_by_ids(db: Session, event_ids: list[str]) -> list[Event]:
        """Events by id regardless of trip (used to tell unknown from cross-trip ids)"""
        return db.query(Event).filter(Event.id.in_(event_ids)).all()

    @staticmethod
    def next_order(db: Session, trip_id: str) -> int:
        current = db.query(func.max(Event.order)).filter(Event.trip_id == trip_id).scalar()
        return 0 if current is None else current + 1

    @staticmethod
    def create_event(db: Session, **event_data) -> Event:
        event = Event(**event_data)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def update_event(db: Session, event: Event, **updates) -> Event:
        """Apply updates; None values are written (callers pass only provided fields)"""
        for key, value in updates.items():
            if hasattr(event, key):
                setattr(event, key, value)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete_event(db: Session, event: Event) -> None:
        db.delete(event)
        db.commit()

    @staticmethod
    def apply_order(db: Session, events_by_id: dict[str, Event], event_ids: list[str]) -> None:
        """Set order = position for each id in one transaction; rolls back on failure"""
        try:
            for index, event_id in enumerate(event_ids):
                events_by_id[event_id].order = index
            db.commit()
        except Exception:
            db.rollback()
            raise
