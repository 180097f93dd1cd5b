"""Event service - Business logic for itinerary events"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...errors import api_error
from ...models import Event, User
from ...permissions import get_active_trip, get_permission_context, require_trip_permission
from .repository import EventRepository
from .schemas import EventCreate, EventUpdate

logger = logging.getLogger(__name__)


class EventService:
    """Service layer for event business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EventRepository()

    def list_events(
        self,
        trip_id: str,
        user: User,
        types: Optional[list[str]] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        search: Optional[str] = None,
        sort: str = "startDateTime",
        order_by: str = "asc",
    ) -> list[Event]:
        require_trip_permission(self.db, user, trip_id, "view")
        return self.repo.list_events(
            self.db, trip_id, types, start_date, end_date, search, sort, order_by
        )

    def get_event(self, trip_id: str, event_id: str, user: User) -> Event:
        require_trip_permission(self.db, user, trip_id, "view")
        event = self.repo.get_event(self.db, trip_id, event_id)
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return event

    def create_event(self, trip_id: str, data: EventCreate, user: User) -> Event:
        """Create an event; without an explicit order it goes to the end of the itinerary"""
        require_trip_permission(self.db, user, trip_id, "edit")

        order = data.order if data.order is not None else self.repo.next_order(self.db, trip_id)
        event = self.repo.create_event(
            self.db,
            trip_id=trip_id,
            created_by=user.id,
            type=data.type,
            title=data.title,
            description=data.description,
            start_date_time=data.startDateTime,
            end_date_time=data.endDateTime,
            order=order,
            location=data.location.model_dump() if data.location else None,
            cost=data.cost.amount if data.cost else None,
            currency=data.cost.currency if data.cost else None,
            notes=data.notes,
            confirmation_number=data.confirmationNumber,
        )
        logger.info(f"✅ Event {event.id} created in trip {trip_id} by {user.id}")
        return event

    def update_event(self, trip_id: str, event_id: str, data: EventUpdate, user: User) -> Event:
        require_trip_permission(self.db, user, trip_id, "edit")
        event = self.repo.get_event(self.db, trip_id, event_id)
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")

        provided = data.model_dump(exclude_unset=True)
        field_map = {
            "type": "type",
            "title": "title",
            "description": "description",
            "startDateTime": "start_date_time",
            "endDateTime": "end_date_time",
            "order": "order",
            "notes": "notes",
            "confirmationNumber": "confirmation_number",
        }
        updates = {column: provided[key] for key, column in field_map.items() if key in provided}
        if "location" in provided:
            updates["location"] = data.location.model_dump() if data.location else None
        if "cost" in provided:
            updates["cost"] = data.cost.amount if data.cost else None
            updates["currency"] = data.cost.currency if data.cost else None

        start = updates.get("start_date_time", event.start_date_time)
        end = updates.get("end_date_time", event.end_date_time)
        if start and end and end < start:
            raise api_error(
                400,
                "End date/time must be after or equal to start date/time",
                details=[{"field": "endDateTime", "message": "Must be after startDateTime"}],
            )

        return self.repo.update_event(self.db, event, **updates)

    def delete_event(self, trip_id: str, event_id: str, user: User) -> dict:
        require_trip_permission(self.db, user, trip_id, "delete")
        event = self.repo.get_event(self.db, trip_id, event_id)
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")

        self.repo.delete_event(self.db, event)
        logger.info(f"🗑️ Event {event_id} deleted from trip {trip_id} by {user.id}")
        return {"success": True, "message": "Event deleted successfully"}

    def reorder_events(self, trip_id: str, event_ids: list[str], user: User) -> list[Event]:
        """
        Rewrite the itinerary order of the listed events.

        Each listed event gets order = its index in event_ids; unlisted events
        keep their order. Every id must belong to this trip. All updates happen
        in one transaction.
        """
        trip = get_active_trip(self.db, trip_id)
        if not trip:
            raise HTTPException(status_code=404, detail="Trip not found")

        context = get_permission_context(self.db, user, trip)
        if not context.can_edit():
            logger.warning(f"⚠️ User {user.id} tried to reorder events in trip {trip_id}")
            raise HTTPException(
                status_code=403,
                detail="You do not have permission to reorder events in this trip",
            )

        events = self.repo.get_events_by_ids(self.db, event_ids)
        events_by_id = {event.id: event for event in events}

        missing = [event_id for event_id in event_ids if event_id not in events_by_id]
        if missing:
            raise api_error(
                400,
                "Invalid event IDs",
                details=[f"The following event IDs were not found: {', '.join(missing)}"],
            )

        foreign = [event.id for event in events if event.trip_id != trip_id]
        if foreign:
            raise api_error(
                400,
                "Invalid event IDs",
                details=[f"The following event IDs do not belong to this trip: {', '.join(foreign)}"],
            )

        self.repo.apply_order(self.db, events_by_id, event_ids)
        logger.info(f"✅ Reordered {len(event_ids)} events in trip {trip_id}")

        for event in events:
            self.db.refresh(event)
        return sorted(events, key=lambda event: event.order)
