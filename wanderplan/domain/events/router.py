"""Event router - FastAPI endpoints for itinerary events"""

import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.validators import parse_csv, to_naive_utc
from .schemas import EventCreate, EventUpdate, ReorderEventsRequest, event_response
from .service import EventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trips/{trip_id}/events", tags=["Events"])


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Dependency injection for EventService"""
    return EventService(db)


# ============================================================================
# REORDER
# ============================================================================


# Declared before /{event_id} so "reorder" is not captured as an id
@router.patch("/reorder")
async def reorder_events(
    trip_id: str,
    data: ReorderEventsRequest,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    """Persist a drag-and-drop itinerary order"""
    events = service.reorder_events(trip_id, data.eventIds, current_user)
    return {
        "success": True,
        "message": f"Successfully reordered {len(events)} events",
        "events": [event_response(e) for e in events],
    }


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("")
async def list_events(
    trip_id: str,
    type: Optional[str] = Query(None, description="Comma separated event types"),
    startDate: Optional[datetime] = Query(None),
    endDate: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    sort: Literal["startDateTime", "order", "createdAt"] = Query("startDateTime"),
    orderBy: Literal["asc", "desc"] = Query("asc"),
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    """List a trip's events"""
    events = service.list_events(
        trip_id,
        current_user,
        types=[t.upper() for t in parse_csv(type)],
        start_date=to_naive_utc(startDate),
        end_date=to_naive_utc(endDate),
        search=search,
        sort=sort,
        order_by=orderBy,
    )
    return {"events": [event_response(e) for e in events], "count": len(events)}


@router.post("", status_code=201)
async def create_event(
    trip_id: str,
    data: EventCreate,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    event = service.create_event(trip_id, data, current_user)
    return {"event": event_response(event)}


@router.get("/{event_id}")
async def get_event(
    trip_id: str,
    event_id: str,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    event = service.get_event(trip_id, event_id, current_user)
    return {"event": event_response(event)}


@router.patch("/{event_id}")
async def update_event(
    trip_id: str,
    event_id: str,
    data: EventUpdate,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    event = service.update_event(trip_id, event_id, data, current_user)
    return {"event": event_response(event)}


@router.delete("/{event_id}")
async def delete_event(
    trip_id: str,
    event_id: str,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return service.delete_event(trip_id, event_id, current_user)


__all__ = [
    "router",
    "reorder_events",
    "list_events",
    "create_event",
    "get_event",
    "update_event",
    "delete_event",
]
