"""Trip router - FastAPI endpoints for trip operations"""

import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...shared.validators import parse_csv, to_naive_utc
from .schemas import (
    BulkArchiveRequest,
    BulkDeleteRequest,
    BulkTagRequest,
    DuplicateTripRequest,
    TripCreate,
    TripUpdate,
    trip_response,
)
from .service import TripService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trips", tags=["Trips"])


def get_trip_service(db: Session = Depends(get_db)) -> TripService:
    """Dependency injection for TripService"""
    return TripService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("")
async def list_trips(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort: Literal["createdAt", "startDate", "endDate", "name"] = Query("createdAt"),
    order: Literal["asc", "desc"] = Query("desc"),
    status: Literal["active", "archived", "all"] = Query("active"),
    search: Optional[str] = Query(None, max_length=200),
    tags: Optional[str] = Query(None, description="Comma separated tag names"),
    startDate: Optional[datetime] = Query(None),
    endDate: Optional[datetime] = Query(None),
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    """List trips the current user owns or collaborates on"""
    return service.list_trips(
        current_user,
        page=page,
        limit=limit,
        sort=sort,
        order=order,
        status=status,
        search=search,
        tags=parse_csv(tags),
        start_date=to_naive_utc(startDate),
        end_date=to_naive_utc(endDate),
    )


@router.post("", status_code=201)
async def create_trip(
    data: TripCreate,
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    trip = service.create_trip(data, current_user)
    return {"trip": trip_response(trip)}


# ============================================================================
# BULK OPERATIONS
# ============================================================================


@router.post("/bulk/archive")
async def bulk_archive_trips(
    data: BulkArchiveRequest,
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    """Archive (or unarchive) several owned trips"""
    return service.bulk_archive(data, current_user)


@router.post("/bulk/delete")
async def bulk_delete_trips(
    data: BulkDeleteRequest,
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    """Soft delete several owned trips"""
    return service.bulk_delete(data, current_user)


@router.post("/bulk/tag")
async def bulk_tag_trips(
    data: BulkTagRequest,
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    """Add the same tags to several trips"""
    return service.bulk_tag(data, current_user)


# ============================================================================
# SINGLE TRIP
# ============================================================================


@router.get("/{trip_id}")
async def get_trip(
    trip_id: str,
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    """Get a trip with events, collaborators, budget, tags and stats"""
    return {"trip": service.get_trip_detail(trip_id, current_user)}


@router.patch("/{trip_id}")
async def update_trip(
    trip_id: str,
    data: TripUpdate,
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    trip = service.update_trip(trip_id, data, current_user)
    return {"message": "Trip updated successfully", "trip": trip_response(trip)}


@router.delete("/{trip_id}")
async def delete_trip(
    trip_id: str,
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    return service.delete_trip(trip_id, current_user)


@router.post("/{trip_id}/archive")
async def archive_trip(
    trip_id: str,
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    trip = service.set_archived(trip_id, True, current_user)
    return {"message": "Trip archived successfully", "trip": trip_response(trip)}


@router.delete("/{trip_id}/archive")
async def unarchive_trip(
    trip_id: str,
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    trip = service.set_archived(trip_id, False, current_user)
    return {"message": "Trip restored successfully", "trip": trip_response(trip)}


@router.post("/{trip_id}/duplicate", status_code=201)
async def duplicate_trip(
    trip_id: str,
    data: Optional[DuplicateTripRequest] = Body(None),
    current_user: User = Depends(get_current_user),
    service: TripService = Depends(get_trip_service),
):
    """Copy a trip (events, budget, tags) into a new private trip owned by the caller"""
    trip = service.duplicate_trip(trip_id, data or DuplicateTripRequest(), current_user)
    return {"message": "Trip duplicated successfully", "trip": trip_response(trip)}


__all__ = [
    "router",
    "list_trips",
    "create_trip",
    "bulk_archive_trips",
    "bulk_delete_trips",
    "bulk_tag_trips",
    "get_trip",
    "update_trip",
    "delete_trip",
    "archive_trip",
    "unarchive_trip",
    "duplicate_trip",
]
