"""Trip service - Business logic for trip operations"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...errors import api_error
from ...models import Tag, Trip, TripCollaborator, User, utcnow
from ...permissions import get_permission_context, require_trip_permission
from ...shared.pagination import pagination_meta
from ..events.schemas import event_response
from .repository import TripRepository, random_tag_color
from .schemas import (
    BulkArchiveRequest,
    BulkDeleteRequest,
    BulkTagRequest,
    DuplicateTripRequest,
    TripCreate,
    TripDetailResponse,
    TripSummaryResponse,
    TripUpdate,
    trip_fields,
)

logger = logging.getLogger(__name__)

UPDATE_FIELDS = {
    "name": "name",
    "description": "description",
    "startDate": "start_date",
    "endDate": "end_date",
    "destinations": "destinations",
    "coverImageUrl": "cover_image_url",
}


def _user_summary(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "avatarUrl": user.avatar_url,
    }


class TripService:
    """Service layer for trip business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TripRepository()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_trips(
        self,
        user: User,
        page: int,
        limit: int,
        sort: str,
        order: str,
        status: str,
        search: Optional[str],
        tags: list[str],
        start_date: Optional[datetime],
        end_date: Optional[datetime],
    ) -> dict:
        trips, total = self.repo.list_trips(
            self.db,
            user.id,
            page=page,
            limit=limit,
            sort=sort,
            order=order,
            status=status,
            search=search,
            tags=tags,
            start_date=start_date,
            end_date=end_date,
        )
        trip_ids = [trip.id for trip in trips]
        event_counts = self.repo.count_events(self.db, trip_ids)
        collaborator_counts = self.repo.count_accepted_collaborators(self.db, trip_ids)
        roles = {
            c.trip_id: c.role
            for c in self.db.query(TripCollaborator).filter(
                TripCollaborator.trip_id.in_(trip_ids), TripCollaborator.user_id == user.id
            )
        }

        items = [
            TripSummaryResponse(
                **trip_fields(trip),
                eventCount=event_counts.get(trip.id, 0),
                collaboratorCount=collaborator_counts.get(trip.id, 0),
                userRole="OWNER" if trip.created_by == user.id else roles.get(trip.id),
            )
            for trip in trips
        ]
        return {"trips": items, "pagination": pagination_meta(total, page, limit)}

    def get_trip_detail(self, trip_id: str, user: User) -> TripDetailResponse:
        """
        Full trip view: events in itinerary order, accepted collaborators,
        budget with spending summary, tags, the caller's role and stats.
        """
        trip, context = require_trip_permission(self.db, user, trip_id, "view")

        events = sorted(trip.events, key=lambda e: (e.start_date_time, e.order))
        collaborators = [c for c in trip.collaborators if c.status == "ACCEPTED"]

        by_currency: dict[str, float] = {}
        by_category: dict[str, float] = {}
        for expense in trip.expenses:
            by_currency[expense.currency] = round(
                by_currency.get(expense.currency, 0) + expense.amount, 2
            )
            by_category[expense.category] = round(
                by_category.get(expense.category, 0) + expense.amount, 2
            )

        budget = None
        if trip.budget:
            spent = by_currency.get(trip.budget.currency, 0)
            budget = {
                "id": trip.budget.id,
                "totalBudget": trip.budget.total_budget,
                "currency": trip.budget.currency,
                "categoryBudgets": trip.budget.category_budgets or {},
                "totalSpent": spent,
                "remaining": round(trip.budget.total_budget - spent, 2),
                "expenseSummary": {"byCurrency": by_currency, "byCategory": by_category},
            }

        duration_days = None
        if trip.start_date and trip.end_date:
            duration_days = (trip.end_date.date() - trip.start_date.date()).days + 1

        return TripDetailResponse(
            **trip_fields(trip),
            owner=_user_summary(trip.owner),
            events=[event_response(e) for e in events],
            collaborators=[
                {
                    "id": c.id,
                    "userId": c.user_id,
                    "role": c.role,
                    "status": c.status,
                    "joinedAt": c.joined_at,
                    "user": _user_summary(c.user),
                }
                for c in collaborators
            ],
            budget=budget,
            userRole=context.effective_role,
            stats={
                "eventCount": len(events),
                "collaboratorCount": len(collaborators),
                "expenseCount": len(trip.expenses),
                "totalExpenses": by_currency,
                "durationDays": duration_days,
            },
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_trip(self, data: TripCreate, user: User) -> Trip:
        trip = self.repo.create_trip(
            self.db,
            tag_names=data.tags,
            name=data.name,
            description=data.description,
            start_date=data.startDate,
            end_date=data.endDate,
            destinations=data.destinations,
            visibility=data.visibility.upper(),
            cover_image_url=data.coverImageUrl,
            created_by=user.id,
        )
        logger.info(f"✅ Trip {trip.id} created by {user.id}")
        return trip

    def update_trip(self, trip_id: str, data: TripUpdate, user: User) -> Trip:
        """Partial update by the owner or an ADMIN collaborator"""
        trip, _ = require_trip_permission(self.db, user, trip_id, "update")

        provided = data.model_dump(exclude_unset=True)
        if "name" in provided and provided["name"] is None:
            raise api_error(400, "Trip name cannot be empty", details=[{"field": "name", "message": "Required"}])

        updates = {column: provided[key] for key, column in UPDATE_FIELDS.items() if key in provided}
        if "destinations" in updates and updates["destinations"] is None:
            updates["destinations"] = []
        if provided.get("visibility"):
            updates["visibility"] = provided["visibility"].upper()

        start = updates.get("start_date", trip.start_date)
        end = updates.get("end_date", trip.end_date)
        if start and end and end < start:
            raise api_error(
                400,
                "End date must be after or equal to start date",
                details=[{"field": "endDate", "message": "Must be after startDate"}],
            )

        tag_names = data.tags if "tags" in provided else None
        if "tags" in provided and tag_names is None:
            tag_names = []

        trip = self.repo.update_trip(self.db, trip, updates, tag_names)
        logger.info(f"✅ Trip {trip_id} updated by {user.id}: {sorted(provided.keys())}")
        return trip

    def delete_trip(self, trip_id: str, user: User) -> dict:
        """Soft delete; only the owner may delete"""
        trip = self.repo.get_trip(self.db, trip_id)
        if not trip:
            raise HTTPException(status_code=404, detail="Trip not found")
        if trip.deleted_at is not None:
            raise HTTPException(status_code=410, detail="Trip has already been deleted")
        if trip.created_by != user.id:
            logger.warning(f"⚠️ User {user.id} tried to delete trip {trip_id} they do not own")
            raise HTTPException(status_code=403, detail="Only the trip owner can delete this trip")

        self.repo.soft_delete_trip(self.db, trip)
        logger.info(f"🗑️ Trip {trip_id} soft deleted by {user.id}")
        return {"message": "Trip deleted successfully", "tripId": trip.id, "tripName": trip.name}

    def set_archived(self, trip_id: str, archived: bool, user: User) -> Trip:
        trip, _ = require_trip_permission(self.db, user, trip_id, "update")
        return self.repo.set_archived(self.db, trip, archived)

    def duplicate_trip(self, trip_id: str, data: DuplicateTripRequest, user: User) -> Trip:
        source, _ = require_trip_permission(self.db, user, trip_id, "view")
        name = data.name or f"{source.name} (Copy)"
        start_date = data.startDate
        if start_date is None and source.start_date is not None:
            # Keep time of day, move to today
            today = utcnow().date()
            start_date = datetime.combine(today, source.start_date.time())

        copy = self.repo.duplicate_trip(self.db, source, user.id, name[:200], start_date)
        logger.info(f"✅ Trip {trip_id} duplicated as {copy.id} for {user.id}")
        return copy

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def _owned_trips(self, trip_ids: list[str], user: User) -> tuple[list[Trip], list[str]]:
        trips = (
            self.db.query(Trip)
            .filter(Trip.id.in_(trip_ids), Trip.deleted_at.is_(None), Trip.created_by == user.id)
            .all()
        )
        found = {trip.id for trip in trips}
        return trips, [trip_id for trip_id in trip_ids if trip_id not in found]

    def bulk_archive(self, data: BulkArchiveRequest, user: User) -> dict:
        trips, skipped = self._owned_trips(data.tripIds, user)
        for trip in trips:
            trip.is_archived = data.archive
        self.db.commit()
        logger.info(f"📦 Bulk {'archived' if data.archive else 'unarchived'} {len(trips)} trips for {user.id}")
        return {
            "success": True,
            "updatedCount": len(trips),
            "skippedTripIds": skipped,
            "message": f"{len(trips)} trip(s) {'archived' if data.archive else 'unarchived'}",
        }

    def bulk_delete(self, data: BulkDeleteRequest, user: User) -> dict:
        trips, skipped = self._owned_trips(data.tripIds, user)
        now = utcnow()
        for trip in trips:
            trip.deleted_at = now
        self.db.commit()
        logger.info(f"🗑️ Bulk deleted {len(trips)} trips for {user.id}")
        return {
            "success": True,
            "deletedCount": len(trips),
            "skippedTripIds": skipped,
            "message": f"{len(trips)} trip(s) deleted",
        }

    def bulk_tag(self, data: BulkTagRequest, user: User) -> dict:
        """Add tags to every trip the caller can edit; existing tag names are skipped"""
        trips = (
            self.db.query(Trip)
            .filter(Trip.id.in_(data.tripIds), Trip.deleted_at.is_(None))
            .all()
        )
        editable = [t for t in trips if get_permission_context(self.db, user, t).can_edit()]
        editable_ids = {t.id for t in editable}
        skipped = [trip_id for trip_id in data.tripIds if trip_id not in editable_ids]

        tagged = 0
        try:
            for trip in editable:
                existing = {tag.name for tag in trip.tags}
                for name in data.tagNames:
                    if name in existing:
                        continue
                    color = data.tagColor or random_tag_color()
                    self.db.add(Tag(trip_id=trip.id, name=name, color=color))
                    tagged += 1
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"🏷️ Bulk tagged {len(editable)} trips ({tagged} tags) for {user.id}")
        return {
            "success": True,
            "taggedCount": len(editable),
            "tagsCreated": tagged,
            "skippedTripIds": skipped,
            "message": f"Tags added to {len(editable)} trip(s)",
        }
