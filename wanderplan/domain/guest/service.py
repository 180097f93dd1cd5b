"""Guest migration service - import trips built before sign-up"""

import logging
from datetime import datetime, time, timedelta
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import format_validation_errors
from ...models import User
from .repository import GuestMigrationRepository
from .schemas import GuestEvent, GuestTrip, MigrationResult

logger = logging.getLogger(__name__)


def event_start(trip_start: datetime, day: int, hhmm: Optional[str]) -> datetime:
    """Trip start date + (day - 1) days at HH:MM (midnight when no time was set)"""
    clock = time(0, 0)
    if hhmm:
        hours, minutes = hhmm.split(":")
        clock = time(int(hours), int(minutes))
    return datetime.combine(trip_start.date() + timedelta(days=day - 1), clock)


class GuestMigrationService:
    """Service layer for guest trip migration"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = GuestMigrationRepository()

    def _event_fields(self, trip: GuestTrip, event: GuestEvent, currency: str, user: User) -> dict:
        start = event_start(trip.startDate, event.day, event.startTime)
        end = event_start(trip.startDate, event.day, event.endTime) if event.endTime else None
        if end is not None and end < start:
            end = None
        return {
            "created_by": user.id,
            "type": event.event_type,
            "title": event.title.strip(),
            "description": event.description,
            "start_date_time": start,
            "end_date_time": end,
            "order": event.order,
            "location": {"name": event.location} if event.location else None,
            "cost": event.estimatedCost,
            "currency": currency if event.estimatedCost is not None else None,
        }

    def migrate_trip(self, guest_trip: GuestTrip, user: User):
        currency = guest_trip.expenses[0].currency if guest_trip.expenses else "USD"
        events = [
            (event.id, self._event_fields(guest_trip, event, currency, user))
            for event in guest_trip.events
        ]
        expenses = [
            (
                expense.eventId,
                {
                    "category": expense.expense_category,
                    "description": expense.description.strip(),
                    "amount": round(expense.amount, 2),
                    "currency": expense.currency,
                    "date": expense.date or guest_trip.startDate,
                    "paid_by": user.id,
                },
            )
            for expense in guest_trip.expenses
        ]
        return self.repo.import_trip(
            self.db,
            {
                "name": guest_trip.name.strip(),
                "description": guest_trip.description,
                "start_date": guest_trip.startDate,
                "end_date": guest_trip.endDate,
                "destinations": guest_trip.destinations,
                "visibility": guest_trip.visibility.upper(),
                "created_by": user.id,
            },
            guest_trip.tags,
            events,
            expenses,
        )

    def migrate(self, raw_trips: list[dict[str, Any]], user: User) -> MigrationResult:
        """
        Import every guest trip independently.

        A trip that fails validation or persistence is reported in `errors`
        and leaves nothing behind; the others are still imported.
        """
        migrated = 0
        errors: list[str] = []
        trip_id_map: dict[str, str] = {}

        for raw in raw_trips:
            name = raw.get("name") if isinstance(raw, dict) else None
            label = name or "Untitled trip"
            try:
                guest_trip = GuestTrip.model_validate(raw)
            except ValidationError as e:
                reasons = "; ".join(
                    f"{d['field']}: {d['message']}" if d["field"] else d["message"]
                    for d in format_validation_errors(e.errors())
                )
                errors.append(f'Failed to migrate "{label}": {reasons}')
                continue

            try:
                trip = self.migrate_trip(guest_trip, user)
            except SQLAlchemyError as e:
                logger.error(f"❌ Guest trip {guest_trip.id} failed to migrate for {user.id}: {e}")
                errors.append(f'Failed to migrate "{label}": could not save trip')
                continue
            except Exception as e:
                self.db.rollback()
                logger.error(f"❌ Guest trip {guest_trip.id} failed to migrate for {user.id}: {e}")
                errors.append(f'Failed to migrate "{label}": {e}')
                continue

            trip_id_map[guest_trip.id] = trip.id
            migrated += 1
            logger.info(f"✅ Migrated guest trip {guest_trip.id} -> {trip.id} for user {user.id}")

        failed = len(raw_trips) - migrated
        if failed:
            logger.warning(f"⚠️ {failed} guest trips failed to migrate for user {user.id}")

        return MigrationResult(
            success=failed == 0,
            migratedCount=migrated,
            failedCount=failed,
            errors=errors,
            tripIdMap=trip_id_map,
        )
