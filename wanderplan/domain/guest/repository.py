"""Guest migration repository - writes one guest trip and its children atomically"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Event, Expense, ExpenseSplit, Trip
from ..trips.repository import TripRepository


class GuestMigrationRepository:
    """Repository for guest trip imports"""

    @staticmethod
    def import_trip(
        db: Session,
        trip_fields: dict,
        tag_names: list[str],
        events: list[tuple[str, dict]],
        expenses: list[tuple[Optional[str], dict]],
    ) -> Trip:
        """
        Insert a trip with its tags, events and expenses in one transaction.

        `events` pairs each guest event id with Event columns; `expenses` pairs
        the guest event id it referenced (or None) with Expense columns. The
        payer receives a single split covering the full amount.
        """
        try:
            trip = Trip(**trip_fields)
            db.add(trip)
            db.flush()
            TripRepository.add_tags(db, trip.id, tag_names)

            event_ids: dict[str, str] = {}
            for guest_event_id, fields in events:
                event = Event(trip_id=trip.id, **fields)
                db.add(event)
                db.flush()
                event_ids[guest_event_id] = event.id

            for guest_event_id, fields in expenses:
                expense = Expense(
                    trip_id=trip.id, event_id=event_ids.get(guest_event_id), **fields
                )
                db.add(expense)
                db.flush()
                db.add(
                    ExpenseSplit(expense_id=expense.id, user_id=fields["paid_by"], amount=fields["amount"])
                )

            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(trip)
        return trip
