from datetime import datetime

from wanderplan.domain.guest.service import event_start
from wanderplan.models import Event, Expense, Tag, Trip


def _guest_trip(**overrides):
    trip = {
        "id": "guest-trip-1",
        "name": "Road trip",
        "startDate": "2030-07-01T00:00:00Z",
        "endDate": "2030-07-05T00:00:00Z",
        "destinations": ["Denver", "Moab"],
        "tags": ["roadtrip"],
        "events": [
            {"id": "e1", "day": 1, "title": "Pick up car", "startTime": "09:30", "category": "transport"},
            {"id": "e2", "day": 3, "title": "Arches", "category": "activity", "estimatedCost": 30},
        ],
        "expenses": [{"description": "Fuel", "amount": 80, "category": "transport"}],
    }
    trip.update(overrides)
    return trip


def test_event_start_offsets_by_day():
    start = datetime(2030, 7, 1)

    assert event_start(start, 1, "09:30") == datetime(2030, 7, 1, 9, 30)
    assert event_start(start, 3, None) == datetime(2030, 7, 3, 0, 0)


def test_migrate_imports_trip_with_events_and_expenses(client, db, owner, auth_headers):
    response = client.post("/api/guest/migrate", json={"trips": [_guest_trip()]}, headers=auth_headers(owner))

    assert response.status_code == 200
    result = response.json()
    assert result["success"] is True
    assert result["migratedCount"] == 1
    assert result["failedCount"] == 0
    new_id = result["tripIdMap"]["guest-trip-1"]

    trip = db.get(Trip, new_id)
    assert trip.created_by == owner.id
    assert trip.destinations == ["Denver", "Moab"]
    assert [t.name for t in db.query(Tag).filter(Tag.trip_id == new_id)] == ["roadtrip"]
    events = db.query(Event).filter(Event.trip_id == new_id).order_by(Event.start_date_time).all()
    assert [e.type for e in events] == ["TRANSPORTATION", "ACTIVITY"]
    assert events[0].start_date_time == datetime(2030, 7, 1, 9, 30)
    expense = db.query(Expense).filter(Expense.trip_id == new_id).one()
    assert expense.category == "TRANSPORTATION"
    assert expense.paid_by == owner.id


def test_one_bad_trip_does_not_block_the_others(client, db, owner, auth_headers):
    bad = _guest_trip(id="guest-trip-2", name="Broken", startDate=None)

    result = client.post(
        "/api/guest/migrate", json={"trips": [_guest_trip(), bad]}, headers=auth_headers(owner)
    ).json()

    assert result["success"] is False
    assert result["migratedCount"] == 1
    assert result["failedCount"] == 1
    assert result["errors"][0].startswith('Failed to migrate "Broken"')
    assert list(result["tripIdMap"]) == ["guest-trip-1"]
    assert db.query(Trip).count() == 1


def test_migrate_requires_login(client):
    response = client.post("/api/guest/migrate", json={"trips": [_guest_trip()]})

    assert response.status_code == 401


def test_unexpected_error_in_one_trip_is_reported_not_raised(client, db, owner, auth_headers):
    edge = _guest_trip(
        id="guest-trip-2",
        name="Edge of time",
        startDate="9999-12-31T00:00:00Z",
        endDate="9999-12-31T00:00:00Z",
        events=[{"id": "e9", "day": 2, "title": "Tomorrow never comes"}],
        expenses=[],
    )

    response = client.post(
        "/api/guest/migrate", json={"trips": [_guest_trip(), edge]}, headers=auth_headers(owner)
    )

    assert response.status_code == 200
    result = response.json()
    assert result["success"] is False
    assert result["migratedCount"] == 1
    assert result["failedCount"] == 1
    assert result["errors"][0].startswith('Failed to migrate "Edge of time"')
    assert list(result["tripIdMap"]) == ["guest-trip-1"]
    assert [t.name for t in db.query(Trip)] == ["Road trip"]
