from wanderplan.models import Event


def _events_url(trip):
    return f"/api/trips/{trip.id}/events"


def test_create_event_goes_to_the_end_of_the_itinerary(client, owner, make_trip, make_event, auth_headers):
    trip = make_trip(owner)
    make_event(trip, "Castle", order=0)
    make_event(trip, "Tram 28", order=1)

    response = client.post(
        _events_url(trip),
        json={
            "type": "RESTAURANT",
            "title": "Dinner in Alfama",
            "startDateTime": "2030-05-02T20:00:00Z",
            "endDateTime": "2030-05-02T22:00:00Z",
            "location": {"name": "Alfama"},
            "cost": {"amount": 45.5, "currency": "EUR"},
        },
        headers=auth_headers(owner),
    )

    assert response.status_code == 201
    event = response.json()["event"]
    assert event["order"] == 2
    assert event["tripId"] == trip.id
    assert event["cost"] == {"amount": 45.5, "currency": "EUR"}
    assert event["location"]["name"] == "Alfama"


def test_create_event_with_end_before_start_is_rejected(client, db, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    response = client.post(
        _events_url(trip),
        json={
            "type": "ACTIVITY",
            "title": "Backwards",
            "startDateTime": "2030-05-02T20:00:00Z",
            "endDateTime": "2030-05-02T19:00:00Z",
        },
        headers=auth_headers(owner),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert db.query(Event).count() == 0


def test_viewer_cannot_create_event(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    viewer = make_user("viewer@example.com")
    add_collaborator(trip, viewer, role="VIEWER")

    response = client.post(
        _events_url(trip),
        json={"type": "ACTIVITY", "title": "Museum", "startDateTime": "2030-05-02T10:00:00Z"},
        headers=auth_headers(viewer),
    )

    assert response.status_code == 403


def test_patch_event_checks_end_against_stored_start(client, owner, make_trip, make_event, auth_headers):
    trip = make_trip(owner)
    event = make_event(trip, "Castle", day=2)

    bad = client.patch(
        f"{_events_url(trip)}/{event.id}",
        json={"endDateTime": "2030-05-02T09:00:00Z"},
        headers=auth_headers(owner),
    )
    good = client.patch(
        f"{_events_url(trip)}/{event.id}",
        json={"endDateTime": "2030-05-02T12:00:00Z", "notes": "Buy tickets online"},
        headers=auth_headers(owner),
    )

    assert bad.status_code == 400
    assert good.status_code == 200
    assert good.json()["event"]["endDateTime"].startswith("2030-05-02T12:00")
    assert good.json()["event"]["notes"] == "Buy tickets online"
    assert good.json()["event"]["title"] == "Castle"


def test_patch_unknown_event_is_404(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    response = client.patch(
        f"{_events_url(trip)}/00000000-0000-4000-8000-000000000000",
        json={"title": "Ghost"},
        headers=auth_headers(owner),
    )

    assert response.status_code == 404


def test_editor_cannot_delete_but_admin_can(
    client, db, owner, make_user, make_trip, make_event, add_collaborator, auth_headers
):
    trip = make_trip(owner)
    event = make_event(trip, "Castle")
    editor = make_user("editor@example.com")
    admin = make_user("admin@example.com")
    add_collaborator(trip, editor, role="EDITOR")
    add_collaborator(trip, admin, role="ADMIN")

    by_editor = client.delete(f"{_events_url(trip)}/{event.id}", headers=auth_headers(editor))
    by_admin = client.delete(f"{_events_url(trip)}/{event.id}", headers=auth_headers(admin))
    fetched = client.get(f"{_events_url(trip)}/{event.id}", headers=auth_headers(owner))

    assert by_editor.status_code == 403
    assert by_admin.status_code == 200
    assert by_admin.json()["success"] is True
    assert fetched.status_code == 404
    assert db.query(Event).count() == 0


def test_list_events_filters_by_type(client, owner, make_trip, make_event, auth_headers):
    trip = make_trip(owner)
    make_event(trip, "Castle", order=0, day=1)
    make_event(trip, "Belém", order=1, day=2)

    response = client.get(f"{_events_url(trip)}?type=activity&search=cast", headers=auth_headers(owner))

    assert response.status_code == 200
    assert [e["title"] for e in response.json()["events"]] == ["Castle"]
    assert response.json()["count"] == 1
