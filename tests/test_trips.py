from wanderplan.models import Trip


def test_create_then_get_returns_the_same_trip(client, owner, auth_headers):
    payload = {
        "name": "  Kyoto in Autumn ",
        "description": "Temples and maple leaves",
        "startDate": "2030-11-01T00:00:00Z",
        "endDate": "2030-11-08T00:00:00Z",
        "destinations": ["Kyoto", "Nara"],
        "tags": ["culture", "food", "culture"],
        "visibility": "shared",
    }

    created = client.post("/api/trips", json=payload, headers=auth_headers(owner))

    assert created.status_code == 201
    trip = created.json()["trip"]
    assert trip["name"] == "Kyoto in Autumn"
    assert trip["visibility"] == "SHARED"
    assert trip["destinations"] == ["Kyoto", "Nara"]
    assert sorted(t["name"] for t in trip["tags"]) == ["culture", "food"]

    fetched = client.get(f"/api/trips/{trip['id']}", headers=auth_headers(owner))

    assert fetched.status_code == 200
    detail = fetched.json()["trip"]
    assert detail["id"] == trip["id"]
    assert detail["name"] == "Kyoto in Autumn"
    assert detail["userRole"] == "OWNER"
    assert detail["stats"]["durationDays"] == 8


def test_end_date_before_start_date_is_rejected(client, owner, auth_headers):
    response = client.post(
        "/api/trips",
        json={"name": "Backwards", "startDate": "2030-05-10T00:00:00Z", "endDate": "2030-05-01T00:00:00Z"},
        headers=auth_headers(owner),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_patch_with_same_body_twice_is_stable(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)
    body = {"name": "Lisbon and Sintra", "destinations": ["Lisbon", "Sintra"], "tags": ["beach"]}

    first = client.patch(f"/api/trips/{trip.id}", json=body, headers=auth_headers(owner))
    second = client.patch(f"/api/trips/{trip.id}", json=body, headers=auth_headers(owner))

    assert first.status_code == second.status_code == 200
    a, b = first.json()["trip"], second.json()["trip"]
    for key in ("name", "destinations", "visibility", "startDate", "endDate"):
        assert a[key] == b[key]
    assert [t["name"] for t in a["tags"]] == [t["name"] for t in b["tags"]] == ["beach"]


def test_viewer_can_read_but_not_update(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    viewer = make_user("viewer@example.com")
    add_collaborator(trip, viewer, role="VIEWER")

    read = client.get(f"/api/trips/{trip.id}", headers=auth_headers(viewer))
    write = client.patch(f"/api/trips/{trip.id}", json={"name": "Mine now"}, headers=auth_headers(viewer))

    assert read.status_code == 200
    assert read.json()["trip"]["userRole"] == "VIEWER"
    assert write.status_code == 403


def test_stranger_cannot_see_private_trip(client, owner, make_user, make_trip, auth_headers):
    trip = make_trip(owner)
    stranger = make_user("stranger@example.com")

    response = client.get(f"/api/trips/{trip.id}", headers=auth_headers(stranger))

    assert response.status_code == 403


def test_list_only_contains_accessible_trips(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    mine = make_trip(owner, name="Mine")
    other = make_user("other@example.com")
    shared = make_trip(other, name="Shared with me")
    make_trip(other, name="Not mine")
    add_collaborator(shared, owner, role="EDITOR")

    response = client.get("/api/trips", headers=auth_headers(owner))

    assert response.status_code == 200
    body = response.json()
    names = {t["name"]: t["userRole"] for t in body["trips"]}
    assert names == {"Mine": "OWNER", "Shared with me": "EDITOR"}
    assert body["pagination"]["total"] == 2
    assert mine.id in {t["id"] for t in body["trips"]}


def test_page_size_above_maximum_is_rejected(client, owner, auth_headers):
    response = client.get("/api/trips?limit=101", headers=auth_headers(owner))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_only_owner_can_delete_and_delete_is_soft(client, db, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    admin = make_user("admin@example.com")
    add_collaborator(trip, admin, role="ADMIN")

    forbidden = client.delete(f"/api/trips/{trip.id}", headers=auth_headers(admin))
    deleted = client.delete(f"/api/trips/{trip.id}", headers=auth_headers(owner))
    again = client.delete(f"/api/trips/{trip.id}", headers=auth_headers(owner))
    after = client.get(f"/api/trips/{trip.id}", headers=auth_headers(owner))

    assert forbidden.status_code == 403
    assert deleted.status_code == 200
    assert again.status_code == 410
    assert after.status_code == 404
    db.expire_all()
    assert db.get(Trip, trip.id).deleted_at is not None


def test_patch_rejects_blank_name(client, db, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    response = client.patch(f"/api/trips/{trip.id}", json={"name": "   "}, headers=auth_headers(owner))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    db.expire_all()
    assert db.get(Trip, trip.id).name == "Lisbon Long Weekend"


def test_patch_trims_name(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    response = client.patch(f"/api/trips/{trip.id}", json={"name": "  Porto  "}, headers=auth_headers(owner))

    assert response.status_code == 200
    assert response.json()["trip"]["name"] == "Porto"


def test_archive_and_unarchive(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    archived = client.post(f"/api/trips/{trip.id}/archive", headers=auth_headers(owner))
    active = client.get("/api/trips", headers=auth_headers(owner)).json()["trips"]
    in_archive = client.get("/api/trips?status=archived", headers=auth_headers(owner)).json()["trips"]

    assert archived.status_code == 200
    assert archived.json()["trip"]["isArchived"] is True
    assert active == []
    assert [t["id"] for t in in_archive] == [trip.id]

    restored = client.delete(f"/api/trips/{trip.id}/archive", headers=auth_headers(owner))

    assert restored.status_code == 200
    assert restored.json()["trip"]["isArchived"] is False
    assert [t["id"] for t in client.get("/api/trips", headers=auth_headers(owner)).json()["trips"]] == [trip.id]


def test_editor_cannot_archive(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    editor = make_user("editor@example.com")
    add_collaborator(trip, editor, role="EDITOR")

    response = client.post(f"/api/trips/{trip.id}/archive", headers=auth_headers(editor))

    assert response.status_code == 403


def test_duplicate_copies_events_and_shifts_dates(
    client, db, owner, make_user, make_trip, make_event, add_collaborator, auth_headers
):
    trip = make_trip(owner, visibility="SHARED")
    make_event(trip, "Castle", order=0, day=2)
    viewer = make_user("viewer@example.com")
    add_collaborator(trip, viewer, role="VIEWER")

    response = client.post(
        f"/api/trips/{trip.id}/duplicate",
        json={"startDate": "2031-01-01T00:00:00Z"},
        headers=auth_headers(viewer),
    )

    assert response.status_code == 201
    copy = response.json()["trip"]
    assert copy["id"] != trip.id
    assert copy["name"] == "Lisbon Long Weekend (Copy)"
    assert copy["visibility"] == "PRIVATE"
    assert copy["createdBy"] == viewer.id
    assert copy["startDate"].startswith("2031-01-01")
    assert copy["endDate"].startswith("2031-01-04")

    events = client.get(f"/api/trips/{copy['id']}/events", headers=auth_headers(viewer)).json()["events"]
    assert [e["title"] for e in events] == ["Castle"]
    assert events[0]["startDateTime"].startswith("2031-01-02T10:00")


def test_duplicate_with_custom_name(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    response = client.post(
        f"/api/trips/{trip.id}/duplicate", json={"name": "Lisbon again"}, headers=auth_headers(owner)
    )

    assert response.status_code == 201
    assert response.json()["trip"]["name"] == "Lisbon again"


def test_bulk_archive_reports_skipped_trips(client, owner, make_user, make_trip, auth_headers):
    mine = make_trip(owner, name="Mine")
    other = make_trip(make_user("other@example.com"), name="Theirs")

    response = client.post(
        "/api/trips/bulk/archive", json={"tripIds": [mine.id, other.id]}, headers=auth_headers(owner)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["updatedCount"] == 1
    assert body["skippedTripIds"] == [other.id]


def test_bulk_delete_soft_deletes_owned_trips(client, db, owner, make_user, make_trip, auth_headers):
    first = make_trip(owner, name="First")
    second = make_trip(owner, name="Second")
    other = make_trip(make_user("other@example.com"), name="Theirs")

    response = client.post(
        "/api/trips/bulk/delete",
        json={"tripIds": [first.id, second.id, other.id]},
        headers=auth_headers(owner),
    )

    assert response.status_code == 200
    assert response.json()["deletedCount"] == 2
    assert response.json()["skippedTripIds"] == [other.id]
    db.expire_all()
    assert db.get(Trip, first.id).deleted_at is not None
    assert db.get(Trip, other.id).deleted_at is None


def test_bulk_tag_skips_trips_the_caller_cannot_edit(
    client, owner, make_user, make_trip, add_collaborator, auth_headers
):
    mine = make_trip(owner, name="Mine")
    friend = make_user("friend@example.com")
    read_only = make_trip(friend, name="Read only")
    add_collaborator(read_only, owner, role="VIEWER")

    response = client.post(
        "/api/trips/bulk/tag",
        json={"tripIds": [mine.id, read_only.id], "tagNames": ["summer"], "tagColor": "#FFAA00"},
        headers=auth_headers(owner),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["taggedCount"] == 1
    assert body["tagsCreated"] == 1
    assert body["skippedTripIds"] == [read_only.id]
    tags = client.get(f"/api/trips/{mine.id}", headers=auth_headers(owner)).json()["trip"]["tags"]
    assert [(t["name"], t["color"]) for t in tags] == [("summer", "#FFAA00")]
