import uuid


def test_create_list_and_delete_tag(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)
    headers = auth_headers(owner)

    created = client.post("/api/tags", json={"tripId": trip.id, "name": " beach ", "color": "#FF5733"}, headers=headers)

    assert created.status_code == 201
    tag = created.json()["data"]
    assert tag["name"] == "beach"
    assert tag["tripName"] == trip.name

    listed = client.get("/api/tags", headers=headers).json()["data"]
    assert listed["total"] == 1
    assert listed["aggregated"][0]["name"] == "beach"
    assert listed["aggregated"][0]["count"] == 1

    deleted = client.delete(f"/api/tags/{tag['id']}", headers=headers)
    assert deleted.status_code == 200
    assert deleted.json()["data"] == {"id": tag["id"], "name": "beach"}
    assert client.get("/api/tags", headers=headers).json()["data"]["total"] == 0


def test_aggregation_merges_same_name_across_trips(client, owner, make_trip, auth_headers):
    first, second = make_trip(owner, name="One"), make_trip(owner, name="Two")
    headers = auth_headers(owner)
    client.post("/api/tags", json={"tripId": first.id, "name": "food"}, headers=headers)
    client.post("/api/tags", json={"tripId": second.id, "name": "food", "color": "#00AA00"}, headers=headers)

    aggregated = client.get("/api/tags", headers=headers).json()["data"]["aggregated"]

    assert len(aggregated) == 1
    assert aggregated[0]["count"] == 2
    assert aggregated[0]["color"] is not None
    assert set(aggregated[0]["tripIds"]) == {first.id, second.id}


def test_duplicate_tag_on_trip_conflicts(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)
    headers = auth_headers(owner)
    client.post("/api/tags", json={"tripId": trip.id, "name": "hiking"}, headers=headers)

    response = client.post("/api/tags", json={"tripId": trip.id, "name": "hiking"}, headers=headers)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_invalid_tag_names_are_rejected(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    response = client.post("/api/tags", json={"tripId": trip.id, "name": "no/slashes!"}, headers=auth_headers(owner))

    assert response.status_code == 400


def test_viewer_cannot_add_tags(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    viewer = make_user("viewer@example.com")
    add_collaborator(trip, viewer, role="VIEWER")

    response = client.post("/api/tags", json={"tripId": trip.id, "name": "mine"}, headers=auth_headers(viewer))

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "You do not have permission to add tags to this trip"


def test_delete_with_bad_or_unknown_id(client, owner, auth_headers):
    bad = client.delete("/api/tags/not-a-uuid", headers=auth_headers(owner))
    unknown = client.delete(f"/api/tags/{uuid.uuid4()}", headers=auth_headers(owner))

    assert bad.status_code == 400
    assert bad.json()["error"]["message"] == "Invalid tag ID format"
    assert unknown.status_code == 404
