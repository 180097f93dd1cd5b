from datetime import datetime, timedelta

from wanderplan.models import Budget, Trip, TripShareToken, utcnow


def _share_url(trip):
    return f"/api/trips/{trip.id}/share"


def test_create_link_defaults_to_thirty_days(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    response = client.post(_share_url(trip), headers=auth_headers(owner))

    assert response.status_code == 201
    link = response.json()["data"]
    assert link["permissions"] == "view_only"
    assert link["shareUrl"].endswith(f"/trips/share/{link['token']}")
    expires = datetime.fromisoformat(link["expiresAt"])
    assert timedelta(days=29, hours=23) < expires - utcnow() <= timedelta(days=30)


def test_expiry_is_capped_at_a_year(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    ok = client.post(_share_url(trip), json={"expiresIn": 365}, headers=auth_headers(owner))
    too_long = client.post(_share_url(trip), json={"expiresIn": 366}, headers=auth_headers(owner))

    assert ok.status_code == 201
    assert too_long.status_code == 400
    assert too_long.json()["error"]["code"] == "VALIDATION_ERROR"


def test_only_owner_or_admin_manage_links(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    editor = make_user("editor@example.com")
    admin = make_user("admin@example.com")
    add_collaborator(trip, editor, role="EDITOR")
    add_collaborator(trip, admin, role="ADMIN")

    assert client.post(_share_url(trip), headers=auth_headers(editor)).status_code == 403
    assert client.get(_share_url(trip), headers=auth_headers(editor)).status_code == 403
    assert client.post(_share_url(trip), headers=auth_headers(admin)).status_code == 201


def test_list_shows_only_active_links(client, db, owner, make_trip, auth_headers):
    trip = make_trip(owner)
    fresh = client.post(_share_url(trip), headers=auth_headers(owner)).json()["data"]
    db.add(
        TripShareToken(
            trip_id=trip.id, created_by=owner.id, expires_at=utcnow() - timedelta(days=1)
        )
    )
    db.commit()

    response = client.get(_share_url(trip), headers=auth_headers(owner))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["count"] == 1
    assert data["tokens"][0]["token"] == fresh["token"]
    assert data["tokens"][0]["createdBy"]["email"] == owner.email


def test_public_view_hides_private_details(client, db, owner, make_trip, make_event, auth_headers):
    trip = make_trip(owner)
    make_event(trip, "Castle", day=2)
    db.add(Budget(trip_id=trip.id, total_budget=800, currency="EUR", category_budgets={"FOOD": 200}))
    db.commit()
    token = client.post(_share_url(trip), headers=auth_headers(owner)).json()["data"]["token"]

    response = client.get(f"/api/trips/share/{token}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == trip.id
    assert data["creator"] == {"id": owner.id, "name": "Olive Owner", "avatarUrl": None}
    assert [e["title"] for e in data["events"]] == ["Castle"]
    assert data["budget"] == {"totalBudget": 800.0, "currency": "EUR", "categoryBudgets": {"FOOD": 200}}
    assert data["stats"]["durationDays"] == 4
    assert data["shareInfo"]["isReadOnly"] is True
    assert "collaborators" not in data
    assert "expenses" not in data
    assert owner.email not in response.text


def test_revoked_link_is_gone(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)
    token = client.post(_share_url(trip), headers=auth_headers(owner)).json()["data"]["token"]
    client.post(_share_url(trip), headers=auth_headers(owner))

    revoked = client.delete(_share_url(trip), headers=auth_headers(owner))
    opened = client.get(f"/api/trips/share/{token}")

    assert revoked.status_code == 200
    assert revoked.json()["data"]["revokedCount"] == 2
    assert opened.status_code == 410
    assert opened.json()["error"]["code"] == "SHARE_LINK_REVOKED"
    assert client.get(_share_url(trip), headers=auth_headers(owner)).json()["data"]["count"] == 0


def test_expired_link_is_gone(client, db, owner, make_trip):
    trip = make_trip(owner)
    share = TripShareToken(trip_id=trip.id, created_by=owner.id, expires_at=utcnow() - timedelta(minutes=1))
    db.add(share)
    db.commit()

    response = client.get(f"/api/trips/share/{share.token}")

    assert response.status_code == 410
    assert response.json()["error"]["code"] == "SHARE_LINK_EXPIRED"


def test_unknown_or_malformed_token(client):
    assert client.get("/api/trips/share/00000000-0000-4000-8000-000000000000").status_code == 404
    assert client.get("/api/trips/share/not-a-token").status_code == 400


def test_link_to_deleted_trip_is_not_found(client, db, owner, make_trip, auth_headers):
    trip = make_trip(owner)
    token = client.post(_share_url(trip), headers=auth_headers(owner)).json()["data"]["token"]
    db.get(Trip, trip.id).deleted_at = utcnow()
    db.commit()

    response = client.get(f"/api/trips/share/{token}")

    assert response.status_code == 404
