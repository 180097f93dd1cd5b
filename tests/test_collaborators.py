from wanderplan.models import TripCollaborator


def test_invite_accept_and_edit(client, owner, make_user, make_trip, make_event, auth_headers, sent_emails):
    trip = make_trip(owner)
    friend = make_user("friend@example.com", first_name="Finn")
    event = make_event(trip, "Castle")

    invited = client.post(
        f"/api/trips/{trip.id}/collaborators",
        json={"email": "Friend@Example.com", "role": "editor", "message": "Join us!"},
        headers=auth_headers(owner),
    )

    assert invited.status_code == 201
    collaborator = invited.json()["collaborator"]
    assert collaborator["status"] == "PENDING"
    assert collaborator["role"] == "EDITOR"
    sent_emails.assert_awaited_once()
    assert sent_emails.await_args.kwargs["to"] == "friend@example.com"

    before = client.patch(
        f"/api/trips/{trip.id}/events/{event.id}", json={"title": "Too early"}, headers=auth_headers(friend)
    )
    assert before.status_code == 403

    invitations = client.get("/api/invitations", headers=auth_headers(friend)).json()["invitations"]
    assert [i["trip"]["id"] for i in invitations] == [trip.id]

    accepted = client.post(f"/api/invitations/{invitations[0]['id']}/accept", headers=auth_headers(friend))
    assert accepted.status_code == 200
    assert accepted.json()["invitation"]["status"] == "ACCEPTED"

    after = client.patch(
        f"/api/trips/{trip.id}/events/{event.id}", json={"title": "Castle at dawn"}, headers=auth_headers(friend)
    )
    assert after.status_code == 200
    assert after.json()["event"]["title"] == "Castle at dawn"


def test_invite_unknown_user_is_404(client, owner, make_trip, auth_headers):
    trip = make_trip(owner)

    response = client.post(
        f"/api/trips/{trip.id}/collaborators", json={"email": "ghost@example.com"}, headers=auth_headers(owner)
    )

    assert response.status_code == 404


def test_duplicate_pending_invitation_is_rejected(client, owner, make_user, make_trip, auth_headers):
    trip = make_trip(owner)
    make_user("friend@example.com")
    url = f"/api/trips/{trip.id}/collaborators"

    client.post(url, json={"email": "friend@example.com"}, headers=auth_headers(owner))
    again = client.post(url, json={"email": "friend@example.com"}, headers=auth_headers(owner))

    assert again.status_code == 400


def test_declined_invitation_can_be_resent(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    friend = make_user("friend@example.com")
    add_collaborator(trip, friend, status="DECLINED")

    response = client.post(
        f"/api/trips/{trip.id}/collaborators", json={"email": "friend@example.com"}, headers=auth_headers(owner)
    )

    assert response.status_code == 200
    assert response.json()["collaborator"]["status"] == "PENDING"


def test_editor_cannot_invite(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    editor = make_user("editor@example.com")
    make_user("friend@example.com")
    add_collaborator(trip, editor, role="EDITOR")

    response = client.post(
        f"/api/trips/{trip.id}/collaborators", json={"email": "friend@example.com"}, headers=auth_headers(editor)
    )

    assert response.status_code == 403


def test_only_owner_invites_admins(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    admin = make_user("admin@example.com")
    make_user("friend@example.com")
    add_collaborator(trip, admin, role="ADMIN")

    response = client.post(
        f"/api/trips/{trip.id}/collaborators",
        json={"email": "friend@example.com", "role": "ADMIN"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 403


def test_collaborator_can_leave(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    viewer = make_user("viewer@example.com")
    membership = add_collaborator(trip, viewer)

    response = client.delete(f"/api/trips/{trip.id}/collaborators/{membership.id}", headers=auth_headers(viewer))

    assert response.status_code == 200
    assert response.json()["message"] == "You left the trip"
    assert client.get(f"/api/trips/{trip.id}", headers=auth_headers(viewer)).status_code == 403


def test_owner_changes_collaborator_role(client, db, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    friend = make_user("friend@example.com")
    membership = add_collaborator(trip, friend, role="VIEWER")

    response = client.patch(
        f"/api/trips/{trip.id}/collaborators/{membership.id}", json={"role": "admin"}, headers=auth_headers(owner)
    )

    assert response.status_code == 200
    assert response.json()["collaborator"]["role"] == "ADMIN"
    db.expire_all()
    assert db.get(TripCollaborator, membership.id).role == "ADMIN"


def test_admin_can_change_roles_but_not_grant_admin(
    client, db, owner, make_user, make_trip, add_collaborator, auth_headers
):
    trip = make_trip(owner)
    admin = make_user("admin@example.com")
    viewer = make_user("viewer@example.com")
    add_collaborator(trip, admin, role="ADMIN")
    membership = add_collaborator(trip, viewer, role="VIEWER")
    url = f"/api/trips/{trip.id}/collaborators/{membership.id}"

    promoted = client.patch(url, json={"role": "EDITOR"}, headers=auth_headers(admin))
    escalated = client.patch(url, json={"role": "ADMIN"}, headers=auth_headers(admin))

    assert promoted.status_code == 200
    assert escalated.status_code == 403
    db.expire_all()
    assert db.get(TripCollaborator, membership.id).role == "EDITOR"


def test_editor_cannot_change_roles(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    editor = make_user("editor@example.com")
    viewer = make_user("viewer@example.com")
    add_collaborator(trip, editor, role="EDITOR")
    membership = add_collaborator(trip, viewer, role="VIEWER")

    response = client.patch(
        f"/api/trips/{trip.id}/collaborators/{membership.id}", json={"role": "EDITOR"}, headers=auth_headers(editor)
    )

    assert response.status_code == 403


def test_unknown_role_is_rejected(client, owner, make_user, make_trip, add_collaborator, auth_headers):
    trip = make_trip(owner)
    membership = add_collaborator(trip, make_user("friend@example.com"))

    response = client.patch(
        f"/api/trips/{trip.id}/collaborators/{membership.id}", json={"role": "OWNER"}, headers=auth_headers(owner)
    )

    assert response.status_code == 400
