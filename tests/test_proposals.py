import uuid

import pytest

from wanderplan.models_crm import CrmClient


@pytest.fixture
def crm_client(db, owner):
    record = CrmClient(user_id=owner.id, first_name="Grace", last_name="Hopper", email="grace@example.com")
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def _proposal_body(client_id, **overrides):
    body = {
        "clientId": client_id,
        "title": "Honeymoon in Bali",
        "lineItems": [{"id": str(uuid.uuid4()), "description": "Villa", "quantity": 5, "unitPrice": 200, "total": 1000}],
        "validUntil": "2099-01-01T00:00:00Z",
    }
    body.update(overrides)
    return body


def test_proposal_lifecycle(client, owner, crm_client, auth_headers):
    headers = auth_headers(owner)
    created = client.post("/api/proposals", json=_proposal_body(crm_client.id), headers=headers)

    assert created.status_code == 201
    proposal = created.json()["proposal"]
    assert proposal["status"] == "DRAFT"
    assert proposal["total"] == 1000.0

    sent = client.patch(f"/api/proposals/{proposal['id']}", json={"status": "SENT"}, headers=headers).json()["proposal"]
    accepted = client.patch(f"/api/proposals/{proposal['id']}", json={"status": "ACCEPTED"}, headers=headers).json()["proposal"]
    reopen = client.patch(f"/api/proposals/{proposal['id']}", json={"status": "DRAFT"}, headers=headers)
    delete = client.delete(f"/api/proposals/{proposal['id']}", headers=headers)

    assert sent["sentAt"] is not None
    assert accepted["acceptedAt"] is not None
    assert reopen.status_code == 400
    assert delete.status_code == 409


def test_valid_until_must_be_in_the_future(client, owner, crm_client, auth_headers):
    response = client.post(
        "/api/proposals", json=_proposal_body(crm_client.id, validUntil="2000-01-01T00:00:00Z"), headers=auth_headers(owner)
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Valid until date must be in the future"


def test_draft_proposal_can_be_deleted(client, owner, crm_client, auth_headers):
    headers = auth_headers(owner)
    proposal = client.post("/api/proposals", json=_proposal_body(crm_client.id), headers=headers).json()["proposal"]

    deleted = client.delete(f"/api/proposals/{proposal['id']}", headers=headers)

    assert deleted.status_code == 200
    assert client.get(f"/api/proposals/{proposal['id']}", headers=headers).status_code == 404
