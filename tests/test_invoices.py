import uuid

import pytest

from wanderplan.models_crm import CrmClient, Invoice


@pytest.fixture
def crm_client(db, owner):
    record = CrmClient(user_id=owner.id, first_name="Grace", last_name="Hopper", email="grace@example.com")
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def _invoice_body(client_id, **overrides):
    body = {
        "clientId": client_id,
        "title": "Patagonia trek",
        "lineItems": [
            {"id": str(uuid.uuid4()), "description": "Guide", "quantity": 2, "unitPrice": 150, "total": 300},
            {"id": str(uuid.uuid4()), "description": "Permits", "quantity": 1, "unitPrice": 45.5, "total": 45.5},
        ],
        "tax": 20,
        "discount": 5.5,
        "issueDate": "2030-01-01T00:00:00Z",
        "dueDate": "2030-01-31T00:00:00Z",
    }
    body.update(overrides)
    return body


def test_create_invoice_computes_totals_and_number(client, owner, crm_client, auth_headers):
    response = client.post("/api/invoices", json=_invoice_body(crm_client.id), headers=auth_headers(owner))

    assert response.status_code == 201
    invoice = response.json()["invoice"]
    assert invoice["subtotal"] == 345.5
    assert invoice["total"] == 360.0
    assert invoice["status"] == "DRAFT"
    assert invoice["invoiceNumber"].startswith("INV-")
    assert invoice["client"]["email"] == "grace@example.com"


def test_line_item_mismatch_is_a_validation_error(client, owner, crm_client, auth_headers):
    body = _invoice_body(crm_client.id)
    body["lineItems"][0]["total"] = 250

    response = client.post("/api/invoices", json=body, headers=auth_headers(owner))

    assert response.status_code == 400
    assert "quantity × unitPrice" in response.json()["error"]["message"]


def test_due_date_before_issue_date(client, owner, crm_client, auth_headers):
    body = _invoice_body(crm_client.id, dueDate="2029-12-01T00:00:00Z")

    response = client.post("/api/invoices", json=body, headers=auth_headers(owner))

    assert response.status_code == 400
    assert "Due date must be on or after issue date" in response.json()["error"]["message"]


def test_cannot_invoice_someone_elses_client(client, make_user, crm_client, auth_headers):
    other = make_user("other@example.com")

    response = client.post("/api/invoices", json=_invoice_body(crm_client.id), headers=auth_headers(other))

    assert response.status_code == 404


def test_sent_invoice_past_due_is_overdue_and_can_be_paid(client, db, owner, crm_client, auth_headers):
    headers = auth_headers(owner)
    created = client.post(
        "/api/invoices",
        json=_invoice_body(crm_client.id, issueDate="2020-01-01T00:00:00Z", dueDate="2020-01-31T00:00:00Z"),
        headers=headers,
    ).json()["invoice"]

    draft_paid = client.post(f"/api/invoices/{created['id']}/mark-paid", headers=headers)
    sent = client.patch(f"/api/invoices/{created['id']}", json={"status": "SENT"}, headers=headers)
    overdue = client.get("/api/invoices?status=OVERDUE", headers=headers)
    paid = client.post(f"/api/invoices/{created['id']}/mark-paid", headers=headers)
    delete_paid = client.delete(f"/api/invoices/{created['id']}", headers=headers)

    assert draft_paid.status_code == 400
    assert sent.json()["invoice"]["status"] == "OVERDUE"
    assert [i["id"] for i in overdue.json()["invoices"]] == [created["id"]]
    assert paid.status_code == 200
    assert paid.json()["invoice"]["status"] == "PAID"
    assert paid.json()["invoice"]["paidAt"] is not None
    assert delete_paid.status_code == 409


def test_draft_invoice_delete_is_soft(client, db, owner, crm_client, auth_headers):
    headers = auth_headers(owner)
    created = client.post("/api/invoices", json=_invoice_body(crm_client.id), headers=headers).json()["invoice"]

    response = client.delete(f"/api/invoices/{created['id']}", headers=headers)

    assert response.status_code == 200
    assert client.get(f"/api/invoices/{created['id']}", headers=headers).status_code == 404
    db.expire_all()
    assert db.get(Invoice, created["id"]).deleted_at is not None
