import uuid

import pytest

from wanderplan.models_crm import Lead

LEAD = {"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com", "message": "Tell me more"}


def _content():
    return {"blocks": [{"id": str(uuid.uuid4()), "type": "hero", "data": {"headline": "Iceland 2031"}}]}


@pytest.fixture
def create_page(client, auth_headers):
    def _create_page(user, slug="iceland-2031", published=True):
        response = client.post(
            "/api/landing-pages",
            json={"slug": slug, "title": "Iceland 2031", "content": _content(), "isPublished": published},
            headers=auth_headers(user),
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create_page


def test_lead_is_stored_and_owner_notified(client, db, owner, create_page, sent_emails):
    create_page(owner)

    response = client.post("/api/landing-pages/iceland-2031/leads", json=LEAD)

    assert response.status_code == 201
    assert response.json() == {
        "success": True,
        "message": "Thank you for your interest! We will be in touch soon.",
    }
    lead = db.query(Lead).one()
    assert lead.source == "landing-page:iceland-2031"
    assert lead.status == "NEW"
    assert lead.assigned_to_id == owner.id
    sent_emails.assert_awaited_once()
    assert sent_emails.await_args.kwargs["to"] == owner.email


def test_invalid_lead_is_rejected_without_writing(client, db, owner, create_page):
    create_page(owner)

    response = client.post(
        "/api/landing-pages/iceland-2031/leads",
        json={"firstName": "", "lastName": "Lovelace", "email": "not-an-email"},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Invalid lead data"
    assert {d["field"] for d in error["details"]} >= {"firstName", "email"}
    assert db.query(Lead).count() == 0


def test_malformed_json_body_is_rejected(client, owner, create_page):
    create_page(owner)

    response = client.post(
        "/api/landing-pages/iceland-2031/leads",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400


def test_leads_on_unpublished_page_are_refused(client, db, owner, create_page):
    create_page(owner, published=False)

    response = client.post("/api/landing-pages/iceland-2031/leads", json=LEAD)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_PUBLISHED"
    assert db.query(Lead).count() == 0


def test_unknown_slug_and_bad_slug(client):
    unknown = client.post("/api/landing-pages/no-such-page/leads", json=LEAD)
    bad = client.post("/api/landing-pages/Bad_Slug/leads", json=LEAD)

    assert unknown.status_code == 404
    assert unknown.json()["error"]["code"] == "NOT_FOUND"
    assert bad.status_code == 400


def test_lead_submissions_are_rate_limited(client, owner, create_page):
    create_page(owner)

    statuses = [
        client.post("/api/landing-pages/iceland-2031/leads", json=dict(LEAD, email=f"lead{i}@example.com")).status_code
        for i in range(10)
    ]
    blocked = client.post("/api/landing-pages/iceland-2031/leads", json=LEAD)

    assert statuses == [201] * 10
    assert blocked.status_code == 429
    assert blocked.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"
    assert int(blocked.headers["Retry-After"]) > 0


def test_duplicate_slug_conflicts(client, owner, create_page, auth_headers):
    create_page(owner)

    response = client.post(
        "/api/landing-pages",
        json={"slug": "iceland-2031", "title": "Again", "content": _content()},
        headers=auth_headers(owner),
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "SLUG_ALREADY_EXISTS"


def test_draft_visibility(client, owner, make_user, create_page, auth_headers):
    create_page(owner, published=False)
    stranger = make_user("stranger@example.com")

    anonymous = client.get("/api/landing-pages/iceland-2031")
    other = client.get("/api/landing-pages/iceland-2031", headers=auth_headers(stranger))
    mine = client.get("/api/landing-pages/iceland-2031", headers=auth_headers(owner))
    public = client.get("/api/landing-pages/iceland-2031/public")

    assert anonymous.status_code == 401
    assert other.status_code == 403
    assert mine.status_code == 200
    assert public.status_code == 404


def test_owner_lists_leads(client, owner, create_page, auth_headers):
    create_page(owner)
    client.post("/api/landing-pages/iceland-2031/leads", json=LEAD)

    response = client.get("/api/landing-pages/iceland-2031/leads", headers=auth_headers(owner))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 1
    assert data["leads"][0]["email"] == "ada@example.com"
