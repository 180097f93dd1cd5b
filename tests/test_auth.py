from wanderplan.config import SESSION_COOKIE_NAME
from wanderplan.models import User
from wanderplan.routes.auth import _password_fingerprint
from wanderplan.security_utils import (
    EMAIL_VERIFICATION_SALT,
    PASSWORD_RESET_SALT,
    generate_timed_token,
)

from .conftest import PASSWORD

REGISTRATION = {
    "email": "New.Traveler@Example.com",
    "password": "Wander123!",
    "firstName": "New",
    "lastName": "Traveler",
}


def test_register_creates_user_and_sends_verification(client, db, sent_emails):
    response = client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "new.traveler@example.com"
    assert user["emailVerified"] is False
    assert user["timezone"] == "America/New_York"
    assert db.query(User).count() == 1
    sent_emails.assert_awaited_once()
    assert sent_emails.await_args.kwargs["to"] == "new.traveler@example.com"


def test_register_duplicate_email_conflicts(client):
    client.post("/api/auth/register", json=REGISTRATION)

    response = client.post("/api/auth/register", json=dict(REGISTRATION, email="new.traveler@example.com"))

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_register_rejects_weak_password(client):
    response = client.post("/api/auth/register", json=dict(REGISTRATION, password="password"))

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == "password"


def test_login_returns_token_and_cookie(client, owner):
    response = client.post("/api/auth/login", json={"email": owner.email, "password": PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["id"] == owner.id
    assert SESSION_COOKIE_NAME in response.cookies

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.json()["user"]["email"] == owner.email


def test_wrong_password_is_401(client, owner):
    response = client.post("/api/auth/login", json={"email": owner.email, "password": "Wrong123!"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid email or password"


def test_login_locks_after_five_failures(client, owner):
    failures = [
        client.post("/api/auth/login", json={"email": owner.email, "password": "Wrong123!"}).status_code
        for _ in range(5)
    ]

    locked = client.post("/api/auth/login", json={"email": owner.email, "password": PASSWORD})

    assert failures == [401] * 5
    assert locked.status_code == 429
    assert locked.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"
    assert "Retry-After" in locked.headers


def test_garbage_token_is_401(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})

    assert response.status_code == 401


def test_verify_email(client, db, make_user):
    user = make_user("unverified@example.com")
    user.email_verified = False
    db.commit()
    token = generate_timed_token({"user_id": user.id, "email": user.email}, EMAIL_VERIFICATION_SALT)

    response = client.post("/api/auth/verify-email", json={"token": token})

    assert response.status_code == 200
    assert response.json()["user"]["emailVerified"] is True
    assert client.post("/api/auth/verify-email", json={"token": "tampered"}).status_code == 400


def test_password_reset_request_never_reveals_accounts(client, owner, sent_emails):
    known = client.post("/api/auth/password-reset/request", json={"email": owner.email})
    unknown = client.post("/api/auth/password-reset/request", json={"email": "nobody@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert sent_emails.await_count == 1


def test_password_reset_token_works_once(client, db, owner):
    token = generate_timed_token({"user_id": owner.id, "fp": _password_fingerprint(owner)}, PASSWORD_RESET_SALT)

    first = client.post("/api/auth/password-reset/confirm", json={"token": token, "password": "Brand123!new"})
    second = client.post("/api/auth/password-reset/confirm", json={"token": token, "password": "Other123!new"})
    login = client.post("/api/auth/login", json={"email": owner.email, "password": "Brand123!new"})

    assert first.status_code == 200
    assert second.status_code == 400
    assert login.status_code == 200


def test_profile_update(client, owner, auth_headers):
    response = client.patch(
        "/api/user/profile", json={"firstName": "Olivia", "timezone": "Europe/Lisbon"}, headers=auth_headers(owner)
    )

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["firstName"] == "Olivia"
    assert user["lastName"] == "Owner"
    assert user["timezone"] == "Europe/Lisbon"
