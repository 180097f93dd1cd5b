import os

# Configure the app for an isolated in-memory database before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.pop("RESEND_API_KEY", None)

from datetime import datetime  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from wanderplan import email_service  # noqa: E402
from wanderplan.auth import create_session_token  # noqa: E402
from wanderplan.database import Base, SessionLocal, engine  # noqa: E402
from wanderplan.main import app  # noqa: E402
from wanderplan.models import Event, Trip, TripCollaborator, User  # noqa: E402
from wanderplan.rate_limiter import reset_rate_limit  # noqa: E402
from wanderplan.security_utils import hash_password_bcrypt  # noqa: E402

PASSWORD = "Secret123!"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    reset_rate_limit()
    yield
    reset_rate_limit()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Every outgoing email is captured instead of hitting Resend"""
    mock = AsyncMock(return_value={"id": "test-email"})
    monkeypatch.setattr(email_service, "send_email", mock)
    return mock


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make_user(email="owner@example.com", first_name="Olive", last_name="Owner"):
        user = User(
            email=email,
            password_hash=hash_password_bcrypt(PASSWORD),
            first_name=first_name,
            last_name=last_name,
            email_verified=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_session_token(user)}"}

    return _auth_headers


@pytest.fixture
def owner(make_user):
    return make_user()


@pytest.fixture
def make_trip(db):
    def _make_trip(owner, name="Lisbon Long Weekend", **fields):
        trip = Trip(
            name=name,
            created_by=owner.id,
            start_date=fields.pop("start_date", datetime(2030, 5, 1)),
            end_date=fields.pop("end_date", datetime(2030, 5, 4)),
            destinations=fields.pop("destinations", ["Lisbon"]),
            visibility=fields.pop("visibility", "PRIVATE"),
            **fields,
        )
        db.add(trip)
        db.commit()
        db.refresh(trip)
        return trip

    return _make_trip


@pytest.fixture
def add_collaborator(db):
    def _add_collaborator(trip, user, role="VIEWER", status="ACCEPTED"):
        collaborator = TripCollaborator(
            trip_id=trip.id,
            user_id=user.id,
            role=role,
            status=status,
            invited_by=trip.created_by,
        )
        db.add(collaborator)
        db.commit()
        db.refresh(collaborator)
        return collaborator

    return _add_collaborator


@pytest.fixture
def make_event(db):
    def _make_event(trip, title="Event", order=0, day=1):
        event = Event(
            trip_id=trip.id,
            created_by=trip.created_by,
            type="ACTIVITY",
            title=title,
            start_date_time=datetime(2030, 5, day, 10, 0),
            order=order,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event
