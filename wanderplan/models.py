import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base


def generate_uuid():
    """Generate a UUID string primary key"""
    return str(uuid.uuid4())


def utcnow():
    """Current time as naive UTC (all DateTime columns store naive UTC)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Enum values are stored as plain strings
TRIP_VISIBILITIES = ("PRIVATE", "SHARED", "PUBLIC")
COLLABORATOR_ROLES = ("VIEWER", "EDITOR", "ADMIN")
COLLABORATOR_STATUSES = ("PENDING", "ACCEPTED", "DECLINED")
EVENT_TYPES = ("FLIGHT", "HOTEL", "ACTIVITY", "RESTAURANT", "TRANSPORTATION", "DESTINATION")
EXPENSE_CATEGORIES = (
    "ACCOMMODATION",
    "TRANSPORTATION",
    "FOOD",
    "ACTIVITIES",
    "SHOPPING",
    "OTHER",
)
POLL_STATUSES = ("OPEN", "CLOSED")
SHARE_PERMISSIONS = ("view_only", "comment")


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)  # Always lower-cased
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    password_hash = Column(String(255), nullable=True)
    email_verified = Column(Boolean, default=False, nullable=False)
    email_verified_at = Column(DateTime, nullable=True)
    avatar_url = Column(String(500), nullable=True)
    timezone = Column(String(64), default="America/New_York", nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    trips = relationship("Trip", back_populates="owner", foreign_keys="Trip.created_by")
    collaborations = relationship(
        "TripCollaborator", back_populates="user", foreign_keys="TripCollaborator.user_id"
    )

    @property
    def full_name(self):
        return " ".join(part for part in (self.first_name, self.last_name) if part) or None


class Trip(Base):
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    destinations = Column(JSON, default=list, nullable=False)  # Ordered list of place names
    visibility = Column(String(20), default="PRIVATE", nullable=False)  # PRIVATE, SHARED, PUBLIC
    cover_image_url = Column(String(500), nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)  # Soft delete
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    owner = relationship("User", back_populates="trips", foreign_keys=[created_by])
    collaborators = relationship(
        "TripCollaborator", back_populates="trip", cascade="all, delete-orphan"
    )
    events = relationship("Event", back_populates="trip", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete-orphan")
    tags = relationship(
        "Tag", back_populates="trip", cascade="all, delete-orphan", order_by="Tag.name"
    )
    budget = relationship(
        "Budget", back_populates="trip", uselist=False, cascade="all, delete-orphan"
    )
    polls = relationship("Poll", back_populates="trip", cascade="all, delete-orphan")
    share_tokens = relationship(
        "TripShareToken", back_populates="trip", cascade="all, delete-orphan"
    )


class TripCollaborator(Base):
    """A non-owner user's membership on a trip"""

    __tablename__ = "trip_collaborators"
    __table_args__ = (UniqueConstraint("trip_id", "user_id", name="uq_trip_collaborator"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(20), default="VIEWER", nullable=False)  # VIEWER, EDITOR, ADMIN
    status = Column(String(20), default="PENDING", nullable=False)  # PENDING, ACCEPTED, DECLINED
    invited_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    invited_at = Column(DateTime, default=utcnow)
    joined_at = Column(DateTime, nullable=True)

    # Relationships
    trip = relationship("Trip", back_populates="collaborators")
    user = relationship("User", back_populates="collaborations", foreign_keys=[user_id])
    inviter = relationship("User", foreign_keys=[invited_by])


class Event(Base):
    """Itinerary item; `order` is its position within the trip"""

    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date_time = Column(DateTime, nullable=False)
    end_date_time = Column(DateTime, nullable=True)
    order = Column(Integer, default=0, nullable=False)
    location = Column(JSON, nullable=True)  # {name, address, lat, lon}
    cost = Column(Float, nullable=True)
    currency = Column(String(3), nullable=True)
    notes = Column(Text, nullable=True)
    confirmation_number = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    trip = relationship("Trip", back_populates="events")
    creator = relationship("User", foreign_keys=[created_by])
    expenses = relationship("Expense", back_populates="event")


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=True)
    category = Column(String(30), default="OTHER", nullable=False)
    description = Column(String(500), nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    date = Column(DateTime, nullable=False)
    paid_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    receipt_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    event = relationship("Event", back_populates="expenses")
    payer = relationship("User", foreign_keys=[paid_by])
    splits = relationship("ExpenseSplit", back_populates="expense", cascade="all, delete-orphan")


class ExpenseSplit(Base):
    """One user's share of an expense"""

    __tablename__ = "expense_splits"
    __table_args__ = (UniqueConstraint("expense_id", "user_id", name="uq_expense_split"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    expense_id = Column(String(36), ForeignKey("expenses.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    amount = Column(Float, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    expense = relationship("Expense", back_populates="splits")
    user = relationship("User")


class Budget(Base):
    __tablename__ = "budgets"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id"), unique=True, nullable=False)
    total_budget = Column(Float, nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    category_budgets = Column(JSON, nullable=True)  # {"FOOD": 500.0, ...}
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    trip = relationship("Trip", back_populates="budget")


class Tag(Base):
    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("trip_id", "name", name="uq_tag_trip_name"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    color = Column(String(7), nullable=True)  # e.g., #RRGGBB
    created_at = Column(DateTime, default=utcnow)

    trip = relationship("Trip", back_populates="tags")


class TripShareToken(Base):
    """Public read-only link to a trip"""

    __tablename__ = "trip_share_tokens"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    token = Column(String(36), unique=True, nullable=False, index=True, default=generate_uuid)
    permissions = Column(String(20), default="view_only", nullable=False)  # view_only, comment
    is_active = Column(Boolean, default=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    trip = relationship("Trip", back_populates="share_tokens")
    creator = relationship("User", foreign_keys=[created_by])


class Poll(Base):
    __tablename__ = "polls"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    question = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    allow_multiple_votes = Column(Boolean, default=False, nullable=False)
    status = Column(String(20), default="OPEN", nullable=False)  # OPEN, CLOSED
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    trip = relationship("Trip", back_populates="polls")
    creator = relationship("User", foreign_keys=[created_by])
    options = relationship(
        "PollOption",
        back_populates="poll",
        cascade="all, delete-orphan",
        order_by="PollOption.order",
    )
    votes = relationship("PollVote", back_populates="poll", cascade="all, delete-orphan")


class PollOption(Base):
    __tablename__ = "poll_options"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    poll_id = Column(String(36), ForeignKey("polls.id"), nullable=False, index=True)
    text = Column(String(200), nullable=False)
    order = Column(Integer, default=0, nullable=False)

    poll = relationship("Poll", back_populates="options")
    votes = relationship("PollVote", back_populates="option", cascade="all, delete-orphan")


class PollVote(Base):
    __tablename__ = "poll_votes"
    __table_args__ = (UniqueConstraint("option_id", "user_id", name="uq_poll_vote"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    poll_id = Column(String(36), ForeignKey("polls.id"), nullable=False, index=True)
    option_id = Column(String(36), ForeignKey("poll_options.id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    poll = relationship("Poll", back_populates="votes")
    option = relationship("PollOption", back_populates="votes")
