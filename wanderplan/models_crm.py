"""
CRM Models - clients, invoices, proposals, landing pages and captured leads
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base
from .models import generate_uuid, utcnow

CLIENT_STATUSES = ("LEAD", "ACTIVE", "INACTIVE")
INVOICE_STATUSES = ("DRAFT", "SENT", "PAID")
PROPOSAL_STATUSES = ("DRAFT", "SENT", "ACCEPTED", "REJECTED")
LEAD_STATUSES = ("NEW", "CONTACTED", "QUALIFIED", "CONVERTED", "LOST")


class CrmClient(Base):
    """A travel agent's customer"""

    __tablename__ = "crm_clients"
    __table_args__ = (UniqueConstraint("user_id", "email", name="uq_crm_client_email"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)  # Agent
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    status = Column(String(20), default="LEAD", nullable=False)  # LEAD, ACTIVE, INACTIVE
    source = Column(String(100), nullable=True)
    tags = Column(JSON, default=list, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    invoices = relationship("Invoice", back_populates="client")
    proposals = relationship("Proposal", back_populates="client")


class Invoice(Base):
    """Invoice model for client billing"""

    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    invoice_number = Column(String(50), unique=True, nullable=False, index=True)  # INV-YYYYMMDD-NNNN
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("crm_clients.id"), nullable=False)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    line_items = Column(JSON, nullable=False)  # [{id, description, quantity, unitPrice, total}]

    # Pricing
    subtotal = Column(Float, nullable=False)
    tax = Column(Float, default=0, nullable=False)
    discount = Column(Float, default=0, nullable=False)
    total = Column(Float, nullable=False)
    currency = Column(String(3), default="USD", nullable=False)

    # Status - OVERDUE is never stored, it is derived from due_date at read time
    status = Column(String(20), default="DRAFT", nullable=False)  # DRAFT, SENT, PAID

    # Dates
    issue_date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=False)
    paid_at = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)

    # Audit
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    client = relationship("CrmClient", back_populates="invoices")
    trip = relationship("Trip")


class Proposal(Base):
    """Priced trip offer sent to a client before invoicing"""

    __tablename__ = "proposals"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("crm_clients.id"), nullable=False)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    line_items = Column(JSON, nullable=False)

    subtotal = Column(Float, nullable=False)
    tax = Column(Float, default=0, nullable=False)
    discount = Column(Float, default=0, nullable=False)
    total = Column(Float, nullable=False)
    currency = Column(String(3), default="USD", nullable=False)

    status = Column(String(20), default="DRAFT", nullable=False)  # DRAFT, SENT, ACCEPTED, REJECTED
    valid_until = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    accepted_at = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    client = relationship("CrmClient", back_populates="proposals")
    trip = relationship("Trip")


class LandingPage(Base):
    __tablename__ = "landing_pages"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=True)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(500), nullable=True)
    content = Column(JSON, nullable=False)  # {"blocks": [{id, type, data}]}
    is_published = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    owner = relationship("User")
    trip = relationship("Trip")
    leads = relationship("Lead", back_populates="landing_page")


class Lead(Base):
    """Contact captured by a public landing page form"""

    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    landing_page_id = Column(String(36), ForeignKey("landing_pages.id"), nullable=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    message = Column(Text, nullable=True)
    source = Column(String(200), nullable=True)  # e.g. landing-page:summer-in-lisbon
    status = Column(String(20), default="NEW", nullable=False)
    assigned_to_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    landing_page = relationship("LandingPage", back_populates="leads")
