"""Proposal domain schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models_crm import Proposal
from ...shared.financial import LineItem, calculate_subtotal
from ...shared.validators import UtcDatetime, require_uuid, validate_currency
from ..invoices.schemas import client_summary, trip_summary

ProposalStatus = Literal["DRAFT", "SENT", "ACCEPTED", "REJECTED"]


class ProposalCreate(BaseModel):
    clientId: str
    tripId: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    lineItems: list[LineItem] = Field(..., min_length=1)
    tax: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    validUntil: Optional[UtcDatetime] = None
    notes: Optional[str] = Field(None, max_length=2000)
    terms: Optional[str] = Field(None, max_length=5000)

    @field_validator("clientId")
    @classmethod
    def check_client_id(cls, v):
        return require_uuid(v)

    @field_validator("tripId")
    @classmethod
    def check_trip_id(cls, v):
        return require_uuid(v) if v else None

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v):
        return validate_currency(v) if v else v

    @model_validator(mode="after")
    def check_subtotal(self):
        if calculate_subtotal(self.lineItems) <= 0:
            raise ValueError("Subtotal must be greater than zero")
        return self


class ProposalUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    lineItems: Optional[list[LineItem]] = Field(None, min_length=1)
    tax: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0)
    status: Optional[ProposalStatus] = None
    validUntil: Optional[UtcDatetime] = None
    notes: Optional[str] = Field(None, max_length=2000)
    terms: Optional[str] = Field(None, max_length=5000)


class ProposalResponse(BaseModel):
    id: str
    userId: str
    clientId: str
    tripId: Optional[str] = None
    title: str
    description: Optional[str] = None
    lineItems: list[dict]
    subtotal: float
    tax: float
    discount: float
    total: float
    currency: str
    status: str
    validUntil: Optional[datetime] = None
    sentAt: Optional[datetime] = None
    acceptedAt: Optional[datetime] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    client: Optional[dict] = None
    trip: Optional[dict] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def proposal_response(proposal: Proposal) -> ProposalResponse:
    return ProposalResponse(
        id=proposal.id,
        userId=proposal.user_id,
        clientId=proposal.client_id,
        tripId=proposal.trip_id,
        title=proposal.title,
        description=proposal.description,
        lineItems=proposal.line_items or [],
        subtotal=proposal.subtotal,
        tax=proposal.tax,
        discount=proposal.discount,
        total=proposal.total,
        currency=proposal.currency,
        status=proposal.status,
        validUntil=proposal.valid_until,
        sentAt=proposal.sent_at,
        acceptedAt=proposal.accepted_at,
        notes=proposal.notes,
        terms=proposal.terms,
        client=client_summary(proposal.client),
        trip=trip_summary(proposal.trip),
        createdAt=proposal.created_at,
        updatedAt=proposal.updated_at,
    )
