"""Invoice domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models_crm import Invoice
from ...shared.financial import LineItem, calculate_subtotal, effective_invoice_status
from ...shared.validators import UtcDatetime, require_uuid, validate_currency

InvoiceStatus = Literal["DRAFT", "SENT", "PAID"]
InvoiceFilterStatus = Literal["DRAFT", "SENT", "PAID", "OVERDUE"]


class InvoiceCreate(BaseModel):
    """Schema for creating an invoice"""

    clientId: str
    tripId: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    lineItems: list[LineItem] = Field(..., min_length=1)
    tax: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    issueDate: UtcDatetime
    dueDate: UtcDatetime
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
    def check_dates_and_subtotal(self):
        if self.dueDate < self.issueDate:
            raise ValueError("Due date must be on or after issue date")
        if calculate_subtotal(self.lineItems) <= 0:
            raise ValueError("Subtotal must be greater than zero")
        return self


class InvoiceUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    lineItems: Optional[list[LineItem]] = Field(None, min_length=1)
    tax: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0)
    status: Optional[InvoiceStatus] = None
    issueDate: Optional[UtcDatetime] = None
    dueDate: Optional[UtcDatetime] = None
    notes: Optional[str] = Field(None, max_length=2000)
    terms: Optional[str] = Field(None, max_length=5000)

    @model_validator(mode="after")
    def check_dates(self):
        if self.issueDate and self.dueDate and self.dueDate < self.issueDate:
            raise ValueError("Due date must be on or after issue date")
        return self


class InvoiceResponse(BaseModel):
    id: str
    invoiceNumber: str
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
    issueDate: datetime
    dueDate: datetime
    paidAt: Optional[datetime] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    client: Optional[dict] = None
    trip: Optional[dict] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def client_summary(client) -> Optional[dict]:
    if client is None:
        return None
    return {
        "id": client.id,
        "firstName": client.first_name,
        "lastName": client.last_name,
        "email": client.email,
    }


def trip_summary(trip) -> Optional[dict]:
    if trip is None:
        return None
    return {"id": trip.id, "name": trip.name, "startDate": trip.start_date, "endDate": trip.end_date}


def invoice_response(invoice: Invoice) -> InvoiceResponse:
    """Serialize an invoice with its effective (possibly OVERDUE) status"""
    return InvoiceResponse(
        id=invoice.id,
        invoiceNumber=invoice.invoice_number,
        userId=invoice.user_id,
        clientId=invoice.client_id,
        tripId=invoice.trip_id,
        title=invoice.title,
        description=invoice.description,
        lineItems=invoice.line_items or [],
        subtotal=invoice.subtotal,
        tax=invoice.tax,
        discount=invoice.discount,
        total=invoice.total,
        currency=invoice.currency,
        status=effective_invoice_status(invoice.status, invoice.due_date, invoice.paid_at),
        issueDate=invoice.issue_date,
        dueDate=invoice.due_date,
        paidAt=invoice.paid_at,
        notes=invoice.notes,
        terms=invoice.terms,
        client=client_summary(invoice.client),
        trip=trip_summary(invoice.trip),
        createdAt=invoice.created_at,
        updatedAt=invoice.updated_at,
    )
