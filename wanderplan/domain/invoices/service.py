"""Invoice service - Business logic for invoices"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User, utcnow
from ...models_crm import Invoice
from ...rate_limiter import INVOICE_CREATE_LIMIT, check_rate_limit, rate_limit_exceeded
from ...shared.financial import calculate_subtotal, calculate_total
from ...shared.pagination import clamp_limit, total_pages
from .repository import InvoiceRepository
from .schemas import InvoiceCreate, InvoiceUpdate

logger = logging.getLogger(__name__)

SIMPLE_FIELDS = {
    "title": "title",
    "description": "description",
    "issueDate": "issue_date",
    "dueDate": "due_date",
    "notes": "notes",
    "terms": "terms",
}


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()

    def _get_invoice(self, invoice_id: str, user: User) -> Invoice:
        invoice = self.repo.get_invoice(self.db, invoice_id, user.id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def list_invoices(
        self,
        user: User,
        page: int,
        limit: int,
        status: Optional[str] = None,
        client_id: Optional[str] = None,
        search: Optional[str] = None,
        overdue: Optional[bool] = None,
    ) -> dict:
        invoices, total = self.repo.list_invoices(
            self.db, user.id, page, limit, status, client_id, search, overdue
        )
        return {
            "invoices": invoices,
            "total": total,
            "page": page,
            "limit": clamp_limit(limit),
            "totalPages": total_pages(total, limit),
        }

    def get_invoice(self, invoice_id: str, user: User) -> Invoice:
        return self._get_invoice(invoice_id, user)

    def create_invoice(self, data: InvoiceCreate, user: User) -> Invoice:
        """
        Create a DRAFT invoice for one of the caller's clients.

        Raises:
            HTTPException 429 past the hourly creation limit, 404 when the
            client or trip is not the caller's, 400 when discounts push the
            total below zero.
        """
        limit, window = INVOICE_CREATE_LIMIT
        allowed, _, ttl = check_rate_limit(f"invoices:{user.id}", limit, window)
        if not allowed:
            logger.warning(f"🚫 Invoice creation rate limit hit for user {user.id}")
            raise rate_limit_exceeded(
                ttl, "Too many invoice creations. Please try again in {minutes} minutes."
            )

        if not self.repo.get_owned_client(self.db, data.clientId, user.id):
            raise HTTPException(status_code=404, detail="Client not found or does not belong to you")
        if data.tripId and not self.repo.get_owned_trip(self.db, data.tripId, user.id):
            raise HTTPException(status_code=404, detail="Trip not found or does not belong to you")

        subtotal = calculate_subtotal(data.lineItems)
        tax = data.tax or 0
        discount = data.discount or 0
        total = calculate_total(subtotal, tax, discount)
        if total < 0:
            raise HTTPException(status_code=400, detail="Total cannot be negative")

        invoice = self.repo.create_invoice(
            self.db,
            utcnow().date(),
            user_id=user.id,
            client_id=data.clientId,
            trip_id=data.tripId,
            title=data.title,
            description=data.description or None,
            line_items=[item.model_dump() for item in data.lineItems],
            subtotal=subtotal,
            tax=tax,
            discount=discount,
            total=total,
            currency=data.currency or "USD",
            status="DRAFT",
            issue_date=data.issueDate,
            due_date=data.dueDate,
            notes=data.notes or None,
            terms=data.terms or None,
        )
        logger.info(f"🧾 Invoice {invoice.invoice_number} created for client {data.clientId}")
        return invoice

    def update_invoice(self, invoice_id: str, data: InvoiceUpdate, user: User) -> Invoice:
        invoice = self._get_invoice(invoice_id, user)
        updates = data.model_dump(exclude_unset=True)

        if "status" in updates and invoice.status == "PAID":
            raise HTTPException(status_code=400, detail="Cannot modify a paid invoice")

        issue_date = updates.get("issueDate") or invoice.issue_date
        due_date = updates.get("dueDate") or invoice.due_date
        if due_date < issue_date:
            raise HTTPException(status_code=400, detail="Due date must be on or after issue date")

        subtotal = invoice.subtotal
        if data.lineItems is not None:
            subtotal = calculate_subtotal(data.lineItems)
        tax = data.tax if data.tax is not None else invoice.tax
        discount = data.discount if data.discount is not None else invoice.discount
        total = calculate_total(subtotal, tax, discount)
        if total < 0:
            raise HTTPException(status_code=400, detail="Total cannot be negative")

        for key, column in SIMPLE_FIELDS.items():
            if key in updates and not (key in ("title", "issueDate", "dueDate") and updates[key] is None):
                setattr(invoice, column, updates[key])

        if data.lineItems is not None:
            invoice.line_items = [item.model_dump() for item in data.lineItems]
            invoice.subtotal = subtotal
        if data.tax is not None:
            invoice.tax = data.tax
        if data.discount is not None:
            invoice.discount = data.discount
        if data.lineItems is not None or data.tax is not None or data.discount is not None:
            invoice.total = total

        if data.status:
            if data.status == "PAID" and invoice.status != "PAID":
                invoice.paid_at = utcnow()
            invoice.status = data.status

        invoice = self.repo.save(self.db, invoice)
        logger.info(f"✅ Invoice {invoice.invoice_number} updated (status={invoice.status})")
        return invoice

    def mark_paid(self, invoice_id: str, user: User) -> Invoice:
        """Record a manual payment for a sent invoice"""
        invoice = self._get_invoice(invoice_id, user)
        if invoice.status == "PAID":
            raise HTTPException(status_code=400, detail="Invoice is already paid")
        if invoice.status == "DRAFT":
            raise HTTPException(
                status_code=400,
                detail="Cannot mark a draft invoice as paid. Please send the invoice first.",
            )
        if invoice.total <= 0:
            raise HTTPException(status_code=400, detail="Invoice total must be greater than zero")

        invoice.status = "PAID"
        invoice.paid_at = utcnow()
        invoice = self.repo.save(self.db, invoice)
        logger.info(f"💰 Invoice {invoice.invoice_number} marked as paid")
        return invoice

    def delete_invoice(self, invoice_id: str, user: User) -> None:
        invoice = self._get_invoice(invoice_id, user)
        if invoice.status == "PAID":
            raise HTTPException(status_code=409, detail="Cannot delete a paid invoice")
        invoice.deleted_at = utcnow()
        self.repo.save(self.db, invoice)
        logger.info(f"🗑️ Invoice {invoice.invoice_number} soft deleted")
