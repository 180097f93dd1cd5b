"""Invoice repository - Database operations for invoices"""

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ...models import Trip, utcnow
from ...models_crm import CrmClient, Invoice
from ...shared.financial import format_invoice_number, next_invoice_sequence
from ...shared.pagination import paginate
from ...utils.sanitization import escape_like

# Attempts at claiming a fresh invoice number when a concurrent insert wins the race
INVOICE_NUMBER_ATTEMPTS = 5


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def list_invoices(
        db: Session,
        user_id: str,
        page: int,
        limit: int,
        status: Optional[str] = None,
        client_id: Optional[str] = None,
        search: Optional[str] = None,
        overdue: Optional[bool] = None,
        today: Optional[date] = None,
    ) -> tuple[list[Invoice], int]:
        query = (
            db.query(Invoice)
            .options(joinedload(Invoice.client), joinedload(Invoice.trip))
            .filter(Invoice.user_id == user_id, Invoice.deleted_at.is_(None))
        )

        start_of_today = datetime.combine(today or utcnow().date(), time.min)
        is_overdue = and_(
            Invoice.status == "SENT",
            Invoice.paid_at.is_(None),
            Invoice.due_date < start_of_today,
        )

        if status == "OVERDUE":
            query = query.filter(is_overdue)
        elif status:
            query = query.filter(Invoice.status == status)

        if overdue is True:
            query = query.filter(is_overdue)
        elif overdue is False:
            query = query.filter(
                or_(
                    Invoice.status != "SENT",
                    Invoice.due_date >= start_of_today,
                    Invoice.paid_at.isnot(None),
                )
            )

        if client_id:
            query = query.filter(Invoice.client_id == client_id)

        if search:
            pattern = f"%{escape_like(search)}%"
            query = query.filter(
                or_(
                    Invoice.title.ilike(pattern, escape="\\"),
                    Invoice.description.ilike(pattern, escape="\\"),
                    Invoice.invoice_number.ilike(pattern, escape="\\"),
                )
            )

        query = query.order_by(Invoice.issue_date.desc())
        return paginate(query, page, limit)

    @staticmethod
    def get_invoice(db: Session, invoice_id: str, user_id: str) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .filter(
                Invoice.id == invoice_id,
                Invoice.user_id == user_id,
                Invoice.deleted_at.is_(None),
            )
            .first()
        )

    @staticmethod
    def get_owned_client(db: Session, client_id: str, user_id: str) -> Optional[CrmClient]:
        return (
            db.query(CrmClient)
            .filter(CrmClient.id == client_id, CrmClient.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_owned_trip(db: Session, trip_id: str, user_id: str) -> Optional[Trip]:
        return (
            db.query(Trip)
            .filter(Trip.id == trip_id, Trip.created_by == user_id, Trip.deleted_at.is_(None))
            .first()
        )

    @staticmethod
    def last_invoice_number(db: Session, day: date) -> Optional[str]:
        prefix = f"INV-{day.strftime('%Y%m%d')}-"
        row = (
            db.query(Invoice.invoice_number)
            .filter(Invoice.invoice_number.like(f"{prefix}%"))
            .order_by(Invoice.invoice_number.desc())
            .first()
        )
        return row[0] if row else None

    @staticmethod
    def create_invoice(db: Session, day: date, **fields) -> Invoice:
        """Insert an invoice under the next free number for `day`"""
        for attempt in range(1, INVOICE_NUMBER_ATTEMPTS + 1):
            sequence = next_invoice_sequence(InvoiceRepository.last_invoice_number(db, day))
            invoice = Invoice(invoice_number=format_invoice_number(day, sequence), **fields)
            db.add(invoice)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                if attempt == INVOICE_NUMBER_ATTEMPTS:
                    raise
                continue
            db.refresh(invoice)
            return invoice

    @staticmethod
    def save(db: Session, invoice: Invoice) -> Invoice:
        db.commit()
        db.refresh(invoice)
        return invoice
