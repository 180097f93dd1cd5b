"""Invoice router - invoice endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .schemas import InvoiceCreate, InvoiceFilterStatus, InvoiceUpdate, invoice_response
from .service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


@router.get("")
async def list_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status: Optional[InvoiceFilterStatus] = Query(None),
    clientId: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    overdue: Optional[bool] = Query(None),
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    result = service.list_invoices(current_user, page, limit, status, clientId, search, overdue)
    result["invoices"] = [invoice_response(i) for i in result["invoices"]]
    return result


@router.post("", status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = service.create_invoice(data, current_user)
    return {"invoice": invoice_response(invoice)}


@router.get("/{invoice_id}")
async def get_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return {"invoice": invoice_response(service.get_invoice(invoice_id, current_user))}


@router.patch("/{invoice_id}")
async def update_invoice(
    invoice_id: str,
    data: InvoiceUpdate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = service.update_invoice(invoice_id, data, current_user)
    return {"invoice": invoice_response(invoice)}


@router.post("/{invoice_id}/mark-paid")
async def mark_invoice_paid(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = service.mark_paid(invoice_id, current_user)
    return {"message": "Invoice marked as paid", "invoice": invoice_response(invoice)}


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    service.delete_invoice(invoice_id, current_user)
    return {"message": "Invoice deleted successfully"}


__all__ = [
    "router",
    "list_invoices",
    "create_invoice",
    "get_invoice",
    "update_invoice",
    "mark_invoice_paid",
    "delete_invoice",
]
