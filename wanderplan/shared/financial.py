"""Line items, document totals and invoice status shared by invoices and proposals"""

import re
from calendar import monthrange
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .validators import require_uuid

INVOICE_NUMBER_PATTERN = re.compile(r"^INV-\d{8}-\d{4}$")

# Accepted rounding drift between quantity * unitPrice and the stated total
LINE_ITEM_TOLERANCE = 0.01


class LineItem(BaseModel):
    id: str
    description: str = Field(..., min_length=1, max_length=500)
    quantity: float = Field(..., gt=0)
    unitPrice: float = Field(..., ge=0)
    total: float = Field(..., ge=0)

    @model_validator(mode="after")
    def check_total(self):
        require_uuid(self.id)
        if abs(self.total - self.quantity * self.unitPrice) >= LINE_ITEM_TOLERANCE:
            raise ValueError("Line item total must equal quantity × unitPrice")
        return self


def calculate_subtotal(line_items: list) -> float:
    """Sum of line item totals (accepts LineItem models or stored dicts)"""
    subtotal = 0.0
    for item in line_items:
        subtotal += item.total if isinstance(item, LineItem) else float(item["total"])
    return round(subtotal, 2)


def calculate_total(subtotal: float, tax: float = 0, discount: float = 0) -> float:
    return round(subtotal + (tax or 0) - (discount or 0), 2)


def effective_invoice_status(
    status: str, due_date: Optional[datetime], paid_at: Optional[datetime], today: Optional[date] = None
) -> str:
    """
    Status as shown to users.

    PAID wins whenever a payment is recorded. A SENT invoice becomes OVERDUE
    once the current date is past its due date; time of day is ignored.
    """
    if status == "PAID" or paid_at is not None:
        return "PAID"
    if status == "DRAFT":
        return "DRAFT"
    if status == "SENT" and due_date is not None:
        today = today or datetime.now(timezone.utc).date()
        if today > due_date.date():
            return "OVERDUE"
    return status


def format_invoice_number(day: date, sequence: int) -> str:
    return f"INV-{day.strftime('%Y%m%d')}-{sequence:04d}"


def next_invoice_sequence(last_number: Optional[str]) -> int:
    """Sequence that follows the day's highest invoice number (1 when there is none)"""
    if not last_number:
        return 1
    try:
        return int(last_number.rsplit("-", 1)[1]) + 1
    except (IndexError, ValueError):
        return 1


def is_valid_invoice_number(invoice_number: str) -> bool:
    """INV-YYYYMMDD-NNNN where the date part is a real calendar date"""
    if not invoice_number or not INVOICE_NUMBER_PATTERN.match(invoice_number):
        return False

    date_part = invoice_number.split("-")[1]
    year, month, day = int(date_part[:4]), int(date_part[4:6]), int(date_part[6:8])
    if month < 1 or month > 12:
        return False
    if year < 1:
        return False
    return 1 <= day <= monthrange(year, month)[1]
