import uuid
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from wanderplan.shared.financial import (
    LineItem,
    calculate_subtotal,
    calculate_total,
    effective_invoice_status,
    format_invoice_number,
    is_valid_invoice_number,
    next_invoice_sequence,
)


def _item(quantity, unit_price, total):
    return {"id": str(uuid.uuid4()), "description": "Guided tour", "quantity": quantity, "unitPrice": unit_price, "total": total}


def test_line_item_total_must_match_quantity_times_price():
    with pytest.raises(ValidationError) as exc:
        LineItem(**_item(2, 50, 90))

    assert "quantity × unitPrice" in str(exc.value)


def test_line_item_accepts_small_rounding_drift():
    item = LineItem(**_item(3, 33.33, 99.99))

    assert item.total == 99.99


def test_line_item_id_must_be_a_uuid():
    with pytest.raises(ValidationError):
        LineItem(id="item-1", description="Tour", quantity=1, unitPrice=10, total=10)


def test_subtotal_and_total():
    items = [LineItem(**_item(2, 50, 100)), _item(1, 25.5, 25.5)]

    subtotal = calculate_subtotal(items)

    assert subtotal == 125.5
    assert calculate_total(subtotal, tax=10, discount=5.5) == 130.0
    assert calculate_total(subtotal) == 125.5


@pytest.mark.parametrize(
    "status,paid_at,expected",
    [
        ("SENT", None, "OVERDUE"),
        ("DRAFT", None, "DRAFT"),
        ("PAID", datetime(2030, 1, 2), "PAID"),
        ("SENT", datetime(2030, 1, 2), "PAID"),
    ],
)
def test_effective_status_past_due(status, paid_at, expected):
    due = datetime(2030, 1, 1, 23, 59)

    assert effective_invoice_status(status, due, paid_at, today=date(2030, 1, 2)) == expected


def test_sent_invoice_is_not_overdue_on_its_due_date():
    due = datetime(2030, 1, 1, 0, 0)

    assert effective_invoice_status("SENT", due, None, today=date(2030, 1, 1)) == "SENT"


def test_invoice_numbers():
    number = format_invoice_number(date(2030, 3, 7), 42)

    assert number == "INV-20300307-0042"
    assert is_valid_invoice_number(number)
    assert next_invoice_sequence(number) == 43
    assert next_invoice_sequence(None) == 1
    assert not is_valid_invoice_number("INV-20300230-0001")
    assert not is_valid_invoice_number("INV-2030037-0001")
