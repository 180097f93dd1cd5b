"""
Expense split and settlement calculations

Money is handled in integer cents internally so shares always add up to the
expense amount exactly.
"""

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

TOLERANCE = 0.01


def to_cents(amount: float) -> int:
    return int(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) * 100)


def from_cents(cents: int) -> float:
    return float(Decimal(cents) / 100)


def round_money(amount: float) -> float:
    return from_cents(to_cents(amount))


def calculate_equal_split(amount: float, user_ids: list[str]) -> list[tuple[str, float]]:
    """
    Split amount evenly; the rounding remainder goes to the first user.

    >>> calculate_equal_split(100, ["a", "b", "c"])
    [('a', 33.34), ('b', 33.33), ('c', 33.33)]
    """
    if not user_ids:
        raise ValueError("At least one user is required to split an expense")

    total = to_cents(amount)
    share, remainder = divmod(total, len(user_ids))
    return [
        (user_id, from_cents(share + (remainder if index == 0 else 0)))
        for index, user_id in enumerate(user_ids)
    ]


def calculate_custom_split(amount: float, splits: list[dict]) -> list[tuple[str, float]]:
    """
    Resolve custom splits given either as amounts or as percentages.

    Each split is {"userId", "amount"} or {"userId", "percentage"}; the two
    forms cannot be mixed. Amounts must add up to the expense amount and
    percentages to 100 (within 0.01). Percentage rounding is absorbed by the
    first user.
    """
    if not splits:
        raise ValueError("At least one split is required")

    uses_percentage = [s.get("percentage") is not None for s in splits]
    if any(uses_percentage) and not all(uses_percentage):
        raise ValueError("Splits must all use amounts or all use percentages")

    if all(uses_percentage):
        total_percentage = sum(float(s["percentage"]) for s in splits)
        if abs(total_percentage - 100) > TOLERANCE:
            raise ValueError("Split percentages must add up to 100")
        total = to_cents(amount)
        cents = [int(round(total * float(s["percentage"]) / 100)) for s in splits]
        cents[0] += total - sum(cents)
        return [(s["userId"], from_cents(c)) for s, c in zip(splits, cents)]

    if any(s.get("amount") is None for s in splits):
        raise ValueError("Each split needs an amount or a percentage")
    split_total = sum(float(s["amount"]) for s in splits)
    if abs(split_total - amount) > TOLERANCE:
        raise ValueError("Split amounts must add up to the expense amount")
    return [(s["userId"], round_money(float(s["amount"]))) for s in splits]


def calculate_balances(expenses: Iterable) -> dict[str, dict[str, float]]:
    """
    Net balance per currency and user: what they paid minus their shares.

    Expenses without splits count as the payer's own spending.
    Returns {currency: {user_id: balance}} with balances rounded to cents.
    """
    cents: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for expense in expenses:
        ledger = cents[expense.currency]
        amount = to_cents(expense.amount)
        ledger[expense.paid_by] += amount
        if expense.splits:
            for split in expense.splits:
                ledger[split.user_id] -= to_cents(split.amount)
        else:
            ledger[expense.paid_by] -= amount

    return {
        currency: {user_id: from_cents(value) for user_id, value in ledger.items()}
        for currency, ledger in cents.items()
    }


def calculate_settlements(
    balances: dict[str, float], currency: Optional[str] = None
) -> list[dict]:
    """
    Greedy creditor/debtor matching: the largest debtor pays the largest
    creditor until one side is settled, repeated until everyone is even.
    """
    creditors = sorted(
        [[user_id, to_cents(b)] for user_id, b in balances.items() if to_cents(b) > 0],
        key=lambda item: -item[1],
    )
    debtors = sorted(
        [[user_id, -to_cents(b)] for user_id, b in balances.items() if to_cents(b) < 0],
        key=lambda item: -item[1],
    )

    settlements = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor, creditor = debtors[i], creditors[j]
        transfer = min(debtor[1], creditor[1])
        if transfer > 0:
            settlement = {"from": debtor[0], "to": creditor[0], "amount": from_cents(transfer)}
            if currency:
                settlement["currency"] = currency
            settlements.append(settlement)
        debtor[1] -= transfer
        creditor[1] -= transfer
        if debtor[1] == 0:
            i += 1
        if creditor[1] == 0:
            j += 1
    return settlements
