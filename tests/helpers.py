from datetime import date
from decimal import Decimal

from tracker.domain import TransactionRecord, TransactionType

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def make_tx(id, type_, amount, day, category=None, reference="ref", description=None):
    if category is None:
        category = "Income in Salary" if type_ is INCOME else "Expense in Food"
    return TransactionRecord(
        transaction_id=id,
        date=date.fromisoformat(day),
        amount=Decimal(str(amount)),
        type=type_,
        category=category,
        reference=reference,
        description=description,
    )


def scenario():
    return (
        make_tx("t1", INCOME, 1000, "2024-01-05", reference="Salary"),
        make_tx("t2", EXPENSE, 300, "2024-01-10", reference="Groceries"),
        make_tx("t3", EXPENSE, 200, "2024-02-01", category="Expense in Bills", reference="Power"),
    )
