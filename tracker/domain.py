from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from tracker.errors import ValidationError


class TransactionType(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"

    def __str__(self) -> str:
        return self.value


# "all" is the only type selector that is not a TransactionType
TYPE_ALL = "all"

INCOME_CATEGORIES = (
    "Income in Salary",
    "Income in Part Time",
    "Income in Project",
    "Income in Freelancing",
    "Income in Tip",
)

EXPENSE_CATEGORIES = (
    "Expense in Stationary",
    "Expense in Food",
    "Expense in Movie",
    "Expense in Bills",
    "Expense in Medical",
    "Expense in Fees",
    "Expense in TAX",
)

TRANSACTION_CATEGORIES = INCOME_CATEGORIES + EXPENSE_CATEGORIES


@dataclass(frozen=True)
class TransactionRecord:
    transaction_id: str
    date: date
    amount: Decimal          # always > 0, sign comes from type
    type: TransactionType
    category: str
    reference: str
    description: Optional[str] = None

    def __post_init__(self):
        # day granularity: a datetime is truncated to its calendar date
        if isinstance(self.date, datetime):
            object.__setattr__(self, "date", self.date.date())

    @classmethod
    def from_dict(cls, data: dict) -> "TransactionRecord":
        """Build a record from an API payload.

        Accepts the backend's ``refrence`` spelling and ``transactionId``/``_id``
        keys. Raises ValidationError naming the first missing or unparsable field.
        """
        record_id = data.get("transaction_id") or data.get("transactionId") or data.get("_id")
        if not record_id:
            raise ValidationError(None, "transaction_id", "missing")
        record_id = str(record_id)

        reference = data.get("reference", data.get("refrence"))
        for field, value in (
            ("date", data.get("date")),
            ("amount", data.get("amount")),
            ("type", data.get("type")),
            ("category", data.get("category")),
            ("reference", reference),
        ):
            if value is None or value == "":
                raise ValidationError(record_id, field, "missing")

        return cls(
            transaction_id=record_id,
            date=parse_date(data["date"], record_id),
            amount=parse_amount(data["amount"], record_id),
            type=parse_type(data["type"], record_id),
            category=str(data["category"]),
            reference=str(reference),
            description=data.get("description") or None,
        )

    def to_dict(self) -> dict:
        return {
            "transactionId": self.transaction_id,
            "date": self.date.isoformat(),
            "amount": str(self.amount),
            "type": self.type.value,
            "category": self.category,
            "refrence": self.reference,
            "description": self.description or "",
        }


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    type: TransactionType
    amount: Decimal
    count: int


@dataclass(frozen=True)
class MonthlyBucket:
    year: int
    month: int
    income: Decimal
    expense: Decimal

    @property
    def key(self) -> tuple[int, int]:
        return self.year, self.month

    @property
    def label(self) -> str:
        return date(self.year, self.month, 1).strftime("%b %Y")


def parse_date(value: Any, record_id: Optional[str] = None) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if "T" in text or " " in text:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationError(record_id, "date", f"cannot parse {value!r}") from None


def parse_amount(value: Any, record_id: Optional[str] = None) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(record_id, "amount", f"not a number: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(record_id, "amount", f"not a number: {value!r}") from None
    if not amount.is_finite():
        raise ValidationError(record_id, "amount", f"not a number: {value!r}")
    return amount


def parse_type(value: Any, record_id: Optional[str] = None) -> TransactionType:
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(str(value))
    except ValueError:
        raise ValidationError(record_id, "type", f"unknown type {value!r}") from None
