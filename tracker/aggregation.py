"""Derived statistics over a transaction snapshot.

Every function here is pure: it reads the records it is given and returns new
values. Nothing is cached between calls, so a new snapshot always produces
fresh numbers.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from functools import reduce
from typing import Iterable, Optional

from tracker.domain import CategoryTotal, MonthlyBucket, TransactionRecord, TransactionType
from tracker.errors import ValidationError
from tracker.functional import Maybe, Nothing, Some, validate_snapshot
from tracker.lazy import lazy_top
from tracker.logging_setup import get_logger

logger = get_logger(__name__)

TOP_CATEGORY_LIMIT = 5
RECENT_LIMIT = 5

ZERO = Decimal("0")
ONE_DECIMAL = Decimal("0.1")
# savings rate reported when there is no income to divide by
ZERO_INCOME_SAVINGS_RATE = Decimal("0")
# count used for averages when no record of the type exists
EMPTY_TYPE_COUNT = 1


def _round1(value: Decimal) -> Decimal:
    return value.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def _of_type(records: Iterable[TransactionRecord], type_: TransactionType) -> tuple[TransactionRecord, ...]:
    return tuple(t for t in records if t.type is type_)


def _sum(records: Iterable[TransactionRecord]) -> Decimal:
    return reduce(lambda acc, t: acc + t.amount, records, ZERO)


def total_income(records: Iterable[TransactionRecord]) -> Decimal:
    return _sum(_of_type(records, TransactionType.INCOME))


def total_expense(records: Iterable[TransactionRecord]) -> Decimal:
    return _sum(_of_type(records, TransactionType.EXPENSE))


def balance(income: Decimal, expense: Decimal) -> Decimal:
    return income - expense


def savings_rate(income: Decimal, expense: Decimal) -> Decimal:
    if income == 0:
        return ZERO_INCOME_SAVINGS_RATE
    return _round1(balance(income, expense) / income * 100)


def category_breakdown(records: Iterable[TransactionRecord]) -> tuple[CategoryTotal, ...]:
    """Group by category label in first-seen order.

    A category that shows up under both types is a data problem; it is
    reported, not merged.
    """
    groups: dict[str, CategoryTotal] = {}
    for t in records:
        current = groups.get(t.category)
        if current is None:
            groups[t.category] = CategoryTotal(t.category, t.type, t.amount, 1)
            continue
        if current.type is not t.type:
            raise ValidationError(
                t.transaction_id,
                "type",
                f"category {t.category!r} already holds {current.type.value} records",
            )
        groups[t.category] = CategoryTotal(t.category, t.type, current.amount + t.amount, current.count + 1)
    return tuple(groups.values())


def top_categories(
    breakdown: Iterable[CategoryTotal],
    type_: TransactionType,
    limit: int = TOP_CATEGORY_LIMIT,
) -> tuple[CategoryTotal, ...]:
    matching = (g for g in breakdown if g.type is type_)
    return tuple(lazy_top(matching, key=lambda g: g.amount, k=limit))


def category_percentage(group: CategoryTotal, income: Decimal, expense: Decimal) -> Maybe[Decimal]:
    type_total = income if group.type is TransactionType.INCOME else expense
    if type_total == 0:
        return Nothing()
    return Some(_round1(group.amount / type_total * 100))


def monthly_trend(records: Iterable[TransactionRecord]) -> tuple[MonthlyBucket, ...]:
    totals: dict[tuple[int, int], list[Decimal]] = {}
    for t in records:
        bucket = totals.setdefault((t.date.year, t.date.month), [ZERO, ZERO])
        if t.type is TransactionType.INCOME:
            bucket[0] += t.amount
        else:
            bucket[1] += t.amount
    return tuple(
        MonthlyBucket(year, month, income, expense)
        for (year, month), (income, expense) in sorted(totals.items())
    )


def recent_transactions(
    records: Iterable[TransactionRecord], limit: int = RECENT_LIMIT
) -> tuple[TransactionRecord, ...]:
    return tuple(lazy_top(records, key=lambda t: t.date, k=limit))


def average_amount(records: Iterable[TransactionRecord], type_: TransactionType) -> Decimal:
    matching = _of_type(records, type_)
    return _sum(matching) / (len(matching) or EMPTY_TYPE_COUNT)


@dataclass(frozen=True)
class Statistics:
    income: Decimal
    expense: Decimal
    balance: Decimal
    savings_rate: Decimal
    category_breakdown: tuple[CategoryTotal, ...]
    top_expense_categories: tuple[CategoryTotal, ...]
    top_income_categories: tuple[CategoryTotal, ...]
    monthly_trend: tuple[MonthlyBucket, ...]
    recent_transactions: tuple[TransactionRecord, ...]
    average_income: Decimal
    average_expense: Decimal
    income_count: int
    expense_count: int
    total_transactions: int

    @property
    def is_empty(self) -> bool:
        return self.total_transactions == 0

    def percentage_of(self, group: CategoryTotal) -> Optional[Decimal]:
        return category_percentage(group, self.income, self.expense).get_or_else(None)

    def percentage_label(self, group: CategoryTotal) -> str:
        return category_percentage(group, self.income, self.expense).map(lambda p: f"{p}%").get_or_else("-")


def compute_statistics(
    records: Iterable[TransactionRecord],
    categories: Optional[tuple[str, ...]] = None,
) -> Statistics:
    """Validate a snapshot and derive every dashboard figure from it."""
    try:
        snapshot = validate_snapshot(records, categories)
        breakdown = category_breakdown(snapshot)
    except ValidationError as exc:
        logger.warning("rejected snapshot: %s", exc)
        raise

    income = total_income(snapshot)
    expense = total_expense(snapshot)
    logger.debug("computed statistics over %d records", len(snapshot))

    return Statistics(
        income=income,
        expense=expense,
        balance=balance(income, expense),
        savings_rate=savings_rate(income, expense),
        category_breakdown=breakdown,
        top_expense_categories=top_categories(breakdown, TransactionType.EXPENSE),
        top_income_categories=top_categories(breakdown, TransactionType.INCOME),
        monthly_trend=monthly_trend(snapshot),
        recent_transactions=recent_transactions(snapshot),
        average_income=average_amount(snapshot, TransactionType.INCOME),
        average_expense=average_amount(snapshot, TransactionType.EXPENSE),
        income_count=len(_of_type(snapshot, TransactionType.INCOME)),
        expense_count=len(_of_type(snapshot, TransactionType.EXPENSE)),
        total_transactions=len(snapshot),
    )
