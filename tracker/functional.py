from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Generic, Optional, TypeVar

from tracker.domain import TransactionRecord, TransactionType
from tracker.errors import ValidationError

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def _invalid(t: TransactionRecord, field: str, message: str) -> Left:
    return Left({
        "error": "invalid_transaction",
        "record_id": getattr(t, "transaction_id", None),
        "field": field,
        "message": message,
    })


def _check_required(t: TransactionRecord) -> Either[dict, TransactionRecord]:
    for field in ("transaction_id", "category", "reference"):
        value = getattr(t, field, None)
        if not isinstance(value, str) or not value.strip():
            return _invalid(t, field, "missing")
    if getattr(t, "date", None) is None:
        return _invalid(t, "date", "missing")
    return Right(t)


def _check_date(t: TransactionRecord) -> Either[dict, TransactionRecord]:
    if isinstance(t.date, datetime) or not isinstance(t.date, date):
        return _invalid(t, "date", f"not a calendar date: {t.date!r}")
    return Right(t)


def _check_amount(t: TransactionRecord) -> Either[dict, TransactionRecord]:
    if not isinstance(t.amount, Decimal) or not t.amount.is_finite():
        return _invalid(t, "amount", f"not a decimal amount: {t.amount!r}")
    if t.amount <= 0:
        return _invalid(t, "amount", f"must be positive, got {t.amount}")
    return Right(t)


def _check_type(t: TransactionRecord) -> Either[dict, TransactionRecord]:
    if not isinstance(t.type, TransactionType):
        return _invalid(t, "type", f"unknown type {t.type!r}")
    return Right(t)


def validate_record(
    t: TransactionRecord,
    categories: Optional[tuple[str, ...]] = None,
) -> Either[dict, TransactionRecord]:
    """Check one record; Left carries an error dict naming the field."""
    result = _check_required(t).bind(_check_date).bind(_check_amount).bind(_check_type)
    if result.is_right() and categories is not None and t.category not in categories:
        return _invalid(t, "category", f"unknown category {t.category!r}")
    return result


def validate_snapshot(
    records: Iterable[TransactionRecord],
    categories: Optional[tuple[str, ...]] = None,
) -> tuple[TransactionRecord, ...]:
    """Validate every record and id uniqueness, raising on the first problem."""
    snapshot = tuple(records)
    seen: set[str] = set()
    for t in snapshot:
        result = validate_record(t, categories)
        if result.is_left():
            err = result.get_error()
            raise ValidationError(err["record_id"], err["field"], err["message"])
        if t.transaction_id in seen:
            raise ValidationError(t.transaction_id, "transaction_id", "duplicate id in snapshot")
        seen.add(t.transaction_id)
    return snapshot


def pipe(x, *funcs):
    """pipe(x, f, g, h) == h(g(f(x)))"""
    res = x
    for f in funcs:
        res = f(res)
    return res
