from datetime import date
from typing import Callable, Iterable, Optional, Union

from tracker.domain import TYPE_ALL, TransactionRecord, TransactionType
from tracker.functional import pipe
from tracker.lazy import iter_records
from tracker.windows import DateInterval

Predicate = Callable[[TransactionRecord], bool]

# the closed list of fields free-text search looks at
SEARCH_FIELDS = ("amount", "type", "category", "reference", "description", "date")


def field_text(t: TransactionRecord, field: str) -> str:
    value = getattr(t, field)
    if value is None:
        return ""
    if isinstance(value, TransactionType):
        return value.value
    if field == "date" and isinstance(value, date):
        return value.isoformat()
    return str(value)


def by_type(type_: Union[TransactionType, str]) -> Predicate:
    if type_ == TYPE_ALL:
        return lambda t: True
    wanted = TransactionType(type_)

    def _filter(t: TransactionRecord) -> bool:
        return t.type is wanted

    return _filter


def by_interval(interval: Optional[DateInterval]) -> Predicate:
    if interval is None:
        return lambda t: True

    def _filter(t: TransactionRecord) -> bool:
        return interval.contains(t.date)

    return _filter


def by_search(text: Optional[str]) -> Predicate:
    if not text:
        return lambda t: True
    needle = text.lower()

    def _filter(t: TransactionRecord) -> bool:
        return any(needle in field_text(t, f).lower() for f in SEARCH_FIELDS)

    return _filter


def _stage(pred: Predicate) -> Callable[[Iterable[TransactionRecord]], Iterable[TransactionRecord]]:
    return lambda records: iter_records(records, pred)


def filter_records(
    records: Iterable[TransactionRecord],
    type: Union[TransactionType, str] = TYPE_ALL,
    interval: Optional[DateInterval] = None,
    search_text: str = "",
) -> tuple[TransactionRecord, ...]:
    """Narrow a snapshot by type, date window and search text, keeping order."""
    return tuple(pipe(
        records,
        _stage(by_type(type)),
        _stage(by_interval(interval)),
        _stage(by_search(search_text)),
    ))
