from itertools import islice
from typing import Callable, Iterable, Iterator, TypeVar

from tracker.domain import TransactionRecord

T = TypeVar("T")


def iter_records(
    records: Iterable[TransactionRecord], pred: Callable[[TransactionRecord], bool]
) -> Iterator[TransactionRecord]:
    for t in records:
        if pred(t):
            yield t


def lazy_top(items: Iterable[T], key: Callable[[T], object], k: int) -> Iterator[T]:
    """Yield the first k items by descending key.

    sorted() is stable with reverse=True, so equal keys keep first-seen order.
    """
    ordered = sorted(items, key=key, reverse=True)
    yield from islice(ordered, max(0, k))
