from datetime import date
from typing import Iterable, Optional, Protocol

from tracker.aggregation import Statistics, compute_statistics
from tracker.domain import TransactionRecord
from tracker.events import (
    TRANSACTION_ADDED,
    TRANSACTION_DELETED,
    TRANSACTION_UPDATED,
    EventBus,
    event_bus,
)
from tracker.export import export_filename, project_rows, to_csv_bytes, to_excel_bytes
from tracker.filters import filter_records
from tracker.functional import validate_snapshot
from tracker.logging_setup import get_logger
from tracker.transforms import add_transaction, load_seed, remove_transaction, replace_transaction
from tracker.windows import TransactionQuery

logger = get_logger(__name__)


class SnapshotSource(Protocol):
    """The persistence collaborator. Failures are raised, never retried here."""

    def fetch(self, query: TransactionQuery, today: Optional[date] = None) -> Iterable[TransactionRecord]: ...

    def add(self, record: TransactionRecord) -> None: ...

    def update(self, record: TransactionRecord) -> None: ...

    def delete(self, transaction_id: str) -> None: ...


class InMemorySource:
    """Seedable stand-in for the transactions API; applies the query server-side."""

    def __init__(self, records: Iterable[TransactionRecord] = ()):
        self._records = validate_snapshot(records)

    @classmethod
    def from_seed(cls, path: str) -> "InMemorySource":
        return cls(load_seed(path))

    def fetch(self, query: TransactionQuery, today: Optional[date] = None) -> tuple[TransactionRecord, ...]:
        return filter_records(self._records, query.type, query.interval(today))

    def add(self, record: TransactionRecord) -> None:
        validate_snapshot(self._records + (record,))
        self._records = add_transaction(self._records, record)

    def update(self, record: TransactionRecord) -> None:
        self._require(record.transaction_id)
        self._records = validate_snapshot(replace_transaction(self._records, record))

    def delete(self, transaction_id: str) -> None:
        self._require(transaction_id)
        self._records = remove_transaction(self._records, transaction_id)

    def _require(self, transaction_id: str) -> None:
        if not any(t.transaction_id == transaction_id for t in self._records):
            raise KeyError(f"Transaction {transaction_id} does not exist")


class TransactionService:
    """Facade tying a snapshot source to the derivation engine.

    Holds no snapshot of its own: every call fetches or receives the records
    it works on, and mutations return a freshly fetched snapshot.
    """

    def __init__(self, source: SnapshotSource, bus: Optional[EventBus] = None):
        self.source = source
        self.bus = bus if bus is not None else event_bus

    def fetch(self, query: TransactionQuery, today: Optional[date] = None) -> tuple[TransactionRecord, ...]:
        try:
            snapshot = tuple(self.source.fetch(query, today))
        except Exception as exc:
            logger.warning("snapshot fetch failed for %s: %s", query.to_payload(today), exc)
            raise
        logger.debug("fetched %d records for %s", len(snapshot), query.to_payload(today))
        return snapshot

    def visible(
        self,
        snapshot: Iterable[TransactionRecord],
        query: TransactionQuery,
        search_text: str = "",
        today: Optional[date] = None,
    ) -> tuple[TransactionRecord, ...]:
        return filter_records(snapshot, query.type, query.interval(today), search_text)

    def dashboard(self, query: TransactionQuery, today: Optional[date] = None) -> Statistics:
        return compute_statistics(self.fetch(query, today))

    def export(
        self,
        records: Iterable[TransactionRecord],
        fmt: str = "xlsx",
        today: Optional[date] = None,
    ) -> tuple[str, bytes]:
        rows = project_rows(records)
        data = to_csv_bytes(rows) if fmt == "csv" else to_excel_bytes(rows)
        return export_filename(today, ext=fmt), data

    def add(self, record: TransactionRecord, query: TransactionQuery, today: Optional[date] = None):
        return self._mutate(TRANSACTION_ADDED, lambda: self.source.add(record), record.transaction_id, query, today)

    def update(self, record: TransactionRecord, query: TransactionQuery, today: Optional[date] = None):
        return self._mutate(TRANSACTION_UPDATED, lambda: self.source.update(record), record.transaction_id, query, today)

    def delete(self, transaction_id: str, query: TransactionQuery, today: Optional[date] = None):
        return self._mutate(TRANSACTION_DELETED, lambda: self.source.delete(transaction_id), transaction_id, query, today)

    def _mutate(self, event_name, action, transaction_id, query, today) -> Optional[tuple[TransactionRecord, ...]]:
        try:
            action()
        except Exception as exc:
            logger.warning("%s failed for %s: %s", event_name, transaction_id, exc)
            raise
        logger.info("%s acknowledged for %s", event_name, transaction_id)

        results = self.bus.publish(event_name, {"transaction_id": transaction_id, "success": True})
        if any(r.get("refetch") for r in results):
            return self.fetch(query, today)
        return None
