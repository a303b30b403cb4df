from dataclasses import replace
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from tracker.domain import TransactionRecord
from tracker.errors import NothingToExportError, ValidationError
from tracker.events import EventBus, register_default_handlers
from tracker.services import InMemorySource, TransactionService
from tracker.windows import Frequency, TransactionQuery

from helpers import EXPENSE, INCOME, make_tx, scenario

SEED = Path(__file__).resolve().parent.parent / "data" / "seed.json"
ALL_TIME = TransactionQuery(frequency=Frequency.CUSTOM)


def make_service(records=None):
    bus = EventBus()
    register_default_handlers(bus)
    return TransactionService(InMemorySource(scenario() if records is None else records), bus=bus)


def test_fetch_applies_query_on_source():
    service = make_service()
    query = TransactionQuery(frequency=Frequency.LAST_30_DAYS, type="Expense")
    snapshot = service.fetch(query, today=date(2024, 2, 1))
    assert [t.transaction_id for t in snapshot] == ["t2", "t3"]


def test_custom_range_without_dates_fetches_everything():
    assert len(make_service().fetch(ALL_TIME)) == 3


def test_local_filtering_matches_source_filtering():
    service = make_service()
    query = TransactionQuery(frequency=Frequency.CUSTOM, date_range=("2024-01-06", "2024-02-01"), type="Expense")
    fetched = service.fetch(query)
    local = service.visible(service.fetch(ALL_TIME), query)
    assert fetched == local


def test_visible_search():
    service = make_service()
    snapshot = service.fetch(ALL_TIME)
    assert [t.transaction_id for t in service.visible(snapshot, ALL_TIME, "300")] == ["t2"]


def test_dashboard():
    stats = make_service().dashboard(ALL_TIME)
    assert stats.balance == Decimal("500")
    assert stats.savings_rate == Decimal("50.0")


def test_add_returns_fresh_snapshot():
    service = make_service()
    new = make_tx("t4", INCOME, 50, "2024-02-10", category="Income in Tip")
    snapshot = service.add(new, ALL_TIME)
    assert [t.transaction_id for t in snapshot] == ["t1", "t2", "t3", "t4"]
    assert service.dashboard(ALL_TIME).income == Decimal("1050")


def test_update_and_delete():
    service = make_service()
    changed = replace(scenario()[1], amount=Decimal("400"))
    snapshot = service.update(changed, ALL_TIME)
    assert snapshot[1].amount == Decimal("400")
    snapshot = service.delete("t1", ALL_TIME)
    assert [t.transaction_id for t in snapshot] == ["t2", "t3"]


def test_mutation_failures_propagate():
    service = make_service()
    with pytest.raises(KeyError):
        service.delete("missing", ALL_TIME)
    with pytest.raises(ValidationError):
        service.add(make_tx("t1", EXPENSE, 5, "2024-01-01"), ALL_TIME)
    with pytest.raises(ValidationError):
        service.add(replace(make_tx("t9", EXPENSE, 5, "2024-01-01"), amount=Decimal("-5")), ALL_TIME)
    assert len(service.fetch(ALL_TIME)) == 3


def test_no_refetch_without_refresh_handler():
    service = TransactionService(InMemorySource(scenario()), bus=EventBus())
    assert service.add(make_tx("t4", INCOME, 1, "2024-03-01"), ALL_TIME) is None
    assert len(service.fetch(ALL_TIME)) == 4


def test_fetch_failure_propagates():
    class BrokenSource:
        def fetch(self, query, today=None):
            raise ConnectionError("backend down")

    service = TransactionService(BrokenSource(), bus=EventBus())
    with pytest.raises(ConnectionError):
        service.dashboard(ALL_TIME)


def test_export_visible_records():
    service = make_service()
    visible = service.visible(service.fetch(ALL_TIME), ALL_TIME, "300")
    filename, data = service.export(visible, fmt="csv", today=date(2024, 3, 9))
    assert filename == "Transactions(09-03-2024).csv"
    assert len(data.decode("utf-8").strip().splitlines()) == 2


def test_export_nothing():
    service = make_service()
    with pytest.raises(NothingToExportError):
        service.export(service.visible(service.fetch(ALL_TIME), ALL_TIME, "no such thing"))


def test_seeded_source():
    service = TransactionService(InMemorySource.from_seed(str(SEED)), bus=EventBus())
    stats = service.dashboard(ALL_TIME)
    assert stats.total_transactions >= 10
    assert stats.top_income_categories[0].category == "Income in Salary"


def test_edit_keeps_id_and_position():
    service = make_service()
    before = scenario()[1]
    edited = TransactionRecord.from_dict({
        **before.to_dict(),
        "amount": "320.00",
        "refrence": "Groceries and fruit",
    })
    snapshot = service.update(edited, ALL_TIME)
    assert [t.transaction_id for t in snapshot] == ["t1", "t2", "t3"]
    assert snapshot[1].transaction_id == before.transaction_id
    assert snapshot[1].amount == Decimal("320.00")
    assert snapshot[1].reference == "Groceries and fruit"


def test_edit_of_unknown_record_fails():
    service = make_service()
    ghost = make_tx("ghost", EXPENSE, 5, "2024-01-01")
    with pytest.raises(KeyError):
        service.update(ghost, ALL_TIME)
