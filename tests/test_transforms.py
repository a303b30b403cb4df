import json
from decimal import Decimal
from pathlib import Path

from tracker.transforms import add_transaction, load_seed, remove_transaction, replace_transaction

from helpers import EXPENSE, INCOME, make_tx

SEED = Path(__file__).resolve().parent.parent / "data" / "seed.json"


def test_load_seed():
    transactions = load_seed(str(SEED))
    assert len(transactions) >= 10
    assert len({t.transaction_id for t in transactions}) == len(transactions)
    assert all(t.amount > 0 for t in transactions)


def test_load_seed_reads_wire_format(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps({"transactions": [{
        "transactionId": "x1", "date": "2024-01-02", "amount": 12.5, "type": "Income",
        "category": "Income in Tip", "refrence": "Tip",
    }]}), encoding="utf-8")
    (t,) = load_seed(str(path))
    assert t.amount == Decimal("12.5")
    assert t.reference == "Tip"


def test_add_transaction_is_immutable():
    t1 = make_tx("t1", INCOME, 100, "2025-09-01")
    transactions = (t1,)
    new_transactions = add_transaction(transactions, make_tx("t2", EXPENSE, 50, "2025-09-02"))
    assert len(new_transactions) == 2
    assert len(transactions) == 1


def test_replace_transaction_keeps_position():
    t1 = make_tx("t1", INCOME, 100, "2025-09-01")
    t2 = make_tx("t2", EXPENSE, 50, "2025-09-02")
    edited = make_tx("t1", INCOME, 120, "2025-09-01")
    result = replace_transaction((t1, t2), edited)
    assert result == (edited, t2)


def test_remove_transaction():
    t1 = make_tx("t1", INCOME, 100, "2025-09-01")
    t2 = make_tx("t2", EXPENSE, 50, "2025-09-02")
    assert remove_transaction((t1, t2), "t1") == (t2,)
    assert remove_transaction((t1, t2), "nope") == (t1, t2)
