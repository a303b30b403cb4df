import json
from typing import Tuple

from tracker.domain import TransactionRecord


def load_seed(path: str) -> Tuple[TransactionRecord, ...]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return tuple(TransactionRecord.from_dict(t) for t in data["transactions"])


def add_transaction(
    trans: Tuple[TransactionRecord, ...], t: TransactionRecord
) -> Tuple[TransactionRecord, ...]:
    return trans + (t,)


def replace_transaction(
    trans: Tuple[TransactionRecord, ...], t: TransactionRecord
) -> Tuple[TransactionRecord, ...]:
    return tuple(t if old.transaction_id == t.transaction_id else old for old in trans)


def remove_transaction(
    trans: Tuple[TransactionRecord, ...], transaction_id: str
) -> Tuple[TransactionRecord, ...]:
    return tuple(filter(lambda t: t.transaction_id != transaction_id, trans))
