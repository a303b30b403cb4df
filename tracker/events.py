from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'event_bus', 'TRANSACTION_ADDED', 'TRANSACTION_UPDATED', 'TRANSACTION_DELETED',
    'MUTATION_EVENTS', 'Event', 'EventBus', 'refresh_snapshot_handler',
]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in self._subscribers[name]]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


TRANSACTION_ADDED = "TRANSACTION_ADDED"
TRANSACTION_UPDATED = "TRANSACTION_UPDATED"
TRANSACTION_DELETED = "TRANSACTION_DELETED"
MUTATION_EVENTS = (TRANSACTION_ADDED, TRANSACTION_UPDATED, TRANSACTION_DELETED)

event_bus = EventBus()


def refresh_snapshot_handler(event: Event, payload: dict) -> dict:
    """An acknowledged mutation makes the current snapshot stale."""
    if payload.get("success", True):
        return {"refetch": True, "transaction_id": payload.get("transaction_id")}
    return {}


def register_default_handlers(bus: EventBus = event_bus) -> None:
    for name in MUTATION_EVENTS:
        bus.subscribe(name, refresh_snapshot_handler)


register_default_handlers()
