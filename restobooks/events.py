import logging
from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

__all__ = [
    'event_bus', 'RECORD_SAVED', 'RECORD_DELETED', 'STORE_FAILED',
    'VALIDATION_FAILED', 'Event', 'EventBus',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event], None]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event], None]) -> None:
        self._subscribers.setdefault(name, [])
        if handler not in self._subscribers[name]:
            self._subscribers[name].append(handler)

    def unsubscribe(self, name: str, handler: Callable[[Event], None]) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)

    def publish(self, name: str, payload: dict) -> Event:
        event = Event(name=name, ts=datetime.now().isoformat(timespec="seconds"), payload=payload)
        for handler in list(self._subscribers.get(name, [])):
            handler(event)
        return event


RECORD_SAVED = "RECORD_SAVED"
RECORD_DELETED = "RECORD_DELETED"
STORE_FAILED = "STORE_FAILED"
VALIDATION_FAILED = "VALIDATION_FAILED"

event_bus = EventBus()


def log_handler(event: Event) -> None:
    if event.name in (STORE_FAILED, VALIDATION_FAILED):
        logger.warning("%s %s", event.name, event.payload)
    else:
        logger.info("%s %s", event.name, event.payload)


def register_default_handlers(bus: EventBus = event_bus) -> None:
    for name in (RECORD_SAVED, RECORD_DELETED, STORE_FAILED, VALIDATION_FAILED):
        bus.subscribe(name, log_handler)


register_default_handlers()
