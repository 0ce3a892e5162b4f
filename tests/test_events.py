import logging

from restobooks.events import (
    RECORD_SAVED, STORE_FAILED, EventBus, log_handler, register_default_handlers,
)


def test_publish_reaches_subscribers_once():
    bus = EventBus()
    seen = []

    def handler(event):
        seen.append(event.payload)

    bus.subscribe(RECORD_SAVED, handler)
    bus.subscribe(RECORD_SAVED, handler)
    event = bus.publish(RECORD_SAVED, {"table": "income", "id": 1})

    assert seen == [{"table": "income", "id": 1}]
    assert event.name == RECORD_SAVED


def test_unsubscribe():
    bus = EventBus()
    seen = []
    bus.subscribe(STORE_FAILED, seen.append)
    bus.unsubscribe(STORE_FAILED, seen.append)

    bus.publish(STORE_FAILED, {})

    assert seen == []


def test_publish_without_subscribers():
    assert EventBus().publish("UNKNOWN", {"a": 1}).payload == {"a": 1}


def test_default_handler_logs_failures_as_warnings(caplog):
    bus = EventBus()
    register_default_handlers(bus)

    with caplog.at_level(logging.INFO, logger="restobooks.events"):
        bus.publish(STORE_FAILED, {"table": "income", "status": 503})
        bus.publish(RECORD_SAVED, {"table": "income", "id": 2})

    levels = [(r.levelno, r.getMessage().split()[0]) for r in caplog.records]
    assert (logging.WARNING, STORE_FAILED) in levels
    assert (logging.INFO, RECORD_SAVED) in levels
    assert log_handler in bus._subscribers[RECORD_SAVED]
