import pytest

from restobooks.events import EventBus
from restobooks.functional import Left
from restobooks.store import MemoryStore

# Two days in March with expenses summing to 120 and purchases (through
# those expenses) summing to 45; one February expense with a purchase that
# was entered in March.
INCOME_ROWS = [
    {"id": 1, "date": "2026-03-05", "total_income": 100, "cash_amount": 60, "credit_amount": 30,
     "other_amount": 10, "actual_cash_received": 58},
    {"id": 2, "date": "2026-03-06", "total_income": 200, "cash_amount": 150, "credit_amount": 50,
     "other_amount": 0, "actual_cash_received": 149},
]
EXPENSE_ROWS = [
    {"id": 1, "date": "2026-03-05", "category": "Supplies", "description": "Market run", "amount": 80},
    {"id": 2, "date": "2026-03-06", "category": "Utilities", "description": "", "amount": 40},
    {"id": 3, "date": "2026-02-20", "category": "Rent", "description": "February", "amount": 500},
]
PURCHASE_ROWS = [
    {"id": 1, "expense_id": 1, "item_name": "Tomatoes", "quantity": 3, "price_per_unit": 10,
     "created_at": "2026-02-28T10:00:00"},
    {"id": 2, "expense_id": 2, "item_name": "Light bulbs", "quantity": 5, "price_per_unit": 3,
     "created_at": "2026-03-06T12:00:00"},
    {"id": 3, "expense_id": 3, "item_name": "Keys", "quantity": 1, "price_per_unit": 99,
     "created_at": "2026-03-07T09:00:00"},
]


def make_store() -> MemoryStore:
    return MemoryStore(
        {"income": INCOME_ROWS, "expenses": EXPENSE_ROWS, "purchases": PURCHASE_ROWS},
        clock=lambda: "2026-03-10T12:00:00",
    )


class RecordingStore:
    """Wraps a store, records every call and fails the operations in ``fail``."""

    def __init__(self, inner, fail=()):
        self.inner = inner
        self.fail = set(fail)
        self.calls = []

    def _call(self, op, table, *args, **kwargs):
        self.calls.append((op, table))
        if op in self.fail:
            return Left({"error": "service unavailable", "status": 503})
        return getattr(self.inner, op)(table, *args, **kwargs)

    def select(self, table, *args, **kwargs):
        return self._call("select", table, *args, **kwargs)

    def insert(self, table, row):
        return self._call("insert", table, row)

    def update(self, table, row_id, row):
        return self._call("update", table, row_id, row)

    def delete(self, table, row_id):
        return self._call("delete", table, row_id)


@pytest.fixture
def store():
    return make_store()


@pytest.fixture
def empty_store():
    return MemoryStore()


@pytest.fixture
def recording(store):
    return RecordingStore(store)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def captured(bus):
    events = []

    def handler(event):
        events.append(event)

    from restobooks.events import RECORD_DELETED, RECORD_SAVED, STORE_FAILED, VALIDATION_FAILED
    for name in (RECORD_SAVED, RECORD_DELETED, STORE_FAILED, VALIDATION_FAILED):
        bus.subscribe(name, handler)
    return events
