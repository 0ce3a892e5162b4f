"""List + form controllers shared by the Income, Expenses and Purchases pages.

A view owns its row snapshot and a mode:

    Idle --start_create--> Creating --submit ok / cancel--> Idle
    Idle --start_edit(r)--> Editing(r) --submit ok / cancel--> Idle

Starting a create while editing (or the reverse) replaces the mode. A failed
submit leaves the mode untouched so the form stays open. Every successful
mutation is followed by a full re-fetch.
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional, Tuple, Union

from restobooks.domain import (
    Expense, Income, NewExpense, NewIncome, NewPurchase, Purchase,
)
from restobooks.events import (
    event_bus, EventBus, RECORD_DELETED, RECORD_SAVED, STORE_FAILED, VALIDATION_FAILED,
)
from restobooks.functional import (
    Either, Left, validate_expense, validate_income, validate_purchase,
)
from restobooks.store import EXPENSE_EMBED, EXPENSES, INCOME, PURCHASES, Table


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Creating:
    pass


@dataclass(frozen=True)
class Editing:
    record: Any


Mode = Union[Idle, Creating, Editing]
IDLE = Idle()
CREATING = Creating()


@dataclass(frozen=True)
class Notice:
    kind: str  # "success", "error" or "invalid"
    message: str


class EntityView:
    def __init__(
        self,
        table: Table,
        parse: Callable[[dict], Any],
        payload_type,
        validate: Callable[[Any], Either],
        noun: str,
        plural: str,
        bus: EventBus = event_bus,
    ):
        self.table = table
        self.parse = parse
        self.payload_type = payload_type
        self.validate = validate
        self.noun = noun
        self.plural = plural
        self.bus = bus
        self.rows: Tuple[Any, ...] = ()
        self.mode: Mode = IDLE
        self.notice: Optional[Notice] = None

    @property
    def form_open(self) -> bool:
        return not isinstance(self.mode, Idle)

    @property
    def editing(self) -> Optional[Any]:
        return self.mode.record if isinstance(self.mode, Editing) else None

    def pop_notice(self) -> Optional[Notice]:
        notice, self.notice = self.notice, None
        return notice

    def _fail(self, action: str, error: dict, message: str) -> None:
        self.notice = Notice("error", message)
        self.bus.publish(STORE_FAILED, {"table": self.table.name, "action": action, **error})

    def refresh(self) -> Either:
        result = self.table.list().map(lambda rows: tuple(self.parse(r) for r in rows))
        if result.is_left():
            self._fail("list", result.get_error(), f"Error fetching {self.plural}")
        else:
            self.rows = result.get_or_else(())
        return result

    def start_create(self) -> None:
        self.mode = CREATING

    def start_edit(self, record) -> None:
        self.mode = Editing(record)

    def cancel(self) -> None:
        self.mode = IDLE

    def form_values(self, today: date):
        if isinstance(self.mode, Editing):
            return self.payload_type.from_record(self.mode.record)
        return self.payload_type.defaults(today)

    def submit(self, payload) -> Either:
        if not self.form_open:
            checked = Left({"error": "validation_failed", "field": None, "message": "No form is open"})
        else:
            checked = self.validate(payload)
        if checked.is_left():
            error = checked.get_error()
            self.notice = Notice("invalid", error["message"])
            self.bus.publish(VALIDATION_FAILED, {"table": self.table.name, **error})
            return checked

        editing = self.editing
        if editing is not None:
            result = self.table.update_by_id(editing.id, payload)
        else:
            result = self.table.insert(payload)
        if result.is_left():
            self._fail("update" if editing else "insert", result.get_error(), f"Error saving {self.noun.lower()}")
            return result

        verb = "updated" if editing else "added"
        self.bus.publish(RECORD_SAVED, {"table": self.table.name, "id": getattr(editing, "id", None)})
        self.mode = IDLE
        self.refresh()
        if self.notice is None:
            self.notice = Notice("success", f"{self.noun} {verb} successfully")
        return result

    def delete(self, row_id: int) -> Either:
        result = self.table.delete_by_id(row_id)
        if result.is_left():
            self._fail("delete", result.get_error(), f"Error deleting {self.noun.lower()}")
            return result
        self.bus.publish(RECORD_DELETED, {"table": self.table.name, "id": row_id})
        if self.editing is not None and self.editing.id == row_id:
            self.mode = IDLE
        self.refresh()
        if self.notice is None:
            self.notice = Notice("success", f"{self.noun} deleted successfully")
        return result


class PurchaseView(EntityView):
    """Purchases also need the expense list for the selection control."""

    def __init__(self, table: Table, expenses: Table, bus: EventBus = event_bus):
        super().__init__(table, Purchase.from_row, NewPurchase, validate_purchase, "Purchase", "purchases", bus)
        self.expense_table = expenses
        self.expenses: Tuple[Expense, ...] = ()

    def load_expenses(self) -> Either:
        result = self.expense_table.list().map(lambda rows: tuple(Expense.from_row(r) for r in rows))
        if result.is_left():
            self._fail("list", result.get_error(), "Error fetching expenses")
        else:
            self.expenses = result.get_or_else(())
        return result

    def expense_label(self, expense_id: int) -> str:
        by_id = {e.id: e for e in self.expenses}
        return by_id[expense_id].label if expense_id in by_id else "Select an expense"


def income_view(store, bus: EventBus = event_bus) -> EntityView:
    return EntityView(Table(store, INCOME), Income.from_row, NewIncome, validate_income, "Income", "incomes", bus)


def expenses_view(store, bus: EventBus = event_bus) -> EntityView:
    return EntityView(Table(store, EXPENSES), Expense.from_row, NewExpense, validate_expense, "Expense", "expenses", bus)


def purchases_view(store, bus: EventBus = event_bus) -> PurchaseView:
    return PurchaseView(
        Table(store, PURCHASES, order="created_at", embed=EXPENSE_EMBED),
        Table(store, EXPENSES),
        bus,
    )
