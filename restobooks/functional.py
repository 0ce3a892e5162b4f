from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Callable, Iterable
from restobooks.domain import NewExpense, NewIncome, NewPurchase

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Either(Generic[E, T], ABC):
    """Outcome of a store call or a validation: Right(value) or Left(error)."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Generic[E, T], Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Generic[E, T], Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def sequence(results: Iterable[Either]) -> Either:
    """Collect Right values into a tuple, or return the first Left."""
    values = []
    for r in results:
        if r.is_left():
            return r
        values.append(r.get_or_else(None))
    return Right(tuple(values))


def _invalid(field: str, message: str) -> Left:
    return Left({"error": "validation_failed", "field": field, "message": message})


def validate_income(payload: NewIncome) -> Either[dict, NewIncome]:
    # breakdown vs total is deliberately not reconciled
    if not payload.date:
        return _invalid("date", "Date is required")
    return Right(payload)


def validate_expense(payload: NewExpense) -> Either[dict, NewExpense]:
    if not payload.date:
        return _invalid("date", "Date is required")
    if not payload.category.strip():
        return _invalid("category", "Category is required")
    return Right(payload)


def validate_purchase(payload: NewPurchase) -> Either[dict, NewPurchase]:
    if payload.expense_id <= 0:
        return _invalid("expense_id", "Please select an expense")
    if not payload.item_name.strip():
        return _invalid("item_name", "Item name is required")
    if payload.quantity < 1:
        return _invalid("quantity", "Quantity must be at least 1")
    return Right(payload)
