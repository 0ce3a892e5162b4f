from dataclasses import dataclass, asdict
from datetime import date
from typing import Optional


def _num(value) -> float:
    # numeric columns arrive as numbers or strings
    if value is None or value == "":
        return 0.0
    return float(value)


@dataclass(frozen=True)
class Income:
    id: int
    date: str
    total_income: float
    cash_amount: float
    credit_amount: float
    other_amount: float
    actual_cash_received: float  # counted in the till
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "Income":
        return cls(
            id=int(row["id"]),
            date=row["date"],
            total_income=_num(row.get("total_income")),
            cash_amount=_num(row.get("cash_amount")),
            credit_amount=_num(row.get("credit_amount")),
            other_amount=_num(row.get("other_amount")),
            actual_cash_received=_num(row.get("actual_cash_received")),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass(frozen=True)
class Expense:
    id: int
    date: str
    category: str
    description: str
    amount: float
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "Expense":
        return cls(
            id=int(row["id"]),
            date=row["date"],
            category=row.get("category") or "",
            description=row.get("description") or "",
            amount=_num(row.get("amount")),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )

    @property
    def label(self) -> str:
        return f"{self.category} - {self.amount:.2f} ({self.date})"


@dataclass(frozen=True)
class Purchase:
    id: int
    expense_id: int
    item_name: str
    quantity: int
    price_per_unit: float
    created_at: str = ""
    updated_at: str = ""
    expense: Optional[Expense] = None  # embedded on read, None when orphaned

    @classmethod
    def from_row(cls, row: dict) -> "Purchase":
        embedded = row.get("expense")
        return cls(
            id=int(row["id"]),
            expense_id=int(row.get("expense_id") or 0),
            item_name=row.get("item_name") or "",
            quantity=int(row.get("quantity") or 0),
            price_per_unit=_num(row.get("price_per_unit")),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
            expense=Expense.from_row(embedded) if embedded else None,
        )

    @property
    def line_total(self) -> float:
        return self.quantity * self.price_per_unit


# Creation payloads: only the fields a client may set.

@dataclass(frozen=True)
class NewIncome:
    date: str
    total_income: float = 0.0
    cash_amount: float = 0.0
    credit_amount: float = 0.0
    other_amount: float = 0.0
    actual_cash_received: float = 0.0

    @classmethod
    def defaults(cls, today: date) -> "NewIncome":
        return cls(date=today.isoformat())

    @classmethod
    def from_record(cls, income: Income) -> "NewIncome":
        return cls(
            date=income.date,
            total_income=income.total_income,
            cash_amount=income.cash_amount,
            credit_amount=income.credit_amount,
            other_amount=income.other_amount,
            actual_cash_received=income.actual_cash_received,
        )

    def to_row(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class NewExpense:
    date: str
    category: str = ""
    description: str = ""
    amount: float = 0.0

    @classmethod
    def defaults(cls, today: date) -> "NewExpense":
        return cls(date=today.isoformat())

    @classmethod
    def from_record(cls, expense: Expense) -> "NewExpense":
        return cls(
            date=expense.date,
            category=expense.category,
            description=expense.description,
            amount=expense.amount,
        )

    def to_row(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class NewPurchase:
    expense_id: int = 0  # 0 means no expense selected
    item_name: str = ""
    quantity: int = 1
    price_per_unit: float = 0.0

    @classmethod
    def defaults(cls, today: date) -> "NewPurchase":
        return cls()

    @classmethod
    def from_record(cls, purchase: Purchase) -> "NewPurchase":
        return cls(
            expense_id=purchase.expense_id,
            item_name=purchase.item_name,
            quantity=purchase.quantity,
            price_per_unit=purchase.price_per_unit,
        )

    @property
    def line_total(self) -> float:
        return self.quantity * self.price_per_unit

    def to_row(self) -> dict:
        return asdict(self)
