from dataclasses import replace
from datetime import date

from restobooks.domain import (
    Expense, Income, NewExpense, NewIncome, NewPurchase, Purchase,
)


def test_income_from_row_coerces_numeric_strings():
    income = Income.from_row({
        "id": 7,
        "date": "2026-03-05",
        "total_income": "100.50",
        "cash_amount": "60",
        "credit_amount": 30,
        "other_amount": None,
        "actual_cash_received": "58.25",
        "created_at": "2026-03-05T22:00:00",
    })

    assert income.total_income == 100.5
    assert income.cash_amount == 60.0
    assert income.other_amount == 0.0
    assert income.actual_cash_received == 58.25
    assert income.updated_at == ""


def test_income_components_are_not_reconciled_with_total():
    income = Income.from_row({
        "id": 1, "date": "2026-03-05", "total_income": 100,
        "cash_amount": 10, "credit_amount": 10, "other_amount": 10, "actual_cash_received": 0,
    })

    assert income.total_income == 100
    assert income.cash_amount + income.credit_amount + income.other_amount == 30


def test_expense_missing_description_becomes_empty():
    expense = Expense.from_row({"id": 1, "date": "2026-03-05", "category": "Rent", "description": None, "amount": "500"})

    assert expense.description == ""
    assert expense.amount == 500.0
    assert expense.label == "Rent - 500.00 (2026-03-05)"


def test_purchase_line_total_is_computed_on_read():
    purchase = Purchase.from_row({"id": 1, "expense_id": 2, "item_name": "Oil", "quantity": 4, "price_per_unit": "2.5"})

    assert purchase.line_total == 10.0
    assert replace(purchase, quantity=6).line_total == 15.0
    assert replace(purchase, price_per_unit=3).line_total == 12.0


def test_purchase_embedded_expense():
    row = {
        "id": 1, "expense_id": 2, "item_name": "Oil", "quantity": 1, "price_per_unit": 5,
        "expense": {"id": 2, "date": "2026-03-06", "category": "Supplies", "description": "", "amount": 5},
    }

    assert Purchase.from_row(row).expense.category == "Supplies"
    assert Purchase.from_row(dict(row, expense=None)).expense is None


def test_payload_defaults():
    today = date(2026, 3, 10)

    income = NewIncome.defaults(today)
    assert income.date == "2026-03-10"
    assert income.total_income == 0 and income.actual_cash_received == 0

    expense = NewExpense.defaults(today)
    assert expense.date == "2026-03-10"
    assert expense.category == "" and expense.amount == 0

    purchase = NewPurchase.defaults(today)
    assert purchase.quantity == 1
    assert purchase.expense_id == 0


def test_payload_rows_carry_only_client_fields():
    income = Income.from_row({
        "id": 3, "date": "2026-03-05", "total_income": 100, "cash_amount": 60, "credit_amount": 30,
        "other_amount": 10, "actual_cash_received": 58, "created_at": "x", "updated_at": "y",
    })
    row = NewIncome.from_record(income).to_row()

    assert row == {
        "date": "2026-03-05", "total_income": 100, "cash_amount": 60, "credit_amount": 30,
        "other_amount": 10, "actual_cash_received": 58,
    }

    purchase = Purchase.from_row({"id": 9, "expense_id": 2, "item_name": "Oil", "quantity": 4, "price_per_unit": 2.5})
    assert set(NewPurchase.from_record(purchase).to_row()) == {"expense_id", "item_name", "quantity", "price_per_unit"}
    assert "line_total" not in NewPurchase.from_record(purchase).to_row()
