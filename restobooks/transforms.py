from dataclasses import dataclass
from functools import reduce
from typing import Iterable, Tuple

import pandas as pd

from restobooks.domain import Expense, Income, Purchase


@dataclass(frozen=True)
class IncomeBreakdown:
    cash: float = 0.0
    credit: float = 0.0
    other: float = 0.0
    actual_cash: float = 0.0


@dataclass(frozen=True)
class DashboardStats:
    total_income: float = 0.0
    total_expenses: float = 0.0
    total_purchases: float = 0.0
    net_profit: float = 0.0


@dataclass(frozen=True)
class ReportData:
    total_income: float
    total_expenses: float
    total_purchases: float
    cash_after_expenses: float
    surplus_deficit: float
    income_breakdown: IncomeBreakdown


def total_income(incomes: Iterable[Income]) -> float:
    return reduce(lambda acc, i: acc + i.total_income, incomes, 0.0)


def total_expenses(expenses: Iterable[Expense]) -> float:
    return reduce(lambda acc, e: acc + e.amount, expenses, 0.0)


def total_purchases(purchases: Iterable[Purchase]) -> float:
    return reduce(lambda acc, p: acc + p.line_total, purchases, 0.0)


def income_breakdown(incomes: Iterable[Income]) -> IncomeBreakdown:
    return reduce(
        lambda acc, i: IncomeBreakdown(
            cash=acc.cash + i.cash_amount,
            credit=acc.credit + i.credit_amount,
            other=acc.other + i.other_amount,
            actual_cash=acc.actual_cash + i.actual_cash_received,
        ),
        incomes,
        IncomeBreakdown(),
    )


def dashboard_stats(
    incomes: Tuple[Income, ...], expenses: Tuple[Expense, ...], purchases: Tuple[Purchase, ...]
) -> DashboardStats:
    inc = total_income(incomes)
    exp = total_expenses(expenses)
    return DashboardStats(
        total_income=inc,
        total_expenses=exp,
        total_purchases=total_purchases(purchases),
        net_profit=inc - exp,
    )


def report_data(
    incomes: Tuple[Income, ...], expenses: Tuple[Expense, ...], purchases: Tuple[Purchase, ...]
) -> ReportData:
    inc = total_income(incomes)
    exp = total_expenses(expenses)
    breakdown = income_breakdown(incomes)
    return ReportData(
        total_income=inc,
        total_expenses=exp,
        total_purchases=total_purchases(purchases),
        cash_after_expenses=breakdown.actual_cash - exp,
        surplus_deficit=inc - exp,
        income_breakdown=breakdown,
    )


def fmt_number(value: float) -> str:
    """Shortest text for a figure: 300 stays 300, 12.5 stays 12.5."""
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def report_csv(report: ReportData, start: str, end: str) -> str:
    b = report.income_breakdown
    lines = [
        "Restaurant Income Report",
        f"Date Range: {start} to {end}",
        "",
        "Summary:",
        f"Total Income,{fmt_number(report.total_income)}",
        f"Total Expenses,{fmt_number(report.total_expenses)}",
        f"Total Purchases,{fmt_number(report.total_purchases)}",
        f"Cash After Expenses,{fmt_number(report.cash_after_expenses)}",
        f"Surplus/Deficit,{fmt_number(report.surplus_deficit)}",
        "",
        "Income Breakdown:",
        f"Cash Amount,{fmt_number(b.cash)}",
        f"Credit Amount,{fmt_number(b.credit)}",
        f"Other Amount,{fmt_number(b.other)}",
        f"Actual Cash Received,{fmt_number(b.actual_cash)}",
    ]
    return "\n".join(lines)


def report_filename(start: str, end: str) -> str:
    return f"restaurant-report-{start}-to-{end}.csv"


def daily_totals(
    incomes: Iterable[Income], expenses: Iterable[Expense], start: str, end: str
) -> pd.DataFrame:
    """Income and expenses per day over [start, end], zero-filled."""
    incomes, expenses = tuple(incomes), tuple(expenses)
    days = pd.date_range(start=start, end=end, freq="D")
    inc = pd.Series(
        [i.total_income for i in incomes],
        index=pd.to_datetime([i.date for i in incomes]),
        dtype="float64",
    )
    exp = pd.Series(
        [e.amount for e in expenses],
        index=pd.to_datetime([e.date for e in expenses]),
        dtype="float64",
    )
    return pd.DataFrame({
        "income": inc.groupby(level=0).sum().reindex(days, fill_value=0.0),
        "expenses": exp.groupby(level=0).sum().reindex(days, fill_value=0.0),
    })


INCOME_COLUMNS = ["Date", "Total Income", "Cash", "Credit", "Other", "Actual Cash"]
EXPENSE_COLUMNS = ["Date", "Category", "Amount", "Description"]
PURCHASE_COLUMNS = ["Item", "Quantity", "Price/Unit", "Total", "Expense"]


def income_frame(incomes: Iterable[Income]) -> pd.DataFrame:
    rows = [
        (i.date, i.total_income, i.cash_amount, i.credit_amount, i.other_amount, i.actual_cash_received)
        for i in incomes
    ]
    return pd.DataFrame(rows, columns=INCOME_COLUMNS)


def expenses_frame(expenses: Iterable[Expense]) -> pd.DataFrame:
    rows = [(e.date, e.category, e.amount, e.description or "N/A") for e in expenses]
    return pd.DataFrame(rows, columns=EXPENSE_COLUMNS)


def purchases_frame(purchases: Iterable[Purchase]) -> pd.DataFrame:
    """One row per purchase; orphaned purchases show N/A for the expense."""
    rows = [
        (p.item_name, p.quantity, p.price_per_unit, p.line_total, p.expense.category if p.expense else "N/A")
        for p in purchases
    ]
    return pd.DataFrame(rows, columns=PURCHASE_COLUMNS)
