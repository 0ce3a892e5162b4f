import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Tuple

import pandas as pd

from restobooks.domain import Expense, Income, Purchase
from restobooks.functional import Either, sequence
from restobooks.store import (
    EXPENSE_INNER_EMBED, EXPENSES, INCOME, PURCHASES, Range, Table,
)
from restobooks.transforms import (
    DashboardStats, ReportData, daily_totals, dashboard_stats, report_data,
)

logger = logging.getLogger(__name__)


def month_window(today: date) -> Tuple[str, str]:
    """First day of the current month through today."""
    return today.replace(day=1).isoformat(), today.isoformat()


async def _fetch(table: Table, parse, *ranges: Range, **kwargs) -> Either[dict, Tuple[Any, ...]]:
    result = await asyncio.to_thread(table.list, *ranges, **kwargs)
    return result.map(lambda rows: tuple(parse(r) for r in rows))


@dataclass(frozen=True)
class Dashboard:
    start: str
    end: str
    stats: DashboardStats
    daily: pd.DataFrame


class DashboardService:
    """Month-to-date totals from three independent queries.

    Purchases are windowed by their own ``created_at``, unlike reports.
    """

    def __init__(self, store):
        self.income = Table(store, INCOME)
        self.expenses = Table(store, EXPENSES)
        self.purchases = Table(store, PURCHASES, order="created_at")

    async def load(self, today: date) -> Either[dict, Dashboard]:
        start, end = month_window(today)
        results = await asyncio.gather(
            _fetch(self.income, Income.from_row, Range("date", start, end), columns="id,date,total_income"),
            _fetch(self.expenses, Expense.from_row, Range("date", start, end), columns="id,date,amount"),
            _fetch(
                self.purchases,
                Purchase.from_row,
                Range("created_at", start, f"{end}T23:59:59"),
                columns="id,quantity,price_per_unit,created_at",
            ),
        )

        def build(rows) -> Dashboard:
            incomes, expenses, purchases = rows
            return Dashboard(
                start=start,
                end=end,
                stats=dashboard_stats(incomes, expenses, purchases),
                daily=daily_totals(incomes, expenses, start, end),
            )

        outcome = sequence(results).map(build)
        if outcome.is_left():
            logger.error("Dashboard load failed: %s", outcome.get_error())
        return outcome

    def load_sync(self, today: date) -> Either[dict, Dashboard]:
        return asyncio.run(self.load(today))


class ReportService:
    """Totals for a user-chosen inclusive window.

    Purchases are windowed by the date of the expense they belong to, so a
    purchase whose expense was deleted never appears in a report.
    """

    def __init__(self, store):
        self.income = Table(store, INCOME)
        self.expenses = Table(store, EXPENSES)
        self.purchases = Table(store, PURCHASES, order="created_at")

    async def generate(self, start: str, end: str) -> Either[dict, ReportData]:
        results = await asyncio.gather(
            _fetch(self.income, Income.from_row, Range("date", start, end)),
            _fetch(self.expenses, Expense.from_row, Range("date", start, end)),
            _fetch(
                self.purchases,
                Purchase.from_row,
                Range("expense.date", start, end),
                embed=EXPENSE_INNER_EMBED,
            ),
        )
        outcome = sequence(results).map(lambda rows: report_data(*rows))
        if outcome.is_left():
            logger.error("Report %s..%s failed: %s", start, end, outcome.get_error())
        return outcome

    def generate_sync(self, start: str, end: str) -> Either[dict, ReportData]:
        return asyncio.run(self.generate(start, end))
