from pathlib import Path

from restobooks.store import (
    EXPENSE_EMBED, EXPENSE_INNER_EMBED, MemoryStore, Range,
)

SEED = Path(__file__).resolve().parent.parent / "data" / "seed.json"


def ids(result):
    return [r["id"] for r in result.get_or_else([])]


def test_range_is_inclusive_on_both_ends(store):
    result = store.select("expenses", ranges=[Range("date", "2026-03-05", "2026-03-06")], order="date")

    assert ids(result) == [2, 1]


def test_order_is_descending(store):
    assert ids(store.select("expenses", order="date")) == [2, 1, 3]
    assert ids(store.select("purchases", order="created_at")) == [3, 2, 1]


def test_column_projection(store):
    rows = store.select("income", columns="id, total_income").get_or_else([])

    assert rows[0] == {"id": 1, "total_income": 100}


def test_inner_embed_filters_on_joined_date(store):
    result = store.select(
        "purchases",
        ranges=[Range("expense.date", "2026-03-01", "2026-03-31")],
        embed=EXPENSE_INNER_EMBED,
    )

    rows = result.get_or_else([])
    assert sorted(r["id"] for r in rows) == [1, 2]
    assert {r["expense"]["category"] for r in rows} == {"Supplies", "Utilities"}


def test_deleting_expense_does_not_cascade(store):
    store.delete("expenses", 1)

    rows = store.select("purchases", embed=EXPENSE_EMBED).get_or_else([])
    orphan = next(r for r in rows if r["id"] == 1)
    assert orphan["expense"] is None

    inner = store.select("purchases", embed=EXPENSE_INNER_EMBED).get_or_else([])
    assert 1 not in [r["id"] for r in inner]


def test_insert_assigns_id_and_timestamps(store):
    store.insert("expenses", {"date": "2026-03-09", "category": "Fish", "description": "", "amount": 12})

    row = store.rows("expenses")[-1]
    assert row["id"] == 4
    assert row["created_at"] == row["updated_at"] == "2026-03-10T12:00:00"


def test_update_by_id_touches_only_that_row(store):
    store.update("income", 2, {"total_income": 250})

    rows = {r["id"]: r for r in store.rows("income")}
    assert rows[2]["total_income"] == 250
    assert rows[2]["updated_at"] == "2026-03-10T12:00:00"
    assert rows[1]["total_income"] == 100


def test_unknown_table_is_left(store):
    assert store.select("payroll").get_error()["status"] == 404
    assert store.insert("payroll", {}).is_left()


def test_from_seed_file():
    seeded = MemoryStore.from_seed(str(SEED))

    assert len(seeded.rows("income")) == 3
    assert seeded.select("purchases", embed=EXPENSE_EMBED).get_or_else([])[0]["expense"] is not None
    seeded.insert("income", {"date": "2026-10-04", "total_income": 1})
    assert seeded.rows("income")[-1]["id"] == 4
