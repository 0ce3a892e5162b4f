"""Access to the hosted tables.

``RestStore`` talks to a PostgREST endpoint (the REST face of a hosted
Postgres such as Supabase). ``MemoryStore`` keeps the same contract over
in-process lists and is used by the tests and for local development.

Every operation returns an ``Either``: ``Right(value)`` on success and
``Left({"error": ..., "status": ...})`` on failure. Nothing raises into the
pages.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

import httpx

from restobooks.functional import Either, Left, Right

logger = logging.getLogger(__name__)

INCOME = "income"
EXPENSES = "expenses"
PURCHASES = "purchases"


class Range(NamedTuple):
    """Inclusive bounds on one column; ``expense.date`` targets an embed."""
    column: str
    start: str
    end: str


class Embed(NamedTuple):
    alias: str
    table: str
    foreign_key: str
    inner: bool = False  # inner: drop parents with no match


EXPENSE_EMBED = Embed("expense", EXPENSES, "expense_id")
EXPENSE_INNER_EMBED = EXPENSE_EMBED._replace(inner=True)


def select_clause(columns: str = "*", embed: Optional[Embed] = None) -> str:
    clause = ",".join(c.strip() for c in columns.split(","))
    if embed:
        hint = "!inner" if embed.inner else ""
        clause += f",{embed.alias}:{embed.table}{hint}(*)"
    return clause


def query_params(
    columns: str = "*",
    ranges: Sequence[Range] = (),
    order: Optional[str] = None,
    embed: Optional[Embed] = None,
) -> List[Tuple[str, str]]:
    params = [("select", select_clause(columns, embed))]
    for r in ranges:
        params.append((r.column, f"gte.{r.start}"))
        params.append((r.column, f"lte.{r.end}"))
    if order:
        params.append(("order", f"{order}.desc"))
    return params


class RestStore:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers={"apikey": api_key, "Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings) -> "RestStore":
        return cls(settings.store_url, settings.store_api_key, settings.store_timeout)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, table: str, expect_rows: bool = False, **kwargs) -> Either[dict, Any]:
        try:
            resp = self._client.request(method, f"/{table}", **kwargs)
        except httpx.TimeoutException:
            logger.exception("Timeout on %s %s", method, table)
            return Left({"error": "Request timed out", "status": None})
        except httpx.HTTPError as e:
            logger.exception("Transport error on %s %s", method, table)
            return Left({"error": str(e), "status": None})

        if resp.status_code >= 400:
            try:
                detail = resp.json().get("message") or resp.text
            except (ValueError, AttributeError):
                detail = resp.text
            logger.error("Store returned %s for %s %s: %s", resp.status_code, method, table, detail)
            return Left({"error": detail, "status": resp.status_code})

        if not expect_rows:
            return Right(None)
        try:
            return Right(resp.json())
        except ValueError:
            logger.warning("Non-JSON response from %s: %s", table, resp.text)
            return Left({"error": "Invalid JSON from store", "status": resp.status_code})

    def select(
        self,
        table: str,
        columns: str = "*",
        ranges: Sequence[Range] = (),
        order: Optional[str] = None,
        embed: Optional[Embed] = None,
    ) -> Either[dict, List[dict]]:
        params = query_params(columns, ranges, order, embed)
        return self._request("GET", table, expect_rows=True, params=params)

    def insert(self, table: str, row: dict) -> Either[dict, None]:
        return self._request("POST", table, json=[row], headers={"Prefer": "return=minimal"})

    def update(self, table: str, row_id: int, row: dict) -> Either[dict, None]:
        return self._request("PATCH", table, params={"id": f"eq.{row_id}"}, json=row)

    def delete(self, table: str, row_id: int) -> Either[dict, None]:
        return self._request("DELETE", table, params={"id": f"eq.{row_id}"})


def load_seed(path: str) -> Dict[str, List[dict]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return {name: list(data.get(name, [])) for name in (INCOME, EXPENSES, PURCHASES)}


class MemoryStore:
    """In-process tables with the RestStore contract.

    Ids and timestamps are assigned here the way the service assigns them.
    No cascade on delete, so purchases can outlive their expense.
    """

    def __init__(self, tables: Optional[Dict[str, List[dict]]] = None, clock=None):
        self._clock = clock or (lambda: datetime.now().isoformat(timespec="seconds"))
        self._tables: Dict[str, List[dict]] = {INCOME: [], EXPENSES: [], PURCHASES: []}
        self._next_id: Dict[str, int] = {}
        for name, rows in (tables or {}).items():
            self._tables[name] = [dict(r) for r in rows]
        for name, rows in self._tables.items():
            self._next_id[name] = max((int(r["id"]) for r in rows), default=0) + 1

    @classmethod
    def from_seed(cls, path: str) -> "MemoryStore":
        return cls(load_seed(path))

    def close(self) -> None:
        pass

    def rows(self, table: str) -> List[dict]:
        return [dict(r) for r in self._tables[table]]

    def _embedded(self, row: dict, embed: Embed) -> Optional[dict]:
        ref = row.get(embed.foreign_key)
        for other in self._tables[embed.table]:
            if other["id"] == ref:
                return dict(other)
        return None

    def select(
        self,
        table: str,
        columns: str = "*",
        ranges: Sequence[Range] = (),
        order: Optional[str] = None,
        embed: Optional[Embed] = None,
    ) -> Either[dict, List[dict]]:
        if table not in self._tables:
            return Left({"error": f"relation {table!r} does not exist", "status": 404})

        out = []
        for row in self._tables[table]:
            joined = self._embedded(row, embed) if embed else None
            if embed and embed.inner and joined is None:
                continue
            if all(self._in_range(row, joined, embed, r) for r in ranges):
                out.append((row, joined))

        if order:
            out.sort(key=lambda pair: (str(pair[0].get(order, "")), pair[0]["id"]), reverse=True)

        wanted = None if columns.strip() == "*" else [c.strip() for c in columns.split(",")]
        result = []
        for row, joined in out:
            item = dict(row) if wanted is None else {c: row.get(c) for c in wanted}
            if embed:
                item[embed.alias] = joined
            result.append(item)
        return Right(result)

    @staticmethod
    def _in_range(row: dict, joined: Optional[dict], embed: Optional[Embed], r: Range) -> bool:
        source, column = row, r.column
        if "." in r.column:
            alias, column = r.column.split(".", 1)
            if not embed or alias != embed.alias or joined is None:
                return False
            source = joined
        value = source.get(column)
        if value is None:
            return False
        return r.start <= str(value) <= r.end

    def insert(self, table: str, row: dict) -> Either[dict, None]:
        if table not in self._tables:
            return Left({"error": f"relation {table!r} does not exist", "status": 404})
        now = self._clock()
        new_row = dict(row, id=self._next_id[table], created_at=now, updated_at=now)
        self._next_id[table] += 1
        self._tables[table].append(new_row)
        return Right(None)

    def update(self, table: str, row_id: int, row: dict) -> Either[dict, None]:
        if table not in self._tables:
            return Left({"error": f"relation {table!r} does not exist", "status": 404})
        for existing in self._tables[table]:
            if existing["id"] == row_id:
                existing.update(row)
                existing["updated_at"] = self._clock()
        return Right(None)

    def delete(self, table: str, row_id: int) -> Either[dict, None]:
        if table not in self._tables:
            return Left({"error": f"relation {table!r} does not exist", "status": 404})
        self._tables[table] = [r for r in self._tables[table] if r["id"] != row_id]
        return Right(None)


class Table:
    """One entity table: list / insert / update_by_id / delete_by_id."""

    def __init__(self, store, name: str, order: str = "date", embed: Optional[Embed] = None):
        self.store = store
        self.name = name
        self.order = order
        self.embed = embed

    def list(self, *ranges: Range, columns: str = "*", embed: Optional[Embed] = None) -> Either[dict, List[dict]]:
        return self.store.select(
            self.name,
            columns=columns,
            ranges=ranges,
            order=self.order,
            embed=embed or self.embed,
        )

    def insert(self, payload) -> Either[dict, None]:
        return self.store.insert(self.name, payload.to_row())

    def update_by_id(self, row_id: int, payload) -> Either[dict, None]:
        return self.store.update(self.name, row_id, payload.to_row())

    def delete_by_id(self, row_id: int) -> Either[dict, None]:
        return self.store.delete(self.name, row_id)


def open_store(settings):
    if settings.backend == "memory":
        if settings.seed_path:
            return MemoryStore.from_seed(settings.seed_path)
        return MemoryStore()
    return RestStore.from_settings(settings)
