# tests/fakes.py

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Callable

from postgrest.exceptions import APIError

UNIQUE_COLUMNS = {"users": ("email",)}
UUID_COLUMNS = ("id",)


class FakeQuery:
    """
    Subset of the postgrest query builder used by the services:
    select/insert/update/delete with eq, neq, in_, contains, order, limit.
    """

    def __init__(self, db: FakeSupabase, table: str, op: str, payload: Any = None,
                 columns: str = "*", count: str | None = None) -> None:
        self.db = db
        self.table = table
        self.op = op
        self.payload = payload
        self.columns = columns
        self.count = count
        self.filters: list[Callable[[dict], bool]] = []
        self.order_by: tuple[str, bool] | None = None
        self.row_limit: int | None = None
        self.error: APIError | None = None

    def _cast(self, column: str, values: list) -> None:
        # Postgres refuses to compare a uuid column with a non-uuid literal
        if column not in UUID_COLUMNS:
            return
        for value in values:
            try:
                uuid.UUID(str(value))
            except ValueError:
                self.error = APIError({
                    "code": "22P02",
                    "message": f'invalid input syntax for type uuid: "{value}"',
                })

    def eq(self, column: str, value: Any) -> FakeQuery:
        self._cast(column, [value])
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value: Any) -> FakeQuery:
        self._cast(column, [value])
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column: str, values: list) -> FakeQuery:
        self._cast(column, values)
        wanted = set(values)
        self.filters.append(lambda row: row.get(column) in wanted)
        return self

    def contains(self, column: str, values: list) -> FakeQuery:
        wanted = set(values)
        self.filters.append(lambda row: wanted <= set(row.get(column) or []))
        return self

    def order(self, column: str, desc: bool = False) -> FakeQuery:
        self.order_by = (column, desc)
        return self

    def limit(self, size: int) -> FakeQuery:
        self.row_limit = size
        return self

    def _project(self, row: dict) -> dict:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [name.strip() for name in self.columns.split(",")]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def _matches(self) -> list[dict]:
        return [row for row in self.db.rows(self.table) if all(f(row) for f in self.filters)]

    def execute(self) -> SimpleNamespace:
        self.db.calls.append((self.table, self.op))
        if self.error is not None:
            raise self.error
        if self.op == "insert":
            return SimpleNamespace(data=self._insert(), count=None)
        if self.op == "update":
            return SimpleNamespace(data=self._update(), count=None)
        if self.op == "delete":
            rows = self._matches()
            self.db.tables[self.table] = [r for r in self.db.tables[self.table] if r not in rows]
            return SimpleNamespace(data=copy.deepcopy(rows), count=None)

        rows = self._matches()
        total = len(rows)
        if self.order_by:
            column, desc = self.order_by
            rows = sorted(rows, key=lambda row: row.get(column) or "", reverse=desc)
        if self.row_limit is not None:
            rows = rows[: self.row_limit]
        return SimpleNamespace(
            data=[self._project(row) for row in rows],
            count=total if self.count else None,
        )

    def _check_unique(self, row: dict, ignore: dict | None = None) -> None:
        for column in UNIQUE_COLUMNS.get(self.table, ()):
            for other in self.db.tables.setdefault(self.table, []):
                if other is not ignore and other.get(column) == row.get(column):
                    raise APIError({
                        "code": "23505",
                        "message": f'duplicate key value violates unique constraint "{self.table}_{column}_key"',
                    })

    def _insert(self) -> list[dict]:
        payloads = self.payload if isinstance(self.payload, list) else [self.payload]
        inserted = []
        for payload in payloads:
            row = copy.deepcopy(payload)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", self.db.tick())
            row.setdefault("updated_at", None)
            self._check_unique(row)
            self.db.tables.setdefault(self.table, []).append(row)
            inserted.append(copy.deepcopy(row))
        return inserted

    def _update(self) -> list[dict]:
        updated = []
        for row in self._matches():
            candidate = {**row, **copy.deepcopy(self.payload)}
            self._check_unique(candidate, ignore=row)
            row.update(copy.deepcopy(self.payload))
            updated.append(copy.deepcopy(row))
        return updated


def _task_export_rows(db: FakeSupabase) -> list[dict]:
    users = {user["id"]: user for user in db.tables["users"]}
    return [
        {**task, "assignees": [
            {"id": user_id, "name": users[user_id]["name"], "email": users[user_id]["email"]}
            for user_id in task.get("assigned_to") or []
            if user_id in users
        ]}
        for task in db.tables["tasks"]
    ]


def _user_task_counts(db: FakeSupabase) -> list[dict]:
    rows = []
    for user in db.tables["users"]:
        assigned = [task for task in db.tables["tasks"] if user["id"] in (task.get("assigned_to") or [])]
        row = {key: value for key, value in user.items() if key != "password_hash"}
        row["total_tasks"] = len(assigned)
        for status in ("pending", "in_progress", "completed"):
            row[f"{status}_tasks"] = sum(1 for task in assigned if task.get("status") == status)
        rows.append(row)
    return rows


# Read-only views, recomputed from the tables on every select
VIEWS: dict[str, Callable[[FakeSupabase], list[dict]]] = {
    "task_export_rows": _task_export_rows,
    "user_task_counts": _user_task_counts,
}


class FakeTable:
    def __init__(self, db: FakeSupabase, name: str) -> None:
        self.db = db
        self.name = name

    def select(self, columns: str = "*", count: str | None = None) -> FakeQuery:
        return FakeQuery(self.db, self.name, "select", columns=columns, count=count)

    def insert(self, payload: Any) -> FakeQuery:
        return FakeQuery(self.db, self.name, "insert", payload=payload)

    def update(self, payload: dict) -> FakeQuery:
        return FakeQuery(self.db, self.name, "update", payload=payload)

    def delete(self) -> FakeQuery:
        return FakeQuery(self.db, self.name, "delete")


class FakeSupabase:
    """
    In-memory stand-in for the Supabase client's table API.
    Views from app/modules/reports/models.py are computed from the tables.

    created_at values come from a deterministic clock that advances one
    second per insert, so "newest first" ordering is stable in tests.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict]] = {"users": [], "tasks": []}
        self.calls: list[tuple[str, str]] = []
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def rows(self, name: str) -> list[dict]:
        if name in VIEWS:
            return VIEWS[name](self)
        return self.tables.setdefault(name, [])

    def tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def table(self, name: str) -> FakeTable:
        return FakeTable(self, name)
