"""In-memory stand-in for the async Supabase query builder."""

from typing import Any, Optional
from postgrest.exceptions import APIError


BASE_COLUMNS = {"id", "title", "completed", "created_at", "due", "priority"}


def missing_column_error(table: str, column: str) -> APIError:
    return APIError({
        "message": f"column {table}.{column} does not exist",
        "code": "42703",
        "hint": None,
        "details": None,
    })


class FakeResponse:
    def __init__(self, data: list[dict]):
        self.data = data
        self.count = None


class FakeQuery:
    """Chainable query mirroring the postgrest builder methods used by the app."""

    def __init__(self, table: "FakeTable"):
        self._table = table
        self.op = "select"
        self.columns: Optional[str] = None
        self.payload: Optional[dict] = None
        self.filters: list[tuple[str, Any]] = []
        self.order_by: Optional[tuple[str, bool]] = None
        self.row_limit: Optional[int] = None

    def select(self, columns: str = "*"):
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, payload: dict):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict):
        self.op = "update"
        self.payload = payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self.order_by = (column, desc)
        return self

    def limit(self, size: int):
        self.row_limit = size
        return self

    async def execute(self) -> FakeResponse:
        return self._table.run(self)


class FakeTable:
    def __init__(self, name: str, has_step: bool = True):
        self.name = name
        self.columns = set(BASE_COLUMNS) | ({"step"} if has_step else set())
        self.rows: list[dict] = []
        self.queries: list[FakeQuery] = []
        self.failure: Optional[Exception] = None

    def _check_columns(self, columns) -> None:
        for column in columns:
            if column not in self.columns:
                raise missing_column_error(self.name, column)

    def _matches(self, row: dict, filters) -> bool:
        return all(row.get(column) == value for column, value in filters)

    def _project(self, row: dict, columns: Optional[str]) -> dict:
        if not columns or columns == "*":
            return dict(row)
        return {column: row.get(column) for column in columns.split(",")}

    def run(self, query: FakeQuery) -> FakeResponse:
        self.queries.append(query)
        if self.failure is not None:
            raise self.failure

        self._check_columns(column for column, _ in query.filters)

        if query.op == "select":
            if query.columns and query.columns != "*":
                self._check_columns(query.columns.split(","))
            rows = [r for r in self.rows if self._matches(r, query.filters)]
            if query.order_by:
                column, desc = query.order_by
                rows.sort(key=lambda r: r[column], reverse=desc)
            if query.row_limit is not None:
                rows = rows[:query.row_limit]
            return FakeResponse([self._project(r, query.columns) for r in rows])

        if query.op == "insert":
            self._check_columns(query.payload)
            if any(r["id"] == query.payload["id"] for r in self.rows):
                raise APIError({
                    "message": "duplicate key value violates unique constraint \"todos_pkey\"",
                    "code": "23505",
                    "hint": None,
                    "details": None,
                })
            row = {column: None for column in self.columns}
            row.update(query.payload)
            self.rows.append(row)
            return FakeResponse([dict(row)])

        if query.op == "update":
            self._check_columns(query.payload)
            updated = []
            for row in self.rows:
                if self._matches(row, query.filters):
                    row.update(query.payload)
                    updated.append(dict(row))
            return FakeResponse(updated)

        if query.op == "delete":
            removed = [r for r in self.rows if self._matches(r, query.filters)]
            self.rows = [r for r in self.rows if not self._matches(r, query.filters)]
            return FakeResponse(removed)

        raise AssertionError(f"unsupported operation {query.op}")


class FakeSupabaseClient:
    """Async client exposing `.table(name)` like supabase.AsyncClient."""

    def __init__(self, has_step: bool = True, table: str = "todos"):
        self.tables = {table: FakeTable(table, has_step=has_step)}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.tables[name])

    @property
    def todos(self) -> FakeTable:
        return self.tables["todos"]
