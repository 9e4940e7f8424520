"""In-memory CRMStore used by tests and local runs without Supabase."""

import copy
from datetime import datetime, timezone
from typing import Any, Optional
from ulid import ULID
from realty_crm.services.store import CRMStore, BUYER_GROUPS_TABLE


def generate_id() -> str:
    """Generate a text ID (ULID format)."""
    return str(ULID())


def _matches(row: dict, match: Optional[dict[str, Any]]) -> bool:
    return all(row.get(column) == value for column, value in (match or {}).items())


def _sort_key(value: Any) -> tuple:
    # None sorts as the largest value, as Postgres does by default
    if value is None:
        return (1, "")
    if isinstance(value, str):
        return (0, value.lower())
    return (0, value)


class InMemoryStore(CRMStore):
    """Rows kept per table in insertion order; ids and timestamps assigned on insert."""

    def __init__(self, tables: Optional[dict[str, list[dict]]] = None):
        self.tables: dict[str, list[dict]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.calls: list[tuple[str, str]] = []

    def _table(self, table: str) -> list[dict]:
        return self.tables.setdefault(table, [])

    async def select(
        self,
        table: str,
        match: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        ilike: Optional[tuple[str, str]] = None,
    ) -> list[dict]:
        self.calls.append(("select", table))
        rows = [row for row in self._table(table) if _matches(row, match)]
        if ilike:
            column, term = ilike
            rows = [row for row in rows if term.lower() in str(row.get(column) or "").lower()]
        if order_by:
            rows = sorted(rows, key=lambda row: _sort_key(row.get(order_by)), reverse=descending)
        return copy.deepcopy(rows)

    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        self.calls.append(("insert", table))
        now = datetime.now(timezone.utc).isoformat()
        stored = []
        for row in rows:
            record = dict(row)
            if table != BUYER_GROUPS_TABLE:
                record.setdefault("id", generate_id())
                record.setdefault("created_at", now)
                record.setdefault("updated_at", now)
            stored.append(record)
        self._table(table).extend(stored)
        return copy.deepcopy(stored)

    async def update(self, table: str, values: dict[str, Any], match: dict[str, Any]) -> list[dict]:
        self.calls.append(("update", table))
        updated = []
        for row in self._table(table):
            if _matches(row, match):
                row.update(values)
                updated.append(row)
        return copy.deepcopy(updated)

    async def delete(self, table: str, match: dict[str, Any]) -> None:
        self.calls.append(("delete", table))
        self.tables[table] = [row for row in self._table(table) if not _matches(row, match)]
