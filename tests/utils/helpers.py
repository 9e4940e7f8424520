"""Test helper functions."""

import csv
import io
import json
from typing import Any, Dict, Optional

from realty_crm.services.memory_store import InMemoryStore
from realty_crm.utils.errors import StoreError


def rows_to_csv(rows: list[dict], delimiter: str = ",") -> str:
    """Render dict rows as CSV text with a header row."""
    if not rows:
        return ""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0]), delimiter=delimiter)
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def create_vercel_request(
    method: str = "GET",
    path: str = "/api/buyers",
    body: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Create a Vercel request object for testing."""
    return {
        "method": method,
        "path": path,
        "headers": headers or {"content-type": "application/json"},
        "body": json.dumps(body) if isinstance(body, dict) else body,
        "query": query or {},
    }


class FailingInsertStore(InMemoryStore):
    """In-memory store whose Nth insert into a table raises StoreError."""

    def __init__(self, fail_on: int, table: str = "buyers", message: str = "duplicate key value violates unique constraint"):
        super().__init__()
        self.fail_on = fail_on
        self.fail_table = table
        self.message = message
        self.insert_attempts = 0

    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        if table == self.fail_table:
            self.insert_attempts += 1
            if self.insert_attempts == self.fail_on:
                raise StoreError(self.message, table=table, operation="insert")
        return await super().insert(table, rows)
