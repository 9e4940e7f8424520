"""Backing store interface.

Services receive a store explicitly instead of reaching for a global
client, so tests can swap in ``InMemoryStore``.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

BUYERS_TABLE = "buyers"
TAGS_TABLE = "tags"
GROUPS_TABLE = "groups"
BUYER_GROUPS_TABLE = "buyer_groups"


class CRMStore(ABC):
    """Table-level async operations the CRM services depend on."""

    @abstractmethod
    async def select(
        self,
        table: str,
        match: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        ilike: Optional[tuple[str, str]] = None,
    ) -> list[dict]:
        """Return rows equal to every ``match`` item.

        ``ilike`` is a ``(column, term)`` pair matched case-insensitively as
        a substring.
        """

    @abstractmethod
    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        """Insert rows in one round-trip and return them as stored."""

    @abstractmethod
    async def update(self, table: str, values: dict[str, Any], match: dict[str, Any]) -> list[dict]:
        """Update matching rows and return them."""

    @abstractmethod
    async def delete(self, table: str, match: dict[str, Any]) -> None:
        """Delete matching rows."""

    async def count(self, table: str, match: Optional[dict[str, Any]] = None) -> int:
        return len(await self.select(table, match=match))
