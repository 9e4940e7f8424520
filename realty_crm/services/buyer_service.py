"""Buyer resource operations and the in-memory buyer collection."""

from typing import Any, Optional
from realty_crm.models.buyer import Buyer
from realty_crm.models.filters import BuyerFilters
from realty_crm.services.buyer_filter import FilterResult, apply_filters
from realty_crm.services.store import CRMStore, BUYERS_TABLE, BUYER_GROUPS_TABLE
from realty_crm.utils.errors import StoreError
from realty_crm.utils.logging import get_structured_logger, log_timing, timed

logger = get_structured_logger(__name__)


@timed("list_buyers", logger=logger)
async def list_buyers(store: CRMStore) -> list[Buyer]:
    """All buyers, newest first."""
    rows = await store.select(BUYERS_TABLE, order_by="created_at", descending=True)
    return [Buyer.model_validate(row) for row in rows]


async def insert_buyers(store: CRMStore, records: list[dict[str, Any]]) -> list[dict]:
    """Insert buyer rows in one round-trip."""
    return await store.insert(BUYERS_TABLE, records)


async def add_buyer(store: CRMStore, buyer: dict[str, Any]) -> Buyer:
    """Create a single buyer record."""
    rows = await store.insert(BUYERS_TABLE, [buyer])
    if not rows:
        raise StoreError("Failed to add buyer: no data returned", table=BUYERS_TABLE, operation="insert")
    created = Buyer.model_validate(rows[0])
    logger.info("Buyer added", buyer_id=created.id)
    return created


async def update_buyer(store: CRMStore, buyer_id: str, updates: dict[str, Any]) -> Buyer:
    """Update a buyer by ID."""
    rows = await store.update(BUYERS_TABLE, updates, {"id": buyer_id})
    if not rows:
        raise StoreError(f"Failed to update buyer: {buyer_id}", table=BUYERS_TABLE, operation="update")
    logger.info("Buyer updated", buyer_id=buyer_id, fields=sorted(updates))
    return Buyer.model_validate(rows[0])


async def delete_buyer(store: CRMStore, buyer_id: str) -> None:
    """Delete a buyer and its group memberships."""
    await store.delete(BUYER_GROUPS_TABLE, {"buyer_id": buyer_id})
    await store.delete(BUYERS_TABLE, {"id": buyer_id})
    logger.info("Buyer deleted", buyer_id=buyer_id)


class BuyerCollection:
    """Snapshot of the buyer table.

    ``reload`` replaces the snapshot wholesale; a caller already holding
    ``buyers`` keeps reading the previous tuple.
    """

    def __init__(self, store: CRMStore):
        self.store = store
        self._buyers: tuple[Buyer, ...] = ()
        self.loaded = False

    @property
    def buyers(self) -> tuple[Buyer, ...]:
        return self._buyers

    def __len__(self) -> int:
        return len(self._buyers)

    async def reload(self) -> tuple[Buyer, ...]:
        with log_timing("reload_buyers", logger=logger):
            buyers = tuple(await list_buyers(self.store))
        self._buyers = buyers
        self.loaded = True
        logger.info("Buyer collection reloaded", count=len(buyers))
        return buyers

    def filter(self, filters: Optional[BuyerFilters] = None) -> FilterResult:
        return apply_filters(self._buyers, filters)
