"""Group resource operations and buyer group membership."""

from typing import Any, Optional
from realty_crm.models.group import Group
from realty_crm.services.store import CRMStore, GROUPS_TABLE, BUYER_GROUPS_TABLE
from realty_crm.utils.errors import StoreError
from realty_crm.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


async def get_groups(store: CRMStore) -> list[Group]:
    """All groups ordered by name."""
    rows = await store.select(GROUPS_TABLE, order_by="name")
    return [Group.model_validate(row) for row in rows]


async def create_group(store: CRMStore, name: str, description: Optional[str] = None) -> Group:
    rows = await store.insert(GROUPS_TABLE, [{"name": name.strip(), "description": description, "type": "manual"}])
    if not rows:
        raise StoreError("Failed to create group: no data returned", table=GROUPS_TABLE, operation="insert")
    group = Group.model_validate(rows[0])
    logger.info("Group created", group_id=group.id)
    return group


async def update_group(store: CRMStore, group_id: str, updates: dict[str, Any]) -> Group:
    rows = await store.update(GROUPS_TABLE, updates, {"id": group_id})
    if not rows:
        raise StoreError(f"Failed to update group: {group_id}", table=GROUPS_TABLE, operation="update")
    return Group.model_validate(rows[0])


async def delete_group(store: CRMStore, group_id: str) -> None:
    await store.delete(BUYER_GROUPS_TABLE, {"group_id": group_id})
    await store.delete(GROUPS_TABLE, {"id": group_id})
    logger.info("Group deleted", group_id=group_id)


async def get_buyer_groups(store: CRMStore, buyer_id: str) -> list[str]:
    """IDs of the groups a buyer belongs to."""
    rows = await store.select(BUYER_GROUPS_TABLE, match={"buyer_id": buyer_id})
    return [row["group_id"] for row in rows]


async def add_buyers_to_groups(store: CRMStore, buyer_ids: list[str], group_ids: list[str]) -> int:
    """Add every buyer to every group in one insert; returns rows written."""
    entries = [
        {"buyer_id": buyer_id, "group_id": group_id}
        for buyer_id in buyer_ids
        for group_id in group_ids
    ]
    if not entries:
        return 0
    await store.insert(BUYER_GROUPS_TABLE, entries)
    logger.info("Buyers added to groups", buyers=len(buyer_ids), groups=len(group_ids))
    return len(entries)


async def remove_buyer_from_group(store: CRMStore, buyer_id: str, group_id: str) -> None:
    await store.delete(BUYER_GROUPS_TABLE, {"buyer_id": buyer_id, "group_id": group_id})


async def get_buyer_count_by_group(store: CRMStore, group_id: str) -> int:
    return await store.count(BUYER_GROUPS_TABLE, match={"group_id": group_id})
