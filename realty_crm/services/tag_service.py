"""Tag resource operations and usage counters."""

from typing import Optional
from realty_crm.models.buyer import Buyer
from realty_crm.models.tag import Tag, DEFAULT_TAG_COLOR
from realty_crm.services.buyer_service import update_buyer
from realty_crm.services.store import CRMStore, TAGS_TABLE
from realty_crm.utils.errors import ProtectedTagError, StoreError
from realty_crm.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


async def get_tags(store: CRMStore, search: Optional[str] = None) -> list[Tag]:
    """All tags ordered by name, optionally narrowed by a name substring."""
    ilike = ("name", search) if search else None
    rows = await store.select(TAGS_TABLE, order_by="name", ilike=ilike)
    return [Tag.model_validate(row) for row in rows]


async def create_tag(store: CRMStore, name: str, color: Optional[str] = None) -> Tag:
    rows = await store.insert(TAGS_TABLE, [{"name": name.strip(), "color": color or DEFAULT_TAG_COLOR}])
    if not rows:
        raise StoreError("Failed to create tag: no data returned", table=TAGS_TABLE, operation="insert")
    return Tag.model_validate(rows[0])


async def delete_tag(store: CRMStore, tag_id: str) -> None:
    rows = await store.select(TAGS_TABLE, match={"id": tag_id})
    if rows and rows[0].get("is_protected"):
        raise ProtectedTagError(f"Tag is protected: {rows[0].get('name')}")
    await store.delete(TAGS_TABLE, {"id": tag_id})


async def update_tag_usage_count(store: CRMStore, tag_id: str, increment: bool = True) -> None:
    """Read-modify-write of a tag's usage counter, never below zero.

    Not atomic with the buyer change that prompted it; concurrent callers
    can lose updates. Failures are logged and not raised.
    """
    try:
        rows = await store.select(TAGS_TABLE, match={"id": tag_id})
        if not rows:
            logger.warning("Tag not found for usage update", tag_id=tag_id)
            return
        current = rows[0].get("usage_count") or 0
        new_count = current + 1 if increment else max(0, current - 1)
        await store.update(TAGS_TABLE, {"usage_count": new_count}, {"id": tag_id})
    except StoreError as e:
        logger.warning("Failed to update tag usage count", tag_id=tag_id, error=str(e))


async def set_buyer_tags(store: CRMStore, buyer: Buyer, tags: list[str]) -> Buyer:
    """Replace a buyer's tags, then adjust usage counters of known tags."""
    new_tags = [tag.strip() for tag in tags if tag and tag.strip()]
    updated = await update_buyer(store, buyer.id, {"tags": new_tags})

    old_names = {tag.lower() for tag in buyer.tags}
    new_names = {tag.lower() for tag in new_tags}
    added = new_names - old_names
    removed = old_names - new_names
    if not added and not removed:
        return updated

    for tag in await get_tags(store):
        name = tag.name.lower()
        if name in added:
            await update_tag_usage_count(store, tag.id, increment=True)
        elif name in removed:
            await update_tag_usage_count(store, tag.id, increment=False)
    return updated
