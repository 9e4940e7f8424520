"""End-to-end: import a CSV, reload the collection, and filter it."""

import pytest
from realty_crm.models.filters import BuyerFilters
from realty_crm.services.buyer_service import BuyerCollection
from realty_crm.services.csv_import import BuyerImporter
from realty_crm.services.memory_store import InMemoryStore

CSV_TEXT = (
    "First Name,Last Name,Email,Score,Tags,Is VIP?,Mailing City\n"
    "Ana,Lopez,ana@example.com,91,Investor;Cash Buyer,Yes,Austin\n"
    "Ben,Ng,ben@example.com,82,Cash Buyer,No,Dallas\n"
    "Cy,Ortiz,cy@example.com,40,Wholesaler,No,Austin\n"
)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_imported_buyers_are_filterable():
    store = InMemoryStore()
    collection = BuyerCollection(store)
    importer = BuyerImporter(store, batch_size=2, on_success=collection.reload)
    importer.load(CSV_TEXT)
    importer.auto_map()

    result = await importer.run()

    assert result.batches == 2
    assert len(collection) == 3

    cash = collection.filter(BuyerFilters(tags=["cash"]))
    assert sorted(buyer.fname for buyer in cash.buyers) == ["Ana", "Ben"]
    assert cash.group_counts["hot"] == 1
    assert cash.group_counts["wholesaler"] == 1

    austin_hot = collection.filter(BuyerFilters(locations=["austin"], quick_filters=["highScore"]))
    assert [buyer.fname for buyer in austin_hot.buyers] == ["Ana"]
