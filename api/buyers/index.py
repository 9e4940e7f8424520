"""Buyer list endpoint: filtered buyers with sidebar and table counts."""

import asyncio
from typing import Optional
from realty_crm.models.filters import BuyerFilters
from realty_crm.services.buyer_service import BuyerCollection
from realty_crm.services.store import CRMStore
from realty_crm.services.supabase_client import SupabaseStore
from realty_crm.utils.errors import CRMError
from realty_crm.utils.http import error_response, json_response
from realty_crm.utils.logging import correlation_context, get_structured_logger, mask_sensitive_data
from realty_crm.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


async def list_filtered_buyers(store: CRMStore, filters: BuyerFilters) -> dict:
    collection = BuyerCollection(store)
    await collection.reload()
    result = collection.filter(filters)
    return {
        "total": result.total_count,
        "filtered": result.filtered_count,
        "active_filters": result.active_filter_count,
        "group_counts": result.group_counts,
        "buyers": [
            {**buyer.model_dump(mode="json"), "display_name": buyer.display_name}
            for buyer in result.buyers
        ],
    }


def handler(request, store: Optional[CRMStore] = None):
    """
    List buyers.
    
    Query parameters follow BuyerFilters.from_query, e.g.
    ``?search=smith&tags=cash,investor&minScore=80&group=vip``.
    """
    with correlation_context():
        try:
            query_params = request.get("query", {}) or {}
            filters = BuyerFilters.from_query(query_params)
            logger.info(
                "Listing buyers",
                search=mask_sensitive_data(filters.search) or None,
                active_filters=filters.active_count,
            )
            payload = asyncio.run(list_filtered_buyers(store or SupabaseStore.from_env(), filters))
            return json_response(200, payload)
        except CRMError as e:
            logger.warning("Buyer listing failed", error=mask_sensitive_data(str(e)), code=e.code)
            return error_response(e)
        except Exception as e:
            logger.error("Error listing buyers", error=str(e), exc_info=True)
            return json_response(500, {"error": str(e), "code": "internal_error"})
