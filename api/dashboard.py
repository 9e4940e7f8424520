"""Dashboard summary endpoint."""

import asyncio
from typing import Optional
from realty_crm.services.buyer_service import BuyerCollection
from realty_crm.services.dashboard import summarize_buyers
from realty_crm.services.store import CRMStore
from realty_crm.services.supabase_client import SupabaseStore
from realty_crm.utils.errors import CRMError
from realty_crm.utils.http import error_response, json_response
from realty_crm.utils.logging import correlation_context, get_structured_logger
from realty_crm.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


async def load_summary(store: CRMStore) -> dict:
    collection = BuyerCollection(store)
    buyers = await collection.reload()
    return summarize_buyers(buyers).model_dump(mode="json")


def handler(request, store: Optional[CRMStore] = None):
    """Return dashboard counts."""
    with correlation_context():
        try:
            return json_response(200, asyncio.run(load_summary(store or SupabaseStore.from_env())))
        except CRMError as e:
            logger.warning("Dashboard load failed", error=str(e), code=e.code)
            return error_response(e)
        except Exception as e:
            logger.error("Error loading dashboard", error=str(e), exc_info=True)
            return json_response(500, {"error": str(e), "code": "internal_error"})
