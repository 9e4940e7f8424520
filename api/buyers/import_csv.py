"""CSV import endpoint.

POST body: ``{"csv": "<file text>", "mapping": {"fname": "First", ...},
"duplicate_policy": "allow" | "skip_existing"}``. Without a mapping the
columns are matched to field labels automatically.
"""

import asyncio
from typing import Optional
from realty_crm.models.buyer_import import DuplicatePolicy
from realty_crm.services.csv_import import BuyerImporter
from realty_crm.services.store import CRMStore
from realty_crm.services.supabase_client import SupabaseStore
from realty_crm.utils.errors import CRMError, MappingError
from realty_crm.utils.http import error_response, json_response, parse_json_body
from realty_crm.utils.logging import correlation_context, get_structured_logger, mask_sensitive_data
from realty_crm.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


def _duplicate_policy(value) -> Optional[DuplicatePolicy]:
    if not value:
        return None
    try:
        return DuplicatePolicy(str(value).lower())
    except ValueError:
        raise MappingError(f"Unknown duplicate policy: {value}")


async def import_buyers(store: CRMStore, body: dict) -> dict:
    content = body.get("csv")
    if not content:
        raise MappingError("Request body must include the CSV text under 'csv'")

    importer = BuyerImporter(store, duplicate_policy=_duplicate_policy(body.get("duplicate_policy")))
    importer.load(content)
    mapping = body.get("mapping")
    if mapping:
        if not isinstance(mapping, dict):
            raise MappingError("'mapping' must be an object of field -> column")
        importer.apply_mapping(mapping)
    else:
        importer.auto_map()

    progress: list[int] = []
    result = await importer.run(on_progress=progress.append)
    return {**result.model_dump(), "progress_steps": progress}


def handler(request, store: Optional[CRMStore] = None):
    """Import buyers from a CSV upload."""
    if (request.get("method") or "POST").upper() != "POST":
        return json_response(405, {"error": "Method not allowed", "code": "method_not_allowed"})

    with correlation_context():
        try:
            body = parse_json_body(request)
            payload = asyncio.run(import_buyers(store or SupabaseStore.from_env(), body))
            return json_response(200, payload)
        except CRMError as e:
            logger.warning("Buyer import rejected", error=mask_sensitive_data(str(e)), code=e.code)
            return error_response(e)
        except Exception as e:
            logger.error("Error importing buyers", error=str(e), exc_info=True)
            return json_response(500, {"error": str(e), "code": "internal_error"})
