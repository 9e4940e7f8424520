"""Response helpers for the serverless handlers."""

import json
from typing import Any, Optional
from realty_crm.utils.errors import (
    BuyerImportError,
    CRMError,
    CSVParseError,
    ImportInProgressError,
    MappingError,
    ProtectedTagError,
    StoreError,
)

ERROR_STATUS = {
    CSVParseError: 400,
    MappingError: 400,
    ImportInProgressError: 409,
    ProtectedTagError: 409,
    BuyerImportError: 502,
    StoreError: 502,
}


def json_response(status: int, payload: Any, headers: Optional[dict[str, str]] = None) -> dict:
    """Vercel response dict with a JSON body."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json", **(headers or {})},
        "body": json.dumps(payload, default=str),
    }


def error_response(error: CRMError) -> dict:
    """Map a CRM error to a status code and ``{"error", "code"}`` body."""
    status = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(error, error_type)),
        500,
    )
    payload = {"error": str(error), "code": error.code}
    if isinstance(error, BuyerImportError):
        payload.update({
            "inserted_count": error.inserted_count,
            "failed_batch": error.failed_batch,
            "total_batches": error.total_batches,
        })
    return json_response(status, payload)


def parse_json_body(request: dict) -> dict:
    """Decode the request body; empty bodies decode to ``{}``."""
    body = request.get("body") or "{}"
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    if isinstance(body, dict):
        return body
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise MappingError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MappingError("Request body must be a JSON object")
    return data
