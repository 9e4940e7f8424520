"""Custom assertion helpers."""

from typing import Any, Dict
import json


def assert_valid_response(response: Dict[str, Any], expected_status: int = 200) -> None:
    """Assert that a Vercel function response is valid."""
    assert 'statusCode' in response
    assert response['statusCode'] == expected_status
    assert 'headers' in response
    assert 'body' in response
    
    if 'application/json' in response.get('headers', {}).get('Content-Type', ''):
        try:
            json.loads(response['body'])
        except json.JSONDecodeError:
            assert False, "Response body is not valid JSON"


def assert_error_response(response: Dict[str, Any], expected_status: int, code: str) -> dict:
    """Assert an error response and return its decoded body."""
    assert_valid_response(response, expected_status)
    body = json.loads(response['body'])
    assert body['code'] == code
    assert body['error']
    return body


def assert_ids(buyers, expected_ids) -> None:
    """Assert buyer IDs in order."""
    assert [buyer.id for buyer in buyers] == list(expected_ids)
