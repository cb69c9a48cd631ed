"""http_utils.py — API Gateway response building, body parsing, path/query extraction.

Accepts both REST API (v1) and HTTP API (v2) proxy event shapes.
"""
from __future__ import annotations

import base64
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from .config import CORS_ORIGIN
from .models import ApiResult, ErrorCode

__all__ = [
    "InvalidRequest",
    "_cors_headers",
    "_error",
    "_json_body",
    "_path_method",
    "_path_param",
    "_query_param",
    "_response",
    "_result_response",
    "_status_for_code",
]

logger = logging.getLogger(__name__)

_BAD_REQUEST_CODES = {
    ErrorCode.VALIDATION_ERROR,
    ErrorCode.INVALID_ID,
    ErrorCode.MISSING_ID,
    ErrorCode.INVALID_BODY,
    ErrorCode.INVALID_JSON,
    ErrorCode.INVALID_STATUS,
}


class InvalidRequest(Exception):
    """Malformed request rejected before it reaches IssueService."""

    def __init__(self, code: str, message: str, status_code: int = 400):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _cors_headers() -> Dict[str, str]:
    # Wildcard origin by default; tighten CORS_ORIGIN for production.
    return {
        "Access-Control-Allow-Origin": CORS_ORIGIN,
        "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key",
        "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
    }


def _response(status_code: int, payload: Any) -> Dict[str, Any]:
    def _json_default(obj: Any) -> Any:
        if isinstance(obj, Decimal):
            if obj % 1 == 0:
                return int(obj)
            return float(obj)
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json", **_cors_headers()},
        "body": json.dumps(payload, default=_json_default),
    }


def _error(status_code: int, message: str, code: str) -> Dict[str, Any]:
    return _response(status_code, ApiResult.fail(message, code).to_dict())


def _status_for_code(code: Optional[str]) -> int:
    if code == ErrorCode.NOT_FOUND:
        return 404
    if code == ErrorCode.METHOD_NOT_ALLOWED:
        return 405
    if code in _BAD_REQUEST_CODES:
        return 400
    return 500


def _result_response(result: ApiResult, success_status: int = 200) -> Dict[str, Any]:
    status = success_status if result.success else _status_for_code(result.error_code)
    return _response(status, result.to_dict())


# ---------------------------------------------------------------------------
# Request parsing
# ---------------------------------------------------------------------------


def _json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Decode the JSON object body; raise InvalidRequest otherwise."""
    raw = event.get("body")
    if raw in (None, ""):
        raise InvalidRequest(ErrorCode.INVALID_BODY, "Invalid request body")

    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        parsed = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as exc:
        logger.error("JSON error: %s", exc)
        raise InvalidRequest(ErrorCode.INVALID_JSON, "Invalid JSON format") from exc

    if not isinstance(parsed, dict):
        raise InvalidRequest(ErrorCode.INVALID_BODY, "Invalid request body")
    return parsed


def _path_method(event: Dict[str, Any]) -> Tuple[str, str]:
    method = (
        (event.get("requestContext") or {}).get("http", {}).get("method")
        or event.get("httpMethod")
        or ""
    ).upper()
    path = event.get("rawPath") or event.get("path") or "/"
    return method, path


def _path_param(event: Dict[str, Any], name: str) -> Optional[str]:
    params = event.get("pathParameters") or {}
    value = params.get(name)
    return None if value is None else str(value)


def _query_param(event: Dict[str, Any], name: str) -> Optional[str]:
    params = event.get("queryStringParameters") or {}
    value = params.get(name)
    return None if value is None else str(value)
