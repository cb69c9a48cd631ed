"""issue_api/lambda_function.py — Issue CRUD API behind a single function

Routes (via API Gateway proxy integration; a leading /<requestContext.stage> is stripped):
  GET     /issues           — list issues (?status=Open|InProgress|Done)
  POST    /issues           — create issue
  GET     /issues/{id}      — get issue
  PUT     /issues/{id}      — update issue (partial fields)
  DELETE  /issues/{id}      — delete issue
  OPTIONS *                 — CORS preflight

The per-operation functions (create_issue, get_issue, ...) serve the same
contract when API Gateway routes each operation to its own Lambda.

Environment variables:
  ISSUES_TABLE_NAME       default: IssueTrackerTable
  ISSUES_STATUS_INDEX     default: GSI1
  DYNAMODB_REGION         default: $AWS_REGION, then us-east-1
  DYNAMODB_ENDPOINT_URL   optional, e.g. http://localhost:8000 for DynamoDB Local
  CORS_ORIGIN             default: *
  LOG_LEVEL               default: INFO
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict
from urllib.parse import unquote

from issue_tracker_shared.handlers import (
    handle_create,
    handle_delete,
    handle_get,
    handle_list,
    handle_update,
)
from issue_tracker_shared.http_utils import _cors_headers, _error, _path_method
from issue_tracker_shared.models import ErrorCode
from issue_tracker_shared.startup import build_issue_service

logger = logging.getLogger(__name__)

_RE_COLLECTION = re.compile(r"^/issues/?$")
_RE_ITEM = re.compile(r"^/issues/(?P<id>[^/]+)/?$")

_COLLECTION_ROUTES = {"GET": handle_list, "POST": handle_create}
_ITEM_ROUTES = {"GET": handle_get, "PUT": handle_update, "DELETE": handle_delete}

_SERVICE = build_issue_service()


def _strip_stage(event: Dict, path: str) -> str:
    """Drop the leading /<stage> segment that HTTP API puts in rawPath for named stages."""
    stage = (event.get("requestContext") or {}).get("stage") or ""
    if not stage or stage == "$default":
        return path
    prefix = f"/{stage}"
    if path == prefix:
        return "/"
    if path.startswith(prefix + "/"):
        return path[len(prefix):]
    return path


def lambda_handler(event: Dict, context: Any) -> Dict:
    method, path = _path_method(event)
    path = _strip_stage(event, path)

    # CORS preflight
    if method == "OPTIONS":
        return {"statusCode": 204, "headers": _cors_headers(), "body": ""}

    if _RE_COLLECTION.match(path):
        handler = _COLLECTION_ROUTES.get(method)
        if handler is None:
            return _error(405, f"Method {method} not allowed. Use GET or POST.", ErrorCode.METHOD_NOT_ALLOWED)
        return handler(event, _SERVICE, context)

    m_item = _RE_ITEM.match(path)
    if m_item:
        handler = _ITEM_ROUTES.get(method)
        if handler is None:
            return _error(
                405, f"Method {method} not allowed. Use GET, PUT or DELETE.", ErrorCode.METHOD_NOT_ALLOWED
            )
        routed = dict(event)
        routed["pathParameters"] = {
            **(event.get("pathParameters") or {}),
            "id": unquote(m_item.group("id")),
        }
        return handler(routed, _SERVICE, context)

    logger.info("No route matched: %s %s", method, path)
    return _error(404, f"No route matched: {method} {path}", ErrorCode.NOT_FOUND)
