"""handlers.py — API Gateway request handlers for the issue operations.

Routes:
  POST   /issues          — create
  GET    /issues/{id}     — get
  GET    /issues?status=  — list
  PUT    /issues/{id}     — update (partial fields)
  DELETE /issues/{id}     — delete

Each handler parses the event, rejects malformed input before it reaches
IssueService, calls the service and maps the ApiResult to a proxy response.
Any uncaught exception becomes 500 INTERNAL_ERROR.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, Optional

from .http_utils import (
    InvalidRequest,
    _error,
    _json_body,
    _path_param,
    _query_param,
    _result_response,
)
from .models import CreateIssueRequest, ErrorCode, IssueStatus, UpdateIssueRequest
from .serialization import _emit_structured_observability
from .service import IssueService

__all__ = [
    "handle_create",
    "handle_delete",
    "handle_get",
    "handle_list",
    "handle_update",
]

logger = logging.getLogger(__name__)

_Handler = Callable[[Dict[str, Any], IssueService], Dict[str, Any]]


def _request_id(event: Dict[str, Any], context: Any) -> str:
    rid = getattr(context, "aws_request_id", None)
    if rid:
        return str(rid)
    return str((event.get("requestContext") or {}).get("requestId") or "")


def _require_id(event: Dict[str, Any]) -> str:
    issue_id = _path_param(event, "id")
    if issue_id is None:
        raise InvalidRequest(ErrorCode.MISSING_ID, "Issue ID is required")
    return issue_id


def _run(operation: str, fn: _Handler, event: Dict[str, Any], service: IssueService, context: Any) -> Dict[str, Any]:
    request_id = _request_id(event, context)
    logger.info("Processing %s - RequestId: %s", operation, request_id)
    started = time.monotonic()
    error_code = ""
    try:
        resp = fn(event, service)
    except InvalidRequest as exc:
        error_code = exc.code
        resp = _error(exc.status_code, exc.message, exc.code)
    except Exception:
        logger.exception("Unexpected error in %s", operation)
        error_code = ErrorCode.INTERNAL_ERROR
        resp = _error(500, "Internal server error", ErrorCode.INTERNAL_ERROR)

    if not error_code and resp["statusCode"] >= 400:
        error_code = (json.loads(resp["body"]).get("error") or {}).get("code") or ""
    _emit_structured_observability(
        component="issue_api",
        event=operation,
        request_id=request_id,
        status_code=resp["statusCode"],
        error_code=error_code,
        latency_ms=int((time.monotonic() - started) * 1000),
    )
    return resp


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def _create(event: Dict[str, Any], service: IssueService) -> Dict[str, Any]:
    request = CreateIssueRequest.from_payload(_json_body(event))
    return _result_response(service.create_issue(request), success_status=201)


def _get(event: Dict[str, Any], service: IssueService) -> Dict[str, Any]:
    return _result_response(service.get_issue(_require_id(event)))


def _list(event: Dict[str, Any], service: IssueService) -> Dict[str, Any]:
    status: Optional[IssueStatus] = None
    raw_status = _query_param(event, "status")
    if raw_status is not None:
        try:
            status = IssueStatus.parse(raw_status)
        except ValueError as exc:
            raise InvalidRequest(
                ErrorCode.INVALID_STATUS,
                "Invalid status value. Must be: Open, InProgress, or Done",
            ) from exc
    return _result_response(service.list_issues(status))


def _update(event: Dict[str, Any], service: IssueService) -> Dict[str, Any]:
    issue_id = _require_id(event)
    request = UpdateIssueRequest.from_payload(_json_body(event))
    return _result_response(service.update_issue(issue_id, request))


def _delete(event: Dict[str, Any], service: IssueService) -> Dict[str, Any]:
    return _result_response(service.delete_issue(_require_id(event)))


def handle_create(event: Dict[str, Any], service: IssueService, context: Any = None) -> Dict[str, Any]:
    return _run("CreateIssue", _create, event, service, context)


def handle_get(event: Dict[str, Any], service: IssueService, context: Any = None) -> Dict[str, Any]:
    return _run("GetIssue", _get, event, service, context)


def handle_list(event: Dict[str, Any], service: IssueService, context: Any = None) -> Dict[str, Any]:
    return _run("ListIssues", _list, event, service, context)


def handle_update(event: Dict[str, Any], service: IssueService, context: Any = None) -> Dict[str, Any]:
    return _run("UpdateIssue", _update, event, service, context)


def handle_delete(event: Dict[str, Any], service: IssueService, context: Any = None) -> Dict[str, Any]:
    return _run("DeleteIssue", _delete, event, service, context)
