"""startup.py — Composition root.

Each Lambda builds its IssueService once at cold start by calling
build_issue_service() and passes it to the handlers explicitly.
"""
from __future__ import annotations

import logging
from typing import Optional

from .aws_clients import _new_ddb_client
from .config import DYNAMODB_ENDPOINT_URL, DYNAMODB_REGION, ISSUES_STATUS_INDEX, ISSUES_TABLE_NAME
from .dynamodb_store import DynamoDbIssueStore
from .service import IssueService
from .store import IssueStore

__all__ = ["build_issue_service"]

logger = logging.getLogger(__name__)


def build_issue_service(
    store: Optional[IssueStore] = None,
    *,
    table_name: str = ISSUES_TABLE_NAME,
    status_index: str = ISSUES_STATUS_INDEX,
    region: Optional[str] = DYNAMODB_REGION,
    endpoint_url: Optional[str] = DYNAMODB_ENDPOINT_URL,
    ddb=None,
) -> IssueService:
    """Wire IssueService to the DynamoDB store unless a store is supplied."""
    if store is None:
        client = ddb if ddb is not None else _new_ddb_client(region, endpoint_url)
        store = DynamoDbIssueStore(client, table_name, status_index)
        logger.info("IssueService bound to table %s (index %s)", table_name, status_index)
    return IssueService(store)
