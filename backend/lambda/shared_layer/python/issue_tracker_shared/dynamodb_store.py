"""dynamodb_store.py — IssueStore backed by a DynamoDB single table.

Item layout:
    PK       ISSUE#<id>
    SK       METADATA
    GSI1PK   STATUS#<status>        (status index partition)
    GSI1SK   <createdAt>            (status index sort, ISO-8601, sorts chronologically)
    Id, Title, Description, Status, Priority, CreatedAt, UpdatedAt

This is the only module that knows the key encoding.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .models import Issue, IssuePriority, IssueStatus
from .serialization import _deserialize, _format_ts, _parse_ts, _serialize
from .store import IssueAlreadyExistsError, IssueNotFoundError, IssueStore, IssueStoreError, _check_same_id

__all__ = ["DynamoDbIssueStore"]

logger = logging.getLogger(__name__)

_PK_PREFIX = "ISSUE#"
_SK_METADATA = "METADATA"
_STATUS_PREFIX = "STATUS#"


def _is_conditional_check_failed(exc: Exception) -> bool:
    if not isinstance(exc, ClientError):
        return False
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


def _key(issue_id: str) -> Dict[str, Dict[str, Any]]:
    return {
        "PK": _serialize(f"{_PK_PREFIX}{issue_id}"),
        "SK": _serialize(_SK_METADATA),
    }


def _issue_to_item(issue: Issue) -> Dict[str, Dict[str, Any]]:
    created = _format_ts(issue.created_at)
    fields = {
        "PK": f"{_PK_PREFIX}{issue.id}",
        "SK": _SK_METADATA,
        "GSI1PK": f"{_STATUS_PREFIX}{issue.status.value}",
        "GSI1SK": created,
        "Id": issue.id,
        "Title": issue.title,
        "Description": issue.description,
        "Status": issue.status.value,
        "Priority": issue.priority.value,
        "CreatedAt": created,
        "UpdatedAt": _format_ts(issue.updated_at),
    }
    return {k: _serialize(v) for k, v in fields.items()}


def _item_to_issue(raw: Dict[str, Any]) -> Issue:
    item = _deserialize(raw)
    try:
        return Issue(
            id=str(item["Id"]),
            title=str(item["Title"]),
            description=str(item["Description"]),
            status=IssueStatus.parse(item["Status"]),
            priority=IssuePriority.parse(item["Priority"]),
            created_at=_parse_ts(item["CreatedAt"]),
            updated_at=_parse_ts(item["UpdatedAt"]),
        )
    except (KeyError, ValueError) as exc:
        raise IssueStoreError(f"Malformed issue item {item.get('PK')!r}: {exc}") from exc


class DynamoDbIssueStore(IssueStore):
    def __init__(self, ddb, table_name: str, status_index: str = "GSI1"):
        self._ddb = ddb
        self._table = table_name
        self._status_index = status_index

    # -- writes -------------------------------------------------------------

    def create(self, issue: Issue) -> Issue:
        try:
            self._ddb.put_item(
                TableName=self._table,
                Item=_issue_to_item(issue),
                ConditionExpression="attribute_not_exists(PK)",
            )
        except ClientError as exc:
            if _is_conditional_check_failed(exc):
                logger.warning("Issue %s already exists", issue.id)
                raise IssueAlreadyExistsError(issue.id) from exc
            raise IssueStoreError(f"put_item failed: {exc}") from exc
        except BotoCoreError as exc:
            raise IssueStoreError(f"put_item failed: {exc}") from exc
        logger.info("Created issue %s", issue.id)
        return issue

    def update(self, issue_id: str, issue: Issue) -> Issue:
        # Full replace guarded on existence; concurrent writers are last-write-wins.
        _check_same_id(issue_id, issue)
        try:
            self._ddb.put_item(
                TableName=self._table,
                Item=_issue_to_item(issue),
                ConditionExpression="attribute_exists(PK)",
            )
        except ClientError as exc:
            if _is_conditional_check_failed(exc):
                logger.warning("Cannot update non-existent issue %s", issue_id)
                raise IssueNotFoundError(issue_id) from exc
            raise IssueStoreError(f"put_item failed: {exc}") from exc
        except BotoCoreError as exc:
            raise IssueStoreError(f"put_item failed: {exc}") from exc
        logger.info("Updated issue %s", issue_id)
        return issue

    def delete(self, issue_id: str) -> bool:
        try:
            resp = self._ddb.delete_item(
                TableName=self._table,
                Key=_key(issue_id),
                ReturnValues="ALL_OLD",
            )
        except (ClientError, BotoCoreError) as exc:
            raise IssueStoreError(f"delete_item failed: {exc}") from exc
        deleted = bool(resp.get("Attributes"))
        logger.info("Delete issue %s: %s", issue_id, deleted)
        return deleted

    # -- reads --------------------------------------------------------------

    def get_by_id(self, issue_id: str) -> Optional[Issue]:
        try:
            resp = self._ddb.get_item(TableName=self._table, Key=_key(issue_id), ConsistentRead=True)
        except (ClientError, BotoCoreError) as exc:
            raise IssueStoreError(f"get_item failed: {exc}") from exc
        item = resp.get("Item")
        if not item:
            logger.info("Issue %s not found", issue_id)
            return None
        return _item_to_issue(item)

    def get_all(self, status: Optional[IssueStatus] = None) -> List[Issue]:
        if status is not None:
            return self._query_by_status(status)

        # Full table scan: acceptable for small tables only.
        kwargs: Dict[str, Any] = {
            "TableName": self._table,
            "FilterExpression": "begins_with(PK, :pk)",
            "ExpressionAttributeValues": {":pk": _serialize(_PK_PREFIX)},
        }
        items = self._collect("scan", kwargs)
        issues = [_item_to_issue(raw) for raw in items]
        logger.info("Retrieved %d issues", len(issues))
        return issues

    def _query_by_status(self, status: IssueStatus) -> List[Issue]:
        kwargs: Dict[str, Any] = {
            "TableName": self._table,
            "IndexName": self._status_index,
            "KeyConditionExpression": "GSI1PK = :gsi1pk",
            "ExpressionAttributeValues": {":gsi1pk": _serialize(f"{_STATUS_PREFIX}{status.value}")},
            "ScanIndexForward": True,
        }
        items = self._collect("query", kwargs)
        return [_item_to_issue(raw) for raw in items]

    def _collect(self, operation: str, kwargs: Dict[str, Any]) -> List[Dict[str, Any]]:
        call = getattr(self._ddb, operation)
        items: List[Dict[str, Any]] = []
        try:
            while True:
                resp = call(**kwargs)
                items.extend(resp.get("Items", []))
                last_key = resp.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as exc:
            raise IssueStoreError(f"{operation} failed: {exc}") from exc
        return items
