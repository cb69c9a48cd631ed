"""service.py — IssueService: validation, id/timestamp assignment and store calls.

Every operation returns an ApiResult. Storage failures are logged with their
detail and reported to the caller with a fixed, operation-specific code.
Nothing is retried.
"""
from __future__ import annotations

import dataclasses
import datetime as dt
import logging
import uuid
from typing import Callable, List, Optional

from .models import (
    ApiResult,
    CreateIssueRequest,
    ErrorCode,
    Issue,
    IssuePriority,
    IssueStatus,
    UpdateIssueRequest,
)
from .serialization import _utc_now
from .store import IssueNotFoundError, IssueStore, IssueStoreError
from .validation import join_violations, validate_create, validate_update

__all__ = ["IssueService"]

logger = logging.getLogger(__name__)

_MIN_TICK = dt.timedelta(microseconds=1)


def _new_issue_id() -> str:
    return str(uuid.uuid4())


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class IssueService:
    def __init__(
        self,
        store: IssueStore,
        *,
        clock: Optional[Callable[[], dt.datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._store = store
        self._clock = clock or _utc_now
        self._new_id = id_factory or _new_issue_id

    def create_issue(self, request: CreateIssueRequest) -> ApiResult[Issue]:
        violations = validate_create(request)
        if violations:
            errors = join_violations(violations)
            logger.warning("Validation failed: %s", errors)
            return ApiResult.fail(errors, ErrorCode.VALIDATION_ERROR)

        now = self._clock()
        issue = Issue(
            id=self._new_id(),
            title=request.title,
            description=request.description,
            status=IssueStatus.OPEN,
            priority=IssuePriority.parse(request.priority),
            created_at=now,
            updated_at=now,
        )
        try:
            created = self._store.create(issue)
        except IssueStoreError as exc:
            logger.error("Failed to create issue %s: %s", issue.id, exc)
            return ApiResult.fail("Failed to create issue", ErrorCode.CREATE_ERROR)

        logger.info("Created issue %s", created.id)
        return ApiResult.ok(created)

    def get_issue(self, issue_id: str) -> ApiResult[Issue]:
        if _is_blank(issue_id):
            return ApiResult.fail("Issue ID is required", ErrorCode.INVALID_ID)

        try:
            issue = self._store.get_by_id(issue_id)
        except IssueStoreError as exc:
            logger.error("Failed to get issue %s: %s", issue_id, exc)
            return ApiResult.fail("Failed to retrieve issue", ErrorCode.GET_ERROR)

        if issue is None:
            logger.info("Issue %s not found", issue_id)
            return ApiResult.fail(f"Issue {issue_id} not found", ErrorCode.NOT_FOUND)
        return ApiResult.ok(issue)

    def list_issues(self, status: Optional[IssueStatus] = None) -> ApiResult[List[Issue]]:
        try:
            issues = self._store.get_all(status)
        except IssueStoreError as exc:
            logger.error("Failed to list issues (status=%s): %s", status, exc)
            return ApiResult.fail("Failed to retrieve issues", ErrorCode.LIST_ERROR)

        logger.info("Retrieved %d issues", len(issues))
        return ApiResult.ok(issues)

    def update_issue(self, issue_id: str, request: UpdateIssueRequest) -> ApiResult[Issue]:
        if _is_blank(issue_id):
            return ApiResult.fail("Issue ID is required", ErrorCode.INVALID_ID)

        violations = validate_update(request)
        if violations:
            errors = join_violations(violations)
            logger.warning("Validation failed for update: %s", errors)
            return ApiResult.fail(errors, ErrorCode.VALIDATION_ERROR)

        try:
            existing = self._store.get_by_id(issue_id)
            if existing is None:
                return ApiResult.fail(f"Issue {issue_id} not found", ErrorCode.NOT_FOUND)

            merged = self._merge(existing, request)
            updated = self._store.update(issue_id, merged)
        except IssueNotFoundError:
            # Deleted between the read and the write.
            return ApiResult.fail(f"Issue {issue_id} not found", ErrorCode.NOT_FOUND)
        except IssueStoreError as exc:
            logger.error("Failed to update issue %s: %s", issue_id, exc)
            return ApiResult.fail("Failed to update issue", ErrorCode.UPDATE_ERROR)

        logger.info("Updated issue %s", issue_id)
        return ApiResult.ok(updated)

    def delete_issue(self, issue_id: str) -> ApiResult[bool]:
        if _is_blank(issue_id):
            return ApiResult.fail("Issue ID is required", ErrorCode.INVALID_ID)

        try:
            deleted = self._store.delete(issue_id)
        except IssueStoreError as exc:
            logger.error("Failed to delete issue %s: %s", issue_id, exc)
            return ApiResult.fail("Failed to delete issue", ErrorCode.DELETE_ERROR)

        if not deleted:
            return ApiResult.fail(f"Issue {issue_id} not found", ErrorCode.NOT_FOUND)

        logger.info("Deleted issue %s", issue_id)
        return ApiResult.ok(True)

    def _merge(self, existing: Issue, request: UpdateIssueRequest) -> Issue:
        """Overlay the supplied fields; id and createdAt are never touched."""
        changes = {}
        if request.title is not None:
            changes["title"] = request.title
        if request.description is not None:
            changes["description"] = request.description
        if request.status is not None:
            changes["status"] = IssueStatus.parse(request.status)
        if request.priority is not None:
            changes["priority"] = IssuePriority.parse(request.priority)
        # updatedAt must move strictly forward even if the clock has not.
        changes["updated_at"] = max(self._clock(), existing.updated_at + _MIN_TICK)
        return dataclasses.replace(existing, **changes)
