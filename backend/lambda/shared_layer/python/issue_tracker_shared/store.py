"""store.py — Record store contract consumed by IssueService.

Any key-value or document store can back the service as long as it honours
these semantics. DynamoDbIssueStore (dynamodb_store.py) is the deployed
implementation; InMemoryIssueStore serves local runs and tests.
"""
from __future__ import annotations

import abc
import dataclasses
from typing import Dict, List, Optional

from .models import Issue, IssueStatus

__all__ = [
    "InMemoryIssueStore",
    "IssueAlreadyExistsError",
    "IssueNotFoundError",
    "IssueStore",
    "IssueStoreError",
]


class IssueStoreError(Exception):
    """Opaque storage failure. The message is for logs, never for API callers."""

    code = "STORE_ERROR"


class IssueAlreadyExistsError(IssueStoreError):
    code = "ALREADY_EXISTS"

    def __init__(self, issue_id: str):
        super().__init__(f"Issue with ID {issue_id} already exists")
        self.issue_id = issue_id


class IssueNotFoundError(IssueStoreError):
    code = "NOT_FOUND"

    def __init__(self, issue_id: str):
        super().__init__(f"Issue {issue_id} not found")
        self.issue_id = issue_id


class IssueStore(abc.ABC):
    @abc.abstractmethod
    def create(self, issue: Issue) -> Issue:
        """Persist a new issue; IssueAlreadyExistsError if the id is taken."""

    @abc.abstractmethod
    def get_by_id(self, issue_id: str) -> Optional[Issue]:
        """Return the issue, or None when absent."""

    @abc.abstractmethod
    def get_all(self, status: Optional[IssueStatus] = None) -> List[Issue]:
        """With a status: that status only, oldest first. Without: every issue, unordered."""

    @abc.abstractmethod
    def update(self, issue_id: str, issue: Issue) -> Issue:
        """Replace the whole record; IssueNotFoundError if it does not exist.

        ``issue.id`` must equal ``issue_id``; a mismatch is an IssueStoreError.
        """

    @abc.abstractmethod
    def delete(self, issue_id: str) -> bool:
        """True if a record was removed, False if it was already absent."""

    def exists(self, issue_id: str) -> bool:
        return self.get_by_id(issue_id) is not None


def _check_same_id(issue_id: str, issue: Issue) -> None:
    if issue.id != issue_id:
        raise IssueStoreError(f"Issue id mismatch: key {issue_id!r}, record {issue.id!r}")


class InMemoryIssueStore(IssueStore):
    """Dict-backed store. Hands out copies so callers cannot alter stored state."""

    def __init__(self) -> None:
        self._items: Dict[str, Issue] = {}

    def create(self, issue: Issue) -> Issue:
        if issue.id in self._items:
            raise IssueAlreadyExistsError(issue.id)
        self._items[issue.id] = dataclasses.replace(issue)
        return dataclasses.replace(issue)

    def get_by_id(self, issue_id: str) -> Optional[Issue]:
        item = self._items.get(issue_id)
        return dataclasses.replace(item) if item is not None else None

    def get_all(self, status: Optional[IssueStatus] = None) -> List[Issue]:
        items = [dataclasses.replace(i) for i in self._items.values()]
        if status is None:
            return items
        matched = [i for i in items if i.status == status]
        matched.sort(key=lambda i: i.created_at)
        return matched

    def update(self, issue_id: str, issue: Issue) -> Issue:
        _check_same_id(issue_id, issue)
        if issue_id not in self._items:
            raise IssueNotFoundError(issue_id)
        self._items[issue_id] = dataclasses.replace(issue)
        return dataclasses.replace(issue)

    def delete(self, issue_id: str) -> bool:
        return self._items.pop(issue_id, None) is not None
