"""validation.py — Create/update payload checks.

Pure functions: no storage access, no exceptions. Each returns the violation
messages in field order (title, description, status, priority); an empty list
means the payload is valid.
"""
from __future__ import annotations

from typing import Any, List, Optional

from .config import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH
from .models import CreateIssueRequest, IssuePriority, IssueStatus, UpdateIssueRequest

__all__ = [
    "join_violations",
    "validate_create",
    "validate_update",
]

_INVALID_PRIORITY = "Invalid priority value. Must be: Low, Medium, or High"
_INVALID_STATUS = "Invalid status value. Must be: Open, InProgress, or Done"
_NO_FIELDS = "At least one field must be provided for update"


def _check_text(value: Any, label: str, max_length: int, empty_message: str) -> Optional[str]:
    if value is None:
        return empty_message
    if not isinstance(value, str):
        return f"{label} must be a string"
    if not value.strip():
        return empty_message
    if len(value) > max_length:
        return f"{label} must not exceed {max_length} characters"
    return None


def _is_member(enum_cls, value: Any) -> bool:
    try:
        enum_cls.parse(value)
    except ValueError:
        return False
    return True


def validate_create(request: CreateIssueRequest) -> List[str]:
    violations: List[str] = []
    msg = _check_text(request.title, "Title", MAX_TITLE_LENGTH, "Title is required")
    if msg:
        violations.append(msg)
    msg = _check_text(request.description, "Description", MAX_DESCRIPTION_LENGTH, "Description is required")
    if msg:
        violations.append(msg)
    if not _is_member(IssuePriority, request.priority):
        violations.append(_INVALID_PRIORITY)
    return violations


def validate_update(request: UpdateIssueRequest) -> List[str]:
    if not request.has_changes():
        return [_NO_FIELDS]

    violations: List[str] = []
    if request.title is not None:
        msg = _check_text(request.title, "Title", MAX_TITLE_LENGTH, "Title cannot be empty")
        if msg:
            violations.append(msg)
    if request.description is not None:
        msg = _check_text(
            request.description, "Description", MAX_DESCRIPTION_LENGTH, "Description cannot be empty"
        )
        if msg:
            violations.append(msg)
    if request.status is not None and not _is_member(IssueStatus, request.status):
        violations.append(_INVALID_STATUS)
    if request.priority is not None and not _is_member(IssuePriority, request.priority):
        violations.append(_INVALID_PRIORITY)
    return violations


def join_violations(violations: List[str]) -> str:
    return ", ".join(violations)
