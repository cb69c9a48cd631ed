"""models.py — Issue entity, request payloads and the API response envelope."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from .serialization import _format_ts

__all__ = [
    "ApiResult",
    "CreateIssueRequest",
    "ErrorCode",
    "ErrorDetails",
    "Issue",
    "IssuePriority",
    "IssueStatus",
    "UpdateIssueRequest",
]

T = TypeVar("T")


class _ParseableEnum(str, Enum):
    @classmethod
    def parse(cls, value: Any):
        """Return the member named ``value`` (case-insensitive) or raise ValueError."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        raise ValueError(f"Invalid {cls.__name__} value: {value!r}")

    def __str__(self) -> str:
        return self.value


class IssueStatus(_ParseableEnum):
    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    DONE = "Done"


class IssuePriority(_ParseableEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ID = "INVALID_ID"
    MISSING_ID = "MISSING_ID"
    INVALID_BODY = "INVALID_BODY"
    INVALID_JSON = "INVALID_JSON"
    INVALID_STATUS = "INVALID_STATUS"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CREATE_ERROR = "CREATE_ERROR"
    GET_ERROR = "GET_ERROR"
    LIST_ERROR = "LIST_ERROR"
    UPDATE_ERROR = "UPDATE_ERROR"
    DELETE_ERROR = "DELETE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class Issue:
    id: str
    title: str
    description: str
    status: IssueStatus
    priority: IssuePriority
    created_at: dt.datetime
    updated_at: dt.datetime

    def to_dict(self) -> Dict[str, Any]:
        """Wire form (camelCase keys, enum names, ISO timestamps)."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "createdAt": _format_ts(self.created_at),
            "updatedAt": _format_ts(self.updated_at),
        }


@dataclass
class CreateIssueRequest:
    """Create payload as decoded from JSON; values are unchecked."""

    title: Any = None
    description: Any = None
    priority: Any = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CreateIssueRequest":
        return cls(
            title=payload.get("title"),
            description=payload.get("description"),
            priority=payload.get("priority"),
        )


@dataclass
class UpdateIssueRequest:
    """Partial update payload; ``None`` means the field was not supplied."""

    title: Any = None
    description: Any = None
    status: Any = None
    priority: Any = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "UpdateIssueRequest":
        return cls(
            title=payload.get("title"),
            description=payload.get("description"),
            status=payload.get("status"),
            priority=payload.get("priority"),
        )

    def has_changes(self) -> bool:
        return any(v is not None for v in (self.title, self.description, self.status, self.priority))


@dataclass
class ErrorDetails:
    message: str
    code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code}


@dataclass
class ApiResult(Generic[T]):
    """Uniform outcome of every service operation."""

    success: bool
    data: Optional[T] = None
    error: Optional[ErrorDetails] = field(default=None)

    @classmethod
    def ok(cls, data: T) -> "ApiResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str, code: Optional[str] = None) -> "ApiResult[T]":
        return cls(success=False, error=ErrorDetails(message=message, code=code))

    @property
    def error_code(self) -> Optional[str]:
        return self.error.code if self.error else None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            data = self.data
            if isinstance(data, Issue):
                data = data.to_dict()
            elif isinstance(data, list):
                data = [d.to_dict() if isinstance(d, Issue) else d for d in data]
            body["data"] = data
        if self.error is not None:
            body["error"] = self.error.to_dict()
        return body
